"""Tabular views of a published snapshot."""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

import pandas as pd

from .snapshot import Snapshot

DAILY_COLUMNS: tuple[str, ...] = (
    "account",
    "strategy",
    "ticker",
    "day",
    "open_profit",
    "close_profit",
    "true_range",
    "num_trades",
    "equity",
    "balance",
)

TRADE_COLUMNS: tuple[str, ...] = (
    "account",
    "strategy",
    "ticker",
    "sequence",
    "type",
    "day",
    "time",
    "position",
    "price",
    "position_at_broker",
    "price_at_broker",
)


@dataclass(slots=True)
class SnapshotFrames:
    """Build :class:`pandas.DataFrame` objects from a :class:`Snapshot`."""

    daily_columns: ClassVar[tuple[str, ...]] = DAILY_COLUMNS
    trade_columns: ClassVar[tuple[str, ...]] = TRADE_COLUMNS

    @classmethod
    def daily(cls, snapshot: Snapshot) -> pd.DataFrame:
        """One row per strategy and day, sorted by account, strategy and day."""

        rows = []
        for strategy in snapshot.strategy_list():
            for info in strategy.daily_info.values():
                rows.append(
                    {
                        "account": strategy.account_code,
                        "strategy": strategy.name,
                        "ticker": strategy.ticker,
                        **info.to_dict(),
                    }
                )
        df = pd.DataFrame(rows, columns=cls.daily_columns)
        if df.empty:
            return df
        df.sort_values(["account", "strategy", "day"], inplace=True)
        df.reset_index(drop=True, inplace=True)
        return df

    @classmethod
    def trades(cls, snapshot: Snapshot) -> pd.DataFrame:
        """One row per trade event; ``sequence`` keeps the arrival order."""

        rows = []
        for strategy in snapshot.strategy_list():
            for sequence, trade in enumerate(strategy.trade_info):
                rows.append(
                    {
                        "account": strategy.account_code,
                        "strategy": strategy.name,
                        "ticker": strategy.ticker,
                        "sequence": sequence,
                        **trade.to_dict(),
                    }
                )
        df = pd.DataFrame(rows, columns=cls.trade_columns)
        if df.empty:
            return df
        df.sort_values(["account", "strategy", "sequence"], inplace=True)
        df.reset_index(drop=True, inplace=True)
        return df
