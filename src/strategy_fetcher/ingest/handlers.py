"""Record handlers that assemble the scan-local account model."""

from __future__ import annotations

from typing import Sequence

from ..model import AccountSet, Strategy, TradeInfo, TradeType
from .converters import (
    INVALID_DAY,
    assign,
    assign_non_zero,
    convert_date,
    convert_float,
    convert_int,
    report,
)


class MissingContextError(RuntimeError):
    """Raised when a DAILY or trade record arrives before any INFO record."""


def _current_strategy(account_set: AccountSet, tag: str) -> Strategy:
    strategy = account_set.current_strategy
    if strategy is None or not account_set.has_context:
        raise MissingContextError(
            f"{tag} record found before any INFO record; no current strategy."
        )
    return strategy


def handle_info(account_set: AccountSet, tokens: Sequence[str]) -> None:
    """Select (creating if needed) the account and strategy named by an INFO record.

    Layout: ``INFO|<account>|<ticker>|<strategy>``.
    """

    account_code = tokens[1]
    ticker = tokens[2]
    strategy_name = tokens[3]

    account = account_set.account(account_code)
    strategy = account.strategy(strategy_name, ticker)
    account_set.select(account, strategy)


def handle_daily(account_set: AccountSet, tokens: Sequence[str]) -> bool:
    """Apply a DAILY record to the current account and strategy.

    Layout: ``DAILY|<day>|<open equity>|<net profit>|<true range>|<num trades>|<equity>|<balance>``.

    Returns ``False`` when the record was discarded because of its date.
    """

    raw_day = tokens[1]
    raw_open_equity = tokens[2]
    raw_net_profit = tokens[3]
    raw_true_range = tokens[4]
    raw_num_trades = tokens[5]
    raw_equity = tokens[6]
    raw_balance = tokens[7]

    day = report(convert_date(raw_day)).value
    if day == INVALID_DAY:
        return False

    strategy = _current_strategy(account_set, tokens[0])
    account = account_set.current_account

    equity = convert_float(raw_equity, "equity")
    balance = convert_float(raw_balance, "balance")
    assign_non_zero(account, "equity", equity, log=False)
    assign_non_zero(account, "balance", balance, log=False)

    info = strategy.daily(day)
    assign(info, "open_profit", convert_float(raw_open_equity, "open profit"))
    assign(info, "close_profit", convert_float(raw_net_profit, "close profit"))
    assign(info, "true_range", convert_float(raw_true_range, "true range"))
    assign(info, "num_trades", convert_int(raw_num_trades, "num trades"))
    assign(info, "equity", equity)
    assign(info, "balance", balance)
    return True


def handle_trade(account_set: AccountSet, tokens: Sequence[str]) -> bool:
    """Append a trade event to the current strategy.

    Layout: ``<trade tag>|<day>|<time>|<position>|<price>|<position at broker>|<price at broker>``.

    Returns ``False`` when the record was discarded because of its date.
    """

    trade_type = TradeType(tokens[0])
    raw_day = tokens[1]
    raw_time = tokens[2]
    raw_position = tokens[3]
    raw_price = tokens[4]
    raw_position_at_broker = tokens[5]
    raw_price_at_broker = tokens[6]

    day = report(convert_date(raw_day)).value
    if day == INVALID_DAY:
        return False

    strategy = _current_strategy(account_set, tokens[0])

    trade = TradeInfo(type=trade_type, day=day)
    assign(trade, "time", convert_int(raw_time, "time"))
    assign(trade, "position", convert_int(raw_position, "position"))
    assign(trade, "price", convert_float(raw_price, "price"))
    assign(
        trade,
        "position_at_broker",
        convert_int(raw_position_at_broker, "position at broker"),
    )
    assign(trade, "price_at_broker", convert_float(raw_price_at_broker, "price at broker"))
    strategy.trade_info.append(trade)
    return True
