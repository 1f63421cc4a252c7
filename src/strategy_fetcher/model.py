"""Account, strategy and performance records assembled from automation logs."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List

MIN_DAY = 20000000
MAX_DAY = 30000000


class TradeType(str, Enum):
    """Trade event tags emitted by the automation process."""

    LONG_ENTRY = "LONG_ENTRY"
    LONG_EXIT = "LONG_EXIT"
    SHORT_ENTRY = "SHORT_ENTRY"
    SHORT_EXIT = "SHORT_EXIT"
    LONG_SHORT = "LONG_SHORT"
    SHORT_LONG = "SHORT_LONG"


@dataclass(slots=True)
class DailyInfo:
    """Performance of one strategy over one calendar day.

    Attributes
    ----------
    day:
        Date encoded as ``YYYYMMDD``.
    open_profit:
        Open equity of the running position at the end of the day.
    close_profit:
        Net profit of the closed trades.
    """

    day: int
    open_profit: float = 0.0
    close_profit: float = 0.0
    true_range: float = 0.0
    num_trades: int = 0
    equity: float = 0.0
    balance: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "day": self.day,
            "open_profit": self.open_profit,
            "close_profit": self.close_profit,
            "true_range": self.true_range,
            "num_trades": self.num_trades,
            "equity": self.equity,
            "balance": self.balance,
        }


@dataclass(slots=True)
class TradeInfo:
    type: TradeType
    day: int
    time: int = 0
    position: int = 0
    price: float = 0.0
    position_at_broker: int = 0
    price_at_broker: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type.value,
            "day": self.day,
            "time": self.time,
            "position": self.position,
            "price": self.price,
            "position_at_broker": self.position_at_broker,
            "price_at_broker": self.price_at_broker,
        }


@dataclass(slots=True)
class Strategy:
    name: str
    ticker: str
    account_code: str = ""
    daily_info: Dict[int, DailyInfo] = field(default_factory=dict)
    trade_info: List[TradeInfo] = field(default_factory=list)

    def daily(self, day: int) -> DailyInfo:
        """Return the record for ``day``, creating it on first use."""

        info = self.daily_info.get(day)
        if info is None:
            info = DailyInfo(day=day)
            self.daily_info[day] = info
        return info

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "ticker": self.ticker,
            "account_code": self.account_code,
            "daily_info": [
                self.daily_info[day].to_dict() for day in sorted(self.daily_info)
            ],
            "trade_info": [trade.to_dict() for trade in self.trade_info],
        }


@dataclass(slots=True)
class Account:
    """A trading account and the strategies running on it.

    ``balance`` and ``equity`` hold the latest non-zero values reported by any
    of the account's strategies.
    """

    code: str
    balance: float = 0.0
    equity: float = 0.0
    strategies: Dict[str, Strategy] = field(default_factory=dict)

    def strategy(self, name: str, ticker: str) -> Strategy:
        """Return the strategy called ``name``, creating it with ``ticker`` if new."""

        strategy = self.strategies.get(name)
        if strategy is None:
            strategy = Strategy(name=name, ticker=ticker, account_code=self.code)
            self.strategies[name] = strategy
        return strategy

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "balance": self.balance,
            "equity": self.equity,
            "strategies": [strategy.to_dict() for strategy in self.strategies.values()],
        }


@dataclass(slots=True)
class AccountSet:
    """Working model of a single scan cycle.

    The ``current_account`` and ``current_strategy`` cursors are set by INFO
    records and stay in place across file boundaries until the next INFO.
    """

    accounts: Dict[str, Account] = field(default_factory=dict)
    current_account: Account | None = None
    current_strategy: Strategy | None = None

    def account(self, code: str) -> Account:
        account = self.accounts.get(code)
        if account is None:
            account = Account(code=code)
            self.accounts[code] = account
        return account

    def select(self, account: Account, strategy: Strategy) -> None:
        self.current_account = account
        self.current_strategy = strategy

    @property
    def has_context(self) -> bool:
        return self.current_account is not None and self.current_strategy is not None
