from decimal import Decimal

from sqlalchemy import JSON, Index
from sqlalchemy.orm import Mapped, mapped_column

from .base import Address, Base, EntityId


class AccountTable(Base):
    __tablename__ = "accounts"

    id: Mapped[EntityId]
    has_borrowed: Mapped[bool]
    count_liquidated: Mapped[int]
    count_liquidator: Mapped[int]


class AccountBTokenTable(Base):
    """
    The running position of one account in one market.

    The transaction lists are append-only. Assign a new list instead of mutating the loaded one,
    otherwise the change will not be persisted.
    """

    __tablename__ = "account_btokens"

    id: Mapped[EntityId]
    market_id: Mapped[Address]
    account_id: Mapped[Address]
    symbol: Mapped[str]

    btoken_balance: Mapped[Decimal]
    total_underlying_supplied: Mapped[Decimal]
    total_underlying_redeemed: Mapped[Decimal]
    total_underlying_borrowed: Mapped[Decimal]
    total_underlying_repaid: Mapped[Decimal]
    stored_borrow_balance: Mapped[Decimal]
    account_borrow_index: Mapped[Decimal]

    entered_market: Mapped[bool]
    is_underlying_approved: Mapped[bool]

    transaction_hashes: Mapped[list[str]] = mapped_column(JSON)
    transaction_times: Mapped[list[int]] = mapped_column(JSON)
    accrual_block_number: Mapped[int]


Index(
    "ix_account_btokens_market_account",
    AccountBTokenTable.market_id,
    AccountBTokenTable.account_id,
    unique=True,
)
