"""
Write-once records of individual protocol events.

Every record is keyed by `{transaction hash}-{log index within the transaction}`.
"""

from decimal import Decimal

from sqlalchemy.orm import Mapped

from .base import Address, Base, EntityId


class EventRecordMixin:
    id: Mapped[EntityId]
    block_number: Mapped[int]
    block_time: Mapped[int]


class MintEventTable(EventRecordMixin, Base):
    __tablename__ = "mint_events"

    amount: Mapped[Decimal]
    underlying_amount: Mapped[Decimal]
    to: Mapped[Address]
    from_: Mapped[Address]
    btoken_symbol: Mapped[str]


class RedeemEventTable(EventRecordMixin, Base):
    __tablename__ = "redeem_events"

    amount: Mapped[Decimal]
    underlying_amount: Mapped[Decimal]
    to: Mapped[Address]
    from_: Mapped[Address]
    btoken_symbol: Mapped[str]


class BorrowEventTable(EventRecordMixin, Base):
    __tablename__ = "borrow_events"

    amount: Mapped[Decimal]
    account_borrows: Mapped[Decimal]
    borrower: Mapped[Address]
    underlying_symbol: Mapped[str]


class RepayEventTable(EventRecordMixin, Base):
    __tablename__ = "repay_events"

    amount: Mapped[Decimal]
    account_borrows: Mapped[Decimal]
    borrower: Mapped[Address]
    payer: Mapped[Address]
    underlying_symbol: Mapped[str]


class LiquidationEventTable(EventRecordMixin, Base):
    __tablename__ = "liquidation_events"

    amount: Mapped[Decimal]
    underlying_repay_amount: Mapped[Decimal]
    to: Mapped[Address]
    from_: Mapped[Address]
    underlying_symbol: Mapped[str]
    btoken_symbol: Mapped[str]


class TransferEventTable(EventRecordMixin, Base):
    __tablename__ = "transfer_events"

    amount: Mapped[Decimal]
    to: Mapped[Address]
    from_: Mapped[Address]
    btoken_symbol: Mapped[str]


class ApprovalEventTable(EventRecordMixin, Base):
    __tablename__ = "approval_events"

    amount: Mapped[Decimal]
    owner: Mapped[Address]
    spender: Mapped[Address]
    btoken_symbol: Mapped[str]


class DistributedSupplierBirdPlusEventTable(EventRecordMixin, Base):
    __tablename__ = "distributed_supplier_bird_plus_events"

    supplier: Mapped[Address]
    bird_plus_amount: Mapped[Decimal]
    bird_plus_supply_index: Mapped[Decimal]
    btoken_symbol: Mapped[str]


class DistributedBorrowerBirdPlusEventTable(EventRecordMixin, Base):
    __tablename__ = "distributed_borrower_bird_plus_events"

    borrower: Mapped[Address]
    bird_plus_amount: Mapped[Decimal]
    bird_plus_borrow_index: Mapped[Decimal]
    btoken_symbol: Mapped[str]
