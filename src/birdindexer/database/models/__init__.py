from .accounts import AccountBTokenTable, AccountTable
from .base import Base
from .events import (
    ApprovalEventTable,
    BorrowEventTable,
    DistributedBorrowerBirdPlusEventTable,
    DistributedSupplierBirdPlusEventTable,
    LiquidationEventTable,
    MintEventTable,
    RedeemEventTable,
    RepayEventTable,
    TransferEventTable,
)
from .markets import BirdCoreTable, MarketTable, MarketTokenTable, MarketUnderlyingTokenTable

__all__ = (
    "AccountBTokenTable",
    "AccountTable",
    "ApprovalEventTable",
    "Base",
    "BirdCoreTable",
    "BorrowEventTable",
    "DistributedBorrowerBirdPlusEventTable",
    "DistributedSupplierBirdPlusEventTable",
    "LiquidationEventTable",
    "MarketTable",
    "MarketTokenTable",
    "MarketUnderlyingTokenTable",
    "MintEventTable",
    "RedeemEventTable",
    "RepayEventTable",
    "TransferEventTable",
)
