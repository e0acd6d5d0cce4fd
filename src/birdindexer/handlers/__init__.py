from collections.abc import Callable
from typing import Any

from birdindexer.events import (
    AccrueInterestEvent,
    ApprovalEvent,
    BirdPlusSpeedUpdatedEvent,
    BorrowEvent,
    ContractEvent,
    DistributedBorrowerBirdPlusEvent,
    DistributedSupplierBirdPlusEvent,
    LiquidateBorrowEvent,
    MarketEnteredEvent,
    MarketExitedEvent,
    MarketListedEvent,
    MintEvent,
    NewBirdPlusRateEvent,
    NewCloseFactorEvent,
    NewCollateralFactorEvent,
    NewInterestRateModelEvent,
    NewLiquidationIncentiveEvent,
    NewMaxAssetsEvent,
    NewPriceOracleEvent,
    NewReserveFactorEvent,
    PricePostedEvent,
    RedeemEvent,
    RepayBorrowEvent,
    TransferEvent,
)

from . import bird_core, btoken, underlying
from .context import ProjectionContext

EVENT_HANDLERS: dict[type[ContractEvent], Callable[[ProjectionContext[Any]], None]] = {
    # bToken
    MintEvent: btoken.process_mint_event,
    RedeemEvent: btoken.process_redeem_event,
    BorrowEvent: btoken.process_borrow_event,
    RepayBorrowEvent: btoken.process_repay_borrow_event,
    LiquidateBorrowEvent: btoken.process_liquidate_borrow_event,
    TransferEvent: btoken.process_transfer_event,
    AccrueInterestEvent: btoken.process_accrue_interest_event,
    NewReserveFactorEvent: btoken.process_new_reserve_factor_event,
    NewInterestRateModelEvent: btoken.process_new_interest_rate_model_event,
    # Price oracle
    PricePostedEvent: btoken.process_price_posted_event,
    # BirdCore
    MarketListedEvent: bird_core.process_market_listed_event,
    MarketEnteredEvent: bird_core.process_market_entered_event,
    MarketExitedEvent: bird_core.process_market_exited_event,
    NewCloseFactorEvent: bird_core.process_new_close_factor_event,
    NewCollateralFactorEvent: bird_core.process_new_collateral_factor_event,
    NewLiquidationIncentiveEvent: bird_core.process_new_liquidation_incentive_event,
    NewMaxAssetsEvent: bird_core.process_new_max_assets_event,
    NewPriceOracleEvent: bird_core.process_new_price_oracle_event,
    NewBirdPlusRateEvent: bird_core.process_new_bird_plus_rate_event,
    BirdPlusSpeedUpdatedEvent: bird_core.process_bird_plus_speed_updated_event,
    DistributedSupplierBirdPlusEvent: bird_core.process_distributed_supplier_bird_plus_event,
    DistributedBorrowerBirdPlusEvent: bird_core.process_distributed_borrower_bird_plus_event,
    # Underlying ERC-20
    ApprovalEvent: underlying.process_approval_event,
}

__all__ = (
    "EVENT_HANDLERS",
    "ProjectionContext",
)
