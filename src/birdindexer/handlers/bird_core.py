"""
Handlers for events emitted by the BirdCore comptroller.

Governance parameters are stored on the BirdCore singleton exactly as they are emitted, except the
BirdPlus rate which is scaled by 10**6. Per-market parameters are only applied to markets that are
already known.
"""

from decimal import Decimal

from birdindexer.accounts import get_or_create_account
from birdindexer.constants import BIRD_PLUS_DECIMALS, MANTISSA_DECIMALS
from birdindexer.database.models import (
    AccountTable,
    DistributedBorrowerBirdPlusEventTable,
    DistributedSupplierBirdPlusEventTable,
)
from birdindexer.events import (
    BirdPlusSpeedUpdatedEvent,
    DistributedBorrowerBirdPlusEvent,
    DistributedSupplierBirdPlusEvent,
    MarketEnteredEvent,
    MarketExitedEvent,
    MarketListedEvent,
    NewBirdPlusRateEvent,
    NewCloseFactorEvent,
    NewCollateralFactorEvent,
    NewLiquidationIncentiveEvent,
    NewMaxAssetsEvent,
    NewPriceOracleEvent,
)
from birdindexer.ledger import update_common_stats
from birdindexer.logging import logger
from birdindexer.markets import get_or_create_bird_core, get_or_create_market
from birdindexer.numeric import ZERO_BD, from_mantissa, truncate
from birdindexer.types import Found, Skip

from .context import ProjectionContext


def process_market_listed_event(context: ProjectionContext[MarketListedEvent]) -> None:
    """
    Process a MarketListed event on BirdCore.

    EVENT DEFINITION
    # event MarketListed(
    #     address bToken
    # );
    """

    event = context.event
    match get_or_create_market(
        repository=context.repository,
        viewer=context.viewer,
        deployment=context.deployment,
        address=event.btoken,
    ):
        case Skip(reason=reason):
            logger.info(f"Listed market was not created: {reason}")
        case Found():
            pass


def _set_entered_market(
    context: ProjectionContext[MarketEnteredEvent] | ProjectionContext[MarketExitedEvent],
    *,
    entered: bool,
) -> None:
    event = context.event
    if (market := context.find_market(event.btoken)) is None:
        return

    get_or_create_account(repository=context.repository, account_id=event.account)
    entry = update_common_stats(
        repository=context.repository,
        market=market,
        account_id=event.account,
        event=event,
    )
    entry.entered_market = entered

    if context.is_verbose(event.account):
        logger.info(
            f"{event.account} {'entered' if entered else 'exited'} market {market.symbol}"
        )


def process_market_entered_event(context: ProjectionContext[MarketEnteredEvent]) -> None:
    """
    Process a MarketEntered event on BirdCore.

    EVENT DEFINITION
    # event MarketEntered(
    #     address bToken,
    #     address account
    # );
    """

    _set_entered_market(context, entered=True)


def process_market_exited_event(context: ProjectionContext[MarketExitedEvent]) -> None:
    """
    Process a MarketExited event on BirdCore.

    EVENT DEFINITION
    # event MarketExited(
    #     address bToken,
    #     address account
    # );
    """

    _set_entered_market(context, entered=False)


def process_new_close_factor_event(context: ProjectionContext[NewCloseFactorEvent]) -> None:
    bird_core = get_or_create_bird_core(context.repository)
    bird_core.close_factor = context.event.new_close_factor_mantissa


def process_new_collateral_factor_event(
    context: ProjectionContext[NewCollateralFactorEvent],
) -> None:
    """
    Process a NewCollateralFactor event on BirdCore.

    EVENT DEFINITION
    # event NewCollateralFactor(
    #     address bToken,
    #     uint256 oldCollateralFactorMantissa,
    #     uint256 newCollateralFactorMantissa
    # );
    """

    event = context.event
    if (market := context.find_market(event.btoken)) is None:
        return
    market.collateral_factor = from_mantissa(
        event.new_collateral_factor_mantissa, MANTISSA_DECIMALS
    )


def process_new_liquidation_incentive_event(
    context: ProjectionContext[NewLiquidationIncentiveEvent],
) -> None:
    bird_core = get_or_create_bird_core(context.repository)
    bird_core.liquidation_incentive = context.event.new_liquidation_incentive_mantissa


def process_new_max_assets_event(context: ProjectionContext[NewMaxAssetsEvent]) -> None:
    bird_core = get_or_create_bird_core(context.repository)
    bird_core.max_assets = context.event.new_max_assets


def process_new_price_oracle_event(context: ProjectionContext[NewPriceOracleEvent]) -> None:
    bird_core = get_or_create_bird_core(context.repository)
    bird_core.price_oracle = context.event.new_price_oracle
    logger.info(f"Price oracle set to {context.event.new_price_oracle}")


def process_new_bird_plus_rate_event(context: ProjectionContext[NewBirdPlusRateEvent]) -> None:
    bird_core = get_or_create_bird_core(context.repository)
    bird_core.bird_plus_rate = from_mantissa(context.event.new_bird_rate, BIRD_PLUS_DECIMALS)


def process_bird_plus_speed_updated_event(
    context: ProjectionContext[BirdPlusSpeedUpdatedEvent],
) -> None:
    """
    Process a BirdPlusSpeedUpdated event on BirdCore.

    EVENT DEFINITION
    # event BirdPlusSpeedUpdated(
    #     address indexed bToken,
    #     uint256 newSpeed
    # );
    """

    event = context.event
    if (market := context.find_market(event.btoken)) is None:
        return
    market.bird_plus_speed = from_mantissa(event.new_speed, MANTISSA_DECIMALS)


def process_distributed_supplier_bird_plus_event(
    context: ProjectionContext[DistributedSupplierBirdPlusEvent],
) -> None:
    """
    Process a DistributedSupplierBirdPlus event on BirdCore.

    EVENT DEFINITION
    # event DistributedSupplierBirdPlus(
    #     address indexed bToken,
    #     address indexed supplier,
    #     uint256 birdDelta,
    #     uint256 birdSupplyIndex
    # );

    Only distributions to known accounts with a nonzero amount are recorded.
    """

    event = context.event
    if (market := context.find_market(event.btoken)) is None:
        return
    if context.repository.get(AccountTable, event.supplier) is None:
        logger.debug(f"Skipping DistributedSupplierBirdPlusEvent: unknown account {event.supplier}")
        return

    bird_plus_amount = truncate(
        from_mantissa(event.bird_delta, MANTISSA_DECIMALS),
        MANTISSA_DECIMALS,
    )
    if not bird_plus_amount > ZERO_BD:
        return

    context.add_record(
        DistributedSupplierBirdPlusEventTable,
        supplier=event.supplier,
        bird_plus_amount=bird_plus_amount,
        bird_plus_supply_index=Decimal(event.bird_supply_index),
        btoken_symbol=market.symbol,
    )


def process_distributed_borrower_bird_plus_event(
    context: ProjectionContext[DistributedBorrowerBirdPlusEvent],
) -> None:
    """
    Process a DistributedBorrowerBirdPlus event on BirdCore.

    EVENT DEFINITION
    # event DistributedBorrowerBirdPlus(
    #     address indexed bToken,
    #     address indexed borrower,
    #     uint256 birdDelta,
    #     uint256 birdBorrowIndex
    # );
    """

    event = context.event
    if (market := context.find_market(event.btoken)) is None:
        return
    if context.repository.get(AccountTable, event.borrower) is None:
        logger.debug(f"Skipping DistributedBorrowerBirdPlusEvent: unknown account {event.borrower}")
        return

    bird_plus_amount = truncate(
        from_mantissa(event.bird_delta, MANTISSA_DECIMALS),
        MANTISSA_DECIMALS,
    )
    if not bird_plus_amount > ZERO_BD:
        return

    context.add_record(
        DistributedBorrowerBirdPlusEventTable,
        borrower=event.borrower,
        bird_plus_amount=bird_plus_amount,
        bird_plus_borrow_index=Decimal(event.bird_borrow_index),
        btoken_symbol=market.symbol,
    )
