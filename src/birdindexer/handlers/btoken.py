"""
Handlers for events emitted by bToken markets and the price oracle.

Mint, Redeem and LiquidateBorrow only write historical records. The bToken balances they change
are always moved by a companion Transfer event in the same transaction, and the Transfer handler
is the only place balances and supplier counts are updated.
"""

from decimal import Decimal

from birdindexer.accounts import get_or_create_account
from birdindexer.constants import BTOKEN_DECIMALS
from birdindexer.database.models import (
    BorrowEventTable,
    LiquidationEventTable,
    MintEventTable,
    RedeemEventTable,
    RepayEventTable,
    TransferEventTable,
)
from birdindexer.events import (
    AccrueInterestEvent,
    BorrowEvent,
    LiquidateBorrowEvent,
    MintEvent,
    NewInterestRateModelEvent,
    NewReserveFactorEvent,
    PricePostedEvent,
    RedeemEvent,
    RepayBorrowEvent,
    TransferEvent,
)
from birdindexer.ledger import get_or_create_entry, update_common_stats
from birdindexer.logging import logger
from birdindexer.markets import get_or_create_market, refresh_market
from birdindexer.numeric import (
    ZERO_BD,
    add,
    from_mantissa,
    multiply,
    subtract,
    truncate,
)
from birdindexer.types import Found, Skip

from .context import ProjectionContext


def _btoken_amount(raw: int) -> Decimal:
    return truncate(from_mantissa(raw, BTOKEN_DECIMALS), BTOKEN_DECIMALS)


def process_mint_event(context: ProjectionContext[MintEvent]) -> None:
    """
    Process a Mint event on a bToken.

    EVENT DEFINITION
    # event Mint(
    #     address minter,
    #     uint256 mintAmount,
    #     uint256 mintTokens
    # );
    """

    event = context.event
    if (market := context.find_market(event.address)) is None:
        return

    decimals = market.underlying_decimals
    context.add_record(
        MintEventTable,
        amount=_btoken_amount(event.mint_tokens),
        underlying_amount=truncate(from_mantissa(event.mint_amount, decimals), decimals),
        # Minted bTokens originate from the market, not the zero address
        to=event.minter,
        from_=market.id,
        btoken_symbol=market.symbol,
    )


def process_redeem_event(context: ProjectionContext[RedeemEvent]) -> None:
    """
    Process a Redeem event on a bToken.

    EVENT DEFINITION
    # event Redeem(
    #     address redeemer,
    #     uint256 redeemAmount,
    #     uint256 redeemTokens
    # );
    """

    event = context.event
    if (market := context.find_market(event.address)) is None:
        return

    decimals = market.underlying_decimals
    context.add_record(
        RedeemEventTable,
        amount=_btoken_amount(event.redeem_tokens),
        underlying_amount=truncate(from_mantissa(event.redeem_amount, decimals), decimals),
        to=market.id,
        from_=event.redeemer,
        btoken_symbol=market.symbol,
    )


def process_borrow_event(context: ProjectionContext[BorrowEvent]) -> None:
    """
    Process a Borrow event on a bToken.

    EVENT DEFINITION
    # event Borrow(
    #     address borrower,
    #     uint256 borrowAmount,
    #     uint256 accountBorrows,
    #     uint256 totalBorrows
    # );
    """

    event = context.event
    if (market := context.find_market(event.address)) is None:
        return

    decimals = market.underlying_decimals

    account = get_or_create_account(repository=context.repository, account_id=event.borrower)
    account.has_borrowed = True

    entry = update_common_stats(
        repository=context.repository,
        market=market,
        account_id=event.borrower,
        event=event,
    )
    previous_borrow_balance = entry.stored_borrow_balance
    entry.stored_borrow_balance = truncate(from_mantissa(event.account_borrows, decimals), decimals)
    entry.account_borrow_index = market.borrow_index
    entry.total_underlying_borrowed = add(
        entry.total_underlying_borrowed,
        from_mantissa(event.borrow_amount, decimals),
    )

    # A zero-value borrow does not make the account a borrower
    if previous_borrow_balance == ZERO_BD and event.account_borrows != 0:
        market.number_of_borrowers += 1

    if context.is_verbose(event.borrower):
        logger.info(f"Borrow: {event.borrower} in {market.symbol}")
        logger.info(f"  amount: {event.borrow_amount}")
        logger.info(f"  previous borrow balance: {previous_borrow_balance}")
        logger.info(f"  new borrow balance: {entry.stored_borrow_balance}")
        logger.info(f"  borrowers: {market.number_of_borrowers}")

    context.add_record(
        BorrowEventTable,
        amount=truncate(from_mantissa(event.borrow_amount, decimals), decimals),
        account_borrows=entry.stored_borrow_balance,
        borrower=event.borrower,
        underlying_symbol=market.underlying_symbol,
    )


def process_repay_borrow_event(context: ProjectionContext[RepayBorrowEvent]) -> None:
    """
    Process a RepayBorrow event on a bToken.

    EVENT DEFINITION
    # event RepayBorrow(
    #     address payer,
    #     address borrower,
    #     uint256 repayAmount,
    #     uint256 accountBorrows,
    #     uint256 totalBorrows
    # );

    The borrow index snapshot is kept after a full repayment.
    """

    event = context.event
    if (market := context.find_market(event.address)) is None:
        return

    decimals = market.underlying_decimals

    get_or_create_account(repository=context.repository, account_id=event.borrower)

    entry = update_common_stats(
        repository=context.repository,
        market=market,
        account_id=event.borrower,
        event=event,
    )
    previous_borrow_balance = entry.stored_borrow_balance
    entry.stored_borrow_balance = truncate(from_mantissa(event.account_borrows, decimals), decimals)
    entry.account_borrow_index = market.borrow_index
    entry.total_underlying_repaid = add(
        entry.total_underlying_repaid,
        from_mantissa(event.repay_amount, decimals),
    )

    # Only a repayment that clears an outstanding borrow removes a borrower
    if (
        previous_borrow_balance != ZERO_BD
        and entry.stored_borrow_balance == ZERO_BD
        and market.number_of_borrowers > 0
    ):
        market.number_of_borrowers -= 1

    if context.is_verbose(event.borrower, event.payer):
        logger.info(f"RepayBorrow: {event.payer} for {event.borrower} in {market.symbol}")
        logger.info(f"  amount: {event.repay_amount}")
        logger.info(f"  previous borrow balance: {previous_borrow_balance}")
        logger.info(f"  new borrow balance: {entry.stored_borrow_balance}")
        logger.info(f"  borrowers: {market.number_of_borrowers}")

    context.add_record(
        RepayEventTable,
        amount=truncate(from_mantissa(event.repay_amount, decimals), decimals),
        account_borrows=entry.stored_borrow_balance,
        borrower=event.borrower,
        payer=event.payer,
        underlying_symbol=market.underlying_symbol,
    )


def process_liquidate_borrow_event(context: ProjectionContext[LiquidateBorrowEvent]) -> None:
    """
    Process a LiquidateBorrow event on a bToken.

    EVENT DEFINITION
    # event LiquidateBorrow(
    #     address liquidator,
    #     address borrower,
    #     uint256 repayAmount,
    #     address bTokenCollateral,
    #     uint256 seizeTokens
    # );

    The event is emitted by the market whose debt is repaid. The seized collateral is held in
    `bTokenCollateral` and is moved by a Transfer event on that market, and the repayment by a
    RepayBorrow event, so only the liquidation counters change here.
    """

    event = context.event
    if (repay_market := context.find_market(event.address)) is None:
        return
    if (collateral_market := context.find_market(event.btoken_collateral)) is None:
        return

    liquidator = get_or_create_account(repository=context.repository, account_id=event.liquidator)
    liquidator.count_liquidator += 1

    borrower = get_or_create_account(repository=context.repository, account_id=event.borrower)
    borrower.count_liquidated += 1

    if context.is_verbose(event.liquidator, event.borrower):
        logger.info(f"LiquidateBorrow: {event.liquidator} liquidated {event.borrower}")
        logger.info(f"  repaid: {event.repay_amount} {repay_market.underlying_symbol}")
        logger.info(f"  seized: {event.seize_tokens} {collateral_market.symbol}")

    decimals = repay_market.underlying_decimals
    context.add_record(
        LiquidationEventTable,
        amount=_btoken_amount(event.seize_tokens),
        underlying_repay_amount=truncate(from_mantissa(event.repay_amount, decimals), decimals),
        to=event.liquidator,
        from_=event.borrower,
        underlying_symbol=repay_market.underlying_symbol,
        btoken_symbol=collateral_market.symbol,
    )


def process_transfer_event(context: ProjectionContext[TransferEvent]) -> None:
    """
    Process a Transfer event on a bToken.

    EVENT DEFINITION
    # event Transfer(
    #     address indexed from,
    #     address indexed to,
    #     uint256 amount
    # );

    Transfers are emitted by mint (from the market), redeem (to the market), seize and plain
    transfers. Either side that is the market itself is not an account and is not updated.
    """

    event = context.event
    if context.find_market(event.address) is None:
        return

    # Mints, redeems and seizes follow an AccrueInterest event in the same block, so this only
    # reads contract state for plain transfers
    match refresh_market(
        repository=context.repository,
        viewer=context.viewer,
        deployment=context.deployment,
        address=event.address,
        block_number=event.block_number,
        block_timestamp=event.block_timestamp,
    ):
        case Skip(reason=reason):  # pragma: no cover
            logger.debug(f"Skipping TransferEvent: {reason}")
            return
        case Found(entity=market):
            pass

    decimals = market.underlying_decimals
    amount = _btoken_amount(event.amount)
    amount_underlying = truncate(
        multiply(market.exchange_rate, from_mantissa(event.amount, BTOKEN_DECIMALS)),
        decimals,
    )

    if event.from_ != market.id:
        get_or_create_account(repository=context.repository, account_id=event.from_)
        sender = update_common_stats(
            repository=context.repository,
            market=market,
            account_id=event.from_,
            event=event,
        )
        previous_sender_balance = sender.btoken_balance
        sender.btoken_balance = subtract(sender.btoken_balance, amount)
        sender.total_underlying_redeemed = add(sender.total_underlying_redeemed, amount_underlying)
        if (
            previous_sender_balance != ZERO_BD
            and sender.btoken_balance == ZERO_BD
            and market.number_of_suppliers > 0
        ):
            market.number_of_suppliers -= 1

        if context.is_verbose(event.from_):
            logger.info(f"Transfer: {event.from_} sent {amount} {market.symbol}")
            logger.info(f"  new balance: {sender.btoken_balance}")
            logger.info(f"  suppliers: {market.number_of_suppliers}")

    if event.to != market.id:
        get_or_create_account(repository=context.repository, account_id=event.to)
        if event.to == event.from_:
            # A self-transfer touched the shared entry on the sending side
            receiver = get_or_create_entry(
                repository=context.repository, market=market, account_id=event.to
            )
        else:
            receiver = update_common_stats(
                repository=context.repository,
                market=market,
                account_id=event.to,
                event=event,
            )
        previous_balance = receiver.btoken_balance
        receiver.btoken_balance = add(receiver.btoken_balance, amount)
        receiver.total_underlying_supplied = add(
            receiver.total_underlying_supplied,
            amount_underlying,
        )
        # A zero-value transfer does not make the receiver a supplier
        if previous_balance == ZERO_BD and event.amount != 0:
            market.number_of_suppliers += 1

        if context.is_verbose(event.to):
            logger.info(f"Transfer: {event.to} received {amount} {market.symbol}")
            logger.info(f"  previous balance: {previous_balance}")
            logger.info(f"  new balance: {receiver.btoken_balance}")
            logger.info(f"  suppliers: {market.number_of_suppliers}")

    context.add_record(
        TransferEventTable,
        amount=from_mantissa(event.amount, BTOKEN_DECIMALS),
        to=event.to,
        from_=event.from_,
        btoken_symbol=market.symbol,
    )


def process_accrue_interest_event(context: ProjectionContext[AccrueInterestEvent]) -> None:
    """
    Process an AccrueInterest event on a bToken.

    EVENT DEFINITION
    # event AccrueInterest(
    #     uint256 cashPrior,
    #     uint256 interestAccumulated,
    #     uint256 borrowIndex,
    #     uint256 totalBorrows
    # );
    """

    event = context.event
    refresh_market(
        repository=context.repository,
        viewer=context.viewer,
        deployment=context.deployment,
        address=event.address,
        block_number=event.block_number,
        block_timestamp=event.block_timestamp,
    )


def process_new_reserve_factor_event(context: ProjectionContext[NewReserveFactorEvent]) -> None:
    """
    Process a NewReserveFactor event on a bToken.

    EVENT DEFINITION
    # event NewReserveFactor(
    #     uint256 oldReserveFactorMantissa,
    #     uint256 newReserveFactorMantissa
    # );
    """

    event = context.event
    match get_or_create_market(
        repository=context.repository,
        viewer=context.viewer,
        deployment=context.deployment,
        address=event.address,
    ):
        case Skip(reason=reason):
            logger.debug(f"Skipping NewReserveFactorEvent: {reason}")
        case Found(entity=market):
            market.reserve_factor = event.new_reserve_factor_mantissa


def process_new_interest_rate_model_event(
    context: ProjectionContext[NewInterestRateModelEvent],
) -> None:
    """
    Process a NewMarketInterestRateModel event on a bToken.

    EVENT DEFINITION
    # event NewMarketInterestRateModel(
    #     address oldInterestRateModel,
    #     address newInterestRateModel
    # );
    """

    event = context.event
    match get_or_create_market(
        repository=context.repository,
        viewer=context.viewer,
        deployment=context.deployment,
        address=event.address,
    ):
        case Skip(reason=reason):
            logger.debug(f"Skipping NewInterestRateModelEvent: {reason}")
        case Found(entity=market):
            market.interest_rate_model_address = event.new_interest_rate_model


def process_price_posted_event(context: ProjectionContext[PricePostedEvent]) -> None:
    """
    Process a PricePosted event on the price oracle.

    EVENT DEFINITION
    # event PricePosted(
    #     address asset,
    #     uint256 previousPriceMantissa,
    #     uint256 requestedPriceMantissa,
    #     uint256 newPriceMantissa
    # );

    `asset` is the bToken market whose underlying price was posted.
    """

    event = context.event
    if context.find_market(event.asset) is None:
        return

    refresh_market(
        repository=context.repository,
        viewer=context.viewer,
        deployment=context.deployment,
        address=event.asset,
        block_number=event.block_number,
        block_timestamp=event.block_timestamp,
    )
