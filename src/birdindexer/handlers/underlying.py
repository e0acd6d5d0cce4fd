from decimal import Decimal

from birdindexer.accounts import get_or_create_account
from birdindexer.database.models import ApprovalEventTable, MarketUnderlyingTokenTable
from birdindexer.events import ApprovalEvent
from birdindexer.ledger import update_common_stats
from birdindexer.logging import logger

from .context import ProjectionContext


def process_approval_event(context: ProjectionContext[ApprovalEvent]) -> None:
    """
    Process an Approval event on the underlying token of a market.

    EVENT DEFINITION
    # event Approval(
    #     address indexed owner,
    #     address indexed spender,
    #     uint256 value
    # );

    Only approvals of a known underlying token to a known market are projected. The recorded
    amount is the raw approval value.
    """

    event = context.event
    if context.repository.get(MarketUnderlyingTokenTable, event.address) is None:
        logger.debug(f"Skipping ApprovalEvent: {event.address} is not a market underlying token")
        return
    if (market := context.find_market(event.spender)) is None:
        return

    get_or_create_account(repository=context.repository, account_id=event.owner)
    entry = update_common_stats(
        repository=context.repository,
        market=market,
        account_id=event.owner,
        event=event,
    )
    entry.is_underlying_approved = True

    if context.is_verbose(event.owner):
        logger.info(f"Approval: {event.owner} approved {market.symbol} for {event.value}")

    context.add_record(
        ApprovalEventTable,
        amount=Decimal(event.value),
        owner=event.owner,
        spender=event.spender,
        btoken_symbol=market.symbol,
    )
