"""
Sequential projection of decoded events onto the stored entities.

Events must be delivered exactly once, in chain order. The engine enforces the order, but it does
not detect redelivery: a repeated event will be applied twice.
"""

from collections.abc import Iterable

from hexbytes import HexBytes

from birdindexer.contract_view import ContractViewer
from birdindexer.deployments import BirdDeployment
from birdindexer.events import (
    ContractEvent,
    LiquidateBorrowEvent,
    MintEvent,
    RedeemEvent,
    TransferEvent,
)
from birdindexer.exceptions import BirdIndexerTypeError, EventOrderingError
from birdindexer.handlers import EVENT_HANDLERS, ProjectionContext
from birdindexer.logging import logger
from birdindexer.repository import EntityRepository

type TransferCompanionEvent = MintEvent | RedeemEvent | LiquidateBorrowEvent


class ProjectionEngine:
    """
    Dispatch events to their handlers, one at a time and in order.

    With `verify_transfers` enabled, Mint, Redeem and LiquidateBorrow events are checked for the
    bToken Transfer that always accompanies them in the same transaction. Events without one are
    logged and collected in `unmatched_events`. The check never changes stored state.
    """

    def __init__(
        self,
        repository: EntityRepository,
        viewer: ContractViewer,
        deployment: BirdDeployment,
        *,
        verify_transfers: bool = False,
    ) -> None:
        self.repository = repository
        self.viewer = viewer
        self.deployment = deployment
        self.verify_transfers = verify_transfers

        self.last_position: tuple[int, int, int] | None = None
        self.unmatched_events: list[TransferCompanionEvent] = []

        self._block_viewer: ContractViewer | None = None
        self._current_transaction: HexBytes | None = None
        self._pending_companions: list[TransferCompanionEvent] = []
        self._transfer_markets: set[str] = set()

    def _viewer_for_block(self, block_number: int) -> ContractViewer:
        if self._block_viewer is None or self._block_viewer.block_number != block_number:
            self._block_viewer = self.viewer.at_block(block_number)
        return self._block_viewer

    def _check_transfer_companions(self) -> None:
        for event in self._pending_companions:
            market = (
                event.btoken_collateral
                if isinstance(event, LiquidateBorrowEvent)
                else event.address
            )
            if market not in self._transfer_markets:
                logger.warning(
                    f"{type(event).__name__} in transaction {event.transaction_hash.to_0x_hex()} "
                    f"has no Transfer event from market {market}"
                )
                self.unmatched_events.append(event)

        self._pending_companions = []
        self._transfer_markets = set()

    def _track_transfer_companions(self, event: ContractEvent) -> None:
        if event.transaction_hash != self._current_transaction:
            self._check_transfer_companions()
            self._current_transaction = event.transaction_hash

        match event:
            case MintEvent() | RedeemEvent() | LiquidateBorrowEvent():
                self._pending_companions.append(event)
            case TransferEvent():
                self._transfer_markets.add(event.address)
            case _:
                pass

    def process(self, event: ContractEvent) -> None:
        """
        Apply a single event. Raises `EventOrderingError` if the event is not strictly after the
        previously processed event.
        """

        try:
            handler = EVENT_HANDLERS[type(event)]
        except KeyError:
            raise BirdIndexerTypeError(
                message=f"No handler is registered for {type(event).__name__}"
            ) from None

        if self.last_position is not None and event.position <= self.last_position:
            raise EventOrderingError(previous=self.last_position, current=event.position)

        handler(
            ProjectionContext(
                repository=self.repository,
                viewer=self._viewer_for_block(event.block_number),
                deployment=self.deployment,
                event=event,
            )
        )
        self.last_position = event.position

        if self.verify_transfers:
            self._track_transfer_companions(event)

    def process_many(self, events: Iterable[ContractEvent]) -> None:
        for event in events:
            self.process(event)

    def finish(self) -> None:
        """
        Complete the companion check for the final transaction.
        """

        if self.verify_transfers:
            self._check_transfer_companions()
            self._current_transaction = None
