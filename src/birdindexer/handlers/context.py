from dataclasses import dataclass
from typing import Any

from eth_typing import ChecksumAddress

from birdindexer.contract_view import ContractViewer
from birdindexer.database.models import Base, MarketTable
from birdindexer.deployments import BirdDeployment
from birdindexer.events import ContractEvent
from birdindexer.logging import logger
from birdindexer.markets import get_market
from birdindexer.repository import EntityRepository
from birdindexer.types import Found, Skip
from birdindexer.verbose import VerboseConfig


@dataclass(slots=True, frozen=True)
class ProjectionContext[E: ContractEvent]:
    """Context object passed to event handlers containing all necessary state."""

    repository: EntityRepository
    viewer: ContractViewer
    deployment: BirdDeployment
    event: E

    def add_record[R: Base](self, table: type[R], **fields: Any) -> R | None:
        """
        Store the historical record for this event. A record that already exists is left as-is,
        and None is returned.
        """

        record_id = self.event.record_id
        if self.repository.get(table, record_id) is not None:
            logger.debug(f"{table.__name__} {record_id} already recorded")
            return None

        record = table(
            id=record_id,
            block_number=self.event.block_number,
            block_time=self.event.block_timestamp,
            **fields,
        )
        self.repository.add(record)
        return record

    def is_verbose(self, *account_addresses: ChecksumAddress) -> bool:
        if not account_addresses:
            return VerboseConfig.is_verbose(tx_hash=self.event.transaction_hash)
        return any(
            VerboseConfig.is_verbose(
                account_address=account_address,
                tx_hash=self.event.transaction_hash,
            )
            for account_address in account_addresses
        )

    def find_market(self, address: ChecksumAddress) -> MarketTable | None:
        """
        Get the stored market at `address`. Returns None and logs the reason if it is unknown.
        """

        match get_market(repository=self.repository, address=address):
            case Skip(reason=reason):
                logger.debug(f"Skipping {type(self.event).__name__}: {reason}")
                return None
            case Found(entity=market):
                return market
