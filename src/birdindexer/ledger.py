"""
The per-account, per-market position ledger.

Each handler that changes a position calls `update_common_stats` once for that position before
changing any of its fields. This creates the entry on first reference and records the transaction
that touched it.
"""

from eth_typing import ChecksumAddress
from hexbytes import HexBytes

from birdindexer.database.models import AccountBTokenTable, MarketTable
from birdindexer.events import ContractEvent
from birdindexer.numeric import ZERO_BD
from birdindexer.repository import EntityRepository


def ledger_entry_id(market_id: str, account_id: str) -> str:
    return f"{market_id}-{account_id}"


def get_or_create_entry(
    repository: EntityRepository,
    market: MarketTable,
    account_id: ChecksumAddress,
) -> AccountBTokenTable:
    """
    Get the position for this account in this market, or create an empty one.
    """

    entry_id = ledger_entry_id(market.id, account_id)
    if (entry := repository.get(AccountBTokenTable, entry_id)) is None:
        entry = AccountBTokenTable(
            id=entry_id,
            market_id=market.id,
            account_id=account_id,
            symbol=market.symbol,
            btoken_balance=ZERO_BD,
            total_underlying_supplied=ZERO_BD,
            total_underlying_redeemed=ZERO_BD,
            total_underlying_borrowed=ZERO_BD,
            total_underlying_repaid=ZERO_BD,
            stored_borrow_balance=ZERO_BD,
            account_borrow_index=ZERO_BD,
            entered_market=False,
            is_underlying_approved=False,
            transaction_hashes=[],
            transaction_times=[],
            accrual_block_number=0,
        )
        repository.add(entry)
    return entry


def touch(
    entry: AccountBTokenTable,
    transaction_hash: HexBytes,
    timestamp: int,
    block_number: int,
) -> None:
    """
    Record a transaction against the position.
    """

    # Reassign instead of appending so the JSON columns are marked as changed
    entry.transaction_hashes = [*entry.transaction_hashes, transaction_hash.to_0x_hex()]
    entry.transaction_times = [*entry.transaction_times, timestamp]
    entry.accrual_block_number = block_number


def update_common_stats(
    repository: EntityRepository,
    market: MarketTable,
    account_id: ChecksumAddress,
    event: ContractEvent,
) -> AccountBTokenTable:
    entry = get_or_create_entry(repository=repository, market=market, account_id=account_id)
    touch(
        entry=entry,
        transaction_hash=event.transaction_hash,
        timestamp=event.block_timestamp,
        block_number=event.block_number,
    )
    return entry
