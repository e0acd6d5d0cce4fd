from eth_typing import ChecksumAddress

from birdindexer.database.models import AccountTable
from birdindexer.repository import EntityRepository


def get_or_create_account(
    repository: EntityRepository,
    account_id: ChecksumAddress,
) -> AccountTable:
    """
    Get the existing account, or create a new one with zeroed counters.
    """

    if (account := repository.get(AccountTable, account_id)) is None:
        account = AccountTable(
            id=account_id,
            has_borrowed=False,
            count_liquidated=0,
            count_liquidator=0,
        )
        repository.add(account)
    return account
