import os
from typing import ClassVar

from eth_typing import ChecksumAddress
from hexbytes import HexBytes

from birdindexer.checksum_cache import get_checksum_address


class VerboseConfig:
    """Runtime configurable verbose logging settings for event projection."""

    all_enabled: ClassVar[bool] = False
    accounts: ClassVar[set[ChecksumAddress]] = set()
    transactions: ClassVar[set[HexBytes]] = set()

    @classmethod
    def toggle_all(cls, *, enabled: bool | None = None) -> bool:
        """Toggle or set verbose logging for all events. Returns the new state."""
        if enabled is None:
            cls.all_enabled = not cls.all_enabled
        else:
            cls.all_enabled = enabled
        return cls.all_enabled

    @classmethod
    def add_account(cls, account_address: ChecksumAddress) -> None:
        cls.accounts.add(account_address)

    @classmethod
    def remove_account(cls, account_address: ChecksumAddress) -> None:
        cls.accounts.discard(account_address)

    @classmethod
    def add_transaction(cls, tx_hash: HexBytes | str) -> None:
        if isinstance(tx_hash, str):
            tx_hash = HexBytes(tx_hash)
        cls.transactions.add(tx_hash)

    @classmethod
    def remove_transaction(cls, tx_hash: HexBytes | str) -> None:
        if isinstance(tx_hash, str):
            tx_hash = HexBytes(tx_hash)
        cls.transactions.discard(tx_hash)

    @classmethod
    def clear(cls) -> None:
        cls.all_enabled = False
        cls.accounts.clear()
        cls.transactions.clear()

    @classmethod
    def is_verbose(
        cls,
        account_address: ChecksumAddress | None = None,
        tx_hash: HexBytes | None = None,
    ) -> bool:
        """Check if verbose logging should be enabled for the given context."""
        return (
            cls.all_enabled
            or (account_address is not None and account_address in cls.accounts)
            or (tx_hash is not None and tx_hash in cls.transactions)
        )


def _init_verbose_config_from_env() -> None:
    """Initialize VerboseConfig from environment variables."""
    # BIRDINDEXER_VERBOSE_ALL: Set to "1", "true", or "yes" to enable
    if os.environ.get("BIRDINDEXER_VERBOSE_ALL", "").lower() in {"1", "true", "yes"}:
        VerboseConfig.toggle_all(enabled=True)

    # BIRDINDEXER_VERBOSE_ACCOUNTS: Comma-separated list of addresses
    for addr in os.environ.get("BIRDINDEXER_VERBOSE_ACCOUNTS", "").split(","):
        if addr_ := addr.strip():
            VerboseConfig.add_account(get_checksum_address(addr_))

    # BIRDINDEXER_VERBOSE_TX: Comma-separated list of transaction hashes
    for tx_hash in os.environ.get("BIRDINDEXER_VERBOSE_TX", "").split(","):
        if tx_hash_ := tx_hash.strip():
            VerboseConfig.add_transaction(HexBytes(tx_hash_))


_init_verbose_config_from_env()
