"""
Exceptions raised while reading on-chain contract state.
"""

from eth_typing import ChecksumAddress

from birdindexer.exceptions.base import BirdIndexerError


class ContractViewError(BirdIndexerError):
    """
    Raised when a read-only contract call fails to return a usable value.
    """

    def __init__(
        self,
        address: ChecksumAddress | None,
        function_prototype: str,
        error: str,
    ) -> None:
        self.address = address
        self.function_prototype = function_prototype
        self.error = error
        super().__init__(message=f"Call to {function_prototype} at {address} failed: {error}")


class ContractViewReverted(ContractViewError):
    """
    Raised when a read-only contract call reverts.
    """
