"""
Read-only access to bToken, ERC-20 and price oracle contract state.

The projection handlers depend only on the `ContractViewer` protocol. Each viewer is bound to a
single block, so every value read while projecting an event reflects chain state at that event's
block. A failed read raises `ContractViewError`; callers that tolerate a failure catch it and
substitute a default.
"""

from collections.abc import Sequence
from typing import Any, Protocol, Self

from eth_abi.exceptions import DecodingError
from eth_typing import ChecksumAddress
from web3 import Web3
from web3.exceptions import ContractLogicError, Web3Exception

from birdindexer.checksum_cache import get_checksum_address
from birdindexer.exceptions import ContractViewError, ContractViewReverted
from birdindexer.functions import encode_function_calldata, raw_call


class ContractViewer(Protocol):
    block_number: int | None

    def at_block(self, block_number: int) -> Self: ...

    # ERC-20 metadata, valid for both bTokens and underlying tokens
    def symbol(self, address: ChecksumAddress) -> str: ...
    def name(self, address: ChecksumAddress) -> str: ...
    def decimals(self, address: ChecksumAddress) -> int: ...

    # bToken views
    def underlying(self, address: ChecksumAddress) -> ChecksumAddress: ...
    def is_btoken(self, address: ChecksumAddress) -> bool: ...
    def exchange_rate_stored(self, address: ChecksumAddress) -> int: ...
    def borrow_index(self, address: ChecksumAddress) -> int: ...
    def total_reserves(self, address: ChecksumAddress) -> int: ...
    def total_borrows(self, address: ChecksumAddress) -> int: ...
    def total_supply(self, address: ChecksumAddress) -> int: ...
    def get_cash(self, address: ChecksumAddress) -> int: ...
    def borrow_rate_per_block(self, address: ChecksumAddress) -> int: ...
    def supply_rate_per_block(self, address: ChecksumAddress) -> int: ...
    def accrual_block_number(self, address: ChecksumAddress) -> int: ...
    def interest_rate_model(self, address: ChecksumAddress) -> ChecksumAddress: ...
    def reserve_factor_mantissa(self, address: ChecksumAddress) -> int: ...

    # Price oracle views
    def get_underlying_price(self, oracle: ChecksumAddress, btoken: ChecksumAddress) -> int: ...


class Web3ContractViewer:
    """
    A `ContractViewer` performing `eth_call` requests through a Web3 connection.
    """

    def __init__(self, w3: Web3, block_number: int | None = None) -> None:
        self.w3 = w3
        self.block_number = block_number

    def __repr__(self) -> str:  # pragma: no cover
        return f"{self.__class__.__name__}(block_number={self.block_number})"

    def at_block(self, block_number: int) -> Self:
        return type(self)(w3=self.w3, block_number=block_number)

    def _call(
        self,
        address: ChecksumAddress,
        function_prototype: str,
        return_types: list[str],
        function_arguments: Sequence[Any] | None = None,
    ) -> tuple[Any, ...]:
        try:
            return raw_call(
                w3=self.w3,
                address=address,
                calldata=encode_function_calldata(
                    function_prototype=function_prototype,
                    function_arguments=function_arguments,
                ),
                return_types=return_types,
                block_identifier=self.block_number,
            )
        except ContractLogicError as exc:
            raise ContractViewReverted(
                address=address,
                function_prototype=function_prototype,
                error=str(exc),
            ) from exc
        except (Web3Exception, DecodingError) as exc:
            raise ContractViewError(
                address=address,
                function_prototype=function_prototype,
                error=str(exc),
            ) from exc

    def _call_uint(self, address: ChecksumAddress, function_prototype: str) -> int:
        (value,) = self._call(address, function_prototype, ["uint256"])
        return int(value)

    def _call_address(self, address: ChecksumAddress, function_prototype: str) -> ChecksumAddress:
        (value,) = self._call(address, function_prototype, ["address"])
        return get_checksum_address(value)

    def symbol(self, address: ChecksumAddress) -> str:
        (symbol,) = self._call(address, "symbol()", ["string"])
        return str(symbol)

    def name(self, address: ChecksumAddress) -> str:
        (name,) = self._call(address, "name()", ["string"])
        return str(name)

    def decimals(self, address: ChecksumAddress) -> int:
        return self._call_uint(address, "decimals()")

    def underlying(self, address: ChecksumAddress) -> ChecksumAddress:
        return self._call_address(address, "underlying()")

    def is_btoken(self, address: ChecksumAddress) -> bool:
        (is_btoken,) = self._call(address, "isBToken()", ["bool"])
        return bool(is_btoken)

    def exchange_rate_stored(self, address: ChecksumAddress) -> int:
        return self._call_uint(address, "exchangeRateStored()")

    def borrow_index(self, address: ChecksumAddress) -> int:
        return self._call_uint(address, "borrowIndex()")

    def total_reserves(self, address: ChecksumAddress) -> int:
        return self._call_uint(address, "totalReserves()")

    def total_borrows(self, address: ChecksumAddress) -> int:
        return self._call_uint(address, "totalBorrows()")

    def total_supply(self, address: ChecksumAddress) -> int:
        return self._call_uint(address, "totalSupply()")

    def get_cash(self, address: ChecksumAddress) -> int:
        return self._call_uint(address, "getCash()")

    def borrow_rate_per_block(self, address: ChecksumAddress) -> int:
        return self._call_uint(address, "borrowRatePerBlock()")

    def supply_rate_per_block(self, address: ChecksumAddress) -> int:
        return self._call_uint(address, "supplyRatePerBlock()")

    def accrual_block_number(self, address: ChecksumAddress) -> int:
        return self._call_uint(address, "accrualBlockNumber()")

    def interest_rate_model(self, address: ChecksumAddress) -> ChecksumAddress:
        return self._call_address(address, "interestRateModel()")

    def reserve_factor_mantissa(self, address: ChecksumAddress) -> int:
        return self._call_uint(address, "reserveFactorMantissa()")

    def get_underlying_price(self, oracle: ChecksumAddress, btoken: ChecksumAddress) -> int:
        (price,) = self._call(oracle, "getUnderlyingPrice(address)", ["uint256"], [btoken])
        return int(price)
