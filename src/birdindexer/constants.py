__all__ = (
    "BIRD_CORE_ID",
    "BIRD_PLUS_DECIMALS",
    "BLOCKS_PER_YEAR",
    "BTOKEN_DECIMALS",
    "MANTISSA_DECIMALS",
    "MAX_UINT256",
    "MIN_UINT256",
    "ZERO_ADDRESS",
)

import typing

from eth_typing import ChecksumAddress

from birdindexer.checksum_cache import get_checksum_address

MIN_UINT256 = 0
MAX_UINT256 = typing.cast("int", 2**256 - 1)

ZERO_ADDRESS: ChecksumAddress = get_checksum_address("0x0000000000000000000000000000000000000000")

# Fixed-point precisions used by the protocol contracts
MANTISSA_DECIMALS = 18
BTOKEN_DECIMALS = 8
BIRD_PLUS_DECIMALS = 6

# Per-block rates are annualized with this block count (15 second blocks)
BLOCKS_PER_YEAR = 2_102_400

# The protocol-wide parameters are stored in a single row with this key
BIRD_CORE_ID = "1"
