from dataclasses import dataclass

import eth_typing
from eth_typing import ChecksumAddress

from birdindexer.checksum_cache import get_checksum_address
from birdindexer.constants import BLOCKS_PER_YEAR


@dataclass(slots=True, frozen=True)
class BirdDeployment:
    name: str
    chain_id: eth_typing.ChainId
    # The bToken market for the chain's native asset, which has no underlying token contract
    native_market: ChecksumAddress
    # The bToken market for the stablecoin used to convert native prices to USD
    reference_stablecoin_market: ChecksumAddress
    blocks_per_year: int = BLOCKS_PER_YEAR


EthereumMainnetBird = BirdDeployment(
    name="Ethereum Mainnet Bird",
    chain_id=eth_typing.ChainId.ETH,
    native_market=get_checksum_address("0x1d8eb5a97ce0b8812d7e17893018467a47e2f7d9"),
    reference_stablecoin_market=get_checksum_address("0x565b245fc6c9f9783f148e56e93d998968f89c7e"),
)


DEPLOYMENTS: dict[int, BirdDeployment] = {
    deployment.chain_id: deployment for deployment in (EthereumMainnetBird,)
}
