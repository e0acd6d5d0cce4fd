"""
Market registry and refresh.

Markets are created on first reference after confirming that the address is a bToken contract, and
refreshed at most once per block from live contract and price oracle state. Lookups return `Found`
or `Skip`; callers ignore the event on `Skip`. Contract reads that are not explicitly tolerated
raise `ContractViewError`, which aborts processing of the event.
"""

from decimal import Decimal

from eth_typing import ChecksumAddress

from birdindexer.constants import BIRD_CORE_ID, MANTISSA_DECIMALS, ZERO_ADDRESS
from birdindexer.contract_view import ContractViewer
from birdindexer.database.models import (
    BirdCoreTable,
    MarketTable,
    MarketTokenTable,
    MarketUnderlyingTokenTable,
)
from birdindexer.deployments import BirdDeployment
from birdindexer.exceptions import ContractViewError
from birdindexer.logging import logger
from birdindexer.numeric import (
    BTOKEN_DECIMALS_BD,
    MANTISSA_FACTOR_BD,
    ZERO_BD,
    divide,
    from_mantissa,
    multiply,
    truncate,
)
from birdindexer.repository import EntityRepository
from birdindexer.types import Found, Lookup, Skip

NATIVE_UNDERLYING_DECIMALS = 18
NATIVE_UNDERLYING_NAME = "Ether"
NATIVE_UNDERLYING_SYMBOL = "ETH"


def get_market(repository: EntityRepository, address: ChecksumAddress) -> Lookup[MarketTable]:
    if (market := repository.get(MarketTable, address)) is None:
        return Skip(reason=f"No market exists at {address}")
    return Found(market)


def get_or_create_bird_core(repository: EntityRepository) -> BirdCoreTable:
    """
    Get the protocol parameter singleton, creating an empty one if it does not exist.
    """

    if (bird_core := repository.get(BirdCoreTable, BIRD_CORE_ID)) is None:
        bird_core = BirdCoreTable(id=BIRD_CORE_ID)
        repository.add(bird_core)
    return bird_core


def _probe_btoken(
    repository: EntityRepository,
    viewer: ContractViewer,
    address: ChecksumAddress,
) -> Lookup[str]:
    """
    Confirm that the contract at `address` is a bToken and that its symbol is not already claimed
    by a different market. Returns the symbol.
    """

    try:
        symbol = viewer.symbol(address)
        is_btoken = viewer.is_btoken(address)
    except ContractViewError as exc:
        return Skip(reason=f"Contract at {address} failed the bToken probe: {exc.error}")

    if not is_btoken:
        return Skip(reason=f"Contract at {address} is not a bToken")

    if (
        market_token := repository.get(MarketTokenTable, symbol)
    ) is not None and market_token.address != address:
        return Skip(
            reason=f"Symbol {symbol} at {address} is already claimed by {market_token.address}"
        )

    return Found(symbol)


def get_or_create_market(
    repository: EntityRepository,
    viewer: ContractViewer,
    deployment: BirdDeployment,
    address: ChecksumAddress,
) -> Lookup[MarketTable]:
    """
    Get the market at `address`, creating it from contract state if it has not been seen before.

    Returns `Skip` if the address does not hold a bToken contract.
    """

    if (market := repository.get(MarketTable, address)) is not None:
        return Found(market)

    match _probe_btoken(repository=repository, viewer=viewer, address=address):
        case Skip() as skip:
            return skip
        case Found(entity=symbol):
            pass

    underlying_price = ZERO_BD
    underlying_price_usd = ZERO_BD
    if address == deployment.native_market:
        underlying_address = ZERO_ADDRESS
        underlying_decimals = NATIVE_UNDERLYING_DECIMALS
        underlying_name = NATIVE_UNDERLYING_NAME
        underlying_symbol = NATIVE_UNDERLYING_SYMBOL
        # The native asset is the unit of account for oracle prices
        underlying_price = Decimal(1)
    else:
        underlying_address = viewer.underlying(address)
        underlying_decimals = viewer.decimals(underlying_address)
        underlying_name = viewer.name(underlying_address)
        underlying_symbol = viewer.symbol(underlying_address)
        if address == deployment.reference_stablecoin_market:
            underlying_price_usd = Decimal(1)

    try:
        interest_rate_model_address = viewer.interest_rate_model(address)
    except ContractViewError:
        interest_rate_model_address = ZERO_ADDRESS

    try:
        reserve_factor = viewer.reserve_factor_mantissa(address)
    except ContractViewError:
        reserve_factor = 0

    name = viewer.name(address)

    # All reads have succeeded, so the new entities can be stored
    if repository.get(MarketTokenTable, symbol) is None:
        repository.add(MarketTokenTable(id=symbol, address=address))

    if (
        underlying_address != ZERO_ADDRESS
        and repository.get(MarketUnderlyingTokenTable, underlying_address) is None
    ):
        repository.add(
            MarketUnderlyingTokenTable(
                id=underlying_address,
                market_address=address,
                symbol=symbol,
            )
        )

    market = MarketTable(
        id=address,
        symbol=symbol,
        name=name,
        underlying_address=underlying_address,
        underlying_decimals=underlying_decimals,
        underlying_name=underlying_name,
        underlying_symbol=underlying_symbol,
        underlying_price=underlying_price,
        underlying_price_usd=underlying_price_usd,
        exchange_rate=ZERO_BD,
        borrow_index=ZERO_BD,
        cash=ZERO_BD,
        reserves=ZERO_BD,
        total_borrows=ZERO_BD,
        total_supply=ZERO_BD,
        borrow_rate=ZERO_BD,
        supply_rate=ZERO_BD,
        collateral_factor=ZERO_BD,
        reserve_factor=reserve_factor,
        bird_plus_speed=ZERO_BD,
        interest_rate_model_address=interest_rate_model_address,
        number_of_suppliers=0,
        number_of_borrowers=0,
        accrual_block_number=0,
        block_timestamp=0,
        refreshed_block_number=0,
    )
    repository.add(market)
    logger.info(f"Created market {symbol} ({underlying_symbol}) at {address}")

    return Found(market)


def _get_price_oracle(repository: EntityRepository) -> ChecksumAddress:
    bird_core = repository.get(BirdCoreTable, BIRD_CORE_ID)
    if bird_core is None or bird_core.price_oracle is None:
        raise ContractViewError(
            address=None,
            function_prototype="getUnderlyingPrice(address)",
            error="no price oracle has been set",
        )
    return ChecksumAddress(bird_core.price_oracle)


def _to_usd(price_in_native: Decimal, usd_price_in_native: Decimal, decimals: int) -> Decimal:
    if usd_price_in_native == ZERO_BD:
        return ZERO_BD
    return truncate(divide(price_in_native, usd_price_in_native), decimals)


def _annualize(rate_per_block: int, blocks_per_year: int) -> Decimal:
    return truncate(
        divide(
            multiply(Decimal(rate_per_block), Decimal(blocks_per_year)),
            MANTISSA_FACTOR_BD,
        ),
        MANTISSA_DECIMALS,
    )


def refresh_market(
    repository: EntityRepository,
    viewer: ContractViewer,
    deployment: BirdDeployment,
    address: ChecksumAddress,
    block_number: int,
    block_timestamp: int,
) -> Lookup[MarketTable]:
    """
    Update the market's rates, balances and prices from contract state at `block_number`.

    Does nothing if the market was already refreshed at this block. Every required value is read
    before the market is modified, so a failed read leaves the stored market untouched.
    """

    match get_or_create_market(
        repository=repository,
        viewer=viewer,
        deployment=deployment,
        address=address,
    ):
        case Skip() as skip:
            return skip
        case Found(entity=market):
            pass

    if market.refreshed_block_number == block_number:
        return Found(market)

    decimals = market.underlying_decimals
    oracle = _get_price_oracle(repository)
    usd_price_in_native = from_mantissa(
        viewer.get_underlying_price(oracle, deployment.reference_stablecoin_market),
        MANTISSA_DECIMALS,
    )

    underlying_price = market.underlying_price
    underlying_price_usd = market.underlying_price_usd
    if market.id == deployment.native_market:
        underlying_price_usd = _to_usd(underlying_price, usd_price_in_native, decimals)
    else:
        underlying_price = truncate(
            from_mantissa(viewer.get_underlying_price(oracle, address), MANTISSA_DECIMALS),
            decimals,
        )
        # The reference stablecoin is pinned to 1 USD
        if market.id != deployment.reference_stablecoin_market:
            underlying_price_usd = _to_usd(underlying_price, usd_price_in_native, decimals)

    accrual_block_number = viewer.accrual_block_number(address)
    total_supply = divide(Decimal(viewer.total_supply(address)), BTOKEN_DECIMALS_BD)

    # The stored exchange rate is scaled by 10**(18 + underlying decimals - bToken decimals)
    exchange_rate = truncate(
        divide(
            multiply(
                from_mantissa(viewer.exchange_rate_stored(address), decimals),
                BTOKEN_DECIMALS_BD,
            ),
            MANTISSA_FACTOR_BD,
        ),
        MANTISSA_DECIMALS,
    )
    borrow_index = truncate(
        from_mantissa(viewer.borrow_index(address), MANTISSA_DECIMALS),
        MANTISSA_DECIMALS,
    )
    reserves = truncate(from_mantissa(viewer.total_reserves(address), decimals), decimals)
    total_borrows = truncate(from_mantissa(viewer.total_borrows(address), decimals), decimals)
    cash = truncate(from_mantissa(viewer.get_cash(address), decimals), decimals)
    borrow_rate = _annualize(viewer.borrow_rate_per_block(address), deployment.blocks_per_year)

    try:
        supply_rate = _annualize(
            viewer.supply_rate_per_block(address),
            deployment.blocks_per_year,
        )
    except ContractViewError as exc:
        logger.info(f"supplyRatePerBlock() failed for {market.symbol} at {address}: {exc.error}")
        supply_rate = ZERO_BD

    market.underlying_price = underlying_price
    market.underlying_price_usd = underlying_price_usd
    market.accrual_block_number = accrual_block_number
    market.block_timestamp = block_timestamp
    market.total_supply = total_supply
    market.exchange_rate = exchange_rate
    market.borrow_index = borrow_index
    market.reserves = reserves
    market.total_borrows = total_borrows
    market.cash = cash
    market.borrow_rate = borrow_rate
    market.supply_rate = supply_rate
    market.refreshed_block_number = block_number

    return Found(market)
