from decimal import Decimal

from sqlalchemy.orm import Mapped

from .base import Address, Base, BigInteger, EntityId


class MarketTable(Base):
    """
    A bToken lending market, keyed by the bToken contract address.

    Amounts are decimal values already converted from their on-chain mantissas. `reserve_factor` is
    kept as the raw mantissa reported by the contract.
    """

    __tablename__ = "markets"

    id: Mapped[EntityId]
    symbol: Mapped[str]
    name: Mapped[str]

    underlying_address: Mapped[Address]
    underlying_decimals: Mapped[int]
    underlying_name: Mapped[str]
    underlying_symbol: Mapped[str]
    underlying_price: Mapped[Decimal]
    underlying_price_usd: Mapped[Decimal]

    exchange_rate: Mapped[Decimal]
    borrow_index: Mapped[Decimal]
    cash: Mapped[Decimal]
    reserves: Mapped[Decimal]
    total_borrows: Mapped[Decimal]
    total_supply: Mapped[Decimal]
    borrow_rate: Mapped[Decimal]
    supply_rate: Mapped[Decimal]

    collateral_factor: Mapped[Decimal]
    reserve_factor: Mapped[BigInteger]
    bird_plus_speed: Mapped[Decimal]
    interest_rate_model_address: Mapped[Address]

    number_of_suppliers: Mapped[int]
    number_of_borrowers: Mapped[int]

    accrual_block_number: Mapped[int]
    block_timestamp: Mapped[int]
    refreshed_block_number: Mapped[int]


class MarketTokenTable(Base):
    """
    Claims a bToken symbol for a single market address.
    """

    __tablename__ = "market_tokens"

    id: Mapped[EntityId]
    address: Mapped[Address]


class MarketUnderlyingTokenTable(Base):
    """
    Reverse lookup from an underlying token address to the market that accepts it.
    """

    __tablename__ = "market_underlying_tokens"

    id: Mapped[EntityId]
    market_address: Mapped[Address]
    symbol: Mapped[str]


class BirdCoreTable(Base):
    """
    Protocol-wide parameters set through the comptroller. There is a single row, created by the
    first governance event that touches it.

    The close factor, liquidation incentive and max assets values are stored exactly as emitted.
    """

    __tablename__ = "bird_core"

    id: Mapped[EntityId]
    close_factor: Mapped[BigInteger | None]
    liquidation_incentive: Mapped[BigInteger | None]
    max_assets: Mapped[BigInteger | None]
    price_oracle: Mapped[Address | None]
    bird_plus_rate: Mapped[Decimal | None]
