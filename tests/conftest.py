import itertools
import logging
from collections.abc import Generator
from typing import Any, Self

import pytest
from eth_typing import ChecksumAddress
from hexbytes import HexBytes
from sqlalchemy import create_engine
from sqlalchemy.orm import Session

from birdindexer.checksum_cache import get_checksum_address
from birdindexer.database.models import (
    AccountBTokenTable,
    AccountTable,
    Base,
    BirdCoreTable,
    MarketTable,
)
from birdindexer.deployments import BirdDeployment, EthereumMainnetBird
from birdindexer.events import ContractEvent
from birdindexer.exceptions import ContractViewReverted
from birdindexer.handlers import EVENT_HANDLERS, ProjectionContext
from birdindexer.ledger import ledger_entry_id
from birdindexer.logging import logger
from birdindexer.repository import SessionRepository
from birdindexer.verbose import VerboseConfig

NATIVE_MARKET = EthereumMainnetBird.native_market
STABLECOIN_MARKET = EthereumMainnetBird.reference_stablecoin_market
WBTC_MARKET = get_checksum_address("0x1111111111111111111111111111111111111111")
WBTC = get_checksum_address("0x2222222222222222222222222222222222222222")
USDC = get_checksum_address("0x3333333333333333333333333333333333333333")
PRICE_ORACLE = get_checksum_address("0x4444444444444444444444444444444444444444")
INTEREST_RATE_MODEL = get_checksum_address("0x5555555555555555555555555555555555555555")
NOT_A_MARKET = get_checksum_address("0x6666666666666666666666666666666666666666")

ALICE = get_checksum_address("0xa11ce00000000000000000000000000000000001")
BOB = get_checksum_address("0xb0b0000000000000000000000000000000000002")
CAROL = get_checksum_address("0xca20100000000000000000000000000000000003")

TX_HASH = HexBytes(b"\x01" * 32)
BLOCK_NUMBER = 1_000
BLOCK_TIMESTAMP = 1_600_000_000


class FakeContractViewer:
    """
    A scriptable `ContractViewer`. Values are keyed by (function name, contract address). Reads of
    unscripted values, or of values listed in `failures`, revert.
    """

    def __init__(self) -> None:
        self.block_number: int | None = None
        self.values: dict[tuple[str, ChecksumAddress], Any] = {}
        self.failures: set[tuple[str, ChecksumAddress]] = set()
        self.calls: list[tuple[str, ChecksumAddress]] = []

    def at_block(self, block_number: int) -> Self:
        self.block_number = block_number
        return self

    def set(self, address: ChecksumAddress, **values: Any) -> None:
        for function_name, value in values.items():
            self.values[function_name, address] = value

    def fail(self, address: ChecksumAddress, *function_names: str) -> None:
        for function_name in function_names:
            self.failures.add((function_name, address))

    def _read(self, function_name: str, address: ChecksumAddress) -> Any:
        self.calls.append((function_name, address))
        key = (function_name, address)
        if key in self.failures or key not in self.values:
            raise ContractViewReverted(
                address=address,
                function_prototype=f"{function_name}()",
                error="execution reverted",
            )
        return self.values[key]

    def symbol(self, address: ChecksumAddress) -> str:
        return self._read("symbol", address)

    def name(self, address: ChecksumAddress) -> str:
        return self._read("name", address)

    def decimals(self, address: ChecksumAddress) -> int:
        return self._read("decimals", address)

    def underlying(self, address: ChecksumAddress) -> ChecksumAddress:
        return self._read("underlying", address)

    def is_btoken(self, address: ChecksumAddress) -> bool:
        return self._read("is_btoken", address)

    def exchange_rate_stored(self, address: ChecksumAddress) -> int:
        return self._read("exchange_rate_stored", address)

    def borrow_index(self, address: ChecksumAddress) -> int:
        return self._read("borrow_index", address)

    def total_reserves(self, address: ChecksumAddress) -> int:
        return self._read("total_reserves", address)

    def total_borrows(self, address: ChecksumAddress) -> int:
        return self._read("total_borrows", address)

    def total_supply(self, address: ChecksumAddress) -> int:
        return self._read("total_supply", address)

    def get_cash(self, address: ChecksumAddress) -> int:
        return self._read("get_cash", address)

    def borrow_rate_per_block(self, address: ChecksumAddress) -> int:
        return self._read("borrow_rate_per_block", address)

    def supply_rate_per_block(self, address: ChecksumAddress) -> int:
        return self._read("supply_rate_per_block", address)

    def accrual_block_number(self, address: ChecksumAddress) -> int:
        return self._read("accrual_block_number", address)

    def interest_rate_model(self, address: ChecksumAddress) -> ChecksumAddress:
        return self._read("interest_rate_model", address)

    def reserve_factor_mantissa(self, address: ChecksumAddress) -> int:
        return self._read("reserve_factor_mantissa", address)

    def get_underlying_price(self, oracle: ChecksumAddress, btoken: ChecksumAddress) -> int:
        assert oracle == PRICE_ORACLE
        return self._read("get_underlying_price", btoken)


def script_market_state(
    viewer: FakeContractViewer,
    market: ChecksumAddress,
    accrual_block_number: int,
    **overrides: Any,
) -> None:
    """
    Script the values read by a market refresh, with 1 bToken = 0.02 underlying.
    """

    decimals = viewer.values.get(("decimals", viewer.values.get(("underlying", market))), 18)
    values = {
        "accrual_block_number": accrual_block_number,
        "total_supply": 1_000 * 10**8,
        "exchange_rate_stored": 2 * 10 ** (decimals + 8),
        "borrow_index": 1_050_000_000_000_000_000,
        "total_reserves": 5 * 10**decimals,
        "total_borrows": 10 * 10**decimals,
        "get_cash": 20 * 10**decimals,
        "borrow_rate_per_block": 10_000_000_000,
        "supply_rate_per_block": 5_000_000_000,
    }
    values.update(overrides)
    viewer.set(market, **values)


def build_viewer() -> FakeContractViewer:
    """
    Build a viewer with three markets scripted: the native market, the reference stablecoin market,
    and a WBTC market. Oracle prices are denominated in the native asset.
    """

    viewer = FakeContractViewer()
    viewer.set(
        NATIVE_MARKET,
        symbol="bETH",
        name="Bird Ether",
        is_btoken=True,
        interest_rate_model=INTEREST_RATE_MODEL,
        reserve_factor_mantissa=100_000_000_000_000_000,
    )
    viewer.set(
        STABLECOIN_MARKET,
        symbol="bUSDC",
        name="Bird USD Coin",
        is_btoken=True,
        underlying=USDC,
        interest_rate_model=INTEREST_RATE_MODEL,
        reserve_factor_mantissa=50_000_000_000_000_000,
        # 1 USDC = 0.0005 ETH
        get_underlying_price=500_000_000_000_000,
    )
    viewer.set(USDC, symbol="USDC", name="USD Coin", decimals=6)
    viewer.set(
        WBTC_MARKET,
        symbol="bWBTC",
        name="Bird Wrapped BTC",
        is_btoken=True,
        underlying=WBTC,
        interest_rate_model=INTEREST_RATE_MODEL,
        reserve_factor_mantissa=200_000_000_000_000_000,
        # 1 WBTC = 15 ETH
        get_underlying_price=15 * 10**18,
    )
    viewer.set(WBTC, symbol="WBTC", name="Wrapped BTC", decimals=8)
    viewer.set(NOT_A_MARKET, symbol="NOPE")
    return viewer


@pytest.fixture
def viewer() -> FakeContractViewer:
    return build_viewer()


@pytest.fixture
def deployment() -> BirdDeployment:
    return EthereumMainnetBird


def build_session() -> Session:
    """
    Build a session bound to a new in-memory database.
    """

    engine = create_engine("sqlite://")
    Base.metadata.create_all(bind=engine)
    return Session(engine)


@pytest.fixture
def session() -> Generator[Session, None, None]:
    session = build_session()
    yield session
    session.close()


@pytest.fixture
def repository(session: Session) -> SessionRepository:
    return SessionRepository(session)


@pytest.fixture
def repository_with_oracle(repository: SessionRepository) -> SessionRepository:
    repository.add(BirdCoreTable(id="1", price_oracle=PRICE_ORACLE))
    return repository


class EventFactory:
    """
    Build events with on-chain position defaults. Each event built without an explicit `log_index`
    takes the next log index, so events built in sequence are correctly ordered.
    """

    def __init__(self) -> None:
        self._log_indices = itertools.count()

    def __call__[E: ContractEvent](self, event_type: type[E], **kwargs: Any) -> E:
        kwargs.setdefault("transaction_hash", TX_HASH)
        kwargs.setdefault("transaction_index", 0)
        kwargs.setdefault("log_index", next(self._log_indices))
        kwargs.setdefault("block_number", BLOCK_NUMBER)
        kwargs.setdefault("block_timestamp", BLOCK_TIMESTAMP)
        return event_type(**kwargs)


@pytest.fixture
def make_event() -> EventFactory:
    return EventFactory()


class Projector:
    """
    Apply events directly through their handlers.
    """

    def __init__(
        self,
        repository: SessionRepository,
        viewer: FakeContractViewer,
        deployment: BirdDeployment,
    ) -> None:
        self.repository = repository
        self.viewer = viewer
        self.deployment = deployment

    def __call__(self, event: ContractEvent) -> None:
        EVENT_HANDLERS[type(event)](
            ProjectionContext(
                repository=self.repository,
                viewer=self.viewer.at_block(event.block_number),
                deployment=self.deployment,
                event=event,
            )
        )

    def market(self, address: ChecksumAddress) -> MarketTable:
        market = self.repository.get(MarketTable, address)
        assert market is not None
        return market

    def entry(self, market: ChecksumAddress, account: ChecksumAddress) -> AccountBTokenTable:
        entry = self.repository.get(AccountBTokenTable, ledger_entry_id(market, account))
        assert entry is not None
        return entry

    def account(self, account: ChecksumAddress) -> AccountTable:
        stored_account = self.repository.get(AccountTable, account)
        assert stored_account is not None
        return stored_account


@pytest.fixture(autouse=True)
def _reset_verbose_config() -> Generator[None, None, None]:
    VerboseConfig.clear()
    yield
    VerboseConfig.clear()


@pytest.fixture(scope="session", autouse=True)
def _set_birdindexer_logging() -> None:
    """
    Set the logging level to DEBUG for the test run
    """
    logger.setLevel(logging.DEBUG)
