import logging
from collections.abc import Generator

import pytest
from hexbytes import HexBytes

from birdindexer.deployments import BirdDeployment
from birdindexer.events import MarketEnteredEvent
from birdindexer.logging import logger
from birdindexer.markets import get_or_create_market
from birdindexer.repository import SessionRepository
from birdindexer.verbose import VerboseConfig
from tests.conftest import (
    ALICE,
    BOB,
    TX_HASH,
    WBTC_MARKET,
    EventFactory,
    FakeContractViewer,
    Projector,
)


def test_verbose_disabled_by_default():
    assert VerboseConfig.is_verbose(account_address=ALICE, tx_hash=TX_HASH) is False


def test_toggle_all():
    assert VerboseConfig.toggle_all() is True
    assert VerboseConfig.is_verbose() is True
    assert VerboseConfig.toggle_all() is False
    assert VerboseConfig.toggle_all(enabled=False) is False
    assert VerboseConfig.is_verbose() is False


def test_verbose_accounts():
    VerboseConfig.add_account(ALICE)
    assert VerboseConfig.is_verbose(account_address=ALICE) is True
    assert VerboseConfig.is_verbose(account_address=BOB) is False

    VerboseConfig.remove_account(ALICE)
    assert VerboseConfig.is_verbose(account_address=ALICE) is False


def test_verbose_transactions():
    VerboseConfig.add_transaction(TX_HASH.to_0x_hex())
    assert VerboseConfig.is_verbose(tx_hash=TX_HASH) is True
    assert VerboseConfig.is_verbose(tx_hash=HexBytes(b"\x02" * 32)) is False

    VerboseConfig.remove_transaction(TX_HASH)
    assert VerboseConfig.is_verbose(tx_hash=TX_HASH) is False


@pytest.fixture
def capture_logger(
    caplog: pytest.LogCaptureFixture,
) -> Generator[pytest.LogCaptureFixture, None, None]:
    # The package logger does not propagate, so attach the capture handler directly
    logger.addHandler(caplog.handler)
    yield caplog
    logger.removeHandler(caplog.handler)


def test_verbose_account_logs_handler_details(
    capture_logger: pytest.LogCaptureFixture,
    repository: SessionRepository,
    viewer: FakeContractViewer,
    deployment: BirdDeployment,
    make_event: EventFactory,
):
    get_or_create_market(
        repository=repository,
        viewer=viewer,
        deployment=deployment,
        address=WBTC_MARKET,
    )
    project = Projector(repository, viewer, deployment)

    project(make_event(MarketEnteredEvent, address=WBTC_MARKET, btoken=WBTC_MARKET, account=BOB))
    assert not any("entered market" in record.message for record in capture_logger.records)

    VerboseConfig.add_account(ALICE)
    project(make_event(MarketEnteredEvent, address=WBTC_MARKET, btoken=WBTC_MARKET, account=ALICE))

    messages = [
        record.message for record in capture_logger.records if record.levelno == logging.INFO
    ]
    assert f"{ALICE} entered market bWBTC" in messages
