from decimal import Decimal

import pytest

from birdindexer.constants import MAX_UINT256
from birdindexer.database.models import AccountBTokenTable, AccountTable, ApprovalEventTable
from birdindexer.deployments import BirdDeployment
from birdindexer.events import ApprovalEvent
from birdindexer.ledger import ledger_entry_id
from birdindexer.markets import get_or_create_market
from birdindexer.repository import SessionRepository
from tests.conftest import (
    ALICE,
    BOB,
    NOT_A_MARKET,
    STABLECOIN_MARKET,
    USDC,
    WBTC,
    WBTC_MARKET,
    EventFactory,
    FakeContractViewer,
    Projector,
)


@pytest.fixture
def project(
    repository: SessionRepository,
    viewer: FakeContractViewer,
    deployment: BirdDeployment,
) -> Projector:
    for market in (WBTC_MARKET, STABLECOIN_MARKET):
        get_or_create_market(
            repository=repository,
            viewer=viewer,
            deployment=deployment,
            address=market,
        )
    return Projector(repository, viewer, deployment)


def test_approval_of_market(project: Projector, make_event: EventFactory) -> None:
    event = make_event(
        ApprovalEvent, address=USDC, owner=ALICE, spender=STABLECOIN_MARKET, value=MAX_UINT256
    )
    project(event)

    entry = project.entry(STABLECOIN_MARKET, ALICE)
    assert entry.is_underlying_approved is True
    assert entry.transaction_hashes == [event.transaction_hash.to_0x_hex()]
    assert project.repository.get(AccountTable, ALICE) is not None

    record = project.repository.get(ApprovalEventTable, event.record_id)
    assert record is not None
    assert record.amount == Decimal(MAX_UINT256)
    assert record.owner == ALICE
    assert record.spender == STABLECOIN_MARKET
    assert record.btoken_symbol == "bUSDC"


def test_approval_of_other_market_is_recorded_against_spender(
    project: Projector, make_event: EventFactory
) -> None:
    # The approved token need not be the underlying of the spender market
    project(
        make_event(ApprovalEvent, address=WBTC, owner=ALICE, spender=STABLECOIN_MARKET, value=1)
    )

    assert project.entry(STABLECOIN_MARKET, ALICE).is_underlying_approved is True


@pytest.mark.parametrize(
    ("token", "spender"),
    [
        pytest.param(NOT_A_MARKET, WBTC_MARKET, id="unknown token"),
        pytest.param(WBTC, BOB, id="spender is not a market"),
    ],
)
def test_unrelated_approval_is_ignored(
    project: Projector,
    make_event: EventFactory,
    token: str,
    spender: str,
) -> None:
    event = make_event(ApprovalEvent, address=token, owner=ALICE, spender=spender, value=10**8)
    project(event)

    assert project.repository.get(AccountTable, ALICE) is None
    assert project.repository.get(AccountBTokenTable, ledger_entry_id(spender, ALICE)) is None
    assert project.repository.get(ApprovalEventTable, event.record_id) is None
