import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from birdindexer import __version__
from birdindexer.cli import cli
from birdindexer.config import settings
from birdindexer.database import get_scoped_sqlite_session
from birdindexer.deployments import EthereumMainnetBird
from birdindexer.markets import get_or_create_market
from birdindexer.repository import SessionRepository
from tests.conftest import WBTC_MARKET, FakeContractViewer


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def database_path(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    path = tmp_path / "birdindexer.db"
    monkeypatch.setattr(settings.database, "path", path)
    return path


def test_cli_help(runner: CliRunner):
    result = runner.invoke(cli, ["--help"])
    assert result.exit_code == 0
    for group in ("config", "database", "market"):
        assert group in result.output


def test_cli_version(runner: CliRunner):
    result = runner.invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_cli_config_show_default(runner: CliRunner):
    result = runner.invoke(cli, ["config", "show"])
    assert result.exit_code == 0
    assert "[database]" in result.output


def test_cli_config_show_json(runner: CliRunner):
    result = runner.invoke(cli, ["config", "show", "--json"])
    assert result.exit_code == 0
    assert "database" in json.loads(result.output)


def test_cli_config_show_toml(runner: CliRunner):
    result = runner.invoke(cli, ["config", "show", "--toml"])
    assert result.exit_code == 0
    assert "[database]" in result.output


def test_cli_database_create(runner: CliRunner, database_path: Path):
    result = runner.invoke(cli, ["database", "create"])
    assert result.exit_code == 0
    assert database_path.exists()

    # A second create must not overwrite the existing database
    result = runner.invoke(cli, ["database", "create"])
    assert result.exit_code == 1


def test_cli_database_reset(runner: CliRunner, database_path: Path):
    result = runner.invoke(cli, ["database", "reset"], input="n")
    assert result.exit_code == 1
    assert not database_path.exists()

    result = runner.invoke(cli, ["database", "reset"], input="")
    assert result.exit_code == 1

    result = runner.invoke(cli, ["database", "reset"], input="y")
    assert result.exit_code == 0
    assert database_path.exists()


def test_cli_database_backup(runner: CliRunner, database_path: Path):
    runner.invoke(cli, ["database", "create"])

    result = runner.invoke(cli, ["database", "backup"])
    assert result.exit_code == 0
    assert database_path.with_suffix(".db.bak").exists()

    result = runner.invoke(cli, ["database", "backup"], input="n")
    assert result.exit_code == 1


def test_cli_market_refresh_unknown_chain(runner: CliRunner, database_path: Path):
    result = runner.invoke(
        cli,
        ["market", "refresh", WBTC_MARKET, "--block", "1", "--chain-id", "69"],
    )
    assert result.exit_code == 2
    assert "No Bird deployment is known for chain ID 69" in result.output


def test_cli_market_show(
    runner: CliRunner,
    database_path: Path,
    viewer: FakeContractViewer,
):
    runner.invoke(cli, ["database", "create"])

    session = get_scoped_sqlite_session(database_path)
    get_or_create_market(
        repository=SessionRepository(session),
        viewer=viewer,
        deployment=EthereumMainnetBird,
        address=WBTC_MARKET,
    )
    session.commit()
    session.remove()

    result = runner.invoke(cli, ["market", "show", WBTC_MARKET.lower()])
    assert result.exit_code == 0
    assert f"bWBTC (Bird Wrapped BTC) @ {WBTC_MARKET}" in result.output
    assert "suppliers: 0" in result.output

    result = runner.invoke(cli, ["market", "show", EthereumMainnetBird.native_market])
    assert result.exit_code == 0
    assert "No market is stored" in result.output
