import click
import tqdm
from sqlalchemy import select

from birdindexer.checksum_cache import get_checksum_address
from birdindexer.cli import cli
from birdindexer.cli.utils import get_web3_from_config
from birdindexer.config import settings
from birdindexer.contract_view import Web3ContractViewer
from birdindexer.database import get_scoped_sqlite_session
from birdindexer.database.models import MarketTable
from birdindexer.deployments import DEPLOYMENTS, BirdDeployment
from birdindexer.exceptions import ContractViewError
from birdindexer.markets import refresh_market
from birdindexer.repository import SessionRepository
from birdindexer.types import Found, Skip


@cli.group()
def market() -> None:
    """
    Market commands
    """


def _get_deployment(chain_id: int) -> BirdDeployment:
    try:
        return DEPLOYMENTS[chain_id]
    except KeyError:
        msg = f"No Bird deployment is known for chain ID {chain_id}"
        raise click.BadParameter(msg, param_hint="--chain-id") from None


@market.command("refresh")
@click.argument("address")
@click.option(
    "--block",
    "block_number",
    type=int,
    required=True,
    help="Block number to read market state at",
)
@click.option(
    "--chain-id",
    type=int,
    default=1,
    show_default=True,
    help="Chain ID of the deployment",
)
def market_refresh(address: str, block_number: int, chain_id: int) -> None:
    """
    Refresh a single market from contract state.
    """

    deployment = _get_deployment(chain_id)
    w3 = get_web3_from_config(chain_id=chain_id)
    block_timestamp = w3.eth.get_block(block_number)["timestamp"]

    session = get_scoped_sqlite_session(settings.database.path)
    try:
        result = refresh_market(
            repository=SessionRepository(session),
            viewer=Web3ContractViewer(w3=w3, block_number=block_number),
            deployment=deployment,
            address=get_checksum_address(address),
            block_number=block_number,
            block_timestamp=block_timestamp,
        )
    except ContractViewError as exc:
        session.rollback()
        click.echo(f"Refresh failed: {exc}")
        raise click.Abort from None

    match result:
        case Skip(reason=reason):
            session.rollback()
            click.echo(f"Market was not refreshed: {reason}")
        case Found(entity=refreshed):
            session.commit()
            click.echo(f"Refreshed {refreshed.symbol} at block {refreshed.refreshed_block_number}")


@market.command("refresh-all")
@click.option(
    "--block",
    "block_number",
    type=int,
    required=True,
    help="Block number to read market state at",
)
@click.option(
    "--chain-id",
    type=int,
    default=1,
    show_default=True,
    help="Chain ID of the deployment",
)
def market_refresh_all(block_number: int, chain_id: int) -> None:
    """
    Refresh every stored market from contract state.

    All markets are refreshed in a single transaction. If any refresh fails, nothing is saved.
    """

    deployment = _get_deployment(chain_id)
    w3 = get_web3_from_config(chain_id=chain_id)
    block_timestamp = w3.eth.get_block(block_number)["timestamp"]
    viewer = Web3ContractViewer(w3=w3, block_number=block_number)

    session = get_scoped_sqlite_session(settings.database.path)
    repository = SessionRepository(session)
    market_addresses = session.scalars(select(MarketTable.id)).all()
    try:
        for address in tqdm.tqdm(
            market_addresses,
            desc="Refreshing markets",
            unit="market",
            bar_format="{desc}: {percentage:3.1f}% |{bar}| {n_fmt}/{total_fmt}",
        ):
            refresh_market(
                repository=repository,
                viewer=viewer,
                deployment=deployment,
                address=get_checksum_address(address),
                block_number=block_number,
                block_timestamp=block_timestamp,
            )
    except ContractViewError as exc:
        session.rollback()
        click.echo(f"Refresh failed: {exc}")
        raise click.Abort from None

    session.commit()


@market.command("show")
@click.argument("address")
def market_show(address: str) -> None:
    """
    Display a stored market.
    """

    session = get_scoped_sqlite_session(settings.database.path)
    stored_market = session.get(MarketTable, get_checksum_address(address))
    if stored_market is None:
        click.echo(f"No market is stored for {address}")
        return

    click.echo(f"{stored_market.symbol} ({stored_market.name}) @ {stored_market.id}")
    click.echo(
        f"  underlying: {stored_market.underlying_symbol} @ {stored_market.underlying_address}"
    )
    click.echo(f"  price: {stored_market.underlying_price}")
    click.echo(f"  price (USD): {stored_market.underlying_price_usd}")
    click.echo(f"  exchange rate: {stored_market.exchange_rate}")
    click.echo(f"  total supply: {stored_market.total_supply}")
    click.echo(f"  total borrows: {stored_market.total_borrows}")
    click.echo(f"  cash: {stored_market.cash}")
    click.echo(f"  reserves: {stored_market.reserves}")
    click.echo(f"  supply rate: {stored_market.supply_rate}")
    click.echo(f"  borrow rate: {stored_market.borrow_rate}")
    click.echo(f"  suppliers: {stored_market.number_of_suppliers}")
    click.echo(f"  borrowers: {stored_market.number_of_borrowers}")
    click.echo(f"  accrual block: {stored_market.accrual_block_number}")
    click.echo(f"  last refreshed at block: {stored_market.refreshed_block_number}")
