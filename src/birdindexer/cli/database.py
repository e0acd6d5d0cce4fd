import click

from birdindexer.cli import cli
from birdindexer.config import settings
from birdindexer.database.operations import (
    backup_sqlite_database,
    compact_sqlite_database,
    create_new_sqlite_database,
)
from birdindexer.exceptions.database import BackupExists
from birdindexer.version import __version__


@cli.group()
def database() -> None:
    """
    Database commands
    """


@database.command("create")
def database_create() -> None:
    """
    Create and initialize a new database.
    """

    if settings.database.path.exists():
        click.echo(f"A database already exists at {settings.database.path}.")
        raise click.Abort
    create_new_sqlite_database(settings.database.path)


@database.command("backup")
def database_backup() -> None:
    """
    Back up the database.
    """

    try:
        backup_sqlite_database(settings.database.path)
    except BackupExists as exc:
        user_confirm = click.confirm(
            f"An existing backup was found at {exc.path}. Do you want to remove it and continue?",
            default=False,
        )
        if user_confirm:
            exc.path.unlink()
            backup_sqlite_database(settings.database.path)
        else:
            raise click.Abort from None


@database.command("reset")
def database_reset() -> None:
    """
    Remove and recreate the database.
    """

    user_confirm = click.confirm(
        f"The existing database at {settings.database.path} will be removed and a new, empty database will be created and initialized using the schema included in {__package__} version {__version__}. Do you want to proceed?",  # noqa: E501
        default=False,
    )
    if user_confirm:
        settings.database.path.unlink(missing_ok=True)
        create_new_sqlite_database(settings.database.path)
    else:
        raise click.Abort


@database.command("compact")
def database_compact() -> None:
    """
    Compact the database.
    """
    compact_sqlite_database(settings.database.path)
