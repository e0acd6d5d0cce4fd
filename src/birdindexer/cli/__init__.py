import click


@click.group()
@click.version_option()
def cli() -> None: ...


from . import config, database, market  # noqa: F401, E402
