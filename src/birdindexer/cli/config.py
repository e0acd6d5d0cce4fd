import click
import tomlkit
from pydantic import TypeAdapter

from birdindexer.cli import cli
from birdindexer.config import CONFIG_FILE, settings


@cli.group()
def config() -> None:
    """
    Configuration commands
    """


@config.command("show")
@click.option(
    "--json",
    "output_format",
    flag_value="json",
    type=str,
    help="Show configuration in JSON format",
)
@click.option(
    "--toml",
    "output_format",
    flag_value="toml",
    type=str,
    help="Show configuration in TOML format (default)",
    default=True,
)
def config_show(output_format: str) -> None:
    """
    Display the active configuration in JSON or TOML (default) format.
    """

    match output_format:
        case "json":
            click.echo(
                TypeAdapter(dict).dump_json(
                    settings.model_dump(mode="json"),
                    indent=2,
                ),
            )
        case "toml":
            click.echo(f"# {CONFIG_FILE}")
            click.echo(
                tomlkit.dumps(
                    settings.model_dump(mode="json"),
                ),
            )
        case _:
            ...
