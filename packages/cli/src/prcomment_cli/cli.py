"""CLI entry point for prcomment.

Commands:
  run        post the configured comment, review batch or status (default)
  providers  list the supported SCM providers

Running `prcomment` without a command performs `run`, which is how CI
pipeline steps invoke it: all inputs come from PLUGIN_* environment
variables, an optional .env file, and an optional .prcomment.yml.
"""

from __future__ import annotations

import logging

import click
from dotenv import find_dotenv, load_dotenv
from rich.console import Console
from rich.logging import RichHandler

from prcomment_cli.commands.providers import providers_cmd
from prcomment_cli.commands.run import run_cmd


def _configure_logging(debug: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )
    # Keep third-party request chatter out of debug output.
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


class DotenvGroup(click.Group):
    """Group that loads .env before its options read the environment."""

    def make_context(self, info_name, args, parent=None, **extra):
        # .env is for local runs; variables already set by the pipeline win.
        load_dotenv(find_dotenv(usecwd=True))
        return super().make_context(info_name, args, parent=parent, **extra)


@click.group(cls=DotenvGroup, invoke_without_command=True)
@click.version_option(package_name="prcomment", prog_name="prcomment")
@click.option(
    "--config",
    "config_path",
    default=".prcomment.yml",
    show_default=True,
    help="Path to the configuration file.",
    envvar="PRCOMMENT_CONFIG",
)
@click.option("--debug", is_flag=True, help="Enable debug logging (same as PLUGIN_DEBUG=true).")
@click.option("--dry-run", "dry_run", is_flag=True, help="Log the selected action without calling the SCM provider.")
@click.pass_context
def main(ctx: click.Context, config_path: str, debug: bool, dry_run: bool):
    """Post pull request comments and commit statuses from a CI step."""
    from prcomment_core.config import load_config
    from prcomment_core.errors import PluginError

    ctx.ensure_object(dict)
    overrides = {
        "debug": True if debug else None,
        "dry_run": True if dry_run else None,
    }
    try:
        config = load_config(config_path, cli_overrides=overrides)
    except PluginError as e:
        raise click.ClickException(str(e))

    _configure_logging(config.debug)
    logging.getLogger(__name__).debug("Debug logging enabled")

    ctx.obj["config"] = config

    if ctx.invoked_subcommand is None:
        ctx.invoke(run_cmd)


main.add_command(run_cmd)
main.add_command(providers_cmd)
