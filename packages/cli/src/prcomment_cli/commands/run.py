"""Perform the single configured action."""

from __future__ import annotations

import logging

import click
from rich.console import Console

from prcomment_core.config import validate_config
from prcomment_core.errors import PluginError
from prcomment_core.plugin import Plugin

console = Console()


@click.command("run")
@click.option(
    "--dry-run",
    "dry_run",
    is_flag=True,
    help="Select the action and log it without calling the SCM provider.",
)
@click.pass_context
def run_cmd(ctx, dry_run: bool):
    """Post a comment, inline comment, review batch or commit status.

    \b
    The action is chosen from the configuration, first match wins:
      PLUGIN_COMMENTS_FILE              batch of review comments
      PLUGIN_STATUS_STATE               commit status (needs PLUGIN_COMMIT_SHA)
      PLUGIN_FILE_PATH + PLUGIN_LINE    inline comment
      PLUGIN_COMMENT_BODY               plain comment

    \b
    Always required:
      PLUGIN_SCM_PROVIDER   github, github-enterprise, gitlab, bitbucket,
                            bitbucket-server, gitea, gogs or harness
      PLUGIN_TOKEN          API token for the provider
      PLUGIN_REPO           repository identifier
    """
    config = ctx.obj["config"]
    if dry_run:
        config.dry_run = True

    log = logging.getLogger("prcomment")
    try:
        validate_config(config)
        Plugin(config, log=log).execute()
    except PluginError as e:
        log.error("Plugin execution failed: %s", e)
        raise click.ClickException(str(e))

    if config.dry_run:
        console.print("[yellow]Dry run complete. Nothing was posted.[/yellow]")
    else:
        console.print("[green]Plugin executed successfully.[/green]")
