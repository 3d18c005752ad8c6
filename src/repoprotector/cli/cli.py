import logging
import tomllib
from pathlib import Path

import click

from repoprotector.cli.config import resolve_config_dir
from repoprotector.core.context import RepoProtectorContext, create_context
from repoprotector.core.flow import ScreenFlowController
from repoprotector.templates.defaults import install_default_templates
from repoprotector.tui.app import RepoProtectorApp

CONTEXT_SETTINGS = dict(help_option_names=["-h", "--help"])

DEBUG_LOG_NAME = "debug.log"

logger = logging.getLogger(__name__)


@click.command(context_settings=CONTEXT_SETTINGS)
@click.version_option(package_name="repoprotector")
@click.option(
    "-l",
    "--local",
    "local_mode",
    is_flag=True,
    help="Start from the GitHub repository checked out in the current directory",
)
@click.option(
    "--debug",
    is_flag=True,
    help=f"Enable debug logging (written to {DEBUG_LOG_NAME} in the config directory)",
)
@click.option(
    "--config-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Configuration directory [default: $REPOPROTECTOR_CONFIG_DIR or ~/.config/repoprotector]",
)
@click.pass_context
def cli(ctx: click.Context, local_mode: bool, debug: bool, config_dir: Path | None) -> None:
    """Edit GitHub branch protection and apply it to many repositories at once."""
    # Only create context if not already provided (e.g., by tests)
    if ctx.obj is None:
        resolved_dir = resolve_config_dir(config_dir)
        try:
            ctx.obj = create_context(resolved_dir, cwd=Path.cwd())
        except (tomllib.TOMLDecodeError, ValueError) as e:
            raise click.ClickException(f"Invalid {resolved_dir / 'config.toml'}: {e}") from e

    repo_ctx: RepoProtectorContext = ctx.obj

    if debug:
        _enable_debug_logging(repo_ctx.config.config_dir)

    if repo_ctx.config.install_default_templates:
        try:
            install_default_templates(repo_ctx.templates)
        except OSError as e:
            logger.warning("Could not install default templates: %s", e)

    controller = ScreenFlowController(
        github=repo_ctx.github,
        templates=repo_ctx.templates,
        time=repo_ctx.time,
        cwd=repo_ctx.cwd,
    )
    repo_ctx.tui_runner.run(RepoProtectorApp(controller, local_mode=local_mode))


def _enable_debug_logging(config_dir: Path) -> None:
    """Send debug logs to a file; the full-screen UI owns the terminal."""
    config_dir.mkdir(parents=True, exist_ok=True)
    logging.basicConfig(
        level=logging.DEBUG,
        format="%(name)s - %(levelname)s - %(message)s",
        filename=config_dir / DEBUG_LOG_NAME,
    )


def main() -> None:
    """CLI entry point used by the `repoprotector` console script."""
    cli()
