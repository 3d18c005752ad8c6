"""Dependency container for the application.

RepoProtectorContext bundles every gateway the app talks to, so the CLI can
build real implementations while tests inject fakes.
"""

from dataclasses import dataclass
from pathlib import Path

from repoprotector.cli.config import LoadedConfig, load_config
from repoprotector.github.abc import GitHubProtectionGateway
from repoprotector.github.fake import FakeGitHubProtectionGateway
from repoprotector.github.real import RealGitHubProtectionGateway
from repoprotector.templates.abc import TemplateStore
from repoprotector.templates.fake import FakeTemplateStore
from repoprotector.templates.json_store import JsonTemplateStore
from repoprotector.time.abc import Time
from repoprotector.time.fake import FakeTime
from repoprotector.time.real import RealTime
from repoprotector.tui.runner import FakeTuiRunner, RealTuiRunner, TuiRunner


@dataclass(frozen=True)
class RepoProtectorContext:
    """Gateways, store, clock and runner used by one run of the app."""

    github: GitHubProtectionGateway
    templates: TemplateStore
    time: Time
    tui_runner: TuiRunner
    config: LoadedConfig
    cwd: Path

    @classmethod
    def for_production(cls, config: LoadedConfig, *, cwd: Path) -> "RepoProtectorContext":
        """Create production context with real implementations.

        Args:
            config: Loaded configuration
            cwd: Directory local repository detection runs in

        Returns:
            RepoProtectorContext configured for production use
        """
        time = RealTime()
        return cls(
            github=RealGitHubProtectionGateway(timeout=config.gh_timeout_seconds),
            templates=JsonTemplateStore(templates_dir=config.templates_dir, time=time),
            time=time,
            tui_runner=RealTuiRunner(),
            config=config,
            cwd=cwd,
        )

    @classmethod
    def for_test(
        cls,
        *,
        github: GitHubProtectionGateway | None = None,
        templates: TemplateStore | None = None,
        time: Time | None = None,
        tui_runner: TuiRunner | None = None,
        config: LoadedConfig | None = None,
        cwd: Path | None = None,
    ) -> "RepoProtectorContext":
        """Create test context with injectable fakes.

        Example:
            # CLI routing test (app created, no event loop)
            tui_runner = FakeTuiRunner()
            ctx = RepoProtectorContext.for_test(tui_runner=tui_runner)
            result = CliRunner().invoke(cli, ["--local"], obj=ctx)
            assert tui_runner.apps_run[0].local_mode
        """
        test_time = time or FakeTime()
        test_cwd = cwd or Path("/test/repo")
        return cls(
            github=github or FakeGitHubProtectionGateway(),
            templates=templates or FakeTemplateStore(time=test_time),
            time=test_time,
            tui_runner=tui_runner or FakeTuiRunner(),
            config=config
            or LoadedConfig(
                config_dir=Path("/test/config"),
                templates_dir=Path("/test/config/templates"),
                install_default_templates=False,
                gh_timeout_seconds=None,
            ),
            cwd=test_cwd,
        )


def create_context(config_dir: Path, *, cwd: Path) -> RepoProtectorContext:
    """Load configuration and build the production context.

    Raises:
        tomllib.TOMLDecodeError: If config.toml is not valid TOML
        ValueError: If config.toml has a key of the wrong type
    """
    return RepoProtectorContext.for_production(load_config(config_dir), cwd=cwd)
