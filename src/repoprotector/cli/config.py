import os
import tomllib
from dataclasses import dataclass
from pathlib import Path

CONFIG_DIR_ENV_VAR = "REPOPROTECTOR_CONFIG_DIR"
DEFAULT_GH_TIMEOUT_SECONDS = 60.0


@dataclass(frozen=True)
class LoadedConfig:
    """In-memory representation of `config.toml`."""

    config_dir: Path
    templates_dir: Path
    install_default_templates: bool
    gh_timeout_seconds: float | None  # None = no limit


def resolve_config_dir(explicit: Path | None) -> Path:
    """Pick the config directory: --config-dir, then $REPOPROTECTOR_CONFIG_DIR, then ~/.config."""
    if explicit is not None:
        return explicit
    from_env = os.environ.get(CONFIG_DIR_ENV_VAR)
    if from_env:
        return Path(from_env)
    return Path.home() / ".config" / "repoprotector"


def load_config(config_dir: Path) -> LoadedConfig:
    """Load config.toml from the given directory if present; otherwise return defaults.

    Example config:
      templates_dir = "templates"        # relative to the config directory
      install_default_templates = true
      gh_timeout_seconds = 60            # 0 disables the timeout

    Raises:
        tomllib.TOMLDecodeError: If the file is not valid TOML
        ValueError: If a key has the wrong type
    """
    defaults = LoadedConfig(
        config_dir=config_dir,
        templates_dir=config_dir / "templates",
        install_default_templates=True,
        gh_timeout_seconds=DEFAULT_GH_TIMEOUT_SECONDS,
    )

    cfg_path = config_dir / "config.toml"
    if not cfg_path.exists():
        return defaults

    data = tomllib.loads(cfg_path.read_text(encoding="utf-8"))

    templates_dir = defaults.templates_dir
    raw_dir = data.get("templates_dir")
    if raw_dir is not None:
        if not isinstance(raw_dir, str):
            raise ValueError("templates_dir must be a string")
        templates_dir = Path(raw_dir).expanduser()
        if not templates_dir.is_absolute():
            templates_dir = config_dir / templates_dir

    install = data.get("install_default_templates", True)
    if not isinstance(install, bool):
        raise ValueError("install_default_templates must be true or false")

    timeout = data.get("gh_timeout_seconds", DEFAULT_GH_TIMEOUT_SECONDS)
    if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout < 0:
        raise ValueError("gh_timeout_seconds must be a non-negative number")

    return LoadedConfig(
        config_dir=config_dir,
        templates_dir=templates_dir,
        install_default_templates=install,
        gh_timeout_seconds=float(timeout) if timeout > 0 else None,
    )
