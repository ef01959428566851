from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path

from prsup.repos import DEFAULT_DEV_DIRS

CONFIG_DIR = Path.home() / ".config" / "prsup"
CONFIG_FILE = CONFIG_DIR / "config.toml"

DEFAULT_REFRESH_INTERVAL = 300

DEFAULT_CONFIG = """\
[github]
# Organizations whose open PRs are listed. SUP_ORG (comma separated) and
# --org override this.
# orgs = ["acme-corp"]
# Show PRs involving you instead of org PRs (same as --mine).
mine = false

[repos]
# Where your clones live. SUP_DEV_DIR and --dev-dir override this.
# dev_dir = "~/Development"
# Directories under $HOME searched when dev_dir has no match.
# search_dirs = ["Development", "dev", "projects", "code", "src", "repos", "github", "git", ""]

[ui]
# Seconds between background refreshes; 0 disables them.
refresh_interval = 300
"""


class ConfigError(Exception):
    """Raised when the config file cannot be parsed or holds a value of the wrong type."""


def _string_list(value: object, key: str) -> list[str]:
    """Accept a list of strings, or a single string as a one-item list."""
    if isinstance(value, str):
        return [value]
    if isinstance(value, list) and all(isinstance(v, str) for v in value):
        return list(value)
    raise ConfigError(f"{key} must be a string or a list of strings, got {value!r}")


@dataclass
class Config:
    orgs: list[str] = field(default_factory=list)
    mine: bool = False
    dev_dir: Path | None = None
    search_dirs: list[str] = field(default_factory=lambda: list(DEFAULT_DEV_DIRS))
    refresh_interval: float = DEFAULT_REFRESH_INTERVAL

    @classmethod
    def load(cls, path: Path | None = None) -> Config:
        path = path or CONFIG_FILE
        if path.exists():
            try:
                with open(path, "rb") as f:
                    data = tomllib.load(f)
            except tomllib.TOMLDecodeError as e:
                raise ConfigError(f"Invalid config file {path}: {e}") from e
        else:
            data = {}

        github = data.get("github", {})
        orgs = _string_list(github.get("orgs", []), "github.orgs")
        mine = bool(github.get("mine", False))

        repos = data.get("repos", {})
        dev_dir_str = repos.get("dev_dir")
        if dev_dir_str is not None and not isinstance(dev_dir_str, str):
            raise ConfigError(f"repos.dev_dir must be a path string, got {dev_dir_str!r}")
        search_dirs = _string_list(
            repos.get("search_dirs", list(DEFAULT_DEV_DIRS)), "repos.search_dirs"
        )

        ui = data.get("ui", {})
        try:
            refresh_interval = float(ui.get("refresh_interval", DEFAULT_REFRESH_INTERVAL))
        except (TypeError, ValueError):
            raise ConfigError(
                f"ui.refresh_interval must be a number of seconds, got {ui['refresh_interval']!r}"
            ) from None

        # Environment beats the file
        if org_env := os.environ.get("SUP_ORG"):
            orgs = [o.strip() for o in org_env.split(",") if o.strip()]
        if dev_env := os.environ.get("SUP_DEV_DIR"):
            dev_dir_str = dev_env

        return cls(
            orgs=orgs,
            mine=mine,
            dev_dir=Path(dev_dir_str).expanduser() if dev_dir_str else None,
            search_dirs=search_dirs,
            refresh_interval=max(0.0, refresh_interval),
        )


def get_config() -> Config:
    return Config.load()


def ensure_config() -> Path:
    """Create default config file if it doesn't exist. Returns config path."""
    if not CONFIG_FILE.exists():
        CONFIG_DIR.mkdir(parents=True, exist_ok=True)
        CONFIG_FILE.write_text(DEFAULT_CONFIG)
    return CONFIG_FILE
