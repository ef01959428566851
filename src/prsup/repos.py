from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

# Places under $HOME where people tend to keep their clones ("" is $HOME itself)
DEFAULT_DEV_DIRS = (
    "Development",
    "dev",
    "projects",
    "code",
    "src",
    "repos",
    "github",
    "git",
    "",
)


class RepoNotFoundError(Exception):
    """Raised when no local clone of a repository can be found."""

    def __init__(self, owner: str, name: str) -> None:
        self.owner = owner
        self.name = name
        super().__init__(f"Repo '{name}' not found in common locations.")

    @property
    def remediation(self) -> str:
        return (
            f"Clone it: gh repo clone {self.owner}/{self.name}\n"
            "Or set SUP_DEV_DIR to your repos directory."
        )


def _is_git_repo(path: Path) -> bool:
    return (path / ".git").exists()


def find_repo_path(
    name: str,
    dev_dir: str | Path | None = None,
    search_dirs: Sequence[str] = DEFAULT_DEV_DIRS,
    home: Path | None = None,
) -> Path | None:
    """Look for a clone named ``name``, trying ``dev_dir`` first."""
    if dev_dir:
        candidate = Path(dev_dir).expanduser() / name
        if _is_git_repo(candidate):
            return candidate

    home = home or Path.home()
    for sub in search_dirs:
        candidate = home / sub / name if sub else home / name
        if _is_git_repo(candidate):
            return candidate
    return None
