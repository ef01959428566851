"""Last-known PR list, persisted between runs.

The cache is advisory: anything that goes wrong reading it means "no cache",
and failing to write it is logged and ignored.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path

from prsup.models import PullRequest

logger = logging.getLogger(__name__)


def cache_dir() -> Path:
    base = os.environ.get("XDG_CACHE_HOME")
    root = Path(base) if base else Path.home() / ".cache"
    return root / "prsup"


def cache_file() -> Path:
    return cache_dir() / "prs.json"


def load_cached(path: Path | None = None) -> list[PullRequest]:
    path = path or cache_file()
    try:
        data = json.loads(path.read_text())
        return [PullRequest.from_api(node) for node in data]
    except FileNotFoundError:
        return []
    except (OSError, ValueError, TypeError, KeyError, AttributeError) as e:
        logger.debug("Ignoring unreadable cache %s: %s", path, e)
        return []


def save_cache(prs: list[PullRequest], path: Path | None = None) -> bool:
    """Write ``prs`` to the cache. Returns False if the write failed."""
    path = path or cache_file()
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps([pr.to_api() for pr in prs]))
    except OSError as e:
        logger.warning("Could not write cache %s: %s", path, e)
        return False
    logger.debug("Cached %d PRs to %s", len(prs), path)
    return True
