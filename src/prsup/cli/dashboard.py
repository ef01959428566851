from __future__ import annotations

import functools
import logging
import subprocess
import tempfile
from collections.abc import Callable, Sequence
from pathlib import Path

import click

from prsup.cache import load_cached
from prsup.config import Config, ConfigError, get_config
from prsup.github import (
    SearchScope,
    checkout_pull_request,
    demo_pull_requests,
    fetch_pull_requests,
)
from prsup.log import configure_logging
from prsup.models import PullRequest
from prsup.repos import RepoNotFoundError, find_repo_path
from prsup.session import Session

logger = logging.getLogger(__name__)

# Shell wrappers read this after exit to cd into the chosen repo
CD_FILE = Path(tempfile.gettempdir()) / "prsup-cd-path"


def dashboard_options(f: Callable) -> Callable:
    """Options of the default (dashboard) command."""
    options = [
        click.option("--mine", "-m", is_flag=True, help="Show PRs involving you instead of org PRs."),
        click.option(
            "--org",
            "orgs",
            multiple=True,
            help="Organization to list PRs from (repeatable). Overrides SUP_ORG.",
        ),
        click.option(
            "--dev-dir",
            type=click.Path(file_okay=False, path_type=Path),
            default=None,
            help="Directory holding your clones. Overrides SUP_DEV_DIR.",
        ),
        click.option(
            "--cd",
            "write_cd",
            is_flag=True,
            help=f"Write the chosen repo's path to {CD_FILE} instead of checking out.",
        ),
        click.option("--demo", is_flag=True, help="Show built-in sample PRs; no cache, no gh."),
        click.option("--verbose", "-v", is_flag=True, help="Debug logging to the log file."),
    ]
    for option in reversed(options):
        f = option(f)
    return f


def resolve_scope(config: Config, mine: bool, orgs: Sequence[str]) -> SearchScope:
    if mine or (config.mine and not orgs):
        return SearchScope(mine=True)
    org_list = list(orgs) or config.orgs
    if not org_list:
        raise click.ClickException(
            "No organizations configured. Use --mine, --org, SUP_ORG, "
            "or set github.orgs in `prsup config --edit`."
        )
    return SearchScope(orgs=tuple(org_list))


def run_dashboard(
    mine: bool = False,
    orgs: Sequence[str] = (),
    dev_dir: Path | None = None,
    write_cd: bool = False,
    demo: bool = False,
    verbose: bool = False,
) -> None:
    """Run the TUI, then act on the PR picked with Enter (if any)."""
    from prsup.tui.app import PrSupApp

    configure_logging(verbose)
    try:
        config = get_config()
    except ConfigError as e:
        raise click.ClickException(str(e)) from e

    if demo:
        session = Session(persist=False)
        fetcher: Callable[[], list[PullRequest]] = demo_pull_requests
        refresh_interval = 0.0
    else:
        scope = resolve_scope(config, mine, orgs)
        session = Session(load_cached(), persist=True)
        fetcher = functools.partial(fetch_pull_requests, scope)
        refresh_interval = config.refresh_interval

    app = PrSupApp(session, fetcher, refresh_interval=refresh_interval)
    selection = app.run()

    if selection is None or demo:
        return
    finish_selection(
        selection,
        dev_dir=dev_dir or config.dev_dir,
        search_dirs=config.search_dirs,
        write_cd=write_cd,
    )


def finish_selection(
    pr: PullRequest,
    dev_dir: Path | None = None,
    search_dirs: Sequence[str] | None = None,
    write_cd: bool = False,
) -> Path:
    """Check out ``pr`` in its local clone, or record the clone path for `cd`.

    Raises click.ClickException (exit status 1) when the clone can't be found
    or `gh pr checkout` fails.
    """
    kwargs = {"search_dirs": search_dirs} if search_dirs is not None else {}
    repo_path = find_repo_path(pr.repo_name, dev_dir=dev_dir, **kwargs)
    if repo_path is None:
        err = RepoNotFoundError(pr.repo_owner, pr.repo_name)
        logger.warning("%s", err)
        raise click.ClickException(f"{err}\n{err.remediation}")

    if write_cd:
        try:
            CD_FILE.write_text(str(repo_path))
        except OSError as e:
            raise click.ClickException(f"Could not write {CD_FILE}: {e}") from e
        logger.info("Wrote %s to %s", repo_path, CD_FILE)
        return repo_path

    click.echo(f"Checking out PR #{pr.number} in {repo_path}...")
    try:
        checkout_pull_request(pr, str(repo_path))
    except FileNotFoundError:
        raise click.ClickException("gh CLI not found.") from None
    except subprocess.CalledProcessError as e:
        raise click.ClickException(
            f"gh pr checkout failed (exit {e.returncode})."
        ) from e
    return repo_path
