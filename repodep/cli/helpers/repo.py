"""Repository selection helpers for CLI commands."""

import logging
from typing import List

from ...core.config import (
    Config,
    ConfigError,
    RepoConfig,
    YumVariables,
    parse_repo_file,
    repos_from_dir,
)

logger = logging.getLogger(__name__)


def configured_repos(args, config: Config) -> List[RepoConfig]:
    """Return every repository the command line or config file points at.

    Order of precedence: --baseurl, --repo-file, --repos-dir, then the
    config file's repo and repos_dir.

    Raises:
        ConfigError: Nothing configured, or a source is invalid
    """
    variables = YumVariables(overrides=config.vars)

    baseurl = getattr(args, 'baseurl', None)
    repo_file = getattr(args, 'repo_file', None)
    repos_dir = getattr(args, 'repos_dir', None)

    if baseurl:
        url = variables.substitute(baseurl)
        return [RepoConfig(id='cmdline', name=url, baseurl=url)]

    if repo_file:
        return parse_repo_file(repo_file, variables)

    if repos_dir:
        return repos_from_dir(repos_dir, variables)

    if config.repo is not None:
        return [RepoConfig(
            id=config.repo.id,
            name=variables.substitute(config.repo.name),
            baseurl=variables.substitute(config.repo.baseurl),
        )]

    if config.repos_dir is not None:
        return repos_from_dir(config.repos_dir, variables)

    raise ConfigError(
        "Repo baseurl not found! Use --baseurl, --repo-file, --repos-dir "
        "or set 'repo' in the config file."
    )


def select_repos(args, config: Config) -> List[RepoConfig]:
    """Return the enabled repositories to work on, filtered by --repo.

    Raises:
        ConfigError: No repository left after filtering
    """
    repos = [repo for repo in configured_repos(args, config) if repo.enabled]

    wanted = getattr(args, 'repo', None)
    if wanted:
        repos = [repo for repo in repos if wanted in (repo.id, repo.name)]
        if not repos:
            raise ConfigError(f"No enabled repository named '{wanted}'")

    if not repos:
        raise ConfigError("No enabled repository configured")

    logger.debug(f"Selected repositories: {', '.join(repo.id for repo in repos)}")
    return repos


def get_timeout(args, config: Config) -> int:
    timeout = getattr(args, 'timeout', None)
    return timeout if timeout is not None else config.timeout
