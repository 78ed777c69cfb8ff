"""Repository listing command."""

import json

from ...core.config import Config
from ..helpers import configured_repos


def cmd_repos(args, config: Config) -> int:
    """Handle repos command - list configured repositories after variable substitution."""
    from .. import colors

    repos = configured_repos(args, config)

    if getattr(args, 'json', False):
        print(json.dumps([
            {'id': r.id, 'name': r.name, 'baseurl': r.baseurl, 'enabled': r.enabled}
            for r in repos
        ], ensure_ascii=False, indent=2))
        return 0

    if not repos:
        print(colors.warning("No repository with a baseurl configured"))
        return 1

    for repo in repos:
        state = colors.success('enabled') if repo.enabled else colors.dim('disabled')
        print(f"{colors.bold(repo.id)}  [{state}]  {repo.name}")
        print(f"  {repo.baseurl}")
    return 0
