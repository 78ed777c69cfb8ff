"""Capability query command (whatprovides)."""

import json

from ...core.config import Config
from ...core.evr import CapabilityRef
from ...core.index import CapabilityIndex
from ...core.repomd import RepoError
from ...core.sync import load_repo
from ..helpers import get_timeout, select_repos


def cmd_whatprovides(args, config: Config) -> int:
    """Handle whatprovides command - list packages providing a capability."""
    from .. import colors

    ref = CapabilityRef.parse(args.capability)
    as_json = getattr(args, 'json', False)
    repos = select_repos(args, config)
    timeout = get_timeout(args, config)

    found = []
    status = 0

    for repo in repos:
        try:
            catalog = load_repo(repo.baseurl, repo.id, timeout=timeout)
        except RepoError as e:
            print(colors.error(f"Error: cannot load repository {repo.name}: {e}"))
            status = 1
            continue

        index = CapabilityIndex.build(catalog)
        for pkg, version in index.whatprovides(ref):
            found.append({
                'repo': repo.id,
                'nevra': pkg.nevra,
                'capability': ref.name,
                'version': str(version) if version is not None else None,
            })

    if as_json:
        print(json.dumps(found, ensure_ascii=False, indent=2))
    elif not found:
        print(f"No package provides {ref}")
    else:
        for item in found:
            cap = item['capability']
            if item['version']:
                cap = f"{cap} = {item['version']}"
            print(f"{colors.bold(item['nevra'])}  {cap}  {colors.dim(item['repo'])}")

    if not found:
        return 1
    return status
