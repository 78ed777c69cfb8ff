"""Satisfiability check command."""

import json
import logging

from ...core.config import Config
from ...core.index import CapabilityIndex
from ...core.repomd import RepoError
from ...core.solver import SolveError, Solver
from ...core.sync import load_repo
from ..helpers import get_timeout, select_repos

logger = logging.getLogger(__name__)

SATISFIABLE = 'satisfiable'
UNSATISFIABLE = 'unsatisfiable'
ERROR = 'error'


def _message(package_name: str, outcome: str) -> str:
    from .. import colors

    if outcome == SATISFIABLE:
        return colors.success(
            f"Congratulations! Package {package_name}'s dependencies "
            f"can be satisfied in the repo. :)")
    if outcome == UNSATISFIABLE:
        return colors.error(
            f"Sorry, package {package_name}'s dependencies "
            f"can not be satisfied in the repo. :(")
    return colors.error(
        f"Error: something wrong happened while solving the dependency "
        f"problem of package {package_name}.")


def cmd_check(args, config: Config) -> int:
    """Handle check command - report satisfiability of each package."""
    from .. import colors

    as_json = getattr(args, 'json', False)
    explain = getattr(args, 'explain', False)
    quiet = getattr(args, 'quiet', False)
    max_steps = getattr(args, 'max_steps', None)

    repos = select_repos(args, config)
    timeout = get_timeout(args, config)

    results = []
    all_ok = True

    for repo in repos:
        if len(repos) > 1 and not as_json and not quiet:
            print(colors.info(colors.bold(f"Repository {repo.name}")))

        try:
            catalog = load_repo(repo.baseurl, repo.id, timeout=timeout)
        except RepoError as e:
            logger.error(f"Cannot load repository {repo.id}: {e}")
            all_ok = False
            for package_name in args.packages:
                results.append({'repo': repo.id, 'package': package_name,
                                'result': ERROR, 'error': str(e)})
            if not as_json:
                print(colors.error(f"Error: cannot load repository {repo.name}: {e}"))
            continue

        # One index per repository, shared by all queries
        solver = Solver(catalog, CapabilityIndex.build(catalog), max_steps=max_steps)

        for package_name in args.packages:
            entry = {'repo': repo.id, 'package': package_name}
            try:
                result = solver.solve(package_name)
            except SolveError as e:
                logger.warning(f"{repo.id}: {e}")
                entry.update(result=ERROR, error=str(e))
                all_ok = False
            else:
                entry.update(
                    result=SATISFIABLE if result.satisfiable else UNSATISFIABLE,
                    nevra=result.root.nevra,
                    problems=result.problems,
                    selected=[pkg.nevra for pkg in result.selected],
                )
                all_ok = all_ok and result.satisfiable
            results.append(entry)

            if as_json:
                continue
            print(_message(package_name, entry['result']))
            if entry['result'] == ERROR:
                if not quiet:
                    print(colors.dim(f"  {entry['error']}"))
            elif explain:
                for problem in entry['problems']:
                    print(colors.dim(f"  {problem}"))
                if entry['result'] == SATISFIABLE:
                    for nevra in entry['selected']:
                        print(colors.dim(f"  {nevra}"))

    if as_json:
        print(json.dumps(results, ensure_ascii=False, indent=2))

    return 0 if all_ok else 1
