"""
Dependency satisfiability check against one repository.

Given a catalog and a package name, decides whether the newest package of
that name has a conflict-free closure of providers for its transitive
requirements.

Provider choice is greedy: for each requirement the highest-version
satisfying provider is taken and never revisited. If that choice later
leads to a conflict, no older or alternative provider is tried, so the
check can report "not satisfiable" where another selection would have
worked.
"""

import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Deque, Dict, List, Optional, Set, Tuple

from .catalog import Catalog, Package
from .evr import CapabilityRef, Version
from .index import CapabilityIndex

logger = logging.getLogger(__name__)


class SolveError(Exception):
    """Base class for errors that prevent answering a satisfiability query."""
    pass


class PackageNotFound(SolveError):
    """The requested package name is not in the catalog."""

    def __init__(self, package_name: str, repo_name: str = ''):
        self.package_name = package_name
        self.repo_name = repo_name
        where = f" in repository '{repo_name}'" if repo_name else ''
        super().__init__(f"Package '{package_name}' not found{where}")


class ResolutionBudgetExceeded(SolveError):
    """The closure computation was aborted after max_steps requirements."""

    def __init__(self, package_name: str, max_steps: int):
        self.package_name = package_name
        self.max_steps = max_steps
        super().__init__(
            f"Resolution of '{package_name}' aborted after {max_steps} steps"
        )


@dataclass
class ResolutionState:
    """Per-query working state, never shared between queries."""
    selected: Dict[Tuple[str, Version], Package] = field(default_factory=dict)
    frontier: Deque[CapabilityRef] = field(default_factory=deque)
    visited_requirements: Set[CapabilityRef] = field(default_factory=set)
    steps: int = 0

    def select(self, pkg: Package) -> bool:
        """Add a package to the selection, returns False if already there."""
        if pkg.identity in self.selected:
            return False
        self.selected[pkg.identity] = pkg
        self.frontier.extend(pkg.requires)
        return True


@dataclass
class SolveResult:
    """Outcome of a satisfiability query."""
    package_name: str
    satisfiable: bool
    root: Package
    selected: List[Package]
    problems: List[str] = field(default_factory=list)


def _outranks(candidate: Optional[Version], best: Optional[Version]) -> bool:
    """Provider ranking: higher version wins, unversioned ranks lowest."""
    if candidate is None:
        return False
    if best is None:
        return True
    return candidate > best


class Solver:
    """Greedy satisfiability checker bound to one catalog and its index."""

    def __init__(self, catalog: Catalog, index: CapabilityIndex = None,
                 max_steps: int = None):
        """Initialize solver.

        Args:
            catalog: Repository packages
            index: Capability index of catalog (built if not given)
            max_steps: Abort with ResolutionBudgetExceeded after this many
                processed requirements (None = unbounded)
        """
        if index is not None and index.catalog is not catalog:
            raise ValueError("Capability index was built from another catalog")
        self.catalog = catalog
        self.index = index if index is not None else CapabilityIndex.build(catalog)
        self.max_steps = max_steps

    def check(self, package_name: str) -> bool:
        """Return True if package_name's dependencies can be satisfied.

        Raises:
            PackageNotFound: No package called package_name in the catalog
            ResolutionBudgetExceeded: max_steps was reached
        """
        return self.solve(package_name).satisfiable

    def solve(self, package_name: str) -> SolveResult:
        """Run the satisfiability check and keep the diagnostics."""
        root = self.catalog.newest(package_name)
        if root is None:
            raise PackageNotFound(package_name, self.catalog.repo_name)

        logger.debug(f"Checking {root.nevra} in {self.catalog.repo_name}")

        state = ResolutionState()
        state.select(root)

        problem = self._close(package_name, state)
        if problem is None:
            problem = self._find_conflict(state)

        selected = list(state.selected.values())
        if problem is not None:
            logger.debug(f"{root.nevra}: {problem}")
            return SolveResult(package_name, False, root, selected, [problem])

        logger.debug(f"{root.nevra}: satisfiable with {len(selected)} packages")
        return SolveResult(package_name, True, root, selected)

    def _close(self, package_name: str, state: ResolutionState) -> Optional[str]:
        """Select providers for the transitive requirements.

        Returns:
            Problem description of the first unsatisfiable requirement,
            or None when every requirement found a provider
        """
        while state.frontier:
            req = state.frontier.popleft()
            if req in state.visited_requirements:
                continue

            state.steps += 1
            if self.max_steps is not None and state.steps > self.max_steps:
                raise ResolutionBudgetExceeded(package_name, self.max_steps)

            provider = self._choose_provider(req)
            if provider is None:
                return f"nothing provides {req}"

            if state.select(provider):
                logger.debug(f"  {req} -> {provider.nevra}")
            state.visited_requirements.add(req)

        return None

    def _choose_provider(self, req: CapabilityRef) -> Optional[Package]:
        """Pick the highest-version satisfying provider, first in index order on ties."""
        best = None
        best_version = None
        for pkg, version in self.index.whatprovides(req):
            if best is None or _outranks(version, best_version):
                best = pkg
                best_version = version
        return best

    def _find_conflict(self, state: ResolutionState) -> Optional[str]:
        """Check conflicts and obsoletes between selected packages."""
        selected = list(state.selected.values())
        for pkg in selected:
            for relation, refs in (('conflicts with', pkg.conflicts),
                                   ('obsoletes', pkg.obsoletes)):
                for ref in refs:
                    for other in selected:
                        if other.identity == pkg.identity:
                            continue
                        if other.provides_match(ref):
                            return f"{pkg.nevra} {relation} {ref} provided by {other.nevra}"
        return None


def check_package_satisfiability(catalog: Catalog, package_name: str,
                                 index: CapabilityIndex = None,
                                 max_steps: int = None) -> bool:
    """Check whether package_name's dependencies can be satisfied in catalog.

    Args:
        catalog: Repository packages
        package_name: Name of the package to check
        index: Prebuilt capability index of catalog, reused across queries
        max_steps: Optional bound on processed requirements

    Returns:
        True if satisfiable, False otherwise

    Raises:
        PackageNotFound: No package called package_name in the catalog
        ResolutionBudgetExceeded: max_steps was reached
    """
    return Solver(catalog, index, max_steps).check(package_name)
