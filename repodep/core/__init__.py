"""Core modules for repodep"""

from .catalog import Catalog, Package
from .evr import CapabilityRef, Comparator, Version
from .index import CapabilityIndex
from .solver import (
    PackageNotFound,
    ResolutionBudgetExceeded,
    SolveError,
    Solver,
    check_package_satisfiability,
)

__all__ = [
    'CapabilityIndex',
    'CapabilityRef',
    'Catalog',
    'Comparator',
    'Package',
    'PackageNotFound',
    'ResolutionBudgetExceeded',
    'SolveError',
    'Solver',
    'Version',
    'check_package_satisfiability',
]
