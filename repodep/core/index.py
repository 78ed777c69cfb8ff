"""
Capability index.

Maps each capability name to the packages providing it, in catalog order.
Buckets hold package positions in the catalog rather than the packages
themselves, so the index stays tied to the catalog it was built from.
"""

import logging
from collections import defaultdict
from typing import Dict, List, Optional, Tuple

from .catalog import Catalog, Package
from .evr import CapabilityRef, Version

logger = logging.getLogger(__name__)


class CapabilityIndex:
    """Read-only capability name -> providers lookup for one catalog."""

    def __init__(self, catalog: Catalog, buckets: Dict[str, List[Tuple[int, Optional[Version]]]]):
        self.catalog = catalog
        self._buckets = buckets

    @classmethod
    def build(cls, catalog: Catalog) -> 'CapabilityIndex':
        """Build the index from every package's effective provides.

        No deduplication: a capability may legitimately be provided at
        several versions by several packages.
        """
        buckets = defaultdict(list)
        for pos, pkg in enumerate(catalog.packages):
            for cap in pkg.effective_provides():
                buckets[cap.name].append((pos, cap.version))

        logger.debug(f"Indexed {len(buckets)} capabilities from "
                     f"{len(catalog)} packages in {catalog.repo_name}")
        return cls(catalog, dict(buckets))

    def __contains__(self, name: str) -> bool:
        return name in self._buckets

    def __len__(self):
        return len(self._buckets)

    def lookup(self, name: str) -> List[Tuple[Package, Optional[Version]]]:
        """Return (package, provided version) pairs for a capability name.

        Unknown capabilities give an empty list.
        """
        packages = self.catalog.packages
        return [(packages[pos], version) for pos, version in self._buckets.get(name, ())]

    def whatprovides(self, ref: CapabilityRef) -> List[Tuple[Package, Optional[Version]]]:
        """Return the providers whose provided version satisfies ref, in index order."""
        return [(pkg, version) for pkg, version in self.lookup(ref.name)
                if ref.satisfied_by(version)]
