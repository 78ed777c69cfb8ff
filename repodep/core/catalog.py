"""Package catalog: the packages published by one repository."""

from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Tuple

from .evr import CapabilityRef, Comparator, Version


@dataclass(frozen=True)
class Package:
    """A binary package and its four capability lists."""
    name: str
    version: Version
    kind: str = 'rpm'
    arch: str = 'noarch'
    provides: Tuple[CapabilityRef, ...] = field(default=())
    requires: Tuple[CapabilityRef, ...] = field(default=())
    conflicts: Tuple[CapabilityRef, ...] = field(default=())
    obsoletes: Tuple[CapabilityRef, ...] = field(default=())

    @property
    def identity(self) -> Tuple[str, Version]:
        return (self.name, self.version)

    @property
    def nevra(self) -> str:
        """NEVRA string, e.g. "firefox-120.0-1.mga9.x86_64"."""
        return f"{self.name}-{self.version}.{self.arch}"

    def self_provide(self) -> CapabilityRef:
        return CapabilityRef(self.name, (Comparator.EQ, self.version))

    def effective_provides(self) -> Tuple[CapabilityRef, ...]:
        """Explicit provides plus the implicit provide of the package's own name."""
        return self.provides + (self.self_provide(),)

    def provides_match(self, ref: CapabilityRef) -> bool:
        """Check whether any effective provide satisfies ref."""
        for cap in self.effective_provides():
            if cap.name == ref.name and ref.satisfied_by(cap.version):
                return True
        return False


@dataclass(frozen=True)
class Catalog:
    """All packages of one repository, in metadata order."""
    repo_name: str
    packages: Tuple[Package, ...] = field(default=())

    def __post_init__(self):
        # Accept any sequence, store a tuple
        object.__setattr__(self, 'packages', tuple(self.packages))

    def __len__(self):
        return len(self.packages)

    def __iter__(self) -> Iterator[Package]:
        return iter(self.packages)

    def find(self, name: str) -> List[Package]:
        """Return packages called name, in catalog order."""
        return [pkg for pkg in self.packages if pkg.name == name]

    def newest(self, name: str) -> Optional[Package]:
        """Return the newest package called name (first one wins on ties)."""
        best = None
        for pkg in self.packages:
            if pkg.name != name:
                continue
            if best is None or pkg.version > best.version:
                best = pkg
        return best
