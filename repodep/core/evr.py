"""
Version and capability model for repodep.

Provides the epoch-version-release ordering used everywhere a package or
capability version is compared, and the capability references found in
provides/requires/conflicts/obsoletes lists.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from functools import total_ordering
from typing import Optional, Tuple


# Segment kinds, ordered so that plain tuple comparison gives the
# version ordering: ~ < letters < end of string < ^ < digits
_TILDE = 0
_ALPHA = 1
_END = 2
_CARET = 3
_DIGIT = 4

_SEGMENT_RE = re.compile(r'[0-9]+|[a-zA-Z]+|[~^]')

# "name op version" or "name[op version]"
_DEP_RE = re.compile(r'^(.+?)\s*\[?\s*(==|>=|<=|=|<|>)\s*([^\]\s]+)\s*\]?$')


def split_version(v: str) -> Tuple[Tuple[int, int, str], ...]:
    """Split a version string into comparable segments.

    Other characters than letters, digits, ~ and ^ only separate segments.
    A terminating marker is appended so that a longer string compares
    greater when its extra segment is numeric and smaller when it is
    alphabetic. ~ sorts before everything, end of string included
    ("1.0~rc1" < "1.0"); ^ sorts after the end of string but before a
    numeric segment ("1.0" < "1.0^git1" < "1.0.1").

    Args:
        v: Version or release string (e.g., "1.2.3", "1.0rc1")

    Returns:
        Tuple of (kind, number, text) triples
    """
    segments = []
    for part in _SEGMENT_RE.findall(v or ''):
        if part == '~':
            segments.append((_TILDE, 0, ''))
        elif part == '^':
            segments.append((_CARET, 0, ''))
        elif part.isdigit():
            segments.append((_DIGIT, int(part), ''))
        else:
            segments.append((_ALPHA, 0, part))
    segments.append((_END, 0, ''))
    return tuple(segments)


def vercmp(a: str, b: str) -> int:
    """Compare two version (or release) strings.

    Returns:
        -1 if a < b, 0 if equal, 1 if a > b
    """
    ka = split_version(a)
    kb = split_version(b)
    return (ka > kb) - (ka < kb)


@total_ordering
@dataclass(frozen=True, eq=False)
class Version:
    """An epoch-version-release triple.

    Equality, hashing and ordering all go through sort_key(), so two
    spellings of the same version ("1.01" and "1.1") are equal.
    """
    epoch: int = 0
    version: str = ''
    release: str = ''

    @classmethod
    def parse(cls, evr: str) -> 'Version':
        """Parse "[epoch:]version[-release]"."""
        epoch = 0
        if ':' in evr:
            epoch_str, evr = evr.split(':', 1)
            epoch = int(epoch_str) if epoch_str else 0
        if '-' in evr:
            version, release = evr.rsplit('-', 1)
        else:
            version, release = evr, ''
        return cls(epoch, version, release)

    def sort_key(self, with_release: bool = True) -> Tuple:
        """Return a sortable key (higher = newer)."""
        if with_release:
            return (self.epoch, split_version(self.version), split_version(self.release))
        return (self.epoch, split_version(self.version))

    def compare(self, other: 'Version', with_release: bool = True) -> int:
        """Three-way comparison, optionally ignoring the release."""
        ka = self.sort_key(with_release)
        kb = other.sort_key(with_release)
        return (ka > kb) - (ka < kb)

    def __eq__(self, other):
        if not isinstance(other, Version):
            return NotImplemented
        return self.sort_key() == other.sort_key()

    def __lt__(self, other):
        if not isinstance(other, Version):
            return NotImplemented
        return self.sort_key() < other.sort_key()

    def __hash__(self):
        return hash(self.sort_key())

    def __str__(self):
        evr = self.version
        if self.epoch:
            evr = f"{self.epoch}:{evr}"
        if self.release:
            evr = f"{evr}-{self.release}"
        return evr


class Comparator(Enum):
    """Version comparator of a capability constraint."""
    EQ = 'EQ'
    LT = 'LT'
    LE = 'LE'
    GT = 'GT'
    GE = 'GE'

    @classmethod
    def from_flags(cls, flags: str) -> 'Comparator':
        """Map a primary.xml flags attribute ("EQ", "GE", ...)."""
        try:
            return cls(flags.strip().upper())
        except ValueError:
            raise ValueError(f"Unknown comparator flags: {flags!r}")

    @classmethod
    def from_operator(cls, op: str) -> 'Comparator':
        """Map an operator string ("=", "==", ">=", ...)."""
        try:
            return _OPERATORS[op]
        except KeyError:
            raise ValueError(f"Unknown comparator operator: {op!r}")

    @property
    def symbol(self) -> str:
        return _SYMBOLS[self]

    def accepts(self, cmp: int) -> bool:
        """Check whether a three-way comparison result fits this comparator."""
        if self is Comparator.EQ:
            return cmp == 0
        if self is Comparator.LT:
            return cmp < 0
        if self is Comparator.LE:
            return cmp <= 0
        if self is Comparator.GT:
            return cmp > 0
        return cmp >= 0


_OPERATORS = {
    '=': Comparator.EQ,
    '==': Comparator.EQ,
    '<': Comparator.LT,
    '<=': Comparator.LE,
    '>': Comparator.GT,
    '>=': Comparator.GE,
}

_SYMBOLS = {
    Comparator.EQ: '=',
    Comparator.LT: '<',
    Comparator.LE: '<=',
    Comparator.GT: '>',
    Comparator.GE: '>=',
}


@dataclass(frozen=True)
class CapabilityRef:
    """One entry of a provides/requires/conflicts/obsoletes list.

    A ref without constraint is unversioned and matches any version of a
    capability with the same name.
    """
    name: str
    constraint: Optional[Tuple[Comparator, Version]] = field(default=None)

    @classmethod
    def versioned(cls, name: str, comparator: Comparator, version: Version) -> 'CapabilityRef':
        return cls(name, (comparator, version))

    @classmethod
    def parse(cls, dep: str) -> 'CapabilityRef':
        """Parse a dependency string.

        Args:
            dep: String like "libfoo >= 1.0-2", "bar[>= 2.0]" or just "baz"

        Returns:
            CapabilityRef
        """
        dep = dep.strip()
        match = _DEP_RE.match(dep)
        if not match:
            return cls(dep)
        name, op, evr = match.groups()
        return cls(name.strip(), (Comparator.from_operator(op), Version.parse(evr)))

    @property
    def comparator(self) -> Optional[Comparator]:
        return self.constraint[0] if self.constraint else None

    @property
    def version(self) -> Optional[Version]:
        return self.constraint[1] if self.constraint else None

    def satisfied_by(self, candidate: Optional[Version]) -> bool:
        """Check a same-named capability version against this constraint.

        An unversioned candidate (None) satisfies every constraint, as an
        unversioned rpm provide does. Releases are only compared when both
        sides carry one.
        """
        if self.constraint is None or candidate is None:
            return True
        comparator, wanted = self.constraint
        with_release = bool(wanted.release and candidate.release)
        return comparator.accepts(candidate.compare(wanted, with_release=with_release))

    def __str__(self):
        if self.constraint is None:
            return self.name
        comparator, version = self.constraint
        return f"{self.name} {comparator.symbol} {version}"
