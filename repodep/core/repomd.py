"""
Parser for rpm-md repository metadata

repomd.xml lists the metadata documents of a repository; primary.xml holds
one <package> element per binary package with its version and its
provides/requires/conflicts/obsoletes entries.

Format example (primary.xml):
    <metadata xmlns="http://linux.duke.edu/metadata/common"
              xmlns:rpm="http://linux.duke.edu/metadata/rpm" packages="1">
    <package type="rpm">
      <name>wget</name>
      <arch>x86_64</arch>
      <version epoch="0" ver="1.21.3" rel="5.fc38"/>
      <format>
        <rpm:provides>
          <rpm:entry name="wget" flags="EQ" epoch="0" ver="1.21.3" rel="5.fc38"/>
        </rpm:provides>
        <rpm:requires>
          <rpm:entry name="libc.so.6()(64bit)"/>
        </rpm:requires>
        <file>/usr/bin/wget</file>
      </format>
    </package>
    </metadata>
"""

import io
import logging
from dataclasses import dataclass
from typing import List, Optional
from xml.etree.ElementTree import Element, ParseError, fromstring, iterparse

from .catalog import Catalog, Package
from .evr import CapabilityRef, Comparator, Version

logger = logging.getLogger(__name__)

# Requirements satisfied by rpm itself, never by a repository package
RPMLIB_PREFIX = 'rpmlib('

_DEP_LISTS = ('provides', 'requires', 'conflicts', 'obsoletes')


class RepoError(Exception):
    """Repository metadata could not be obtained or understood."""
    pass


class MetadataParseError(RepoError):
    """A metadata document is malformed."""

    def __init__(self, document: str, reason: str):
        self.document = document
        super().__init__(f"Failed to parse {document}: {reason}")


@dataclass
class RepoMdRecord:
    """One <data> entry of repomd.xml."""
    type: str
    href: str
    checksum: Optional[str] = None
    checksum_type: Optional[str] = None


def _local(tag: str) -> str:
    """Strip the XML namespace from a tag."""
    return tag.rsplit('}', 1)[-1]


def _child(elem: Element, name: str) -> Optional[Element]:
    for child in elem:
        if _local(child.tag) == name:
            return child
    return None


def parse_repomd(data: bytes) -> List[RepoMdRecord]:
    """Parse repomd.xml.

    Args:
        data: Raw repomd.xml content

    Returns:
        List of records in document order

    Raises:
        MetadataParseError: Malformed XML or a <data> without location
    """
    try:
        root = fromstring(data)
    except ParseError as e:
        raise MetadataParseError('repomd.xml', str(e))

    records = []
    for elem in root:
        if _local(elem.tag) != 'data':
            continue
        location = _child(elem, 'location')
        if location is None or not location.get('href'):
            raise MetadataParseError('repomd.xml', f"data '{elem.get('type')}' has no location")
        checksum = _child(elem, 'checksum')
        records.append(RepoMdRecord(
            type=elem.get('type', ''),
            href=location.get('href'),
            checksum=checksum.text.strip() if checksum is not None and checksum.text else None,
            checksum_type=checksum.get('type') if checksum is not None else None,
        ))
    return records


def primary_record(records: List[RepoMdRecord]) -> RepoMdRecord:
    """Return the primary metadata record.

    Raises:
        MetadataParseError: No primary record listed
    """
    for record in records:
        if record.type == 'primary':
            return record
    raise MetadataParseError('repomd.xml', "no primary metadata listed")


def _parse_entry(entry: Element) -> CapabilityRef:
    """Convert an <rpm:entry> into a CapabilityRef."""
    name = entry.get('name')
    if not name:
        raise MetadataParseError('primary.xml', "rpm:entry without name")

    flags = entry.get('flags')
    if not flags:
        return CapabilityRef(name)

    try:
        comparator = Comparator.from_flags(flags)
        epoch = int(entry.get('epoch') or 0)
    except ValueError as e:
        raise MetadataParseError('primary.xml', f"{name}: {e}")

    version = Version(epoch, entry.get('ver') or '', entry.get('rel') or '')
    return CapabilityRef(name, (comparator, version))


def _parse_package(elem: Element) -> Package:
    """Convert a <package> element into a Package."""
    name_elem = _child(elem, 'name')
    ver_elem = _child(elem, 'version')
    if name_elem is None or not name_elem.text or ver_elem is None:
        raise MetadataParseError('primary.xml', "package without name or version")

    name = name_elem.text.strip()
    try:
        epoch = int(ver_elem.get('epoch') or 0)
    except ValueError:
        raise MetadataParseError('primary.xml', f"{name}: bad epoch {ver_elem.get('epoch')!r}")
    version = Version(epoch, ver_elem.get('ver') or '', ver_elem.get('rel') or '')

    arch_elem = _child(elem, 'arch')
    arch = arch_elem.text.strip() if arch_elem is not None and arch_elem.text else 'noarch'

    deps = {key: [] for key in _DEP_LISTS}
    files = []
    fmt = _child(elem, 'format')
    if fmt is not None:
        for child in fmt:
            tag = _local(child.tag)
            if tag in deps:
                deps[tag] = [_parse_entry(entry) for entry in child
                             if _local(entry.tag) == 'entry']
            elif tag == 'file' and child.text:
                files.append(CapabilityRef(child.text.strip()))

    requires = [dep for dep in deps['requires'] if not dep.name.startswith(RPMLIB_PREFIX)]

    return Package(
        name=name,
        version=version,
        kind=elem.get('type', 'rpm'),
        arch=arch,
        provides=tuple(deps['provides'] + files),
        requires=tuple(requires),
        conflicts=tuple(deps['conflicts']),
        obsoletes=tuple(deps['obsoletes']),
    )


def parse_primary(data: bytes, repo_name: str = '') -> Catalog:
    """Parse primary.xml into a Catalog.

    Uses streaming XML parsing and clears each <package> element once it
    has been converted.

    Args:
        data: Decompressed primary.xml content
        repo_name: Name given to the resulting catalog

    Returns:
        Catalog with packages in document order

    Raises:
        MetadataParseError: Malformed XML or package entries
    """
    packages = []
    try:
        for event, elem in iterparse(io.BytesIO(data), events=('end',)):
            if _local(elem.tag) != 'package':
                continue
            packages.append(_parse_package(elem))
            elem.clear()
    except ParseError as e:
        raise MetadataParseError('primary.xml', str(e))

    logger.debug(f"Parsed {len(packages)} packages from primary.xml of {repo_name or 'repository'}")
    return Catalog(repo_name, packages)
