"""Shared fixtures: package factory and on-disk rpm-md repositories."""

import gzip
import hashlib

import pytest

from repodep.core.catalog import Package
from repodep.core.evr import CapabilityRef, Version


def _refs(deps):
    return tuple(CapabilityRef.parse(d) if isinstance(d, str) else d for d in deps)


@pytest.fixture
def make_pkg():
    """Factory: make_pkg("foo", "1.0-1", requires=["bar >= 2"], ...)."""
    def factory(name, evr="1.0-1", provides=(), requires=(), conflicts=(),
                obsoletes=(), arch="x86_64"):
        return Package(
            name=name,
            version=Version.parse(evr),
            arch=arch,
            provides=_refs(provides),
            requires=_refs(requires),
            conflicts=_refs(conflicts),
            obsoletes=_refs(obsoletes),
        )
    return factory


PRIMARY_HEADER = (
    '<?xml version="1.0" encoding="UTF-8"?>\n'
    '<metadata xmlns="http://linux.duke.edu/metadata/common" '
    'xmlns:rpm="http://linux.duke.edu/metadata/rpm" packages="{count}">\n'
)


def primary_package(name, ver="1.0", rel="1", epoch="0", arch="x86_64",
                    provides=(), requires=(), conflicts=(), obsoletes=(), files=()):
    """Build one <package> element; dependency entries are attribute dicts."""
    def entries(tag, items):
        if not items:
            return ''
        lines = []
        for item in items:
            attrs = ' '.join(f'{k}="{v}"' for k, v in item.items())
            lines.append(f'      <rpm:entry {attrs}/>')
        return f'    <rpm:{tag}>\n' + '\n'.join(lines) + f'\n    </rpm:{tag}>\n'

    file_lines = ''.join(f'    <file>{f}</file>\n' for f in files)
    return (
        f'<package type="rpm">\n'
        f'  <name>{name}</name>\n'
        f'  <arch>{arch}</arch>\n'
        f'  <version epoch="{epoch}" ver="{ver}" rel="{rel}"/>\n'
        f'  <summary>{name} package</summary>\n'
        f'  <location href="Packages/{name}-{ver}-{rel}.{arch}.rpm"/>\n'
        f'  <format>\n'
        f'    <rpm:license>MIT</rpm:license>\n'
        + entries('provides', provides)
        + entries('requires', requires)
        + entries('conflicts', conflicts)
        + entries('obsoletes', obsoletes)
        + file_lines
        + '  </format>\n'
        '</package>\n'
    )


def primary_document(packages) -> bytes:
    body = ''.join(packages)
    return (PRIMARY_HEADER.format(count=len(packages)) + body + '</metadata>\n').encode()


def repomd_document(href, checksum=None, checksum_type='sha256') -> bytes:
    checksum_elem = ''
    if checksum is not None:
        checksum_elem = f'    <checksum type="{checksum_type}">{checksum}</checksum>\n'
    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        '<repomd xmlns="http://linux.duke.edu/metadata/repo" '
        'xmlns:rpm="http://linux.duke.edu/metadata/rpm">\n'
        '  <revision>1700000000</revision>\n'
        '  <data type="filelists">\n'
        '    <location href="repodata/filelists.xml.gz"/>\n'
        '  </data>\n'
        '  <data type="primary">\n'
        + checksum_elem +
        f'    <location href="{href}"/>\n'
        '  </data>\n'
        '</repomd>\n'
    ).encode()


@pytest.fixture
def make_repo(tmp_path):
    """Factory writing a repository (repodata/repomd.xml + gzipped primary) to disk.

    Returns the repository directory.
    """
    def factory(packages, name="repo", checksum=True, payload=None):
        repo_dir = tmp_path / name
        repodata = repo_dir / "repodata"
        repodata.mkdir(parents=True)

        if payload is None:
            payload = gzip.compress(primary_document(packages))
        href = "repodata/primary.xml.gz"
        (repo_dir / href).write_bytes(payload)

        digest = hashlib.sha256(payload).hexdigest() if checksum else None
        (repodata / "repomd.xml").write_bytes(repomd_document(href, digest))
        return repo_dir
    return factory


@pytest.fixture
def sample_packages():
    """A small repository: app needs libfoo, tool misses libbar, legacy conflicts with app."""
    return [
        primary_package(
            "app", ver="2.0", rel="1",
            provides=[{"name": "app", "flags": "EQ", "epoch": "0", "ver": "2.0", "rel": "1"}],
            requires=[
                {"name": "libfoo.so.1()(64bit)"},
                {"name": "config(app)", "flags": "EQ", "epoch": "0", "ver": "2.0", "rel": "1"},
                {"name": "rpmlib(CompressedFileNames)", "flags": "LE", "epoch": "0",
                 "ver": "3.0.4", "rel": "1"},
                {"name": "/usr/bin/sh"},
            ],
            files=["/usr/bin/app"],
        ),
        primary_package(
            "libfoo", ver="1.4", rel="2",
            provides=[{"name": "libfoo.so.1()(64bit)"}],
        ),
        primary_package(
            "app-config", ver="2.0", rel="1", arch="noarch",
            provides=[{"name": "config(app)", "flags": "EQ", "epoch": "0", "ver": "2.0", "rel": "1"}],
        ),
        primary_package(
            "bash", ver="5.2", rel="3",
            files=["/usr/bin/sh", "/usr/bin/bash"],
        ),
        primary_package(
            "tool", ver="0.9", rel="1",
            requires=[{"name": "libbar", "flags": "GE", "epoch": "0", "ver": "3.0"}],
        ),
        primary_package(
            "legacy", ver="1.0", rel="1",
            requires=[{"name": "app"}],
            conflicts=[{"name": "app", "flags": "GE", "epoch": "0", "ver": "2.0"}],
        ),
    ]


@pytest.fixture
def pkg_xml():
    """The primary_package() builder, for tests assembling their own metadata."""
    return primary_package


@pytest.fixture
def primary_bytes():
    """The primary_document() builder."""
    return primary_document
