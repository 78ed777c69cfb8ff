"""
Repository metadata retrieval for repodep

Downloads repomd.xml and the primary metadata it points to, verifies and
decompresses the payload, and parses it into a Catalog.
"""

import hashlib
import logging
import urllib.error
import urllib.request
from pathlib import Path
from urllib.parse import urlparse

from .. import __version__
from .catalog import Catalog
from .compression import DecompressionError, decompress_bytes
from .repomd import RepoError, RepoMdRecord, parse_primary, parse_repomd, primary_record

logger = logging.getLogger(__name__)

REPOMD_PATH = "repodata/repomd.xml"

DEFAULT_TIMEOUT = 30

USER_AGENT = f'repodep/{__version__}'


class MetadataFetchError(RepoError):
    """A metadata document could not be retrieved."""

    def __init__(self, url: str, reason: str):
        self.url = url
        super().__init__(f"Failed to fetch {url}: {reason}")


class ChecksumMismatch(RepoError):
    """Downloaded metadata does not match the checksum in repomd.xml."""

    def __init__(self, url: str, expected: str, actual: str):
        self.url = url
        self.expected = expected
        self.actual = actual
        super().__init__(f"Checksum mismatch for {url}: expected {expected}, got {actual}")


def normalize_baseurl(url: str) -> str:
    """Make sure a base URL ends with /."""
    return url if url.endswith('/') else url + '/'


def build_url(baseurl: str, href: str) -> str:
    """Build full URL of a repository document from its relative href."""
    return normalize_baseurl(baseurl) + href.lstrip('/')


def fetch(url: str, timeout: int = DEFAULT_TIMEOUT) -> bytes:
    """Fetch a document (handles http(s), file:// and plain local paths).

    Args:
        url: Full URL or local path
        timeout: Connection timeout in seconds

    Returns:
        Raw document content

    Raises:
        MetadataFetchError: On any transport failure
    """
    if not urlparse(url).scheme:
        logger.debug(f"Reading {url}")
        try:
            return Path(url).read_bytes()
        except OSError as e:
            raise MetadataFetchError(url, e.strerror or str(e))

    logger.debug(f"Fetching {url}")
    try:
        req = urllib.request.Request(url)
        req.add_header('User-Agent', USER_AGENT)

        with urllib.request.urlopen(req, timeout=timeout) as response:
            return response.read()

    except urllib.error.HTTPError as e:
        raise MetadataFetchError(url, f"HTTP {e.code}: {e.reason}")
    except urllib.error.URLError as e:
        raise MetadataFetchError(url, f"URL error: {e.reason}")
    except (OSError, ValueError) as e:
        raise MetadataFetchError(url, str(e))


def verify_checksum(data: bytes, record: RepoMdRecord, url: str):
    """Check data against the checksum listed in repomd.xml.

    Records without checksum, or with an algorithm hashlib does not know,
    are accepted as is.

    Raises:
        ChecksumMismatch: Digest differs
    """
    if not record.checksum or not record.checksum_type:
        return
    algorithm = record.checksum_type.lower()
    # Old createrepo writes "sha" for sha1
    if algorithm == 'sha':
        algorithm = 'sha1'
    if algorithm not in hashlib.algorithms_available:
        logger.warning(f"Cannot verify {url}: unsupported checksum type {record.checksum_type}")
        return

    actual = hashlib.new(algorithm, data).hexdigest()
    if actual != record.checksum:
        raise ChecksumMismatch(url, record.checksum, actual)


def load_repo(baseurl: str, name: str = '', timeout: int = DEFAULT_TIMEOUT) -> Catalog:
    """Load the package catalog of a repository.

    Args:
        baseurl: Repository base URL (directory holding repodata/)
        name: Name given to the catalog (defaults to baseurl)
        timeout: Connection timeout in seconds

    Returns:
        Catalog of the repository's primary metadata

    Raises:
        RepoError: Fetch, checksum, decompression or parse failure
    """
    baseurl = normalize_baseurl(baseurl)
    name = name or baseurl

    records = parse_repomd(fetch(build_url(baseurl, REPOMD_PATH), timeout))
    record = primary_record(records)

    primary_url = build_url(baseurl, record.href)
    payload = fetch(primary_url, timeout)
    verify_checksum(payload, record, primary_url)

    try:
        primary_xml = decompress_bytes(payload)
    except DecompressionError as e:
        raise RepoError(f"{primary_url}: {e}")

    catalog = parse_primary(primary_xml, name)
    logger.info(f"Loaded {len(catalog)} packages from {name}")
    return catalog
