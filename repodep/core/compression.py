"""
Compression utilities for repodep

Auto-detects the format of repository metadata payloads:
- gzip (primary.xml.gz, most repositories)
- zstd (primary.xml.zst, recent Fedora)
- xz/lzma
- bzip2
"""

import bz2
import gzip
import io
import lzma
import zlib

import zstandard as zstd

# Magic bytes for format detection
MAGIC_ZSTD = b'\x28\xb5\x2f\xfd'
MAGIC_GZIP = b'\x1f\x8b'
MAGIC_XZ = b'\xfd7zXZ\x00'
MAGIC_BZ2 = b'BZh'


class DecompressionError(ValueError):
    """Compressed payload could not be decoded."""

    def __init__(self, fmt: str, reason: str):
        self.format = fmt
        super().__init__(f"Failed to decompress {fmt} data: {reason}")


def detect_format(data: bytes) -> str:
    """Detect compression format from magic bytes.

    Args:
        data: First 8+ bytes of the payload

    Returns:
        Format name: 'zstd', 'gzip', 'xz', 'bzip2', or 'plain'
    """
    if data[:4] == MAGIC_ZSTD:
        return 'zstd'
    elif data[:2] == MAGIC_GZIP:
        return 'gzip'
    elif data[:6] == MAGIC_XZ:
        return 'xz'
    elif data[:3] == MAGIC_BZ2:
        return 'bzip2'
    else:
        return 'plain'


def decompress_bytes(data: bytes) -> bytes:
    """Decompress bytes, auto-detecting format.

    Args:
        data: Compressed (or plain) data

    Returns:
        Decompressed bytes

    Raises:
        DecompressionError: If the payload is corrupt
    """
    fmt = detect_format(data)

    try:
        if fmt == 'zstd':
            dctx = zstd.ZstdDecompressor()
            # Frames from createrepo do not always carry the content size
            with dctx.stream_reader(io.BytesIO(data)) as reader:
                return reader.read()

        elif fmt == 'gzip':
            return gzip.decompress(data)

        elif fmt == 'xz':
            return lzma.decompress(data)

        elif fmt == 'bzip2':
            return bz2.decompress(data)

        else:
            # Plain/uncompressed
            return data

    except (OSError, EOFError, ValueError, zlib.error, lzma.LZMAError, zstd.ZstdError) as e:
        raise DecompressionError(fmt, str(e))
