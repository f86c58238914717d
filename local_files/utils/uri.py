"""Conversion between local paths and file: uris."""

import posixpath
from urllib.parse import quote, unquote

from .errors import InvalidInputError

URI_SCHEME = 'file:'
ROOT_URI = 'file:/'

# Characters encodeURIComponent leaves alone, plus the path separator
_SAFE_CHARS = "/!*'()"


def _require_string(x) -> str:
    """Return trimmed $x, or raise if it isn't a non-empty string."""
    if not isinstance(x, str) or not x.strip():
        raise InvalidInputError(f"Expected a non-empty string, got {type(x).__name__}: {x!r}")
    return x.strip()


def is_uri(x) -> bool:
    """Check if $x looks like a local file uri."""
    return isinstance(x, str) and x.startswith(ROOT_URI)


def to_path(x) -> str:
    """
    Convert a uri (or path) to a normalized path without any prefix.

    Any value starting with the bare `file:` scheme is decoded, not only
    `file:/`, so relative uris such as `file:foo` map back to `foo`.
    Undecodable bytes come back as surrogate escapes, matching os.fsdecode.

    Args:
        x: The path or uri

    Returns:
        Normalized, decoded path

    Raises:
        InvalidInputError: If x is not a non-empty string
    """
    path = _require_string(x)

    if path.startswith(URI_SCHEME):
        path = unquote(path[len(URI_SCHEME):], errors='surrogateescape')

    return posixpath.normpath(path)


def to_uri(x) -> str:
    """
    Convert a path to a percent-encoded file: uri.

    Values already starting with `file:` are returned as is, so
    to_uri("file:foo") == "file:foo". Surrogate-escaped characters from
    non UTF-8 filenames are encoded as their original bytes.

    Args:
        x: The path or uri

    Returns:
        Prefixed uri, unchanged if x already is one

    Raises:
        InvalidInputError: If x is not a non-empty string
    """
    uri = _require_string(x)

    if not uri.startswith(URI_SCHEME):
        uri = URI_SCHEME + quote(uri.encode('utf-8', 'surrogateescape'), safe=_SAFE_CHARS)

    return uri
