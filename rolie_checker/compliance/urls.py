"""
URL helpers.

All feed, advisory and service document URLs are resolved against one
absolute base before they are compared, so a relative and an absolute
reference to the same resource compare equal.
"""
import posixpath
import re
from urllib.parse import SplitResult, urljoin, urlsplit, urlunsplit

from .errors import InvalidURL

ALLOWED_SCHEMES = {"http", "https"}

_FORBIDDEN_CHARS = re.compile(r"[\x00-\x20\x7f]")
_BAD_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")


def _split(value: str, what: str) -> SplitResult:
    if not isinstance(value, str) or not value:
        raise InvalidURL(f"empty {what}")
    if _FORBIDDEN_CHARS.search(value):
        raise InvalidURL(f"{what} {value!r} contains whitespace or control characters")
    if _BAD_ESCAPE.search(value):
        raise InvalidURL(f"{what} {value!r} contains an invalid percent escape")
    try:
        parts = urlsplit(value)
        # Accessing port validates it.
        parts.port
    except ValueError as exc:
        raise InvalidURL(f"{what} {value!r}: {exc}") from exc
    return parts


def _require_absolute(parts: SplitResult, value: str, what: str) -> None:
    if parts.scheme.lower() not in ALLOWED_SCHEMES:
        raise InvalidURL(f"{what} {value!r} has unsupported scheme {parts.scheme!r}")
    if not parts.hostname:
        raise InvalidURL(f"{what} {value!r} has no host")


def absolute_url(url: str) -> str:
    """Validate that ``url`` is an absolute http(s) URL and return it."""
    _require_absolute(_split(url, "URL"), url, "URL")
    return url


def resolve_url(base: str, ref: str) -> str:
    """
    Resolve ``ref`` against ``base``.

    Args:
        base: Absolute http(s) URL
        ref: Relative or absolute reference

    Returns:
        Absolute URL string

    Raises:
        InvalidURL: If either input is malformed or the result is not an
            absolute http(s) URL
    """
    _require_absolute(_split(base, "base URL"), base, "base URL")
    _split(ref, "URL")
    resolved = urljoin(base, ref)
    parts = _split(resolved, "URL")
    _require_absolute(parts, resolved, "URL")
    # urljoin leaves dot segments of absolute references in place.
    return urlunsplit(parts._replace(path=_remove_dot_segments(parts.path)))


def _remove_dot_segments(path: str) -> str:
    if not path.startswith("/"):
        return path
    segments = path.split("/")
    output = []
    for segment in segments:
        if segment == ".":
            continue
        if segment == "..":
            if len(output) > 1:
                output.pop()
            continue
        output.append(segment)
    if segments[-1] in (".", ".."):
        output.append("")
    return "/".join(output)


def base_url(url: str) -> str:
    """Return the directory part of ``url`` including its trailing slash."""
    parts = _split(url, "URL")
    _require_absolute(parts, url, "URL")
    path = parts.path
    directory = path[: path.rfind("/") + 1] or "/"
    return urlunsplit((parts.scheme, parts.netloc, directory, "", ""))


def file_name(url: str) -> str:
    """Return the last path segment of ``url``."""
    return posixpath.basename(urlsplit(url).path)
