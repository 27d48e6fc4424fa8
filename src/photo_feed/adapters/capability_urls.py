"""Helpers for SAS-style capability URLs."""

from urllib.parse import quote, unquote, urlsplit

_AZURE_BLOB_HOST_SUFFIX = ".blob.core.windows.net"


def _split_root(root_url: str) -> tuple[str, str]:
    base, _, token = root_url.partition("?")
    parts = urlsplit(base)
    if not parts.scheme or not parts.netloc:
        raise ValueError("Container URL must include a scheme and host")
    return base.rstrip("/"), token


def resolve(root_url: str, blob_name: str) -> str:
    """Join a container capability URL with a blob name."""
    if not blob_name:
        raise ValueError("Blob name must not be empty")
    base, token = _split_root(root_url)
    url = f"{base}/{quote(blob_name)}"
    if token:
        url = f"{url}?{token}"
    return url


def extract_blob_name(url: str) -> str:
    """Return the blob name from a URL previously produced by resolve."""
    path = urlsplit(url).path.rstrip("/")
    _, _, name = path.rpartition("/")
    if not name:
        raise ValueError("URL does not contain a blob name")
    return unquote(name)


def container_list_url(root_url: str, marker: str | None = None) -> str:
    """Build the container enumeration URL, optionally from a page marker."""
    base, token = _split_root(root_url)
    params = "restype=container&comp=list"
    if marker:
        params = f"{params}&marker={quote(marker)}"
    if token:
        return f"{base}?{token}&{params}"
    return f"{base}?{params}"


def strip_token(url: str) -> str:
    """Drop the query string, and with it any access token."""
    return url.split("?", 1)[0]


def is_blob_url(url: str, root_url: str) -> bool:
    """Return whether a URL points into the object store."""
    host = urlsplit(url).netloc.lower()
    if not host:
        return False
    root_host = urlsplit(strip_token(root_url)).netloc.lower()
    return host == root_host or host.endswith(_AZURE_BLOB_HOST_SUFFIX)
