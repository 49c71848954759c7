"""Load the raw text body behind an origin."""

from __future__ import annotations

from pathlib import Path
from urllib.parse import unquote, urlparse

import requests

from uml_index.core.errors import ContentLoadError
from uml_index.core.logging import get_logger

logger = get_logger(__name__)


def load_content(origin: str, path: Path | None = None, timeout: float = 60.0) -> str:
    """Return the text for ``origin``.

    An explicit ``path`` wins. Otherwise http(s) origins are fetched and
    ``file://`` URIs or plain paths are read from disk.
    """
    if path is not None:
        return _read_file(path.expanduser())
    parsed = urlparse(origin)
    if parsed.scheme in {"http", "https"}:
        return _fetch(origin, timeout)
    if parsed.scheme == "file":
        return _read_file(Path(unquote(parsed.path)))
    if parsed.scheme and len(parsed.scheme) > 1:
        raise ContentLoadError(f"Unsupported URI scheme: {origin}")
    return _read_file(Path(origin).expanduser())


def _fetch(url: str, timeout: float) -> str:
    logger.info("Fetching %s", url)
    try:
        resp = requests.get(url, timeout=timeout)
    except requests.RequestException as exc:
        raise ContentLoadError(f"failed to fetch {url}: {exc}") from exc
    if not resp.ok:
        raise ContentLoadError(f"failed to fetch {url} ({resp.status_code})")
    return resp.text


def _read_file(path: Path) -> str:
    try:
        raw = path.read_bytes()
    except OSError as exc:
        raise ContentLoadError(f"failed to read {path}: {exc}") from exc
    return raw.decode("utf-8", errors="ignore")


__all__ = ["load_content"]
