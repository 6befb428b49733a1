"""Map the caller's location under a site root to a served directory and URL path.

Example:
    site_home = /Users/me/www.example.com
    PWD       = /Users/me/www.example.com/blog
    filename  = post.html

    served directory: /Users/me/www.example.com
    URL:              http://localhost:8000/blog/post.html
"""
from __future__ import annotations

from pathlib import Path, PurePosixPath
from typing import Optional, Union
from urllib.parse import quote

from hopen.core.exceptions import (
    FilenameRequiresRootError,
    NoHtmlFilesError,
    NotUnderSiteRootError,
)

from .models import PathMapping

HTML_SUFFIXES = (".html", ".htm")

PathLike = Union[str, Path]


def _canonical(path: PathLike) -> Path:
    return Path(path).expanduser().resolve()


def resolve(
    site_root: Optional[PathLike],
    current_dir: PathLike,
    filename: Optional[str] = None,
) -> PathMapping:
    """Compute the directory to serve and the URL path for ``current_dir``.

    Without a site root the current directory is served at the URL root and
    a ``filename`` is rejected. With a site root the whole
    site is served, so relative links keep working, and the URL path is the
    current directory relative to the root plus ``filename``.

    Raises:
        FilenameRequiresRootError: ``filename`` given without ``site_root``.
        NotUnderSiteRootError: ``current_dir`` is outside ``site_root``.
    """
    cwd = _canonical(current_dir)

    if site_root is None:
        if filename:
            raise FilenameRequiresRootError(filename)
        return PathMapping(site_root=None, served_directory=cwd, url_path="")

    root = _canonical(site_root)
    try:
        relative = cwd.relative_to(root)
    except ValueError:
        raise NotUnderSiteRootError(root, cwd) from None

    parts = list(relative.parts)
    if filename:
        parts.extend(p for p in PurePosixPath(filename.replace("\\", "/")).parts if p not in ("", "/"))
    url_path = "/".join(quote(p) for p in parts)
    return PathMapping(site_root=root, served_directory=root, url_path=url_path)


def has_html_files(directory: PathLike) -> bool:
    """True if ``directory`` directly contains a ``*.htm``/``*.html`` file (any case)."""
    try:
        entries = list(Path(directory).iterdir())
    except OSError:
        return False
    return any(entry.name.lower().endswith(HTML_SUFFIXES) for entry in entries)


def require_html_files(directory: PathLike) -> None:
    """Raise :class:`NoHtmlFilesError` unless ``directory`` holds an HTML file."""
    if not has_html_files(directory):
        raise NoHtmlFilesError(Path(directory))


def build_url(url_host: str, port: int, mapping_or_path: Union[PathMapping, str]) -> str:
    suffix = (
        mapping_or_path.url_suffix
        if isinstance(mapping_or_path, PathMapping)
        else (f"/{mapping_or_path}" if mapping_or_path else "")
    )
    return f"http://{url_host}:{port}{suffix}"


__all__ = ["resolve", "has_html_files", "require_html_files", "build_url", "HTML_SUFFIXES"]
