#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""Game Chooser - resource roots

A resource root makes the contents of one map source addressable by relative name,
regardless of whether the map is a loose directory or a zip archive:

- `resolve(name)` returns a URI for the named resource, or None when it cannot be reached.
- `read(name)` returns its bytes.
- `open_uri(uri)` reads any URI produced here (``file:`` or ``zip:<archive>!/<entry>``).

Zip URIs look like ``zip:file:///maps/Global%20War.zip!/games/global_war.xml``.
"""

from __future__ import annotations

import logging
import re
import stat
import zipfile
import zlib
from pathlib import Path, PurePosixPath
from typing import List, Optional, Protocol, Union
from urllib.parse import unquote, urlparse
from urllib.request import url2pathname

from ..exceptions import ArchiveError

logger = logging.getLogger(__name__)

ZIP_URI_SCHEME = "zip:"
ZIP_ENTRY_SEPARATOR = "!/"

_ZIP_URI_RE = re.compile(r"^zip:(?P<archive>.+?\.zip)!/(?P<entry>.*)$", re.IGNORECASE)

# Errors zipfile raises when a member's header or data cannot be read.
ZIP_READ_ERRORS = (zipfile.BadZipFile, zlib.error, EOFError, OSError, NotImplementedError, RuntimeError)

PathLike = Union[str, Path]


class ResourceRoot(Protocol):
    path: Path

    def resolve(self, name: str) -> Optional[str]: ...
    def read(self, name: str) -> bytes: ...
    def entry_names(self) -> List[str]: ...
    def close(self) -> None: ...


def is_safe_member_name(member_name: str) -> bool:
    """Reject absolute paths, drive letters, NUL bytes and ``..`` segments."""
    if not member_name:
        return False
    if "\x00" in member_name:
        return False
    if member_name.startswith(('/', '\\')):
        return False
    if re.match(r"^[a-zA-Z]:", member_name):
        return False
    parts = PurePosixPath(member_name.replace("\\", "/")).parts
    return ".." not in parts


def encode_uri_spaces(uri: str) -> str:
    return uri.replace(" ", "%20")


def build_zip_uri(archive_path: PathLike, entry_name: str) -> str:
    """Build a zip URI; ``%`` in the entry name is escaped so `open_uri` round-trips."""
    archive_uri = Path(archive_path).resolve().as_uri()
    return f"{ZIP_URI_SCHEME}{archive_uri}{ZIP_ENTRY_SEPARATOR}{entry_name.replace('%', '%25')}"


def _file_uri_to_path(uri: str) -> Path:
    parsed = urlparse(uri)
    if parsed.scheme != "file":
        raise ValueError(f"Not a file URI: {uri}")
    return Path(url2pathname(parsed.path))


def split_zip_uri(uri: str) -> tuple[Path, str]:
    match = _ZIP_URI_RE.match(uri)
    if match is None:
        raise ValueError(f"Not a zip URI: {uri}")
    return _file_uri_to_path(match.group("archive")), unquote(match.group("entry"))


def uri_to_source_path(uri: str) -> Path:
    """Return the file system path a URI lives in: the archive for zip URIs, the file otherwise."""
    if uri.lower().startswith(ZIP_URI_SCHEME):
        return split_zip_uri(uri)[0]
    return _file_uri_to_path(uri)


def open_uri(uri: str) -> bytes:
    """Read the bytes behind a ``file:`` or ``zip:`` URI.

    Raises OSError (or zipfile.BadZipFile) when the resource cannot be read and
    ValueError for URIs of any other shape.
    """
    if uri.lower().startswith(ZIP_URI_SCHEME):
        archive_path, entry_name = split_zip_uri(uri)
        with zipfile.ZipFile(archive_path, "r") as zf:
            try:
                return zf.read(entry_name)
            except KeyError as exc:
                raise FileNotFoundError(f"{entry_name} not found in {archive_path}") from exc
    return _file_uri_to_path(uri).read_bytes()


class ZipResourceRoot:
    """One open zip archive, usable as a context manager.

    The archive handle is owned exclusively by this object and released by `close()`.
    """

    def __init__(self, path: PathLike):
        self.path = Path(path)
        try:
            self._zip: Optional[zipfile.ZipFile] = zipfile.ZipFile(self.path, "r")
        except (OSError, zipfile.BadZipFile) as exc:
            raise ArchiveError(f"Could not open map archive: {exc}", archive_path=str(self.path)) from exc

    def __enter__(self) -> "ZipResourceRoot":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    @property
    def closed(self) -> bool:
        return self._zip is None

    def _require_open(self) -> zipfile.ZipFile:
        if self._zip is None:
            raise ValueError(f"Resource root already closed: {self.path}")
        return self._zip

    def entry_names(self) -> List[str]:
        zf = self._require_open()
        return [info.filename for info in zf.infolist() if not info.is_dir()]

    def resolve(self, name: str) -> Optional[str]:
        """Return a URI for `name`, or None when its bytes cannot be reached.

        The member must be listed in the central directory and its local header must
        open cleanly; a truncated or overwritten header resolves to None.
        """
        zf = self._require_open()
        try:
            info = zf.getinfo(name)
        except KeyError:
            return None
        try:
            if stat.S_IFMT(info.external_attr >> 16) == stat.S_IFLNK:
                return None
            with zf.open(info, "r") as handle:
                handle.read(1)
        except ZIP_READ_ERRORS as exc:
            logger.debug("Unresolvable zip member %s in %s: %s", name, self.path, exc)
            return None
        return build_zip_uri(self.path, name)

    def read(self, name: str) -> bytes:
        return self._require_open().read(name)

    def close(self) -> None:
        if self._zip is not None:
            try:
                self._zip.close()
            finally:
                self._zip = None


class DirectoryResourceRoot:
    """A loose map directory exposed through the same interface as a zip."""

    def __init__(self, path: PathLike):
        self.path = Path(path)
        if not self.path.is_dir():
            raise NotADirectoryError(str(self.path))
        self._closed = False

    def __enter__(self) -> "DirectoryResourceRoot":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    @property
    def closed(self) -> bool:
        return self._closed

    def _member_path(self, name: str) -> Optional[Path]:
        if self._closed:
            raise ValueError(f"Resource root already closed: {self.path}")
        if not is_safe_member_name(name):
            return None
        return self.path / name

    def entry_names(self) -> List[str]:
        if self._closed:
            raise ValueError(f"Resource root already closed: {self.path}")
        return sorted(
            p.relative_to(self.path).as_posix()
            for p in self.path.rglob("*")
            if p.is_file()
        )

    def resolve(self, name: str) -> Optional[str]:
        member = self._member_path(name)
        if member is None or not member.is_file():
            return None
        return member.resolve().as_uri()

    def read(self, name: str) -> bytes:
        member = self._member_path(name)
        if member is None:
            raise FileNotFoundError(name)
        return member.read_bytes()

    def close(self) -> None:
        self._closed = True


def open_resource_root(path: PathLike) -> ResourceRoot:
    """Open a directory or ``.zip`` file as a resource root."""
    source = Path(path)
    if source.is_dir():
        return DirectoryResourceRoot(source)
    if source.is_file() and source.name.lower().endswith(".zip"):
        return ZipResourceRoot(source)
    raise FileNotFoundError(f"Not a map directory or zip archive: {source}")
