# Copyright Red Hat
#
# fspoll/snapshot.py - File system poller snapshots
#
# This file is part of the fspoll project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Point-in-time snapshots of a directory tree.
"""
from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, Iterator, List, Optional, Tuple, Union
import itertools
import logging
import stat
import os

from ._fspoll import FSPOLL_SUBSYSTEM_SNAPSHOT, FsPollFilesystemError

_log = logging.getLogger(__name__)

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error


def _log_debug_snapshot(msg, *args, **kwargs):
    """A wrapper for snapshot subsystem debug logs."""
    _log.debug(msg, *args, extra={"subsystem": FSPOLL_SUBSYSTEM_SNAPSHOT}, **kwargs)


#: Failure stage: the root directory could not be opened.
STAGE_OPEN_ROOT = "opening root directory"
#: Failure stage: the root directory could not be listed.
STAGE_READ_DIR = "reading files in directory"
#: Failure stage: a directory entry could not be stat'ed.
STAGE_STAT_ENTRY = "statting entry"
#: Failure stage: the recursive walk failed.
STAGE_WALK = "walking file system"


@dataclass(frozen=True)
class FileIdentity:
    """
    Metadata captured for a single path at snapshot time.
    """

    #: The key under which this entry is stored in its ``Snapshot``
    path: str
    #: Modification time in nanoseconds since the epoch
    mtime_ns: int
    #: ``(st_dev, st_ino)`` or ``None`` if the platform cannot provide it
    identity: Optional[Tuple[int, int]]
    #: True if this entry is a directory
    is_dir: bool
    #: File mode returned by ``lstat()``
    mode: int = 0
    #: File size returned by ``lstat()``
    size: int = 0

    @classmethod
    def from_stat(cls, path: str, st: os.stat_result) -> "FileIdentity":
        """
        Build a ``FileIdentity`` for ``path`` from the stat result ``st``.

        :param path: The path the stat result was obtained for.
        :type path: ``str``
        :param st: The result of ``os.lstat(path)``.
        :type st: ``os.stat_result``
        :returns: A new ``FileIdentity``.
        :rtype: ``FileIdentity``
        """
        identity = None
        if st.st_dev or st.st_ino:
            identity = (st.st_dev, st.st_ino)
        return cls(
            path=path,
            mtime_ns=st.st_mtime_ns,
            identity=identity,
            is_dir=stat.S_ISDIR(st.st_mode),
            mode=st.st_mode,
            size=st.st_size,
        )

    @property
    def mtime(self) -> float:
        """
        Modification time in seconds since the epoch.

        :rtype: ``float``
        """
        return self.mtime_ns / 1e9

    @property
    def is_symlink(self) -> bool:
        """
        True if this entry is a symbolic link.

        :rtype: ``bool``
        """
        return stat.S_ISLNK(self.mode)

    def same_file(self, other: "FileIdentity") -> bool:
        """
        Return ``True`` if ``self`` and ``other`` refer to the same
        underlying file object.

        Entries without an identity never match anything, including each
        other.

        :param other: The entry to compare against.
        :type other: ``FileIdentity``
        :returns: ``True`` for the same file or ``False`` otherwise.
        :rtype: ``bool``
        """
        if self.identity is None or other.identity is None:
            return False
        return self.identity == other.identity

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert this ``FileIdentity`` into a dictionary representation
        suitable for encoding as JSON.

        :returns: A dictionary mapping this instance's keys to values.
        :rtype: ``Dict[str, Any]``
        """
        return {
            "path": self.path,
            "mtime_ns": self.mtime_ns,
            "identity": list(self.identity) if self.identity else None,
            "is_dir": self.is_dir,
            "mode": self.mode,
            "size": self.size,
        }


class Snapshot(Mapping):
    """
    An immutable mapping of path to ``FileIdentity`` captured from a root
    directory at a single point in time.
    """

    def __init__(
        self,
        root: str,
        recursive: bool = False,
        entries: Optional[Dict[str, FileIdentity]] = None,
    ):
        """
        Initialise a new ``Snapshot``.

        :param root: The root directory this snapshot was captured from.
        :type root: ``str``
        :param recursive: ``True`` if the whole subtree was captured.
        :type recursive: ``bool``
        :param entries: The path to ``FileIdentity`` mapping. The mapping
                        is copied.
        :type entries: ``Optional[Dict[str, FileIdentity]]``
        """
        self.root = root
        self.recursive = recursive
        self._entries = MappingProxyType(dict(entries or {}))

    def __getitem__(self, path: str) -> FileIdentity:
        return self._entries[path]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return (
            f"Snapshot(root={self.root!r}, recursive={self.recursive!r}, "
            f"entries={len(self)})"
        )

    def __str__(self) -> str:
        """
        Return a human readable listing of the paths in this ``Snapshot``.

        :returns: A string with one path per line.
        :rtype: ``str``
        """
        header = f"Snapshot of {self.root} (recursive={self.recursive}):"
        return "\n".join([header] + [f"  {path}" for path in self.paths])

    @property
    def paths(self) -> List[str]:
        """
        The paths in this ``Snapshot`` in sorted order.

        :rtype: ``List[str]``
        """
        return sorted(self._entries)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert this ``Snapshot`` into a dictionary representation suitable
        for encoding as JSON.

        :returns: A dictionary mapping this instance's keys to values.
        :rtype: ``Dict[str, Any]``
        """
        return {
            "root": self.root,
            "recursive": self.recursive,
            "entries": {path: self[path].to_dict() for path in self.paths},
        }


def _join(root: str, name: str) -> str:
    """
    Join ``name`` to ``root`` and return the normalised result.
    """
    return os.path.normpath(os.path.join(root, name))


def _fs_error(stage: str, path: str, err: OSError) -> FsPollFilesystemError:
    """
    Build an ``FsPollFilesystemError`` describing ``err``.
    """
    return FsPollFilesystemError(stage, err.filename or path, err.strerror or str(err))


def _list_children(root: str) -> Dict[str, FileIdentity]:
    """
    Return entries for the immediate children of ``root``.

    :param root: The (normalised) root directory.
    :type root: ``str``
    :returns: A dictionary mapping path strings to ``FileIdentity`` objects.
    :rtype: ``Dict[str, FileIdentity]``
    """
    try:
        dir_iter = os.scandir(root)
    except OSError as err:
        raise _fs_error(STAGE_OPEN_ROOT, root, err) from err

    entries = {}
    with dir_iter:
        try:
            dirents = list(dir_iter)
        except OSError as err:
            raise _fs_error(STAGE_READ_DIR, root, err) from err

        for dirent in dirents:
            path = _join(root, dirent.name)
            try:
                st = dirent.stat(follow_symlinks=False)
            except OSError as err:
                raise _fs_error(STAGE_STAT_ENTRY, path, err) from err
            _log_debug_snapshot("Visited '%s'", path)
            entries[path] = FileIdentity.from_stat(path, st)
    return entries


def _raise_walk_error(err: OSError):
    """
    ``os.walk()`` error handler: abort the walk on the first error.
    """
    raise err


def _walk_tree(root: str) -> Dict[str, FileIdentity]:
    """
    Return entries for ``root`` and every path below it.

    Symbolic links are recorded but never descended into.

    :param root: The (normalised) root directory.
    :type root: ``str``
    :returns: A dictionary mapping path strings to ``FileIdentity`` objects.
    :rtype: ``Dict[str, FileIdentity]``
    """
    try:
        root_stat = os.lstat(root)
    except OSError as err:
        raise _fs_error(STAGE_WALK, root, err) from err

    entries = {root: FileIdentity.from_stat(root, root_stat)}
    _log_debug_snapshot("Visited '%s'", root)
    if not stat.S_ISDIR(root_stat.st_mode):
        return entries

    try:
        to_visit = [
            _join(dirpath, name)
            for dirpath, dirnames, filenames in os.walk(
                root, onerror=_raise_walk_error
            )
            for name in itertools.chain(filenames, dirnames)
        ]
    except OSError as err:
        raise _fs_error(STAGE_WALK, root, err) from err

    for pathname in to_visit:
        try:
            path_stat = os.lstat(pathname)
        except OSError as err:
            raise _fs_error(STAGE_STAT_ENTRY, pathname, err) from err
        _log_debug_snapshot("Visited '%s'", pathname)
        entries[pathname] = FileIdentity.from_stat(pathname, path_stat)
    return entries


def capture_snapshot(
    root: Union[str, "os.PathLike[str]"], recursive: bool = False
) -> Snapshot:
    """
    Capture a new ``Snapshot`` of ``root``.

    With ``recursive=False`` only the immediate children of ``root`` are
    recorded, keyed by ``root`` joined with each child name; ``root`` itself
    is not recorded. With ``recursive=True`` ``root`` and every path below
    it are recorded.

    Capture is all-or-nothing: any failure to open, list or stat a path
    raises and no partial snapshot is returned.

    :param root: The directory to capture.
    :type root: ``Union[str, os.PathLike]``
    :param recursive: Walk the whole subtree below ``root``.
    :type recursive: ``bool``
    :returns: The new snapshot.
    :rtype: ``Snapshot``
    :raises: ``FsPollFilesystemError`` if a path cannot be read.
    """
    root = os.path.normpath(os.fspath(root))
    _log_debug("Capturing snapshot of '%s' (recursive=%s)", root, recursive)

    entries = _walk_tree(root) if recursive else _list_children(root)

    _log_debug("Captured %d paths from '%s'", len(entries), root)
    return Snapshot(root, recursive=recursive, entries=entries)
