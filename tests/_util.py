# Copyright Red Hat
#
# tests/_util.py - File system poller test utilities.
#
# This file is part of the fspoll project.
#
# SPDX-License-Identifier: Apache-2.0
import os
import stat
import zlib

from fspoll.snapshot import FileIdentity, Snapshot

#: A fixed base modification time for synthetic entries (ns)
BASE_MTIME_NS = 1600000000 * 10**9


def make_identity(
    path,
    ino=None,
    dev=2049,
    mtime_ns=BASE_MTIME_NS,
    is_dir=False,
    size=1024,
    no_identity=False,
):
    """
    Factory to create FileIdentity objects without touching disk.

    By default every path gets a distinct inode number derived from its name.
    """
    if ino is None:
        ino = zlib.crc32(path.encode("utf8")) + 1
    mode = (stat.S_IFDIR | 0o755) if is_dir else (stat.S_IFREG | 0o644)
    return FileIdentity(
        path=path,
        mtime_ns=mtime_ns,
        identity=None if no_identity else (dev, ino),
        is_dir=is_dir,
        mode=mode,
        size=size,
    )


def make_snapshot(*entries, root="data", recursive=False):
    """
    Build a ``Snapshot`` from ``FileIdentity`` objects.
    """
    return Snapshot(root, recursive, {entry.path: entry for entry in entries})


def set_mtime(path, seconds):
    """
    Set the access and modification times of ``path`` to ``seconds``.
    """
    os.utime(path, (seconds, seconds), follow_symlinks=False)
