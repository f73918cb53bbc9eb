# Copyright Red Hat
#
# fspoll/__init__.py - File system poller package initialisation
#
# This file is part of the fspoll project.
#
# SPDX-License-Identifier: Apache-2.0
"""
File system poller top-level package.

Captures snapshots of a directory tree and reports the create, write,
remove and rename events between them. The main entry points are
``Differ`` and ``DifferOptions``.
"""
from ._fspoll import *  # noqa: F401, F403
from ._fspoll import __all__ as _fspoll_all
from .difftypes import Op
from .differ import Differ, DifferState
from .engine import Event, diff, events_to_json, sort_events
from .options import DifferOptions
from .snapshot import FileIdentity, Snapshot, capture_snapshot

__version__ = "0.1.0"

__all__ = _fspoll_all + [
    "Differ",
    "DifferOptions",
    "DifferState",
    "Event",
    "FileIdentity",
    "Op",
    "Snapshot",
    "capture_snapshot",
    "diff",
    "events_to_json",
    "sort_events",
]
