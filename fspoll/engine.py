# Copyright Red Hat
#
# fspoll/engine.py - File system poller diff engine
#
# This file is part of the fspoll project.
#
# SPDX-License-Identifier: Apache-2.0
"""
File system diff engine
"""
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional
import logging
import json

from ._fspoll import FSPOLL_SUBSYSTEM_DIFF
from .difftypes import Op, op_string
from .snapshot import FileIdentity, Snapshot

_log = logging.getLogger(__name__)

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error


def _log_debug_diff(msg, *args, **kwargs):
    """A wrapper for diff subsystem debug logs."""
    _log.debug(msg, *args, extra={"subsystem": FSPOLL_SUBSYSTEM_DIFF}, **kwargs)


@dataclass(frozen=True)
class Event:
    """
    A single detected file system change.
    """

    #: The operation that was detected
    op: Op
    #: The current (or, for ``REMOVE``, the former) path
    path: str
    #: The path before a rename: the empty string for other operations
    old_path: str = ""
    #: The ``FileIdentity`` of the resulting or removed entry
    info: Optional[FileIdentity] = field(default=None, compare=False, repr=False)

    def __str__(self) -> str:
        """
        Return a string representation of this ``Event``.

        :returns: A human readable representation of this ``Event``.
        :rtype: ``str``
        """
        if self.op == Op.RENAME:
            return f"{op_string(self.op)} {self.old_path} -> {self.path}"
        return f"{op_string(self.op)} {self.path}"

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert this ``Event`` into a dictionary representation suitable for
        encoding as JSON. File metadata is not included.

        :returns: A dictionary mapping this instance's keys to values.
        :rtype: ``Dict[str, Any]``
        """
        return {
            "op": op_string(self.op),
            "path": self.path,
            "oldpath": self.old_path,
        }

    def json(self, pretty=False) -> str:
        """
        Return a string representation of this ``Event`` in JSON notation.

        :param pretty: Indent JSON to be human readable.
        :type pretty: ``bool``
        :returns: A JSON representation of this instance.
        :rtype: ``str``
        """
        return json.dumps(self.to_dict(), indent=4 if pretty else None)


def _event_sort_key(event: Event):
    op = event.op.value if isinstance(event.op, Op) else -1
    return (event.path, op, event.old_path)


def sort_events(events: Iterable[Event]) -> List[Event]:
    """
    Return ``events`` sorted by path, then operation.

    :param events: The events to sort.
    :type events: ``Iterable[Event]``
    :returns: A new sorted list.
    :rtype: ``List[Event]``
    """
    return sorted(events, key=_event_sort_key)


def events_to_json(events: Iterable[Event], pretty: bool = False) -> str:
    """
    Encode ``events`` as a JSON array.

    :param events: The events to encode.
    :type events: ``Iterable[Event]``
    :param pretty: Indent JSON to be human readable.
    :type pretty: ``bool``
    :returns: A JSON representation of ``events``.
    :rtype: ``str``
    """
    return json.dumps(
        [event.to_dict() for event in events], indent=4 if pretty else None
    )


def diff(older: Snapshot, newer: Snapshot) -> List[Event]:
    """
    Compute the events that transform ``older`` into ``newer``.

    ``older`` must have been captured before ``newer`` from the same root
    with the same recursion setting.

    A path present in both snapshots whose modification time increased is
    a ``WRITE``. Paths only in ``newer`` are candidate creates and paths
    only in ``older`` are candidate removes. A candidate remove and create
    that refer to the same file object are paired into a single ``RENAME``;
    pairing visits removes in path order and takes the first create in path
    order with an equal identity, so each candidate joins at most one
    rename. Unpaired candidates become ``CREATE`` and ``REMOVE`` events.

    :param older: The earlier snapshot.
    :type older: ``Snapshot``
    :param newer: The later snapshot.
    :type newer: ``Snapshot``
    :returns: The detected events sorted by path, then operation.
    :rtype: ``List[Event]``
    """
    events: List[Event] = []
    creates: Dict[str, FileIdentity] = {}
    deletes: Dict[str, FileIdentity] = {}

    for path, new_info in newer.items():
        old_info = older.get(path)
        if old_info is None:
            creates[path] = new_info
        elif new_info.mtime_ns > old_info.mtime_ns:
            _log_debug_diff("Detected write to '%s'", path)
            events.append(Event(Op.WRITE, path, info=new_info))

    for path, old_info in older.items():
        if path not in newer:
            deletes[path] = old_info

    _log_debug_diff(
        "Resolving renames: %d candidate creates, %d candidate removes",
        len(creates),
        len(deletes),
    )

    # Index candidate creates by identity; entries without one never pair.
    creates_by_identity = defaultdict(list)
    for path in sorted(creates):
        identity = creates[path].identity
        if identity is not None:
            creates_by_identity[identity].append(path)

    for del_path in sorted(deletes):
        del_info = deletes[del_path]
        candidates = creates_by_identity.get(del_info.identity)
        if not candidates:
            continue
        create_path = candidates.pop(0)
        create_info = creates.pop(create_path)
        del deletes[del_path]
        _log_debug_diff("Detected rename '%s' -> '%s'", del_path, create_path)
        events.append(Event(Op.RENAME, create_path, del_path, info=create_info))

    for path, info in creates.items():
        _log_debug_diff("Detected create of '%s'", path)
        events.append(Event(Op.CREATE, path, info=info))

    for path, info in deletes.items():
        _log_debug_diff("Detected remove of '%s'", path)
        events.append(Event(Op.REMOVE, path, info=info))

    _log_debug("Found %d events", len(events))
    return sort_events(events)
