# Copyright Red Hat
#
# fspoll/differ.py - File system poller differ
#
# This file is part of the fspoll project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Top-level fspoll interface.
"""
from enum import Enum
from typing import List, Optional
import logging

from ._fspoll import (
    FSPOLL_SUBSYSTEM_DIFFER,
    FsPollFilesystemError,
)
from .engine import Event, diff
from .options import DifferOptions
from .snapshot import Snapshot, capture_snapshot

_log = logging.getLogger(__name__)

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error


def _log_debug_differ(msg, *args, **kwargs):
    """A wrapper for differ subsystem debug logs."""
    _log.debug(msg, *args, extra={"subsystem": FSPOLL_SUBSYSTEM_DIFFER}, **kwargs)


class DifferState(Enum):
    """
    Enum for ``Differ`` states.
    """

    #: Holding a valid baseline snapshot with no pending error
    IDLE = "idle"
    #: Holding a latched error from ``update()``
    FAILED = "failed"


class Differ:
    """
    Tracks a directory tree and reports the changes made to it between
    calls.

    Each call to ``poll()`` captures a new snapshot, diffs it against the
    stored baseline and returns the events. ``update()`` does the same but
    buffers the events, and any capture error, for the next ``poll()``.

    A ``Differ`` has no internal locking and must not be shared between
    threads without external synchronisation.
    """

    def __init__(self, options: Optional[DifferOptions] = None):
        """
        Initialise a new ``Differ`` and capture the initial snapshot.

        :param options: Options to control this ``Differ`` instance.
        :type options: ``DifferOptions``
        :raises: ``FsPollConfigError`` if no root is configured, or
                 ``FsPollFilesystemError`` if the root cannot be read.
        """
        options = options or DifferOptions()
        options.validate()

        self.options: DifferOptions = options
        self._events: List[Event] = []
        self._state: DifferState = DifferState.IDLE
        self._error: Optional[FsPollFilesystemError] = None

        try:
            self._latest: Snapshot = capture_snapshot(
                options.root, recursive=options.recursive
            )
        except FsPollFilesystemError as err:
            raise FsPollFilesystemError(
                "getting initial file system snapshot", options.root, str(err)
            ) from err

        _log_debug_differ(
            "Initialised Differ for '%s' with %d paths",
            self._latest.root,
            len(self._latest),
        )

    def __repr__(self) -> str:
        return (
            f"Differ(root={self.root!r}, recursive={self.recursive!r}, "
            f"state={self._state.value}, pending={self.pending})"
        )

    @property
    def root(self) -> str:
        """The root directory tracked by this ``Differ``."""
        return self.options.root

    @property
    def recursive(self) -> bool:
        """``True`` if this ``Differ`` tracks the whole subtree."""
        return self.options.recursive

    @property
    def state(self) -> DifferState:
        """The current ``DifferState``."""
        return self._state

    @property
    def error(self) -> Optional[FsPollFilesystemError]:
        """The latched error in the ``FAILED`` state, or ``None``."""
        return self._error if self._state == DifferState.FAILED else None

    @property
    def pending(self) -> int:
        """The number of events buffered by ``update()``."""
        return len(self._events)

    def latest(self) -> Snapshot:
        """
        Return the current baseline snapshot.

        :returns: The most recently captured snapshot.
        :rtype: ``Snapshot``
        """
        return self._latest

    def _capture(self) -> Snapshot:
        _log_debug_differ("Creating new snapshot of '%s'", self.root)
        snapshot = capture_snapshot(self.root, recursive=self.recursive)
        _log_debug_differ("Created new snapshot with %d paths", len(snapshot))
        return snapshot

    def _latch(self, err: FsPollFilesystemError):
        """
        Enter the ``FAILED`` state holding ``err``.
        """
        self._error = err
        self._state = DifferState.FAILED

    def poll(self) -> List[Event]:
        """
        Diff the current state of the tree against the stored baseline.

        Returns any events buffered by ``update()`` followed by the events
        for the new snapshot, clears the buffer and makes the new snapshot
        the baseline. If the snapshot cannot be captured the baseline and
        buffer are left unchanged.

        :returns: The detected events.
        :rtype: ``List[Event]``
        :raises: ``FsPollFilesystemError`` if the snapshot cannot be
                 captured, or the error latched by a failed ``update()``.
        """
        if self._state == DifferState.FAILED:
            _log_debug_differ("Differ is failed: %s", self._error)
            raise self._error

        try:
            current = self._capture()
        except FsPollFilesystemError as err:
            _log_error("Failed to poll '%s': %s", self.root, err)
            raise FsPollFilesystemError(
                "getting file system snapshot", self.root, str(err)
            ) from err

        events = self._events + diff(self._latest, current)
        self._events = []
        self._latest = current

        _log_debug_differ("Poll returned %d events", len(events))
        return events

    def update(self):
        """
        Diff the current state of the tree against the stored baseline and
        buffer the events for the next call to ``poll()``.

        A capture failure is latched and raised by the next ``poll()``;
        once failed, further calls do nothing and the first error is kept.
        """
        if self._state == DifferState.FAILED:
            _log_debug_differ("Ignoring update of failed Differ")
            return

        try:
            current = self._capture()
        except FsPollFilesystemError as err:
            _log_warn("Failed to update '%s': %s", self.root, err)
            self._latch(err)
            return

        events = diff(self._latest, current)
        self._events.extend(events)
        self._latest = current
        _log_debug_differ(
            "Update buffered %d events (%d pending)", len(events), self.pending
        )
