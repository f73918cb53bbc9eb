# Copyright Red Hat
#
# fspoll/_fspoll.py - File system poller global definitions
#
# This file is part of the fspoll project.
#
# SPDX-License-Identifier: Apache-2.0
"""
Global definitions for the top-level fspoll package.
"""
from typing import Optional
import logging

_log = logging.getLogger("fspoll")

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error

# Fspoll debugging subsystem mask
FSPOLL_DEBUG_SNAPSHOT = 1
FSPOLL_DEBUG_DIFF = 2
FSPOLL_DEBUG_DIFFER = 4
FSPOLL_DEBUG_ALL = FSPOLL_DEBUG_SNAPSHOT | FSPOLL_DEBUG_DIFF | FSPOLL_DEBUG_DIFFER

# Fspoll debugging subsystem names
FSPOLL_SUBSYSTEM_SNAPSHOT = "fspoll.snapshot"
FSPOLL_SUBSYSTEM_DIFF = "fspoll.diff"
FSPOLL_SUBSYSTEM_DIFFER = "fspoll.differ"

_DEBUG_MASK_TO_SUBSYSTEM = {
    FSPOLL_DEBUG_SNAPSHOT: FSPOLL_SUBSYSTEM_SNAPSHOT,
    FSPOLL_DEBUG_DIFF: FSPOLL_SUBSYSTEM_DIFF,
    FSPOLL_DEBUG_DIFFER: FSPOLL_SUBSYSTEM_DIFFER,
}

_debug_subsystems = set()


class SubsystemFilter(logging.Filter):
    """
    Filters DEBUG records based on a set of enabled subsystem names.
    Non-DEBUG records or DEBUG records without a 'subsystem' attribute
    are always passed through.
    """

    def __init__(self, name=""):
        super().__init__(name)
        self.enabled_subsystems = set(_debug_subsystems)

    def filter(self, record):
        # Always pass non-DEBUG messages.
        if record.levelno != logging.DEBUG:
            return True

        # Always pass DEBUG messages that aren't for a specific subsystem.
        if not hasattr(record, "subsystem"):
            return True

        # For subsystem-specific DEBUG messages, check if the subsystem is enabled.
        return record.subsystem in self.enabled_subsystems

    def set_debug_subsystems(self, subsystems):
        """Sets the collection of subsystems to allow."""
        self.enabled_subsystems = set(subsystems)


def get_debug_mask():
    """
    Return the current debug mask for the ``fspoll`` package.

    :returns: The current debug mask value
    :rtype: int
    """
    enabled_subsystems = set(_debug_subsystems)
    fspoll_log = logging.getLogger("fspoll")

    for handler in fspoll_log.handlers:
        for f in handler.filters:
            if isinstance(f, SubsystemFilter):
                enabled_subsystems.update(f.enabled_subsystems)

    mask_map = {v: k for k, v in _DEBUG_MASK_TO_SUBSYSTEM.items()}
    mask = 0
    for subsystem_name in enabled_subsystems:
        mask |= mask_map.get(subsystem_name, 0)
    return mask


def set_debug_mask(mask):
    """
    Set the debug mask for the ``fspoll`` package.

    :param mask: the logical OR of the ``FSPOLL_DEBUG_*``
                 values to log.
    :rtype: None
    """
    # pylint: disable=global-statement
    global _debug_subsystems

    if mask < 0 or mask > FSPOLL_DEBUG_ALL:
        raise ValueError(f"Invalid fspoll debug mask: {mask}")

    enabled_subsystems = []
    for flag, subsystem_name in _DEBUG_MASK_TO_SUBSYSTEM.items():
        if mask & flag:
            enabled_subsystems.append(subsystem_name)

    fspoll_log = logging.getLogger("fspoll")
    for handler in fspoll_log.handlers:
        for f in handler.filters:
            if isinstance(f, SubsystemFilter):
                f.set_debug_subsystems(enabled_subsystems)

    _debug_subsystems = set(enabled_subsystems)


#
# Fspoll exception types
#


class FsPollError(Exception):
    """
    Base class for file system poller errors.
    """


class FsPollConfigError(FsPollError):
    """
    A required option is missing or an option value is invalid.
    """


class FsPollFilesystemError(FsPollError):
    """
    A path could not be opened, listed or stat'ed while capturing a
    snapshot.
    """

    def __init__(self, stage: str, path: Optional[str] = None, reason: str = ""):
        """
        Initialise a new ``FsPollFilesystemError`` exception.

        :param stage: The operation that failed, for example
                      "opening root directory".
        :param path: The path that triggered the failure, if known.
        :param reason: An optional description of the underlying error.
        """
        self.stage, self.path, self.reason = stage, path, reason
        msg = stage
        if path is not None:
            msg += f" '{path}'"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)


__all__ = [
    # Debug mask and subsystem names
    "FSPOLL_DEBUG_SNAPSHOT",
    "FSPOLL_DEBUG_DIFF",
    "FSPOLL_DEBUG_DIFFER",
    "FSPOLL_DEBUG_ALL",
    "FSPOLL_SUBSYSTEM_SNAPSHOT",
    "FSPOLL_SUBSYSTEM_DIFF",
    "FSPOLL_SUBSYSTEM_DIFFER",
    "SubsystemFilter",
    "get_debug_mask",
    "set_debug_mask",
    # Exception types
    "FsPollError",
    "FsPollConfigError",
    "FsPollFilesystemError",
]
