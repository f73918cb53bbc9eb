# Copyright Red Hat
#
# fspoll/difftypes.py - File system poller diff types
#
# This file is part of the fspoll project.
#
# SPDX-License-Identifier: Apache-2.0
"""
File system event operation types
"""
from enum import Enum
from typing import Any

#: Serialised name for an unrecognised operation value.
UNKNOWN_OP = "UNKNOWN"


class Op(Enum):
    """
    Enum for file system event operations.
    """

    CREATE = 0
    WRITE = 1
    REMOVE = 2
    RENAME = 3

    def __str__(self):
        return self.name


def op_string(op: Any) -> str:
    """
    Return the serialised name for ``op``.

    :param op: An ``Op`` member or its integer value.
    :returns: One of "CREATE", "WRITE", "REMOVE", "RENAME" or "UNKNOWN".
    :rtype: ``str``
    """
    if isinstance(op, Op):
        return op.name
    try:
        return Op(op).name
    except (TypeError, ValueError):
        return UNKNOWN_OP
