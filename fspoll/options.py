# Copyright Red Hat
#
# fspoll/options.py - File system poller options
#
# This file is part of the fspoll project.
#
# SPDX-License-Identifier: Apache-2.0
"""
File system poller options.
"""
from configparser import ConfigParser
from dataclasses import dataclass, fields
from typing import Optional, Union
from argparse import Namespace
from os.path import exists
import logging

from ._fspoll import FsPollConfigError

_log = logging.getLogger(__name__)

_log_debug = _log.debug
_log_info = _log.info
_log_warn = _log.warning
_log_error = _log.error

#: Differ configuration file section
_FSPOLL_CFG_DIFFER = "Differ"

#: Root configuration key
_FSPOLL_CFG_ROOT = "Root"

#: Recursive configuration key
_FSPOLL_CFG_RECURSIVE = "Recursive"


@dataclass(frozen=True)
class DifferOptions:
    """
    File system poller options.
    """

    #: Directory to track
    root: Optional[str] = None
    #: Walk the whole subtree below ``root`` instead of its immediate children
    recursive: bool = False

    def __str__(self):
        """
        Return a human readable string representation of this
        ``DifferOptions`` instance.

        :returns: A human readable string.
        :rtype: ``str``
        """
        return "\n".join(f"{key}={val}" for key, val in self.__dict__.items())

    def validate(self):
        """
        Check that this ``DifferOptions`` instance can be used to construct
        a ``Differ``.

        :raises: ``FsPollConfigError`` if a required option is missing.
        """
        if not self.root:
            raise FsPollConfigError("Root option is required")

    @classmethod
    def from_file(cls, config_file: str) -> "DifferOptions":
        """
        Load ``DifferOptions`` from an INI-style configuration file located
        at ``config_file``.

        A missing file yields the default options.

        :param config_file: Path to the configuration file.
        :type config_file: ``str``
        :returns: A ``DifferOptions`` instance initialised from
                  ``config_file``.
        :rtype: ``DifferOptions``
        """
        if not exists(config_file):
            return cls()

        _log_debug("Loading configuration from '%s'", config_file)
        cfg = ConfigParser()
        cfg.read([config_file])

        root = None
        recursive = False
        if cfg.has_section(_FSPOLL_CFG_DIFFER):
            section = cfg[_FSPOLL_CFG_DIFFER]
            if cfg.has_option(_FSPOLL_CFG_DIFFER, _FSPOLL_CFG_ROOT):
                root = section[_FSPOLL_CFG_ROOT].strip() or None
            if cfg.has_option(_FSPOLL_CFG_DIFFER, _FSPOLL_CFG_RECURSIVE):
                try:
                    recursive = section.getboolean(_FSPOLL_CFG_RECURSIVE)
                except ValueError as err:
                    raise FsPollConfigError(
                        f"Invalid {_FSPOLL_CFG_RECURSIVE} value in "
                        f"{config_file}: {err}"
                    ) from err

        return cls(root=root, recursive=recursive)

    @classmethod
    def from_cmd_args(cls, cmd_args: Namespace) -> "DifferOptions":
        """
        Initialise DifferOptions from command line arguments.

        :param cmd_args: The command line arguments.
        :type cmd_args: ``Namespace``
        :returns: A new ``DifferOptions`` instance
        :rtype: ``DifferOptions``
        """

        def get_value(name: str) -> Union[bool, Optional[str]]:
            """
            Get a value from ``cmd_args``, normalising booleans.

            :param name: The name of the argument.
            :type name: ``str``
            :returns: The argument value.
            :rtype: ``Union[bool, Optional[str]]``
            """
            attr = getattr(cmd_args, name)
            if name == "recursive":
                return bool(attr)
            return attr

        field_names = {f.name for f in fields(cls)}
        kwargs = {
            name: get_value(name) for name in field_names if hasattr(cmd_args, name)
        }
        options = cls(**kwargs)
        _log_debug("Initialised DifferOptions from arguments: %s", repr(options))
        return options
