#!/usr/bin/python3
# Copyright Red Hat
#
# polltest.py - simple example driver for fspoll
#
# This file is part of the fspoll project.
#
# SPDX-License-Identifier: Apache-2.0
from argparse import ArgumentParser
import logging
import sys
import os

import fspoll

from fspoll import Differ, DifferOptions, FsPollError

LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
}


def main():
    parser = ArgumentParser(prog="polltest.py")
    parser.add_argument(
        "-l",
        "--log-level",
        default="info",
        help=f"Set log level ({', '.join(LOG_LEVELS.keys())})",
        choices=LOG_LEVELS.keys(),
    )
    parser.add_argument(
        "-r",
        "--recursive",
        help="Track the whole subtree below ROOT",
        action="store_true",
    )
    parser.add_argument(
        "root",
        type=str,
        help="Directory to track",
    )
    args = parser.parse_args()
    fspoll_log = logging.getLogger("fspoll")
    formatter = logging.Formatter('%(levelname)s - %(message)s')
    fspoll_log.setLevel(LOG_LEVELS[args.log_level])
    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    console_handler.addFilter(fspoll.SubsystemFilter("fspoll"))
    fspoll_log.addHandler(console_handler)
    if args.log_level == "debug":
        fspoll.set_debug_mask(fspoll.FSPOLL_DEBUG_ALL)

    options = DifferOptions.from_cmd_args(args)

    try:
        differ = Differ(options)
    except FsPollError as err:
        print(f"Cannot track '{args.root}': {err}", file=sys.stderr)
        sys.exit(1)

    foo = os.path.join(args.root, "foo")
    bar = os.path.join(args.root, "bar")
    try:
        # Create a file and update the differ.
        with open(foo, "w", encoding="utf8") as f:
            differ.update()

            # Write data to the new file and update the differ.
            f.write("blah")
            f.flush()
            differ.update()

        # Rename the file and update the differ.
        os.rename(foo, bar)
        differ.update()

        # Remove the file and update the differ.
        os.unlink(bar)
        differ.update()

        events = differ.poll()
        print(f"Found {len(events)} events:")
        for event in events:
            print(event.json())
    except FsPollError as err:
        print(f"Polling '{args.root}' failed: {err}", file=sys.stderr)
        sys.exit(1)
    except (KeyboardInterrupt, BrokenPipeError):
        # Graceful early exit on user abort or broken pipe
        return


if __name__ == "__main__":
    main()
