# Copyright Red Hat
#
# tests/test_options.py - DifferOptions tests.
#
# This file is part of the fspoll project.
#
# SPDX-License-Identifier: Apache-2.0
import unittest
import tempfile
import os
from argparse import Namespace

from fspoll import FsPollConfigError
from fspoll.options import DifferOptions


class TestDifferOptions(unittest.TestCase):
    def test_DifferOptions_defaults(self):
        opts = DifferOptions()
        self.assertIsNone(opts.root)
        self.assertFalse(opts.recursive)

    def test_DifferOptions__str__(self):
        opts = DifferOptions(root="data", recursive=True)
        s = str(opts)
        self.assertIn("root=data", s)
        self.assertIn("recursive=True", s)

    def test_validate(self):
        DifferOptions(root="data").validate()
        with self.assertRaisesRegex(FsPollConfigError, "Root option is required"):
            DifferOptions().validate()
        with self.assertRaisesRegex(FsPollConfigError, "Root option is required"):
            DifferOptions(root="").validate()

    def test_from_cmd_args(self):
        """Test initialization from argparse Namespace."""
        args = Namespace(root="data", recursive=1, unknown_arg="ignored")
        opts = DifferOptions.from_cmd_args(args)
        self.assertEqual(opts.root, "data")
        self.assertIs(opts.recursive, True)

    def test_from_cmd_args_defaults(self):
        opts = DifferOptions.from_cmd_args(Namespace(root="data"))
        self.assertFalse(opts.recursive)


class TestDifferOptionsFromFile(unittest.TestCase):
    def setUp(self):
        self._tmpdir = tempfile.TemporaryDirectory()
        self.config_file = os.path.join(self._tmpdir.name, "fspoll.conf")

    def tearDown(self):
        self._tmpdir.cleanup()

    def _write(self, text):
        with open(self.config_file, "w", encoding="utf8") as f:
            f.write(text)

    def test_from_file_missing(self):
        self.assertEqual(DifferOptions.from_file(self.config_file), DifferOptions())

    def test_from_file(self):
        self._write("[Differ]\nRoot = /srv/data\nRecursive = yes\n")
        opts = DifferOptions.from_file(self.config_file)
        self.assertEqual(opts, DifferOptions(root="/srv/data", recursive=True))

    def test_from_file_no_section(self):
        self._write("[Other]\nRoot = /srv/data\n")
        self.assertEqual(DifferOptions.from_file(self.config_file), DifferOptions())

    def test_from_file_empty_root(self):
        self._write("[Differ]\nRoot =\n")
        opts = DifferOptions.from_file(self.config_file)
        self.assertIsNone(opts.root)
        with self.assertRaises(FsPollConfigError):
            opts.validate()

    def test_from_file_bad_recursive(self):
        self._write("[Differ]\nRoot = data\nRecursive = sometimes\n")
        with self.assertRaisesRegex(FsPollConfigError, "Invalid Recursive value"):
            DifferOptions.from_file(self.config_file)
