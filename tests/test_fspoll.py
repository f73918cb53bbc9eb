# Copyright Red Hat
#
# tests/test_fspoll.py - fspoll package unit tests
#
# This file is part of the fspoll project.
#
# SPDX-License-Identifier: Apache-2.0
import unittest
import logging

import fspoll


log = logging.getLogger()


class FsPollTestsSimple(unittest.TestCase):
    """Test fspoll module"""

    def setUp(self):
        log.debug("Preparing %s", self._testMethodName)

    def tearDown(self):
        log.debug("Tearing down (%s)", self._testMethodName)
        fspoll.set_debug_mask(0)

    def test_set_debug_mask(self):
        fspoll.set_debug_mask(fspoll.FSPOLL_DEBUG_ALL)
        self.assertEqual(fspoll.get_debug_mask(), fspoll.FSPOLL_DEBUG_ALL)

    def test_set_debug_mask_bad_mask(self):
        with self.assertRaises(ValueError):
            fspoll.set_debug_mask(fspoll.FSPOLL_DEBUG_ALL + 1)
        with self.assertRaises(ValueError):
            fspoll.set_debug_mask(-1)

    def test_SubsystemFilter(self):
        # Start with no subsystems enabled
        fspoll.set_debug_mask(0)
        sf = fspoll.SubsystemFilter("fspoll")
        self.assertEqual(sf.enabled_subsystems, set())
        # Enable a couple and ensure new filters initialise from cache
        fspoll.set_debug_mask(fspoll.FSPOLL_DEBUG_DIFF | fspoll.FSPOLL_DEBUG_DIFFER)
        sf2 = fspoll.SubsystemFilter("fspoll")
        self.assertIn(fspoll.FSPOLL_SUBSYSTEM_DIFF, sf2.enabled_subsystems)
        self.assertIn(fspoll.FSPOLL_SUBSYSTEM_DIFFER, sf2.enabled_subsystems)
        self.assertNotIn(fspoll.FSPOLL_SUBSYSTEM_SNAPSHOT, sf2.enabled_subsystems)

    def test_SubsystemFilter_filter(self):
        fspoll.set_debug_mask(fspoll.FSPOLL_DEBUG_DIFF)
        sf = fspoll.SubsystemFilter("fspoll")

        def _record(level, subsystem=None):
            record = logging.LogRecord("fspoll", level, __file__, 1, "msg", (), None)
            if subsystem:
                record.subsystem = subsystem
            return record

        self.assertTrue(
            sf.filter(_record(logging.INFO, fspoll.FSPOLL_SUBSYSTEM_SNAPSHOT))
        )
        self.assertTrue(sf.filter(_record(logging.DEBUG)))
        self.assertTrue(sf.filter(_record(logging.DEBUG, fspoll.FSPOLL_SUBSYSTEM_DIFF)))
        self.assertFalse(
            sf.filter(_record(logging.DEBUG, fspoll.FSPOLL_SUBSYSTEM_SNAPSHOT))
        )

    def test_get_debug_mask_from_handler(self):
        fspoll.set_debug_mask(0)
        fspoll_log = logging.getLogger("fspoll")
        handler = logging.NullHandler()
        sf = fspoll.SubsystemFilter("fspoll")
        sf.set_debug_subsystems([fspoll.FSPOLL_SUBSYSTEM_SNAPSHOT])
        handler.addFilter(sf)
        fspoll_log.addHandler(handler)
        try:
            self.assertEqual(fspoll.get_debug_mask(), fspoll.FSPOLL_DEBUG_SNAPSHOT)
            fspoll.set_debug_mask(fspoll.FSPOLL_DEBUG_DIFFER)
            self.assertEqual(sf.enabled_subsystems, {fspoll.FSPOLL_SUBSYSTEM_DIFFER})
        finally:
            fspoll_log.removeHandler(handler)

    def test_FsPollFilesystemError(self):
        err = fspoll.FsPollFilesystemError(
            "opening root directory", "data", "No such file or directory"
        )
        self.assertEqual(err.stage, "opening root directory")
        self.assertEqual(err.path, "data")
        self.assertEqual(
            str(err), "opening root directory 'data': No such file or directory"
        )
        self.assertIsInstance(err, fspoll.FsPollError)
        self.assertEqual(
            str(fspoll.FsPollFilesystemError("walking file system")),
            "walking file system",
        )

    def test_exception_hierarchy(self):
        self.assertTrue(issubclass(fspoll.FsPollConfigError, fspoll.FsPollError))
        self.assertTrue(issubclass(fspoll.FsPollFilesystemError, fspoll.FsPollError))

    def test_public_api(self):
        for name in fspoll.__all__:
            self.assertTrue(hasattr(fspoll, name), name)
        self.assertTrue(fspoll.__version__)
