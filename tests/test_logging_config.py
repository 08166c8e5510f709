"""
Tests for logging configuration

Run with:
    python -m pytest tests/test_logging_config.py -v
"""

import logging
import unittest

from logging_config import PACKAGE_LOGGER, WERKZEUG_LOGGER, configure_logging, get_logger


class TestConfigureLogging(unittest.TestCase):

    def tearDown(self):
        logging.getLogger(PACKAGE_LOGGER).setLevel(logging.NOTSET)
        logging.getLogger(WERKZEUG_LOGGER).setLevel(logging.NOTSET)
        configure_logging(logging.WARNING)

    def test_string_level(self):
        configure_logging("debug")
        self.assertEqual(logging.getLogger().level, logging.DEBUG)

    def test_package_level(self):
        configure_logging(logging.INFO, package_level="ERROR")
        logger = get_logger("trajectory_service.sampler")
        self.assertFalse(logger.isEnabledFor(logging.WARNING))
        self.assertTrue(get_logger("demo").isEnabledFor(logging.INFO))

    def test_package_level_follows_root_by_default(self):
        configure_logging(logging.INFO, package_level="ERROR")
        configure_logging(logging.INFO)
        self.assertTrue(get_logger("trajectory_service.sampler").isEnabledFor(logging.INFO))

    def test_quiet_requests(self):
        configure_logging(logging.DEBUG, quiet_requests=True)
        self.assertEqual(logging.getLogger(WERKZEUG_LOGGER).level, logging.WARNING)

    def test_single_console_handler(self):
        configure_logging(logging.INFO)
        configure_logging(logging.INFO)
        self.assertEqual(len(logging.getLogger().handlers), 1)


if __name__ == "__main__":
    unittest.main()
