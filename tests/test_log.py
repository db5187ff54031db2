import logging
import unittest

from teamstore.log import LOGGER_NAME, configure_logging


class TestConfigureLogging(unittest.TestCase):
    def tearDown(self) -> None:
        logger = logging.getLogger(LOGGER_NAME)
        for handler in list(logger.handlers):
            if getattr(handler, "_teamstore_handler", False):
                logger.removeHandler(handler)
        logger.setLevel(logging.NOTSET)

    def test_adds_one_handler(self) -> None:
        logger = configure_logging("debug")
        configure_logging("WARNING")

        marked = [h for h in logger.handlers if getattr(h, "_teamstore_handler", False)]
        self.assertEqual(len(marked), 1)
        self.assertEqual(logger.level, logging.WARNING)

    def test_accepts_int_level(self) -> None:
        self.assertEqual(configure_logging(logging.ERROR).level, logging.ERROR)
