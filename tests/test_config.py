import logging
import tempfile
import unittest
from pathlib import Path

from popgenkit import (
    AlleleConfig,
    Genotype,
    Individual,
    InsufficientSamplesError,
    LoggerManager,
    PopGenKitError,
    get_default_config,
    reset_default_config,
    set_blank_alleles,
    set_default_config,
)
from popgenkit.utils.misc import as_individuals, unique_in_order


class TestAlleleConfig(unittest.TestCase):
    def tearDown(self):
        reset_default_config()

    def test_default_blanks(self):
        config = AlleleConfig()
        for allele in ("", " ", "-", "N", "?"):
            self.assertTrue(config.is_blank(allele))
        for allele in ("A", "NN", "0", "--"):
            self.assertFalse(config.is_blank(allele))

    def test_invalid_pattern(self):
        with self.assertRaises(ValueError):
            AlleleConfig(blank_pattern="[unclosed")
        with self.assertRaises(ValueError):
            AlleleConfig(blank_pattern=5)

    def test_set_and_reset_default(self):
        config = set_blank_alleles("0")
        self.assertIs(get_default_config(), config)
        self.assertEqual(config.to_dict(), {"blank_pattern": "0"})

        reset_default_config()
        self.assertEqual(get_default_config(), AlleleConfig())

        with self.assertRaises(TypeError):
            set_default_config("0")

    def test_explicit_config_ignores_default(self):
        g = Genotype("m1", ["A", "0"])
        own = AlleleConfig(blank_pattern="A")
        set_blank_alleles("0")
        self.assertEqual(g.get_alleles(), ["A"])
        self.assertEqual(g.get_alleles(config=own), ["0"])


class TestMisc(unittest.TestCase):
    def test_as_individuals(self):
        ind = Individual("1")
        self.assertEqual(as_individuals(ind), [ind])
        self.assertEqual(as_individuals((ind,)), [ind])
        with self.assertRaises(TypeError):
            as_individuals("1")
        with self.assertRaises(TypeError):
            as_individuals([ind, "2"])

    def test_unique_in_order(self):
        self.assertEqual(unique_in_order(["b", "a", "b", "c", "a"]), ["b", "a", "c"])


class TestErrorsAndLogging(unittest.TestCase):
    def test_exception_messages(self):
        err = InsufficientSamplesError(1)
        self.assertIsInstance(err, PopGenKitError)
        self.assertIn("1", str(err))

    def test_set_level(self):
        logman = LoggerManager("popgenkit.tests.level", verbose=True)
        logman.set_level("DEBUG")
        self.assertEqual(logman.get_logger().level, logging.DEBUG)
        with self.assertRaises(ValueError):
            logman.set_level("LOUD")

    def test_quiet_manager_raises_info_to_error(self):
        logman = LoggerManager("popgenkit.tests.quiet", verbose=False)
        logman.set_level("INFO")
        self.assertEqual(logman.get_logger().level, logging.ERROR)

    def test_file_logging(self):
        with tempfile.TemporaryDirectory() as tmp:
            log_file = Path(tmp) / "run.log"
            logman = LoggerManager(
                "popgenkit.tests.file", log_file=log_file, to_file=True, to_console=False
            )
            logger = logman.get_logger()
            logger.info("hello")
            for handler in list(logger.handlers):
                handler.flush()
                handler.close()
                logman.remove_handler(handler)
            self.assertIn("hello", log_file.read_text())


if __name__ == "__main__":
    unittest.main()
