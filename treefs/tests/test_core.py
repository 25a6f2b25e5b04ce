"""
treefs Core Tests

Covers the exception hierarchy, logging, configuration and the
command-line entry point.
"""

import contextlib
import io
import json
import os
import tempfile
import unittest


class TestExceptions(unittest.TestCase):
    """Test the exception hierarchy."""

    def test_filesystem_exception(self):
        """Test FileSystemException creation and properties."""
        from treefs.exceptions import FileSystemException

        exc = FileSystemException("Test error", path="notes", error_code=4000)

        self.assertEqual(exc.message, "Test error")
        self.assertEqual(exc.error_code, 4000)
        self.assertEqual(exc.context["path"], "notes")
        self.assertIn("4000", str(exc))

    def test_hierarchy(self):
        from treefs.exceptions import (
            FileSystemException,
            PersistenceError,
            PersistenceIOError,
            MalformedRecordError,
            ShellException,
            HistoryIndexError,
            ConfigException,
            ConfigLoadError,
        )

        self.assertTrue(issubclass(PersistenceIOError, PersistenceError))
        self.assertTrue(issubclass(MalformedRecordError, FileSystemException))
        self.assertTrue(issubclass(HistoryIndexError, ShellException))
        self.assertTrue(issubclass(ConfigLoadError, ConfigException))

    def test_error_codes(self):
        from treefs.exceptions import (
            NodeNotFoundError,
            PermissionDeniedError,
            NotAFileError,
            NotADirectoryError,
            UnknownCommandError,
            UsageError,
        )

        self.assertEqual(NodeNotFoundError("x").error_code, 4001)
        self.assertEqual(PermissionDeniedError("x", operation="read").error_code, 4003)
        self.assertEqual(NotAFileError("x").error_code, 4008)
        self.assertEqual(NotADirectoryError("x").error_code, 4009)
        self.assertEqual(UnknownCommandError("x").error_code, 5001)
        self.assertEqual(UsageError("mv", "mv <old> <new>").message, "usage: mv <old> <new>")

    def test_node_not_found_scope(self):
        from treefs.exceptions import NodeNotFoundError

        exc = NodeNotFoundError("7", scope="tree")
        self.assertEqual(exc.scope, "tree")
        self.assertEqual(exc.message, "Item not found: 7")


class TestLogger(unittest.TestCase):
    """Test the logging system."""

    def test_logger_creation(self):
        """Test logger creation and singleton."""
        from treefs.logger import Logger, get_logger

        log1 = Logger('test1')
        log2 = get_logger('test1')

        self.assertIs(log1, log2)
        self.assertEqual(log1.name, 'test1')

    def test_log_levels(self):
        """Test log level ordering and lookup."""
        from treefs.logger import LogLevel

        self.assertTrue(LogLevel.ERROR > LogLevel.INFO)
        self.assertTrue(LogLevel.DEBUG < LogLevel.WARNING)
        self.assertEqual(LogLevel.from_name('info'), LogLevel.INFO)
        with self.assertRaises(ValueError):
            LogLevel.from_name('loud')

    def test_formatter(self):
        """Context and subsystem appear in formatted records."""
        import logging
        from treefs.logger import LogFormatter

        record = logging.LogRecord(
            'treefs.vfs', logging.DEBUG, __file__, 1, "Created file", None, None
        )
        record.subsystem = 'vfs'
        record.context = {'ino': 3}

        text = LogFormatter(use_colors=False).format(record)

        self.assertIn("DEBUG", text)
        self.assertIn("[vfs] Created file", text)
        self.assertIn("{ino=3}", text)

    def test_records_reach_handlers(self):
        from treefs.logger import get_logger

        with self.assertLogs('treefs.audit', level='INFO') as captured:
            get_logger('audit').info("Saved filesystem", context={'records': 2})

        self.assertEqual(captured.records[0].context, {'records': 2})
        self.assertEqual(captured.records[0].subsystem, 'audit')


class TestConfig(unittest.TestCase):
    """Test the configuration system."""

    def setUp(self):
        from treefs.core.config_loader import ConfigLoader

        self.loader = ConfigLoader()
        self.loader.reset()
        self._tmp = tempfile.TemporaryDirectory()

    def tearDown(self):
        self.loader.reset()
        self._tmp.cleanup()

    def write_config(self, data):
        path = os.path.join(self._tmp.name, 'config.json')
        with open(path, 'w', encoding='utf-8') as f:
            if isinstance(data, str):
                f.write(data)
            else:
                json.dump(data, f)
        return path

    def test_default_config(self):
        """Test default configuration values."""
        from treefs.core.config_loader import Config

        config = Config()

        self.assertEqual(config.filesystem.default_file_mode, "644")
        self.assertEqual(config.filesystem.default_dir_mode, "755")
        self.assertEqual(config.persistence.state_file, "filesystem.txt")
        self.assertFalse(config.persistence.strict_load)
        self.assertEqual(config.logging.level, "WARNING")

    def test_singleton(self):
        from treefs.core.config_loader import ConfigLoader, get_config

        self.assertIs(ConfigLoader(), self.loader)
        self.assertIs(get_config(), self.loader.config)

    def test_load(self):
        path = self.write_config({
            'filesystem': {'default_file_mode': '600'},
            'persistence': {'strict_load': True},
        })

        config = self.loader.load(path)

        self.assertTrue(self.loader.loaded)
        self.assertEqual(config.filesystem.default_file_mode, '600')
        self.assertEqual(config.filesystem.default_dir_mode, '755')
        self.assertTrue(config.persistence.strict_load)

    def test_load_errors(self):
        from treefs.exceptions import ConfigLoadError

        with self.assertRaises(ConfigLoadError):
            self.loader.load(os.path.join(self._tmp.name, 'missing.json'))
        with self.assertRaises(ConfigLoadError):
            self.loader.load(self.write_config("{not json"))
        with self.assertRaises(ConfigLoadError):
            self.loader.load(self.write_config("[1, 2]"))

    def test_validation_errors(self):
        from treefs.exceptions import ConfigValidationError

        bad = [
            {'filesystem': {'colour': 'blue'}},
            {'filesystem': {'default_dir_mode': '888'}},
            {'logging': {'level': 'LOUD'}},
            {'shell': 'not an object'},
        ]
        for data in bad:
            with self.subTest(data=data):
                with self.assertRaises(ConfigValidationError):
                    self.loader.load(self.write_config(data))

    def test_get_set(self):
        from treefs.exceptions import ConfigValidationError

        self.loader.set('persistence.state_file', 'other.txt')
        self.assertEqual(self.loader.get('persistence.state_file'), 'other.txt')
        self.assertIsNone(self.loader.get('persistence.nothing'))
        self.assertEqual(self.loader.get('nope.key', 'fallback'), 'fallback')

        self.loader.set('logging.level', 'debug')
        self.assertEqual(self.loader.get('logging.level'), 'DEBUG')

        with self.assertRaises(ConfigValidationError):
            self.loader.set('persistence.unknown', 1)
        with self.assertRaises(ConfigValidationError):
            self.loader.set('filesystem.default_file_mode', 'abc')

    def test_to_dict(self):
        data = self.loader.to_dict()
        self.assertEqual(data['shell']['prompt_suffix'], '$ ')
        self.assertEqual(set(data), {'filesystem', 'persistence', 'logging', 'shell'})


class TestMain(unittest.TestCase):
    """Test the command-line entry point."""

    def setUp(self):
        from treefs.core.config_loader import ConfigLoader

        ConfigLoader().reset()
        self._tmp = tempfile.TemporaryDirectory()

    def tearDown(self):
        from treefs.core.config_loader import ConfigLoader

        ConfigLoader().reset()
        self._tmp.cleanup()

    def test_parser(self):
        from treefs.main import build_parser

        args = build_parser().parse_args(['--state-file', 's.txt', '--log-level', 'debug'])
        self.assertEqual(args.state_file, 's.txt')
        self.assertEqual(args.log_level, 'DEBUG')
        self.assertIsNone(args.script_path)

    def test_script(self):
        from treefs.main import main

        state = os.path.join(self._tmp.name, 'state.txt')
        script = os.path.join(self._tmp.name, 'script.txt')
        with open(script, 'w', encoding='utf-8') as f:
            f.write("mkdir docs\ncd docs\ntouch notes hello\ncd /\nfind notes\nsave\n")

        out = io.StringIO()
        with contextlib.redirect_stdout(out):
            code = main(['--script', script, '--state-file', state])

        self.assertEqual(code, 0)
        self.assertIn("Found: FILE notes", out.getvalue())
        self.assertTrue(os.path.exists(state))

    def test_script_failure_exit_code(self):
        from treefs.main import main

        script = os.path.join(self._tmp.name, 'script.txt')
        with open(script, 'w', encoding='utf-8') as f:
            f.write("rm ghost\n")

        out = io.StringIO()
        with contextlib.redirect_stdout(out):
            code = main(['--script', script])

        self.assertEqual(code, 1)
        self.assertIn("Item not found: ghost", out.getvalue())

    def test_bad_config(self):
        from treefs.main import main

        err = io.StringIO()
        with contextlib.redirect_stderr(err):
            code = main(['--config', os.path.join(self._tmp.name, 'none.json')])

        self.assertEqual(code, 1)
        self.assertIn("Configuration file not found", err.getvalue())


if __name__ == '__main__':
    unittest.main()
