"""
Unit tests for flowtee.config and flowtee.exit_codes
"""
import importlib
import logging
import os
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

import flowtee.config
from flowtee.config import (
    get_config_dir,
    get_default_workflow,
    get_program_name,
    get_workflow_path,
    probe_terminal_size,
    resolve_log_level,
)
from flowtee.exit_codes import (
    GENERAL_ERROR,
    INTERRUPTED,
    CommandError,
    ConfigError,
    RemoteDispatchError,
    SpawnError,
    StepNotFoundError,
    get_exit_code_for_exception,
)


class TestConfigManagement(unittest.TestCase):
    """Test runtime settings"""

    def setUp(self):
        """Set up test environment"""
        self.temp_dir = tempfile.mkdtemp()
        self.saved = {
            key: os.environ.pop(key, None)
            for key in ('HOME', 'FLOWTEE_CONFIG_DIR', 'FLOWTEE_PROGRAM', 'FLOWTEE_WORKFLOW')
        }
        os.environ['HOME'] = self.temp_dir

    def tearDown(self):
        """Clean up test environment"""
        for key, value in self.saved.items():
            os.environ.pop(key, None)
            if value is not None:
                os.environ[key] = value
        os.rmdir(self.temp_dir)

    def test_default_config_dir(self):
        """Test ~/.config/flowtee is the default"""
        self.assertEqual(get_config_dir(), Path(self.temp_dir) / '.config' / 'flowtee')

    def test_config_dir_override(self):
        """Test FLOWTEE_CONFIG_DIR wins"""
        os.environ['FLOWTEE_CONFIG_DIR'] = '/etc/flowtee'
        self.assertEqual(get_config_dir(), Path('/etc/flowtee'))

    def test_workflow_path(self):
        """Test named workflows map to YAML files"""
        os.environ['FLOWTEE_CONFIG_DIR'] = '/etc/flowtee'
        self.assertEqual(get_workflow_path('docx'), Path('/etc/flowtee/docx.yaml'))

    def test_program_name(self):
        """Test the re-invocation program name"""
        self.assertEqual(get_program_name(), 'flowtee')
        os.environ['FLOWTEE_PROGRAM'] = 'ft'
        self.assertEqual(get_program_name(), 'ft')

    def test_default_workflow(self):
        """Test the default workflow name"""
        self.assertEqual(get_default_workflow(), 'default')
        os.environ['FLOWTEE_WORKFLOW'] = 'docx'
        self.assertEqual(get_default_workflow(), 'docx')

    @patch('flowtee.config.os.get_terminal_size', side_effect=OSError)
    def test_terminal_size_unavailable(self, mock_size):
        """Test probing without a terminal returns None"""
        self.assertIsNone(probe_terminal_size())

    @patch('flowtee.config.os.get_terminal_size', return_value=os.terminal_size((120, 40)))
    def test_terminal_size(self, mock_size):
        """Test probing returns (columns, rows)"""
        self.assertEqual(probe_terminal_size(), (120, 40))


    def test_log_level_names(self):
        """Test level names resolve case-insensitively"""
        self.assertEqual(resolve_log_level('DEBUG'), logging.DEBUG)
        self.assertEqual(resolve_log_level('warning'), logging.WARNING)

    def test_unknown_log_level_falls_back_to_info(self):
        """Test a misspelled level does not break startup"""
        self.assertEqual(resolve_log_level('verbose'), logging.INFO)
        self.assertEqual(resolve_log_level(''), logging.INFO)

    def test_import_with_unknown_log_level(self):
        """Test the module loads with FLOWTEE_LOG_LEVEL set to garbage"""
        with patch.dict(os.environ, {'FLOWTEE_LOG_LEVEL': 'verbose'}):
            module = importlib.reload(flowtee.config)
        self.assertEqual(module.DEFAULT_PROGRAM, 'flowtee')


class TestExitCodes(unittest.TestCase):
    """Test exception to exit code mapping"""

    def test_flowtee_errors_exit_1(self):
        """Test every engine error maps to the general error code"""
        for error in (ConfigError("x"), StepNotFoundError("a"),
                      SpawnError("x"), RemoteDispatchError("x")):
            self.assertEqual(get_exit_code_for_exception(error), GENERAL_ERROR)

    def test_custom_exit_code(self):
        """Test CommandError carries a custom code"""
        self.assertEqual(get_exit_code_for_exception(CommandError("x", exit_code=5)), 5)

    def test_interrupt_and_unknown(self):
        """Test KeyboardInterrupt and arbitrary exceptions"""
        self.assertEqual(get_exit_code_for_exception(KeyboardInterrupt()), INTERRUPTED)
        self.assertEqual(get_exit_code_for_exception(ValueError()), GENERAL_ERROR)

    def test_step_not_found_message(self):
        """Test the step name is in the message"""
        self.assertEqual(str(StepNotFoundError('build')), "Step 'build' not found in workflow")


if __name__ == '__main__':
    unittest.main()
