import io
import json
import unittest
from unittest.mock import patch

from appscout.cli import EXIT_ABORTED, EXIT_ERROR, EXIT_OK, main
from appscout.config import Settings
from appscout.errors import RegistryTimeoutError, RunAborted
from appscout.models import NOT_FOUND, DiscoveryResult


@patch("appscout.cli.configure_logging")
class TestCli(unittest.TestCase):

    def run_main(self, argv):
        with patch("sys.stdout", new_callable=io.StringIO) as out:
            code = main(argv)
        return code, out.getvalue()

    def test_compare(self, _):
        self.assertEqual(self.run_main(["compare", "1.95", "1.95.0"]), (EXIT_OK, "equal\n"))
        self.assertEqual(self.run_main(["compare", "1.95.1", "1.95.0"]), (EXIT_ERROR, "different\n"))

    @patch("appscout.cli.RegExeRegistry")
    @patch("appscout.cli.AppLocator")
    def test_locate(self, mock_locator, mock_registry, _):
        mock_locator.return_value.locate.return_value = DiscoveryResult(
            found=True, display_name="Git", version="2.44.0", launch_path="C:\\Git\\git.exe", strategy="uninstall"
        )
        code, out = self.run_main(["locate", "Git*", "--exe", "git.exe"])
        self.assertEqual(code, EXIT_OK)
        self.assertEqual(json.loads(out)["version"], "2.44.0")
        mock_locator.return_value.locate.assert_called_once_with("Git*", "git.exe")

    @patch("appscout.cli.RegExeRegistry")
    @patch("appscout.cli.AppLocator")
    def test_locate_not_found(self, mock_locator, mock_registry, _):
        mock_locator.return_value.locate.return_value = NOT_FOUND
        code, out = self.run_main(["locate", "Nothing*", "--exe", "none.exe"])
        self.assertEqual(code, EXIT_ERROR)
        self.assertFalse(json.loads(out)["found"])

    @patch("appscout.cli.RegExeRegistry")
    @patch("appscout.cli.RegistryAppSuite")
    def test_run_passes_overrides(self, mock_suite, mock_registry, _):
        mock_suite.return_value.app = NOT_FOUND
        code, _out = self.run_main(["run", "--pattern", "Notepad++*", "--exe", "notepad++.exe", "--no-demo", "--no-start"])
        self.assertEqual(code, EXIT_OK)
        settings = mock_suite.call_args[0][0]
        self.assertEqual(settings.display_name_pattern, "Notepad++*")
        self.assertEqual(settings.exe_file_name, "notepad++.exe")
        self.assertFalse(settings.run_demo)
        self.assertFalse(settings.run_start_stop)

    @patch("appscout.cli.get_settings")
    @patch("appscout.cli.RegExeRegistry")
    @patch("appscout.cli.RegistryAppSuite")
    def test_run_without_overrides_uses_shared_settings(self, mock_suite, mock_registry, mock_get_settings, _):
        shared = Settings(_env_file=None)
        mock_get_settings.return_value = shared
        mock_suite.return_value.app = NOT_FOUND
        self.assertEqual(self.run_main(["run"])[0], EXIT_OK)
        self.assertIs(mock_suite.call_args[0][0], shared)

        mock_get_settings.reset_mock()
        self.run_main(["run", "--exe", "git.exe"])
        mock_get_settings.assert_not_called()

    @patch("appscout.cli.RegExeRegistry")
    @patch("appscout.cli.RegistryAppSuite")
    def test_run_aborted(self, mock_suite, mock_registry, _):
        mock_suite.return_value.run.side_effect = RunAborted("Required app not installed")
        mock_suite.return_value.app = NOT_FOUND
        code, out = self.run_main(["run", "--json"])
        self.assertEqual(code, EXIT_ABORTED)
        report = json.loads(out)
        self.assertEqual(report["aborted"], "Required app not installed")
        self.assertFalse(report["app"]["found"])

    @patch("appscout.cli.RegExeRegistry")
    @patch("appscout.cli.RegistryAppSuite")
    def test_run_transport_error(self, mock_suite, mock_registry, _):
        mock_suite.return_value.run.side_effect = RegistryTimeoutError("query HKCU", 10)
        mock_suite.return_value.app = NOT_FOUND
        code, out = self.run_main(["run"])
        self.assertEqual(code, EXIT_ERROR)
        self.assertEqual(out, "")


if __name__ == "__main__":
    unittest.main()
