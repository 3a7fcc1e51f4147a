import os
import subprocess
import unittest
from unittest.mock import Mock, patch

from appscout.errors import RegistryTimeoutError
from appscout.locator import APP_PATHS_ROOT, UNINSTALL_ROOTS, AppLocator
from appscout.models import NOT_FOUND, DiscoveryResult, RegistryView
from appscout.registry.parser import canonical_key
from appscout.registry.reg_exe import RegExeRegistry

from tests.fakes import FakeRegistry

HKCU_UNINSTALL = UNINSTALL_ROOTS[0].path
HKLM_UNINSTALL = UNINSTALL_ROOTS[1].path
WOW_UNINSTALL = UNINSTALL_ROOTS[2].path


def on_disk(*paths):
    return set(paths).__contains__


class TestUninstallStrategies(unittest.TestCase):

    def setUp(self):
        self.reg = FakeRegistry()
        self.reader = Mock(return_value="")

    def locator(self, exists=lambda p: False, **kwargs):
        return AppLocator(self.reg, known_paths=[], exists=exists, version_reader=self.reader, **kwargs)

    def test_vscode_user_install(self):
        self.reg.put(HKCU_UNINSTALL + r"\Other", DisplayName="Notepad++ (64-bit x64)")
        self.reg.put(
            HKCU_UNINSTALL + r"\{771FD6B0-FA20-440A-A002-3B3BAC16DC50}_is1",
            DisplayName="Visual Studio Code (User)",
            DisplayVersion="1.95.0",
            InstallLocation="C:\\VSCode\\",
            DisplayIcon="C:\\VSCode\\Code.exe",
        )

        result = self.locator(exists=on_disk("C:\\VSCode\\Code.exe")).locate("Visual Studio Code*", "Code.exe")

        self.assertTrue(result.found)
        self.assertEqual(result.display_name, "Visual Studio Code (User)")
        self.assertEqual(result.version, "1.95.0")
        self.assertEqual(result.launch_path, "C:\\VSCode\\Code.exe")
        self.assertEqual(result.install_location, "C:\\VSCode\\")
        self.assertTrue(result.source_key.endswith("_is1"))
        self.assertEqual(result.strategy, "uninstall")
        self.reader.assert_not_called()

    def test_first_match_in_store_order_wins(self):
        self.reg.put(HKCU_UNINSTALL + r"\B", DisplayName="Visual Studio Code - Insiders", DisplayVersion="1.96.0")
        self.reg.put(HKCU_UNINSTALL + r"\A", DisplayName="Visual Studio Code", DisplayVersion="1.95.0")
        result = self.locator().locate("Visual Studio Code*", "Code.exe")
        self.assertEqual(result.display_name, "Visual Studio Code - Insiders")

    def test_blank_display_name_is_skipped(self):
        self.reg.put(HKCU_UNINSTALL + r"\Blank", DisplayVersion="9.9")
        self.reg.put(HKCU_UNINSTALL + r"\Real", DisplayName="Git", DisplayVersion="2.44.0")
        result = self.locator().locate("*", "git.exe")
        self.assertEqual(result.display_name, "Git")
        self.assertEqual(result.version, "2.44.0")

    def test_found_without_launch_path(self):
        self.reg.put(HKCU_UNINSTALL + r"\App", DisplayName="Visual Studio Code", InstallLocation="C:\\Gone")
        result = self.locator().locate("Visual Studio Code*", "Code.exe")
        self.assertTrue(result.found)
        self.assertEqual(result.launch_path, "")
        self.assertEqual(result.version, "")

    def test_display_icon_fallback(self):
        self.reg.put(
            HKCU_UNINSTALL + r"\App",
            DisplayName="Visual Studio Code",
            DisplayVersion="1.95.0",
            InstallLocation="C:\\Wrong",
            DisplayIcon='"C:\\Real\\Code.exe",0',
        )
        result = self.locator(exists=on_disk("C:\\Real\\Code.exe")).locate("Visual Studio Code*", "Code.exe")
        self.assertEqual(result.launch_path, "C:\\Real\\Code.exe")
        self.assertEqual(result.install_location, "C:\\Wrong")

    def test_version_from_executable_metadata(self):
        self.reg.put(HKCU_UNINSTALL + r"\App", DisplayName="Visual Studio Code", InstallLocation="C:\\VSCode")
        self.reader.return_value = "1.95.0"
        result = self.locator(exists=on_disk("C:\\VSCode\\Code.exe")).locate("Visual Studio Code*", "Code.exe")
        self.assertEqual(result.version, "1.95.0")
        self.reader.assert_called_once_with("C:\\VSCode\\Code.exe")

    def test_machine_roots_follow_user_root(self):
        self.reg.put(HKCU_UNINSTALL + r"\Other", DisplayName="Something else")
        self.reg.put(WOW_UNINSTALL + r"\App", DisplayName="Visual Studio Code", DisplayVersion="1.90")
        result = self.locator().locate("Visual Studio Code*", "Code.exe")
        self.assertTrue(result.found)
        self.assertTrue(result.source_key.startswith("HKEY_LOCAL_MACHINE\\Software\\WOW6432Node"))

        views = [c[2] for c in self.reg.ops("query_key")]
        self.assertIn(RegistryView.BIT64, views)
        self.assertIn(RegistryView.BIT32, views)

    def test_missing_roots_are_skipped(self):
        result = self.locator().locate("Visual Studio Code*", "Code.exe")
        self.assertIs(result, NOT_FOUND)
        self.assertFalse(result.found)

    def test_timeout_is_not_swallowed(self):
        self.reg.put(HKCU_UNINSTALL + r"\App", DisplayName="Visual Studio Code")
        self.reg.fail("query_key", HKCU_UNINSTALL, RegistryTimeoutError("query", 10))
        with self.assertRaises(RegistryTimeoutError):
            self.locator().locate("Visual Studio Code*", "Code.exe")


class TestStrategyOrder(unittest.TestCase):

    def test_short_circuit(self):
        calls = []

        def strategy(name, result):
            def run(pattern, exe):
                calls.append(name)
                return result
            return (name, run)

        hit = DiscoveryResult(found=True, display_name="App", strategy="second")
        locator = AppLocator(
            FakeRegistry(),
            strategies=[strategy("first", NOT_FOUND), strategy("second", hit), strategy("third", hit)],
        )
        self.assertIs(locator.locate("App*", "app.exe"), hit)
        self.assertEqual(calls, ["first", "second"])

    def test_default_order(self):
        names = [name for name, _ in AppLocator(FakeRegistry()).default_strategies()]
        self.assertEqual(len(names), 5)
        self.assertTrue(names[0].startswith(HKCU_UNINSTALL))
        self.assertIn("/reg:64", names[1])
        self.assertIn("WOW6432Node", names[2])
        self.assertEqual(names[3:], ["app_paths", "known_paths"])

    def test_uninstall_hit_skips_filesystem(self):
        reg = FakeRegistry().put(HKCU_UNINSTALL + r"\App", DisplayName="App")
        exists = Mock(return_value=False)
        AppLocator(reg, exists=exists, version_reader=lambda p: "").locate("App", "app.exe")
        self.assertFalse(any("App Paths" in c[1] for c in reg.calls))
        exists.assert_not_called()


class TestFilesystemStrategies(unittest.TestCase):

    def setUp(self):
        self.reg = FakeRegistry()

    def test_app_paths_64_then_32(self):
        key = APP_PATHS_ROOT + r"\Code.exe"
        self.reg.put(key)
        defaults = {RegistryView.BIT64: '"C:\\Stale\\Code.exe"', RegistryView.BIT32: "C:\\x86\\VSCode\\Code.exe"}
        locator = AppLocator(
            self.reg, known_paths=[], exists=on_disk("C:\\x86\\VSCode\\Code.exe"), version_reader=lambda p: "1.95.0"
        )
        with patch.object(self.reg, "read_default", side_effect=lambda k, view=None: defaults[view]) as read_default:
            result = locator.locate("Visual Studio Code*", "Code.exe")

        self.assertEqual([c[0][1] for c in read_default.call_args_list], [RegistryView.BIT64, RegistryView.BIT32])
        self.assertTrue(result.found)
        self.assertEqual(result.strategy, "app_paths")
        self.assertEqual(result.display_name, "Code.exe")
        self.assertEqual(result.launch_path, "C:\\x86\\VSCode\\Code.exe")
        self.assertEqual(result.version, "1.95.0")
        self.assertEqual(result.source_key, key)

    def test_app_paths_quoted_default(self):
        self.reg.put(APP_PATHS_ROOT + r"\Code.exe")
        self.reg.set_default(APP_PATHS_ROOT + r"\Code.exe", '"C:\\VSCode\\Code.exe"')
        locator = AppLocator(self.reg, known_paths=[], exists=on_disk("C:\\VSCode\\Code.exe"), version_reader=lambda p: "")
        self.assertEqual(locator.from_app_paths("Code.exe").launch_path, "C:\\VSCode\\Code.exe")

    @patch.dict(os.environ, {"LOCALAPPDATA": "C:\\Users\\me\\AppData\\Local"})
    def test_known_paths(self):
        expected = "C:\\Users\\me\\AppData\\Local\\Programs\\Microsoft VS Code\\Code.exe"
        locator = AppLocator(self.reg, exists=on_disk(expected), version_reader=lambda p: "1.95.0")
        result = locator.locate("Visual Studio Code*", "Code.exe")
        self.assertTrue(result.found)
        self.assertEqual(result.strategy, "known_paths")
        self.assertEqual(result.launch_path, expected)
        self.assertEqual(result.display_name, "Code.exe")
        self.assertEqual(result.source_key, "")

    def test_nothing_anywhere(self):
        locator = AppLocator(self.reg, known_paths=["C:\\Nope\\{exe}"], exists=lambda p: False)
        self.assertFalse(locator.locate("Visual Studio Code*", "Code.exe").found)


GERMAN_NOT_FOUND = "FEHLER: Der angegebene Registrierungsschlüssel bzw. Wert wurde nicht gefunden.\r\n"


class TestLocalizedRegExe(unittest.TestCase):
    """reg.exe on a non-English host: every error exits 1 with translated text."""

    ROOT = "HKEY_CURRENT_USER\\Software\\Microsoft\\Windows\\CurrentVersion\\Uninstall"
    LISTINGS = {
        ROOT: [ROOT, ROOT + "\\KB123", ROOT + "\\VSCode"],
        ROOT + "\\KB123": [
            ROOT + "\\KB123",
            "    ParentKeyName    REG_SZ    OperatingSystem",
        ],
        ROOT + "\\VSCode": [
            ROOT + "\\VSCode",
            "    DisplayName    REG_SZ    Visual Studio Code (User)",
            "    DisplayVersion    REG_SZ    1.95.0",
            "    InstallLocation    REG_SZ    C:\\VSCode\\",
        ],
    }

    def reg_exe(self, cmd, **kwargs):
        args = cmd[1:]
        listing = {canonical_key(k): v for k, v in self.LISTINGS.items()}.get(canonical_key(args[1]))
        if args[0] != "query" or "/v" in args or "/ve" in args or listing is None:
            return subprocess.CompletedProcess(cmd, 1, stdout="", stderr=GERMAN_NOT_FOUND)
        return subprocess.CompletedProcess(cmd, 0, stdout="\r\n" + "\r\n".join(listing) + "\r\n\r\n", stderr="")

    @patch("appscout.registry.reg_exe.subprocess.run")
    def test_entry_without_display_name_is_skipped(self, mock_run):
        mock_run.side_effect = self.reg_exe
        locator = AppLocator(
            RegExeRegistry(), known_paths=[], exists=on_disk("C:\\VSCode\\Code.exe"), version_reader=lambda p: ""
        )

        result = locator.locate("Visual Studio Code*", "Code.exe")

        self.assertTrue(result.found)
        self.assertEqual(result.display_name, "Visual Studio Code (User)")
        self.assertEqual(result.version, "1.95.0")
        self.assertEqual(result.launch_path, "C:\\VSCode\\Code.exe")
        per_value_queries = [c[0][0] for c in mock_run.call_args_list if "/v" in c[0][0]]
        self.assertEqual(per_value_queries, [])


if __name__ == "__main__":
    unittest.main()
