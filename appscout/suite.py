"""
RegistryAppSuite: one verification run.

Steps:
    1. Demo key: write known values under HKCU and assert they read back
    2. Detect the target app (AppLocator)
    3. Write app status under HKCU and set the version env var;
       assert the detected version
    4. Start and stop the app when a launch path is available

Aborts surface as RunAborted; everything else is reported and the run
continues.
"""
import logging
import time
from datetime import datetime, timezone
from typing import Callable, Optional

from appscout.config import Settings
from appscout.environment import set_user_env_var
from appscout.harness import AssertionHarness
from appscout.locator import AppLocator
from appscout.models import NOT_FOUND, DiscoveryResult
from appscout.paths import FileExists, file_exists
from appscout.process import ProcessController
from appscout.registry.port import RegistryPort
from appscout.reporting import Reporter
from appscout.versions import versions_equal

logger = logging.getLogger(__name__)

DEMO_DEFAULT = "LE Demo Root"
DEMO_STRING = "Hello from Login Enterprise"
DEMO_DWORD = 1
NOT_INSTALLED = "notInstalled"
UNKNOWN = "unknown"


def _non_empty(value: Optional[str]) -> bool:
    return value is not None and bool(value.strip())


class RegistryAppSuite:

    def __init__(
        self,
        settings: Settings,
        registry: RegistryPort,
        reporter: Reporter,
        locator: Optional[AppLocator] = None,
        process: Optional[ProcessController] = None,
        sleep: Callable[[float], None] = time.sleep,
        exists: FileExists = file_exists,
    ):
        self.settings = settings
        self.registry = registry
        self.reporter = reporter
        self.harness = AssertionHarness(reporter, settings.pass_timer_ms, settings.fail_timer_ms)
        self.locator = locator or AppLocator(registry, known_paths=settings.known_paths)
        self.process = process or ProcessController(settings.process_name)
        self.sleep = sleep
        self.exists = exists
        self.app: DiscoveryResult = NOT_FOUND

    def run(self) -> DiscoveryResult:
        s = self.settings
        logger.info("== Login Enterprise: Registry & App Assertion Suite ==")
        logger.info(f"Using HKCU base: {s.base_key}")

        if s.run_demo:
            logger.info("[1/4] Preparing demo registry data...")
            self.demo_checks()
        else:
            logger.info("[1/4] Demo checks disabled")

        logger.info("[2/4] Detecting target app from registry...")
        self.app = self.detect()

        logger.info("[3/4] Logging app status and setting env var...")
        self.record_status()
        self.check_version()

        logger.info("[4/4] Conditional START/STOP...")
        self.start_stop()

        logger.info("== Suite complete ==")
        return self.app

    # ─────────────────────────── Step 1 ───────────────────────────

    def ensure_demo_key(self) -> None:
        key = self.settings.demo_key
        self.registry.add_key(key)
        self.registry.set_default(key, DEMO_DEFAULT)
        self.registry.set_string(key, "DemoString", DEMO_STRING)
        self.registry.set_dword(key, "DemoDWORD", DEMO_DWORD)

    def demo_checks(self) -> None:
        reg = self.registry
        key = self.settings.demo_key
        check = self.harness.assert_and_report

        self.ensure_demo_key()
        check("Demo: QueryKey", "Demo key should list values", lambda: _non_empty(reg.query_key(key)))
        check("Demo: QueryValue", "DemoString should be present", lambda: _non_empty(reg.query_value(key, "DemoString")))
        check("Demo: ValueOnly", "DemoString value text should parse", lambda: _non_empty(reg.read_value(key, "DemoString")))
        check("Demo: DefaultValue", "Default value should be present", lambda: _non_empty(reg.read_default(key)))
        check("Demo: KeyExists", "Key should exist", lambda: reg.key_exists(key))
        check("Demo: ValueExists", "DemoDWORD should exist", lambda: reg.value_exists(key, "DemoDWORD"))

        reg.set_string(key, "LastRunUtc", datetime.now(timezone.utc).isoformat())
        self.harness.timer_pass("Demo: LastRunUtc")
        self.reporter.create_event("PASS: Demo LastRunUtc", f"{key}\\LastRunUtc updated")

        check("Demo: DemoDWORD==1", "DemoDWORD must equal 1", lambda: reg.value_equals_dword(key, "DemoDWORD", DEMO_DWORD))
        check(
            "Demo: DemoString==literal",
            "DemoString must match expected text",
            lambda: reg.value_equals_string(key, "DemoString", DEMO_STRING),
        )

    # ─────────────────────────── Step 2 ───────────────────────────

    def detect(self) -> DiscoveryResult:
        s = self.settings
        app = self.locator.locate(s.display_name_pattern, s.exe_file_name)

        if app.found:
            self.harness.timer_pass("AppDetected")
            self.reporter.create_event(
                "PASS: AppDetected",
                f"Found '{app.display_name}' v{app.version}\r\nLaunchPath: {app.launch_path}",
            )
            return app

        status_key = s.app_status_key
        self.registry.add_key(status_key)
        self.registry.set_string(status_key, "Installed", "No")
        present = self.registry.read_values(status_key)
        for stale in ("Version", "LaunchPath"):
            if stale.lower() in present:
                self.registry.delete_value(status_key, stale)
        set_user_env_var(self.registry, s.env_var_name, NOT_INSTALLED)

        self.harness.timer_fail("AppDetected")
        self.reporter.create_event(
            "FAIL: AppDetected",
            f"Could not locate '{s.display_name_pattern}' ({s.exe_file_name}).",
        )
        if s.abort_if_app_missing:
            self.harness.abort(
                f"Required app not installed or not discoverable: '{s.display_name_pattern}' ({s.exe_file_name})."
            )
        logger.info("App not found; continuing without START/STOP.")
        return app

    # ─────────────────────────── Step 3 ───────────────────────────

    def record_status(self) -> None:
        s = self.settings
        app = self.app

        if not app.found:
            self.harness.timer_pass("AppStatus_Logged")
            self.reporter.create_event("INFO: AppStatus_Logged", "App missing; basic status already written.")
            return

        version = app.version if _non_empty(app.version) else UNKNOWN
        self.registry.add_key(s.app_status_key)
        self.registry.set_string(s.app_status_key, "Installed", "Yes")
        self.registry.set_string(s.app_status_key, "Version", version)
        if _non_empty(app.launch_path):
            self.registry.set_string(s.app_status_key, "LaunchPath", app.launch_path)
        set_user_env_var(self.registry, s.env_var_name, version)

        self.harness.timer_pass("AppStatus_Logged")
        self.reporter.create_event("PASS: AppStatus_Logged", f"{s.app_status_key} updated, {s.env_var_name} set.")

    def check_version(self) -> None:
        s = self.settings
        if not self.app.found or not s.expected_version:
            return

        detected = self.app.version
        if versions_equal(detected, s.expected_version):
            self.harness.timer_pass("AppVersion")
            self.reporter.create_event(
                "PASS: AppVersion",
                f"Detected version '{detected}' matches expected '{s.expected_version}'.",
            )
            return

        msg = f"Detected version '{detected}' does not match expected '{s.expected_version}'."
        self.harness.timer_fail("AppVersion")
        self.reporter.create_event("FAIL: AppVersion", msg)
        if s.abort_if_version_mismatch:
            self.harness.abort(msg)

    # ─────────────────────────── Step 4 ───────────────────────────

    def start_stop(self) -> None:
        s = self.settings
        app = self.app
        can_start = app.found and _non_empty(app.launch_path) and self.exists(app.launch_path)

        if not s.run_start_stop:
            logger.info("START/STOP disabled by settings.")
            self.harness.timer_pass("App_StartStop")
            self.reporter.create_event("INFO: App_StartStop", "Start/stop disabled.")
            return

        if not can_start:
            logger.info("No valid LaunchPath. Skipping START/STOP.")
            self.harness.timer_pass("App_StartStop")
            self.reporter.create_event("INFO: App_StartStop", "LaunchPath not available; start/stop skipped.")
            return

        self.reporter.create_event("Starting app", app.launch_path)
        self.process.start(
            app.launch_path,
            timeout=s.start_timeout_seconds,
            window_title=s.window_title,
            window_class=s.window_class,
            continue_on_error=False,
        )
        logger.info(f"App started, waiting {s.settle_seconds:g} seconds...")
        self.sleep(s.settle_seconds)
        self.process.stop(timeout=s.stop_timeout_seconds)

        self.harness.timer_pass("App_StartStop")
        self.reporter.create_event("PASS: App_StartStop", f"Process '{s.process_name}' started and stopped.")
