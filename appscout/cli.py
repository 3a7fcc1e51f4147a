#!/usr/bin/env python3
"""
AppScout command-line interface.

Usage:
    appscout run                                   # Full verification suite
    appscout run --json                            # ... and print the run report
    appscout run --pattern "Notepad++*" --exe notepad++.exe --expected 8.6
    appscout locate "Visual Studio Code*" --exe Code.exe
    appscout compare 1.95 1.95.0                   # Exit 0 if equal, 1 if not

Exit codes: 0 success, 1 error, 2 run aborted.
"""
import argparse
import json
import logging
import sys
from typing import List, Optional

from appscout.config import Settings, get_settings
from appscout.errors import AppScoutError, RunAborted
from appscout.locator import AppLocator
from appscout.registry.reg_exe import RegExeRegistry
from appscout.reporting import LoggingReporter
from appscout.suite import RegistryAppSuite
from appscout.versions import versions_equal

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_ABORTED = 2


def configure_logging(level: str = "INFO", log_file: Optional[str] = None) -> None:
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=handlers,
        force=True,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="appscout",
        description="Locate an installed application from the Windows registry and verify it",
    )
    parser.add_argument("--log-level", help="Logging level (default from settings)")
    parser.add_argument("--log-file", help="Also write logs to this file")
    sub = parser.add_subparsers(dest="command", required=True)

    run = sub.add_parser("run", help="Run the full verification suite")
    run.add_argument("--pattern", help="DisplayName wildcard")
    run.add_argument("--exe", help="Executable file name")
    run.add_argument("--process", help="Process name for start/stop")
    run.add_argument("--expected", help="Expected version")
    run.add_argument("--abort-if-missing", action="store_true", default=None, help="Abort when the app is not found")
    run.add_argument("--no-demo", action="store_true", help="Skip the demo key checks")
    run.add_argument("--no-start", action="store_true", help="Skip start/stop")
    run.add_argument("--json", action="store_true", help="Print the run report as JSON")

    locate = sub.add_parser("locate", help="Locate an app and print the result as JSON")
    locate.add_argument("pattern", help="DisplayName wildcard")
    locate.add_argument("--exe", required=True, help="Executable file name")

    compare = sub.add_parser("compare", help="Compare two version strings")
    compare.add_argument("detected")
    compare.add_argument("expected")

    return parser


def _settings_from_args(args: argparse.Namespace) -> Settings:
    overrides = {}
    if getattr(args, "pattern", None):
        overrides["display_name_pattern"] = args.pattern
    if getattr(args, "exe", None):
        overrides["exe_file_name"] = args.exe
    if getattr(args, "process", None):
        overrides["process_name"] = args.process
    if getattr(args, "expected", None):
        overrides["expected_version"] = args.expected
    if getattr(args, "abort_if_missing", None):
        overrides["abort_if_app_missing"] = True
    if getattr(args, "no_demo", False):
        overrides["run_demo"] = False
    if getattr(args, "no_start", False):
        overrides["run_start_stop"] = False
    if args.log_level:
        overrides["log_level"] = args.log_level
    if args.log_file:
        overrides["log_file"] = args.log_file
    if not overrides:
        return get_settings()
    return Settings(**overrides)


def cmd_run(settings: Settings, as_json: bool = False) -> int:
    registry = RegExeRegistry(settings.reg_executable, settings.reg_timeout_seconds)
    reporter = LoggingReporter()
    suite = RegistryAppSuite(settings, registry, reporter)

    code = EXIT_OK
    try:
        suite.run()
    except RunAborted as e:
        reporter.report.aborted = e.message
        logger.error(f"❌ Run aborted: {e.message}")
        code = EXIT_ABORTED
    except AppScoutError as e:
        logger.error(f"❌ Run failed: {e}")
        code = EXIT_ERROR

    if as_json:
        report = reporter.report.to_dict()
        report["app"] = suite.app.to_dict()
        print(json.dumps(report, indent=2))
    return code


def cmd_locate(settings: Settings) -> int:
    registry = RegExeRegistry(settings.reg_executable, settings.reg_timeout_seconds)
    locator = AppLocator(registry, known_paths=settings.known_paths)
    try:
        result = locator.locate(settings.display_name_pattern, settings.exe_file_name)
    except AppScoutError as e:
        logger.error(f"❌ Locate failed: {e}")
        return EXIT_ERROR
    print(json.dumps(result.to_dict(), indent=2))
    return EXIT_OK if result.found else EXIT_ERROR


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    if args.command == "compare":
        configure_logging(args.log_level or "INFO", args.log_file)
        equal = versions_equal(args.detected, args.expected)
        print("equal" if equal else "different")
        return EXIT_OK if equal else EXIT_ERROR

    settings = _settings_from_args(args)
    configure_logging(settings.log_level, settings.log_file)

    if args.command == "locate":
        return cmd_locate(settings)
    return cmd_run(settings, as_json=args.json)


if __name__ == "__main__":
    sys.exit(main())
