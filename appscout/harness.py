"""
Assertion harness: turns boolean checks into PASS / FAIL / ERROR outcomes.

    PASS   check returned True   -> pass timer (0)      + "PASS: name" event
    FAIL   check returned False  -> fail timer (10000)  + "FAIL: name" event
    ERROR  check raised          -> fail timer          + "ERROR: name" event,
                                    then the run is aborted

Timer names go through sanitize_timer_name so any label can be used.
"""
import logging
from enum import Enum
from typing import Callable, Dict, Optional

from appscout.errors import RunAborted
from appscout.reporting import Reporter, sanitize_timer_name

logger = logging.getLogger(__name__)

PASS_TIMER_MS = 0
FAIL_TIMER_MS = 10000


class Outcome(Enum):
    PASS = "PASS"
    FAIL = "FAIL"
    ERROR = "ERROR"


class AssertionHarness:

    def __init__(self, reporter: Reporter, pass_timer_ms: int = PASS_TIMER_MS, fail_timer_ms: int = FAIL_TIMER_MS):
        self.reporter = reporter
        self.pass_timer_ms = pass_timer_ms
        self.fail_timer_ms = fail_timer_ms
        self.outcomes: Dict[str, Outcome] = {}

    def timer_pass(self, name: str) -> None:
        self.reporter.set_timer(sanitize_timer_name(name), self.pass_timer_ms)

    def timer_fail(self, name: str) -> None:
        self.reporter.set_timer(sanitize_timer_name(name), self.fail_timer_ms)

    def abort(self, message: str) -> None:
        logger.error(f"ABORT: {message}")
        raise RunAborted(message)

    def assert_and_report(
        self,
        name: str,
        expectation: str,
        check: Callable[[], bool],
        abort_on_fail: bool = False,
        failure_message: Optional[str] = None,
    ) -> Outcome:
        """
        Run ``check`` and report its outcome.

        Args:
            name: Check label; also the (sanitized) timer name.
            expectation: Human description used in log lines and events.
            check: Zero-argument predicate.
            abort_on_fail: Abort the run when the check returns False.
            failure_message: Abort message for that case (defaults to the
                expectation).

        Raises:
            RunAborted: the check raised, or failed with ``abort_on_fail``.
        """
        try:
            ok = bool(check())
        except RunAborted:
            raise
        except Exception as e:
            self.outcomes[name] = Outcome.ERROR
            self.timer_fail(name)
            msg = f"{expectation}. Exception: {e}"
            logger.error(f"[ERROR] {name} - {msg}")
            self.reporter.create_event(f"ERROR: {name}", msg)
            self.abort(f"{name} threw: {e}")

        if ok:
            self.outcomes[name] = Outcome.PASS
            self.timer_pass(name)
            logger.info(f"[PASS] {name} - {expectation}")
            self.reporter.create_event(f"PASS: {name}", expectation)
            return Outcome.PASS

        self.outcomes[name] = Outcome.FAIL
        self.timer_fail(name)
        logger.warning(f"[FAIL] {name} - {expectation}")
        self.reporter.create_event(f"FAIL: {name}", expectation)
        if abort_on_fail:
            self.abort(failure_message or expectation)
        return Outcome.FAIL
