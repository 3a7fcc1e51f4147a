"""
Process lifecycle for the discovered application: start it, wait for it to
show up, and stop it again.
"""
import logging
import subprocess
import sys
import time
from typing import Callable, List, Optional

import psutil

from appscout.errors import ProcessStartError

logger = logging.getLogger(__name__)


def _name_matches(proc_name: Optional[str], target: str) -> bool:
    if not proc_name:
        return False
    target = target.lower()
    if target.endswith(".exe"):
        target = target[:-4]
    return target in proc_name.lower()


def find_processes(process_name: str) -> List[psutil.Process]:
    """Running processes whose name contains ``process_name`` (case-insensitive)."""
    found: List[psutil.Process] = []
    for proc in psutil.process_iter(["name"]):
        try:
            if _name_matches(proc.info.get("name"), process_name):
                found.append(proc)
        except (psutil.NoSuchProcess, psutil.AccessDenied):
            continue
    return found


def window_present(title: Optional[str] = None, window_class: Optional[str] = None) -> bool:
    """True if a top-level window with this exact title and/or class exists (Windows only)."""
    if not title and not window_class:
        return True
    if sys.platform != "win32":
        return True
    try:
        import win32gui
    except ImportError:
        logger.warning("pywin32 not installed, cannot check window hints")
        return True
    return bool(win32gui.FindWindow(window_class, title))


class ProcessController:
    """
    Starts the application from its launch path and stops it by process name.

    Usage:
        pc = ProcessController("code")
        pc.start(r"C:\\VSCode\\Code.exe", timeout=30)
        pc.stop(timeout=5)
    """

    def __init__(
        self,
        process_name: str,
        check_interval: float = 0.3,
        launcher: Callable[..., subprocess.Popen] = subprocess.Popen,
    ):
        self.process_name = process_name
        self.check_interval = check_interval
        self.launcher = launcher
        self._proc: Optional[subprocess.Popen] = None

    def start(
        self,
        launch_path: str,
        timeout: float = 30,
        window_title: Optional[str] = None,
        window_class: Optional[str] = None,
        continue_on_error: bool = False,
    ) -> bool:
        """
        Launch ``launch_path`` and wait until the process (and window, when
        hinted) appears. On timeout the launched child is terminated before
        the failure is reported.

        Raises:
            ProcessStartError: not up within ``timeout`` and
                ``continue_on_error`` is False.
        """
        logger.info(f"Starting {launch_path} (process '{self.process_name}', timeout {timeout}s)")
        try:
            self._proc = self.launcher([launch_path])
        except OSError as e:
            return self._start_failed(f"Could not launch {launch_path}: {e}", continue_on_error)

        deadline = time.monotonic() + timeout
        while time.monotonic() < deadline:
            if find_processes(self.process_name) and window_present(window_title, window_class):
                logger.info(f"✅ '{self.process_name}' is running")
                return True
            time.sleep(self.check_interval)

        self._reap_launched()
        return self._start_failed(
            f"'{self.process_name}' did not start within {timeout}s", continue_on_error
        )

    def _reap_launched(self, timeout: float = 5) -> None:
        """Terminate (then kill) the child we launched and collect its exit status."""
        proc, self._proc = self._proc, None
        if proc is None or proc.poll() is not None:
            return
        logger.warning(f"Terminating launched pid {proc.pid}")
        proc.terminate()
        try:
            proc.wait(timeout=timeout)
        except subprocess.TimeoutExpired:
            proc.kill()
            proc.wait()

    @staticmethod
    def _start_failed(message: str, continue_on_error: bool) -> bool:
        if continue_on_error:
            logger.warning(f"⚠️  {message}")
            return False
        raise ProcessStartError(message)

    def stop(self, timeout: float = 5) -> int:
        """
        Terminate every matching process, kill whatever is left after
        ``timeout``. Returns how many processes were stopped.
        """
        procs = find_processes(self.process_name)
        if self._proc is not None and self._proc.poll() is None:
            try:
                launched = psutil.Process(self._proc.pid)
                if all(p.pid != launched.pid for p in procs):
                    procs.append(launched)
            except psutil.NoSuchProcess:
                pass

        if not procs:
            logger.info(f"No '{self.process_name}' process to stop")
            return 0

        for proc in procs:
            try:
                proc.terminate()
            except psutil.NoSuchProcess:
                continue
            except psutil.AccessDenied as e:
                logger.warning(f"Cannot terminate pid {proc.pid}: {e}")

        _, alive = psutil.wait_procs(procs, timeout=timeout)
        for proc in alive:
            logger.warning(f"pid {proc.pid} still alive after {timeout}s, killing")
            try:
                proc.kill()
            except psutil.NoSuchProcess:
                pass

        logger.info(f"Stopped {len(procs)} '{self.process_name}' process(es)")
        self._proc = None
        return len(procs)
