"""
AppLocator: finds one installed application from the registry.

RESOLUTION ORDER (first hit wins, later strategies are never called):
    1. HKCU Uninstall
    2. HKLM Uninstall, 64-bit view
    3. HKLM Uninstall, 32-bit view (WOW6432Node)
    4. HKLM App Paths\\<exe>, 64-bit then 32-bit view
    5. Known install folders on disk

Uninstall roots are listed one level deep only; a recursive listing of the
whole tree is far too slow. Children are tried in the order the store
reports them, and the first DisplayName matching the wildcard wins.

Usage:
    locator = AppLocator(RegExeRegistry())
    result  = locator.locate("Visual Studio Code*", "Code.exe")
"""
import dataclasses
import logging
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from appscout.matching import compile_wildcard
from appscout.models import NOT_FOUND, DiscoveryResult, RegistryView, SearchRoot
from appscout.paths import (
    DEFAULT_KNOWN_PATHS,
    FileExists,
    expand_candidates,
    file_exists,
    first_existing,
    resolve_launch_path,
)
from appscout.registry.port import RegistryPort
from appscout.version_resolver import VersionReader, exe_product_version, metadata_version, version_from_values

logger = logging.getLogger(__name__)

UNINSTALL_ROOTS: Tuple[SearchRoot, ...] = (
    SearchRoot(r"HKCU\Software\Microsoft\Windows\CurrentVersion\Uninstall"),
    SearchRoot(r"HKLM\Software\Microsoft\Windows\CurrentVersion\Uninstall", RegistryView.BIT64),
    SearchRoot(r"HKLM\Software\WOW6432Node\Microsoft\Windows\CurrentVersion\Uninstall", RegistryView.BIT32),
)

APP_PATHS_ROOT = r"HKLM\SOFTWARE\Microsoft\Windows\CurrentVersion\App Paths"
APP_PATHS_VIEWS: Tuple[RegistryView, ...] = (RegistryView.BIT64, RegistryView.BIT32)

# (name, callable(pattern, exe_file_name) -> DiscoveryResult)
Strategy = Tuple[str, Callable[[str, str], DiscoveryResult]]


class AppLocator:

    def __init__(
        self,
        registry: RegistryPort,
        known_paths: Optional[Sequence[str]] = None,
        exists: FileExists = file_exists,
        version_reader: VersionReader = exe_product_version,
        strategies: Optional[List[Strategy]] = None,
    ):
        self.registry = registry
        self.known_paths = list(known_paths) if known_paths is not None else list(DEFAULT_KNOWN_PATHS)
        self.exists = exists
        self.version_reader = version_reader
        self.strategies: List[Strategy] = strategies if strategies is not None else self.default_strategies()

    def default_strategies(self) -> List[Strategy]:
        strategies: List[Strategy] = []
        for root in UNINSTALL_ROOTS:
            strategies.append((self._root_label(root), self._uninstall_strategy(root)))
        strategies.append(("app_paths", lambda pattern, exe: self.from_app_paths(exe)))
        strategies.append(("known_paths", lambda pattern, exe: self.from_known_paths(exe)))
        return strategies

    @staticmethod
    def _root_label(root: SearchRoot) -> str:
        view = f" (/reg:{root.view.value})" if root.view else ""
        return f"{root.path}{view}"

    def _uninstall_strategy(self, root: SearchRoot) -> Callable[[str, str], DiscoveryResult]:
        return lambda pattern, exe: self.from_uninstall_root(root, pattern, exe)

    # ─────────────────────────── Entry point ───────────────────────────

    def locate(self, display_name_pattern: str, exe_file_name: str) -> DiscoveryResult:
        """Run the strategies in order and return the first hit (or NOT_FOUND)."""
        logger.info(f"Locating '{display_name_pattern}' ({exe_file_name})")
        for name, strategy in self.strategies:
            result = strategy(display_name_pattern, exe_file_name)
            if result.found:
                logger.info(
                    f"✅ Found '{result.display_name}' v{result.version or '?'} via {name}"
                    f" -> {result.launch_path or '<no launch path>'}"
                )
                return result
            logger.debug(f"No match via {name}")

        logger.info(f"'{display_name_pattern}' ({exe_file_name}) not found")
        return NOT_FOUND

    # ─────────────────────────── Strategies ───────────────────────────

    def from_uninstall_root(self, root: SearchRoot, display_name_pattern: str, exe_file_name: str) -> DiscoveryResult:
        if not self.registry.key_exists(root.path, root.view):
            return NOT_FOUND

        matches = compile_wildcard(display_name_pattern)
        for subkey in self.registry.list_subkeys(root.path, root.view):
            # one listing per child; KB and component keys often have no DisplayName
            values = self.registry.read_values(subkey, root.view)
            name = values.get("displayname", "")
            if not name.strip():
                continue
            if matches(name):
                return self._describe_uninstall_entry(subkey, name, values, exe_file_name)

        return NOT_FOUND

    def _describe_uninstall_entry(
        self,
        subkey: str,
        display_name: str,
        values: Dict[str, str],
        exe_file_name: str,
    ) -> DiscoveryResult:
        result = DiscoveryResult(found=True, display_name=display_name, source_key=subkey, strategy="uninstall")

        result = dataclasses.replace(result, version=version_from_values(values))

        install_location = values.get("installlocation", "")
        result = dataclasses.replace(result, install_location=install_location)

        launch_path = resolve_launch_path(install_location, exe_file_name, exists=self.exists)
        if not launch_path:
            icon = values.get("displayicon", "")
            launch_path = resolve_launch_path(None, exe_file_name, display_icon=icon, exists=self.exists)
        result = dataclasses.replace(result, launch_path=launch_path)

        if not result.version and launch_path:
            result = dataclasses.replace(result, version=metadata_version(launch_path, self.version_reader))

        return result

    def from_app_paths(self, exe_file_name: str) -> DiscoveryResult:
        key = f"{APP_PATHS_ROOT}\\{exe_file_name}"
        for view in APP_PATHS_VIEWS:
            if not self.registry.key_exists(key, view):
                continue
            path = (self.registry.read_default(key, view) or "").strip().strip('"')
            if path and self.exists(path):
                return self._from_executable(path, exe_file_name, "app_paths", source_key=key)
        return NOT_FOUND

    def from_known_paths(self, exe_file_name: str) -> DiscoveryResult:
        path = first_existing(expand_candidates(self.known_paths, exe_file_name), self.exists)
        if not path:
            return NOT_FOUND
        return self._from_executable(path, exe_file_name, "known_paths")

    def _from_executable(self, path: str, exe_file_name: str, strategy: str, source_key: str = "") -> DiscoveryResult:
        return DiscoveryResult(
            found=True,
            display_name=exe_file_name,
            version=metadata_version(path, self.version_reader),
            launch_path=path,
            source_key=source_key,
            strategy=strategy,
        )
