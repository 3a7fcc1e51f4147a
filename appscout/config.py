"""
AppScout Configuration
======================
Run settings for the verification suite.

Values are read, in increasing priority, from:
1. Defaults below
2. A ``.env`` file in the working directory
3. ``APPSCOUT_*`` environment variables
4. Keyword arguments (e.g. CLI overrides)
"""
from functools import lru_cache
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from appscout.paths import DEFAULT_KNOWN_PATHS


class Settings(BaseSettings):
    """Verification run settings."""

    model_config = SettingsConfigDict(
        env_prefix="APPSCOUT_",
        env_file=".env",
        extra="ignore",
    )

    # Target application
    display_name_pattern: str = "Visual Studio Code*"   # wildcard against DisplayName
    exe_file_name: str = "Code.exe"
    process_name: str = "code"
    abort_if_app_missing: bool = False

    # Version assertion
    expected_version: Optional[str] = "1.95.0"
    abort_if_version_mismatch: bool = True

    # Start/stop
    run_start_stop: bool = True
    window_title: Optional[str] = None
    window_class: Optional[str] = None
    start_timeout_seconds: int = 30
    stop_timeout_seconds: int = 5
    settle_seconds: float = 2.0

    # Registry layout for the suite's own data
    base_key: str = r"HKCU\Software\LoginVSI"
    run_demo: bool = True
    env_var_name: str = "LOGINVSI_APP_VERSION"

    # Reporting
    pass_timer_ms: int = 0
    fail_timer_ms: int = 10000

    # Transport
    reg_executable: str = "reg.exe"
    reg_timeout_seconds: float = 10.0

    # Filesystem fallback, {exe} = exe file name, {name} = exe without extension
    known_paths: List[str] = Field(default_factory=lambda: list(DEFAULT_KNOWN_PATHS))

    # Logging
    log_level: str = "INFO"
    log_file: Optional[str] = None

    @property
    def demo_key(self) -> str:
        return self.base_key + r"\Demo"

    @property
    def app_status_key(self) -> str:
        return self.base_key + r"\AppStatus"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
