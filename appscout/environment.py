"""
Environment variable sink.

Sets a variable for this process and persists it for future sessions under
HKCU\\Environment. Persisting is best effort: a registry failure is logged
and the run carries on.
"""
import logging
import os
from typing import Optional

from appscout.errors import RegistryError
from appscout.registry.port import RegistryPort

logger = logging.getLogger(__name__)

USER_ENVIRONMENT_KEY = r"HKCU\Environment"


def set_user_env_var(registry: RegistryPort, name: str, value: Optional[str]) -> bool:
    """
    Set ``name`` in the current process and in the user's environment.

    Returns:
        True if the value was also persisted, False if only the process
        environment was updated.
    """
    value = value if value is not None else "unknown"
    os.environ[name] = value

    try:
        registry.set_string(USER_ENVIRONMENT_KEY, name, value)
    except RegistryError as e:
        logger.warning(f"⚠️  Could not persist {name} to {USER_ENVIRONMENT_KEY}: {e}")
        return False

    logger.info(f"Set {name}={value}")
    return True
