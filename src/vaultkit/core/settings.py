"""Environment-driven defaults for VaultKit.

- ``VAULTKIT_SCRYPT_PRESET`` picks the scrypt cost preset used by
  :func:`default_scrypt_config` (``realtime``, ``low``, ``mid``, ``high`` or
  ``paranoid``; defaults to ``low``).
- ``VAULTKIT_LOG_LEVEL`` picks the level used by
  :func:`vaultkit.logging_config.configure_logging` when none is passed.
"""

from __future__ import annotations

import logging
import os

from vaultkit.core.exceptions import MalformedConfig

SCRYPT_PRESET_ENV = "VAULTKIT_SCRYPT_PRESET"
LOG_LEVEL_ENV = "VAULTKIT_LOG_LEVEL"

DEFAULT_SCRYPT_PRESET = "low"
DEFAULT_LOG_LEVEL = "INFO"


def scrypt_preset_name() -> str:
    return os.getenv(SCRYPT_PRESET_ENV, DEFAULT_SCRYPT_PRESET).strip().lower()


def default_scrypt_config():
    """Return the preset selected by the environment."""
    # imported here: scrypt imports exceptions from core
    from vaultkit.security.scrypt import ScryptConfig

    return ScryptConfig.preset(scrypt_preset_name())


def log_level() -> int:
    name = os.getenv(LOG_LEVEL_ENV, DEFAULT_LOG_LEVEL).strip().upper()
    level = logging.getLevelName(name)
    if not isinstance(level, int):
        raise MalformedConfig(f"Unknown log level: {name}")
    return level
