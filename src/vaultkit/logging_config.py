"""Lightweight logging setup for applications embedding VaultKit."""

import logging
import sys
from typing import Optional

from vaultkit.core.settings import log_level


def configure_logging(level: Optional[int] = None) -> None:
    # Configure root logger once; keep output simple for terminals.
    logging.basicConfig(
        level=log_level() if level is None else level,
        format="[%(asctime)s] %(levelname)s %(name)s: %(message)s",
        datefmt="%H:%M:%S",
        stream=sys.stdout,
    )
