"""Environment driven settings for the OptimalXO server."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

ENV_PREFIX = "OPTIMALXO_"


@dataclass
class Settings:
    host: str = "0.0.0.0"
    port: int = 8000
    move_delay: float = 0.5  # seconds before the computer replies
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ
        defaults = cls()

        def read(name: str, default: str) -> str:
            return env.get(ENV_PREFIX + name, default)

        try:
            port = int(read("PORT", str(defaults.port)))
        except ValueError as exc:
            raise ValueError(f"{ENV_PREFIX}PORT must be an integer") from exc
        try:
            move_delay = float(read("MOVE_DELAY", str(defaults.move_delay)))
        except ValueError as exc:
            raise ValueError(f"{ENV_PREFIX}MOVE_DELAY must be a number") from exc
        if move_delay < 0:
            raise ValueError(f"{ENV_PREFIX}MOVE_DELAY cannot be negative")

        log_level = read("LOG_LEVEL", defaults.log_level).upper()
        if not isinstance(logging.getLevelName(log_level), int):
            raise ValueError(f"Unknown log level {log_level!r}")

        return cls(
            host=read("HOST", defaults.host),
            port=port,
            move_delay=move_delay,
            log_level=log_level,
        )
