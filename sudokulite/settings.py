from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

ENV_MAX_GUESSES = "SUDOKULITE_MAX_GUESSES"
ENV_LOG_LEVEL = "SUDOKULITE_LOG_LEVEL"

DEFAULT_LOG_LEVEL = "WARNING"


@dataclass(frozen=True)
class SolverSettings:
    max_guesses: Optional[int] = None  # None => search runs to exhaustion
    log_level: str = DEFAULT_LOG_LEVEL


def _parse_max_guesses(raw: Optional[str]) -> Optional[int]:
    if raw is None or raw.strip() == "":
        return None
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{ENV_MAX_GUESSES} must be a whole number, got {raw!r}.") from None
    if value < 0:
        raise ValueError(f"{ENV_MAX_GUESSES} must not be negative, got {value}.")
    return value


def _parse_log_level(raw: Optional[str]) -> str:
    if not raw:
        return DEFAULT_LOG_LEVEL
    level = raw.strip().upper()
    if not isinstance(logging.getLevelName(level), int):
        raise ValueError(f"{ENV_LOG_LEVEL} is not a logging level: {raw!r}.")
    return level


def load_settings(environ: Optional[Mapping[str, str]] = None) -> SolverSettings:
    env = os.environ if environ is None else environ
    return SolverSettings(
        max_guesses=_parse_max_guesses(env.get(ENV_MAX_GUESSES)),
        log_level=_parse_log_level(env.get(ENV_LOG_LEVEL)),
    )
