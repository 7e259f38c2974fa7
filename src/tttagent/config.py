"""Environment-driven settings for the Tic-Tac-Toe agent server."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Callable, Mapping, Optional, TypeVar

SESSION_NAME = "game"
DEFAULT_MODEL = "gpt-5.2"

T = TypeVar("T")


def _parse(env: Mapping[str, str], name: str, default: str, convert: Callable[[str], T]) -> T:
    raw = env.get(name, default)
    try:
        return convert(raw)
    except ValueError as exc:
        raise ValueError(f"Invalid value for {name}: {raw!r}") from exc


@dataclass(frozen=True)
class Settings:
    host: str = "0.0.0.0"
    port: int = 8000
    openai_api_key: Optional[str] = None
    model: str = DEFAULT_MODEL
    oracle_timeout: float = 10.0
    max_completion_tokens: int = 10
    log_level: str = "info"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """Build settings from ``TTT_*`` variables and ``OPENAI_API_KEY``.

        Raises ``ValueError`` naming the variable when a number does not parse.
        """

        env = os.environ if environ is None else environ
        return cls(
            host=env.get("TTT_HOST", "0.0.0.0"),
            port=_parse(env, "TTT_PORT", "8000", int),
            openai_api_key=env.get("OPENAI_API_KEY") or None,
            model=env.get("TTT_MODEL", DEFAULT_MODEL),
            oracle_timeout=_parse(env, "TTT_ORACLE_TIMEOUT", "10", float),
            max_completion_tokens=_parse(env, "TTT_MAX_COMPLETION_TOKENS", "10", int),
            log_level=env.get("TTT_LOG_LEVEL", "info").lower(),
        )
