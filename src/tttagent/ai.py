"""LLM-backed move selection for the O player, with a random fallback."""

from __future__ import annotations

import asyncio
import logging
import random
import re
from dataclasses import dataclass, field
from typing import Optional, Protocol, Union

from openai import AsyncOpenAI

from .config import Settings
from .game import Board, empty_cells

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a Tic-Tac-Toe expert. Respond only with a single number "
    "representing the board position."
)

_MOVE_PATTERN = re.compile(r"\b([0-8])\b")


@dataclass(frozen=True)
class Suggested:
    index: int


@dataclass(frozen=True)
class Failed:
    reason: str


Outcome = Union[Suggested, Failed]


class CompletionOracle(Protocol):
    """Anything that turns a prompt into a completion, raising on failure."""

    async def complete(self, system: str, prompt: str) -> str: ...


@dataclass
class OpenAIOracle:
    """Chat-completion oracle backed by the OpenAI API."""

    client: AsyncOpenAI
    model: str
    max_completion_tokens: int = 10

    async def complete(self, system: str, prompt: str) -> str:
        response = await self.client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": system},
                {"role": "user", "content": prompt},
            ],
            max_completion_tokens=self.max_completion_tokens,
        )
        if not response.choices:
            return ""
        return response.choices[0].message.content or ""


def render_board(board: Board) -> str:
    """Markdown table where empty cells show their index and taken cells their mark."""

    rows = []
    for start in (0, 3, 6):
        cells = [board[i] or str(i) for i in range(start, start + 3)]
        rows.append("| " + " | ".join(cells) + " |")
    return "\n|---|---|---|\n".join(rows)


def build_prompt(board: Board) -> str:
    return (
        "You are playing Tic-Tac-Toe as O. Here is the current board:\n\n"
        f"{render_board(board)}\n\n"
        "Empty cells show their position number (0-8). X and O show taken positions.\n"
        "You are O. Pick the best empty position to place your O.\n\n"
        "Respond with ONLY a single digit (0-8) for your chosen position."
    )


def parse_move(text: str, board: Board) -> Outcome:
    """Extract the first standalone digit 0-8 and check that its cell is free."""

    match = _MOVE_PATTERN.search(text or "")
    if match is None:
        return Failed(f"no position in reply {text!r}")
    index = int(match.group(1))
    if board[index] is not None:
        return Failed(f"reply names occupied cell {index}")
    return Suggested(index)


@dataclass
class MoveResolver:
    """Chooses O's move: ask the oracle, fall back to a random empty cell.

    ``choose`` never raises for oracle problems and always returns an index
    that was empty in the board it was given.
    """

    oracle: Optional[CompletionOracle] = None
    timeout: Optional[float] = 10.0
    rng: random.Random = field(default_factory=random.Random, repr=False)

    async def suggest(self, board: Board) -> Outcome:
        if self.oracle is None:
            return Failed("no oracle configured")
        try:
            text = await asyncio.wait_for(
                self.oracle.complete(SYSTEM_PROMPT, build_prompt(board)),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError:
            return Failed(f"oracle timed out after {self.timeout}s")
        except Exception as exc:
            return Failed(f"oracle error: {exc!r}")
        logger.debug("Oracle replied %r", text)
        return parse_move(text, board)

    def fallback(self, board: Board) -> int:
        choices = empty_cells(board)
        if not choices:
            raise ValueError("No empty cell left for a fallback move")
        return self.rng.choice(choices)

    async def choose(self, board: Board) -> int:
        outcome = await self.suggest(board)
        if isinstance(outcome, Suggested):
            logger.debug("Oracle chose cell %d", outcome.index)
            return outcome.index
        index = self.fallback(board)
        logger.warning("AI move falling back to random cell %d: %s", index, outcome.reason)
        return index


def build_resolver(settings: Settings) -> MoveResolver:
    """Resolver wired to OpenAI when an API key is configured."""

    oracle: Optional[CompletionOracle] = None
    if settings.openai_api_key:
        client = AsyncOpenAI(
            api_key=settings.openai_api_key, timeout=settings.oracle_timeout
        )
        oracle = OpenAIOracle(
            client=client,
            model=settings.model,
            max_completion_tokens=settings.max_completion_tokens,
        )
    else:
        logger.info("OPENAI_API_KEY not set; AI moves will be random")
    return MoveResolver(oracle=oracle, timeout=settings.oracle_timeout)
