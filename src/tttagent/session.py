"""The single authoritative game session: move validation, AI turn, reset."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Awaitable, Callable, Dict, Optional

from .ai import MoveResolver
from .config import SESSION_NAME
from .game import (
    BOARD_SIZE,
    O,
    X,
    Board,
    GameState,
    apply_move,
    evaluate_winner,
    is_full,
)

logger = logging.getLogger(__name__)

Publisher = Callable[[GameState], Awaitable[None]]


class InvalidMove(ValueError):
    """Raised when a submitted move breaks the rules; the state is untouched."""


async def _discard(state: GameState) -> None:
    return None


class GameSession:
    """Owns the ``GameState`` and is the only thing that changes it.

    Every accepted change is handed to ``publish`` in the order it happened.
    A non-terminal X move produces two events: the board with X placed and
    O to move, then the board after the AI reply.
    """

    def __init__(
        self,
        resolver: MoveResolver,
        publish: Optional[Publisher] = None,
        name: str = SESSION_NAME,
    ) -> None:
        self.name = name
        self.resolver = resolver
        self.publish: Publisher = publish or _discard
        self.state = GameState.initial()
        # Bumped on reset so an AI reply for an earlier game is dropped.
        self._generation = 0

    def snapshot(self) -> Dict[str, object]:
        return self.state.to_dict()

    async def submit_move(self, index: int) -> None:
        """Play X at ``index`` and, if the game goes on, let the AI answer."""

        state = self.state
        if (
            state.game_over
            or not isinstance(index, int)
            or isinstance(index, bool)
            or not 0 <= index < BOARD_SIZE
            or state.board[index] is not None
            or state.current_player != X
        ):
            raise InvalidMove("Invalid move")

        board = apply_move(state.board, index, X)
        logger.info("[%s] X plays %d", self.name, index)
        if self._finish(board):
            await self.publish(self.state)
            return

        self.state = replace(state, board=board, current_player=O)
        generation = self._generation
        await self.publish(self.state)
        await self._play_ai_turn(board, generation)

    async def reset(self) -> None:
        self._generation += 1
        self.state = GameState.initial()
        logger.info("[%s] game reset", self.name)
        await self.publish(self.state)

    async def _play_ai_turn(self, board: Board, generation: int) -> None:
        if generation != self._generation:
            logger.info("[%s] game reset before the AI turn", self.name)
            return
        index = await self.resolver.choose(board)
        if generation != self._generation:
            logger.info("[%s] dropping AI move %d for a reset game", self.name, index)
            return

        board = apply_move(self.state.board, index, O)
        logger.info("[%s] O plays %d", self.name, index)
        if not self._finish(board):
            self.state = replace(self.state, board=board, current_player=X)
        await self.publish(self.state)

    def _finish(self, board: Board) -> bool:
        """Store ``board`` as final if it is won or full; report whether it was."""

        winner = evaluate_winner(board)
        if winner is None and not is_full(board):
            return False
        self.state = replace(self.state, board=board, winner=winner, game_over=True)
        if winner:
            logger.info("[%s] %s wins", self.name, winner)
        else:
            logger.info("[%s] draw", self.name)
        return True
