"""Core rules for the shared Tic-Tac-Toe match."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

Player = str  # "X" or "O"
Cell = Optional[Player]
Board = Tuple[Cell, ...]

X: Player = "X"
O: Player = "O"
BOARD_SIZE = 9

WINNING_LINES: Tuple[Tuple[int, int, int], ...] = (
    (0, 1, 2),
    (3, 4, 5),
    (6, 7, 8),
    (0, 3, 6),
    (1, 4, 7),
    (2, 5, 8),
    (0, 4, 8),
    (2, 4, 6),
)


def new_board() -> Board:
    return (None,) * BOARD_SIZE


def apply_move(board: Board, index: int, mark: Player) -> Board:
    """Return a copy of ``board`` with ``mark`` placed at ``index``.

    The caller must have checked that the index is in range and the cell is
    empty; nothing is validated here.
    """
    cells = list(board)
    cells[index] = mark
    return tuple(cells)


def evaluate_winner(board: Board) -> Optional[Player]:
    for a, b, c in WINNING_LINES:
        v = board[a]
        if v is not None and v == board[b] == board[c]:
            return v
    return None


def is_full(board: Board) -> bool:
    return all(c is not None for c in board)


def empty_cells(board: Board) -> List[int]:
    return [i for i, c in enumerate(board) if c is None]


@dataclass(frozen=True)
class GameState:
    # Replaced wholesale on every change; never mutated in place.
    board: Board = field(default_factory=new_board)
    current_player: Player = X
    winner: Optional[Player] = None
    game_over: bool = False

    @classmethod
    def initial(cls) -> "GameState":
        return cls()

    def to_dict(self) -> Dict[str, object]:
        """Wire representation sent to observers."""
        return {
            "board": list(self.board),
            "currentPlayer": self.current_player,
            "winner": self.winner,
            "gameOver": self.game_over,
        }
