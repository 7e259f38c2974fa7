"""Tic-Tac-Toe agent package exposing game rules, the AI resolver, and the web app."""

from .ai import MoveResolver
from .game import GameState
from .session import GameSession, InvalidMove
from .ui import create_app

__all__ = ["GameSession", "GameState", "InvalidMove", "MoveResolver", "create_app"]
