"""Tic-Tac-Toe package exposing game rules, the minimax opponent, and the web application."""

from .ai import MinimaxAI, pick_move
from .game import TicTacToeGame, available_moves, evaluate
from .ui import app

__all__ = [
    "MinimaxAI",
    "TicTacToeGame",
    "app",
    "available_moves",
    "evaluate",
    "pick_move",
]
