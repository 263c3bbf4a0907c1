"""OptimalXO package exposing game logic, the minimax opponent, and the web application."""

from .ai import MinimaxAI, best_move
from .game import TicTacToeGame, evaluate
from .ui import app

__all__ = ["MinimaxAI", "TicTacToeGame", "app", "best_move", "evaluate"]
