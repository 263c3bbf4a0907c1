"""Exhaustive minimax search for OptimalXO.

The whole game tree below the current position is searched on every call:
no pruning, no transposition table, no iterative deepening. O is always the
maximizing side and X the minimizing side.
"""

from __future__ import annotations

from dataclasses import dataclass

from .game import (
    Board,
    Player,
    TicTacToeGame,
    apply_move,
    empty_cells,
    evaluate,
)

WIN_SCORE = 10


class NoMoveAvailable(RuntimeError):
    """Raised when a move is requested on a board that is already over."""


def score(board: Board, depth: int, maximizing: bool) -> int:
    """Minimax value of ``board`` from O's point of view.

    Quicker wins score higher and slower losses score less negative.
    """
    outcome = evaluate(board)
    if outcome.winner == "O":
        return WIN_SCORE - depth
    if outcome.winner == "X":
        return -WIN_SCORE + depth
    if outcome.drawn:
        return 0

    if maximizing:
        return max(
            score(apply_move(board, i, "O"), depth + 1, False)
            for i in empty_cells(board)
        )
    return min(
        score(apply_move(board, i, "X"), depth + 1, True)
        for i in empty_cells(board)
    )


def best_move(board: Board, player: Player = "O") -> int:
    """Return the optimal cell for ``player``; ties go to the lowest index."""
    if evaluate(board).is_terminal:
        raise NoMoveAvailable("Board is already decided")

    # O picks the highest score, X the lowest, under the same sign convention
    sign = 1 if player == "O" else -1
    best_index = None
    best_value = None
    for i in empty_cells(board):
        value = sign * score(apply_move(board, i, player), 0, player == "X")
        if best_value is None or value > best_value:
            best_value, best_index = value, i

    if best_index is None:
        raise NoMoveAvailable("No empty cell left")
    return best_index


@dataclass
class MinimaxAI:
    """Computer opponent that never loses.

      - MinimaxAI(player="O")
      - choose(game) -> cell_index
    """

    player: Player = "O"

    def choose(self, game: TicTacToeGame) -> int:
        if game.current_player != self.player:
            raise ValueError("It is not this AI player's turn")
        return best_move(game.cells, self.player)
