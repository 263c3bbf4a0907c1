"""Core rules for OptimalXO: board, terminal-state detection and the game session."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

Player = str  # "X" or "O"
Board = List[str]

EMPTY = ""
PLAYERS: Tuple[Player, Player] = ("X", "O")

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


class IllegalMove(ValueError):
    """Raised when a move targets an occupied or non-existent cell."""


def other(player: Player) -> Player:
    return "O" if player == "X" else "X"


# ---------- Board ----------


@dataclass(frozen=True)
class Outcome:
    winner: Optional[Player] = None
    drawn: bool = False

    @property
    def in_progress(self) -> bool:
        return self.winner is None and not self.drawn

    @property
    def is_terminal(self) -> bool:
        return not self.in_progress


IN_PROGRESS = Outcome()
DRAW = Outcome(drawn=True)


def Win(player: Player) -> Outcome:
    """Build the ``Outcome`` for a game won by ``player``."""
    return Outcome(winner=player)


def new_board() -> Board:
    return [EMPTY] * 9


def empty_cells(board: Board) -> List[int]:
    return [i for i, c in enumerate(board) if c == EMPTY]


def apply_move(board: Board, index: int, player: Player) -> Board:
    """Return a copy of ``board`` with ``player`` placed at ``index``.

    The input board is left untouched. Whose turn it is is the caller's
    business; only the target cell is validated.
    """
    if player not in PLAYERS:
        raise IllegalMove(f"Unknown mark {player!r}")
    if not 0 <= index < 9:
        raise IllegalMove(f"Cell index {index} is out of range")
    if board[index] != EMPTY:
        raise IllegalMove("Cell already occupied")
    out = list(board)
    out[index] = player
    return out


def winning_line(board: Board) -> Optional[Tuple[int, int, int]]:
    for line in WINNING_LINES:
        a, b, c = line
        v = board[a]
        if v != EMPTY and v == board[b] == board[c]:
            return line
    return None


def evaluate(board: Board) -> Outcome:
    """Derive the outcome of ``board``; the first complete line wins."""
    line = winning_line(board)
    if line is not None:
        return Win(board[line[0]])
    if EMPTY not in board:
        return DRAW
    return IN_PROGRESS


# ---------- Game ----------


@dataclass
class TicTacToeGame:
    cells: Board = field(default_factory=new_board)
    current_player: Player = "X"
    vs_computer: bool = True
    # Bumped on every reset so deferred computer moves can detect staleness
    epoch: int = 0

    # ---- API used by UI & AI ----

    @property
    def outcome(self) -> Outcome:
        return evaluate(self.cells)

    @property
    def running(self) -> bool:
        return self.outcome.in_progress

    @property
    def is_terminal(self) -> bool:
        return self.outcome.is_terminal

    def available_moves(self) -> List[int]:
        if self.is_terminal:
            return []
        return empty_cells(self.cells)

    def play_move(self, index: int) -> bool:
        """Place the current mark at ``index``.

        Illegal moves and moves after the game has ended are ignored and
        reported by returning False; the session is left unchanged.
        """
        if self.is_terminal:
            return False
        try:
            self.cells = apply_move(self.cells, index, self.current_player)
        except IllegalMove:
            return False
        if self.running:
            self.current_player = other(self.current_player)
        return True

    def reset(self, vs_computer: Optional[bool] = None) -> None:
        if vs_computer is not None:
            self.vs_computer = vs_computer
        self.cells = new_board()
        self.current_player = "X"
        self.epoch += 1

    def computer_to_move(self) -> bool:
        return self.vs_computer and self.running and self.current_player == "O"

    def status_message(self) -> str:
        outcome = self.outcome
        if outcome.winner:
            return f"{outcome.winner} Wins!"
        if outcome.drawn:
            return "Draw!"
        return f"{self.current_player}'s Turn"

    def display_state(self) -> Dict[str, object]:
        return {
            "board": list(self.cells),
            "statusMessage": self.status_message(),
            "isTerminal": self.is_terminal,
        }

    def clone(self) -> "TicTacToeGame":
        return TicTacToeGame(
            cells=list(self.cells),
            current_player=self.current_player,
            vs_computer=self.vs_computer,
            epoch=self.epoch,
        )
