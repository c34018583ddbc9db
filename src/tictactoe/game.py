"""Core rules and session state for classic 3x3 Tic-Tac-Toe."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

Player = str  # "X" or "O"
Board = Sequence[str]

EMPTY = " "
DRAW = "draw"
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

HUMAN_TO_MOVE = "human-to-move"
COMPUTER_TO_MOVE = "computer-to-move"
TERMINAL = "terminal"


def other_player(player: Player) -> Player:
    if player not in PLAYERS:
        raise ValueError(f"Unknown mark {player!r}; expected 'X' or 'O'")
    return "O" if player == "X" else "X"


def validate_board(board: Board) -> None:
    """Reject anything that is not nine cells of 'X', 'O' or EMPTY."""

    if len(board) != 9:
        raise ValueError(f"Board must have 9 cells, got {len(board)}")
    for index, cell in enumerate(board):
        if cell != EMPTY and cell not in PLAYERS:
            raise ValueError(f"Invalid value {cell!r} in cell {index}")


def winning_line(board: Board) -> Optional[Tuple[int, int, int]]:
    """First completed line in enumeration order, if any."""

    for a, b, c in WINNING_LINES:
        v = board[a]
        if v != EMPTY and v == board[b] == board[c]:
            return (a, b, c)
    return None


def evaluate(board: Board) -> Optional[str]:
    """
    Returns the winning mark, DRAW for a full board without a line,
    or None while the game continues.
    """
    line = winning_line(board)
    if line is not None:
        return board[line[0]]
    if all(c != EMPTY for c in board):
        return DRAW
    return None


def available_moves(board: Board) -> List[int]:
    return [i for i, c in enumerate(board) if c == EMPTY]


@dataclass
class TicTacToeGame:
    """A single human-vs-computer session: board, sides and whose turn it is."""

    cells: List[str] = field(default_factory=lambda: [EMPTY] * 9)
    human: Player = "X"
    current_player: Player = "X"
    first_player: Player = field(default="X", init=False)

    def __post_init__(self) -> None:
        validate_board(self.cells)
        other_player(self.human)
        other_player(self.current_player)

        # X always moves first, so the counts fix whose turn it is.
        x_count = self.cells.count("X")
        o_count = self.cells.count("O")
        if not 0 <= x_count - o_count <= 1:
            raise ValueError(
                f"Unreachable position: {x_count} X marks against {o_count} O marks"
            )
        expected = self.first_player if x_count == o_count else "O"
        if self.current_player != expected:
            raise ValueError(
                f"It is {expected}'s turn in this position, "
                f"not {self.current_player}'s"
            )

    # ---- derived state ----

    @property
    def computer(self) -> Player:
        return other_player(self.human)

    @property
    def outcome(self) -> Optional[str]:
        return evaluate(self.cells)

    @property
    def winner(self) -> Optional[Player]:
        outcome = self.outcome
        return outcome if outcome in PLAYERS else None

    @property
    def drawn(self) -> bool:
        return self.outcome == DRAW

    @property
    def status(self) -> str:
        if self.outcome is not None:
            return TERMINAL
        if self.current_player == self.human:
            return HUMAN_TO_MOVE
        return COMPUTER_TO_MOVE

    def available_moves(self) -> List[int]:
        if self.outcome is not None:
            return []
        return available_moves(self.cells)

    # ---- transitions ----

    def play_move(self, cell: int) -> None:
        """Place the current player's mark and hand the turn over."""
        if self.outcome is not None:
            raise ValueError("Game already finished")
        if not 0 <= cell < 9:
            raise ValueError(f"Cell index {cell} out of range")
        if self.cells[cell] != EMPTY:
            raise ValueError("Cell already occupied")

        self.cells[cell] = self.current_player
        self.current_player = other_player(self.current_player)

    def reset(self, human: Optional[Player] = None) -> None:
        if human is not None:
            other_player(human)
            self.human = human
        self.cells = [EMPTY] * 9
        self.current_player = self.first_player

    def clone(self) -> "TicTacToeGame":
        return TicTacToeGame(
            cells=self.cells.copy(),
            human=self.human,
            current_player=self.current_player,
        )
