"""Minimax move selection with easy / medium / hard difficulty tiers."""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import lru_cache
from typing import List, Optional, Tuple
import logging
import math
import random

from .game import (
    Board,
    Player,
    TicTacToeGame,
    DRAW,
    available_moves,
    evaluate,
    other_player,
    validate_board,
)

logger = logging.getLogger(__name__)

Difficulty = str  # "easy", "medium" or "hard"

DIFFICULTIES: Tuple[Difficulty, ...] = ("easy", "medium", "hard")
EASY_RANDOM_RATE = 0.6
MEDIUM_DEPTH_CAP = 3
WIN_SCORE = 10


def depth_cap_for(difficulty: Difficulty) -> Optional[int]:
    if difficulty not in DIFFICULTIES:
        raise ValueError(
            f"Unsupported difficulty {difficulty!r}. "
            f"Choose one of {', '.join(DIFFICULTIES)}."
        )
    return MEDIUM_DEPTH_CAP if difficulty == "medium" else None


def _place(board: Tuple[str, ...], cell: int, player: Player) -> Tuple[str, ...]:
    return board[:cell] + (player,) + board[cell + 1 :]


# ---- core search ----


@lru_cache(maxsize=None)
def _minimax(
    board: Tuple[str, ...],
    computer: Player,
    human: Player,
    maximizing: bool,
    depth: int,
    depth_cap: Optional[int],
) -> int:
    outcome = evaluate(board)
    if outcome == computer:
        return WIN_SCORE - depth
    if outcome == human:
        return depth - WIN_SCORE
    if outcome == DRAW:
        return 0
    # Truncated nodes score as neutral
    if depth_cap is not None and depth >= depth_cap:
        return 0

    if maximizing:
        best = -math.inf
        for cell in available_moves(board):
            child = _place(board, cell, computer)
            score = _minimax(child, computer, human, False, depth + 1, depth_cap)
            best = max(best, score)
    else:
        best = math.inf
        for cell in available_moves(board):
            child = _place(board, cell, human)
            score = _minimax(child, computer, human, True, depth + 1, depth_cap)
            best = min(best, score)
    return int(best)


def minimax(
    board: Board,
    computer: Player,
    human: Player,
    maximizing: bool,
    depth: int = 0,
    depth_cap: Optional[int] = None,
) -> int:
    """Score ``board`` from the computer's point of view.

    A computer win at ``depth`` plies scores ``10 - depth``, a human win
    ``depth - 10`` and a draw ``0``. With ``depth_cap`` set, positions reached
    at that depth without a result score ``0``. The board is never mutated;
    results are memoized since the score depends on the arguments only.
    """
    return _minimax(tuple(board), computer, human, maximizing, depth, depth_cap)


def pick_move(
    board: Board,
    computer: Player,
    human: Player,
    difficulty: Difficulty = "hard",
    rng: Optional[random.Random] = None,
) -> Optional[int]:
    """Choose the computer's next cell, or None when the board is full.

    easy: 60% of the time a uniformly random empty cell, otherwise the same
    search as hard. medium: minimax capped at 3 plies. hard: full minimax.
    Ties among the best-scoring cells are broken uniformly at random.
    """
    validate_board(board)
    if other_player(computer) != human:
        raise ValueError("Computer and human must play opposite marks")
    depth_cap = depth_cap_for(difficulty)
    if rng is None:
        rng = random.Random()

    position = tuple(board)
    empties = available_moves(position)
    if not empties:
        return None

    if difficulty == "easy" and rng.random() < EASY_RANDOM_RATE:
        move = rng.choice(empties)
        logger.debug("easy tier played random cell %d", move)
        return move

    best_score = -math.inf
    best_moves: List[int] = []
    for cell in empties:
        child = _place(position, cell, computer)
        score = _minimax(child, computer, human, False, 0, depth_cap)
        if score > best_score:
            best_score, best_moves = score, [cell]
        elif score == best_score:
            best_moves.append(cell)

    move = rng.choice(best_moves)
    logger.debug(
        "%s tier chose cell %d (score %s, ties %s)",
        difficulty,
        move,
        best_score,
        best_moves,
    )
    return move


@dataclass
class MinimaxAI:
    """Computer opponent bound to one mark and one difficulty tier.

      - MinimaxAI(player="O", difficulty="hard")
      - choose(game) -> cell index
    """

    player: Player
    difficulty: Difficulty = "hard"
    rng: random.Random = field(default_factory=random.Random, repr=False)

    def __post_init__(self) -> None:
        other_player(self.player)
        depth_cap_for(self.difficulty)

    def choose(self, game: TicTacToeGame) -> int:
        if game.outcome is not None:
            raise ValueError("Game already finished")
        if game.current_player != self.player:
            raise ValueError("It is not this AI player's turn")

        move = pick_move(
            game.cells,
            self.player,
            other_player(self.player),
            self.difficulty,
            self.rng,
        )
        if move is None:
            raise RuntimeError("No valid moves available")
        return move
