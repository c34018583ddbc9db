"""Unit tests for Tic-Tac-Toe rules and session state."""

import itertools

import pytest

from tictactoe.game import (
    COMPUTER_TO_MOVE,
    DRAW,
    EMPTY,
    HUMAN_TO_MOVE,
    TERMINAL,
    TicTacToeGame,
    WINNING_LINES,
    available_moves,
    evaluate,
    validate_board,
    winning_line,
)


def board_from(text):
    return [EMPTY if c == "." else c for c in text]


def test_empty_board_has_every_move():
    assert available_moves([EMPTY] * 9) == list(range(9))


def test_available_moves_are_ascending_empties():
    board = board_from("X.O.X..O.")
    assert available_moves(board) == [1, 3, 5, 6, 8]


@pytest.mark.parametrize("line", WINNING_LINES)
def test_every_line_is_a_win(line):
    board = [EMPTY] * 9
    for index in line:
        board[index] = "O"
    assert evaluate(board) == "O"
    assert winning_line(board) == line


def test_full_board_without_line_is_draw():
    board = board_from("XOXXOOOXX")
    assert evaluate(board) == DRAW
    assert available_moves(board) == []


def test_game_in_progress():
    assert evaluate(board_from("XO.......")) is None
    assert evaluate([EMPTY] * 9) is None


def test_first_line_wins_on_unreachable_boards():
    assert evaluate(board_from("XXXOOO...")) == "X"
    assert evaluate(board_from("OOO...XXX")) == "O"


def test_evaluate_is_total_and_idempotent():
    for cells in itertools.product((EMPTY, "X", "O"), repeat=9):
        board = list(cells)
        result = evaluate(board)
        assert result in (None, DRAW, "X", "O")
        assert evaluate(board) == result
        assert board == list(cells)


@pytest.mark.parametrize(
    "board",
    [[EMPTY] * 8, [EMPTY] * 10, board_from("XO.......")[:8] + ["Z"]],
)
def test_malformed_boards_are_rejected(board):
    with pytest.raises(ValueError):
        validate_board(board)
    with pytest.raises(ValueError):
        TicTacToeGame(cells=list(board))


def test_turns_alternate_and_status_follows():
    game = TicTacToeGame(human="X")
    assert game.status == HUMAN_TO_MOVE
    game.play_move(4)
    assert game.cells[4] == "X"
    assert game.current_player == "O"
    assert game.status == COMPUTER_TO_MOVE
    game.play_move(0)
    assert game.current_player == "X"
    assert game.status == HUMAN_TO_MOVE


def test_human_as_o_waits_for_computer():
    game = TicTacToeGame(human="O")
    assert game.computer == "X"
    assert game.status == COMPUTER_TO_MOVE


def test_occupied_and_out_of_range_cells_rejected():
    game = TicTacToeGame()
    game.play_move(0)
    with pytest.raises(ValueError):
        game.play_move(0)
    with pytest.raises(ValueError):
        game.play_move(9)
    assert game.current_player == "O"


def test_terminal_state_is_absorbing():
    game = TicTacToeGame()
    for cell in (0, 3, 1, 4, 2):
        game.play_move(cell)
    assert game.winner == "X"
    assert game.status == TERMINAL
    assert game.available_moves() == []
    with pytest.raises(ValueError):
        game.play_move(8)


def test_mark_counts_stay_balanced():
    game = TicTacToeGame()
    for cell in (4, 0, 8, 2, 1, 7, 6, 3, 5):
        if game.outcome is not None:
            break
        game.play_move(cell)
        x_count = game.cells.count("X")
        o_count = game.cells.count("O")
        assert 0 <= x_count - o_count <= 1


def test_reset_clears_board_and_restores_first_player():
    game = TicTacToeGame(human="X")
    game.play_move(4)
    game.reset()
    assert game.cells == [EMPTY] * 9
    assert game.current_player == "X"
    assert game.status == HUMAN_TO_MOVE

    game.play_move(0)
    game.reset(human="O")
    assert game.human == "O"
    assert game.cells == [EMPTY] * 9
    assert game.current_player == "X"
    assert game.status == COMPUTER_TO_MOVE


def test_clone_is_independent():
    game = TicTacToeGame()
    game.play_move(4)
    copy = game.clone()
    copy.play_move(0)
    assert game.cells[0] == EMPTY
    assert game.current_player == "O"


@pytest.mark.parametrize(
    "cells, current_player",
    [
        (["X"] * 4 + [EMPTY] * 5, "O"),
        (board_from("OO......."), "X"),
        (board_from("X........"), "X"),
        (board_from("XO......."), "O"),
    ],
)
def test_unreachable_positions_rejected(cells, current_player):
    with pytest.raises(ValueError):
        TicTacToeGame(cells=cells, current_player=current_player)


def test_mid_game_position_accepted():
    game = TicTacToeGame(cells=board_from("X...O..X."), current_player="O")
    assert game.status == COMPUTER_TO_MOVE
