"""FastAPI-powered web UI for playing Tic-Tac-Toe against the computer."""

from __future__ import annotations

import logging
import random
import threading
import time
import uuid
from dataclasses import dataclass, field
from typing import Dict, List, Literal, Optional, Tuple

from fastapi import BackgroundTasks, FastAPI, HTTPException
from fastapi.responses import HTMLResponse
from pydantic import BaseModel, Field

from .ai import MinimaxAI
from .game import EMPTY, TicTacToeGame, other_player, winning_line

logger = logging.getLogger(__name__)


@dataclass
class GameSession:
    """Container for an active game and its computer opponent."""

    game: TicTacToeGame
    ai: MinimaxAI
    move_log: List[Dict[str, int | str]] = field(default_factory=list)
    ai_pending: bool = False
    last_active: float = field(default_factory=lambda: time.time())
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False)


SESSIONS: Dict[str, GameSession] = {}
SESSIONS_LOCK = threading.Lock()
SESSION_TTL_SECONDS = 60 * 60  # 1 hour
app = FastAPI(
    title="Tic Tac Toe (Minimax)",
    description="Human vs computer Tic-Tac-Toe played in the browser",
)

# Cosmetic pacing before the computer's reply is applied.
AI_THINK_DELAY: Tuple[float, float] = (0.4, 0.4)

DifficultyName = Literal["easy", "medium", "hard"]
Mark = Literal["X", "O"]


class NewGameRequest(BaseModel):
    """Request payload for starting a new game."""

    difficulty: DifficultyName = Field(
        default="hard", description="Search policy used by the computer"
    )
    human: Mark = Field(default="X", description="Mark controlled by the human")


class MoveRequest(BaseModel):
    """Request payload for submitting a move on an existing game."""

    cell: int = Field(ge=0, le=8)


class ResetRequest(BaseModel):
    """Clear the board, optionally switching sides or difficulty."""

    human: Optional[Mark] = None
    difficulty: Optional[DifficultyName] = None


def _cleanup_sessions() -> None:
    """Remove sessions nobody has touched within the TTL."""

    now = time.time()
    with SESSIONS_LOCK:
        expired = [
            session_id
            for session_id, session in list(SESSIONS.items())
            if not session.ai_pending
            and now - session.last_active >= SESSION_TTL_SECONDS
        ]
        for session_id in expired:
            SESSIONS.pop(session_id, None)
    if expired:
        logger.info("evicted %d idle game(s)", len(expired))


def _create_session(difficulty: str, human: str) -> Tuple[str, GameSession]:
    """Create a new game session and register it for later access."""

    game = TicTacToeGame(human=human)
    ai = MinimaxAI(player=other_player(human), difficulty=difficulty)
    session = GameSession(game=game, ai=ai)
    session_id = uuid.uuid4().hex
    _cleanup_sessions()
    with SESSIONS_LOCK:
        SESSIONS[session_id] = session
    logger.info(
        "created game %s (human=%s, difficulty=%s)", session_id, human, difficulty
    )
    return session_id, session


def _get_session(game_id: str) -> GameSession:
    try:
        session = SESSIONS[game_id]
    except KeyError as exc:
        raise HTTPException(status_code=404, detail="Game not found") from exc
    session.last_active = time.time()
    return session


def _run_ai_turn(game_id: str) -> None:
    session = SESSIONS.get(game_id)
    if not session:
        return

    time.sleep(max(0.0, random.uniform(*AI_THINK_DELAY)))

    with session.lock:
        try:
            game = session.game
            if game.outcome is not None:
                return
            if game.current_player != session.ai.player:
                return
            cell = session.ai.choose(game)
            game.play_move(cell)
            session.move_log.append({"player": session.ai.player, "cell": cell})
            if game.outcome is not None:
                logger.info("game %s finished: %s", game_id, game.outcome)
        finally:
            session.ai_pending = False


def _schedule_ai_if_due(
    game_id: str,
    session: GameSession,
    background_tasks: Optional[BackgroundTasks],
) -> None:
    """Mark the computer's move pending and queue it when it is the computer's turn."""

    with session.lock:
        game = session.game
        due = game.outcome is None and game.current_player == session.ai.player
        if due:
            session.ai_pending = True

    if due and background_tasks is not None:
        background_tasks.add_task(_run_ai_turn, game_id)


def _serialize_session(game_id: str, session: GameSession) -> Dict[str, object]:
    with session.lock:
        game = session.game
        line = winning_line(game.cells)
        state: Dict[str, object] = {
            "id": game_id,
            "cells": [c if c != EMPTY else "" for c in game.cells],
            "human": game.human,
            "computer": game.computer,
            "currentPlayer": game.current_player,
            "difficulty": session.ai.difficulty,
            "status": game.status,
            "winner": game.winner,
            "drawn": game.drawn,
            "winningLine": list(line) if line else None,
            "availableMoves": game.available_moves(),
            "moveLog": list(session.move_log),
            "aiPending": session.ai_pending,
        }
        if session.move_log:
            state["lastMove"] = session.move_log[-1]
        return state


def _apply_player_move(
    game_id: str,
    session: GameSession,
    cell: int,
    background_tasks: Optional[BackgroundTasks] = None,
) -> None:
    with session.lock:
        game = session.game
        if game.outcome is not None:
            raise HTTPException(status_code=400, detail="Game already finished")

        if session.ai_pending:
            raise HTTPException(
                status_code=400, detail="Computer is completing its move"
            )

        if game.current_player != game.human:
            raise HTTPException(status_code=400, detail="It is not your turn")

        try:
            game.play_move(cell)
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc

        session.move_log.append({"player": game.human, "cell": cell})
        if game.outcome is not None:
            logger.info("game %s finished: %s", game_id, game.outcome)

    _schedule_ai_if_due(game_id, session, background_tasks)


def _reset_session(
    game_id: str,
    session: GameSession,
    request: ResetRequest,
    background_tasks: Optional[BackgroundTasks] = None,
) -> None:
    with session.lock:
        session.game.reset(human=request.human)
        difficulty = request.difficulty or session.ai.difficulty
        session.ai = MinimaxAI(player=session.game.computer, difficulty=difficulty)
        session.move_log.clear()
        session.ai_pending = False
        logger.info(
            "reset game %s (human=%s, difficulty=%s)",
            game_id,
            session.game.human,
            difficulty,
        )

    _schedule_ai_if_due(game_id, session, background_tasks)


@app.post("/api/game")
def create_game(
    request: NewGameRequest, background_tasks: BackgroundTasks
) -> Dict[str, object]:
    game_id, session = _create_session(request.difficulty, request.human)
    _schedule_ai_if_due(game_id, session, background_tasks)
    return _serialize_session(game_id, session)


@app.get("/api/game/{game_id}")
def get_game(game_id: str) -> Dict[str, object]:
    session = _get_session(game_id)
    return _serialize_session(game_id, session)


@app.post("/api/game/{game_id}/move")
def make_move(
    game_id: str, request: MoveRequest, background_tasks: BackgroundTasks
) -> Dict[str, object]:
    session = _get_session(game_id)
    _apply_player_move(game_id, session, request.cell, background_tasks)
    return _serialize_session(game_id, session)


@app.post("/api/game/{game_id}/reset")
def reset_game(
    game_id: str, request: ResetRequest, background_tasks: BackgroundTasks
) -> Dict[str, object]:
    session = _get_session(game_id)
    _reset_session(game_id, session, request, background_tasks)
    return _serialize_session(game_id, session)


@app.get("/", response_class=HTMLResponse)
def index() -> str:
    return HTML_PAGE


HTML_PAGE = """<!DOCTYPE html>
<html lang=\"en\">
  <head>
    <meta charset=\"utf-8\" />
    <meta name=\"viewport\" content=\"width=device-width, initial-scale=1\" />
    <title>Tic Tac Toe (Minimax)</title>
    <style>
      :root {
        color-scheme: light;
        font-family: system-ui, -apple-system, BlinkMacSystemFont, \"Segoe UI\", sans-serif;
      }
      * {
        box-sizing: border-box;
      }
      body {
        margin: 0;
        background: radial-gradient(circle at top, #f2f5ff, #dbe0ff 40%, #cfd8ff 70%);
        min-height: 100vh;
        display: flex;
        justify-content: center;
        align-items: flex-start;
        padding: 2rem 1rem 3rem;
        color: #13203a;
      }
      main {
        background: rgba(255, 255, 255, 0.92);
        border-radius: 18px;
        box-shadow: 0 20px 40px rgba(34, 47, 79, 0.16);
        padding: clamp(1.5rem, 4vw, 2.5rem);
        width: min(460px, 100%);
      }
      h1 {
        margin: 0 0 0.5rem;
        text-align: center;
        letter-spacing: 0.04em;
      }
      .tagline {
        text-align: center;
        margin: 0 0 1.5rem;
        color: rgba(19, 32, 58, 0.75);
      }
      .controls {
        display: flex;
        flex-wrap: wrap;
        gap: 0.75rem;
        justify-content: center;
        align-items: center;
      }
      select,
      button {
        font: inherit;
        padding: 0.45rem 0.9rem;
        border-radius: 10px;
        border: 1px solid #c5cdea;
        background: #fff;
        cursor: pointer;
      }
      button.primary {
        background: #3552d8;
        border-color: #3552d8;
        color: #fff;
      }
      .board {
        display: grid;
        grid-template-columns: repeat(3, 1fr);
        gap: 8px;
        margin: 1.25rem auto;
        max-width: 300px;
      }
      .board.thinking {
        opacity: 0.7;
      }
      .cell {
        aspect-ratio: 1;
        font-size: 2.4rem;
        font-weight: 600;
        border-radius: 12px;
      }
      .cell:disabled {
        cursor: default;
        color: #13203a;
      }
      .cell.winner {
        background: #e3f5e8;
        border-color: #4f9a68;
      }
      .status {
        text-align: center;
        font-weight: 500;
        min-height: 1.5em;
      }
      .message {
        text-align: center;
        color: #b3343f;
        min-height: 1.2em;
      }
      kbd {
        padding: 0.1rem 0.4rem;
        border-radius: 6px;
        background: #eef1fb;
        border: 1px solid #c5cdea;
      }
    </style>
  </head>
  <body>
    <main>
      <h1>Tic Tac Toe</h1>
      <p class=\"tagline\">Human vs Computer &bull; Minimax</p>
      <div class=\"controls\">
        <label>
          Difficulty
          <select id=\"difficulty\">
            <option value=\"easy\">Easy</option>
            <option value=\"medium\">Medium</option>
            <option value=\"hard\" selected>Impossible</option>
          </select>
        </label>
        <label>
          You play
          <select id=\"human\">
            <option value=\"X\">X (first)</option>
            <option value=\"O\">O (second)</option>
          </select>
        </label>
        <button id=\"reset\">Reset</button>
        <button id=\"new-game\" class=\"primary\">New Game</button>
      </div>
      <div id=\"board\" class=\"board\"></div>
      <div id=\"status\" class=\"status\"></div>
      <div id=\"message\" class=\"message\"></div>
    </main>
    <script>
      const boardEl = document.getElementById('board');
      const statusEl = document.getElementById('status');
      const messageEl = document.getElementById('message');
      const difficultyEl = document.getElementById('difficulty');
      const humanEl = document.getElementById('human');
      let gameId = null;
      let gameState = null;
      let pollHandle = null;
      let isRequestPending = false;

      function renderBoard() {
        boardEl.innerHTML = '';
        const cells = gameState ? gameState.cells : Array(9).fill('');
        const line = (gameState && gameState.winningLine) || [];
        cells.forEach((value, index) => {
          const button = document.createElement('button');
          button.className = 'cell';
          button.textContent = value;
          if (line.includes(index)) button.classList.add('winner');
          button.disabled =
            !gameState ||
            gameState.status !== 'human-to-move' ||
            gameState.aiPending ||
            value !== '';
          button.addEventListener('click', () => sendMove(index));
          boardEl.appendChild(button);
        });
        boardEl.classList.toggle('thinking', Boolean(gameState && gameState.aiPending));
      }

      function renderStatus() {
        if (!gameState) {
          statusEl.textContent = '';
          return;
        }
        if (gameState.drawn) {
          statusEl.textContent = "It's a draw.";
        } else if (gameState.winner) {
          statusEl.innerHTML = `Winner: <kbd>${gameState.winner}</kbd> ` +
            (gameState.winner === gameState.human ? 'You win!' : 'Computer wins');
        } else {
          const who = gameState.currentPlayer === gameState.human ? '(You)' : '(Computer)';
          statusEl.innerHTML = `Turn: <kbd>${gameState.currentPlayer}</kbd> ${who}`;
        }
      }

      function setState(data) {
        gameState = data;
        gameId = data.id;
        renderBoard();
        renderStatus();
        if (data.aiPending) ensurePolling();
      }

      function ensurePolling() {
        if (pollHandle === null) {
          pollHandle = setTimeout(pollState, 250);
        }
      }

      async function pollState() {
        pollHandle = null;
        if (!gameId) return;
        try {
          const response = await fetch(`/api/game/${gameId}`);
          if (response.ok) setState(await response.json());
        } catch (error) {
          console.error('Polling failed', error);
        }
      }

      async function post(url, body) {
        if (isRequestPending) return;
        isRequestPending = true;
        messageEl.textContent = '';
        try {
          const response = await fetch(url, {
            method: 'POST',
            headers: { 'Content-Type': 'application/json' },
            body: JSON.stringify(body),
          });
          const payload = await response.json().catch(() => ({}));
          if (!response.ok) {
            messageEl.textContent = payload.detail || 'Request failed';
            return;
          }
          setState(payload);
        } catch (error) {
          messageEl.textContent = 'Network error. Please try again.';
        } finally {
          isRequestPending = false;
        }
      }

      function startGame() {
        return post('/api/game', { difficulty: difficultyEl.value, human: humanEl.value });
      }

      function resetGame() {
        if (!gameId) return startGame();
        return post(`/api/game/${gameId}/reset`, {
          difficulty: difficultyEl.value,
          human: humanEl.value,
        });
      }

      function sendMove(cell) {
        if (!gameId) return;
        return post(`/api/game/${gameId}/move`, { cell });
      }

      document.getElementById('new-game').addEventListener('click', startGame);
      document.getElementById('reset').addEventListener('click', resetGame);
      humanEl.addEventListener('change', resetGame);
      renderBoard();
      startGame();
    </script>
  </body>
</html>
"""
