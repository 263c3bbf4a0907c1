"""FastAPI-powered web UI for playing OptimalXO in the browser."""

from __future__ import annotations

import logging
import threading
import time
import uuid
from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple

from fastapi import BackgroundTasks, FastAPI, HTTPException
from fastapi.responses import HTMLResponse
from pydantic import BaseModel, ConfigDict, Field

from .ai import MinimaxAI
from .game import TicTacToeGame, winning_line

logger = logging.getLogger(__name__)


@dataclass
class GameSession:
    """Container for an active game and its computer opponent."""

    game: TicTacToeGame
    ai: MinimaxAI = field(default_factory=MinimaxAI)
    computer_pending: bool = False
    last_seen: float = field(default_factory=lambda: time.time())
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False)


SESSIONS: Dict[str, GameSession] = {}
app = FastAPI(title="OptimalXO", description="Tic-tac-toe against a computer that never loses")

COMPUTER_MOVE_DELAY: float = 0.5
SESSION_TTL_SECONDS = 60 * 60  # 1 hour


class NewGameRequest(BaseModel):
    """Request payload for starting a new game."""

    model_config = ConfigDict(populate_by_name=True)

    vs_computer: bool = Field(
        default=True,
        alias="vsComputer",
        description="Play against the computer instead of a second human",
    )


class ModeRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    vs_computer: bool = Field(alias="vsComputer")


class MoveRequest(BaseModel):
    """Request payload for activating a cell.

    Out of range indices are accepted here and ignored by the game, like
    clicks on occupied cells.
    """

    index: int


def _create_session(vs_computer: bool) -> Tuple[str, GameSession]:
    """Create a new game session and register it for later access."""

    _cleanup_sessions()
    session = GameSession(game=TicTacToeGame(vs_computer=vs_computer))
    session_id = uuid.uuid4().hex
    SESSIONS[session_id] = session
    logger.info("Created game %s (vs_computer=%s)", session_id, vs_computer)
    return session_id, session


def _cleanup_sessions() -> None:
    """Forget games nobody has touched for ``SESSION_TTL_SECONDS``."""

    now = time.time()
    expired = [
        game_id
        for game_id, session in list(SESSIONS.items())
        if now - session.last_seen >= SESSION_TTL_SECONDS
    ]
    for game_id in expired:
        SESSIONS.pop(game_id, None)
        logger.debug("Expired idle game %s", game_id)


def _get_session(game_id: str) -> GameSession:
    try:
        session = SESSIONS[game_id]
    except KeyError as exc:
        raise HTTPException(status_code=404, detail="Game not found") from exc
    session.last_seen = time.time()
    return session


def _run_computer_turn(game_id: str, epoch: int) -> None:
    session = SESSIONS.get(game_id)
    if not session:
        return

    time.sleep(max(0.0, COMPUTER_MOVE_DELAY))

    with session.lock:
        game = session.game
        if game.epoch != epoch:
            # A reset happened while this move was waiting; the new epoch owns the flag
            logger.debug("Dropping stale computer move for game %s", game_id)
            return
        try:
            if not game.computer_to_move():
                return
            index = session.ai.choose(game)
            game.play_move(index)
            logger.info("Computer played cell %d in game %s", index, game_id)
        finally:
            session.computer_pending = False


def _serialize_session(game_id: str, session: GameSession) -> Dict[str, object]:
    with session.lock:
        game = session.game
        outcome = game.outcome
        line = winning_line(game.cells)
        state: Dict[str, object] = {"id": game_id}
        state.update(game.display_state())
        state.update(
            {
                "currentPlayer": game.current_player,
                "winner": outcome.winner,
                "drawn": outcome.drawn,
                "winningLine": list(line) if line else None,
                "vsComputer": game.vs_computer,
                "computerPending": session.computer_pending,
            }
        )
        return state


def _apply_player_move(
    game_id: str,
    session: GameSession,
    index: int,
    background_tasks: Optional[BackgroundTasks] = None,
) -> None:
    should_schedule = False
    with session.lock:
        game = session.game
        if session.computer_pending or game.computer_to_move():
            logger.debug("Ignoring move %d in game %s: computer to move", index, game_id)
            return
        if not game.play_move(index):
            logger.debug("Ignoring illegal move %d in game %s", index, game_id)
            return

        # The flag is only raised when a deferred move will actually clear it
        should_schedule = background_tasks is not None and game.computer_to_move()
        if should_schedule:
            session.computer_pending = True
        epoch = game.epoch

    if should_schedule:
        background_tasks.add_task(_run_computer_turn, game_id, epoch)


def _reset_session(
    game_id: str, session: GameSession, vs_computer: Optional[bool] = None
) -> None:
    with session.lock:
        session.game.reset(vs_computer=vs_computer)
        session.computer_pending = False
        logger.info(
            "Reset game %s (vs_computer=%s, epoch=%d)",
            game_id,
            session.game.vs_computer,
            session.game.epoch,
        )


@app.post("/api/game")
def create_game(request: Optional[NewGameRequest] = None) -> Dict[str, object]:
    vs_computer = request.vs_computer if request is not None else True
    game_id, session = _create_session(vs_computer)
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
    _apply_player_move(game_id, session, request.index, background_tasks)
    return _serialize_session(game_id, session)


@app.post("/api/game/{game_id}/mode")
def change_mode(game_id: str, request: ModeRequest) -> Dict[str, object]:
    session = _get_session(game_id)
    _reset_session(game_id, session, vs_computer=request.vs_computer)
    return _serialize_session(game_id, session)


@app.post("/api/game/{game_id}/restart")
def restart_game(game_id: str) -> Dict[str, object]:
    session = _get_session(game_id)
    _reset_session(game_id, session)
    return _serialize_session(game_id, session)


@app.get("/", response_class=HTMLResponse)
def index() -> str:
    return HTML_PAGE


HTML_PAGE = """<!DOCTYPE html>
<html lang=\"en\">
  <head>
    <meta charset=\"utf-8\" />
    <meta name=\"viewport\" content=\"width=device-width, initial-scale=1\" />
    <title>OptimalXO</title>
    <style>
      :root {
        color-scheme: light;
        font-family: system-ui, -apple-system, BlinkMacSystemFont, \"Segoe UI\", sans-serif;
      }
      body {
        margin: 0;
        background: radial-gradient(circle at top, #f2f5ff, #dbe0ff 40%, #cfd8ff 70%);
        min-height: 100vh;
        display: flex;
        justify-content: center;
        padding: 2rem 1rem 3rem;
        color: #13203a;
      }
      main {
        background: rgba(255, 255, 255, 0.92);
        border-radius: 18px;
        box-shadow: 0 20px 40px rgba(34, 47, 79, 0.16);
        padding: clamp(1.5rem, 4vw, 2.5rem);
        width: min(420px, 100%);
        text-align: center;
      }
      h1 {
        margin: 0 0 1rem;
        letter-spacing: 0.06em;
      }
      .mode-picker {
        display: flex;
        gap: 1.5rem;
        justify-content: center;
        margin-bottom: 1rem;
      }
      #status {
        font-size: 1.25rem;
        font-weight: 600;
        margin-bottom: 1rem;
      }
      .board-grid {
        display: grid;
        grid-template-columns: repeat(3, 1fr);
        gap: 6px;
        margin: 0 auto 1.5rem;
        width: min(300px, 100%);
      }
      .cell {
        aspect-ratio: 1;
        font-size: 2.5rem;
        font-weight: 700;
        border-radius: 12px;
        border: 1px solid rgba(60, 70, 120, 0.25);
        background: white;
        cursor: pointer;
      }
      .cell.X { color: #3a66ff; }
      .cell.O { color: #ff4f6d; }
      .cell.win { background: #fff3c4; }
      .board-grid.thinking .cell { cursor: progress; }
      button#restart {
        font-size: 1rem;
        padding: 0.55rem 1.2rem;
        border-radius: 999px;
        border: 1px solid rgba(60, 70, 120, 0.25);
        background: rgba(226, 232, 255, 0.9);
        cursor: pointer;
      }
    </style>
  </head>
  <body>
    <main>
      <h1>OptimalXO</h1>
      <div class=\"mode-picker\">
        <label><input type=\"radio\" name=\"mode\" value=\"ai\" checked /> vs Computer</label>
        <label><input type=\"radio\" name=\"mode\" value=\"human\" /> vs Friend</label>
      </div>
      <div id=\"status\" role=\"status\">Setting up your game…</div>
      <div id=\"board\" class=\"board-grid\"></div>
      <button id=\"restart\" type=\"button\">Restart</button>
    </main>
    <script>
      const boardEl = document.getElementById('board');
      const statusEl = document.getElementById('status');
      const restartButton = document.getElementById('restart');
      const modeInputs = document.querySelectorAll('input[name=\"mode\"]');

      let gameId = null;
      let gameState = null;
      let pollHandle = null;

      const cells = Array.from({ length: 9 }, (_, index) => {
        const cell = document.createElement('button');
        cell.className = 'cell';
        cell.dataset.index = String(index);
        cell.addEventListener('click', () => sendMove(index));
        boardEl.appendChild(cell);
        return cell;
      });

      function render() {
        if (!gameState) return;
        const line = gameState.winningLine || [];
        gameState.board.forEach((mark, index) => {
          const cell = cells[index];
          cell.textContent = mark;
          cell.classList.remove('X', 'O', 'win');
          if (mark) cell.classList.add(mark);
          if (line.includes(index)) cell.classList.add('win');
        });
        statusEl.textContent = gameState.statusMessage;
        boardEl.classList.toggle('thinking', gameState.computerPending);
      }

      function setState(data) {
        gameState = data;
        gameId = data.id;
        render();
        if (gameState.computerPending && !pollHandle) {
          pollHandle = setTimeout(poll, 200);
        }
      }

      async function post(path, body) {
        const response = await fetch(path, {
          method: 'POST',
          headers: { 'Content-Type': 'application/json' },
          body: JSON.stringify(body || {}),
        });
        if (!response.ok) throw new Error('Request failed');
        return response.json();
      }

      async function poll() {
        pollHandle = null;
        if (!gameId) return;
        try {
          const response = await fetch(`/api/game/${gameId}`);
          if (response.ok) setState(await response.json());
        } catch (error) {
          console.error('Polling failed', error);
        }
      }

      async function startGame() {
        const vsComputer = document.querySelector('input[name=\"mode\"]:checked').value === 'ai';
        setState(await post('/api/game', { vsComputer }));
      }

      async function sendMove(index) {
        if (!gameState || gameState.isTerminal || gameState.computerPending) return;
        if (gameState.board[index]) return;
        setState(await post(`/api/game/${gameId}/move`, { index }));
      }

      modeInputs.forEach((input) => {
        input.addEventListener('change', async () => {
          if (!gameId) return;
          setState(await post(`/api/game/${gameId}/mode`, { vsComputer: input.value === 'ai' }));
        });
      });

      restartButton.addEventListener('click', async () => {
        if (!gameId) return;
        setState(await post(`/api/game/${gameId}/restart`));
      });

      startGame().catch(() => {
        statusEl.textContent = 'Network error. Please reload.';
      });
    </script>
  </body>
</html>
"""
