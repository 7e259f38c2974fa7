"""FastAPI app exposing the shared match over a WebSocket."""

from __future__ import annotations

import logging
from typing import Annotated, Dict, Literal, Optional, Union

from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from fastapi.responses import HTMLResponse
from pydantic import (
    BaseModel,
    Field,
    StrictFloat,
    StrictInt,
    TypeAdapter,
    ValidationError,
    field_validator,
)

from .ai import MoveResolver, build_resolver
from .config import Settings
from .fanout import Broadcaster
from .session import GameSession, InvalidMove

logger = logging.getLogger(__name__)

INVALID_FORMAT = "Invalid message format"


class MoveMessage(BaseModel):
    """Place X at ``position``; range and occupancy are checked by the session."""

    type: Literal["move"]
    position: Union[StrictInt, StrictFloat]

    @field_validator("position")
    @classmethod
    def integral_position(cls, value: Union[int, float]) -> Union[int, float]:
        # 4.0 is cell 4; 4.5 reaches the session and is rejected as a move.
        if isinstance(value, float) and value.is_integer():
            return int(value)
        return value


class ResetMessage(BaseModel):
    type: Literal["reset"]


InboundMessage = Annotated[
    Union[MoveMessage, ResetMessage], Field(discriminator="type")
]
_inbound = TypeAdapter(InboundMessage)


def parse_message(text: str) -> Union[MoveMessage, ResetMessage]:
    """Decode one inbound frame; raises ``ValidationError`` if it is malformed."""

    return _inbound.validate_json(text)


def create_app(
    settings: Optional[Settings] = None, resolver: Optional[MoveResolver] = None
) -> FastAPI:
    """Build the app with its own session and observer list."""

    settings = settings or Settings.from_env()
    session = GameSession(resolver or build_resolver(settings))
    broadcaster = Broadcaster(session.snapshot)
    session.publish = broadcaster.publish

    app = FastAPI(
        title="Tic-Tac-Toe Agent",
        description="One shared tic-tac-toe match against an LLM opponent",
    )
    app.state.settings = settings
    app.state.session = session
    app.state.broadcaster = broadcaster

    async def handle(websocket: WebSocket, text: str) -> None:
        try:
            message = parse_message(text)
        except ValidationError:
            logger.debug("Rejecting malformed message %r", text)
            await broadcaster.send_error(websocket, INVALID_FORMAT)
            return

        if isinstance(message, ResetMessage):
            await session.reset()
            return
        try:
            await session.submit_move(message.position)
        except InvalidMove as exc:
            await broadcaster.send_error(websocket, str(exc))

    @app.websocket("/ws")
    async def play(websocket: WebSocket) -> None:
        await websocket.accept()
        await broadcaster.attach(websocket)
        logger.info("Observer connected (%d attached)", len(broadcaster))
        try:
            while True:
                message = await websocket.receive()
                if message["type"] == "websocket.disconnect":
                    break
                text = message.get("text")
                if text is None:
                    continue
                await handle(websocket, text)
        except WebSocketDisconnect:
            pass
        finally:
            broadcaster.detach(websocket)
            logger.info("Observer disconnected (%d attached)", len(broadcaster))

    @app.get("/api/state")
    def get_state() -> Dict[str, object]:
        return session.snapshot()

    @app.get("/", response_class=HTMLResponse)
    def index() -> str:
        return HTML_PAGE

    return app


HTML_PAGE = """<!DOCTYPE html>
<html lang=\"en\">
  <head>
    <meta charset=\"UTF-8\" />
    <meta name=\"viewport\" content=\"width=device-width, initial-scale=1.0\" />
    <title>Tic-Tac-Toe Agent</title>
    <style>
      body {
        font-family: 'Courier New', monospace;
        background: #0a0a0a;
        color: #00ff55;
        min-height: 100vh;
        display: flex;
        justify-content: center;
        align-items: center;
        margin: 0;
      }
      .container {
        background: #111;
        border: 1px solid #1a3a1a;
        border-radius: 12px;
        padding: 32px;
        width: min(420px, 90vw);
      }
      h1 { text-align: center; color: #00cc44; margin: 0 0 8px; }
      .status { text-align: center; font-weight: bold; min-height: 28px; margin-bottom: 16px; }
      .board { display: grid; grid-template-columns: repeat(3, 1fr); gap: 8px; aspect-ratio: 1; }
      .cell {
        background: #1a1a1a;
        border: 1px solid #2a4a2a;
        border-radius: 8px;
        color: inherit;
        font: bold 3em 'Courier New', monospace;
        cursor: pointer;
      }
      .cell:disabled { cursor: not-allowed; }
      .cell.o { color: #00aa44; }
      .controls { display: flex; justify-content: center; margin-top: 24px; }
      .reset-btn {
        background: #1a3a1a;
        color: #00ff55;
        border: 1px solid #2a5a2a;
        border-radius: 8px;
        padding: 12px 30px;
        font: bold 1em 'Courier New', monospace;
        cursor: pointer;
      }
      .connection { text-align: center; margin-top: 16px; font-size: 0.9em; color: #663333; }
      .connection.connected { color: #00cc44; }
      .thinking { animation: pulse 1.5s ease-in-out infinite; }
      @keyframes pulse { 0%, 100% { opacity: 1; } 50% { opacity: 0.4; } }
    </style>
  </head>
  <body>
    <div class=\"container\">
      <h1>Tic-Tac-Toe</h1>
      <div class=\"status\" id=\"status\">Connecting...</div>
      <div class=\"board\" id=\"board\"></div>
      <div class=\"controls\">
        <button class=\"reset-btn\" id=\"resetBtn\">New Game</button>
      </div>
      <div class=\"connection\" id=\"connection\">Disconnected</div>
    </div>
    <script>
      const boardEl = document.getElementById('board');
      const statusEl = document.getElementById('status');
      const connectionEl = document.getElementById('connection');
      let ws = null;

      for (let i = 0; i < 9; i += 1) {
        const cell = document.createElement('button');
        cell.className = 'cell';
        cell.dataset.index = String(i);
        boardEl.appendChild(cell);
      }

      function send(payload) {
        if (ws && ws.readyState === WebSocket.OPEN) {
          ws.send(JSON.stringify(payload));
        }
      }

      function render(state) {
        boardEl.querySelectorAll('.cell').forEach((cell, index) => {
          const value = state.board[index];
          cell.textContent = value || '';
          cell.className = value ? `cell ${value.toLowerCase()}` : 'cell';
          cell.disabled = value !== null || state.gameOver || state.currentPlayer !== 'X';
        });
        statusEl.classList.remove('thinking');
        if (state.gameOver) {
          statusEl.textContent = state.winner ? `${state.winner} wins` : 'Draw';
        } else if (state.currentPlayer === 'X') {
          statusEl.textContent = 'Your turn [X]';
        } else {
          statusEl.textContent = 'AI processing...';
          statusEl.classList.add('thinking');
        }
      }

      function connect() {
        const protocol = window.location.protocol === 'https:' ? 'wss:' : 'ws:';
        ws = new WebSocket(`${protocol}//${window.location.host}/ws`);
        ws.onopen = () => {
          connectionEl.textContent = 'Connected';
          connectionEl.className = 'connection connected';
        };
        ws.onmessage = (event) => {
          const data = JSON.parse(event.data);
          if (data.type === 'state') {
            render(data.state);
          } else if (data.type === 'error') {
            console.error('Error:', data.message);
          }
        };
        ws.onclose = () => {
          connectionEl.textContent = 'Disconnected';
          connectionEl.className = 'connection';
          setTimeout(connect, 2000);
        };
      }

      boardEl.addEventListener('click', (event) => {
        if (event.target.classList.contains('cell')) {
          send({ type: 'move', position: Number(event.target.dataset.index) });
        }
      });
      document.getElementById('resetBtn').addEventListener('click', () => send({ type: 'reset' }));

      connect();
    </script>
  </body>
</html>
"""
