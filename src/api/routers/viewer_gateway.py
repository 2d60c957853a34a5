"""
Viewer Gateway

WebSocket endpoint that streams debate events to one viewer and forwards
their chat messages. The snapshot is queued in the same step the connection
joins the broadcast, so it always arrives first.
"""
import asyncio
import json
import logging
from typing import Any, Dict

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from ..services.debate_events import PingEvent, normalize_debate_event
from ..services.debate_orchestrator import DebateOrchestrator
from ..services.publisher import QueueSubscriber

logger = logging.getLogger(__name__)
router = APIRouter(tags=["viewer-gateway"])


class ViewerConnection:
    """Per-socket state shared by the read loop and the writer task."""

    def __init__(self, websocket: WebSocket, orchestrator: DebateOrchestrator):
        self.websocket = websocket
        self.orchestrator = orchestrator
        self.gateway = orchestrator.config.gateway
        self.subscriber = QueueSubscriber(maxsize=self.gateway.subscriber_queue_size)
        self.subscriber_id = ""
        self.last_seen = asyncio.get_running_loop().time()

    def touch(self) -> None:
        self.last_seen = asyncio.get_running_loop().time()

    def idle_seconds(self) -> float:
        return asyncio.get_running_loop().time() - self.last_seen

    async def write_loop(self) -> None:
        """Drain the subscriber queue to the socket and ping on a fixed schedule.

        Pings go out every ping interval whether or not events are flowing.
        The viewer is closed once it has been silent past the idle timeout
        or has fallen behind the broadcast.
        """
        queue = self.subscriber.queue
        loop = asyncio.get_running_loop()
        next_ping = loop.time() + self.gateway.ping_interval_seconds
        while True:
            if self.subscriber.closed and queue.empty():
                await self.close("fell behind")
                return
            if self.idle_seconds() > self.gateway.idle_timeout_seconds:
                await self.close("idle timeout")
                return

            now = loop.time()
            if now >= next_ping:
                next_ping = now + self.gateway.ping_interval_seconds
                payload = normalize_debate_event(PingEvent())
            else:
                try:
                    payload = await asyncio.wait_for(queue.get(), timeout=next_ping - now)
                except asyncio.TimeoutError:
                    continue

            try:
                await self.websocket.send_json(payload)
            except (WebSocketDisconnect, RuntimeError, OSError) as e:
                logger.info(f"Send to viewer {self.subscriber_id[:8]} failed: {e}")
                return

    async def close(self, reason: str) -> None:
        logger.info(f"Closing viewer {self.subscriber_id[:8]}: {reason}")
        try:
            await self.websocket.close(code=1000, reason=reason)
        except (RuntimeError, OSError) as e:
            logger.debug(f"Close of viewer {self.subscriber_id[:8]} ignored: {e}")

    async def read_loop(self) -> None:
        """Handle chat and pong frames until the viewer disconnects."""
        while True:
            try:
                raw = await self.websocket.receive_text()
            except (WebSocketDisconnect, RuntimeError):
                return
            self.touch()
            try:
                data = json.loads(raw)
            except ValueError:
                logger.debug(f"Ignoring non-JSON frame from viewer {self.subscriber_id[:8]}")
                continue
            if isinstance(data, dict):
                self.handle_frame(data)

    def handle_frame(self, data: Dict[str, Any]) -> None:
        frame_type = data.get("type")
        if frame_type == "chat":
            ack = self.orchestrator.handle_chat_message(str(data.get("message") or ""))
            logger.info(
                f"Chat from viewer {self.subscriber_id[:8]}: success={ack.success} queued={ack.queued}"
            )
        elif frame_type == "pong":
            return
        else:
            logger.debug(f"Ignoring frame type {frame_type!r}")


@router.websocket("/ws")
async def viewer_socket(websocket: WebSocket):
    orchestrator = getattr(websocket.app.state, "orchestrator", None)
    if orchestrator is None:
        await websocket.close(code=1013)
        return

    await websocket.accept()
    connection = ViewerConnection(websocket, orchestrator)
    connection.subscriber_id = orchestrator.connect_viewer(connection.subscriber)

    # The writer closes the socket when it gives up, which ends the read loop
    writer = asyncio.create_task(connection.write_loop(), name="viewer-writer")
    writer.add_done_callback(_log_writer_failure)
    try:
        await connection.read_loop()
    finally:
        writer.cancel()
        connection.subscriber.close()
        orchestrator.disconnect_viewer(connection.subscriber_id)


def _log_writer_failure(task: asyncio.Task) -> None:
    if not task.cancelled() and task.exception() is not None:
        logger.error(f"Viewer writer failed: {task.exception()}")
