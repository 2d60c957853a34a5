"""
Debate API Router

Control surface for the live debate: snapshot, start/stop and viewer chat.
"""
from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Request
import logging

from ..models.debate import ChatAck, ChatMessageRequest, ControlAck, DebateSnapshot, DebateStatus
from ..services.debate_orchestrator import DebateOrchestrator

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api", tags=["debate"])


# Dependency: Get orchestrator instance
def get_orchestrator(request: Request) -> DebateOrchestrator:
    """Get the orchestrator created at startup"""
    orchestrator = getattr(request.app.state, "orchestrator", None)
    if orchestrator is None:
        raise HTTPException(status_code=503, detail="Debate arena is not initialized")
    return orchestrator


async def _start_in_background(orchestrator: DebateOrchestrator) -> None:
    try:
        await orchestrator.start()
    except Exception as e:
        logger.error(f"Failed to start debate: {e}", exc_info=True)


@router.get("/debate", response_model=DebateSnapshot)
async def get_debate(orchestrator: DebateOrchestrator = Depends(get_orchestrator)):
    """Get the current debate snapshot"""
    return orchestrator.snapshot()


@router.post("/debate/start", response_model=ControlAck)
async def start_debate(
    background_tasks: BackgroundTasks,
    orchestrator: DebateOrchestrator = Depends(get_orchestrator),
):
    """Start the debate; topic acquisition runs after the response is sent"""
    if orchestrator.status != DebateStatus.STOPPED:
        return ControlAck(success=True, message="Debate already running", status=orchestrator.status)

    background_tasks.add_task(_start_in_background, orchestrator)
    return ControlAck(success=True, message="Debate starting", status=orchestrator.status)


@router.post("/debate/stop", response_model=ControlAck)
async def stop_debate(orchestrator: DebateOrchestrator = Depends(get_orchestrator)):
    """Stop the debate and cancel its loops"""
    try:
        stopped = await orchestrator.stop()
    except Exception as e:
        logger.error(f"Failed to stop debate: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))

    message = "Debate stopped" if stopped else "Debate already stopped"
    return ControlAck(success=True, message=message, status=orchestrator.status)


@router.post("/chat", response_model=ChatAck)
async def post_chat_message(
    request: ChatMessageRequest,
    orchestrator: DebateOrchestrator = Depends(get_orchestrator),
):
    """Submit a viewer chat message; a reply may arrive later over the socket"""
    ack = orchestrator.handle_chat_message(request.message)
    if not ack.success:
        raise HTTPException(status_code=400, detail=ack.reason or "Message rejected")
    return ack
