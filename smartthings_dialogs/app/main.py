import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Depends, status
from fastapi.responses import Response

from .dependencies import get_chat_service, get_smartthings_client
from ..config import settings
from ..execution.exceptions import DialogStackOverflowError, FlowNotFoundError
from ..schemas.activities import Activity, TurnReply
from ..services.chat import ChatService
from .schemas import ConversationRead, FrameRead

logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    # Close the pooled SmartThings connection on shutdown
    await get_smartthings_client().aclose()


app = FastAPI(title="SmartThings Dialogs", lifespan=lifespan)

# --- Endpoints ---

@app.post("/api/messages", response_model=TurnReply)
async def handle_message(
    activity: Activity,
    service: ChatService = Depends(get_chat_service)
):
    """Runs one dialog turn for the activity's conversation."""
    try:
        return await service.process_activity(activity)
    except (FlowNotFoundError, DialogStackOverflowError) as e:
        # Programming errors in the flow graph; the stack was not saved.
        logger.error(f"Turn failed for conversation {activity.conversation_id}: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@app.get("/conversations/{conversation_id}", response_model=ConversationRead)
def get_conversation(
    conversation_id: str,
    service: ChatService = Depends(get_chat_service)
):
    session = service.get_session(conversation_id)
    if not session:
        raise HTTPException(status_code=404, detail="Conversation not found")

    active_frame = session.active_frame

    # Frame state is omitted from the stack view; `debug` carries the raw
    # snapshot, which never contains a raw token.
    stack_dto = [
        FrameRead(flow_id=frame.flow_id, step_index=frame.step_index)
        for frame in session.stack
    ]

    return ConversationRead(
        conversation_id=session.session_id,
        depth=session.depth,
        active_flow=active_frame.flow_id if active_frame else None,
        stack=stack_dto,
        updated_at=session.updated_at,
        debug=session.model_dump(mode='json')
    )


@app.delete("/conversations/{conversation_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_conversation(
    conversation_id: str,
    service: ChatService = Depends(get_chat_service)
):
    """
    Deletes a conversation's session. Returns 204 No Content on success.
    """
    success = service.delete_session(conversation_id)
    if not success:
        raise HTTPException(status_code=404, detail="Conversation not found")

    # For 204, we must explicitly return a Response object with no content
    return Response(status_code=status.HTTP_204_NO_CONTENT)
