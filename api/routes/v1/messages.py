"""Messaging endpoints."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_viewer, require_industry_viewer
from api.schemas.common import ErrorResponse
from api.schemas.messages import ConversationInitiate, MessageCreate
from api.services import messages as message_service
from core.privacy.policy import ViewerContext
from database.engine import get_db

router = APIRouter()


@router.post(
    "/initiate",
    status_code=201,
    summary="Initiate Conversation",
    description="Companies may message candidates whose application is shortlisted or has an interview scheduled.",
    responses={
        400: {"model": ErrorResponse},
        403: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
    },
)
async def initiate_conversation(
    payload: ConversationInitiate,
    viewer: ViewerContext = Depends(require_industry_viewer),
    db: AsyncSession = Depends(get_db),
):
    return await message_service.initiate_conversation(
        db,
        viewer,
        application_id=payload.application_id,
        content=payload.content,
        subject=payload.subject,
    )


@router.post(
    "",
    status_code=201,
    summary="Send Message",
    description="Reply inside an existing conversation.",
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def send_message(
    payload: MessageCreate,
    viewer: ViewerContext = Depends(get_viewer),
    db: AsyncSession = Depends(get_db),
):
    return await message_service.send_message(
        db,
        viewer,
        receiver_id=payload.receiver_id,
        content=payload.content,
        subject=payload.subject,
    )


@router.get("/conversations", summary="List Conversations")
async def list_conversations(
    viewer: ViewerContext = Depends(get_viewer),
    db: AsyncSession = Depends(get_db),
):
    conversations = await message_service.list_conversations(db, viewer)
    return {"conversations": conversations}


@router.get(
    "/{user_id}",
    summary="Get Conversation",
    description="Messages exchanged with one user. Opening the thread marks incoming messages as read.",
    responses={404: {"model": ErrorResponse}},
)
async def get_conversation(
    user_id: int,
    viewer: ViewerContext = Depends(get_viewer),
    db: AsyncSession = Depends(get_db),
):
    return await message_service.get_thread(db, viewer, user_id)
