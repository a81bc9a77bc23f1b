"""Caller's own account settings."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_viewer
from api.schemas.common import ErrorResponse
from api.schemas.privacy import PrivacySettingsUpdate
from api.services import users as user_service
from core.privacy.policy import ViewerContext
from database.engine import get_db

router = APIRouter()


@router.get(
    "/me/privacy",
    summary="Get Visibility Settings",
    responses={403: {"model": ErrorResponse}},
)
async def get_privacy_settings(
    viewer: ViewerContext = Depends(get_viewer),
    db: AsyncSession = Depends(get_db),
):
    return await user_service.get_privacy_settings(db, viewer)


@router.put(
    "/me/privacy",
    summary="Update Visibility Settings",
    description="Only the profile owner can change what other roles see.",
    responses={400: {"model": ErrorResponse}, 403: {"model": ErrorResponse}},
)
async def update_privacy_settings(
    payload: PrivacySettingsUpdate,
    viewer: ViewerContext = Depends(get_viewer),
    db: AsyncSession = Depends(get_db),
):
    return await user_service.update_privacy_settings(
        db, viewer, payload.model_dump(exclude_none=True)
    )
