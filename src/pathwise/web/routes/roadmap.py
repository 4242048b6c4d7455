"""Roadmap endpoints: view, delete, alter."""

from fastapi import APIRouter, Depends, HTTPException, status

from pathwise.config.app_config import load_app_config
from pathwise.core import roadmaps
from pathwise.core.auth import AuthService
from pathwise.llm.client import LLMClient
from pathwise.store.models import Roadmap
from pathwise.store.roadmaps_repository import get_roadmap
from pathwise.utils.async_utils import run_blocking
from pathwise.web.deps import get_llm_client, notifications_payload, require_user
from pathwise.web.schemas import AlterRoadmapRequest, RoadmapViewResponse, StatusResponse

router = APIRouter(prefix="/api/roadmap", tags=["roadmap"])


async def _owned_roadmap(auth: AuthService, roadmap_id: str) -> Roadmap:
    roadmap = await run_blocking(
        get_roadmap,
        auth.client,
        roadmap_id,
        timeout=load_app_config().timeouts.store_query,
    )
    if roadmap is None or roadmap.user_id != auth.user.id:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Roadmap '{roadmap_id}' not found",
        )
    return roadmap


@router.get("", response_model=RoadmapViewResponse)
async def get_roadmap_view(auth: AuthService = Depends(require_user)) -> RoadmapViewResponse:
    """Latest roadmap with weeks, lessons and progress."""
    view = await roadmaps.load_roadmap_view(auth.client, auth.user)
    return RoadmapViewResponse(**view.to_dict())


@router.delete("/{roadmap_id}", response_model=StatusResponse)
async def delete_roadmap(
    roadmap_id: str, auth: AuthService = Depends(require_user)
) -> StatusResponse:
    """Delete a roadmap with its lessons and progress."""
    await _owned_roadmap(auth, roadmap_id)
    await roadmaps.delete_roadmap(auth.client, roadmap_id, auth.notifications)
    return StatusResponse(status="deleted", notifications=notifications_payload(auth.notifications))


@router.post("/{roadmap_id}/alter", response_model=RoadmapViewResponse)
async def alter_roadmap(
    roadmap_id: str,
    body: AlterRoadmapRequest,
    auth: AuthService = Depends(require_user),
    llm: LLMClient = Depends(get_llm_client),
) -> RoadmapViewResponse:
    """Regenerate a roadmap from a change request; progress is reset."""
    roadmap = await _owned_roadmap(auth, roadmap_id)
    await roadmaps.alter_roadmap(
        auth.client, roadmap, body.request, llm=llm, notifications=auth.notifications
    )
    view = await roadmaps.load_roadmap_view(auth.client, auth.user)
    return RoadmapViewResponse(
        **view.to_dict(), notifications=notifications_payload(auth.notifications)
    )
