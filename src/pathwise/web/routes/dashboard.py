"""Dashboard endpoint."""

from fastapi import APIRouter, Depends

from pathwise.core.auth import AuthService
from pathwise.core.dashboard import load_dashboard
from pathwise.web.deps import require_user
from pathwise.web.schemas import DashboardResponse

router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])


@router.get("", response_model=DashboardResponse)
async def get_dashboard(auth: AuthService = Depends(require_user)) -> DashboardResponse:
    """Roadmap, progress, recent completions and stat cards."""
    dashboard = await load_dashboard(auth.client, auth.user)
    return DashboardResponse(**dashboard.to_dict())
