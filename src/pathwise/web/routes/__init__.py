"""Route handlers for the Web API."""

from pathwise.web.routes.admin import router as admin_router
from pathwise.web.routes.auth import router as auth_router
from pathwise.web.routes.dashboard import router as dashboard_router
from pathwise.web.routes.health import router as health_router
from pathwise.web.routes.lessons import router as lessons_router
from pathwise.web.routes.onboarding import router as onboarding_router
from pathwise.web.routes.profile import router as profile_router
from pathwise.web.routes.roadmap import router as roadmap_router

__all__ = [
    "admin_router",
    "auth_router",
    "dashboard_router",
    "health_router",
    "lessons_router",
    "onboarding_router",
    "profile_router",
    "roadmap_router",
]
