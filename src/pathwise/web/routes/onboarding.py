"""Onboarding endpoints: clarifying questions, roadmap creation."""

from fastapi import APIRouter, Depends

from pathwise.core.auth import AuthService
from pathwise.core.onboarding import OnboardingFlow
from pathwise.llm.client import LLMClient
from pathwise.web.deps import get_llm_client, notifications_payload, require_user
from pathwise.web.schemas import (
    GoalRequest,
    QuestionsResponse,
    RoadmapCreatedResponse,
    RoadmapCreateRequest,
)

router = APIRouter(prefix="/api/onboarding", tags=["onboarding"])


@router.post("/questions", response_model=QuestionsResponse)
async def create_questions(
    body: GoalRequest,
    auth: AuthService = Depends(require_user),
    llm: LLMClient = Depends(get_llm_client),
) -> QuestionsResponse:
    """Generate clarifying questions for a goal (blank goals yield none)."""
    flow = OnboardingFlow(auth.client, auth.notifications, llm=llm, auth=auth)
    questions = await flow.submit_goal(body.goal)
    return QuestionsResponse(
        goal=flow.goal or body.goal,
        questions=questions,
        notifications=notifications_payload(auth.notifications),
    )


@router.post("/roadmap", response_model=RoadmapCreatedResponse, status_code=201)
async def create_roadmap(
    body: RoadmapCreateRequest,
    auth: AuthService = Depends(require_user),
    llm: LLMClient = Depends(get_llm_client),
) -> RoadmapCreatedResponse:
    """Generate and store the roadmap for an answered onboarding."""
    flow = OnboardingFlow.restore(
        auth.client,
        body.goal,
        [q.model_dump() for q in body.questions],
        body.answers,
        notifications=auth.notifications,
        llm=llm,
        auth=auth,
    )
    roadmap = await flow.create_roadmap(auth.user)
    return RoadmapCreatedResponse(
        roadmap=roadmap.to_dict(),
        notifications=notifications_payload(auth.notifications),
    )
