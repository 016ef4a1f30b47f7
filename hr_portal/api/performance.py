import uuid

from fastapi import APIRouter, Depends, status

from hr_portal.api.leave import reviewer_id
from hr_portal.container import AppContainer
from hr_portal.core.rbac import require_roles
from hr_portal.core.security import get_container
from hr_portal.schemas.performance import GoalCreate, GoalOut, GoalUpdate, ReviewCreate, ReviewOut

router = APIRouter(prefix="/performance", tags=["performance"], dependencies=[Depends(require_roles("hr"))])


@router.get("/employees/{employee_id}/reviews", response_model=list[ReviewOut])
async def employee_reviews(employee_id: uuid.UUID, container: AppContainer = Depends(get_container)):
    return [ReviewOut.from_row(r) for r in await container.performance.employee_reviews(employee_id)]


@router.post("/reviews", response_model=ReviewOut, status_code=status.HTTP_201_CREATED)
async def create_review(
    payload: ReviewCreate,
    reviewer: uuid.UUID | None = Depends(reviewer_id),
    container: AppContainer = Depends(get_container),
):
    row = await container.performance.create_review(
        payload.employee_id, payload.review_date, payload.overall_rating, reviewer, payload.comments
    )
    return ReviewOut.from_row(row)


@router.get("/employees/{employee_id}/goals", response_model=list[GoalOut])
async def employee_goals(employee_id: uuid.UUID, container: AppContainer = Depends(get_container)):
    return [GoalOut.from_row(r) for r in await container.performance.employee_goals(employee_id)]


@router.post("/goals", response_model=GoalOut, status_code=status.HTTP_201_CREATED)
async def create_goal(payload: GoalCreate, container: AppContainer = Depends(get_container)):
    row = await container.performance.create_goal(
        payload.employee_id, payload.title, payload.description, payload.target_date
    )
    return GoalOut.from_row(row)


@router.patch("/goals/{goal_id}", response_model=GoalOut)
async def update_goal(goal_id: uuid.UUID, payload: GoalUpdate, container: AppContainer = Depends(get_container)):
    row = await container.performance.update_goal(goal_id, payload.model_dump(exclude_unset=True))
    return GoalOut.from_row(row)
