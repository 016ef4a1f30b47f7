import uuid
from datetime import date, datetime, timezone
from typing import Any, Callable, Mapping

from hr_portal.core.errors import InvalidRequest
from hr_portal.core.logger import get_logger
from hr_portal.models.enums import GoalStatus
from hr_portal.store.base import RecordStore, Row, require_one

logger = get_logger(__name__)

MIN_RATING = 1.0
MAX_RATING = 5.0
GOAL_STATUSES = frozenset(s.value for s in GoalStatus)
GOAL_FIELDS = frozenset({"title", "description", "target_date", "status", "completion_date"})


def _check_rating(rating: float | None) -> None:
    if rating is not None and not MIN_RATING <= rating <= MAX_RATING:
        raise InvalidRequest(f"Ratings go from {MIN_RATING:g} to {MAX_RATING:g}.")


class PerformanceService:
    """Reviews and goals. An unrated review keeps a null rating."""

    def __init__(self, records: RecordStore, clock: Callable[[], datetime] | None = None):
        self._records = records
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    async def employee_reviews(self, employee_id: uuid.UUID) -> list[Row]:
        return await self._records.find_many(
            "performance_reviews", {"employee_id": employee_id}, expand=("reviewer",), order_by="-review_date"
        )

    async def create_review(
        self,
        employee_id: uuid.UUID,
        review_date: date,
        overall_rating: float | None = None,
        reviewer_id: uuid.UUID | None = None,
        comments: str | None = None,
    ) -> Row:
        _check_rating(overall_rating)
        await require_one(self._records, "employees", {"employee_id": employee_id}, "employee")
        if reviewer_id is not None:
            await require_one(self._records, "employees", {"employee_id": reviewer_id}, "employee")
        row = await self._records.insert(
            "performance_reviews",
            {
                "employee_id": employee_id,
                "reviewer_id": reviewer_id,
                "review_date": review_date,
                "overall_rating": overall_rating,
                "comments": comments,
                "status": "COMPLETED" if overall_rating is not None else "DRAFT",
            },
        )
        logger.info("Performance review created", extra={"employee_id": str(employee_id), "review_id": str(row["review_id"])})
        return row

    async def employee_goals(self, employee_id: uuid.UUID) -> list[Row]:
        return await self._records.find_many(
            "performance_goals", {"employee_id": employee_id}, order_by=("status", "target_date")
        )

    async def create_goal(
        self,
        employee_id: uuid.UUID,
        title: str,
        description: str | None = None,
        target_date: date | None = None,
    ) -> Row:
        if not title.strip():
            raise InvalidRequest("Goals need a title.")
        await require_one(self._records, "employees", {"employee_id": employee_id}, "employee")
        return await self._records.insert(
            "performance_goals",
            {
                "employee_id": employee_id,
                "title": title.strip(),
                "description": description,
                "target_date": target_date,
                "status": GoalStatus.NOT_STARTED.value,
            },
        )

    async def update_goal(self, goal_id: uuid.UUID, changes: Mapping[str, Any]) -> Row:
        """
        Completing a goal stamps today's date unless one is given; moving it
        out of COMPLETED clears the date again.
        """
        unknown = set(changes) - GOAL_FIELDS
        if unknown:
            raise InvalidRequest(f"These fields cannot be changed: {', '.join(sorted(unknown))}.")
        patch = dict(changes)
        if "title" in patch and not (patch["title"] or "").strip():
            raise InvalidRequest("Goals need a title.")
        if "status" in patch:
            status = patch["status"]
            if status not in GOAL_STATUSES:
                raise InvalidRequest(f"Unknown goal status: {status}.")
            if status == GoalStatus.COMPLETED.value:
                patch.setdefault("completion_date", self._clock().date())
            else:
                patch["completion_date"] = None

        goal = await require_one(self._records, "performance_goals", {"goal_id": goal_id}, "goal")
        if not patch:
            return goal
        return (await self._records.update("performance_goals", {"goal_id": goal_id}, patch))[0]
