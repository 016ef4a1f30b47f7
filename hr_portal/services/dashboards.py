"""
Dashboard views: fetch rows from the record store, reduce them with the
helpers in hr_portal.services.aggregation.

Independent fetches for one view run concurrently. Store errors propagate to
the caller (the API layer renders them); empty data yields zeros.
"""
import asyncio
import calendar
import uuid
from datetime import date, timedelta

from hr_portal.core.errors import NotFoundError
from hr_portal.core.logger import get_logger
from hr_portal.models.enums import (
    ApplicationStatus,
    AttendanceStatus,
    GoalStatus,
    JobPostingStatus,
    LeaveStatus,
    PayrollStatus,
)
from hr_portal.schemas.stats import (
    AttendanceStats,
    DepartmentCount,
    EmployeeStats,
    HRStats,
    PayrollStats,
    RecruitmentStats,
    TopPerformer,
)
from hr_portal.services import aggregation as agg
from hr_portal.store.base import RecordStore, Row

logger = get_logger(__name__)

# statuses that count as "attended" for attendance rates
ATTENDED = (AttendanceStatus.PRESENT.value, AttendanceStatus.LATE.value)


def month_bounds(year: int, month: int) -> tuple[date, date]:
    last = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last)


def week_start(day: date) -> date:
    """Sunday on or before `day`."""
    return day - timedelta(days=(day.weekday() + 1) % 7)


def _attendance_stats(rows: list[Row]) -> AttendanceStats:
    counts = agg.count_by(rows, "status")
    attended = sum(counts.get(status, 0) for status in ATTENDED)
    return AttendanceStats(
        total=len(rows),
        present=counts.get(AttendanceStatus.PRESENT.value, 0),
        absent=counts.get(AttendanceStatus.ABSENT.value, 0),
        late=counts.get(AttendanceStatus.LATE.value, 0),
        on_leave=counts.get(AttendanceStatus.ON_LEAVE.value, 0),
        half_day=counts.get(AttendanceStatus.HALF_DAY.value, 0),
        holiday=counts.get(AttendanceStatus.HOLIDAY.value, 0),
        attendance_rate=agg.percentage(attended, len(rows)),
    )


def _display_name(employee: Row | None) -> str:
    if not employee:
        return "Unknown"
    return f"{employee.get('first_name', '')} {employee.get('last_name', '')}".strip() or "Unknown"


class DashboardService:
    def __init__(self, records: RecordStore):
        self._records = records

    async def hr_stats(self, today: date) -> HRStats:
        total_employees, present_today, pending_leaves, open_positions = await asyncio.gather(
            self._records.count("employees"),
            self._records.count("attendance", {"date": today, "status": AttendanceStatus.PRESENT.value}),
            self._records.count("leave_requests", {"status": LeaveStatus.PENDING.value}),
            self._records.count("job_postings", {"status": JobPostingStatus.ACTIVE.value}),
        )
        return HRStats(
            total_employees=total_employees,
            present_today=present_today,
            pending_leaves=pending_leaves,
            open_positions=open_positions,
            attendance_rate=agg.percentage_label(present_today, total_employees),
        )

    async def department_overview(self) -> list[DepartmentCount]:
        departments = await self._records.find_many(
            "departments", expand=("employees",), order_by="department_name"
        )
        return [
            DepartmentCount(
                id=str(row["department_id"]),
                name=row["department_name"],
                count=len(row.get("employees") or []),
            )
            for row in departments
        ]

    async def attendance_summary(self, day: date) -> AttendanceStats:
        rows = await self._records.find_many("attendance", {"date": day})
        return _attendance_stats(rows)

    async def employee_attendance_stats(self, employee_id: uuid.UUID, year: int, month: int) -> AttendanceStats:
        start, end = month_bounds(year, month)
        rows = await self._records.find_many(
            "attendance",
            {"employee_id": employee_id, "date__gte": start, "date__lte": end},
        )
        return _attendance_stats(rows)

    async def payroll_stats(self, year: int | None = None, month: int | None = None) -> PayrollStats:
        filters = {}
        if year is not None and month is not None:
            start, end = month_bounds(year, month)
            filters = {"pay_period_start__gte": start, "pay_period_end__lte": end}
        elif year is not None:
            filters = {"pay_period_start__gte": date(year, 1, 1), "pay_period_end__lte": date(year, 12, 31)}

        rows = await self._records.find_many("payroll", filters)
        counts = agg.count_by(rows, "status")
        total_amount = agg.total_of(rows, "net_salary")
        return PayrollStats(
            total=len(rows),
            draft=counts.get(PayrollStatus.DRAFT.value, 0),
            processed=counts.get(PayrollStatus.PROCESSED.value, 0),
            paid=counts.get(PayrollStatus.PAID.value, 0),
            total_amount=round(total_amount, 2),
            average_net_salary=round(agg.ratio(total_amount, len(rows)), 2),
        )

    async def recruitment_stats(self) -> RecruitmentStats:
        postings, applications = await asyncio.gather(
            self._records.find_many("job_postings"),
            self._records.find_many("applications"),
        )
        posting_counts = agg.count_by(postings, "status")
        app_counts = agg.count_by(applications, "status")
        hired = app_counts.get(ApplicationStatus.HIRED.value, 0)
        return RecruitmentStats(
            total_job_postings=len(postings),
            active_job_postings=posting_counts.get(JobPostingStatus.ACTIVE.value, 0),
            total_applications=len(applications),
            pending_applications=app_counts.get(ApplicationStatus.SUBMITTED.value, 0),
            shortlisted=app_counts.get(ApplicationStatus.SHORTLISTED.value, 0),
            interviewed=app_counts.get(ApplicationStatus.INTERVIEWED.value, 0),
            hired=hired,
            hire_rate=agg.percentage(hired, len(applications)),
        )

    async def employee_count_by_status(self) -> dict[str, int]:
        rows = await self._records.find_many("employees")
        return agg.count_by(rows, "employment_status")

    async def top_performers(self, limit: int = 5) -> list[TopPerformer]:
        reviews = await self._records.find_many(
            "performance_reviews",
            {"overall_rating__isnull": False},
            expand=("employee", "employee.department", "employee.position"),
        )
        performers = []
        for review in agg.top_n(reviews, "overall_rating", limit):
            employee = review.get("employee") or {}
            performers.append(
                TopPerformer(
                    employee_id=str(review["employee_id"]),
                    name=_display_name(employee),
                    department=(employee.get("department") or {}).get("department_name"),
                    position=(employee.get("position") or {}).get("position_title"),
                    rating=float(review["overall_rating"]),
                )
            )
        return performers

    async def employee_average_rating(self, employee_id: uuid.UUID) -> float:
        reviews = await self._records.find_many("performance_reviews", {"employee_id": employee_id})
        return agg.average_rating(reviews, "overall_rating")

    async def employee_stats(self, employee_id: uuid.UUID, today: date) -> EmployeeStats:
        employee = await self._records.find_one("employees", {"employee_id": employee_id})
        if employee is None:
            raise NotFoundError("employee", str(employee_id))

        start = week_start(today)
        attendance, balances, latest, reviews, goals = await asyncio.gather(
            self._records.find_many(
                "attendance",
                {"employee_id": employee_id, "date__gte": start, "date__lte": today},
            ),
            self._records.find_many("leave_balances", {"employee_id": employee_id}),
            self._records.find_many(
                "performance_reviews",
                {"employee_id": employee_id, "overall_rating__isnull": False},
                order_by="-review_date",
                limit=1,
            ),
            self._records.find_many("performance_reviews", {"employee_id": employee_id}),
            self._records.find_many("performance_goals", {"employee_id": employee_id}),
        )

        completed = agg.count_by(goals, "status").get(GoalStatus.COMPLETED.value, 0)
        stats = EmployeeStats(
            hours_this_week=round(agg.total_of(attendance, "hours_worked"), 2),
            total_leave_balance=agg.total_of(balances, "available_days"),
            performance_score=float(latest[0]["overall_rating"]) if latest else 0.0,
            average_rating=agg.average_rating(reviews, "overall_rating"),
            goals_completed=completed,
            total_goals=len(goals),
            goal_completion=agg.percentage(completed, len(goals)),
        )
        logger.debug("Employee stats computed", extra={"employee_id": str(employee_id)})
        return stats
