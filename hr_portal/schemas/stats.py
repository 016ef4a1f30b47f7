from pydantic import BaseModel


class HRStats(BaseModel):
    """Headline numbers for the HR dashboard"""
    total_employees: int = 0
    present_today: int = 0
    pending_leaves: int = 0
    open_positions: int = 0
    attendance_rate: str = "0%"


class DepartmentCount(BaseModel):
    id: str
    name: str
    count: int = 0


class AttendanceStats(BaseModel):
    """Status counts for a day (org-wide) or a month (one employee)"""
    total: int = 0
    present: int = 0
    absent: int = 0
    late: int = 0
    on_leave: int = 0
    half_day: int = 0
    holiday: int = 0
    attendance_rate: float = 0.0  # Percentage of records marked PRESENT or LATE


class PayrollStats(BaseModel):
    total: int = 0
    draft: int = 0
    processed: int = 0
    paid: int = 0
    total_amount: float = 0.0
    average_net_salary: float = 0.0


class RecruitmentStats(BaseModel):
    total_job_postings: int = 0
    active_job_postings: int = 0
    total_applications: int = 0
    pending_applications: int = 0  # SUBMITTED
    shortlisted: int = 0
    interviewed: int = 0
    hired: int = 0
    hire_rate: float = 0.0  # Percentage of applications hired


class TopPerformer(BaseModel):
    employee_id: str
    name: str
    department: str | None = None
    position: str | None = None
    rating: float


class EmployeeStats(BaseModel):
    """Self-service dashboard numbers for one employee"""
    hours_this_week: float = 0.0
    total_leave_balance: float = 0.0
    performance_score: float = 0.0
    average_rating: float = 0.0
    goals_completed: int = 0
    total_goals: int = 0
    goal_completion: float = 0.0  # Percentage of goals COMPLETED
