from hr_portal.models.user import User
from hr_portal.models.organization import Department, Position
from hr_portal.models.employee import Employee
from hr_portal.models.attendance import Attendance
from hr_portal.models.leave import LeaveBalance, LeaveRequest
from hr_portal.models.performance import PerformanceGoal, PerformanceReview
from hr_portal.models.payroll import Payroll
from hr_portal.models.recruitment import Application, JobPosting
from hr_portal.models.identity import AuthIdentity, AuthSessionRecord

__all__ = [ "User", "Department", "Position", "Employee",
           "Attendance", "LeaveBalance", "LeaveRequest",
           "PerformanceGoal", "PerformanceReview", "Payroll",
           "Application", "JobPosting", "AuthIdentity", "AuthSessionRecord" ]
