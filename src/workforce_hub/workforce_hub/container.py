from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .attendance.factory import AttendanceStrategyFactory
from .attendance.model import WorkdayPolicy
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.service import AttendanceService
from .database.connection import DBConfig, DatabaseConnection
from .expenses.mysql_expense_repository import MySQLExpenseRepository
from .expenses.service import ExpenseService
from .leave.mysql_leave_repository import MySQLLeaveRepository
from .leave.service import LeaveService
from .projects.mysql_project_repository import MySQLProjectRepository
from .projects.service import ProjectService
from .tasks.mysql_task_repository import MySQLTaskRepository
from .tasks.service import TaskService
from .timesheets.mysql_time_entry_repository import MySQLTimeEntryRepository
from .timesheets.service import TimesheetService
from .users.mysql_department_repository import MySQLDepartmentRepository
from .users.mysql_user_repository import MySQLUserRepository
from .users.repository import UserRepository
from .users.service import AuthService, DepartmentService, UserService


@dataclass(frozen=True)
class Container:
    """Wired services for the controllers.

    Repositories are typed by their protocols so tests can wire in-memory fakes.
    """

    users_repo: UserRepository

    auth_service: AuthService
    user_service: UserService
    department_service: DepartmentService
    project_service: ProjectService
    task_service: TaskService
    timesheet_service: TimesheetService
    attendance_service: AttendanceService
    leave_service: LeaveService
    expense_service: ExpenseService

    conn: Optional[DatabaseConnection] = None


def build_container(*, db_config: dict, workday_policy: Optional[WorkdayPolicy] = None) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_mapping(db_config))

    users_repo = MySQLUserRepository(conn)
    departments_repo = MySQLDepartmentRepository(conn)
    projects_repo = MySQLProjectRepository(conn)
    tasks_repo = MySQLTaskRepository(conn)

    project_service = ProjectService(projects_repo, users_repo, departments_repo)

    return Container(
        conn=conn,
        users_repo=users_repo,
        auth_service=AuthService(users_repo),
        user_service=UserService(users_repo, departments_repo),
        department_service=DepartmentService(departments_repo, users_repo),
        project_service=project_service,
        task_service=TaskService(tasks_repo, project_service, users_repo),
        timesheet_service=TimesheetService(MySQLTimeEntryRepository(conn), users_repo, tasks_repo),
        attendance_service=AttendanceService(
            MySQLAttendanceRepository(conn),
            users_repo,
            strategy_factory=AttendanceStrategyFactory(),
            policy=workday_policy or WorkdayPolicy(),
        ),
        leave_service=LeaveService(MySQLLeaveRepository(conn), users_repo),
        expense_service=ExpenseService(MySQLExpenseRepository(conn), users_repo, projects_repo),
    )
