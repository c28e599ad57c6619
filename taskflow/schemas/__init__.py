from .user import UserCreate, UserLogin, UserBasic, UserOut, UserWithLoad, UserUpdate
from .tokens import Token
from .role import RoleCreate, RoleOut, TaskTypeCreate, TaskTypeUpdate, TaskTypeOut
from .task import TaskCreate, TaskUpdate, TaskOut, TaskProgressUpdate, TaskStatusUpdate, TaskFeedback, AssignmentPreview, TaskDeleted
from .time_log import TimeLogOut, TaskTimeLogOut, PunchSummaryRow, MonthlyPunchReport
from .performance import PerformanceScore, PerformanceDetail
from .dashboard import DashboardStats, DailyView, WeeklyView, MonthlyView, TeamLoadRow
