from app.models.activity_log import ActivityLog  # noqa: F401
from app.models.attendance import StudentAttendance  # noqa: F401
from app.models.batch import Batch, BatchStudent  # noqa: F401
from app.models.faculty import EmploymentType, Faculty, FacultyAvailability  # noqa: F401
from app.models.skill import FacultySkill, Skill  # noqa: F401
from app.models.student import Student  # noqa: F401
from app.models.substitution import FacultySubstitution  # noqa: F401
from app.models.user import User, UserRole  # noqa: F401
