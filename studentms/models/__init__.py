"""SQLAlchemy ORM models."""

from studentms.models.assignment import Assignment
from studentms.models.attendance import Attendance
from studentms.models.base import Base
from studentms.models.course import Course
from studentms.models.fee import Fee
from studentms.models.grade import Grade
from studentms.models.student import Student
from studentms.models.submission import Submission
from studentms.models.timetable import TimetableEntry
from studentms.models.user import User

__all__ = [
    "Base", "Assignment", "Attendance", "Course", "Fee", "Grade",
    "Student", "Submission", "TimetableEntry", "User",
]
