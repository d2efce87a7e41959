from __future__ import annotations

from enum import Enum


class AttendanceStatus(str, Enum):
    """Attendance status labels as stored in the database."""

    PRESENT = "Present"
    ABSENT = "Absent"
    LATE = "Late"
    HALF_DAY = "Half Day"
    NOT_MARKED = "Not Marked"

    @classmethod
    def parse(cls, value: str) -> "AttendanceStatus":
        """Accept stored labels case-insensitively ("present", "half day")."""
        v = str(value or "").strip().lower()
        for member in cls:
            if member.value.lower() == v:
                return member
        raise ValueError(f"Unknown attendance status: {value!r}")


class RequestStatus(str, Enum):
    """Approval workflow state for leave requests and expense claims."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class AssetStatus(str, Enum):
    AVAILABLE = "Available"
    ASSIGNED = "Assigned"
    IN_MAINTENANCE = "In Maintenance"


class TaskStatus(str, Enum):
    TODO = "To Do"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"


class TaskPriority(str, Enum):
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


class ChangeType(str, Enum):
    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


class Gender(str, Enum):
    MALE = "male"
    FEMALE = "female"
    OTHER = "other"


class Role(str, Enum):
    """Role stored in the session by the sign-in integration."""

    ADMIN = "admin"
    EMPLOYEE = "employee"
