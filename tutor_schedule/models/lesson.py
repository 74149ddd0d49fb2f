"""
Lesson data models.

Lessons are owned by the external schedule source. The core only reads
their id and time interval; everything else is carried along untouched
so reminder content can mention it.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional, Tuple


@dataclass(frozen=True)
class Attendance:
    """A student's attendance entry for a lesson."""

    student_name: str
    student_surname: str
    confirmed: Optional[bool] = None

    @property
    def full_name(self) -> str:
        return f"{self.student_name} {self.student_surname}".strip()


@dataclass(frozen=True)
class Lesson:
    """
    A scheduled teaching session.

    Attributes:
        id: Lesson identifier assigned by the schedule source
        start_time: Lesson start (naive values are local time)
        end_time: Lesson end
        description: Free text shown to the user
        address: Where the lesson takes place
        attendances: Students expected at the lesson

    Examples:
        >>> lesson = Lesson(
        ...     id="lesson_12345",
        ...     start_time=datetime(2024, 6, 13, 16, 0),
        ...     end_time=datetime(2024, 6, 13, 17, 0),
        ... )
    """

    id: str
    start_time: datetime
    end_time: datetime
    description: str = ""
    address: str = ""
    attendances: Tuple[Attendance, ...] = field(default_factory=tuple)

    @property
    def fully_confirmed(self) -> Optional[bool]:
        """
        Confirmation summary across attendances.

        Returns:
            True when every student confirmed, None when nobody has
            answered yet (or there are no students), False otherwise
        """
        answers = [a.confirmed for a in self.attendances]
        if all(a is None for a in answers):
            return None
        return all(a is True for a in answers)

    @classmethod
    def from_dto(cls, dto: Dict[str, Any]) -> 'Lesson':
        """
        Build a Lesson from the schedule API payload.

        Args:
            dto: Dictionary with ``LessonId``, ``StartTime`` and ``EndTime``
                (ISO 8601) plus optional ``Address``, ``Description`` and
                ``Attendances``

        Returns:
            Lesson instance

        Raises:
            KeyError: If a required field is missing
            ValueError: If a timestamp is not valid ISO 8601
        """
        attendances = tuple(
            Attendance(
                student_name=a.get("StudentName", ""),
                student_surname=a.get("StudentSurname", ""),
                confirmed=a.get("Confirmed"),
            )
            for a in dto.get("Attendances") or []
        )
        return cls(
            id=str(dto["LessonId"]),
            start_time=_parse_iso(dto["StartTime"]),
            end_time=_parse_iso(dto["EndTime"]),
            description=dto.get("Description") or "",
            address=dto.get("Address") or "",
            attendances=attendances,
        )


def _parse_iso(value: str) -> datetime:
    # fromisoformat() only accepts a trailing "Z" from 3.11 on
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value)
