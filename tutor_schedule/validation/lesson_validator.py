"""
Lesson validator.

Checks that a lesson handed to the scheduler has what reminder
scheduling needs: an id and a sane time interval.
"""

from datetime import timedelta

from ..models.lesson import Lesson
from ..utils.dates import to_local_aware
from .validators import Validator, ValidationResult


class LessonValidator(Validator):
    """
    Validator for Lesson instances.

    Examples:
        >>> result = LessonValidator().validate(lesson)
        >>> if not result.is_valid:
        ...     print(result.get_summary())
    """

    MAX_ID_LENGTH = 100
    MAX_DURATION = timedelta(hours=6)

    def validate(self, data: Lesson) -> ValidationResult:
        result = ValidationResult(is_valid=True)

        if not isinstance(data, Lesson):
            return result.add_error(f"Expected a Lesson, got {type(data).__name__}")

        error = self.validate_string_length(
            data.id,
            "id",
            min_length=1,
            max_length=self.MAX_ID_LENGTH
        )
        if error:
            result.add_error(error)

        for field_name in ("start_time", "end_time"):
            error = self.validate_datetime(getattr(data, field_name), field_name)
            if error:
                result.add_error(error)

        if not result.is_valid:
            return result

        # mixing naive and aware values must not raise
        duration = to_local_aware(data.end_time) - to_local_aware(data.start_time)
        if duration <= timedelta(0):
            result.add_error(
                f"end_time must be after start_time "
                f"(start: {data.start_time.isoformat()}, end: {data.end_time.isoformat()})"
            )
        elif duration > self.MAX_DURATION:
            result.add_warning(
                f"Lesson unusually long: {duration} "
                f"(maximum expected: {self.MAX_DURATION})"
            )

        return result
