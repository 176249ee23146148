"""Field rules checked before a student write is applied."""

from sms.errors import GradeOutOfRangeError

MIN_GRADE = 0
MAX_GRADE = 100


def is_valid_grade(grade) -> bool:
    """True for a whole number (bool excluded) within MIN_GRADE-MAX_GRADE."""
    if not isinstance(grade, int) or isinstance(grade, bool):
        return False
    return MIN_GRADE <= grade <= MAX_GRADE


def require_valid_grade(grade) -> None:
    """
    Raise GradeOutOfRangeError unless grade is an int with MIN_GRADE <= grade <= MAX_GRADE.

    Raises:
        GradeOutOfRangeError: grade is missing, not an integer, or outside the inclusive range
    """
    if not is_valid_grade(grade):
        raise GradeOutOfRangeError(f"Grade {grade!r} is not an integer in {MIN_GRADE}-{MAX_GRADE}")
