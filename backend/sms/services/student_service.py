"""
Student / Ticket Service

Validated CRUD over students and their support tickets:
- Email is unique across students (exact match)
- Grade stays within 0-100 inclusive
- A ticket always belongs to a student that existed when it was created
- Tickets close once and never reopen
- Deleting a student deletes its tickets in the same transaction

Rejections are reported as None / False. Every check runs before anything is
written, and all operations are serialized behind one lock so a
check-then-write can never interleave with another caller.
"""

import logging
import threading
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import IntegrityError

from sms.errors import (
    DuplicateEmailError,
    InvalidReferenceError,
    NotFoundError,
    ServiceError,
    TicketAlreadyClosedError,
)
from sms.models.student import Student, StudentBase
from sms.models.ticket import Ticket
from sms.models.views import StudentWithTickets, TicketWithStudent
from sms.services.rules import require_valid_grade
from sms.store import Store

logger = logging.getLogger(__name__)


def _student_values(candidate: StudentBase) -> Dict[str, Any]:
    """Every student column except id, taken from the candidate."""
    return {field: getattr(candidate, field) for field in StudentBase.model_fields}


class StudentService:
    """Consistency layer over the student and ticket collections of a Store."""

    def __init__(self, store: Store):
        self.store = store
        self._lock = threading.RLock()

    def initialise(self) -> None:
        """Reset both collections to empty. Safe to call repeatedly."""
        with self._lock:
            self.store.reset()
        logger.info("Student store initialised")

    # ========================================================================
    # Students
    # ========================================================================

    def get_students(self) -> List[Student]:
        with self._lock:
            return self.store.all(Student)

    def get_student(self, student_id: int) -> Optional[StudentWithTickets]:
        """Student with its current tickets, or None if no such student."""
        with self._lock, self.store.transaction():
            student = self.store.get(Student, student_id)
            if student is None:
                logger.debug("Student %s not found", student_id)
                return None
            return StudentWithTickets.join(student, self.store.find(Ticket, student_id=student.id))

    def get_student_by_email(self, email: str) -> Optional[StudentWithTickets]:
        with self._lock, self.store.transaction():
            student = self.store.first(Student, email=email)
            if student is None:
                logger.debug("No student with the requested email")
                return None
            return StudentWithTickets.join(student, self.store.find(Ticket, student_id=student.id))

    def add_student(self, candidate: StudentBase) -> Optional[Student]:
        """
        Store a new student.

        Any id carried by the candidate is ignored; the store assigns a new one.

        Returns:
            The stored Student, or None if the email is taken or the grade is not
            an integer in 0-100
        """
        values = _student_values(candidate)
        try:
            with self._lock, self.store.transaction():
                require_valid_grade(values["grade"])
                self._require_email_available(values["email"])
                student = self.store.insert(Student(**values))
        except (ServiceError, IntegrityError) as e:
            self._log_rejection("add_student", e)
            return None

        logger.info("Added student %s", student.id)
        return student

    def update_student(self, candidate: Student) -> Optional[Student]:
        """
        Replace every field of the student identified by ``candidate.id``.

        Returns:
            The updated Student, or None (with nothing changed) if the student
            does not exist, the grade is not an integer in 0-100, or the email belongs to
            a different student
        """
        values = _student_values(candidate)
        try:
            with self._lock, self.store.transaction():
                if candidate.id is None or self.store.get(Student, candidate.id) is None:
                    raise NotFoundError(f"Student {candidate.id} not found")
                require_valid_grade(values["grade"])
                self._require_email_available(values["email"], owner_id=candidate.id)
                student = self.store.update(Student, candidate.id, values)
        except (ServiceError, IntegrityError) as e:
            self._log_rejection("update_student", e)
            return None

        logger.info("Updated student %s", student.id)
        return student

    def delete_student(self, student_id: int) -> bool:
        """Delete a student together with all of its tickets."""
        with self._lock, self.store.transaction():
            if self.store.get(Student, student_id) is None:
                logger.warning("delete_student rejected (not_found): student %s", student_id)
                return False
            removed_tickets = self.store.delete_where(Ticket, student_id=student_id)
            self.store.delete(Student, student_id)

        logger.info("Deleted student %s and %d ticket(s)", student_id, removed_tickets)
        return True

    def _require_email_available(self, email: str, owner_id: Optional[int] = None) -> None:
        """
        Raise DuplicateEmailError if ``email`` belongs to a student other than
        ``owner_id``. A student keeping its own email is not a collision.
        """
        existing = self.store.first(Student, email=email)
        if existing is not None and existing.id != owner_id:
            raise DuplicateEmailError(f"Email already used by student {existing.id}")

    # ========================================================================
    # Tickets
    # ========================================================================

    def create_ticket(self, student_id: int, description: str) -> Optional[Ticket]:
        """Open a ticket for an existing student; None if the student does not exist."""
        try:
            with self._lock, self.store.transaction():
                if self.store.get(Student, student_id) is None:
                    raise InvalidReferenceError(f"Cannot open ticket for missing student {student_id}")
                ticket = self.store.insert(Ticket(student_id=student_id, description=description, active=True))
        except (ServiceError, IntegrityError) as e:
            self._log_rejection("create_ticket", e)
            return None

        logger.info("Opened ticket %s for student %s", ticket.id, student_id)
        return ticket

    def get_ticket(self, ticket_id: int) -> Optional[TicketWithStudent]:
        """Ticket with its owning student, or None if no such ticket."""
        with self._lock, self.store.transaction():
            ticket = self.store.get(Ticket, ticket_id)
            if ticket is None:
                logger.debug("Ticket %s not found", ticket_id)
                return None
            return TicketWithStudent.join(ticket, self.store.get(Student, ticket.student_id))

    def get_tickets(self, student_id: Optional[int] = None) -> List[Ticket]:
        """All tickets, open and closed, optionally for a single student."""
        with self._lock:
            if student_id is None:
                return self.store.all(Ticket)
            return self.store.find(Ticket, student_id=student_id)

    def get_open_tickets(self) -> List[TicketWithStudent]:
        with self._lock, self.store.transaction():
            tickets = self.store.find(Ticket, active=True)
            students: Dict[int, Optional[Student]] = {}
            for ticket in tickets:
                if ticket.student_id not in students:
                    students[ticket.student_id] = self.store.get(Student, ticket.student_id)
            return [TicketWithStudent.join(t, students[t.student_id]) for t in tickets]

    def close_ticket(self, ticket_id: int) -> Optional[Ticket]:
        """
        Close an active ticket.

        Closing is one-shot: a missing or already closed ticket returns None
        and nothing changes.
        """
        try:
            with self._lock, self.store.transaction():
                ticket = self.store.get(Ticket, ticket_id)
                if ticket is None:
                    raise NotFoundError(f"Ticket {ticket_id} not found")
                if not ticket.active:
                    raise TicketAlreadyClosedError(f"Ticket {ticket_id} is already closed")
                ticket = self.store.update(Ticket, ticket_id, {"active": False})
        except ServiceError as e:
            self._log_rejection("close_ticket", e)
            return None

        logger.info("Closed ticket %s", ticket_id)
        return ticket

    def delete_ticket(self, ticket_id: int) -> bool:
        with self._lock:
            deleted = self.store.delete(Ticket, ticket_id)

        if deleted:
            logger.info("Deleted ticket %s", ticket_id)
        else:
            logger.warning("delete_ticket rejected (not_found): ticket %s", ticket_id)
        return deleted

    @staticmethod
    def _log_rejection(operation: str, error: Exception) -> None:
        reason = getattr(error, "reason", "integrity_error")
        logger.warning("%s rejected (%s): %s", operation, reason, error)
