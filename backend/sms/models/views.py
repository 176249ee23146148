"""
Joined read models.

Relationships between students and tickets are resolved at read time by
looking up tickets on ``student_id``; nothing here is persisted.
"""

from typing import List, Optional

from sqlmodel import Field

from sms.models.student import Student, StudentPublic
from sms.models.ticket import Ticket, TicketPublic


class StudentWithTickets(StudentPublic):
    tickets: List[TicketPublic] = Field(default_factory=list)

    @classmethod
    def join(cls, student: Student, tickets: List[Ticket]) -> "StudentWithTickets":
        return cls(
            **student.model_dump(),
            tickets=[TicketPublic(**ticket.model_dump()) for ticket in tickets],
        )


class TicketWithStudent(TicketPublic):
    student: Optional[StudentPublic] = None

    @classmethod
    def join(cls, ticket: Ticket, student: Optional[Student]) -> "TicketWithStudent":
        return cls(
            **ticket.model_dump(),
            student=StudentPublic(**student.model_dump()) if student is not None else None,
        )
