from sms.models.student import Student, StudentBase, StudentPublic
from sms.models.ticket import Ticket, TicketBase, TicketPublic
from sms.models.views import StudentWithTickets, TicketWithStudent

__all__ = [
    "Student",
    "StudentBase",
    "StudentPublic",
    "Ticket",
    "TicketBase",
    "TicketPublic",
    "StudentWithTickets",
    "TicketWithStudent",
]
