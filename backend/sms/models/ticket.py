from typing import Optional

from sqlmodel import Field, SQLModel


class TicketBase(SQLModel):
    description: str = ""
    active: bool = Field(default=True)  # True -> False only, via StudentService.close_ticket


class Ticket(TicketBase, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    student_id: int = Field(foreign_key="student.id", index=True, ondelete="CASCADE")


class TicketPublic(TicketBase):
    id: int
    student_id: int
