from typing import Optional

from sqlmodel import Field, SQLModel


class StudentBase(SQLModel):
    name: str = ""
    course: str = ""
    email: str = Field(index=True, unique=True)
    age: int = 0
    grade: int = 0  # 0-100 inclusive, enforced by the service


class Student(StudentBase, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)

    # Tickets are not stored on the row; see models.views.StudentWithTickets


class StudentPublic(StudentBase):
    id: int
