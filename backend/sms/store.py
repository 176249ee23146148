"""
Storage collaborator for the student records service.

Store describes the key-indexed operations the service relies on; SqlStore
implements them on a SQLAlchemy engine through SQLModel sessions. Records
handed back are detached from their session but keep their loaded values.
"""

import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional, Type, TypeVar

from sqlalchemy.engine import Engine
from sqlmodel import Session, SQLModel, select

# Registers the tables on SQLModel.metadata before reset() uses it
from sms.models.student import Student  # noqa: F401
from sms.models.ticket import Ticket  # noqa: F401

ModelT = TypeVar("ModelT", bound=SQLModel)


class Store(ABC):
    """Key-indexed storage for table models"""

    @abstractmethod
    def transaction(self):
        """Context manager grouping every call made inside it into one atomic unit."""

    @abstractmethod
    def insert(self, record: ModelT) -> ModelT: ...

    @abstractmethod
    def get(self, model: Type[ModelT], record_id: int) -> Optional[ModelT]: ...

    @abstractmethod
    def all(self, model: Type[ModelT]) -> List[ModelT]: ...

    @abstractmethod
    def find(self, model: Type[ModelT], **criteria: Any) -> List[ModelT]: ...

    @abstractmethod
    def update(self, model: Type[ModelT], record_id: int, values: Dict[str, Any]) -> Optional[ModelT]: ...

    @abstractmethod
    def delete(self, model: Type[ModelT], record_id: int) -> bool: ...

    @abstractmethod
    def delete_where(self, model: Type[ModelT], **criteria: Any) -> int: ...

    @abstractmethod
    def reset(self) -> None: ...

    def first(self, model: Type[ModelT], **criteria: Any) -> Optional[ModelT]:
        matches = self.find(model, **criteria)
        return matches[0] if matches else None


class SqlStore(Store):
    def __init__(self, engine: Engine):
        self.engine = engine
        self._local = threading.local()

    @contextmanager
    def transaction(self) -> Iterator[Session]:
        """
        Yield the session for the current unit of work.

        The outermost call opens a session and commits when the block exits
        cleanly, rolling back otherwise. Nested calls on the same thread reuse
        the outer session, so the outer block decides commit or rollback.
        """
        active = getattr(self._local, "session", None)
        if active is not None:
            yield active
            return

        with Session(self.engine, expire_on_commit=False) as session:
            self._local.session = session
            try:
                yield session
                session.commit()
            except Exception:
                session.rollback()
                raise
            finally:
                self._local.session = None

    def insert(self, record: ModelT) -> ModelT:
        with self.transaction() as session:
            session.add(record)
            session.flush()
            session.refresh(record)
            return record

    def get(self, model: Type[ModelT], record_id: int) -> Optional[ModelT]:
        with self.transaction() as session:
            return session.get(model, record_id)

    def all(self, model: Type[ModelT]) -> List[ModelT]:
        with self.transaction() as session:
            return list(session.exec(select(model).order_by(model.id)).all())

    def find(self, model: Type[ModelT], **criteria: Any) -> List[ModelT]:
        query = select(model)
        for column, value in criteria.items():
            query = query.where(getattr(model, column) == value)
        with self.transaction() as session:
            return list(session.exec(query.order_by(model.id)).all())

    def update(self, model: Type[ModelT], record_id: int, values: Dict[str, Any]) -> Optional[ModelT]:
        with self.transaction() as session:
            record = session.get(model, record_id)
            if record is None:
                return None
            for column, value in values.items():
                setattr(record, column, value)
            session.add(record)
            session.flush()
            session.refresh(record)
            return record

    def delete(self, model: Type[ModelT], record_id: int) -> bool:
        with self.transaction() as session:
            record = session.get(model, record_id)
            if record is None:
                return False
            session.delete(record)
            session.flush()
            return True

    def delete_where(self, model: Type[ModelT], **criteria: Any) -> int:
        with self.transaction() as session:
            records = self.find(model, **criteria)
            for record in records:
                session.delete(record)
            session.flush()
            return len(records)

    def reset(self) -> None:
        SQLModel.metadata.drop_all(self.engine)
        SQLModel.metadata.create_all(self.engine)
