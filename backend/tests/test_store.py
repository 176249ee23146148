"""
SqlStore contract: id assignment, criteria lookup, full replace, reset and
transaction rollback.
"""

import pytest
from sqlalchemy.exc import IntegrityError

from sms.models.student import Student
from sms.models.ticket import Ticket
from sms.store import SqlStore


def _insert_student(store: SqlStore, email: str = "a@email.com") -> Student:
    return store.insert(Student(name="A", course="Computing", email=email, age=20, grade=50))


def test_insert_assigns_id(store: SqlStore):
    s = _insert_student(store)

    assert s.id is not None
    assert store.get(Student, s.id).email == "a@email.com"


def test_get_missing_returns_none(store: SqlStore):
    assert store.get(Student, 123) is None


def test_find_matches_every_criterion(store: SqlStore):
    s = _insert_student(store)
    store.insert(Ticket(student_id=s.id, description="one"))
    store.insert(Ticket(student_id=s.id, description="two", active=False))

    assert len(store.find(Ticket, student_id=s.id)) == 2
    assert [t.description for t in store.find(Ticket, student_id=s.id, active=True)] == ["one"]
    assert store.first(Ticket, description="missing") is None


def test_update_replaces_values(store: SqlStore):
    s = _insert_student(store)

    updated = store.update(Student, s.id, {"name": "B", "grade": 75})

    assert updated.name == "B"
    assert store.get(Student, s.id).grade == 75


def test_update_missing_returns_none(store: SqlStore):
    assert store.update(Student, 5, {"name": "B"}) is None


def test_delete_and_delete_where(store: SqlStore):
    s = _insert_student(store)
    for i in range(3):
        store.insert(Ticket(student_id=s.id, description=f"t{i}"))

    assert store.delete_where(Ticket, student_id=s.id) == 3
    assert store.all(Ticket) == []
    assert store.delete(Student, s.id) is True
    assert store.delete(Student, s.id) is False


def test_reset_empties_tables(store: SqlStore):
    s = _insert_student(store)
    store.insert(Ticket(student_id=s.id, description="t"))

    store.reset()

    assert store.all(Student) == []
    assert store.all(Ticket) == []


def test_unique_email_enforced(store: SqlStore):
    _insert_student(store)

    with pytest.raises(IntegrityError):
        _insert_student(store)


def test_ticket_foreign_key_enforced(store: SqlStore):
    with pytest.raises(IntegrityError):
        store.insert(Ticket(student_id=999, description="orphan"))


def test_transaction_rolls_back_on_error(store: SqlStore):
    with pytest.raises(RuntimeError):
        with store.transaction():
            _insert_student(store)
            raise RuntimeError("abort")

    assert store.all(Student) == []


def test_nested_calls_share_transaction(store: SqlStore):
    with store.transaction() as outer:
        s = _insert_student(store)
        with store.transaction() as inner:
            assert inner is outer
            store.insert(Ticket(student_id=s.id, description="t"))

    assert len(store.find(Ticket, student_id=s.id)) == 1
