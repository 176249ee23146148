import pytest
from sqlalchemy.pool import StaticPool

from sms.database import build_engine
from sms.services.student_service import StudentService
from sms.store import SqlStore

TEST_DATABASE_URL = "sqlite:///:memory:"

# ============================================================================
# Test Database Setup with StaticPool
# ============================================================================
# 1. sqlite:///:memory: with StaticPool so ALL sessions share the same DB
# 2. check_same_thread=False (set by build_engine) for threaded tests
# 3. Service is initialised per test, so every test starts from empty tables
test_engine = build_engine(TEST_DATABASE_URL, poolclass=StaticPool)


@pytest.fixture(name="store")
def store_fixture():
    """Provide a store on the shared in-memory database, emptied per test"""
    store = SqlStore(test_engine)
    store.reset()
    return store


@pytest.fixture(name="service")
def service_fixture(store: SqlStore):
    """Provide an initialised StudentService"""
    service = StudentService(store)
    service.initialise()
    return service
