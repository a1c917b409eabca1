import pytest
import os
from datetime import date, timedelta
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Set env before importing app components
os.environ["APP_ENV"] = "testing"
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["MAINTENANCE_MODE"] = "false"

from feedback_hub.database import Base, get_db
from feedback_hub.main import app
from feedback_hub.models.cycle import ReviewCycle, CycleStatus
from feedback_hub.models.organization import Organization
from feedback_hub.models.user import User
from feedback_hub.services.jwt_service import JwtService
from fastapi.testclient import TestClient

# SQLite in-memory database configuration
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)


# pysqlite handles BEGIN itself and breaks SAVEPOINT; take over transaction control
@event.listens_for(engine, "connect")
def _do_connect(dbapi_connection, connection_record):
    dbapi_connection.isolation_level = None


@event.listens_for(engine, "begin")
def _do_begin(conn):
    conn.exec_driver_sql("BEGIN")


# Service-level commits release a savepoint; the outer transaction is rolled back per test
TestingSessionLocal = sessionmaker(
    autocommit=False, autoflush=False, bind=engine, join_transaction_mode="create_savepoint"
)


@pytest.fixture(scope="session", autouse=True)
def setup_database():
    """Create tables once for the whole test session."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def db_session():
    """Get a clean database session for each test function with rollback safety."""
    connection = engine.connect()
    transaction = connection.begin()
    session = TestingSessionLocal(bind=connection)

    yield session

    session.close()
    transaction.rollback()
    connection.close()


@pytest.fixture(scope="function")
def org(db_session):
    org = Organization(name="Acme", slug="acme")
    db_session.add(org)
    db_session.commit()
    return org


@pytest.fixture(scope="function")
def other_org(db_session):
    org = Organization(name="Globex", slug="globex")
    db_session.add(org)
    db_session.commit()
    return org


@pytest.fixture(scope="function")
def make_user(db_session, org):
    """Factory for users in the default organization unless told otherwise."""
    def _make_user(email, roles=None, name=None, organization=org):
        user = User(
            email=email,
            name=name or email.split("@")[0].title(),
            roles=roles or ["employee"],
            organization_id=organization.id if organization else None,
            is_active=True,
        )
        db_session.add(user)
        db_session.commit()
        return user
    return _make_user


@pytest.fixture(scope="function")
def admin_user(make_user):
    return make_user("admin@acme.io", roles=["admin"], name="Ada Admin")


@pytest.fixture(scope="function")
def hr_user(make_user):
    return make_user("hr@acme.io", roles=["hr"], name="Hana Hr")


@pytest.fixture(scope="function")
def manager(make_user):
    return make_user("maya@acme.io", roles=["manager", "employee"], name="Maya Manager")


@pytest.fixture(scope="function")
def employee(make_user):
    return make_user("eli@acme.io", name="Eli Employee")


@pytest.fixture(scope="function")
def peer(make_user):
    return make_user("pat@acme.io", name="Pat Peer")


@pytest.fixture(scope="function")
def super_admin(make_user):
    return make_user("root@acme.io", roles=["super_admin"], name="Sam Super", organization=None)


@pytest.fixture(scope="function")
def cycle(db_session, org):
    cycle = ReviewCycle(
        organization_id=org.id,
        name="Q3 Reviews",
        status=CycleStatus.ACTIVE,
        start_date=date.today() - timedelta(days=10),
        end_date=date.today() + timedelta(days=80),
    )
    db_session.add(cycle)
    db_session.commit()
    return cycle


@pytest.fixture(scope="function")
def auth_headers():
    """Helper fixture building a bearer header for a user."""
    def _auth_headers(user):
        return {"Authorization": f"Bearer {JwtService().issue_for_user(user)}"}
    return _auth_headers


@pytest.fixture(scope="function")
def feedback_payload(cycle, employee):
    def _payload(to_user=employee, review_type="manager_review", **overrides):
        payload = {
            "cycleId": cycle.id,
            "toUserId": to_user.id,
            "reviewType": review_type,
            "content": {
                "overallComment": "Solid quarter with strong delivery.",
                "strengths": ["Ownership", "Testing"],
                "areasForImprovement": ["Delegation"],
            },
            "ratings": [
                {"category": "performance", "score": 4, "maxScore": 5},
            ],
            "goals": [
                {
                    "title": "Lead a design review",
                    "category": "leadership",
                    "priority": "high",
                    "targetDate": (date.today() + timedelta(days=60)).isoformat(),
                },
            ],
            "colorClassification": "green",
        }
        payload.update(overrides)
        return payload
    return _payload


def _override_db(db_session):
    def override_get_db():
        try:
            yield db_session
        finally:
            pass
    return override_get_db


@pytest.fixture(scope="function")
def client(db_session):
    """Get a TestClient that uses the test database session via dependency override."""
    app.dependency_overrides[get_db] = _override_db(db_session)
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def unsafe_client(db_session):
    """TestClient that returns 500 responses instead of re-raising server errors."""
    app.dependency_overrides[get_db] = _override_db(db_session)
    with TestClient(app, raise_server_exceptions=False) as c:
        yield c
    app.dependency_overrides.clear()
