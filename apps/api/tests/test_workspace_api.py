from __future__ import annotations

from collections.abc import Generator
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from portal.core.config import get_settings
from portal.core.database import Base, get_db
from portal.identity.models import Company, User
from portal.main import app
from portal.middleware.rate_limit import reset_rate_limiter
from portal.platform.security.context import RoleType, SessionContext
from portal.platform.security.tokens import TokenSigner
from portal.workspace.models import (
    ContactEntry,
    Employee,
    NamePrefix,
    Notification,
    Theme,
    TimePeriod,
    UserTheme,
)
from portal.workspace.service import format_full_name


JWT_SECRET = "workspace-test-secret"


@pytest.fixture()
def db_session() -> Generator[Session, None, None]:
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def setup_env(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    monkeypatch.setenv("JWT_SECRET", JWT_SECRET)
    monkeypatch.setenv("RATE_LIMIT_DISABLED", "true")
    get_settings.cache_clear()
    reset_rate_limiter()
    yield
    get_settings.cache_clear()
    reset_rate_limiter()


@pytest.fixture()
def client(db_session: Session) -> Generator[TestClient, None, None]:
    def override_get_db() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def people(db_session: Session) -> None:
    db_session.add_all(
        [
            Company(id=7, name="Seven Traders"),
            Company(id=8, name="Eight Exports"),
            User(id=1, name="Alice", login="alice", password_hash="x", role_type="U"),
            User(id=2, name="Bob", login="bob", password_hash="x", role_type="A"),
        ]
    )
    db_session.commit()


def _headers(user_id: int = 1, company_id: int | None = 7) -> dict[str, str]:
    ctx = SessionContext(user_id=user_id, display_name="Alice", role_type=RoleType.USER, company_id=company_id)
    return {"Authorization": f"Bearer {TokenSigner(JWT_SECRET).issue(ctx)}"}


def _theme(theme_id: int, name: str, *, is_default: bool = False) -> Theme:
    return Theme(
        id=theme_id,
        name=name,
        is_default=is_default,
        navbar_bg="#111111",
        sidebar_bg="#222222",
        module_bg="#333333",
        footer_bg="#444444",
        menu_submenu_bg="#555555",
        current_module_color="#666666",
        menu_type_color="#777777",
        navbar_font_color="#888888",
        menu_header_bg="#999999",
    )


def test_subscription_without_period_is_expired(client: TestClient) -> None:
    response = client.post("/api/check-subscription")

    assert response.status_code == 200
    assert response.json()["is_expired"] is True


def test_subscription_uses_latest_period(client: TestClient, db_session: Session) -> None:
    now = datetime.now(timezone.utc)
    db_session.add_all(
        [
            TimePeriod(id=1, start_at=now - timedelta(days=400), end_at=now - timedelta(days=35)),
            TimePeriod(id=2, start_at=now - timedelta(days=35), end_at=now + timedelta(days=330)),
        ]
    )
    db_session.commit()

    response = client.post("/api/check-subscription")

    assert response.json()["is_expired"] is False


def test_notifications_are_scoped_to_user_and_company(client: TestClient, db_session: Session) -> None:
    db_session.add_all(
        [
            Notification(id=1, to_user_id=1, from_user_id=2, company_id=7, subject="First", message="m1"),
            Notification(id=2, to_user_id=1, from_user_id=None, company_id=7, subject="Second", message="m2"),
            Notification(id=3, to_user_id=1, from_user_id=2, company_id=8, subject="Elsewhere", message="m3"),
            Notification(id=4, to_user_id=2, from_user_id=1, company_id=7, subject="Not mine", message="m4"),
        ]
    )
    db_session.commit()

    response = client.get("/api/notifications", headers=_headers())

    assert response.status_code == 200
    body = response.json()
    assert [item["id"] for item in body] == [2, 1]
    assert body[1]["from_user_name"] == "Bob"
    assert body[0]["from_user_name"] is None


def test_notifications_are_capped(client: TestClient, db_session: Session) -> None:
    db_session.add_all(
        [Notification(to_user_id=1, company_id=7, subject=f"n{index}", message="m") for index in range(55)]
    )
    db_session.commit()

    response = client.get("/api/notifications", headers=_headers())

    assert len(response.json()) == 50


def test_mark_notification_read(client: TestClient, db_session: Session) -> None:
    db_session.add_all(
        [
            Notification(id=1, to_user_id=1, company_id=7, subject="Mine", message="m"),
            Notification(id=2, to_user_id=2, company_id=7, subject="Theirs", message="m"),
        ]
    )
    db_session.commit()

    mine = client.put("/api/notifications/read", json={"notification_id": 1}, headers=_headers())
    theirs = client.put("/api/notifications/read", json={"notification_id": 2}, headers=_headers())
    missing = client.put("/api/notifications/read", json={}, headers=_headers())

    assert mine.status_code == 200
    assert theirs.status_code == 404
    assert missing.status_code == 400
    db_session.expire_all()
    assert db_session.get(Notification, 1).is_read is True
    assert db_session.get(Notification, 2).is_read is False


def test_contact_directory_lists_company_contacts_by_name(client: TestClient, db_session: Session) -> None:
    db_session.add_all(
        [
            ContactEntry(company_id=7, name="Zed Supplies", mobile="9000000001"),
            ContactEntry(company_id=7, name="Able Logistics", email="able@example.com"),
            ContactEntry(company_id=8, name="Other Company Contact"),
        ]
    )
    db_session.commit()

    response = client.get("/api/contact-directory", headers=_headers())
    no_company = client.get("/api/contact-directory", headers=_headers(company_id=None))

    assert [item["name"] for item in response.json()] == ["Able Logistics", "Zed Supplies"]
    assert no_company.status_code == 403


def test_active_employees_have_collapsed_full_names(client: TestClient, db_session: Session) -> None:
    db_session.add_all(
        [
            NamePrefix(id=1, name="Mr."),
            Employee(id=10, name_prefix_id=1, first_name="Ravi", middle_name=None, last_name="Kumar"),
            Employee(id=11, name_prefix_id=None, first_name="Anita", middle_name="  K ", last_name="Rao"),
            Employee(id=12, name_prefix_id=1, first_name="Gone", last_name="Away", is_active=False),
        ]
    )
    db_session.commit()

    response = client.get("/api/active-employees", headers=_headers())

    assert response.json() == [
        {"employee_id": 11, "full_name": "Anita K Rao"},
        {"employee_id": 10, "full_name": "Mr. Ravi Kumar"},
    ]


def test_format_full_name_skips_missing_parts() -> None:
    assert format_full_name(None, "Asha", None, None) == "Asha"
    assert format_full_name("Dr.", " Meera ", "", "Iyer") == "Dr. Meera Iyer"


def test_theme_falls_back_to_default(client: TestClient, db_session: Session) -> None:
    db_session.add_all([_theme(1, "Ocean", is_default=True), _theme(2, "Forest")])
    db_session.commit()

    default = client.get("/api/theme", headers=_headers())
    chosen = client.post("/api/user/theme", json={"theme_id": 2}, headers=_headers())
    after = client.get("/api/theme", headers=_headers())

    assert default.json()["name"] == "Ocean"
    assert chosen.status_code == 200
    assert after.json()["name"] == "Forest"


def test_theme_choice_is_updated_in_place(client: TestClient, db_session: Session) -> None:
    db_session.add_all([_theme(1, "Ocean", is_default=True), _theme(2, "Forest")])
    db_session.commit()

    client.post("/api/user/theme", json={"theme_id": 2}, headers=_headers())
    client.post("/api/user/theme", json={"theme_id": 1}, headers=_headers())

    db_session.expire_all()
    preference = db_session.get(UserTheme, 1)
    assert preference is not None
    assert preference.theme_id == 1


def test_theme_errors(client: TestClient, db_session: Session) -> None:
    nothing = client.get("/api/theme", headers=_headers())
    missing_id = client.post("/api/user/theme", json={}, headers=_headers())
    unknown = client.post("/api/user/theme", json={"theme_id": 99}, headers=_headers())

    assert nothing.status_code == 404
    assert missing_id.status_code == 400
    assert unknown.status_code == 404


def test_themes_are_listed_by_name(client: TestClient, db_session: Session) -> None:
    db_session.add_all([_theme(1, "Ocean", is_default=True), _theme(2, "Forest")])
    db_session.commit()

    response = client.get("/api/themes", headers=_headers())

    assert [item["name"] for item in response.json()] == ["Forest", "Ocean"]
    assert set(response.json()[0]) == {"id", "name", "navbar_bg"}
