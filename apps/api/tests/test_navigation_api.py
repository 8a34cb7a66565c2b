from __future__ import annotations

from collections.abc import Generator
from datetime import datetime, timedelta, timezone
import logging

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from portal.core.config import get_settings
from portal.core.database import Base, get_db
from portal.identity.models import Company, User
from portal.main import app
from portal.middleware.rate_limit import reset_rate_limiter
from portal.navigation.models import Menu, Module, Submenu, UserRight
from portal.navigation.repository import NavigationRepository
from portal.platform.security.context import RoleType, SessionContext
from portal.platform.security.tokens import TokenSigner


JWT_SECRET = "navigation-test-secret"


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
    monkeypatch.delenv("ADMIN_RIGHTS_SCOPE", raising=False)
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
def navigation_tree(db_session: Session) -> None:
    db_session.add_all(
        [
            Company(id=7, name="Seven Traders"),
            Company(id=8, name="Eight Exports"),
            User(id=1, name="Alice", login="alice", password_hash="x", role_type="U"),
            User(id=2, name="Adam", login="adam", password_hash="x", role_type="A"),
            User(id=3, name="Root", login="root", password_hash="x", role_type="S"),
            Module(id=1, name="Accounts", icon_path="accounts.svg"),
            Module(id=2, name="Inventory"),
            Module(id=3, name="Archive", is_active=False),
            Menu(id=5, module_id=1, name="Ledger", menu_type="Master"),
            Menu(id=6, module_id=1, name="Overview", menu_type="Dashboard", redirect_page="dashboard.html"),
            Menu(id=9, module_id=2, name="Stock", menu_type="Transaction"),
            Menu(id=10, module_id=1, name="Empty", menu_type="Reports"),
            Menu(id=11, module_id=1, name="Old", menu_type="Setting", is_active=False),
            Menu(id=12, module_id=3, name="Archived", menu_type="Master"),
            Submenu(id=42, menu_id=5, name="Vouchers", redirect_page="vouchers.html"),
            Submenu(id=43, menu_id=5, name="Journals", redirect_page="journals.html"),
            Submenu(id=44, menu_id=5, name="Retired", redirect_page="retired.html", is_active=False),
            Submenu(id=50, menu_id=9, name="Receipts", redirect_page="receipts.html"),
            Submenu(id=51, menu_id=11, name="Hidden", redirect_page="hidden.html"),
            Submenu(id=60, menu_id=12, name="Old Records", redirect_page="old.html"),
            UserRight(user_id=1, role_type="U", company_id=7, submenu_id=42),
            UserRight(user_id=1, role_type="U", company_id=7, submenu_id=44),
            UserRight(user_id=1, role_type="U", company_id=7, submenu_id=60),
            UserRight(user_id=1, role_type="U", company_id=8, submenu_id=50),
            UserRight(user_id=None, role_type="A", company_id=7, module_id=1),
            UserRight(user_id=2, role_type="A", company_id=8, module_id=2),
        ]
    )
    db_session.commit()


def _headers(user_id: int, role_type: RoleType, company_id: int | None) -> dict[str, str]:
    ctx = SessionContext(user_id=user_id, display_name=f"user-{user_id}", role_type=role_type, company_id=company_id)
    return {"Authorization": f"Bearer {TokenSigner(JWT_SECRET).issue(ctx)}"}


def _use_admin_scope(monkeypatch: pytest.MonkeyPatch, scope: str) -> None:
    monkeypatch.setenv("ADMIN_RIGHTS_SCOPE", scope)
    get_settings.cache_clear()


def test_user_sees_only_module_with_permitted_submenu(client: TestClient) -> None:
    response = client.get("/api/modules", headers=_headers(1, RoleType.USER, 7))

    assert response.status_code == 200
    assert [item["id"] for item in response.json()] == [1]


def test_user_menus_contain_only_permitted_active_submenus(client: TestClient) -> None:
    response = client.get("/api/menus", params={"moduleId": 1}, headers=_headers(1, RoleType.USER, 7))

    assert response.status_code == 200
    menus = response.json()
    assert [menu["id"] for menu in menus] == [5]
    assert [submenu["id"] for submenu in menus[0]["submenus"]] == [42]
    assert menus[0]["submenus"][0]["redirect_page"] == "vouchers.html"


def test_user_without_rights_in_module_is_denied_menus(client: TestClient) -> None:
    response = client.get("/api/menus", params={"moduleId": 2}, headers=_headers(1, RoleType.USER, 7))

    assert response.status_code == 403
    assert response.json()["code"] == "access_denied"


def test_user_rights_follow_active_company(client: TestClient) -> None:
    modules = client.get("/api/modules", headers=_headers(1, RoleType.USER, 8))
    menus = client.get("/api/menus", params={"moduleId": 2}, headers=_headers(1, RoleType.USER, 8))

    assert [item["id"] for item in modules.json()] == [2]
    assert menus.status_code == 200
    assert [submenu["id"] for submenu in menus.json()[0]["submenus"]] == [50]


def test_inactive_module_is_hidden_even_with_rights(client: TestClient) -> None:
    modules = client.get("/api/modules", headers=_headers(1, RoleType.USER, 7))
    menus = client.get("/api/menus", params={"moduleId": 3}, headers=_headers(1, RoleType.USER, 7))

    assert 3 not in [item["id"] for item in modules.json()]
    assert menus.status_code == 403


def test_superuser_sees_all_active_modules_in_any_company(client: TestClient) -> None:
    in_seven = client.get("/api/modules", headers=_headers(3, RoleType.SUPERUSER, 7))
    in_none = client.get("/api/modules", headers=_headers(3, RoleType.SUPERUSER, None))
    other_user = client.get("/api/modules", headers=_headers(99, RoleType.SUPERUSER, 8))

    assert [item["name"] for item in in_seven.json()] == ["Accounts", "Inventory"]
    assert in_seven.json() == in_none.json() == other_user.json()


def test_superuser_menu_tree_is_ordered_by_menu_type(client: TestClient) -> None:
    response = client.get("/api/menus", params={"moduleId": 1}, headers=_headers(3, RoleType.SUPERUSER, 7))

    assert response.status_code == 200
    menus = response.json()
    # Menu 10 has no submenus and no page of its own; menu 11 is inactive.
    assert [menu["id"] for menu in menus] == [6, 5]
    assert menus[0]["submenus"] == []
    assert menus[0]["redirect_page"] == "dashboard.html"
    assert [submenu["id"] for submenu in menus[1]["submenus"]] == [42, 43]


def test_admin_modules_are_scoped_to_company_by_default(client: TestClient) -> None:
    seven = client.get("/api/modules", headers=_headers(2, RoleType.ADMIN, 7))
    eight = client.get("/api/modules", headers=_headers(2, RoleType.ADMIN, 8))

    assert [item["id"] for item in seven.json()] == [1]
    assert [item["id"] for item in eight.json()] == [2]


def test_admin_modules_ignore_company_with_global_scope(client: TestClient, monkeypatch: pytest.MonkeyPatch) -> None:
    _use_admin_scope(monkeypatch, "global")

    response = client.get("/api/modules", headers=_headers(2, RoleType.ADMIN, 7))

    assert [item["id"] for item in response.json()] == [1, 2]


def test_admin_menus_require_module_rights(client: TestClient) -> None:
    allowed = client.get("/api/menus", params={"moduleId": 1}, headers=_headers(2, RoleType.ADMIN, 7))
    denied = client.get("/api/menus", params={"moduleId": 2}, headers=_headers(2, RoleType.ADMIN, 7))

    assert allowed.status_code == 200
    assert [menu["id"] for menu in allowed.json()] == [6, 5]
    assert [submenu["id"] for submenu in allowed.json()[1]["submenus"]] == [42, 43]
    assert denied.status_code == 403


def test_admin_menus_with_global_scope(client: TestClient, monkeypatch: pytest.MonkeyPatch) -> None:
    _use_admin_scope(monkeypatch, "global")

    response = client.get("/api/menus", params={"moduleId": 2}, headers=_headers(2, RoleType.ADMIN, 7))

    assert response.status_code == 200
    assert [menu["id"] for menu in response.json()] == [9]


def test_unknown_role_gets_no_modules_and_no_menus(client: TestClient) -> None:
    modules = client.get("/api/modules", headers=_headers(1, RoleType.UNKNOWN, 7))
    menus = client.get("/api/menus", params={"moduleId": 1}, headers=_headers(1, RoleType.UNKNOWN, 7))

    assert modules.status_code == 200
    assert modules.json() == []
    assert menus.status_code == 403


def test_menus_require_module_id(client: TestClient) -> None:
    response = client.get("/api/menus", headers=_headers(3, RoleType.SUPERUSER, 7))

    assert response.status_code == 400
    assert response.json()["code"] == "bad_request"


def test_navigation_requires_token(client: TestClient) -> None:
    missing = client.get("/api/modules")
    invalid = client.get("/api/modules", headers={"Authorization": "Bearer not-a-token"})

    assert missing.status_code == 401
    assert missing.json()["code"] == "unauthenticated"
    assert invalid.status_code == 403
    assert invalid.json()["code"] == "invalid_token"


def test_expired_token_is_refused_on_protected_endpoint(client: TestClient) -> None:
    ctx = SessionContext(user_id=1, display_name="Alice", role_type=RoleType.USER, company_id=7)
    issued_at = datetime.now(timezone.utc) - timedelta(hours=9)
    token = TokenSigner(JWT_SECRET).issue(ctx, now=issued_at)

    response = client.get("/api/modules", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 403
    assert response.json()["code"] == "invalid_token"


def test_store_failure_returns_generic_error(
    client: TestClient, monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
) -> None:
    def broken_query(self, session, user_id, company_id):  # type: ignore[no-untyped-def]
        raise OperationalError("SELECT * FROM secret_table", {}, Exception("connection lost"))

    monkeypatch.setattr(NavigationRepository, "list_user_modules", broken_query)
    caplog.set_level(logging.ERROR)

    response = client.get("/api/modules", headers=_headers(1, RoleType.USER, 7))

    assert response.status_code == 500
    body = response.json()
    assert body["code"] == "internal_error"
    assert body["message"] == "Internal server error"
    assert body["correlation_id"]
    assert "secret_table" not in response.text

    records = [record for record in caplog.records if record.getMessage() == "db.error"]
    assert records
    assert records[0].path == "/api/modules"
    assert records[0].user_id == 1
    assert records[0].company_id == 7
    assert records[0].role_type == "USER"
