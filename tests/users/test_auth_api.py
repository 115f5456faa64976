from __future__ import annotations

import io

from src.hrm_portal.hrm_portal.core.enums import ActivityAction


def _set_cookies(response):
    return response.headers.getlist("Set-Cookie")


def test_login_sets_both_session_cookies(login, people):
    res = login("maria@example.com", "maria123")

    assert res.status_code == 200
    assert res.get_json()["role"] == "manager"
    cookies = _set_cookies(res)
    assert len(cookies) == 2
    for name in ("token=", "role="):
        cookie = next(c for c in cookies if c.startswith(name))
        assert "HttpOnly" in cookie
        assert "SameSite=Strict" in cookie
        assert "Max-Age=86400" in cookie
    assert any(c.startswith("role=manager") for c in cookies)


def test_failed_login_sets_no_cookie(login, people):
    wrong = login("maria@example.com", "wrong-password")
    unknown = login("ghost@example.com", "wrong-password")

    assert wrong.status_code == unknown.status_code == 401
    assert wrong.get_json() == unknown.get_json() == {"error": "Invalid credentials"}
    assert _set_cookies(wrong) == []


def test_login_is_recorded_after_response(login, people, container, activity_repo):
    login("alice@example.com", "alice123")
    container.activity_logger.flush()

    assert [e.action for e in activity_repo.entries] == [ActivityAction.LOGIN]
    assert activity_repo.entries[0].user_name == "Alice"


def test_logout_clears_cookies(client, login, people):
    login("alice@example.com", "alice123")
    res = client.post("/api/auth/logout")

    assert res.status_code == 200
    cookies = _set_cookies(res)
    assert any(c.startswith("token=;") for c in cookies)
    assert any(c.startswith("role=;") for c in cookies)


def test_profile_requires_session(client, people):
    res = client.get("/api/employee/profile")
    assert res.status_code == 401
    assert res.get_json() == {"error": "Authentication required"}


def test_profile_is_role_scoped_and_hides_password(client, login, people):
    login("alice@example.com", "alice123")

    own = client.get("/api/employee/profile")
    assert own.status_code == 200
    data = own.get_json()["data"]
    assert data["email"] == "alice@example.com"
    assert "password" not in data

    assert client.get("/api/manager/profile").status_code == 403
    assert client.get("/api/hr/profile").status_code == 403


def test_bearer_header_works_without_cookie(app, container, people):
    token = container.auth_service.login("admin@example.com", "admin123").token
    res = app.test_client().get("/api/hr/profile", headers={"Authorization": f"Bearer {token}"})
    assert res.status_code == 200
    assert res.get_json()["data"]["role"] == "hr"


def test_register_endpoint_reports_duplicate_email(client, people):
    res = client.post(
        "/api/auth/register/manager",
        json={
            "email": "maria@example.com",
            "password": "secret123",
            "name": "Maria Two",
            "department": "Ops",
            "phone": "555-0111",
        },
    )
    assert res.status_code == 400
    assert res.get_json()["error"] == "User with this email already exists"


def test_profile_update_records_picture_path_only(client, login, people, clock):
    login("alice@example.com", "alice123")
    res = client.patch(
        "/api/employee/profile",
        data={"phone": "555-1234", "profilePicture": (io.BytesIO(b"fake image"), "me.png")},
        content_type="multipart/form-data",
    )

    assert res.status_code == 200
    data = res.get_json()["data"]
    assert data["phone"] == "555-1234"
    stamp = int(clock.now.timestamp() * 1000)
    assert data["profilePicture"] == f"/uploads/profiles/alice@example.com-{stamp}-me.png"


def test_store_fault_is_a_generic_500(client, people, employees, login, monkeypatch):
    login("alice@example.com", "alice123")

    def boom(*args, **kwargs):
        raise RuntimeError("connection refused")

    monkeypatch.setattr(employees, "get_by_id", boom)
    res = client.get("/api/employee/status")
    assert res.status_code == 500
    assert res.get_json() == {"error": "Internal server error"}
