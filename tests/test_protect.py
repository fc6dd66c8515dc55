"""
보호 라우트(protect) / is_logged_in / restrict_to 통합 테스트.
- 토큰 전달 경로(헤더 / 쿠키), 무효 / 만료 / 오래된 토큰 거절,
  사라진 사용자, 역할 기반 접근 제한을 검증한다.
"""

from datetime import timedelta

from tourbook.core.security import create_access_token
from tourbook.models.user import Role

from tests.helpers import auth_header, create_and_login, create_user_in_db, get_user, login, unique_email


def test_missing_token_is_rejected(client):
    r = client.get("/api/v1/users/me")
    assert r.status_code == 401
    assert r.json() == {
        "status": "fail",
        "message": "You are not logged in! Please log in to get access.",
    }


def test_bearer_header_and_cookie_are_both_accepted(client, db_session):
    user, token = create_and_login(client, db_session)

    by_header = client.get("/api/v1/users/me", headers=auth_header(token))
    assert by_header.status_code == 200, by_header.text
    assert by_header.json()["data"]["user"]["id"] == str(user.id)

    client.cookies.set("jwt", token)
    by_cookie = client.get("/api/v1/users/me")
    assert by_cookie.status_code == 200, by_cookie.text


def test_header_takes_precedence_over_cookie(client, db_session):
    _, token = create_and_login(client, db_session)
    client.cookies.set("jwt", token)

    r = client.get("/api/v1/users/me", headers=auth_header("garbage"))
    assert r.status_code == 401


def test_invalid_and_expired_tokens_are_rejected(client, db_session):
    user = create_user_in_db(db_session, email=unique_email())

    invalid = client.get("/api/v1/users/me", headers=auth_header("not-a-jwt"))
    assert invalid.status_code == 401
    assert invalid.json()["message"] == "Invalid token. Please log in again!"

    expired_token = create_access_token(str(user.id), expires_delta=timedelta(seconds=-10))
    expired = client.get("/api/v1/users/me", headers=auth_header(expired_token))
    assert expired.status_code == 401
    assert expired.json()["message"] == "Your token has expired! Please log in again."


def test_token_of_deactivated_user_is_rejected(client, db_session):
    user, token = create_and_login(client, db_session)

    stored = get_user(db_session, user.email)
    stored.active = False
    db_session.commit()

    r = client.get("/api/v1/users/me", headers=auth_header(token))
    assert r.status_code == 401
    assert r.json()["message"] == "The user belonging to this token does no longer exist."


def test_token_issued_before_password_change_is_stale(client, db_session):
    user, old_token = create_and_login(client, db_session)

    stored = get_user(db_session, user.email)
    stored.set_password("brand-new-pass")
    db_session.commit()

    stale = client.get("/api/v1/users/me", headers=auth_header(old_token))
    assert stale.status_code == 401
    assert stale.json()["message"] == "User recently changed password! Please log in again."

    fresh_token = login(client, user.email, "brand-new-pass")
    fresh = client.get("/api/v1/users/me", headers=auth_header(fresh_token))
    assert fresh.status_code == 200, fresh.text


def test_restrict_to_admin(client, db_session):
    _, user_token = create_and_login(client, db_session, role=Role.USER)
    _, admin_token = create_and_login(client, db_session, role=Role.ADMIN, prefix="admin")

    denied = client.get("/api/v1/admin/users", headers=auth_header(user_token))
    assert denied.status_code == 403
    assert denied.json()["message"] == "You do not have permission to perform this action"

    allowed = client.get("/api/v1/admin/users", headers=auth_header(admin_token))
    assert allowed.status_code == 200, allowed.text


def test_restrict_to_runs_after_authentication(client):
    r = client.get("/api/v1/admin/users")
    assert r.status_code == 401


def test_is_logged_in_renders_for_anonymous_and_users(client, db_session):
    anon = client.get("/")
    assert anon.status_code == 200
    assert "Log in" in anon.text

    client.cookies.set("jwt", "broken-token")
    still_anon = client.get("/")
    assert still_anon.status_code == 200
    assert "Log in" in still_anon.text
    client.cookies.clear()

    email = unique_email()
    create_user_in_db(db_session, email=email, name="Alice Doe")
    login(client, email)
    home = client.get("/")
    assert "Welcome back, Alice!" in home.text


def test_account_page_requires_login(client, db_session):
    assert client.get("/me").status_code == 401

    email = unique_email()
    create_user_in_db(db_session, email=email, name="Alice Doe")
    login(client, email)
    page = client.get("/me")
    assert page.status_code == 200
    assert email in page.text
