"""
이메일 인증 통합 테스트.
- 인증 성공 / 재사용 / 만료 / 무효 링크, autoLogin, HTML 화면,
  인증 메일 재발송(유효 링크가 있으면 재발급하지 않음)을 검증한다.
"""

from datetime import timedelta

from tourbook.models.user import utcnow
from tourbook.services.email import MessageKind

from tests.helpers import auth_header, create_user_in_db, get_user, signup_payload, unique_email


def _signup(client, mailer, email):
    r = client.post("/api/v1/users/signup", json=signup_payload(email))
    assert r.status_code == 201, r.text
    return mailer.last_token(MessageKind.VERIFY_EMAIL)


def test_verify_email_marks_user_verified_and_clears_token(client, db_session, mailer):
    email = unique_email()
    raw = _signup(client, mailer, email)

    r = client.get(f"/api/v1/users/verifyEmail/{raw}")
    assert r.status_code == 200, r.text
    assert r.json()["status"] == "success"
    assert "token" not in r.json()

    user = get_user(db_session, email)
    assert user.email_verified is True
    assert user.email_verification_token is None
    assert user.email_verification_expires is None


def test_verification_token_cannot_be_reused(client, mailer):
    raw = _signup(client, mailer, unique_email())
    assert client.get(f"/api/v1/users/verifyEmail/{raw}").status_code == 200

    again = client.get(f"/api/v1/users/verifyEmail/{raw}")
    assert again.status_code == 400
    assert again.json()["message"] == "This verification link is invalid."


def test_expired_verification_token_is_reported_as_expired(client, db_session, mailer):
    email = unique_email()
    raw = _signup(client, mailer, email)

    user = get_user(db_session, email)
    user.email_verification_expires = utcnow() - timedelta(minutes=1)
    db_session.commit()

    r = client.get(f"/api/v1/users/verifyEmail/{raw}")
    assert r.status_code == 400
    assert "expired" in r.json()["message"]
    assert get_user(db_session, email).email_verified is False


def test_unknown_verification_token_is_invalid(client):
    r = client.get("/api/v1/users/verifyEmail/" + "ab" * 32)
    assert r.status_code == 400
    assert r.json()["message"] == "This verification link is invalid."


def test_verify_email_auto_login_issues_token(client, mailer):
    raw = _signup(client, mailer, unique_email())

    r = client.get(f"/api/v1/users/verifyEmail/{raw}", params={"autoLogin": "true"})
    assert r.status_code == 200, r.text
    token = r.json()["token"]
    assert r.cookies.get("jwt") == token

    client.cookies.clear()
    me = client.get("/api/v1/users/me", headers=auth_header(token))
    assert me.status_code == 200, me.text


def test_verify_email_page_renders_success_and_failures(client, db_session, mailer):
    email = unique_email()
    raw = _signup(client, mailer, email)

    ok = client.get(f"/verifyEmail/{raw}")
    assert ok.status_code == 200
    assert "text/html" in ok.headers["content-type"]
    assert "Email verified" in ok.text
    assert "jwt" not in ok.cookies

    invalid = client.get(f"/verifyEmail/{raw}")
    assert invalid.status_code == 400
    assert "Invalid link" in invalid.text

    other = unique_email()
    raw_other = _signup(client, mailer, other)
    user = get_user(db_session, other)
    user.email_verification_expires = utcnow() - timedelta(seconds=1)
    db_session.commit()

    expired = client.get(f"/verifyEmail/{raw_other}")
    assert expired.status_code == 400
    assert "Link expired" in expired.text


def test_verify_email_page_auto_login_sets_cookie(client, mailer):
    raw = _signup(client, mailer, unique_email())

    r = client.get(f"/verifyEmail/{raw}", params={"autoLogin": "true"})
    assert r.status_code == 200
    assert r.cookies.get("jwt")

    home = client.get("/")
    assert "Welcome back" in home.text


def test_resend_verification_respects_pending_link(client, db_session, mailer):
    email = unique_email()
    _signup(client, mailer, email)

    pending = client.post("/api/v1/users/resendVerification", json={"email": email})
    assert pending.status_code == 400
    assert "already sent" in pending.json()["message"]

    user = get_user(db_session, email)
    user.email_verification_expires = utcnow() - timedelta(minutes=1)
    db_session.commit()

    resent = client.post("/api/v1/users/resendVerification", json={"email": email})
    assert resent.status_code == 200, resent.text

    raw = mailer.last_token(MessageKind.VERIFY_EMAIL)
    assert client.get(f"/api/v1/users/verifyEmail/{raw}").status_code == 200


def test_resend_verification_unknown_or_verified_account(client, db_session):
    missing = client.post("/api/v1/users/resendVerification", json={"email": unique_email()})
    assert missing.status_code == 404

    email = unique_email()
    create_user_in_db(db_session, email=email, verified=True)
    verified = client.post("/api/v1/users/resendVerification", json={"email": email})
    assert verified.status_code == 404


def test_resend_verification_send_failure_clears_token(client, db_session, mailer):
    email = unique_email()
    create_user_in_db(db_session, email=email, verified=False)
    mailer.fail_kinds.add(MessageKind.VERIFY_EMAIL)

    r = client.post("/api/v1/users/resendVerification", json={"email": email})
    assert r.status_code == 500

    user = get_user(db_session, email)
    assert user.email_verification_token is None
    assert user.email_verification_expires is None
