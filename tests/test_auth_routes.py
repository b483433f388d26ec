from datetime import timedelta

from summavoice import auth, models
from summavoice.models import utcnow

from conftest import bearer


def test_register_creates_user_and_sends_code(client, db_session, sent_emails):
    response = client.post(
        "/api/auth/register",
        json={"username": "bob", "email": "bob@example.com", "password": "hunter22"},
    )

    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    assert body["token"]
    assert body["user"]["email"] == "bob@example.com"
    assert body["user"]["email_verified"] is False
    assert "hashed_password" not in body["user"]

    code = db_session.query(models.VerificationCode).filter_by(email="bob@example.com").one()
    assert len(code.code) == 6
    assert sent_emails[0]["to"] == "bob@example.com"
    assert code.code in sent_emails[0]["html"]


def test_register_rejects_duplicate_email(client, user, sent_emails):
    response = client.post(
        "/api/auth/register",
        json={"username": "someoneelse", "email": user.email, "password": "hunter22"},
    )

    assert response.status_code == 400
    assert response.json()["success"] is False
    assert "already exists" in response.json()["message"]


def test_register_rejects_duplicate_username(client, user, sent_emails):
    response = client.post(
        "/api/auth/register",
        json={"username": user.username, "email": "new@example.com", "password": "hunter22"},
    )

    assert response.status_code == 400
    assert response.json()["message"] == "Username is already taken"


def test_register_validation_errors_are_400(client):
    response = client.post(
        "/api/auth/register",
        json={"username": "bob", "email": "not-an-email", "password": "123"},
    )

    assert response.status_code == 400
    body = response.json()
    assert body["message"] == "Validation failed"
    fields = {error["field"] for error in body["errors"]}
    assert {"email", "password"} <= fields


def test_register_succeeds_when_email_fails(client, monkeypatch):
    from summavoice import mailer

    def broken(to, subject, html):
        raise OSError("smtp down")

    monkeypatch.setattr(mailer, "send_email", broken)
    response = client.post(
        "/api/auth/register",
        json={"username": "carol", "email": "carol@example.com", "password": "hunter22"},
    )

    assert response.status_code == 201


def test_login_returns_token(client, user):
    response = client.post("/api/auth/login", json={"email": user.email, "password": "secret123"})

    assert response.status_code == 200
    token = response.json()["token"]
    assert auth.decode_access_token(token)["uid"] == user.id


def test_login_with_wrong_password_is_400(client, user):
    response = client.post("/api/auth/login", json={"email": user.email, "password": "wrong-password"})

    assert response.status_code == 400
    assert response.json() == {"success": False, "message": "Invalid credentials"}


def test_login_with_unknown_email_is_400(client):
    response = client.post("/api/auth/login", json={"email": "ghost@example.com", "password": "whatever"})

    assert response.status_code == 400


def test_token_endpoint_accepts_oauth_form(client, user):
    response = client.post("/api/auth/token", data={"username": user.email, "password": "secret123"})

    assert response.status_code == 200
    assert response.json()["token_type"] == "bearer"


def test_me_requires_token(client):
    response = client.get("/api/auth/me")

    assert response.status_code == 401
    assert response.json()["message"] == "Not authenticated"


def test_me_returns_current_user(client, user, auth_headers):
    response = client.get("/api/auth/me", headers=auth_headers)

    assert response.status_code == 200
    assert response.json()["user"]["username"] == user.username


def test_expired_token_is_rejected(client, user):
    token = auth.create_access_token(user, expires_delta=timedelta(minutes=-1))
    response = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 401
    assert response.json()["message"] == "Token has expired"


def test_garbage_token_is_rejected(client):
    response = client.get("/api/auth/me", headers={"Authorization": "Bearer not-a-jwt"})

    assert response.status_code == 401
    assert response.json()["message"] == "Token is not valid"


def test_token_for_deleted_user_is_rejected(client, user, db_session):
    headers = bearer(user)
    db_session.delete(user)
    db_session.commit()

    response = client.get("/api/auth/me", headers=headers)

    assert response.status_code == 401
    assert response.json()["message"] == "Token is not valid - user not found"


def test_logout_accepts_get_and_post(client):
    assert client.get("/api/auth/logout").status_code == 200
    assert client.post("/api/auth/logout").json()["success"] is True


def test_list_users_is_admin_only(client, user, make_user, auth_headers):
    admin = make_user(email="admin@example.com", username="admin", is_admin=True)

    assert client.get("/api/auth/users", headers=auth_headers).status_code == 403
    response = client.get("/api/auth/users", headers=bearer(admin))
    assert response.status_code == 200
    assert response.json()["count"] == 2


def test_forgot_password_does_not_reveal_unknown_emails(client, user, sent_emails):
    unknown = client.post("/api/auth/forgot-password", json={"email": "ghost@example.com"})
    known = client.post("/api/auth/forgot-password", json={"email": user.email})

    assert unknown.status_code == known.status_code == 200
    assert unknown.json() == known.json()
    assert [mail["to"] for mail in sent_emails] == [user.email]


def test_password_reset_flow(client, user, db_session, sent_emails):
    client.post("/api/auth/forgot-password", json={"email": user.email})
    otp = db_session.query(models.PasswordResetToken).filter_by(email=user.email).one().token

    valid = client.post("/api/auth/validate-reset-otp", json={"email": user.email, "otp": otp})
    assert valid.status_code == 200
    assert valid.json()["valid"] is True

    reset = client.post(
        "/api/auth/reset-password",
        json={"email": user.email, "otp": otp, "password": "brand-new-pass"},
    )
    assert reset.status_code == 200

    login = client.post("/api/auth/login", json={"email": user.email, "password": "brand-new-pass"})
    assert login.status_code == 200

    # single use
    again = client.post(
        "/api/auth/reset-password",
        json={"email": user.email, "otp": otp, "password": "another-pass"},
    )
    assert again.status_code == 400


def test_expired_reset_otp_is_rejected(client, user, db_session, sent_emails):
    client.post("/api/auth/forgot-password", json={"email": user.email})
    token = db_session.query(models.PasswordResetToken).filter_by(email=user.email).one()
    token.expires_at = utcnow() - timedelta(minutes=1)
    db_session.commit()

    response = client.post("/api/auth/validate-reset-otp", json={"email": user.email, "otp": token.token})

    assert response.status_code == 400
    assert response.json()["message"] == "Invalid or expired OTP"


def test_new_reset_request_replaces_old_token(client, user, db_session, sent_emails):
    client.post("/api/auth/forgot-password", json={"email": user.email})
    client.post("/api/auth/forgot-password", json={"email": user.email})

    assert db_session.query(models.PasswordResetToken).filter_by(email=user.email).count() == 1


def test_unknown_route_is_404(client):
    response = client.get("/api/nope")

    assert response.status_code == 404
    assert response.json()["message"] == "Not Found - /api/nope"


def test_root_reports_status(client):
    response = client.get("/")

    assert response.status_code == 200
    assert response.json()["success"] is True
    assert "ai_available" in response.json()
