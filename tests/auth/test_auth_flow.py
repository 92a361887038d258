"""Integration tests for sign-up, login and logout."""

from httpx import AsyncClient
from sqlalchemy import select

from mpl.db.models import User


def _sign_up(username: str = "alice", email: str = "alice@example.com", password: str = "secret123") -> dict:
    return {"username": username, "email": email, "password": password}


class TestSignUp:
    async def test_sign_up_creates_user_role(self, client: AsyncClient, db_session):
        response = await client.post("/api/auth/sign-up", json=_sign_up())
        assert response.status_code == 201
        assert response.json() == {"status": "success", "message": "User registered successfully", "data": None}

        user = (await db_session.execute(select(User).where(User.email == "alice@example.com"))).scalar_one()
        assert user.role == "user"
        assert user.password_hash != "secret123"
        assert user.password_hash.startswith("$argon2id$")

    async def test_email_is_lowercased(self, client: AsyncClient, db_session):
        await client.post("/api/auth/sign-up", json=_sign_up(email="Alice@Example.COM"))
        user = (await db_session.execute(select(User))).scalar_one()
        assert user.email == "alice@example.com"

    async def test_duplicate_email_rejected(self, client: AsyncClient):
        await client.post("/api/auth/sign-up", json=_sign_up())
        response = await client.post("/api/auth/sign-up", json=_sign_up(username="alice2", email="ALICE@example.com"))
        assert response.status_code == 400
        assert response.json()["error"] == "User with email already exists"

    async def test_duplicate_username_rejected(self, client: AsyncClient):
        await client.post("/api/auth/sign-up", json=_sign_up())
        response = await client.post("/api/auth/sign-up", json=_sign_up(username="ALICE", email="other@example.com"))
        assert response.status_code == 400
        assert response.json()["error"] == "User with username already exists"

    async def test_short_password_is_validation_error(self, client: AsyncClient):
        response = await client.post("/api/auth/sign-up", json=_sign_up(password="abc"))
        assert response.status_code == 422
        assert response.json()["error"] == "Validation failed"

    async def test_blank_password_rejected(self, client: AsyncClient):
        response = await client.post("/api/auth/sign-up", json=_sign_up(password="        "))
        assert response.status_code == 400
        assert response.json()["error"] == "Password cannot be empty"

    async def test_role_in_body_is_ignored(self, client: AsyncClient, db_session):
        body = {**_sign_up(), "role": "admin"}
        response = await client.post("/api/auth/sign-up", json=body)
        assert response.status_code == 201
        user = (await db_session.execute(select(User))).scalar_one()
        assert user.role == "user"


class TestLogin:
    async def test_login_returns_token_and_cookie(self, client: AsyncClient, settings):
        await client.post("/api/auth/sign-up", json=_sign_up())
        response = await client.post("/api/auth/login", json={"email": "alice@example.com", "password": "secret123"})
        assert response.status_code == 201
        body = response.json()
        assert body["status"] == "success"
        assert body["message"] == "Login successful"
        assert body["data"]["token"]
        assert settings.session_cookie_name in response.cookies
        assert "httponly" in response.headers["set-cookie"].lower()

    async def test_login_records_session(self, client: AsyncClient, settings, redis):
        await client.post("/api/auth/sign-up", json=_sign_up())
        response = await client.post("/api/auth/login", json={"email": "alice@example.com", "password": "secret123"})
        sid = response.cookies[settings.session_cookie_name]
        assert await redis.get(f"session:{sid}") is not None

    async def test_login_sets_last_login(self, client: AsyncClient, db_session):
        await client.post("/api/auth/sign-up", json=_sign_up())
        await client.post("/api/auth/login", json={"email": "alice@example.com", "password": "secret123"})
        user = (await db_session.execute(select(User))).scalar_one()
        assert user.last_login is not None

    async def test_wrong_password(self, client: AsyncClient):
        await client.post("/api/auth/sign-up", json=_sign_up())
        response = await client.post("/api/auth/login", json={"email": "alice@example.com", "password": "nope-nope"})
        assert response.status_code == 400
        assert response.json()["error"] == "Invalid credentials"

    async def test_unknown_email(self, client: AsyncClient):
        response = await client.post("/api/auth/login", json={"email": "ghost@example.com", "password": "secret123"})
        assert response.status_code == 400
        assert response.json()["error"] == "Invalid credentials"


class TestLogout:
    async def test_logout_ends_session(self, user_client: AsyncClient):
        assert (await user_client.get("/api/teams/search")).status_code == 200

        response = await user_client.post("/api/auth/logout")
        assert response.status_code == 200
        assert response.json()["message"] == "Logout successful"

        after = await user_client.get("/api/teams/search")
        assert after.status_code == 401
        assert after.json()["error"] == "Session expired, please log in again"

    async def test_logout_removes_session_record(self, client: AsyncClient, register_and_login, settings, redis):
        await register_and_login(client, "bob", "bob@example.com")
        sid = client.cookies.get(settings.session_cookie_name)
        assert await redis.get(f"session:{sid}") is not None

        await client.post("/api/auth/logout")
        assert await redis.get(f"session:{sid}") is None

    async def test_logout_without_session_is_ok(self, client: AsyncClient):
        response = await client.post("/api/auth/logout")
        assert response.status_code == 200

    async def test_old_token_with_new_login_still_works(self, client: AsyncClient, register_and_login):
        """Tokens are tied to the user, not to a specific session."""
        first = await register_and_login(client, "carol", "carol@example.com")
        await client.post("/api/auth/login", json={"email": "carol@example.com", "password": "secret123"})
        response = await client.get("/api/teams/search", headers={"Authorization": f"Bearer {first}"})
        assert response.status_code == 200


class TestPromotion:
    async def test_role_change_applies_at_next_login(self, client: AsyncClient, register_and_login, app):
        from mpl.auth.service import set_user_role

        await register_and_login(client, "dave", "dave@example.com")
        assert (await client.post("/api/teams", json={"name": "Dave FC", "country": "Wales"})).status_code == 403

        async with app.state.session_factory() as session:
            await set_user_role(session, "dave@example.com", "admin")
            await session.commit()

        # Existing token still carries the old role
        assert (await client.post("/api/teams", json={"name": "Dave FC", "country": "Wales"})).status_code == 403

        login = await client.post("/api/auth/login", json={"email": "dave@example.com", "password": "secret123"})
        client.headers["Authorization"] = f"Bearer {login.json()['data']['token']}"
        assert (await client.post("/api/teams", json={"name": "Dave FC", "country": "Wales"})).status_code == 201
