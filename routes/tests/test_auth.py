import alembic.config
from datetime import datetime, timedelta, timezone
from unittest import IsolatedAsyncioTestCase

from fastapi.testclient import TestClient
from sqlalchemy import select
from core.security import generate_hash_password, generate_token_from_user
from models import engine, db, get_db_sync, get_db_sync_for_test
from models.Token import Token
from models.User import User
from main import app


class TestAuth(IsolatedAsyncioTestCase):
    def setUp(self) -> None:
        alembic_args = ["upgrade", "head"]
        alembic.config.main(argv=alembic_args)
        # connect to the database
        self.connection = engine.connect()

        # begin a non-ORM transaction
        self.trans = self.connection.begin()

        # bind an individual Session to the connection, selecting
        # "create_savepoint" join_transaction_mode
        self.db = db(bind=self.connection, join_transaction_mode="create_savepoint")
        app.dependency_overrides[get_db_sync] = get_db_sync_for_test(db=self.db)
        self.client = TestClient(app)

    def tearDown(self) -> None:
        self.db.close()
        self.trans.rollback()
        self.connection.close()

    async def test_signin_then_logout(self):
        # Given
        new_user = User(
            username="testuser",
            email="testuser@example.com",
            password=generate_hash_password("password"),
            is_active=True,
        )
        self.db.add(new_user)
        self.db.commit()

        # When 1
        response = self.client.post(
            "/auth/signin/",
            json={"username": "testuser", "password": "password"},
        )

        # Expect 1
        self.assertEqual(response.status_code, 200)
        token = response.json().get("access_token", None)
        self.assertIsNotNone(token)
        self.assertEqual(response.json()["token_type"], "bearer")
        session = self.db.execute(
            select(Token).where(Token.user_id == new_user.id)
        ).scalar()
        self.assertIsNotNone(session)

        # When 2
        response = self.client.post(
            "/auth/signin/",
            json={"username": "testuser", "password": "wrongpassword"},
        )

        # Expect 2
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["message"], "Invalid Credentials")

        # When 3
        response = self.client.get(
            "/auth/me/",
            headers={"Authorization": f"Bearer {token}"},
        )

        # Expect 3
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["username"], "testuser")
        self.assertEqual(response.json()["role"], "user")

        # When 4
        response = self.client.post(
            "/auth/logout/",
            headers={"Authorization": f"Bearer {token}"},
        )

        # Expect 4
        self.assertEqual(response.status_code, 200)
        stmt = select(Token).where(Token.user_id == new_user.id)
        self.assertIsNone(self.db.execute(stmt).scalar())

        # When 5
        response = self.client.get(
            "/auth/me/",
            headers={"Authorization": f"Bearer {token}"},
        )

        # Expect 5
        self.assertEqual(response.status_code, 401)

    async def test_swagger_token_form(self):
        # Given
        new_user = User(
            username="formuser",
            password=generate_hash_password("password"),
            is_active=True,
        )
        self.db.add(new_user)
        self.db.commit()

        # When
        response = self.client.post(
            "/auth/token/",
            data={"username": "formuser", "password": "password"},
        )

        # Expect
        self.assertEqual(response.status_code, 200)
        self.assertIsNotNone(response.json().get("access_token"))

    async def test_inactive_user_cannot_signin(self):
        new_user = User(
            username="inactiveuser",
            password=generate_hash_password("password"),
            is_active=False,
        )
        self.db.add(new_user)
        self.db.commit()

        response = self.client.post(
            "/auth/signin/",
            json={"username": "inactiveuser", "password": "password"},
        )

        self.assertEqual(response.status_code, 400)

    async def test_signup(self):
        # When
        response = self.client.post(
            "/auth/signup/",
            json={
                "username": "newcomer",
                "email": "newcomer@example.com",
                "password": "secret123",
                "name": "New Comer",
            },
        )

        # Expect
        self.assertEqual(response.status_code, 201)
        data = response.json()
        self.assertEqual(data["username"], "newcomer")
        self.assertEqual(data["role"], "user")
        user = self.db.execute(
            select(User).where(User.username == "newcomer")
        ).scalar()
        self.assertIsNotNone(user)
        self.assertNotEqual(user.password, "secret123")

        # When signing in with the new account
        response = self.client.post(
            "/auth/signin/",
            json={"username": "newcomer", "password": "secret123"},
        )

        # Expect
        self.assertEqual(response.status_code, 200)

    async def test_signup_duplicate_username(self):
        self.db.add(User(username="taken", email="taken@example.com", is_active=True))
        self.db.commit()

        response = self.client.post(
            "/auth/signup/",
            json={
                "username": "taken",
                "email": "other@example.com",
                "password": "secret123",
            },
        )

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["message"], "Username already registered")

    async def test_signup_duplicate_email(self):
        self.db.add(User(username="first", email="same@example.com", is_active=True))
        self.db.commit()

        response = self.client.post(
            "/auth/signup/",
            json={
                "username": "second",
                "email": "same@example.com",
                "password": "secret123",
            },
        )

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["message"], "Email already registered")

    async def test_signup_short_password(self):
        response = self.client.post(
            "/auth/signup/",
            json={"username": "shorty", "email": "s@example.com", "password": "123"},
        )

        self.assertEqual(response.status_code, 422)

    async def test_me_without_token(self):
        response = self.client.get("/auth/me/")
        self.assertEqual(response.status_code, 401)

    async def test_logout_clears_expired_tokens(self):
        # Given
        new_user = User(
            username="stale",
            password=generate_hash_password("password"),
            is_active=True,
        )
        self.db.add(new_user)
        self.db.commit()
        expired = Token(
            user=new_user,
            token="expired-token",
            expired_at=datetime.now(tz=timezone.utc) - timedelta(hours=1),
        )
        self.db.add(expired)
        self.db.commit()
        token = generate_token_from_user(db=self.db, user=new_user)

        # When
        response = self.client.post(
            "/auth/logout/",
            headers={"Authorization": f"Bearer {token}"},
        )

        # Expect
        self.assertEqual(response.status_code, 200)
        stmt = select(Token).where(Token.user_id == new_user.id)
        self.assertEqual(self.db.execute(stmt).scalars().all(), [])

    async def test_change_password(self):
        # Given
        new_user = User(
            username="changer",
            password=generate_hash_password("password"),
            is_active=True,
        )
        self.db.add(new_user)
        self.db.commit()
        token = generate_token_from_user(db=self.db, user=new_user)
        other_token = generate_token_from_user(db=self.db, user=new_user)

        # When
        response = self.client.put(
            "/auth/change-password/",
            json={"current_password": "password", "new_password": "brandnew"},
            headers={"Authorization": f"Bearer {token}"},
        )

        # Expect
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["message"], "Password changed successfully")
        response = self.client.get(
            "/auth/me/", headers={"Authorization": f"Bearer {token}"}
        )
        self.assertEqual(response.status_code, 200)
        response = self.client.get(
            "/auth/me/", headers={"Authorization": f"Bearer {other_token}"}
        )
        self.assertEqual(response.status_code, 401)
        response = self.client.post(
            "/auth/signin/",
            json={"username": "changer", "password": "password"},
        )
        self.assertEqual(response.status_code, 400)
        response = self.client.post(
            "/auth/signin/",
            json={"username": "changer", "password": "brandnew"},
        )
        self.assertEqual(response.status_code, 200)

    async def test_change_password_wrong_current(self):
        new_user = User(
            username="forgetful",
            password=generate_hash_password("password"),
            is_active=True,
        )
        self.db.add(new_user)
        self.db.commit()
        token = generate_token_from_user(db=self.db, user=new_user)

        response = self.client.put(
            "/auth/change-password/",
            json={"current_password": "nope", "new_password": "brandnew"},
            headers={"Authorization": f"Bearer {token}"},
        )

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["message"], "Current password is incorrect")

    async def test_change_password_without_token(self):
        response = self.client.put(
            "/auth/change-password/",
            json={"current_password": "password", "new_password": "brandnew"},
        )
        self.assertEqual(response.status_code, 401)

    async def test_update_profile(self):
        # Given
        new_user = User(
            username="profiled",
            name="Old Name",
            password=generate_hash_password("password"),
            is_active=True,
        )
        self.db.add(new_user)
        self.db.commit()
        token = generate_token_from_user(db=self.db, user=new_user)

        # When
        response = self.client.put(
            "/auth/profile/",
            json={"name": "New Name", "phone": "08123456789"},
            headers={"Authorization": f"Bearer {token}"},
        )

        # Expect
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["name"], "New Name")
        self.assertEqual(response.json()["phone"], "08123456789")
        self.db.refresh(new_user)
        self.assertEqual(new_user.name, "New Name")
