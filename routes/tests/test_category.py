from fastapi.testclient import TestClient
from models import engine, db, get_db_sync, get_db_sync_for_test
from models.Category import Category
from models.Event import Event
from models.Token import Token
from models.User import User, UserRole
from main import app
import alembic.config
from unittest import TestCase
from datetime import datetime, timedelta
from decimal import Decimal
import pytz
from settings import SECRET_KEY, ALGORITHM, ACCESS_TOKEN_EXPIRE_MINUTES
import jwt


class TestCategory(TestCase):
    @classmethod
    def setUpClass(cls):
        alembic_args = ["upgrade", "head"]
        alembic.config.main(argv=alembic_args)

    def setUp(self):
        self.connection = engine.connect()
        self.trans = self.connection.begin()
        self.session = db(
            bind=self.connection, join_transaction_mode="create_savepoint"
        )
        self.now = datetime.now(tz=pytz.utc)

        self.admin = User(
            username="category_admin", role=UserRole.ADMIN, is_active=True
        )
        self.session.add(self.admin)
        self.session.commit()

        expire = self.now + timedelta(minutes=float(ACCESS_TOKEN_EXPIRE_MINUTES))
        payload = {"id": str(self.admin.id), "username": self.admin.username, "exp": expire}
        self.admin_token = jwt.encode(payload, SECRET_KEY, algorithm=ALGORITHM)
        self.session.add(
            Token(user_id=self.admin.id, token=self.admin_token, expired_at=expire)
        )

        self.category = Category(name="Meetup", created_at=self.now)
        self.session.add(self.category)
        self.session.commit()

        app.dependency_overrides[get_db_sync] = get_db_sync_for_test(db=self.session)
        self.client = TestClient(app)

    def tearDown(self):
        self.session.close()
        self.trans.rollback()
        self.connection.close()

    def _headers(self) -> dict:
        return {"Authorization": f"Bearer {self.admin_token}"}

    def test_list_categories(self):
        response = self.client.get("/category/")
        self.assertEqual(response.status_code, 200)
        self.assertIn("Meetup", [c["name"] for c in response.json()["results"]])

    def test_create_category(self):
        response = self.client.post(
            "/category/",
            json={"name": "Sprint", "description": "Coding sprints"},
            headers=self._headers(),
        )
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()["name"], "Sprint")

    def test_create_duplicate_category(self):
        response = self.client.post(
            "/category/", json={"name": "meetup"}, headers=self._headers()
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["message"], "Category already exists")

    def test_create_category_unauthenticated(self):
        response = self.client.post("/category/", json={"name": "Sprint"})
        self.assertEqual(response.status_code, 401)

    def test_update_category(self):
        response = self.client.put(
            f"/category/{self.category.id}",
            json={"name": "Community Meetup"},
            headers=self._headers(),
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["name"], "Community Meetup")

    def test_delete_category_with_events(self):
        # Given
        self.session.add(
            Event(
                title="Monthly Meetup",
                location="Jakarta",
                event_date=self.now + timedelta(days=3),
                capacity=40,
                price=Decimal("0.00"),
                is_active=True,
                category_id=self.category.id,
                tickets_sold=0,
                total_revenue=Decimal("0.00"),
            )
        )
        self.session.commit()

        # When
        response = self.client.delete(
            f"/category/{self.category.id}", headers=self._headers()
        )

        # Expect
        self.assertEqual(response.status_code, 400)
        self.assertIsNotNone(self.session.get(Category, self.category.id))

    def test_delete_category(self):
        response = self.client.delete(
            f"/category/{self.category.id}", headers=self._headers()
        )
        self.assertEqual(response.status_code, 204)
        self.assertIsNone(self.session.get(Category, self.category.id))

    def test_toggle_category_status(self):
        # When 1
        response = self.client.patch(
            f"/category/{self.category.id}/toggle-status", headers=self._headers()
        )

        # Expect 1
        self.assertEqual(response.status_code, 200)
        self.assertFalse(response.json()["is_active"])

        # When 2
        response = self.client.get("/category/?is_active=true")

        # Expect 2
        self.assertNotIn("Meetup", [c["name"] for c in response.json()["results"]])
        response = self.client.get("/category/?is_active=false")
        self.assertIn("Meetup", [c["name"] for c in response.json()["results"]])

        # When 3
        response = self.client.patch(
            f"/category/{self.category.id}/toggle-status", headers=self._headers()
        )

        # Expect 3
        self.assertTrue(response.json()["is_active"])

    def test_toggle_category_status_requires_admin(self):
        response = self.client.patch(f"/category/{self.category.id}/toggle-status")
        self.assertEqual(response.status_code, 401)

    def test_toggle_missing_category(self):
        response = self.client.patch(
            "/category/999999/toggle-status", headers=self._headers()
        )
        self.assertEqual(response.status_code, 404)
