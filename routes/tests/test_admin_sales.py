from fastapi.testclient import TestClient
from models import engine, db, get_db_sync, get_db_sync_for_test
from models.Category import Category
from models.Event import Event
from models.Registration import Registration
from models.Ticket import Ticket, TicketStatus
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


class TestAdminSales(TestCase):
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

        self.admin, self.admin_token = self._create_user("admin", UserRole.ADMIN)
        self.buyer, self.buyer_token = self._create_user("buyer", UserRole.USER)

        self.category = Category(name="Workshop", created_at=self.now)
        self.session.add(self.category)
        self.session.commit()

        self.event = Event(
            title="Async Python",
            location="Denpasar",
            event_date=self.now + timedelta(days=40),
            capacity=10,
            price=Decimal("50.00"),
            is_active=True,
            category_id=self.category.id,
            tickets_sold=4,
            total_revenue=Decimal("200.00"),
            created_at=self.now,
        )
        self.second_event = Event(
            title="Typing in Practice",
            location="Denpasar",
            event_date=self.now + timedelta(days=41),
            capacity=4,
            price=Decimal("20.00"),
            is_active=True,
            tickets_sold=1,
            total_revenue=Decimal("20.00"),
            created_at=self.now,
        )
        self.session.add_all([self.event, self.second_event])
        self.session.commit()

        app.dependency_overrides[get_db_sync] = get_db_sync_for_test(db=self.session)
        self.client = TestClient(app)

    def tearDown(self):
        self.session.close()
        self.trans.rollback()
        self.connection.close()

    def _create_user(self, username: str, role: str):
        user = User(
            username=f"admin_sales_{username}",
            email=f"{username}@example.com",
            name=username.title(),
            role=role,
            is_active=True,
        )
        self.session.add(user)
        self.session.commit()

        expire = datetime.now(tz=pytz.utc) + timedelta(
            minutes=float(ACCESS_TOKEN_EXPIRE_MINUTES)
        )
        payload = {"id": str(user.id), "username": user.username, "exp": expire}
        token = jwt.encode(payload, SECRET_KEY, algorithm=ALGORITHM)
        self.session.add(Token(user_id=user.id, token=token, expired_at=expire))
        self.session.commit()
        return user, token

    def _headers(self, token: str = None) -> dict:
        return {"Authorization": f"Bearer {token or self.admin_token}"}

    def test_admin_routes_require_admin(self):
        for path in ("/admin/dashboard", "/admin/sales-report", "/admin/user/"):
            response = self.client.get(path, headers=self._headers(self.buyer_token))
            self.assertEqual(response.status_code, 403, path)

            response = self.client.get(path)
            self.assertEqual(response.status_code, 401, path)

    def test_dashboard(self):
        # When
        response = self.client.get("/admin/dashboard", headers=self._headers())

        # Expect
        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertGreaterEqual(data["total_users"], 2)
        self.assertGreaterEqual(data["total_tickets_sold"], 5)
        self.assertGreaterEqual(Decimal(str(data["total_revenue"])), Decimal("220"))
        workshop = next(
            c for c in data["events_per_category"] if c["category_id"] == self.category.id
        )
        self.assertEqual(workshop["event_count"], 1)

    def test_sales_report(self):
        # When
        response = self.client.get(
            "/admin/sales-report",
            params={
                "start_date": (self.now + timedelta(days=39)).isoformat(),
                "end_date": (self.now + timedelta(days=42)).isoformat(),
            },
            headers=self._headers(),
        )

        # Expect
        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertEqual(data["total_events"], 2)
        self.assertEqual(data["total_tickets_sold"], 5)
        self.assertEqual(Decimal(str(data["total_revenue"])), Decimal("220"))
        rates = {e["event_id"]: e["occupancy_rate"] for e in data["events"]}
        self.assertEqual(rates[self.event.id], 40.0)
        self.assertEqual(rates[self.second_event.id], 25.0)
        self.assertEqual(data["average_occupancy_rate"], 32.5)

    def test_adjust_sales(self):
        # When
        response = self.client.put(
            f"/admin/event/{self.event.id}/sales",
            json={"tickets_sold": 6},
            headers=self._headers(),
        )

        # Expect
        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertEqual(data["tickets_sold"], 6)
        self.assertEqual(data["available_seats"], 4)
        self.assertEqual(Decimal(str(data["total_revenue"])), Decimal("300"))

    def test_adjust_sales_above_capacity(self):
        # When
        response = self.client.put(
            f"/admin/event/{self.event.id}/sales",
            json={"tickets_sold": 11},
            headers=self._headers(),
        )

        # Expect
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["code"], "OutOfRange")
        self.session.refresh(self.event)
        self.assertEqual(self.event.tickets_sold, 4)

    def test_adjust_sales_empty_body(self):
        response = self.client.put(
            f"/admin/event/{self.event.id}/sales",
            json={},
            headers=self._headers(),
        )
        self.assertEqual(response.status_code, 422)

    def test_adjust_sales_unknown_event(self):
        response = self.client.put(
            "/admin/event/999999/sales",
            json={"tickets_sold": 1},
            headers=self._headers(),
        )
        self.assertEqual(response.status_code, 404)

    def test_reset_sales(self):
        # When
        response = self.client.post(
            f"/admin/event/{self.event.id}/sales/reset", headers=self._headers()
        )

        # Expect
        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertEqual(data["tickets_sold"], 0)
        self.assertEqual(Decimal(str(data["total_revenue"])), Decimal("0"))

    def test_reset_sales_requires_admin(self):
        response = self.client.post(
            f"/admin/event/{self.event.id}/sales/reset",
            headers=self._headers(self.buyer_token),
        )
        self.assertEqual(response.status_code, 403)
        self.session.refresh(self.event)
        self.assertEqual(self.event.tickets_sold, 4)

    def test_attendees(self):
        # Given
        self.session.add(
            Ticket(
                user_id=self.buyer.id,
                event_id=self.event.id,
                status=TicketStatus.ACTIVE,
                price=Decimal("50.00"),
                purchase_date=self.now,
            )
        )
        self.session.add(
            Registration(
                user_id=self.admin.id,
                event_id=self.event.id,
                quantity=3,
                unit_price=Decimal("50.00"),
                total_price=Decimal("150.00"),
                discount_amount=Decimal("0.00"),
                final_price=Decimal("150.00"),
                registered_at=self.now,
            )
        )
        self.session.commit()

        # When
        response = self.client.get(
            f"/admin/event/{self.event.id}/attendees", headers=self._headers()
        )

        # Expect
        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertEqual(data["total_attendees"], 4)
        kinds = sorted(a["kind"] for a in data["attendees"])
        self.assertEqual(kinds, ["registration", "ticket"])

    def test_list_users(self):
        response = self.client.get(
            "/admin/user/",
            params={"search": "admin_sales", "role": "user"},
            headers=self._headers(),
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(
            [u["id"] for u in response.json()["results"]], [self.buyer.id]
        )

    def test_update_user_status(self):
        # When
        response = self.client.patch(
            f"/admin/user/{self.buyer.id}/status",
            json={"is_active": False},
            headers=self._headers(),
        )

        # Expect
        self.assertEqual(response.status_code, 200)
        self.assertFalse(response.json()["is_active"])
        response = self.client.get("/ticket/me", headers=self._headers(self.buyer_token))
        self.assertEqual(response.status_code, 401)

    def test_cannot_deactivate_self(self):
        response = self.client.patch(
            f"/admin/user/{self.admin.id}/status",
            json={"is_active": False},
            headers=self._headers(),
        )
        self.assertEqual(response.status_code, 400)

    def test_update_user_role(self):
        response = self.client.patch(
            f"/admin/user/{self.buyer.id}/role",
            json={"role": "organizer"},
            headers=self._headers(),
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["role"], "organizer")

    def test_cannot_demote_self(self):
        response = self.client.patch(
            f"/admin/user/{self.admin.id}/role",
            json={"role": "user"},
            headers=self._headers(),
        )
        self.assertEqual(response.status_code, 400)

    def test_create_user(self):
        # When
        response = self.client.post(
            "/admin/user/",
            json={
                "username": "door_staff",
                "email": "door@example.com",
                "password": "secret123",
                "role": "organizer",
            },
            headers=self._headers(),
        )

        # Expect
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()["username"], "door_staff")
        self.assertEqual(response.json()["role"], "organizer")
        response = self.client.post(
            "/auth/signin/",
            json={"username": "door_staff", "password": "secret123"},
        )
        self.assertEqual(response.status_code, 200)

    def test_create_user_duplicate(self):
        response = self.client.post(
            "/admin/user/",
            json={
                "username": self.buyer.username,
                "email": "fresh@example.com",
                "password": "secret123",
            },
            headers=self._headers(),
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["message"], "Username already registered")

        response = self.client.post(
            "/admin/user/",
            json={
                "username": "fresh_user",
                "email": self.buyer.email,
                "password": "secret123",
            },
            headers=self._headers(),
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["message"], "Email already registered")

    def test_create_user_requires_admin(self):
        response = self.client.post(
            "/admin/user/",
            json={
                "username": "sneaky",
                "email": "sneaky@example.com",
                "password": "secret123",
                "role": "admin",
            },
            headers=self._headers(self.buyer_token),
        )
        self.assertEqual(response.status_code, 403)

    def test_delete_user(self):
        # Given
        target, _ = self._create_user("leaving", UserRole.USER)
        target_id = target.id

        # When
        response = self.client.delete(
            f"/admin/user/{target_id}", headers=self._headers()
        )

        # Expect
        self.assertEqual(response.status_code, 204)
        self.assertIsNone(self.session.get(User, target_id))
        self.assertEqual(
            self.session.query(Token).filter(Token.user_id == target_id).count(), 0
        )

    def test_delete_user_with_tickets(self):
        # Given
        self.session.add(
            Ticket(
                user_id=self.buyer.id,
                event_id=self.event.id,
                status=TicketStatus.CANCELLED,
                price=Decimal("50.00"),
                purchase_date=self.now,
                cancelled_at=self.now,
            )
        )
        self.session.commit()

        # When
        response = self.client.delete(
            f"/admin/user/{self.buyer.id}", headers=self._headers()
        )

        # Expect
        self.assertEqual(response.status_code, 400)
        self.assertEqual(
            response.json()["message"],
            "Cannot delete user. They have 1 tickets and 0 registrations. "
            "Consider deactivating instead.",
        )
        self.assertIsNotNone(self.session.get(User, self.buyer.id))

    def test_delete_organizer_of_events(self):
        organizer, _ = self._create_user("host", UserRole.ORGANIZER)
        self.event.organizer_id = organizer.id
        self.session.commit()

        response = self.client.delete(
            f"/admin/user/{organizer.id}", headers=self._headers()
        )

        self.assertEqual(response.status_code, 400)
        self.assertEqual(
            response.json()["message"],
            "Cannot delete user. They are the organizer of 1 events.",
        )

    def test_cannot_delete_self(self):
        response = self.client.delete(
            f"/admin/user/{self.admin.id}", headers=self._headers()
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(
            response.json()["message"], "You cannot delete your own account"
        )

    def test_delete_unknown_user(self):
        response = self.client.delete("/admin/user/999999", headers=self._headers())
        self.assertEqual(response.status_code, 404)
