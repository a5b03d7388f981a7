from fastapi.testclient import TestClient
from models import engine, db, get_db_sync, get_db_sync_for_test
from models.Event import Event
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


class TestUserEventsHistory(TestCase):
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
        self.stranger, self.stranger_token = self._create_user(
            "stranger", UserRole.USER
        )

        self.event = Event(
            title="Data Day",
            location="Malang",
            event_date=self.now + timedelta(days=20),
            capacity=30,
            price=Decimal("40.00"),
            is_active=True,
            tickets_sold=1,
            total_revenue=Decimal("40.00"),
            created_at=self.now,
        )
        self.second_event = Event(
            title="Spring Meetup",
            location="Malang",
            event_date=self.now + timedelta(days=2),
            capacity=30,
            price=Decimal("10.00"),
            is_active=True,
            tickets_sold=0,
            total_revenue=Decimal("0.00"),
            created_at=self.now,
        )
        self.session.add_all([self.event, self.second_event])
        self.session.commit()

        self.ticket = Ticket(
            user_id=self.buyer.id,
            event_id=self.event.id,
            status=TicketStatus.ACTIVE,
            price=Decimal("40.00"),
            purchase_date=self.now,
        )
        self.old_ticket = Ticket(
            user_id=self.buyer.id,
            event_id=self.second_event.id,
            status=TicketStatus.USED,
            price=Decimal("10.00"),
            purchase_date=self.now - timedelta(days=1),
            used_at=self.now,
        )
        self.session.add_all([self.ticket, self.old_ticket])
        self.session.commit()

        app.dependency_overrides[get_db_sync] = get_db_sync_for_test(db=self.session)
        self.client = TestClient(app)

    def tearDown(self):
        self.session.close()
        self.trans.rollback()
        self.connection.close()

    def _create_user(self, username: str, role: str):
        user = User(
            username=f"history_{username}",
            email=f"history_{username}@example.com",
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

    def _headers(self, token: str) -> dict:
        return {"Authorization": f"Bearer {token}"}

    def test_own_events_history(self):
        # When
        response = self.client.get(
            f"/user/{self.buyer.id}/events-history",
            headers=self._headers(self.buyer_token),
        )

        # Expect
        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertEqual(data["count"], 2)
        self.assertEqual(
            [t["id"] for t in data["results"]], [self.ticket.id, self.old_ticket.id]
        )

    def test_events_history_filtered_by_status(self):
        response = self.client.get(
            f"/user/{self.buyer.id}/events-history",
            params={"status": "used"},
            headers=self._headers(self.buyer_token),
        )

        self.assertEqual(response.status_code, 200)
        self.assertEqual(
            [t["id"] for t in response.json()["results"]], [self.old_ticket.id]
        )

    def test_admin_reads_any_history(self):
        response = self.client.get(
            f"/user/{self.buyer.id}/events-history",
            headers=self._headers(self.admin_token),
        )

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["count"], 2)

    def test_history_of_another_user(self):
        response = self.client.get(
            f"/user/{self.buyer.id}/events-history",
            headers=self._headers(self.stranger_token),
        )
        self.assertEqual(response.status_code, 403)

    def test_history_requires_login(self):
        response = self.client.get(f"/user/{self.buyer.id}/events-history")
        self.assertEqual(response.status_code, 401)

    def test_history_of_unknown_user(self):
        response = self.client.get(
            "/user/999999/events-history", headers=self._headers(self.admin_token)
        )
        self.assertEqual(response.status_code, 404)
