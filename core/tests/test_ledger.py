from datetime import datetime, timedelta, timezone
from decimal import Decimal
from unittest import TestCase

import alembic.config

from core.errors import InsufficientCapacityError, NotFoundError, OutOfRangeError
from models import db, engine
from models.Event import Event
from repository.ledger import get_ledger, release_seat, reserve_seat
from repository.sales_admin import manual_adjust, reset_sales


class TestLedger(TestCase):
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

        self.event = Event(
            title="Ledger Event",
            location="Bandung",
            event_date=datetime.now(timezone.utc) + timedelta(days=10),
            capacity=5,
            price=Decimal("40.00"),
            is_active=True,
            tickets_sold=0,
            total_revenue=Decimal("0.00"),
        )
        self.session.add(self.event)
        self.session.commit()

    def tearDown(self):
        self.session.close()
        self.trans.rollback()
        self.connection.close()

    def _ledger(self):
        sold, revenue = get_ledger(self.session, self.event.id)
        return sold, Decimal(str(revenue))

    def test_reserve_books_event_price_by_default(self):
        reserve_seat(db=self.session, event_id=self.event.id, quantity=2)
        self.assertEqual(self._ledger(), (2, Decimal("80.00")))

    def test_reserve_books_given_amount(self):
        reserve_seat(
            db=self.session, event_id=self.event.id, quantity=1, amount=Decimal("12.50")
        )
        self.assertEqual(self._ledger(), (1, Decimal("12.50")))

    def test_reserve_up_to_capacity(self):
        # Given
        reserve_seat(db=self.session, event_id=self.event.id, quantity=4)

        # When
        reserve_seat(db=self.session, event_id=self.event.id, quantity=1)

        # Expect
        self.assertEqual(self._ledger()[0], 5)

    def test_reserve_more_than_available(self):
        # Given
        reserve_seat(db=self.session, event_id=self.event.id, quantity=3)

        # When
        with self.assertRaises(InsufficientCapacityError) as context:
            reserve_seat(db=self.session, event_id=self.event.id, quantity=3)

        # Expect
        self.assertEqual(context.exception.message, "Only 2 seats available")
        self.assertEqual(self._ledger()[0], 3)

    def test_reserve_sold_out(self):
        reserve_seat(db=self.session, event_id=self.event.id, quantity=5)
        with self.assertRaises(InsufficientCapacityError) as context:
            reserve_seat(db=self.session, event_id=self.event.id, quantity=1)
        self.assertEqual(context.exception.message, "Event is sold out")

    def test_reserve_zero(self):
        with self.assertRaises(InsufficientCapacityError):
            reserve_seat(db=self.session, event_id=self.event.id, quantity=0)
        self.assertEqual(self._ledger()[0], 0)

    def test_reserve_unknown_event(self):
        with self.assertRaises(NotFoundError):
            reserve_seat(db=self.session, event_id=999999, quantity=1)

    def test_reserve_then_release(self):
        # Given
        before = self._ledger()
        reserve_seat(
            db=self.session, event_id=self.event.id, quantity=2, amount=Decimal("65.10")
        )

        # When
        release_seat(
            db=self.session, event_id=self.event.id, quantity=2, amount=Decimal("65.10")
        )

        # Expect
        self.assertEqual(self._ledger(), before)

    def test_release_clamps_at_zero(self):
        # Given
        reserve_seat(db=self.session, event_id=self.event.id, quantity=1)
        reset_sales(db=self.session, event_id=self.event.id)

        # When
        release_seat(
            db=self.session, event_id=self.event.id, quantity=1, amount=Decimal("40.00")
        )

        # Expect
        self.assertEqual(self._ledger(), (0, Decimal("0")))

    def test_release_unknown_event(self):
        with self.assertRaises(NotFoundError):
            release_seat(
                db=self.session, event_id=999999, quantity=1, amount=Decimal("1")
            )

    def test_reset_sales(self):
        reserve_seat(db=self.session, event_id=self.event.id, quantity=3)

        event = reset_sales(db=self.session, event_id=self.event.id)

        self.assertEqual(event.tickets_sold, 0)
        self.assertEqual(self._ledger(), (0, Decimal("0")))

    def test_reset_unknown_event(self):
        with self.assertRaises(NotFoundError):
            reset_sales(db=self.session, event_id=999999)

    def test_manual_adjust_recomputes_revenue(self):
        event = manual_adjust(db=self.session, event_id=self.event.id, tickets_sold=3)
        self.assertEqual(event.tickets_sold, 3)
        self.assertEqual(self._ledger(), (3, Decimal("120.00")))

    def test_manual_adjust_both_values(self):
        manual_adjust(
            db=self.session,
            event_id=self.event.id,
            tickets_sold=2,
            total_revenue=Decimal("55.00"),
        )
        self.assertEqual(self._ledger(), (2, Decimal("55.00")))

    def test_manual_adjust_revenue_only(self):
        reserve_seat(db=self.session, event_id=self.event.id, quantity=1)
        manual_adjust(
            db=self.session, event_id=self.event.id, total_revenue=Decimal("10.00")
        )
        self.assertEqual(self._ledger(), (1, Decimal("10.00")))

    def test_manual_adjust_above_capacity(self):
        with self.assertRaises(OutOfRangeError):
            manual_adjust(db=self.session, event_id=self.event.id, tickets_sold=6)
        self.assertEqual(self._ledger()[0], 0)

    def test_manual_adjust_negative(self):
        with self.assertRaises(OutOfRangeError):
            manual_adjust(db=self.session, event_id=self.event.id, tickets_sold=-1)
        with self.assertRaises(OutOfRangeError):
            manual_adjust(
                db=self.session,
                event_id=self.event.id,
                total_revenue=Decimal("-5"),
            )

    def test_manual_adjust_unknown_event(self):
        with self.assertRaises(NotFoundError):
            manual_adjust(db=self.session, event_id=999999, tickets_sold=1)
