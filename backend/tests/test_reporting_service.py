"""
Sales aggregate tests.
"""

from treasures.extensions import db
from treasures.models import PurchaseRecord, Watch
from treasures.services.auth_service import create_user
from treasures.services.reporting_service import (
    sales_by_category,
    sales_by_sex,
    sales_stats,
    top_selling_watches,
)

_counter = {"n": 0}


def _record(user, watch, quantity):
    _counter["n"] += 1
    db.session.add(PurchaseRecord(
        user_id=user.id,
        watch_id=watch.id,
        quantity=quantity,
        total_price_cents=quantity * watch.price_cents,
        order_number=f"ORD-TEST{_counter['n']:06d}",
        shipping_address={},
    ))
    db.session.commit()


class TestAggregates:

    def test_quantities_summed_per_watch_and_category(self, db_session, shopper, make_watch):
        a = make_watch(name="A", category="men-watches")
        b = make_watch(name="B", category="men-watches")
        _record(shopper, a, 2)
        _record(shopper, a, 3)
        _record(shopper, b, 1)

        assert top_selling_watches() == [
            {"watch_id": a.id, "name": "A", "quantity_sold": 5},
            {"watch_id": b.id, "name": "B", "quantity_sold": 1},
        ]
        assert sales_by_category() == [{"category": "men-watches", "quantity_sold": 6}]

    def test_categories_sorted_descending(self, db_session, shopper, make_watch):
        men = make_watch(category="men-watches")
        smart = make_watch(category="smartwatches")
        _record(shopper, men, 1)
        _record(shopper, smart, 4)

        categories = [row["category"] for row in sales_by_category()]
        assert categories == ["smartwatches", "men-watches"]

    def test_top_selling_capped_at_ten(self, db_session, shopper, make_watch):
        for i in range(12):
            _record(shopper, make_watch(), i + 1)

        top = top_selling_watches()
        assert len(top) == 10
        assert top[0]["quantity_sold"] == 12
        assert [row["quantity_sold"] for row in top] == sorted(
            (row["quantity_sold"] for row in top), reverse=True
        )

    def test_records_for_missing_watch_are_excluded(self, db_session, shopper, make_watch):
        a = make_watch(name="A")
        gone = make_watch(name="Gone")
        _record(shopper, a, 1)
        _record(shopper, gone, 7)

        db_session.query(Watch).filter_by(id=gone.id).delete(synchronize_session=False)
        db_session.commit()

        assert [row["name"] for row in top_selling_watches()] == ["A"]
        assert sales_by_category() == [{"category": "men-watches", "quantity_sold": 1}]

    def test_sales_by_sex_groups_unknown(self, db_session, make_watch):
        male = create_user(name="Moshe", email="moshe@example.com", password="secret1")
        male.sex = "male"
        female = create_user(name="Rina", email="rina@example.com", password="secret1")
        female.sex = "female"
        unset = create_user(name="Kim", email="kim@example.com", password="secret1")
        db_session.commit()

        watch = make_watch()
        _record(male, watch, 2)
        _record(female, watch, 5)
        _record(unset, watch, 1)

        assert sales_by_sex() == [
            {"sex": "female", "quantity_sold": 5},
            {"sex": "male", "quantity_sold": 2},
            {"sex": "unknown", "quantity_sold": 1},
        ]

    def test_empty_history(self, db_session):
        assert sales_stats() == {
            "top_selling_watches": [],
            "sales_by_category": [],
            "sales_by_sex": [],
        }
