from datetime import timedelta
from decimal import Decimal
from unittest.mock import MagicMock

import pytest
from sqlalchemy import create_engine
from sqlalchemy.dialects import mysql
from sqlalchemy.orm import sessionmaker

from app.core.clock import now_local
from app.core.database import Base
from app.models.featured_product import FeaturedProduct
from app.models.hot_deal import HotDeal
from app.models.product import Product
from app.models.store import Store
from app.services import promotion_service
from app.services.errors import MarketplaceError, PromotionConflict, SlotLimitReached
from factories import make_hot_deal, make_plan, make_product, make_seller, make_subscription


def test_gold_plan_features_two_products_then_rejects_the_third(db):
    _, store, sub = make_seller(db, plan_type="gold")
    p1, p2, p3 = (make_product(db, store=store) for _ in range(3))
    now = now_local()

    first, status = promotion_service.create_featured_product(db, store, p1, now)
    assert status.used == 1
    assert status.remaining == 1
    assert first.subscription_code == sub.subscription_code
    assert first.plan_type == "gold"
    assert first.finish_time == now + timedelta(days=14)

    _, status = promotion_service.create_featured_product(db, store, p2, now)
    assert status.remaining == 0

    with pytest.raises(SlotLimitReached) as exc:
        promotion_service.create_featured_product(db, store, p3, now)

    assert exc.value.remaining == 0
    body = exc.value.to_dict()
    assert body["remaining_slots"] == 0
    assert body["used"] == 2
    assert body["max_allowed"] == 2
    assert db.query(FeaturedProduct).count() == 2


def test_deactivated_rows_still_use_their_slot(db):
    _, store, _ = make_seller(db, plan_type="silver")
    p1, p2 = make_product(db, store=store), make_product(db, store=store)
    now = now_local()

    featured, _ = promotion_service.create_featured_product(db, store, p1, now)
    assert promotion_service.unfeature_product(db, store.id, p1.id, now) == 1
    db.refresh(featured)
    assert featured.is_active is False

    with pytest.raises(SlotLimitReached):
        promotion_service.create_featured_product(db, store, p2, now)


def test_new_subscription_starts_with_empty_slots(db):
    _, store, old = make_seller(db, plan_type="silver")
    p1, p2 = make_product(db, store=store), make_product(db, store=store)
    now = now_local()
    promotion_service.create_featured_product(db, store, p1, now)
    promotion_service.unfeature_product(db, store.id, p1.id, now)

    old.status = "expired"
    db.commit()
    new = make_subscription(db, store=store, plan=make_plan(db, plan_type="silver"))

    status = promotion_service.check_slots(db, store.id, "featured")
    assert status.subscription_code == new.subscription_code
    assert status.used == 0

    featured, status = promotion_service.create_featured_product(db, store, p2, now)
    assert featured.subscription_code == new.subscription_code
    assert status.used == 1


def test_store_without_subscription_has_no_slots(db):
    _, store, _ = make_seller(db, plan_type=None)
    product = make_product(db, store=store)

    status = promotion_service.check_slots(db, store.id, "featured")
    assert (status.plan_type, status.subscription_code, status.used, status.max_slots) == ("basic", None, 0, 0)

    with pytest.raises(SlotLimitReached) as exc:
        promotion_service.create_featured_product(db, store, product, now_local())
    assert exc.value.max_slots == 0
    assert "Upgrade" in exc.value.message


def test_basic_plan_subscription_has_no_slots(db):
    _, store, _ = make_seller(db, plan_type="basic")
    product = make_product(db, store=store)
    now = now_local()

    with pytest.raises(SlotLimitReached):
        promotion_service.create_hot_deal(
            db, store, product, Decimal("100"), now, now + timedelta(days=1), None, now
        )


def test_current_subscription_prefers_newest_row(db):
    _, store, older = make_seller(db, plan_type="silver")
    newer = make_subscription(
        db,
        store=store,
        plan=make_plan(db, plan_type="platinum"),
        created_at=now_local() + timedelta(minutes=1),
    )

    current = promotion_service.get_current_subscription(db, store.id)
    assert current.id == newer.id
    assert promotion_service.resolve_plan_type(db, current) == "platinum"
    assert older.status == "active"


def test_gold_plan_has_a_single_hot_deal_slot(db):
    _, store, _ = make_seller(db, plan_type="gold")
    p1, p2 = make_product(db, store=store), make_product(db, store=store)
    now = now_local()

    deal, status = promotion_service.create_hot_deal(
        db, store, p1, Decimal("150000"), now, now + timedelta(days=3), "Weekend offer", now
    )
    assert status.max_slots == 1
    assert deal.original_price == Decimal("200000.00")
    assert deal.discount_percentage == 25
    assert deal.activated_at == now

    with pytest.raises(SlotLimitReached) as exc:
        promotion_service.create_hot_deal(
            db, store, p2, Decimal("150000"), now, now + timedelta(days=3), None, now
        )
    assert exc.value.promotion_type == "hot_deal"
    assert db.query(HotDeal).count() == 1


def test_featuring_an_already_featured_product_conflicts(db):
    _, store, _ = make_seller(db, plan_type="platinum")
    product = make_product(db, store=store)
    now = now_local()
    promotion_service.create_featured_product(db, store, product, now)

    with pytest.raises(PromotionConflict):
        promotion_service.create_featured_product(db, store, product, now)


def test_second_running_deal_on_a_product_conflicts(db):
    _, store, _ = make_seller(db, plan_type="platinum")
    product = make_product(db, store=store)
    now = now_local()
    promotion_service.create_hot_deal(db, store, product, Decimal("1000"), now, now + timedelta(days=1), None, now)

    with pytest.raises(PromotionConflict):
        promotion_service.create_hot_deal(
            db, store, product, Decimal("900"), now, now + timedelta(days=1), None, now
        )


def test_hot_deal_needs_a_priced_product_and_valid_window(db):
    _, store, _ = make_seller(db, plan_type="platinum")
    unpriced = make_product(db, store=store, new_price=None)
    priced = make_product(db, store=store)
    now = now_local()

    with pytest.raises(MarketplaceError):
        promotion_service.create_hot_deal(db, store, unpriced, Decimal("10"), now, now + timedelta(hours=1), None, now)
    with pytest.raises(MarketplaceError):
        promotion_service.create_hot_deal(db, store, priced, Decimal("10"), now, now, None, now)
    assert db.query(HotDeal).count() == 0


def test_creation_schedules_delayed_expiry(db, queued):
    _, store, _ = make_seller(db, plan_type="gold")
    product = make_product(db, store=store)

    featured, _ = promotion_service.create_featured_product(db, store, product, now_local())

    queued.assert_called_once_with("featured", featured.id, featured.finish_time)


def test_queue_outage_does_not_block_promotion(db, queued):
    queued.side_effect = ConnectionError("redis down")
    _, store, _ = make_seller(db, plan_type="gold")
    product = make_product(db, store=store)

    featured, _ = promotion_service.create_featured_product(db, store, product, now_local())

    assert featured.id is not None
    assert promotion_service.is_featured(db, product.id)


def test_updating_a_deal_recomputes_discount_and_reschedules(db, queued):
    _, store, _ = make_seller(db, plan_type="gold")
    product = make_product(db, store=store)
    now = now_local()
    deal, _ = promotion_service.create_hot_deal(
        db, store, product, Decimal("150000"), now, now + timedelta(days=1), None, now
    )
    queued.reset_mock()

    new_end = now + timedelta(days=2)
    deal = promotion_service.update_hot_deal(db, deal, now, deal_price=Decimal("100000"), deal_end_at=new_end)

    assert deal.discount_percentage == 50
    assert deal.deal_end_at == new_end
    queued.assert_called_once_with("hot_deal", deal.id, new_end)

    with pytest.raises(MarketplaceError):
        promotion_service.update_hot_deal(db, deal, now, deal_end_at=now - timedelta(minutes=1))


def test_discount_percentage():
    assert promotion_service.discount_percentage(Decimal("200000"), Decimal("150000")) == 25
    assert promotion_service.discount_percentage("100", "33.4") == 67
    assert promotion_service.discount_percentage(0, 10) == 0
    assert promotion_service.discount_percentage(None, 10) == 0


def test_deal_that_has_not_started_still_blocks_a_second_deal(db):
    _, store, _ = make_seller(db, plan_type="platinum")
    product = make_product(db, store=store)
    now = now_local()
    tomorrow = now + timedelta(days=1)
    promotion_service.create_hot_deal(db, store, product, Decimal("1000"), tomorrow, tomorrow + timedelta(days=1), None, now)

    with pytest.raises(PromotionConflict):
        promotion_service.create_hot_deal(db, store, product, Decimal("900"), now, now + timedelta(hours=6), None, now)
    assert db.query(HotDeal).count() == 1


def test_ended_but_unswept_deal_does_not_block_a_new_one(db):
    _, store, sub = make_seller(db, plan_type="platinum")
    product = make_product(db, store=store)
    now = now_local()
    make_hot_deal(db, product=product, subscription=sub, start=now - timedelta(days=2), end=now - timedelta(hours=1))

    deal, _ = promotion_service.create_hot_deal(
        db, store, product, Decimal("900"), now, now + timedelta(days=1), None, now
    )

    assert deal.is_active is True


def test_slot_reservation_counts_with_a_locking_read(db, monkeypatch):
    _, store, sub = make_seller(db, plan_type="gold")
    product = make_product(db, store=store)
    count = MagicMock(wraps=promotion_service.count_used)
    monkeypatch.setattr(promotion_service, "count_used", count)

    promotion_service.create_featured_product(db, store, product, now_local())

    assert count.call_args.kwargs["lock"] is True
    locking = promotion_service.usage_query(db, "featured", store.id, sub.subscription_code).with_for_update()
    assert "FOR UPDATE" in str(locking.statement.compile(dialect=mysql.dialect()))


def test_interleaved_requests_share_one_slot_ceiling(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'slots.db'}")
    Base.metadata.create_all(bind=engine)
    make_session = sessionmaker(autoflush=False, bind=engine)

    setup = make_session()
    _, store, _ = make_seller(setup, plan_type="gold")
    store_id = store.id
    product_ids = [make_product(setup, store=store).id for _ in range(3)]
    setup.close()

    first, second = make_session(), make_session()
    try:
        # the second request has loaded its store and product before the first one commits
        late_store = second.get(Store, store_id)
        late_product = second.get(Product, product_ids[2])

        now = now_local()
        early_store = first.get(Store, store_id)
        for product_id in product_ids[:2]:
            promotion_service.create_featured_product(first, early_store, first.get(Product, product_id), now)

        with pytest.raises(SlotLimitReached) as exc:
            promotion_service.create_featured_product(second, late_store, late_product, now)

        assert exc.value.used == 2
        assert second.query(FeaturedProduct).count() == 2
    finally:
        first.close()
        second.close()
        engine.dispose()
