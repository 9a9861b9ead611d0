from datetime import timedelta
from unittest.mock import ANY, MagicMock

import pytest

from app.core.clock import now_local, to_timestamp
from app.core.config import settings
from app.services import delayed_queue, promotion_service
from app.worker import task_processor
from conftest import TestingSessionLocal
from factories import make_featured, make_hot_deal, make_product, make_seller


def test_task_for_row_already_swept_is_a_noop(db):
    _, store, sub = make_seller(db, plan_type="gold")
    now = now_local()
    row = make_featured(
        db, product=make_product(db, store=store), subscription=sub,
        featured_at=now - timedelta(days=15), finish_time=now - timedelta(days=1),
    )
    promotion_service.expire_featured_products(db, now)

    assert promotion_service.expire_promotion(db, "featured", row.id) is False
    db.refresh(row)
    assert row.is_active is False


def test_task_only_switches_the_flag(db):
    _, store, sub = make_seller(db, plan_type="gold")
    now = now_local()
    end = now + timedelta(days=1)
    deal = make_hot_deal(db, product=make_product(db, store=store), subscription=sub, start=now, end=end)

    assert promotion_service.expire_promotion(db, "hot_deal", deal.id) is True
    db.refresh(deal)
    assert deal.is_active is False
    assert deal.deal_end_at == end
    assert deal.deactivated_at is None

    assert promotion_service.expire_promotion(db, "hot_deal", deal.id) is False


def test_task_for_deleted_or_unknown_rows_is_a_noop(db):
    assert promotion_service.expire_promotion(db, "featured", 9999) is False
    assert promotion_service.expire_promotion(db, "banner", 1) is False


def test_task_scoped_to_store_ignores_foreign_rows(db):
    _, store, sub = make_seller(db, plan_type="gold")
    _, other, _ = make_seller(db, plan_type="gold")
    row = make_featured(db, product=make_product(db, store=store), subscription=sub, featured_at=now_local())

    assert promotion_service.expire_promotion(db, "featured", row.id, store_id=other.id) is False
    db.refresh(row)
    assert row.is_active is True


@pytest.mark.parametrize(
    "member, expected",
    [
        ("featured:12", ("featured", 12)),
        ("hot_deal:3", ("hot_deal", 3)),
        ("banner:1", None),
        ("hot_deal:abc", None),
        ("featured", None),
    ],
)
def test_parse_member(member, expected):
    assert delayed_queue.parse_member(member) == expected


def test_enqueue_scores_member_by_due_time():
    r = MagicMock()
    run_at = now_local() + timedelta(days=7)

    delayed_queue.enqueue_expiry("hot_deal", 5, run_at, r)

    r.zadd.assert_called_once_with(settings.DELAYED_QUEUE_KEY, {"hot_deal:5": to_timestamp(run_at)})


def test_enqueue_rejects_unknown_kind():
    with pytest.raises(ValueError):
        delayed_queue.enqueue_expiry("banner", 1, now_local(), MagicMock())


def test_claim_due_keeps_only_members_this_worker_removed():
    r = MagicMock()
    r.zrangebyscore.return_value = ["featured:1", "hot_deal:2"]
    r.zrem.side_effect = [1, 0]
    now = now_local()

    assert delayed_queue.claim_due(now, r) == ["featured:1"]
    r.zrangebyscore.assert_called_once_with(
        settings.DELAYED_QUEUE_KEY, "-inf", to_timestamp(now), start=0, num=100
    )


def test_worker_expires_claimed_rows(db, monkeypatch):
    _, store, sub = make_seller(db, plan_type="platinum")
    now = now_local()
    featured = make_featured(db, product=make_product(db, store=store), subscription=sub, featured_at=now)
    deal = make_hot_deal(
        db, product=make_product(db, store=store), subscription=sub, start=now, end=now + timedelta(hours=1)
    )
    monkeypatch.setattr(
        task_processor,
        "claim_due",
        lambda now, r=None: [f"featured:{featured.id}", "garbage", f"hot_deal:{deal.id}"],
    )
    monkeypatch.setattr(task_processor, "SessionLocal", TestingSessionLocal)

    assert task_processor.process_due_expiries() == 3

    db.expire_all()
    assert featured.is_active is False
    assert deal.is_active is False


def test_worker_requeues_failed_members(monkeypatch):
    r = MagicMock()
    requeue = MagicMock()
    session = MagicMock()
    monkeypatch.setattr(task_processor, "claim_due", lambda now, r=None: ["featured:7"])
    monkeypatch.setattr(task_processor, "SessionLocal", lambda: session)
    monkeypatch.setattr(task_processor, "expire_promotion", MagicMock(side_effect=RuntimeError("deadlock")))
    monkeypatch.setattr(task_processor, "enqueue_expiry", requeue)

    assert task_processor.process_due_expiries(r) == 1

    session.rollback.assert_called_once()
    session.close.assert_called_once()
    requeue.assert_called_once_with("featured", 7, ANY, r)
