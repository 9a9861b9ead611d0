from datetime import timedelta
from unittest.mock import AsyncMock

from app.core.clock import now_local
from app.core.redis import get_redis
from app.main import app as fastapi_app
from app.models.audit_log import AuditLog
from app.models.featured_product import FeaturedProduct
from app.models.subscription import Subscription
from factories import (
    make_category,
    make_featured,
    make_hot_deal,
    make_plan,
    make_product,
    make_seller,
    make_subscription,
    make_user,
)


def test_feature_endpoint_reports_remaining_slots(client, db, login_as):
    user, store, _ = make_seller(db, plan_type="gold")
    products = [make_product(db, store=store) for _ in range(3)]
    login_as(user)

    first = client.post(f"/api/products/{products[0].id}/feature")
    assert first.status_code == 201
    assert first.json()["remaining_slots"] == 1
    assert first.json()["featured_product"]["plan_type"] == "gold"

    assert client.post(f"/api/products/{products[1].id}/feature").status_code == 201

    full = client.post(f"/api/products/{products[2].id}/feature")
    assert full.status_code == 422
    body = full.json()
    assert body["remaining_slots"] == 0
    assert body["used"] == 2
    assert body["max_allowed"] == 2


def test_feature_endpoint_guards_ownership_and_login(client, db, login_as):
    user, _, _ = make_seller(db, plan_type="gold")
    _, other_store, _ = make_seller(db, plan_type="gold")
    foreign = make_product(db, store=other_store)

    assert client.post(f"/api/products/{foreign.id}/feature").status_code == 401

    login_as(user)
    assert client.post(f"/api/products/{foreign.id}/feature").status_code == 403

    login_as(make_user(db, role="buyer"))
    assert client.post(f"/api/products/{foreign.id}/feature").status_code == 403


def test_featuring_twice_is_a_conflict(client, db, login_as):
    user, store, _ = make_seller(db, plan_type="platinum")
    product = make_product(db, store=store)
    login_as(user)

    client.post(f"/api/products/{product.id}/feature")
    again = client.post(f"/api/products/{product.id}/feature")

    assert again.status_code == 422
    assert again.json()["detail"] == "Product is already featured."


def test_hot_deal_window_is_validated(client, db, login_as):
    user, store, _ = make_seller(db, plan_type="gold")
    product = make_product(db, store=store)
    login_as(user)
    start = now_local()

    resp = client.post(
        "/api/hot-deals",
        json={
            "product_id": product.id,
            "deal_price": "150000",
            "deal_start_at": start.isoformat(),
            "deal_end_at": (start - timedelta(hours=1)).isoformat(),
        },
    )

    assert resp.status_code == 422
    assert "deal_end_at must be after deal_start_at" in resp.json()["detail"]


def test_hot_deal_lifecycle_through_the_api(client, db, login_as):
    user, store, _ = make_seller(db, plan_type="platinum")
    product = make_product(db, store=store)
    login_as(user)
    start = now_local() - timedelta(minutes=1)

    created = client.post(
        "/api/hot-deals",
        json={
            "product_id": product.id,
            "deal_price": "150000",
            "deal_start_at": start.isoformat(),
            "deal_end_at": (start + timedelta(days=2)).isoformat(),
            "deal_description": "Clearance",
        },
    )
    assert created.status_code == 201
    deal = created.json()["hot_deal"]
    assert deal["discount_percentage"] == 25
    assert created.json()["remaining_slots"] == 2

    summary = client.get("/api/featured-and-deals").json()
    assert summary["hot_deals_used"] == 1
    assert summary["hot_deals_max"] == 3
    assert [d["id"] for d in summary["hot_deals"]] == [deal["id"]]

    assert client.delete(f"/api/hot-deals/{deal['id']}").status_code == 200
    assert client.get("/api/hot-deals").json()["total"] == 0


def test_storefront_orders_by_plan_and_hides_unstarted_deals(client, db):
    now = now_local()
    _, gold_store, gold_sub = make_seller(db, plan_type="gold")
    _, plat_store, plat_sub = make_seller(db, plan_type="platinum")
    gold_row = make_featured(
        db, product=make_product(db, store=gold_store), subscription=gold_sub, plan_type="gold",
        featured_at=now, finish_time=now + timedelta(days=14),
    )
    plat_row = make_featured(
        db, product=make_product(db, store=plat_store), subscription=plat_sub, plan_type="platinum",
        featured_at=now - timedelta(days=1), finish_time=now + timedelta(days=29),
    )
    running = make_hot_deal(
        db, product=make_product(db, store=gold_store), subscription=gold_sub,
        start=now - timedelta(hours=1), end=now + timedelta(days=1),
    )
    make_hot_deal(
        db, product=make_product(db, store=plat_store), subscription=plat_sub, plan_type="platinum",
        start=now + timedelta(hours=1), end=now + timedelta(hours=2),
    )

    featured = client.get("/api/featured-products").json()
    assert [row["id"] for row in featured["data"]] == [plat_row.id, gold_row.id]
    assert featured["data"][0]["product"]["store"]["id"] == plat_store.id

    deals = client.get("/api/hot-deals").json()
    assert [row["id"] for row in deals["data"]] == [running.id]

    showcase = client.get("/api/showcase").json()
    assert showcase["total_hot_deals"] == 1
    assert showcase["total_featured"] == 2


def test_category_counts(client, db):
    _, store, _ = make_seller(db, plan_type="gold")
    pumps = make_category(db, name="Pumps")
    make_category(db, name="Valves")
    make_product(db, store=store, category=pumps)
    make_product(db, store=store, category=pumps)
    make_product(db, store=store, category=pumps, status="draft")

    assert client.get("/api/category-counts").json() == {"Pumps": 2, "Valves": 0}


def test_upgrade_creates_pending_subscription(client, db, login_as):
    user, store, old = make_seller(db, plan_type="silver")
    gold = make_plan(db, plan_type="gold")
    login_as(user)

    resp = client.post("/api/subscription/upgrade", json={"plan_id": gold.id, "payment_receipt_path": "r/1.png"})

    assert resp.status_code == 201
    sub = resp.json()["subscription"]
    assert sub["status"] == "pending"
    assert sub["plan_type"] == "gold"
    db.refresh(old)
    assert old.status == "expired"

    missing = client.post("/api/subscription/upgrade", json={"plan_id": 9999, "payment_receipt_path": "r/1.png"})
    assert missing.status_code == 404


def test_validation_errors_are_one_readable_message(client, db, login_as):
    user, _, _ = make_seller(db, plan_type=None)
    login_as(user)

    resp = client.post("/api/subscription/upgrade", json={"plan_id": "abc"})

    assert resp.status_code == 422
    assert resp.json()["detail"] == "Plan must be a number; Payment receipt is required"


def test_admin_approves_and_rejects_over_http(client, db, login_as):
    _, store, _ = make_seller(db, plan_type=None)
    plan = make_plan(db, plan_type="gold")
    to_approve = make_subscription(db, store=store, plan=plan, status="pending")
    admin = make_user(db, role="admin", name="Ada Admin")

    login_as(make_user(db, role="seller"))
    assert client.patch(f"/api/admin/subscriptions/{to_approve.id}/approve").status_code == 403

    login_as(admin)
    resp = client.patch(f"/api/admin/subscriptions/{to_approve.id}/approve")
    assert resp.status_code == 200
    assert resp.json()["subscription"]["status"] == "active"

    again = client.patch(f"/api/admin/subscriptions/{to_approve.id}/approve")
    assert again.status_code == 400

    to_reject = make_subscription(db, store=store, plan=plan, status="pending")
    rejected = client.patch(f"/api/admin/subscriptions/{to_reject.id}/reject", json={"reason": "Amount mismatch"})
    assert rejected.status_code == 200
    assert rejected.json()["subscription"]["rejection_reason"] == "Amount mismatch"

    actions = [row.action for row in db.query(AuditLog).order_by(AuditLog.id)]
    assert actions == ["subscription_approved", "subscription_rejected"]
    assert db.query(Subscription).filter(Subscription.status == "active").count() == 1


def test_product_limit_applies_to_active_plan(client, db, login_as):
    user, store, _ = make_seller(db, plan_type=None)
    make_subscription(db, store=store, plan=make_plan(db, plan_type="silver", product_limit=1))
    category = make_category(db, name="Pumps")
    login_as(user)

    first = client.post("/api/my-products", json={"name": "Mud pump", "category": "Pumps", "new_price": "95000"})
    assert first.status_code == 201
    assert first.json()["data"]["slug"] == "mud-pump"

    second = client.post("/api/my-products", json={"name": "Spare pump", "category": "Pumps"})
    assert second.status_code == 403
    assert second.json()["product_limit"] == 1
    assert second.json()["current_count"] == 1

    db.refresh(category)
    assert category.total_products == 1


def test_unknown_category_is_rejected(client, db, login_as):
    user, _, _ = make_seller(db, plan_type="gold")
    login_as(user)

    resp = client.post("/api/my-products", json={"name": "Valve", "category": "Nope"})

    assert resp.status_code == 422
    assert resp.json()["detail"] == "Unknown category: Nope"


def test_register_then_duplicate_email(client):
    payload = {"name": "Chidi", "email": "chidi@pipelines.ng", "password": "pipeline42", "role": "seller"}

    assert client.post("/api/auth/register", json=payload).status_code == 201
    assert client.post("/api/auth/register", json=payload).status_code == 400


def test_sellers_cannot_report_their_own_store(client, db, login_as):
    user, store, _ = make_seller(db, plan_type=None)
    login_as(user)
    assert client.post(f"/api/stores/{store.id}/report", json={"reason": "scam"}).status_code == 400

    login_as(make_user(db, role="buyer"))
    assert client.post(f"/api/stores/{store.id}/report", json={"reason": "scam"}).status_code == 201
    assert client.post(f"/api/stores/{store.id}/report", json={"reason": "other"}).status_code == 422


def test_login_sets_session_cookie(client, db):
    r = AsyncMock()
    fastapi_app.dependency_overrides[get_redis] = lambda: r
    client.post(
        "/api/auth/register",
        json={"name": "Ngozi", "email": "ngozi@pipelines.ng", "password": "offshore77", "role": "seller"},
    )

    bad = client.post("/api/auth/login", json={"email": "ngozi@pipelines.ng", "password": "wrongpass1"})
    assert bad.status_code == 401

    ok = client.post("/api/auth/login", json={"email": "NGOZI@pipelines.ng", "password": "offshore77"})
    assert ok.status_code == 200
    assert "session_id=" in ok.headers["set-cookie"]
    r.set.assert_awaited_once()


def test_deleting_a_featured_product_keeps_its_slot(client, db, login_as):
    user, store, sub = make_seller(db, plan_type="silver")
    first_id = make_product(db, store=store).id
    second_id = make_product(db, store=store).id
    login_as(user)

    assert client.post(f"/api/products/{first_id}/feature").status_code == 201
    assert client.post(f"/api/products/{second_id}/feature").status_code == 422
    assert client.delete(f"/api/my-products/{first_id}").status_code == 200

    again = client.post(f"/api/products/{second_id}/feature")
    assert again.status_code == 422
    assert again.json()["used"] == 1

    row = db.query(FeaturedProduct).one()
    assert row.product_id is None
    assert row.is_active is False
    assert row.subscription_code == sub.subscription_code

    listing = client.get("/api/promotions").json()
    assert listing["featured_products"][0]["product_name"] == "N/A"
