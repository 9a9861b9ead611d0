from datetime import timedelta

from app.core.clock import now_local
from app.models.audit_log import AuditLog
from app.models.featured_product import FeaturedProduct
from app.models.store import Store
from app.models.store_document import StoreDocument
from app.services import auth_service, promotion_service
from factories import make_category, make_plan, make_product, make_seller, make_store, make_subscription, make_user


def _application(rc_number="RC-104233", documents=("cac_certificate", "company_logo", "live_photos")):
    return {
        "company_name": "Delta Pipeline Services Ltd",
        "rc_number": rc_number,
        "phone": "08031234567",
        "address": "12 Trans-Amadi Road, Port Harcourt",
        "contact_person": "Ifeoma Okafor",
        "business_lines": ["Pipelines", "Valves"],
        "product_line": "Line pipe, gate valves and fittings",
        "states": ["Rivers", "Lagos"],
        "documents": [
            {"type": t, "file_path": f"store-documents/{t}.pdf", "mime_type": "application/pdf", "file_size": 20480}
            for t in documents
        ],
    }


def test_buyer_opens_a_store_with_documents(client, db, login_as):
    buyer = login_as(make_user(db, role="buyer"))

    resp = client.post(
        "/api/seller/register",
        json=_application(documents=("cac_certificate", "company_logo", "live_photos", "tin_certificate")),
    )

    assert resp.status_code == 201
    assert resp.json()["status"] == "pending"
    assert resp.json()["role"] == "seller"

    store = db.query(Store).filter(Store.user_id == buyer.id).one()
    assert store.business_lines == "Pipelines,Valves"
    assert store.state == "Rivers,Lagos"
    assert store.email == buyer.email
    assert store.subscription == "basic"

    docs = {d.type: d for d in db.query(StoreDocument).filter(StoreDocument.store_id == store.id)}
    assert {t: d.is_mandatory for t, d in docs.items()} == {
        "cac_certificate": True,
        "company_logo": True,
        "live_photos": True,
        "tin_certificate": False,
    }
    assert {d.status for d in docs.values()} == {"pending"}

    db.refresh(buyer)
    assert buyer.role == "seller"

    again = client.post("/api/seller/register", json=_application(rc_number="RC-999"))
    assert again.status_code == 422
    assert again.json()["detail"] == "You already have a seller account"


def test_application_is_checked_before_anything_is_stored(client, db, login_as):
    taken = make_store(db)
    taken.rc_number = "RC-100"
    db.commit()
    buyer = login_as(make_user(db, role="buyer"))

    missing = client.post("/api/seller/register", json=_application(documents=("cac_certificate", "company_logo")))
    assert missing.status_code == 422
    assert missing.json()["detail"] == "Missing required documents: live_photos"

    unknown = client.post(
        "/api/seller/register",
        json=_application(documents=("cac_certificate", "company_logo", "live_photos", "passport")),
    )
    assert unknown.status_code == 422
    assert unknown.json()["detail"] == "Unknown document type: passport"

    duplicate_rc = client.post("/api/seller/register", json=_application(rc_number="RC-100"))
    assert duplicate_rc.status_code == 422
    assert duplicate_rc.json()["detail"] == "This RC number is already registered"

    incomplete = client.post("/api/seller/register", json={"company_name": "Delta"})
    assert incomplete.status_code == 422
    assert "RC number is required" in incomplete.json()["detail"]

    assert db.query(Store).filter(Store.user_id == buyer.id).count() == 0
    assert db.query(StoreDocument).count() == 0


def test_admin_accounts_cannot_open_a_store(client, db, login_as):
    login_as(make_user(db, role="admin"))
    assert client.post("/api/seller/register", json=_application()).status_code == 403

    login_as(None)
    assert client.post("/api/seller/register", json=_application()).status_code == 401


def test_registration_status_is_visible_to_owner_and_super_admin(client, db, login_as):
    login_as(make_user(db, role="buyer"))
    store_id = client.post("/api/seller/register", json=_application()).json()["store_id"]

    own = client.get(f"/api/seller/registration/{store_id}/status")
    assert own.status_code == 200
    assert own.json()["status"] == "pending"
    assert [d["type"] for d in own.json()["documents"]] == ["cac_certificate", "company_logo", "live_photos"]

    login_as(make_user(db, role="buyer"))
    assert client.get(f"/api/seller/registration/{store_id}/status").status_code == 403

    login_as(make_user(db, role="super_admin"))
    assert client.get(f"/api/seller/registration/{store_id}/status").status_code == 200
    assert client.get("/api/seller/registration/9999/status").status_code == 404


def test_approved_application_reaches_the_seller_dashboard(client, db, login_as):
    applicant = login_as(make_user(db, role="buyer"))
    store_id = client.post("/api/seller/register", json=_application()).json()["store_id"]
    assert client.get("/api/my-store").json()["status"] == "pending"

    login_as(make_user(db, role="super_admin"))
    assert client.patch(f"/api/admin/stores/{store_id}/approve").status_code == 422
    for doc in db.query(StoreDocument).filter(StoreDocument.store_id == store_id).all():
        assert client.patch(f"/api/admin/documents/{doc.id}/approve").status_code == 200
    assert client.patch(f"/api/admin/stores/{store_id}/approve").status_code == 200

    login_as(applicant)
    body = client.get("/api/my-store").json()
    assert body["status"] == "approved"
    assert body["business_lines"] == ["Pipelines", "Valves"]
    assert body["owner_email"] == applicant.email
    assert body["active_subscription"] is None
    assert {d["status"] for d in body["documents"]} == {"approved"}


def test_my_store_update_and_logo(client, db, login_as):
    user, store, _ = make_seller(db, plan_type="gold")
    login_as(user)

    resp = client.patch("/api/my-store", json={"name": "Warri Valves", "city": "Warri", "phone": None})
    assert resp.status_code == 200
    assert resp.json()["name"] == "Warri Valves"
    db.refresh(store)
    assert store.city == "Warri"
    assert store.phone == "08030000000"

    client.post("/api/my-store/upload-logo", json={"file_path": "logos/old.png"})
    logo = client.post("/api/my-store/upload-logo", json={"file_path": "logos/new.png", "mime_type": "image/png"})
    assert logo.status_code == 200

    logos = db.query(StoreDocument).filter(StoreDocument.store_id == store.id, StoreDocument.type == "company_logo").all()
    assert [(d.file_path, d.status) for d in logos] == [("logos/new.png", "approved")]

    active = client.get("/api/my-store").json()["active_subscription"]
    assert active["plan_display_name"] == "Gold Store"
    assert active["product_limit"] == 10


def test_my_store_expires_an_ended_plan_on_read(client, db, login_as):
    user, store, _ = make_seller(db, plan_type=None)
    sub = make_subscription(
        db, store=store, plan=make_plan(db, plan_type="gold"), ends_at=now_local() - timedelta(hours=1)
    )
    login_as(user)

    body = client.get("/api/my-store").json()

    assert body["active_subscription"] is None
    assert body["subscription"] == "basic"
    db.refresh(sub)
    assert sub.status == "expired"


def test_profile_update_and_password_change(client, db, login_as):
    other = make_user(db, role="buyer", email="taken@pipelines.ng")
    user = login_as(auth_service.create_user(db, "Amaka", "amaka@pipelines.ng", "offshore77", role="buyer"))

    resp = client.put("/api/profile", json={"name": "Amaka Obi", "email": "AMAKA.OBI@pipelines.ng", "phone": "0803"})
    assert resp.status_code == 200
    assert resp.json()["user"]["email"] == "amaka.obi@pipelines.ng"

    clash = client.put("/api/profile", json={"name": "Amaka Obi", "email": other.email})
    assert clash.status_code == 422

    wrong = client.post(
        "/api/change-password",
        json={"current_password": "nope", "new_password": "refinery99", "new_password_confirmation": "refinery99"},
    )
    assert wrong.status_code == 422
    assert wrong.json()["detail"] == "Current password is incorrect"

    mismatch = client.post(
        "/api/change-password",
        json={"current_password": "offshore77", "new_password": "refinery99", "new_password_confirmation": "refinery98"},
    )
    assert mismatch.status_code == 422

    ok = client.post(
        "/api/change-password",
        json={"current_password": "offshore77", "new_password": "refinery99", "new_password_confirmation": "refinery99"},
    )
    assert ok.status_code == 200
    assert auth_service.authenticate(db, "amaka.obi@pipelines.ng", "refinery99").id == user.id
    assert auth_service.authenticate(db, "amaka.obi@pipelines.ng", "offshore77") is None


def test_super_admin_manages_user_accounts(client, db, login_as):
    buyer = make_user(db, role="buyer", name="Tunde Bello")
    seller, store, _ = make_seller(db, plan_type=None)

    login_as(make_user(db, role="admin"))
    assert client.get("/api/admin/users").status_code == 403

    root = login_as(make_user(db, role="super_admin"))
    sellers = client.get("/api/admin/users", params={"role": "seller"}).json()
    assert [u["id"] for u in sellers["users"]] == [seller.id]
    assert sellers["users"][0]["store"]["id"] == store.id

    resp = client.patch(f"/api/admin/users/{buyer.id}", json={"is_active": False})
    assert resp.status_code == 200
    db.refresh(buyer)
    assert buyer.is_active is False

    assert client.patch(f"/api/admin/users/{root.id}", json={"role": "buyer"}).status_code == 400
    assert client.get("/api/admin/users/9999").status_code == 404

    entry = db.query(AuditLog).one()
    assert entry.action == "user_updated"
    assert entry.details == f"Updated {buyer.email}: disabled"


def test_suspending_a_product_ends_its_promotions(client, db, login_as):
    _, store, _ = make_seller(db, plan_type="gold")
    pumps = make_category(db, name="Pumps")
    product = make_product(db, store=store, category=pumps)
    product_id = product.id
    promotion_service.create_featured_product(db, store, product, now_local())
    login_as(make_user(db, role="super_admin"))

    resp = client.patch(f"/api/admin/products/{product_id}/status", json={"status": "suspended"})
    assert resp.status_code == 200
    assert resp.json()["data"]["status"] == "suspended"

    db.refresh(pumps)
    assert pumps.total_products == 0
    assert db.query(FeaturedProduct).filter(FeaturedProduct.is_active == True).count() == 0  # noqa: E712

    listed = client.get("/api/admin/products", params={"status": "suspended"}).json()
    assert [p["id"] for p in listed["data"]] == [product_id]
    assert listed["data"][0]["category"] == "Pumps"
    assert listed["data"][0]["is_featured"] is False

    client.patch(f"/api/admin/products/{product_id}/status", json={"status": "active"})
    db.refresh(pumps)
    assert pumps.total_products == 1
    assert [a.action for a in db.query(AuditLog).order_by(AuditLog.id)] == ["product_suspended", "product_reinstated"]
