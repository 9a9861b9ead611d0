from unittest.mock import MagicMock

from app.models.category import Category
from app.scheduler import category_reconcile
from app.services import catalog_service
from factories import make_category, make_product, make_seller


def _count(db, category):
    db.refresh(category)
    return category.total_products


def test_slugify():
    assert catalog_service.slugify("Drilling Equipment & Tools") == "drilling-equipment-tools"
    assert catalog_service.slugify("  PPE  ") == "ppe"


def test_only_active_products_are_counted(db):
    _, store, _ = make_seller(db, plan_type="gold")
    category = make_category(db)

    make_product(db, store=store, category=category)
    make_product(db, store=store, category=category, status="draft")

    assert _count(db, category) == 1


def test_status_and_category_changes_move_the_count(db):
    _, store, _ = make_seller(db, plan_type="gold")
    pumps, valves = make_category(db, name="Pumps"), make_category(db, name="Valves")
    product = make_product(db, store=store, category=pumps)

    old_status, old_category = product.status, product.category_id
    product.category_id = valves.id
    catalog_service.on_product_updated(db, product, old_status, old_category)
    db.commit()
    assert (_count(db, pumps), _count(db, valves)) == (0, 1)

    old_status, old_category = product.status, product.category_id
    product.status = "draft"
    catalog_service.on_product_updated(db, product, old_status, old_category)
    db.commit()
    assert _count(db, valves) == 0

    old_status, old_category = product.status, product.category_id
    product.status = "active"
    catalog_service.on_product_updated(db, product, old_status, old_category)
    db.commit()
    assert _count(db, valves) == 1


def test_deleting_an_active_product_decrements(db):
    _, store, _ = make_seller(db, plan_type="gold")
    category = make_category(db)
    product = make_product(db, store=store, category=category)

    catalog_service.on_product_deleted(db, product)
    db.delete(product)
    db.commit()

    assert _count(db, category) == 0


def test_suspending_a_store_takes_its_products_out_of_the_counts(db):
    _, store, _ = make_seller(db, plan_type="gold")
    _, other, _ = make_seller(db, plan_type="gold")
    category = make_category(db)
    make_product(db, store=store, category=category)
    make_product(db, store=store, category=category)
    make_product(db, store=store, category=category, status="draft")
    make_product(db, store=other, category=category)

    assert catalog_service.suspend_store_products(db, store.id) == 2
    db.commit()

    assert _count(db, category) == 1


def test_reconcile_corrects_drifted_counters(db):
    _, store, _ = make_seller(db, plan_type="gold")
    drifted = make_category(db, name="Lubricants")
    correct = make_category(db, name="Safety")
    make_product(db, store=store, category=drifted)
    make_product(db, store=store, category=correct)
    drifted.total_products = 42
    db.commit()

    corrected = catalog_service.reconcile_category_counts(db)

    assert corrected == {drifted.id: {"name": "Lubricants", "before": 42, "after": 1}}
    assert _count(db, drifted) == 1
    assert catalog_service.reconcile_category_counts(db) == {}


def test_reconcile_job_commits_through_its_own_session(db, monkeypatch):
    category = make_category(db)
    category.total_products = 5
    db.commit()
    category_id = category.id
    session = MagicMock(wraps=db)
    monkeypatch.setattr(category_reconcile, "SessionLocal", lambda: session)

    category_reconcile.run_category_reconcile()

    session.close.assert_called_once()
    assert db.query(Category).filter(Category.id == category_id).one().total_products == 0
