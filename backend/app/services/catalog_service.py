"""
Category.total_products maintenance.

Every helper adjusts the counter inside the caller's transaction; the caller
commits together with the product change. Only products with status
"active" are counted.
"""
import re
from typing import Optional

from sqlalchemy import func, update
from sqlalchemy.orm import Session

from app.models.category import Category
from app.models.product import Product
from app.core.logging import get_logger

logger = get_logger(__name__)


def slugify(value: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", value.lower()).strip("-")


def _bump(db: Session, category_id: Optional[int], delta: int) -> None:
    if not category_id or not delta:
        return
    db.execute(
        update(Category)
        .where(Category.id == category_id)
        .values(total_products=Category.total_products + delta)
    )


def on_product_created(db: Session, product: Product) -> None:
    if product.status == "active":
        _bump(db, product.category_id, 1)


def on_product_updated(
    db: Session,
    product: Product,
    old_status: str,
    old_category_id: Optional[int],
) -> None:
    """Move the product's contribution from its old (category, status) to the new one"""
    if old_status == "active":
        _bump(db, old_category_id, -1)
    if product.status == "active":
        _bump(db, product.category_id, 1)


def on_product_deleted(db: Session, product: Product) -> None:
    if product.status == "active":
        _bump(db, product.category_id, -1)


def suspend_store_products(db: Session, store_id: int) -> int:
    """Suspend every product of a store, returning how many were active before"""
    active_by_category = (
        db.query(Product.category_id, func.count(Product.id))
        .filter(Product.store_id == store_id, Product.status == "active")
        .group_by(Product.category_id)
        .all()
    )
    for category_id, count in active_by_category:
        _bump(db, category_id, -count)

    db.execute(
        update(Product)
        .where(Product.store_id == store_id, Product.status != "suspended")
        .values(status="suspended")
    )
    return sum(count for _, count in active_by_category)


def reconcile_category_counts(db: Session) -> dict:
    """
    Recompute every counter from the products table.

    Returns {category_id: {"name", "before", "after"}} for the categories that
    were out of step. Commits.
    """
    actual = dict(
        db.query(Product.category_id, func.count(Product.id))
        .filter(Product.status == "active", Product.category_id.isnot(None))
        .group_by(Product.category_id)
        .all()
    )

    corrected = {}
    for category in db.query(Category).all():
        expected = actual.get(category.id, 0)
        if category.total_products != expected:
            corrected[category.id] = {
                "name": category.name,
                "before": category.total_products,
                "after": expected,
            }
            category.total_products = expected

    db.commit()
    if corrected:
        logger.warning(f"category counters corrected: {len(corrected)} categories")
    return corrected
