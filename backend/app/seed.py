"""Seed subscription plans and product categories: python -m app.seed"""
from decimal import Decimal

from app.core.database import SessionLocal
from app.core.logging import setup_logging, get_logger
from app.models.category import Category
from app.models.subscription_plan import SubscriptionPlan
from app.services.catalog_service import slugify

logger = get_logger(__name__)

BANK = {
    "bank_name": "Keystone Bank",
    "bank_account_name": "Heritage Energy Optimum Global Limited",
    "bank_account_number": "1013259887",
}

PLANS = [
    {"name": "Basic Store", "slug": "basic", "plan_type": "basic", "price": Decimal("0"), "product_limit": 0,
     "description": "List your store on the marketplace."},
    {"name": "Silver Store", "slug": "silver", "plan_type": "silver", "price": Decimal("5000"), "product_limit": 5,
     "description": "Up to 5 products, 1 featured product and 1 hot deal per subscription."},
    {"name": "Gold Store", "slug": "gold", "plan_type": "gold", "price": Decimal("7500"), "product_limit": 10,
     "description": "Up to 10 products, 2 featured products and 1 hot deal per subscription."},
    {"name": "Platinum Store", "slug": "platinum", "plan_type": "platinum", "price": Decimal("12000"), "product_limit": 20,
     "description": "Up to 20 products, 3 featured products and 3 hot deals per subscription."},
]

CATEGORIES = [
    ("Automotive Lubricants", "Engine oils, gear oils and transmission fluids"),
    ("Industrial Lubricants", "Hydraulic, compressor and turbine oils"),
    ("Greases", "Multipurpose and specialty greases"),
    ("Fuel Products", "Diesel, petrol, kerosene and LPG"),
    ("Machinery Parts", "Pumps, valves, filters and spare parts"),
    ("Safety Equipment", "PPE, fire safety and spill control"),
]


def seed(db) -> tuple[int, int]:
    """Insert missing plans and categories; existing rows are left untouched"""
    plans_added = 0
    for data in PLANS:
        if db.query(SubscriptionPlan).filter(SubscriptionPlan.slug == data["slug"]).first():
            continue
        db.add(SubscriptionPlan(**data, **BANK, is_active=True))
        plans_added += 1

    categories_added = 0
    for name, description in CATEGORIES:
        if db.query(Category).filter(Category.name == name).first():
            continue
        db.add(Category(name=name, slug=slugify(name), description=description, is_active=True, total_products=0))
        categories_added += 1

    db.commit()
    return plans_added, categories_added


def main():
    setup_logging(process="cli")
    db = SessionLocal()
    try:
        plans_added, categories_added = seed(db)
        logger.info(f"seed complete: plans={plans_added}, categories={categories_added}")
    finally:
        db.close()


if __name__ == "__main__":
    main()
