# Import every model so Alembic autogenerate sees the full metadata
from app.models.user import User
from app.models.store import Store
from app.models.store_document import StoreDocument
from app.models.subscription_plan import SubscriptionPlan
from app.models.subscription import Subscription
from app.models.category import Category
from app.models.product import Product
from app.models.featured_product import FeaturedProduct
from app.models.hot_deal import HotDeal
from app.models.store_report import StoreReport
from app.models.audit_log import AuditLog

__all__ = [
    "User",
    "Store",
    "StoreDocument",
    "SubscriptionPlan",
    "Subscription",
    "Category",
    "Product",
    "FeaturedProduct",
    "HotDeal",
    "StoreReport",
    "AuditLog",
]
