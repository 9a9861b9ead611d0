from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from app.core.config import settings
from app.core.logging import setup_logging, get_logger
from app.core.security_headers import SecurityHeadersMiddleware
from app.core.rate_limit import limiter, rate_limit_exceeded_handler
from app.services.errors import MarketplaceError
from app.routers import health, auth, display, plans, subscriptions, store_reports
from app.routers import me, seller_registration, my_store, seller_products, seller_promotions
from app.routers import admin_subscriptions, admin_stores, admin_categories, admin_reports, admin_plans, admin_logs
from app.routers import admin_users, admin_products

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(debug=settings.DEBUG)
    logger.info("application startup")
    yield
    logger.info("application shutdown")


app = FastAPI(
    title=settings.SITE_NAME,
    lifespan=lifespan,
    docs_url="/api/docs" if settings.DEBUG else None,
    redoc_url="/api/redoc" if settings.DEBUG else None,
)

# Rate limiting
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)


# --- Validation errors as one readable message ---
_FIELD_LABELS = {
    "email": "Email",
    "password": "Password",
    "name": "Name",
    "reason": "Reason",
    "plan_id": "Plan",
    "product_id": "Product",
    "deal_price": "Deal price",
    "deal_start_at": "Deal start",
    "deal_end_at": "Deal end",
    "payment_receipt_path": "Payment receipt",
    "new_price": "Price",
    "old_price": "Old price",
    "category": "Category",
    "status": "Status",
    "company_name": "Company name",
    "rc_number": "RC number",
    "phone": "Phone",
    "address": "Address",
    "contact_person": "Contact person",
    "business_lines": "Business lines",
    "product_line": "Product line",
    "states": "States",
    "documents": "Documents",
    "current_password": "Current password",
    "new_password": "New password",
}


def _translate_error(err: dict) -> str:
    t = err.get("type", "")
    ctx = err.get("ctx", {})
    loc = err.get("loc", [])
    field = str(loc[-1]) if loc else ""
    label = _FIELD_LABELS.get(field, field.replace("_", " ").capitalize() or "Request")

    if t == "missing":
        return f"{label} is required"
    if "email" in t or ("value" in t and "email" in err.get("msg", "").lower()):
        return f"{label} must be a valid email address"
    if t == "string_too_short":
        return f"{label} must be at least {ctx.get('min_length', '')} characters"
    if t == "string_too_long":
        return f"{label} must be at most {ctx.get('max_length', '')} characters"
    if t in ("int_parsing", "int_type", "decimal_parsing", "decimal_type"):
        return f"{label} must be a number"
    if t == "greater_than_equal":
        return f"{label} must be at least {ctx.get('ge', '')}"
    if t == "less_than_equal":
        return f"{label} must be at most {ctx.get('le', '')}"
    if t in ("datetime_parsing", "datetime_type", "datetime_from_date_parsing"):
        return f"{label} must be a valid date and time"
    if t == "literal_error":
        return f"{label} must be one of {ctx.get('expected', '')}"
    if t == "value_error":
        return str(ctx.get("error", err.get("msg", "")))
    return f"{label}: invalid value"


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    messages = [_translate_error(e) for e in exc.errors()]
    return JSONResponse(status_code=422, content={"detail": "; ".join(messages)})


@app.exception_handler(MarketplaceError)
async def marketplace_error_handler(request: Request, exc: MarketplaceError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


# Middleware (last registered runs first)
app.add_middleware(SecurityHeadersMiddleware, allow_docs=settings.DEBUG)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(auth.router)
app.include_router(display.router)
app.include_router(plans.router)
app.include_router(subscriptions.router)
app.include_router(store_reports.router)
app.include_router(me.router)
app.include_router(seller_registration.router)
app.include_router(my_store.router)
app.include_router(seller_products.router)
app.include_router(seller_promotions.router)
app.include_router(admin_subscriptions.router)
app.include_router(admin_stores.router)
app.include_router(admin_categories.router)
app.include_router(admin_reports.router)
app.include_router(admin_plans.router)
app.include_router(admin_logs.router)
app.include_router(admin_users.router)
app.include_router(admin_products.router)
