"""Transactional email (subscription and store verification notices)"""
import resend
from jinja2 import Environment, FileSystemLoader, select_autoescape
from pathlib import Path
from app.core.config import settings
from app.core.logging import get_logger

logger = get_logger(__name__)

template_dir = Path(__file__).parent.parent / "templates" / "email"
jinja_env = Environment(
    loader=FileSystemLoader(str(template_dir)),
    autoescape=select_autoescape(["html"]),
)

DATE_FORMAT = "%d %b %Y"


def _send(to_email: str, subject: str, template_name: str, **context) -> bool:
    """Render a template and send it through Resend; never raises"""
    if not settings.RESEND_API_KEY:
        logger.warning(f"RESEND_API_KEY not set, mail skipped: {template_name} -> {to_email}")
        return False
    try:
        resend.api_key = settings.RESEND_API_KEY
        template = jinja_env.get_template(template_name)
        html = template.render(
            site_name=settings.SITE_NAME,
            support_email=settings.SUPPORT_EMAIL,
            dashboard_url=settings.DASHBOARD_URL,
            **context,
        )

        resend.Emails.send({
            "from": settings.RESEND_FROM_EMAIL,
            "to": [to_email],
            "subject": f"{settings.SITE_NAME}: {subject}",
            "html": html,
        })
        logger.info(f"mail sent: {template_name} -> {to_email}")
        return True
    except Exception as e:
        logger.error(f"mail failed: {template_name} -> {to_email} - {e}")
        return False


def _fmt(value) -> str:
    return value.strftime(DATE_FORMAT) if value else "-"


def send_subscription_approved_email(to_email: str, name: str, store_name: str, plan_name: str, subscription) -> bool:
    return _send(
        to_email,
        "Subscription approved",
        "subscription_approved.html",
        name=name,
        store_name=store_name,
        plan_name=plan_name,
        subscription_code=subscription.subscription_code,
        starts_at=_fmt(subscription.starts_at),
        ends_at=_fmt(subscription.ends_at),
    )


def send_subscription_rejected_email(to_email: str, name: str, store_name: str, plan_name: str, reason: str) -> bool:
    return _send(
        to_email,
        "Subscription payment not confirmed",
        "subscription_rejected.html",
        name=name,
        store_name=store_name,
        plan_name=plan_name,
        reason=reason,
    )


def send_subscription_expired_email(to_email: str, name: str, store_name: str, plan_name: str, subscription) -> bool:
    return _send(
        to_email,
        "Subscription expired",
        "subscription_expired.html",
        name=name,
        store_name=store_name,
        plan_name=plan_name,
        subscription_code=subscription.subscription_code,
        ends_at=_fmt(subscription.ends_at),
    )


def send_store_approved_email(to_email: str, name: str, store_name: str) -> bool:
    return _send(
        to_email,
        "Store verified",
        "store_approved.html",
        name=name,
        store_name=store_name,
    )


def send_store_rejected_email(to_email: str, name: str, store_name: str, reason: str) -> bool:
    return _send(
        to_email,
        "Store verification unsuccessful",
        "store_rejected.html",
        name=name,
        store_name=store_name,
        reason=reason,
    )
