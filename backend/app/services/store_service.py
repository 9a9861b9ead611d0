"""Seller onboarding: store application, documents and store profile"""
from typing import Optional

from sqlalchemy.orm import Session

from app.core.logging import get_logger
from app.models.store import Store
from app.models.store_document import StoreDocument
from app.models.user import User
from app.services.errors import MarketplaceError

logger = get_logger(__name__)

MANDATORY_DOCUMENTS = ("cac_certificate", "company_logo", "live_photos")
OPTIONAL_DOCUMENTS = (
    "tin_certificate",
    "tax_clearance",
    "dpr_nuprc",
    "import_license",
    "ncdmb",
    "oem_partner",
    "hse_cert",
)
DOCUMENT_TYPES = MANDATORY_DOCUMENTS + OPTIONAL_DOCUMENTS
CLEARABLE_STORE_FIELDS = ("city", "description", "website")


def _check_documents(documents: list[dict]) -> None:
    types = [d["type"] for d in documents]
    unknown = sorted(set(types) - set(DOCUMENT_TYPES))
    if unknown:
        raise MarketplaceError(f"Unknown document type: {', '.join(unknown)}")
    duplicated = sorted({t for t in types if types.count(t) > 1})
    if duplicated:
        raise MarketplaceError(f"Document submitted more than once: {', '.join(duplicated)}")
    missing = [t for t in MANDATORY_DOCUMENTS if t not in types]
    if missing:
        raise MarketplaceError(f"Missing required documents: {', '.join(missing)}")


def register_store(
    db: Session,
    user: User,
    company_name: str,
    rc_number: str,
    phone: str,
    address: str,
    contact_person: str,
    business_lines: list[str],
    product_line: str,
    states: list[str],
    documents: list[dict],
) -> Store:
    """
    Open a store application for the user.

    The store starts pending with one pending document row per upload;
    mandatory documents are cac_certificate, company_logo and live_photos.
    The account becomes a seller account. One store per user.
    """
    if db.query(Store.id).filter(Store.user_id == user.id).first():
        raise MarketplaceError("You already have a seller account")
    if db.query(Store.id).filter(Store.rc_number == rc_number).first():
        raise MarketplaceError("This RC number is already registered")
    _check_documents(documents)

    store = Store(
        user_id=user.id,
        name=company_name,
        description=product_line,
        state=",".join(states),
        address=address,
        phone=phone,
        email=user.email,
        status="pending",
        rc_number=rc_number,
        business_lines=",".join(business_lines),
        contact_person=contact_person,
        subscription="basic",
    )
    db.add(store)
    db.flush()

    for doc in documents:
        db.add(StoreDocument(
            store_id=store.id,
            type=doc["type"],
            file_path=doc["file_path"],
            mime_type=doc.get("mime_type"),
            file_size=doc.get("file_size"),
            status="pending",
            is_mandatory=doc["type"] in MANDATORY_DOCUMENTS,
        ))

    user.role = "seller"
    db.commit()
    db.refresh(store)

    logger.info(f"store application submitted: store_id={store.id}, user_id={user.id}, documents={len(documents)}")
    return store


def update_store(db: Session, store: Store, changes: dict) -> Store:
    """Apply profile changes; only the optional columns can be cleared"""
    for field, value in changes.items():
        if value is None and field not in CLEARABLE_STORE_FIELDS:
            continue
        setattr(store, field, value)
    db.commit()
    db.refresh(store)
    return store


def replace_logo(db: Session, store: Store, file_path: str, mime_type: Optional[str], file_size: Optional[int]) -> StoreDocument:
    """Swap the company logo; a seller-supplied logo needs no review"""
    db.query(StoreDocument).filter(
        StoreDocument.store_id == store.id, StoreDocument.type == "company_logo"
    ).delete()
    doc = StoreDocument(
        store_id=store.id,
        type="company_logo",
        file_path=file_path,
        mime_type=mime_type,
        file_size=file_size,
        status="approved",
        is_mandatory=False,
    )
    db.add(doc)
    db.commit()
    db.refresh(doc)
    return doc
