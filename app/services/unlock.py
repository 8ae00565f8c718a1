"""
Contact unlock workflow

A tenant pays a fixed fee to see a listing's contact details. Each
(tenant, property) pair is unlocked at most once: repeated calls return the
existing grant, and storage rejects a second completed transaction for the
same pair.
"""
import uuid
import logging
from dataclasses import dataclass
from typing import Optional
from app.config import Settings
from app.errors import AuthorizationError, ConflictError, PaymentError
from app.models.user import Viewer
from app.services.payments import PaymentGateway
from app.services.property_store import PropertyStore
from app.services.supabase_store import utcnow
from app.services.transaction_store import TransactionStore

logger = logging.getLogger(__name__)


@dataclass
class UnlockOutcome:
    property: dict
    transaction: dict
    already_unlocked: bool = False


def unlock_property(
    property_id: str,
    viewer: Viewer,
    *,
    properties: PropertyStore,
    transactions: TransactionStore,
    gateway: PaymentGateway,
    settings: Settings,
) -> UnlockOutcome:
    document = properties.get_active(property_id)

    if viewer.role != "tenant":
        raise AuthorizationError("Access denied. Required role: tenant")

    existing = transactions.find_completed(viewer.id, property_id)
    if existing:
        return UnlockOutcome(property=document, transaction=existing, already_unlocked=True)

    pending = transactions.create({
        "tenant_id": viewer.id,
        "property_id": property_id,
        "landlord_id": document["landlord_id"],
        "amount": settings.UNLOCK_FEE,
        "status": "pending",
        "mpesa_phone": viewer.user.get("phone_number"),
    })

    reference = f"UNL-{uuid.uuid4().hex[:12].upper()}"
    result = gateway.charge(viewer.user.get("phone_number"), settings.UNLOCK_FEE, reference)

    if not result.success:
        transactions.update(pending["id"], {
            "status": "failed",
            "mpesa_reference": result.reference,
            "failure_reason": result.failure_reason or "Payment declined",
        })
        logger.info(f"Unlock payment failed for property {property_id} by tenant {viewer.id}")
        raise PaymentError(result.failure_reason or "Payment failed")

    now = utcnow()
    try:
        completed = transactions.update(pending["id"], {
            "status": "completed",
            "mpesa_reference": result.reference,
            "mpesa_receipt": result.receipt,
            "completed_at": now,
            "unlocked_at": now,
        })
    except ConflictError:
        # A concurrent request completed the same unlock first
        transactions.update(pending["id"], {
            "status": "failed",
            "failure_reason": "Property already unlocked",
        })
        winner = transactions.find_completed(viewer.id, property_id)
        if winner is None:
            raise
        return UnlockOutcome(property=document, transaction=winner, already_unlocked=True)

    properties.increment(property_id, "total_unlocks")
    document = {**document, "total_unlocks": (document.get("total_unlocks") or 0) + 1}
    logger.info(f"Property {property_id} unlocked by tenant {viewer.id} (transaction {completed['id']})")
    return UnlockOutcome(property=document, transaction=completed)


def has_unlocked(transactions: TransactionStore, viewer: Optional[Viewer], property_id: str) -> bool:
    if not viewer or not viewer.is_authenticated or viewer.role != "tenant":
        return False
    return transactions.find_completed(viewer.id, property_id) is not None
