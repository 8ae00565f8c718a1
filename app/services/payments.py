"""
Payment step of the unlock workflow

Only a stub gateway exists: it approves every charge and returns a synthetic
receipt. A mobile-money integration would implement the same protocol.
"""
import uuid
import logging
from dataclasses import dataclass
from typing import Optional, Protocol

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PaymentResult:
    success: bool
    reference: str
    receipt: Optional[str] = None
    failure_reason: Optional[str] = None


class PaymentGateway(Protocol):
    def charge(self, phone: str, amount: float, reference: str) -> PaymentResult:
        ...


class StubPaymentGateway:
    """Approves every charge"""

    def charge(self, phone: str, amount: float, reference: str) -> PaymentResult:
        receipt = f"STUB-{uuid.uuid4().hex[:10].upper()}"
        logger.info(f"Stub payment of {amount} from {phone} approved ({reference} -> {receipt})")
        return PaymentResult(success=True, reference=reference, receipt=receipt)


def get_payment_gateway() -> PaymentGateway:
    return StubPaymentGateway()
