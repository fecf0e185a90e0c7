"""Payment request lifecycle: registry plus simulated settlement."""
from __future__ import annotations

import logging
from typing import Callable, Dict, List, Optional
from urllib.parse import urlencode

from omnivoice.utils.errors import PaymentRequestNotFoundError, ValidationError

from .message_templates import payment_received
from .models import PaymentRequest, PaymentStatus, format_amount
from .scheduler import TaskScheduler


logger = logging.getLogger(__name__)

QR_IMAGE_ENDPOINT = "https://api.qrserver.com/v1/create-qr-code/"
PAY_URI = "omnicore://pay"

SettlementListener = Callable[[PaymentRequest, str], None]


def build_qr_payload(amount: float, currency: str) -> str:
    return f"{PAY_URI}?{urlencode({'amount': format_amount(amount), 'currency': currency})}"


def build_qr_code_url(payload: str, size: int = 200) -> str:
    return f"{QR_IMAGE_ENDPOINT}?{urlencode({'size': f'{size}x{size}', 'data': payload})}"


class PaymentRegistry:
    """All payment requests of a session, keyed by id.

    The "active" request is a pointer into the registry. Creating a new
    request moves the pointer and cancels the superseded request's
    settlement, so a stale timer can never land on whatever is displayed.
    """

    def __init__(
        self,
        settlement_delay: float = 8.0,
        scheduler: Optional[TaskScheduler] = None,
        on_settled: Optional[SettlementListener] = None,
    ) -> None:
        self.settlement_delay = settlement_delay
        self.scheduler = scheduler or TaskScheduler()
        self.on_settled = on_settled
        self._requests: Dict[str, PaymentRequest] = {}
        self._active_id: Optional[str] = None

    @property
    def active(self) -> Optional[PaymentRequest]:
        if self._active_id is None:
            return None
        return self._requests.get(self._active_id)

    def get(self, request_id: str) -> PaymentRequest:
        try:
            return self._requests[request_id]
        except KeyError:
            raise PaymentRequestNotFoundError(f"Unknown payment request: {request_id}") from None

    def all(self) -> List[PaymentRequest]:
        return list(self._requests.values())

    def create(self, amount: float, currency: str, method: str = "qrcode") -> PaymentRequest:
        """Register a waiting request, make it active and schedule its settlement.

        Zero is an accepted amount (a generic code); negatives are rejected.
        """
        if amount is None or amount < 0:
            raise ValidationError(f"Payment amount must be non-negative, got {amount!r}")

        payload = build_qr_payload(amount, currency)
        request = PaymentRequest(
            amount=float(amount),
            currency=currency,
            method=method,
            qr_payload=payload,
            qr_code_url=build_qr_code_url(payload),
        )

        previous = self.active
        if previous is not None and self.scheduler.cancel(previous.id):
            logger.info(
                f"Payment request {previous.id} superseded by {request.id}; settlement cancelled",
                extra={"payment_id": previous.id},
            )

        self._requests[request.id] = request
        self._active_id = request.id
        self.scheduler.schedule(request.id, self.settlement_delay, lambda: self._settle(request.id))
        logger.info(
            f"Created payment request {request.id} for {request.display_amount} via {method}",
            extra={"payment_id": request.id},
        )
        return request

    def complete(self, request_id: str) -> bool:
        """Mark a request paid now and drop its pending settlement."""
        request = self.get(request_id)
        self.scheduler.cancel(request_id)
        return self._mark_paid(request)

    def _settle(self, request_id: str) -> None:
        request = self._requests.get(request_id)
        if request is None:
            return
        self._mark_paid(request)

    def _mark_paid(self, request: PaymentRequest) -> bool:
        if not request.mark_paid():
            return False
        logger.info(f"Payment request {request.id} settled", extra={"payment_id": request.id})
        if self.on_settled is not None:
            self.on_settled(request, payment_received(request.amount, request.currency))
        return True

    def pending_settlements(self) -> int:
        return len(self.scheduler)

    def shutdown(self) -> int:
        """Cancel every outstanding settlement task."""
        return self.scheduler.cancel_all()

    def waiting(self) -> List[PaymentRequest]:
        return [r for r in self._requests.values() if r.status == PaymentStatus.WAITING]
