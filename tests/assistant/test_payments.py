import asyncio

import pytest

from omnivoice.assistant.models import PaymentStatus
from omnivoice.assistant.payments import PaymentRegistry, build_qr_payload
from omnivoice.utils.errors import PaymentRequestNotFoundError, ValidationError


def make_registry(delay=0.03):
    settled = []
    registry = PaymentRegistry(
        settlement_delay=delay,
        on_settled=lambda request, message: settled.append((request.id, message)),
    )
    return registry, settled


@pytest.mark.asyncio
async def test_zero_amount_request_is_accepted():
    registry, _ = make_registry()
    request = registry.create(0, "CNY")
    assert request.status == PaymentStatus.WAITING
    assert request.display_amount == "0 CNY"
    registry.shutdown()


@pytest.mark.asyncio
async def test_negative_amount_rejected():
    registry, _ = make_registry()
    with pytest.raises(ValidationError):
        registry.create(-1, "CNY")
    assert registry.active is None


@pytest.mark.asyncio
async def test_request_carries_qr_payload():
    registry, _ = make_registry()
    request = registry.create(100, "USDT", "crypto")
    assert request.qr_payload == "omnicore://pay?amount=100&currency=USDT"
    assert request.qr_code_url.startswith("https://api.qrserver.com/v1/create-qr-code/?size=200x200&data=")
    registry.shutdown()


def test_payload_keeps_decimals():
    assert build_qr_payload(100.5, "CNY") == "omnicore://pay?amount=100.5&currency=CNY"


@pytest.mark.asyncio
async def test_settles_exactly_once():
    registry, settled = make_registry()
    request = registry.create(100, "CNY")
    await asyncio.sleep(0.1)
    assert request.status == PaymentStatus.PAID
    assert request.paid_at is not None
    assert settled == [(request.id, "收款成功！100 CNY 已到账。")]

    # A late explicit completion is a no-op
    assert registry.complete(request.id) is False
    assert len(settled) == 1


@pytest.mark.asyncio
async def test_superseded_request_does_not_settle_displayed_one():
    registry, settled = make_registry(delay=0.1)
    first = registry.create(100, "CNY")
    await asyncio.sleep(0.05)
    second = registry.create(200, "CNY")
    assert registry.active is second

    # first's timer would have fired here
    await asyncio.sleep(0.07)
    assert first.status == PaymentStatus.WAITING
    assert second.status == PaymentStatus.WAITING
    assert settled == []

    await asyncio.sleep(0.1)
    assert second.status == PaymentStatus.PAID
    assert first.status == PaymentStatus.WAITING
    assert [pid for pid, _ in settled] == [second.id]


@pytest.mark.asyncio
async def test_complete_cancels_pending_settlement():
    registry, settled = make_registry(delay=0.05)
    request = registry.create(10, "CNY")
    assert registry.complete(request.id) is True
    assert registry.pending_settlements() == 0
    await asyncio.sleep(0.08)
    assert len(settled) == 1
    assert request.status == PaymentStatus.PAID


@pytest.mark.asyncio
async def test_registry_keeps_every_request():
    registry, _ = make_registry(delay=1)
    a = registry.create(1, "CNY")
    b = registry.create(2, "CNY")
    assert registry.all() == [a, b]
    assert registry.get(a.id) is a
    assert registry.waiting() == [a, b]
    assert registry.shutdown() == 1


def test_get_unknown_request():
    registry, _ = make_registry()
    with pytest.raises(PaymentRequestNotFoundError):
        registry.get("pay-missing")


@pytest.mark.asyncio
async def test_expired_is_never_reached():
    registry, _ = make_registry(delay=0.01)
    request = registry.create(5, "CNY")
    registry.create(6, "CNY")
    await asyncio.sleep(0.05)
    assert all(r.status != PaymentStatus.EXPIRED for r in registry.all())
    assert request.status == PaymentStatus.WAITING
