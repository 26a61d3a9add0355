import asyncio
import pytest
import pytest_asyncio
from decimal import Decimal

from storefront.errors import InvalidStateError, RemoteError
from storefront.payments.models import PaymentStatus
from storefront.payments.reconciler import StatusReconciler
from storefront.payments.service import PaymentSessionManager

pytestmark = pytest.mark.asyncio


@pytest_asyncio.fixture
async def charged(session, fake_api):
    fake_api.seed_order("ord_1", 42.50)
    payments = PaymentSessionManager(session)
    payment = await payments.create_pix_charge("ord_1", amount=Decimal("42.50"))
    return payments, StatusReconciler(session, payments), payment


async def test_confirmation_round_trip_yields_paid(charged, fake_api):
    payments, reconciler, payment = charged
    assert payments.status is PaymentStatus.PENDING

    status = await reconciler.apply_simulated_confirmation(payment, "ord_1")
    assert status is PaymentStatus.PAID
    assert await reconciler.refresh_status("ord_1") is PaymentStatus.PAID
    assert payments.status is PaymentStatus.PAID

    [event] = fake_api.calls_to("POST", "/payments/webhook")
    assert event == {"paymentId": "pay_ord_1", "orderId": "ord_1", "status": "paid", "txid": "SIMULATED-pay_ord_1"}


async def test_confirmation_on_paid_payment_sends_no_webhook(charged, fake_api):
    payments, reconciler, payment = charged
    await reconciler.apply_simulated_confirmation(payment, "ord_1")
    webhooks = len(fake_api.calls_to("POST", "/payments/webhook"))

    with pytest.raises(InvalidStateError) as exc:
        await reconciler.apply_simulated_confirmation(payments.payment, "ord_1")
    assert exc.value.code == "already_paid"
    # même l'objet Payment d'origine (statut pending figé) est reconnu comme payé
    with pytest.raises(InvalidStateError):
        await reconciler.apply_simulated_confirmation(payment, "ord_1")
    assert len(fake_api.calls_to("POST", "/payments/webhook")) == webhooks


async def test_unrecognized_remote_status_normalizes_to_pending(charged, fake_api):
    payments, reconciler, _ = charged
    fake_api.statuses["ord_1"] = "aguardando_banco"
    assert await reconciler.refresh_status("ord_1") is PaymentStatus.PENDING
    assert payments.status is PaymentStatus.PENDING


async def test_failed_is_terminal(charged, fake_api):
    payments, reconciler, _ = charged
    fake_api.statuses["ord_1"] = "failed"
    assert await reconciler.refresh_status("ord_1") is PaymentStatus.FAILED
    fake_api.statuses["ord_1"] = "paid"
    assert await reconciler.refresh_status("ord_1") is PaymentStatus.FAILED


async def test_refresh_failure_keeps_last_known_status(charged, fake_api):
    payments, reconciler, _ = charged
    fake_api.fail("GET", "/payments/ord_1/status", status=504, message="timeout")
    with pytest.raises(RemoteError):
        await reconciler.refresh_status("ord_1")
    assert payments.status is PaymentStatus.PENDING


async def test_webhook_failure_propagates_without_refresh(charged, fake_api):
    payments, reconciler, payment = charged
    fake_api.fail("POST", "/payments/webhook", status=500)
    with pytest.raises(RemoteError):
        await reconciler.apply_simulated_confirmation(payment, "ord_1")
    assert fake_api.calls_to("GET", "/payments/ord_1/status") == []
    assert payments.status is PaymentStatus.PENDING


async def test_last_issued_refresh_wins_over_late_stale_response(charged, fake_api):
    """Fencing: la lecture émise en dernier gagne; une réponse plus ancienne arrivée après est ignorée."""
    payments, reconciler, _ = charged
    fake_api.statuses["ord_1"] = "paid"
    hold = fake_api.hold_status("ord_1")
    older = asyncio.ensure_future(reconciler.refresh_status("ord_1"))
    await hold.arrived.wait()

    fake_api.statuses["ord_1"] = "pending"
    assert await reconciler.refresh_status("ord_1") is PaymentStatus.PENDING

    hold.release.set()
    assert await older is PaymentStatus.PENDING
    assert payments.status is PaymentStatus.PENDING


async def test_refresh_concurrent_with_simulated_confirmation(charged, fake_api):
    """Une lecture pending émise avant le webhook et répondant après ne masque pas le paid relu ensuite."""
    payments, reconciler, payment = charged
    hold = fake_api.hold_status("ord_1")
    stale_refresh = asyncio.ensure_future(reconciler.refresh_status("ord_1"))
    await hold.arrived.wait()

    assert await reconciler.apply_simulated_confirmation(payment, "ord_1") is PaymentStatus.PAID

    hold.release.set()
    assert await stale_refresh is PaymentStatus.PAID
    assert payments.status is PaymentStatus.PAID


async def test_refresh_without_held_payment_returns_remote_status(session, fake_api):
    payments = PaymentSessionManager(session)
    reconciler = StatusReconciler(session, payments)
    fake_api.statuses["ord_7"] = "paid"
    assert await reconciler.refresh_status("ord_7") is PaymentStatus.PAID
    assert payments.status is PaymentStatus.UNKNOWN
