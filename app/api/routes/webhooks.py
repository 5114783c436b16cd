"""
Stripe webhook: upgrades accounts on completed checkouts and recurring payments.
"""
import logging

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from app.core.errors import InvalidInput
from app.dependencies.services import get_account_store, get_payments
from app.services import account_service
from app.services.credential_store import AccountStore
from app.services.payments import CHECKOUT_COMPLETED, PAYMENT_SUCCEEDED, SUBSCRIPTION_DELETED, StripePayments

logger = logging.getLogger(__name__)

router = APIRouter()


def _handle_checkout_completed(store: AccountStore, session: dict) -> None:
    metadata = session.get("metadata") or {}
    customer_email = session.get("customer_email") or metadata.get("user_email")
    if not customer_email:
        logger.error("No customer email found in checkout session %s", session.get("id"))
        return
    account_service.apply_payment_confirmation(
        store,
        customer_email,
        customer_id=session.get("customer"),
        subscription_id=session.get("subscription"),
    )


def _handle_payment_succeeded(store: AccountStore, invoice: dict) -> None:
    customer_email = invoice.get("customer_email")
    if not customer_email:
        logger.info("Invoice %s has no customer email, skipping", invoice.get("id"))
        return
    account_service.record_recurring_payment(store, customer_email)


def _handle_subscription_deleted(store: AccountStore, subscription: dict) -> None:
    account_service.handle_subscription_cancelled(subscription.get("id"))


EVENT_HANDLERS = {
    CHECKOUT_COMPLETED: _handle_checkout_completed,
    PAYMENT_SUCCEEDED: _handle_payment_succeeded,
    SUBSCRIPTION_DELETED: _handle_subscription_deleted,
}


@router.post("/webhook")
async def stripe_webhook(
    request: Request,
    store: AccountStore = Depends(get_account_store),
    payments: StripePayments = Depends(get_payments),
):
    """
    Register this URL in the Stripe dashboard: https://your-backend/api/payment/webhook
    Redelivery is Stripe's job; handler failures are logged and acknowledged.
    """
    payload = await request.body()
    signature = request.headers.get("stripe-signature")

    try:
        event = payments.parse_event(payload, signature)
    except InvalidInput as e:
        logger.error("Webhook error: %s", e)
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": "Webhook failed"})

    event_type = event.get("type")
    obj = (event.get("data") or {}).get("object") or {}
    handler = EVENT_HANDLERS.get(event_type)
    if handler is None:
        logger.info("Unhandled event type: %s", event_type)
        return {"received": True}

    try:
        await run_in_threadpool(handler, store, obj)
    except Exception:
        logger.exception("Error handling %s event", event_type)

    return {"received": True}
