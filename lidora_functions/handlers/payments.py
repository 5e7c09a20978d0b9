"""
Payment intents for customers/{uid}/payments documents.

The client creates a payment document as a charge request. The document id
is the Stripe idempotency key, so a redelivered create event cannot charge
twice. The Stripe response is merged back onto the document and later
status transitions drive the rest of the flow:

    created -> requires_confirmation -> succeeded
            -> succeeded
            -> error

``requires_confirmation`` is reached after 3D Secure; the intent is then
confirmed once. ``succeeded`` moves the pending order to the order history
and emails a receipt. A document with an ``error`` field is never retried.
"""
from decimal import ROUND_HALF_UP, Decimal

import structlog

from lidora_functions.errors import InternalError, reporting_errors
from lidora_functions.events import DocumentEvent

logger = structlog.get_logger(__name__)

REQUIRES_CONFIRMATION = "requires_confirmation"
SUCCEEDED = "succeeded"

ITEM_PAGE_SIZE = 10


def to_cents(value) -> int:
    return int((Decimal(str(value)) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def build_intent_params(payment: dict, customer_id: str, receipt_email: str = None,
                        default_destination: str = None) -> dict:
    subtotal = payment.get("subtotal", payment.get("amount"))
    total = payment.get("total", subtotal)
    if total is None:
        raise InternalError("Payment has neither total, subtotal nor amount")

    params = {
        "payment_method_data": {
            "type": "card",
            "card": {"token": payment["payment_method"]},
        },
        "customer": customer_id,
        "amount": to_cents(total),
        "currency": payment["currency"],
        "off_session": False,
        "confirm": True,
    }
    if receipt_email:
        params["receipt_email"] = receipt_email

    destination = payment.get("destination") or default_destination
    if destination and subtotal is not None:
        params["transfer_data"] = {
            "amount": to_cents(subtotal),
            "destination": destination,
        }
    return params


def _customer(services, user_id: str) -> dict:
    customer = services.store.get(f"customers/{user_id}") or {}
    if not customer.get("customer_id"):
        raise InternalError(f"No Stripe customer for user {user_id}")
    return customer


def create_payment(event: DocumentEvent, services):
    user_id = event.params["user_id"]
    with reporting_errors(services, "create_payment", event.path, user=user_id):
        customer = _customer(services, user_id)
        params = build_intent_params(
            event.data,
            customer["customer_id"],
            receipt_email=customer.get("email_address"),
            default_destination=services.settings.transfer_destination,
        )

        # The document id doubles as the idempotency key against double charges.
        intent = services.stripe.create_payment_intent(params, idempotency_key=event.document_id)
        services.store.set(event.path, intent, merge=True)
        logger.info(
            "payment_intent_created",
            user=user_id,
            payment=event.document_id,
            payment_intent=intent.get("id"),
            status=intent.get("status"),
        )


def confirm_payment(event: DocumentEvent, services):
    """Reconfirm once the customer has completed 3D Secure."""
    if not event.became("status", REQUIRES_CONFIRMATION):
        return

    user_id = event.params["user_id"]
    with reporting_errors(services, "confirm_payment", event.path, user=user_id):
        intent = services.stripe.confirm_payment_intent(event.after["id"])
        services.store.set(event.path, intent, merge=True)
        logger.info(
            "payment_intent_confirmed",
            user=user_id,
            payment_intent=intent.get("id"),
            status=intent.get("status"),
        )


def settle_payment(event: DocumentEvent, services):
    if not event.became("status", SUCCEEDED):
        return

    user_id = event.params["user_id"]
    with reporting_errors(services, "settle_payment", event.path, user=user_id):
        customer = _customer(services, user_id)
        order_id = customer.get("order_id")
        if not order_id:
            raise InternalError(f"No pending order for user {user_id}")

        move_order_to_history(services.store, user_id, order_id, event.after, event.document_id)

        services.store.set(
            f"customers/{user_id}",
            {"order_id": services.store.new_id(f"customers/{user_id}/orders")},
            merge=True,
        )

        if customer.get("email_address"):
            subject, body = receipt_email(event.after, order_id)
            services.mailer.send(to_email=customer["email_address"], subject=subject, body=body)
        logger.info("payment_settled", user=user_id, order=order_id)


def move_order_to_history(store, user_id: str, order_id: str, intent: dict, payment_id: str):
    pending_path = f"customers/{user_id}/orders/{order_id}"
    history_path = f"customers/{user_id}/order_history/{order_id}"

    order = store.get(pending_path) or {}

    store.set(history_path, {
        **order,
        "payment_id": payment_id,
        "payment_intent_id": intent.get("id"),
        "amount": intent.get("amount"),
        "currency": intent.get("currency"),
    })
    # Copy each page before deleting it.
    moved = 0
    while True:
        page = store.list_documents(f"{pending_path}/items", ITEM_PAGE_SIZE)
        if not page:
            break
        for item_id, item in page.items():
            store.set(f"{history_path}/items/{item_id}", item)
        store.delete_many(f"{pending_path}/items", list(page))
        moved += len(page)

    store.delete(pending_path)
    logger.info("order_archived", user=user_id, order=order_id, items=moved)


def receipt_email(intent: dict, order_id: str):
    amount = Decimal(intent.get("amount") or 0) / 100
    currency = (intent.get("currency") or "").upper()
    subject = f"Your Lidora receipt for order {order_id}"
    body = (
        "Thank you for your order!\n\n"
        f"Order: {order_id}\n"
        f"Total charged: {amount:.2f} {currency}\n"
    )
    return subject, body
