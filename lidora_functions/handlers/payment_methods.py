"""Mirror customers/{uid}/payment_methods documents onto Stripe payment methods."""
import structlog

from lidora_functions.errors import InternalError, reporting_errors
from lidora_functions.events import DocumentEvent

logger = structlog.get_logger(__name__)

EXPIRY_FIELDS = ("month", "year")


def _customer_path(event: DocumentEvent) -> str:
    return f"customers/{event.params['user_id']}"


def _payment_method_id(event: DocumentEvent) -> str:
    return event.data.get("id") or event.document_id


def _customer_id(services, event: DocumentEvent) -> str:
    customer = services.store.get(_customer_path(event)) or {}
    if not customer.get("customer_id"):
        raise InternalError(f"No Stripe customer for {_customer_path(event)}")
    return customer["customer_id"]


def add_payment_method(event: DocumentEvent, services):
    """Attach a new card, mirror its display fields, and issue a fresh setup secret."""
    user_id = event.params["user_id"]
    with reporting_errors(services, "add_payment_method", event.path, user=user_id):
        payment_method_id = _payment_method_id(event)
        customer_id = _customer_id(services, event)

        services.stripe.attach_payment_method(payment_method_id, customer_id)
        payment_method = services.stripe.retrieve_payment_method(payment_method_id)
        card = payment_method["card"]
        services.store.set(event.path, {
            "brand": card["brand"],
            "last4": card["last4"],
            "month": card["exp_month"],
            "year": card["exp_year"],
            "primary": True,
        }, merge=True)

        # A setup secret is single use; the client needs a new one for the next card.
        intent = services.stripe.create_setup_intent(customer_id)
        services.store.set(_customer_path(event), {
            "setup_secret": intent["client_secret"],
            "primary_card": payment_method_id,
        }, merge=True)
        logger.info("payment_method_added", user=user_id, payment_method=payment_method_id)


def expiry_changed(event: DocumentEvent) -> bool:
    return any(event.changed(key) for key in EXPIRY_FIELDS)


def update_payment_method(event: DocumentEvent, services):
    if not expiry_changed(event):
        return

    user_id = event.params["user_id"]
    with reporting_errors(services, "update_payment_method", event.path, user=user_id):
        payment_method_id = _payment_method_id(event)
        services.stripe.update_card_expiry(
            payment_method_id, event.after.get("month"), event.after.get("year")
        )
        logger.info("payment_method_expiry_updated", user=user_id, payment_method=payment_method_id)


def update_default_payment_method(event: DocumentEvent, services):
    if not event.became("primary", True):
        return

    user_id = event.params["user_id"]
    with reporting_errors(services, "update_default_payment_method", event.path, user=user_id):
        payment_method_id = _payment_method_id(event)
        services.stripe.set_default_payment_method(_customer_id(services, event), payment_method_id)
        logger.info("default_payment_method_updated", user=user_id, payment_method=payment_method_id)


def detach_payment_method(event: DocumentEvent, services):
    # The document is gone; writing an error onto it would recreate it.
    user_id = event.params["user_id"]
    with reporting_errors(services, "detach_payment_method", user=user_id):
        payment_method_id = _payment_method_id(event)
        services.stripe.detach_payment_method(payment_method_id)
        logger.info("payment_method_detached", user=user_id, payment_method=payment_method_id)
