"""Keep a Stripe customer and a customers/{uid} document per signed-up user."""
import structlog

from lidora_functions.errors import InternalError, reporting_errors
from lidora_functions.events import UserEvent

logger = structlog.get_logger(__name__)


def customer_path(uid: str) -> str:
    return f"customers/{uid}"


def create_stripe_customer(event: UserEvent, services):
    path = customer_path(event.uid)
    with reporting_errors(services, "create_stripe_customer", path, user=event.uid):
        customer = services.stripe.create_customer(event.email)
        intent = services.stripe.create_setup_intent(customer["id"])
        order_id = services.store.new_id(f"{path}/orders")

        services.store.set(path, {
            "customer_id": customer["id"],
            "setup_secret": intent["client_secret"],
            "email_address": event.email,
            "order_id": order_id,
        })
        logger.info("stripe_customer_created", user=event.uid, customer_id=customer["id"])


def cleanup_user(event: UserEvent, services):
    """Delete the Stripe customer, the stored payment methods and the customer document."""
    path = customer_path(event.uid)
    with reporting_errors(services, "cleanup_user", user=event.uid):
        customer = services.store.get(path)
        if customer is None:
            raise InternalError(f"No customer document for user {event.uid}")

        if customer.get("customer_id"):
            services.stripe.delete_customer(customer["customer_id"])

        services.store.delete_collection(f"{path}/payment_methods")
        services.store.delete(path)
        logger.info("user_cleaned_up", user=event.uid)
