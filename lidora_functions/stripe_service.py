import functools

import stripe
import structlog

from lidora_functions.errors import ProviderRejected

logger = structlog.get_logger(__name__)


def provider_call(func):
    """Turn Stripe errors into ProviderRejected and results into plain dicts."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            result = func(*args, **kwargs)
        except stripe.StripeError as error:
            logger.warning(
                "stripe_request_rejected",
                operation=func.__name__,
                code=error.code,
                request_id=error.request_id,
            )
            message = error.user_message or "The payment provider rejected the request"
            raise ProviderRejected(message, code=error.code) from error
        return to_plain(result)

    return wrapper


def to_plain(obj):
    if obj is None or (isinstance(obj, dict) and not isinstance(obj, stripe.StripeObject)):
        return obj
    return obj.to_dict()


class StripeService:
    """Stripe calls made with an explicit api key, never the module global."""

    def __init__(self, api_key: str, api_version: str = None):
        self.api_key = api_key
        self.api_version = api_version

    def _options(self, **extra):
        options = {"api_key": self.api_key}
        if self.api_version:
            options["stripe_version"] = self.api_version
        options.update(extra)
        return options

    # Customers

    @provider_call
    def create_customer(self, email: str):
        return stripe.Customer.create(email=email, **self._options())

    @provider_call
    def delete_customer(self, customer_id: str):
        return stripe.Customer.delete(customer_id, **self._options())

    @provider_call
    def set_default_payment_method(self, customer_id: str, payment_method_id: str):
        return stripe.Customer.modify(
            customer_id,
            invoice_settings={"default_payment_method": payment_method_id},
            **self._options(),
        )

    @provider_call
    def create_setup_intent(self, customer_id: str):
        return stripe.SetupIntent.create(customer=customer_id, **self._options())

    # Payment methods

    @provider_call
    def attach_payment_method(self, payment_method_id: str, customer_id: str):
        return stripe.PaymentMethod.attach(
            payment_method_id, customer=customer_id, **self._options()
        )

    @provider_call
    def detach_payment_method(self, payment_method_id: str):
        return stripe.PaymentMethod.detach(payment_method_id, **self._options())

    @provider_call
    def retrieve_payment_method(self, payment_method_id: str):
        return stripe.PaymentMethod.retrieve(payment_method_id, **self._options())

    @provider_call
    def update_card_expiry(self, payment_method_id: str, exp_month, exp_year):
        return stripe.PaymentMethod.modify(
            payment_method_id,
            card={"exp_month": exp_month, "exp_year": exp_year},
            **self._options(),
        )

    # Connect

    @provider_call
    def create_connected_account(self, params: dict):
        return stripe.Account.create(**params, **self._options())

    @provider_call
    def create_external_account(self, account_id: str, token: str):
        return stripe.Account.create_external_account(
            account_id, external_account=token, **self._options()
        )

    # Payment intents

    @provider_call
    def create_payment_intent(self, params: dict, idempotency_key: str):
        return stripe.PaymentIntent.create(
            **params, **self._options(idempotency_key=idempotency_key)
        )

    @provider_call
    def confirm_payment_intent(self, payment_intent_id: str):
        return stripe.PaymentIntent.confirm(payment_intent_id, **self._options())
