"""Stripe Connect accounts for chefs.

A chef document carries the identity fields Stripe needs for a custom
individual account. Bank or debit card tokens are added afterwards as
documents under ``chefs/{uid}/external_accounts``; debit cards must be
debit, not credit.
"""
import time

import structlog

from lidora_functions.errors import InternalError, reporting_errors
from lidora_functions.events import DocumentEvent

logger = structlog.get_logger(__name__)

COUNTRY = "US"


def parse_dob(dob) -> dict:
    """Accept ``[day, month, year]`` or a mapping with those keys."""
    if isinstance(dob, dict):
        return {"day": int(dob["day"]), "month": int(dob["month"]), "year": int(dob["year"])}
    day, month, year = dob
    return {"day": int(day), "month": int(month), "year": int(year)}


def build_account_params(chef: dict, settings, accepted_at: int = None) -> dict:
    email = chef.get("email_address")
    return {
        "type": "custom",
        "country": COUNTRY,
        "email": email,
        "business_type": "individual",
        "individual": {
            "email": email,
            "first_name": chef.get("first_name"),
            "last_name": chef.get("last_name"),
            "ssn_last_4": chef.get("ssn_last_4"),
            "phone": chef.get("phone"),
            "address": {
                "city": chef.get("city"),
                "country": COUNTRY,
                "line1": chef.get("line1"),
                "line2": chef.get("line2"),
                "postal_code": chef.get("postal_code"),
                "state": chef.get("state"),
            },
            "dob": parse_dob(chef["dob"]),
        },
        "business_profile": {
            "mcc": settings.business_mcc,
            "url": settings.business_url,
            "product_description": settings.product_description,
        },
        "capabilities": {
            "card_payments": {"requested": True},
            "transfers": {"requested": True},
        },
        "tos_acceptance": {
            "date": accepted_at if accepted_at is not None else int(time.time()),
            "ip": chef.get("ip"),
        },
    }


def create_connected_account(event: DocumentEvent, services):
    user_id = event.params["user_id"]
    with reporting_errors(services, "create_connected_account", event.path, user=user_id):
        params = build_account_params(event.data, services.settings)
        account = services.stripe.create_connected_account(params)
        services.store.set(event.path, {"account_id": account["id"]}, merge=True)
        logger.info("connected_account_created", user=user_id, account_id=account["id"])


def create_external_account(event: DocumentEvent, services):
    user_id = event.params["user_id"]
    with reporting_errors(services, "create_external_account", event.path, user=user_id):
        chef = services.store.get(f"chefs/{user_id}") or {}
        account_id = chef.get("account_id")
        if not account_id:
            raise InternalError(f"Chef {user_id} has no connected account")

        external_account = services.stripe.create_external_account(account_id, event.params["token"])
        services.store.set(event.path, external_account)
        logger.info("external_account_created", user=user_id, account_id=account_id)
