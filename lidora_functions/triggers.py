"""
Routing of document events to handlers.

Each trigger pairs a document path pattern such as
``customers/{user_id}/payments/{payment_id}`` with an event kind. Every
trigger matching an event runs, in registration order.
"""
import re
from dataclasses import dataclass, replace
from typing import Callable

import structlog

from lidora_functions.events import DocumentEvent, EventKind
from lidora_functions.handlers import connected_accounts, leads, payment_methods, payments

logger = structlog.get_logger(__name__)

_PLACEHOLDER = re.compile(r"\{(\w+)\}")


def compile_pattern(pattern: str):
    regex = _PLACEHOLDER.sub(lambda match: f"(?P<{match.group(1)}>[^/]+)", pattern.strip("/"))
    return re.compile(f"^{regex}$")


@dataclass
class DocumentTrigger:
    pattern: str
    kind: EventKind
    handler: Callable

    def __post_init__(self):
        self.regex = compile_pattern(self.pattern)

    def match(self, event: DocumentEvent):
        if event.kind != self.kind:
            return None
        found = self.regex.match(event.path)
        return found.groupdict() if found else None


CUSTOMER_PAYMENT = "customers/{user_id}/payments/{payment_id}"
CUSTOMER_PAYMENT_METHOD = "customers/{user_id}/payment_methods/{method_id}"
CHEF = "chefs/{user_id}"
CHEF_EXTERNAL_ACCOUNT = "chefs/{user_id}/external_accounts/{token}"
POTENTIAL_LEAD = "potential_leads/{lead_id}"

DOCUMENT_TRIGGERS = [
    DocumentTrigger(CHEF, EventKind.CREATED, connected_accounts.create_connected_account),
    DocumentTrigger(CHEF_EXTERNAL_ACCOUNT, EventKind.CREATED, connected_accounts.create_external_account),
    DocumentTrigger(CUSTOMER_PAYMENT_METHOD, EventKind.CREATED, payment_methods.add_payment_method),
    DocumentTrigger(CUSTOMER_PAYMENT_METHOD, EventKind.UPDATED, payment_methods.update_payment_method),
    DocumentTrigger(CUSTOMER_PAYMENT_METHOD, EventKind.UPDATED, payment_methods.update_default_payment_method),
    DocumentTrigger(CUSTOMER_PAYMENT_METHOD, EventKind.DELETED, payment_methods.detach_payment_method),
    DocumentTrigger(CUSTOMER_PAYMENT, EventKind.CREATED, payments.create_payment),
    DocumentTrigger(CUSTOMER_PAYMENT, EventKind.UPDATED, payments.confirm_payment),
    DocumentTrigger(CUSTOMER_PAYMENT, EventKind.UPDATED, payments.settle_payment),
    DocumentTrigger(POTENTIAL_LEAD, EventKind.CREATED, leads.notify_potential_lead),
]


def dispatch_document_event(event: DocumentEvent, services, triggers=None):
    """Run every handler whose trigger matches. Returns the handler names."""
    handled = []
    for trigger in triggers if triggers is not None else DOCUMENT_TRIGGERS:
        params = trigger.match(event)
        if params is None:
            continue
        trigger.handler(replace(event, params=params), services)
        handled.append(trigger.handler.__name__)

    if not handled:
        logger.info("document_event_ignored", path=event.path, kind=event.kind.value)
    return handled
