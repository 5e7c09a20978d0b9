"""Email the operator when a potential lead fills in the signup form."""
import structlog

from lidora_functions.errors import reporting_errors
from lidora_functions.events import DocumentEvent

logger = structlog.get_logger(__name__)


def lead_email(lead: dict):
    name = lead.get("name") or "Someone"
    subject = f"New potential lead: {name}"
    body = (
        f"{name} wants to hear more about Lidora.\n\n"
        f"Name: {lead.get('name', '')}\n"
        f"Email: {lead.get('email', '')}\n"
    )
    return subject, body


def notify_potential_lead(event: DocumentEvent, services):
    lead_id = event.params["lead_id"]
    with reporting_errors(services, "notify_potential_lead", event.path, lead=lead_id):
        subject, body = lead_email(event.data)
        services.mailer.send(
            to_email=services.settings.lead_recipient, subject=subject, body=body
        )
        logger.info("potential_lead_notified", lead=lead_id)
