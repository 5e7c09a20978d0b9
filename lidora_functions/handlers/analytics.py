"""Push a notification to the operator device when the app is installed or removed."""
import structlog

from lidora_functions.errors import reporting_errors
from lidora_functions.events import AnalyticsEvent

logger = structlog.get_logger(__name__)

TITLES = {
    "first_open": "You have a new user \U0001F643",
    "app_remove": "You lost a user \U0001F61E",
}


def notification_for(event: AnalyticsEvent):
    title = TITLES[event.name]
    body = f"{event.device_model} from {event.city}, {event.country}"
    return title, body


def notify_operator(event: AnalyticsEvent, services):
    if event.name not in TITLES:
        logger.info("analytics_event_ignored", name=event.name)
        return

    with reporting_errors(services, f"analytics_{event.name}", analytics_event=event.name):
        title, body = notification_for(event)
        services.notifier.send(title=title, body=body)
