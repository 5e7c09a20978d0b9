import structlog
from firebase_admin import messaging

logger = structlog.get_logger(__name__)


class PushNotifier:
    """Sends push notifications to the single operator device."""

    def __init__(self, device_token: str, app=None):
        self.device_token = device_token
        self.app = app

    def send(self, *, title: str, body: str) -> str:
        message = messaging.Message(
            notification=messaging.Notification(title=title, body=body),
            token=self.device_token,
        )
        message_id = messaging.send(message, app=self.app)
        logger.info("push_sent", message_id=message_id, title=title)
        return message_id
