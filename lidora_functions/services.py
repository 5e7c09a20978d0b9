from dataclasses import dataclass

import firebase_admin
from firebase_admin import firestore
from google.cloud import logging as cloud_logging

from lidora_functions.config import Settings
from lidora_functions.mailer import Mailer
from lidora_functions.notifier import PushNotifier
from lidora_functions.reporting import ErrorReporter
from lidora_functions.store import DocumentStore
from lidora_functions.stripe_service import StripeService


@dataclass
class Services:
    """Process-scoped handles passed to every handler."""

    settings: Settings
    store: DocumentStore
    stripe: StripeService
    reporter: ErrorReporter
    mailer: Mailer
    notifier: PushNotifier


def build_services(settings: Settings) -> Services:
    firebase_app = firebase_admin.initialize_app(options={"projectId": settings.project_id})

    return Services(
        settings=settings,
        store=DocumentStore(firestore.client(firebase_app)),
        stripe=StripeService(settings.payment_api_key, settings.payment_api_version),
        reporter=ErrorReporter(cloud_logging.Client(project=settings.project_id)),
        mailer=Mailer(
            settings.email_host,
            settings.email_port,
            settings.email_user,
            settings.email_password,
            timeout=settings.email_timeout,
        ),
        notifier=PushNotifier(settings.notification_device_token, app=firebase_app),
    )
