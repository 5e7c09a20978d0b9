import itertools

import pytest
from fastapi.testclient import TestClient
from jose import jwt

from lidora_functions.config import Settings
from lidora_functions.errors import ProviderRejected
from lidora_functions.main import create_app
from lidora_functions.services import Services
from lidora_functions.store import DocumentStore

EVENT_SECRET = "test-event-secret"


class InMemoryStore(DocumentStore):
    """Firestore stand-in keyed by full document path."""

    def __init__(self):
        super().__init__(client=None)
        self.docs = {}
        self.deleted_pages = []
        self._ids = itertools.count(1)

    def get(self, path):
        doc = self.docs.get(path)
        return dict(doc) if doc is not None else None

    def set(self, path, data, merge=False):
        if merge and path in self.docs:
            self.docs[path] = {**self.docs[path], **data}
        else:
            self.docs[path] = dict(data)

    def delete(self, path):
        self.docs.pop(path, None)

    def new_id(self, collection):
        return f"auto{next(self._ids)}"

    def list_documents(self, collection, limit):
        prefix = collection + "/"
        ids = sorted(
            path[len(prefix):] for path in self.docs
            if path.startswith(prefix) and "/" not in path[len(prefix):]
        )
        return {doc_id: dict(self.docs[prefix + doc_id]) for doc_id in ids[:limit]}

    def delete_many(self, collection, ids):
        ids = list(ids)
        self.deleted_pages.append(ids)
        for doc_id in ids:
            self.docs.pop(f"{collection}/{doc_id}", None)

    def collection(self, collection):
        return self.list_documents(collection, limit=10_000)


class FakeStripe:
    """Records every call; payment intents are deduplicated by idempotency key."""

    def __init__(self):
        self.calls = []
        self.failures = {}
        self.intents = {}
        self.confirm_status = "succeeded"

    def _record(self, name, *args, **kwargs):
        self.calls.append((name, args, kwargs))
        if name in self.failures:
            raise self.failures[name]

    def calls_to(self, name):
        return [call for call in self.calls if call[0] == name]

    def create_customer(self, email):
        self._record("create_customer", email)
        return {"id": "cus_1", "email": email}

    def delete_customer(self, customer_id):
        self._record("delete_customer", customer_id)
        return {"id": customer_id, "deleted": True}

    def set_default_payment_method(self, customer_id, payment_method_id):
        self._record("set_default_payment_method", customer_id, payment_method_id)
        return {"id": customer_id}

    def create_setup_intent(self, customer_id):
        self._record("create_setup_intent", customer_id)
        return {"id": "seti_1", "client_secret": f"seti_secret_{len(self.calls)}"}

    def attach_payment_method(self, payment_method_id, customer_id):
        self._record("attach_payment_method", payment_method_id, customer_id)
        return {"id": payment_method_id, "customer": customer_id}

    def detach_payment_method(self, payment_method_id):
        self._record("detach_payment_method", payment_method_id)
        return {"id": payment_method_id, "customer": None}

    def retrieve_payment_method(self, payment_method_id):
        self._record("retrieve_payment_method", payment_method_id)
        return {
            "id": payment_method_id,
            "card": {"brand": "visa", "last4": "4242", "exp_month": 8, "exp_year": 2030},
        }

    def update_card_expiry(self, payment_method_id, exp_month, exp_year):
        self._record("update_card_expiry", payment_method_id, exp_month, exp_year)
        return {"id": payment_method_id}

    def create_connected_account(self, params):
        self._record("create_connected_account", params)
        return {"id": "acct_1"}

    def create_external_account(self, account_id, token):
        self._record("create_external_account", account_id, token)
        return {"id": "ba_1", "account": account_id, "last4": "6789"}

    def create_payment_intent(self, params, idempotency_key):
        self._record("create_payment_intent", params, idempotency_key=idempotency_key)
        if idempotency_key not in self.intents:
            self.intents[idempotency_key] = {
                "id": f"pi_{len(self.intents) + 1}",
                "object": "payment_intent",
                "amount": params["amount"],
                "currency": params["currency"],
                "status": "succeeded",
            }
        return dict(self.intents[idempotency_key])

    def confirm_payment_intent(self, payment_intent_id):
        self._record("confirm_payment_intent", payment_intent_id)
        return {"id": payment_intent_id, "status": self.confirm_status}


class FakeReporter:
    def __init__(self):
        self.reports = []

    def report(self, error, context=None, function_name="unknown"):
        self.reports.append((error, context, function_name))


class FakeMailer:
    def __init__(self):
        self.sent = []

    def send(self, *, to_email, subject, body):
        self.sent.append({"to_email": to_email, "subject": subject, "body": body})


class FakeNotifier:
    def __init__(self):
        self.sent = []

    def send(self, *, title, body):
        self.sent.append({"title": title, "body": body})
        return "projects/test/messages/1"


@pytest.fixture
def settings():
    return Settings(
        payment_api_key="sk_test_123",
        email_user="ops@lidora.test",
        email_password="secret",
        notification_device_token="device-token",
        project_id="lidora-test",
        event_secret=EVENT_SECRET,
        transfer_destination="acct_chef",
    )


@pytest.fixture
def services(settings):
    return Services(
        settings=settings,
        store=InMemoryStore(),
        stripe=FakeStripe(),
        reporter=FakeReporter(),
        mailer=FakeMailer(),
        notifier=FakeNotifier(),
    )


@pytest.fixture
def rejected():
    return ProviderRejected("Your card was declined.", code="card_declined")


@pytest.fixture
def client(services):
    app = create_app(services=services)
    token = jwt.encode({"sub": "event-relay"}, EVENT_SECRET, algorithm="HS256")
    with TestClient(app, headers={"Authorization": f"Bearer {token}"}) as c:
        yield c
