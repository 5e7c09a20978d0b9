from lidora_functions.errors import GENERIC_MESSAGE, user_facing_message
from lidora_functions.events import UserEvent
from lidora_functions.handlers import customers


def test_user_created_creates_customer_document(services):
    customers.create_stripe_customer(UserEvent(uid="u1", email="a@x.com"), services)

    doc = services.store.get("customers/u1")
    assert doc["customer_id"] == "cus_1"
    assert doc["setup_secret"]
    assert doc["email_address"] == "a@x.com"
    assert doc["order_id"]
    assert services.stripe.calls_to("create_setup_intent") == [
        ("create_setup_intent", ("cus_1",), {})
    ]


def test_user_created_failure_is_reported(services, rejected):
    services.stripe.failures["create_customer"] = rejected

    customers.create_stripe_customer(UserEvent(uid="u1", email="a@x.com"), services)

    assert services.store.get("customers/u1") == {"error": "Your card was declined."}
    assert services.reporter.reports[0][1] == {"user": "u1"}


def test_user_deleted_removes_customer_and_payment_methods(services):
    customers.create_stripe_customer(UserEvent(uid="u1", email="a@x.com"), services)
    for n in range(13):
        services.store.set(f"customers/u1/payment_methods/pm_{n:02}", {"id": f"pm_{n:02}"})
    services.store.set("customers/u2", {"customer_id": "cus_2"})

    customers.cleanup_user(UserEvent(uid="u1"), services)

    assert services.store.get("customers/u1") is None
    assert services.store.collection("customers/u1/payment_methods") == {}
    assert services.store.get("customers/u2") == {"customer_id": "cus_2"}
    assert services.stripe.calls_to("delete_customer") == [("delete_customer", ("cus_1",), {})]
    assert services.reporter.reports == []


def test_user_deleted_without_document_is_reported(services):
    customers.cleanup_user(UserEvent(uid="ghost"), services)

    assert services.stripe.calls_to("delete_customer") == []
    (error, context, function_name), = services.reporter.reports
    assert function_name == "cleanup_user"
    # No triggering document to write onto
    assert services.store.get("customers/ghost") is None
    assert user_facing_message(error) == GENERIC_MESSAGE
