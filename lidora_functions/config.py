import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel

BASE_DIR = Path(__file__).resolve().parent.parent
ENV_PATH = BASE_DIR / ".env"


class Settings(BaseModel):
    payment_api_key: str
    payment_api_version: str = "2020-03-02"
    email_user: str
    email_password: str
    email_host: str = "smtp.gmail.com"
    email_port: int = 465
    email_timeout: float = 10.0
    notification_device_token: str
    project_id: str
    event_secret: str
    operator_email: Optional[str] = None
    transfer_destination: Optional[str] = None
    business_mcc: str = "5734"
    business_url: str = "https://instagram.com/lidora"
    product_description: str = "Home cooked meals"
    log_level: str = "INFO"

    @property
    def lead_recipient(self) -> str:
        return self.operator_email or self.email_user


REQUIRED = {
    "payment_api_key": "STRIPE_SECRET_KEY",
    "email_user": "EMAIL_USER",
    "email_password": "EMAIL_PASSWORD",
    "notification_device_token": "OPERATOR_DEVICE_TOKEN",
    "project_id": "GCLOUD_PROJECT",
    "event_secret": "EVENT_JWT_SECRET",
}

OPTIONAL = {
    "payment_api_version": "STRIPE_API_VERSION",
    "email_host": "EMAIL_HOST",
    "email_port": "EMAIL_PORT",
    "email_timeout": "EMAIL_TIMEOUT_SECONDS",
    "operator_email": "OPERATOR_EMAIL",
    "transfer_destination": "STRIPE_TRANSFER_DESTINATION",
    "business_mcc": "CONNECT_BUSINESS_MCC",
    "business_url": "CONNECT_BUSINESS_URL",
    "product_description": "CONNECT_PRODUCT_DESCRIPTION",
    "log_level": "LOG_LEVEL",
}


def load_settings(env_path: Path = ENV_PATH) -> Settings:
    """Read the .env file and the process environment into one Settings."""
    load_dotenv(dotenv_path=env_path)

    values = {}
    for field, var in REQUIRED.items():
        value = os.getenv(var)
        if not value:
            raise RuntimeError(f"{var} is not set. Check your .env file.")
        values[field] = value

    for field, var in OPTIONAL.items():
        value = os.getenv(var)
        if value:
            values[field] = value

    return Settings(**values)
