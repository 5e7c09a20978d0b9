from typing import Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel, Field

from lidora_functions.auth import verify_token
from lidora_functions.events import AnalyticsEvent, DocumentEvent, EventKind, UserEvent
from lidora_functions.handlers import analytics, customers
from lidora_functions.triggers import dispatch_document_event

router = APIRouter(prefix="/events")


class DocumentEventRequest(BaseModel):
    kind: EventKind
    path: str
    before: Optional[dict] = None
    after: Optional[dict] = None


class UserEventRequest(BaseModel):
    kind: Literal["user_created", "user_deleted"]
    uid: str
    email: Optional[str] = None


class DeviceInfo(BaseModel):
    mobile_model_name: str = ""


class GeoInfo(BaseModel):
    city: str = ""
    country: str = ""


class AnalyticsUser(BaseModel):
    device_info: DeviceInfo = Field(default_factory=DeviceInfo)
    geo_info: GeoInfo = Field(default_factory=GeoInfo)


class AnalyticsEventRequest(BaseModel):
    name: str
    user: AnalyticsUser = Field(default_factory=AnalyticsUser)


@router.post("/documents")
def document_event(
    request: Request,
    body: DocumentEventRequest,
    auth=Depends(verify_token)
):
    try:
        event = DocumentEvent.from_path(body.path, body.kind, before=body.before, after=body.after)
    except ValueError as error:
        raise HTTPException(status_code=400, detail=str(error))

    handled = dispatch_document_event(event, request.app.state.services)
    return {"ok": True, "handled": handled}


@router.post("/auth")
def user_event(
    request: Request,
    body: UserEventRequest,
    auth=Depends(verify_token)
):
    services = request.app.state.services
    event = UserEvent(uid=body.uid, email=body.email)

    if body.kind == "user_created":
        customers.create_stripe_customer(event, services)
        handled = ["create_stripe_customer"]
    else:
        customers.cleanup_user(event, services)
        handled = ["cleanup_user"]

    return {"ok": True, "handled": handled}


@router.post("/analytics")
def analytics_event(
    request: Request,
    body: AnalyticsEventRequest,
    auth=Depends(verify_token)
):
    event = AnalyticsEvent(
        name=body.name,
        device_model=body.user.device_info.mobile_model_name,
        city=body.user.geo_info.city,
        country=body.user.geo_info.country,
    )
    analytics.notify_operator(event, request.app.state.services)
    return {"ok": True}
