"""
Typed shapes of inbound payment gateway webhooks.

Only `payment_link.paid` carries data we act on; every other event type is
parsed as UnhandledWebhookEvent and acknowledged without side effects.
"""
from typing import Literal, Union

from pydantic import BaseModel, ConfigDict, field_validator


class PaymentLinkNotes(BaseModel):
    model_config = ConfigDict(extra="allow")

    internal_order_id: str | int | None = None


class PaymentLinkEntity(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str | None = None
    status: str | None = None
    amount: int | None = None
    notes: PaymentLinkNotes | None = None

    @field_validator("notes", mode="before")
    @classmethod
    def empty_notes_as_none(cls, value):
        # The gateway serializes empty notes as [] instead of {}
        if isinstance(value, list) and not value:
            return None
        return value


class PaymentLinkWrapper(BaseModel):
    entity: PaymentLinkEntity


class PaymentLinkPaidPayload(BaseModel):
    model_config = ConfigDict(extra="allow")

    payment_link: PaymentLinkWrapper


class PaymentLinkPaidEvent(BaseModel):
    model_config = ConfigDict(extra="allow")

    event: Literal["payment_link.paid"]
    payload: PaymentLinkPaidPayload

    @property
    def internal_order_id(self) -> str | None:
        notes = self.payload.payment_link.entity.notes
        if notes is None or not notes.internal_order_id:
            return None
        return str(notes.internal_order_id).strip() or None

    @property
    def payment_link_id(self) -> str | None:
        return self.payload.payment_link.entity.id


class UnhandledWebhookEvent(BaseModel):
    model_config = ConfigDict(extra="allow")

    event: str


class WebhookEnvelope(BaseModel):
    model_config = ConfigDict(extra="allow")

    event: str


WebhookEvent = Union[PaymentLinkPaidEvent, UnhandledWebhookEvent]
