"""
Payment Module - Notification Schemas
=======================================
Typed shape of a verified gateway notification. Only the fields the order
workflow reads are declared; everything else in the payload is ignored.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CheckoutSessionMetadata(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    order_id: Optional[str] = Field(default=None, alias="orderId")
    user_id: Optional[str] = Field(default=None, alias="userId")

    @field_validator("order_id", "user_id", mode="before")
    @classmethod
    def _blank_to_none(cls, value):
        if value is None:
            return None
        value = str(value).strip()
        return value or None


class CheckoutSessionObject(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: Optional[str] = None
    payment_status: Optional[str] = None
    metadata: CheckoutSessionMetadata = Field(default_factory=CheckoutSessionMetadata)

    @field_validator("metadata", mode="before")
    @classmethod
    def _null_metadata(cls, value):
        return value if value is not None else {}


class NotificationData(BaseModel):
    model_config = ConfigDict(extra="ignore")

    object: CheckoutSessionObject = Field(default_factory=CheckoutSessionObject)


class WebhookNotification(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str = ""
    type: str
    data: NotificationData = Field(default_factory=NotificationData)

    @property
    def session(self) -> CheckoutSessionObject:
        return self.data.object

    @property
    def metadata(self) -> CheckoutSessionMetadata:
        return self.data.object.metadata
