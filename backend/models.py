from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class _CamelPayload(BaseModel):
    """Accepts the widget's camelCase keys as well as snake_case."""
    model_config = ConfigDict(populate_by_name=True)


class ContactRequest(_CamelPayload):
    """Contact form submission. Required fields are checked by the route."""
    first_name: Optional[str] = Field(default=None, alias="firstName")
    last_name: Optional[str] = Field(default=None, alias="lastName")
    email: Optional[str] = None
    phone: Optional[str] = None
    service: Optional[str] = None
    message: Optional[str] = None


class ChatMessageRequest(_CamelPayload):
    """Chat relay payload posted by the widget."""
    session_id: Optional[str] = Field(default=None, alias="sessionId")
    message: Optional[str] = None
    sender_type: str = Field(default="user", alias="senderType")


class SubscribeRequest(_CamelPayload):
    """Newsletter signup payload."""
    email: Optional[str] = None
    first_name: Optional[str] = Field(default=None, alias="firstName")
    last_name: Optional[str] = Field(default=None, alias="lastName")
    source: str = "website"


class ApiResult(BaseModel):
    """Envelope shared by every JSON endpoint."""
    model_config = ConfigDict(populate_by_name=True)

    success: bool
    message: Optional[str] = None


class ContactResult(ApiResult):
    contact_id: int = Field(alias="contactId")


class SubscribeResult(ApiResult):
    subscriber_id: int = Field(alias="subscriberId")


class ChatResult(ApiResult):
    user_message: Dict[str, Any] = Field(alias="userMessage")
    bot_response: Dict[str, Any] = Field(alias="botResponse")


class ListResult(ApiResult):
    data: List[Dict[str, Any]]
