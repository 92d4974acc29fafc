"""
Inbound Socket.IO event payloads.

Wire names are camelCase; attributes are snake_case. Identity fields must be
non-empty strings. Signaling bodies (offer/answer/candidate) stay `Any` and
are never inspected.
"""

from typing import Any, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field


class _Inbound(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class RegisterPayload(_Inbound):
    identity: str = Field(..., min_length=1)


class PrivateMessagePayload(_Inbound):
    sender_id: str = Field(..., min_length=1, alias="senderId")
    receiver_id: str = Field(..., min_length=1, alias="receiverId")
    text: Optional[str] = None
    image_data: Optional[str] = Field(None, alias="imageData")
    sender_lang: Optional[str] = Field(None, alias="senderLang")
    sender_name: Optional[str] = Field(None, alias="senderName")


class TypingPayload(_Inbound):
    sender_id: str = Field(..., min_length=1, alias="senderId")
    receiver_id: str = Field(..., min_length=1, alias="receiverId")
    is_typing: bool = Field(..., alias="isTyping")


class MarkReadPayload(_Inbound):
    user_id: str = Field(..., min_length=1, alias="userId")
    other_id: str = Field(..., min_length=1, alias="otherId")


class CallUserPayload(_Inbound):
    offer: Any = None
    to: str = Field(..., min_length=1)
    from_: str = Field(..., min_length=1, alias="from")
    from_name: Optional[str] = Field(None, alias="fromName")
    type: Literal["audio", "video"] = "audio"


class AnswerCallPayload(_Inbound):
    answer: Any = None
    to: str = Field(..., min_length=1)


class IceCandidatePayload(_Inbound):
    candidate: Any = None
    to: str = Field(..., min_length=1)


class EndCallPayload(_Inbound):
    to: str = Field(..., min_length=1)
