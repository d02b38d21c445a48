"""Pydantic models for Outline webhook deliveries."""

from __future__ import annotations

from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field


def _null_to_empty_str(v: Any) -> Any:
    return "" if v is None else v


def _null_to_empty_obj(v: Any) -> Any:
    return {} if v is None else v


# Older payload shapes send null (or nothing) for fields they don't carry.
OptStr = Annotated[str, BeforeValidator(_null_to_empty_str)]


class _OutlineModel(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)


class Actor(_OutlineModel):
    name: OptStr = ""


OptActor = Annotated[Actor, BeforeValidator(_null_to_empty_obj)]


class DocumentModel(_OutlineModel):
    id: OptStr = ""
    title: OptStr = ""
    url: OptStr = ""
    document_id: OptStr = Field(default="", alias="documentId")
    text: OptStr = ""
    created_by: OptActor = Field(default_factory=Actor, alias="createdBy")
    updated_by: OptActor = Field(default_factory=Actor, alias="updatedBy")


OptDocument = Annotated[DocumentModel, BeforeValidator(_null_to_empty_obj)]


class EventPayload(_OutlineModel):
    id: OptStr = ""
    model: OptDocument = Field(default_factory=DocumentModel)


OptPayload = Annotated[EventPayload, BeforeValidator(_null_to_empty_obj)]


class EventEnvelope(_OutlineModel):
    """
    Decoded Outline webhook body.

    Shape:
        {"event": "documents.update",
         "payload": {"id": "...", "model": {"title": ..., "url": ..., ...}}}

    Missing or null string fields decode to "".
    """

    event: OptStr = ""
    payload: OptPayload = Field(default_factory=EventPayload)

    @property
    def document(self) -> DocumentModel:
        return self.payload.model


def decode_envelope(raw_body: bytes) -> EventEnvelope:
    """
    Decode a raw webhook body.

    Raises:
        pydantic.ValidationError: If the body is not valid JSON or not an
            object of the expected shape
    """
    return EventEnvelope.model_validate_json(raw_body)
