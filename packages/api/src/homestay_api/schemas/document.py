# This project was developed with assistance from AI tools.
"""Document request/response schemas."""

from datetime import datetime

from homestay_db.enums import DocumentType, DocumentVerificationStatus
from pydantic import BaseModel, ConfigDict, Field


class DocumentIn(BaseModel):
    """Reference to a file already placed in object storage by the upload service."""

    document_type: DocumentType
    file_name: str = Field(min_length=1, max_length=255)
    file_path: str = Field(min_length=1, max_length=500)
    file_size: int = Field(ge=0, description="Size in bytes.")
    mime_type: str | None = None


class DocumentResponse(BaseModel):
    """Document metadata with its verification state."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    application_id: str
    document_type: DocumentType
    file_name: str
    file_path: str
    file_size: int
    mime_type: str | None = None
    verification_status: DocumentVerificationStatus
    verification_notes: str | None = None
    verified_by: str | None = None
    verification_date: datetime | None = None


class DocumentVerificationIn(BaseModel):
    """One reviewer verdict on one document."""

    document_id: str
    verification_status: DocumentVerificationStatus
    notes: str | None = None


class ScrutinyUpdateRequest(BaseModel):
    """DA scrutiny save: per-document verdicts plus working remarks."""

    verifications: list[DocumentVerificationIn] = Field(default_factory=list)
    remarks: str | None = None
    expected_status: str | None = None
