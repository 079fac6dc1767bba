# This project was developed with assistance from AI tools.
"""Application request/response schemas.

Editing uses one all-optional ``DraftPayload``. What must be present before
an application can leave the owner's hands depends on its kind, so final
submission validates the stored fields against ``SubmissionPayload``, a
union discriminated on ``application_kind``.
"""

from datetime import datetime
from decimal import Decimal
from typing import Annotated, Literal, Union

from homestay_db.enums import (
    ApplicationKind,
    ApplicationStatus,
    Category,
    InspectionOutcome,
    LocationType,
    OwnerGender,
)
from pydantic import BaseModel, ConfigDict, Field, field_validator

from . import Pagination
from .document import DocumentIn, DocumentResponse

_MOBILE_PATTERN = r"^[6-9]\d{9}$"
_PINCODE_PATTERN = r"^[1-9]\d{5}$"
_AADHAAR_PATTERN = r"^\d{12}$"


# ---------------------------------------------------------------------------
# Editing
# ---------------------------------------------------------------------------


class RoomConfigurationIn(BaseModel):
    """Declared rooms. Totals are derived server-side and never accepted."""

    single_bed_rooms: int = Field(default=0, ge=0)
    single_bed_beds: int = Field(default=1, ge=0)
    single_bed_room_rate: Decimal | None = Field(default=None, ge=0)
    double_bed_rooms: int = Field(default=0, ge=0)
    double_bed_beds: int = Field(default=2, ge=0)
    double_bed_room_rate: Decimal | None = Field(default=None, ge=0)
    family_suites: int = Field(default=0, ge=0)
    family_suite_beds: int = Field(default=4, ge=0)
    family_suite_rate: Decimal | None = Field(default=None, ge=0)
    attached_washrooms: int = Field(default=0, ge=0)


class DraftPayload(BaseModel):
    """Partial owner edit. Omitted fields keep their stored value."""

    model_config = ConfigDict(extra="forbid")

    property_name: str | None = Field(default=None, max_length=255)
    category: Category | None = None
    location_type: LocationType | None = None
    certificate_validity_years: int | None = None

    district: str | None = None
    district_other: str | None = None
    tehsil: str | None = None
    tehsil_other: str | None = None
    block: str | None = None
    block_other: str | None = None
    gram_panchayat: str | None = None
    gram_panchayat_other: str | None = None
    urban_body: str | None = None
    urban_body_other: str | None = None
    ward: str | None = None
    address: str | None = None
    pincode: str | None = None

    owner_name: str | None = None
    owner_gender: OwnerGender | None = None
    owner_mobile: str | None = None
    owner_email: str | None = None
    owner_aadhaar: str | None = None

    rooms: RoomConfigurationIn | None = None
    documents: list[DocumentIn] | None = Field(
        default=None,
        description="Replaces the whole document list when present.",
    )


class LegacyOnboardingRequest(DraftPayload):
    """Owner already holding a certificate issued under the previous regime."""

    legacy_certificate_number: str = Field(min_length=3, max_length=50)
    legacy_certificate_issued_date: datetime | None = None
    legacy_certificate_expiry_date: datetime | None = None


class RoomDelta(BaseModel):
    single_bed_rooms: int = Field(default=0, ge=0)
    double_bed_rooms: int = Field(default=0, ge=0)
    family_suites: int = Field(default=0, ge=0)

    @property
    def total(self) -> int:
        return self.single_bed_rooms + self.double_bed_rooms + self.family_suites


class ServiceRequestCreate(BaseModel):
    """Open a renewal / room change / cancellation against an approved registration."""

    application_kind: ApplicationKind
    certificate_validity_years: int | None = None
    room_delta: RoomDelta | None = None
    rates: RoomConfigurationIn | None = Field(
        default=None,
        description="Nightly rates for room types being added.",
    )
    note: str | None = Field(default=None, max_length=2000)

    @field_validator("application_kind")
    @classmethod
    def _service_kind(cls, value: ApplicationKind) -> ApplicationKind:
        if value not in ApplicationKind.service_kinds():
            raise ValueError("must be one of renewal, add_rooms, delete_rooms, cancel_certificate")
        return value


# ---------------------------------------------------------------------------
# Submission contracts, one per application kind
# ---------------------------------------------------------------------------


class _PropertyFields(BaseModel):
    model_config = ConfigDict(extra="ignore")

    property_name: str = Field(min_length=1, max_length=255)
    category: Category
    location_type: LocationType
    certificate_validity_years: Literal[1, 3] = 1

    district: str = Field(min_length=1)
    tehsil: str = Field(min_length=1)
    address: str = Field(min_length=1)
    pincode: str = Field(pattern=_PINCODE_PATTERN)

    owner_name: str = Field(min_length=1)
    owner_gender: OwnerGender
    owner_mobile: str = Field(pattern=_MOBILE_PATTERN)
    owner_email: str | None = None
    owner_aadhaar: str | None = Field(default=None, pattern=_AADHAAR_PATTERN)


class NewRegistrationPayload(_PropertyFields):
    application_kind: Literal[ApplicationKind.NEW_REGISTRATION]


class RenewalPayload(_PropertyFields):
    application_kind: Literal[ApplicationKind.RENEWAL]
    certificate_validity_years: Literal[1, 3]
    parent_application_id: str


class AddRoomsPayload(_PropertyFields):
    application_kind: Literal[ApplicationKind.ADD_ROOMS]
    parent_application_id: str


class DeleteRoomsPayload(_PropertyFields):
    application_kind: Literal[ApplicationKind.DELETE_ROOMS]
    parent_application_id: str


class CancelCertificatePayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    application_kind: Literal[ApplicationKind.CANCEL_CERTIFICATE]
    parent_application_id: str
    parent_certificate_number: str = Field(min_length=1)
    note: str = Field(min_length=1, description="Reason for surrendering the certificate.")


SubmissionPayload = Annotated[
    Union[
        NewRegistrationPayload,
        RenewalPayload,
        AddRoomsPayload,
        DeleteRoomsPayload,
        CancelCertificatePayload,
    ],
    Field(discriminator="application_kind"),
]


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


class ApplicationResponse(BaseModel):
    """Single application response."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    application_number: str | None = None
    owner_id: str
    application_kind: ApplicationKind
    status: ApplicationStatus
    current_stage: str
    correction_submission_count: int

    property_name: str | None = None
    category: Category | None = None
    selected_category: Category | None = None
    location_type: LocationType | None = None
    certificate_validity_years: int
    is_special_subdivision: bool

    district: str | None = None
    district_other: str | None = None
    tehsil: str | None = None
    tehsil_other: str | None = None
    block: str | None = None
    block_other: str | None = None
    gram_panchayat: str | None = None
    gram_panchayat_other: str | None = None
    urban_body: str | None = None
    urban_body_other: str | None = None
    ward: str | None = None
    address: str | None = None
    pincode: str | None = None

    owner_name: str | None = None
    owner_gender: OwnerGender | None = None
    owner_mobile: str | None = None
    owner_email: str | None = None

    single_bed_rooms: int
    single_bed_beds: int
    single_bed_room_rate: Decimal | None = None
    double_bed_rooms: int
    double_bed_beds: int
    double_bed_room_rate: Decimal | None = None
    family_suites: int
    family_suite_beds: int
    family_suite_rate: Decimal | None = None
    attached_washrooms: int
    total_rooms: int
    total_beds: int
    highest_room_rate: Decimal | None = None

    base_fee: Decimal | None = None
    total_before_discounts: Decimal | None = None
    validity_discount: Decimal | None = None
    female_owner_discount: Decimal | None = None
    special_subdivision_discount: Decimal | None = None
    total_discount: Decimal | None = None
    total_fee: Decimal | None = None

    da_remarks: str | None = None
    dtdo_remarks: str | None = None
    district_notes: str | None = None
    clarification_requested: str | None = None
    rejection_reason: str | None = None

    site_inspection_scheduled_date: datetime | None = None
    site_inspection_officer_id: str | None = None
    site_inspection_completed_date: datetime | None = None
    site_inspection_outcome: InspectionOutcome | None = None
    site_inspection_notes: str | None = None

    parent_application_id: str | None = None
    parent_application_number: str | None = None
    parent_certificate_number: str | None = None
    service_context: dict | None = None

    certificate_number: str | None = None
    certificate_issued_date: datetime | None = None
    certificate_expiry_date: datetime | None = None
    submitted_at: datetime | None = None
    approved_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    documents: list[DocumentResponse] = []


class ApplicationListResponse(BaseModel):
    """Paginated list of applications."""

    data: list[ApplicationResponse]
    pagination: Pagination


class ApplicationActionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int | None = None
    action: str
    actor_id: str
    actor_role: str | None = None
    previous_status: str | None = None
    new_status: str | None = None
    feedback: str | None = None
    created_at: datetime | None = None


class ApplicationActionListResponse(BaseModel):
    data: list[ApplicationActionResponse]
