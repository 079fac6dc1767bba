# This project was developed with assistance from AI tools.
"""
Homestay registration -- domain models

Applications with their room configuration, fee breakdown and review trail,
plus documents, the append-only action log, users and admin settings.
"""

import uuid

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    func,
)
from sqlalchemy.orm import relationship

from .database import Base
from .enums import (
    ApplicationKind,
    ApplicationStatus,
    Category,
    DocumentType,
    DocumentVerificationStatus,
    InspectionOutcome,
    LocationType,
    OwnerGender,
    UserRole,
)


def _new_id() -> str:
    return str(uuid.uuid4())


class User(Base):
    """Portal user linked to a Keycloak identity."""

    __tablename__ = "users"

    id = Column(String(255), primary_key=True)
    role = Column(Enum(UserRole, name="user_role", native_enum=False), nullable=False)
    full_name = Column(String(255), nullable=False)
    mobile = Column(String(20), nullable=True)
    email = Column(String(255), nullable=True)
    district = Column(String(100), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self):
        return f"<User(id='{self.id}', role='{self.role}')>"


class HomestayApplication(Base):
    """Homestay registration or service request."""

    __tablename__ = "homestay_applications"

    id = Column(String(36), primary_key=True, default=_new_id)
    application_number = Column(String(50), unique=True, nullable=True, index=True)
    owner_id = Column(String(255), nullable=False, index=True)
    application_kind = Column(
        Enum(ApplicationKind, name="application_kind", native_enum=False),
        nullable=False,
        default=ApplicationKind.NEW_REGISTRATION,
    )
    status = Column(
        Enum(ApplicationStatus, name="application_status", native_enum=False),
        nullable=False,
        default=ApplicationStatus.DRAFT,
        index=True,
    )
    current_stage = Column(String(50), nullable=False, default="draft")
    correction_submission_count = Column(Integer, nullable=False, default=0)

    # Property
    property_name = Column(String(255), nullable=True)
    category = Column(Enum(Category, name="category", native_enum=False), nullable=True)
    selected_category = Column(Enum(Category, name="category", native_enum=False), nullable=True)
    location_type = Column(
        Enum(LocationType, name="location_type", native_enum=False), nullable=True,
    )
    certificate_validity_years = Column(Integer, nullable=False, default=1)
    is_special_subdivision = Column(Boolean, nullable=False, default=False)

    # Address (LGD hierarchy with free-text overrides)
    district = Column(String(100), nullable=True, index=True)
    district_other = Column(String(100), nullable=True)
    tehsil = Column(String(100), nullable=True)
    tehsil_other = Column(String(100), nullable=True)
    block = Column(String(100), nullable=True)
    block_other = Column(String(100), nullable=True)
    gram_panchayat = Column(String(100), nullable=True)
    gram_panchayat_other = Column(String(100), nullable=True)
    urban_body = Column(String(200), nullable=True)
    urban_body_other = Column(String(200), nullable=True)
    ward = Column(String(50), nullable=True)
    address = Column(Text, nullable=True)
    pincode = Column(String(10), nullable=True)

    # Owner
    owner_name = Column(String(255), nullable=True)
    owner_gender = Column(Enum(OwnerGender, name="owner_gender", native_enum=False), nullable=True)
    owner_mobile = Column(String(20), nullable=True)
    owner_email = Column(String(255), nullable=True)
    owner_aadhaar = Column(String(12), nullable=True)

    # Rooms
    single_bed_rooms = Column(Integer, nullable=False, default=0)
    single_bed_beds = Column(Integer, nullable=False, default=1)
    single_bed_room_rate = Column(Numeric(10, 2), nullable=True)
    double_bed_rooms = Column(Integer, nullable=False, default=0)
    double_bed_beds = Column(Integer, nullable=False, default=2)
    double_bed_room_rate = Column(Numeric(10, 2), nullable=True)
    family_suites = Column(Integer, nullable=False, default=0)
    family_suite_beds = Column(Integer, nullable=False, default=4)
    family_suite_rate = Column(Numeric(10, 2), nullable=True)
    attached_washrooms = Column(Integer, nullable=False, default=0)
    total_rooms = Column(Integer, nullable=False, default=0)
    total_beds = Column(Integer, nullable=False, default=0)
    highest_room_rate = Column(Numeric(10, 2), nullable=True)

    # Fee breakdown (persisted contract; never recomputed after submission)
    base_fee = Column(Numeric(12, 2), nullable=True)
    total_before_discounts = Column(Numeric(12, 2), nullable=True)
    validity_discount = Column(Numeric(12, 2), nullable=True)
    female_owner_discount = Column(Numeric(12, 2), nullable=True)
    special_subdivision_discount = Column(Numeric(12, 2), nullable=True)
    total_discount = Column(Numeric(12, 2), nullable=True)
    total_fee = Column(Numeric(12, 2), nullable=True)

    # Dealing Assistant
    da_id = Column(String(255), nullable=True)
    da_review_date = Column(DateTime(timezone=True), nullable=True)
    da_forwarded_date = Column(DateTime(timezone=True), nullable=True)
    da_remarks = Column(Text, nullable=True)

    # District Tourism Development Officer
    dtdo_id = Column(String(255), nullable=True)
    dtdo_review_date = Column(DateTime(timezone=True), nullable=True)
    dtdo_remarks = Column(Text, nullable=True)
    district_notes = Column(Text, nullable=True)
    clarification_requested = Column(Text, nullable=True)
    rejection_reason = Column(Text, nullable=True)

    # Site inspection
    site_inspection_scheduled_date = Column(DateTime(timezone=True), nullable=True)
    site_inspection_officer_id = Column(String(255), nullable=True)
    site_inspection_completed_date = Column(DateTime(timezone=True), nullable=True)
    site_inspection_outcome = Column(
        Enum(InspectionOutcome, name="inspection_outcome", native_enum=False), nullable=True,
    )
    site_inspection_notes = Column(Text, nullable=True)

    # Service linkage
    parent_application_id = Column(
        String(36), ForeignKey("homestay_applications.id"), nullable=True, index=True,
    )
    parent_application_number = Column(String(50), nullable=True)
    parent_certificate_number = Column(String(50), nullable=True)
    service_context = Column(JSON, nullable=True)

    # Certificate
    certificate_number = Column(String(50), unique=True, nullable=True)
    certificate_issued_date = Column(DateTime(timezone=True), nullable=True)
    certificate_expiry_date = Column(DateTime(timezone=True), nullable=True)

    submitted_at = Column(DateTime(timezone=True), nullable=True)
    approved_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False,
    )

    documents = relationship(
        "Document",
        back_populates="application",
        cascade="all, delete-orphan",
        order_by="Document.created_at",
    )
    actions = relationship(
        "ApplicationAction",
        back_populates="application",
        order_by="ApplicationAction.created_at",
    )

    def __repr__(self):
        return (
            f"<HomestayApplication(id='{self.id}', number='{self.application_number}', "
            f"status='{self.status}')>"
        )


class Document(Base):
    """Uploaded file attached to an application, with its verification state."""

    __tablename__ = "documents"

    id = Column(String(36), primary_key=True, default=_new_id)
    application_id = Column(
        String(36), ForeignKey("homestay_applications.id"), nullable=False, index=True,
    )
    document_type = Column(
        Enum(DocumentType, name="document_type", native_enum=False), nullable=False,
    )
    file_name = Column(String(255), nullable=False)
    file_path = Column(String(500), nullable=False)
    file_size = Column(Integer, nullable=False)
    mime_type = Column(String(100), nullable=True)
    verification_status = Column(
        Enum(DocumentVerificationStatus, name="document_verification_status", native_enum=False),
        nullable=False,
        default=DocumentVerificationStatus.PENDING,
    )
    verification_notes = Column(Text, nullable=True)
    verified_by = Column(String(255), nullable=True)
    verification_date = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    application = relationship("HomestayApplication", back_populates="documents")

    def __repr__(self):
        return f"<Document(id='{self.id}', type='{self.document_type}', status='{self.verification_status}')>"


class ApplicationAction(Base):
    """Append-only record of one status transition."""

    __tablename__ = "application_actions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    application_id = Column(
        String(36), ForeignKey("homestay_applications.id"), nullable=False, index=True,
    )
    actor_id = Column(String(255), nullable=False)
    actor_role = Column(String(50), nullable=True)
    action = Column(String(50), nullable=False)
    previous_status = Column(String(50), nullable=True)
    new_status = Column(String(50), nullable=True)
    feedback = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    application = relationship("HomestayApplication", back_populates="actions")

    def __repr__(self):
        return (
            f"<ApplicationAction(id={self.id}, action='{self.action}', "
            f"{self.previous_status}->{self.new_status})>"
        )


class SystemSetting(Base):
    """Admin-editable key/value configuration."""

    __tablename__ = "system_settings"

    key = Column(String(100), primary_key=True)
    value = Column(JSON, nullable=False)
    updated_by = Column(String(255), nullable=True)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False,
    )

    def __repr__(self):
        return f"<SystemSetting(key='{self.key}')>"
