# This project was developed with assistance from AI tools.
"""
Domain enums for the homestay registration lifecycle.

Shared domain types used by both SQLAlchemy models (homestay_db package)
and Pydantic schemas (homestay_api package).
"""

import enum


class ApplicationStatus(str, enum.Enum):
    DRAFT = "draft"
    SUBMITTED = "submitted"
    UNDER_SCRUTINY = "under_scrutiny"
    LEGACY_RC_REVIEW = "legacy_rc_review"
    FORWARDED_TO_DTDO = "forwarded_to_dtdo"
    DTDO_REVIEW = "dtdo_review"
    INSPECTION_SCHEDULED = "inspection_scheduled"
    INSPECTION_UNDER_REVIEW = "inspection_under_review"
    VERIFIED_FOR_PAYMENT = "verified_for_payment"
    PAYMENT_PENDING = "payment_pending"
    REVERTED_BY_DTDO = "reverted_by_dtdo"
    OBJECTION_RAISED = "objection_raised"
    SENT_BACK_FOR_CORRECTIONS = "sent_back_for_corrections"
    REVERTED_TO_APPLICANT = "reverted_to_applicant"
    APPROVED = "approved"
    REJECTED = "rejected"

    @classmethod
    def terminal_statuses(cls) -> frozenset["ApplicationStatus"]:
        """Statuses where an application is no longer active."""
        return frozenset({cls.APPROVED, cls.REJECTED})

    @classmethod
    def correction_statuses(cls) -> frozenset["ApplicationStatus"]:
        """Statuses in which the owner may edit and resubmit."""
        return frozenset({
            cls.SENT_BACK_FOR_CORRECTIONS,
            cls.REVERTED_TO_APPLICANT,
            cls.REVERTED_BY_DTDO,
            cls.OBJECTION_RAISED,
        })

    @classmethod
    def scrutiny_statuses(cls) -> frozenset["ApplicationStatus"]:
        """Statuses in which document verifications may still change."""
        return frozenset({cls.UNDER_SCRUTINY, cls.LEGACY_RC_REVIEW})

    @classmethod
    def review_statuses(cls) -> frozenset["ApplicationStatus"]:
        """Statuses held by a reviewer, from which rejection is possible."""
        return frozenset({
            cls.SUBMITTED,
            cls.UNDER_SCRUTINY,
            cls.LEGACY_RC_REVIEW,
            cls.FORWARDED_TO_DTDO,
            cls.DTDO_REVIEW,
            cls.INSPECTION_SCHEDULED,
            cls.INSPECTION_UNDER_REVIEW,
            cls.VERIFIED_FOR_PAYMENT,
            cls.PAYMENT_PENDING,
        })


class ApplicationKind(str, enum.Enum):
    NEW_REGISTRATION = "new_registration"
    RENEWAL = "renewal"
    ADD_ROOMS = "add_rooms"
    DELETE_ROOMS = "delete_rooms"
    CANCEL_CERTIFICATE = "cancel_certificate"

    @classmethod
    def service_kinds(cls) -> frozenset["ApplicationKind"]:
        """Kinds that amend an already approved registration."""
        return frozenset({cls.RENEWAL, cls.ADD_ROOMS, cls.DELETE_ROOMS, cls.CANCEL_CERTIFICATE})

    @classmethod
    def fee_exempt_kinds(cls) -> frozenset["ApplicationKind"]:
        """Kinds that never require a payment."""
        return frozenset({cls.DELETE_ROOMS, cls.CANCEL_CERTIFICATE})


class Category(str, enum.Enum):
    SILVER = "silver"
    GOLD = "gold"
    DIAMOND = "diamond"


class LocationType(str, enum.Enum):
    MC = "mc"
    TCP = "tcp"
    GP = "gp"


class OwnerGender(str, enum.Enum):
    MALE = "male"
    FEMALE = "female"
    OTHER = "other"


class UserRole(str, enum.Enum):
    ADMIN = "admin"
    PROPERTY_OWNER = "property_owner"
    DEALING_ASSISTANT = "dealing_assistant"
    DISTRICT_TOURISM_OFFICER = "district_tourism_officer"
    PAYMENT_GATEWAY = "payment_gateway"


class DocumentType(str, enum.Enum):
    REVENUE_PAPERS = "revenue_papers"
    AFFIDAVIT_SECTION_29 = "affidavit_section_29"
    UNDERTAKING_FORM_C = "undertaking_form_c"
    PROPERTY_PHOTO = "property_photo"
    OWNER_IDENTITY_PROOF = "owner_identity_proof"
    FIRE_SAFETY_NOC = "fire_safety_noc"
    LEGACY_CERTIFICATE = "legacy_certificate"
    OTHER = "other"


class DocumentVerificationStatus(str, enum.Enum):
    PENDING = "pending"
    VERIFIED = "verified"
    REJECTED = "rejected"
    NEEDS_CORRECTION = "needs_correction"


class InspectionOutcome(str, enum.Enum):
    SATISFACTORY = "satisfactory"
    MINOR_ISSUES = "minor_issues"
    MAJOR_ISSUES = "major_issues"


class NotificationEvent(str, enum.Enum):
    APPLICATION_SUBMITTED = "application_submitted"
    FORWARDED_TO_DTDO = "forwarded_to_dtdo"
    INSPECTION_SCHEDULED = "inspection_scheduled"
    VERIFIED_FOR_PAYMENT = "verified_for_payment"
    DA_SEND_BACK = "da_send_back"
    DTDO_REVERT = "dtdo_revert"
    DTDO_OBJECTION = "dtdo_objection"
    APPLICATION_APPROVED = "application_approved"
    APPLICATION_REJECTED = "application_rejected"
