# This project was developed with assistance from AI tools.
"""Document completeness gate and upload policy checks.

Pure functions over document records. The gate answers one question: has a
reviewer looked at every document? It does not judge whether rejections
disqualify the application; that stays a human decision.
"""

from collections import Counter
from dataclasses import dataclass
from decimal import Decimal
from pathlib import PurePosixPath

from homestay_db.enums import ApplicationKind, DocumentType, DocumentVerificationStatus

from ..schemas.settings import UploadCategoryPolicy, UploadPolicy
from .errors import ApplicationValidationError, IncompleteDocumentsError

_BYTES_PER_MB = Decimal(1024 * 1024)
_LENIENT_MIME_TYPES = frozenset({"", "application/octet-stream"})
_MIME_ALIASES = {"image/jpg": "image/jpeg", "image/pjpeg": "image/jpeg"}

REQUIRED_DOCUMENTS: dict[ApplicationKind, dict[DocumentType, int]] = {
    ApplicationKind.NEW_REGISTRATION: {
        DocumentType.REVENUE_PAPERS: 1,
        DocumentType.AFFIDAVIT_SECTION_29: 1,
        DocumentType.UNDERTAKING_FORM_C: 1,
        DocumentType.PROPERTY_PHOTO: 2,
    },
}

_DOCUMENT_LABELS = {
    DocumentType.REVENUE_PAPERS: "revenue papers",
    DocumentType.AFFIDAVIT_SECTION_29: "Section 29 affidavit",
    DocumentType.UNDERTAKING_FORM_C: "Form-C undertaking",
    DocumentType.PROPERTY_PHOTO: "property photo",
}


# ---------------------------------------------------------------------------
# Completeness gate
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class GateDecision:
    admitted: bool
    pending_files: tuple[str, ...] = ()
    message: str | None = None

    @property
    def pending_count(self) -> int:
        return len(self.pending_files)


def evaluate_completeness(documents) -> GateDecision:
    """Admit only a non-empty list with no document still ``pending``."""
    if not documents:
        return GateDecision(
            admitted=False,
            message="Upload and verify required documents before forwarding.",
        )
    pending = tuple(
        doc.file_name
        for doc in documents
        if doc.verification_status == DocumentVerificationStatus.PENDING
    )
    if pending:
        noun = "document is" if len(pending) == 1 else "documents are"
        return GateDecision(
            admitted=False,
            pending_files=pending,
            message=(
                f"{len(pending)} {noun} still pending verification "
                f"({', '.join(pending)}). Verify, reject or request correction "
                "for every document before forwarding."
            ),
        )
    return GateDecision(admitted=True)


def require_complete(documents) -> None:
    """Raise IncompleteDocumentsError when the gate denies."""
    decision = evaluate_completeness(documents)
    if not decision.admitted:
        raise IncompleteDocumentsError(
            decision.message,
            pending_count=decision.pending_count,
            pending_files=list(decision.pending_files),
        )


# ---------------------------------------------------------------------------
# Required set
# ---------------------------------------------------------------------------


def check_required_documents(kind: ApplicationKind, documents) -> None:
    """Reject a submission missing any document its kind requires."""
    required = REQUIRED_DOCUMENTS.get(kind)
    if not required:
        return
    present = Counter(_document_type(doc) for doc in documents)
    for doc_type, minimum in required.items():
        if present[doc_type] < minimum:
            label = _DOCUMENT_LABELS.get(doc_type, doc_type.value)
            if minimum == 1:
                raise ApplicationValidationError(f"Upload the {label} before submitting.")
            raise ApplicationValidationError(
                f"Upload at least {minimum} {label}s before submitting "
                f"({present[doc_type]} provided)."
            )


# ---------------------------------------------------------------------------
# Upload policy
# ---------------------------------------------------------------------------


def _document_type(doc) -> DocumentType:
    value = doc.get("document_type") if isinstance(doc, dict) else doc.document_type
    return DocumentType(value)


def _field(doc, name):
    return doc.get(name) if isinstance(doc, dict) else getattr(doc, name)


def normalize_mime(mime_type: str | None) -> str:
    """Strip parameters, lowercase and fold common aliases."""
    base = (mime_type or "").split(";", 1)[0].strip().lower()
    return _MIME_ALIASES.get(base, base)


def _format_mb(value: Decimal) -> str:
    value = Decimal(value)
    if value == value.to_integral_value():
        return f"{value:.0f} MB"
    return f"{value:.1f} MB"


def upload_category(document_type: str, mime_type: str | None) -> str:
    """``photos`` for images, ``documents`` for everything else."""
    type_key = (document_type or "").lower()
    if "photo" in type_key or "image" in type_key:
        return "photos"
    if normalize_mime(mime_type).startswith("image/"):
        return "photos"
    return "documents"


def check_file(policy: UploadPolicy, *, document_type: str, file_name: str, file_size: int, mime_type: str | None) -> None:
    """Validate one file against its category's allow-lists and size ceiling."""
    category = upload_category(document_type, mime_type)
    rules: UploadCategoryPolicy = getattr(policy, category)

    if Decimal(file_size) > rules.max_file_size_mb * _BYTES_PER_MB:
        raise ApplicationValidationError(
            f"{file_name} exceeds the {_format_mb(rules.max_file_size_mb)} limit."
        )

    mime = normalize_mime(mime_type)
    allowed_mimes = {normalize_mime(m) for m in rules.allowed_mime_types}
    if mime not in _LENIENT_MIME_TYPES and mime not in allowed_mimes:
        raise ApplicationValidationError(
            f"{file_name} has an unsupported file type ({mime}). "
            f"Allowed types: {', '.join(rules.allowed_mime_types)}."
        )

    extension = PurePosixPath(file_name).suffix.lower()
    allowed_extensions = {e.lower() for e in rules.allowed_extensions}
    if extension not in allowed_extensions:
        raise ApplicationValidationError(
            f"{file_name} must use one of the following extensions: "
            f"{', '.join(rules.allowed_extensions)}."
        )


def check_upload_policy(policy: UploadPolicy, documents) -> None:
    """Validate every file and the per-application total."""
    total_bytes = 0
    for doc in documents:
        file_size = _field(doc, "file_size") or 0
        check_file(
            policy,
            document_type=str(_document_type(doc).value),
            file_name=_field(doc, "file_name"),
            file_size=file_size,
            mime_type=_field(doc, "mime_type"),
        )
        total_bytes += file_size

    if Decimal(total_bytes) > policy.total_per_application_mb * _BYTES_PER_MB:
        total_mb = (Decimal(total_bytes) / _BYTES_PER_MB).quantize(Decimal("0.1"))
        raise ApplicationValidationError(
            f"Total document size {total_mb} MB exceeds the "
            f"{_format_mb(policy.total_per_application_mb)} limit per application."
        )
