# This project was developed with assistance from AI tools.
__version__ = "0.1.0"

from .database import Base, DatabaseService, get_db, get_db_service
from .enums import (
    ApplicationKind,
    ApplicationStatus,
    Category,
    DocumentType,
    DocumentVerificationStatus,
    InspectionOutcome,
    LocationType,
    NotificationEvent,
    OwnerGender,
    UserRole,
)
from .models import (
    ApplicationAction,
    Document,
    HomestayApplication,
    SystemSetting,
    User,
)

__all__ = [
    "Base",
    "DatabaseService",
    "get_db",
    "get_db_service",
    "__version__",
    # Enums
    "ApplicationKind",
    "ApplicationStatus",
    "Category",
    "DocumentType",
    "DocumentVerificationStatus",
    "InspectionOutcome",
    "LocationType",
    "NotificationEvent",
    "OwnerGender",
    "UserRole",
    # Models
    "ApplicationAction",
    "Document",
    "HomestayApplication",
    "SystemSetting",
    "User",
]
