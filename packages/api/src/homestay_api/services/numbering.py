# This project was developed with assistance from AI tools.
"""Application and certificate numbers.

``HP-HS-2025-SML-000042`` identifies an application; ``HP-HST-2025-000042``
a certificate. Sequences come from storage; a number already in use moves on
to the next sequence value instead of failing the submission.
"""

import logging
import re
from datetime import UTC, datetime

from ..core.config import settings
from .errors import NumberAllocationError

logger = logging.getLogger(__name__)

APPLICATION_PREFIX = "HP-HS"
CERTIFICATE_PREFIX = "HP-HST"
FALLBACK_DISTRICT_CODE = "HPG"

DISTRICT_CODES: dict[str, str] = {
    "shimla": "SML",
    "kullu": "KUL",
    "kangra": "KNG",
    "dharamsala": "KNG",
    "hamirpur": "HMP",
    "una": "UNA",
    "mandi": "MDI",
    "chamba": "CHM",
    "bharmour": "BRM",
    "lahaul": "LHL",
    "lahaul & spiti": "LHS",
    "lahaul and spiti": "LHS",
    "kinnaur": "KNR",
    "sirmaur": "SMR",
    "solan": "SOL",
    "bilaspur": "BIL",
    "pangi": "PNG",
    "kaza": "KZA",
    "lahaul-spiti (kaza)": "KZA",
}


def district_code(district: str | None) -> str:
    """Three-letter office code used in application numbers."""
    key = (district or "").strip().lower()
    if key in DISTRICT_CODES:
        return DISTRICT_CODES[key]
    letters = re.sub(r"[^a-z]", "", key)
    if len(letters) >= 3:
        return letters[:3].upper()
    return FALLBACK_DISTRICT_CODE


def format_application_number(district: str | None, sequence: int, year: int) -> str:
    return f"{APPLICATION_PREFIX}-{year}-{district_code(district)}-{sequence:06d}"


def format_certificate_number(sequence: int, year: int) -> str:
    return f"{CERTIFICATE_PREFIX}-{year}-{sequence:06d}"


async def allocate_application_number(storage, district: str | None, now: datetime | None = None) -> str:
    """Reserve an unused application number for ``district``."""
    year = (now or datetime.now(UTC)).year
    sequence = await storage.next_application_sequence()
    for _ in range(settings.APPLICATION_NUMBER_MAX_ATTEMPTS):
        candidate = format_application_number(district, sequence, year)
        if not await storage.application_number_exists(candidate):
            return candidate
        logger.warning("Application number %s already taken, trying next sequence", candidate)
        sequence += 1
    raise NumberAllocationError(
        f"Could not allocate an application number for {district!r} after "
        f"{settings.APPLICATION_NUMBER_MAX_ATTEMPTS} attempts"
    )


async def allocate_certificate_number(storage, now: datetime | None = None) -> str:
    """Reserve an unused certificate number."""
    year = (now or datetime.now(UTC)).year
    sequence = await storage.next_certificate_sequence()
    for _ in range(settings.APPLICATION_NUMBER_MAX_ATTEMPTS):
        candidate = format_certificate_number(sequence, year)
        if not await storage.certificate_number_exists(candidate):
            return candidate
        logger.warning("Certificate number %s already taken, trying next sequence", candidate)
        sequence += 1
    raise NumberAllocationError(
        f"Could not allocate a certificate number after "
        f"{settings.APPLICATION_NUMBER_MAX_ATTEMPTS} attempts"
    )
