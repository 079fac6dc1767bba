# This project was developed with assistance from AI tools.
"""Admin-configurable business policy schemas.

Each model carries the production defaults, so a missing or partial
``system_settings`` row still yields a complete policy.
"""

from decimal import Decimal

from homestay_db.enums import Category, LocationType
from pydantic import BaseModel, Field


class RateBand(BaseModel):
    """Half-open nightly tariff range ``[min_rate, max_rate)`` for one category."""

    min_rate: Decimal = Field(ge=0)
    max_rate: Decimal | None = Field(
        default=None,
        description="Exclusive upper bound. Null only for the top category.",
    )

    def contains(self, rate: Decimal) -> bool:
        if rate < self.min_rate:
            return False
        return self.max_rate is None or rate < self.max_rate


class CategoryRateBands(BaseModel):
    """Tariff bands for all three categories, lowest first."""

    silver: RateBand = Field(default_factory=lambda: RateBand(min_rate=Decimal("100"), max_rate=Decimal("3000")))
    gold: RateBand = Field(default_factory=lambda: RateBand(min_rate=Decimal("3000"), max_rate=Decimal("10001")))
    diamond: RateBand = Field(default_factory=lambda: RateBand(min_rate=Decimal("10001"), max_rate=None))

    def band_for(self, category: Category) -> RateBand:
        return getattr(self, category.value)

    def ordered(self) -> list[tuple[Category, RateBand]]:
        return [(c, self.band_for(c)) for c in (Category.SILVER, Category.GOLD, Category.DIAMOND)]


def _default_base_fees() -> dict[Category, dict[LocationType, Decimal]]:
    return {
        Category.DIAMOND: {
            LocationType.MC: Decimal("18000"),
            LocationType.TCP: Decimal("12000"),
            LocationType.GP: Decimal("10000"),
        },
        Category.GOLD: {
            LocationType.MC: Decimal("12000"),
            LocationType.TCP: Decimal("8000"),
            LocationType.GP: Decimal("6000"),
        },
        Category.SILVER: {
            LocationType.MC: Decimal("8000"),
            LocationType.TCP: Decimal("5000"),
            LocationType.GP: Decimal("3000"),
        },
    }


class FeeSchedule(BaseModel):
    """Annual base fee matrix and discount percentages."""

    base_fees: dict[Category, dict[LocationType, Decimal]] = Field(
        default_factory=_default_base_fees,
        description="Annual fee by category and location type (mc / tcp / gp).",
    )
    discounted_validity_years: int = Field(default=3, ge=1)
    validity_discount_percent: Decimal = Field(default=Decimal("10"), ge=0, le=100)
    female_owner_discount_percent: Decimal = Field(default=Decimal("5"), ge=0, le=100)
    special_subdivision_discount_percent: Decimal = Field(default=Decimal("50"), ge=0, le=100)


class UploadCategoryPolicy(BaseModel):
    """Allow-lists and per-file ceiling for one upload category."""

    allowed_mime_types: list[str]
    allowed_extensions: list[str]
    max_file_size_mb: Decimal = Field(gt=0)


def _default_documents_policy() -> UploadCategoryPolicy:
    return UploadCategoryPolicy(
        allowed_mime_types=["application/pdf"],
        allowed_extensions=[".pdf"],
        max_file_size_mb=Decimal("2"),
    )


def _default_photos_policy() -> UploadCategoryPolicy:
    return UploadCategoryPolicy(
        allowed_mime_types=["image/jpeg", "image/png"],
        allowed_extensions=[".jpg", ".jpeg", ".png"],
        max_file_size_mb=Decimal("2"),
    )


class UploadPolicy(BaseModel):
    """Upload limits, configured separately for documents and photos."""

    documents: UploadCategoryPolicy = Field(default_factory=_default_documents_policy)
    photos: UploadCategoryPolicy = Field(default_factory=_default_photos_policy)
    total_per_application_mb: Decimal = Field(default=Decimal("20"), gt=0)


class WorkflowFlags(BaseModel):
    """Review-path switches."""

    da_send_back_enabled: bool = False
    legacy_dtdo_forward_enabled: bool = False


class SettingsSnapshot(BaseModel):
    """Everything the admin console shows on the policy page."""

    upload_policy: UploadPolicy
    category_rate_bands: CategoryRateBands
    fee_schedule: FeeSchedule
    flags: WorkflowFlags
