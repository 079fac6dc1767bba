# This project was developed with assistance from AI tools.
"""Fee preview request/response schemas."""

from decimal import Decimal

from homestay_db.enums import Category, LocationType, OwnerGender
from pydantic import BaseModel, Field

from .application import RoomConfigurationIn


class FeeBreakdown(BaseModel):
    """Fee components persisted on an application at submission."""

    base_fee: Decimal
    total_before_discounts: Decimal
    validity_discount: Decimal
    female_owner_discount: Decimal
    special_subdivision_discount: Decimal
    total_discount: Decimal
    total_fee: Decimal
    discount_clamped: bool = Field(
        default=False,
        description="True when configured discounts exceeded the fee and were capped.",
    )


class FeePreviewRequest(BaseModel):
    category: Category
    location_type: LocationType
    certificate_validity_years: int = Field(default=1)
    owner_gender: OwnerGender | None = None
    is_special_subdivision: bool = False
    rooms: RoomConfigurationIn | None = None


class FeePreviewResponse(BaseModel):
    fee: FeeBreakdown
    highest_room_rate: Decimal | None = None
    suggested_category: Category | None = None
    category_error: str | None = None
