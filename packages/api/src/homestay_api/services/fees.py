# This project was developed with assistance from AI tools.
"""Fee and category engine.

Pure math, no I/O. Room totals are always derived here so no write path can
persist a total that disagrees with the per-type counts. Money is handled as
``Decimal`` and rounded half-up to paise at the point each value is computed,
never re-rounded afterwards.
"""

import logging
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from homestay_db.enums import ApplicationKind, Category, LocationType, OwnerGender

from ..schemas.fees import FeeBreakdown
from ..schemas.settings import CategoryRateBands, FeeSchedule
from .errors import ApplicationValidationError

logger = logging.getLogger(__name__)

MAX_ROOMS_ALLOWED = 6
MAX_BEDS_ALLOWED = 12
MAX_FAMILY_SUITES = 3
MIN_ROOM_RATE = Decimal("100")
ALLOWED_VALIDITY_YEARS = (1, 3)

DEFAULT_BEDS_PER_ROOM = {"single": 1, "double": 2, "suite": 4}

_PAISE = Decimal("0.01")
_HUNDRED = Decimal("100")
_ZERO = Decimal("0.00")


def _money(value: Decimal) -> Decimal:
    return Decimal(value).quantize(_PAISE, rounding=ROUND_HALF_UP)


def format_rupees(value: Decimal) -> str:
    """Render an amount the way the portal shows it (``₹3,000`` / ``₹3,000.50``)."""
    value = Decimal(value)
    if value == value.to_integral_value():
        return f"₹{value:,.0f}"
    return f"₹{value:,.2f}"


# ---------------------------------------------------------------------------
# Room configuration
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RoomType:
    key: str
    label: str
    count_field: str
    beds_field: str
    rate_field: str


ROOM_TYPES = (
    RoomType("single", "Single bed room", "single_bed_rooms", "single_bed_beds", "single_bed_room_rate"),
    RoomType("double", "Double bed room", "double_bed_rooms", "double_bed_beds", "double_bed_room_rate"),
    RoomType("suite", "Family suite", "family_suites", "family_suite_beds", "family_suite_rate"),
)


@dataclass(frozen=True)
class RoomConfiguration:
    """Declared rooms. Totals are properties, never inputs."""

    single_bed_rooms: int = 0
    single_bed_beds: int = DEFAULT_BEDS_PER_ROOM["single"]
    single_bed_room_rate: Decimal | None = None
    double_bed_rooms: int = 0
    double_bed_beds: int = DEFAULT_BEDS_PER_ROOM["double"]
    double_bed_room_rate: Decimal | None = None
    family_suites: int = 0
    family_suite_beds: int = DEFAULT_BEDS_PER_ROOM["suite"]
    family_suite_rate: Decimal | None = None
    attached_washrooms: int = 0

    @classmethod
    def from_source(cls, source) -> "RoomConfiguration":
        """Build from any object or mapping exposing the room fields."""
        get = source.get if isinstance(source, dict) else lambda name, default=None: getattr(source, name, default)
        values = {}
        for room_type in ROOM_TYPES:
            values[room_type.count_field] = get(room_type.count_field) or 0
            beds = get(room_type.beds_field)
            values[room_type.beds_field] = beds if beds is not None else DEFAULT_BEDS_PER_ROOM[room_type.key]
            rate = get(room_type.rate_field)
            values[room_type.rate_field] = Decimal(rate) if rate is not None else None
        values["attached_washrooms"] = get("attached_washrooms") or 0
        return cls(**values)

    def count(self, room_type: RoomType) -> int:
        return getattr(self, room_type.count_field)

    def beds(self, room_type: RoomType) -> int:
        return getattr(self, room_type.beds_field)

    def rate(self, room_type: RoomType) -> Decimal | None:
        return getattr(self, room_type.rate_field)

    @property
    def total_rooms(self) -> int:
        return sum(self.count(rt) for rt in ROOM_TYPES)

    @property
    def total_beds(self) -> int:
        return sum(self.count(rt) * self.beds(rt) for rt in ROOM_TYPES)

    @property
    def highest_room_rate(self) -> Decimal | None:
        rates = [self.rate(rt) for rt in ROOM_TYPES if self.count(rt) > 0 and self.rate(rt) is not None]
        return max(rates) if rates else None

    def derived_fields(self) -> dict:
        """Column values persisted alongside the declared counts."""
        return {
            "total_rooms": self.total_rooms,
            "total_beds": self.total_beds,
            "highest_room_rate": self.highest_room_rate,
        }


def validate_room_configuration(rooms: RoomConfiguration) -> None:
    """Raise ApplicationValidationError on the first rule the rooms break."""
    for room_type in ROOM_TYPES:
        if rooms.count(room_type) < 0:
            raise ApplicationValidationError(f"{room_type.label} count cannot be negative.")
        if rooms.count(room_type) > 0 and rooms.beds(room_type) < 1:
            raise ApplicationValidationError(
                f"{room_type.label}s must have at least one bed each."
            )

    total_rooms = rooms.total_rooms
    if total_rooms < 1:
        raise ApplicationValidationError("Add at least one room before submitting.")
    if total_rooms > MAX_ROOMS_ALLOWED:
        raise ApplicationValidationError(
            f"A homestay can register at most {MAX_ROOMS_ALLOWED} rooms; "
            f"{total_rooms} rooms were declared."
        )
    if rooms.family_suites > MAX_FAMILY_SUITES:
        raise ApplicationValidationError(
            f"A homestay can register at most {MAX_FAMILY_SUITES} family suites."
        )
    if rooms.total_beds > MAX_BEDS_ALLOWED:
        raise ApplicationValidationError(
            f"A homestay can offer at most {MAX_BEDS_ALLOWED} beds; "
            f"{rooms.total_beds} beds were declared."
        )

    for room_type in ROOM_TYPES:
        if rooms.count(room_type) == 0:
            continue
        rate = rooms.rate(room_type)
        if rate is None or rate < MIN_ROOM_RATE:
            raise ApplicationValidationError(
                f"{room_type.label} rate must be at least {format_rupees(MIN_ROOM_RATE)} "
                f"when {room_type.key} rooms are configured."
            )

    if rooms.attached_washrooms < total_rooms:
        raise ApplicationValidationError(
            "Every room must have its own washroom. Increase attached washrooms "
            "to at least the total number of rooms."
        )


# ---------------------------------------------------------------------------
# Category vs tariff
# ---------------------------------------------------------------------------


def _describe_band(bands: CategoryRateBands, category: Category) -> str:
    band = bands.band_for(category)
    if band.max_rate is None:
        return f"{format_rupees(band.min_rate)} and above"
    return f"{format_rupees(band.min_rate)} to {format_rupees(band.max_rate - 1)}"


def suggest_category(rate: Decimal, bands: CategoryRateBands) -> Category | None:
    """Return the category whose band holds ``rate``, if any."""
    for category, band in bands.ordered():
        if band.contains(rate):
            return category
    return None


def validate_category(category: Category, rate: Decimal | None, bands: CategoryRateBands) -> None:
    """Reject a category whose band does not hold the highest room rate."""
    if rate is None:
        raise ApplicationValidationError("Enter a nightly rate for at least one room type.")
    if bands.band_for(category).contains(rate):
        return

    fitting = suggest_category(rate, bands)
    chosen = category.value.title()
    if fitting is None:
        lowest = bands.silver.min_rate
        raise ApplicationValidationError(
            f"Your highest room rate of {format_rupees(rate)} is below the minimum "
            f"tariff of {format_rupees(lowest)} for any category."
        )
    raise ApplicationValidationError(
        f"Your highest room rate of {format_rupees(rate)} falls under the "
        f"{fitting.value.title()} category ({_describe_band(bands, fitting)}). "
        f"Please switch to {fitting.value.title()} or adjust your room rates to fit "
        f"{chosen} ({_describe_band(bands, category)})."
    )


def validate_rate_bands(bands: CategoryRateBands) -> None:
    """Check an edited band set before it is saved.

    Bands must be ordered, non-overlapping and contiguous: each band's
    exclusive maximum is the next band's minimum. Only the top band may be
    unbounded.
    """
    ordered = bands.ordered()
    for index, (category, band) in enumerate(ordered):
        is_top = index == len(ordered) - 1
        label = category.value.title()
        if band.max_rate is None and not is_top:
            raise ApplicationValidationError(f"{label} band needs a maximum rate.")
        if band.max_rate is not None and band.max_rate <= band.min_rate:
            raise ApplicationValidationError(
                f"{label} band maximum must be greater than its minimum."
            )
        if index == 0:
            continue
        prev_category, prev_band = ordered[index - 1]
        if prev_band.max_rate > band.min_rate:
            raise ApplicationValidationError(
                f"{prev_category.value.title()} and {label} bands overlap: "
                f"{prev_category.value.title()} ends at {format_rupees(prev_band.max_rate)} "
                f"but {label} starts at {format_rupees(band.min_rate)}."
            )
        if prev_band.max_rate < band.min_rate:
            raise ApplicationValidationError(
                f"Rates from {format_rupees(prev_band.max_rate)} to "
                f"{format_rupees(band.min_rate - 1)} fall between the "
                f"{prev_category.value.title()} and {label} bands."
            )


# ---------------------------------------------------------------------------
# Fee
# ---------------------------------------------------------------------------


def calculate_fee(
    *,
    category: Category,
    location_type: LocationType,
    validity_years: int,
    owner_gender: OwnerGender | None,
    is_special_subdivision: bool,
    schedule: FeeSchedule,
) -> FeeBreakdown:
    """Compute the registration fee.

    Each discount is a percentage of ``total_before_discounts``; they are
    summed, not compounded. A sum larger than the fee is capped and flagged
    as a configuration error.
    """
    if validity_years not in ALLOWED_VALIDITY_YEARS:
        raise ApplicationValidationError(
            f"Certificate validity must be 1 or 3 years, got {validity_years}."
        )
    try:
        annual = schedule.base_fees[category][location_type]
    except KeyError as exc:
        raise ApplicationValidationError(
            f"No fee is configured for {category.value} properties in "
            f"{location_type.value.upper()} areas."
        ) from exc

    base_fee = _money(annual)
    total_before = _money(base_fee * validity_years)

    def _percent_of_total(percent: Decimal) -> Decimal:
        return _money(total_before * percent / _HUNDRED)

    validity_discount = (
        _percent_of_total(schedule.validity_discount_percent)
        if validity_years == schedule.discounted_validity_years
        else _ZERO
    )
    female_discount = (
        _percent_of_total(schedule.female_owner_discount_percent)
        if owner_gender == OwnerGender.FEMALE
        else _ZERO
    )
    subdivision_discount = (
        _percent_of_total(schedule.special_subdivision_discount_percent)
        if is_special_subdivision
        else _ZERO
    )

    total_discount = _money(validity_discount + female_discount + subdivision_discount)
    clamped = False
    if total_discount > total_before:
        logger.warning(
            "Configured discounts %s exceed fee %s for %s/%s; capping at the fee",
            total_discount,
            total_before,
            category.value,
            location_type.value,
        )
        total_discount = total_before
        clamped = True

    return FeeBreakdown(
        base_fee=base_fee,
        total_before_discounts=total_before,
        validity_discount=validity_discount,
        female_owner_discount=female_discount,
        special_subdivision_discount=subdivision_discount,
        total_discount=total_discount,
        total_fee=_money(total_before - total_discount),
        discount_clamped=clamped,
    )


def waived_fee() -> FeeBreakdown:
    """Zero breakdown for requests that never require a payment."""
    return FeeBreakdown(
        base_fee=_ZERO,
        total_before_discounts=_ZERO,
        validity_discount=_ZERO,
        female_owner_discount=_ZERO,
        special_subdivision_discount=_ZERO,
        total_discount=_ZERO,
        total_fee=_ZERO,
    )


def fee_for_application(app, schedule: FeeSchedule) -> FeeBreakdown:
    """Fee for a stored or candidate application's persisted inputs."""
    if app.application_kind in ApplicationKind.fee_exempt_kinds():
        return waived_fee()
    return calculate_fee(
        category=app.category,
        location_type=app.location_type,
        validity_years=app.certificate_validity_years or 1,
        owner_gender=app.owner_gender,
        is_special_subdivision=bool(app.is_special_subdivision),
        schedule=schedule,
    )


def fee_fields(breakdown: FeeBreakdown) -> dict:
    """Column values to persist for a breakdown."""
    return breakdown.model_dump(exclude={"discount_clamped"})
