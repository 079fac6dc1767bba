# This project was developed with assistance from AI tools.
"""District routing.

Some tehsils are processed by a district office other than the one their
revenue district names. The resolved office is computed once at submission
and stored in ``district``; later table edits never move filed applications.
"""

_LAHAUL_SPITI_NAMES = frozenset({
    "lahaul and spiti",
    "lahaul & spiti",
    "lahaul-spiti",
    "lahaul spiti",
})

# district -> {tehsil -> processing office}
_TEHSIL_OVERRIDES: dict[str, dict[str, str]] = {
    "chamba": {
        "pangi": "Pangi",
        "bharmour": "Bharmour",
        "holi": "Bharmour",
    },
}
_LAHAUL_SPITI_OVERRIDES = {
    "kaza": "Lahaul-Spiti (Kaza)",
    "spiti": "Lahaul-Spiti (Kaza)",
}

# Offices whose applicants receive the special sub-division fee concession.
SPECIAL_SUBDIVISIONS = frozenset({"Pangi"})


def _normalize(value: str | None) -> str:
    return (value or "").strip().lower()


def resolve_district(district: str, tehsil: str | None) -> str:
    """Return the office that processes applications from ``district``/``tehsil``."""
    key = _normalize(district)
    tehsil_key = _normalize(tehsil)

    if key in _LAHAUL_SPITI_NAMES:
        return _LAHAUL_SPITI_OVERRIDES.get(tehsil_key, "Lahaul")

    overrides = _TEHSIL_OVERRIDES.get(key)
    if overrides is not None:
        return overrides.get(tehsil_key, district.strip().title())

    return district


def is_special_subdivision(resolved_district: str) -> bool:
    return resolved_district in SPECIAL_SUBDIVISIONS
