"""
Australian demographic reference tables for quota planning.

Three static tables feed the quota planner:
- AGE_GENDER_SEGMENTS: 6 age bands × 2 genders = 12 rows
- STATE_SEGMENTS: 8 states and territories with population shares
- LOCATION_SEGMENTS: Major Cities / Inner Regional / Outer Regional-Remote

The codes are the panel provider's targeting codes and must not change.

State shares are kept exactly as supplied by the census extract. They sum to
100.7, not 100; they are deliberately left unnormalised because the panel
provider reconciles its own quota maths against these figures.
"""

from dataclasses import dataclass
from typing import Dict, Tuple


@dataclass(frozen=True)
class AgeGenderSegment:
    name: str
    code: str


@dataclass(frozen=True)
class StateSegment:
    abbreviation: str
    name: str
    code: str
    percentage: float


@dataclass(frozen=True)
class LocationSegment:
    name: str
    code: str
    percentage: float


# =============================================================================
# Age/Gender
# =============================================================================

AGE_BANDS: Tuple[str, ...] = ("18-24", "25-34", "35-44", "45-54", "55-64", "65+")
GENDERS: Tuple[str, ...] = ("Male", "Female")


def _age_gender_code(band: str, gender: str) -> str:
    band_token = band.replace("+", "_PLUS").replace("-", "_")
    return f"AGE_{band_token}_{gender.upper()}"


AGE_GENDER_SEGMENTS: Tuple[AgeGenderSegment, ...] = tuple(
    AgeGenderSegment(name=f"{band} {gender}", code=_age_gender_code(band, gender))
    for band in AGE_BANDS
    for gender in GENDERS
)

# Each age/gender cell carries an equal share when not split further
AGE_GENDER_POPULATION_PERCENT: float = round(100 / len(AGE_GENDER_SEGMENTS), 2)


# =============================================================================
# States & Territories
# =============================================================================

STATE_SEGMENTS: Tuple[StateSegment, ...] = (
    StateSegment("NSW", "New South Wales", "STATE_NSW", 32.0),
    StateSegment("VIC", "Victoria", "STATE_VIC", 26.0),
    StateSegment("QLD", "Queensland", "STATE_QLD", 20.0),
    StateSegment("WA", "Western Australia", "STATE_WA", 11.0),
    StateSegment("SA", "South Australia", "STATE_SA", 7.0),
    StateSegment("TAS", "Tasmania", "STATE_TAS", 2.0),
    StateSegment("NT", "Northern Territory", "STATE_NT", 1.0),
    StateSegment("ACT", "Australian Capital Territory", "STATE_ACT", 1.7),
)

_STATE_PERCENT_BY_CODE: Dict[str, float] = {
    segment.code: segment.percentage for segment in STATE_SEGMENTS
}


def state_population_percent(state_code: str) -> float:
    """Population share for a STATE_* code, 0.0 when the code is unknown."""
    return _STATE_PERCENT_BY_CODE.get(state_code, 0.0)


# =============================================================================
# Remoteness
# =============================================================================

LOCATION_SEGMENTS: Tuple[LocationSegment, ...] = (
    LocationSegment("Major Cities", "LOCATION_METRO", 72.0),
    LocationSegment("Inner Regional", "LOCATION_REGIONAL", 18.0),
    LocationSegment("Outer Regional/Remote", "LOCATION_REMOTE", 10.0),
)
