"""
Enumeration definitions for the Survey Quota backend.

All enums inherit from both `str` and `Enum` so they serialise as their plain
string values in Pydantic models and JSON responses, and so values read back
from the database (stored as text) compare equal to the enum members.

Closed enumerations are used wherever the dashboard sends a fixed choice:
an unrecognised quota mode or geography is rejected by request validation and
never reaches the planner.
"""

from enum import Enum


class GeographyScope(str, Enum):
    """
    Level at which targeting and quotas apply.

    Values match the dashboard's "Geography Scope" select.

    - National: all eight states and territories
    - State: a single state; geography detail holds the abbreviation (NSW, TAS, ...)
    - Federal Electorate / State Electorate: geography detail holds the electorate name
    """
    NATIONAL = "National"
    STATE = "State"
    FEDERAL_ELECTORATE = "Federal Electorate"
    STATE_ELECTORATE = "State Electorate"

    @property
    def is_electorate(self) -> bool:
        return self in (GeographyScope.FEDERAL_ELECTORATE, GeographyScope.STATE_ELECTORATE)


class QuotaMode(str, Enum):
    """
    Which demographic dimensions are interlocked (cross-multiplied).

    Each mode maps to exactly one structural template in the quota planner
    and to exactly one row of the complexity table.
    """
    NON_INTERLOCKING = "non-interlocking"
    FULL_INTERLOCKING = "full-interlocking"
    AGE_GENDER_LOCATION = "age-gender-location"
    AGE_GENDER_STATE = "age-gender-state"
    STATE_LOCATION = "state-location"
    AGE_GENDER_ONLY = "age-gender-only"
    TAS_AGE_GENDER_ONLY = "tas-age-gender-only"
    TAS_NON_INTERLOCKING = "tas-non-interlocking"
    TAS_INTERLOCKING = "tas-interlocking"


class ComplexityLevel(str, Enum):
    """
    Fielding difficulty signalled to the dashboard.

    - low: Standard sample size
    - medium: 2-way interlocking, 20-30% larger sample
    - high: Tasmania interlocking, 30-50% larger sample
    - extreme: Full interlocking, 50-100% larger sample
    """
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    EXTREME = "extreme"


class QuotaCategory(str, Enum):
    """
    Demographic dimensions combined by a quota cell or cell group.

    The three single-dimension categories are base categories and expand
    into concrete cells from the reference tables. The composite categories
    are declared by structural templates with their cross-product size, but
    are not materialised into individual cells.
    """
    AGE_GENDER = "Age/Gender"
    STATE = "State"
    LOCATION = "Location"
    AGE_GENDER_STATE = "Age/Gender/State"
    AGE_GENDER_LOCATION = "Age/Gender/Location"
    STATE_LOCATION = "State/Location"
    AGE_GENDER_STATE_LOCATION = "Age/Gender/State/Location"

    @property
    def is_composite(self) -> bool:
        return self not in (QuotaCategory.AGE_GENDER, QuotaCategory.STATE, QuotaCategory.LOCATION)


class AllocationStatus(str, Enum):
    """
    Status of a line item's allocation against one quota segment.

    Stored in quota_allocations.status. Recording completes moves an
    active allocation to completed when the quota is met exactly and to
    overquota once it is exceeded. Paused allocations keep their status.
    """
    ACTIVE = "active"
    COMPLETED = "completed"
    OVERQUOTA = "overquota"
    PAUSED = "paused"


class LineItemStatus(str, Enum):
    """Status of a line item (line_items.status)."""
    DRAFT = "draft"
    ACTIVE = "active"
    PAUSED = "paused"
    COMPLETED = "completed"
    OVERQUOTA = "overquota"
    CANCELLED = "cancelled"


class ChannelType(str, Enum):
    """Fieldwork channel a line item is sourced through."""
    PANEL = "panel"
    SMS = "sms"
    VOICE = "voice"
