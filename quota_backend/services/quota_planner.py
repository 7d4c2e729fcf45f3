"""
Quota Structure Planner Service

Derives an Australian demographic quota design from three inputs: the
geography scope, the interlocking mode and the target sample size.

Pipeline:
1. plan_quota_structure() selects the structural template for the mode
   (two modes also branch on geography) and returns the categories with
   their cell counts.
2. expand_quota_cells() turns the base categories of that structure into
   weighted QuotaCell rows using the reference tables.
3. complexity_info() looks up the complexity level and sample-size
   multiplier for the mode.
4. segment_code() derives the stable segment code stored with each cell.

build_quota_plan() runs all four and bundles the result as a QuotaPlan.

Every function here is pure: no I/O, no clock, no randomness, no shared
mutable state. Identical inputs always give equal outputs.

Known limitations, kept on purpose:
- Composite categories (Age/Gender/State, Age/Gender/Location, State/Location,
  Age/Gender/State/Location) count their full cross-product in total_cells,
  but expand_quota_cells() emits rows only for the base categories. The
  cross-product cells come from the external quota generator.
- Per-cell targets are rounded independently, so their sum can drift from
  the requested sample size. The drift is not corrected.
- Any (mode, geography) pair without its own template falls back to the
  12-cell Age/Gender structure instead of raising.
"""

import math
import re
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Union

from quota_backend.models.enums import (
    ComplexityLevel,
    GeographyScope,
    QuotaCategory,
    QuotaMode,
)
from quota_backend.models.schemas import (
    ComplexityInfo,
    GeographySelection,
    QuotaCategorySummary,
    QuotaCell,
    QuotaPlan,
    QuotaStructure,
)
from quota_backend.services.reference_data import (
    AGE_GENDER_POPULATION_PERCENT,
    AGE_GENDER_SEGMENTS,
    LOCATION_SEGMENTS,
    STATE_SEGMENTS,
)


# =============================================================================
# Complexity Table
# One row per mode. sample_size_multiplier() and complexity_level() are
# read-only projections of this table; nothing else defines multipliers.
# =============================================================================

_STANDARD = "Standard sample size"

COMPLEXITY_TABLE: Mapping[QuotaMode, ComplexityInfo] = MappingProxyType({
    QuotaMode.NON_INTERLOCKING: ComplexityInfo(
        level=ComplexityLevel.LOW, multiplier=1.0, description=_STANDARD),
    QuotaMode.AGE_GENDER_ONLY: ComplexityInfo(
        level=ComplexityLevel.LOW, multiplier=1.0, description=_STANDARD),
    QuotaMode.TAS_AGE_GENDER_ONLY: ComplexityInfo(
        level=ComplexityLevel.LOW, multiplier=1.0, description=_STANDARD),
    QuotaMode.AGE_GENDER_LOCATION: ComplexityInfo(
        level=ComplexityLevel.MEDIUM, multiplier=1.2, description="20% larger sample recommended"),
    QuotaMode.AGE_GENDER_STATE: ComplexityInfo(
        level=ComplexityLevel.MEDIUM, multiplier=1.3, description="30% larger sample recommended"),
    QuotaMode.STATE_LOCATION: ComplexityInfo(
        level=ComplexityLevel.MEDIUM, multiplier=1.3, description="30% larger sample recommended"),
    QuotaMode.TAS_NON_INTERLOCKING: ComplexityInfo(
        level=ComplexityLevel.MEDIUM, multiplier=1.3, description="30% larger sample recommended"),
    QuotaMode.TAS_INTERLOCKING: ComplexityInfo(
        level=ComplexityLevel.HIGH, multiplier=1.5, description="50% larger sample required"),
    QuotaMode.FULL_INTERLOCKING: ComplexityInfo(
        level=ComplexityLevel.EXTREME, multiplier=2.0, description="100% larger sample required"),
})

SAMPLE_SIZE_RECOMMENDATIONS: Mapping[ComplexityLevel, str] = MappingProxyType({
    ComplexityLevel.LOW: "Standard sample size (non-interlocking)",
    ComplexityLevel.MEDIUM: "20-30% larger sample recommended (2-way interlocking)",
    ComplexityLevel.HIGH: "30-50% larger sample required (Tasmania interlocking)",
    ComplexityLevel.EXTREME: "50-100% larger sample required (full interlocking)",
})

FULL_INTERLOCKING_WARNING = "Extremely complex fieldwork, 50-100% larger sample required"

AGE_GENDER_STATE_CODE_FORMAT = "AGE_XX_XX_GENDER_STATE_XXX"

# Segment code prefixes for the base categories; others are derived
_CATEGORY_PREFIXES: Dict[str, str] = {
    QuotaCategory.AGE_GENDER.value: "AGE_GENDER",
    QuotaCategory.STATE.value: "STATE",
    QuotaCategory.LOCATION.value: "LOCATION",
}

_AGE_GENDER_COUNT = len(AGE_GENDER_SEGMENTS)
_STATE_COUNT = len(STATE_SEGMENTS)
_LOCATION_COUNT = len(LOCATION_SEGMENTS)


# =============================================================================
# Helpers
# =============================================================================

def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero (8.5 -> 9, not 8)."""
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def _is_tasmania(geography_detail: Optional[str]) -> bool:
    return bool(geography_detail) and geography_detail.strip().upper() == "TAS"


def _category(
    category: QuotaCategory,
    cell_count: int,
    description: str,
    warning: Optional[str] = None,
    panel_code_format: Optional[str] = None,
) -> QuotaCategorySummary:
    return QuotaCategorySummary(
        category=category,
        cell_count=cell_count,
        description=description,
        warning=warning,
        panel_code_format=panel_code_format,
    )


def _structure(*categories: QuotaCategorySummary) -> QuotaStructure:
    return QuotaStructure(
        total_cells=sum(entry.cell_count for entry in categories),
        categories=list(categories),
    )


def _age_gender(description: str = f"{_AGE_GENDER_COUNT} age/gender combinations") -> QuotaCategorySummary:
    return _category(QuotaCategory.AGE_GENDER, _AGE_GENDER_COUNT, description)


# =============================================================================
# Structural Template Selection
# =============================================================================

def plan_quota_structure(
    geography: Union[GeographyScope, str],
    mode: Union[QuotaMode, str],
    geography_detail: Optional[str] = None,
) -> QuotaStructure:
    """
    Select the structural template for a quota mode and geography.

    Selection is keyed on mode; non-interlocking and age-gender-location also
    branch on geography. For State scope with non-interlocking, Tasmania
    ('TAS', compared trimmed and case-insensitively) has no template of its
    own and takes the fallback.

    Args:
        geography: Geography scope (enum member or its value).
        mode: Quota mode (enum member or its value).
        geography_detail: State abbreviation or electorate name, if any.

    Returns:
        QuotaStructure whose total_cells equals the sum of its category counts.
        Unmatched combinations return the 12-cell Age/Gender structure.
    """
    geography = GeographyScope(geography)
    mode = QuotaMode(mode)

    if mode is QuotaMode.NON_INTERLOCKING:
        if geography is GeographyScope.NATIONAL:
            return _structure(
                _age_gender(),
                _category(QuotaCategory.STATE, _STATE_COUNT,
                          f"{_STATE_COUNT} Australian states/territories"),
                _category(QuotaCategory.LOCATION, _LOCATION_COUNT, "Metro/Regional/Remote"),
            )
        if geography is GeographyScope.STATE and not _is_tasmania(geography_detail):
            return _structure(
                _age_gender(),
                _category(QuotaCategory.LOCATION, _LOCATION_COUNT,
                          "Metro/Regional/Remote within state"),
            )

    elif mode is QuotaMode.FULL_INTERLOCKING:
        cells = _AGE_GENDER_COUNT * _STATE_COUNT * _LOCATION_COUNT
        return _structure(
            _category(
                QuotaCategory.AGE_GENDER_STATE_LOCATION,
                cells,
                f"{_AGE_GENDER_COUNT} age/gender × {_STATE_COUNT} states × "
                f"{_LOCATION_COUNT} locations = {cells} combinations",
                warning=FULL_INTERLOCKING_WARNING,
            ),
        )

    elif mode is QuotaMode.AGE_GENDER_LOCATION:
        cells = _AGE_GENDER_COUNT * _LOCATION_COUNT
        interlocked = _category(
            QuotaCategory.AGE_GENDER_LOCATION,
            cells,
            f"{_AGE_GENDER_COUNT} age/gender × {_LOCATION_COUNT} locations = {cells} combinations",
        )
        if geography is GeographyScope.NATIONAL:
            return _structure(
                interlocked,
                _category(QuotaCategory.STATE, _STATE_COUNT, "Separate state quotas"),
            )
        if geography is GeographyScope.STATE:
            return _structure(interlocked)

    elif mode is QuotaMode.AGE_GENDER_STATE:
        cells = _AGE_GENDER_COUNT * _STATE_COUNT
        return _structure(
            _category(
                QuotaCategory.AGE_GENDER_STATE,
                cells,
                f"{_AGE_GENDER_COUNT} age/gender × {_STATE_COUNT} states = {cells} combinations",
                panel_code_format=AGE_GENDER_STATE_CODE_FORMAT,
            ),
            _category(QuotaCategory.LOCATION, _LOCATION_COUNT, "Separate location quotas"),
        )

    elif mode is QuotaMode.STATE_LOCATION:
        cells = _STATE_COUNT * _LOCATION_COUNT
        return _structure(
            _category(
                QuotaCategory.STATE_LOCATION,
                cells,
                f"{_STATE_COUNT} states × {_LOCATION_COUNT} locations = {cells} combinations",
            ),
            _age_gender("Separate age/gender quotas"),
        )

    elif mode is QuotaMode.TAS_AGE_GENDER_ONLY:
        return _structure(_age_gender("Electorate-wide age/gender quotas"))

    elif mode is QuotaMode.AGE_GENDER_ONLY:
        return _structure(_age_gender("Electorate-specific age/gender percentages"))

    return _structure(_age_gender())


# =============================================================================
# Cell Expansion
# =============================================================================

def _expand_category(category: QuotaCategory, target_sample_size: int) -> List[QuotaCell]:
    if category is QuotaCategory.AGE_GENDER:
        target = round_half_up(target_sample_size / _AGE_GENDER_COUNT)
        return [
            QuotaCell(
                category=category,
                name=segment.name,
                population_percent=AGE_GENDER_POPULATION_PERCENT,
                target_count=target,
                code=segment_code(category, segment.name),
                panel_code=segment.code,
            )
            for segment in AGE_GENDER_SEGMENTS
        ]

    if category is QuotaCategory.STATE:
        return [
            QuotaCell(
                category=category,
                name=segment.name,
                population_percent=segment.percentage,
                target_count=round_half_up(target_sample_size * segment.percentage / 100),
                code=segment_code(category, segment.name),
                panel_code=segment.code,
            )
            for segment in STATE_SEGMENTS
        ]

    if category is QuotaCategory.LOCATION:
        return [
            QuotaCell(
                category=category,
                name=segment.name,
                population_percent=segment.percentage,
                target_count=round_half_up(target_sample_size * segment.percentage / 100),
                code=segment_code(category, segment.name),
                panel_code=segment.code,
            )
            for segment in LOCATION_SEGMENTS
        ]

    if category.is_composite:
        # Cross-product cells are not materialised locally
        return []

    raise ValueError(f"Unhandled quota category: {category!r}")


def expand_quota_cells(structure: QuotaStructure, target_sample_size: int) -> List[QuotaCell]:
    """
    Expand a quota structure into weighted cells.

    Cells are emitted in category declaration order, then in reference table
    order. Only Age/Gender, State and Location produce rows, so the number of
    cells equals the summed cell_count of the base categories, not
    structure.total_cells.

    Args:
        structure: Output of plan_quota_structure().
        target_sample_size: Positive number of completes to distribute. The
            caller validates this; it is not re-checked here.

    Returns:
        List of QuotaCell in emission order.
    """
    cells: List[QuotaCell] = []
    for entry in structure.categories:
        cells.extend(_expand_category(entry.category, target_sample_size))
    return cells


# =============================================================================
# Complexity Lookup
# =============================================================================

def complexity_info(mode: Union[QuotaMode, str]) -> ComplexityInfo:
    """Complexity level, multiplier and description for a quota mode."""
    return COMPLEXITY_TABLE[QuotaMode(mode)]


def sample_size_multiplier(mode: Union[QuotaMode, str]) -> float:
    """Multiplier stored on quota_configurations.sample_size_multiplier."""
    return complexity_info(mode).multiplier


def complexity_level(mode: Union[QuotaMode, str]) -> ComplexityLevel:
    """Level stored on quota_configurations.complexity_level."""
    return complexity_info(mode).level


# =============================================================================
# Segment Codes
# =============================================================================

def segment_code(category: Union[QuotaCategory, str], name: str) -> str:
    """
    Derive the stable segment code for a cell.

    The prefix comes from a fixed table for the base categories; any other
    category is uppercased with each non-letter replaced by '_'. The suffix is
    the uppercased name with every run of characters outside [A-Z0-9]
    collapsed to one '_' and leading/trailing '_' removed.

    Examples:
        >>> segment_code(QuotaCategory.AGE_GENDER, "18-24 Male")
        'AGE_GENDER_18_24_MALE'
        >>> segment_code("Location", "Outer Regional/Remote")
        'LOCATION_OUTER_REGIONAL_REMOTE'
    """
    category_value = category.value if isinstance(category, QuotaCategory) else str(category)
    prefix = _CATEGORY_PREFIXES.get(category_value) or re.sub(r"[^A-Z]", "_", category_value.upper())
    suffix = re.sub(r"[^A-Z0-9]+", "_", name.upper()).strip("_")
    return f"{prefix}_{suffix}" if suffix else prefix


# =============================================================================
# Full Plan
# =============================================================================

def build_geography(
    geography: Union[GeographyScope, str],
    geography_detail: Optional[str] = None,
) -> GeographySelection:
    """Attach the detail as state or electorate depending on scope."""
    geography = GeographyScope(geography)
    detail = geography_detail.strip() if geography_detail else None
    detail = detail or None
    return GeographySelection(
        scope=geography,
        state=detail if geography is GeographyScope.STATE else None,
        electorate=detail if geography.is_electorate else None,
    )


def build_quota_plan(
    geography: Union[GeographyScope, str],
    mode: Union[QuotaMode, str],
    geography_detail: Optional[str] = None,
    target_sample_size: int = 1000,
) -> QuotaPlan:
    """
    Plan, expand and score a quota design in one call.

    Args:
        geography: Geography scope.
        mode: Quota mode.
        geography_detail: State abbreviation or electorate name.
        target_sample_size: Positive number of completes.

    Returns:
        QuotaPlan with structure, complexity, cells, the multiplier-adjusted
        recommended sample size and the per-level sample size advice.
    """
    mode = QuotaMode(mode)
    structure = plan_quota_structure(geography, mode, geography_detail)
    complexity = complexity_info(mode)

    return QuotaPlan(
        geography=build_geography(geography, geography_detail),
        quota_mode=mode,
        target_sample_size=target_sample_size,
        quota_structure=structure,
        complexity=complexity,
        recommended_sample_size=round_half_up(target_sample_size * complexity.multiplier),
        cells=expand_quota_cells(structure, target_sample_size),
        sample_size_recommendations={
            f"{level.value}_complexity": advice
            for level, advice in SAMPLE_SIZE_RECOMMENDATIONS.items()
        },
    )
