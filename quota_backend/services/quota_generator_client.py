"""
Client for the external Quota Generator API.

The quota generator designs detailed interlocked quotas and stores them
against a survey. This client forwards the dashboard's requests to it and
maps its failures onto the QuotaGeneratorError family:

    missing API key            -> QuotaGeneratorAuthError (401)
    upstream 401 / 403         -> QuotaGeneratorAuthError (401)
    upstream 404               -> QuotaGeneratorNotFoundError (404)
    any other non-2xx          -> QuotaGeneratorError (upstream status)
    connection / timeout error -> QuotaGeneratorError (502)

Rows returned by the generator are normalised into QuotaCell by
cells_from_generator_rows() so they can be stored like locally planned cells.
"""

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional

import requests

from quota_backend.models.enums import QuotaCategory
from quota_backend.models.schemas import QuotaCell
from quota_backend.services.errors import (
    QuotaGeneratorAuthError,
    QuotaGeneratorError,
    QuotaGeneratorNotFoundError,
)
from quota_backend.services.quota_planner import segment_code


logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.quotagenerator.com/v1"

# Keys under which a generator result may carry its rows
_ROW_CONTAINER_KEYS = ("quotaSegments", "quotas", "cells", "segments")


class QuotaGeneratorClient:
    """Thin requests-based client; one instance per API key."""

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 30.0,
        session: Optional[requests.Session] = None,
    ):
        if not api_key or not api_key.strip():
            raise QuotaGeneratorAuthError("API key is required")

        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._session = session or requests.Session()
        self._session.headers.update({
            "Authorization": f"Bearer {api_key.strip()}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        })

    def close(self) -> None:
        """Close the underlying session and its pooled connections."""
        self._session.close()

    def __enter__(self) -> "QuotaGeneratorClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def _request(
        self,
        method: str,
        path: str,
        not_found_message: str,
        survey_id: Optional[str] = None,
        payload: Optional[Mapping[str, Any]] = None,
    ) -> Any:
        url = f"{self.base_url}{path}"
        headers: Dict[str, str] = {}
        if survey_id:
            headers["X-Survey-ID"] = survey_id

        try:
            response = self._session.request(
                method,
                url,
                json=payload,
                headers=headers,
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            logger.error(f"Quota generator request failed: {method} {url}: {exc}")
            raise QuotaGeneratorError(
                f"Unable to connect to the Quota Generator API: {exc}", status_code=502
            ) from exc

        if not response.ok:
            logger.warning(f"Quota generator returned {response.status_code} for {method} {url}")
            if response.status_code in (401, 403):
                raise QuotaGeneratorAuthError("API key authentication failed")
            if response.status_code == 404:
                raise QuotaGeneratorNotFoundError(not_found_message)
            raise QuotaGeneratorError(
                f"API Error: {response.status_code} - {response.text}",
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as exc:
            raise QuotaGeneratorError(
                "Quota Generator API returned a non-JSON response", status_code=502
            ) from exc

    def generate_quotas(self, payload: Mapping[str, Any], survey_id: Optional[str] = None) -> Any:
        """POST /generate-quotas and return the generator's result unchanged."""
        result = self._request(
            "POST",
            "/generate-quotas",
            "Survey not found with the provided Survey ID",
            survey_id=survey_id,
            payload=payload,
        )
        logger.info("Generated quotas via quota generator")
        return result

    def list_saved_quotas(self, survey_id: Optional[str] = None) -> List[Any]:
        """Saved quotas for a survey, or all saved quotas; always a list."""
        path = f"/surveys/{survey_id}/quotas" if survey_id else "/quotas"
        result = self._request(
            "GET",
            path,
            "No saved quotas found for this survey",
            survey_id=survey_id,
        )
        return result if isinstance(result, list) else [result]

    def get_saved_quota(self, quota_id: str) -> Any:
        if not quota_id or not quota_id.strip():
            raise QuotaGeneratorError("Quota ID is required", status_code=400)
        return self._request("GET", f"/quotas/{quota_id.strip()}", "Quota not found")


# =============================================================================
# Row Normalisation
# =============================================================================


def extract_generator_rows(result: Any) -> List[Mapping[str, Any]]:
    """
    Pull the quota rows out of a generator result.

    A list is taken as the rows themselves; an object is searched for the
    first list under quotaSegments, quotas, cells or segments.
    """
    if isinstance(result, list):
        return [row for row in result if isinstance(row, Mapping)]
    if isinstance(result, Mapping):
        for key in _ROW_CONTAINER_KEYS:
            rows = result.get(key)
            if isinstance(rows, list):
                return [row for row in rows if isinstance(row, Mapping)]
    return []


def _first(row: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if row.get(key) is not None:
            return row[key]
    return None


def cells_from_generator_rows(rows: Iterable[Mapping[str, Any]]) -> List[QuotaCell]:
    """
    Normalise generator rows into QuotaCell.

    Field mapping:
        category                      -> category (must be a known category)
        subCategory | name            -> name
        population_percent            -> population_percent (default 0)
        quota_count | target_count    -> target_count (default 0)
        dynata_code | panel_code      -> panel_code

    Raises:
        QuotaGeneratorError: If a row has an unknown category or no name,
            or a count or percentage that is not a valid number in range.
    """
    cells: List[QuotaCell] = []
    for index, row in enumerate(rows):
        raw_category = row.get("category")
        try:
            category = QuotaCategory(raw_category)
        except ValueError as exc:
            raise QuotaGeneratorError(
                f"Unknown quota category in generator row {index}: {raw_category!r}",
                status_code=502,
            ) from exc

        name = _first(row, "subCategory", "name")
        if not name:
            raise QuotaGeneratorError(
                f"Generator row {index} has no subCategory or name", status_code=502
            )

        # pydantic's ValidationError is a ValueError
        try:
            cell = QuotaCell(
                category=category,
                name=str(name),
                population_percent=float(_first(row, "population_percent") or 0.0),
                target_count=int(_first(row, "quota_count", "target_count") or 0),
                code=segment_code(category, str(name)),
                panel_code=_first(row, "dynata_code", "panel_code"),
            )
        except (TypeError, ValueError) as exc:
            raise QuotaGeneratorError(
                f"Generator row {index} has unusable values: {exc}", status_code=502
            ) from exc
        cells.append(cell)
    return cells
