"""
Best-effort label lookups ("optional enrichment").

A lookup resolves a foreign key on a record (an answer's ``question_id``)
to a display label (the question text). Failure is a defined outcome, not
an exception: callers fall back to a shortened id.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Mapping, Optional

from shumba_admin.api.client import AdminApiClient
from shumba_admin.api.errors import AdminApiError
from shumba_admin.services.entity_registry import LookupSpec

logger = logging.getLogger(__name__)

FALLBACK_ID_CHARS = 8


def fallback_label(key: Any) -> str:
    """Shortened id shown when no label is available."""
    if key is None or key == "":
        return "Unknown"
    text = str(key)
    if len(text) <= FALLBACK_ID_CHARS:
        return text
    return f"{text[:FALLBACK_ID_CHARS]}…"


@dataclass
class LookupResult:
    """Outcome of a label lookup; never raised, always returned."""
    ok: bool
    labels: Dict[str, str] = field(default_factory=dict)
    error: Optional[AdminApiError] = None

    def label_for(self, key: Any) -> str:
        if key is not None:
            label = self.labels.get(str(key))
            if label:
                return label
        return fallback_label(key)

    def enrich(self, record: Mapping[str, Any], spec: LookupSpec) -> Dict[str, Any]:
        """Return a copy of ``record`` with the label stored under ``spec.target_field``."""
        enriched = dict(record)
        enriched[spec.target_field] = self.label_for(record.get(spec.foreign_key))
        return enriched


EMPTY_LOOKUP = LookupResult(ok=False)


class LookupService:
    """Fetches key -> label maps through the shared API client."""

    def __init__(self, client: AdminApiClient, token_provider: Callable[[], Optional[str]]):
        self._client = client
        self._token_provider = token_provider

    def fetch_labels(self, spec: LookupSpec) -> LookupResult:
        try:
            records = self._client.list_records(spec.list_path, self._token_provider())
        except AdminApiError as e:
            logger.warning(f"Lookup {spec.list_path} failed ({e.kind}); using fallback labels")
            return LookupResult(ok=False, error=e)

        labels = {}
        for record in records:
            key = record.get(spec.key_field)
            label = record.get(spec.label_field)
            if key is None or label in (None, ""):
                continue
            labels[str(key)] = str(label)
        logger.debug(f"Lookup {spec.list_path}: {len(labels)} labels")
        return LookupResult(ok=True, labels=labels)
