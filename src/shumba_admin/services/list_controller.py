"""
Remote list controller.

One controller backs one admin screen. It owns the screen's working
collection (the last successful fetch), the search query and the current
page, and turns them into a ListViewModel for the view layer. Network work
goes through a TaskRunner so the same controller runs on Qt worker threads
in the application and inline in tests.

State machine::

    IDLE -> LOADING -> LOADED | ERRORED
    LOADED/ERRORED -> LOADING      on refresh() and after a successful mutation
    LOADED -> LOADED               on search() / go_to_page() (no network)

Invariants after every transition:
- displayed_records == filtered(collection, query)[(page-1)*size : page*size]
- 1 <= current_page <= total_pages, total_pages >= 1
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from functools import partial
from typing import Any, Callable, List, Mapping, Optional, Tuple

from shumba_admin.api.client import AdminApiClient
from shumba_admin.api.envelope import Record
from shumba_admin.api.errors import (
    AdminApiError,
    AuthRequired,
    FieldErrors,
    SessionExpired,
    Unknown,
    ValidationFailed,
)
from shumba_admin.core.immediate_task import ImmediateTaskRunner
from shumba_admin.core.pagination import clamp_page, paginate, total_pages
from shumba_admin.protocols.task_runner import TaskRunner
from shumba_admin.services.entity_registry import EntityConfig
from shumba_admin.services.lookup_service import EMPTY_LOOKUP, LookupResult, LookupService
from shumba_admin.services.search_service import SearchService
from shumba_admin.services.session_service import SessionService

logger = logging.getLogger(__name__)

ConfirmCallback = Callable[[Record], bool]
ViewListener = Callable[["ListViewModel"], None]


class UnsupportedOperation(ValueError):
    """The entity's backend does not offer this write operation."""


class ScreenState(Enum):
    IDLE = "idle"
    LOADING = "loading"
    LOADED = "loaded"
    ERRORED = "errored"


@dataclass(frozen=True)
class ListViewModel:
    """Everything a list screen renders, derived from controller state."""
    displayed_records: List[Record]
    current_page: int
    total_pages: int
    total_items: int
    collection_size: int
    page_size: int
    query: str
    state: ScreenState
    mutating: bool = False
    error: Optional[AdminApiError] = None
    mutation_error: Optional[AdminApiError] = None
    success_message: str = ""
    field_errors: FieldErrors = field(default_factory=dict)
    empty_message: str = ""

    @property
    def loading(self) -> bool:
        return self.state is ScreenState.LOADING

    @property
    def has_previous(self) -> bool:
        return self.current_page > 1

    @property
    def has_next(self) -> bool:
        return self.current_page < self.total_pages

    @property
    def first_index(self) -> int:
        """1-based position of the first displayed record (0 when empty)."""
        if not self.displayed_records:
            return 0
        return (self.current_page - 1) * self.page_size + 1

    def summary(self) -> str:
        """'Showing 1-25 of 30' style status text."""
        if not self.displayed_records:
            return f"Showing 0 of {self.collection_size}"
        last = self.first_index + len(self.displayed_records) - 1
        text = f"Showing {self.first_index}-{last} of {self.total_items}"
        if self.total_items != self.collection_size:
            text += f" (filtered from {self.collection_size})"
        return text


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


def _as_api_error(error: Exception) -> AdminApiError:
    if isinstance(error, AdminApiError):
        return error
    logger.error(f"Unexpected error in list operation: {error}", exc_info=error)
    return Unknown(str(error) or None, cause=error)


class RemoteListController:
    """
    Fetch / filter / paginate / mutate state machine for one entity screen.

    Args:
        config: Entity configuration (endpoints, searchable fields, page size)
        client: Shared API client
        session: Session context providing the token and 401 handling
        runner: Executes network calls (defaults to inline execution)
        confirm: Deletion confirmation step; returning False cancels the delete
        lookup_service: Required when ``config.lookup`` is set
    """

    def __init__(
        self,
        config: EntityConfig,
        client: AdminApiClient,
        session: SessionService,
        runner: Optional[TaskRunner] = None,
        confirm: Optional[ConfirmCallback] = None,
        lookup_service: Optional[LookupService] = None,
    ):
        self.config = config
        self._client = client
        self._session = session
        self._runner = runner or ImmediateTaskRunner()
        self._confirm = confirm
        self._lookup_service = lookup_service
        if config.lookup is not None and lookup_service is None:
            self._lookup_service = LookupService(client, session.get_token)

        self._raw_records: List[Record] = []
        self._lookup: LookupResult = EMPTY_LOOKUP
        self._search: SearchService[Record] = SearchService(
            [], config.searchable_text, self._threshold_matcher(),
        )
        self._page = 1
        self._state = ScreenState.IDLE
        self._fetch_seq = 0
        self._mutations_in_flight = 0

        self._error: Optional[AdminApiError] = None
        self._mutation_error: Optional[AdminApiError] = None
        self._success_message = ""
        self._field_errors: FieldErrors = {}
        self._listeners: List[ViewListener] = []

    # =========================================================================
    # Observation
    # =========================================================================

    def add_listener(self, callback: ViewListener) -> None:
        self._listeners.append(callback)

    def remove_listener(self, callback: ViewListener) -> None:
        if callback in self._listeners:
            self._listeners.remove(callback)

    @property
    def state(self) -> ScreenState:
        return self._state

    @property
    def working_collection(self) -> List[Record]:
        """The full, unfiltered records of the last successful fetch."""
        return list(self._search.all_items)

    @property
    def view_model(self) -> ListViewModel:
        filtered = self._search.filtered_items
        pages = total_pages(len(filtered), self.config.page_size)
        displayed = paginate(filtered, self._page, self.config.page_size)
        return ListViewModel(
            displayed_records=displayed,
            current_page=self._page,
            total_pages=pages,
            total_items=len(filtered),
            collection_size=len(self._search.all_items),
            page_size=self.config.page_size,
            query=self._search.query,
            state=self._state,
            mutating=self._mutations_in_flight > 0,
            error=self._error,
            mutation_error=self._mutation_error,
            success_message=self._success_message,
            field_errors=dict(self._field_errors),
            empty_message=self._empty_message(len(filtered)),
        )

    def record_by_id(self, record_id: Any) -> Optional[Record]:
        id_field = self.config.id_field
        for record in self._search.all_items:
            if str(record.get(id_field)) == str(record_id):
                return record
        return None

    def _threshold_matcher(self) -> Optional[Callable[[Record, int], bool]]:
        field_name = self.config.score_threshold_field
        if field_name is None:
            return None

        def at_least(record: Record, threshold: int) -> bool:
            try:
                return float(record.get(field_name)) >= threshold
            except (TypeError, ValueError):
                return False

        return at_least

    def _empty_message(self, filtered_count: int) -> str:
        if filtered_count or self._state in (ScreenState.IDLE, ScreenState.LOADING):
            return ""
        noun = self.config.title.lower()
        if self._search.query.strip():
            return f"No {noun} match '{self._search.query.strip()}'."
        return f"No {noun} found."

    def _notify(self) -> None:
        self._page = clamp_page(
            self._page,
            total_pages(len(self._search.filtered_items), self.config.page_size),
        )
        view = self.view_model
        for callback in list(self._listeners):
            callback(view)

    # =========================================================================
    # Local actions (no network)
    # =========================================================================

    def search(self, query: str) -> ListViewModel:
        """Filter the working collection; the page is re-clamped, not reset."""
        self._search.filter(query)
        self._notify()
        return self.view_model

    def go_to_page(self, page: int) -> ListViewModel:
        pages = total_pages(len(self._search.filtered_items), self.config.page_size)
        self._page = clamp_page(page, pages)
        self._notify()
        return self.view_model

    def next_page(self) -> ListViewModel:
        return self.go_to_page(self._page + 1)

    def previous_page(self) -> ListViewModel:
        return self.go_to_page(self._page - 1)

    def dismiss_error(self) -> None:
        self._error = None
        self._mutation_error = None
        self._notify()

    def dismiss_success(self) -> None:
        self._success_message = ""
        self._notify()

    def clear_field_errors(self) -> None:
        self._field_errors = {}
        self._mutation_error = None
        self._notify()

    # =========================================================================
    # Fetch
    # =========================================================================

    def refresh(self) -> None:
        """(Re-)fetch the full collection; stale responses are discarded."""
        token = self._session.get_token()
        if not token:
            self._fail_fetch(AuthRequired())
            return

        self._fetch_seq += 1
        seq = self._fetch_seq
        self._state = ScreenState.LOADING
        logger.debug(f"[{self.config.key}] fetch #{seq} started")
        self._notify()

        self._runner.run(
            self._client.list_records,
            args=(self.config.endpoints.list_path, token),
            on_success=partial(self._on_fetch_success, seq),
            on_error=partial(self._on_fetch_error, seq),
        )
        if self.config.lookup is not None:
            self._runner.run(
                self._lookup_service.fetch_labels,
                args=(self.config.lookup,),
                on_success=partial(self._on_lookup_done, seq),
                on_error=partial(self._on_lookup_error, seq),
            )

    def _is_stale(self, seq: int) -> bool:
        if seq != self._fetch_seq:
            logger.debug(f"[{self.config.key}] discarding response of superseded fetch #{seq}")
            return True
        return False

    def _on_fetch_success(self, seq: int, records: List[Record]) -> None:
        if self._is_stale(seq):
            return
        self._raw_records = list(records)
        self._search.update_items(self._enriched(self._raw_records))
        self._state = ScreenState.LOADED
        self._error = None
        logger.debug(f"[{self.config.key}] fetch #{seq} loaded {len(records)} records")
        self._notify()

    def _on_fetch_error(self, seq: int, error: Exception) -> None:
        if self._is_stale(seq):
            return
        self._fail_fetch(_as_api_error(error))

    def _fail_fetch(self, error: AdminApiError) -> None:
        logger.error(f"[{self.config.key}] fetch failed: {error.kind}: {error.user_message}")
        self._error = error
        self._state = ScreenState.ERRORED
        if isinstance(error, SessionExpired):
            self._raw_records = []
            self._search.update_items([])
        self._notify()
        if isinstance(error, SessionExpired):
            self._session.on_unauthorized()

    # =========================================================================
    # Secondary lookup (optional enrichment)
    # =========================================================================

    def _enriched(self, records: List[Record]) -> List[Record]:
        spec = self.config.lookup
        if spec is None:
            return records
        return [self._lookup.enrich(record, spec) for record in records]

    def _on_lookup_done(self, seq: int, result: LookupResult) -> None:
        if seq != self._fetch_seq:
            return
        self._lookup = result
        if self._raw_records:
            self._search.update_items(self._enriched(self._raw_records))
            self._notify()

    def _on_lookup_error(self, seq: int, error: Exception) -> None:
        logger.warning(f"[{self.config.key}] label lookup #{seq} failed: {error}")

    # =========================================================================
    # Mutations
    # =========================================================================

    def _missing_fields(self, fields: Mapping[str, Any], only_present: bool) -> FieldErrors:
        errors: FieldErrors = {}
        for name in self.config.required_fields:
            if only_present and name not in fields:
                continue
            if _is_blank(fields.get(name)):
                errors[name] = [f"{self.config.field_label(name)} is required."]
        return errors

    def _dispatch(self, operation: str, target: Callable[..., str], args: Tuple) -> bool:
        token = self._session.get_token()
        if not token:
            self._on_mutation_error(operation, AuthRequired(), counted=False)
            return False

        self._mutations_in_flight += 1
        self._field_errors = {}
        self._mutation_error = None
        logger.debug(f"[{self.config.key}] {operation} dispatched")
        self._notify()
        self._runner.run(
            target,
            args=(args[0], token) + tuple(args[1:]),
            on_success=partial(self._on_mutation_success, operation),
            on_error=partial(self._on_mutation_error, operation),
        )
        return True

    def create(self, fields: Mapping[str, Any]) -> bool:
        """
        Validate locally, then create. Returns False when nothing was sent.

        On success the collection is re-fetched and the page resets to 1.
        """
        if not self.config.can_create:
            raise UnsupportedOperation(f"{self.config.key} does not support create")
        missing = self._missing_fields(fields, only_present=False)
        if missing:
            self._reject_locally(missing)
            return False
        endpoints = self.config.endpoints
        return self._dispatch(
            "create", self._client.create_record,
            (endpoints.create_path, dict(fields), endpoints.create_method),
        )

    def update(self, record_id: Any, fields: Mapping[str, Any]) -> bool:
        """Validate the supplied fields, then update. The page is kept."""
        if not self.config.can_update:
            raise UnsupportedOperation(f"{self.config.key} does not support update")
        missing = self._missing_fields(fields, only_present=True)
        if missing:
            self._reject_locally(missing)
            return False
        endpoints = self.config.endpoints
        return self._dispatch(
            "update", self._client.update_record,
            (endpoints.update_url(record_id), dict(fields), endpoints.update_method),
        )

    def delete(self, record_id: Any) -> bool:
        """Ask for confirmation, then delete. Returns False if declined."""
        if not self.config.can_delete:
            raise UnsupportedOperation(f"{self.config.key} does not support delete")
        record = self.record_by_id(record_id) or {self.config.id_field: record_id}
        if self._confirm is None or not self._confirm(record):
            logger.debug(f"[{self.config.key}] delete of {record_id} not confirmed")
            return False
        endpoints = self.config.endpoints
        return self._dispatch(
            "delete", self._client.delete_record,
            (endpoints.delete_url(record_id), endpoints.delete_method),
        )

    def toggle_status(self, record_id: Any, on: str = "active", off: str = "archived") -> bool:
        """Flip a record's ``status`` between two values."""
        record = self.record_by_id(record_id)
        if record is None:
            logger.warning(f"[{self.config.key}] toggle_status: no record {record_id}")
            return False
        new_status = off if record.get("status") == on else on
        return self.update(record_id, {"status": new_status})

    def _reject_locally(self, field_errors: FieldErrors) -> None:
        logger.debug(f"[{self.config.key}] local validation failed: {sorted(field_errors)}")
        self._field_errors = field_errors
        self._mutation_error = ValidationFailed(field_errors)
        self._notify()

    def _on_mutation_success(self, operation: str, message: str) -> None:
        self._mutations_in_flight -= 1
        self._success_message = message or f"Record {operation}d successfully."
        self._field_errors = {}
        self._mutation_error = None
        logger.info(f"[{self.config.key}] {operation} succeeded")
        if operation == "create":
            self._page = 1
        self.refresh()

    def _on_mutation_error(self, operation: str, error: Exception, counted: bool = True) -> None:
        if counted:
            self._mutations_in_flight -= 1
        api_error = _as_api_error(error)
        logger.error(f"[{self.config.key}] {operation} failed: {api_error.kind}: {api_error.user_message}")
        self._mutation_error = api_error
        self._field_errors = dict(api_error.field_errors) if isinstance(api_error, ValidationFailed) else {}
        self._notify()
        if isinstance(api_error, SessionExpired):
            self._session.on_unauthorized()
