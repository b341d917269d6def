"""
Per-entity configuration for the remote list controller.

Each admin screen (users, questions, answers, ...) is the same controller
instantiated with a different EntityConfig: where to fetch and write, what
to search, how many rows per page and which fields a create requires.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 25


@dataclass(frozen=True)
class EndpointSet:
    """Paths (relative to the API base URL) and verbs for one entity.

    ``None`` marks an operation the backend does not offer. Update and
    delete paths contain an ``{id}`` placeholder.
    """
    list_path: str
    create_path: Optional[str] = None
    update_path: Optional[str] = None
    delete_path: Optional[str] = None
    create_method: str = "POST"
    update_method: str = "POST"
    delete_method: str = "DELETE"

    def update_url(self, record_id: Any) -> str:
        return self.update_path.format(id=record_id)

    def delete_url(self, record_id: Any) -> str:
        return self.delete_path.format(id=record_id)


@dataclass(frozen=True)
class ColumnDef:
    """Declarative column configuration for record tables."""
    name: str
    key: str
    width: Optional[int] = None


@dataclass(frozen=True)
class FieldDef:
    """One editable field of the create/edit form."""
    key: str
    label: str
    kind: str = "text"  # text | multiline | choice | bool | number
    choices: Tuple[str, ...] = ()


@dataclass(frozen=True)
class LookupSpec:
    """Secondary label lookup joined onto records by a foreign key."""
    list_path: str
    foreign_key: str
    label_field: str
    target_field: str
    key_field: str = "id"


@dataclass(frozen=True)
class EntityConfig:
    """Configuration of one entity screen."""
    key: str
    title: str
    endpoints: EndpointSet
    searchable_fields: Tuple[str, ...]
    page_size: int = DEFAULT_PAGE_SIZE
    required_fields: Tuple[str, ...] = ()
    form_fields: Tuple[FieldDef, ...] = ()
    columns: Tuple[ColumnDef, ...] = ()
    lookup: Optional[LookupSpec] = None
    score_threshold_field: Optional[str] = None
    id_field: str = "id"

    @property
    def can_create(self) -> bool:
        return self.endpoints.create_path is not None

    @property
    def can_update(self) -> bool:
        return self.endpoints.update_path is not None

    @property
    def can_delete(self) -> bool:
        return self.endpoints.delete_path is not None

    @property
    def read_only(self) -> bool:
        return not (self.can_create or self.can_update or self.can_delete)

    def field_label(self, key: str) -> str:
        for form_field in self.form_fields:
            if form_field.key == key:
                return form_field.label
        return key.replace("_", " ").capitalize()

    def searchable_text(self, record: Mapping[str, Any]) -> str:
        """Concatenate the searchable fields of a record (missing = empty)."""
        parts = []
        for name in self.searchable_fields:
            value = record.get(name)
            if value is None:
                continue
            parts.append(str(value))
        return "\n".join(parts)


_STATUS_CHOICES = ("active", "inactive")

ENTITY_CONFIGS: Dict[str, EntityConfig] = {}


def register_entity_config(config: EntityConfig) -> None:
    """Register (or replace) the configuration for ``config.key``."""
    if config.page_size < 1:
        raise ValueError(f"{config.key}: page_size must be positive")
    ENTITY_CONFIGS[config.key] = config
    logger.debug(f"Registered entity config: {config.key}")


def get_entity_config(key: str) -> EntityConfig:
    try:
        return ENTITY_CONFIGS[key]
    except KeyError:
        raise KeyError(f"No entity config registered for '{key}'") from None


def list_entity_configs() -> List[EntityConfig]:
    return list(ENTITY_CONFIGS.values())


# =========================================================================
# Built-in screens
# =========================================================================

USERS = EntityConfig(
    key="users",
    title="Users",
    endpoints=EndpointSet(
        list_path="/users",
        create_path="/create-user",
        update_path="/update-user/{id}",
        delete_path="/delete-user/{id}",
        delete_method="POST",
    ),
    searchable_fields=("firstname", "lastname", "email", "phone", "macAddress"),
    required_fields=("firstname", "lastname", "phone"),
    form_fields=(
        FieldDef("firstname", "First name"),
        FieldDef("lastname", "Last name"),
        FieldDef("email", "Email"),
        FieldDef("phone", "Phone number"),
        FieldDef("role", "Role", kind="choice", choices=("user", "admin")),
        FieldDef("paymentStatus", "Payment status", kind="choice", choices=("pending", "paid")),
    ),
    columns=(
        ColumnDef("Firstname", "firstname"),
        ColumnDef("Lastname", "lastname"),
        ColumnDef("Payment Status", "paymentStatus", 110),
        ColumnDef("Email", "email"),
        ColumnDef("Phone Number", "phone"),
        ColumnDef("Role", "role", 80),
        ColumnDef("Mac Address", "macAddress"),
    ),
)

QUESTIONS = EntityConfig(
    key="questions",
    title="Questions",
    endpoints=EndpointSet(
        list_path="/get-questions",
        create_path="/create-question",
        update_path="/update-question/{id}",
        delete_path="/delete-question/{id}",
    ),
    searchable_fields=("name", "image_url", "status"),
    required_fields=("name", "image_url"),
    form_fields=(
        FieldDef("name", "Question text", kind="multiline"),
        FieldDef("image_url", "Image URL"),
        FieldDef("status", "Status", kind="choice", choices=_STATUS_CHOICES),
    ),
    columns=(
        ColumnDef("Name", "name"),
        ColumnDef("Image", "image_url", 200),
        ColumnDef("Status", "status", 100),
    ),
)

ANSWERS = EntityConfig(
    key="answers",
    title="Answers",
    endpoints=EndpointSet(
        list_path="/get-answers",
        create_path="/create-answer",
        update_path="/update-answer/{id}",
        delete_path="/delete-answer/{id}",
        update_method="PUT",
    ),
    searchable_fields=("answer", "status", "question_label"),
    page_size=30,
    required_fields=("answer", "question_id"),
    form_fields=(
        FieldDef("question_id", "Question ID"),
        FieldDef("answer", "Answer"),
        FieldDef("is_correct", "Correct", kind="bool"),
        FieldDef("status", "Status", kind="choice", choices=_STATUS_CHOICES),
    ),
    columns=(
        ColumnDef("Question", "question_label"),
        ColumnDef("Answer", "answer"),
        ColumnDef("Status", "status", 100),
        ColumnDef("Correct", "is_correct", 100),
    ),
    lookup=LookupSpec(
        list_path="/get-questions",
        foreign_key="question_id",
        label_field="name",
        target_field="question_label",
    ),
)

CATEGORIES = EntityConfig(
    key="categories",
    title="Note categories",
    endpoints=EndpointSet(
        list_path="/get-categories",
        create_path="/create-category",
        update_path="/update-category/{id}",
        delete_path="/delete-category/{id}",
    ),
    searchable_fields=("name", "status"),
    required_fields=("name",),
    form_fields=(
        FieldDef("name", "Name"),
        FieldDef("status", "Status", kind="choice", choices=_STATUS_CHOICES),
    ),
    columns=(
        ColumnDef("Name", "name"),
        ColumnDef("Status", "status", 100),
    ),
)

LESSONS = EntityConfig(
    key="lessons",
    title="Lessons",
    endpoints=EndpointSet(
        list_path="/get-lessons",
        create_path="/create-lesson",
        update_path="/update-lesson/{id}",
        delete_path="/delete-lesson/{id}",
    ),
    searchable_fields=("title", "description", "status"),
    required_fields=("title",),
    form_fields=(
        FieldDef("title", "Title"),
        FieldDef("category_id", "Category ID"),
        FieldDef("description", "Description", kind="multiline"),
        FieldDef("status", "Status", kind="choice", choices=_STATUS_CHOICES),
    ),
    columns=(
        ColumnDef("Title", "title"),
        ColumnDef("Description", "description"),
        ColumnDef("Status", "status", 100),
    ),
)

NOTES = EntityConfig(
    key="notes",
    title="Notes",
    endpoints=EndpointSet(
        list_path="/get-notes",
        create_path="/create-notes",
        update_path="/update-notes/{id}",
        delete_path="/delete-note/{id}",
    ),
    searchable_fields=("title", "description", "status"),
    required_fields=("title", "description"),
    form_fields=(
        FieldDef("title", "Title"),
        FieldDef("lesson_id", "Lesson ID"),
        FieldDef("description", "Description", kind="multiline"),
        FieldDef("status", "Status", kind="choice", choices=_STATUS_CHOICES),
    ),
    columns=(
        ColumnDef("Title", "title"),
        ColumnDef("Description", "description"),
        ColumnDef("Status", "status", 100),
    ),
)

SIGNS = EntityConfig(
    key="signs",
    title="Road signs",
    endpoints=EndpointSet(
        list_path="/get-signs",
        create_path="/create-signs",
        update_path="/update-sign/{id}",
        delete_path="/delete-sign/{id}",
    ),
    searchable_fields=("name", "description", "status"),
    required_fields=("name", "image_url"),
    form_fields=(
        FieldDef("name", "Name"),
        FieldDef("image_url", "Image URL"),
        FieldDef("description", "Description", kind="multiline"),
        FieldDef("status", "Status", kind="choice", choices=_STATUS_CHOICES),
    ),
    columns=(
        ColumnDef("Name", "name"),
        ColumnDef("Description", "description"),
        ColumnDef("Status", "status", 100),
    ),
)

EXAMS = EntityConfig(
    key="exams",
    title="Exams",
    endpoints=EndpointSet(list_path="/get-test"),
    searchable_fields=("studentName", "email", "examName", "status"),
    score_threshold_field="score",
    columns=(
        ColumnDef("Student", "studentName"),
        ColumnDef("Email", "email"),
        ColumnDef("Exam", "examName"),
        ColumnDef("Score", "score", 80),
        ColumnDef("Status", "status", 100),
        ColumnDef("Date", "dateTaken", 140),
    ),
)

BOOKINGS = EntityConfig(
    key="bookings",
    title="Bookings",
    endpoints=EndpointSet(
        list_path="/get-user-bookings",
        update_path="/update-user-booking/{id}",
        delete_path="/delete-user-booking/{id}",
    ),
    searchable_fields=("name", "description", "status"),
    form_fields=(
        FieldDef("name", "Name"),
        FieldDef("price", "Price", kind="number"),
        FieldDef("bookingDate", "Booking date"),
        FieldDef("description", "Description", kind="multiline"),
        FieldDef("status", "Status", kind="choice", choices=("available", "booked", "cancelled")),
    ),
    columns=(
        ColumnDef("Name", "name"),
        ColumnDef("Price", "price", 80),
        ColumnDef("Status", "status", 100),
        ColumnDef("Description", "description"),
        ColumnDef("Date", "bookingDate", 110),
    ),
)

PAYMENTS = EntityConfig(
    key="payments",
    title="Payment history",
    endpoints=EndpointSet(list_path="/get-payments"),
    searchable_fields=("studentName", "email", "paymentMethod", "purpose", "status", "amount"),
    page_size=30,
    columns=(
        ColumnDef("Student", "studentName"),
        ColumnDef("Email", "email"),
        ColumnDef("Method", "paymentMethod", 100),
        ColumnDef("Amount", "amount", 80),
        ColumnDef("Purpose", "purpose"),
        ColumnDef("Status", "status", 90),
        ColumnDef("Date", "dateCreated", 150),
    ),
)

APKS = EntityConfig(
    key="apks",
    title="APK releases",
    endpoints=EndpointSet(
        list_path="/get-apks",
        create_path="/create-apk",
        update_path="/update-apk/{id}",
        delete_path="/delete-apk/{id}",
    ),
    searchable_fields=("filename", "version", "status"),
    required_fields=("filename", "version"),
    form_fields=(
        FieldDef("filename", "File name"),
        FieldDef("version", "Version"),
        FieldDef("changelog", "Changelog", kind="multiline"),
        FieldDef("status", "Status", kind="choice", choices=("active", "archived")),
    ),
    columns=(
        ColumnDef("File", "filename"),
        ColumnDef("Version", "version", 90),
        ColumnDef("Size", "size", 90),
        ColumnDef("Uploaded", "uploadDate", 110),
        ColumnDef("Downloads", "downloads", 90),
        ColumnDef("Status", "status", 90),
    ),
)

for _config in (USERS, QUESTIONS, ANSWERS, CATEGORIES, LESSONS, NOTES, SIGNS,
                EXAMS, BOOKINGS, PAYMENTS, APKS):
    register_entity_config(_config)
