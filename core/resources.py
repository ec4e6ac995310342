# =============================================================================
# core/resources.py - Declarative Resource Definitions
# =============================================================================
# Each resource is described once: its table, its fields (rule, required,
# unique, default, normaliser) and which fields creation and update accept.
# The ResourceService applies these definitions uniformly, so no resource
# carries its own copy of the validation workflow.
# =============================================================================

from dataclasses import dataclass, field
from typing import Any, Callable

from pydantic import BaseModel

from core.models.account import AccountRecord, AccountRole
from core.models.article import ArticleRecord, ArticleStatus
from core.models.catalog import CategoryRecord, ProductRecord
from core.validation import rules

Rule = Callable[[Any], list[str]]


@dataclass(frozen=True)
class FieldSpec:
    """
    How one field is validated and stored.

    Attributes:
        name: Column / payload key
        rule: Validation rule from core.validation.rules
        label: Human-readable name used in messages
        required: Must be supplied on create and cannot be cleared on update
        unique: Checked by the uniqueness guard before every write
        default: Value used on create when the field is not supplied
        normalize: Converts an accepted value into its stored form
    """

    name: str
    rule: Rule
    label: str
    required: bool = False
    unique: bool = False
    default: Any = None
    normalize: Callable[[Any], Any] = rules.normalize_text


@dataclass(frozen=True)
class ResourceSpec:
    """A resource's table, fields and record model."""

    name: str
    table: str
    record_model: type[BaseModel]
    fields: tuple[FieldSpec, ...]
    create_fields: tuple[str, ...]
    update_fields: tuple[str, ...]
    _by_name: dict[str, FieldSpec] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "_by_name", {spec.name: spec for spec in self.fields})
        unknown = set(self.create_fields + self.update_fields) - set(self._by_name)
        if unknown:
            raise ValueError(f"{self.name}: unknown fields {sorted(unknown)}")

    def field_spec(self, name: str) -> FieldSpec:
        return self._by_name[name]

    @property
    def label(self) -> str:
        return self.name.capitalize()

    @property
    def unique_fields(self) -> list[str]:
        return [spec.name for spec in self.fields if spec.unique]

    @property
    def returning(self) -> list[str]:
        """Canonical columns: exactly the fields of the record model."""
        return list(self.record_model.model_fields)


# =============================================================================
# Accounts
# =============================================================================

ACCOUNTS = ResourceSpec(
    name="user",
    table="users",
    record_model=AccountRecord,
    fields=(
        FieldSpec("username", rules.validate_username, "Username", required=True, unique=True),
        FieldSpec(
            "email", rules.validate_email, "Email",
            required=True, unique=True, normalize=rules.normalize_email,
        ),
        FieldSpec(
            "password", rules.validate_password, "Password",
            required=True, normalize=lambda value: value,
        ),
        FieldSpec(
            "role", rules.validate_role, "Role",
            required=True, default=AccountRole.USER.value,
        ),
        FieldSpec("avatar_url", rules.validate_image_url, "Avatar URL"),
        FieldSpec("address", rules.validate_address, "Address"),
        FieldSpec("phone", rules.validate_phone, "Phone"),
    ),
    create_fields=("username", "email", "password", "role", "avatar_url", "address", "phone"),
    update_fields=("username", "email", "role", "avatar_url", "address", "phone"),
)

# Self-service subsets: registration cannot pick a role, profile edits
# cannot change it.
REGISTER_FIELDS = ("username", "email", "password", "role", "address", "phone")
PROFILE_FIELDS = ("username", "email", "avatar_url", "address", "phone")


# =============================================================================
# Catalog
# =============================================================================

CATEGORIES = ResourceSpec(
    name="category",
    table="categories",
    record_model=CategoryRecord,
    fields=(
        FieldSpec("name", rules.validate_category_name, "Name", required=True),
    ),
    create_fields=("name",),
    update_fields=("name",),
)

PRODUCTS = ResourceSpec(
    name="product",
    table="products",
    record_model=ProductRecord,
    fields=(
        FieldSpec("name", rules.validate_product_name, "Name", required=True),
        FieldSpec(
            "price", rules.validate_price, "Price",
            required=True, normalize=rules.normalize_price,
        ),
        FieldSpec("description", rules.validate_description, "Description"),
        FieldSpec("image_url", rules.validate_image_url, "Image URL"),
        FieldSpec("category", rules.validate_category_tag, "Category"),
    ),
    create_fields=("name", "price", "description", "image_url", "category"),
    update_fields=("name", "price", "description", "image_url", "category"),
)


# =============================================================================
# News
# =============================================================================

ARTICLES = ResourceSpec(
    name="article",
    table="articles",
    record_model=ArticleRecord,
    fields=(
        FieldSpec("title", rules.validate_title, "Title", required=True),
        FieldSpec("body", rules.validate_body, "Body", required=True),
        FieldSpec("image_url", rules.validate_image_url, "Image URL"),
        FieldSpec("author", rules.validate_author, "Author"),
        FieldSpec(
            "status", rules.validate_status, "Status",
            required=True, default=ArticleStatus.DRAFT.value,
        ),
    ),
    create_fields=("title", "body", "image_url", "author", "status"),
    update_fields=("title", "body", "image_url", "author", "status"),
)
