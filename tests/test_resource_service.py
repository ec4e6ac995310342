# =============================================================================
# tests/test_resource_service.py - Resource Orchestrator Tests
# =============================================================================
# Exercises the generic CRUD workflow against the in-memory store:
# validation, existence, uniqueness, partial mutation and persistence.
# =============================================================================

import asyncio
from decimal import Decimal

from core.models import ArticleRecord, CategoryRecord, FailureEnvelope, FailureKind, ProductRecord
from core.services import NO_FIELDS_MESSAGE
from core.validation.rules import MAX_IDENTIFIER
from lib.store import UniqueViolation
from tests.fakes import FIXED_NOW, SEED_TIME


def run(coro):
    return asyncio.run(coro)


# =============================================================================
# Reads
# =============================================================================

class TestReads:
    """Tests for get, list_all and list_by."""

    def test_get_returns_canonical_record(self, store, category_service):
        """Test that a stored row comes back as its record model."""
        store.seed("categories", name="Drinks")

        result = run(category_service.get("1"))

        assert isinstance(result, CategoryRecord)
        assert result.name == "Drinks"

    def test_get_invalid_id(self, category_service, store):
        """Test that a non-numeric id is rejected before any store call."""
        result = run(category_service.get("abc"))

        assert isinstance(result, FailureEnvelope)
        assert result.code == FailureKind.INVALID_INPUT
        assert result.summary == "Invalid category id"
        assert result.problems == ["Id must be a positive integer (got 'abc')."]
        assert store.calls == []

    def test_get_id_beyond_key_range(self, category_service, store):
        """Test that an id too large for a BIGSERIAL key never reaches the store."""
        too_large = str(MAX_IDENTIFIER + 1)

        result = run(category_service.get(too_large))

        assert result.code == FailureKind.INVALID_INPUT
        assert result.problems == [f"Id must be a positive integer (got '{too_large}')."]
        assert store.calls == []

    def test_get_largest_key_is_looked_up(self, category_service, store):
        """Test that the largest valid key is passed through as a normal miss."""
        result = run(category_service.get(str(MAX_IDENTIFIER)))

        assert result.code == FailureKind.NOT_FOUND

    def test_get_missing(self, category_service):
        """Test NOT_FOUND for a well-formed id with no row."""
        result = run(category_service.get(999))

        assert result.code == FailureKind.NOT_FOUND
        assert result.problems == ["No category with id 999."]

    def test_list_all_in_id_order(self, store, category_service):
        """Test that list_all keeps insertion (id) order."""
        store.seed("categories", name="B")
        store.seed("categories", name="A")

        result = run(category_service.list_all())

        assert [record.name for record in result] == ["B", "A"]

    def test_list_by_status_newest_first(self, store, article_service):
        """Test filtering articles by status, newest first."""
        # Arrange: Two published articles and one draft
        store.seed("articles", title="Old", body="x", status="published", created_at=SEED_TIME)
        store.seed("articles", title="Draft", body="x", status="draft")
        store.seed("articles", title="New", body="x", status="published", created_at=FIXED_NOW)

        # Act
        result = run(article_service.list_by("status", "published", order_by="created_at", descending=True))

        # Assert: Draft excluded, newest first
        assert [record.title for record in result] == ["New", "Old"]
        assert all(isinstance(record, ArticleRecord) for record in result)

    def test_list_by_unknown_status(self, store, article_service):
        """Test that an unknown status filter is rejected without a query."""
        result = run(article_service.list_by("status", "unknown"))

        assert result.code == FailureKind.INVALID_INPUT
        assert result.problems == ["Status must be one of: draft, published, archived (got 'unknown')."]
        assert store.calls == []


# =============================================================================
# Create
# =============================================================================

class TestCreate:
    """Tests for create."""

    def test_create_product_normalises_values(self, store, product_service):
        """Test that text is trimmed, price parsed and timestamps stamped."""
        result = run(product_service.create({"name": "  Kopi  ", "price": "18000", "category": "Drinks"}))

        assert isinstance(result, ProductRecord)
        assert result.id == 1
        assert result.name == "Kopi"
        assert result.price == Decimal("18000")
        assert result.created_at == FIXED_NOW
        assert result.updated_at == FIXED_NOW

    def test_create_reports_every_problem_in_field_order(self, store, product_service):
        """Test that all field problems are collected, in declaration order."""
        result = run(product_service.create({"price": -1, "image_url": "nope"}))

        assert result.code == FailureKind.INVALID_INPUT
        assert result.summary == "Validation failed"
        assert result.problems == [
            "Name is required.",
            "Price must not be negative (got -1).",
            "Image URL must be an http(s) URL.",
        ]
        assert store.writes == []

    def test_article_status_defaults_to_draft(self, article_service):
        """Test the default article status."""
        result = run(article_service.create({"title": "Hello", "body": "World"}))

        assert result.status.value == "draft"

    def test_category_names_need_not_be_unique(self, store, category_service):
        """Test that categories have no uniqueness lookup."""
        run(category_service.create({"name": "Drinks"}))
        result = run(category_service.create({"name": "Drinks"}))

        assert isinstance(result, CategoryRecord)
        assert store.lookups == []

    def test_unknown_payload_keys_are_ignored(self, store, category_service):
        """Test that id and timestamps in the payload are not written."""
        run(category_service.create({"name": "Drinks", "id": 50, "created_at": "x"}))

        assert store.writes[0].columns == ["name", "created_at", "updated_at"]


# =============================================================================
# Update
# =============================================================================

class TestUpdate:
    """Tests for partial update."""

    def test_absent_fields_are_untouched(self, store, product_service):
        """Test that only the supplied field changes."""
        # Arrange
        before = store.seed(
            "products", name="Kopi", price=Decimal("18000"), description="Iced", category="Drinks"
        )

        # Act
        result = run(product_service.update(before["id"], {"price": "20000"}))

        # Assert
        after = store.row("products", before["id"])
        assert result.price == Decimal("20000")
        for column in ("name", "description", "category", "image_url", "created_at"):
            assert after.get(column) == before.get(column)
        assert after["updated_at"] == FIXED_NOW

    def test_negative_price_rejected_and_record_unchanged(self, store, product_service):
        """Test that a rejected update leaves the row as it was."""
        before = store.seed("products", name="Kopi", price=Decimal("18000"))

        result = run(product_service.update(before["id"], {"price": -5}))

        assert result.code == FailureKind.INVALID_INPUT
        assert any("Price" in problem and "-5" in problem for problem in result.problems)
        assert store.row("products", before["id"]) == before
        assert store.writes == []

    def test_unknown_status_rejected(self, store, article_service):
        """Test that an article cannot move to an unknown status."""
        store.seed("articles", title="Hello", body="World", status="draft")

        result = run(article_service.update(1, {"status": "unknown"}))

        assert result.code == FailureKind.INVALID_INPUT
        assert result.problems == ["Status must be one of: draft, published, archived (got 'unknown')."]
        assert store.writes == []

    def test_null_clears_optional_field(self, store, product_service):
        """Test that null on an optional field stores null."""
        store.seed("products", name="Kopi", price=Decimal("1"), description="Iced")

        result = run(product_service.update(1, {"description": None}))

        assert result.description is None
        assert store.row("products", 1)["description"] is None

    def test_null_on_required_field_rejected(self, store, product_service):
        """Test that null on a required field is a validation problem."""
        store.seed("products", name="Kopi", price=Decimal("1"))

        result = run(product_service.update(1, {"name": None}))

        assert result.problems == ["Name cannot be cleared."]
        assert store.writes == []

    def test_empty_update_rejected_without_write(self, store, category_service):
        """Test that an update with no recognised fields is rejected."""
        store.seed("categories", name="Drinks")

        result = run(category_service.update(1, {}))

        assert result.code == FailureKind.INVALID_INPUT
        assert result.summary == NO_FIELDS_MESSAGE
        assert store.writes == []

    def test_identical_values_write_once_without_lookup(self, store, account_service):
        """Test that unchanged unique values skip the uniqueness lookup."""
        store.seed("users", username="ana", email="ana@x.com", password="x", role="user")

        result = run(account_service.update(1, {"username": "ana", "email": "ana@x.com"}))

        assert result.username == "ana"
        assert store.lookups == []
        assert len(store.writes) == 1
        assert store.writes[0].columns.count("updated_at") == 1

    def test_missing_record_checked_before_validation(self, store, category_service):
        """Test that NOT_FOUND wins over field problems."""
        result = run(category_service.update(999, {"name": ""}))

        assert result.code == FailureKind.NOT_FOUND
        assert store.writes == []


# =============================================================================
# Uniqueness
# =============================================================================

class TestUniqueness:
    """Tests for username and email uniqueness."""

    def test_changed_value_held_by_other_account_conflicts(self, store, account_service):
        """Test that taking another account's username is a CONFLICT with no write."""
        # Arrange: Two valid accounts
        store.seed("users", username="alice", email="alice@x.com", password="x", role="user")
        store.seed("users", username="bobby", email="bobby@x.com", password="x", role="user")

        # Act: Rename alice to bobby
        result = run(account_service.update(1, {"username": "bobby"}))

        # Assert: Rejected before the write
        assert result.code == FailureKind.CONFLICT
        assert result.summary == "Username already in use"
        assert result.problems == ["Username 'bobby' is already in use."]
        assert store.lookups == [("users", "username", "bobby")]
        assert store.writes == []
        assert store.row("users", 1)["username"] == "alice"

    def test_email_compared_after_normalisation(self, store, account_service):
        """Test that the email lookup uses the lowercased value."""
        store.seed("users", username="alice", email="a@x.com", password="x", role="user")
        store.seed("users", username="bobby", email="b@x.com", password="x", role="user")

        result = run(account_service.update(1, {"email": "B@X.com"}))

        assert result.code == FailureKind.CONFLICT
        assert store.lookups == [("users", "email", "b@x.com")]

    def test_store_unique_violation_becomes_conflict(self, store, account_service, monkeypatch):
        """Test that a constraint violation at write time maps to CONFLICT."""
        store.seed("users", username="alice", email="a@x.com", password="x", role="user")

        async def racing_write(instruction):
            raise UniqueViolation("users", "users_email_key")

        monkeypatch.setattr(store, "write", racing_write)

        result = run(account_service.update(1, {"email": "c@x.com"}))

        assert result.code == FailureKind.CONFLICT
        assert result.problems == ["Email 'c@x.com' is already in use."]

    def test_unrecognised_constraint_is_generic_conflict(self, store, category_service, monkeypatch):
        """Test the fallback message for constraints without a field."""
        async def racing_write(instruction):
            raise UniqueViolation("categories", "categories_pkey")

        monkeypatch.setattr(store, "write", racing_write)

        result = run(category_service.create({"name": "Drinks"}))

        assert result.code == FailureKind.CONFLICT
        assert result.summary == "Duplicate category"


# =============================================================================
# Delete
# =============================================================================

class TestDelete:
    """Tests for delete."""

    def test_delete_existing(self, store, category_service):
        """Test that delete returns the id and removes the row."""
        store.seed("categories", name="Drinks")

        assert run(category_service.delete("1")) == 1
        assert store.row("categories", 1) is None

    def test_delete_missing_has_no_side_effects(self, store, category_service):
        """Test NOT_FOUND on delete leaves other rows alone."""
        store.seed("categories", name="Drinks")

        result = run(category_service.delete(999))

        assert result.code == FailureKind.NOT_FOUND
        assert store.row("categories", 1) is not None

    def test_delete_id_beyond_key_range(self, store, category_service):
        """Test that an out-of-range id is rejected without touching the store."""
        result = run(category_service.delete(MAX_IDENTIFIER + 1))

        assert result.code == FailureKind.INVALID_INPUT
        assert store.calls == []
