# =============================================================================
# core/services/resource_service.py - Resource Mutation Orchestrator
# =============================================================================
# Generic CRUD workflow shared by every resource, driven by a ResourceSpec:
#
#   received -> identifier validated -> record fetched -> fields validated
#            -> uniqueness checked -> mutation built -> persisted -> record
#
# Every reject along the way is terminal and returned as a FailureEnvelope;
# validation-class and conflict-class problems never raise. Store and
# infrastructure errors propagate to the application's exception handlers.
# =============================================================================

import logging
from datetime import datetime
from typing import Any, Callable, Mapping, Sequence

from pydantic import BaseModel

from core.models.changes import ABSENT, Clear, FieldChange, SetTo, changes_from_mapping
from core.models.failure import FailureEnvelope, FailureKind
from core.mutation import build_insert, build_update
from core.resources import ResourceSpec
from core.validation import check_unique, collect_failure, conflict_message, failure
from core.validation.rules import parse_identifier, validate_identifier
from lib.store import Store, StoreError, UniqueViolation, WriteInstruction
from lib.utils import utc_now

logger = logging.getLogger(__name__)

NO_FIELDS_MESSAGE = "No fields provided for update."


class RequestRejected(Exception):
    """Internal short-circuit carrying the envelope to return."""

    def __init__(self, envelope: FailureEnvelope):
        super().__init__(envelope.summary)
        self.envelope = envelope


class ResourceService:
    """
    CRUD orchestrator for one resource.

    Public methods return a canonical record (or list) on success and a
    FailureEnvelope on any recoverable failure.

    Example:
        service = ResourceService(PRODUCTS, store)
        result = await service.update("7", {"price": -5})
        if isinstance(result, FailureEnvelope):
            ...
    """

    def __init__(
        self,
        resource: ResourceSpec,
        store: Store,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.resource = resource
        self.store = store
        self.clock = clock

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    async def list_all(self, actor: Any = None) -> list[BaseModel]:
        rows = await self.store.fetch_all(self.resource.table)
        return [self._canonical(row) for row in rows]

    async def list_by(
        self,
        field: str,
        value: Any,
        order_by: str = "id",
        descending: bool = False,
        actor: Any = None,
    ) -> list[BaseModel] | FailureEnvelope:
        """List records whose `field` equals `value`, after validating the value."""
        field_spec = self.resource.field_spec(field)
        rejection = collect_failure(
            f"Invalid {field_spec.label.lower()}", field_spec.rule(value), clock=self.clock
        )
        if rejection:
            return rejection

        rows = await self.store.fetch_where(
            self.resource.table,
            field,
            field_spec.normalize(value),
            order_by=order_by,
            descending=descending,
        )
        return [self._canonical(row) for row in rows]

    async def get(self, key: Any, actor: Any = None) -> BaseModel | FailureEnvelope:
        try:
            _, row = await self._fetch_existing(key)
        except RequestRejected as rejected:
            return rejected.envelope
        return self._canonical(row)

    # -------------------------------------------------------------------------
    # Create
    # -------------------------------------------------------------------------

    async def create(
        self,
        payload: Mapping[str, Any],
        actor: Any = None,
        fields: Sequence[str] | None = None,
    ) -> BaseModel | FailureEnvelope:
        """
        Create a record from a fully validated payload.

        Args:
            payload: Plain field mapping from the request
            actor: Authenticated caller, if any (used for audit logging)
            fields: Accepted fields (defaults to the resource's create fields)

        Returns:
            Canonical record, or FailureEnvelope (INVALID_INPUT / CONFLICT)
        """
        fields = tuple(fields or self.resource.create_fields)
        changes = changes_from_mapping(payload, fields)

        try:
            values = self._validate_create(changes, fields)
            for name in self.resource.unique_fields:
                if name in values:
                    await self._guard_unique(name, values[name], current_value=None)

            values = await self._before_insert(values)
            instruction = build_insert(
                self.resource.table, values, self.resource.returning, now=self.clock()
            )
            row = await self._persist(instruction, values)
        except RequestRejected as rejected:
            return rejected.envelope

        if row is None:
            raise StoreError(f"Insert into {self.resource.table} returned no data")

        logger.info(f"Created {self.resource.name} {row.get('id')}{self._by(actor)}")
        return self._canonical(row)

    # -------------------------------------------------------------------------
    # Update
    # -------------------------------------------------------------------------

    async def update(
        self,
        key: Any,
        payload: Mapping[str, Any],
        actor: Any = None,
        fields: Sequence[str] | None = None,
    ) -> BaseModel | FailureEnvelope:
        """
        Apply a sparse update.

        Fields missing from `payload` are left untouched; optional fields
        sent as None are cleared. Uniqueness is only checked for unique
        fields whose value actually changes.

        Returns:
            Canonical record, or FailureEnvelope
            (INVALID_INPUT / NOT_FOUND / CONFLICT)
        """
        fields = tuple(fields or self.resource.update_fields)

        try:
            record_key, current = await self._fetch_existing(key)

            changes = changes_from_mapping(payload, fields)
            changes = self._validate_update(changes, fields)

            for name in self.resource.unique_fields:
                change = changes.get(name, ABSENT)
                if isinstance(change, SetTo):
                    await self._guard_unique(
                        name, change.value, current_value=current.get(name), owner_key=record_key
                    )

            instruction = build_update(
                self.resource.table,
                record_key,
                changes,
                columns=fields,
                returning=self.resource.returning,
                now=self.clock(),
            )
            if instruction is None:
                raise RequestRejected(
                    failure(
                        FailureKind.INVALID_INPUT,
                        NO_FIELDS_MESSAGE,
                        [NO_FIELDS_MESSAGE],
                        clock=self.clock,
                    )
                )

            row = await self._persist(instruction, instruction.values)
        except RequestRejected as rejected:
            return rejected.envelope

        if row is None:
            # Deleted between the existence check and the write
            return self._not_found(key)

        logger.info(f"Updated {self.resource.name} {record_key} ({', '.join(instruction.columns)}){self._by(actor)}")
        return self._canonical(row)

    # -------------------------------------------------------------------------
    # Delete
    # -------------------------------------------------------------------------

    async def delete(self, key: Any, actor: Any = None) -> int | FailureEnvelope:
        """Delete unconditionally. Returns the deleted key."""
        try:
            record_key = self._parse_key(key)
        except RequestRejected as rejected:
            return rejected.envelope

        deleted = await self.store.delete(self.resource.table, record_key)
        if deleted is None:
            return self._not_found(key)

        logger.info(f"Deleted {self.resource.name} {deleted}{self._by(actor)}")
        return deleted

    # -------------------------------------------------------------------------
    # Stages
    # -------------------------------------------------------------------------

    def _parse_key(self, key: Any) -> int:
        record_key = parse_identifier(key)
        if record_key is None:
            raise RequestRejected(
                failure(
                    FailureKind.INVALID_INPUT,
                    f"Invalid {self.resource.name} id",
                    validate_identifier(key),
                    clock=self.clock,
                )
            )
        return record_key

    async def _fetch_existing(self, key: Any) -> tuple[int, dict[str, Any]]:
        record_key = self._parse_key(key)
        row = await self.store.fetch_by_key(self.resource.table, record_key)
        if row is None:
            raise RequestRejected(self._not_found(key))
        return record_key, row

    def _validate_create(
        self, changes: Mapping[str, FieldChange], fields: Sequence[str]
    ) -> dict[str, Any]:
        """Run every create rule; return normalised values ready to insert."""
        problem_lists = []
        values: dict[str, Any] = {}

        for name in fields:
            field_spec = self.resource.field_spec(name)
            change = changes[name]

            if isinstance(change, SetTo):
                candidate = change.value
            elif field_spec.default is not None:
                candidate = field_spec.default
            else:
                candidate = None

            problems = field_spec.rule(candidate)
            problem_lists.append(problems)
            if not problems:
                values[name] = field_spec.normalize(candidate)

        rejection = collect_failure("Validation failed", *problem_lists, clock=self.clock)
        if rejection:
            raise RequestRejected(rejection)
        return values

    def _validate_update(
        self, changes: Mapping[str, FieldChange], fields: Sequence[str]
    ) -> dict[str, FieldChange]:
        """
        Run rules over supplied fields only; return normalised changes.

        Absent fields are not validated. Clearing a required field is a problem.
        """
        problem_lists = []
        normalised: dict[str, FieldChange] = {}

        for name in fields:
            field_spec = self.resource.field_spec(name)
            change = changes[name]

            if isinstance(change, Clear):
                if field_spec.required:
                    problem_lists.append([f"{field_spec.label} cannot be cleared."])
                normalised[name] = change
            elif isinstance(change, SetTo):
                problems = field_spec.rule(change.value)
                problem_lists.append(problems)
                normalised[name] = SetTo(field_spec.normalize(change.value))
            else:
                normalised[name] = change

        rejection = collect_failure("Validation failed", *problem_lists, clock=self.clock)
        if rejection:
            raise RequestRejected(rejection)
        return normalised

    async def _guard_unique(
        self, name: str, value: Any, current_value: Any, owner_key: int | None = None
    ) -> None:
        async def lookup(candidate: Any) -> dict[str, Any] | None:
            return await self.store.fetch_by_unique_field(self.resource.table, name, candidate)

        problem = await check_unique(name, value, current_value, lookup, owner_key=owner_key)
        if problem:
            raise RequestRejected(self._conflict(name, problem))

    async def _before_insert(self, values: dict[str, Any]) -> dict[str, Any]:
        """Hook for subclasses to transform values right before the insert."""
        return values

    async def _persist(self, instruction: WriteInstruction, values: Mapping[str, Any]) -> dict[str, Any] | None:
        """Execute the write, translating store-level unique violations."""
        try:
            return await self.store.write(instruction)
        except UniqueViolation as e:
            for name in self.resource.unique_fields:
                if name in e.constraint:
                    raise RequestRejected(
                        self._conflict(name, conflict_message(name, values.get(name)))
                    ) from e
            raise RequestRejected(
                failure(
                    FailureKind.CONFLICT,
                    f"Duplicate {self.resource.name}",
                    ["A record with the same unique value already exists."],
                    clock=self.clock,
                )
            ) from e

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _canonical(self, row: Mapping[str, Any]) -> BaseModel:
        return self.resource.record_model.model_validate(dict(row))

    def _not_found(self, key: Any) -> FailureEnvelope:
        message = f"{self.resource.label} not found"
        return failure(
            FailureKind.NOT_FOUND, message, [f"No {self.resource.name} with id {key}."], clock=self.clock
        )

    def _conflict(self, name: str, problem: str) -> FailureEnvelope:
        label = self.resource.field_spec(name).label
        return failure(FailureKind.CONFLICT, f"{label} already in use", [problem], clock=self.clock)

    @staticmethod
    def _by(actor: Any) -> str:
        actor_id = getattr(actor, "id", None)
        return f" by user {actor_id}" if actor_id is not None else ""
