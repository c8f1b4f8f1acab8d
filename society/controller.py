"""
Application State Controller

This module sits between the record store and the UI. It owns the
in-memory copy of the society's records and is the only way to add to them.

DESIGN DECISION: Persist first, mirror second.
A new record is appended to the in-memory state only after the store has
confirmed the write. If the write fails, the in-memory state is left
exactly as it was, so the screen never shows a record that does not exist
on disk. There is no optimistic update and no rollback.

The in-memory state is an immutable SocietyState snapshot. Loading and
adding both swap in a new snapshot with a single assignment, so readers
never see a half-updated mix.
"""

import asyncio
import threading
from datetime import datetime, timezone
from typing import Callable, Optional

from pydantic import BaseModel, ConfigDict
from pydantic import ValidationError as PydanticValidationError

from society.activity import ActivityLogger, configure_logging
from society.aggregation import newest_first, summarize
from society.config import Settings, get_settings
from society.models import (
    Collection,
    DashboardSummary,
    Expense,
    ExpenseCategory,
    Member,
    NewExpenseInput,
    NewMemberInput,
    NewPaymentInput,
    Payment,
    Record,
    ValidationIssue,
    new_record_id,
)
from society.services.documents import DocumentRenderer
from society.services.image import PhotoService
from society.services.storage import (
    RecordStoreInterface,
    SQLiteRecordStore,
    StorageError,
)
from society.validation import RecordValidator, ValidationError

UNKNOWN_MEMBER = "Unknown member"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class SocietyState(BaseModel):
    """Immutable snapshot of every record currently loaded."""
    model_config = ConfigDict(frozen=True)

    members: tuple[Member, ...] = ()
    payments: tuple[Payment, ...] = ()
    expenses: tuple[Expense, ...] = ()
    loaded: bool = False

    def appended(self, collection: Collection, record: Record) -> "SocietyState":
        """
        A new snapshot with one more record in a collection.

        A record whose id is already present is not added twice; a reload
        may already have picked it up from storage.
        """
        current = getattr(self, collection.value)
        if any(existing.id == record.id for existing in current):
            return self
        return self.model_copy(update={collection.value: current + (record,)})


class SocietyController:
    """
    Loads, adds and exposes the society's records.

    Flow for every add:
    1. Validate the form input (ValidationError, nothing written)
    2. Build the record with a fresh id and timestamp
    3. Persist it (StorageError, state unchanged)
    4. Append it to the in-memory snapshot

    The controller is shared by every UI session, and each session drives
    it from its own thread and event loop. Only the synchronous snapshot
    swaps are guarded, by a threading lock; storage calls are never awaited
    while holding it, so two quick writes can never lose each other's append.
    """

    def __init__(
        self,
        store: RecordStoreInterface,
        validator: Optional[RecordValidator] = None,
        activity_logger: Optional[ActivityLogger] = None,
        clock: Callable[[], datetime] = utc_now,
        id_factory: Callable[[], str] = new_record_id,
    ):
        self._store = store
        self._validator = validator or RecordValidator()
        self._activity = activity_logger or ActivityLogger()
        self._clock = clock
        self._id_factory = id_factory
        self._state = SocietyState()
        self._mirror_lock = threading.Lock()
        self._loads_in_flight = 0
        self._writes_during_load: list[Record] = []

    # -------------------------------------------------------------------------
    # Read accessors
    # -------------------------------------------------------------------------

    @property
    def state(self) -> SocietyState:
        return self._state

    @property
    def members(self) -> tuple[Member, ...]:
        return self._state.members

    @property
    def payments(self) -> tuple[Payment, ...]:
        return self._state.payments

    @property
    def expenses(self) -> tuple[Expense, ...]:
        return self._state.expenses

    @property
    def is_loaded(self) -> bool:
        return self._state.loaded

    def summary(self) -> DashboardSummary:
        """Dashboard totals computed from the current snapshot."""
        state = self._state
        return summarize(state.members, state.payments, state.expenses)

    def find_member(self, member_id: str) -> Optional[Member]:
        for member in self._state.members:
            if member.id == member_id:
                return member
        return None

    @staticmethod
    def display_name(payment: Payment) -> str:
        """Name to show for a payment; the snapshot, never the live member."""
        return payment.member_name or UNKNOWN_MEMBER

    async def payments_for_member(self, member_id: str) -> list[Payment]:
        """A member's payment history from storage, newest first."""
        payments = await self._store.get_by_index(
            Collection.PAYMENTS, "member_id", member_id
        )
        return newest_first(payments)

    # -------------------------------------------------------------------------
    # Loading
    # -------------------------------------------------------------------------

    async def initialize(self) -> SocietyState:
        """
        Load all three collections from storage.

        The three reads run concurrently and must all succeed; the new
        snapshot is published only then. On failure the previous snapshot
        is kept and the error is raised to the caller.

        Records another session adds while the reads are in flight are
        carried into the new snapshot if the reads missed them.

        Raises:
            InitializationError: If storage cannot be opened
            StorageError: If any collection cannot be read
        """
        with self._mirror_lock:
            self._loads_in_flight += 1
        try:
            try:
                await self._store.open()
                members, payments, expenses = await asyncio.gather(
                    self._store.get_all(Collection.MEMBERS),
                    self._store.get_all(Collection.PAYMENTS),
                    self._store.get_all(Collection.EXPENSES),
                )
            except StorageError as e:
                self._activity.load_failed(e)
                raise

            state = SocietyState(
                members=tuple(members),
                payments=tuple(payments),
                expenses=tuple(expenses),
                loaded=True,
            )
            with self._mirror_lock:
                # Writes the reads missed; ones they saw are skipped by appended()
                for record in self._writes_during_load:
                    state = state.appended(Collection.for_record(record), record)
                self._state = state
        finally:
            with self._mirror_lock:
                self._loads_in_flight -= 1
                if not self._loads_in_flight:
                    self._writes_during_load.clear()

        self._activity.data_loaded(
            len(state.members), len(state.payments), len(state.expenses)
        )
        return state

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    def _validated(self, action: str, check, data):
        try:
            return check(data)
        except ValidationError as e:
            self._activity.validation_failed(action, e.fields)
            raise

    def _build(self, action: str, model: type, **fields) -> Record:
        """Construct a record, reporting model constraint failures as ValidationError."""
        try:
            return model(**fields)
        except PydanticValidationError as e:
            issues = [
                ValidationIssue(
                    field=".".join(str(part) for part in error["loc"]) or "record",
                    issue_type="invalid_value",
                    message=error["msg"],
                    severity="error",
                )
                for error in e.errors()
            ]
            self._activity.validation_failed(action, [i.field for i in issues])
            raise ValidationError(issues) from e

    async def _persist_and_mirror(self, record: Record) -> None:
        """Write a record to storage, then append it to the snapshot."""
        collection = Collection.for_record(record)
        try:
            await self._store.add(collection, record)
        except StorageError as e:
            self._activity.write_failed(collection.value, record.id, e)
            raise
        with self._mirror_lock:
            self._state = self._state.appended(collection, record)
            if self._loads_in_flight:
                self._writes_during_load.append(record)

    async def record_member(self, data: NewMemberInput) -> Member:
        """
        Add a new resident.

        Raises:
            ValidationError: If name or flat number is missing
            StorageError: If the member could not be saved
        """
        clean = self._validated("add_member", self._validator.validate_member, data)
        now = self._clock()
        member = self._build(
            "add_member",
            Member,
            id=self._id_factory(),
            name=clean.name,
            flat_number=clean.flat_number,
            mobile=clean.mobile,
            photo_base64=clean.photo_base64,
            created_at=int(now.timestamp() * 1000),
        )

        await self._persist_and_mirror(member)

        self._activity.member_added(member.id, member.name, member.flat_number)
        return member

    async def record_payment(self, data: NewPaymentInput) -> Payment:
        """
        Record a maintenance payment.

        The member's current name is copied onto the payment. If member_id
        is not among the loaded members the payment is still recorded, with
        data.member_name (or nothing) as the name.

        Raises:
            ValidationError: If member, month or amount is missing or invalid
            StorageError: If the payment could not be saved
        """
        clean = self._validated("record_payment", self._validator.validate_payment, data)

        with self._mirror_lock:
            member = self.find_member(clean.member_id)
        member_name = member.name if member else (clean.member_name or "")
        payment = self._build(
            "record_payment",
            Payment,
            id=self._id_factory(),
            member_id=clean.member_id,
            member_name=member_name,
            month=clean.month,
            amount=clean.amount,
            date=self._clock().isoformat(),
            note=clean.note,
        )
        await self._persist_and_mirror(payment)

        self._activity.payment_recorded(
            payment.id,
            payment.member_id,
            payment.month,
            str(payment.amount),
            member_known=member is not None,
        )
        return payment

    async def record_expense(self, data: NewExpenseInput) -> Expense:
        """
        Log an expense.

        Raises:
            ValidationError: If title or amount is missing or invalid
            StorageError: If the expense could not be saved
        """
        clean = self._validated("log_expense", self._validator.validate_expense, data)
        expense = self._build(
            "log_expense",
            Expense,
            id=self._id_factory(),
            title=clean.title,
            amount=clean.amount,
            date=self._clock().isoformat(),
            category=ExpenseCategory(clean.category),
        )

        await self._persist_and_mirror(expense)

        self._activity.expense_logged(
            expense.id,
            expense.title,
            expense.category.value,
            str(expense.amount),
        )
        return expense


def create_app_components(
    settings: Optional[Settings] = None,
) -> tuple[SocietyController, DocumentRenderer, PhotoService]:
    """
    Factory function to create all application components.

    Returns:
        (controller, document_renderer, photo_service)
    """
    settings = settings or get_settings()
    configure_logging(settings.society.log_level)

    store = SQLiteRecordStore(settings.storage)
    controller = SocietyController(store, activity_logger=ActivityLogger())
    renderer = DocumentRenderer(settings.society)

    return controller, renderer, PhotoService()
