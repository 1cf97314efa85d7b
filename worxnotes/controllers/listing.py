"""
List view over all repair sheets: search, sort and live updates.
"""
import enum
import logging
from typing import Optional

from pydantic import ValidationError as PydanticValidationError

from worxnotes.changefeed import ChangeEvent, ChangeType, Subscription
from worxnotes.errors import WorxNotesError
from worxnotes.notifications import NotificationChannel
from worxnotes.repository import SORTABLE_FIELDS, RepairRepository
from worxnotes.schemas.compat import upgrade_record
from worxnotes.schemas.repair_sheet import RepairSheet

logger = logging.getLogger(__name__)


class SortDirection(str, enum.Enum):
    ASC = "asc"
    DESC = "desc"


def matches_search(sheet: RepairSheet, term: str) -> bool:
    """Case-insensitive substring match on tech, RO, customer name and concern."""
    needle = term.strip().lower()
    if not needle:
        return True
    haystacks = (
        sheet.technician_name,
        sheet.ro_number,
        sheet.customer_display_name if (sheet.customer_first_name or sheet.customer_last_name) else "",
        sheet.customer_concern or "",
    )
    return any(needle in value.lower() for value in haystacks)


class RepairListView:
    def __init__(self, repository: RepairRepository, notifications: NotificationChannel):
        self.repository = repository
        self.notifications = notifications
        self.records: list[RepairSheet] = []
        self.loading = False
        self.search_term = ""
        self.sort_field = "created_at"
        self.sort_direction = SortDirection.DESC
        self._subscription: Optional[Subscription] = None

    async def load(self) -> list[RepairSheet]:
        self.loading = True
        try:
            self.records = await self.repository.list(
                order_by=self.sort_field,
                ascending=self.sort_direction is SortDirection.ASC,
            )
        except WorxNotesError as exc:
            self.records = []
            self.notifications.error("Error", str(exc))
        finally:
            self.loading = False
        return self.records

    def toggle_sort(self, field: str) -> None:
        """Flip direction on the active column, otherwise switch to ``field`` ascending."""
        if field not in SORTABLE_FIELDS:
            raise ValueError(f"Cannot sort by {field!r}")
        if field == self.sort_field:
            self.sort_direction = (
                SortDirection.DESC if self.sort_direction is SortDirection.ASC else SortDirection.ASC
            )
        else:
            self.sort_field = field
            self.sort_direction = SortDirection.ASC

    async def sort_by(self, field: str) -> list[RepairSheet]:
        self.toggle_sort(field)
        return await self.load()

    @property
    def visible(self) -> list[RepairSheet]:
        return [sheet for sheet in self.records if matches_search(sheet, self.search_term)]

    # Live updates

    @property
    def live(self) -> bool:
        return self._subscription is not None and self._subscription.active

    def start(self) -> None:
        if not self.live:
            self._subscription = self.repository.subscribe(self.apply_change)

    def stop(self) -> None:
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None

    def apply_change(self, event: ChangeEvent) -> None:
        """
        Merge a remote change into the loaded records.

        Inserts go to the top, updates replace by id, deletes remove by id.
        No version check is made against edits happening elsewhere; the last
        event to arrive wins.
        """
        if event.event_type is ChangeType.DELETE:
            self.records = [r for r in self.records if r.id != event.record_id]
            return

        try:
            sheet = RepairSheet.model_validate(upgrade_record(event.new))
        except PydanticValidationError:
            logger.warning("Ignoring malformed %s event for %s", event.event_type.value, event.record_id)
            return

        if event.event_type is ChangeType.INSERT:
            self.records = [sheet] + self.records
        else:
            self.records = [sheet if r.id == sheet.id else r for r in self.records]
