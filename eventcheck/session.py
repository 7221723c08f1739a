import logging
from dataclasses import dataclass
from datetime import datetime, tzinfo
from enum import Enum
from pathlib import Path
from typing import Iterable, Mapping

from eventcheck import errors
from eventcheck.attendee import Attendee
from eventcheck.classify import Tab, in_tab
from eventcheck.editor import Draft, RecordEditor
from eventcheck.export import (
    DEFAULT_FIELD_LABELS,
    ExportTable,
    export_filename,
    project,
    to_csv_text,
)
from eventcheck.exporters import get_exporter
from eventcheck.filters import PaymentFilter, StatusFilter, filter_attendees
from eventcheck.group import Roster
from eventcheck.mailer import Attachment, EmailResult, render_email
from eventcheck.paginate import Page, clamp_page, paginate, total_pages
from eventcheck.pdf import generate_ticket_pdf
from eventcheck.table import Table, group_tables, guest_invite_link

logger = logging.getLogger(__name__)


class ViewMode(str, Enum):
    LIST = "list"
    TABLES = "tables"


class DetailState(str, Enum):
    CLOSED = "closed"
    VIEWING = "viewing"
    EDITING = "editing"


class ResendState(str, Enum):
    IDLE = "idle"
    SENDING = "sending"


@dataclass(frozen=True)
class ExportResult:
    filename: str
    text: str
    table: ExportTable


class ConsoleSession:
    """
    State of one attendee console: the current snapshot plus every view and workflow flag.

    All listings are recomputed from the snapshot on demand. The only long-lived flags are
    explicit fields here: the active tab and filters, the view mode and page, which
    attendee is open (`detail_state`), the edit draft, the resend state and the set of
    expanded tables.

    Attributes:
        roster (Roster): Read-only snapshot from the store.
        page_size (int): Rows (or tables) per page.
    """

    def __init__(self, attendees: Iterable[Attendee], page_size: int = 10):
        if page_size < 1:
            raise ValueError(f"page_size must be at least 1, got {page_size}")
        self.roster = Roster(tuple(attendees))
        self.page_size = page_size
        self.tab = Tab.LIVE
        self.search = ""
        self.status_filter = StatusFilter.ALL
        self.payment_filter = PaymentFilter.ALL
        self.view_mode = ViewMode.LIST
        self.page = 1
        self.detail_state = DetailState.CLOSED
        self.selected_id = None
        self.editor = RecordEditor()
        self.resend_state = ResendState.IDLE
        self.expanded_tables: set[str] = set()

    # =========================================================================
    # snapshot

    @property
    def attendees(self) -> tuple[Attendee, ...]:
        return self.roster.attendees

    def refresh(self, attendees: Iterable[Attendee]):
        """
        Replace the snapshot. A selected attendee that no longer exists closes the detail
        view, and the page is clamped to the new page count.
        """
        self.roster = Roster(tuple(attendees))
        if self.selected_id is not None and self.selected is None:
            self.close_detail()
        known = {a.id for a in self.attendees}
        self.expanded_tables &= known
        self.page = clamp_page(self.page, self.total_pages())

    # =========================================================================
    # filters; each change returns to page 1

    def set_tab(self, tab: Tab):
        self.tab = Tab(tab)
        self.page = 1

    def set_search(self, search: str):
        self.search = search or ""
        self.page = 1

    def set_status_filter(self, status_filter: StatusFilter):
        self.status_filter = StatusFilter(status_filter)
        self.page = 1

    def set_payment_filter(self, payment_filter: PaymentFilter):
        self.payment_filter = PaymentFilter(payment_filter)
        self.page = 1

    def set_view_mode(self, view_mode: ViewMode):
        """
        Switch between the flat list and the table view.

        The page is kept, but clamped to the new view's page count since the two views
        paginate different sequences.
        """
        self.view_mode = ViewMode(view_mode)
        self.page = clamp_page(self.page, self.total_pages())

    # =========================================================================
    # listings

    def filtered(self) -> list[Attendee]:
        """Attendees matching the tab and all filters, in snapshot order."""
        return filter_attendees(
            self.attendees,
            self.tab,
            self.search,
            self.status_filter,
            self.payment_filter,
        )

    def tables(self) -> list[Table]:
        """Purchaser/guest tables over all non-test attendees, narrowed by search."""
        return group_tables(self.attendees, self.search)

    def current_sequence(self) -> list:
        if self.view_mode is ViewMode.TABLES:
            return self.tables()
        return self.filtered()

    def total_pages(self) -> int:
        return total_pages(len(self.current_sequence()), self.page_size)

    def current_page(self) -> Page:
        return paginate(self.current_sequence(), self.page, self.page_size)

    def go_to_page(self, page: int) -> int:
        self.page = clamp_page(page, self.total_pages())
        return self.page

    def next_page(self) -> int:
        return self.go_to_page(self.page + 1)

    def previous_page(self) -> int:
        return self.go_to_page(self.page - 1)

    def tab_counts(self) -> dict[Tab, int]:
        """Number of attendees in each tab, ignoring search and filters."""
        return {tab: sum(1 for a in self.attendees if in_tab(a, tab)) for tab in Tab}

    def toggle_table(self, table_id: str) -> bool:
        """Expand or collapse a table in the table view. Returns the new state."""
        if table_id in self.expanded_tables:
            self.expanded_tables.discard(table_id)
            return False
        self.expanded_tables.add(table_id)
        return True

    # =========================================================================
    # detail view and editing

    @property
    def selected(self) -> Attendee | None:
        return self.roster.find_attendee(self.selected_id)

    def _require_selected(self) -> Attendee:
        attendee = self.selected
        if attendee is None:
            raise ValueError("No attendee selected")
        return attendee

    def open_detail(self, attendee_id: str) -> Attendee:
        """
        Open an attendee. An edit in progress for a different attendee is discarded.

        Raises:
            ValueError: If the id is not in the snapshot.
        """
        attendee = self.roster.get_attendee_by_id(attendee_id)
        if self.editor.is_editing and self.editor.original.id != attendee_id:
            self.editor.discard()
        self.selected_id = attendee_id
        self.detail_state = (
            DetailState.EDITING if self.editor.is_editing else DetailState.VIEWING
        )
        return attendee

    def close_detail(self):
        self.editor.discard()
        self.selected_id = None
        self.detail_state = DetailState.CLOSED

    def start_edit(self) -> Draft:
        draft = self.editor.stage_edit(self._require_selected())
        self.detail_state = DetailState.EDITING
        return draft

    def discard_edit(self):
        self.editor.discard()
        if self.selected_id is not None:
            self.detail_state = DetailState.VIEWING

    def commit_edit(self, store) -> Attendee:
        """
        Commit the draft through the store and reload the snapshot.

        On failure the session stays in the editing state with the draft intact.
        """
        updated = self.editor.commit(store)
        self.detail_state = DetailState.VIEWING
        self.refresh(store.list_attendees())
        return updated

    def delete_selected(self, store):
        """
        Delete the open attendee. If the store fails, the detail view stays open so the
        deletion can be retried.
        """
        attendee = self._require_selected()
        store.delete_attendee(attendee.id)
        self.close_detail()
        self.refresh(store.list_attendees())

    def check_in_selected(self, store, now: str | None = None) -> Attendee:
        """Check the open attendee in through the store's side channel."""
        attendee = self._require_selected()
        updated = store.check_in(attendee.id, now)
        self.refresh(store.list_attendees())
        return updated

    def invite_link(self, origin: str) -> str:
        return guest_invite_link(origin, self._require_selected())

    # =========================================================================
    # email

    def resend_email(self, settings, transport) -> EmailResult:
        """
        Resend the ticket email for the open attendee.

        Only one resend may be outstanding. The state returns to idle whether the send
        succeeds or fails, so a failed send can be retried by hand.

        Raises:
            ResendInProgressError: If a resend is already in flight.
            DeliveryError: If the transport fails.
        """
        attendee = self._require_selected()
        if self.resend_state is ResendState.SENDING:
            raise errors.ResendInProgressError(
                f"A ticket email is already being sent for {self.selected_id}"
            )

        self.resend_state = ResendState.SENDING
        try:
            html_body = render_email(settings, settings.email_body_template, attendee)
            attachments = []
            if settings.pdf_settings.enabled:
                attachments.append(
                    Attachment(
                        filename=f"ticket_{attendee.id}.pdf",
                        content=generate_ticket_pdf(attendee, settings),
                    )
                )
            result = transport.send(
                attendee.email, settings.email_subject, html_body, attachments
            )
            logger.info("Resent ticket email for %s", attendee.id)
            return result
        finally:
            self.resend_state = ResendState.IDLE

    # =========================================================================
    # export

    def export(
        self,
        field_mask: Mapping[str, bool],
        field_labels: Mapping[str, str] = DEFAULT_FIELD_LABELS,
        now: datetime | None = None,
        tz: tzinfo | None = None,
    ) -> ExportResult:
        """
        Export every attendee matching the current tab and filters, across all pages.

        Raises:
            ValidationError: If no field is selected.
        """
        table = project(self.filtered(), field_mask, field_labels, tz=tz)
        return ExportResult(
            filename=export_filename(now), text=to_csv_text(table), table=table
        )

    def export_file(
        self,
        directory,
        field_mask: Mapping[str, bool],
        format_name: str = "csv",
        field_labels: Mapping[str, str] = DEFAULT_FIELD_LABELS,
        title: str = "",
        now: datetime | None = None,
        tz: tzinfo | None = None,
    ) -> Path:
        """
        Export the filtered attendees to a file in `directory` using a registered format.

        Returns:
            Path: The written file.
        """
        exporter = get_exporter(format_name)()
        table = project(self.filtered(), field_mask, field_labels, tz=tz)
        path = Path(directory) / export_filename(now, exporter.extension)
        exporter.write(table, path, title=title)
        logger.info("Exported %d attendees to %s", len(table.rows), path)
        return path
