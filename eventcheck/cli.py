import logging
from pathlib import Path

import click
import questionary
import yaml
from pydantic import ValidationError as ConfigValidationError

from eventcheck import errors
from eventcheck.app import load_console, main
from eventcheck.checkin import ScanStatus, check_in_by_payload
from eventcheck.classify import TAB_LABELS, Tab, badges
from eventcheck.config import load_config_file
from eventcheck.export import DEFAULT_FIELD_LABELS, build_field_mask
from eventcheck.exporters import get_exporters
from eventcheck.filters import PaymentFilter, StatusFilter
from eventcheck.session import ViewMode
from eventcheck.utils import (
    DISPLAY_DATE_FORMAT,
    DISPLAY_DATETIME_FORMAT,
    answer_label,
    format_answer,
    format_timestamp,
)

NAME_WIDTH = 24
EMAIL_WIDTH = 30


def load_config(ctx, param, value: Path):
    if value is None:
        return None
    try:
        return load_config_file(value)
    except (ConfigValidationError, FileNotFoundError, ValueError) as e:
        raise click.BadParameter(f"Invalid config: {e}")
    except yaml.YAMLError as e:
        raise click.BadParameter(f"Failed to load config: {e}")


def _ask(prompt):
    """Run a questionary prompt; Ctrl-C returns None."""
    return prompt.ask()


def _select(message, choices, default=None):
    return _ask(
        questionary.select(
            message, choices=choices, default=default, qmark="", instruction=" "
        )
    )


# =============================================================================
# rendering


def _status_label(attendee):
    return "CHECKED IN" if attendee.is_checked_in else "PENDING"


def _attendee_line(attendee, prefix="  "):
    registered = format_timestamp(attendee.registered_at, DISPLAY_DATE_FORMAT)
    tags = " ".join(f"[{b}]" for b in badges(attendee))
    return (
        f"{prefix}{attendee.name[:NAME_WIDTH].ljust(NAME_WIDTH)} "
        f"{attendee.email[:EMAIL_WIDTH].ljust(EMAIL_WIDTH)} "
        f"{(attendee.ticket_type or '-')[:16].ljust(16)} "
        f"{_status_label(attendee).ljust(10)} "
        f"{(attendee.payment_status.value if attendee.payment_status else 'free').ljust(7)} "
        f"{registered} {tags}"
    ).rstrip()


def print_header(console):
    session = console.session
    counts = session.tab_counts()
    tabs = " | ".join(
        f"{'*' if tab is session.tab else ' '}{TAB_LABELS[tab]} ({counts[tab]})"
        for tab in Tab
    )
    print(f"\n  {console.config.name}")
    print(f"  {'-' * len(console.config.name)}")
    print(f"  {tabs}")
    print(
        f"  View: {session.view_mode.value} | Search: {session.search or '-'} | "
        f"Status: {session.status_filter.value} | Payment: {session.payment_filter.value}"
    )


def print_page(console):
    session = console.session
    page = session.current_page()
    print_header(console)
    print()

    if not page.items:
        if session.view_mode is ViewMode.TABLES:
            print("    No tables found.")
        else:
            print(f"    No {session.tab.value} attendees found.")
        return

    if session.view_mode is ViewMode.TABLES:
        for table in page.items:
            marker = "-" if table.id in session.expanded_tables else "+"
            print(
                f"  {marker} {table.primary.name} <{table.primary.email}> "
                f"{table.seats} seat(s)"
            )
            if table.id in session.expanded_tables:
                print(_attendee_line(table.primary, prefix="      "))
                for guest in table.guests:
                    print(_attendee_line(guest, prefix="      "))
    else:
        for attendee in page.items:
            print(_attendee_line(attendee))

    print(
        f"\n  Showing {page.start_index + 1}-{page.end_index} of "
        f"{len(session.current_sequence())} | Page {session.page} of {page.total_pages}"
    )
    if session.tab is Tab.TEST and session.view_mode is ViewMode.LIST:
        print("  Test Data Mode")


def print_detail(console, attendee):
    print(f"\n  {attendee.name} <{attendee.email}> {' '.join(badges(attendee))}")
    print(f"  {'-' * (len(attendee.name) + len(attendee.email) + 3)}\n")
    rows = [
        ("Registration ID", attendee.id),
        ("Event", attendee.form_title or "Unknown Event"),
        ("Ticket Type", attendee.ticket_type),
        (
            "Registered At",
            format_timestamp(attendee.registered_at, DISPLAY_DATETIME_FORMAT),
        ),
        (
            "Status",
            (
                f"Checked In ({format_timestamp(attendee.checked_in_at, DISPLAY_DATETIME_FORMAT)})"
                if attendee.is_checked_in
                else "Not Checked In"
            ),
        ),
        (
            "Payment",
            (attendee.payment_status.value if attendee.payment_status else "free").title(),
        ),
        ("Amount", attendee.payment_amount),
        ("Invoice ID", attendee.invoice_id),
        ("Transaction ID", attendee.transaction_id),
        ("Dietary", attendee.dietary_preferences),
        ("Purchaser ID", attendee.primary_attendee_id if attendee.is_guest else None),
        ("QR Payload", attendee.qr_payload),
    ]
    for label, value in rows:
        if value:
            print(f"    {label.ljust(16)}: {value}")

    if attendee.answers:
        print("\n    Form Responses")
        for key, value in attendee.answers.items():
            print(f"      {answer_label(key)}: {format_answer(value)}")


# =============================================================================
# workflows


def _prompt_draft(draft) -> bool:
    """Fill the draft from prompts; returns False if the user cancels."""
    name = _ask(questionary.text("Name:", default=draft.name, qmark=""))
    if name is None:
        return False
    draft.name = name
    draft.email = _ask(questionary.text("Email:", default=draft.email, qmark="")) or ""
    draft.ticket_type = (
        _ask(questionary.text("Ticket type:", default=draft.ticket_type, qmark="")) or ""
    )
    payment_status = _select(
        "Payment status:",
        choices=["free", "paid", "pending"],
        default=draft.payment_status or "free",
    )
    # records without a status display as free; leave them unset unless changed
    if payment_status and (draft.payment_status is not None or payment_status != "free"):
        draft.payment_status = payment_status
    dietary = _ask(
        questionary.text(
            "Dietary preferences:", default=draft.dietary_preferences or "", qmark=""
        )
    )
    draft.dietary_preferences = dietary or None
    checked_in = _ask(
        questionary.confirm("Checked in?", default=draft.checked_in, qmark="")
    )
    if checked_in is not None and checked_in != draft.checked_in:
        draft.set_checked_in(checked_in)
    return True


def edit_attendee(console):
    session = console.session
    draft = session.start_edit()

    while True:
        if not _prompt_draft(draft):
            session.discard_edit()
            return

        while True:
            action = _select("Save changes?", choices=["Save", "Keep editing", "Discard"])
            if action == "Keep editing":
                break
            if action != "Save":
                session.discard_edit()
                print("\n  Changes discarded.")
                return
            try:
                session.commit_edit(console.store)
            except errors.ValidationError as e:
                # the draft is kept; go back to the prompts to correct it
                print(f"\n  {e}")
                break
            except errors.PersistenceError as e:
                print(f"\n  Save failed: {e}")
                continue
            print("\n  Attendee updated.")
            return


def toggle_check_in(console):
    """
    Check the open attendee in through the store's check-in call, or clear an
    existing check-in through a draft edit.
    """
    session = console.session
    try:
        if session.selected.is_checked_in:
            session.start_edit().set_checked_in(False)
            session.commit_edit(console.store)
            print(f"\n  {session.selected.name} is no longer checked in.")
        else:
            updated = session.check_in_selected(console.store)
            print(f"\n  Checked in {updated.name}.")
    except errors.EventcheckError as e:
        session.discard_edit()
        print(f"\n  {e}")


def resend_ticket(console):
    try:
        result = console.session.resend_email(console.get_settings(), console.transport)
    except errors.ResendInProgressError as e:
        print(f"\n  {e}")
    except errors.DeliveryError as e:
        print(f"\n  Failed to resend ticket: {e.message}")
    else:
        print(f"\n  Ticket resent to {result.recipient}")


def delete_attendee(console, attendee):
    confirmed = _ask(
        questionary.confirm(
            f"Delete {attendee.name}? This cannot be undone.", default=False, qmark=""
        )
    )
    if not confirmed:
        return False
    try:
        console.session.delete_selected(console.store)
    except errors.PersistenceError as e:
        print(f"\n  Delete failed: {e}")
        return False
    print(f"\n  Deleted {attendee.name}.")
    return True


def attendee_menu(console):
    session = console.session
    choices = {
        f"{a.name} <{a.email}> ({a.id})": a.id for a in session.filtered()
    }
    if session.view_mode is ViewMode.TABLES:
        for table in session.tables():
            for a in table.attendees:
                choices.setdefault(f"{a.name} <{a.email}> ({a.id})", a.id)
    if not choices:
        print("\n  No attendees to open.")
        return

    picked = _ask(
        questionary.autocomplete(
            "Attendee:", choices=list(choices), qmark="", ignore_case=True
        )
    )
    if picked not in choices:
        return
    session.open_detail(choices[picked])

    while session.selected is not None:
        attendee = session.selected
        print_detail(console, attendee)
        action = _select(
            "\nAction:",
            choices=[
                "Edit",
                "Toggle check-in",
                "Resend ticket email",
                "Copy guest invite link",
                "Delete",
                "Close",
            ],
        )
        if action == "Edit":
            edit_attendee(console)
        elif action == "Toggle check-in":
            toggle_check_in(console)
        elif action == "Resend ticket email":
            resend_ticket(console)
        elif action == "Copy guest invite link":
            print(f"\n  {session.invite_link(console.config.origin)}")
        elif action == "Delete":
            delete_attendee(console, attendee)
        else:
            session.close_detail()


def export_menu(console):
    default_mask = console.default_field_mask()
    fields = _ask(
        questionary.checkbox(
            "Fields to export:",
            choices=[
                questionary.Choice(label, value=key, checked=default_mask.get(key, False))
                for key, label in DEFAULT_FIELD_LABELS.items()
            ],
            qmark="",
        )
    )
    if fields is None:
        return
    format_name = _select("Format:", choices=sorted(get_exporters()), default="csv")
    try:
        path = console.session.export_file(
            console.config.export_dir,
            build_field_mask(fields),
            format_name=format_name,
            title=console.config.name,
        )
    except errors.ValidationError as e:
        print(f"\n  {e}")
        return
    print(f"\n  {len(console.session.filtered())} attendees exported to {path}")


def scan_menu(console):
    payload = _ask(questionary.text("Scanned payload or registration ID:", qmark=""))
    if not payload:
        return
    try:
        result = check_in_by_payload(
            console.store, console.session.attendees, payload
        )
    except errors.PersistenceError as e:
        print(f"\n  Check-in failed: {e}")
        return
    if result.status is ScanStatus.NOT_FOUND:
        print("\n  Ticket not found.")
    elif result.status is ScanStatus.ALREADY_CHECKED_IN:
        print(f"\n  {result.attendee.name} is already checked in.")
    else:
        console.reload()
        print(f"\n  Checked in {result.attendee.name}.")


def interactive(console):
    session = console.session
    choices = [
        "Show page",
        "Next page",
        "Previous page",
        "Go to page",
        "Switch tab",
        "Search",
        "Filter by check-in status",
        "Filter by payment status",
        "Toggle table view",
        "Expand/collapse a table",
        "Open an attendee",
        "Check in by QR payload",
        "Export",
        "Reload",
        "Quit",
    ]

    print_page(console)
    while True:

        print(f"\n---")

        choice = _select("\nAction:", choices=choices)

        if choice is None or choice == "Quit":
            print(f"\nProgram terminated.\n")
            return

        if choice == "Next page":
            session.next_page()
        elif choice == "Previous page":
            session.previous_page()
        elif choice == "Go to page":
            page = _ask(
                questionary.text("Page:", qmark="", validate=lambda val: val.isdigit())
            )
            if page:
                session.go_to_page(int(page))
        elif choice == "Switch tab":
            tab = _select(
                "Tab:", choices=[t.value for t in Tab], default=session.tab.value
            )
            if tab:
                session.set_tab(tab)
        elif choice == "Search":
            search = _ask(questionary.text("Search:", default=session.search, qmark=""))
            if search is not None:
                session.set_search(search)
        elif choice == "Filter by check-in status":
            status = _select(
                "Status:",
                choices=[s.value for s in StatusFilter],
                default=session.status_filter.value,
            )
            if status:
                session.set_status_filter(status)
        elif choice == "Filter by payment status":
            payment = _select(
                "Payment:",
                choices=[p.value for p in PaymentFilter],
                default=session.payment_filter.value,
            )
            if payment:
                session.set_payment_filter(payment)
        elif choice == "Toggle table view":
            session.set_view_mode(
                ViewMode.LIST
                if session.view_mode is ViewMode.TABLES
                else ViewMode.TABLES
            )
        elif choice == "Expand/collapse a table":
            tables = {
                f"{t.primary.name} ({t.id})": t.id for t in session.current_page().items
            } if session.view_mode is ViewMode.TABLES else {}
            if not tables:
                print("\n  Switch to the table view first.")
                continue
            picked = _select("Table:", choices=list(tables))
            if picked:
                session.toggle_table(tables[picked])
        elif choice == "Open an attendee":
            attendee_menu(console)
        elif choice == "Check in by QR payload":
            scan_menu(console)
        elif choice == "Export":
            export_menu(console)
            continue
        elif choice == "Reload":
            console.reload()

        print_page(console)


@click.command(context_settings={"max_content_width": 120})
@click.option(
    "--config",
    type=click.Path(exists=True, dir_okay=False, readable=True, path_type=Path),
    callback=load_config,
    required=True,
    help="Path to console configuration file.",
)
@click.option(
    "--export",
    "export_format",
    type=click.Choice(sorted(get_exporters())),
    default=None,
    help="Export the filtered attendees in this format and exit.",
)
@click.option(
    "--fields",
    default=None,
    help="Comma-separated field keys to export (e.g. id,name,email).",
)
@click.option(
    "--tab",
    type=click.Choice([t.value for t in Tab]),
    default=Tab.LIVE.value,
    show_default=True,
    help="Tab to export.",
)
@click.option("--search", default="", help="Free-text search applied before export.")
@click.option(
    "--status",
    type=click.Choice([s.value for s in StatusFilter]),
    default=StatusFilter.ALL.value,
    show_default=True,
    help="Check-in status filter.",
)
@click.option(
    "--payment",
    type=click.Choice([p.value for p in PaymentFilter]),
    default=PaymentFilter.ALL.value,
    show_default=True,
    help="Payment status filter.",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="WARNING",
    show_default=True,
    help="Logging verbosity.",
)
def cli(config, export_format, fields, tab, search, status, payment, log_level):
    """Browse, edit and export event attendees."""

    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        console = load_console(config)
    except errors.PersistenceError as e:
        raise click.ClickException(str(e))

    if export_format:
        try:
            main(
                console,
                format_name=export_format,
                fields=fields.split(",") if fields else None,
                tab=tab,
                search=search,
                status_filter=status,
                payment_filter=payment,
            )
        except errors.ValidationError as e:
            raise click.UsageError(str(e))
        return

    interactive(console)


if __name__ == "__main__":
    cli()
