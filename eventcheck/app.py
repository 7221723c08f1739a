from pathlib import Path

from eventcheck.config import Config
from eventcheck.export import DEFAULT_FIELD_MASK, build_field_mask
from eventcheck.mailer import build_transport
from eventcheck.session import ConsoleSession
from eventcheck.store import JsonAttendeeStore


class Console:
    """
    Wires a configuration to its collaborators and a fresh session.

    Attributes:
        config (Config): Loaded configuration.
        store (JsonAttendeeStore): Persistence collaborator.
        transport: Email transport for ticket resends.
        session (ConsoleSession): View and workflow state over the current snapshot.
    """

    def __init__(self, config: Config, transport=None):
        self.config = config
        self.store = JsonAttendeeStore(config.attendees_json)
        self.transport = transport or build_transport(config.transport, config.settings)
        self.session = ConsoleSession(
            self.store.list_attendees(), page_size=config.page_size
        )

    def __repr__(self):
        return f"{self.config.name}"

    def get_settings(self):
        """Settings collaborator."""
        return self.config.settings

    def default_field_mask(self) -> dict:
        if self.config.export_fields:
            return build_field_mask(self.config.export_fields)
        return dict(DEFAULT_FIELD_MASK)

    def reload(self):
        """Fetch a fresh snapshot from the store."""
        self.session.refresh(self.store.list_attendees())


def load_console(config: Config, transport=None) -> Console:
    """Build a Console for `config`.

    Args:
        config: Loaded configuration.
        transport: Optional transport override (used by tests).

    Returns:
        Console: The initialized console.
    """
    return Console(config, transport=transport)


def main(
    console: Console,
    format_name: str = "csv",
    fields=None,
    tab="live",
    search="",
    status_filter="all",
    payment_filter="all",
) -> Path:
    """Export the attendees matching the given tab and filters without prompting.

    Args:
        console: Loaded console.
        format_name: Registered export format (`csv` or `pdf`).
        fields: Field keys to export; defaults to the configured selection.
        tab: Tab whose members are exported.
        search: Free-text search term.
        status_filter: Check-in status filter.
        payment_filter: Payment status filter.

    Returns:
        Path: The written export file.
    """
    session = console.session
    session.set_tab(tab)
    session.set_search(search)
    session.set_status_filter(status_filter)
    session.set_payment_filter(payment_filter)

    field_mask = build_field_mask(fields) if fields else console.default_field_mask()
    path = session.export_file(
        console.config.export_dir,
        field_mask,
        format_name=format_name,
        title=console.config.name,
    )
    print(f"\n  {len(session.filtered())} attendees exported to {path}\n")
    return path
