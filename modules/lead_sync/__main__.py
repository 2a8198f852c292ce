"""
Lead Sync CLI entry point.

Usage:
    python -m modules.lead_sync test          Test connections
    python -m modules.lead_sync status        Show sync status
    python -m modules.lead_sync sync-once     Run one sync cycle
    python -m modules.lead_sync run           Start sync service
    python -m modules.lead_sync mappings      Show current lead mappings
    python -m modules.lead_sync ensure-lists  Create the required board lists
"""

import argparse
import logging
import sys

from .config import config
from .logging_setup import setup_logging

logger = logging.getLogger(__name__)


def _config_errors() -> bool:
    """Print config errors, if any. Returns True when the config is unusable."""
    errors = config.validate()
    if errors:
        print("\n[CONFIG ERRORS]")
        for err in errors:
            print(f"  - {err}")
        return True
    return False


def cmd_test():
    """Test connections to the Sheet and the Board."""
    print("=" * 60)
    print("Lead Sync Connection Test")
    print("=" * 60)

    if _config_errors():
        return 1

    print(f"\nEnvironment: {config.LEAD_SYNC_ENV}")
    print(f"Mapping file: {config.MAPPING_PATH}")

    print("\n[Google Sheet]")
    try:
        from .sheet_client import sheet_client

        rows = sheet_client.read_rows()
        with_id = [r for r in rows if r.lead_id]
        print(f"  ✓ Opened worksheet '{sheet_client.title}'")
        print(f"  ✓ Found {len(rows)} rows ({len(with_id)} with a lead id)")
        for row in with_id[:3]:
            print(f"    - [{row.lead_id}] {row.name} ({row.category or 'no category'})")
    except Exception as e:
        print(f"  ✗ Sheet connection failed: {e}")
        return 1

    print("\n[Trello Board]")
    try:
        from .board_client import board_client

        lists = board_client.get_lists_by_name()
        cards = board_client.get_cards_on_board()
        print(f"  ✓ Connected to board {config.TRELLO_BOARD_ID}")
        print(f"  ✓ Found {len(lists)} lists, {len(cards)} open cards")
        for name in lists:
            print(f"    - {name}")
    except Exception as e:
        print(f"  ✗ Trello connection failed: {e}")
        return 1

    print("\n" + "=" * 60)
    print("All connections successful!")
    print("=" * 60)
    return 0


def cmd_status():
    """Show current sync status."""
    from .store import mapping_store

    print("=" * 60)
    print("Lead Sync Status")
    print("=" * 60)

    print("\n[Configuration]")
    print(f"  Environment: {config.LEAD_SYNC_ENV}")
    print(f"  Poll interval: {config.POLL_INTERVAL_SECONDS}s")
    print(f"  Worksheet: {config.GOOGLE_WORKSHEET_NAME}")
    print(f"  Board: {config.TRELLO_BOARD_ID or 'Not set'}")

    print("\n[Mapping Store]")
    table = mapping_store.current()
    without_card = sum(1 for m in table.values() if not m.card_id)
    print(f"  Path: {mapping_store.path}")
    print(f"  Lead mappings: {len(table)} total, {without_card} awaiting a card")

    by_category: dict[str, int] = {}
    for m in table.values():
        by_category[m.category or '?'] = by_category.get(m.category or '?', 0) + 1
    for category, count in sorted(by_category.items()):
        print(f"    {category:12} {count}")

    return 0


def cmd_sync_once():
    """Run a single sync cycle."""
    print("=" * 60)
    print("Running Single Sync Cycle")
    print("=" * 60)

    if _config_errors():
        return 1

    from .sync_engine import sync_engine

    try:
        sync_engine.prepare_board()
    except Exception as e:
        print(f"  ✗ Could not prepare Trello lists: {e}")
        return 1

    results = sync_engine.run_cycle()

    exit_code = 0
    for result in results:
        summary = result.summary()
        print(f"\n[{result.direction.value}]")
        print(f"  created={summary['created']} moved={summary['moved']} archived={summary['archived']} "
              f"updated={summary['updated']} removed={summary['removed']}")
        for error in result.errors:
            print(f"  ✗ {error.kind.value:7} lead={error.lead_id or '-'} {error.action}: {error.message}")
        if result.aborted:
            exit_code = 1

    return exit_code


def cmd_run():
    """Start the sync service (continuous polling)."""
    if _config_errors():
        return 1

    from .poller import run_poller

    print("=" * 60)
    print("Starting Lead Sync Service")
    print("=" * 60)
    print(f"Environment: {config.LEAD_SYNC_ENV}")
    print(f"Poll interval: {config.POLL_INTERVAL_SECONDS}s")
    print("=" * 60)
    print("\nPress Ctrl+C to stop\n")

    run_poller()
    return 0


def cmd_mappings():
    """Show current lead → card mappings."""
    from .store import mapping_store

    table = mapping_store.current()
    if not table:
        print("No lead mappings stored yet.")
        print("Run 'python -m modules.lead_sync sync-once' to create them.")
        return 0

    print("=" * 60)
    print("Lead → Trello Card Mappings")
    print("=" * 60)
    for lead_id, m in sorted(table.items()):
        print(f"  [{lead_id}] {m.name or '(no name)'} | {m.category:10} | card {m.card_id or '-'}")

    print()
    return 0


def cmd_ensure_lists():
    """Create any missing board lists."""
    if _config_errors():
        return 1

    from .sync_engine import sync_engine

    try:
        lists = sync_engine.prepare_board()
    except Exception as e:
        print(f"  ✗ Could not prepare Trello lists: {e}")
        return 1

    print(f"Board lists: {', '.join(sorted(lists))}")
    return 0


def main(argv=None):
    parser = argparse.ArgumentParser(description='Lead Sync - Google Sheet ↔ Trello')
    parser.add_argument('command', choices=['test', 'status', 'sync-once', 'run', 'mappings', 'ensure-lists'],
                        help='Command to run')

    args = parser.parse_args(argv)

    setup_logging()

    commands = {
        'test': cmd_test,
        'status': cmd_status,
        'sync-once': cmd_sync_once,
        'run': cmd_run,
        'mappings': cmd_mappings,
        'ensure-lists': cmd_ensure_lists,
    }

    return commands[args.command]()


if __name__ == '__main__':
    sys.exit(main())
