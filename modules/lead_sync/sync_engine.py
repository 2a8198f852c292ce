"""
Sync Engine - Core bidirectional lead reconciliation.

Handles:
- Sheet → Board: create, move, archive, title and description updates
- Board → Sheet: category, name, email, note and source write-back
- Removal detection (card gone from the board → lead marked LOST)
- Change detection against the last-synced mapping (last observed wins)

Failure isolation:
- Sheet → Board runs each row in its own boundary; one bad lead never
  blocks the rest.
- Board → Sheet runs the whole pass in one boundary; an unexpected error
  ends the pass for this cycle and the next cycle retries.
"""

import logging

from .board_client import board_client
from .exceptions import SheetClientError
from .formatting import (
    build_card_title,
    parse_card_title,
    parse_description,
    render_description,
)
from .models import (
    REQUIRED_LISTS,
    SYNCED_FIELDS,
    TERMINAL_MARKER,
    BoardCard,
    Direction,
    ErrorKind,
    LeadMapping,
    PassResult,
    SheetRow,
    board_list_for_category,
    category_for_board_list,
    normalize_category,
)
from .sheet_client import sheet_client
from .store import mapping_store

logger = logging.getLogger(__name__)


class SyncEngine:
    """Bidirectional sync between the lead Sheet and the Trello Board."""

    def __init__(self, sheet=None, board=None, store=None):
        self.sheet = sheet if sheet is not None else sheet_client
        self.board = board if board is not None else board_client
        self.store = store if store is not None else mapping_store

    def _persist(self):
        self.store.save()

    def prepare_board(self) -> dict[str, str]:
        """Make sure every list a category can map to exists."""
        return self.board.ensure_lists(REQUIRED_LISTS)

    # ==========================================================================
    # Sheet → Board
    # ==========================================================================

    def sync_sheet_to_board(self) -> PassResult:
        """Push Sheet changes to the Board for every row with a lead id."""
        result = PassResult(Direction.SHEET_TO_BOARD)
        mappings = self.store.current()

        try:
            rows = self.sheet.read_rows()
            # List map is valid for the rest of this cycle
            self.board.get_lists_by_name(refresh=True)
        except Exception as e:
            logger.error(f"Failed to read sheet/board state: {e}")
            result.add_error(ErrorKind.PASS, 'read', str(e))
            return result

        for row in rows:
            if not row.lead_id:
                continue

            try:
                self._sync_row_to_board(row, mappings, result)
            except Exception as e:
                mapping = mappings.get(row.lead_id)
                card_id = mapping.card_id if mapping else None
                logger.error(f"Failed to sync sheet lead {row.lead_id} (card {card_id}): {e}")
                result.add_error(ErrorKind.RECORD, 'sync_row', str(e), lead_id=row.lead_id, card_id=card_id)

        logger.info(
            f"Sheet → Board: {len(rows)} rows, {result.created} created, {result.moved} moved, "
            f"{result.archived} archived, {result.updated} updated, {len(result.errors)} errors"
        )
        return result

    def _sync_row_to_board(self, row: SheetRow, mappings: dict[str, LeadMapping], result: PassResult):
        target_list = board_list_for_category(row.category)
        mapping = mappings.get(row.lead_id)

        if mapping is None:
            if target_list is None:
                logger.debug(f"Skipping lead {row.lead_id}: category '{row.category}' has no list")
                return
            self._create_card(row, target_list, mappings, result)
            return

        # Card id only goes missing when a create never completed
        if not mapping.card_id and target_list is not None:
            self._create_card(row, target_list, mappings, result, recreate=True)
            return

        if mapping.category != row.category:
            if target_list is None:
                self._retire_lead(row, mapping, mappings, result)
                return
            self._move_card(row, mapping, target_list, result)

        if mapping.card_id and row.name != mapping.name:
            self.board.update_card_name(mapping.card_id, build_card_title(row.name, row.lead_id))
            mapping.name = row.name
            self._persist()
            result.updated += 1
            logger.info(f"Updated Trello card {mapping.card_id} title -> {row.name} (lead {row.lead_id})")

        changed = self._changed_fields(row, mapping)
        if changed and mapping.card_id:
            self.board.update_card_fields(mapping.card_id, changed)
            for key, value in changed.items():
                setattr(mapping, key, value)
            self._persist()
            result.updated += 1
            logger.info(f"Updated Trello card {mapping.card_id} desc fields -> {', '.join(changed)} (lead {row.lead_id})")

    def _create_card(
        self,
        row: SheetRow,
        target_list: str,
        mappings: dict[str, LeadMapping],
        result: PassResult,
        recreate: bool = False,
    ):
        card_id = self.board.create_card(
            target_list,
            build_card_title(row.name, row.lead_id),
            render_description(row.fields()),
        )
        mappings[row.lead_id] = LeadMapping(
            lead_id=row.lead_id,
            card_id=card_id,
            category=row.category,
            name=row.name,
            email=row.email,
            note=row.note,
            source=row.source,
        )
        self._persist()
        result.created += 1

        verb = 'Re-created' if recreate else 'Created'
        logger.info(f"{verb} Trello card {card_id} for lead {row.lead_id} (list={target_list})")

    def _retire_lead(self, row: SheetRow, mapping: LeadMapping, mappings: dict[str, LeadMapping], result: PassResult):
        """Lead went terminal: archive its card (best-effort) and forget it."""
        if mapping.card_id:
            try:
                self.board.archive_card(mapping.card_id)
                result.archived += 1
                logger.info(f"Archived Trello card {mapping.card_id} because lead {row.lead_id} changed to {row.category}")
            except Exception as e:
                logger.error(f"Failed to archive Trello card {mapping.card_id} for lead {row.lead_id}: {e}")
                result.add_error(ErrorKind.RECORD, 'archive', str(e), lead_id=row.lead_id, card_id=mapping.card_id)

        del mappings[row.lead_id]
        self._persist()
        result.removed += 1

    def _move_card(self, row: SheetRow, mapping: LeadMapping, target_list: str, result: PassResult):
        self.board.move_card(mapping.card_id, target_list)
        result.moved += 1

        changed = self._changed_fields(row, mapping)
        if changed:
            self.board.update_card_fields(mapping.card_id, changed)
            result.updated += 1
            for key, value in changed.items():
                setattr(mapping, key, value)

        mapping.category = row.category
        self._persist()
        logger.info(f"Moved Trello card {mapping.card_id} -> list {target_list} (lead {row.lead_id} changed category)")

    @staticmethod
    def _changed_fields(row: SheetRow, mapping: LeadMapping) -> dict[str, str]:
        """Description fields whose sheet value differs from the last-synced value."""
        return {
            key: value
            for key, value in row.fields().items()
            if value != getattr(mapping, key)
        }

    # ==========================================================================
    # Board → Sheet
    # ==========================================================================

    def sync_board_to_sheet(self) -> PassResult:
        """Pull Board changes back into the Sheet for every mapped lead."""
        result = PassResult(Direction.BOARD_TO_SHEET)
        mappings = self.store.current()

        try:
            cards = {card.id: card for card in self.board.get_cards_on_board()}
            list_names = {list_id: name for name, list_id in self.board.get_lists_by_name(refresh=True).items()}

            for lead_id, mapping in list(mappings.items()):
                if not mapping.card_id:
                    continue

                card = cards.get(mapping.card_id)
                if card is None:
                    self._mark_lead_lost(lead_id, mapping, mappings, result)
                    continue

                self._sync_card_to_sheet(lead_id, mapping, card, list_names, result)

        except Exception as e:
            logger.error(f"Error while pulling Trello board/cards: {e}")
            result.add_error(ErrorKind.PASS, 'pull_board', str(e))

        logger.info(
            f"Board → Sheet: {result.updated} sheet updates, {result.removed} removed, "
            f"{len(result.errors)} errors{' (aborted)' if result.aborted else ''}"
        )
        return result

    def _mark_lead_lost(self, lead_id: str, mapping: LeadMapping, mappings: dict[str, LeadMapping], result: PassResult):
        """Card is gone from the board: mark the row LOST (best-effort) and drop the mapping."""
        logger.info(f"Card {mapping.card_id} for lead {lead_id} missing/archived; setting sheet category to {TERMINAL_MARKER}")

        try:
            row_index = self.sheet.find_row_index_by_id(lead_id)
            if row_index is None:
                logger.warning(f"Sheet row for lead {lead_id} not found; cannot mark {TERMINAL_MARKER}")
                result.add_error(ErrorKind.LOOKUP, 'mark_lost', 'row not found', lead_id=lead_id, card_id=mapping.card_id)
            else:
                self.sheet.update_category(row_index, TERMINAL_MARKER)
                result.updated += 1
        except Exception as e:
            logger.error(f"Failed setting sheet category to {TERMINAL_MARKER} for lead {lead_id}: {e}")
            result.add_error(ErrorKind.RECORD, 'mark_lost', str(e), lead_id=lead_id, card_id=mapping.card_id)

        # TODO: decide whether removal should wait for a successful sheet write;
        # today the mapping is dropped either way.
        del mappings[lead_id]
        self._persist()
        result.removed += 1

    def _sync_card_to_sheet(
        self,
        lead_id: str,
        mapping: LeadMapping,
        card: BoardCard,
        list_names: dict[str, str],
        result: PassResult,
    ):
        pending = self._board_changes(mapping, card, list_names)
        if not pending:
            logger.debug(f"Lead {lead_id} unchanged on board")
            return

        row_index = self.sheet.find_row_index_by_id(lead_id)
        if row_index is None:
            logger.warning(f"Sheet row for lead {lead_id} not found; skipping {', '.join(pending)}")
            result.add_error(ErrorKind.LOOKUP, 'find_row', 'row not found', lead_id=lead_id, card_id=card.id)
            return

        for key, value in pending.items():
            updater = getattr(self.sheet, f'update_{key}')
            try:
                updater(row_index, value)
            except SheetClientError as e:
                logger.error(f"Failed updating sheet {key} for lead {lead_id}: {e}")
                result.add_error(ErrorKind.RECORD, f'update_{key}', str(e), lead_id=lead_id, card_id=card.id)
                continue

            setattr(mapping, key, value)
            self._persist()
            result.updated += 1
            logger.info(f"Updated sheet lead {lead_id} {key} -> {value} because Trello card {card.id} changed")

    @staticmethod
    def _board_changes(mapping: LeadMapping, card: BoardCard, list_names: dict[str, str]) -> dict[str, str]:
        """Sheet fields the board disagrees with, in write order."""
        changes: dict[str, str] = {}

        category = category_for_board_list(list_names.get(card.list_id))
        if category and category != normalize_category(mapping.category):
            changes['category'] = category

        observed = parse_description(card.desc)
        observed['name'] = parse_card_title(card.name)

        for key in ('name',) + SYNCED_FIELDS:
            value = (observed.get(key) or '').strip()
            if value and value != getattr(mapping, key):
                changes[key] = value

        return changes

    # ==========================================================================
    # Cycle
    # ==========================================================================

    def run_cycle(self) -> tuple[PassResult, PassResult]:
        """One Sheet → Board pass followed by one Board → Sheet pass."""
        logger.info("Starting sync cycle")
        to_board = self.sync_sheet_to_board()
        to_sheet = self.sync_board_to_sheet()
        logger.info(f"Sync cycle completed: {to_board.writes + to_sheet.writes} writes, "
                    f"{len(to_board.errors) + len(to_sheet.errors)} errors")
        return to_board, to_sheet


# Module-level instance
sync_engine = SyncEngine()
