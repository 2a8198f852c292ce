"""
Data models for Lead Sync module.

Typed views of Sheet rows and Board cards, the persisted lead mapping,
the category ↔ list translation tables, and the per-pass result values.
"""

from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Optional


class LeadCategory(str, Enum):
    """Sheet-side status label (canonical lowercase form)."""
    NEW = 'new'
    CONTACTED = 'contacted'
    QUALIFIED = 'qualified'
    LOST = 'lost'


class BoardList(str, Enum):
    """Board-side status container (canonical lowercase form)."""
    TODO = 'todo'
    INPROGRESS = 'inprogress'
    DONE = 'done'


# =============================================================================
# Category translation
# =============================================================================

# Sheet → Board. None is the terminal sentinel: a lost lead has no card at all.
SHEET_TO_BOARD: dict[str, Optional[str]] = {
    LeadCategory.NEW.value: BoardList.TODO.value,
    LeadCategory.CONTACTED.value: BoardList.INPROGRESS.value,
    LeadCategory.QUALIFIED.value: BoardList.DONE.value,
    LeadCategory.LOST.value: None,
}

# Board → Sheet. Only non-terminal categories; terminal is inferred from a
# missing card, never from a list.
BOARD_TO_SHEET: dict[str, str] = {
    BoardList.TODO.value: LeadCategory.NEW.value,
    BoardList.INPROGRESS.value: LeadCategory.CONTACTED.value,
    BoardList.DONE.value: LeadCategory.QUALIFIED.value,
}

# Lists created on the board at startup (display names)
REQUIRED_LISTS = ['TODO', 'INPROGRESS', 'DONE']

# Written to the Sheet when a lead's card disappears from the Board
TERMINAL_MARKER = 'LOST'


def normalize_category(category: Optional[str]) -> str:
    """Canonical category form: trimmed, lowercase."""
    return (category or '').strip().lower()


def board_list_for_category(category: Optional[str]) -> Optional[str]:
    """Target list for a Sheet category, or None for terminal/unknown categories."""
    return SHEET_TO_BOARD.get(normalize_category(category))


def category_for_board_list(list_name: Optional[str]) -> Optional[str]:
    """Sheet category for a Board list, or None if the list has no reverse entry."""
    return BOARD_TO_SHEET.get((list_name or '').strip().lower())


# =============================================================================
# Records
# =============================================================================

SYNCED_FIELDS = ('email', 'note', 'source')


@dataclass
class LeadMapping:
    """Last-synced state of one lead, keyed by its Sheet lead id."""
    lead_id: str
    card_id: str = ''
    category: str = ''
    name: str = ''
    email: str = ''
    note: str = ''
    source: str = ''

    @classmethod
    def from_dict(cls, lead_id: str, data: dict) -> 'LeadMapping':
        """Create from a persisted mapping entry."""
        return cls(
            lead_id=lead_id,
            card_id=str(data.get('cardId') or ''),
            category=normalize_category(data.get('category')),
            name=str(data.get('name') or '').strip(),
            email=str(data.get('email') or '').strip(),
            note=str(data.get('note') or '').strip(),
            source=str(data.get('source') or '').strip(),
        )

    def to_dict(self) -> dict:
        """Serialize for the mapping snapshot (lead id is the outer key)."""
        return {
            'cardId': self.card_id,
            'category': self.category,
            'name': self.name,
            'email': self.email,
            'note': self.note,
            'source': self.source,
        }


@dataclass
class SheetRow:
    """One lead row from the Sheet, values normalized."""
    lead_id: str
    category: str = ''
    name: str = ''
    email: str = ''
    note: str = ''
    source: str = ''
    row_index: Optional[int] = None  # 1-based sheet row, header is row 1

    @classmethod
    def from_values(cls, values: list, header_index: dict[str, int], row_index: Optional[int] = None) -> 'SheetRow':
        """Create from a raw row using a header-name → column-index map."""
        def cell(column: str) -> str:
            idx = header_index.get(column)
            if idx is None or idx >= len(values) or values[idx] is None:
                return ''
            return str(values[idx]).strip()

        return cls(
            lead_id=cell('id'),
            category=normalize_category(cell('category')),
            name=cell('name'),
            email=cell('email'),
            note=cell('note'),
            source=cell('source'),
            row_index=row_index,
        )

    def fields(self) -> dict[str, str]:
        """Description-backed fields (email, note, source)."""
        return {'email': self.email, 'note': self.note, 'source': self.source}


@dataclass
class BoardCard:
    """Card from Trello."""
    id: str
    list_id: str = ''
    name: str = ''
    desc: str = ''
    closed: bool = False

    @classmethod
    def from_api(cls, data: dict) -> 'BoardCard':
        """Create from Trello API response."""
        return cls(
            id=str(data['id']),
            list_id=str(data.get('idList') or ''),
            name=data.get('name') or '',
            desc=data.get('desc') or '',
            closed=bool(data.get('closed', False)),
        )


# =============================================================================
# Pass results
# =============================================================================

class ErrorKind(str, Enum):
    """Which isolation boundary caught a failure."""
    RECORD = 'record'  # one lead failed, pass continued
    LOOKUP = 'lookup'  # sheet row not found, update skipped
    PASS = 'pass'      # pass aborted for this cycle


class Direction(str, Enum):
    SHEET_TO_BOARD = 'sheet_to_board'
    BOARD_TO_SHEET = 'board_to_sheet'


@dataclass
class SyncError:
    """A failure surfaced at an isolation boundary."""
    kind: ErrorKind
    action: str
    message: str
    lead_id: Optional[str] = None
    card_id: Optional[str] = None


@dataclass
class PassResult:
    """Outcome of one directional pass."""
    direction: Direction
    created: int = 0
    moved: int = 0
    archived: int = 0
    updated: int = 0
    removed: int = 0
    errors: list[SyncError] = field(default_factory=list)

    @property
    def writes(self) -> int:
        """Mutating calls issued to either side."""
        return self.created + self.moved + self.archived + self.updated

    @property
    def aborted(self) -> bool:
        return any(e.kind == ErrorKind.PASS for e in self.errors)

    @property
    def ok(self) -> bool:
        return not self.errors

    def add_error(
        self,
        kind: ErrorKind,
        action: str,
        message: str,
        lead_id: Optional[str] = None,
        card_id: Optional[str] = None,
    ) -> SyncError:
        error = SyncError(kind=kind, action=action, message=message, lead_id=lead_id, card_id=card_id)
        self.errors.append(error)
        return error

    def summary(self) -> dict:
        """Flat dict for logging and CLI output."""
        data = asdict(self)
        data['direction'] = self.direction.value
        data['errors'] = len(self.errors)
        data['writes'] = self.writes
        return data
