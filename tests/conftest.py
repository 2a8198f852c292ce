"""
pytest configuration and fixtures for lead sync tests.
"""
import sys
from pathlib import Path

import pytest

# Add project root to Python path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from modules.lead_sync.formatting import merge_description
from modules.lead_sync.models import BoardCard, SheetRow
from modules.lead_sync.sheet_client import build_header_index
from modules.lead_sync.store import MappingStore
from modules.lead_sync.sync_engine import SyncEngine


SHEET_HEADER = ['id', 'category', 'name', 'email', 'note', 'source']


class FakeSheet:
    """In-memory lead sheet that records every write."""

    def __init__(self, header=None):
        self.header = list(header or SHEET_HEADER)
        self.values = []
        self.writes = []
        self.lookups = []
        self.failures = {}

    def add_row(self, lead_id, category='', name='', email='', note='', source=''):
        row = {'id': lead_id, 'category': category, 'name': name,
               'email': email, 'note': note, 'source': source}
        self.values.append([row.get(h, '') for h in self.header])

    def cell(self, lead_id, column):
        row_index = self.find_row_index_by_id(lead_id)
        return self.values[row_index - 2][self.header.index(column)]

    def _maybe_fail(self, name):
        if name in self.failures:
            raise self.failures[name]

    def read_rows(self):
        self._maybe_fail('read_rows')
        header_index = build_header_index(self.header)
        return [SheetRow.from_values(v, header_index, row_index=i + 2) for i, v in enumerate(self.values)]

    def find_row_index_by_id(self, lead_id):
        self.lookups.append(lead_id)
        self._maybe_fail('find_row_index_by_id')
        id_col = self.header.index('id')
        for i, v in enumerate(self.values):
            if str(v[id_col]).strip() == lead_id:
                return i + 2
        return None

    def _update(self, row_index, column, value):
        self._maybe_fail(f'update_{column}')
        self.writes.append((f'update_{column}', row_index, value))
        self.values[row_index - 2][self.header.index(column)] = value

    def update_category(self, row_index, value):
        self._update(row_index, 'category', value)

    def update_name(self, row_index, value):
        self._update(row_index, 'name', value)

    def update_email(self, row_index, value):
        self._update(row_index, 'email', value)

    def update_note(self, row_index, value):
        self._update(row_index, 'note', value)

    def update_source(self, row_index, value):
        self._update(row_index, 'source', value)


class FakeBoard:
    """In-memory Trello board; archived cards drop out of get_cards_on_board()."""

    def __init__(self):
        self.lists = {'todo': 'list-todo', 'inprogress': 'list-inprogress', 'done': 'list-done'}
        self.cards = {}
        self.writes = []
        self.fetches = []
        self.failures = {}
        self._next_id = 0

    def _maybe_fail(self, name):
        if name in self.failures:
            raise self.failures[name]

    def list_name(self, card_id):
        by_id = {v: k for k, v in self.lists.items()}
        return by_id[self.cards[card_id].list_id]

    def add_card(self, list_name, title, desc=''):
        self._next_id += 1
        card_id = f'card-{self._next_id}'
        self.cards[card_id] = BoardCard(id=card_id, list_id=self.lists[list_name], name=title, desc=desc)
        return card_id

    def get_lists_by_name(self, refresh=True):
        self.fetches.append(('get_lists_by_name', refresh))
        self._maybe_fail('get_lists_by_name')
        return dict(self.lists)

    def ensure_lists(self, names):
        for name in names:
            key = name.lower()
            if key not in self.lists:
                self.writes.append(('create_list', name))
                self.lists[key] = f'list-{key}'
        return dict(self.lists)

    def get_cards_on_board(self):
        self.fetches.append(('get_cards_on_board',))
        self._maybe_fail('get_cards_on_board')
        return [c for c in self.cards.values() if not c.closed]

    def get_card(self, card_id):
        return self.cards[card_id]

    def create_card(self, list_name, title, desc=''):
        self._maybe_fail('create_card')
        card_id = self.add_card(list_name, title, desc)
        self.writes.append(('create_card', list_name, title, desc))
        return card_id

    def update_card_name(self, card_id, title):
        self._maybe_fail('update_card_name')
        self.writes.append(('update_card_name', card_id, title))
        self.cards[card_id].name = title

    def update_card_fields(self, card_id, fields):
        self._maybe_fail('update_card_fields')
        self.writes.append(('update_card_fields', card_id, dict(fields)))
        card = self.cards[card_id]
        card.desc = merge_description(card.desc, fields)

    def move_card(self, card_id, list_name):
        self._maybe_fail('move_card')
        self.writes.append(('move_card', card_id, list_name))
        self.cards[card_id].list_id = self.lists[list_name]

    def archive_card(self, card_id):
        self._maybe_fail('archive_card')
        self.writes.append(('archive_card', card_id))
        self.cards[card_id].closed = True


@pytest.fixture
def mapping_path(tmp_path):
    """Temporary mapping snapshot path."""
    return tmp_path / "lead_sync.json"


@pytest.fixture
def store(mapping_path):
    return MappingStore(mapping_path)


@pytest.fixture
def sheet():
    return FakeSheet()


@pytest.fixture
def board():
    return FakeBoard()


@pytest.fixture
def engine(sheet, board, store):
    return SyncEngine(sheet=sheet, board=board, store=store)


@pytest.fixture
def sample_lead():
    """Sample lead row for testing."""
    return {
        "lead_id": "42",
        "category": "new",
        "name": "Jane Doe",
        "email": "jane.doe@example.com",
        "note": "Called twice",
        "source": "Website",
    }

