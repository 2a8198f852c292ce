"""Tests for category translation and record models."""

from modules.lead_sync.models import (
    BOARD_TO_SHEET,
    SHEET_TO_BOARD,
    BoardCard,
    Direction,
    ErrorKind,
    LeadMapping,
    PassResult,
    SheetRow,
    board_list_for_category,
    category_for_board_list,
)


class TestCategoryTranslation:

    def test_sheet_to_board(self):
        assert board_list_for_category("new") == "todo"
        assert board_list_for_category("  Contacted ") == "inprogress"
        assert board_list_for_category("QUALIFIED") == "done"

    def test_terminal_and_unknown_have_no_list(self):
        assert board_list_for_category("lost") is None
        assert board_list_for_category("LOST") is None
        assert board_list_for_category("something else") is None
        assert board_list_for_category("") is None
        assert board_list_for_category(None) is None

    def test_board_to_sheet_covers_only_non_terminal(self):
        assert category_for_board_list("TODO") == "new"
        assert category_for_board_list("inprogress") == "contacted"
        assert category_for_board_list("Done ") == "qualified"
        assert category_for_board_list("archive") is None
        assert "lost" not in BOARD_TO_SHEET.values()

    def test_tables_agree_on_non_terminal_categories(self):
        for category, list_name in SHEET_TO_BOARD.items():
            if list_name is not None:
                assert BOARD_TO_SHEET[list_name] == category


class TestSheetRow:

    def test_from_values_uses_header_index(self):
        header_index = {"name": 0, "id": 1, "category": 2, "email": 3}
        row = SheetRow.from_values([" Jane ", " 42 ", " New ", "jane@example.com"], header_index, row_index=5)

        assert row.lead_id == "42"
        assert row.name == "Jane"
        assert row.category == "new"
        assert row.email == "jane@example.com"
        assert row.note == ""
        assert row.source == ""
        assert row.row_index == 5

    def test_short_rows_fill_blank(self):
        row = SheetRow.from_values(["7"], {"id": 0, "name": 1})
        assert row.lead_id == "7"
        assert row.name == ""


class TestLeadMapping:

    def test_dict_uses_persisted_field_names(self):
        mapping = LeadMapping("42", card_id="c1", category="new", name="Jane", email="j@x.io")
        assert mapping.to_dict() == {
            "cardId": "c1", "category": "new", "name": "Jane",
            "email": "j@x.io", "note": "", "source": "",
        }

    def test_from_dict_normalizes(self):
        mapping = LeadMapping.from_dict("42", {"cardId": None, "category": " New ", "name": " Jane "})
        assert mapping.card_id == ""
        assert mapping.category == "new"
        assert mapping.name == "Jane"


def test_board_card_from_api():
    card = BoardCard.from_api({"id": "abc", "idList": "l1", "name": "Jane (LeadID: 1)", "desc": None})
    assert card.id == "abc"
    assert card.list_id == "l1"
    assert card.desc == ""
    assert card.closed is False


def test_pass_result_counters():
    result = PassResult(Direction.SHEET_TO_BOARD, created=1, moved=1, updated=2, removed=1)
    assert result.writes == 4
    assert result.ok
    assert not result.aborted

    result.add_error(ErrorKind.RECORD, "sync_row", "boom", lead_id="9")
    assert not result.ok
    assert not result.aborted

    result.add_error(ErrorKind.PASS, "read", "down")
    assert result.aborted
    assert result.summary()["errors"] == 2
    assert result.summary()["direction"] == "sheet_to_board"
