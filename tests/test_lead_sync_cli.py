"""Tests for the lead sync CLI commands that need no network."""

import pytest

from modules.lead_sync import __main__ as cli
from modules.lead_sync.config import Config
from modules.lead_sync.models import LeadMapping


@pytest.fixture(autouse=True)
def no_log_handlers(mocker):
    mocker.patch.object(cli, 'setup_logging')


@pytest.fixture
def cli_store(store, mocker):
    mocker.patch('modules.lead_sync.store.mapping_store', store)
    return store


def test_mappings_empty(cli_store, capsys):
    assert cli.main(['mappings']) == 0
    assert 'No lead mappings stored yet.' in capsys.readouterr().out


def test_mappings_lists_entries(cli_store, capsys):
    cli_store.current()['42'] = LeadMapping('42', card_id='c1', category='new', name='Jane Doe')

    assert cli.main(['mappings']) == 0

    out = capsys.readouterr().out
    assert '[42] Jane Doe' in out
    assert 'card c1' in out


def test_status_counts_mappings(cli_store, capsys):
    cli_store.current()['1'] = LeadMapping('1', card_id='c1', category='new')
    cli_store.current()['2'] = LeadMapping('2', card_id='', category='contacted')

    assert cli.main(['status']) == 0

    out = capsys.readouterr().out
    assert 'Lead mappings: 2 total, 1 awaiting a card' in out


def test_sync_once_refuses_invalid_config(mocker, capsys):
    mocker.patch.object(Config, 'TRELLO_API_KEY', '')

    assert cli.main(['sync-once']) == 1
    assert 'TRELLO_API_KEY is required' in capsys.readouterr().out


def test_validate_reports_missing_settings(mocker):
    mocker.patch.object(Config, 'GOOGLE_SPREADSHEET_ID', '')
    mocker.patch.object(Config, 'POLL_INTERVAL_SECONDS', 0)

    errors = Config.validate()

    assert 'GOOGLE_SPREADSHEET_ID is required' in errors
    assert 'POLL_INTERVAL_SECONDS must be positive' in errors


@pytest.mark.parametrize('command', ['sync-once', 'ensure-lists'])
def test_unreachable_board_is_reported(command, mocker, capsys):
    from modules.lead_sync.exceptions import BoardClientError
    from modules.lead_sync.sync_engine import sync_engine

    mocker.patch.object(cli, '_config_errors', return_value=False)
    mocker.patch.object(sync_engine, 'prepare_board', side_effect=BoardClientError('Trello GET /boards/b1/lists failed: timed out'))
    run_cycle = mocker.patch.object(sync_engine, 'run_cycle')

    assert cli.main([command]) == 1
    assert 'Could not prepare Trello lists: Trello GET /boards/b1/lists failed' in capsys.readouterr().out
    run_cycle.assert_not_called()
