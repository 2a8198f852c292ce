"""
Trello API client for Lead Sync.

Supports REST API v1 with key/token query authentication.
"""

import logging
from typing import Optional

import httpx

from .config import config
from .exceptions import BoardClientError, ConfigError
from .formatting import merge_description
from .models import BoardCard

logger = logging.getLogger(__name__)


class BoardClient:
    """Trello board client."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        token: Optional[str] = None,
        board_id: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[int] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.api_key = api_key if api_key is not None else config.TRELLO_API_KEY
        self.token = token if token is not None else config.TRELLO_TOKEN
        self.board_id = board_id if board_id is not None else config.TRELLO_BOARD_ID
        self.base_url = (base_url or config.TRELLO_BASE_URL).rstrip('/')
        self.timeout = timeout or config.HTTP_TIMEOUT
        self._transport = transport

        # Lowercased list name → list id. Refreshed by get_lists_by_name();
        # everything else reads it as-is, so it can lag board edits until the
        # next refresh (normally once per sync cycle).
        self._lists: dict[str, str] = {}

    def _request(
        self,
        method: str,
        path: str,
        params: Optional[dict] = None,
        data: Optional[dict] = None,
    ):
        """Make an authenticated request and return decoded JSON."""
        if not (self.api_key and self.token and self.board_id):
            raise ConfigError("Trello API key, token, and board ID must be configured")

        url = f"{self.base_url}{path}"
        query = dict(params or {})
        query['key'] = self.api_key
        query['token'] = self.token

        try:
            with httpx.Client(timeout=self.timeout, transport=self._transport) as client:
                response = client.request(method, url, params=query, data=data)
                response.raise_for_status()

                if response.status_code == 204 or not response.content:
                    return {}

                return response.json()
        except httpx.HTTPStatusError as e:
            raise BoardClientError(
                f"Trello {method} {path} failed: {e.response.status_code} {e.response.text[:200]}"
            ) from e
        except (httpx.HTTPError, ValueError) as e:
            raise BoardClientError(f"Trello {method} {path} failed: {e}") from e

    # ==========================================================================
    # Lists
    # ==========================================================================

    def get_lists_by_name(self, refresh: bool = True) -> dict[str, str]:
        """
        Lowercased list name → list id for the board.

        With refresh=False the cached map is returned unless it is empty.
        """
        if not refresh and self._lists:
            return self._lists

        lists = self._request('GET', f'/boards/{self.board_id}/lists')
        self._lists = {}
        for item in lists:
            name = (item.get('name') or '').strip().lower()
            list_id = item.get('id') or ''
            if name and list_id:
                self._lists[name] = list_id

        logger.debug(f"Loaded {len(self._lists)} Trello lists")
        return self._lists

    def ensure_lists(self, names: list[str]) -> dict[str, str]:
        """Create any missing lists (idempotent)."""
        self.get_lists_by_name(refresh=True)

        for name in names:
            key = name.strip().lower()
            if key in self._lists:
                continue

            created = self._request('POST', '/lists', data={
                'name': name,
                'idBoard': self.board_id,
                'pos': 'bottom',
            })
            if created.get('id'):
                self._lists[key] = created['id']
                logger.info(f"Created Trello list {created['id']}: {name}")

        return self._lists

    def _list_id(self, list_name: str) -> str:
        lists = self.get_lists_by_name(refresh=False)
        key = list_name.strip().lower()
        if key not in lists:
            raise BoardClientError(f"Trello list '{list_name}' not found on board {self.board_id}")
        return lists[key]

    # ==========================================================================
    # Cards
    # ==========================================================================

    def get_cards_on_board(self) -> list[BoardCard]:
        """All open cards on the board."""
        data = self._request('GET', f'/boards/{self.board_id}/cards')
        return [BoardCard.from_api(c) for c in data]

    def get_card(self, card_id: str) -> BoardCard:
        """Get a single card by ID."""
        return BoardCard.from_api(self._request('GET', f'/cards/{card_id}'))

    def create_card(self, list_name: str, title: str, desc: str = '') -> str:
        """Create a card in the named list. Returns the card id."""
        card = self._request('POST', '/cards', data={
            'name': title,
            'idList': self._list_id(list_name),
            'desc': desc,
        })
        card_id = str(card.get('id') or '')
        if not card_id:
            raise BoardClientError(f"Trello did not return an id for card '{title}'")

        logger.info(f"Created Trello card {card_id}: {title}")
        return card_id

    def update_card_name(self, card_id: str, title: str) -> BoardCard:
        data = self._request('PUT', f'/cards/{card_id}', data={'name': title})
        return BoardCard.from_api(data)

    def update_card_fields(self, card_id: str, fields: dict[str, str]) -> BoardCard:
        """Merge fields into the card's structured description."""
        card = self.get_card(card_id)
        desc = merge_description(card.desc, fields)
        data = self._request('PUT', f'/cards/{card_id}', data={'desc': desc})
        return BoardCard.from_api(data)

    def move_card(self, card_id: str, list_name: str) -> BoardCard:
        data = self._request('PUT', f'/cards/{card_id}', data={'idList': self._list_id(list_name)})
        return BoardCard.from_api(data)

    def archive_card(self, card_id: str) -> BoardCard:
        data = self._request('PUT', f'/cards/{card_id}', data={'closed': 'true'})
        logger.info(f"Archived Trello card {card_id}")
        return BoardCard.from_api(data)


# Module-level instance
board_client = BoardClient()
