"""
Lead Sync Module - Google Sheet ↔ Trello Board

Bidirectional lead synchronization driven by a polling cycle and a
persisted lead id → card id mapping.
"""

__version__ = "0.1.0"
