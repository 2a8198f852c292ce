# =========================================================================
# CUSTOM EXCEPTIONS
# =========================================================================

class LeadSyncError(Exception):
    """Base exception for lead sync errors"""
    pass

class SheetClientError(LeadSyncError):
    """Google Sheet request failed or the sheet layout is unusable"""
    pass

class BoardClientError(LeadSyncError):
    """Trello request failed or the board is missing a list"""
    pass

class ConfigError(LeadSyncError):
    """Configuration is missing or invalid"""
    pass
