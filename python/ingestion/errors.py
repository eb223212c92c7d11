"""
Exception hierarchy for the sync pipeline

Only envelope-level (FetchError, ParseError) and persistence-level
(PersistenceError) failures abort a list's run. RecordError and
DateParseError are absorbed where they occur.
"""


class SyncError(Exception):
    """Base exception for sync pipeline errors"""
    pass


class FetchError(SyncError):
    """Network/HTTP failure reaching a source (timeouts included)"""
    pass


class ParseError(SyncError):
    """Payload is empty, malformed, or lacks its root/list element"""
    pass


class RecordError(SyncError):
    """One malformed record inside an otherwise valid payload"""
    pass


class DateParseError(SyncError, ValueError):
    """Unparseable date field"""
    pass


class PersistenceError(SyncError):
    """Transaction failure while replacing a list partition"""
    pass


class SyncCancelled(SyncError):
    """Run aborted cooperatively before its transaction committed"""
    pass
