"""Error taxonomy for dossier acquisition and commentary"""


class MatchdayError(Exception):
    """Base class for fatal pipeline errors"""


class NavigationError(MatchdayError):
    """A listing or detail page failed to load or render in time"""


class BlockedError(MatchdayError):
    """The listing page redirected away from the expected host"""


class NotFoundError(MatchdayError):
    """The fixture was not found after exhausting the scroll budget"""


class StorageError(MatchdayError):
    """The record store failed to read or write"""


class CommentaryError(MatchdayError):
    """A commentary provider failed, failing the whole fan-out"""
