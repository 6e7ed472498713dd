"""Exception hierarchy for the importer."""


class GewinnScraperError(Exception):
    """Base class for all importer errors."""


class ConfigError(GewinnScraperError):
    """Configuration file missing, unreadable or incomplete."""


class StoreConnectionError(GewinnScraperError):
    """The contest store cannot be reached."""


class StoreWriteError(GewinnScraperError):
    """The store rejected a record (other than as a duplicate)."""
