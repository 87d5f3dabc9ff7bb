# opportunity_hunter/exceptions.py


class HunterError(Exception):
    """Base class for every error raised by the hunting pipeline."""


class ConfigError(HunterError):
    pass


class SourceUnavailable(HunterError):
    """A source could not be reached or returned an unusable body."""

    def __init__(self, platform: str, message: str):
        super().__init__(f"{platform}: {message}")
        self.platform = platform


class QueryBuildError(HunterError):
    """No search query can be built from the given skills."""


class PersistenceError(HunterError):
    pass


class ScoringError(HunterError):
    """A single sub-score could not be computed for a listing."""

    def __init__(self, component: str, cause: Exception):
        super().__init__(f"{component}: {cause}")
        self.component = component
        self.cause = cause


class HuntCancelled(HunterError):
    pass
