"""Error taxonomy for the snapshot sync jobs."""


class RaceSyncError(Exception):
    """Base class for every fatal sync error."""


class ConfigurationError(RaceSyncError):
    """A required credential or environment value is missing or invalid."""


class UpstreamRequestError(RaceSyncError):
    """An upstream HTTP call returned a non-success status code."""

    def __init__(self, status: int, url: str, body: str = '', context: str | None = None):
        self.status = status
        self.url = url
        self.body = (body or '')[:500]
        prefix = f'{context} failed' if context else 'Request failed'
        super().__init__(f'{prefix} ({status}) for {url}: {self.body}')


class UpstreamApiError(RaceSyncError):
    """The provider answered 200 but reported errors in its payload."""

    def __init__(self, url: str, messages: list[str], context: str | None = None):
        self.url = url
        self.messages = list(messages)
        where = context or url
        super().__init__(f'API returned errors for {where}: {", ".join(self.messages)}')


class SchemaViolationError(RaceSyncError):
    """A required array or object is missing from an otherwise valid response."""


class PartialCoverageWarning(UserWarning):
    """A tracked team or competition could not be matched; the run continues."""
