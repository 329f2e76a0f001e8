class ReportError(Exception):
    """Base exception for report engine failures."""


class InvalidRangeError(ReportError):
    """Raised when a requested time window cannot be resolved."""


class UpstreamError(ReportError):
    """Raised by an upstream client on transport errors or malformed payloads."""


class PrimaryFetchError(ReportError):
    """A primary dataset could not be fetched; the report build is aborted.

    The underlying transport error stays available as ``__cause__`` but is
    never part of the message shown to users.
    """

    def __init__(self, source: str) -> None:
        self.source = source
        super().__init__(
            f"Could not load {source.replace('_', ' ')} data for the report. "
            "Please try again later."
        )
