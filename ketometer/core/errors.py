"""
Failure kinds of the analysis pipeline.

Every failure is scoped to the request that produced it. The route converts
them into the ``{"success": false, ...}`` envelope instead of an HTTP error.
"""


class AnalysisError(Exception):
    """Base class for all analysis failures."""

    code: str = "analysis_error"
    retryable: bool = False

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidRequest(AnalysisError):
    """Inbound payload is malformed or incomplete. Never reaches the model."""

    code = "invalid_request"


class UpstreamUnavailable(AnalysisError):
    """The model backend could not be reached or answered with an error status."""

    code = "upstream_unavailable"
    retryable = True


class UpstreamTimeout(UpstreamUnavailable):
    """The model backend did not answer within the configured timeout."""

    code = "upstream_timeout"


class MalformedJSON(AnalysisError):
    """The model response is not JSON at all."""

    code = "malformed_json"
    retryable = True


class SchemaViolation(AnalysisError):
    """The model response parsed but a required field is missing or misshaped."""

    code = "schema_violation"
    retryable = True

    def __init__(self, field: str, reason: str = "missing or invalid"):
        super().__init__(f"Invalid analysis field '{field}': {reason}")
        self.field = field
        self.reason = reason
