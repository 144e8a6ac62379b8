"""esclient specific exceptions."""


class ElasticClientError(Exception):
    """Base error for all failures raised by esclient."""


class InvalidIndexNameError(ElasticClientError, ValueError):
    """Raised when an index name is rejected before any request is made."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Invalid index name: {name}")


class EndpointError(ElasticClientError):
    """Raised when the endpoint answers with an unsuccessful status code."""

    status_code: int
    reason: str

    def __init__(self, status_code: int, reason: str = ""):
        self.status_code = status_code
        self.reason = reason
        super().__init__(f"Endpoint responded with {status_code} {reason}".rstrip())


class SubmissionStateError(ElasticClientError):
    """Raised when a bulk submission is driven out of order."""

    pass
