"""
Typed failures raised by the graph store and the services built on it.

The HTTP layer (main.py) maps them to status codes:
NotFoundError -> 404, ValidationError -> 400, ConflictError -> 409,
StoreUnavailableError -> 503.
"""


class GraphError(Exception):
    """Base class for every error the graph layer raises on purpose."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(GraphError):
    status_code = 404


class ValidationError(GraphError):
    """A required input field is missing or malformed."""

    status_code = 400


class ConflictError(GraphError):
    """A write collided with a unique constraint."""

    status_code = 409


class StoreUnavailableError(GraphError):
    """The backing graph store could not be reached. Not retried here."""

    status_code = 503
