from contextlib import contextmanager

from sqlalchemy.exc import OperationalError

from ..ai.errors import AIConfigurationError


class ServiceError(Exception):
    """A workflow failed; the message is safe to show to the user."""


class UnauthorizedError(ServiceError):
    pass


class NotFoundError(ServiceError):
    pass


@contextmanager
def diagnostics(action: str):
    """Turn unexpected failures inside a workflow into a readable ServiceError."""
    try:
        yield
    except (ServiceError, AIConfigurationError):
        raise
    except OperationalError as e:
        raise ServiceError(f"Database not configured or unreachable: {e}") from e
    except Exception as e:
        raise ServiceError(f"Failed to {action}: {e}") from e
