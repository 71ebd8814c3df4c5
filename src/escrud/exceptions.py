"""
escrud Exceptions
=================

Every failure of the core surfaces as one of these types so that the
console can catch ``EscrudError`` uniformly and keep the menu running.

Elasticsearch client exceptions are translated here, in ``store_errors()``,
and nowhere else.
"""

import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from elastic_transport import TransportError
from elasticsearch import ApiError, NotFoundError

logger = logging.getLogger(__name__)


class EscrudError(Exception):
    """Base class for all escrud errors."""


class Unavailable(EscrudError):
    """The store could not be reached or did not answer a ping."""


class NotFound(EscrudError):
    """The requested document or index does not exist."""


class StoreError(EscrudError):
    """The store rejected a request (validation, mapping conflict, bad query)."""

    def __init__(self, message: str, status: Optional[int] = None, error_type: Optional[str] = None):
        super().__init__(message)
        self.status = status
        self.error_type = error_type


class InvalidInput(EscrudError):
    """Caller-supplied data failed local validation before any network call."""


class ConfigError(EscrudError):
    """Configuration file or environment contained an unusable value."""


def error_type(err: ApiError) -> Optional[str]:
    """Return the store's error type (e.g. ``index_not_found_exception``)."""
    body = err.body
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict):
            return error.get("type")
        if isinstance(error, str):
            return error
    return None


def error_reason(err: ApiError) -> str:
    """Return the store's human-readable diagnostic for an API error."""
    body = err.body
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict):
            root = error.get("root_cause") or [error]
            return root[0].get("reason") or error.get("reason") or str(err.message)
        if isinstance(error, str):
            return error
    return str(err.message)


@contextmanager
def store_errors(action: str) -> Iterator[None]:
    """
    Translate client exceptions raised inside the block.

    Args:
        action: Short description used as the message prefix
            (e.g. "get product 42")

    Raises:
        NotFound: the store answered 404
        StoreError: any other API error
        Unavailable: connection, timeout or other transport failure
    """
    try:
        yield
    except NotFoundError as e:
        reason = error_reason(e) if error_type(e) else "not found"
        raise NotFound(f"{action}: {reason}") from e
    except ApiError as e:
        kind = error_type(e)
        logger.debug("Store rejected %s: status=%s type=%s", action, e.meta.status, kind)
        raise StoreError(
            f"{action}: [{kind or e.meta.status}] {error_reason(e)}",
            status=e.meta.status,
            error_type=kind,
        ) from e
    except TransportError as e:
        raise Unavailable(f"{action}: {e}") from e
