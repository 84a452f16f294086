"""
Repository layer — the only code that talks to the database.

Each repository module exposes plain async functions that take the request's
AsyncSession as their first argument. They execute single statements,
return ORM objects (or None for "absent"), and translate driver failures
into domain errors via storage_errors().
"""

from contextlib import contextmanager

from sqlalchemy.exc import SQLAlchemyError

from codeshare.exceptions import CodeShareError, StorageError


@contextmanager
def storage_errors(operation: str, identifier=None):
    """
    Wrap unexpected SQLAlchemy failures in StorageError.

    Domain errors raised inside the block pass through untouched; anything
    else coming from the driver is re-raised as StorageError carrying the
    operation name and identifier, chained to the original exception.
    """
    try:
        yield
    except CodeShareError:
        raise
    except SQLAlchemyError as exc:
        raise StorageError(operation, identifier) from exc
