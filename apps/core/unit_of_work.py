"""
Unit-of-work helper for writes that span several records.

Organization, membership and user rows are updated together; wrapping them
in one database transaction means a failure part-way through leaves none of
the writes behind.
"""
import logging
from contextlib import contextmanager
from typing import Callable, ContextManager

from django.db import transaction

from .exceptions import DomainError

logger = logging.getLogger(__name__)

UnitOfWork = Callable[[str], ContextManager[None]]


@contextmanager
def atomic_unit_of_work(label: str):
    """
    Run the enclosed writes in a single transaction.

    Domain errors are expected control flow and propagate untouched; anything
    else is logged before it propagates so partial failures are visible.
    """
    try:
        with transaction.atomic():
            yield
    except DomainError:
        raise
    except Exception:
        logger.exception("Unit of work '%s' rolled back", label)
        raise
