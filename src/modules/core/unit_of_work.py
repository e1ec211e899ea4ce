"""Explicit unit of work over ``django.db.transaction.atomic``.

One ``UnitOfWork`` spans exactly one public operation: every read-for-update,
validation and write inside the ``with`` block commits together, and any
exception leaving the block (including a ``DomainError`` raised for an early
return) rolls everything back.
"""

from __future__ import annotations

from typing import Optional

from django.db import DEFAULT_DB_ALIAS, transaction


class UnitOfWork:
    """Atomic, all-or-nothing persistence boundary.

    Nested units of work become savepoints of the outer one, matching the
    semantics of ``transaction.atomic``.
    """

    def __init__(self, using: Optional[str] = None) -> None:
        self.using = using or DEFAULT_DB_ALIAS
        self._atomic = transaction.atomic(using=self.using)

    def __enter__(self) -> UnitOfWork:
        self._atomic.__enter__()
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self._atomic.__exit__(exc_type, exc_value, traceback)
