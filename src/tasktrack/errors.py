"""Error taxonomy for the query engine.

Store failures are not wrapped: any ``sqlalchemy.exc.SQLAlchemyError`` raised
during phase 1 or phase 2 propagates unchanged and aborts the operation.
"""

from typing import Iterable


class NotFoundError(LookupError):
    """A single entity requested by primary key does not exist."""

    def __init__(self, entity: str, key: object):
        self.entity = entity
        self.key = key
        super().__init__(f"{entity} not found: {key}")


class InvalidSortField(ValueError):
    """A sort token names a field outside the entity's sortable whitelist."""

    def __init__(self, entity: str, field: str, allowed: Iterable[str]):
        self.entity = entity
        self.field = field
        self.allowed = sorted(allowed)
        super().__init__(
            f"Invalid sort field {field!r} for {entity}; "
            f"allowed: {', '.join(self.allowed)}"
        )
