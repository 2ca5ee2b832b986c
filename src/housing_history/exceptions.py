from typing import Any, List, Optional


class HousingDataError(Exception):
    """Base class for errors raised by the housing history package."""


class RecordNotFoundError(HousingDataError, LookupError):
    """A name or id lookup matched no row."""

    def __init__(self, entity: str, key: Any, message: Optional[str] = None):
        self.entity = entity
        self.key = key
        super().__init__(message or f"The specified {entity} '{key}' does not exist in the database.")


class AmbiguousNameError(HousingDataError, LookupError):
    """A display-name lookup matched more than one row."""

    def __init__(self, entity: str, name: str, candidate_ids: List[int]):
        self.entity = entity
        self.name = name
        self.candidate_ids = candidate_ids
        super().__init__(
            f"{len(candidate_ids)} {entity} rows share the name '{name}' "
            f"(ids: {', '.join(str(i) for i in candidate_ids)}). Use the id instead."
        )


class InvalidRecordError(HousingDataError, ValueError):
    """A write was rejected by model validation or a table constraint."""
