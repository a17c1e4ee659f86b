"""
Engine exception hierarchy.

Gameplay operations never raise these across the public manager
boundary; they signal startup problems (bad data) or programming
errors (asking for a species that does not exist).
"""


class EonError(Exception):
    """Base class for all engine errors."""


class DataLoadError(EonError):
    """Static reference data could not be loaded."""


class UnknownReferenceError(EonError, KeyError):
    """A static table lookup failed for an id that must exist."""

    def __init__(self, table: str, ref_id: str):
        self.table = table
        self.ref_id = ref_id
        super().__init__(f"Unknown {table}: {ref_id}")

    def __str__(self) -> str:
        return self.args[0]


class UnknownSpeciesError(UnknownReferenceError):
    """Species id is not in the registry."""

    def __init__(self, species_id: str):
        super().__init__("species", species_id)
