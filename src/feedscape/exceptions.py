"""Error taxonomy for feed ingestion and scene reconciliation.

None of these are fatal: each is recovered at the seam where it is raised.
"""


class FeedscapeError(Exception):
    """Base class for feedscape errors."""


class SourceFetchError(FeedscapeError):
    """Network or parse failure for a single feed source."""

    def __init__(self, address: str, reason: str) -> None:
        super().__init__(f"{address}: {reason}")
        self.address = address
        self.reason = reason


class MalformedEntityError(FeedscapeError):
    """A feed item is missing a field required to build an Entity."""

    def __init__(self, field_name: str, item: object = None) -> None:
        super().__init__(f"Missing or invalid field: {field_name}")
        self.field_name = field_name
        self.item = item


class SceneMutationError(FeedscapeError):
    """The scene backend rejected an operation on one object."""
