"""Exceptions raised by the asset services."""


class AssetStoreError(Exception):
    """A database write failed; the surrounding transaction rolled back.

    Carries the operation name and the asset code or id involved. The
    original ``DatabaseError`` is chained as ``__cause__``.
    """

    def __init__(self, operation, target, message=""):
        self.operation = operation
        self.target = target
        detail = f": {message}" if message else ""
        super().__init__(f"{operation} failed for {target}{detail}")
