"""Error taxonomy for the store and the anonymous user lookup."""


class StoreConnectError(Exception):
    """The SQLite store could not be opened at startup."""

    def __init__(self, path: str, message: str):
        self.path = path
        self.message = message
        super().__init__(f"cannot open database at {path}: {message}")


class QueryError(Exception):
    """A lookup query failed at the store layer."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class UserNotFoundError(Exception):
    """The lookup ran fine but matched no row."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)
