"""Backend exceptions.

Every transport or protocol failure raised by a backend is a ``BackendError``.
The resolver collapses them into one internal-error outcome, while the concrete
class stays visible in the logs.
"""


class ShelfBrowseError(Exception):
    """Base exception for shelf browse errors."""


class DocumentNotFoundError(ShelfBrowseError):
    """Raised when a lookup matches no document."""


class BackendError(ShelfBrowseError):
    """Base exception for search backend failures."""


class BackendTimeoutError(BackendError):
    """Raised when the backend did not answer within the configured timeout."""


class BackendUnavailableError(BackendError):
    """Raised when the backend refused the connection."""


class BackendUnreachableError(BackendError):
    """Raised for any other transport failure."""


class BackendResponseError(BackendError):
    """Raised when the backend response cannot be decoded."""


class BackendReportedError(BackendError):
    """Raised when the backend answered with a non-zero status."""

    def __init__(self, code: int, msg: str) -> None:
        super().__init__(f"{code} - {msg}")
        self.code = code
        self.msg = msg


class NoShelfKeysError(DocumentNotFoundError):
    """Raised when a document has neither a forward nor a reverse shelf key."""

    def __init__(self, msg: str = "item does not have shelf keys") -> None:
        super().__init__(msg)
