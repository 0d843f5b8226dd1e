class ScamCheckError(Exception):
    pass


class DataSourceError(ScamCheckError):
    pass


class RateLimitError(DataSourceError):
    pass


class InvalidInputError(ScamCheckError):
    pass


class OperationCancelled(BaseException):
    """
    Raised when a caller cancels an in-flight analysis or traversal.

    Derives from BaseException so per-item ``except Exception`` handlers
    never mistake it for a lookup failure.
    """
