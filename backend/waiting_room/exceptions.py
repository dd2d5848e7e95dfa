class APIError(Exception):
    """
    Base exception for all API-related errors.
    """
    def __init__(self, message: str, status_code: int = 500, code: str = "UQ-0000"):
        self.message = message
        self.status_code = status_code
        self.code = code
        super().__init__(self.message)

class AlreadyRegisteredError(APIError):
    """
    Raised when a user tries to join a wait queue they already occupy.
    Not retried: the caller should poll its rank instead.
    """
    def __init__(self, queue: str, status_code: int = 409):
        self.queue = queue
        super().__init__(f"Already registered in {queue}", status_code, "UQ-0001")

class StoreUnavailableError(APIError):
    """
    The ordered-score store could not be reached or timed out.
    Raised for the in-flight operation only; nothing is retried internally.
    """
    def __init__(self, message: str = "Queue store is unavailable.", status_code: int = 503):
        super().__init__(message, status_code, "UQ-0002")
