"""Staff-record exceptions."""


class StaffRecordError(Exception):
    """Base exception for staff record errors."""

    pass


class AllocationExhausted(StaffRecordError):
    """Every candidate registration id collided with an existing one."""

    def __init__(self, message: str, attempts: int):
        super().__init__(message)
        self.attempts = attempts


class StoreInsertError(StaffRecordError):
    """Counting or inserting staff records failed for a reason other than a duplicate key."""

    pass
