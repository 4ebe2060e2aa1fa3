"""
Storage Layer Exceptions
"""
from typing import Optional


class StorageError(Exception):
    """Base class for storage-level domain errors"""


class NotFoundError(StorageError):
    """Raised when an update targets a row that does not exist"""
    def __init__(self, entity_type: str, entity_id):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(f"{entity_type} {entity_id} not found")


class ConflictError(StorageError):
    """A uniqueness rule rejected the write; `entity` names the row already holding the value"""
    def __init__(self, message: str, entity: Optional[str] = None):
        self.message = message
        self.entity = entity
        super().__init__(message)


class ImageUrlConflictError(ConflictError):
    def __init__(self, destination_name: str):
        super().__init__(
            f"Image URL already in use by destination: {destination_name}",
            entity=destination_name,
        )


class UsernameConflictError(ConflictError):
    def __init__(self, username: str):
        super().__init__(f"Username already taken: {username}", entity=username)


class DuplicateBookingError(ConflictError):
    def __init__(self, user_id: str, destination_id: int, check_in, check_out):
        self.user_id = user_id
        self.destination_id = destination_id
        super().__init__(
            f"A booking for destination {destination_id} from {check_in} to {check_out} already exists",
            entity=f"destination:{destination_id}",
        )
