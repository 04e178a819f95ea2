"""Error types shared across services, repositories and the API."""


class PortalError(Exception):
    """Base class for request engine errors."""
    pass


class PermissionDenied(PortalError):
    """Raised when an actor attempts a mutation its role does not allow."""
    pass


class RequestNotFound(PortalError):
    """Raised when a request id does not exist in its collection."""

    def __init__(self, collection: str, request_id: str):
        super().__init__(f"Request {request_id} not found in {collection}")
        self.collection = collection
        self.request_id = request_id


class StoreError(PortalError):
    """Raised by repositories when a read or write against the store fails."""
    pass


class PolicyCheckError(PortalError):
    """Raised by policy evaluators when the remote check cannot be completed."""
    pass


class UnsupportedRequest(PortalError):
    """Raised when a stored row holds values outside the request lifecycle."""

    def __init__(self, collection: str, request_id: str, detail: str):
        super().__init__(f"Request {request_id} in {collection} is not supported: {detail}")
        self.collection = collection
        self.request_id = request_id
        self.detail = detail
