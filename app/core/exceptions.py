from fastapi import status


class ServiceError(Exception):
    """Service layer error carrying the HTTP status the router should answer with."""

    def __init__(self, message: str, status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class ResourceNotFoundError(ServiceError):
    def __init__(self, name: str) -> None:
        super().__init__(f"Unknown bulk resource: {name}", status.HTTP_404_NOT_FOUND)
        self.name = name


class BulkRequestError(ServiceError):
    """Upload or export request the bulk engine cannot act on."""

    def __init__(self, message: str) -> None:
        super().__init__(message, status.HTTP_400_BAD_REQUEST)
