from typing import Optional


class RegistrationError(Exception):
    status_code = 400

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(message)

    def to_dict(self) -> dict:
        return {"error": self.message}


class BadRequestError(RegistrationError):
    status_code = 400


class NotFoundError(RegistrationError):
    status_code = 404

    def __init__(self, entity: str, identifier: str, message: str = None):
        self.entity = entity
        self.identifier = identifier
        super().__init__(message or f"{entity} with ID {identifier} not found")


class ExternalServiceError(RegistrationError):
    status_code = 502


class ConfigurationError(Exception):
    """Raised when code and configuration disagree, e.g. an unmapped tournament kind."""
