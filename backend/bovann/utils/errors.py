class ApiError(Exception):
    """Error surfaced to the client as ``{"success": false, "message": ...}``."""

    status_code = 400

    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class StudentNotFound(ApiError):
    status_code = 404

    def __init__(self, message="Student not found"):
        super().__init__(message)


class PaymentNotFound(ApiError):
    status_code = 404

    def __init__(self, message="Payment not found"):
        super().__init__(message)


class PaymentLocked(ApiError):
    status_code = 409

    def __init__(self, message="Cancelled payments cannot be modified"):
        super().__init__(message)


class InvalidPayload(ApiError):
    status_code = 400

    def __init__(self, message="Données QR invalides"):
        super().__init__(message)
