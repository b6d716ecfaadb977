class EstimatorError(Exception):
    status_code = 500

    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self):
        return {"error": self.message, "type": type(self).__name__}


class ValidationError(EstimatorError):
    status_code = 400


class TravelInputError(ValidationError):
    pass


class NotFoundError(EstimatorError):
    status_code = 404


class SaveInProgressError(EstimatorError):
    status_code = 409


class PersistenceError(EstimatorError):
    """Backend write/read failed. Surfaced to the caller, never retried."""
    status_code = 500
