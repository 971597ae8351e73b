"""
Scheduler error taxonomy.

Model functions raise these; the JSON error handlers registered in
``create_app`` turn them into API error responses using ``status_code``.
"""


class SchedulerError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {'error': self.message, 'error_type': type(self).__name__}


class ValidationFailed(SchedulerError):
    """One or more business-rule or conflict violations. Carries every message."""

    status_code = 422

    def __init__(self, messages: list):
        self.messages = list(messages)
        super().__init__('; '.join(self.messages) or 'Validation failed')

    def to_dict(self) -> dict:
        data = super().to_dict()
        data['errors'] = self.messages
        return data


class InvalidStateTransition(SchedulerError):
    """Operation not permitted from the reservation's current status."""

    status_code = 409


class NotFound(SchedulerError):
    """Referenced reservation, item, or staff member does not exist."""

    status_code = 404


class StoreUnavailable(SchedulerError):
    """The underlying database call failed. Callers may retry."""

    status_code = 503
