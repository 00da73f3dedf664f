"""
Domain errors raised by the ticketing services.

Every error carries a human readable reason. Routers never catch these;
the handler registered in main renders them with the mapped status code.
"""


class TicketingError(Exception):
    status_code = 400

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class ValidationFailed(TicketingError):
    """Caller or input fault: bad dates, bad supplies, wrong payment."""
    status_code = 400


class NotAuthorized(TicketingError):
    status_code = 403


class NotFound(TicketingError):
    status_code = 404


class TransferFailed(TicketingError):
    """An outbound value transfer was refused. The whole operation is undone."""
    status_code = 409


class ReentrancyError(TicketingError):
    status_code = 409
