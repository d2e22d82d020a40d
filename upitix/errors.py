class TicketError(Exception):
    """Base for errors that map onto an HTTP status and an `{error}` body."""
    status_code = 500

    def __init__(self, message: str = "Server error") -> None:
        super().__init__(message)
        self.message = message


class InvalidInput(TicketError):
    status_code = 400


class SoldOut(TicketError):
    status_code = 400

    def __init__(self, ticket_type: str) -> None:
        super().__init__(f"Ticket {ticket_type} Sold Out")
        self.ticket_type = ticket_type


class PaymentNotFound(TicketError):
    status_code = 404

    def __init__(self, payment_id: str) -> None:
        super().__init__("Payment not found")
        self.payment_id = payment_id


class InternalError(TicketError):
    status_code = 500


class CounterUninitialized(InternalError):
    def __init__(self) -> None:
        super().__init__("Counter not initialized")
