class PaymentError(Exception):
    """Base class for payment gateway failures."""


class ConfigurationMissing(PaymentError):
    def __init__(self, provider: str, missing: list[str]):
        self.provider = provider
        self.missing = list(missing)
        super().__init__(f"{provider} is not configured: missing {', '.join(self.missing)}")


class InvalidSignature(PaymentError):
    def __init__(self, provider: str, reference: str):
        self.provider = provider
        self.reference = reference
        super().__init__(f"{provider} notification for {reference} failed signature verification")


class OrderNotFound(PaymentError):
    def __init__(self, provider: str, reference: str):
        self.provider = provider
        self.reference = reference
        super().__init__(f"No {provider} order with reference {reference}")


class AmountMismatch(PaymentError):
    def __init__(self, order, received: str):
        self.order = order
        self.expected_cents = order.amount_total
        self.received = received
        super().__init__(f"Gateway amount {received!r} does not match order total {order.amount_decimal}")


class DuplicateNotification(PaymentError):
    """The order already reflects this notification, or another one won the race."""

    def __init__(self, order, raw_status: str):
        self.order = order
        self.raw_status = raw_status
        super().__init__(f"Order {order.payment_reference} is {order.status}; ignoring {raw_status!r}")
