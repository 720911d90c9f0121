class CheckoutError(Exception):
    code = "CHECKOUT_ERROR"


class ProductUnavailable(CheckoutError):
    code = "PRODUCT_UNAVAILABLE"

    def __init__(self, identifier: str):
        self.identifier = identifier
        super().__init__(f"Product {identifier!r} is not available")


class TotalMismatch(CheckoutError):
    code = "TOTAL_MISMATCH"

    def __init__(self, expected_cents: int, computed_cents: int):
        self.expected_cents = expected_cents
        self.computed_cents = computed_cents
        super().__init__(f"Client total {expected_cents} does not match server total {computed_cents}")
