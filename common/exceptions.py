"""
Storefront - Custom Exceptions
================================
Business-level exceptions that can be caught and converted to HTTP responses.
Each carries a machine-readable code and the HTTP status it maps to.
"""


class StorefrontError(Exception):
    """Base exception for all business logic errors."""
    code = "server_error"
    status_code = 500

    def __init__(self, message: str = "Something went wrong."):
        self.message = message
        super().__init__(self.message)


class ValidationError(StorefrontError):
    """Missing or invalid input. Nothing was written."""
    code = "validation_error"
    status_code = 400


class NotFoundError(StorefrontError):
    """Raised when a referenced product, address or order doesn't exist."""
    code = "not_found"
    status_code = 404


class OutOfStockError(StorefrontError):
    """Raised when a product exists but is not purchasable."""
    code = "out_of_stock"
    status_code = 409

    def __init__(self, product_name: str = ""):
        msg = f"Product {product_name} is out of stock" if product_name else "Product is out of stock"
        super().__init__(msg)


class SignatureVerificationError(StorefrontError):
    """Webhook rejected before any business logic ran."""
    code = "invalid_signature"
    status_code = 400


class MalformedNotificationError(StorefrontError):
    """Signature verified, but the payload lacks required metadata."""
    code = "malformed_notification"
    status_code = 400


class PaymentGatewayError(StorefrontError):
    """Raised when the payment gateway could not create a checkout session."""
    code = "payment_gateway_error"
    status_code = 502


class PersistenceError(StorefrontError):
    """Raised when a database operation failed."""
    code = "persistence_error"
    status_code = 500


class AuthenticationError(StorefrontError):
    """Raised when authentication fails."""
    code = "unauthorized"
    status_code = 401
