# core/errors.py


class StorefrontError(Exception):
    """Base class for every failure a request can end with."""

    message = "Something went wrong"

    def __init__(self, message: str = None):
        super().__init__(message or self.message)
        self.message = message or self.message


class AuthError(StorefrontError):
    message = "Not logged in"


class CredentialError(StorefrontError):
    message = "Invalid credentials"


class UserExists(CredentialError):
    message = "User already exists"


class NoEmailError(StorefrontError):
    message = "No email returned from Google"


class EmptyCartError(StorefrontError):
    message = "Your cart is empty"


class HashingError(StorefrontError):
    message = "Could not hash password"


class StoreError(StorefrontError):
    message = "Database error"


class StoreUnavailable(StoreError):
    message = "Database unavailable, try again"


class CartChangedError(StoreError):
    message = "Cart changed during checkout"
