"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Auth
  2xxx: Account
  3xxx: Recipient search
  4xxx: Transfer
  9xxx: System

Every message is written for inline display: the send-money workflow shows
`message` next to the field that failed and stays on its current step.
"""

from decimal import Decimal


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        super().__init__(message)


# --- 1xxx: Auth ---

class InvalidCredentialsError(AppError):
    def __init__(self) -> None:
        super().__init__(1001, "Invalid email or password", 401)


class SignUpRejectedError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(1002, detail, 422)


# --- 2xxx: Account ---

class ProfileNotFoundError(AppError):
    def __init__(self, user_id: str) -> None:
        super().__init__(2001, f"Profile not found for user {user_id}", 404)


# --- 3xxx: Recipient search ---

class SearchTooShortError(AppError):
    def __init__(self, minimum: int = 2) -> None:
        super().__init__(3001, f"Enter at least {minimum} characters to search", 422)


class InvalidRecipientFormatError(AppError):
    def __init__(self, detail: str, suggestion: str | None = None) -> None:
        message = detail
        if suggestion:
            message = f"{detail}. Did you mean @{suggestion}?"
        super().__init__(3002, message, 422)
        self.suggestion = suggestion


class RecipientNotFoundError(AppError):
    _MESSAGES = {
        "email": "No ZimPay user found with email {query}",
        "phone": "No ZimPay user found with phone number {query}",
        "username": "User @{query} not found",
        "external": "No external ledger account named {query}",
    }

    def __init__(self, method: str, query: str) -> None:
        template = self._MESSAGES.get(method, "Recipient {query} not found")
        super().__init__(3003, template.format(query=query), 404)
        self.method = method


class AmbiguousRecipientError(AppError):
    def __init__(self, query: str, suggestions: list[str]) -> None:
        names = ", ".join(f"@{s}" for s in suggestions)
        super().__init__(3004, f"User @{query} not found. Did you mean: {names}?", 404)
        self.suggestions = suggestions


class SelfTransferError(AppError):
    def __init__(self) -> None:
        super().__init__(3005, "You cannot send money to yourself", 422)


class LookupTimeoutError(AppError):
    def __init__(self, seconds: float) -> None:
        super().__init__(
            3006, f"Search timed out after {seconds:g}s. Check your connection and try again", 504
        )


# --- 4xxx: Transfer ---

class RecipientRequiredError(AppError):
    def __init__(self) -> None:
        super().__init__(4001, "Please find a valid recipient first", 422)


class InvalidAmountError(AppError):
    def __init__(self) -> None:
        super().__init__(4002, "Please enter a valid amount", 422)


class InsufficientBalanceError(AppError):
    def __init__(self, required: Decimal, available: Decimal) -> None:
        super().__init__(
            4003,
            f"Insufficient balance: required {required}, available {available}",
            422,
        )


class BelowMinimumError(AppError):
    def __init__(self, minimum: Decimal) -> None:
        super().__init__(4004, f"Minimum transfer amount is ${minimum}", 422)


class TooManyDecimalsError(AppError):
    def __init__(self) -> None:
        super().__init__(4005, "Amount can have at most 2 decimal places", 422)


class NoteTooLongError(AppError):
    def __init__(self, max_length: int) -> None:
        super().__init__(4006, f"Note must be {max_length} characters or fewer", 422)


class TransferFailedError(AppError):
    def __init__(self, detail: str = "Transfer failed") -> None:
        super().__init__(4007, detail, 422)


class TransferFailedRestoredError(AppError):
    def __init__(self) -> None:
        super().__init__(4008, "Transfer failed. Your balance has been restored", 502)


class TransferFailedUnrestoredError(AppError):
    def __init__(self) -> None:
        super().__init__(
            4009,
            "Transfer failed and your balance could not be restored automatically. "
            "Please contact support",
            502,
        )


class InvalidStepError(AppError):
    def __init__(self, action: str, step: str) -> None:
        super().__init__(4010, f"Cannot {action} while on the {step} step", 409)


class NoActiveTransferError(AppError):
    def __init__(self) -> None:
        super().__init__(4011, "No transfer in progress", 404)


# --- 9xxx: System ---

class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail, 500)


class BackendError(AppError):
    def __init__(self, detail: str = "Backend request failed") -> None:
        super().__init__(9003, detail, 502)
