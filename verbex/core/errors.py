"""
Error taxonomy for tool dispatch and transaction orchestration.

Handlers raise these; only the dispatcher turns them into user-facing strings.
"""

from typing import Iterable, List, Optional


class VerbexError(Exception):
    """Base class for every error the engine classifies."""

    kind: str = "internal"


class UnknownToolError(VerbexError):
    """No tool is registered under the requested name."""

    kind = "unknown_tool"

    def __init__(self, name: str):
        super().__init__(f"Unknown tool {name}")
        self.name = name


class DuplicateToolError(VerbexError):
    """A tool name was registered twice."""

    kind = "duplicate_tool"


class InvalidContextError(VerbexError):
    """The execution context lacks a signing key, network or account address."""

    kind = "invalid_context"

    def __init__(self, message: str, missing: Optional[Iterable[str]] = None):
        super().__init__(message)
        self.missing: List[str] = list(missing or [])


class ValidationError(VerbexError):
    """A required argument is absent or malformed."""

    kind = "validation"

    def __init__(self, message: str, fields: Optional[Iterable[str]] = None):
        super().__init__(message)
        self.fields: List[str] = list(fields or [])


class UnsupportedNetworkError(ValidationError):
    """The requested network is not configured."""


class QuoteFailure(VerbexError):
    """The swap aggregator returned an error or a non-2xx status."""

    kind = "quote_failure"

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class OnChainReadFailure(VerbexError):
    """A contract read reverted or the RPC call failed."""

    kind = "on_chain_read"


class SubmissionFailure(VerbexError):
    """Signing, sponsoring or broadcasting a user operation failed."""

    kind = "submission"


class ConfirmationTimeout(VerbexError):
    """A receipt was not observed within the configured bound.

    Not fatal: callers report the transaction as pending.
    """

    kind = "confirmation_timeout"

    def __init__(self, message: str, reference: Optional[str] = None):
        super().__init__(message)
        self.reference = reference


__all__ = [
    "VerbexError",
    "UnknownToolError",
    "DuplicateToolError",
    "InvalidContextError",
    "ValidationError",
    "UnsupportedNetworkError",
    "QuoteFailure",
    "OnChainReadFailure",
    "SubmissionFailure",
    "ConfirmationTimeout",
]
