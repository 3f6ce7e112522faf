"""Package-specific exception types."""

from __future__ import annotations


class IndentError(Exception):
    """Base class for html-indent errors."""


class InvalidArgumentError(IndentError, ValueError):
    """Raised when an option, element type, or tag name is not accepted.

    The call that raised leaves the engine untouched.
    """


class IntegrityError(IndentError, RuntimeError):
    """Raised when the scanned tokens do not reproduce the scanned input.

    Signals that some input was skipped or duplicated by the tokenizer, or
    that a token cut through a placeholder so hidden content could not be put
    back. No output is produced for the call.

    Args:
        offset: Zero-based index of the first character where the
            reconstruction diverges from the input.
        expected_length: Length of the scanned input.
        reconstructed_length: Length of the concatenated tokens.
        tokens: Tokens scanned before the failure was detected.
        detail: What diverged, when it is more than a missing character.
    """

    def __init__(
        self,
        offset: int,
        expected_length: int,
        reconstructed_length: int,
        tokens: list | None = None,
        detail: str | None = None,
    ):
        self.offset = offset
        self.expected_length = expected_length
        self.reconstructed_length = reconstructed_length
        self.tokens = tokens or []
        self.detail = detail
        super().__init__(self._build_message())

    def _build_message(self) -> str:
        if self.detail:
            return f"Did not reproduce the exact input: {self.detail} at offset {self.offset}"
        return (
            f"Did not reproduce the exact input: tokens diverge at offset {self.offset} "
            f"({self.reconstructed_length} of {self.expected_length} characters reconstructed)"
        )
