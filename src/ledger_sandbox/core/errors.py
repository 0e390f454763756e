"""
Sandbox Error Taxonomy

Validation errors are raised before any queue mutation and double as
ValueError so callers can treat them like any other bad input. Execution
errors coming out of an account are never wrapped: they abort the drain
in progress and reach the caller verbatim.
"""

from typing import Optional


class SandboxError(Exception):
    """Base class for every error raised by the sandbox itself."""


class InvalidMessageKind(SandboxError, ValueError):
    """An external-out message was handed to the queue for delivery."""


class InvalidAddress(SandboxError, ValueError):
    """A contract descriptor or address string is malformed."""


class InvalidInitCode(SandboxError, ValueError):
    """A contract descriptor's init code is not a cell."""


class InvalidInitData(SandboxError, ValueError):
    """A contract descriptor's init data is not a cell."""


class ReentrantDrainError(SandboxError, RuntimeError):
    """A drain was started while another drain is running on the same instance."""


class UnknownContractCode(SandboxError, LookupError):
    """No program is registered for an account's code cell."""


class ExternalMessageRejected(SandboxError):
    """
    An external-in message was not accepted by its destination account.

    Inbound external messages carry no value to bounce, so a refusal has
    no transaction to record and surfaces to the caller instead.
    """

    def __init__(self, address, reason: str, exit_code: Optional[int] = None):
        self.address = address
        self.reason = reason
        self.exit_code = exit_code
        super().__init__(f"External message to {address} rejected: {reason}")


class ContractError(SandboxError):
    """
    Raised by a contract program to abort its compute phase.

    The executor turns it into an aborted transaction (state rolled back,
    value bounced when requested); it never escapes a drain on its own.
    """

    def __init__(self, exit_code: int, message: str = ""):
        self.exit_code = exit_code
        super().__init__(message or f"Contract exited with code {exit_code}")


class GetMethodError(SandboxError):
    """A get method could not run or exited with a non-zero code."""

    def __init__(self, address, method: str, exit_code: int, reason: str = ""):
        self.address = address
        self.method = method
        self.exit_code = exit_code
        super().__init__(reason or f"Get method {method!r} on {address} failed with exit code {exit_code}")
