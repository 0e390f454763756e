"""
Ledger Messages

Every state change on the ledger is caused by a message delivered to an
account:
- internal messages travel between accounts and may carry value
- external-in messages come from outside the ledger (e.g. a signed wallet
  request) and carry no value
- external-out messages are observable output emitted by contracts; they
  are never delivered to anyone
"""

import hashlib
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .cells import Address, Cell, EMPTY_CELL, StateInit


class MessageKind(str, Enum):
    INTERNAL = 'internal'
    EXTERNAL_IN = 'external-in'
    EXTERNAL_OUT = 'external-out'


@dataclass(frozen=True)
class Message:
    """
    Immutable ledger message.

    `dest` is required for anything that can be delivered; external-out
    messages have no destination account.
    """
    kind: MessageKind
    dest: Optional[Address]
    body: Cell = EMPTY_CELL
    src: Optional[Address] = None
    value: int = 0            # Nano units carried by an internal message
    bounce: bool = True       # Return value to src if the receiver aborts
    bounced: bool = False     # This message is itself a bounce
    init: Optional[StateInit] = None

    def __post_init__(self):
        """Validate message invariants."""
        object.__setattr__(self, 'kind', MessageKind(self.kind))
        if self.kind != MessageKind.EXTERNAL_OUT and not Address.is_address(self.dest):
            raise ValueError(f"{self.kind.value} message requires a destination address")
        if self.value < 0:
            raise ValueError("Message value cannot be negative")
        if self.kind != MessageKind.INTERNAL and self.value:
            raise ValueError("Only internal messages can carry value")

    @property
    def is_deliverable(self) -> bool:
        return self.kind != MessageKind.EXTERNAL_OUT

    def hash(self) -> str:
        """Deterministic message identifier."""
        parts = [
            self.kind.value,
            str(self.src) if self.src else '-',
            str(self.dest) if self.dest else '-',
            str(self.value),
            '1' if self.bounce else '0',
            '1' if self.bounced else '0',
            self.body.hex_hash(),
            self.init.hash().hex() if self.init else '-',
        ]
        return hashlib.sha256('|'.join(parts).encode()).hexdigest()

    def __str__(self) -> str:
        src = self.src.short() if self.src else 'external'
        dest = self.dest.short() if self.dest else 'external'
        return f"Message({self.kind.value}, {src} -> {dest}, value={self.value})"


# Constructors for common message shapes

def internal(src: Address, dest: Address, value: int = 0, body: Optional[Cell] = None,
             bounce: bool = True, init: Optional[StateInit] = None,
             bounced: bool = False) -> Message:
    """Build an internal message between two accounts."""
    return Message(
        kind=MessageKind.INTERNAL,
        src=src,
        dest=dest,
        value=value,
        body=body if body is not None else EMPTY_CELL,
        bounce=bounce,
        bounced=bounced,
        init=init
    )


def external(dest: Address, body: Optional[Cell] = None,
             init: Optional[StateInit] = None) -> Message:
    """Build an inbound external message."""
    return Message(
        kind=MessageKind.EXTERNAL_IN,
        dest=dest,
        body=body if body is not None else EMPTY_CELL,
        bounce=False,
        init=init
    )


def external_out(src: Address, body: Optional[Cell] = None) -> Message:
    """Build an outbound external message (contract output, never delivered)."""
    return Message(
        kind=MessageKind.EXTERNAL_OUT,
        dest=None,
        src=src,
        body=body if body is not None else EMPTY_CELL,
        bounce=False
    )
