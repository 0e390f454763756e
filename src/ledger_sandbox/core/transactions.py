"""
Ledger Transactions

A transaction is the record of exactly one message applied to exactly one
account. It captures:
- which account ran and at what logical time
- the inbound message and every outbound message it produced, in order
- the account's status before and after, plus a reference to its new state
- effect metadata (compute result, bounce, credit) used for event extraction

Transactions are immutable once produced; the caller owns them.
"""

import hashlib
from dataclasses import dataclass
from enum import Enum
from typing import Tuple

from .cells import Address
from .messages import Message, MessageKind


class AccountStatus(str, Enum):
    NON_EXISTING = 'non-existing'
    UNINIT = 'uninit'
    ACTIVE = 'active'


@dataclass(frozen=True)
class TransactionDescription:
    """
    Effect metadata of a transaction.

    This is what event extraction reads - the raw facts of what the
    account's state transition did.
    """
    compute_success: bool     # Program ran to completion (or nothing to run)
    exit_code: int            # 0 on success, program exit code otherwise
    aborted: bool             # State changes were rolled back
    credit: int = 0           # Nano units credited from the inbound message
    bounced: bool = False     # A bounce message was produced
    deployed: bool = False    # Code and data were installed by this message
    destroyed: bool = False   # Account was deleted at the end

    @property
    def success(self) -> bool:
        return self.compute_success and not self.aborted


@dataclass(frozen=True)
class Transaction:
    """
    Immutable record of one message applied to one account.
    """
    address: Address                   # Account that processed the message
    lt: int                            # Logical time of delivery
    prev_lt: int                       # Account's previous transaction lt (0 if none)
    in_message: Message
    out_messages: Tuple[Message, ...]
    old_status: AccountStatus
    end_status: AccountStatus
    state_hash: str                    # Reference to the resulting account state
    description: TransactionDescription

    def hash(self) -> str:
        """Compute deterministic transaction hash."""
        parts = [
            str(self.address),
            str(self.lt),
            str(self.prev_lt),
            self.in_message.hash(),
            self.state_hash,
        ]
        parts.extend(message.hash() for message in self.out_messages)
        return hashlib.sha256('|'.join(parts).encode()).hexdigest()

    @property
    def internal_out_messages(self) -> Tuple[Message, ...]:
        return tuple(m for m in self.out_messages if m.kind == MessageKind.INTERNAL)

    @property
    def external_out_messages(self) -> Tuple[Message, ...]:
        return tuple(m for m in self.out_messages if m.kind == MessageKind.EXTERNAL_OUT)

    def summary(self) -> dict:
        """Human-readable summary, used by the CLI."""
        return {
            "lt": self.lt,
            "account": self.address.short(),
            "in": self.in_message.kind.value,
            "value": self.in_message.value,
            "out_messages": len(self.out_messages),
            "status": f"{self.old_status.value} -> {self.end_status.value}",
            "success": self.description.success,
            "exit_code": self.description.exit_code,
        }

    def __str__(self) -> str:
        status = "ok" if self.description.success else f"aborted({self.description.exit_code})"
        return (f"Transaction(lt={self.lt}, {self.address.short()}, "
                f"{len(self.out_messages)} out, {status})")
