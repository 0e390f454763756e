"""
Ledger Accounts

Every address on the ledger maps to one SmartContract: its balance, status,
code and data. The account never runs code itself - it hands its current
state and the incoming message to the executor and commits whatever state
the executor returns. That keeps a single writer for account state.
"""

import hashlib
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Tuple

from .cells import Address, Cell
from .messages import Message
from .transactions import AccountStatus, Transaction


class Verbosity(str, Enum):
    NONE = 'none'
    VM_LOGS = 'vm_logs'
    VM_LOGS_FULL = 'vm_logs_full'
    DEBUG = 'debug'

    @property
    def rank(self) -> int:
        return list(Verbosity).index(self)

    def includes(self, other: 'Verbosity') -> bool:
        """True if this level shows everything `other` shows."""
        return self.rank >= Verbosity(other).rank


@dataclass(frozen=True)
class AccountState:
    """
    Snapshot of an account, as seen by the executor and by providers.
    """
    address: Address
    balance: int
    status: AccountStatus
    code: Optional[Cell] = None
    data: Optional[Cell] = None
    last_lt: int = 0
    last_tx_hash: Optional[str] = None

    def state_hash(self) -> str:
        """Reference to this state, stored in transactions."""
        parts = [
            self.status.value,
            str(self.balance),
            self.code.hex_hash() if self.code is not None else '-',
            self.data.hex_hash() if self.data is not None else '-',
        ]
        return hashlib.sha256('|'.join(parts).encode()).hexdigest()

    @property
    def is_active(self) -> bool:
        return self.status == AccountStatus.ACTIVE


@dataclass(frozen=True)
class GetMethodResult:
    value: Any
    exit_code: int = 0
    logs: Tuple[str, ...] = ()


class SmartContract:
    """
    One account on the ledger.

    Created lazily by the account storage as `non-existing`; becomes
    `uninit` once it holds value and `active` once code is deployed.
    """

    def __init__(self, blockchain, address: Address, balance: int = 0,
                 status: AccountStatus = AccountStatus.NON_EXISTING,
                 code: Optional[Cell] = None, data: Optional[Cell] = None):
        self.blockchain = blockchain
        self.address = address
        self._balance = balance
        self.status = status
        self.code = code
        self.data = data
        self.last_lt = 0
        self.last_tx_hash: Optional[str] = None
        self._verbosity: Optional[Verbosity] = None

    @property
    def balance(self) -> int:
        return self._balance

    @balance.setter
    def balance(self, value: int) -> None:
        """Set the balance directly (test setup); a funded account exists."""
        if value < 0:
            raise ValueError("Balance cannot be negative")
        self._balance = value
        if value > 0 and self.status == AccountStatus.NON_EXISTING:
            self.status = AccountStatus.UNINIT

    @property
    def verbosity(self) -> Verbosity:
        """Per-account override, falling back to the simulator's level."""
        if self._verbosity is not None:
            return self._verbosity
        return self.blockchain.verbosity

    @verbosity.setter
    def verbosity(self, value: Verbosity) -> None:
        self._verbosity = Verbosity(value)

    def reset_verbosity(self) -> None:
        self._verbosity = None

    def install(self, code: Optional[Cell], data: Optional[Cell] = None, balance: int = 0) -> None:
        """Overwrite the account state directly, without a transaction."""
        if balance < 0:
            raise ValueError("Balance cannot be negative")
        if code is not None:
            self.status = AccountStatus.ACTIVE
            self.code = code
            self.data = data if data is not None else Cell()
        else:
            self.status = AccountStatus.UNINIT if balance else AccountStatus.NON_EXISTING
            self.code = None
            self.data = None
        self._balance = balance

    def get_state(self) -> AccountState:
        return AccountState(
            address=self.address,
            balance=self._balance,
            status=self.status,
            code=self.code,
            data=self.data,
            last_lt=self.last_lt,
            last_tx_hash=self.last_tx_hash
        )

    async def receive_message(self, message: Message, lt: int) -> Transaction:
        """
        Apply one message to this account and commit the result.

        Exceptions from the executor propagate unchanged; state is only
        committed once a transaction has been produced.
        """
        state = self.get_state()
        outcome = await self.blockchain.executor.run_transaction(
            state, message, lt, self.blockchain.config, self.verbosity
        )

        new_state = outcome.state
        transaction = Transaction(
            address=self.address,
            lt=lt,
            prev_lt=state.last_lt,
            in_message=message,
            out_messages=tuple(outcome.out_messages),
            old_status=state.status,
            end_status=new_state.status,
            state_hash=new_state.state_hash(),
            description=outcome.description
        )

        self._balance = new_state.balance
        self.status = new_state.status
        self.code = new_state.code
        self.data = new_state.data
        self.last_lt = lt
        self.last_tx_hash = transaction.hash()

        return transaction

    def get(self, method: str, *args) -> GetMethodResult:
        """Run a read-only get method against the current state."""
        return self.blockchain.executor.run_get_method(
            self.get_state(), method, args, self.blockchain.config, self.verbosity
        )

    def __repr__(self) -> str:
        return f"SmartContract({self.address.short()}, {self.status.value}, balance={self._balance})"
