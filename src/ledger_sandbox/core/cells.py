"""
Cells, Addresses and Coins

The ledger stores every piece of contract code, contract data and message
payload in immutable content cells: a byte string plus an ordered tuple of
child cells. A cell is identified by its hash, which covers its own bytes
and the hashes of all its children, so equal content always means equal
hash.

Accounts are addressed by (workchain, 32-byte hash). A contract's address
is derived from its initial code and data, which makes deployment
deterministic: the same init pair always lands on the same account.
"""

import hashlib
import json
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Optional, Tuple, Union

from .errors import InvalidAddress

NANO = 1_000_000_000   # Nano units per coin
MAX_REFS = 4           # Child cells per cell


@dataclass(frozen=True)
class Cell:
    """
    Immutable content cell.

    Cells are the only payload type the ledger understands. Contract programs
    that want structured state use the JSON helpers, which encode with sorted
    keys so that identical values always produce identical cells.
    """
    data: bytes = b""
    refs: Tuple['Cell', ...] = field(default_factory=tuple)

    def __post_init__(self):
        """Validate cell invariants."""
        if not isinstance(self.data, (bytes, bytearray)):
            raise TypeError("Cell data must be bytes")
        if len(self.refs) > MAX_REFS:
            raise ValueError(f"Cell cannot have more than {MAX_REFS} refs")
        for ref in self.refs:
            if not isinstance(ref, Cell):
                raise TypeError("Cell refs must be cells")
        # Freeze containers so the dataclass hash stays stable
        object.__setattr__(self, 'data', bytes(self.data))
        object.__setattr__(self, 'refs', tuple(self.refs))

    def hash(self) -> bytes:
        """Representation hash over data and all child hashes."""
        hasher = hashlib.sha256()
        hasher.update(len(self.data).to_bytes(4, 'big'))
        hasher.update(self.data)
        for ref in self.refs:
            hasher.update(ref.hash())
        return hasher.digest()

    def hex_hash(self) -> str:
        return self.hash().hex()

    def is_empty(self) -> bool:
        return not self.data and not self.refs

    @classmethod
    def of_json(cls, value: Any, refs: Tuple['Cell', ...] = ()) -> 'Cell':
        """Encode a JSON-compatible value into a cell deterministically."""
        encoded = json.dumps(value, sort_keys=True, separators=(',', ':'))
        return cls(data=encoded.encode(), refs=tuple(refs))

    def to_json(self) -> Any:
        """Decode a cell built with `of_json`."""
        if not self.data:
            return None
        return json.loads(self.data.decode())

    def __str__(self) -> str:
        return f"Cell({len(self.data)} bytes, {len(self.refs)} refs, {self.hex_hash()[:12]}...)"


EMPTY_CELL = Cell()


@dataclass(frozen=True)
class Address:
    """
    Account address: workchain id plus 32-byte account hash.

    Text form is `<workchain>:<64 hex chars>`, e.g. `0:83df...`.
    """
    workchain: int
    hash: bytes

    def __post_init__(self):
        if not isinstance(self.workchain, int) or isinstance(self.workchain, bool):
            raise InvalidAddress(f"Workchain must be an integer, got {self.workchain!r}")
        if not -128 <= self.workchain <= 127:
            raise InvalidAddress(f"Workchain {self.workchain} out of range")
        if not isinstance(self.hash, (bytes, bytearray)) or len(self.hash) != 32:
            raise InvalidAddress("Address hash must be exactly 32 bytes")
        object.__setattr__(self, 'hash', bytes(self.hash))

    @classmethod
    def parse(cls, text: str) -> 'Address':
        """Parse the `<workchain>:<hex>` text form."""
        try:
            workchain, _, hex_hash = text.partition(':')
            return cls(int(workchain), bytes.fromhex(hex_hash))
        except (AttributeError, ValueError) as e:
            if isinstance(e, InvalidAddress):
                raise
            raise InvalidAddress(f"Malformed address {text!r}") from e

    @staticmethod
    def is_address(value: Any) -> bool:
        """True if value is a well-formed Address instance."""
        return isinstance(value, Address)

    def to_raw(self) -> str:
        return f"{self.workchain}:{self.hash.hex()}"

    def short(self) -> str:
        """Abbreviated form for human-readable output."""
        return f"{self.workchain}:{self.hash.hex()[:8]}..."

    def __str__(self) -> str:
        return self.to_raw()


@dataclass(frozen=True)
class StateInit:
    """Initial code and data of a contract; determines its address."""
    code: Cell
    data: Cell

    def hash(self) -> bytes:
        return Cell(refs=(self.code, self.data)).hash()


def contract_address(workchain: int, init: StateInit) -> Address:
    """Derive the address a contract with this init pair deploys to."""
    return Address(workchain, init.hash())


def to_nano(amount: Union[int, float, str, Decimal]) -> int:
    """Convert a coin amount to nano units, exactly for decimal strings."""
    nano = Decimal(str(amount)) * NANO
    if nano != nano.to_integral_value():
        raise ValueError(f"Amount {amount} has more than 9 decimal places")
    return int(nano)


def from_nano(amount: int) -> str:
    """Format nano units as a decimal coin string."""
    coins = (Decimal(amount) / NANO).normalize()
    return f"{coins:f}"


def maybe_address(value: Optional[Union[Address, str]]) -> Optional[Address]:
    """Accept an Address, its text form, or None."""
    if value is None or isinstance(value, Address):
        return value
    return Address.parse(value)
