"""
Execution Results

What a caller gets back after the simulator drains its queue.
"""

from dataclasses import dataclass
from typing import Any, Generic, List, TypeVar

from .events import Event
from .transactions import Transaction

R = TypeVar('R')


@dataclass(frozen=True)
class ExecutionResult:
    """
    Every transaction of one drain, in delivery (= lt) order, and the
    events extracted from them in the same order.
    """
    transactions: List[Transaction]
    events: List[Event]

    @property
    def lts(self) -> List[int]:
        return [tx.lt for tx in self.transactions]

    def __len__(self) -> int:
        return len(self.transactions)


@dataclass(frozen=True)
class MutationResult(Generic[R]):
    """A mutation's own return value plus the drain it caused."""
    result: R
    transactions: List[Transaction]
    events: List[Event]

    @classmethod
    def from_execution(cls, result: Any, execution: ExecutionResult) -> 'MutationResult':
        return cls(result=result, transactions=execution.transactions, events=execution.events)
