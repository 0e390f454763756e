"""
Message Queue

Pending messages wait here until the execution loop delivers them:
- strict FIFO - the head is delivered next, new messages join the tail
- appending a transaction's outbound messages to the tail gives a
  breadth-first expansion of one root message's causal closure
- external-out messages may ride along but are dropped when they reach
  the head, without touching the clock or any account

Unlike a fee-prioritized mempool there is no reordering, eviction or
expiry: every queued message is delivered exactly once, or the drain
aborts and leaves the rest queued.
"""

from collections import deque
from typing import Awaitable, Callable, Deque, List, Tuple

from loguru import logger

from .clock import LogicalClock
from .errors import InvalidMessageKind, ReentrantDrainError
from .messages import Message, MessageKind
from .transactions import Transaction

# Applies one message at the given logical time and returns its transaction
ProcessFn = Callable[[Message, int], Awaitable[Transaction]]


class MessageQueue:
    """
    FIFO queue of messages awaiting delivery, drained to a fixed point.
    """

    def __init__(self, clock: LogicalClock):
        self.clock = clock
        self._messages: Deque[Message] = deque()
        self._draining = False

        # Statistics
        self._stats = {
            'messages_pushed': 0,
            'messages_delivered': 0,
            'messages_discarded': 0,
        }

    def push(self, message: Message) -> None:
        """
        Schedule a message for delivery.

        Raises:
            InvalidMessageKind: for external-out messages, which are output only
            ReentrantDrainError: while a drain is running; outbound messages
                of the transaction in progress are queued by the drain itself
        """
        if message.kind == MessageKind.EXTERNAL_OUT:
            raise InvalidMessageKind("Cannot send external-out message")
        self.ensure_idle()
        self._messages.append(message)
        self._stats['messages_pushed'] += 1

    async def drain_all(self, process: ProcessFn) -> List[Transaction]:
        """
        Deliver messages until the queue is empty.

        Each deliverable message advances the clock once and is handed to
        `process`; the outbound messages of the resulting transaction are
        appended to the tail. Any exception from `process` propagates and
        leaves the remaining messages queued.

        Returns:
            Transactions in delivery order
        """
        self.ensure_idle()

        self._draining = True
        result: List[Transaction] = []
        try:
            while self._messages:
                message = self._messages.popleft()

                if not message.is_deliverable:
                    self._stats['messages_discarded'] += 1
                    continue

                lt = self.clock.advance()
                logger.debug("Delivering {} at lt={}", message, lt)
                transaction = await process(message, lt)
                result.append(transaction)
                self._stats['messages_delivered'] += 1

                # Outbound effects join the tail, external-out included
                self._messages.extend(transaction.out_messages)
        finally:
            self._draining = False

        return result

    def snapshot(self) -> Tuple[Message, ...]:
        """Pending messages, head first."""
        return tuple(self._messages)

    def clear(self) -> int:
        """Drop every pending message; returns how many were dropped."""
        dropped = len(self._messages)
        self._messages.clear()
        return dropped

    def ensure_idle(self) -> None:
        if self._draining:
            raise ReentrantDrainError("Message queue is already being drained")

    @property
    def is_draining(self) -> bool:
        return self._draining

    def get_stats(self) -> dict:
        return dict(self._stats, pending=len(self._messages))

    def __len__(self) -> int:
        return len(self._messages)

    def __bool__(self) -> bool:
        return bool(self._messages)
