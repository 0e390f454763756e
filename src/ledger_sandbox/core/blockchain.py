"""
Ledger Simulator Core

This is the main class that ties the sandbox together:
- Logical clock for transaction ordering
- Message queue drained to a fixed point after every external call
- Account storage and the executor that runs contract programs
- Contract handles whose mutations report their full causal chain

One Blockchain instance is one independent ledger. Delivery is strictly
sequential: a message is only dispatched once the previous message's
transaction and outbound messages have been fully recorded, which is what
makes lt assignment, FIFO delivery and breadth-first expansion hold.
"""

from typing import List, Optional, Tuple

from loguru import logger

from .cells import Address, Cell, StateInit
from .clock import LT_ALIGN, LogicalClock
from .config import NetworkConfig, default_config
from .contract import OpenedContract
from .errors import InvalidAddress, InvalidInitCode, InvalidInitData
from .events import EventExtractor, extract_events
from .executor import Executor
from .messages import Message
from .provider import BlockchainContractProvider
from .queue import MessageQueue
from .results import ExecutionResult
from .sender import BlockchainSender
from .smart_contract import SmartContract, Verbosity
from .storage import AccountStorage, LocalAccountStorage
from .transactions import Transaction


class Blockchain:
    """
    Deterministic single-process ledger simulator.

    Use `Blockchain.create()` for a ready-to-use instance with in-memory
    storage and the built-in programs.
    """

    def __init__(self, executor: Executor, storage: AccountStorage,
                 config: Optional[NetworkConfig] = None,
                 event_extractor: Optional[EventExtractor] = None,
                 lt_step: int = LT_ALIGN):
        """
        Initialize the simulator.

        Args:
            executor: Runs contract programs
            storage: Account storage backend
            config: Network configuration blob (defaults to DEFAULT_CONFIG)
            event_extractor: Derives events from transactions
            lt_step: Logical time added per delivered message
        """
        self.executor = executor
        self.storage = storage
        self.event_extractor = event_extractor or extract_events
        self._network_config = config if config is not None else default_config()
        self._verbosity = Verbosity.NONE

        # Exclusively owned ordering state
        self.clock = LogicalClock(step=lt_step)
        self.message_queue = MessageQueue(self.clock)

    @classmethod
    def create(cls, config: Optional[NetworkConfig] = None,
               storage: Optional[AccountStorage] = None,
               executor: Optional[Executor] = None,
               event_extractor: Optional[EventExtractor] = None) -> 'Blockchain':
        return cls(
            executor=executor or Executor.create(),
            storage=storage or LocalAccountStorage(),
            config=config,
            event_extractor=event_extractor
        )

    @property
    def lt(self) -> int:
        """Current logical time."""
        return self.clock.lt

    @property
    def config(self) -> NetworkConfig:
        return self._network_config

    def set_config(self, config: NetworkConfig) -> None:
        """Replace the network configuration wholesale."""
        if not isinstance(config, Cell):
            raise TypeError("Network config must be a cell")
        self._network_config = config

    # Message processing

    async def send_message(self, message: Message) -> ExecutionResult:
        """
        Deliver a message and everything it causes.

        Raises:
            InvalidMessageKind: the message is external-out (queue untouched)
            ReentrantDrainError: another drain is running (queue untouched)
            Any failure from the account that processes a message; messages
            already queued by earlier transactions stay queued
        """
        self.message_queue.ensure_idle()
        self.push_message(message)
        return await self.run_queue()

    def push_message(self, message: Message) -> None:
        """Enqueue a message without draining."""
        self.message_queue.push(message)

    async def run_queue(self) -> ExecutionResult:
        """Drain the queue and collect transactions and their events."""
        transactions = await self.process_queue()
        events = [event for tx in transactions for event in self.event_extractor(tx)]
        return ExecutionResult(transactions=transactions, events=events)

    async def process_queue(self) -> List[Transaction]:
        transactions = await self.message_queue.drain_all(self._apply)
        if transactions:
            logger.debug("Queue drained: {} transactions, lt={}", len(transactions), self.lt)
        return transactions

    @property
    def pending_messages(self) -> Tuple[Message, ...]:
        """Messages still queued, e.g. after a drain aborted."""
        return self.message_queue.snapshot()

    def clear_queue(self) -> int:
        """Discard pending messages left behind by an aborted drain."""
        dropped = self.message_queue.clear()
        if dropped:
            logger.warning("Discarded {} pending messages", dropped)
        return dropped

    # Providers, senders and contract handles

    def provider(self, address: Address, init: Optional[StateInit] = None) -> BlockchainContractProvider:
        return BlockchainContractProvider(self, address, init)

    def sender(self, address: Address) -> BlockchainSender:
        return BlockchainSender(self, address)

    def open_contract(self, contract) -> OpenedContract:
        """
        Wrap a contract descriptor into a handle bound to this simulator.

        Raises:
            InvalidAddress: descriptor has no well-formed address
            InvalidInitCode / InvalidInitData: init pair is not made of cells
        """
        address = getattr(contract, 'address', None)
        if not Address.is_address(address):
            raise InvalidAddress("Invalid address")

        init = getattr(contract, 'init', None)
        if init is not None:
            if not isinstance(getattr(init, 'code', None), Cell):
                raise InvalidInitCode("Invalid init.code")
            if not isinstance(getattr(init, 'data', None), Cell):
                raise InvalidInitData("Invalid init.data")

        return OpenedContract(self, contract, self.provider(address, init))

    def treasury(self, seed: str, workchain: int = 0) -> OpenedContract:
        """
        Open a funded treasury wallet derived from `seed`.

        The same seed always yields the same wallet; a fresh wallet is
        credited with TREASURY_BALANCE.
        """
        from ..programs.treasury import TREASURY_BALANCE, TreasuryContract, test_key

        key = test_key(seed)
        treasury = TreasuryContract.create(workchain, key)
        wallet = self.open_contract(treasury)

        contract = self.get_contract(treasury.address)
        if contract.balance == 0:
            contract.balance = TREASURY_BALANCE

        return wallet

    # Accounts

    def get_contract(self, address: Address) -> SmartContract:
        return self.storage.get_contract(self, address)

    def set_account(self, address: Address, code: Optional[Cell] = None,
                    data: Optional[Cell] = None, balance: int = 0) -> SmartContract:
        """Install account state directly, bypassing messages (test setup)."""
        contract = self.get_contract(address)
        contract.install(code, data, balance)
        return contract

    @property
    def verbosity(self) -> Verbosity:
        return self._verbosity

    @verbosity.setter
    def verbosity(self, value: Verbosity) -> None:
        self._verbosity = Verbosity(value)

    def set_verbosity_for_address(self, address: Address, verbosity: Verbosity) -> None:
        self.get_contract(address).verbosity = verbosity

    def reset_verbosity_for_address(self, address: Address) -> None:
        self.get_contract(address).reset_verbosity()

    # Private methods

    async def _apply(self, message: Message, lt: int) -> Transaction:
        """Route a message to its destination account."""
        contract = self.get_contract(message.dest)
        return await contract.receive_message(message, lt)

    def __repr__(self) -> str:
        return f"Blockchain(lt={self.lt}, pending={len(self.message_queue)})"
