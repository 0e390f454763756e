"""
Ledger Sandbox Core Components

The message-queue execution engine and the data types it moves around:
cells and addresses, messages, transactions and events, the logical clock
and message queue, accounts and their storage, the executor, and the
contract handles users drive the simulator with.
"""

from .cells import Address, Cell, EMPTY_CELL, StateInit, contract_address, to_nano, from_nano
from .messages import Message, MessageKind, internal, external, external_out
from .transactions import AccountStatus, Transaction, TransactionDescription
from .clock import LogicalClock, LT_ALIGN
from .queue import MessageQueue
from .events import Event, AccountCreated, AccountDestroyed, MessageSent, extract_events
from .smart_contract import SmartContract, AccountState, GetMethodResult, Verbosity
from .storage import AccountStorage, LocalAccountStorage
from .executor import Executor
from .provider import BlockchainContractProvider
from .sender import Sender, BlockchainSender
from .contract import Contract, OpenedContract, query, mutation
from .results import ExecutionResult, MutationResult
from .config import DEFAULT_CONFIG, NetworkConfig
from .errors import (
    SandboxError,
    InvalidMessageKind,
    InvalidAddress,
    InvalidInitCode,
    InvalidInitData,
    ReentrantDrainError,
    UnknownContractCode,
    ExternalMessageRejected,
    ContractError,
    GetMethodError
)
from .blockchain import Blockchain

__all__ = [
    'Address', 'Cell', 'EMPTY_CELL', 'StateInit', 'contract_address', 'to_nano', 'from_nano',
    'Message', 'MessageKind', 'internal', 'external', 'external_out',
    'AccountStatus', 'Transaction', 'TransactionDescription',
    'LogicalClock', 'LT_ALIGN',
    'MessageQueue',
    'Event', 'AccountCreated', 'AccountDestroyed', 'MessageSent', 'extract_events',
    'SmartContract', 'AccountState', 'GetMethodResult', 'Verbosity',
    'AccountStorage', 'LocalAccountStorage',
    'Executor',
    'BlockchainContractProvider',
    'Sender', 'BlockchainSender',
    'Contract', 'OpenedContract', 'query', 'mutation',
    'ExecutionResult', 'MutationResult',
    'DEFAULT_CONFIG', 'NetworkConfig',
    'SandboxError', 'InvalidMessageKind', 'InvalidAddress', 'InvalidInitCode',
    'InvalidInitData', 'ReentrantDrainError', 'UnknownContractCode',
    'ExternalMessageRejected', 'ContractError', 'GetMethodError',
    'Blockchain'
]
