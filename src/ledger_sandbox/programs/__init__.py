"""
Contract Programs

Built-in programs the executor knows out of the box:
- Treasury: pre-funded, signature-checked wallet for tests
- Counter: minimal example contract
"""

from .base import ContractProgram, ProgramContext, get_method
from .treasury import TreasuryProgram, TreasuryContract, TreasurySender, OutgoingMessage, test_key
from .counter import CounterProgram, Counter

__all__ = [
    'ContractProgram', 'ProgramContext', 'get_method',
    'TreasuryProgram', 'TreasuryContract', 'TreasurySender', 'OutgoingMessage', 'test_key',
    'CounterProgram', 'Counter'
]
