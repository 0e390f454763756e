"""
Ledger Sandbox

A deterministic, single-process simulator of a message-passing ledger for
testing smart-contract behaviour without a live network. Send one message
and get back the full causal chain of transactions it triggered.

Key Features:
- Logical time: every transaction gets a unique, totally ordered lt
- Fixed-point message queue with breadth-first causal expansion
- Contract handles: queries return values, mutations return transactions
- Python contract programs with deploy, bounce and self-destruct semantics
- Seed-derived, ecdsa-signed treasury wallets for test setup
- CLI with a demo scenario and a queue benchmark

Example:
    blockchain = Blockchain.create()
    treasury = blockchain.treasury("alice")
    counter = blockchain.open_contract(Counter.create_from_init(counter_id=1))
    result = await counter.send_deploy(treasury.get_sender(), to_nano("0.5"))
"""

from loguru import logger

__version__ = "1.0.0"

from .core import *
from .core import __all__ as _core_all
from .programs import *
from .programs import __all__ as _programs_all
from .logs import configure_logging

# Silent as a library until configure_logging() opts in
logger.disable("ledger_sandbox")

__all__ = list(_core_all) + list(_programs_all) + ['configure_logging']
