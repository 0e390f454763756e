"""
Message Senders

A sender is anything that can put an internal message on the ledger on
behalf of an address. Senders only enqueue; whoever drives the simulator
decides when the queue is drained.
"""

from typing import Optional, Union

from .cells import Address, Cell, StateInit, maybe_address
from .messages import internal


class Sender:
    """Interface for senders."""

    address: Optional[Address] = None

    def send(self, to: Union[Address, str], value: int, body: Optional[Cell] = None,
             bounce: bool = True, init: Optional[StateInit] = None) -> None:
        raise NotImplementedError


class BlockchainSender(Sender):
    """
    Delivers internal messages from a fixed address, no signature needed.

    Useful for manual workflows where a test impersonates an account.
    """

    def __init__(self, blockchain, address: Address):
        self.blockchain = blockchain
        self.address = address

    def send(self, to: Union[Address, str], value: int, body: Optional[Cell] = None,
             bounce: bool = True, init: Optional[StateInit] = None) -> None:
        self.blockchain.push_message(internal(
            src=self.address,
            dest=maybe_address(to),
            value=value,
            body=body,
            bounce=bounce,
            init=init
        ))

    def __repr__(self) -> str:
        return f"BlockchainSender({self.address.short()})"
