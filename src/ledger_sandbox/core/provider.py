"""
Contract Provider

The provider is what contract descriptors talk to: it binds one address
(and optionally its state init) to a simulator and exposes the handful of
primitives a descriptor needs - read state, run a get method, send an
external message, or ask a sender to deliver an internal one. While the
account is not yet active, outgoing messages carry the state init so the
first message deploys it.
"""

from typing import Any, Optional

from .cells import Address, Cell, StateInit
from .messages import external
from .sender import Sender
from .smart_contract import AccountState


class BlockchainContractProvider:
    """Routing shim between a descriptor and one account."""

    def __init__(self, blockchain, address: Address, init: Optional[StateInit] = None):
        self.blockchain = blockchain
        self.address = address
        self.init = init

    def get_state(self) -> AccountState:
        return self.blockchain.get_contract(self.address).get_state()

    def get(self, method: str, *args) -> Any:
        """Run a get method and return its value."""
        return self.blockchain.get_contract(self.address).get(method, *args).value

    def external(self, body: Optional[Cell] = None) -> None:
        """Enqueue an external-in message to this address."""
        self.blockchain.push_message(external(
            dest=self.address,
            body=body,
            init=self._deploy_init()
        ))

    def internal(self, via: Sender, value: int, body: Optional[Cell] = None,
                 bounce: bool = True) -> None:
        """Have `via` send an internal message to this address."""
        via.send(
            to=self.address,
            value=value,
            body=body,
            bounce=bounce,
            init=self._deploy_init()
        )

    def _deploy_init(self) -> Optional[StateInit]:
        if self.init is None or self.get_state().is_active:
            return None
        return self.init

    def __repr__(self) -> str:
        return f"BlockchainContractProvider({self.address.short()})"
