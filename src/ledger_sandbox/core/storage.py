"""
Account Storage

The single source of truth for account state. Storage hands out one
SmartContract per address, creating it lazily as a non-existing account
the first time an address is looked up, so lookups never fail and looking
an address up twice always returns the same account.
"""

from typing import Dict

from .cells import Address
from .smart_contract import SmartContract


class AccountStorage:
    """Interface for account storage backends."""

    def get_contract(self, blockchain, address: Address) -> SmartContract:
        raise NotImplementedError


class LocalAccountStorage(AccountStorage):
    """
    In-memory account storage, lives as long as the simulator.
    """

    def __init__(self):
        self._contracts: Dict[Address, SmartContract] = {}

    def get_contract(self, blockchain, address: Address) -> SmartContract:
        """Get the account at address, creating it on first access."""
        contract = self._contracts.get(address)
        if contract is None:
            contract = SmartContract(blockchain, address)
            self._contracts[address] = contract
        return contract

    def total_balance(self) -> int:
        """Sum of all account balances, useful for conservation checks."""
        return sum(contract.balance for contract in self._contracts.values())

    def __len__(self) -> int:
        return len(self._contracts)

    def __contains__(self, address: Address) -> bool:
        return address in self._contracts
