"""
Contract Descriptors and Handles

A contract descriptor is a plain Python object describing one contract:
its address, an optional state init, and methods that talk to the ledger
through a provider. Each method declares its capability up front:
- `@query` methods only read; their value is returned as is
- `@mutation` methods enqueue messages; the simulator then drains the
  queue and reports every transaction the call caused

`Blockchain.open_contract` turns a descriptor into an OpenedContract
handle. The handle binds each declared method to a provider for the
descriptor's address, so callers never pass the provider themselves.
"""

import functools
import inspect
from typing import Any, Callable, Dict, FrozenSet, Optional

from .cells import Address, StateInit
from .results import MutationResult

QUERY = 'query'
MUTATION = 'mutation'


def query(fn: Callable) -> Callable:
    """Declare a read-only descriptor method: fn(self, provider, *args)."""
    fn.__capability__ = QUERY
    return fn


def mutation(fn: Callable) -> Callable:
    """Declare a message-sending descriptor method: fn(self, provider, *args)."""
    fn.__capability__ = MUTATION
    return fn


class Contract:
    """
    Base class for contract descriptors.

    The method table is collected once per subclass, when the class is
    defined, from the `@query` / `@mutation` declarations.
    """

    query_methods: FrozenSet[str] = frozenset()
    mutation_methods: FrozenSet[str] = frozenset()

    def __init__(self, address: Address, init: Optional[StateInit] = None):
        self.address = address
        self.init = init

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        capabilities: Dict[str, str] = {}
        for klass in reversed(cls.__mro__):
            for name, value in vars(klass).items():
                capability = getattr(value, '__capability__', None)
                if capability is not None:
                    capabilities[name] = capability
                elif name in capabilities:
                    del capabilities[name]   # Overridden without a declaration
        cls.query_methods = frozenset(n for n, c in capabilities.items() if c == QUERY)
        cls.mutation_methods = frozenset(n for n, c in capabilities.items() if c == MUTATION)


class OpenedContract:
    """
    Handle over a contract descriptor.

    Declared queries and mutations are bound at construction; every other
    attribute is read straight from the descriptor. Creating a handle has
    no side effects, so the same descriptor can be opened any number of
    times.
    """

    def __init__(self, blockchain, contract, provider):
        self._blockchain = blockchain
        self._contract = contract
        self._provider = provider
        self.query_methods: FrozenSet[str] = getattr(type(contract), 'query_methods', frozenset())
        self.mutation_methods: FrozenSet[str] = getattr(type(contract), 'mutation_methods', frozenset())

        self._bound: Dict[str, Callable] = {}
        for name in self.query_methods:
            self._bound[name] = self._bind_query(getattr(contract, name))
        for name in self.mutation_methods:
            self._bound[name] = self._bind_mutation(getattr(contract, name))

    @property
    def contract(self):
        """The wrapped descriptor."""
        return self._contract

    @property
    def provider(self):
        return self._provider

    def _bind_query(self, method: Callable) -> Callable:
        provider = self._provider

        @functools.wraps(method)
        def call(*args, **kwargs) -> Any:
            return method(provider, *args, **kwargs)

        return call

    def _bind_mutation(self, method: Callable) -> Callable:
        provider = self._provider
        blockchain = self._blockchain

        @functools.wraps(method)
        async def call(*args, **kwargs) -> MutationResult:
            # Refuse before the descriptor enqueues anything
            blockchain.message_queue.ensure_idle()
            result = method(provider, *args, **kwargs)
            if inspect.isawaitable(result):
                result = await result
            execution = await blockchain.run_queue()
            return MutationResult.from_execution(result, execution)

        return call

    def __getattr__(self, name: str) -> Any:
        # Only reached when normal lookup fails
        bound = self.__dict__.get('_bound', {})
        if name in bound:
            return bound[name]
        if '_contract' not in self.__dict__:
            raise AttributeError(name)
        return getattr(self.__dict__['_contract'], name)

    def __dir__(self):
        return sorted(set(super().__dir__()) | set(self._bound) | set(dir(self._contract)))

    def __repr__(self) -> str:
        return f"OpenedContract({type(self._contract).__name__} at {self._contract.address.short()})"
