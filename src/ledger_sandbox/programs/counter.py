"""
Counter Contract

A minimal example contract: it stores a number and increments it on
request, announcing every change as an external-out message. Used by the
CLI demo and as a template for writing programs.

Message bodies (JSON cells):
    {"op": "increment", "by": 3}      add to the counter
    {"op": "reset"}                   set the counter back to zero
    (empty body)                      accept value, e.g. when deploying
"""

from ..core.cells import Address, Cell, StateInit, contract_address
from ..core.contract import Contract, mutation, query
from ..core.errors import ContractError
from ..core.messages import Message
from .base import ContractProgram, ProgramContext, get_method

EXIT_UNKNOWN_OP = 0xFFFF
EXIT_BAD_AMOUNT = 40


class CounterProgram(ContractProgram):

    name = 'counter'

    def receive_internal(self, ctx: ProgramContext, message: Message) -> None:
        if message.bounced or message.body.is_empty():
            return

        request = message.body.to_json()
        op = request.get("op") if isinstance(request, dict) else None
        state = ctx.load()

        if op == "increment":
            by = request.get("by", 1)
            if not isinstance(by, int) or by < 0:
                raise ContractError(EXIT_BAD_AMOUNT, f"Bad increment {by!r}")
            state["counter"] += by
        elif op == "reset":
            state["counter"] = 0
        else:
            raise ContractError(EXIT_UNKNOWN_OP, f"Unknown op {op!r}")

        ctx.store(state)
        ctx.emit(Cell.of_json({"event": op, "counter": state["counter"]}))
        ctx.log(f"counter={state['counter']}")

    @get_method
    def counter(self, ctx: ProgramContext) -> int:
        return ctx.load()["counter"]

    @get_method
    def counter_id(self, ctx: ProgramContext) -> int:
        return ctx.load()["id"]


class Counter(Contract):
    """Descriptor for a counter contract."""

    @classmethod
    def create_from_address(cls, address: Address) -> 'Counter':
        return cls(address)

    @classmethod
    def create_from_init(cls, counter_id: int = 0, initial: int = 0,
                         workchain: int = 0) -> 'Counter':
        init = StateInit(
            code=CounterProgram.code(),
            data=Cell.of_json({"id": counter_id, "counter": initial})
        )
        return cls(contract_address(workchain, init), init)

    @mutation
    def send_deploy(self, provider, via, value: int) -> None:
        provider.internal(via, value=value)

    @mutation
    def send_increment(self, provider, via, value: int, by: int = 1) -> None:
        provider.internal(via, value=value, body=Cell.of_json({"op": "increment", "by": by}))

    @mutation
    def send_reset(self, provider, via, value: int) -> None:
        provider.internal(via, value=value, body=Cell.of_json({"op": "reset"}))

    @query
    def get_counter(self, provider) -> int:
        return provider.get("counter")

    @query
    def get_id(self, provider) -> int:
        return provider.get("counter_id")
