"""
Pytest configuration and shared fixtures.
"""

import asyncio

import pytest
from loguru import logger

from ledger_sandbox.core import (
    Address,
    Blockchain,
    Cell,
    ContractError,
    Executor,
    to_nano,
)
from ledger_sandbox.logs import disable_logging
from ledger_sandbox.programs import ContractProgram, get_method


@pytest.fixture(autouse=True)
def silence_logger():
    logger.remove()
    logger.add(lambda msg: None)
    yield
    disable_logging()


class RelayProgram(ContractProgram):
    """
    Test program driven entirely by its message body:
        {"children": [{"to": ..., "children": [...]}, ...]}   forward to each child
        {"emit": 2}                                            emit external-out messages
        {"throw": 42}                                          abort with ContractError
        {"crash": "boom"}                                      raise a plain exception
    """

    name = 'test-relay'

    def receive_internal(self, ctx, message):
        if message.bounced or message.body.is_empty():
            return

        request = message.body.to_json()
        if request.get("crash"):
            raise RuntimeError(request["crash"])
        if "throw" in request:
            raise ContractError(request["throw"])

        for _ in range(request.get("emit", 0)):
            ctx.emit(Cell.of_json({"from": str(ctx.address)}))
        for child in request.get("children", []):
            ctx.send(child["to"], child.get("value", 0), Cell.of_json(child),
                     bounce=child.get("bounce", False))

        state = ctx.load() or {}
        state["received"] = state.get("received", 0) + 1
        ctx.store(state)
        ctx.log(f"received={state['received']}")

    @get_method
    def received(self, ctx):
        return (ctx.load() or {}).get("received", 0)


class AsyncEchoProgram(ContractProgram):
    """Suspends inside its handler, then echoes the value back to the sender."""

    name = 'test-async-echo'

    async def receive_internal(self, ctx, message):
        await asyncio.sleep(0)
        if message.src is not None and message.value and not message.bounced:
            ctx.send(message.src, message.value, bounce=False)


def addr(n: int, workchain: int = 0) -> Address:
    """Deterministic test address."""
    return Address(workchain, bytes([n]) * 32)


def node(to: Address, *children, **options) -> dict:
    """Build one hop of a relay tree."""
    hop = {"to": str(to), "children": list(children)}
    hop.update(options)
    return hop


def relay_body(*children, **options) -> Cell:
    body = {"children": list(children)}
    body.update(options)
    return Cell.of_json(body)


@pytest.fixture
def blockchain():
    """Fresh ledger with the test programs registered."""
    executor = Executor.create([RelayProgram(), AsyncEchoProgram()])
    return Blockchain.create(executor=executor)


@pytest.fixture
def install_relay(blockchain):
    """Install a relay program account at each given address."""
    def install(*addresses, balance=to_nano(10)):
        for address in addresses:
            blockchain.set_account(address, code=RelayProgram.code(),
                                   data=Cell.of_json({"received": 0}), balance=balance)
    return install
