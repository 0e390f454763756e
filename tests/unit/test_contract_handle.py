"""Unit tests for contract descriptors and OpenedContract handles."""

import asyncio
from types import SimpleNamespace

import pytest

from ledger_sandbox.core import (
    Cell,
    Contract,
    InvalidAddress,
    InvalidInitCode,
    InvalidInitData,
    MutationResult,
    ReentrantDrainError,
    StateInit,
    internal,
    mutation,
    query,
)

from conftest import AsyncEchoProgram, addr, node, relay_body

ROOT = addr(200)
A, B = addr(1), addr(2)


class RelayWatch(Contract):
    """Descriptor over a relay account."""

    @query
    def get_received(self, provider):
        return provider.get("received")

    @query
    def get_balance(self, provider):
        return provider.get_state().balance

    @mutation
    def send_relay(self, provider, via, *children):
        provider.internal(via, value=0, body=relay_body(*children))

    @mutation
    async def send_later(self, provider, via):
        await asyncio.sleep(0)
        provider.internal(via, value=0, body=relay_body())
        return "sent"

    @mutation
    def send_nothing(self, provider):
        return 42

    @mutation
    def send_broken(self, provider, via):
        provider.internal(via, value=0, body=relay_body())
        raise RuntimeError("broken before draining")

    def describe(self):
        return f"watch at {self.address.short()}"


class PlainWatch(RelayWatch):
    def get_received(self):
        return "no longer a query"


class PromotedWatch(RelayWatch):
    @mutation
    def get_balance(self, provider, via):
        provider.internal(via, value=0, body=relay_body())


@pytest.fixture
def watch(blockchain, install_relay):
    install_relay(A, B)
    return blockchain.open_contract(RelayWatch(A))


@pytest.fixture
def via(blockchain):
    return blockchain.sender(ROOT)


class TestOpenContract:

    def test_missing_address(self, blockchain):
        with pytest.raises(InvalidAddress, match="Invalid address"):
            blockchain.open_contract(SimpleNamespace(address=None))

    def test_text_address_rejected(self, blockchain):
        with pytest.raises(InvalidAddress):
            blockchain.open_contract(SimpleNamespace(address=str(A)))

    def test_invalid_init_code(self, blockchain):
        init = SimpleNamespace(code=b"code", data=Cell())
        with pytest.raises(InvalidInitCode, match="Invalid init.code"):
            blockchain.open_contract(SimpleNamespace(address=A, init=init))

    def test_invalid_init_data(self, blockchain):
        init = SimpleNamespace(code=Cell(), data="data")
        with pytest.raises(InvalidInitData, match="Invalid init.data"):
            blockchain.open_contract(SimpleNamespace(address=A, init=init))

    def test_valid_init(self, blockchain):
        init = StateInit(code=Cell(b"c"), data=Cell(b"d"))
        handle = blockchain.open_contract(RelayWatch(A, init))
        assert handle.provider.init is init

    def test_open_has_no_side_effects(self, blockchain):
        known = len(blockchain.storage)
        first = blockchain.open_contract(RelayWatch(A))
        second = blockchain.open_contract(first.contract)

        assert len(blockchain.storage) == known
        assert blockchain.lt == 0
        assert first.address == second.address
        assert first.contract is second.contract

    def test_reopened_handles_agree(self, blockchain, watch):
        again = blockchain.open_contract(RelayWatch(A))
        fresh = blockchain.open_contract(RelayWatch(A))

        for _ in range(3):
            assert watch.get_received() == again.get_received() == fresh.get_received()
            assert watch.get_balance() == again.get_balance() == fresh.get_balance()

        assert blockchain.lt == 0
        assert blockchain.pending_messages == ()


class TestQueries:

    def test_query_returns_value(self, watch):
        assert watch.get_received() == 0
        assert watch.get_balance() == 10 * 10 ** 9

    def test_query_does_not_touch_queue_or_clock(self, blockchain, watch):
        for _ in range(3):
            watch.get_received()
            watch.get_balance()
        assert blockchain.lt == 0
        assert blockchain.pending_messages == ()


class TestMutations:

    @pytest.mark.asyncio
    async def test_mutation_reports_causal_chain(self, watch, via):
        result = await watch.send_relay(via, node(B))

        assert isinstance(result, MutationResult)
        assert result.result is None
        assert [tx.address for tx in result.transactions] == [A, B]
        assert watch.get_received() == 1

    @pytest.mark.asyncio
    async def test_mutation_without_messages(self, blockchain, watch):
        result = await watch.send_nothing()

        assert result == MutationResult(result=42, transactions=[], events=[])
        assert blockchain.lt == 0

    @pytest.mark.asyncio
    async def test_async_mutation(self, watch, via):
        result = await watch.send_later(via)

        assert result.result == "sent"
        assert [tx.address for tx in result.transactions] == [A]

    @pytest.mark.asyncio
    async def test_mutation_error_skips_drain(self, blockchain, watch, via):
        with pytest.raises(RuntimeError, match="broken before draining"):
            await watch.send_broken(via)

        assert [m.dest for m in blockchain.pending_messages] == [A]
        assert blockchain.lt == 0

    @pytest.mark.asyncio
    async def test_reopened_handles_share_the_ledger(self, blockchain, watch, via):
        again = blockchain.open_contract(RelayWatch(A))
        await again.send_relay(via)
        assert watch.get_received() == 1

    @pytest.mark.asyncio
    async def test_mutation_refused_while_draining(self, blockchain, watch, via):
        echo = addr(50)
        blockchain.set_account(echo, code=AsyncEchoProgram.code(), balance=1000)

        first, second = await asyncio.gather(
            blockchain.send_message(internal(ROOT, echo, value=1)),
            watch.send_relay(via, node(B)),
            return_exceptions=True
        )

        assert isinstance(second, ReentrantDrainError)
        assert [tx.address for tx in first.transactions] == [echo, ROOT]
        assert blockchain.pending_messages == ()
        assert watch.get_received() == 0


class TestCapabilities:

    def test_declared_tables(self):
        assert RelayWatch.query_methods == {"get_received", "get_balance"}
        assert RelayWatch.mutation_methods == {"send_relay", "send_later", "send_nothing", "send_broken"}

    def test_override_without_declaration_drops_capability(self, blockchain):
        assert "get_received" not in PlainWatch.query_methods
        handle = blockchain.open_contract(PlainWatch(A))
        assert handle.get_received() == "no longer a query"

    def test_override_can_change_capability(self):
        assert "get_balance" in PromotedWatch.mutation_methods
        assert "get_balance" not in PromotedWatch.query_methods

    def test_undeclared_members_pass_through(self, watch):
        assert watch.describe() == f"watch at {A.short()}"
        assert watch.address == A
        assert watch.init is None

    def test_unknown_attribute(self, watch):
        with pytest.raises(AttributeError):
            watch.does_not_exist

    def test_dir_lists_bound_methods(self, watch):
        names = dir(watch)
        assert "send_relay" in names
        assert "get_received" in names
        assert "describe" in names

    def test_bound_methods_keep_metadata(self, watch):
        assert watch.send_relay.__name__ == "send_relay"
