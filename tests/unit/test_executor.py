"""
Unit tests for the executor: deploy, compute, abort, bounce and get methods.
"""

import pytest

from ledger_sandbox.core import (
    AccountDestroyed,
    AccountStatus,
    Blockchain,
    Cell,
    ContractError,
    Executor,
    ExternalMessageRejected,
    GetMethodError,
    MessageSent,
    StateInit,
    UnknownContractCode,
    contract_address,
    external,
    internal,
)
from ledger_sandbox.core.executor import EXIT_NO_STATE, EXIT_NOT_ACTIVE
from ledger_sandbox.programs import Counter, ContractProgram, get_method
from ledger_sandbox.programs.base import EXIT_NOT_ENOUGH_BALANCE, EXIT_READ_ONLY, EXIT_UNKNOWN_GET_METHOD

from conftest import RelayProgram, addr, node, relay_body

ROOT = addr(200)
A, B = addr(1), addr(2)


class DestructProgram(ContractProgram):
    """Sends everything back to the sender and deletes itself."""

    name = 'test-destruct'

    def receive_internal(self, ctx, message):
        ctx.self_destruct(message.src)


class SneakyProgram(ContractProgram):
    """Get methods that try to change state."""

    name = 'test-sneaky'

    @get_method
    def store(self, ctx):
        ctx.store({"changed": True})

    @get_method
    def pay(self, ctx):
        ctx.send(ROOT, 1)

    @get_method
    def fail(self, ctx):
        raise ContractError(77, "refused")

    @get_method
    def add(self, ctx, a, b):
        return a + b


@pytest.fixture
def chain():
    executor = Executor.create([RelayProgram(), DestructProgram(), SneakyProgram()])
    return Blockchain.create(executor=executor)


class TestDeploy:

    @pytest.mark.asyncio
    async def test_deploy_with_matching_init(self, chain):
        counter = chain.open_contract(Counter.create_from_init(counter_id=7))

        result = await counter.send_deploy(chain.sender(ROOT), 1000)

        (tx,) = result.transactions
        assert tx.description.deployed
        assert tx.old_status == AccountStatus.NON_EXISTING
        assert tx.end_status == AccountStatus.ACTIVE
        assert counter.get_id() == 7
        assert counter.get_counter() == 0
        assert chain.get_contract(counter.address).balance == 1000

    @pytest.mark.asyncio
    async def test_init_only_sent_until_active(self, chain):
        counter = chain.open_contract(Counter.create_from_init(counter_id=7))
        await counter.send_deploy(chain.sender(ROOT), 1000)

        result = await counter.send_increment(chain.sender(ROOT), 10, by=2)

        assert result.transactions[0].in_message.init is None
        assert counter.get_counter() == 2

    @pytest.mark.asyncio
    async def test_handle_from_address_reads_deployed_state(self, chain):
        deployed = Counter.create_from_init(counter_id=3, initial=4)
        await chain.open_contract(deployed).send_deploy(chain.sender(ROOT), 1000)

        by_address = chain.open_contract(Counter.create_from_address(deployed.address))

        assert by_address.init is None
        assert by_address.get_counter() == 4
        result = await by_address.send_increment(chain.sender(ROOT), 10, by=1)
        assert result.transactions[0].in_message.init is None
        assert by_address.get_counter() == 5

    @pytest.mark.asyncio
    async def test_mismatched_init_is_ignored_and_bounced(self, chain):
        init = StateInit(code=RelayProgram.code(), data=Cell())
        assert contract_address(0, init) != A

        result = await chain.send_message(internal(ROOT, A, value=500, init=init))

        first, bounce = result.transactions
        assert not first.description.deployed
        assert first.description.exit_code == EXIT_NO_STATE
        assert first.description.bounced
        assert bounce.address == ROOT
        assert bounce.in_message.bounced
        assert chain.get_contract(A).status == AccountStatus.NON_EXISTING
        assert chain.get_contract(A).balance == 0


class TestUninitAccounts:

    @pytest.mark.asyncio
    async def test_non_bounceable_value_stays(self, chain):
        result = await chain.send_message(internal(ROOT, A, value=500, bounce=False))

        (tx,) = result.transactions
        assert tx.end_status == AccountStatus.UNINIT
        assert not tx.description.compute_success
        assert chain.get_contract(A).balance == 500
        assert result.events == []

    @pytest.mark.asyncio
    async def test_zero_value_creates_nothing(self, chain):
        result = await chain.send_message(internal(ROOT, A))

        (tx,) = result.transactions
        assert tx.out_messages == ()
        assert chain.get_contract(A).status == AccountStatus.NON_EXISTING


class TestAbort:

    @pytest.mark.asyncio
    async def test_contract_error_rolls_back_and_bounces(self, chain):
        chain.set_account(A, code=RelayProgram.code(), data=Cell.of_json({"received": 0}), balance=1000)
        body = Cell.of_json({"throw": 42})

        result = await chain.send_message(internal(ROOT, A, value=100, body=body))

        aborted, bounce = result.transactions
        assert aborted.description.aborted
        assert aborted.description.exit_code == 42
        assert aborted.description.bounced
        assert chain.get_contract(A).balance == 1000
        assert chain.get_contract(A).get("received").value == 0

        message = bounce.in_message
        assert message.bounced and not message.bounce
        assert message.value == 100
        assert message.body.to_json() == {"bounced": True, "exit_code": 42}
        assert message.body.refs == (body,)
        assert chain.get_contract(ROOT).balance == 100

    @pytest.mark.asyncio
    async def test_non_bounceable_abort_keeps_value(self, chain):
        chain.set_account(A, code=RelayProgram.code(), balance=1000)

        result = await chain.send_message(
            internal(ROOT, A, value=100, bounce=False, body=Cell.of_json({"throw": 5}))
        )

        (tx,) = result.transactions
        assert tx.description.aborted
        assert not tx.description.bounced
        assert chain.get_contract(A).balance == 1100

    @pytest.mark.asyncio
    async def test_sends_discarded_on_abort(self, chain):
        chain.set_account(A, code=RelayProgram.code(), balance=10)
        body = relay_body(node(B, value=5), node(B, value=50))

        result = await chain.send_message(internal(ROOT, A, body=body))

        (tx,) = result.transactions
        assert tx.description.exit_code == EXIT_NOT_ENOUGH_BALANCE
        assert tx.out_messages == ()
        assert chain.get_contract(A).balance == 10

    @pytest.mark.asyncio
    async def test_bounced_message_never_bounces_again(self, chain):
        chain.set_account(A, code=RelayProgram.code(), balance=1000)
        chain.set_account(B, code=RelayProgram.code(), balance=1000)
        # B rejects, its bounce to A is ignored by A's program
        body = relay_body(node(B, value=7, bounce=True, throw=9))

        result = await chain.send_message(internal(ROOT, A, body=body))

        assert [tx.address for tx in result.transactions] == [A, B, A]
        assert result.transactions[2].out_messages == ()
        assert chain.get_contract(A).balance == 1000


class TestSelfDestruct:

    @pytest.mark.asyncio
    async def test_destroyed_account(self, chain):
        chain.set_account(A, code=DestructProgram.code(), balance=1000)

        result = await chain.send_message(internal(ROOT, A, value=50))

        tx = result.transactions[0]
        assert tx.description.destroyed
        assert tx.end_status == AccountStatus.NON_EXISTING
        assert isinstance(result.events[0], AccountDestroyed)
        assert isinstance(result.events[1], MessageSent)
        assert result.events[1].value == 1050
        assert chain.get_contract(A).balance == 0
        assert chain.get_contract(ROOT).balance == 1050


class TestFailures:

    @pytest.mark.asyncio
    async def test_unknown_code(self, chain):
        chain.set_account(A, code=Cell(b"unregistered"), balance=10)
        with pytest.raises(UnknownContractCode):
            await chain.send_message(internal(ROOT, A))

    @pytest.mark.asyncio
    async def test_external_refused_by_program(self, chain):
        chain.set_account(A, code=RelayProgram.code(), balance=10)
        with pytest.raises(ExternalMessageRejected) as excinfo:
            await chain.send_message(external(A))
        assert excinfo.value.exit_code == 0xFFFF
        assert excinfo.value.address == A

    @pytest.mark.asyncio
    async def test_external_to_missing_account(self, chain):
        with pytest.raises(ExternalMessageRejected) as excinfo:
            await chain.send_message(external(A))
        assert excinfo.value.exit_code == EXIT_NO_STATE
        assert chain.get_contract(A).last_lt == 0


class TestGetMethods:

    def test_arguments(self, chain):
        chain.set_account(A, code=SneakyProgram.code())
        result = chain.get_contract(A).get("add", 2, 3)
        assert result.value == 5
        assert result.exit_code == 0

    def test_non_active_account(self, chain):
        with pytest.raises(GetMethodError) as excinfo:
            chain.get_contract(A).get("add", 1, 1)
        assert excinfo.value.exit_code == EXIT_NOT_ACTIVE

    def test_unknown_method(self, chain):
        chain.set_account(A, code=SneakyProgram.code())
        with pytest.raises(GetMethodError) as excinfo:
            chain.get_contract(A).get("missing")
        assert excinfo.value.exit_code == EXIT_UNKNOWN_GET_METHOD

    @pytest.mark.parametrize("method", ["store", "pay"])
    def test_read_only(self, chain, method):
        chain.set_account(A, code=SneakyProgram.code(), data=Cell.of_json({}), balance=10)
        with pytest.raises(GetMethodError) as excinfo:
            chain.get_contract(A).get(method)
        assert excinfo.value.exit_code == EXIT_READ_ONLY
        assert chain.get_contract(A).data.to_json() == {}
        assert chain.get_contract(A).balance == 10

    def test_contract_error(self, chain):
        chain.set_account(A, code=SneakyProgram.code())
        with pytest.raises(GetMethodError) as excinfo:
            chain.get_contract(A).get("fail")
        assert excinfo.value.exit_code == 77


class TestRegistry:

    def test_register_and_resolve(self):
        executor = Executor()
        program = RelayProgram()
        code = executor.register(program)

        assert code == RelayProgram.code()
        assert executor.is_registered(code)
        assert executor.resolve(code) is program

    def test_builtin_programs(self):
        from ledger_sandbox.programs import CounterProgram, TreasuryProgram

        executor = Executor.create()
        assert executor.is_registered(TreasuryProgram.code())
        assert executor.is_registered(CounterProgram.code())

    def test_resolve_unknown(self):
        with pytest.raises(UnknownContractCode):
            Executor().resolve(Cell(b"nothing"))
