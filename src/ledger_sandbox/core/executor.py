"""
Transaction Executor

The executor is the state-transition function of a single account: given
the account's current state and one incoming message it produces the new
state, the outbound messages and the transaction's effect metadata. It
never touches storage, the queue or the clock.

Execution phases for one message:
1. Credit - internal value is added to the balance
2. Deploy - a non-active account whose address matches the message's
   state init gets that code and data
3. Compute - the account's program runs; ContractError aborts it and
   rolls back everything except the credit
4. Bounce - aborted or code-less accounts return bounceable value to the
   sender

Programs are looked up by the hash of the account's code cell.
"""

import inspect
from dataclasses import dataclass, replace
from typing import Dict, Iterable, List, Optional

from loguru import logger

from .cells import Address, Cell, contract_address
from .errors import ContractError, ExternalMessageRejected, GetMethodError, UnknownContractCode
from .messages import Message, MessageKind, internal
from .smart_contract import AccountState, GetMethodResult, Verbosity
from .transactions import AccountStatus, TransactionDescription

EXIT_NO_STATE = -1          # Compute skipped: account has no code
EXIT_NOT_ACTIVE = -256      # Get method on an account without code


@dataclass(frozen=True)
class ExecutionOutcome:
    state: AccountState
    out_messages: List[Message]
    description: TransactionDescription


class Executor:
    """
    Runs contract programs for the simulator.

    Programs are registered by code cell; an account whose code has no
    registered program cannot be executed.
    """

    def __init__(self, programs: Optional[Iterable] = None):
        self._programs: Dict[bytes, object] = {}
        for program in programs or ():
            self.register(program)

    @classmethod
    def create(cls, programs: Optional[Iterable] = None) -> 'Executor':
        """Executor with the built-in programs registered."""
        from ..programs.counter import CounterProgram
        from ..programs.treasury import TreasuryProgram

        executor = cls([TreasuryProgram(), CounterProgram()])
        for program in programs or ():
            executor.register(program)
        return executor

    def register(self, program) -> Cell:
        """Register a program instance; returns its code cell."""
        code = program.code()
        self._programs[code.hash()] = program
        return code

    def resolve(self, code: Cell):
        program = self._programs.get(code.hash())
        if program is None:
            raise UnknownContractCode(f"No program registered for code {code.hex_hash()[:16]}...")
        return program

    def is_registered(self, code: Cell) -> bool:
        return code.hash() in self._programs

    async def run_transaction(self, state: AccountState, message: Message, lt: int,
                              config: Cell, verbosity: Verbosity = Verbosity.NONE) -> ExecutionOutcome:
        """
        Apply one message to an account state.

        Raises:
            ExternalMessageRejected: an external-in message was not accepted
            UnknownContractCode: the account's code has no program
            Any exception a program raises other than ContractError
        """
        address = state.address
        is_internal = message.kind == MessageKind.INTERNAL

        # Credit phase
        credit = message.value if is_internal else 0
        credited = replace(state, balance=state.balance + credit)
        if credited.status == AccountStatus.NON_EXISTING and credit > 0:
            credited = replace(credited, status=AccountStatus.UNINIT)

        # Deploy phase
        working = credited
        deployed = False
        if not working.is_active and message.init is not None:
            if contract_address(address.workchain, message.init) == address:
                working = replace(
                    working,
                    status=AccountStatus.ACTIVE,
                    code=message.init.code,
                    data=message.init.data
                )
                deployed = True

        if not working.is_active:
            if not is_internal:
                raise ExternalMessageRejected(address, "account has no code", EXIT_NO_STATE)
            return self._skip_compute(working, message, lt, credit, verbosity)

        # Compute phase
        program = self.resolve(working.code)
        from ..programs.base import ProgramContext
        ctx = ProgramContext(address, working.balance, working.data, config, lt)

        try:
            handler = program.receive_internal if is_internal else program.receive_external
            result = handler(ctx, message)
            if inspect.isawaitable(result):
                await result
        except ContractError as e:
            if not is_internal:
                raise ExternalMessageRejected(address, str(e), e.exit_code) from e
            self._log_program(address, ctx, verbosity)
            return self._abort(credited, message, lt, credit, e.exit_code, verbosity)

        self._log_program(address, ctx, verbosity)

        if ctx.destroyed:
            end_state = replace(
                working, balance=0, status=AccountStatus.NON_EXISTING, code=None, data=None
            )
        else:
            end_state = replace(working, balance=ctx.balance, data=ctx.data)

        description = TransactionDescription(
            compute_success=True,
            exit_code=0,
            aborted=False,
            credit=credit,
            deployed=deployed,
            destroyed=ctx.destroyed
        )
        self._log_transaction(address, lt, message, description, end_state, verbosity)
        return ExecutionOutcome(end_state, list(ctx.out_messages), description)

    def run_get_method(self, state: AccountState, method: str, args: tuple,
                       config: Cell, verbosity: Verbosity = Verbosity.NONE) -> GetMethodResult:
        """Run a get method on a read-only view of the account."""
        if not state.is_active:
            raise GetMethodError(
                state.address, method, EXIT_NOT_ACTIVE,
                f"Trying to run get method {method!r} on non-active account {state.address}"
            )

        program = self.resolve(state.code)
        from ..programs.base import ProgramContext
        ctx = ProgramContext(state.address, state.balance, state.data, config,
                             state.last_lt, read_only=True)
        try:
            value = program.run_get_method(ctx, method, tuple(args))
        except ContractError as e:
            raise GetMethodError(state.address, method, e.exit_code, str(e)) from e

        self._log_program(state.address, ctx, verbosity)
        return GetMethodResult(value=value, exit_code=0, logs=tuple(ctx.logs))

    # Private methods

    def _skip_compute(self, state: AccountState, message: Message, lt: int, credit: int,
                      verbosity: Verbosity) -> ExecutionOutcome:
        """Internal message to an account without code: keep or bounce the value."""
        out_messages = []
        if self._should_bounce(message, credit):
            out_messages.append(self._bounce_message(message, EXIT_NO_STATE))
            state = replace(state, balance=state.balance - credit)
            if state.balance == 0 and state.status == AccountStatus.UNINIT and not state.last_lt:
                state = replace(state, status=AccountStatus.NON_EXISTING)

        description = TransactionDescription(
            compute_success=False,
            exit_code=EXIT_NO_STATE,
            aborted=False,
            credit=credit,
            bounced=bool(out_messages)
        )
        self._log_transaction(state.address, lt, message, description, state, verbosity)
        return ExecutionOutcome(state, out_messages, description)

    def _abort(self, credited: AccountState, message: Message, lt: int, credit: int,
               exit_code: int, verbosity: Verbosity) -> ExecutionOutcome:
        """Roll back to the credited state and bounce if requested."""
        state = credited
        out_messages = []
        if self._should_bounce(message, credit):
            out_messages.append(self._bounce_message(message, exit_code))
            state = replace(state, balance=state.balance - credit)

        description = TransactionDescription(
            compute_success=False,
            exit_code=exit_code,
            aborted=True,
            credit=credit,
            bounced=bool(out_messages)
        )
        self._log_transaction(state.address, lt, message, description, state, verbosity)
        return ExecutionOutcome(state, out_messages, description)

    @staticmethod
    def _should_bounce(message: Message, credit: int) -> bool:
        return (message.kind == MessageKind.INTERNAL and message.bounce
                and not message.bounced and message.src is not None and credit > 0)

    @staticmethod
    def _bounce_message(message: Message, exit_code: int) -> Message:
        body = Cell.of_json({"bounced": True, "exit_code": exit_code}, refs=(message.body,))
        return internal(
            src=message.dest,
            dest=message.src,
            value=message.value,
            body=body,
            bounce=False,
            bounced=True
        )

    @staticmethod
    def _log_program(address: Address, ctx, verbosity: Verbosity) -> None:
        if not verbosity.includes(Verbosity.VM_LOGS_FULL):
            return
        for line in ctx.logs:
            logger.info("[{}] {}", address.short(), line)

    @staticmethod
    def _log_transaction(address: Address, lt: int, message: Message,
                         description: TransactionDescription, state: AccountState,
                         verbosity: Verbosity) -> None:
        if not verbosity.includes(Verbosity.VM_LOGS):
            return
        logger.info(
            "[{}] {} message: success={} exit_code={} bounced={}",
            address.short(), message.kind.value, description.compute_success,
            description.exit_code, description.bounced
        )
        if verbosity.includes(Verbosity.DEBUG):
            logger.debug(
                "[{}] lt={} status={} balance={} state={}",
                address.short(), lt, state.status.value, state.balance, state.state_hash()[:16]
            )
