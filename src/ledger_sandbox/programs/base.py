"""
Contract Program Model

Programs are the executable code behind accounts. A program is a Python
class whose code cell identifies it on the ledger: deploying an account
with that code cell binds the account to the program.

Programs are stateless, like on-chain programs: all persistent state lives
in the account's data cell and is reached through the execution context.
A program can:
- read and replace the account data
- send internal messages (debited from the account balance)
- emit external-out messages as observable output
- abort by raising ContractError, which rolls its changes back
"""

from typing import Any, Callable, Dict, List, Optional, Union

from ..core.cells import Address, Cell, StateInit, maybe_address
from ..core.errors import ContractError
from ..core.messages import Message, external_out, internal

# Exit codes shared by the built-in programs
EXIT_NOT_ACCEPTED = 0xFFFF
EXIT_NOT_ENOUGH_BALANCE = 37
EXIT_UNKNOWN_GET_METHOD = 11
EXIT_READ_ONLY = 12


def get_method(name_or_fn: Union[str, Callable, None] = None):
    """
    Mark a program method as a get method.

    Usable bare (`@get_method`) or with an explicit name
    (`@get_method("seqno")`).
    """
    def decorate(fn: Callable, name: Optional[str] = None) -> Callable:
        fn.__get_method__ = name or fn.__name__
        return fn

    if callable(name_or_fn):
        return decorate(name_or_fn)
    return lambda fn: decorate(fn, name_or_fn)


class ProgramContext:
    """
    Everything a program sees while it runs.

    A read-only context is used for get methods: any attempt to send or
    change state aborts the call.
    """

    def __init__(self, address: Address, balance: int, data: Cell, config: Cell,
                 lt: int, read_only: bool = False):
        self.address = address
        self.balance = balance
        self._data = data
        self.config = config
        self.lt = lt
        self.read_only = read_only
        self.out_messages: List[Message] = []
        self.logs: List[str] = []
        self.destroyed = False

    @property
    def data(self) -> Cell:
        return self._data

    @data.setter
    def data(self, value: Cell) -> None:
        self._check_writable()
        if not isinstance(value, Cell):
            raise TypeError("Account data must be a cell")
        self._data = value

    def load(self) -> Any:
        """Decode JSON account data."""
        return self._data.to_json()

    def store(self, value: Any) -> None:
        """Replace account data with a JSON value."""
        self.data = Cell.of_json(value)

    def send(self, to: Union[Address, str], value: int, body: Optional[Cell] = None,
             bounce: bool = True, init: Optional[StateInit] = None) -> Message:
        """Queue an internal message, paying its value from this account."""
        self._check_writable()
        if value < 0:
            raise ContractError(EXIT_NOT_ENOUGH_BALANCE, "Negative message value")
        if value > self.balance:
            raise ContractError(
                EXIT_NOT_ENOUGH_BALANCE,
                f"Insufficient balance: {self.balance} < {value}"
            )
        message = internal(self.address, maybe_address(to), value, body, bounce, init)
        self.balance -= value
        self.out_messages.append(message)
        return message

    def emit(self, body: Optional[Cell] = None) -> Message:
        """Produce an external-out message (observable output only)."""
        self._check_writable()
        message = external_out(self.address, body)
        self.out_messages.append(message)
        return message

    def self_destruct(self, to: Union[Address, str], body: Optional[Cell] = None) -> Message:
        """Send the whole remaining balance to `to` and delete this account."""
        message = self.send(to, self.balance, body, bounce=False)
        self.destroyed = True
        return message

    def log(self, text: str) -> None:
        """Debug output, shown at full VM log verbosity."""
        self.logs.append(str(text))

    def _check_writable(self) -> None:
        if self.read_only:
            raise ContractError(EXIT_READ_ONLY, "Get methods cannot change state")


class ContractProgram:
    """
    Base class for contract programs.

    Subclasses set `name` (which determines the code cell), override the
    receive hooks and declare get methods with `@get_method`.
    """

    name: str = 'noop'
    get_methods: Dict[str, str] = {}

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        methods = {}
        for klass in reversed(cls.__mro__):
            for attr, value in vars(klass).items():
                method_name = getattr(value, '__get_method__', None)
                if method_name:
                    methods[method_name] = attr
        cls.get_methods = methods

    @classmethod
    def code(cls) -> Cell:
        """Code cell that binds an account to this program."""
        return Cell(data=f"program:{cls.name}".encode())

    def receive_internal(self, ctx: ProgramContext, message: Message) -> None:
        """Handle an internal message. Default: accept the value, do nothing."""

    def receive_external(self, ctx: ProgramContext, message: Message) -> None:
        """Handle an external-in message. Default: refuse it."""
        raise ContractError(EXIT_NOT_ACCEPTED, "External messages not accepted")

    def run_get_method(self, ctx: ProgramContext, method: str, args: tuple) -> Any:
        attr = self.get_methods.get(method)
        if attr is None:
            raise ContractError(EXIT_UNKNOWN_GET_METHOD, f"Unknown get method {method!r}")
        return getattr(self, attr)(ctx, *args)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"
