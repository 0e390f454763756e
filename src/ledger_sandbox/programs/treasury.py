"""
Treasury Wallet

Treasuries are pre-funded wallets for tests. Each one is derived from a
seed string: the seed deterministically yields a secp256k1 key, the key
goes into the wallet's initial data, and the initial data fixes the
address. Opening the treasury for the same seed twice gives the same
wallet.

The wallet accepts external messages signed with its key. A request
carries the current seqno (replay protection) and up to 255 outgoing
internal messages, which the wallet sends from its own balance.
"""

import hashlib
from dataclasses import dataclass
from typing import List, Optional, Union

from ecdsa import BadSignatureError, SECP256k1, SigningKey, VerifyingKey
from ecdsa.errors import MalformedPointError

from ..core.cells import Address, Cell, EMPTY_CELL, StateInit, contract_address, maybe_address, to_nano
from ..core.contract import Contract, mutation, query
from ..core.errors import ContractError
from ..core.messages import Message
from ..core.sender import Sender
from .base import ContractProgram, ProgramContext, get_method

TREASURY_BALANCE = to_nano(1_000_000)
MAX_MESSAGES = 255

EXIT_BAD_SIGNATURE = 33
EXIT_BAD_SEQNO = 34
EXIT_TOO_MANY_MESSAGES = 35
EXIT_MALFORMED = 36


def test_key(seed: str) -> SigningKey:
    """Derive a deterministic secp256k1 key from a seed string."""
    secret = hashlib.sha256(seed.encode()).digest()
    return SigningKey.from_string(secret, curve=SECP256k1, hashfunc=hashlib.sha256)


test_key.__test__ = False   # Not a pytest test despite the name


@dataclass(frozen=True)
class OutgoingMessage:
    """One message a treasury request asks the wallet to send."""
    to: Address
    value: int
    body: Cell = EMPTY_CELL
    bounce: bool = True
    init: Optional[StateInit] = None

    def pack(self) -> Cell:
        header = {"to": str(self.to), "value": self.value, "bounce": self.bounce,
                  "deploy": self.init is not None}
        refs = (self.body,) if self.init is None else (self.body, self.init.code, self.init.data)
        return Cell.of_json(header, refs=refs)

    @classmethod
    def unpack(cls, cell: Cell) -> 'OutgoingMessage':
        header = cell.to_json()
        init = StateInit(code=cell.refs[1], data=cell.refs[2]) if header["deploy"] else None
        return cls(
            to=Address.parse(header["to"]),
            value=int(header["value"]),
            body=cell.refs[0],
            bounce=bool(header["bounce"]),
            init=init
        )


def pack_messages(messages: List[OutgoingMessage]) -> Cell:
    """Pack messages into a linked list of cells: (message, rest)."""
    packed = EMPTY_CELL
    for message in reversed(messages):
        packed = Cell(refs=(message.pack(), packed))
    return packed


def unpack_messages(cell: Cell) -> List[OutgoingMessage]:
    messages = []
    while not cell.is_empty():
        head, cell = cell.refs
        messages.append(OutgoingMessage.unpack(head))
    return messages


def sign_request(key: SigningKey, seqno: int, messages: List[OutgoingMessage]) -> Cell:
    """Build the signed external body for a treasury request."""
    if len(messages) > MAX_MESSAGES:
        raise ValueError(f"Treasury can send at most {MAX_MESSAGES} messages at once")
    payload = Cell.of_json({"seqno": seqno, "count": len(messages)},
                           refs=(pack_messages(messages),))
    signature = key.sign_deterministic(payload.hash(), hashfunc=hashlib.sha256)
    return Cell(data=signature, refs=(payload,))


class TreasuryProgram(ContractProgram):
    """
    Wallet program: verify, bump seqno, send.
    """

    name = 'treasury'

    def receive_external(self, ctx: ProgramContext, message: Message) -> None:
        state = ctx.load()
        try:
            (payload,) = message.body.refs
            request = payload.to_json()
            messages = unpack_messages(payload.refs[0])
            if not isinstance(request, dict):
                raise TypeError(f"request must be an object, got {type(request).__name__}")
        except (ValueError, KeyError, TypeError, IndexError) as e:
            raise ContractError(EXIT_MALFORMED, f"Malformed treasury request: {e}") from e

        verifying_key = VerifyingKey.from_string(
            bytes.fromhex(state["public_key"]), curve=SECP256k1, hashfunc=hashlib.sha256
        )
        try:
            verifying_key.verify(message.body.data, payload.hash(), hashfunc=hashlib.sha256)
        except (BadSignatureError, MalformedPointError):
            raise ContractError(EXIT_BAD_SIGNATURE, "Invalid signature")

        if request.get("seqno") != state["seqno"]:
            raise ContractError(EXIT_BAD_SEQNO, f"Expected seqno {state['seqno']}, got {request.get('seqno')}")
        if len(messages) > MAX_MESSAGES:
            raise ContractError(EXIT_TOO_MANY_MESSAGES, "Too many messages")

        state["seqno"] += 1
        ctx.store(state)
        for outgoing in messages:
            ctx.send(outgoing.to, outgoing.value, outgoing.body, outgoing.bounce, outgoing.init)
        ctx.log(f"seqno={state['seqno']} sent={len(messages)}")

    @get_method
    def seqno(self, ctx: ProgramContext) -> int:
        return ctx.load()["seqno"]

    @get_method("get_public_key")
    def public_key(self, ctx: ProgramContext) -> str:
        return ctx.load()["public_key"]


class TreasurySender(Sender):
    """Sender that routes messages through a treasury wallet."""

    def __init__(self, treasury: 'TreasuryContract', provider):
        self.treasury = treasury
        self.provider = provider
        self.address = treasury.address

    def send(self, to: Union[Address, str], value: int, body: Optional[Cell] = None,
             bounce: bool = True, init: Optional[StateInit] = None) -> None:
        self.treasury.send(self.provider, to, value, body, bounce, init)


class TreasuryContract(Contract):
    """
    Descriptor for a treasury wallet.
    """

    def __init__(self, address: Address, init: StateInit, key: SigningKey):
        super().__init__(address, init)
        self.key = key

    @classmethod
    def create(cls, workchain: int, key: SigningKey) -> 'TreasuryContract':
        public_key = key.verifying_key.to_string().hex()
        init = StateInit(
            code=TreasuryProgram.code(),
            data=Cell.of_json({"public_key": public_key, "seqno": 0})
        )
        return cls(contract_address(workchain, init), init, key)

    @mutation
    def send_messages(self, provider, messages: List[OutgoingMessage]) -> None:
        body = sign_request(self.key, self.get_seqno(provider), list(messages))
        provider.external(body)

    @mutation
    def send(self, provider, to: Union[Address, str], value: int, body: Optional[Cell] = None,
             bounce: bool = True, init: Optional[StateInit] = None) -> None:
        outgoing = OutgoingMessage(
            to=maybe_address(to),
            value=value,
            body=body if body is not None else EMPTY_CELL,
            bounce=bounce,
            init=init
        )
        self.send_messages(provider, [outgoing])

    @query
    def get_sender(self, provider) -> TreasurySender:
        return TreasurySender(self, provider)

    @query
    def get_balance(self, provider) -> int:
        return provider.get_state().balance

    @query
    def get_seqno(self, provider) -> int:
        if not provider.get_state().is_active:
            return 0
        return provider.get("seqno")

    @query
    def get_public_key(self, provider) -> str:
        return self.key.verifying_key.to_string().hex()
