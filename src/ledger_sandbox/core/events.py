"""
Ledger Events

Events are higher-level facts projected from a transaction's effects. The
default extractor reports account creation and destruction and every value
transfer between accounts; callers can plug in their own extractor when
they care about contract-specific facts.
"""

from dataclasses import dataclass
from typing import Callable, ClassVar, List, Union

from .cells import Address, Cell
from .transactions import AccountStatus, Transaction


@dataclass(frozen=True)
class AccountCreated:
    account: Address

    type: ClassVar[str] = 'account_created'


@dataclass(frozen=True)
class AccountDestroyed:
    account: Address

    type: ClassVar[str] = 'account_destroyed'


@dataclass(frozen=True)
class MessageSent:
    from_: Address
    to: Address
    value: int
    body: Cell
    bounce: bool

    type: ClassVar[str] = 'message_sent'


Event = Union[AccountCreated, AccountDestroyed, MessageSent]
EventExtractor = Callable[[Transaction], List[Event]]


def extract_events(transaction: Transaction) -> List[Event]:
    """
    Derive events from one transaction.

    Order: creation, destruction, then one MessageSent per internal
    outbound message in emission order.
    """
    events: List[Event] = []

    was_active = transaction.old_status == AccountStatus.ACTIVE
    is_active = transaction.end_status == AccountStatus.ACTIVE

    if not was_active and is_active:
        events.append(AccountCreated(account=transaction.address))
    if was_active and not is_active:
        events.append(AccountDestroyed(account=transaction.address))

    for message in transaction.internal_out_messages:
        events.append(MessageSent(
            from_=message.src,
            to=message.dest,
            value=message.value,
            body=message.body,
            bounce=message.bounce
        ))

    return events
