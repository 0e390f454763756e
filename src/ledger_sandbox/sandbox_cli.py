#!/usr/bin/env python3
"""
Ledger Sandbox CLI

A command-line interface for running scenarios on the ledger sandbox.
Every command builds a fresh in-memory ledger, runs its scenario and
prints the resulting causal chain of transactions.

Usage:
    ledger-sandbox demo                          # Deploy and drive a counter contract
    ledger-sandbox transfer alice bob 1.5        # Move coins between two treasuries
    ledger-sandbox benchmark --messages 1000     # Measure queue throughput
"""

import argparse
import asyncio
import hashlib
import sys
import time
from typing import List, Optional

from .core.blockchain import Blockchain
from .core.cells import Address, from_nano, to_nano
from .core.events import AccountCreated, AccountDestroyed, MessageSent
from .core.results import MutationResult
from .core.smart_contract import Verbosity
from .logs import configure_logging
from .programs.counter import Counter
from .programs.treasury import MAX_MESSAGES, OutgoingMessage


def format_event(event) -> str:
    if isinstance(event, AccountCreated):
        return f"account_created  {event.account.short()}"
    if isinstance(event, AccountDestroyed):
        return f"account_destroyed {event.account.short()}"
    if isinstance(event, MessageSent):
        return (f"message_sent     {event.from_.short()} -> {event.to.short()} "
                f"({from_nano(event.value)} coins)")
    return repr(event)


def print_result(title: str, result) -> None:
    """Print the transactions and events of one drain."""
    print(f"\n{title}")
    print("-" * len(title))
    for tx in result.transactions:
        summary = tx.summary()
        status = "ok" if summary['success'] else f"exit {summary['exit_code']}"
        print(f"  lt={summary['lt']:<10} {summary['account']:<14} {summary['in']:<12} "
              f"{summary['status']:<22} out={summary['out_messages']} [{status}]")
    if result.events:
        print("  events:")
        for event in result.events:
            print(f"    {format_event(event)}")
    if isinstance(result, MutationResult) and result.result is not None:
        print(f"  result: {result.result!r}")


class SandboxCLI:
    """
    Command-line front end: one method per command.
    """

    def __init__(self, verbosity: Verbosity = Verbosity.NONE):
        self.verbosity = verbosity

    def new_blockchain(self) -> Blockchain:
        blockchain = Blockchain.create()
        blockchain.verbosity = self.verbosity
        return blockchain

    async def demo(self) -> None:
        """Deploy a counter from a treasury, increment it, then trigger a bounce."""
        print("Ledger Sandbox Demo")
        print("=" * 40)

        blockchain = self.new_blockchain()
        treasury = blockchain.treasury("demo")
        sender = treasury.get_sender()
        print(f"Treasury: {treasury.address} ({from_nano(treasury.get_balance())} coins)")

        counter = blockchain.open_contract(Counter.create_from_init(counter_id=1))
        print(f"Counter:  {counter.address}")

        deploy = await counter.send_deploy(sender, to_nano("0.05"))
        print_result("Deploy counter", deploy)

        increment = await counter.send_increment(sender, to_nano("0.01"), by=5)
        print_result("Increment by 5", increment)
        print(f"\nCounter value: {counter.get_counter()}")

        bounced = await counter.send_increment(sender, to_nano("0.01"), by=-1)
        print_result("Invalid increment (bounces back)", bounced)

        print(f"\nCounter value: {counter.get_counter()}")
        print(f"Treasury balance: {from_nano(treasury.get_balance())} coins")
        print(f"Logical time: {blockchain.lt}")

    async def transfer(self, from_seed: str, to_seed: str, amount: str) -> None:
        """Send coins from one seed-derived treasury to another."""
        blockchain = self.new_blockchain()
        source = blockchain.treasury(from_seed)
        target = blockchain.treasury(to_seed)

        print(f"Transferring {amount} coins from {from_seed} to {to_seed}")
        result = await source.send(target.address, to_nano(amount), bounce=False)
        print_result("Transfer", result)

        print(f"\n{from_seed}: {from_nano(source.get_balance())} coins")
        print(f"{to_seed}: {from_nano(target.get_balance())} coins")

    async def benchmark(self, messages: int) -> None:
        """Push `messages` transfers through the queue and time the drains."""
        print(f"Queue benchmark: {messages} messages")
        print("=" * 40)

        blockchain = self.new_blockchain()
        treasury = blockchain.treasury("benchmark")
        recipients = [
            Address(0, hashlib.sha256(f"recipient-{i}".encode()).digest())
            for i in range(messages)
        ]

        start = time.perf_counter()
        transactions = 0
        for batch in _batches(recipients, MAX_MESSAGES):
            outgoing = [OutgoingMessage(to=address, value=1, bounce=False) for address in batch]
            result = await treasury.send_messages(outgoing)
            transactions += len(result.transactions)
        elapsed = time.perf_counter() - start

        print(f"Transactions: {transactions:,}")
        print(f"Time: {elapsed:.3f} seconds")
        if elapsed > 0:
            print(f"Throughput: {transactions / elapsed:,.0f} tx/sec")
        print(f"Final lt: {blockchain.lt:,}")


def _batches(items: List, size: int):
    for i in range(0, len(items), size):
        yield items[i:i + size]


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Ledger Sandbox - deterministic message-passing ledger simulator",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  ledger-sandbox demo                        # Counter contract walkthrough
  ledger-sandbox transfer alice bob 1.5      # Send 1.5 coins
  ledger-sandbox benchmark --messages 1000   # Queue throughput
        """
    )
    parser.add_argument('--verbosity', choices=[v.value for v in Verbosity], default='none',
                        help='Execution log detail')
    parser.add_argument('--log-level', default=None,
                        help='Enable sandbox logs at this level (e.g. INFO, DEBUG)')

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    subparsers.add_parser('demo', help='Run the counter demo')

    transfer_parser = subparsers.add_parser('transfer', help='Transfer coins between treasuries')
    transfer_parser.add_argument('from_seed', help='Seed of the sending treasury')
    transfer_parser.add_argument('to_seed', help='Seed of the receiving treasury')
    transfer_parser.add_argument('amount', help='Amount in coins')

    benchmark_parser = subparsers.add_parser('benchmark', help='Run the queue benchmark')
    benchmark_parser.add_argument('--messages', type=int, default=1000,
                                  help='Number of messages to deliver')

    args = parser.parse_args(argv)

    verbosity = Verbosity(args.verbosity)
    if args.log_level or verbosity != Verbosity.NONE:
        configure_logging(args.log_level or 'INFO')

    cli = SandboxCLI(verbosity=verbosity)

    try:
        if args.command == 'demo':
            asyncio.run(cli.demo())

        elif args.command == 'transfer':
            asyncio.run(cli.transfer(args.from_seed, args.to_seed, args.amount))

        elif args.command == 'benchmark':
            asyncio.run(cli.benchmark(args.messages))

        else:
            parser.print_help()

    except KeyboardInterrupt:
        print("\nInterrupted")
        return 130

    except Exception as e:
        print(f"Error: {e}")
        return 1

    return 0


if __name__ == '__main__':
    sys.exit(main())
