#!/usr/bin/env python3
"""Command-line interface for simulating the demo factory."""

import argparse
import sys
import logging

from demo_factory import build_demo_factory
from factory import Factory, FactoryConfig
from network import stream_graph
from parsing_utils import parse_buffer_setting
from simulation import TickOrder


def parse_buffer_list(text):
    """Parse comma-separated stream.Product:Capacity settings into a list of tuples.

    Precondition:
        text is a string (may be empty, whitespace-only or None)

    Postcondition:
        returns list of (stream_name, product_name, capacity) tuples
        empty/whitespace text returns empty list
        order is preserved from input

    Args:
        text: String like "greenChips.Electronic Circuit:64, ironPlates.Iron Plate:4"

    Returns:
        list of (stream_name, product_name, capacity) tuples

    Raises:
        ValueError: if any item has an invalid format
    """
    if not text or not text.strip():
        return []

    return [parse_buffer_setting(stripped) for item in text.split(",") if (stripped := item.strip())]


def _print_reports(factory: Factory) -> None:
    """Print the rate report of every named stream."""
    for name in factory.named_streams():
        for line in factory.log(name).lines():
            print(line)


def _run_simulation(factory: Factory, ticks: int, steps: int) -> None:
    """Run `steps` tick calls of `ticks` ticks, printing what was produced.

    Precondition:
        ticks >= 0 and steps >= 0

    Postcondition:
        one block of lines is printed per step, each line naming the stream,
        the product, the amount produced and the buffer state
    """
    for step in range(1, steps + 1):
        print(f"=== step {step} (+{ticks} ticks) ===")
        for report in factory.tick(ticks):
            stream = factory.arena[report.index]
            for product, amount in report.produced.items():
                if amount > 0:
                    print(
                        f"{factory.stream_name(report.index)}: produced "
                        f"{factory.product_names[product]} x{amount} ({stream.buffers[product]})"
                    )


def _output_graphviz(graphviz_source: str, output_file: str) -> None:
    """Write graphviz source to a file, or stdout for '-'."""
    if output_file == "-":
        print(graphviz_source)
    else:
        with open(output_file, "w", encoding="utf-8") as f:
            f.write(graphviz_source)
        print(f"Graphviz written to {output_file}", file=sys.stderr)


def _create_argument_parser() -> argparse.ArgumentParser:
    """Create and configure the CLI argument parser.

    Returns:
        ArgumentParser instance ready to parse command-line arguments
    """
    parser = argparse.ArgumentParser(
        description="Balance and simulate the demo circuit factory",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Show how the unbalanced factory performs
  %(prog)s --log

  # Balance the circuit line, then simulate ten 4-tick steps
  %(prog)s --solve greenChips --ticks 4 --steps 10

  # Shrink a buffer and draw the supply graph
  %(prog)s --buffer "ironPlates.Iron Plate:2" --graph factory.dot
        """,
    )

    parser.add_argument(
        "--solve", "-s", action="append", default=[],
        help="Balance the supply chain behind a stream (repeatable)",
    )
    parser.add_argument(
        "--buffer", "-b", default="",
        help='Buffer capacities as "stream.Product:Capacity, ..." (optional)',
    )
    parser.add_argument("--ticks", "-t", type=int, default=0, help="Ticks per simulation step")
    parser.add_argument("--steps", "-n", type=int, default=1, help="Number of simulation steps")
    parser.add_argument(
        "--order",
        choices=[order.value for order in TickOrder],
        default=TickOrder.UPSTREAM_FIRST.value,
        help="Order in which streams are advanced within a step",
    )
    parser.add_argument("--log", "-l", action="store_true", help="Print the rates of every named stream")
    parser.add_argument("--graph", "-g", help="Write the supply graph as graphviz source ('-' for stdout)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Log debug messages")

    return parser


def main(argv=None):
    """Main CLI function.

    Postcondition:
        returns 0 on success, 1 on error

    Args:
        argv: argument list, defaults to sys.argv[1:]

    Returns:
        exit code (0=success, 1=error)
    """
    parser = _create_argument_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO, format='%(message)s')

    try:
        if args.ticks < 0 or args.steps < 0:
            raise ValueError("--ticks and --steps must not be negative")

        factory = build_demo_factory(FactoryConfig(tick_order=TickOrder(args.order)))

        for stream, product, capacity in parse_buffer_list(args.buffer):
            factory.set_buffer(stream, product, capacity)

        for stream in args.solve:
            for name, old_mult, new_mult in factory.solve(stream):
                print(f"Scaled {name} from x{old_mult} to x{new_mult}", file=sys.stderr)

        if args.log:
            _print_reports(factory)

        if args.ticks:
            _run_simulation(factory, args.ticks, args.steps)

        if args.graph:
            _output_graphviz(stream_graph(factory).source, args.graph)

        return 0

    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
