"""
main.py

Entry point for the qstate register shell.
Parses the register width and optional seed, then launches the interactive CLI.
"""

import argparse

from cli import DEFAULT_QUBITS, interactive_cli


def main(argv=None):
    """
    Launch the simulator CLI.

    Ensures:
         The interactive CLI is started.
    """
    parser = argparse.ArgumentParser(description="Pure-state quantum register shell")
    parser.add_argument("-n", "--qubits", type=int, default=DEFAULT_QUBITS,
                        help="register width (at most 15)")
    parser.add_argument("--seed", type=int, default=None,
                        help="seed for reproducible measurements")
    args = parser.parse_args(argv)

    print("=== Starting qstate Register Simulator CLI ===")
    interactive_cli(args.qubits, seed=args.seed)


if __name__ == '__main__':
    main()
