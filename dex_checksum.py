#!/usr/bin/env python3
"""
dex_checksum.py

CLI for inspecting and repairing the Adler-32 checksum in a DEX header.

Usage:
  python dex_checksum.py current-checksum [in.dex]
  python dex_checksum.py expect-checksum  [in.dex]
  python dex_checksum.py correct-checksum [in.dex] [out.dex]

When in.dex is omitted or '-', the input path is read from stdin.
When out.dex is omitted, in.dex is overwritten.

Exit codes:
  0 = success (also when the checksum was already correct)
  1 = runtime error (IO, not a DEX file, file too short)
  2 = incorrect usage (arg parsing)
"""
import os
import sys
import argparse
from typing import List, Optional, TextIO

from byte_utils import VERSION_POLICIES, VERSION_POLICY_ANY, fmt_hex32
from header_utils import DexHeader, header_warnings
from checksum import current_checksum, expected_checksum, correct
from reader import resolve_input_path, read_dex
from writer import write_dex


def _print_warnings(header: DexHeader) -> None:
    for warning in header_warnings(header):
        print("Warning:", warning, file=sys.stderr)


def current_checksum_cli(in_dex: str, version_policy: str = VERSION_POLICY_ANY) -> None:
    """Print the checksum stored in the header."""
    _, header = read_dex(in_dex, version_policy=version_policy)
    _print_warnings(header)
    print(fmt_hex32(current_checksum(header)))


def expect_checksum_cli(in_dex: str, version_policy: str = VERSION_POLICY_ANY) -> None:
    """Print the checksum the header should hold for the current contents."""
    buf, header = read_dex(in_dex, version_policy=version_policy)
    _print_warnings(header)
    print(fmt_hex32(expected_checksum(header, buf)))


def correct_checksum_cli(in_dex: str, out_dex: Optional[str] = None,
                         version_policy: str = VERSION_POLICY_ANY) -> bool:
    """
    Fix the header checksum of in_dex and write the whole file to out_dex.
    Without out_dex, in_dex is rewritten, and only if something changed.

    Returns True if a correction was applied.
    """
    buf, header = read_dex(in_dex, version_policy=version_policy)
    _print_warnings(header)

    before = current_checksum(header)
    buf, applied = correct(header, buf)

    in_place = out_dex is None or os.path.realpath(out_dex) == os.path.realpath(in_dex)
    target = in_dex if out_dex is None else out_dex
    if applied or not in_place:
        write_dex(target, buf)

    if applied:
        after = current_checksum(DexHeader(buf))
        print(f"Corrected checksum {fmt_hex32(before)} -> {fmt_hex32(after)}, wrote {target}")
    elif in_place:
        print(f"Checksum already correct ({fmt_hex32(before)}), nothing to do.")
    else:
        print(f"Checksum already correct ({fmt_hex32(before)}), copied to {target}")
    return applied


def main(argv: Optional[List[str]] = None, stdin: Optional[TextIO] = None) -> int:
    if argv is None:
        argv = sys.argv[1:]

    parser = argparse.ArgumentParser(prog='dex-checksum-tools',
                                     description='Show, verify and correct the checksum of DEX files')
    parser.add_argument('--version-policy', choices=VERSION_POLICIES, default=VERSION_POLICY_ANY,
                        help="How strictly to check the version bytes of the magic (default: any)")
    parser.add_argument('--debug', action='store_true', help=argparse.SUPPRESS)
    sub = parser.add_subparsers(dest='cmd', required=True)

    input_help = "Input DEX file, or '-' to read the path from stdin (default: stdin)"

    p1 = sub.add_parser('current-checksum', help='Print the checksum stored in the DEX header')
    p1.add_argument('in_dex', nargs='?', help=input_help)

    p2 = sub.add_parser('expect-checksum', help='Print the checksum expected for the DEX contents')
    p2.add_argument('in_dex', nargs='?', help=input_help)

    p3 = sub.add_parser('correct-checksum', help='Correct the DEX header checksum if it does not match')
    p3.add_argument('in_dex', nargs='?', help=input_help)
    p3.add_argument('out_dex', nargs='?', help='Output DEX file (default: overwrite the input)')

    try:
        args = parser.parse_args(argv)
    except SystemExit as e:
        return 0 if e.code == 0 else 2

    if args.debug:
        print(args, file=sys.stderr)

    try:
        in_dex = resolve_input_path(args.in_dex, stdin)
        if args.cmd == 'current-checksum':
            current_checksum_cli(in_dex, args.version_policy)
        elif args.cmd == 'expect-checksum':
            expect_checksum_cli(in_dex, args.version_policy)
        elif args.cmd == 'correct-checksum':
            correct_checksum_cli(in_dex, args.out_dex, args.version_policy)
        else:
            print("Unknown command", file=sys.stderr)
            return 2
        return 0
    except (ValueError, RuntimeError) as e:
        print("Error:", e, file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())
