#!/usr/bin/env python3
"""
elfcopyflat - Copy loadable segments in an ELF file to a flat binary

Usage:
    elfcopyflat [options] <input> <output>
    elfcopyflat -h | --help
    elfcopyflat --version

Arguments:
    input              Input ELF file
    output             Output flat binary

Options:
    --if FLAGS         Only copy segments with these flags (among "rwx")
    --if-not FLAGS     Only copy segments without these flags (among "rwx")
    --base ADDRESS     Address to start flat binary at
                       (default: lowest address among segments)
    --allow-overlaps   Allow overlapping segments
    -v --verbose       Print more information
    --config PATH      Load options from a JSON file
"""

import sys
import argparse
import logging
from pathlib import Path
from typing import List, Optional

from . import __version__
from .config import Config
from .converter import ConversionResult, plan
from .errors import ElfError
from .formats.elf import ElfFile
from .formats.segments import check_overlaps
from .io.binary_stream import BinaryStream
from .output.flat_binary import check_base, write_flat_binary
from .utils.flags import parse_flags, parse_address
from .utils.logging_utils import configure_logging


def flags_arg(value: str) -> str:
    """argparse type for "rwx" flag strings; keeps the string, checks it parses."""
    try:
        parse_flags(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e))
    return value


def address_arg(value: str) -> int:
    """argparse type for decimal or 0x-prefixed addresses."""
    try:
        return parse_address(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid address: '{value}'")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='elfcopyflat',
        description="elfcopyflat: Copy loadable segments in an ELF file to a flat binary",
        formatter_class=argparse.RawDescriptionHelpFormatter
    )
    parser.add_argument('input', help='Input ELF file')
    parser.add_argument('output', help='Output flat binary')
    parser.add_argument('--if', dest='if_flags', metavar='FLAGS', type=flags_arg,
                        help='Only copy segments with these flags (among "rwx")')
    parser.add_argument('--if-not', dest='if_not_flags', metavar='FLAGS', type=flags_arg,
                        help='Only copy segments without these flags (among "rwx")')
    parser.add_argument('--base', metavar='ADDRESS', type=address_arg,
                        help='Address to start flat binary at (Defaults to lowest address among segments)')
    parser.add_argument('--allow-overlaps', action='store_true', default=None,
                        help='Allow overlapping segments')
    parser.add_argument('-v', '--verbose', action='store_true', default=None,
                        help='Print more information')
    parser.add_argument('--config', type=str, help='Path to a JSON config file')
    parser.add_argument('--version', action='version', version=f'elfcopyflat {__version__}')
    return parser


def load_config(args: argparse.Namespace) -> Config:
    """Load the config file, then apply options given on the command line."""
    config = Config.load(Path(args.config) if args.config else None)
    for name in ('if_flags', 'if_not_flags', 'base', 'allow_overlaps', 'verbose'):
        value = getattr(args, name)
        if value is not None:
            setattr(config, name, value)
    return config


def print_plan(result: ConversionResult) -> None:
    """Print the header summary and the segments that will be copied."""
    print(f"ELF header: {result.header.describe()}", file=sys.stderr)
    print("Segments in file to copy:", file=sys.stderr)
    for phdr in result.segments:
        print(f"  {phdr.describe()}", file=sys.stderr)


def run(input_path: str, output_path: str, config: Config) -> ConversionResult:
    """
    Convert one file.

    The output file is only created once the input has been validated.
    """
    with open(input_path, 'rb') as input_file:
        elf = ElfFile(BinaryStream(input_file))
        result = plan(elf, config)

        if config.verbose:
            print_plan(result)

        for overlap in result.overlaps:
            print(overlap, file=sys.stderr)
        check_overlaps(result.overlaps, config.allow_overlaps)
        check_base(result.segments, result.base)

        if config.verbose:
            print(f"Base address 0x{result.base:x}", file=sys.stderr)

        with open(output_path, 'wb') as output_file:
            result.bytes_copied = write_flat_binary(
                elf.stream, BinaryStream(output_file), result.segments, result.base
            )

    if config.verbose:
        print(f"Copied 0x{result.bytes_copied:x} bytes to {output_path}", file=sys.stderr)
    return result


def main(argv: Optional[List[str]] = None):
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = load_config(args)
    except (ValueError, OSError) as e:
        print(f"ERROR: Invalid config: {e}", file=sys.stderr)
        sys.exit(1)

    configure_logging(logging.DEBUG if config.verbose else logging.WARNING)

    try:
        run(args.input, args.output, config)
    except (ElfError, EOFError, ValueError, OSError) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
