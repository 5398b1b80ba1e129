#!/usr/bin/env python3
"""
Sigil - Main CLI Application

Checks that every file's extension agrees with the type given away by its
magic number.
"""
import argparse
import logging
import sys
from pathlib import Path

from sigil.base import VerificationSummary
from sigil.catalogs.json_catalog import load_trie
from sigil.comparators.type_comparators import get_comparator, COMPARATORS
from sigil.config import get_config
from sigil.errors import CatalogError, SigilError
from sigil.orchestrator import Orchestrator

EXIT_OK = 0
EXIT_FAILED_FILES = 1
EXIT_FATAL = 2


def worker_count(value: str) -> int:
    """argparse type for --workers: an integer of at least 1."""
    try:
        count = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid worker count: '{value}'") from None
    if count < 1:
        raise argparse.ArgumentTypeError(f"worker count must be at least 1 (got {count})")
    return count


def format_report(summary: VerificationSummary, use_emojis: bool = False) -> str:
    """
    Format a verification summary as the final console report.

    Args:
        summary: Aggregated results of a run
        use_emojis: Prefix lines with status emojis (interactive terminals)

    Returns:
        Multi-line report string
    """
    incorrect_prefix = "❌ " if use_emojis else ""
    error_prefix = "⚠️ " if use_emojis else ""
    correct_prefix = "✔️ " if use_emojis else ""

    lines = ["", "--- Verification Complete ---"]
    lines.append(f"Total files scanned: {summary.total}")
    lines.append(f"{correct_prefix}Correct: {summary.correct}")
    lines.append(f"{incorrect_prefix}Incorrect: {len(summary.incorrect)}")
    lines.append(f"{error_prefix}Errors: {len(summary.errors)}")

    if summary.incorrect:
        lines.append("")
        lines.append("--- Incorrect Files ---")
        for r in summary.incorrect:
            lines.append(
                f"{incorrect_prefix}{r.path}: Declared as '{r.declared_type}', but is '{r.actual_type}'"
            )

    if summary.errors:
        lines.append("")
        lines.append("--- Error Files ---")
        for r in summary.errors:
            lines.append(f"{error_prefix}{r.path}: Error processing file - {r.error_message}")

    return "\n".join(lines)


def verify_command(args):
    """Handle verify command."""
    config = get_config()
    catalog = Path(args.input_json_file) if args.input_json_file else config.catalog_path

    try:
        trie = load_trie(catalog)
    except CatalogError as e:
        print(f"Error: cannot load signature catalog: {e}")
        return EXIT_FATAL

    print(f"Trie initialized successfully from '{catalog}'.")
    print(f"Max buffer size: {trie.max_buffer_size} bytes.")

    orchestrator = Orchestrator(
        matcher=trie,
        comparator=get_comparator(args.policy) if args.policy else None,
        max_workers=args.workers,
    )

    print("\nStarting verification...")
    recursive = True if args.recursive else None
    try:
        summary = orchestrator.verify_path(Path(args.path), recursive=recursive)
    except OSError as e:
        print(f"Error: {e}")
        return EXIT_FATAL

    print(format_report(summary, use_emojis=sys.stdout.isatty()))

    if args.strict and not summary.all_correct:
        return EXIT_FAILED_FILES
    return EXIT_OK


def identify_command(args):
    """Handle identify command."""
    try:
        orchestrator = Orchestrator(
            catalog_path=Path(args.input_json_file) if args.input_json_file else None
        )
    except CatalogError as e:
        print(f"Error: cannot load signature catalog: {e}")
        return EXIT_FATAL

    status = EXIT_OK
    for name in args.files:
        try:
            file_type = orchestrator.identify(Path(name))
        except (SigilError, OSError) as e:
            print(f"{name}: error - {e}")
            status = EXIT_FAILED_FILES
            continue

        print(f"{name}: {file_type or 'Unknown'}")

    return status


def catalog_command(args):
    """Handle catalog command."""
    config = get_config()
    catalog = Path(args.input_json_file) if args.input_json_file else config.catalog_path

    try:
        trie = load_trie(catalog)
    except CatalogError as e:
        print(f"Error: cannot load signature catalog: {e}")
        return EXIT_FATAL

    print(f"Catalog:          {catalog}")
    print(f"Entries:          {len(trie)}")
    print(f"Distinct types:   {len(trie.types)}")
    print(f"Offsets:          {', '.join(str(o) for o in trie.possible_offsets)}")
    print(f"Max buffer size:  {trie.max_buffer_size} bytes")
    return EXIT_OK


def main(argv=None):
    """Main entry point."""
    parser = argparse.ArgumentParser(
        prog='sigil',
        description="Sigil - compare each file's extension with the type inferred from its magic number"
    )
    parser.add_argument('--version', action='version', version='%(prog)s 1.0')

    subparsers = parser.add_subparsers(dest='command', help='Commands')

    # Verify command
    verify_parser = subparsers.add_parser('verify', help='Verify a file or directory')
    verify_parser.add_argument('path', help="File's or directory's path")
    verify_parser.add_argument('--input-json-file', '-i',
                               help='JSON file with file signatures (default: embedded catalog)')
    verify_parser.add_argument('--recursive', '-r', action='store_true',
                               help='Descend into sub-directories')
    verify_parser.add_argument('--workers', '-w', type=worker_count, default=None,
                               help='Number of worker threads (default: MAX_WORKERS)')
    verify_parser.add_argument('--policy', choices=sorted(COMPARATORS),
                               help='How declared and detected types are compared')
    verify_parser.add_argument('--strict', action='store_true',
                               help='Exit with status 1 if any file is incorrect or errored')

    # Identify command
    identify_parser = subparsers.add_parser('identify', help='Print the detected type of files')
    identify_parser.add_argument('files', nargs='+', help='Files to identify')
    identify_parser.add_argument('--input-json-file', '-i',
                                 help='JSON file with file signatures (default: embedded catalog)')

    # Catalog command
    catalog_parser = subparsers.add_parser('catalog', help='Show signature catalog statistics')
    catalog_parser.add_argument('--input-json-file', '-i',
                                help='JSON file with file signatures (default: embedded catalog)')

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    try:
        config = get_config()
    except ValueError as e:
        print(f"Error: invalid configuration: {e}")
        return EXIT_FATAL

    logging.basicConfig(
        level=getattr(logging, config.log_level, logging.WARNING),
        format='[%(levelname)s] %(name)s: %(message)s',
    )

    # Execute command
    if args.command == 'verify':
        return verify_command(args)
    elif args.command == 'identify':
        return identify_command(args)
    elif args.command == 'catalog':
        return catalog_command(args)

    return 0


if __name__ == '__main__':
    sys.exit(main())
