#!/usr/bin/env python3
"""
NodeScout - proxy node discovery from loosely-structured text

Usage:
    python -m nodescout <command> [options]

Commands:
    scan [FILE|-] [--mode ai|regex|deep]   Extract nodes from a file or stdin
    fetch [--mode ai|regex|deep]           Fetch configured sources and extract nodes
    list [--protocol P] [--country C] [--sort latency|country|protocol] [--desc]
    export [FILE] [--protocol P] [--country C]
                                           Print or write the Base64 subscription
    probe [--all]                          TCP reachability check of stored nodes
    advice                                 AI assessment of the stored nodes
    delete ID                              Delete a node (ID prefix accepted)
    clear                                  Delete all stored nodes
    sources [add URL | remove URL]         Show or edit subscription sources

Options:
    --config FILE    Path to a secrets/env file
    --help, -h       Show this help message
    --version, -v    Show version
"""

import logging
import sys
from typing import List, Optional

from nodescout import __version__
from nodescout.core.config import SCAN_MODES, NodeScoutConfig
from nodescout.core.export import SORT_FIELDS, filter_records, sort_records
from nodescout.core.utils import setup_logging
from nodescout.orchestrator import NodeScoutOrchestrator
from nodescout.ui.console import NodeScoutConsole


class UsageError(Exception):
    """Bad command line."""


def _pop_option(args: List[str], name: str) -> Optional[str]:
    """Remove ``name VALUE`` from args and return VALUE."""
    if name not in args:
        return None
    i = args.index(name)
    if i + 1 >= len(args):
        raise UsageError(f"{name} requires a value")
    value = args[i + 1]
    del args[i:i + 2]
    return value


def _pop_flag(args: List[str], name: str) -> bool:
    if name in args:
        args.remove(name)
        return True
    return False


def _read_input(path: Optional[str]) -> str:
    if path is None or path == "-":
        return sys.stdin.read()
    with open(path, "r", encoding="utf-8", errors="replace") as f:
        return f.read()


def _mode(args: List[str], config: NodeScoutConfig) -> str:
    mode = _pop_option(args, "--mode") or config.get("scan_mode", "ai")
    if mode not in SCAN_MODES:
        raise UsageError(f"--mode must be one of {', '.join(SCAN_MODES)}")
    return mode


def run_command(command: str, args: List[str], orchestrator: NodeScoutOrchestrator, ui: NodeScoutConsole) -> int:
    config = orchestrator.config

    if command == "scan":
        mode = _mode(args, config)
        text = _read_input(args[0] if args else None)
        result = orchestrator.run(text, mode)
        ui.print_nodes(result.found)
        return 0

    if command == "fetch":
        mode = _mode(args, config)
        result = orchestrator.run(None, mode)
        ui.print_nodes(result.found)
        return 0

    if command == "list":
        protocol = _pop_option(args, "--protocol")
        country = _pop_option(args, "--country")
        field = _pop_option(args, "--sort") or "latency"
        descending = _pop_flag(args, "--desc")
        if field not in SORT_FIELDS:
            raise UsageError(f"--sort must be one of {', '.join(SORT_FIELDS)}")
        nodes = orchestrator.repository.load_nodes()
        shown = sort_records(filter_records(nodes, protocol, country), field, descending)
        ui.print_nodes(shown, total=len(nodes))
        return 0

    if command == "export":
        protocol = _pop_option(args, "--protocol")
        country = _pop_option(args, "--country")
        path = args[0] if args else None
        payload = orchestrator.export(path, protocol=protocol, country=country)
        if not payload:
            ui.print_message("No nodes to export.", "yellow")
            return 1
        if path is None:
            sys.stdout.write(payload + "\n")
        return 0

    if command == "probe":
        only_untested = not _pop_flag(args, "--all")
        nodes = orchestrator.probe(only_untested)
        ui.print_nodes(nodes)
        return 0

    if command == "advice":
        ui.print_message(orchestrator.advice())
        return 0

    if command == "delete":
        if not args:
            raise UsageError("delete requires a node ID")
        matches = [n.id for n in orchestrator.repository.load_nodes() if n.id.startswith(args[0])]
        if len(matches) != 1:
            ui.print_message(f"No unique node matches {args[0]!r}", "red")
            return 1
        orchestrator.delete(matches[0])
        return 0

    if command == "clear":
        return 0 if orchestrator.clear() else 1

    if command == "sources":
        repo = orchestrator.repository
        if len(args) == 2 and args[0] == "add":
            if not repo.add_source(args[1]):
                ui.print_message("Source was not added.", "yellow")
        elif len(args) == 2 and args[0] == "remove":
            if not repo.remove_source(args[1]):
                ui.print_message("Source not found.", "yellow")
        elif args:
            raise UsageError("usage: sources [add URL | remove URL]")
        for url in orchestrator.sources().urls:
            ui.print_message(url)
        return 0

    raise UsageError(f"Unknown command: {command}")


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = list(sys.argv[1:] if argv is None else argv)

    if not args or args[0] in ("--help", "-h"):
        print(__doc__)
        return 0
    if args[0] in ("--version", "-v"):
        print(f"NodeScout v{__version__}")
        return 0

    try:
        config_file = _pop_option(args, "--config")
    except UsageError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    config = NodeScoutConfig(config_file)
    errors = config.validate()
    if errors:
        print("Configuration errors:")
        for error in errors:
            print(f"  - {error}")
        return 1

    level = getattr(logging, str(config.get("log_level", "INFO")), logging.INFO)
    setup_logging(level=logging.WARNING if level > logging.DEBUG else level, log_file=config.get("log_file"))

    ui = NodeScoutConsole()
    orchestrator = NodeScoutOrchestrator(config)
    orchestrator.scan_log.subscribe(ui.print_log_entry)

    command, rest = args[0], args[1:]
    try:
        return run_command(command, rest, orchestrator, ui)
    except UsageError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2
    except KeyboardInterrupt:
        print("\nInterrupted by user")
        return 130
    finally:
        orchestrator.close()


if __name__ == "__main__":
    sys.exit(main())
