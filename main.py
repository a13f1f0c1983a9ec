#!/usr/bin/env python3
"""
stache - Render logic-less templates and infer the params they need.

Usage:
    stache <file>                       Render the template with empty params
    stache <file> --params=data.json    Render the template with params
    stache <file> --type                Print the inferred params type
    stache <file> --check               Only check the template syntax
    stache <file> --ast                 Print the parsed AST (for debugging)
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from stachetype import ParseFailure, TypeInferenceError, apply_parsed, gen_type, parse
from stachetype.StacheNodes import node_to_dict

VERSION = "0.1.0"


# Colors for terminal output
class Colors:
    CYAN = "\033[96m"
    GREEN = "\033[92m"
    YELLOW = "\033[93m"
    RED = "\033[91m"
    ENDC = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"


def color_enabled():
    """Check if colors should be enabled."""
    return sys.stdout.isatty() and sys.stderr.isatty()


def c(text, color):
    """Colorize text if colors are enabled."""
    if color_enabled():
        return f"{color}{text}{Colors.ENDC}"
    return text


def print_error(msg):
    """Print an error message."""
    print(c("error:", Colors.RED + Colors.BOLD), msg, file=sys.stderr)


def print_success(msg):
    """Print a success message."""
    print(c("✓", Colors.GREEN + Colors.BOLD), msg, file=sys.stderr)


def print_help():
    """Print custom help message with proper alignment."""
    if color_enabled():
        Y = Colors.YELLOW + Colors.BOLD  # Options
        G = Colors.GREEN  # Args
        C = Colors.CYAN + Colors.BOLD  # Headers
        D = Colors.DIM  # Dim
        E = Colors.ENDC  # End
    else:
        Y = G = C = D = E = ""

    print(f"""{C}Usage:{E} stache {G}FILE{E} [{Y}OPTIONS{E}]

{C}Arguments:{E}
  {G}FILE{E}                   Template file

{C}Options:{E}
  {Y}-h{E}, {Y}--help{E}             Show this help message and exit
  {Y}-v{E}, {Y}--version{E}          Show version and exit
  {Y}--params{E}={G}JSON{E}          Render with params read from a JSON file
  {Y}--type{E}                 Print the params type the template needs
  {Y}--check{E}                Only check the template syntax
  {Y}--ast{E}                  Print the parsed AST
  {Y}--no-color{E}             Disable colored output
  {Y}-q{E}, {Y}--quiet{E}            Suppress success messages
  {Y}--verbose{E}              Log debug messages

{C}Examples:{E}
  {D}${E} stache card.mustache {Y}--params{E}=user.json   {D}# Render{E}
  {D}${E} stache card.mustache {Y}--type{E}               {D}# Params type{E}
""")


def parse_args(argv=None):
    """Parse command line arguments."""
    argv = sys.argv[1:] if argv is None else argv
    if "-h" in argv or "--help" in argv:
        print_help()
        sys.exit(0)

    if "-v" in argv or "--version" in argv:
        print(f"stache {VERSION}")
        sys.exit(0)

    parser = argparse.ArgumentParser(prog="stache", add_help=False)
    parser.add_argument("file", metavar="FILE")
    parser.add_argument("--params", metavar="JSON")
    parser.add_argument("--type", action="store_true")
    parser.add_argument("--check", action="store_true")
    parser.add_argument("--ast", action="store_true")
    parser.add_argument("--no-color", action="store_true")
    parser.add_argument("--quiet", "-q", action="store_true")
    parser.add_argument("--verbose", action="store_true")

    return parser.parse_args(argv)


def read_text(file_path: Path) -> str:
    try:
        with open(file_path, "r") as f:
            return f.read()
    except FileNotFoundError:
        print_error(f"file not found: {file_path}")
        sys.exit(1)
    except PermissionError:
        print_error(f"permission denied: {file_path}")
        sys.exit(1)


def load_params(params_file):
    """Load render params from a JSON file; no file means empty params."""
    if params_file is None:
        return {}
    try:
        return json.loads(read_text(Path(params_file)))
    except json.JSONDecodeError as e:
        print_error(f"invalid JSON in {params_file}: {e}")
        sys.exit(1)


def main(argv=None):
    args = parse_args(argv)

    if args.no_color:
        global color_enabled
        color_enabled = lambda: False

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG)

    file_path = Path(args.file)
    template = parse(read_text(file_path))

    if isinstance(template, ParseFailure):
        print_error(f"parse error in {file_path}")
        print(f"  {c('→', Colors.RED)} {template}", file=sys.stderr)
        sys.exit(1)

    if args.ast:
        print(json.dumps(node_to_dict(template), indent=2))
        sys.exit(0)

    if args.check:
        if not args.quiet:
            print_success(f"no errors in {file_path}")
        sys.exit(0)

    if args.type:
        try:
            print(gen_type(template))
        except TypeInferenceError as e:
            print_error(f"cannot infer params type for {file_path}")
            print(f"  {c('→', Colors.RED)} {e}", file=sys.stderr)
            sys.exit(1)
        sys.exit(0)

    sys.stdout.write(apply_parsed(template, load_params(args.params)))


if __name__ == "__main__":
    main()
