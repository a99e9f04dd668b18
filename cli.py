#!/usr/bin/env python3
import argparse
import sys
from pathlib import Path

from analyze import Analyzer
from exceptions import AnalyzeError
from function_typedefs import load_function_definitions
from instructions import load_program_list, save_vm_state
from render_dot import write_graph
from tzo_text import load_concise_text

VERSION = "1.0.5"
TEXT_SUFFIXES = (".txt", ".tzoct")


def load_input(path: Path) -> list:
    """Load a program from a VM state .json or a concise text .tzoct/.txt file."""
    if path.suffix == ".json":
        return load_program_list(path)
    if path.suffix in TEXT_SUFFIXES:
        return load_concise_text(path)
    raise AnalyzeError(f"Unsupported input type '{path.suffix}' (expected .json, .tzoct or .txt)")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="tzo-analyze", description="Tzo syntax tree analyzer")
    parser.add_argument("--version", action="version", version=VERSION)
    parser.add_argument("--input", required=True, help="Path to Tzo VMState .json file or .tzoct file")
    parser.add_argument("--fdef", nargs="+", default=[], help="Load additional function definition .json file")
    parser.add_argument("--output", help="Save analyzed .json here, or stdout if '-'")
    parser.add_argument("--dot", help="Save syntax tree .dot file here")
    parser.add_argument("--svg", help="Save syntax tree .svg file here")
    parser.add_argument("--plist-dot", help="Save program list .dot file here")
    parser.add_argument("--plist-svg", help="Save program list .svg file here")
    parser.add_argument("--outvm", help="Save VMState .json file here")
    parser.add_argument("-v", "--verbose", action="store_true", help="Print progress to stderr")
    return parser


def write_outputs(args, analyzer, info):
    out = analyzer.get_json()
    if args.output == "-":
        print(out)
    elif args.output is not None:
        Path(args.output).write_text(out, encoding="utf-8")
        info(f"Wrote {args.output}")

    if args.outvm:
        save_vm_state(args.outvm, analyzer.input)
        info(f"Wrote {args.outvm}")

    if args.dot:
        write_graph(analyzer.get_tree_as_dot(), args.dot)
    if args.svg:
        write_graph(analyzer.get_tree_as_dot(), args.svg, "svg")
    if args.plist_dot:
        write_graph(analyzer.get_program_list_as_dot(), args.plist_dot)
    if args.plist_svg:
        write_graph(analyzer.get_program_list_as_dot(), args.plist_svg, "svg")


def run(args) -> int:
    def info(msg):
        if args.verbose:
            print(f"[INFO] {msg}", file=sys.stderr)

    input_path = Path(args.input)
    if not input_path.exists():
        print(f"Error: file '{args.input}' not found", file=sys.stderr)
        return 1

    try:
        typedefs = load_function_definitions(args.fdef)
        if args.fdef:
            info(f"Loaded {len(typedefs)} function definitions from {len(args.fdef)} file(s)")
        instrs = load_input(input_path)
        info(f"Read {len(instrs)} instructions from {input_path}")
        analyzer = Analyzer(instrs, typedefs)
        info(f"Reconstructed {len(analyzer.items)} top-level expressions")
        write_outputs(args, analyzer, info)
    except (AnalyzeError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    return run(args)


if __name__ == "__main__":
    sys.exit(main())
