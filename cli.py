#!/usr/bin/env python3
"""
compengine command line interface.

Maps compress/decompress requests onto the dispatch surface and reports
byte counts, ratio and elapsed time.

Usage:
    python cli.py [-a <algorithm>] [-c <config.yaml>] <input> [output]
    python cli.py -d [-a <algorithm>] [-c <config.yaml>] <input> [output]
    python cli.py --folder [-a <algorithm>] <folder>

Examples:
    python cli.py -a huffman notes.txt            # -> notes.txt.huff
    python cli.py -d -a huffman notes.txt.huff    # -> notes_DC.txt
    python cli.py -a lzss telemetry.bin           # -> telemetry.bin.lzss
    python cli.py -a dct frame.ppm                # -> frame.ppm.dct
    python cli.py -d -a dct frame.ppm.dct         # -> frame.ppm.dct.pgm
"""

import logging
import sys
import time
from typing import List, Optional

from compengine import __version__, compress, compress_folder, decompress
from compengine.config import load_config
from compengine.engine import Algorithm, Result
from compengine.errors import ErrorCode, UnknownAlgorithmError


def print_version() -> None:
    """Print version information."""
    print(f"compengine {__version__}")


def print_help(prog_name: str) -> None:
    """Print help message."""
    print(f"compengine on-board compression codecs (v{__version__})")
    print("=" * 49)
    print()
    print("Usage:")
    print(f"  {prog_name} [-a <algorithm>] [-c <config.yaml>] <input> [output]")
    print(f"  {prog_name} -d [-a <algorithm>] [-c <config.yaml>] <input> [output]")
    print(f"  {prog_name} --folder [-a <algorithm>] <folder>")
    print()
    print("Options:")
    print("  -a, --algorithm <name>  huffman, lzss or dct (default from config: huffman)")
    print("  -c <file>               YAML configuration file")
    print("  -d                      Decompress (default is compress)")
    print("  --folder                Compress a folder (not implemented)")
    print("  --verbose               Enable debug logging")
    print("  -h, --help              Show this help message")
    print("  -v, --version           Show version information")
    print()
    print("Output (when not given):")
    print("  huffman:  <input>.huff   decompress: <base>_DC.<ext>")
    print("  lzss:     <input>.lzss   decompress: <input> without .lzss (or .orig)")
    print("  dct:      <input>.dct    decompress: <input>.pgm")
    print()
    print("Examples:")
    print(f"  {prog_name} -a huffman notes.txt")
    print(f"  {prog_name} -d -a huffman notes.txt.huff")
    print(f"  {prog_name} -a dct frame.ppm")
    print()


def print_summary(operation: str, algorithm: str, input_path: str, result: Result, elapsed: float) -> None:
    """Print the statistics for a successful run."""
    print(f"Algorithm:   {algorithm}")
    print(f"Input:       {input_path} ({result.bytes_in} bytes)")
    print(f"Output:      {result.output_path} ({result.bytes_out} bytes)")
    if operation == "compress":
        print(f"Ratio:       {result.ratio:.3f}")
    else:
        expansion = result.bytes_out / result.bytes_in if result.bytes_in > 0 else 0
        print(f"Expansion:   {expansion:.2f}x")
    print(f"Time:        {elapsed * 1000:.1f} ms")


def report_failure(operation: str, result: Result) -> int:
    """Print a failed result and return the exit status."""
    try:
        name = ErrorCode(result.error).name
    except ValueError:
        name = "UNKNOWN"
    print(f"Error: {operation} failed with code {result.error} ({name})", file=sys.stderr)
    return 1


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point."""
    args = sys.argv if argv is None else argv
    prog_name = args[0] if args else "cli.py"

    if len(args) < 2:
        print_help(prog_name)
        return 1

    if args[1] in ("-h", "--help"):
        print_help(prog_name)
        return 0

    if args[1] in ("-v", "--version"):
        print_version()
        return 0

    decompress_mode = False
    folder_mode = False
    verbose = False
    algorithm_name = None
    config_path = None
    positional = []

    i = 1
    while i < len(args):
        arg = args[i]
        if arg == "-d":
            decompress_mode = True
        elif arg == "--folder":
            folder_mode = True
        elif arg == "--verbose":
            verbose = True
        elif arg in ("-a", "--algorithm", "-c"):
            if i + 1 >= len(args):
                print(f"Error: {arg} requires a value", file=sys.stderr)
                return 1
            if arg != "-c":
                algorithm_name = args[i + 1]
            else:
                config_path = args[i + 1]
            i += 1
        elif arg.startswith("-") and arg != "-":
            print(f"Error: Unknown option: {arg}", file=sys.stderr)
            return 1
        else:
            positional.append(arg)
        i += 1

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if not 1 <= len(positional) <= 2:
        print("Error: Expected <input> [output]", file=sys.stderr)
        print(f"Usage: {prog_name} [-d] [-a <algorithm>] <input> [output]", file=sys.stderr)
        return 1

    try:
        config = load_config(config_path)
    except (OSError, ValueError) as e:
        print(f"Error: Cannot load config: {config_path} ({e})", file=sys.stderr)
        return 1

    if algorithm_name is None:
        algorithm = config.default_algorithm
    else:
        try:
            algorithm = Algorithm.parse(algorithm_name)
        except UnknownAlgorithmError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1

    input_path = positional[0]
    output_path = positional[1] if len(positional) == 2 else None

    if folder_mode:
        result = compress_folder(algorithm, input_path)
        return report_failure("folder compression", result)

    operation = "decompress" if decompress_mode else "compress"
    run = decompress if decompress_mode else compress

    start = time.perf_counter()
    result = run(algorithm, input_path, output_path, config)
    elapsed = time.perf_counter() - start

    if not result.ok:
        return report_failure(operation, result)

    print_summary(operation, algorithm.name, input_path, result, elapsed)
    return 0


if __name__ == "__main__":
    sys.exit(main())
