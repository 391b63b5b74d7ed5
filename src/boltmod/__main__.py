"""CLI entry point: run `boltmod rules.bolt` or `python -m boltmod rules.bolt`."""

import logging
import sys
from pathlib import Path
from typing import List, Optional


def main(argv: Optional[List[str]] = None) -> int:
    import argparse
    from .compiler.driver import CompilerDriver
    from .compiler.serialization import serialize_table_sexpr
    from .utils.config import ConflictPolicy, ResolverConfig

    parser = argparse.ArgumentParser(
        prog="boltmod",
        description="Resolve the imports of a rules (.bolt) file and emit the merged symbols as JSON.",
    )
    parser.add_argument("file", type=Path, help="Path to the entry .bolt file")
    parser.add_argument("-o", "--output", type=Path, help="Output path (default: entry file with .json extension)")
    parser.add_argument("--module-root", help="Directory scoped imports resolve against (default: node_modules)")
    parser.add_argument("--timeout", type=float, help="Per-file load timeout in seconds")
    parser.add_argument(
        "--conflicts",
        choices=[p.value for p in ConflictPolicy],
        help="Policy for symbols defined in more than one file (default: last)",
    )
    parser.add_argument("--stdout", action="store_true", help="Print the output instead of writing a file")
    parser.add_argument("--sexpr", action="store_true", help="Print the merged symbols as S-expressions")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    path = args.file
    if not path.exists():
        sys.stderr.write(f"boltmod: error: file not found: {path}\n")
        return 1
    if not path.is_file():
        sys.stderr.write(f"boltmod: error: not a file: {path}\n")
        return 1

    try:
        config = ResolverConfig.from_env()
    except ValueError as e:
        sys.stderr.write(f"boltmod: error: invalid environment setting: {e}\n")
        return 1
    if args.module_root:
        config.module_root = args.module_root
    if args.timeout is not None:
        config.fetch_timeout = args.timeout
    if args.conflicts:
        config.conflict_policy = ConflictPolicy(args.conflicts)

    driver = CompilerDriver(config=config)
    to_stdout = args.stdout or args.sexpr
    try:
        result = driver.compile_file(path, output_path=args.output, write=not to_stdout)
    except (OSError, UnicodeDecodeError) as e:
        sys.stderr.write(f"boltmod: error: could not read file: {e}\n")
        return 1

    if not result.success:
        if result.reporter and result.reporter.has_errors():
            sys.stderr.write(result.reporter.format_all_errors() + "\n")
        else:
            sys.stderr.write("boltmod: compilation failed\n")
        return 1

    if args.sexpr:
        sys.stdout.write(serialize_table_sexpr(result.table) + "\n")
    elif args.stdout:
        sys.stdout.write(result.to_json() + "\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
