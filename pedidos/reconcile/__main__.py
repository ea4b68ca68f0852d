"""
CLI entry point for catalog reconciliation.

Usage:
    python -m pedidos.reconcile --catalog catalogo.xlsx --orders pedidos_*.xlsx \
        --catalog-column codigo --orders-column codigo_articulo
    python -m pedidos.reconcile ... --output-csv faltantes.csv --output-clean out/
"""

import argparse
import logging
import sys
from pathlib import Path

from .config import default_config, load_config
from .errors import DecodeError, PreconditionError
from .report import format_batch_status, format_console, generate_report_filename
from .workflow import WorkflowContext


def _expand_paths(patterns: list[str]) -> list[Path]:
    """Resolve file arguments, expanding globs the shell left alone."""
    paths = []
    for pattern in patterns:
        path = Path(pattern)
        if path.exists():
            paths.append(path)
            continue
        expanded = sorted(Path(".").glob(pattern))
        if not expanded:
            raise FileNotFoundError(f"File not found: {pattern}")
        paths.extend(expanded)
    return paths


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pedidos-reconcile",
        description="Find catalog entries that never appear in the order lines",
    )

    parser.add_argument(
        "--catalog",
        required=True,
        metavar="FILE",
        help="Catalog workbook (XLSX or XLS)",
    )

    parser.add_argument(
        "--orders",
        nargs="+",
        required=True,
        metavar="FILE",
        help="Order-line workbooks; all must share the same header row",
    )

    parser.add_argument(
        "--catalog-column",
        required=True,
        help="Catalog column holding the code to check",
    )

    parser.add_argument(
        "--orders-column",
        required=True,
        help="Order-line column holding the ordered code",
    )

    parser.add_argument(
        "--config",
        default=None,
        metavar="FILE",
        help="Reconcile config file (default: module's reconcile_config.json)",
    )

    parser.add_argument(
        "--output-csv",
        metavar="PATH",
        help="Write the missing-values report here (file or directory)",
    )

    parser.add_argument(
        "--output-clean",
        metavar="PATH",
        help="Write the catalog without missing values here (file or directory)",
    )

    parser.add_argument(
        "--allow-partial",
        action="store_true",
        help="Compare against the files that loaded even if others failed",
    )

    parser.add_argument(
        "--quiet",
        "-q",
        action="store_true",
        help="Suppress console output",
    )

    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Log progress for each file",
    )

    return parser


def _resolve_output(target: str, default_name: str) -> Path:
    path = Path(target)
    if path.is_dir():
        return path / default_name
    return path


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        config = load_config(args.config) if args.config else default_config()
        catalog_path = _expand_paths([args.catalog])[0]
        order_paths = _expand_paths(args.orders)

        ctx = WorkflowContext(config=config)
        if not args.quiet:
            print(f"Loading catalog {catalog_path.name}...")
        ctx = ctx.with_catalog(catalog_path.read_bytes(), catalog_path.name)

        if not args.quiet:
            print(f"Loading {len(order_paths)} order-line file(s)...")
        ctx = ctx.with_orders((p.name, p.read_bytes()) for p in order_paths)

        if not args.quiet or not ctx.orders.valid:
            print(format_batch_status(ctx.orders), file=sys.stdout if ctx.orders.valid else sys.stderr)

        ctx = ctx.with_selection(args.catalog_column, args.orders_column)
        ctx = ctx.reconciled(allow_partial=args.allow_partial)

        if not args.quiet:
            print(format_console(ctx.result))

        if args.output_csv:
            report_path = _resolve_output(args.output_csv, generate_report_filename())
            report_path.write_bytes(ctx.report_csv())
            if not args.quiet:
                print(f"\nReport exported to: {report_path}")

        if args.output_clean:
            content, suggested = ctx.clean_export()
            clean_path = _resolve_output(args.output_clean, suggested)
            clean_path.write_bytes(content)
            if not args.quiet:
                print(f"Clean catalog exported to: {clean_path}")

    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except OSError as e:
        print(f"Error: cannot access {e.filename or 'file'}: {e.strerror or e}", file=sys.stderr)
        return 1
    except DecodeError as e:
        print(f"Error: could not read catalog: {e}", file=sys.stderr)
        return 1
    except PreconditionError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
