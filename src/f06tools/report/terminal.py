"""Rich terminal output for parsed files and diffs."""

import math

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from f06tools.compare import FlagKind
from f06tools.diff import F06Diff
from f06tools.f06file import F06File

MAX_LISTED_MESSAGES = 20


def _fmt_sci(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    if value == 0.0:
        return "0"
    if math.isinf(value) or abs(value) < 1e-3 or abs(value) > 1e6:
        return f"{value:.4E}"
    return f"{value:.4f}"


def _flag_style(kind: FlagKind) -> str:
    if kind in (FlagKind.NAN, FlagKind.INFINITY):
        return "bold red"
    elif kind == FlagKind.DISJUNCTION:
        return "bold magenta"
    return "bold yellow"


def _line_range(block) -> str:
    if block.line_range is None:
        return ""
    return f"{block.line_range[0]}-{block.line_range[1]}"


def render_file_info(f06: F06File, no_color: bool = False, show_headers: bool = False):
    """Summarise a parsed file: flavour, blocks, messages."""
    console = Console(force_terminal=not no_color, highlight=False)

    # === Header ===
    solver = f06.flavour.solver.value if f06.flavour.solver else "unknown"
    soltype = f06.flavour.soltype.value if f06.flavour.soltype else "unknown"
    header_text = (
        f"Solver: {solver} | Solution: {soltype}\n"
        f"Blocks: {len(f06.blocks)} | Subcases: {len(f06.subcases())}\n"
        f"Warnings: {len(f06.warnings)} | Fatal errors: {len(f06.fatal_errors)}"
    )
    console.print(Panel(header_text, title=f06.filename or "F06 file", border_style="blue"))

    # === Blocks ===
    if f06.blocks:
        block_table = Table(title="Data blocks", border_style="dim")
        block_table.add_column("Subcase", justify="right", style="cyan")
        block_table.add_column("Type")
        block_table.add_column("Rows", justify="right")
        block_table.add_column("Columns", justify="right")
        block_table.add_column("Lines", justify="right")
        for block in sorted(f06.blocks, key=lambda b: b.block_ref):
            block_table.add_row(
                str(block.subcase),
                block.block_type.desc,
                f"{len(block):,}",
                str(len(block.col_indexes)),
                _line_range(block),
            )
        console.print(block_table)
    else:
        console.print("[yellow]No data blocks found.[/yellow]")

    # === Messages ===
    for title, messages, style in (
        ("Fatal errors", f06.fatal_errors, "red"),
        ("Warnings", f06.warnings, "yellow"),
    ):
        if not messages:
            continue
        msg_table = Table(title=title, border_style=style)
        msg_table.add_column("Line", justify="right", style="cyan")
        msg_table.add_column("Text")
        for line_no in sorted(messages)[:MAX_LISTED_MESSAGES]:
            msg_table.add_row(str(line_no), escape(messages[line_no][:100]))
        if len(messages) > MAX_LISTED_MESSAGES:
            msg_table.caption = f"(+{len(messages) - MAX_LISTED_MESSAGES} more)"
        console.print(msg_table)

    # === Potential headers ===
    if show_headers and f06.potential_headers:
        ph_table = Table(title="Unrecognised headers", border_style="dim")
        ph_table.add_column("Line", justify="right", style="cyan")
        ph_table.add_column("Span", justify="right")
        ph_table.add_column("Text")
        for ph in f06.potential_headers:
            ph_table.add_row(str(ph.start), str(ph.span), escape(ph.text))
        console.print(ph_table)
    elif f06.potential_headers:
        console.print(f"[dim]{len(f06.potential_headers)} unrecognised headers (use --headers to list).[/dim]")


def render_diff(diff: F06Diff, print_max_flags: int = 10, no_color: bool = False):
    """Report a diff, listing up to ``print_max_flags`` flags per block.

    Zero prints only the per-block summary; a negative value lists every flag.
    """
    console = Console(force_terminal=not no_color, highlight=False)

    summary = (
        f"Compared: {len(diff.compared)} | Not compared: {len(diff.not_compared)} | "
        f"Flagged values: {diff.total_flags:,}"
    )
    border = "green" if diff.is_clean else "yellow"
    console.print(Panel(summary, title="F06 diff", border_style=border))

    if diff.not_compared:
        nc_table = Table(title="Blocks not compared", border_style="dim")
        nc_table.add_column("Subcase", justify="right", style="cyan")
        nc_table.add_column("Type")
        nc_table.add_column("Reason")
        for ref, reason in sorted(diff.not_compared.items()):
            nc_table.add_row(str(ref.subcase), ref.block_type.desc, str(reason))
        console.print(nc_table)

    if not diff.compared:
        console.print("[yellow]No blocks could be compared.[/yellow]")
        return

    for ref, flags in sorted(diff.compared.items()):
        if not flags:
            console.print(f"  [green]OK[/green] Subcase {ref.subcase}, {ref.block_type.desc.lower()}")
            continue
        rows = {fp.values.row for fp in flags}
        cols = {fp.values.col for fp in flags}
        console.print(
            f"  [bold yellow]{len(flags)} flagged[/bold yellow] Subcase {ref.subcase}, "
            f"{ref.block_type.desc.lower()} [dim]({len(rows)} rows, {len(cols)} columns)[/dim]"
        )
        if print_max_flags == 0:
            continue
        shown = flags if print_max_flags < 0 else flags[:print_max_flags]
        flag_table = Table(border_style="dim")
        flag_table.add_column("Row")
        flag_table.add_column("Column")
        flag_table.add_column("First", justify="right")
        flag_table.add_column("Second", justify="right")
        flag_table.add_column("Reason")
        for fp in shown:
            style = _flag_style(fp.reason.kind)
            flag_table.add_row(
                str(fp.values.row),
                str(fp.values.col),
                _fmt_sci(fp.values.val_a),
                _fmt_sci(fp.values.val_b),
                f"[{style}]{fp.reason}[/{style}]",
            )
        if len(shown) < len(flags):
            flag_table.caption = f"(+{len(flags) - len(shown)} more)"
        console.print(flag_table)
