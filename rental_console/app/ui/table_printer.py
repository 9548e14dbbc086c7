from __future__ import annotations

from typing import Any

from rental_console.app.ui.listing_view import ColumnDef, sanitize_row


def render_table(title: str, rows: list[dict[str, Any]], columns: list[ColumnDef]) -> str:
    lines = [title]
    if not rows:
        lines.append("(no results)")
        return "\n".join(lines)

    keys = [column.key for column in columns]
    cells = [sanitize_row(row, keys) for row in rows]
    widths = [max(len(column.label), *(len(cell[column.key]) for cell in cells)) for column in columns]

    lines.append(" | ".join(column.label.ljust(widths[idx]) for idx, column in enumerate(columns)))
    lines.append("-+-".join("-" * width for width in widths))
    for cell in cells:
        lines.append(" | ".join(cell[key].ljust(widths[idx]) for idx, key in enumerate(keys)))
    return "\n".join(lines)


def print_table(title: str, rows: list[dict[str, Any]], columns: list[ColumnDef]) -> None:
    print(f"\n{render_table(title, rows, columns)}")
