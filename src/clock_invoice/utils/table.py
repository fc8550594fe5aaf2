"""
Pipe table alignment for plain-text output.

Pads every cell of the table rows to its column width and expands separator
rows ('|-') to '|---+---|'. Lines that are not table rows pass through.
"""


def _is_row(line: str) -> bool:
    return line.lstrip().startswith("|")


def _is_separator(line: str) -> bool:
    return line.lstrip().startswith("|-")


def _split_cells(line: str) -> list[str]:
    body = line.strip()[1:]
    if body.endswith("|"):
        body = body[:-1]
    return [cell.strip() for cell in body.split("|")]


def align_table(lines: list[str]) -> list[str]:
    """Return lines with the table rows aligned."""
    rows = [_split_cells(line) for line in lines if _is_row(line) and not _is_separator(line)]
    if not rows:
        return list(lines)

    column_count = max(len(row) for row in rows)
    widths = [0] * column_count
    for row in rows:
        for i, cell in enumerate(row):
            widths[i] = max(widths[i], len(cell))

    aligned = []
    for line in lines:
        if not _is_row(line):
            aligned.append(line)
        elif _is_separator(line):
            aligned.append("|" + "+".join("-" * (w + 2) for w in widths) + "|")
        else:
            cells = _split_cells(line)
            cells += [""] * (column_count - len(cells))
            aligned.append("| " + " | ".join(cell.ljust(w) for cell, w in zip(cells, widths)) + " |")
    return aligned
