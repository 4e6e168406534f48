"""Map (line, column) positions in SDL text to annotated coordinates.

Lines and columns are 1-based and counted in characters, as the GraphQL
parser reports them. ``byte_offset`` counts the UTF-8 bytes that precede the
position, so ``text.encode()[:byte_offset]`` is exactly the text before it.
"""

from __future__ import annotations

from subgraph_checks.models import Coordinate, SourceLocation


def to_coordinate(source_text: str, line: int, column: int) -> Coordinate:
    if line < 1 or column < 1:
        raise ValueError(f"Positions are 1-based, got line={line} column={column}")

    lines = source_text.split("\n")
    if line > len(lines):
        preceding = source_text
    else:
        # Columns past the end of the line clamp to its end.
        preceding = "\n".join([*lines[: line - 1], lines[line - 1][: column - 1]])
    return Coordinate(line=line, column=column, byte_offset=len(preceding.encode("utf-8")))


def source_location(
    subgraph_name: str | None,
    source_text: str,
    start: tuple[int, int],
    end: tuple[int, int] | None = None,
) -> SourceLocation:
    """Build a location whose coordinates are both computed against *source_text*."""
    start_coordinate = to_coordinate(source_text, *start)
    end_coordinate = to_coordinate(source_text, *end) if end is not None else start_coordinate
    return SourceLocation(subgraph_name=subgraph_name, start=start_coordinate, end=end_coordinate)
