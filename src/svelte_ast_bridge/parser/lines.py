"""
Line Index.

Maps source offsets to (line, column) pairs. Lines are 1-based, columns are
0-based, as in ESTree locations.
"""

import bisect
from typing import List

from svelte_ast_bridge.ast.nodes import Position


class LinesAndColumns:
  """
  Precomputed line start offsets for one source text.
  """

  def __init__(self, code: str) -> None:
    self._line_starts: List[int] = [0]
    for index, char in enumerate(code):
      if char == "\n":
        self._line_starts.append(index + 1)

  def get_loc_from_index(self, index: int) -> Position:
    """
    Resolves an offset to a position.

    Args:
        index (int): Source offset (may equal the source length).

    Returns:
        Position: The 1-based line and 0-based column.
    """
    line = bisect.bisect_right(self._line_starts, index)
    return Position(line=line, column=index - self._line_starts[line - 1])

  def get_index_from_loc(self, line: int, column: int) -> int:
    """Inverse of :meth:`get_loc_from_index`."""
    return self._line_starts[line - 1] + column
