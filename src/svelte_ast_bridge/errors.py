"""
Parser Errors.

The converter assumes a well-formed foreign AST and never recovers locally:
any violated expectation surfaces as a :class:`ParseError` and aborts the pass.
"""


class ParseError(ValueError):
  """
  Raised when the foreign AST or source text violates a conversion invariant.

  Attributes:
      index (int): Source offset of the failure.
      line_number (int): 1-based line of the failure.
      column (int): 0-based column of the failure.
  """

  def __init__(self, message: str, index: int, line_number: int, column: int) -> None:
    super().__init__(f"{message} ({line_number}:{column})")
    self.index = index
    self.line_number = line_number
    self.column = column
