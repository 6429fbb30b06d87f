"""
Conversion Context.

State exclusively owned by one conversion pass: source text, line index, the
ordered token and comment streams, the raw ``<script>``/``<style>`` start tags
read at the offsets the foreign AST gives, and the scope-binding phases.
"""

import bisect
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Pattern, Tuple

from svelte_ast_bridge.ast.nodes import Comment, EstreeNode, SourceLocation, Token
from svelte_ast_bridge.errors import ParseError
from svelte_ast_bridge.parser.lexer import CodeLexer
from svelte_ast_bridge.parser.lines import LinesAndColumns
from svelte_ast_bridge.parser.scope_binding import ScopeBinding

ForeignNode = Dict[str, Any]

# Foreign ESTree properties that are positional bookkeeping, not structure.
_ESTREE_SKIP_KEYS = frozenset(["type", "start", "end", "loc", "range", "leadingComments", "trailingComments", "metadata"])


@dataclass
class RawBlock:
  """
  A ``<script>`` or ``<style>`` block located directly in the source text.

  Attributes:
      tag (str): 'script' or 'style'.
      start (int): Offset of the opening '<'.
      end (int): Offset just past the closing tag.
      content_start (int): Offset just past the start tag.
      content_end (int): Offset of the closing tag's '<'.
      attrs (List[ForeignNode]): Start tag attributes in the foreign legacy shape.
  """

  tag: str
  start: int
  end: int
  content_start: int
  content_end: int
  attrs: List[ForeignNode] = field(default_factory=list)


class Context:
  """
  Position, token and scope-binding state of one conversion pass.
  """

  # Quoted attribute values may contain '>' (e.g. generics="T extends A<B>").
  _RE_BLOCK_OPEN: Pattern = re.compile(
    r"<(script|style)((?:\s+[^\s=>/\"']+(?:\s*=\s*(?:\"[^\"]*\"|'[^']*'|[^\s>\"']+))?)*)\s*(/?)>"
  )
  _RE_ATTR: Pattern = re.compile(r"([^\s=/>\"']+)(?:\s*=\s*(?:\"([^\"]*)\"|'([^']*)'|([^\s>\"']+)))?")

  def __init__(self, code: str) -> None:
    """
    Args:
        code (str): The full template source text.
    """
    self.code = code
    self.lines = LinesAndColumns(code)
    self.tokens: List[Token] = []
    self.comments: List[Comment] = []
    self.scope_binding = ScopeBinding()
    self._lexer = CodeLexer(code, self.lines)
    self._token_starts: List[int] = []
    self._comment_starts: List[int] = []

  # --- Locations ---

  def get_loc(self, start: int, end: int) -> SourceLocation:
    return SourceLocation(start=self.lines.get_loc_from_index(start), end=self.lines.get_loc_from_index(end))

  def location(self, start: int, end: int) -> Dict[str, Any]:
    """
    Builds the positional fields of a node.

    Args:
        start (int): Start offset.
        end (int): End offset.

    Returns:
        Dict: ``range`` and ``loc`` keyword arguments for a node constructor.
    """
    return {"range": (start, end), "loc": self.get_loc(start, end)}

  def parse_error(self, message: str, index: int) -> ParseError:
    """Creates a ParseError located at ``index``."""
    pos = self.lines.get_loc_from_index(min(max(index, 0), len(self.code)))
    return ParseError(message, index, pos.line, pos.column)

  # --- Tokens & Comments ---

  def add_token(self, kind: str, start: int, end: int) -> Optional[Token]:
    """
    Inserts a token into the position-ordered stream.

    Adding a token identical to an existing one (same kind and range) returns the
    existing token. Empty spans are ignored.

    Args:
        kind (str): Token type.
        start (int): Start offset.
        end (int): End offset.

    Returns:
        Optional[Token]: The stored token, or None for an empty span.

    Raises:
        ParseError: If the span overlaps a different token.
    """
    if end <= start:
      return None
    idx = bisect.bisect_left(self._token_starts, start)
    if idx < len(self.tokens):
      existing = self.tokens[idx]
      if existing.range == (start, end) and existing.type == kind:
        return existing
      if existing.range[0] < end:
        raise self.parse_error(f"Token {kind} overlaps {existing.type} '{existing.value}'", start)
    if idx > 0 and self.tokens[idx - 1].range[1] > start:
      prev = self.tokens[idx - 1]
      raise self.parse_error(f"Token {kind} overlaps {prev.type} '{prev.value}'", start)
    token = Token(type=kind, value=self.code[start:end], range=(start, end), loc=self.get_loc(start, end))
    self.tokens.insert(idx, token)
    self._token_starts.insert(idx, start)
    return token

  def add_comment(self, kind: str, value: str, start: int, end: int) -> Comment:
    """Inserts a comment into the position-ordered comment list."""
    idx = bisect.bisect_left(self._comment_starts, start)
    if idx < len(self.comments) and self.comments[idx].range == (start, end):
      return self.comments[idx]
    comment = Comment(type=kind, value=value, range=(start, end), loc=self.get_loc(start, end))
    self.comments.insert(idx, comment)
    self._comment_starts.insert(idx, start)
    return comment

  def add_script_tokens(self, start: int, end: int) -> None:
    """
    Lexes a code span and merges its tokens and comments into the streams.

    Args:
        start (int): Start offset of the code.
        end (int): End offset of the code.
    """
    for lex in self._lexer.tokenize(start, end):
      if lex.is_comment:
        self.add_comment(lex.kind.value, lex.value, lex.start, lex.end)
      else:
        self.add_token(lex.kind.value, lex.start, lex.end)

  # --- Embedded code ---

  def convert_estree(self, node: ForeignNode) -> EstreeNode:
    """
    Converts a foreign ESTree dict into an :class:`EstreeNode` tree.

    Args:
        node (ForeignNode): Expression, statement or pattern from the foreign AST.

    Returns:
        EstreeNode: The converted subtree, with locations recomputed from the source.
    """
    start, end = foreign_offsets(node)
    props = {k: self._convert_estree_value(v) for k, v in node.items() if k not in _ESTREE_SKIP_KEYS}
    return EstreeNode(estree_type=node["type"], props=props, **self.location(start, end))

  def _convert_estree_value(self, value: Any) -> Any:
    if isinstance(value, dict):
      if "type" in value and ("start" in value or "range" in value):
        return self.convert_estree(value)
      return dict(value)
    if isinstance(value, list):
      return [self._convert_estree_value(v) for v in value]
    return value

  def identifier(self, name: str, start: int, end: int) -> EstreeNode:
    """Synthesizes an Identifier node over a source span."""
    return EstreeNode(estree_type="Identifier", props={"name": name}, **self.location(start, end))

  # --- Raw blocks ---

  def find_block(self, start: int) -> RawBlock:
    """
    Reads the raw block whose start tag opens at ``start``.

    The foreign node supplies the offset, so only that start tag is parsed;
    markup elsewhere in the file is never scanned.

    Args:
        start (int): Offset of the block's '<'.

    Returns:
        RawBlock: The block, with its start tag attributes.

    Raises:
        ParseError: If no ``<script>`` or ``<style>`` start tag opens at that offset.
    """
    code = self.code
    match = self._RE_BLOCK_OPEN.match(code, start)
    if not match:
      raise self.parse_error("No <script> or <style> block starts here", start)
    tag = match.group(1)
    attrs = self._parse_attrs(match.start(2), match.group(2))
    if match.group(3):
      return RawBlock(tag, start, match.end(), match.end(), match.end(), attrs)
    close = re.compile(rf"</{tag}\s*>").search(code, match.end())
    content_end = close.start() if close else len(code)
    end = close.end() if close else len(code)
    return RawBlock(tag, start, end, match.end(), content_end, attrs)

  def _parse_attrs(self, offset: int, text: str) -> List[ForeignNode]:
    attrs: List[ForeignNode] = []
    for m in self._RE_ATTR.finditer(text):
      name = m.group(1)
      start = offset + m.start()
      end = offset + m.end()
      value: Any = True
      for group in (2, 3, 4):
        if m.group(group) is not None:
          v_start = offset + m.start(group)
          v_end = offset + m.end(group)
          raw = m.group(group)
          value = [{"type": "Text", "start": v_start, "end": v_end, "data": raw, "raw": raw}]
          break
      attrs.append({"type": "Attribute", "name": name, "start": start, "end": end, "value": value})
    return attrs


def foreign_offsets(node: ForeignNode) -> Tuple[int, int]:
  """
  Reads the source span of a foreign node.

  Args:
      node (ForeignNode): Node with ``start``/``end`` or a ``range`` pair.

  Returns:
      Tuple[int, int]: (start, end).
  """
  if "start" in node and node["start"] is not None:
    return node["start"], node["end"]
  start, end = node["range"]
  return start, end
