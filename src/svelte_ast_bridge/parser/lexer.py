"""
Code Region Lexer.

Provides a Regex-based Lexer (`CodeLexer`) that decomposes a span of embedded
script code into ESTree-style tokens and comments. Offsets are absolute positions
in the full template source, so tokens can be merged into the shared stream.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Generator, List, Optional, Pattern, Tuple

from svelte_ast_bridge.errors import ParseError
from svelte_ast_bridge.parser.lines import LinesAndColumns


class CodeTokenType(str, Enum):
  """ESTree token kinds (values match the published token ``type``)."""

  KEYWORD = "Keyword"
  IDENTIFIER = "Identifier"
  PRIVATE_IDENTIFIER = "PrivateIdentifier"
  PUNCTUATOR = "Punctuator"
  NUMERIC = "Numeric"
  STRING = "String"
  TEMPLATE = "Template"
  REGULAR_EXPRESSION = "RegularExpression"
  BOOLEAN = "Boolean"
  NULL = "Null"
  LINE_COMMENT = "Line"
  BLOCK_COMMENT = "Block"


KEYWORDS = frozenset(
  [
    "await",
    "break",
    "case",
    "catch",
    "class",
    "const",
    "continue",
    "debugger",
    "default",
    "delete",
    "do",
    "else",
    "export",
    "extends",
    "finally",
    "for",
    "function",
    "if",
    "import",
    "in",
    "instanceof",
    "let",
    "new",
    "return",
    "super",
    "switch",
    "this",
    "throw",
    "try",
    "typeof",
    "var",
    "void",
    "while",
    "with",
    "yield",
  ]
)

# Keywords after which a '/' starts a regular expression.
_REGEX_AFTER_KEYWORDS = frozenset(
  ["return", "typeof", "case", "do", "else", "in", "instanceof", "new", "delete", "void", "throw", "yield", "await"]
)
_NO_REGEX_AFTER_PUNCTUATORS = frozenset([")", "]", "}"])

_PUNCTUATORS = [
  ">>>=",
  "...",
  "===",
  "!==",
  "**=",
  "<<=",
  ">>=",
  ">>>",
  "&&=",
  "||=",
  "??=",
  "=>",
  "==",
  "!=",
  "<=",
  ">=",
  "&&",
  "||",
  "??",
  "?.",
  "++",
  "--",
  "+=",
  "-=",
  "*=",
  "/=",
  "%=",
  "&=",
  "|=",
  "^=",
  "<<",
  ">>",
  "**",
]


@dataclass
class LexToken:
  """
  Represents a lexical unit of embedded code.

  Attributes:
      kind (CodeTokenType): The type of token.
      value (str): Raw text. For comments, the text without delimiters.
      start (int): Absolute start offset.
      end (int): Absolute end offset.
  """

  kind: CodeTokenType
  value: str
  start: int
  end: int

  @property
  def is_comment(self) -> bool:
    return self.kind in (CodeTokenType.LINE_COMMENT, CodeTokenType.BLOCK_COMMENT)


class CodeLexer:
  """
  Regex-based Lexer for embedded script code.
  """

  # Compiled Regex Patterns (Order matters for priority)
  PATTERNS: List[Tuple[CodeTokenType, str]] = [
    (CodeTokenType.LINE_COMMENT, r"//[^\n\r\u2028\u2029]*"),
    (CodeTokenType.BLOCK_COMMENT, r"/\*.*?\*/"),
    (CodeTokenType.STRING, r"\"(?:[^\"\\\n]|\\.)*\"|'(?:[^'\\\n]|\\.)*'"),
    (
      CodeTokenType.NUMERIC,
      r"0[xX][0-9a-fA-F_]+n?|0[oO][0-7_]+n?|0[bB][01_]+n?|(?:\d[\d_]*(?:\.[\d_]*)?|\.\d[\d_]*)(?:[eE][+-]?\d+)?n?",
    ),
    (CodeTokenType.PRIVATE_IDENTIFIER, r"#[A-Za-z_$\u0080-\uffff][\w$\u0080-\uffff]*"),
    (CodeTokenType.IDENTIFIER, r"[A-Za-z_$\u0080-\uffff][\w$\u0080-\uffff]*"),
  ]

  _RE_WS: Pattern = re.compile(r"\s+")
  _RE_REGEX: Pattern = re.compile(r"/(?:\\.|\[(?:\\.|[^\]\\\n])*\]|[^/\\\n\[])+/[a-z]*")
  _RE_PUNCT: Pattern = re.compile("|".join(re.escape(p) for p in _PUNCTUATORS) + r"|[{}()\[\];,<>+\-*/%&|^!~?:=.@]")

  def __init__(self, code: str, lines: Optional[LinesAndColumns] = None) -> None:
    """
    Initializes the lexer over the full template source.

    Args:
        code (str): The complete source text.
        lines (Optional[LinesAndColumns]): Line index used for error locations.
    """
    self.code = code
    self.lines = lines or LinesAndColumns(code)
    self.regex_pairs = [(kind, re.compile(pattern, re.S)) for kind, pattern in self.PATTERNS]

  def tokenize(self, start: int = 0, end: Optional[int] = None) -> Generator[LexToken, None, None]:
    """
    Tokenizes ``code[start:end]``.

    Args:
        start (int): Absolute offset to start at.
        end (Optional[int]): Absolute offset to stop at (defaults to end of source).

    Yields:
        LexToken: Tokens and comments in source order.

    Raises:
        ParseError: If an unrecognized character sequence is encountered.
    """
    text = self.code
    limit = len(text) if end is None else end
    pos = start
    prev: Optional[LexToken] = None
    # Each entry is either "{" (a plain brace) or "${" (a template substitution).
    braces: List[str] = []

    while pos < limit:
      match_ws = self._RE_WS.match(text, pos, limit)
      if match_ws:
        pos = match_ws.end()
        continue

      char = text[pos]

      if char == "`" or (char == "}" and braces and braces[-1] == "${"):
        if char == "}":
          braces.pop()
        token = self._read_template(pos, limit)
        if token.value.endswith("${"):
          braces.append("${")
        yield token
        prev = token
        pos = token.end
        continue

      token = self._match_patterns(pos, limit)
      if token is None and char == "/" and self._allows_regex(prev):
        match_re = self._RE_REGEX.match(text, pos, limit)
        if match_re:
          token = LexToken(CodeTokenType.REGULAR_EXPRESSION, match_re.group(0), pos, match_re.end())
      if token is None:
        match_p = self._RE_PUNCT.match(text, pos, limit)
        if match_p:
          value = match_p.group(0)
          token = LexToken(CodeTokenType.PUNCTUATOR, value, pos, match_p.end())
          if value == "{":
            braces.append("{")
          elif value == "}" and braces:
            braces.pop()

      if token is None:
        snippet = text[pos : min(pos + 10, limit)]
        loc = self.lines.get_loc_from_index(pos)
        raise ParseError(f"Illegal character in code region: '{snippet}...'", pos, loc.line, loc.column)

      yield token
      if not token.is_comment:
        prev = token
      pos = token.end

  def _match_patterns(self, pos: int, limit: int) -> Optional[LexToken]:
    for kind, regex in self.regex_pairs:
      match = regex.match(self.code, pos, limit)
      if not match:
        continue
      val = match.group(0)
      if kind == CodeTokenType.LINE_COMMENT:
        return LexToken(kind, val[2:], pos, match.end())
      if kind == CodeTokenType.BLOCK_COMMENT:
        return LexToken(kind, val[2:-2], pos, match.end())
      if kind == CodeTokenType.IDENTIFIER:
        kind = self._classify_word(val)
      return LexToken(kind, val, pos, match.end())
    return None

  @staticmethod
  def _classify_word(word: str) -> CodeTokenType:
    if word in ("true", "false"):
      return CodeTokenType.BOOLEAN
    if word == "null":
      return CodeTokenType.NULL
    if word in KEYWORDS:
      return CodeTokenType.KEYWORD
    return CodeTokenType.IDENTIFIER

  @staticmethod
  def _allows_regex(prev: Optional[LexToken]) -> bool:
    """Decides whether a '/' may open a regular expression literal."""
    if prev is None:
      return True
    if prev.kind == CodeTokenType.PUNCTUATOR:
      return prev.value not in _NO_REGEX_AFTER_PUNCTUATORS
    if prev.kind == CodeTokenType.KEYWORD:
      return prev.value in _REGEX_AFTER_KEYWORDS
    return False

  def _read_template(self, pos: int, limit: int) -> LexToken:
    """Reads a template chunk starting at '`' or at the '}' closing a substitution."""
    text = self.code
    i = pos + 1
    while i < limit:
      char = text[i]
      if char == "\\":
        i += 2
        continue
      if char == "`":
        return LexToken(CodeTokenType.TEMPLATE, text[pos : i + 1], pos, i + 1)
      if char == "$" and i + 1 < limit and text[i + 1] == "{":
        return LexToken(CodeTokenType.TEMPLATE, text[pos : i + 2], pos, i + 2)
      i += 1
    loc = self.lines.get_loc_from_index(pos)
    raise ParseError("Unterminated template literal", pos, loc.line, loc.column)
