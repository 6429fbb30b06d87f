"""
Unified AST Nodes.

Defines the node types of the unified template tree. The tree mixes two families:

- Template nodes (``Svelte*`` and ``Program``): dataclasses whose child-bearing
  fields are declared explicitly via :func:`child`, in traversal order.
- Embedded code nodes (:class:`EstreeNode`): a generic wrapper around the ESTree
  shaped expressions and statements produced by the foreign compiler.

Field names are snake_case in Python and camelCase in the serialized contract
(``start_tag`` is published as ``startTag``).
"""

import re
from dataclasses import dataclass, field, fields
from functools import lru_cache
from typing import Any, ClassVar, Dict, Iterator, List, Optional, Tuple, Type

_SNAKE_RE = re.compile(r"_([a-z])")


def to_contract_name(attr: str) -> str:
  """
  Converts a Python attribute name into its ESTree contract name.

  Args:
      attr (str): snake_case attribute (e.g. 'start_tag').

  Returns:
      str: camelCase name (e.g. 'startTag').
  """
  return _SNAKE_RE.sub(lambda m: m.group(1).upper(), attr)


@dataclass
class Position:
  """Line (1-based) and column (0-based) of a source offset."""

  line: int
  column: int

  def to_estree(self) -> Dict[str, int]:
    return {"line": self.line, "column": self.column}


@dataclass
class SourceLocation:
  """Start and end positions of a node."""

  start: Position
  end: Position

  def to_estree(self) -> Dict[str, Dict[str, int]]:
    return {"start": self.start.to_estree(), "end": self.end.to_estree()}


@dataclass
class Token:
  """
  A lexical unit of the synthetic token stream.

  Attributes:
      type (str): Token kind (e.g. 'HTMLIdentifier', 'Punctuator').
      value (str): Raw source text of the token.
      range (Tuple[int, int]): Source offsets [start, end).
      loc (SourceLocation): Line/column location.
  """

  type: str
  value: str
  range: Tuple[int, int]
  loc: SourceLocation

  def to_estree(self) -> Dict[str, Any]:
    return {"type": self.type, "value": self.value, "range": list(self.range), "loc": self.loc.to_estree()}


@dataclass
class Comment:
  """A code comment ('Line' or 'Block') found in an embedded code region."""

  type: str
  value: str
  range: Tuple[int, int]
  loc: SourceLocation

  def to_estree(self) -> Dict[str, Any]:
    return {"type": self.type, "value": self.value, "range": list(self.range), "loc": self.loc.to_estree()}


def child(default: Any = None, *, many: bool = False, alias: Optional[str] = None) -> Any:
  """
  Declares a child-bearing dataclass field.

  Args:
      default: Default value for single-node fields.
      many (bool): If True, the field holds a list of nodes.
      alias (Optional[str]): Contract name when it cannot be derived from the
          attribute name (Python keywords such as ``else``).

  Returns:
      The dataclass field definition.
  """
  metadata = {"child": True, "alias": alias}
  if many:
    return field(default_factory=list, metadata=metadata)
  return field(default=default, metadata=metadata)


def _contract_name_of(f: Any) -> str:
  return f.metadata.get("alias") or to_contract_name(f.name)


@dataclass(eq=False)
class Node:
  """
  Base class for every node of the unified tree.

  Equality and hashing are by identity: scopes and parents refer to nodes by
  identity, never by structure.
  """

  node_type: ClassVar[str] = "Node"

  range: Tuple[int, int] = (0, 0)
  loc: Optional[SourceLocation] = field(default=None, repr=False)
  parent: Optional["Node"] = field(default=None, repr=False)

  def __post_init__(self) -> None:
    for value in self.iter_children():
      value.parent = self

  @property
  def type(self) -> str:
    """The ESTree node type tag."""
    return self.node_type

  @classmethod
  def child_keys(cls) -> Tuple[str, ...]:
    """Contract names of the declared child-bearing fields, in order."""
    return declared_child_fields(cls)

  def get(self, key: str, default: Any = None) -> Any:
    """
    Reads a field by its contract (camelCase) name.

    Args:
        key (str): Contract field name.
        default: Returned if the field does not exist.
    """
    attr = _contract_map(type(self)).get(key)
    if attr is None:
      return default
    return getattr(self, attr)

  def iter_children(self) -> Iterator["Node"]:
    """Yields the direct child nodes in declared field order."""
    for key in self.child_keys():
      yield from _iter_nodes(self.get(key))

  def to_estree(self) -> Dict[str, Any]:
    """Serializes the subtree into a JSON-compatible ESTree dict."""
    data: Dict[str, Any] = {"type": self.type}
    for f in fields(self):
      if f.name in ("range", "loc", "parent"):
        continue
      data[_contract_name_of(f)] = to_estree(getattr(self, f.name))
    data["range"] = list(self.range)
    if self.loc is not None:
      data["loc"] = self.loc.to_estree()
    return data


def _iter_nodes(value: Any) -> Iterator[Node]:
  if isinstance(value, Node):
    yield value
  elif isinstance(value, list):
    for item in value:
      if isinstance(item, Node):
        yield item


@lru_cache(maxsize=None)
def declared_child_fields(cls: Type[Node]) -> Tuple[str, ...]:
  """
  Lists the child-bearing fields declared on a node class.

  Args:
      cls: A dataclass node type.

  Returns:
      Tuple[str, ...]: Contract names of fields flagged with :func:`child`.
  """
  return tuple(_contract_name_of(f) for f in fields(cls) if f.metadata.get("child"))


@lru_cache(maxsize=None)
def _contract_map(cls: Type[Node]) -> Dict[str, str]:
  return {_contract_name_of(f): f.name for f in fields(cls)}


def to_estree(value: Any) -> Any:
  """
  Recursively serializes nodes, tokens, comments and containers.

  Args:
      value: Any tree value.

  Returns:
      JSON-compatible data. Parent links are never emitted.
  """
  if hasattr(value, "to_estree"):
    return value.to_estree()
  if isinstance(value, (list, tuple)):
    return [to_estree(v) for v in value]
  if isinstance(value, dict):
    return {k: to_estree(v) for k, v in value.items()}
  return value


@dataclass(eq=False)
class EstreeNode(Node):
  """
  Generic ESTree node (expression, statement, pattern) from an embedded code region.

  The node type is data rather than a class. Properties are stored under their
  contract names and are also reachable as attributes (``node.declarations``).

  Attributes:
      estree_type (str): ESTree type tag (e.g. 'Identifier').
      props (Dict[str, Any]): Remaining ESTree properties.
  """

  estree_type: str = ""
  props: Dict[str, Any] = field(default_factory=dict)

  @property
  def type(self) -> str:
    return self.estree_type

  def child_keys(self) -> Tuple[str, ...]:  # type: ignore[override]
    return tuple(k for k, v in self.props.items() if isinstance(v, Node) or _is_node_list(v))

  def get(self, key: str, default: Any = None) -> Any:
    return self.props.get(key, default)

  def __getattr__(self, name: str) -> Any:
    if name in ("props", "estree_type") or name.startswith("__"):
      raise AttributeError(name)
    try:
      return self.props[name]
    except KeyError:
      raise AttributeError(f"{self.estree_type} has no property '{name}'") from None

  def to_estree(self) -> Dict[str, Any]:
    data: Dict[str, Any] = {"type": self.estree_type}
    data.update({k: to_estree(v) for k, v in self.props.items()})
    data["range"] = list(self.range)
    if self.loc is not None:
      data["loc"] = self.loc.to_estree()
    return data


def _is_node_list(value: Any) -> bool:
  return isinstance(value, list) and any(isinstance(v, Node) for v in value)


# --- Program & top-level elements ---


@dataclass(eq=False)
class Program(Node):
  """
  Unified root. Its range always spans the whole source text.

  ``comments`` and ``tokens`` are shared with the conversion context and keep
  growing while later passes lex embedded code.
  """

  node_type: ClassVar[str] = "Program"

  body: List[Node] = child(many=True)
  source_type: str = "module"
  comments: List[Comment] = field(default_factory=list, repr=False)
  tokens: List[Token] = field(default_factory=list, repr=False)


@dataclass(eq=False)
class SvelteName(Node):
  """Literal tag or directive name."""

  node_type: ClassVar[str] = "SvelteName"

  name: str = ""


@dataclass(eq=False)
class SvelteMemberExpressionName(Node):
  """Dotted component name such as ``Foo.Bar``."""

  node_type: ClassVar[str] = "SvelteMemberExpressionName"

  object: Optional[Node] = child()
  property: Optional[Node] = child()


@dataclass(eq=False)
class SvelteStartTag(Node):
  node_type: ClassVar[str] = "SvelteStartTag"

  attributes: List[Node] = child(many=True)
  self_closing: bool = False


@dataclass(eq=False)
class SvelteEndTag(Node):
  node_type: ClassVar[str] = "SvelteEndTag"


@dataclass(eq=False)
class SvelteScriptElement(Node):
  """
  Embedded code region.

  Attributes:
      kind (str): 'instance' or 'module'.
      body (List[Node]): Statements, filled by the script body pass.
  """

  node_type: ClassVar[str] = "SvelteScriptElement"

  name: Optional[Node] = child()
  start_tag: Optional[SvelteStartTag] = child()
  body: List[Node] = child(many=True)
  end_tag: Optional[SvelteEndTag] = child()
  kind: str = "instance"


@dataclass(eq=False)
class SvelteStyleElement(Node):
  """Embedded style region; holds at most one text child."""

  node_type: ClassVar[str] = "SvelteStyleElement"

  name: Optional[Node] = child()
  start_tag: Optional[SvelteStartTag] = child()
  children: List[Node] = child(many=True)
  end_tag: Optional[SvelteEndTag] = child()


@dataclass(eq=False)
class SvelteElement(Node):
  """
  Markup element.

  Attributes:
      kind (str): 'html', 'component' or 'special' (``svelte:*`` tags).
  """

  node_type: ClassVar[str] = "SvelteElement"

  name: Optional[Node] = child()
  start_tag: Optional[SvelteStartTag] = child()
  children: List[Node] = child(many=True)
  end_tag: Optional[SvelteEndTag] = child()
  kind: str = "html"


# --- Text ---


@dataclass(eq=False)
class SvelteText(Node):
  node_type: ClassVar[str] = "SvelteText"

  value: str = ""


@dataclass(eq=False)
class SvelteLiteral(Node):
  """Static part of an attribute value."""

  node_type: ClassVar[str] = "SvelteLiteral"

  value: str = ""


@dataclass(eq=False)
class SvelteHTMLComment(Node):
  node_type: ClassVar[str] = "SvelteHTMLComment"

  value: str = ""


# --- Mustache tags ---


@dataclass(eq=False)
class SvelteMustacheTag(Node):
  """``{expression}`` (kind 'text') or ``{@html expression}`` (kind 'raw')."""

  node_type: ClassVar[str] = "SvelteMustacheTag"

  expression: Optional[Node] = child()
  kind: str = "text"


@dataclass(eq=False)
class SvelteDebugTag(Node):
  node_type: ClassVar[str] = "SvelteDebugTag"

  identifiers: List[Node] = child(many=True)


@dataclass(eq=False)
class SvelteConstTag(Node):
  """``{@const a = b}``; ``declaration`` is a VariableDeclarator."""

  node_type: ClassVar[str] = "SvelteConstTag"

  declaration: Optional[Node] = child()


@dataclass(eq=False)
class SvelteRenderTag(Node):
  """``{@render callee(argument)}``; ``argument`` is None for an empty call."""

  node_type: ClassVar[str] = "SvelteRenderTag"

  callee: Optional[Node] = child()
  argument: Optional[Node] = child()


# --- Blocks ---


@dataclass(eq=False)
class SvelteIfBlock(Node):
  node_type: ClassVar[str] = "SvelteIfBlock"

  expression: Optional[Node] = child()
  children: List[Node] = child(many=True)
  else_block: Optional["SvelteElseBlock"] = child(alias="else")
  elseif: bool = False


@dataclass(eq=False)
class SvelteElseBlock(Node):
  node_type: ClassVar[str] = "SvelteElseBlock"

  children: List[Node] = child(many=True)
  elseif: bool = False


@dataclass(eq=False)
class SvelteEachBlock(Node):
  node_type: ClassVar[str] = "SvelteEachBlock"

  expression: Optional[Node] = child()
  context: Optional[Node] = child()
  index: Optional[Node] = child()
  key: Optional[Node] = child()
  children: List[Node] = child(many=True)
  else_block: Optional[SvelteElseBlock] = child(alias="else")


@dataclass(eq=False)
class SvelteAwaitPendingBlock(Node):
  node_type: ClassVar[str] = "SvelteAwaitPendingBlock"

  children: List[Node] = child(many=True)


@dataclass(eq=False)
class SvelteAwaitThenBlock(Node):
  """Kind 'block' for ``{:then v}``, 'const' for ``{#await p then v}``."""

  node_type: ClassVar[str] = "SvelteAwaitThenBlock"

  value: Optional[Node] = child()
  children: List[Node] = child(many=True)
  kind: str = "block"


@dataclass(eq=False)
class SvelteAwaitCatchBlock(Node):
  """Kind 'block' for ``{:catch e}``, 'const' for ``{#await p catch e}``."""

  node_type: ClassVar[str] = "SvelteAwaitCatchBlock"

  error: Optional[Node] = child()
  children: List[Node] = child(many=True)
  kind: str = "block"


@dataclass(eq=False)
class SvelteAwaitBlock(Node):
  """
  ``{#await}`` block.

  Attributes:
      kind (str): 'await', 'await-then' or 'await-catch' depending on the opener.
  """

  node_type: ClassVar[str] = "SvelteAwaitBlock"

  expression: Optional[Node] = child()
  pending: Optional[SvelteAwaitPendingBlock] = child()
  then: Optional[SvelteAwaitThenBlock] = child()
  catch: Optional[SvelteAwaitCatchBlock] = child()
  kind: str = "await"


@dataclass(eq=False)
class SvelteKeyBlock(Node):
  node_type: ClassVar[str] = "SvelteKeyBlock"

  expression: Optional[Node] = child()
  children: List[Node] = child(many=True)


@dataclass(eq=False)
class SvelteSnippetBlock(Node):
  node_type: ClassVar[str] = "SvelteSnippetBlock"

  id: Optional[Node] = child()
  context: Optional[Node] = child()
  children: List[Node] = child(many=True)


# --- Attributes & directives ---


@dataclass(eq=False)
class SvelteAttribute(Node):
  """
  ``name="value"`` attribute.

  Attributes:
      boolean (bool): True for valueless attributes (``<input disabled>``).
      value (List[Node]): SvelteLiteral and SvelteMustacheTag parts.
  """

  node_type: ClassVar[str] = "SvelteAttribute"

  key: Optional[SvelteName] = child()
  value: List[Node] = child(many=True)
  boolean: bool = False


@dataclass(eq=False)
class SvelteShorthandAttribute(Node):
  """``{name}``; key and value are distinct Identifier nodes over the same range."""

  node_type: ClassVar[str] = "SvelteShorthandAttribute"

  key: Optional[Node] = child()
  value: Optional[Node] = child()


@dataclass(eq=False)
class SvelteSpreadAttribute(Node):
  node_type: ClassVar[str] = "SvelteSpreadAttribute"

  argument: Optional[Node] = child()


@dataclass(eq=False)
class SvelteDirectiveKey(Node):
  """
  Key of a directive such as ``on:click|once``.

  Attributes:
      name (Node): The directive target name.
      modifiers (List[str]): Pipe-separated modifiers.
  """

  node_type: ClassVar[str] = "SvelteDirectiveKey"

  name: Optional[Node] = child()
  modifiers: List[str] = field(default_factory=list)


@dataclass(eq=False)
class SvelteDirective(Node):
  """
  ``prefix:name`` directive.

  Attributes:
      kind (str): 'Binding', 'EventHandler', 'Class', 'Action', 'Transition',
          'Animation' or 'Let'.
      intro (bool): Transition applies on intro (``in:`` or ``transition:``).
      outro (bool): Transition applies on outro (``out:`` or ``transition:``).
  """

  node_type: ClassVar[str] = "SvelteDirective"

  key: Optional[SvelteDirectiveKey] = child()
  expression: Optional[Node] = child()
  kind: str = "Binding"
  shorthand: bool = False
  intro: bool = False
  outro: bool = False


@dataclass(eq=False)
class SvelteStyleDirective(Node):
  node_type: ClassVar[str] = "SvelteStyleDirective"

  key: Optional[SvelteDirectiveKey] = child()
  value: List[Node] = child(many=True)
  shorthand: bool = False


@dataclass(eq=False)
class SvelteSpecialDirectiveKey(Node):
  node_type: ClassVar[str] = "SvelteSpecialDirectiveKey"


@dataclass(eq=False)
class SvelteSpecialDirective(Node):
  """``this={...}`` of ``<svelte:element>`` and ``<svelte:component>``."""

  node_type: ClassVar[str] = "SvelteSpecialDirective"

  key: Optional[SvelteSpecialDirectiveKey] = child()
  expression: Optional[Node] = child()
  kind: str = "this"


# --- Script statements ---


@dataclass(eq=False)
class SvelteReactiveStatement(Node):
  """Top-level ``$: statement`` of the instance script."""

  node_type: ClassVar[str] = "SvelteReactiveStatement"

  label: Optional[Node] = child()
  body: Optional[Node] = child()


SVELTE_NODE_TYPES: Tuple[Type[Node], ...] = (
  Program,
  SvelteScriptElement,
  SvelteStyleElement,
  SvelteElement,
  SvelteStartTag,
  SvelteEndTag,
  SvelteName,
  SvelteMemberExpressionName,
  SvelteLiteral,
  SvelteMustacheTag,
  SvelteDebugTag,
  SvelteConstTag,
  SvelteRenderTag,
  SvelteIfBlock,
  SvelteElseBlock,
  SvelteEachBlock,
  SvelteAwaitBlock,
  SvelteAwaitPendingBlock,
  SvelteAwaitThenBlock,
  SvelteAwaitCatchBlock,
  SvelteKeyBlock,
  SvelteSnippetBlock,
  SvelteAttribute,
  SvelteShorthandAttribute,
  SvelteSpreadAttribute,
  SvelteDirective,
  SvelteStyleDirective,
  SvelteSpecialDirective,
  SvelteDirectiveKey,
  SvelteSpecialDirectiveKey,
  SvelteText,
  SvelteHTMLComment,
  SvelteReactiveStatement,
)
"""Every template node type the converter can produce."""


def adopt(parent: Node, nodes: List[Node]) -> None:
  """
  Points each node's parent at ``parent``.

  Used by passes that fill a list field after construction (code element bodies).
  """
  for node in nodes:
    node.parent = parent
