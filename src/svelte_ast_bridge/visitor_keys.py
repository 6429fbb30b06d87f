"""
Visitor Key Registry.

Declares, per node type, which fields hold child nodes and in which order a
generic traversal visits them.

The published :data:`KEYS` is the union of the base ESTree schema
(:data:`BASE_KEYS`) with the template node table (:data:`SVELTE_KEYS`): base
types keep their default order, template types extend or override it.
"""

from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Sequence, Tuple

VisitorKeys = Mapping[str, Tuple[str, ...]]

BASE_KEYS: Dict[str, Tuple[str, ...]] = {
  "ArrayExpression": ("elements",),
  "ArrayPattern": ("elements",),
  "ArrowFunctionExpression": ("params", "body"),
  "AssignmentExpression": ("left", "right"),
  "AssignmentPattern": ("left", "right"),
  "AwaitExpression": ("argument",),
  "BinaryExpression": ("left", "right"),
  "BlockStatement": ("body",),
  "BreakStatement": ("label",),
  "CallExpression": ("callee", "arguments"),
  "CatchClause": ("param", "body"),
  "ChainExpression": ("expression",),
  "ClassBody": ("body",),
  "ClassDeclaration": ("id", "superClass", "body"),
  "ClassExpression": ("id", "superClass", "body"),
  "ConditionalExpression": ("test", "consequent", "alternate"),
  "ContinueStatement": ("label",),
  "DebuggerStatement": (),
  "DoWhileStatement": ("body", "test"),
  "EmptyStatement": (),
  "ExportAllDeclaration": ("exported", "source"),
  "ExportDefaultDeclaration": ("declaration",),
  "ExportNamedDeclaration": ("declaration", "specifiers", "source"),
  "ExportSpecifier": ("exported", "local"),
  "ExpressionStatement": ("expression",),
  "ForInStatement": ("left", "right", "body"),
  "ForOfStatement": ("left", "right", "body"),
  "ForStatement": ("init", "test", "update", "body"),
  "FunctionDeclaration": ("id", "params", "body"),
  "FunctionExpression": ("id", "params", "body"),
  "Identifier": (),
  "IfStatement": ("test", "consequent", "alternate"),
  "ImportAttribute": ("key", "value"),
  "ImportDeclaration": ("specifiers", "source"),
  "ImportDefaultSpecifier": ("local",),
  "ImportExpression": ("source",),
  "ImportNamespaceSpecifier": ("local",),
  "ImportSpecifier": ("imported", "local"),
  "LabeledStatement": ("label", "body"),
  "Literal": (),
  "LogicalExpression": ("left", "right"),
  "MemberExpression": ("object", "property"),
  "MetaProperty": ("meta", "property"),
  "MethodDefinition": ("key", "value"),
  "NewExpression": ("callee", "arguments"),
  "ObjectExpression": ("properties",),
  "ObjectPattern": ("properties",),
  "PrivateIdentifier": (),
  "Program": ("body",),
  "Property": ("key", "value"),
  "PropertyDefinition": ("key", "value"),
  "RestElement": ("argument",),
  "ReturnStatement": ("argument",),
  "SequenceExpression": ("expressions",),
  "SpreadElement": ("argument",),
  "StaticBlock": ("body",),
  "Super": (),
  "SwitchCase": ("test", "consequent"),
  "SwitchStatement": ("discriminant", "cases"),
  "TaggedTemplateExpression": ("tag", "quasi"),
  "TemplateElement": (),
  "TemplateLiteral": ("quasis", "expressions"),
  "ThisExpression": (),
  "ThrowStatement": ("argument",),
  "TryStatement": ("block", "handler", "finalizer"),
  "UnaryExpression": ("argument",),
  "UpdateExpression": ("argument",),
  "VariableDeclaration": ("declarations",),
  "VariableDeclarator": ("id", "init"),
  "WhileStatement": ("test", "body"),
  "WithStatement": ("object", "body"),
  "YieldExpression": ("argument",),
}
"""ESTree (ES2022) traversal schema used for embedded code."""

SVELTE_KEYS: Dict[str, Tuple[str, ...]] = {
  "Program": ("body",),
  "SvelteScriptElement": ("name", "startTag", "body", "endTag"),
  "SvelteStyleElement": ("name", "startTag", "children", "endTag"),
  "SvelteElement": ("name", "startTag", "children", "endTag"),
  "SvelteStartTag": ("attributes",),
  "SvelteEndTag": (),
  "SvelteName": (),
  "SvelteMemberExpressionName": ("object", "property"),
  "SvelteLiteral": (),
  "SvelteMustacheTag": ("expression",),
  "SvelteDebugTag": ("identifiers",),
  "SvelteConstTag": ("declaration",),
  "SvelteRenderTag": ("callee", "argument"),
  "SvelteIfBlock": ("expression", "children", "else"),
  "SvelteElseBlock": ("children",),
  "SvelteEachBlock": ("expression", "context", "index", "key", "children", "else"),
  "SvelteAwaitBlock": ("expression", "pending", "then", "catch"),
  "SvelteAwaitPendingBlock": ("children",),
  "SvelteAwaitThenBlock": ("value", "children"),
  "SvelteAwaitCatchBlock": ("error", "children"),
  "SvelteKeyBlock": ("expression", "children"),
  "SvelteSnippetBlock": ("id", "context", "children"),
  "SvelteAttribute": ("key", "value"),
  "SvelteShorthandAttribute": ("key", "value"),
  "SvelteSpreadAttribute": ("argument",),
  "SvelteDirective": ("key", "expression"),
  "SvelteStyleDirective": ("key", "value"),
  "SvelteSpecialDirective": ("key", "expression"),
  "SvelteDirectiveKey": ("name",),
  "SvelteSpecialDirectiveKey": (),
  "SvelteText": (),
  "SvelteHTMLComment": (),
  "SvelteReactiveStatement": ("label", "body"),
}
"""Child-bearing fields of every template node type."""

_IGNORED_KEYS = frozenset(["parent", "leadingComments", "trailingComments"])


def union_with(additional: Mapping[str, Sequence[str]], base: Mapping[str, Sequence[str]] = BASE_KEYS) -> VisitorKeys:
  """
  Merges a key table into a base schema, keyed by node type.

  For a type present in both tables, the base fields come first followed by the
  additional fields the base does not already list.

  Args:
      additional: Extra or overriding entries.
      base: The schema to extend (defaults to :data:`BASE_KEYS`).

  Returns:
      VisitorKeys: A read-only mapping of type -> field tuple.
  """
  merged: Dict[str, Tuple[str, ...]] = {k: tuple(v) for k, v in base.items()}
  for node_type, keys in additional.items():
    existing = list(merged.get(node_type, ()))
    existing.extend(k for k in keys if k not in existing)
    merged[node_type] = tuple(existing)
  return MappingProxyType(merged)


KEYS: VisitorKeys = union_with(SVELTE_KEYS)
"""The published registry consumed by traversal, scope analysis and printers."""


def get_keys(node: Any) -> Tuple[str, ...]:
  """
  Fallback key discovery for node types absent from the registry.

  Args:
      node: A node object.

  Returns:
      Tuple[str, ...]: Every field holding a node or node list, excluding parent
      and attached comment links.
  """
  candidates: Iterable[str] = node.child_keys()
  return tuple(k for k in candidates if k not in _IGNORED_KEYS and not k.startswith("_"))


def keys_for(node: Any, keys: VisitorKeys = KEYS) -> Tuple[str, ...]:
  """
  Resolves the traversal order for one node.

  Args:
      node: A node object exposing ``type``.
      keys: The registry to consult.

  Returns:
      Tuple[str, ...]: Registered keys, or :func:`get_keys` for unknown types.
  """
  registered = keys.get(node.type)
  if registered is not None:
    return registered
  return get_keys(node)


def as_lists(keys: VisitorKeys = KEYS) -> Dict[str, List[str]]:
  """Returns a JSON-friendly copy of the registry."""
  return {k: list(v) for k, v in sorted(keys.items())}
