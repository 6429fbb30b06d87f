"""
Foreign AST Compatibility Accessors.

The template compiler emits two incompatible schema versions:

- **legacy**: ``{"html": Fragment(children), "css", "instance", "module"}``, with
  blocks holding ``children``/``else`` and ``<svelte:options>`` as an ``Options``
  child of the fragment.
- **modern**: ``{"type": "Root", "fragment": Fragment(nodes), "options", ...}``,
  with blocks holding ``Fragment`` objects (``consequent``, ``body``, ...).

The accessors below return uniform values for both, so converters never branch
on the schema version themselves.
"""

from typing import Any, Dict, List, Optional

ForeignNode = Dict[str, Any]

LEGACY = "legacy"
MODERN = "modern"

_SPECIAL_TYPES = frozenset(
  [
    # modern
    "SvelteBody",
    "SvelteBoundary",
    "SvelteComponent",
    "SvelteDocument",
    "SvelteElement",
    "SvelteFragment",
    "SvelteHead",
    "SvelteOptions",
    "SvelteSelf",
    "SvelteWindow",
    # legacy
    "Body",
    "Document",
    "Head",
    "Options",
    "Window",
  ]
)
_COMPONENT_TYPES = frozenset(["Component", "InlineComponent"])
_HTML_TYPES = frozenset(["RegularElement", "Element", "SlotElement", "Slot", "TitleElement", "Title"])

ELEMENT_TYPES = _SPECIAL_TYPES | _COMPONENT_TYPES | _HTML_TYPES


def detect_schema(root: ForeignNode) -> Optional[str]:
  """
  Identifies the schema version of a foreign root.

  Args:
      root (ForeignNode): The foreign root node.

  Returns:
      Optional[str]: 'modern', 'legacy', or None when unrecognized.
  """
  if root.get("type") == "Root" or "fragment" in root:
    return MODERN
  if "html" in root:
    return LEGACY
  return None


# --- Root accessors ---


def get_fragment_from_root(root: ForeignNode) -> Optional[ForeignNode]:
  """Returns the markup fragment of either schema version."""
  fragment = root.get("fragment")
  if fragment is None:
    fragment = root.get("html")
  return fragment


def get_children(fragment: Optional[ForeignNode]) -> List[ForeignNode]:
  """Returns the child list of a fragment (``nodes`` or ``children``)."""
  if not fragment:
    return []
  nodes = fragment.get("nodes")
  if nodes is None:
    nodes = fragment.get("children")
  return list(nodes or [])


def get_options_from_root(root: ForeignNode) -> Optional[ForeignNode]:
  """
  Returns the configuration pseudo-node, normalized as a special element.

  Only the modern schema stores ``<svelte:options>`` outside the fragment; the
  legacy schema already lists it as an ordinary ``Options`` child.
  """
  options = root.get("options")
  if not options or options.get("start") is None:
    return None
  return {
    "type": "SvelteOptions",
    "name": "svelte:options",
    "start": options["start"],
    "end": options["end"],
    "attributes": list(options.get("attributes") or []),
    "fragment": {"type": "Fragment", "nodes": []},
  }


def get_instance_from_root(root: ForeignNode) -> Optional[ForeignNode]:
  return root.get("instance") or None


def get_module_from_root(root: ForeignNode) -> Optional[ForeignNode]:
  return root.get("module") or None


def get_style_from_root(root: ForeignNode) -> Optional[ForeignNode]:
  return root.get("css") or None


# --- Element accessors ---


def get_element_kind(node: ForeignNode) -> str:
  """
  Classifies a foreign element.

  Returns:
      str: 'special' for ``svelte:*`` tags, 'component' for components, else 'html'.
  """
  node_type = node["type"]
  name = node.get("name", "")
  if node_type in _SPECIAL_TYPES or name.startswith("svelte:"):
    return "special"
  if node_type in _COMPONENT_TYPES:
    return "component"
  return "html"


def get_element_children(node: ForeignNode) -> List[ForeignNode]:
  """Children of an element (``fragment.nodes`` or ``children``)."""
  if "fragment" in node:
    return get_children(node["fragment"])
  return list(node.get("children") or [])


def get_special_this_expression(node: ForeignNode) -> Optional[ForeignNode]:
  """
  Expression of the ``this`` attribute of ``<svelte:element>``/``<svelte:component>``.

  Both schemas move it out of the attribute list: ``tag`` for elements, and
  ``expression`` for components.
  """
  name = node.get("name")
  if name == "svelte:element":
    tag = node.get("tag")
    return tag if isinstance(tag, dict) else None
  if name == "svelte:component":
    return node.get("expression")
  return None


# --- Block accessors ---


def get_test_from_if(node: ForeignNode) -> ForeignNode:
  return node.get("test") or node["expression"]


def get_consequent_from_if(node: ForeignNode) -> List[ForeignNode]:
  if "consequent" in node:
    return get_children(node["consequent"])
  return list(node.get("children") or [])


def get_alternate_from_if(node: ForeignNode) -> Optional[List[ForeignNode]]:
  """
  Children of the ``{:else}`` branch, or None when there is no else branch.
  """
  if "alternate" in node or "consequent" in node:
    alternate = node.get("alternate")
    return get_children(alternate) if alternate else None
  else_block = node.get("else")
  return list(else_block.get("children") or []) if else_block else None


def get_body_from_each(node: ForeignNode) -> List[ForeignNode]:
  if "body" in node:
    return get_children(node["body"])
  return list(node.get("children") or [])


def get_fallback_from_each(node: ForeignNode) -> Optional[List[ForeignNode]]:
  if "fallback" in node or "body" in node:
    fallback = node.get("fallback")
    return get_children(fallback) if fallback else None
  else_block = node.get("else")
  return list(else_block.get("children") or []) if else_block else None


def get_await_clause(node: ForeignNode, clause: str) -> Optional[List[ForeignNode]]:
  """
  Children of an await clause ('pending', 'then' or 'catch').

  Returns:
      Optional[List]: None when the clause is absent (modern null fragment or
      legacy ``skip`` block).
  """
  value = node.get(clause)
  if not value:
    return None
  if value.get("type") == "Fragment":
    return get_children(value)
  if value.get("skip"):
    return None
  return list(value.get("children") or [])


def get_children_from_key(node: ForeignNode) -> List[ForeignNode]:
  if "fragment" in node:
    return get_children(node["fragment"])
  return list(node.get("children") or [])


def get_snippet_parameters(node: ForeignNode) -> List[ForeignNode]:
  params = node.get("parameters")
  if params is None:
    context = node.get("context")
    params = [context] if context else []
  return list(params)


def get_snippet_body(node: ForeignNode) -> List[ForeignNode]:
  if "body" in node:
    return get_children(node["body"])
  return list(node.get("children") or [])


def get_declarator_from_const_tag(node: ForeignNode) -> ForeignNode:
  """
  Returns the ``VariableDeclarator`` of ``{@const}``.

  The legacy schema stores an ``AssignmentExpression``; it is reshaped into a
  declarator spanning the same source.
  """
  declaration = node.get("declaration")
  if declaration:
    return declaration["declarations"][0]
  expression = node["expression"]
  return {
    "type": "VariableDeclarator",
    "start": expression["left"]["start"],
    "end": expression["right"]["end"],
    "id": expression["left"],
    "init": expression["right"],
  }


def get_render_call(node: ForeignNode) -> ForeignNode:
  """Returns the call expression of ``{@render}`` (unwrapping optional chains)."""
  expression = node["expression"]
  if expression["type"] == "ChainExpression":
    expression = expression["expression"]
  return expression


def get_attributes(node: ForeignNode) -> List[ForeignNode]:
  return list(node.get("attributes") or [])
