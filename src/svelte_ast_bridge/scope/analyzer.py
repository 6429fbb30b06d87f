"""
Scope Analyzer.

Resolves variable scopes and references of the embedded script code. The
analyzer walks a program-shaped node (the virtual program assembled from the
``<script>`` bodies) and produces a :class:`ScopeManager` whose scopes are keyed
to the nodes that open them.

Declarations are hoisted: references are resolved when their scope closes, so a
use before a ``var``/``function`` declaration still resolves. References that a
scope cannot resolve are listed in its ``through`` and delegated upward; those
left at the global scope are implicit globals.
"""

from enum import Enum
from typing import Callable, Dict, List, Optional

from svelte_ast_bridge.ast.nodes import Node
from svelte_ast_bridge.traverse import iter_children

_READ = 0x1
_WRITE = 0x2


class ScopeType(str, Enum):
  """Kinds of scopes, named as in ESLint's scope model."""

  GLOBAL = "global"
  MODULE = "module"
  FUNCTION = "function"
  BLOCK = "block"
  CATCH = "catch"
  CLASS = "class"
  FOR = "for"
  SWITCH = "switch"


class Variable:
  """
  A declared name.

  Attributes:
      name (str): Declared name.
      scope (Scope): Declaring scope.
      kind (str): 'var', 'let', 'const', 'function', 'class', 'import',
          'parameter' or 'catch'.
      identifiers (List[Node]): Declaring Identifier nodes.
      references (List[Reference]): Resolved references to this variable.
  """

  def __init__(self, name: str, scope: "Scope", kind: str) -> None:
    self.name = name
    self.scope = scope
    self.kind = kind
    self.identifiers: List[Node] = []
    self.references: List["Reference"] = []

  def __repr__(self) -> str:
    return f"Variable({self.name!r}, {self.kind})"


class Reference:
  """An Identifier occurrence that reads or writes a name."""

  def __init__(self, identifier: Node, from_scope: "Scope", flag: int) -> None:
    self.identifier = identifier
    self.from_scope = from_scope
    self.flag = flag
    self.resolved: Optional[Variable] = None

  @property
  def name(self) -> str:
    return self.identifier.get("name")

  def is_read(self) -> bool:
    return bool(self.flag & _READ)

  def is_write(self) -> bool:
    return bool(self.flag & _WRITE)

  def __repr__(self) -> str:
    return f"Reference({self.name!r}, resolved={self.resolved is not None})"


class Scope:
  """
  A lexical scope.

  Attributes:
      type (ScopeType): Scope kind.
      block (Node): Node that opens the scope. Re-keyable through
          :meth:`ScopeManager.register_node_to_scope`.
      upper (Optional[Scope]): Enclosing scope.
      variables (List[Variable]): Declared variables in declaration order.
      references (List[Reference]): References made directly in this scope.
      through (List[Reference]): References this scope could not resolve.
      child_scopes (List[Scope]): Nested scopes.
  """

  def __init__(self, scope_type: ScopeType, block: Node, upper: Optional["Scope"]) -> None:
    self.type = scope_type
    self.block = block
    self.upper = upper
    self.variables: List[Variable] = []
    self.set: Dict[str, Variable] = {}
    self.references: List[Reference] = []
    self.through: List[Reference] = []
    self.child_scopes: List["Scope"] = []
    self._left: List[Reference] = []
    if upper is not None:
      upper.child_scopes.append(self)

  @property
  def variable_scope(self) -> "Scope":
    """Nearest scope that receives hoisted ``var`` declarations."""
    scope = self
    while scope.type not in (ScopeType.FUNCTION, ScopeType.MODULE, ScopeType.GLOBAL):
      scope = scope.upper
    return scope

  def declare(self, name: str, identifier: Node, kind: str) -> Variable:
    variable = self.set.get(name)
    if variable is None:
      variable = Variable(name, self, kind)
      self.set[name] = variable
      self.variables.append(variable)
    variable.identifiers.append(identifier)
    return variable

  def add_reference(self, identifier: Node, flag: int) -> Reference:
    ref = Reference(identifier, self, flag)
    self.references.append(ref)
    self._left.append(ref)
    return ref

  def close(self) -> None:
    """Resolves pending references against this scope, delegating the rest upward."""
    for ref in self._left:
      variable = self.set.get(ref.name)
      if variable is not None:
        ref.resolved = variable
        variable.references.append(ref)
        continue
      self.through.append(ref)
      if self.upper is not None:
        self.upper._left.append(ref)
    self._left = []

  def resolve(self, identifier: Node) -> Optional[Variable]:
    """Returns the variable an Identifier of this scope resolved to."""
    for ref in self.references:
      if ref.identifier is identifier:
        return ref.resolved
    return None

  def __repr__(self) -> str:
    return f"Scope({self.type.value}, {self.block.type})"


class ScopeManager:
  """
  Result of scope analysis: every scope, indexed by the node that opens it.
  """

  def __init__(self, source_type: str = "module") -> None:
    self.source_type = source_type
    self.scopes: List[Scope] = []
    self._node_to_scope: Dict[Node, List[Scope]] = {}

  @property
  def global_scope(self) -> Optional[Scope]:
    return self.scopes[0] if self.scopes else None

  def is_module(self) -> bool:
    return self.source_type == "module"

  def acquire(self, node: Node, inner: bool = False) -> Optional[Scope]:
    """
    Returns the scope opened by ``node``.

    Args:
        node (Node): The block node.
        inner (bool): Return the innermost scope when a node opens several
            (a module program opens both the global and the module scope).
    """
    scopes = self._node_to_scope.get(node)
    if not scopes:
      return None
    return scopes[-1] if inner else scopes[0]

  def register_node_to_scope(self, node: Node, scope: Scope) -> None:
    """
    Re-keys ``scope`` to ``node``.

    The previous block keeps its index entry, so both nodes acquire the scope.
    """
    self._node_to_scope.setdefault(node, []).append(scope)
    scope.block = node

  def _add(self, scope: Scope) -> None:
    self.scopes.append(scope)
    self._node_to_scope.setdefault(scope.block, []).append(scope)


class _Referencer:
  """Walks embedded code, opening scopes, declaring names and recording references."""

  def __init__(self, manager: ScopeManager) -> None:
    self.manager = manager
    self.current: Optional[Scope] = None

  # --- Scope stack ---

  def push(self, scope_type: ScopeType, block: Node) -> Scope:
    scope = Scope(scope_type, block, self.current)
    self.manager._add(scope)
    self.current = scope
    return scope

  def pop(self) -> None:
    self.current.close()
    self.current = self.current.upper

  # --- Dispatch ---

  def visit(self, node: Optional[Node]) -> None:
    if node is None:
      return
    method = getattr(self, f"visit_{node.type}", None)
    if method is not None:
      method(node)
    else:
      self.visit_children(node)

  def visit_children(self, node: Node) -> None:
    for child in iter_children(node):
      self.visit(child)

  def visit_all(self, nodes: Optional[List[Node]]) -> None:
    for node in nodes or []:
      self.visit(node)

  # --- Patterns ---

  def visit_pattern(self, pattern: Optional[Node], on_identifier: Callable[[Node], None]) -> None:
    """
    Walks a binding or assignment pattern.

    Target Identifiers are passed to ``on_identifier``; default values and
    computed keys are visited as ordinary expressions.
    """
    if pattern is None:
      return
    pattern_type = pattern.type
    if pattern_type == "Identifier":
      on_identifier(pattern)
    elif pattern_type == "ObjectPattern":
      for prop in pattern.get("properties") or []:
        if prop.type == "RestElement":
          self.visit_pattern(prop.get("argument"), on_identifier)
          continue
        if prop.get("computed"):
          self.visit(prop.get("key"))
        self.visit_pattern(prop.get("value"), on_identifier)
    elif pattern_type == "ArrayPattern":
      for element in pattern.get("elements") or []:
        self.visit_pattern(element, on_identifier)
    elif pattern_type == "AssignmentPattern":
      self.visit_pattern(pattern.get("left"), on_identifier)
      self.visit(pattern.get("right"))
    elif pattern_type == "RestElement":
      self.visit_pattern(pattern.get("argument"), on_identifier)
    else:
      self.visit(pattern)

  def _declarer(self, scope: Scope, kind: str) -> Callable[[Node], None]:
    return lambda ident: scope.declare(ident.get("name"), ident, kind)

  def _referrer(self, flag: int) -> Callable[[Node], None]:
    return lambda ident: self.current.add_reference(ident, flag)

  # --- Program ---

  def visit_Program(self, node: Node) -> None:
    self.push(ScopeType.GLOBAL, node)
    if self.manager.is_module():
      self.push(ScopeType.MODULE, node)
    self.visit_all(node.get("body"))
    if self.manager.is_module():
      self.pop()
    self.pop()

  # --- Expressions ---

  def visit_Identifier(self, node: Node) -> None:
    self.current.add_reference(node, _READ)

  def visit_MemberExpression(self, node: Node) -> None:
    self.visit(node.get("object"))
    if node.get("computed"):
      self.visit(node.get("property"))

  def visit_Property(self, node: Node) -> None:
    if node.get("computed"):
      self.visit(node.get("key"))
    self.visit(node.get("value"))

  visit_MethodDefinition = visit_Property

  def visit_PropertyDefinition(self, node: Node) -> None:
    if node.get("computed"):
      self.visit(node.get("key"))
    self.visit(node.get("value"))

  def visit_AssignmentExpression(self, node: Node) -> None:
    left = node.get("left")
    if left is not None and left.type != "MemberExpression":
      flag = _WRITE if node.get("operator") == "=" else _READ | _WRITE
      self.visit_pattern(left, self._referrer(flag))
    else:
      self.visit(left)
    self.visit(node.get("right"))

  def visit_UpdateExpression(self, node: Node) -> None:
    argument = node.get("argument")
    if argument is not None and argument.type == "Identifier":
      self.current.add_reference(argument, _READ | _WRITE)
    else:
      self.visit(argument)

  def visit_MetaProperty(self, node: Node) -> None:
    pass

  # --- Functions & classes ---

  def visit_function(self, node: Node) -> None:
    scope = self.push(ScopeType.FUNCTION, node)
    for param in node.get("params") or []:
      self.visit_pattern(param, self._declarer(scope, "parameter"))
    body = node.get("body")
    if body is not None and body.type == "BlockStatement":
      self.visit_all(body.get("body"))
    else:
      self.visit(body)
    self.pop()

  def visit_FunctionDeclaration(self, node: Node) -> None:
    fn_id = node.get("id")
    if fn_id is not None:
      self.current.declare(fn_id.get("name"), fn_id, "function")
    self.visit_function(node)

  visit_FunctionExpression = visit_function
  visit_ArrowFunctionExpression = visit_function

  def visit_class(self, node: Node, declare_name: bool) -> None:
    self.visit(node.get("superClass"))
    scope = self.push(ScopeType.CLASS, node)
    class_id = node.get("id")
    if declare_name and class_id is not None:
      scope.declare(class_id.get("name"), class_id, "class")
    self.visit(node.get("body"))
    self.pop()

  def visit_ClassDeclaration(self, node: Node) -> None:
    class_id = node.get("id")
    if class_id is not None:
      self.current.declare(class_id.get("name"), class_id, "class")
    self.visit_class(node, declare_name=False)

  def visit_ClassExpression(self, node: Node) -> None:
    self.visit_class(node, declare_name=True)

  # --- Statements ---

  def visit_VariableDeclaration(self, node: Node) -> None:
    kind = node.get("kind", "var")
    scope = self.current.variable_scope if kind == "var" else self.current
    for declarator in node.get("declarations") or []:
      target = declarator.get("id")
      init = declarator.get("init")
      self.visit_pattern(target, self._declarer(scope, kind))
      if init is not None:
        self.visit_pattern(target, self._referrer(_WRITE))
        self.visit(init)

  def visit_BlockStatement(self, node: Node) -> None:
    self.push(ScopeType.BLOCK, node)
    self.visit_all(node.get("body"))
    self.pop()

  def _visit_for(self, node: Node, head_key: str) -> None:
    head = node.get(head_key)
    lexical = head is not None and head.type == "VariableDeclaration" and head.get("kind") != "var"
    if lexical:
      self.push(ScopeType.FOR, node)
    if head is not None and head.type not in ("VariableDeclaration", "MemberExpression") and head_key == "left":
      self.visit_pattern(head, self._referrer(_WRITE))
    else:
      self.visit(head)
    for key in ("test", "update", "right"):
      self.visit(node.get(key))
    self.visit(node.get("body"))
    if lexical:
      self.pop()

  def visit_ForStatement(self, node: Node) -> None:
    self._visit_for(node, "init")

  def visit_ForInStatement(self, node: Node) -> None:
    self._visit_for(node, "left")

  visit_ForOfStatement = visit_ForInStatement

  def visit_CatchClause(self, node: Node) -> None:
    scope = self.push(ScopeType.CATCH, node)
    self.visit_pattern(node.get("param"), self._declarer(scope, "catch"))
    self.visit(node.get("body"))
    self.pop()

  def visit_SwitchStatement(self, node: Node) -> None:
    self.visit(node.get("discriminant"))
    self.push(ScopeType.SWITCH, node)
    self.visit_all(node.get("cases"))
    self.pop()

  def visit_LabeledStatement(self, node: Node) -> None:
    self.visit(node.get("body"))

  def visit_SvelteReactiveStatement(self, node: Node) -> None:
    self.visit(node.get("body"))

  def visit_BreakStatement(self, node: Node) -> None:
    pass

  visit_ContinueStatement = visit_BreakStatement

  # --- Modules ---

  def visit_ImportDeclaration(self, node: Node) -> None:
    for specifier in node.get("specifiers") or []:
      local = specifier.get("local")
      self.current.declare(local.get("name"), local, "import")

  def visit_ExportNamedDeclaration(self, node: Node) -> None:
    self.visit(node.get("declaration"))
    if node.get("source") is None:
      for specifier in node.get("specifiers") or []:
        self.visit(specifier.get("local"))

  def visit_ExportDefaultDeclaration(self, node: Node) -> None:
    self.visit(node.get("declaration"))

  def visit_ExportAllDeclaration(self, node: Node) -> None:
    pass


def analyze(program: Node, source_type: str = "module") -> ScopeManager:
  """
  Resolves scopes of a program-shaped node.

  Args:
      program (Node): Node of type 'Program' whose ``body`` holds statements.
      source_type (str): 'module' adds a module scope below the global scope.

  Returns:
      ScopeManager: The analysis result.

  Raises:
      ValueError: If the node is not a program.
  """
  if program.type != "Program":
    raise ValueError(f"Scope analysis expects a Program node, got '{program.type}'")
  manager = ScopeManager(source_type)
  _Referencer(manager).visit(program)
  return manager
