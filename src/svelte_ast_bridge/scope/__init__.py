"""
Scope analysis of embedded script code.
"""

from svelte_ast_bridge.scope.analyzer import Reference, Scope, ScopeManager, ScopeType, Variable, analyze

__all__ = ["Reference", "Scope", "ScopeManager", "ScopeType", "Variable", "analyze"]
