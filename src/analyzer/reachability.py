"""Structural reachability of an operation call inside a callback body.

Best-effort syntactic approximation: the search descends only through an
allow-list of node kinds (blocks, conditionals, try/catch, awaits, nested
calls and functions) and treats everything else as opaque. Loops, switch
statements and return statements are never searched.

Local aliases of the operation are tracked flow-insensitively:

    const invalidate = queryClient.invalidateQueries;   // member alias
    const again = invalidate;                           // alias of alias
    const { invalidateQueries } = queryClient;          // destructuring
    const { invalidateQueries: inv } = queryClient;     // renamed destructuring

Once a name is an alias it stays one for the rest of the analysis.
"""
from typing import Optional, Set

from .syntax import (
    Await,
    Block,
    Call,
    CatchClause,
    ExpressionStatement,
    FunctionLike,
    Identifier,
    If,
    MemberAccess,
    ObjectPattern,
    SyntaxNode,
    Try,
    VariableDeclaration,
    VariableDeclarator,
)

INVALIDATE_QUERIES_NAME = "invalidateQueries"


class InvalidationReachability:
    """Decides whether a call to ``operation`` is reachable within a node."""

    def __init__(self, operation: str = INVALIDATE_QUERIES_NAME):
        self.operation = operation

    def is_reachable(self, node: Optional[SyntaxNode]) -> bool:
        """Search ``node`` with a fresh alias set.

        A body nested too deeply to search counts as not reaching the call.
        """
        aliases: Set[str] = set()
        try:
            return self._visit(node, aliases)
        except RecursionError:
            return False

    def _names_operation(self, node: SyntaxNode) -> bool:
        return isinstance(node, Identifier) and node.name == self.operation

    def _collect_aliases(self, declarator: VariableDeclarator, aliases: Set[str]) -> None:
        target, init = declarator.target, declarator.init

        if isinstance(init, MemberAccess):
            if self._names_operation(init.property) and isinstance(target, Identifier):
                aliases.add(target.name)
        elif isinstance(init, Identifier) and init.name in aliases:
            if isinstance(target, Identifier):
                aliases.add(target.name)

        if isinstance(target, ObjectPattern):
            for prop in target.properties:
                if self._names_operation(prop.key) and isinstance(prop.value, Identifier):
                    aliases.add(prop.value.name)

    def _visit(self, node: Optional[SyntaxNode], aliases: Set[str]) -> bool:
        if node is None:
            return False

        if isinstance(node, VariableDeclarator):
            # Aliasing is a side effect; only the initializer can match
            self._collect_aliases(node, aliases)
            return self._visit(node.init, aliases)

        if isinstance(node, Call):
            callee = node.callee
            # Any receiver counts: the owner of the method is not checked
            if isinstance(callee, MemberAccess) and self._names_operation(callee.property):
                return True
            if isinstance(callee, Identifier) and callee.name in aliases:
                return True
            # Callee recursion also reaches an IIFE's function body
            return self._visit(callee, aliases) or any(
                self._visit(argument, aliases) for argument in node.arguments
            )

        if isinstance(node, Await):
            return self._visit(node.argument, aliases)

        if isinstance(node, Block):
            return any(self._visit(statement, aliases) for statement in node.body)

        if isinstance(node, ExpressionStatement):
            return self._visit(node.expression, aliases)

        if isinstance(node, FunctionLike):
            return self._visit(node.body, aliases)

        if isinstance(node, MemberAccess):
            return self._visit(node.object, aliases) or self._visit(node.property, aliases)

        if isinstance(node, If):
            return self._visit(node.consequent, aliases) or self._visit(node.alternate, aliases)

        if isinstance(node, Try):
            return self._visit(node.block, aliases) or self._visit(node.handler, aliases)

        if isinstance(node, CatchClause):
            return self._visit(node.body, aliases)

        if isinstance(node, VariableDeclaration):
            return any(self._visit(declarator, aliases) for declarator in node.declarations)

        return False
