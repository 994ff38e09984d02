"""Closed syntax model lowered from tree-sitter JS/TS nodes.

The reachability analysis only needs a handful of node kinds. Rather than
poking at raw tree-sitter nodes with field-name guards, each supported kind
is lowered into a frozen dataclass carrying exactly the fields the analysis
reads. Anything else becomes ``Opaque(kind)`` and is never descended into.

Lowering mirrors an ESTree view of the tree:
- ``parenthesized_expression`` is transparent
- ``else_clause`` is unwrapped so ``If.alternate`` is the statement itself
- ``comment`` nodes are dropped
- an optional chain (``a?.b``, ``f?.()``) is opaque as a whole, like an
  ESTree ``ChainExpression``
- a tagged template (``tag`text` ``) is opaque, not a call
"""
from dataclasses import dataclass
from typing import Optional, Tuple, Union

from tree_sitter import Node


@dataclass(frozen=True)
class Span:
    """1-based source location of a node."""
    start_line: int
    start_column: int
    end_line: int
    end_column: int

    @classmethod
    def of(cls, node: Node) -> 'Span':
        return cls(
            start_line=node.start_point[0] + 1,
            start_column=node.start_point[1] + 1,
            end_line=node.end_point[0] + 1,
            end_column=node.end_point[1] + 1,
        )


@dataclass(frozen=True)
class Identifier:
    name: str


@dataclass(frozen=True)
class MemberAccess:
    object: 'SyntaxNode'
    property: 'SyntaxNode'  # Identifier for `a.b`, the index expression for `a[b]`


@dataclass(frozen=True)
class Call:
    callee: 'SyntaxNode'
    arguments: Tuple['SyntaxNode', ...]
    span: Span


@dataclass(frozen=True)
class Await:
    argument: 'SyntaxNode'


@dataclass(frozen=True)
class Block:
    body: Tuple['SyntaxNode', ...]


@dataclass(frozen=True)
class ExpressionStatement:
    expression: 'SyntaxNode'


@dataclass(frozen=True)
class FunctionLike:
    """Arrow function, function expression or object method."""
    body: 'SyntaxNode'


@dataclass(frozen=True)
class If:
    consequent: 'SyntaxNode'
    alternate: Optional['SyntaxNode'] = None


@dataclass(frozen=True)
class CatchClause:
    body: 'SyntaxNode'


@dataclass(frozen=True)
class Try:
    block: 'SyntaxNode'
    handler: Optional[CatchClause] = None


@dataclass(frozen=True)
class PatternProperty:
    """One entry of a destructuring pattern: ``{ key: value }``."""
    key: 'SyntaxNode'
    value: 'SyntaxNode'


@dataclass(frozen=True)
class ObjectPattern:
    properties: Tuple[PatternProperty, ...]


@dataclass(frozen=True)
class VariableDeclarator:
    target: 'SyntaxNode'
    init: Optional['SyntaxNode'] = None


@dataclass(frozen=True)
class VariableDeclaration:
    declarations: Tuple[VariableDeclarator, ...]


@dataclass(frozen=True)
class Property:
    key: 'SyntaxNode'
    value: 'SyntaxNode'
    span: Span


@dataclass(frozen=True)
class ObjectLiteral:
    properties: Tuple[Property, ...]


@dataclass(frozen=True)
class Opaque:
    """Any node kind the analysis does not look inside."""
    kind: str


SyntaxNode = Union[
    Identifier, MemberAccess, Call, Await, Block, ExpressionStatement,
    FunctionLike, If, Try, CatchClause, VariableDeclaration,
    VariableDeclarator, ObjectPattern, PatternProperty, ObjectLiteral,
    Property, Opaque,
]

IDENTIFIER_KINDS = {
    'identifier',
    'property_identifier',
    'shorthand_property_identifier',
    'shorthand_property_identifier_pattern',
}

FUNCTION_KINDS = {
    'arrow_function',
    'function_expression',
    'function',  # older tree-sitter-javascript releases
    'generator_function',
}

# Links of a member/call chain; the spine runs through `object` and `function`
CHAIN_KINDS = {
    'member_expression': 'object',
    'subscript_expression': 'object',
    'call_expression': 'function',
}


def _text(node: Node) -> str:
    return node.text.decode('utf-8', errors='replace')


def _named(node: Node) -> list:
    """Named children of a node, without comments."""
    return [child for child in node.named_children if child.type != 'comment']


def _first_named(node: Node) -> Optional[Node]:
    children = _named(node)
    return children[0] if children else None


def _in_optional_chain(node: Node) -> bool:
    """True when any link of the chain ending at ``node`` is optional.

    Parentheses end a chain: ``(a?.b).c`` only wraps ``a?.b``.
    """
    current: Optional[Node] = node
    while current is not None and current.type in CHAIN_KINDS:
        if any(child.type == 'optional_chain' for child in current.children):
            return True
        current = current.child_by_field_name(CHAIN_KINDS[current.type])
    return False


def lower_optional(node: Optional[Node]) -> Optional[SyntaxNode]:
    return lower(node) if node is not None else None


def lower_call_site(node: Node) -> SyntaxNode:
    """Lower a ``call_expression`` visited on its own by the linter.

    A call inside an optional chain is still a call when looked at directly;
    only its enclosing expression sees the chain as opaque.
    """
    return _lower_call(node)


def lower(node: Node) -> SyntaxNode:
    """Lower a tree-sitter node (and its relevant subtree) into the closed model."""
    kind = node.type

    if kind in CHAIN_KINDS and _in_optional_chain(node):
        return Opaque('chain_expression')

    if kind in IDENTIFIER_KINDS:
        return Identifier(_text(node))

    if kind == 'parenthesized_expression':
        inner = _first_named(node)
        return lower(inner) if inner is not None else Opaque(kind)

    handler = _LOWERERS.get(kind)
    if handler is not None:
        return handler(node)

    if kind in FUNCTION_KINDS:
        return _lower_function(node)

    return Opaque(kind)


def _lower_member(node: Node) -> SyntaxNode:
    obj = node.child_by_field_name('object')
    prop = node.child_by_field_name('property')
    if obj is None or prop is None:
        return Opaque(node.type)
    return MemberAccess(object=lower(obj), property=lower(prop))


def _lower_subscript(node: Node) -> SyntaxNode:
    # a[b] keeps the index expression as the property, so a computed key
    # never reads as a named member
    obj = node.child_by_field_name('object')
    index = node.child_by_field_name('index')
    if obj is None or index is None:
        return Opaque(node.type)
    return MemberAccess(object=lower(obj), property=lower(index))


def _lower_call(node: Node) -> SyntaxNode:
    callee = node.child_by_field_name('function')
    if callee is None:
        return Opaque(node.type)

    args_node = node.child_by_field_name('arguments')
    if args_node is not None and args_node.type == 'template_string':
        return Opaque('tagged_template_expression')

    arguments: Tuple[SyntaxNode, ...] = ()
    if args_node is not None and args_node.type == 'arguments':
        arguments = tuple(lower(arg) for arg in _named(args_node))

    return Call(callee=lower(callee), arguments=arguments, span=Span.of(node))


def _lower_await(node: Node) -> SyntaxNode:
    argument = _first_named(node)
    if argument is None:
        return Opaque(node.type)
    return Await(lower(argument))


def _lower_block(node: Node) -> SyntaxNode:
    return Block(tuple(lower(statement) for statement in _named(node)))


def _lower_expression_statement(node: Node) -> SyntaxNode:
    expression = _first_named(node)
    if expression is None:
        return Opaque(node.type)
    return ExpressionStatement(lower(expression))


def _lower_function(node: Node) -> SyntaxNode:
    body = node.child_by_field_name('body')
    if body is None:
        return Opaque(node.type)
    return FunctionLike(lower(body))


def _lower_if(node: Node) -> SyntaxNode:
    consequence = node.child_by_field_name('consequence')
    if consequence is None:
        return Opaque(node.type)

    alternative = node.child_by_field_name('alternative')
    if alternative is not None and alternative.type == 'else_clause':
        alternative = _first_named(alternative)

    return If(consequent=lower(consequence), alternate=lower_optional(alternative))


def _lower_catch(node: Node) -> SyntaxNode:
    body = node.child_by_field_name('body')
    if body is None:
        return Opaque(node.type)
    return CatchClause(lower(body))


def _lower_try(node: Node) -> SyntaxNode:
    body = node.child_by_field_name('body')
    if body is None:
        return Opaque(node.type)

    handler = None
    handler_node = node.child_by_field_name('handler')
    if handler_node is not None:
        lowered = _lower_catch(handler_node)
        if isinstance(lowered, CatchClause):
            handler = lowered

    return Try(block=lower(body), handler=handler)


def _lower_declaration(node: Node) -> SyntaxNode:
    declarators = []
    for child in _named(node):
        if child.type == 'variable_declarator':
            declarator = _lower_declarator(child)
            if isinstance(declarator, VariableDeclarator):
                declarators.append(declarator)
    return VariableDeclaration(tuple(declarators))


def _lower_declarator(node: Node) -> SyntaxNode:
    target = node.child_by_field_name('name')
    if target is None:
        return Opaque(node.type)
    return VariableDeclarator(
        target=lower(target),
        init=lower_optional(node.child_by_field_name('value')),
    )


def _lower_key(node: Optional[Node]) -> SyntaxNode:
    """Property names and bare identifiers in ``[...]`` become identifiers; other keys stay opaque."""
    if node is None:
        return Opaque('missing_key')
    if node.type in ('property_identifier', 'identifier', 'shorthand_property_identifier_pattern'):
        return Identifier(_text(node))
    if node.type == 'computed_property_name':
        # `[onSuccess]: fn` keeps an Identifier key; `['onSuccess']` does not
        inner = _first_named(node)
        if inner is not None and inner.type == 'identifier':
            return Identifier(_text(inner))
    return Opaque(node.type)


def _lower_object_pattern(node: Node) -> SyntaxNode:
    properties = []
    for child in _named(node):
        if child.type == 'shorthand_property_identifier_pattern':
            name = Identifier(_text(child))
            properties.append(PatternProperty(key=name, value=name))
        elif child.type == 'pair_pattern':
            value = child.child_by_field_name('value')
            properties.append(PatternProperty(
                key=_lower_key(child.child_by_field_name('key')),
                value=lower(value) if value is not None else Opaque('missing_value'),
            ))
        elif child.type == 'object_assignment_pattern':
            # { name = fallback } binds through a default, never a plain alias
            properties.append(PatternProperty(
                key=_lower_key(child.child_by_field_name('left')),
                value=Opaque(child.type),
            ))
    return ObjectPattern(tuple(properties))


def _lower_object(node: Node) -> SyntaxNode:
    properties = []
    for child in _named(node):
        if child.type == 'pair':
            value = child.child_by_field_name('value')
            properties.append(Property(
                key=_lower_key(child.child_by_field_name('key')),
                value=lower(value) if value is not None else Opaque('missing_value'),
                span=Span.of(child),
            ))
        elif child.type == 'shorthand_property_identifier':
            name = Identifier(_text(child))
            properties.append(Property(key=name, value=name, span=Span.of(child)))
        elif child.type == 'method_definition':
            properties.append(Property(
                key=_lower_key(child.child_by_field_name('name')),
                value=_lower_function(child),
                span=Span.of(child),
            ))
        # spread_element entries are not properties
    return ObjectLiteral(tuple(properties))


_LOWERERS = {
    'member_expression': _lower_member,
    'subscript_expression': _lower_subscript,
    'call_expression': _lower_call,
    'await_expression': _lower_await,
    'statement_block': _lower_block,
    'expression_statement': _lower_expression_statement,
    'if_statement': _lower_if,
    'try_statement': _lower_try,
    'catch_clause': _lower_catch,
    'lexical_declaration': _lower_declaration,
    'variable_declaration': _lower_declaration,
    'variable_declarator': _lower_declarator,
    'object_pattern': _lower_object_pattern,
    'object': _lower_object,
}
