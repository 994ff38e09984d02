"""Tests for lowering tree-sitter nodes into the closed syntax model."""
import pytest

from src.analyzer.parser import LanguageParser
from src.analyzer.syntax import (
    Await,
    Block,
    Call,
    CatchClause,
    ExpressionStatement,
    FunctionLike,
    Identifier,
    If,
    MemberAccess,
    ObjectLiteral,
    ObjectPattern,
    Opaque,
    PatternProperty,
    Try,
    VariableDeclaration,
    VariableDeclarator,
    lower,
    lower_call_site,
)


@pytest.fixture(scope='module')
def parser():
    return LanguageParser('javascript')


def first_node(parser, code: str, kind: str):
    """Pre-order search for the first node of a given kind."""
    stack = [parser.parse_source(code).root_node]
    while stack:
        node = stack.pop()
        if node.type == kind:
            return node
        stack.extend(reversed(node.named_children))
    raise AssertionError(f"no {kind} in {code!r}")


class TestExpressions:

    def test_identifier(self, parser):
        assert lower(first_node(parser, "foo;", 'identifier')) == Identifier('foo')

    def test_member_access(self, parser):
        node = lower(first_node(parser, "client.invalidateQueries;", 'member_expression'))
        assert node == MemberAccess(Identifier('client'), Identifier('invalidateQueries'))

    def test_subscript_keeps_index_expression(self, parser):
        node = lower(first_node(parser, "client['invalidateQueries'];", 'subscript_expression'))
        assert isinstance(node, MemberAccess)
        assert node.object == Identifier('client')
        assert node.property == Opaque('string')

    def test_call_arguments(self, parser):
        call = lower(first_node(parser, "f(a.b, x);", 'call_expression'))
        assert isinstance(call, Call)
        assert call.callee == Identifier('f')
        assert call.arguments == (MemberAccess(Identifier('a'), Identifier('b')), Identifier('x'))
        assert call.span.start_line == 1
        assert call.span.start_column == 1

    def test_parentheses_are_transparent(self, parser):
        call = lower(first_node(parser, "(f)((x));", 'call_expression'))
        assert call.callee == Identifier('f')
        assert call.arguments == (Identifier('x'),)

    def test_tagged_template_is_opaque(self, parser):
        node = lower(first_node(parser, "gql`query { a }`;", 'call_expression'))
        assert node == Opaque('tagged_template_expression')

    @pytest.mark.parametrize('code', [
        "client?.invalidateQueries();",
        "client.invalidateQueries?.();",
        "ctx?.client.invalidateQueries();",
        "ctx.client?.['invalidateQueries']();",
    ])
    def test_optional_chain_is_opaque(self, parser, code):
        assert lower(first_node(parser, code, 'call_expression')) == Opaque('chain_expression')

    def test_parentheses_end_an_optional_chain(self, parser):
        call = lower(first_node(parser, "(ctx?.client).invalidateQueries();", 'call_expression'))
        assert isinstance(call, Call)
        assert call.callee == MemberAccess(Opaque('chain_expression'), Identifier('invalidateQueries'))

    def test_optional_argument_stays_inside_the_call(self, parser):
        call = lower(first_node(parser, "f(a?.b);", 'call_expression'))
        assert call.arguments == (Opaque('chain_expression'),)

    def test_call_site_lowering_ignores_its_own_optional_call(self, parser):
        call = lower_call_site(first_node(parser, "useMutation?.({});", 'call_expression'))
        assert isinstance(call, Call)
        assert call.callee == Identifier('useMutation')

    def test_await(self, parser):
        node = lower(first_node(parser, "async () => { await go(); }", 'await_expression'))
        assert isinstance(node, Await)
        assert isinstance(node.argument, Call)

    def test_unknown_kinds_are_opaque(self, parser):
        assert lower(first_node(parser, "new Client();", 'new_expression')) == Opaque('new_expression')
        assert lower(first_node(parser, "a + b;", 'binary_expression')) == Opaque('binary_expression')


class TestFunctions:

    def test_arrow_with_block_body(self, parser):
        node = lower(first_node(parser, "() => { go(); }", 'arrow_function'))
        assert isinstance(node, FunctionLike)
        assert isinstance(node.body, Block)
        assert isinstance(node.body.body[0], ExpressionStatement)

    def test_arrow_with_expression_body(self, parser):
        node = lower(first_node(parser, "() => go()", 'arrow_function'))
        assert isinstance(node.body, Call)

    def test_function_expression(self, parser):
        node = lower(first_node(parser, "const f = function () { go(); };", 'variable_declarator'))
        assert isinstance(node.init, FunctionLike)

    def test_comments_are_dropped(self, parser):
        node = lower(first_node(parser, "() => { /* one */ go(); // two\n }", 'statement_block'))
        assert len(node.body) == 1


class TestStatements:

    def test_if_else_is_unwrapped(self, parser):
        node = lower(first_node(parser, "if (a) { b(); } else c();", 'if_statement'))
        assert isinstance(node, If)
        assert isinstance(node.consequent, Block)
        assert isinstance(node.alternate, ExpressionStatement)

    def test_else_if_nests(self, parser):
        node = lower(first_node(parser, "if (a) b(); else if (c) d();", 'if_statement'))
        assert isinstance(node.alternate, If)
        assert node.alternate.alternate is None

    def test_try_catch(self, parser):
        node = lower(first_node(parser, "try { a(); } catch (e) { b(); } finally { c(); }", 'try_statement'))
        assert isinstance(node, Try)
        assert isinstance(node.block, Block)
        assert isinstance(node.handler, CatchClause)

    def test_try_finally_has_no_handler(self, parser):
        node = lower(first_node(parser, "try { a(); } finally { c(); }", 'try_statement'))
        assert node.handler is None

    @pytest.mark.parametrize('code,kind', [
        ("const a = b, c = d;", 'lexical_declaration'),
        ("let a = b, c = d;", 'lexical_declaration'),
        ("var a = b, c = d;", 'variable_declaration'),
    ])
    def test_declarations(self, parser, code, kind):
        node = lower(first_node(parser, code, kind))
        assert isinstance(node, VariableDeclaration)
        assert [d.target for d in node.declarations] == [Identifier('a'), Identifier('c')]
        assert [d.init for d in node.declarations] == [Identifier('b'), Identifier('d')]

    def test_declarator_without_initializer(self, parser):
        node = lower(first_node(parser, "let a;", 'variable_declarator'))
        assert node == VariableDeclarator(Identifier('a'), None)


class TestPatterns:

    def test_shorthand_and_renamed_entries(self, parser):
        node = lower(first_node(parser, "const { a, b: c } = o;", 'object_pattern'))
        assert node == ObjectPattern((
            PatternProperty(Identifier('a'), Identifier('a')),
            PatternProperty(Identifier('b'), Identifier('c')),
        ))

    def test_defaulted_entry_is_not_a_plain_binding(self, parser):
        node = lower(first_node(parser, "const { a = 1 } = o;", 'object_pattern'))
        assert node.properties[0].key == Identifier('a')
        assert isinstance(node.properties[0].value, Opaque)

    def test_rest_entry_is_skipped(self, parser):
        node = lower(first_node(parser, "const { a, ...rest } = o;", 'object_pattern'))
        assert len(node.properties) == 1

    def test_computed_identifier_key(self, parser):
        node = lower(first_node(parser, "const { [name]: alias } = o;", 'object_pattern'))
        assert node.properties[0] == PatternProperty(Identifier('name'), Identifier('alias'))


class TestObjectLiterals:

    def test_pairs_shorthand_and_methods(self, parser):
        node = lower(first_node(parser, "f({ a: 1, b, c() {}, 'd': 2, ...e });", 'object'))
        assert isinstance(node, ObjectLiteral)
        keys = [prop.key for prop in node.properties]
        assert keys == [Identifier('a'), Identifier('b'), Identifier('c'), Opaque('string')]
        assert node.properties[1].value == Identifier('b')
        assert isinstance(node.properties[2].value, FunctionLike)

    def test_property_span(self, parser):
        node = lower(first_node(parser, "f({\n  onSuccess: () => {}\n});", 'object'))
        span = node.properties[0].span
        assert (span.start_line, span.start_column) == (2, 3)

    @pytest.mark.parametrize('code,key', [
        ("f({ [onSuccess]: g });", Identifier('onSuccess')),
        ("f({ ['onSuccess']: g });", Opaque('computed_property_name')),
        ("f({ [a + b]: g });", Opaque('computed_property_name')),
    ])
    def test_computed_keys(self, parser, code, key):
        node = lower(first_node(parser, code, 'object'))
        assert node.properties[0].key == key
