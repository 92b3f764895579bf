"""Tests for parsing, syntax wrapping and function naming."""

import pytest

from jsgraph_cli.models import SourceFile
from jsgraph_cli.parser import ParseError, SourceParser, language_for
from jsgraph_cli.resolver import (
    collect_called_names,
    function_spans,
    iter_named_functions,
    resolve_function_name,
)
from jsgraph_cli.syntax import NodeKind


def _names(parser: SourceParser, code: str, source_id: str = "<input>"):
    tree = parser.parse(SourceFile(id=source_id, content=code))
    return [name for name, _node in iter_named_functions(tree)]


class TestLanguageSelection:
    def test_extensions(self):
        assert language_for("a.js") == "javascript"
        assert language_for("dir/b.JSX") == "javascript"
        assert language_for("c.ts") == "typescript"
        assert language_for("d.tsx") == "tsx"

    def test_unknown_uses_default(self):
        assert language_for("<input>") == "tsx"
        assert language_for("notes.txt", default="javascript") == "javascript"


class TestParsing:
    def test_parse_returns_tree(self, parser):
        tree = parser.parse(SourceFile(id="a.js", content="function a() {}"))
        assert tree.source_id == "a.js"
        assert tree.language == "javascript"
        assert tree.root.kind == NodeKind.OTHER  # program
        assert any(n.kind == NodeKind.FUNCTION_DECLARATION for n in tree.root.walk())

    def test_recoverable_error_is_tolerated(self, parser):
        code = (
            "function ok() { return 1 }\n"
            "function broken() { let x = ; }\n"
            "function fine() { return 2 }\n"
        )
        tree = parser.parse(SourceFile(id="a.js", content=code))
        assert "ok" in [name for name, _ in iter_named_functions(tree)]

    def test_unrecoverable_source_raises(self, parser, garbage_source):
        with pytest.raises(ParseError) as excinfo:
            parser.parse(SourceFile(id="bad.js", content=garbage_source))
        assert excinfo.value.source_id == "bad.js"

    def test_damage_on_most_lines_raises(self, parser):
        code = "\n".join(["let = = = ;"] * 25)
        with pytest.raises(ParseError):
            parser.parse(SourceFile(id="broken.js", content=code))

    def test_lone_surrogate_raises_parse_error(self, parser):
        with pytest.raises(ParseError) as excinfo:
            parser.parse(SourceFile(id="s.js", content="const s = '\ud800';"))
        assert excinfo.value.source_id == "s.js"

    def test_parse_many_skips_failures(self, parser, garbage_source):
        trees = parser.parse_many([
            SourceFile(id="bad.js", content=garbage_source),
            SourceFile(id="odd.js", content="const s = '\ud800';"),
            SourceFile(id="good.js", content="const f = () => 1;"),
        ])
        assert [t.source_id for t in trees] == ["good.js"]

    def test_walk_yields_parents(self, parser):
        tree = parser.parse(SourceFile(id="a.js", content="f(1);"))
        pairs = list(tree.root.walk_with_parent())
        assert pairs[0][0] == tree.root
        for node, parent in pairs[1:]:
            assert node.parent == parent

    def test_unknown_grammar_raises(self):
        parser = SourceParser(default_language="cobol")
        with pytest.raises(ParseError):
            parser.parse(SourceFile(id="x.cbl", content="MOVE A TO B."))
        assert parser.supports_language("javascript")
        assert not parser.supports_language("cobol")

    def test_slice_uses_byte_offsets(self, parser):
        code = "// ünïcödé\nfunction naive() { return 'é'; }"
        tree = parser.parse(SourceFile(id="u.js", content=code))
        (_name, node), = list(iter_named_functions(tree))
        assert tree.slice(node) == "function naive() { return 'é'; }"


class TestFunctionNames:
    def test_function_declaration(self, parser):
        assert _names(parser, "function myFunction() { console.log('hello'); }") == ["myFunction"]

    def test_arrow_bound_to_variable(self, parser):
        assert _names(parser, "const myArrowFunction = () => {};") == ["myArrowFunction"]

    def test_function_expression_bound_to_variable(self, parser):
        assert _names(parser, "var handler = function () { return 1; };") == ["handler"]

    def test_class_method(self, parser):
        assert _names(parser, "class MyClass { myMethod() {} }") == ["myMethod"]

    def test_object_property_function(self, parser):
        assert _names(parser, "const myObject = { myFunc: function() {} };") == ["myFunc"]

    def test_object_property_arrow_and_shorthand(self, parser):
        code = "const api = { load: () => 1, save(x) { return x; } };"
        assert _names(parser, code) == ["load", "save"]

    def test_named_function_expression_uses_binding(self, parser):
        assert _names(parser, "const outer = function inner() {};") == ["outer"]

    def test_anonymous_function_expression(self, parser):
        tree = parser.parse(SourceFile(id="a.js", content="setTimeout(function () {}, 10);"))
        functions = list(tree.functions())
        assert len(functions) == 1
        node, parent = functions[0]
        assert resolve_function_name(node, parent) is None

    def test_function_keyword_token_is_not_a_function(self, parser):
        tree = parser.parse(SourceFile(id="a.js", content="function f() {}\nconst g = function () {};"))
        kinds = [node.kind for node, _parent in tree.functions()]
        assert kinds == [NodeKind.FUNCTION_DECLARATION, NodeKind.FUNCTION_EXPRESSION]

    def test_callback_arrow_is_anonymous(self, parser):
        assert _names(parser, "const handler = wrap(() => {});") == []

    def test_computed_and_private_methods_are_anonymous(self, parser):
        code = "class A { [key]() {} #secret() {} visible() {} }"
        assert _names(parser, code, source_id="a.js") == ["visible"]

    def test_destructuring_binding_is_anonymous(self, parser):
        assert _names(parser, "const { a } = () => {};", source_id="a.js") == []

    def test_typescript_forms(self, parser):
        code = (
            "export function typed(a: number): number { return a; }\n"
            "export const generic = <T>(x: T): T => x;\n"
            "class Service { private run(): void {} }\n"
        )
        assert _names(parser, code, source_id="s.ts") == ["typed", "generic", "run"]

    def test_document_order_with_nesting(self, parser):
        code = "function outer() { function inner() {} const deep = () => 1; }"
        assert _names(parser, code) == ["outer", "inner", "deep"]

    def test_function_spans(self, parser):
        code = "function a() {}\nconst b = () => 2;"
        tree = parser.parse(SourceFile(id="f.js", content=code))
        spans = function_spans(tree)
        assert [s.name for s in spans] == ["a", "b"]
        assert spans[0].source_file_id == "f.js"
        assert code[spans[0].start_offset:spans[0].end_offset] == "function a() {}"
        assert code[spans[1].start_offset:spans[1].end_offset] == "() => 2"


class TestCallSites:
    def test_identifier_and_member_calls(self, parser):
        code = "function t() { a(); obj.b(); this.c(); x.y.z(); new D(); (e)(); f()(); }"
        tree = parser.parse(SourceFile(id="t.js", content=code))
        (_name, node), = list(iter_named_functions(tree))
        assert collect_called_names(node) == {"a", "b", "c", "z", "f"}

    def test_closures_are_included(self, parser):
        code = "function t() { items.forEach(() => inner()); const g = function () { deeper(); }; }"
        tree = parser.parse(SourceFile(id="t.js", content=code))
        name, node = next(iter_named_functions(tree))
        assert name == "t"
        assert collect_called_names(node) == {"forEach", "inner", "deeper"}

    def test_computed_member_call_not_tracked(self, parser):
        code = "function t() { handlers[name](); }"
        tree = parser.parse(SourceFile(id="t.js", content=code))
        _name, node = next(iter_named_functions(tree))
        assert collect_called_names(node) == set()
