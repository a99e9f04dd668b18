#!/usr/bin/env python3
from analyze import Analyzer
from render_dot import escape_label, walk
from tzo_text import tokenize


def test_escape_label():
    assert escape_label("plain") == '"plain"'
    assert escape_label('a "b"') == '"a \\"b\\""'
    assert escape_label("back\\slash") == '"back\\\\slash"'
    assert escape_label("two\nlines") == '"two\\nlines"'


def test_walk_visits_parents_before_children():
    exprs = Analyzer(tokenize("1 2 + { 3 }")).get_expressions()
    seen = []
    walk(exprs, lambda node, parent: seen.append((node.value, parent.value if parent else None)))
    assert seen == [("+", None), (1, "+"), (2, "+"), ("{}", None), (3, "{}")]


def test_tree_as_dot():
    analyzer = Analyzer(tokenize('1 2 + "x" { 3 pop }'))
    graph = analyzer.get_tree_as_dot()
    assert len(graph.get_nodes()) == 7
    assert len(graph.get_edges()) == 4
    text = graph.to_string()
    assert text.startswith("digraph")
    assert "-0 +1" in text


def test_program_list_as_dot():
    analyzer = Analyzer(tokenize("#a 1 2 +"))
    graph = analyzer.get_program_list_as_dot()
    assert len(graph.get_nodes()) == 3
    assert len(graph.get_edges()) == 2
    assert "push 1" in graph.to_string()
