#!/usr/bin/env python3
import pydot

from exceptions import RenderError
from instructions import PushNumber, PushString, InvokeFunction, quote_string

NODE_COLORS = {
    "number_literal": "#AED6F1",
    "string_literal": "#A9DFBF",
    "function": "#F9E79F",
    "block": "#D7BDE2",
}


def escape_label(text) -> str:
    """Quote a label for dot, escaping backslashes, quotes and newlines."""
    text = str(text).replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")
    return f'"{text}"'


def walk(expressions, visit):
    """Depth-first, parents before children. Calls visit(node, parent)."""
    stack = [(node, None) for node in reversed(expressions)]
    while stack:
        node, parent = stack.pop()
        visit(node, parent)
        for child in reversed(node.children):
            stack.append((child, node))


def _expression_label(node) -> str:
    if node.type == "string_literal":
        text = quote_string(node.value)
    else:
        text = str(node.value)
    text += f"\n[-{node.consumes} +{node.produces}]"
    if node.label is not None:
        text = f"#{node.label}\n" + text
    return escape_label(text)


def expressions_to_dot(expressions) -> pydot.Dot:
    graph = pydot.Dot("syntax_tree", graph_type="digraph", rankdir="TB", fontname="Helvetica")
    ids = {}

    def visit(node, parent):
        node_id = f"n{len(ids)}"
        ids[id(node)] = node_id
        graph.add_node(pydot.Node(
            node_id,
            label=_expression_label(node),
            shape="box" if node.children else "ellipse",
            style="filled",
            fillcolor=NODE_COLORS.get(node.type, "#FFFFFF"),
            fontname="Helvetica",
        ))
        if parent is not None:
            graph.add_edge(pydot.Edge(ids[id(parent)], node_id))

    walk(expressions, visit)
    return graph


def _instruction_label(index, instr) -> str:
    if isinstance(instr, PushNumber):
        text = f"push {instr.value!r}"
    elif isinstance(instr, PushString):
        text = f"push {quote_string(instr.value)}"
    elif isinstance(instr, InvokeFunction):
        text = instr.function_name
    else:
        text = repr(instr)
    text = f"{index}: {text}"
    if instr.label is not None:
        text = f"#{instr.label}\n" + text
    return escape_label(text)


def program_list_to_dot(instructions) -> pydot.Dot:
    graph = pydot.Dot("program_list", graph_type="digraph", rankdir="LR", fontname="Helvetica")
    for i, instr in enumerate(instructions):
        graph.add_node(pydot.Node(f"i{i}", label=_instruction_label(i, instr), shape="box", fontname="Helvetica"))
        if i > 0:
            graph.add_edge(pydot.Edge(f"i{i - 1}", f"i{i}"))
    return graph


def write_graph(graph: pydot.Dot, path, fmt="raw"):
    """Write graph to path; any format but 'raw' runs the Graphviz 'dot' binary."""
    try:
        graph.write(path, format=fmt)
    except AssertionError as e:
        # pydot reports a non-zero exit from 'dot' through assert
        raise RenderError(f"Graphviz could not render {path}: {e}") from e
