r"""Validate workflow diagrams written in the Mermaid flowchart syntax.

Diagrams are authored as text and laid out in the browser by Mermaid. Parsing
them here first means a typo fails the content build with a line number
instead of shipping a blank or garbled figure.

Only flowcharts are supported: a ``flowchart``/``graph`` header followed by
node and link statements, ``subgraph``/``end`` groupings, and ``classDef``,
``class``, ``style`` and ``linkStyle`` directives.

Example
-------
>>> graph = parse_diagram("flowchart TD\n  A[Start] -->|go| B{Done?}")
>>> [node.id for node in graph.nodes]
['A', 'B']
>>> graph.edges[0].label
'go'
"""

from __future__ import annotations

import dataclasses as dc
import re

from .content.errors import DiagramSyntaxError

HEADER_PATTERN = re.compile(r"^(?:flowchart|graph)(?:\s+(TD|TB|BT|LR|RL))?\s*$")
OTHER_DIAGRAM_PATTERN = re.compile(
    r"^(sequenceDiagram|stateDiagram(?:-v2)?|erDiagram|classDiagram|journey|gantt|pie)\b"
)
NODE_ID_PATTERN = re.compile(r"[A-Za-z0-9_]+")
SUBGRAPH_PATTERN = re.compile(
    r"^subgraph\s+(?:"
    r"(?P<id>[A-Za-z0-9_]+)\s*(?:\[\s*\"?(?P<label>[^\]\"]*)\"?\s*\])?"
    r"|\"(?P<quoted>[^\"]+)\""
    r")\s*$"
)
CLASSDEF_PATTERN = re.compile(r"^classDef\s+([A-Za-z0-9_,]+)\s+(\S.*)$")
CLASS_PATTERN = re.compile(r"^class\s+([A-Za-z0-9_,\s]+?)\s+([A-Za-z0-9_]+)$")
STYLE_PATTERN = re.compile(r"^style\s+([A-Za-z0-9_]+)\s+(\S.*)$")
LINKSTYLE_PATTERN = re.compile(r"^linkStyle\s+(default|[0-9,\s]+?)\s+(\S.*)$")
DIRECTION_PATTERN = re.compile(r"^direction\s+(TD|TB|BT|LR|RL)$")
# A directive keyword must stand alone, so "classDefault --> B" is a link.
KEYWORD_PATTERN = re.compile(r"^(subgraph|classDef|class|style|linkStyle|direction)(?=\s|$)")
CLASS_SUFFIX_PATTERN = re.compile(r":::([A-Za-z0-9_]+)")
INLINE_LINK_PATTERN = re.compile(
    r"\s*(?P<open>--|==|-\.)\s+(?P<label>[^\s>].*?)\s*(?P<close>-->|==>|\.->|---)\s*"
)
LINK_PATTERN = re.compile(
    r"\s*(?P<arrow><?(?:-{2,}>|-\.+->|={2,}>|-{3,}|-\.+-|={3,}|~{3,}|--[ox]))"
    r"(?:\s*\|(?P<label>[^|]*)\|)?\s*"
)

# Longest delimiters first so "((" wins over "(".
NODE_SHAPES: tuple[tuple[str, str, str], ...] = (
    ("(((", ")))", "double-circle"),
    ("((", "))", "circle"),
    ("([", "])", "stadium"),
    ("[[", "]]", "subroutine"),
    ("[(", ")]", "cylinder"),
    ("{{", "}}", "hexagon"),
    ("[/", "/]", "parallelogram"),
    ("[\\", "\\]", "parallelogram-alt"),
    ("[", "]", "rect"),
    ("(", ")", "round"),
    ("{", "}", "rhombus"),
    (">", "]", "flag"),
)


@dc.dataclass(frozen=True, slots=True)
class DiagramNode:
    """A node as first declared; ``label`` defaults to the id."""

    id: str
    label: str
    shape: str
    subgraph: str | None


@dc.dataclass(frozen=True, slots=True)
class DiagramEdge:
    """Directed (or undirected, for ``---``) link between two nodes."""

    source: str
    target: str
    arrow: str
    label: str | None


@dc.dataclass(frozen=True, slots=True)
class Subgraph:
    """Named grouping of nodes."""

    id: str
    label: str
    parent: str | None


@dc.dataclass(frozen=True, slots=True)
class DiagramGraph:
    """Parsed flowchart."""

    direction: str
    nodes: tuple[DiagramNode, ...]
    edges: tuple[DiagramEdge, ...]
    subgraphs: tuple[Subgraph, ...]
    class_defs: dict[str, str]
    node_classes: dict[str, tuple[str, ...]]

    def node(self, node_id: str) -> DiagramNode | None:
        return next((node for node in self.nodes if node.id == node_id), None)


@dc.dataclass(slots=True)
class _NodeRef:
    id: str
    label: str | None
    shape: str | None
    css_class: str | None


class _FlowchartParser:
    """Single-use parser accumulating graph state line by line."""

    def __init__(self) -> None:
        self.direction = "TD"
        self.nodes: dict[str, DiagramNode] = {}
        self.edges: list[DiagramEdge] = []
        self.subgraphs: dict[str, Subgraph] = {}
        self.stack: list[tuple[str, int]] = []
        self.class_defs: dict[str, str] = {}
        self.node_classes: dict[str, list[str]] = {}
        # (line, target, class name or None) checked once all nodes are known.
        self.pending: list[tuple[int, str, str | None]] = []

    def parse(self, source: str) -> DiagramGraph:
        header_seen = False
        for number, raw in enumerate(source.splitlines(), start=1):
            statement = _strip_statement(raw)
            if not statement:
                continue
            if not header_seen:
                self._parse_header(statement, number)
                header_seen = True
                continue
            try:
                self._parse_statement(statement, number)
            except DiagramSyntaxError as exc:
                if not exc.column:
                    raise
                # Columns are counted within the stripped statement.
                indent = len(raw) - len(raw.lstrip())
                raise DiagramSyntaxError(
                    exc.reason, line=exc.line, column=exc.column + indent
                ) from None
        if not header_seen:
            msg = "diagram is empty; expected a 'flowchart' header"
            raise DiagramSyntaxError(msg, line=1)
        if self.stack:
            subgraph_id, opened_at = self.stack[-1]
            msg = f"subgraph '{subgraph_id}' is never closed with 'end'"
            raise DiagramSyntaxError(msg, line=opened_at)
        self._check_pending()
        return DiagramGraph(
            direction=self.direction,
            nodes=tuple(self.nodes.values()),
            edges=tuple(self.edges),
            subgraphs=tuple(self.subgraphs.values()),
            class_defs=dict(self.class_defs),
            node_classes={k: tuple(v) for k, v in self.node_classes.items()},
        )

    def _parse_header(self, statement: str, number: int) -> None:
        match = HEADER_PATTERN.match(statement)
        if match:
            self.direction = match.group(1) or "TD"
            return
        other = OTHER_DIAGRAM_PATTERN.match(statement)
        if other:
            msg = f"unsupported diagram type '{other.group(1)}'; only flowcharts are rendered"
        else:
            msg = f"expected a 'flowchart' header, found {statement!r}"
        raise DiagramSyntaxError(msg, line=number, column=1)

    def _parse_statement(self, statement: str, number: int) -> None:
        if statement == "end":
            if not self.stack:
                msg = "'end' without a matching 'subgraph'"
                raise DiagramSyntaxError(msg, line=number, column=1)
            self.stack.pop()
            return
        directive = KEYWORD_PATTERN.match(statement)
        keyword = directive.group(1) if directive else None
        if keyword == "subgraph":
            self._open_subgraph(statement, number)
        elif keyword == "classDef":
            self._class_def(statement, number)
        elif keyword == "class":
            self._class_assignment(statement, number)
        elif keyword == "style":
            self._style(statement, number)
        elif keyword == "linkStyle":
            self._link_style(statement, number)
        elif keyword == "direction":
            if not self.stack:
                msg = "'direction' is only valid inside a subgraph"
                raise DiagramSyntaxError(msg, line=number, column=1)
            if not DIRECTION_PATTERN.match(statement):
                msg = f"unknown direction in {statement!r}; use TD, TB, BT, LR, or RL"
                raise DiagramSyntaxError(msg, line=number, column=1)
        else:
            self._chain(statement, number)

    def _open_subgraph(self, statement: str, number: int) -> None:
        match = SUBGRAPH_PATTERN.match(statement)
        if not match:
            msg = f"malformed subgraph declaration {statement!r}"
            raise DiagramSyntaxError(msg, line=number, column=1)
        quoted = match.group("quoted")
        subgraph_id = match.group("id") or re.sub(r"\W+", "_", quoted).strip("_")
        label = match.group("label") or quoted or subgraph_id
        if subgraph_id in self.subgraphs:
            msg = f"subgraph '{subgraph_id}' is declared twice"
            raise DiagramSyntaxError(msg, line=number, column=1)
        parent = self.stack[-1][0] if self.stack else None
        self.subgraphs[subgraph_id] = Subgraph(subgraph_id, label.strip(), parent)
        self.stack.append((subgraph_id, number))

    def _class_def(self, statement: str, number: int) -> None:
        match = CLASSDEF_PATTERN.match(statement)
        if not match:
            msg = "classDef needs a class name and style properties"
            raise DiagramSyntaxError(msg, line=number, column=1)
        _check_properties(match.group(2), number)
        for name in match.group(1).split(","):
            if name:
                self.class_defs[name] = match.group(2).strip()

    def _class_assignment(self, statement: str, number: int) -> None:
        match = CLASS_PATTERN.match(statement)
        if not match:
            msg = "class needs node ids followed by a class name"
            raise DiagramSyntaxError(msg, line=number, column=1)
        class_name = match.group(2)
        for target in re.split(r"[,\s]+", match.group(1).strip()):
            if target:
                self.pending.append((number, target, class_name))
                self.node_classes.setdefault(target, []).append(class_name)

    def _style(self, statement: str, number: int) -> None:
        match = STYLE_PATTERN.match(statement)
        if not match:
            msg = "style needs a node id followed by style properties"
            raise DiagramSyntaxError(msg, line=number, column=1)
        _check_properties(match.group(2), number)
        self.pending.append((number, match.group(1), None))

    def _link_style(self, statement: str, number: int) -> None:
        match = LINKSTYLE_PATTERN.match(statement)
        if not match:
            msg = "linkStyle needs link indexes followed by style properties"
            raise DiagramSyntaxError(msg, line=number, column=1)
        _check_properties(match.group(2), number)
        if match.group(1) == "default":
            return
        for index in re.split(r"[,\s]+", match.group(1).strip()):
            if index and int(index) >= len(self.edges):
                msg = f"linkStyle refers to link {index}, but only {len(self.edges)} exist"
                raise DiagramSyntaxError(msg, line=number, column=1)

    def _chain(self, statement: str, number: int) -> None:
        """Parse ``A --> B -->|x| C & D`` style statements."""
        sources, pos = self._node_group(statement, 0, number)
        while True:
            pos = _skip_spaces(statement, pos)
            if pos >= len(statement):
                return
            arrow, label, pos = _link(statement, pos, number)
            targets, pos = self._node_group(statement, pos, number)
            for source in sources:
                for target in targets:
                    self.edges.append(DiagramEdge(source, target, arrow, label))
            sources = targets

    def _node_group(
        self, statement: str, pos: int, number: int
    ) -> tuple[list[str], int]:
        ids: list[str] = []
        while True:
            ref, pos = _node_ref(statement, _skip_spaces(statement, pos), number)
            self._declare(ref, number)
            ids.append(ref.id)
            lookahead = _skip_spaces(statement, pos)
            if lookahead < len(statement) and statement[lookahead] == "&":
                pos = lookahead + 1
                continue
            return ids, pos

    def _declare(self, ref: _NodeRef, number: int) -> None:
        if ref.css_class:
            self.node_classes.setdefault(ref.id, []).append(ref.css_class)
            self.pending.append((number, ref.id, ref.css_class))
        existing = self.nodes.get(ref.id)
        if ref.id in self.subgraphs and ref.label is None:
            return
        if existing is None:
            subgraph = self.stack[-1][0] if self.stack else None
            self.nodes[ref.id] = DiagramNode(
                id=ref.id,
                label=ref.label if ref.label is not None else ref.id,
                shape=ref.shape or "rect",
                subgraph=subgraph,
            )
        elif ref.label is not None:
            self.nodes[ref.id] = dc.replace(
                existing, label=ref.label, shape=ref.shape or existing.shape
            )

    def _check_pending(self) -> None:
        for number, target, class_name in self.pending:
            if target not in self.nodes and target not in self.subgraphs:
                msg = f"'{target}' is styled but never declared as a node"
                raise DiagramSyntaxError(msg, line=number)
            if class_name is not None and class_name not in self.class_defs:
                msg = f"class '{class_name}' is used but has no classDef"
                raise DiagramSyntaxError(msg, line=number)


def _strip_statement(raw: str) -> str:
    """Drop ``%%`` comments, surrounding whitespace, and a trailing ``;``."""
    line = raw.strip()
    if line.startswith("%%"):
        return ""
    return line.rstrip(";").strip()


def _skip_spaces(text: str, pos: int) -> int:
    while pos < len(text) and text[pos].isspace():
        pos += 1
    return pos


def _check_properties(properties: str, number: int) -> None:
    for prop in properties.split(","):
        if ":" not in prop or not prop.split(":", 1)[0].strip():
            msg = f"style property {prop.strip()!r} must look like 'name:value'"
            raise DiagramSyntaxError(msg, line=number)


def _node_ref(statement: str, pos: int, number: int) -> tuple[_NodeRef, int]:
    match = NODE_ID_PATTERN.match(statement, pos)
    if not match:
        found = statement[pos:pos + 12] or "end of line"
        msg = f"expected a node id, found {found!r}"
        raise DiagramSyntaxError(msg, line=number, column=pos + 1)
    node_id = match.group(0)
    pos = match.end()
    label: str | None = None
    shape: str | None = None
    for opener, closer, shape_name in NODE_SHAPES:
        if statement.startswith(opener, pos):
            label, pos = _node_label(statement, pos + len(opener), closer, number)
            shape = shape_name
            break
    css_class: str | None = None
    suffix = CLASS_SUFFIX_PATTERN.match(statement, pos)
    if suffix:
        css_class = suffix.group(1)
        pos = suffix.end()
    return _NodeRef(node_id, label, shape, css_class), pos


def _node_label(
    statement: str, pos: int, closer: str, number: int
) -> tuple[str, int]:
    if statement.startswith('"', pos):
        end_quote = statement.find('"', pos + 1)
        if end_quote == -1:
            msg = "unterminated quoted label"
            raise DiagramSyntaxError(msg, line=number, column=pos + 1)
        label = statement[pos + 1 : end_quote]
        if not statement.startswith(closer, end_quote + 1):
            msg = f"expected '{closer}' after quoted label"
            raise DiagramSyntaxError(msg, line=number, column=end_quote + 2)
        return label, end_quote + 1 + len(closer)
    end = statement.find(closer, pos)
    if end == -1:
        msg = f"node label is missing its closing '{closer}'"
        raise DiagramSyntaxError(msg, line=number, column=pos + 1)
    label = statement[pos:end].strip()
    if not label:
        msg = "node label is empty"
        raise DiagramSyntaxError(msg, line=number, column=pos + 1)
    return label, end + len(closer)


def _link(statement: str, pos: int, number: int) -> tuple[str, str | None, int]:
    inline = INLINE_LINK_PATTERN.match(statement, pos)
    if inline:
        close = inline.group("close")
        arrow = f"-{close}" if inline.group("open") == "-." else close
        return arrow, inline.group("label").strip(), inline.end()
    match = LINK_PATTERN.match(statement, pos)
    if not match:
        found = statement[pos:pos + 12]
        msg = f"expected a link such as '-->', found {found!r}"
        raise DiagramSyntaxError(msg, line=number, column=pos + 1)
    label = match.group("label")
    return match.group("arrow"), label.strip() if label is not None else None, match.end()


def parse_diagram(source: str) -> DiagramGraph:
    """Parse ``source`` into a :class:`DiagramGraph`.

    Parameters
    ----------
    source : str
        Flowchart text, for example ``"flowchart TD\\n A --> B"``.

    Returns
    -------
    DiagramGraph
        Nodes, links, subgraphs, and class assignments in declaration order.

    Raises
    ------
    DiagramSyntaxError
        If the text is empty, is not a flowchart, or contains a statement the
        grammar does not accept. The error carries the 1-based line number.
    """
    return _FlowchartParser().parse(source)


__all__ = [
    "DiagramEdge",
    "DiagramGraph",
    "DiagramNode",
    "Subgraph",
    "parse_diagram",
]
