"""
placeholders.py — Parser and evaluator for the template placeholder syntax.

Supported directives (no others):

    {{name}}                        literal substitution
    {{#each name}} ... {{/each}}    repeat once per array element
    {{#if name}} ... {{/if}}        include iff the value is truthy

Inside an ``#each`` block, ``{{this}}`` is the current element and, when
the element is a mapping, its keys resolve directly (``{{title}}``).
Lookups walk the scope chain from the innermost element out to the data
root. A reference that resolves to nothing renders its literal token.
"""

import json
import re
from dataclasses import dataclass, field
from typing import Any, Iterator, List, Mapping, Optional, Sequence, Set, Union

from docforge.errors import CompositionError, CompositionErrorKind


TAG_RE = re.compile(r"\{\{\s*(.*?)\s*\}\}", re.DOTALL)
NAME_RE = re.compile(r"^[A-Za-z_][\w.\-]*$")

_MISSING = object()


# =============================================================================
# AST
# =============================================================================

@dataclass
class TextNode:
    text: str


@dataclass
class VarNode:
    name: str
    raw: str  # original token, emitted verbatim when unresolved


@dataclass
class BlockNode:
    kind: str  # "each" | "if"
    name: str
    children: List["Node"] = field(default_factory=list)


Node = Union[TextNode, VarNode, BlockNode]


# =============================================================================
# PARSER
# =============================================================================

def _tokens(source: str) -> Iterator[tuple[str, str, str]]:
    """Yield (kind, value, raw) where kind is text | open | close | var."""
    pos = 0
    for match in TAG_RE.finditer(source):
        if match.start() > pos:
            yield "text", source[pos:match.start()], source[pos:match.start()]
        raw = match.group(0)
        body = match.group(1)
        if body.startswith("#"):
            yield "open", body[1:], raw
        elif body.startswith("/"):
            yield "close", body[1:].strip(), raw
        else:
            yield "var", body, raw
        pos = match.end()
    if pos < len(source):
        yield "text", source[pos:], source[pos:]


def parse(source: str) -> List[Node]:
    """Parse template content into a node tree.

    Raises:
        CompositionError: On unbalanced or unknown block tags.
    """
    root: List[Node] = []
    stack: List[BlockNode] = []

    def current() -> List[Node]:
        return stack[-1].children if stack else root

    for kind, value, raw in _tokens(source):
        if kind == "text":
            current().append(TextNode(value))
        elif kind == "var":
            if NAME_RE.match(value):
                current().append(VarNode(name=value, raw=raw))
            else:
                current().append(TextNode(raw))
        elif kind == "open":
            parts = value.split(None, 1)
            helper = parts[0] if parts else ""
            if helper not in ("each", "if") or len(parts) != 2 or not NAME_RE.match(parts[1].strip()):
                raise CompositionError(
                    CompositionErrorKind.MALFORMED_PLACEHOLDER,
                    f"Unsupported block tag {raw!r}",
                    context={"tag": raw},
                )
            block = BlockNode(kind=helper, name=parts[1].strip())
            current().append(block)
            stack.append(block)
        else:  # close
            if not stack or stack[-1].kind != value:
                raise CompositionError(
                    CompositionErrorKind.MALFORMED_PLACEHOLDER,
                    f"Unexpected closing tag {raw!r}",
                    context={"tag": raw},
                )
            stack.pop()

    if stack:
        raise CompositionError(
            CompositionErrorKind.MALFORMED_PLACEHOLDER,
            f"Unclosed block '{{{{#{stack[-1].kind} {stack[-1].name}}}}}'",
            context={"tag": stack[-1].name},
        )
    return root


def referenced_names(source: str) -> Set[str]:
    """Top-level names referenced by a fragment (outside of each-element scope)."""
    names: Set[str] = set()

    def walk(nodes: Sequence[Node], in_each: bool) -> None:
        for node in nodes:
            if isinstance(node, VarNode):
                if not in_each and node.name != "this":
                    names.add(node.name.split(".")[0])
            elif isinstance(node, BlockNode):
                if not in_each:
                    names.add(node.name.split(".")[0])
                walk(node.children, in_each or node.kind == "each")

    walk(parse(source), False)
    return names


# =============================================================================
# EVALUATOR
# =============================================================================

def format_value(value: Any) -> str:
    """String form of a value as it appears in rendered markup."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (list, tuple)):
        return ",".join(format_value(v) for v in value)
    if isinstance(value, Mapping):
        return json.dumps(value, separators=(",", ":"), sort_keys=True, default=str)
    return str(value)


def is_truthy(value: Any) -> bool:
    if value is None or value is _MISSING:
        return False
    if isinstance(value, (str, list, tuple, dict)):
        return len(value) > 0
    return bool(value)


class Scope:
    """A chain of lookup frames; the innermost frame wins."""

    def __init__(self, data: Mapping[str, Any], parent: Optional["Scope"] = None, this: Any = _MISSING):
        self.data = data
        self.parent = parent
        self.this = this

    def child(self, item: Any) -> "Scope":
        frame = item if isinstance(item, Mapping) else {}
        return Scope(frame, parent=self, this=item)

    def lookup(self, name: str) -> Any:
        head, _, rest = name.partition(".")
        scope: Optional[Scope] = self
        while scope is not None:
            if head == "this" and scope.this is not _MISSING:
                value = scope.this
                break
            if head != "this" and head in scope.data:
                value = scope.data[head]
                break
            scope = scope.parent
        else:
            return _MISSING

        for part in rest.split(".") if rest else []:
            if isinstance(value, Mapping) and part in value:
                value = value[part]
            else:
                return _MISSING
        return value


def render_nodes(nodes: Sequence[Node], scope: Scope) -> str:
    out: List[str] = []
    for node in nodes:
        if isinstance(node, TextNode):
            out.append(node.text)
        elif isinstance(node, VarNode):
            value = scope.lookup(node.name)
            out.append(node.raw if value is _MISSING or value is None else format_value(value))
        elif node.kind == "if":
            if is_truthy(scope.lookup(node.name)):
                out.append(render_nodes(node.children, scope))
        else:
            items = scope.lookup(node.name)
            if isinstance(items, (list, tuple)):
                for item in items:
                    out.append(render_nodes(node.children, scope.child(item)))
    return "".join(out)


def render(source: str, data: Mapping[str, Any]) -> str:
    """Render a fragment against ``data``."""
    return render_nodes(parse(source), Scope(data))
