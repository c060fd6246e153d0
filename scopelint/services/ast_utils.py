from typing import Optional, Tuple

from tree_sitter import Node

Range = Tuple[int, int]

FUNCTION_KINDS: frozenset[str] = frozenset({
    "function_declaration",
    "function_expression",
    "arrow_function",
    "method_definition",
    "generator_function",
    "generator_function_declaration",
})

GENERATOR_KINDS: frozenset[str] = frozenset({
    "generator_function",
    "generator_function_declaration",
})

# Constructs that bound the validity of a function-scoped (`var`) name.
BLOCK_FRAME_KINDS: frozenset[str] = frozenset({
    "statement_block",
    "for_statement",
    "for_in_statement",
    "switch_statement",
    "catch_clause",
    "class_static_block",
})

# Object/class members whose value is the function itself.
_PROPERTY_OWNER_KINDS: frozenset[str] = frozenset({
    "pair",
    "public_field_definition",
    "field_definition",
})


def node_range(node: Node) -> Range:
    return node.start_byte, node.end_byte


def node_text(node: Node) -> str:
    return node.text.decode("utf-8", errors="ignore") if node.text is not None else ""


def has_token(node: Node, token: str) -> bool:
    """True if ``node`` has a direct anonymous child token such as ``async``."""
    return any(not c.is_named and c.type == token for c in node.children)


def is_async(node: Node) -> bool:
    return has_token(node, "async")


def is_generator(node: Node) -> bool:
    if node.type in GENERATOR_KINDS:
        return True
    # Generator methods: `*gen() {}` / `async *gen() {}`
    return node.type == "method_definition" and has_token(node, "*")


def function_body(node: Node) -> Optional[Node]:
    return node.child_by_field_name("body")


def is_empty_function(node: Node) -> bool:
    """A function whose body is a block with no statements (comments allowed)."""
    body = function_body(node)
    if body is None or body.type != "statement_block":
        return False
    return all(c.type == "comment" for c in body.named_children)


def declaration_kind(node: Node) -> Optional[str]:
    """
    ``var``/``let``/``const`` for declaration nodes, including the declaring
    form of ``for (... in/of ...)``; None for anything else.
    """
    if node.type == "variable_declaration":
        return "var"
    if node.type == "lexical_declaration":
        kind = node.child_by_field_name("kind")
        if kind is not None:
            return kind.type
        for c in node.children:
            if c.type in {"let", "const"}:
                return c.type
        return None
    if node.type == "for_in_statement":
        kind = node.child_by_field_name("kind")
        if kind is not None:
            return kind.type
        for c in node.children:
            if c.type in {"var", "let", "const"}:
                return c.type
    return None


def skip_parentheses(node: Node) -> Node:
    """Climb out of any parenthesized expressions wrapping ``node``."""
    current = node
    while current.parent is not None and current.parent.type == "parenthesized_expression":
        current = current.parent
    return current


def _property_owner(node: Node) -> Optional[Node]:
    """The object/class member that owns a function value, if any."""
    parent = node.parent
    if parent is not None and parent.type in _PROPERTY_OWNER_KINDS:
        value = parent.child_by_field_name("value")
        if value is not None and value == node:
            return parent
    return None


def _static_property_name(key: Optional[Node]) -> Optional[str]:
    if key is None:
        return None
    if key.type in {"property_identifier", "identifier", "number"}:
        return node_text(key)
    if key.type == "private_property_identifier":
        return node_text(key)
    if key.type == "string":
        return node_text(key)[1:-1]
    if key.type == "computed_property_name":
        inner = key.named_children[0] if key.named_children else None
        if inner is not None and inner.type in {"string", "number"}:
            return _static_property_name(inner)
        return None
    return None


def get_function_name_with_kind(node: Node, include_async: bool = True) -> str:
    """
    Describe a function-like node, e.g. ``function 'load'``, ``arrow function``,
    ``static method 'create'``, ``getter 'size'`` or ``constructor``.
    """
    tokens: list[str] = []
    owner = node if node.type == "method_definition" else _property_owner(node)
    key = owner.child_by_field_name("name") if owner is not None else None
    if owner is not None and owner.type == "pair":
        key = owner.child_by_field_name("key")
    if owner is not None and owner.type == "public_field_definition" and key is None:
        key = owner.child_by_field_name("property")

    if owner is not None and has_token(owner, "static"):
        tokens.append("static")
    if key is not None and key.type == "private_property_identifier":
        tokens.append("private")
    if include_async and is_async(node):
        tokens.append("async")
    if is_generator(node):
        tokens.append("generator")

    if owner is not None and owner.type in {"method_definition", "pair"}:
        if owner.type == "method_definition" and _static_property_name(key) == "constructor":
            return "constructor"
        if has_token(owner, "get"):
            tokens.append("getter")
        elif has_token(owner, "set"):
            tokens.append("setter")
        else:
            tokens.append("method")
    elif owner is not None:
        tokens.append("method")
    else:
        if node.type == "arrow_function":
            tokens.append("arrow")
        tokens.append("function")

    if owner is not None:
        name = _static_property_name(key)
        if key is not None and key.type == "private_property_identifier":
            tokens.append(name or "")
        elif name is not None:
            tokens.append(f"'{name}'")
        else:
            own_name = node.child_by_field_name("name") if owner is not node else None
            if own_name is not None:
                tokens.append(f"'{node_text(own_name)}'")
    else:
        own_name = node.child_by_field_name("name")
        if own_name is not None:
            tokens.append(f"'{node_text(own_name)}'")

    return " ".join(tokens)


def capitalize_first_letter(text: str) -> str:
    return text[:1].upper() + text[1:]


def get_arrow_token(node: Node) -> Optional[Node]:
    for c in node.children:
        if not c.is_named and c.type == "=>":
            return c
    return None


def get_function_head_range(node: Node) -> Range:
    """
    The part of a function worth pointing at: the ``=>`` token for arrows,
    otherwise from the start of the function (or of the member that owns it)
    up to the opening parenthesis of its parameters.
    """
    if node.type == "arrow_function":
        arrow = get_arrow_token(node)
        if arrow is not None:
            return node_range(arrow)
        return node_range(node)

    owner = _property_owner(node)
    start = owner.start_byte if owner is not None else node.start_byte
    params = node.child_by_field_name("parameters")
    end = params.start_byte if params is not None else node.end_byte
    return start, max(start, end)


def first_token(node: Node) -> Node:
    """The leftmost leaf token of ``node``."""
    current = node
    while current.child_count > 0:
        current = current.children[0]
    return current


def is_type_query_operand(identifier: Node) -> bool:
    """
    True if the identifier is the sole operand of a ``typeof`` unary
    expression. Grouping parentheses around the operand do not change that.
    """
    operand = skip_parentheses(identifier)
    parent = operand.parent
    if parent is None or parent.type != "unary_expression":
        return False
    operator = parent.child_by_field_name("operator")
    return operator is not None and operator.type == "typeof"
