import pytest

from minicc.syntax_tree import (
    Node,
    NodeType,
    is_declaration_node,
    is_expression_node,
    is_literal_node,
    is_statement_node,
    literal_node,
    node_type_name,
    print_ast,
)


def _sample_tree() -> Node:
    root = Node(NodeType.PROGRAM)
    func = Node(NodeType.FUNCTION, "main")
    func.add_child(Node(NodeType.TYPE, "i32"))
    body = Node(NodeType.BLOCK)
    ret = Node(NodeType.RETURN_STATEMENT)
    ret.add_child(literal_node(NodeType.NUMBER_LITERAL, "7", int_value=7))
    body.add_child(ret)
    func.add_child(body)
    root.add_child(func)
    return root


def test_add_and_get_children():
    parent = Node(NodeType.BLOCK)
    a = Node(NodeType.IDENTIFIER, "a")
    b = Node(NodeType.IDENTIFIER, "b")
    parent.add_child(a)
    parent.add_child(b)
    assert parent.child(0) is a
    assert parent.child(1) is b
    assert parent.child(2) is None
    assert parent.child(-1) is None
    assert len(parent) == 2


def test_insert_child_positions():
    parent = Node(NodeType.BLOCK)
    parent.add_child(Node(NodeType.IDENTIFIER, "a"))
    parent.add_child(Node(NodeType.IDENTIFIER, "c"))
    parent.insert_child(1, Node(NodeType.IDENTIFIER, "b"))
    parent.insert_child(3, Node(NodeType.IDENTIFIER, "d"))
    assert [c.value for c in parent] == ["a", "b", "c", "d"]


@pytest.mark.parametrize("index", [-1, 2])
def test_insert_child_out_of_range(index):
    parent = Node(NodeType.BLOCK)
    parent.add_child(Node(NodeType.IDENTIFIER, "a"))
    with pytest.raises(IndexError):
        parent.insert_child(index, Node(NodeType.IDENTIFIER, "x"))


def test_remove_child():
    parent = Node(NodeType.BLOCK)
    for name in ["a", "b", "c"]:
        parent.add_child(Node(NodeType.IDENTIFIER, name))
    removed = parent.remove_child(1)
    assert removed.value == "b"
    assert [c.value for c in parent] == ["a", "c"]
    with pytest.raises(IndexError):
        parent.remove_child(2)


def test_copy_is_deep_and_equal():
    tree = _sample_tree()
    clone = tree.copy()
    assert clone == tree
    clone.children[0].value = "other"
    assert tree.children[0].value == "main"
    assert clone.children[0] is not tree.children[0]


def test_walk_preorder():
    kinds = [n.type for n in _sample_tree().walk()]
    assert kinds == [
        NodeType.PROGRAM,
        NodeType.FUNCTION,
        NodeType.TYPE,
        NodeType.BLOCK,
        NodeType.RETURN_STATEMENT,
        NodeType.NUMBER_LITERAL,
    ]


def test_visit_calls_every_node():
    tree = _sample_tree()
    seen = []
    tree.visit(seen.append)
    assert seen == list(tree.walk())


def test_find_by_type_and_value():
    tree = _sample_tree()
    assert tree.find_by_type(NodeType.RETURN_STATEMENT) is tree.children[0].children[1].children[0]
    assert tree.find_by_type(NodeType.WHILE_STATEMENT) is None
    found = tree.find_by_value("i32")
    assert found is not None and found.type == NodeType.TYPE
    assert tree.find_by_value("missing") is None


def test_validate_shapes():
    assert _sample_tree().validate() is True
    binop = Node(NodeType.BINARY_OP, "+")
    binop.add_child(Node(NodeType.IDENTIFIER, "x"))
    assert binop.validate() is False
    binop.add_child(Node(NodeType.IDENTIFIER, "y"))
    assert binop.validate() is True
    wrapper = Node(NodeType.EXPRESSION_STATEMENT)
    wrapper.add_child(Node(NodeType.UNARY_OP, "-"))
    assert wrapper.validate() is False


def test_validate_for_statement_bounds():
    loop = Node(NodeType.FOR_STATEMENT)
    for _ in range(2):
        loop.add_child(Node(NodeType.BLOCK))
    assert loop.validate() is False
    loop.add_child(Node(NodeType.BLOCK))
    assert loop.validate() is True
    loop.add_child(Node(NodeType.BLOCK))
    assert loop.validate() is True
    loop.add_child(Node(NodeType.BLOCK))
    assert loop.validate() is False


def test_format_tree():
    text = _sample_tree().format()
    assert text == (
        "PROGRAM\n"
        "  FUNCTION: main\n"
        "    TYPE: i32\n"
        "    BLOCK\n"
        "      RETURN_STATEMENT\n"
        "        NUMBER_LITERAL: 7 (7)\n"
    )


def test_format_bool_literal_and_indent():
    node = literal_node(NodeType.BOOL_LITERAL, "true", bool_value=True)
    assert node.format(1) == "  BOOL_LITERAL: true (true)\n"


def test_print_ast_writes_format(capsys):
    tree = _sample_tree()
    print_ast(tree, 0)
    assert capsys.readouterr().out == tree.format(0)
    print_ast(None, 0)
    assert capsys.readouterr().out == ""


def test_node_type_name():
    assert node_type_name(NodeType.BINARY_OP) == "BINARY_OP"
    assert node_type_name(NodeType.TYPE_CONVERSION) == "TYPE_CONVERSION"
    assert node_type_name(999) == "UNKNOWN"


def test_classification():
    assert is_literal_node(NodeType.STRING_LITERAL)
    assert not is_literal_node(NodeType.IDENTIFIER)
    assert is_statement_node(NodeType.BLOCK)
    assert is_statement_node(NodeType.CONTINUE_STATEMENT)
    assert not is_statement_node(NodeType.ASSIGNMENT)
    assert is_expression_node(NodeType.IDENTIFIER)
    assert is_expression_node(NodeType.NULL_LITERAL)
    assert is_expression_node(NodeType.SIZEOF)
    assert not is_expression_node(NodeType.ENUM_VALUE)
    assert is_declaration_node(NodeType.PARAMETER_LIST)
    assert not is_declaration_node(NodeType.TYPE)


def test_literal_node_fields():
    node = literal_node(NodeType.FLOAT_LITERAL, "2.5", float_value=2.5)
    assert node.value == "2.5"
    assert node.float_value == 2.5
    assert node.int_value == 0
    assert node.children == []