import pytest

from minicc.symbols import (
    FunctionInfo,
    OptimizationLevel,
    SymbolTable,
    TargetArch,
    get_type_size,
    get_type_suffix,
    is_floating_type,
    is_signed_type,
)


@pytest.mark.parametrize(
    "type_name, size",
    [
        ("i8", 1),
        ("u8", 1),
        ("i16", 2),
        ("u16", 2),
        ("i32", 4),
        ("u32", 4),
        ("f32", 4),
        ("i64", 8),
        ("u64", 8),
        ("f64", 8),
        ("bool", 1),
        ("i32*", 8),
        ("whatever", 8),
    ],
)
def test_type_sizes(type_name, size):
    assert get_type_size(type_name) == size


@pytest.mark.parametrize(
    "type_name, suffix",
    [("i8", "b"), ("u16", "w"), ("i32", "l"), ("f64", "q"), ("bool", "b"), ("char*", "q")],
)
def test_type_suffixes(type_name, suffix):
    assert get_type_suffix(type_name) == suffix


def test_floating_types():
    assert is_floating_type("f32")
    assert is_floating_type("f64")
    assert not is_floating_type("i32")
    assert not is_floating_type("float")


def test_signed_types():
    assert is_signed_type("i8")
    assert is_signed_type("i64")
    assert is_signed_type("f32")
    assert not is_signed_type("u32")
    assert not is_signed_type("bool")


def test_enum_labels():
    assert TargetArch("x86_64") is TargetArch.X86_64
    assert TargetArch.RISCV64.value == "riscv64"
    assert OptimizationLevel("debug") is OptimizationLevel.DEBUG
    with pytest.raises(ValueError):
        TargetArch("mips")


def test_local_variables_grow_downwards():
    table = SymbolTable()
    table.enter_scope()
    a = table.add_variable("a", "i32", 4)
    b = table.add_variable("b", "i64", 8)
    assert a.stack_offset == -a.size
    assert b.stack_offset == a.stack_offset - b.size
    assert table.current_stack_offset == b.stack_offset
    assert not a.is_global and not a.is_parameter


def test_parameter_offsets_are_positive():
    table = SymbolTable()
    table.enter_scope()
    first = table.add_variable("x", "i64", 8, True)
    second = table.add_variable("y", "i64", 8, True)
    assert first.stack_offset == 16
    assert second.stack_offset - first.stack_offset == 8
    assert table.current_stack_offset == 0
    assert first.is_parameter


def test_global_flag_at_scope_zero():
    table = SymbolTable()
    var = table.add_variable("g", "i32", 4)
    assert var.is_global


def test_find_variable_prefers_latest():
    table = SymbolTable()
    table.add_variable("x", "i32", 4)
    table.add_variable("x", "i64", 8)
    found = table.find_variable("x")
    assert found is table.variables[-1]
    assert found.type == "i64"
    assert table.find_variable("missing") is None


def test_functions():
    table = SymbolTable()
    main = table.add_function("main", "i32")
    helper = table.add_function("helper", "void")
    assert main.is_main
    assert not helper.is_main
    assert table.find_function("helper") is helper
    assert table.find_function("nope") is None
    assert main == FunctionInfo("main", "i32", is_main=True)


def test_scope_levels():
    table = SymbolTable()
    table.enter_scope()
    table.enter_scope()
    assert table.scope_level == 2
    table.exit_scope()
    table.exit_scope()
    assert table.scope_level == 0


def test_exit_scope_drops_trailing_entries_matching_level():
    table = SymbolTable()
    table.enter_scope()
    table.add_variable("keep", "i32", 4)
    table.add_variable("drop", "i8", 1)
    table.exit_scope()
    assert [v.name for v in table.variables] == ["keep"]


def test_exit_scope_keeps_entries_with_other_sizes():
    table = SymbolTable()
    table.enter_scope()
    table.add_variable("a", "i64", 8)
    table.exit_scope()
    assert [v.name for v in table.variables] == ["a"]


def test_format_listing():
    table = SymbolTable()
    table.enter_scope()
    table.add_variable("a", "i32", 4)
    table.add_function("main", "i32")
    text = table.format()
    lines = text.splitlines()
    assert lines[0] == "=== Symbol Table ==="
    assert lines[1] == "Variables:"
    assert lines[2] == "  a: i32 (offset: -4, size: 4)"
    assert lines[3] == "Functions:"
    assert lines[4] == "  main: i32 (stack: 0, params: 0)"
    assert text.endswith("\n")