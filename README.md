# minicc

`minicc` is the back half of a small compiler for a C-like language. The
language has fixed-width types: `i8`, `i16`, `i32`, `i64`, `u8`, `u16`, `u32`,
`u64`, `f32`, `f64` and `bool`. You build a syntax tree, and the package turns
it into AT&T-syntax x86-64 assembly text for Linux. That text has a data
section for string literals and a `_start` entry point. The entry point calls
`main` and exits with its result.

The package is pure Python and has no runtime dependencies.

## Modules

### `minicc.syntax_tree`

- `NodeType` lists every node kind: program structure, declarations, types,
  statements, expressions, literals, identifiers and casts.
- `Node` is a dataclass with these fields: `type`, `value`, `children`,
  `int_value`, `float_value`, `bool_value`, `line` and `column`. It supports
  `len()` and iteration over its children. It also has these methods:
  - `add_child`, `insert_child`, `remove_child` and `child`. The first three
    raise `IndexError` for a position out of range; `child` returns `None`.
  - `copy`, which makes a deep copy.
  - `walk`, a pre-order generator, and `visit`.
  - `find_by_type` and `find_by_value`.
  - `validate`, which checks child counts for functions, binary and unary
    operations, and `if`, `while` and `for` statements.
  - `format`, which renders an indented listing.
- Helper functions:
  - `literal_node(node_type, value, int_value, float_value, bool_value)`
  - `node_type_name`
  - `is_literal_node`, `is_statement_node`, `is_expression_node` and
    `is_declaration_node`
  - `print_ast(node, indent)`

### `minicc.symbols`

- `TargetArch` has the members `X86_64`, `ARM64` and `RISCV64`.
- `OptimizationLevel` has the members `NONE`, `SIZE`, `SPEED` and `DEBUG`.
- `VariableInfo` and `FunctionInfo` are the entries of a `SymbolTable`. The
  table has these methods:
  - `enter_scope` and `exit_scope`
  - `add_variable(name, type_name, size, is_param)`. Locals get negative
    stack offsets and parameters positive ones.
  - `add_function`
  - `find_variable`, which returns the most recent entry with that name, and
    `find_function`
  - `format`, which returns a readable listing
- Type helpers:
  - `get_type_size`. Pointers and unknown types are 8 bytes.
  - `get_type_suffix`, which returns `b`, `w`, `l` or `q`.
  - `is_floating_type` and `is_signed_type`.

### `minicc.codegen`

`CodeGenerator(arch, opt_level)` walks a tree with `generate_node` and
collects text in its `output` property. `generate(ast)` returns the complete
program.

It emits code for:

- programs and functions
- variable declarations
- blocks, `if`, `while`, `return` and expression statements
- assignments: `=`, `+=`, `-=` and `*=`
- binary operations: `+`, `-`, `*`, `/`, `%`, `==`, `!=`, `<`, `>`, `<=`
  and `>=`
- unary operations: `-`, `!`, `~`, `&` and `*`
- function calls, array and member access, and the ternary operator
- number, float, string, char and bool literals, and identifiers

A call to `printf` is emitted inline as a `write` system call. Any other node
kind produces nothing except a comment.

With `OptimizationLevel.DEBUG`, the generator writes a comment line for every
node it visits. Without it, `append_comment` writes nothing.

Call `error(message)` to record a message (at most 16) and print it to
standard error. If any messages were recorded, `generate` raises
`CodeGenerationError`, which has the messages in its `errors` attribute.

Lower-level helpers are also public:

- `append_string`, `append_instruction`, `append_label` and `append_comment`
- `add_string_literal` and `string_index`
- `generate_label` and `generate_temp`
- `generate_function_prologue` and `generate_function_epilogue`
- `generate_call_instruction` and `generate_syscall`

## Example

```python
from minicc.codegen import CodeGenerator
from minicc.syntax_tree import Node, NodeType, literal_node

ret = Node(NodeType.RETURN_STATEMENT,
           children=[literal_node(NodeType.NUMBER_LITERAL, "42", 42)])
main = Node(NodeType.FUNCTION, "main",
            children=[Node(NodeType.TYPE, "i32"),
                      Node(NodeType.BLOCK, children=[ret])])
program = Node(NodeType.PROGRAM, children=[main])

print(program.format())
print(CodeGenerator().generate(program))
```

Type helpers:

```python
from minicc.symbols import get_type_size, get_type_suffix

get_type_size("i16")    # 2
get_type_suffix("i32")  # "l"
get_type_size("u8*")    # 8, the size of a pointer
```

## What it does not do

- It does not read source text. It has no tokenizer and no parser, so you
  build syntax trees yourself in Python.
- It has no command-line program.
- It does not assemble, link or archive. You get the assembly text, and you
  write it to a file and run an assembler and linker yourself.
- `TargetArch` only records the target. Every target gets x86-64 code, and
  the optimisation level only affects whether debug comments are written.