"""x86-64 assembly generation from a syntax tree."""

from __future__ import annotations

import sys
from collections.abc import Callable
from typing import Optional

from minicc.symbols import (
    OptimizationLevel,
    SymbolTable,
    TargetArch,
    get_type_size,
)
from minicc.syntax_tree import Node, NodeType, node_type_name

MAX_ERRORS = 16
FUNCTION_STACK_SIZE = 64
ARGUMENT_SLOT_SIZE = 8
SYS_EXIT = 60

_COMPARISONS: dict[str, str] = {
    "==": "sete",
    "!=": "setne",
    "<": "setl",
    ">": "setg",
    "<=": "setle",
    ">=": "setge",
}

_ARITHMETIC: dict[str, str] = {
    "+": "add",
    "-": "sub",
    "*": "imul",
}

_COMPOUND_ASSIGNMENTS: dict[str, str] = {
    "+=": "add",
    "-=": "sub",
    "*=": "imul",
}


class CodeGenerationError(Exception):
    """Raised when code generation recorded one or more errors."""

    def __init__(self, errors: list[str]) -> None:
        self.errors = list(errors)
        super().__init__(f"{len(self.errors)} code generation error(s): " + "; ".join(self.errors))


class CodeGenerator:
    """Walks a syntax tree and accumulates assembly text."""

    def __init__(
        self,
        arch: TargetArch = TargetArch.X86_64,
        opt_level: OptimizationLevel = OptimizationLevel.NONE,
    ) -> None:
        self.arch = arch
        self.opt_level = opt_level
        self.debug_info = opt_level is OptimizationLevel.DEBUG
        self.symbols = SymbolTable()
        self.strings: list[str] = []
        self.errors: list[str] = []
        self.label_counter = 0
        self.temp_counter = 0
        self.in_function = False
        self.current_function: Optional[str] = None
        self._chunks: list[str] = []
        self._handlers: dict[NodeType, Callable[[Node], None]] = {
            NodeType.PROGRAM: self._generate_program,
            NodeType.FUNCTION: self._generate_function,
            NodeType.VARIABLE_DECLARATION: self._generate_variable_declaration,
            NodeType.BLOCK: self._generate_block,
            NodeType.IF_STATEMENT: self._generate_if_statement,
            NodeType.WHILE_STATEMENT: self._generate_while_statement,
            NodeType.RETURN_STATEMENT: self._generate_return_statement,
            NodeType.EXPRESSION_STATEMENT: self._generate_expression_statement,
            NodeType.ASSIGNMENT: self._generate_assignment,
            NodeType.BINARY_OP: self._generate_binary_op,
            NodeType.UNARY_OP: self._generate_unary_op,
            NodeType.FUNCTION_CALL: self._generate_function_call,
            NodeType.ARRAY_ACCESS: self._generate_array_access,
            NodeType.MEMBER_ACCESS: self._generate_member_access,
            NodeType.TERNARY: self._generate_ternary,
            NodeType.NUMBER_LITERAL: self._generate_number_literal,
            NodeType.FLOAT_LITERAL: self._generate_number_literal,
            NodeType.STRING_LITERAL: self._generate_string_literal,
            NodeType.CHAR_LITERAL: self._generate_char_literal,
            NodeType.BOOL_LITERAL: self._generate_bool_literal,
            NodeType.IDENTIFIER: self._generate_identifier,
        }

    @property
    def output(self) -> str:
        """The assembly text produced so far."""
        return "".join(self._chunks)

    # Output helpers

    def append_string(self, text: str) -> None:
        """Append raw text to the output."""
        self._chunks.append(text)

    def append_instruction(self, mnemonic: str, operands: Optional[str] = None) -> None:
        """Append one indented instruction line."""
        line = f"    {mnemonic}"
        if operands:
            line += f" {operands}"
        self.append_string(line + "\n")

    def append_label(self, label: str) -> None:
        """Append a label definition."""
        self.append_string(f"{label}:\n")

    def append_comment(self, comment: str) -> None:
        """Append a comment line, only when debug information is enabled."""
        if self.debug_info:
            self.append_string(f"    # {comment}\n")

    # String literals

    def add_string_literal(self, text: str) -> int:
        """Record a string literal and return its index."""
        self.strings.append(text)
        return len(self.strings) - 1

    def string_index(self, text: str) -> int:
        """Return the index of a string literal, recording it if it is new."""
        try:
            return self.strings.index(text)
        except ValueError:
            return self.add_string_literal(text)

    # Labels and temporaries

    def generate_label(self, prefix: str) -> str:
        """Return a fresh label built from the prefix and a running counter."""
        label = f"{prefix}{self.label_counter}"
        self.label_counter += 1
        return label

    def generate_temp(self) -> str:
        """Return a fresh temporary name."""
        temp = f"tmp{self.temp_counter}"
        self.temp_counter += 1
        return temp

    # Dispatch

    def generate_node(self, node: Optional[Node]) -> None:
        """Generate code for one node and, through it, its subtree."""
        if node is None:
            return
        if self.debug_info:
            self.append_comment(f"Node: {node_type_name(node.type)}")
        handler = self._handlers.get(node.type)
        if handler is None:
            self.append_comment("Unsupported node type")
        else:
            handler(node)

    # Declarations

    def _generate_program(self, node: Node) -> None:
        self.append_comment("Program start")
        for child in node.children:
            self.generate_node(child)

    def _generate_function(self, node: Node) -> None:
        if len(node.children) < 2:
            return
        func_name = node.value or ""
        return_type = node.children[0]
        params = node.children[1] if len(node.children) > 2 else None
        body = node.children[-1]

        self.symbols.add_function(func_name, return_type.value or "")
        self.in_function = True
        self.current_function = func_name
        self.symbols.enter_scope()

        self.append_label(func_name)
        self.generate_function_prologue(func_name, FUNCTION_STACK_SIZE)

        if params is not None and params.type == NodeType.PARAMETER_LIST:
            for param in params.children:
                if param.type == NodeType.PARAMETER and param.children:
                    param_type = param.children[0].value or ""
                    param_name = param.value if param.value is not None else "unnamed"
                    self.symbols.add_variable(
                        param_name, param_type, get_type_size(param_type), True
                    )

        self.generate_node(body)
        self.generate_function_epilogue()

        self.symbols.exit_scope()
        self.in_function = False
        self.current_function = None

    def _store_rax(self, name: Optional[str]) -> None:
        if name is None:
            return
        var = self.symbols.find_variable(name)
        if var is not None and self.in_function:
            self.append_instruction("mov", f"%rax, {var.stack_offset}(%rbp)")

    def _generate_variable_declaration(self, node: Node) -> None:
        if not node.children:
            return
        var_name = node.value or ""
        type_name = node.children[0].value or ""
        self.symbols.add_variable(var_name, type_name, get_type_size(type_name), False)
        if len(node.children) > 1:
            self.generate_node(node.children[1])
            self._store_rax(var_name)

    # Statements

    def _generate_block(self, node: Node) -> None:
        self.symbols.enter_scope()
        for child in node.children:
            self.generate_node(child)
        self.symbols.exit_scope()

    def _generate_expression_statement(self, node: Node) -> None:
        if node.children:
            self.generate_node(node.children[0])

    def _generate_if_statement(self, node: Node) -> None:
        if len(node.children) < 2:
            return
        condition, then_stmt = node.children[0], node.children[1]
        else_stmt = node.children[2] if len(node.children) > 2 else None

        else_label = self.generate_label("else_")
        end_label = self.generate_label("endif_")

        self.generate_node(condition)
        self.append_instruction("test", "%rax, %rax")
        self.append_instruction("je", else_label)
        self.generate_node(then_stmt)
        self.append_instruction("jmp", end_label)
        self.append_label(else_label)
        if else_stmt is not None:
            self.generate_node(else_stmt)
        self.append_label(end_label)

    def _generate_while_statement(self, node: Node) -> None:
        if len(node.children) < 2:
            return
        condition, body = node.children[0], node.children[1]

        loop_label = self.generate_label("loop_")
        end_label = self.generate_label("endloop_")

        self.append_label(loop_label)
        self.generate_node(condition)
        self.append_instruction("test", "%rax, %rax")
        self.append_instruction("je", end_label)
        self.generate_node(body)
        self.append_instruction("jmp", loop_label)
        self.append_label(end_label)

    def _generate_return_statement(self, node: Node) -> None:
        if node.children:
            self.generate_node(node.children[0])
        else:
            self.append_instruction("mov", "$0, %rax")
        self.generate_function_epilogue()

    # Expressions

    def _generate_binary_op(self, node: Node) -> None:
        if len(node.children) != 2:
            return
        left, right = node.children
        op = node.value

        self.generate_node(left)
        self.append_instruction("push", "%rax")
        self.generate_node(right)
        self.append_instruction("mov", "%rax, %rbx")
        self.append_instruction("pop", "%rax")

        if op in _ARITHMETIC:
            self.append_instruction(_ARITHMETIC[op], "%rbx, %rax")
        elif op == "/":
            self.append_instruction("cqo")
            self.append_instruction("idiv", "%rbx")
        elif op == "%":
            self.append_instruction("cqo")
            self.append_instruction("idiv", "%rbx")
            self.append_instruction("mov", "%rdx, %rax")
        elif op in _COMPARISONS:
            self.append_instruction("cmp", "%rbx, %rax")
            self.append_instruction(_COMPARISONS[op], "%al")
            self.append_instruction("movzb", "%al, %rax")

    def _generate_unary_op(self, node: Node) -> None:
        if len(node.children) != 1:
            return
        operand = node.children[0]
        op = node.value

        if op == "-":
            self.generate_node(operand)
            self.append_instruction("neg", "%rax")
        elif op == "!":
            self.generate_node(operand)
            self.append_instruction("test", "%rax, %rax")
            self.append_instruction("sete", "%al")
            self.append_instruction("movzb", "%al, %rax")
        elif op == "~":
            self.generate_node(operand)
            self.append_instruction("not", "%rax")
        elif op == "&":
            if operand.type == NodeType.IDENTIFIER and operand.value is not None:
                var = self.symbols.find_variable(operand.value)
                if var is not None and self.in_function:
                    self.append_instruction("lea", f"${var.stack_offset}, %rax")
                    self.append_instruction("add", "%rbp, %rax")
        elif op == "*":
            self.generate_node(operand)
            self.append_instruction("mov", "(%rax), %rax")

    def _generate_assignment(self, node: Node) -> None:
        if len(node.children) != 2:
            return
        target, value = node.children
        op = node.value

        self.generate_node(value)
        mnemonic = _COMPOUND_ASSIGNMENTS.get(op or "")
        if mnemonic is not None:
            self.append_instruction("push", "%rax")
            self.generate_node(target)
            self.append_instruction("pop", "%rbx")
            self.append_instruction(mnemonic, "%rbx, %rax")

        if target.type == NodeType.IDENTIFIER:
            self._store_rax(target.value)

    def _generate_function_call(self, node: Node) -> None:
        func_name = node.value or ""
        if func_name == "printf":
            self._generate_printf(node)
            return

        for arg in reversed(node.children):
            self.generate_node(arg)
            self.append_instruction("push", "%rax")

        self.generate_call_instruction(func_name)

        if node.children:
            self.append_instruction("add", f"${len(node.children) * ARGUMENT_SLOT_SIZE}, %rsp")

    def _generate_array_access(self, node: Node) -> None:
        if len(node.children) != 2:
            return
        array, index = node.children
        self.generate_node(array)
        self.append_instruction("push", "%rax")
        self.generate_node(index)
        self.append_instruction("imul", "$8, %rax")
        self.append_instruction("pop", "%rbx")
        self.append_instruction("add", "%rbx, %rax")
        self.append_instruction("mov", "(%rax), %rax")

    def _generate_member_access(self, node: Node) -> None:
        if len(node.children) != 2:
            return
        self.generate_node(node.children[0])
        if node.value == ".":
            self.append_instruction("add", "$0, %rax")
        elif node.value == "->":
            self.append_instruction("mov", "(%rax), %rax")
            self.append_instruction("add", "$0, %rax")

    def _generate_ternary(self, node: Node) -> None:
        if len(node.children) != 3:
            return
        condition, true_expr, false_expr = node.children

        false_label = self.generate_label("ternary_false_")
        end_label = self.generate_label("ternary_end_")

        self.generate_node(condition)
        self.append_instruction("test", "%rax, %rax")
        self.append_instruction("je", false_label)
        self.generate_node(true_expr)
        self.append_instruction("jmp", end_label)
        self.append_label(false_label)
        self.generate_node(false_expr)
        self.append_label(end_label)

    # Literals

    def _generate_number_literal(self, node: Node) -> None:
        self.append_instruction("mov", f"${node.value}, %rax")

    def _generate_string_literal(self, node: Node) -> None:
        index = self.string_index(node.value or "")
        self.append_instruction("mov", f"$str{index}, %rax")

    def _generate_char_literal(self, node: Node) -> None:
        code = ord(node.value[0]) if node.value else 0
        self.append_instruction("mov", f"${code}, %rax")

    def _generate_bool_literal(self, node: Node) -> None:
        self.append_instruction("mov", "$1, %rax" if node.value == "true" else "$0, %rax")

    def _generate_identifier(self, node: Node) -> None:
        if node.value is None:
            return
        var = self.symbols.find_variable(node.value)
        if var is not None and self.in_function:
            self.append_instruction("mov", f"{var.stack_offset}(%rbp), %rax")

    # Built-ins

    def _generate_printf(self, node: Node) -> None:
        if not node.children:
            return

        if len(node.children) >= 2:
            fmt, arg = node.children[0], node.children[1]
            if fmt.type == NodeType.STRING_LITERAL and fmt.value == "%d":
                self.generate_node(arg)
                num_str = str(arg.int_value)
                index = self.string_index(num_str)
                self.append_instruction("mov", f"$str{index}, %rsi")
                self.append_instruction("mov", f"${len(num_str)}, %rdx")
        else:
            first = node.children[0]
            self.generate_node(first)
            self.append_instruction("mov", "%rax, %rsi")
            if first.type == NodeType.STRING_LITERAL:
                self.append_instruction("mov", f"${len(first.value or '')}, %rdx")

        self.append_instruction("mov", "$1, %rdi")
        self.append_instruction("mov", "$1, %rax")
        self.append_instruction("syscall")

    # Architecture-specific sequences

    def generate_function_prologue(self, func_name: str, stack_size: int) -> None:
        """Emit the frame setup for a function."""
        self.append_instruction("push", "%rbp")
        self.append_instruction("mov", "%rsp, %rbp")
        if stack_size > 0:
            self.append_instruction("sub", f"${stack_size}, %rsp")

    def generate_function_epilogue(self) -> None:
        """Emit the frame teardown and return."""
        self.append_instruction("mov", "%rbp, %rsp")
        self.append_instruction("pop", "%rbp")
        self.append_instruction("ret")

    def generate_call_instruction(self, func_name: str) -> None:
        """Emit a call to the named function."""
        self.append_instruction("call", func_name)

    def generate_syscall(self, syscall_num: int) -> None:
        """Emit a system call with the given number."""
        self.append_instruction("mov", f"${syscall_num}, %rax")
        self.append_instruction("syscall")

    # Whole program

    def generate(self, ast: Optional[Node]) -> str:
        """Generate a complete assembly program and return its text."""
        self.generate_node(ast)

        self.append_string(".global _start\n")
        self.append_string(".section .data\n")
        for index, text in enumerate(self.strings):
            self.append_string(f'str{index}: .ascii "{text}"\n')

        self.append_string(".section .text\n")
        self.append_string("_start:\n")
        self.append_instruction("call", "main")
        self.append_instruction("mov", "%rax, %rdi")
        self.generate_syscall(SYS_EXIT)

        if self.errors:
            raise CodeGenerationError(self.errors)
        return self.output

    def error(self, message: str) -> None:
        """Record a code generation error and report it on standard error."""
        if len(self.errors) >= MAX_ERRORS:
            return
        self.errors.append(message)
        print(f"Code generation error: {message}", file=sys.stderr)