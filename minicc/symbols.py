"""Symbol table, target configuration and type helpers for code generation."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

POINTER_SIZE = 8
DEFAULT_TYPE_SIZE = 8
PARAMETER_BASE_OFFSET = 16
PARAMETER_SLOT_SIZE = 8

_TYPE_SIZES: dict[str, int] = {
    "i8": 1,
    "u8": 1,
    "i16": 2,
    "u16": 2,
    "i32": 4,
    "u32": 4,
    "f32": 4,
    "i64": 8,
    "u64": 8,
    "f64": 8,
    "bool": 1,
}

_SIZE_SUFFIXES: dict[int, str] = {1: "b", 2: "w", 4: "l", 8: "q"}

_FLOATING_TYPES = frozenset({"f32", "f64"})


class TargetArch(Enum):
    """Target architectures the compiler can be configured for."""

    X86_64 = "x86_64"
    ARM64 = "arm64"
    RISCV64 = "riscv64"


class OptimizationLevel(Enum):
    """Optimisation levels accepted by the compiler."""

    NONE = "none"
    SIZE = "size"
    SPEED = "speed"
    DEBUG = "debug"


@dataclass
class VariableInfo:
    """Storage information for one variable or parameter."""

    name: str
    type: str
    stack_offset: int
    size: int
    is_parameter: bool = False
    is_global: bool = False


@dataclass
class FunctionInfo:
    """Information recorded for one generated function."""

    name: str
    return_type: str
    stack_size: int = 0
    param_count: int = 0
    is_main: bool = False


@dataclass
class SymbolTable:
    """Variables and functions known to the code generator, with scope tracking."""

    variables: list[VariableInfo] = field(default_factory=list)
    functions: list[FunctionInfo] = field(default_factory=list)
    current_stack_offset: int = 0
    scope_level: int = 0

    def enter_scope(self) -> None:
        """Open a nested scope."""
        self.scope_level += 1

    def exit_scope(self) -> None:
        """Close the current scope, dropping trailing variables recorded with its level."""
        while self.variables and self.variables[-1].size == self.scope_level:
            self.variables.pop()
        self.scope_level -= 1

    def add_variable(
        self, name: str, type_name: str, size: int, is_param: bool = False
    ) -> VariableInfo:
        """Record a variable, giving it a stack offset, and return its entry."""
        if is_param:
            offset = PARAMETER_BASE_OFFSET + len(self.variables) * PARAMETER_SLOT_SIZE
        else:
            self.current_stack_offset -= size
            offset = self.current_stack_offset
        var = VariableInfo(
            name=name,
            type=type_name,
            stack_offset=offset,
            size=size,
            is_parameter=is_param,
            is_global=self.scope_level == 0,
        )
        self.variables.append(var)
        return var

    def add_function(self, name: str, return_type: str) -> FunctionInfo:
        """Record a function and return its entry."""
        func = FunctionInfo(name=name, return_type=return_type, is_main=name == "main")
        self.functions.append(func)
        return func

    def find_variable(self, name: str) -> Optional[VariableInfo]:
        """Return the most recently added variable with this name, or None."""
        return next((v for v in reversed(self.variables) if v.name == name), None)

    def find_function(self, name: str) -> Optional[FunctionInfo]:
        """Return the first function recorded with this name, or None."""
        return next((f for f in self.functions if f.name == name), None)

    def format(self) -> str:
        """Render the table as a human-readable listing."""
        lines = ["=== Symbol Table ===", "Variables:"]
        lines.extend(
            f"  {v.name}: {v.type} (offset: {v.stack_offset}, size: {v.size})"
            for v in self.variables
        )
        lines.append("Functions:")
        lines.extend(
            f"  {f.name}: {f.return_type} (stack: {f.stack_size}, params: {f.param_count})"
            for f in self.functions
        )
        return "\n".join(lines) + "\n"


def get_type_size(type_name: str) -> int:
    """Size in bytes of a type name; pointers and unknown types are 8 bytes."""
    size = _TYPE_SIZES.get(type_name)
    if size is not None:
        return size
    if "*" in type_name:
        return POINTER_SIZE
    return DEFAULT_TYPE_SIZE


def get_type_suffix(type_name: str) -> str:
    """Assembler operand-size suffix for a type."""
    return _SIZE_SUFFIXES.get(get_type_size(type_name), "q")


def is_floating_type(type_name: str) -> bool:
    """True for f32 and f64."""
    return type_name in _FLOATING_TYPES


def is_signed_type(type_name: str) -> bool:
    """True for names starting with 'i' and for the floating types."""
    return type_name.startswith("i") or type_name in _FLOATING_TYPES