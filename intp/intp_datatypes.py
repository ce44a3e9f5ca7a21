"""
Defines the core data types for the intp language runtime.

This module provides the error hierarchy, the activation record (`Frame`)
and the callable entity created by a `def` statement (`UserFunction`).
Values themselves are plain Python objects owned by the host.
"""

from typing import Any, Dict, List, Optional

# The value produced by statements that yield nothing (empty sequences,
# an `if` without a taken branch, `while`).
NIL = None

TOPLEVEL = '(toplevel)'


# =================================================================
# Errors
# =================================================================

class IntpError(Exception):
    """Base class for every failure raised by the evaluator itself."""
    def __init__(self, message: str, filename: Optional[str] = None, lineno: Optional[int] = None):
        self.message = message
        self.filename = filename
        self.lineno = lineno
        super().__init__(self._render())

    def _render(self) -> str:
        if self.lineno is None:
            return self.message
        return f"in {self.filename}:{self.lineno}: {self.message}"

    @property
    def positioned(self) -> bool:
        return self.lineno is not None


class DefinitionConflict(IntpError):
    def __init__(self, identifier: str, filename: Optional[str] = None, lineno: Optional[int] = None):
        self.identifier = identifier
        super().__init__(f"function {identifier} defined twice", filename, lineno)


class UnresolvedCall(IntpError):
    """No resolution tier matched a call or a bare identifier."""
    def __init__(self, identifier: str, message: str, filename: Optional[str] = None, lineno: Optional[int] = None):
        self.identifier = identifier
        super().__init__(message, filename, lineno)


class ArityMismatch(IntpError):
    def __init__(self, identifier: str, got: int, want: Any,
                 filename: Optional[str] = None, lineno: Optional[int] = None):
        self.identifier = identifier
        self.got = got
        self.want = want
        super().__init__(f"wrong # of arg for {identifier}() ({got} for {want})", filename, lineno)

    def at(self, filename: Optional[str], lineno: Optional[int]) -> 'ArityMismatch':
        """Returns a copy of this error located at the given call site."""
        return ArityMismatch(self.identifier, self.got, self.want, filename, lineno)


class ProgramFormatError(IntpError):
    """A program document handed over by the front end is malformed."""
    pass


# =================================================================
# Runtime structures
# =================================================================

class Frame:
    """One function activation: its name and its local variables.

    Frames have no parent link. A variable missing from the active frame
    is not visible from anywhere else.
    """
    def __init__(self, fname: str):
        self.fname = fname
        self._lvars: Dict[str, Any] = {}

    def lvar(self, name: str) -> bool:
        return name in self._lvars

    def __getitem__(self, name: str) -> Any:
        return self._lvars[name]

    def __setitem__(self, name: str, value: Any):
        self._lvars[name] = value

    def __contains__(self, name: str) -> bool:
        return self.lvar(name)

    def bindings(self) -> Dict[str, Any]:
        return dict(self._lvars)

    def __repr__(self):
        return f"<Frame {self.fname} {sorted(self._lvars)}>"


class UserFunction:
    """A function registered by a `def` statement: fixed parameters and a body."""
    def __init__(self, name: str, params: List[str], body: List[Any],
                 filename: Optional[str] = None, lineno: Optional[int] = None):
        self.name = name
        self.params = list(params)
        self.body = list(body)
        self.filename = filename
        self.lineno = lineno

    @property
    def arity(self) -> int:
        return len(self.params)

    def call(self, core, frame: Frame, args: List[Any]) -> Any:
        """Binds `args` into `frame` and evaluates the body against `core`."""
        if len(args) != len(self.params):
            raise ArityMismatch(frame.fname, len(args), len(self.params))
        for param, value in zip(self.params, args):
            frame[param] = value
        from intp.intp_nodes import Node
        return Node.exec_list(self.body, core)

    def __repr__(self):
        return f"<UserFunction {self.name}({', '.join(self.params)})>"
