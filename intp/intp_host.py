"""
The host environment bridge.

The evaluator never inspects values itself. It asks a `HostBridge` two
questions: does this target expose a capability with this name, and what
does invoking it return. The environment object answers for global
routines; ordinary values answer for receiver-style calls.
"""

import functools
import inspect
import operator
import sys
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional, TextIO

from intp.intp_datatypes import ArityMismatch


def intp_api_method(func):
    """A decorator to explicitly mark host methods as callable from intp code."""
    func._is_intp_api = True
    return func


def _is_api(member) -> bool:
    # The decorator may mark the bound method or the underlying function
    if getattr(member, "_is_intp_api", False):
        return True
    func = getattr(member, "__func__", None)
    return func is not None and getattr(func, "_is_intp_api", False)


class IntpHost:
    """Base class for Python objects acting as an intp host environment.

    Only methods decorated with `@intp_api_method` are visible to programs.
    """
    def __init__(self):
        self.side_effects: List[Dict] = []

    def api_methods(self) -> Dict[str, Callable]:
        found = {}
        for name, member in inspect.getmembers(self):
            if callable(member) and _is_api(member):
                found[name] = member
        return found


class StandardHost(IntpHost):
    """The default environment: a handful of routines a program can call bare."""
    def __init__(self, stdout: Optional[TextIO] = None, stdin: Optional[TextIO] = None):
        super().__init__()
        self._stdout = stdout
        self._stdin = stdin

    def _write(self, text: str):
        self.side_effects.append({'topics': ['stdout'], 'message': text})
        out = self._stdout if self._stdout is not None else sys.stdout
        out.write(text)

    @intp_api_method
    def puts(self, *values):
        if not values:
            self._write("\n")
        for v in values:
            s = _display(v)
            self._write(s if s.endswith("\n") else s + "\n")
        return None

    @intp_api_method
    def print(self, *values):
        self._write("".join(_display(v) for v in values))
        return None

    @intp_api_method
    def p(self, value):
        from intp.intp_printer import Printer
        self._write(Printer().pformat(value) + "\n")
        return value

    @intp_api_method
    def gets(self):
        src = self._stdin if self._stdin is not None else sys.stdin
        line = src.readline()
        return line if line else None

    @intp_api_method
    def format(self, template, *args):
        return template.format(*args)

    @intp_api_method
    def str(self, value): return _display(value)
    @intp_api_method
    def int(self, value): return int(value)
    @intp_api_method
    def float(self, value): return float(value)
    @intp_api_method
    def len(self, value): return len(value)
    @intp_api_method
    def list(self, *items): return list(items)
    @intp_api_method
    def range(self, *args): return list(range(*args))


def _display(value) -> str:
    if value is None:
        return ""
    if value is True:
        return "true"
    if value is False:
        return "false"
    return str(value)


# Operator capabilities: name -> (special method the receiver must define, implementation).
# A special method of None means every value supports the operation. A receiver
# lacking the special method may still answer through a public method of that name.
OPERATOR_CAPABILITIES: Dict[str, tuple] = {
    # arithmetic
    "plus": ("__add__", operator.add),
    "minus": ("__sub__", operator.sub),
    "times": ("__mul__", operator.mul),
    "divide": ("__truediv__", operator.truediv),
    "modulo": ("__mod__", operator.mod),
    "power": ("__pow__", operator.pow),
    "neg": ("__neg__", operator.neg),

    # comparison
    "lt": ("__lt__", operator.lt),
    "le": ("__le__", operator.le),
    "gt": ("__gt__", operator.gt),
    "ge": ("__ge__", operator.ge),
    "eq": (None, operator.eq),
    "ne": (None, operator.ne),

    # logic
    "not": (None, operator.not_),
    "and": (None, lambda a, b: a and b),
    "or": (None, lambda a, b: a or b),

    # containers
    "index": ("__getitem__", operator.getitem),
}


def check_arity(name: str, fn: Callable, args: List[Any]):
    """Raises ArityMismatch when `args` cannot be bound to `fn`'s parameters."""
    try:
        sig = inspect.signature(fn)
    except (TypeError, ValueError):
        # Some builtins expose no signature; let the call itself decide.
        return
    try:
        sig.bind(*args)
    except TypeError:
        params = [p for p in sig.parameters.values()
                  if p.kind in (p.POSITIONAL_ONLY, p.POSITIONAL_OR_KEYWORD)]
        required = [p for p in params if p.default is p.empty]
        variadic = any(p.kind == p.VAR_POSITIONAL for p in sig.parameters.values())
        if variadic:
            want = f"{len(required)}+"
        elif len(required) != len(params):
            want = f"{len(required)}..{len(params)}"
        else:
            want = len(params)
        raise ArityMismatch(name, len(args), want)


class HostBridge(ABC):
    """The two operations the evaluator needs from its surroundings."""

    @abstractmethod
    def has_capability(self, target: Any, name: str) -> bool:
        raise NotImplementedError

    @abstractmethod
    def invoke(self, target: Any, name: str, args: List[Any]) -> Any:
        raise NotImplementedError

    @property
    def environment(self) -> Any:
        """The target used for global routines (tier 2 lookups)."""
        return self

    def truthy(self, value: Any) -> bool:
        return bool(value)


class ReflectiveBridge(HostBridge):
    """Bridge answering capability queries by reflection.

    The environment exposes its `@intp_api_method` methods and anything added
    with `register`. Values expose the operator table and their public
    callable attributes.
    """
    def __init__(self, environment: Optional[IntpHost] = None):
        self._environment = environment if environment is not None else StandardHost()
        self.globals: Dict[str, Callable] = {}
        if isinstance(self._environment, IntpHost):
            self.globals.update(self._environment.api_methods())

    @property
    def environment(self) -> Any:
        return self._environment

    def register(self, name: str, fn: Callable):
        self.globals[name] = fn

    def _lookup(self, target: Any, name: str) -> Optional[Callable]:
        if target is self._environment:
            return self.globals.get(name)
        op = OPERATOR_CAPABILITIES.get(name)
        if op is not None and op[0] is not None and hasattr(type(target), op[0]):
            return functools.partial(op[1], target)
        if name.startswith('_'):
            return None
        member = getattr(target, name, None)
        if callable(member):
            return member
        # Universal operators apply to values that define no method of that name
        if op is not None and op[0] is None:
            return functools.partial(op[1], target)
        return None

    def has_capability(self, target: Any, name: str) -> bool:
        return self._lookup(target, name) is not None

    def invoke(self, target: Any, name: str, args: List[Any]) -> Any:
        fn = self._lookup(target, name)
        if fn is None:
            raise AttributeError(f"{type(target).__name__} has no capability {name!r}")
        check_arity(name, fn, args)
        return fn(*args)
