"""
The intp abstract syntax tree.

Every node carries the file name and line it came from and evaluates
itself against a `Core`. Nodes hold no evaluation state, so one parsed
program may be run any number of times against fresh cores.
"""

from typing import Any, List, Optional, Sequence

from intp.intp_datatypes import NIL, ArityMismatch, IntpError, UnresolvedCall, UserFunction


class Node:
    def __init__(self, filename: Optional[str], lineno: Optional[int]):
        self.filename = filename
        self.lineno = lineno

    def evaluate(self, core) -> Any:
        raise NotImplementedError

    @staticmethod
    def exec_list(nodes: Sequence['Node'], core) -> Any:
        """Evaluates `nodes` in order; the result is the last value, or NIL."""
        value = NIL
        for node in nodes:
            value = node.evaluate(core)
        return value

    def intp_error(self, message: str) -> IntpError:
        return IntpError(message, self.filename, self.lineno)

    def __repr__(self):
        return f"{type(self).__name__}/{self.lineno}"


class RootNode(Node):
    """The whole program. Running it is the public way to evaluate code."""
    def __init__(self, tree: List[Node], filename: Optional[str] = None):
        super().__init__(filename, None)
        self.tree = list(tree)

    def evaluate(self, core=None) -> Any:
        if core is None:
            from intp.intp_core import Core
            core = Core()
        return self.exec_list(self.tree, core)


class LiteralNode(Node):
    def __init__(self, filename, lineno, value):
        super().__init__(filename, lineno)
        self.value = value

    def evaluate(self, core) -> Any:
        core.current_node = self
        return self.value


class StringValue(str):
    """A str whose identity is distinct for every evaluation of a literal."""
    pass


class StringNode(Node):
    """A string literal. Each evaluation hands out a new string object."""
    def __init__(self, filename, lineno, value: str):
        super().__init__(filename, lineno)
        self.value = value

    def evaluate(self, core) -> Any:
        core.current_node = self
        # str slicing and str() return the same object; build a new one.
        return StringValue(self.value)


class VarRefNode(Node):
    def __init__(self, filename, lineno, name: str):
        super().__init__(filename, lineno)
        self.name = name

    def evaluate(self, core) -> Any:
        core.current_node = self
        if core.frame.lvar(self.name):
            return core.frame[self.name]

        def unknown():
            raise UnresolvedCall(self.name, f"unknown method or local variable {self.name}",
                                 self.filename, self.lineno)
        try:
            return core.call_function_or(self.name, [], unknown, call_site=self)
        except ArityMismatch as e:
            if e.positioned:
                raise
            raise e.at(self.filename, self.lineno) from e


class AssignNode(Node):
    def __init__(self, filename, lineno, name: str, value: Node):
        super().__init__(filename, lineno)
        self.name = name
        self.value = value

    def evaluate(self, core) -> Any:
        core.current_node = self
        val = self.value.evaluate(core)
        core.frame[self.name] = val
        return val


class IfNode(Node):
    def __init__(self, filename, lineno, condition: Node, then_body: List[Node],
                 else_body: Optional[List[Node]] = None):
        super().__init__(filename, lineno)
        self.condition = condition
        self.then_body = list(then_body)
        self.else_body = list(else_body) if else_body is not None else None

    def evaluate(self, core) -> Any:
        cond = self.condition.evaluate(core)
        core.current_node = self
        if core.truthy(cond):
            return self.exec_list(self.then_body, core)
        if self.else_body is not None:
            return self.exec_list(self.else_body, core)
        return NIL


class WhileNode(Node):
    def __init__(self, filename, lineno, condition: Node, body: List[Node]):
        super().__init__(filename, lineno)
        self.condition = condition
        self.body = list(body)

    def evaluate(self, core) -> Any:
        while True:
            cond = self.condition.evaluate(core)
            core.current_node = self
            if not core.truthy(cond):
                break
            self.exec_list(self.body, core)
        return NIL


class DefNode(Node):
    def __init__(self, filename, lineno, name: str, params: List[str], body: List[Node]):
        super().__init__(filename, lineno)
        self.name = name
        self.params = list(params)
        self.body = list(body)

    def evaluate(self, core) -> Any:
        core.current_node = self
        func = UserFunction(self.name, self.params, self.body, self.filename, self.lineno)
        core.define_function(self.name, func, definition_site=self)
        return NIL


class FuncallNode(Node):
    def __init__(self, filename, lineno, name: str, args: List[Node]):
        super().__init__(filename, lineno)
        self.name = name
        self.args = list(args)

    def evaluate(self, core) -> Any:
        args = [a.evaluate(core) for a in self.args]
        core.current_node = self
        try:
            return core.call_function(self.name, args, call_site=self)
        except ArityMismatch as e:
            # Errors already located at a deeper call site keep their position.
            if e.positioned:
                raise
            raise e.at(self.filename, self.lineno) from e
