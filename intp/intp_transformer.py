"""
Transforms a program document from the front end into intp nodes.

A document is a list of statement mappings, each naming its variant under
`node` and carrying an optional `line` and `file`. Bare scalars stand for
literals.
"""
from typing import Any, List, Optional

from intp.intp_datatypes import ProgramFormatError
from intp.intp_nodes import (
    Node, RootNode, LiteralNode, StringNode, VarRefNode, AssignNode,
    IfNode, WhileNode, DefNode, FuncallNode
)

# Values a literal node may carry; strings become string nodes
SCALARS = (type(None), bool, int, float)


class IntpTransformer:
    def __init__(self, filename: str = '-'):
        self.filename = filename

    def _loc(self, node: dict, line: int = 0, fname: Optional[str] = None):
        return node.get('file', fname or self.filename), node.get('line', line)

    def _fail(self, node, message: str, fname: Optional[str] = None):
        if not isinstance(node, dict) or node.get('line') is None:
            raise ProgramFormatError(message)
        fname, line = self._loc(node, fname=fname)
        raise ProgramFormatError(message, fname, line)

    def _require(self, node: dict, key: str, kind=None, fname: Optional[str] = None):
        if key not in node:
            self._fail(node, f"{node.get('node')} node is missing '{key}'", fname)
        value = node[key]
        if kind is not None and not isinstance(value, kind):
            self._fail(node, f"{node.get('node')} node: '{key}' must be a {kind.__name__}", fname)
        return value

    def _names(self, node: dict, key: str, fname: str) -> List[str]:
        names = self._require(node, key, list, fname)
        for n in names:
            if not isinstance(n, str):
                self._fail(node, f"{node.get('node')} node: '{key}' must hold names, got {n!r}", fname)
        return names

    def _body(self, node: dict, key: str, line: int, fname: str, optional: bool = False) -> Optional[List[Node]]:
        if optional and node.get(key) is None:
            return None
        return self.transform_list(self._require(node, key, list, fname), line, fname)

    def transform_program(self, document: Any) -> RootNode:
        if document is None:
            document = []
        if not isinstance(document, list):
            raise ProgramFormatError("a program must be a list of statements", self.filename, None)
        return RootNode(self.transform_list(document), self.filename)

    def transform_list(self, nodes: List[Any], line: int = 0, fname: Optional[str] = None) -> List[Node]:
        return [self.transform(n, line, fname) for n in nodes]

    def transform(self, node: Any, line: int = 0, fname: Optional[str] = None) -> Node:
        fname = fname or self.filename
        # Scalars are literals in their final form, located at the enclosing position
        if isinstance(node, str):
            return StringNode(fname, line, node)
        if isinstance(node, SCALARS):
            return LiteralNode(fname, line, node)
        if not isinstance(node, dict):
            self._fail(node, f"cannot build a node from {node!r}", fname)

        tag = node.get('node')
        fname, line = self._loc(node, line, fname)

        match tag:
            case 'literal':
                value = node.get('value')
                if isinstance(value, str):
                    return StringNode(fname, line, value)
                if not isinstance(value, SCALARS):
                    self._fail(node, f"literal node: 'value' must be a scalar, got {value!r}", fname)
                return LiteralNode(fname, line, value)
            case 'string':
                return StringNode(fname, line, self._require(node, 'value', str, fname))
            case 'var':
                return VarRefNode(fname, line, self._require(node, 'name', str, fname))
            case 'assign':
                return AssignNode(fname, line, self._require(node, 'name', str, fname),
                                  self.transform(self._require(node, 'value', fname=fname), line, fname))
            case 'if':
                return IfNode(fname, line, self.transform(self._require(node, 'cond', fname=fname), line, fname),
                              self._body(node, 'then', line, fname),
                              self._body(node, 'else', line, fname, optional=True))
            case 'while':
                return WhileNode(fname, line, self.transform(self._require(node, 'cond', fname=fname), line, fname),
                                 self._body(node, 'body', line, fname))
            case 'def':
                return DefNode(fname, line, self._require(node, 'name', str, fname),
                               self._names(node, 'params', fname), self._body(node, 'body', line, fname))
            case 'call':
                args = node.get('args') or []
                if not isinstance(args, list):
                    self._fail(node, "call node: 'args' must be a list", fname)
                return FuncallNode(fname, line, self._require(node, 'name', str, fname),
                                   self.transform_list(args, line, fname))
            case None:
                self._fail(node, f"mapping without a 'node' tag: {node!r}", fname)
            case _:
                self._fail(node, f"unknown node type {tag!r}", fname)

    # --- Reverse direction ---

    def dump(self, node: Any) -> Any:
        """Converts nodes back into a plain document."""
        if isinstance(node, RootNode):
            return [self.dump(n) for n in node.tree]
        if isinstance(node, list):
            return [self.dump(n) for n in node]

        out = {'node': None, 'line': node.lineno}
        if node.filename != self.filename:
            out['file'] = node.filename
        match node:
            case StringNode():
                out.update(node='string', value=node.value)
            case LiteralNode():
                out.update(node='literal', value=node.value)
            case VarRefNode():
                out.update(node='var', name=node.name)
            case AssignNode():
                out.update(node='assign', name=node.name, value=self.dump(node.value))
            case IfNode():
                out.update(node='if', cond=self.dump(node.condition), then=self.dump(node.then_body))
                if node.else_body is not None:
                    out['else'] = self.dump(node.else_body)
            case WhileNode():
                out.update(node='while', cond=self.dump(node.condition), body=self.dump(node.body))
            case DefNode():
                out.update(node='def', name=node.name, params=list(node.params), body=self.dump(node.body))
            case FuncallNode():
                out.update(node='call', name=node.name, args=self.dump(node.args))
            case _:
                raise TypeError(f"cannot dump {type(node).__name__}")
        return out
