"""
A pretty-printer for intp values and syntax trees.
"""
import collections.abc

from intp.intp_datatypes import UserFunction
from intp.intp_nodes import (
    RootNode, LiteralNode, StringNode, VarRefNode, AssignNode,
    IfNode, WhileNode, DefNode, FuncallNode
)


class Printer:
    """Formats intp values and nodes into readable source strings."""

    def __init__(self, indent_width=2):
        self._indent_char = " " * indent_width
        self._handlers = self._create_handlers()

    def pformat(self, obj, level=0):
        """Public entry point to format an object."""
        handler = self._get_handler(obj)
        return handler(obj, level)

    def _get_handler(self, obj):
        """Dispatcher to find the correct formatting method."""
        obj_type = type(obj)
        if obj_type in self._handlers:
            return self._handlers[obj_type]
        # Subclasses of the primitives (e.g. evaluated string literals)
        if isinstance(obj, bool): return self._pformat_bool
        if isinstance(obj, str): return self._pformat_str
        if isinstance(obj, collections.abc.Mapping): return self._pformat_dict
        if isinstance(obj, (list, tuple)): return self._pformat_list
        # Default to Python's repr for unknown types
        return lambda o, l: repr(o)

    def _create_handlers(self):
        return {
            str: self._pformat_str,
            int: self._pformat_primitive,
            float: self._pformat_primitive,
            bool: self._pformat_bool,
            type(None): self._pformat_none,
            list: self._pformat_list,
            dict: self._pformat_dict,
            UserFunction: self._pformat_user_function,
            RootNode: self._pformat_root,
            LiteralNode: self._pformat_literal,
            StringNode: self._pformat_string_node,
            VarRefNode: self._pformat_var_ref,
            AssignNode: self._pformat_assign,
            IfNode: self._pformat_if,
            WhileNode: self._pformat_while,
            DefNode: self._pformat_def,
            FuncallNode: self._pformat_funcall,
        }

    # --- Values ---

    def _pformat_primitive(self, obj, level):
        return str(obj)

    def _pformat_str(self, obj, level):
        escaped = str(obj).replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")
        return f'"{escaped}"'

    def _pformat_bool(self, obj, level):
        return 'true' if obj else 'false'

    def _pformat_none(self, obj, level):
        return 'nil'

    def _pformat_list(self, obj, level):
        return "[" + ", ".join(self.pformat(item, level) for item in obj) + "]"

    def _pformat_dict(self, obj, level):
        if not obj:
            return "{}"
        pairs = [f"{self.pformat(k, level)} => {self.pformat(v, level)}" for k, v in obj.items()]
        return "{" + ", ".join(pairs) + "}"

    def _pformat_user_function(self, obj, level):
        return f"#<function {obj.name}({', '.join(obj.params)})>"

    # --- Statements ---

    def _pformat_body(self, nodes, level):
        indent = self._indent_char * (level + 1)
        lines = []
        for node in nodes:
            text = self.pformat(node, level + 1)
            # Nested blocks are already indented past their first line
            first, *rest = text.splitlines() or [""]
            lines.append("\n".join([indent + first] + rest))
        return lines

    def _pformat_block(self, header, sections, level):
        outer = self._indent_char * level
        out = [header]
        for i, (label, nodes) in enumerate(sections):
            if i > 0:
                out.append(f"{outer}{label}")
            out.extend(self._pformat_body(nodes, level))
        out.append(f"{outer}end")
        return "\n".join(out)

    def _pformat_root(self, obj, level):
        return "\n".join(self.pformat(node, level) for node in obj.tree)

    def _pformat_literal(self, obj, level):
        return self.pformat(obj.value, level)

    def _pformat_string_node(self, obj, level):
        return self._pformat_str(obj.value, level)

    def _pformat_var_ref(self, obj, level):
        return obj.name

    def _pformat_assign(self, obj, level):
        return f"{obj.name} = {self.pformat(obj.value, level)}"

    def _pformat_if(self, obj, level):
        sections = [("", obj.then_body)]
        if obj.else_body is not None:
            sections.append(("else", obj.else_body))
        return self._pformat_block(f"if {self.pformat(obj.condition, level)}", sections, level)

    def _pformat_while(self, obj, level):
        return self._pformat_block(f"while {self.pformat(obj.condition, level)}", [("", obj.body)], level)

    def _pformat_def(self, obj, level):
        return self._pformat_block(f"def {obj.name}({', '.join(obj.params)})", [("", obj.body)], level)

    def _pformat_funcall(self, obj, level):
        args = ", ".join(self.pformat(a, level) for a in obj.args)
        return f"{obj.name}({args})"
