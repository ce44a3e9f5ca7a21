from intp.intp_datatypes import (
    NIL, IntpError, DefinitionConflict, UnresolvedCall, ArityMismatch, ProgramFormatError,
    Frame, UserFunction,
)
from intp.intp_host import (
    HostBridge, ReflectiveBridge, IntpHost, StandardHost, intp_api_method,
)
from intp.intp_core import Core
from intp.intp_nodes import (
    Node, RootNode, LiteralNode, StringNode, VarRefNode, AssignNode,
    IfNode, WhileNode, DefNode, FuncallNode,
)
from intp.intp_runtime import ProgramRunner, ExecutionResult
