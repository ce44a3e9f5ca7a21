# intp_runtime.py

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Literal, Optional, Tuple, Union

from intp.intp_core import Core
from intp.intp_datatypes import (
    ArityMismatch, DefinitionConflict, IntpError, ProgramFormatError, UnresolvedCall
)
from intp.intp_host import HostBridge, IntpHost, ReflectiveBridge, StandardHost
from intp.intp_nodes import RootNode
from intp.intp_serialize import deserialize
from intp.intp_transformer import IntpTransformer


# ===================================================================
# Program Execution
# ===================================================================

Location = Tuple[Optional[str], Optional[int]]

@dataclass
class ExecutionResult:
    """The structured result of a program run."""
    status: Literal['success', 'error']
    value: Any = None
    error_message: Optional[str] = None
    error_kind: Optional[str] = None
    error_location: Optional[Location] = None
    stacktrace: List[str] = field(default_factory=list)
    side_effects: List[Dict] = field(default_factory=list)

    def format_error(self) -> str:
        """Formats the error with its kind and the intp stacktrace, if any."""
        if self.status != 'error':
            return ""
        msg = f"{self.error_kind}: {self.error_message or 'Unknown error'}"
        if self.stacktrace:
            msg += "\nintp stacktrace: " + " <- ".join(self.stacktrace)
        return msg


class ProgramRunner:
    """Loads, transforms, and executes intp programs."""

    def __init__(self, host: Optional[IntpHost] = None, bridge: Optional[HostBridge] = None,
                 filename: str = '-', max_depth: int = 64):
        self.host = host if host is not None else StandardHost()
        self.bridge = bridge if bridge is not None else ReflectiveBridge(self.host)
        self.filename = filename
        self.max_depth = max_depth
        # The core of the most recent run, kept for inspection
        self.core: Optional[Core] = None

    def _kind_of(self, e: Exception) -> str:
        match e:
            case DefinitionConflict():
                return "DefinitionConflict"
            case UnresolvedCall():
                return "UnresolvedCall"
            case ArityMismatch():
                return "ArityMismatch"
            case ProgramFormatError():
                return "ProgramFormatError"
            case IntpError():
                return "IntpError"
            case _:
                return "EnvironmentFailure"

    def _format_runtime_error(self, e: Exception, node) -> Tuple[str, Optional[Location]]:
        if isinstance(e, IntpError):
            loc = (e.filename, e.lineno) if e.positioned else None
            return str(e), loc
        # Host failures propagate unchanged; the report locates them at the node being evaluated.
        msg = f"{type(e).__name__}: {e}"
        loc = None
        lineno = getattr(node, 'lineno', None)
        if lineno is not None:
            loc = (node.filename, lineno)
            msg = f"in {node.filename}:{lineno}: {msg}"
        return msg, loc

    def _format_stacktrace(self, core: Core) -> List[str]:
        frames = []
        for entry in reversed(core.call_stack):
            fname, line = entry.get('call_site') or (None, None)
            where = f" (called at {fname}:{line})" if line is not None else ""
            frames.append(f"{entry['name']}{where}")
        return frames

    def _side_effects(self) -> List[Dict]:
        return getattr(self.host, 'side_effects', [])

    def load(self, source: Union[str, bytes], fmt: Optional[str] = None) -> RootNode:
        """Reads a program document and builds its tree."""
        document = deserialize(source, fmt=fmt, filename=self.filename)
        return IntpTransformer(self.filename).transform_program(document)

    def run(self, program: Union[RootNode, list, str, bytes], fmt: Optional[str] = None) -> ExecutionResult:
        """The main entry point to execute a program."""
        self._side_effects().clear()
        try:
            if isinstance(program, (str, bytes)):
                program = self.load(program, fmt)
            elif isinstance(program, list):
                program = IntpTransformer(self.filename).transform_program(program)
        except ProgramFormatError as e:
            return ExecutionResult(
                status='error',
                error_message=str(e),
                error_kind=self._kind_of(e),
                error_location=(e.filename, e.lineno) if e.positioned else None,
                side_effects=list(self._side_effects()),
            )

        core = Core(self.bridge, max_depth=self.max_depth)
        self.core = core
        try:
            value = program.evaluate(core)
        except Exception as e:
            msg, loc = self._format_runtime_error(e, core.current_node)
            return ExecutionResult(
                status='error',
                error_message=msg,
                error_kind=self._kind_of(e),
                error_location=loc,
                stacktrace=self._format_stacktrace(core),
                side_effects=list(self._side_effects()),
            )
        return ExecutionResult(status='success', value=value, side_effects=list(self._side_effects()))

    def run_file(self, path: Union[str, Path], fmt: Optional[str] = None) -> ExecutionResult:
        p = Path(path)
        self.filename = str(path)
        return self.run(p.read_text(encoding="utf-8"), fmt)
