"""
The intp evaluation context: function table, frame stack and call resolution.
"""
import os
import sys
from types import MappingProxyType
from typing import Any, Callable, Dict, List, Mapping, Optional

from intp.intp_datatypes import (
    TOPLEVEL, DefinitionConflict, Frame, IntpError, UnresolvedCall, UserFunction
)
from intp.intp_host import HostBridge, ReflectiveBridge


class Core:
    """State owned by one evaluation run.

    Calls are resolved in a fixed order: user-defined functions first, then
    routines of the host environment, then a capability of the first
    argument, which becomes the receiver.
    """
    def __init__(self, bridge: Optional[HostBridge] = None, max_depth: int = 64):
        self.bridge: HostBridge = bridge if bridge is not None else ReflectiveBridge()
        self.max_depth = max_depth
        self._ftab: Dict[str, UserFunction] = {}
        self._stack: List[Frame] = [Frame(TOPLEVEL)]
        # Call trace for diagnostics, one entry per user-function activation
        self.call_stack: List[Dict[str, Any]] = []
        self.current_node = None

    @property
    def frame(self) -> Frame:
        return self._stack[-1]

    @property
    def toplevel(self) -> Frame:
        return self._stack[0]

    @property
    def depth(self) -> int:
        return len(self._stack)

    @property
    def functions(self) -> Mapping[str, UserFunction]:
        return MappingProxyType(self._ftab)

    def truthy(self, value: Any) -> bool:
        return self.bridge.truthy(value)

    def _dbg(self, *parts):
        if os.environ.get("INTP_DEBUG"):
            try:
                print("[DBG]", *parts, file=sys.stderr)
            except Exception:
                pass

    def define_function(self, fname: str, func: UserFunction, definition_site=None):
        if fname in self._ftab:
            raise DefinitionConflict(fname,
                                     getattr(definition_site, 'filename', None),
                                     getattr(definition_site, 'lineno', None))
        self._dbg("define", fname, "params", func.params)
        self._ftab[fname] = func

    # --- Resolution tiers ---

    def _push_frame(self, fname: str, call_site):
        if len(self._stack) >= self.max_depth:
            if call_site is not None:
                raise call_site.intp_error("stack level too deep")
            raise IntpError("stack level too deep")
        self._stack.append(Frame(fname))
        self.call_stack.append({
            'name': fname,
            'call_site': (getattr(call_site, 'filename', None), getattr(call_site, 'lineno', None)),
        })
        self._dbg("push", fname, "depth", len(self._stack))

    def _pop_frame(self):
        frame = self._stack.pop()
        if self.call_stack:
            self.call_stack.pop()
        self._dbg("pop", frame.fname, "depth", len(self._stack))

    def call_intp_function_or(self, fname: str, args: List[Any], otherwise: Callable[[], Any], call_site=None) -> Any:
        func = self._ftab.get(fname)
        if func is None:
            return otherwise()
        self._dbg("tier 1", fname, "argc", len(args))
        self._push_frame(fname, call_site)
        result = func.call(self, self.frame, args)
        # Not popped on failure: the run ends and the trace feeds the error report.
        self._pop_frame()
        return result

    def call_host_toplevel_or(self, fname: str, args: List[Any], otherwise: Callable[[], Any]) -> Any:
        env = self.bridge.environment
        if not self.bridge.has_capability(env, fname):
            return otherwise()
        self._dbg("tier 2", fname, "argc", len(args))
        return self.bridge.invoke(env, fname, args)

    def call_receiver_or(self, fname: str, args: List[Any], otherwise: Callable[[], Any]) -> Any:
        if not args or not self.bridge.has_capability(args[0], fname):
            return otherwise()
        recv, rest = args[0], args[1:]
        self._dbg("tier 3", fname, "receiver", type(recv).__name__, "argc", len(rest))
        return self.bridge.invoke(recv, fname, rest)

    # --- Public protocol ---

    def call_function_or(self, fname: str, args: List[Any], otherwise: Callable[[], Any], call_site=None) -> Any:
        """Resolves `fname` through every tier, calling `otherwise` when none matches."""
        return self.call_intp_function_or(
            fname, args,
            lambda: self.call_host_toplevel_or(
                fname, args,
                lambda: self.call_receiver_or(fname, args, otherwise)),
            call_site=call_site)

    def call_function(self, fname: str, args: List[Any], call_site=None) -> Any:
        def undefined():
            raise UnresolvedCall(fname, f"undefined function {fname}",
                                 getattr(call_site, 'filename', None),
                                 getattr(call_site, 'lineno', None))
        return self.call_function_or(fname, list(args), undefined, call_site=call_site)
