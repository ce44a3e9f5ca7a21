import pytest

from intp.intp_core import Core
from intp.intp_datatypes import NIL, ArityMismatch, DefinitionConflict, UnresolvedCall
from intp.intp_host import IntpHost, ReflectiveBridge, intp_api_method
from intp.intp_nodes import (
    RootNode, LiteralNode, StringNode, VarRefNode, AssignNode,
    IfNode, WhileNode, DefNode, FuncallNode
)

F = "test.intp"


# --- Node builders ---

def lit(v, line=1): return LiteralNode(F, line, v)
def s(v, line=1): return StringNode(F, line, v)
def var(name, line=1): return VarRefNode(F, line, name)
def assign(name, value, line=1): return AssignNode(F, line, name, value)
def call(name, *args, line=1): return FuncallNode(F, line, name, list(args))
def defn(name, params, body, line=1): return DefNode(F, line, name, params, body)


class Recorder(IntpHost):
    def __init__(self):
        super().__init__()
        self.ticks = 0
        self.seen = []

    @intp_api_method
    def tick(self):
        self.ticks += 1
        return self.ticks

    @intp_api_method
    def collect(self, value):
        self.seen.append(value)
        return value

    @intp_api_method
    def gather(self, *values):
        return list(values)


@pytest.fixture
def host():
    return Recorder()


@pytest.fixture
def core(host):
    return Core(ReflectiveBridge(host))


def test_exec_list_returns_last_value_or_nil(core):
    from intp.intp_nodes import Node
    assert Node.exec_list([lit(1), lit(2), lit(3)], core) == 3
    assert Node.exec_list([], core) is NIL


def test_literal_returns_embedded_value(core):
    marker = object()
    assert lit(marker).evaluate(core) is marker


def test_string_literal_yields_distinct_equal_strings(core):
    node = s("hello")
    values = [node.evaluate(core) for _ in range(5)]
    assert all(v == "hello" for v in values)
    assert len({id(v) for v in values}) == 5
    assert node.value == "hello"


def test_string_literal_in_loop_body_produces_fresh_instances(core, host):
    prog = RootNode([
        assign("i", lit(0)),
        WhileNode(F, 2, call("lt", var("i"), lit(4)), [
            call("collect", s("abc")),
            assign("i", call("plus", var("i"), lit(1))),
        ]),
    ])
    prog.evaluate(core)
    assert host.seen == ["abc"] * 4
    assert len({id(v) for v in host.seen}) == 4


def test_assignment_binds_in_active_frame_and_returns_value(core):
    assert assign("x", lit(7)).evaluate(core) == 7
    assert core.frame["x"] == 7
    assert var("x").evaluate(core) == 7


def test_variable_reference_falls_back_to_zero_argument_call(core, host):
    assert var("tick").evaluate(core) == 1
    assert host.ticks == 1


def test_variable_reference_prefers_local_over_function(core, host):
    assign("tick", lit("local")).evaluate(core)
    assert var("tick").evaluate(core) == "local"
    assert host.ticks == 0


def test_unknown_variable_names_identifier_and_position(core):
    with pytest.raises(UnresolvedCall) as exc:
        var("nope", line=9).evaluate(core)
    assert exc.value.identifier == "nope"
    assert exc.value.lineno == 9
    assert "unknown method or local variable nope" in str(exc.value)
    assert str(exc.value).startswith(f"in {F}:9:")


def test_if_branches_and_missing_else(core):
    then_else = IfNode(F, 1, lit(True), [lit("yes")], [lit("no")])
    assert then_else.evaluate(core) == "yes"
    assert IfNode(F, 1, lit(0), [lit("yes")], [lit("no")]).evaluate(core) == "no"
    assert IfNode(F, 1, lit(None), [lit("yes")]).evaluate(core) is NIL


def test_if_with_empty_taken_branch_is_nil(core):
    assert IfNode(F, 1, lit(1), [], [lit("no")]).evaluate(core) is NIL


def test_truthiness_is_delegated_to_bridge(host):
    class NilFalseBridge(ReflectiveBridge):
        def truthy(self, value):
            return value is not None and value is not False

    core = Core(NilFalseBridge(host))
    assert IfNode(F, 1, lit(0), [lit("zero is true")], [lit("no")]).evaluate(core) == "zero is true"


@pytest.mark.parametrize("k", [0, 1, 100])
def test_while_runs_body_exactly_k_times(core, host, k):
    loop = WhileNode(F, 2, call("lt", var("i"), lit(k)), [
        call("tick"),
        assign("i", call("plus", var("i"), lit(1))),
    ])
    result = RootNode([assign("i", lit(0)), loop]).evaluate(core)
    assert result is NIL
    assert host.ticks == k
    assert core.frame["i"] == k


def test_while_terminates_when_condition_turns_false(core):
    prog = RootNode([
        assign("x", lit(1)),
        WhileNode(F, 1, var("x"), [assign("x", lit(0))]),
    ])
    assert prog.evaluate(core) is NIL
    assert core.toplevel["x"] == 0


def test_def_registers_function_and_returns_nil(core):
    assert defn("f", ["a"], [var("a")]).evaluate(core) is NIL
    assert "f" in core.functions
    assert core.functions["f"].params == ["a"]


def test_def_twice_is_a_definition_conflict(core):
    defn("f", [], [lit(1)], line=1).evaluate(core)
    with pytest.raises(DefinitionConflict) as exc:
        defn("f", [], [lit(2)], line=5).evaluate(core)
    assert exc.value.identifier == "f"
    assert exc.value.lineno == 5
    assert "function f defined twice" in str(exc.value)


def test_funcall_evaluates_arguments_in_caller_frame(core):
    prog = RootNode([
        defn("ident", ["v"], [var("v")]),
        assign("v", lit("caller")),
        call("ident", var("v")),
    ])
    assert prog.evaluate(core) == "caller"


def test_arguments_evaluated_left_to_right(core, host):
    call("collect", call("tick")).evaluate(core)
    result = call("gather", call("tick"), call("tick"), call("tick")).evaluate(core)
    assert result == [2, 3, 4]


def test_root_node_uses_fresh_core_when_none_given():
    prog = RootNode([defn("f", [], [lit(1)]), call("f")])
    assert prog.evaluate() == 1
    # A second run gets its own function table, so no conflict
    assert prog.evaluate() == 1


def test_repr_shows_class_and_line():
    assert repr(call("f", line=12)) == "FuncallNode/12"


def test_arity_mismatch_points_at_call_site(core):
    prog = RootNode([
        defn("add", ["a", "b"], [call("plus", var("a"), var("b"))], line=1),
        call("add", lit(2), line=7),
    ])
    with pytest.raises(ArityMismatch) as exc:
        prog.evaluate(core)
    assert exc.value.lineno == 7
    assert exc.value.filename == F
    assert "add" in str(exc.value)
    assert "1 for 2" in str(exc.value)


def test_arity_mismatch_via_variable_reference_is_positioned(core):
    defn("needs_one", ["a"], [var("a")]).evaluate(core)
    with pytest.raises(ArityMismatch) as exc:
        var("needs_one", line=4).evaluate(core)
    assert exc.value.lineno == 4
    assert "0 for 1" in str(exc.value)
