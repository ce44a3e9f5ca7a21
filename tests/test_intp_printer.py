from intp.intp_datatypes import UserFunction
from intp.intp_nodes import StringValue
from intp.intp_printer import Printer
from intp.intp_transformer import IntpTransformer


def test_values():
    p = Printer()
    assert p.pformat(None) == "nil"
    assert p.pformat(True) == "true"
    assert p.pformat(3) == "3"
    assert p.pformat(1.5) == "1.5"
    assert p.pformat('say "hi"\n') == '"say \\"hi\\"\\n"'
    assert p.pformat(StringValue("x")) == '"x"'
    assert p.pformat([1, "a", None]) == '[1, "a", nil]'
    assert p.pformat({"k": 1}) == '{"k" => 1}'
    assert p.pformat({}) == "{}"
    assert p.pformat(UserFunction("add", ["a", "b"], [])) == "#<function add(a, b)>"


def test_program_renders_as_source():
    doc = [
        {"node": "def", "name": "add", "params": ["a", "b"], "body": [
            {"node": "call", "name": "plus", "args": [{"node": "var", "name": "a"}, {"node": "var", "name": "b"}]},
        ]},
        {"node": "assign", "name": "x", "value": 1},
        {"node": "while", "cond": {"node": "var", "name": "x"}, "body": [
            {"node": "if", "cond": True,
             "then": [{"node": "assign", "name": "x", "value": 0}],
             "else": [{"node": "call", "name": "puts", "args": ["no"]}]},
        ]},
    ]
    root = IntpTransformer().transform_program(doc)
    assert Printer().pformat(root) == "\n".join([
        "def add(a, b)",
        "  plus(a, b)",
        "end",
        "x = 1",
        "while x",
        "  if true",
        "    x = 0",
        "  else",
        '    puts("no")',
        "  end",
        "end",
    ])
