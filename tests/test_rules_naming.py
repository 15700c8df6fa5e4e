"""Tests for clean_lint/rules/naming.py"""

from clean_lint.rules.naming import to_snake_case


# ---------------------------------------------------------------------------
# short-name
# ---------------------------------------------------------------------------

def test_short_loop_variable_is_flagged(lint):
    found = lint("""
        for l in locations:
            dispatch(l)
        """, "short-name")
    assert len(found) == 1
    assert "`l`" in found[0].message
    assert found[0].line == 1


def test_conventional_counters_are_allowed(lint):
    found = lint("""
        for i in range(3):
            for j in range(i):
                print(i, j)
        """, "short-name")
    assert found == []


def test_short_function_and_argument_names(lint):
    found = lint("""
        def f(a):
            return a
        """, "short-name")
    assert {d.message.split("`")[1] for d in found} == {"f", "a"}


def test_short_name_reported_once_per_scope(lint):
    found = lint("""
        def compute(values):
            t = 0
            for v in values:
                t += v
            return t
        """, "short-name")
    assert sorted(d.message.split("`")[1] for d in found) == ["t", "v"]


def test_self_and_cls_are_never_flagged(lint):
    found = lint("""
        class Point:
            def move(self, dx):
                return dx

            @classmethod
            def origin(cls):
                return cls()
        """, "short-name")
    assert found == []


def test_short_name_min_length_option(lint):
    found = lint("""
        def load(db):
            return db
        """, "short-name", min_length=3)
    assert len(found) == 1
    assert "`db`" in found[0].message


# ---------------------------------------------------------------------------
# naming-convention
# ---------------------------------------------------------------------------

def test_class_must_use_capwords(lint):
    found = lint("""
        class my_class:
            pass
        """, "naming-convention")
    assert len(found) == 1
    assert "CapWords" in found[0].message


def test_function_and_argument_must_use_snake_case(lint):
    found = lint("""
        def getValue(someArg):
            return someArg
        """, "naming-convention")
    messages = [d.message for d in found]
    assert any("Function `getValue`" in m for m in messages)
    assert any("Argument `someArg`" in m for m in messages)


def test_local_variable_must_use_snake_case(lint):
    found = lint("""
        def build():
            myValue = 1
            return myValue
        """, "naming-convention")
    assert len(found) == 1
    assert "Local variable `myValue`" in found[0].message


def test_rebinding_a_declared_global_is_a_module_name(lint):
    found = lint("""
        COUNTER = 0

        def bump():
            global COUNTER
            COUNTER = COUNTER + 1
        """, "naming-convention")
    assert found == []


def test_global_declaration_does_not_leak_into_nested_function(lint):
    found = lint("""
        def outer():
            global TOTAL
            TOTAL = 1

            def inner():
                TOTAL = 2
                return TOTAL
            return inner
        """, "naming-convention")
    assert len(found) == 1
    assert "Local variable `TOTAL`" in found[0].message
    assert found[0].line == 6


def test_module_level_constants_and_aliases_are_accepted(lint):
    found = lint("""
        from collections import namedtuple

        MAX_SIZE = 10
        Point = namedtuple("Point", "x y")
        default_name = "anonymous"
        """, "naming-convention")
    assert found == []


def test_framework_hook_names_are_ignored(lint):
    found = lint("""
        import ast
        import unittest

        class Visitor(ast.NodeVisitor):
            def visit_Name(self, node):
                return node

        class CaseTest(unittest.TestCase):
            def setUp(self):
                self.ready = True

            def __init_subclass__(cls):
                pass
        """, "naming-convention")
    assert found == []


# ---------------------------------------------------------------------------
# redundant-context
# ---------------------------------------------------------------------------

def test_attribute_and_method_repeating_class_name(lint):
    found = lint("""
        class Car:
            def __init__(self, make):
                self.car_make = make
                self.color = "red"

            def car_paint(self, color):
                self.color = color
        """, "redundant-context")
    messages = sorted(d.message for d in found)
    assert len(messages) == 2
    assert any("`car_make`" in m and "`make`" in m for m in messages)
    assert any("`car_paint`" in m and "`paint`" in m for m in messages)


def test_clean_class_has_no_redundant_context(lint):
    found = lint("""
        class Car:
            def __init__(self, make):
                self.make = make
        """, "redundant-context")
    assert found == []


def test_to_snake_case():
    assert to_snake_case("Car") == "car"
    assert to_snake_case("PersistentStorage") == "persistent_storage"
    assert to_snake_case("HTTPClient") == "http_client"
    assert to_snake_case("_Private") == "private"
