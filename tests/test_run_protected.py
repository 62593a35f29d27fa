"""Tests for the protected-block runner and handler dispatch."""

from __future__ import annotations

import pytest

from tinytry import (
    Failure,
    catch,
    current_failure,
    last_error,
    run_protected,
    set_last_error,
    throw,
    try_,
)


def test_success_returns_block_value():
    assert run_protected(lambda: 42) == 42


def test_success_leaves_ambient_error_untouched():
    set_last_error("before")

    assert run_protected(lambda: "ok", catch(lambda err: "handled")) == "ok"
    assert last_error() == "before"


def test_block_sees_ambient_error_of_caller():
    set_last_error("outer")
    seen = []

    run_protected(lambda: seen.append(last_error()))

    assert seen == ["outer"]


def test_failure_without_handler_is_swallowed():
    def failing():
        raise ValueError("boom")

    assert run_protected(failing) is None


def test_failure_without_handler_leaves_no_residue():
    set_last_error("before")

    run_protected(lambda: throw("boom"))

    assert last_error() == "before"


def test_handler_receives_failure():
    error = ValueError("boom")
    received = []

    def failing():
        raise error

    result = run_protected(failing, catch(lambda err: received.append(err) or "recovered"))

    assert result == "recovered"
    assert received == [error]


def test_handler_receives_non_exception_failure_value():
    record = {"code": 7, "reason": "bad input"}

    result = run_protected(lambda: throw(record), catch(lambda err: err["code"]))

    assert result == 7


def test_handler_sees_ambient_error_from_before_the_call():
    set_last_error("Initial error")
    seen = []

    run_protected(lambda: throw("Argh"), catch(lambda err: seen.append(last_error())))

    assert seen == ["Initial error"]
    assert last_error() == "Initial error"


def test_current_failure_is_bound_inside_handler():
    def handler(err):
        return current_failure()

    assert run_protected(lambda: throw("topic"), catch(handler)) == "topic"


def test_current_failure_outside_handler_raises():
    with pytest.raises(LookupError):
        current_failure()


@pytest.mark.parametrize("falsy", ["", 0, None, False, (), []])
def test_falsy_failure_still_triggers_handler(falsy):
    calls = []

    def handler(err):
        calls.append(err)
        return "handled"

    assert run_protected(lambda: throw(falsy), catch(handler)) == "handled"
    assert calls == [falsy]


def test_handler_failure_propagates():
    def failing():
        raise ValueError("original")

    def handler(err):
        raise RuntimeError(f"Handler failed: {err}")

    with pytest.raises(RuntimeError, match="Handler failed: original"):
        run_protected(failing, catch(handler))


def test_handler_failure_with_plain_value_propagates_as_failure():
    with pytest.raises(Failure) as excinfo:
        run_protected(lambda: throw("first"), catch(lambda err: throw("second")))

    assert excinfo.value.value == "second"


def test_handler_failure_restores_ambient_error():
    set_last_error("before")

    with pytest.raises(RuntimeError):
        run_protected(lambda: throw("x"), catch(lambda err: throw(RuntimeError("y"))))

    assert last_error() == "before"


def test_handler_return_value_may_be_falsy():
    assert run_protected(lambda: throw("x"), catch(lambda err: 0)) == 0


def test_keyboard_interrupt_is_not_captured():
    def interrupted():
        raise KeyboardInterrupt

    with pytest.raises(KeyboardInterrupt):
        run_protected(interrupted, catch(lambda err: "handled"))


def test_try_alias_is_run_protected():
    assert try_ is run_protected


def test_nested_constructs_keep_their_own_failures():
    def inner_handler(err):
        assert current_failure() == "inner"
        return f"inner:{err}"

    def outer_handler(err):
        value = run_protected(lambda: throw("inner"), catch(inner_handler))
        assert current_failure() == "outer"
        return f"{value}|outer:{err}"

    result = run_protected(lambda: throw("outer"), catch(outer_handler))

    assert result == "inner:inner|outer:outer"


class TestWant:
    """Return shaping for the caller's requested arity."""

    def test_scalar_keeps_value_whole(self):
        assert run_protected(lambda: (1, 2), want="scalar") == (1, 2)

    def test_list_returns_tuple_of_values(self):
        assert run_protected(lambda: [1, 2, 3], want="list") == (1, 2, 3)

    def test_list_wraps_single_value(self):
        assert run_protected(lambda: "one", want="list") == ("one",)

    def test_list_none_is_empty(self):
        assert run_protected(lambda: None, want="list") == ()

    def test_void_discards_value(self):
        calls = []

        def block():
            calls.append("ran")
            return "ignored"

        assert run_protected(block, want="void") is None
        assert calls == ["ran"]

    def test_list_failure_without_handler_is_empty(self):
        assert run_protected(lambda: throw("x"), want="list") == ()

    def test_handler_value_is_shaped_too(self):
        result = run_protected(lambda: throw("x"), catch(lambda err: [err, err]), want="list")

        assert result == ("x", "x")

    def test_invalid_want_is_rejected(self):
        from beartype.roar import BeartypeCallHintParamViolation

        with pytest.raises(BeartypeCallHintParamViolation):
            run_protected(lambda: 1, want="many")
