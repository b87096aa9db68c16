import pytest

from pico_aop.advice import After, AfterReturning, AfterThrowing, Before, after, after_returning, after_throwing, around, before
from pico_aop.descriptor import describe
from pico_aop.exceptions import ConfigurationError
from pico_aop.invocation import Invocation

from support import StringList


def make_invocation(proceed, args=(1,), kwargs=None):
    return Invocation(
        instance=None,
        target=None,
        descriptor=describe(StringList, "get"),
        args=args,
        kwargs=kwargs or {},
        proceed=proceed,
    )


def returning(value, calls=None):
    def proceed(a, k):
        if calls is not None:
            calls.append((a, k))
        return value

    return proceed


def raising(error):
    def proceed(a, k):
        raise error

    return proceed


class TestBefore:
    def test_runs_before_proceed_and_passes_result_through(self):
        events = []

        def proceed(a, k):
            events.append("proceed")
            return "x"

        advice = before(lambda b: events.append(("before", b.name, b.args)))
        assert advice(make_invocation(proceed)) == "x"
        assert events == [("before", "get", (1,)), "proceed"]

    def test_failure_aborts_before_proceed(self):
        calls = []

        def boom(b):
            raise RuntimeError("rejected")

        with pytest.raises(RuntimeError, match="rejected"):
            before(boom)(make_invocation(returning("x", calls)))
        assert calls == []

    def test_receives_before_record(self):
        seen = []
        before(seen.append)(make_invocation(returning(None), args=(3,), kwargs={"k": 1}))
        assert seen == [Before(describe(StringList, "get"), (3,), {"k": 1})]


class TestAfterReturning:
    def test_observes_value_and_returns_original(self):
        seen = []
        advice = after_returning(lambda r: seen.append(r.value))
        assert advice(make_invocation(returning("v"))) == "v"
        assert seen == ["v"]

    def test_not_run_on_failure(self):
        seen = []
        with pytest.raises(KeyError):
            after_returning(seen.append)(make_invocation(raising(KeyError("k"))))
        assert seen == []

    def test_own_failure_replaces_success(self):
        def boom(r: AfterReturning):
            raise ValueError("post-check failed")

        with pytest.raises(ValueError, match="post-check failed"):
            after_returning(boom)(make_invocation(returning("v")))


class TestAfterThrowing:
    def test_observes_and_reraises_same_exception(self):
        err = LookupError("missing")
        seen = []
        with pytest.raises(LookupError) as ei:
            after_throwing(lambda t: seen.append(t.error))(make_invocation(raising(err)))
        assert ei.value is err
        assert seen == [err]

    def test_cannot_replace_the_failure(self):
        err = LookupError("missing")

        def replace(t: AfterThrowing):
            raise RuntimeError("replacement")

        with pytest.raises(LookupError) as ei:
            after_throwing(replace)(make_invocation(raising(err)))
        assert ei.value is err

    def test_not_run_on_success(self):
        seen = []
        assert after_throwing(seen.append)(make_invocation(returning(5))) == 5
        assert seen == []


class TestAfter:
    def test_runs_once_on_success(self):
        seen = []
        assert after(seen.append)(make_invocation(returning("ok"))) == "ok"
        assert len(seen) == 1
        assert seen[0].value == "ok"
        assert seen[0].error is None
        assert seen[0].succeeded

    def test_runs_once_on_failure_and_reraises(self):
        err = ValueError("bad")
        seen = []
        with pytest.raises(ValueError) as ei:
            after(seen.append)(make_invocation(raising(err)))
        assert ei.value is err
        assert len(seen) == 1
        assert isinstance(seen[0], After)
        assert seen[0].value is None
        assert seen[0].error is err
        assert not seen[0].succeeded


class TestAround:
    def test_may_skip_proceed(self):
        calls = []
        advice = around(lambda inv: "synthesized")
        assert advice(make_invocation(returning("real", calls))) == "synthesized"
        assert calls == []

    def test_may_proceed_twice(self):
        calls = []
        advice = around(lambda inv: (inv.proceed(), inv.proceed()))
        assert advice(make_invocation(returning("r", calls))) == ("r", "r")
        assert len(calls) == 2

    def test_may_replace_arguments(self):
        calls = []
        advice = around(lambda inv: inv.proceed((inv.args[0] + 1,)))
        advice(make_invocation(returning(None, calls), args=(1,)))
        assert calls == [((2,), {})]

    def test_may_swallow_failures(self):
        def recover(inv):
            try:
                return inv.proceed()
            except KeyError:
                return "fallback"

        assert around(recover)(make_invocation(raising(KeyError("k")))) == "fallback"

    def test_requires_callable(self):
        with pytest.raises(ConfigurationError, match="callable"):
            around("nope")
