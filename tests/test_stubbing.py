import pytest

from pico_aop import (
    any_,
    any_int,
    any_str,
    controller_of,
    do_answer,
    do_around,
    do_call_real_method,
    do_nothing,
    do_return,
    do_throw,
    mock,
    reset,
    spy,
    when,
)
from pico_aop.descriptor import describe
from pico_aop.exceptions import RecordingStateError, StubbingError

from support import Account, Counter, Service, StringList


class TestDoWhen:
    """Behavior first: do_x(...).when(proxy).operation(...)."""

    def test_mock(self):
        m = mock(StringList)
        do_return(7).when(m).size()
        do_around(lambda inv: (inv.proceed(), "123")[1]).when(m).__str__()
        do_throw(RuntimeError("boom")).when(m).get(any_int())

        assert m.size() == 7
        assert str(m) == "123"
        assert list(m.stream()) == []
        with pytest.raises(RuntimeError, match="boom"):
            m.get(0)

    def test_spy(self):
        s = spy(StringList("1", "2", "3"))
        do_return(7).when(s).size()
        do_around(lambda inv: "123").when(s).__str__()
        do_throw(IOError("mockDoThrow")).when(s).get(any_int())

        assert s.size() == 7
        assert str(s) == "123"
        assert list(s.stream()) == ["1", "2", "3"]
        with pytest.raises(IOError, match="mockDoThrow"):
            s.get(0)

    def test_selecting_call_returns_default_and_skips_real_method(self):
        counter = Counter()
        s = spy(counter)
        assert do_return(5).when(s).next() == 0
        assert counter.value == 0
        assert s.next() == 5

    def test_latest_stub_wins(self):
        m = mock(StringList)
        do_return(7).when(m).size()
        assert m.size() == 7
        do_return(8).when(m).size()
        assert m.size() == 8
        assert len(controller_of(m).stubs_for(describe(StringList, "size"))) == 2

    def test_pending_request_blocks_a_second_one(self):
        m = mock(StringList)
        do_return(1).when(m)
        with pytest.raises(RecordingStateError):
            do_return(2).when(m)
        m.size()
        assert m.size() == 1

    def test_throw_accepts_exception_class(self):
        m = mock(StringList)
        do_throw(KeyError).when(m).get(0)
        with pytest.raises(KeyError):
            m.get(0)

    def test_throw_rejects_non_exceptions(self):
        with pytest.raises(StubbingError, match="exception instance or class"):
            do_throw("boom")

    def test_answer_receives_invocation(self):
        m = mock(StringList)
        do_answer(lambda inv: f"item-{inv.args[0]}").when(m).get(any_int())
        assert m.get(4) == "item-4"

    def test_call_real_method_on_spy(self):
        s = spy(StringList("a"))
        do_return(9).when(s).size()
        do_call_real_method().when(s).size()
        assert s.size() == 1

    def test_call_real_method_on_mock_answers_default(self):
        m = mock(StringList)
        do_call_real_method().when(m).size()
        assert m.size() == 0

    def test_when_requires_a_proxy(self):
        with pytest.raises(TypeError, match="pico-aop proxy"):
            do_return(1).when(StringList())


class TestDoNothing:
    def test_allowed_on_operations_returning_none(self):
        target = StringList()
        s = spy(target)
        do_nothing().when(s).add(any_str())
        s.add("x")
        assert target.size() == 0

    def test_rejected_on_value_returning_operation(self):
        s = spy(StringList())
        with pytest.raises(StubbingError, match="only applies to operations returning None"):
            do_nothing().when(s).size()
        assert not controller_of(s).is_recording
        assert s.size() == 0


class TestWhenThen:
    """Call first: when(lambda: proxy.operation(...)).then_x(...)."""

    def test_mock(self):
        m = mock(StringList)
        when(lambda: m.size()).then_return(7)
        when(lambda: str(m)).then_around(lambda inv: "123")
        when(lambda: m.get(any_int())).then_throw(RuntimeError("mockDoThrow"))

        assert m.size() == 7
        assert str(m) == "123"
        assert list(m.stream()) == []
        with pytest.raises(RuntimeError, match="mockDoThrow"):
            m.get(0)

    def test_spy(self):
        s = spy(StringList("1", "2", "3"))
        when(lambda: s.size()).then_return(7)
        when(lambda: s.get(any_int())).then_throw(IOError("mockDoThrow"))

        assert s.size() == 7
        assert str(s) == "[1, 2, 3]"
        with pytest.raises(IOError, match="mockDoThrow"):
            s.get(0)

    def test_recorded_call_does_not_reach_target(self):
        counter = Counter()
        s = spy(counter)
        when(lambda: s.next()).then_return(42)
        assert counter.value == 0
        assert s.next() == 42

    def test_latest_stub_wins(self):
        m = mock(StringList)
        when(lambda: m.size()).then_return(7)
        assert m.size() == 7
        when(lambda: m.size()).then_return(8)
        assert m.size() == 8

    def test_rearming_the_same_handle(self):
        m = mock(StringList)
        handle = when(lambda: m.size()).then_return(1)
        handle.then_return(2)
        assert m.size() == 2
        assert handle.selector == describe(StringList, "size")

    def test_only_the_first_call_is_recorded(self):
        counter = Counter()
        s = spy(counter)

        def two_calls():
            s.next()
            s.next()

        when(two_calls).then_return(10)
        assert counter.value == 1
        assert s.next() == 10

    def test_property_read(self):
        acct = spy(Account(5))
        when(lambda: acct.balance).then_return(100)
        assert acct.balance == 100
        assert acct.deposit(1) == 6

    def test_no_proxy_call(self):
        with pytest.raises(StubbingError, match="No proxy call was recorded"):
            when(lambda: 1 + 1)

    def test_not_callable(self):
        m = mock(StringList)
        with pytest.raises(StubbingError, match="zero-argument callable"):
            when(m.size())

    def test_then_do_nothing_rejects_value_operation(self):
        m = mock(StringList)
        with pytest.raises(StubbingError):
            when(lambda: m.size()).then_do_nothing()

    def test_expectation_does_not_leak(self):
        m = mock(StringList)
        when(lambda: m.size()).then_return(3)
        assert m.get(0) == ""
        assert not controller_of(m).is_recording


class TestIsolation:
    def test_stubbing_one_operation_leaves_others_untouched(self):
        s = spy(StringList("a", "b"))
        do_return(7).when(s).size()
        assert s.get(1) == "b"
        assert "a" in s
        assert len(s) == 2

    def test_stubs_are_per_proxy(self):
        first, second = mock(StringList), mock(StringList)
        do_return(7).when(first).size()
        assert first.size() == 7
        assert second.size() == 0

    def test_reset_drops_stubs(self):
        m = mock(StringList)
        do_return(7).when(m).size()
        reset(m)
        assert m.size() == 0


class TestSequenceScenario:
    """A list-like proxy over three elements with size() and get() stubbed."""

    @pytest.fixture
    def items(self):
        return StringList("1", "2", "3")

    def test_mock(self):
        m = mock(StringList)
        do_return(7).when(m).size()
        do_throw(RuntimeError("boom")).when(m).get(any_int())

        assert m.size() == 7
        with pytest.raises(RuntimeError, match="boom"):
            m.get(0)
        assert str(m) == ""

    def test_spy(self, items):
        s = spy(items)
        do_return(7).when(s).size()
        do_throw(RuntimeError("boom")).when(s).get(any_int())

        assert s.size() == 7
        with pytest.raises(RuntimeError, match="boom"):
            s.get(0)
        assert str(s) == "[1, 2, 3]"


class TestAsyncOperations:
    @pytest.mark.asyncio
    async def test_unstubbed_mock_answers_awaitable_defaults(self):
        m = mock(Service)
        assert await m.fetch() == 0
        assert await m.load("key") == ""
        assert await m.close() is None

    @pytest.mark.asyncio
    async def test_do_return(self):
        m = mock(Service)
        do_return(5).when(m).fetch()
        assert await m.fetch() == 5

    @pytest.mark.asyncio
    async def test_then_throw_raises_when_awaited(self):
        m = mock(Service)
        when(lambda: m.load(any_str())).then_throw(KeyError("missing"))
        pending = m.load("key")
        with pytest.raises(KeyError, match="missing"):
            await pending

    @pytest.mark.asyncio
    async def test_do_nothing(self):
        service = Service()
        s = spy(service)
        do_nothing().when(s).close()
        assert await s.close() is None
        assert service.closed is False

    @pytest.mark.asyncio
    async def test_spy_mixes_stubbed_and_real_calls(self):
        s = spy(Service())
        do_return(7).when(s).fetch()
        assert await s.fetch() == 7
        assert await s.load("abc") == "ABC"


def test_argument_placeholders_are_type_defaults():
    assert any_int() == 0
    assert any_str() == ""
    assert any_(list) == []
    assert any_() is None
