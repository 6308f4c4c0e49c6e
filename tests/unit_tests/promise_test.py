# -*- coding: utf-8 -*-

import random
from threading import Timer

import pytest

from pledge import Promise, TimeoutError


class TestPromise(object):
    """Promises executed by the default (thread) scheduler."""

    def test_synchronous_call(self):
        """Make a Promise fulfilled by a synchronous function and get result"""

        def executor(on_fulfilled, on_rejected):
            on_fulfilled(3)

        p = Promise(executor)

        assert p.result() == 3

    def test_synchronous_call_failing(self):
        """Make a Promise rejected by a synchronous executor and get result."""

        class Err(Exception):
            pass

        def executor(on_fulfilled, on_rejected):
            on_rejected(Err())

        p = Promise(executor)
        with pytest.raises(Err):
            p.result()

    def test_asynchronous_call(self):
        """Make a Promise fulfilled after the call to result()."""

        def executor(on_fulfilled, on_rejected):
            Timer(0.001, on_fulfilled, args=['OK']).start()

        p = Promise(executor)
        assert p.result(1) == 'OK'

    def test_get_result_timeout(self):
        """Try to get the result with a timeout while the Promise is pending.
        """
        p = Promise()

        with pytest.raises(TimeoutError):
            p.result(0)

    def test_get_exception_timeout(self):
        p = Promise()

        with pytest.raises(TimeoutError):
            p.exception(0)

    def test_async_failing_call(self):
        """Try to get the result of a failing Promise while it's pending."""
        class Err(Exception):
            pass

        def executor(on_fulfilled, on_rejected):
            Timer(0.001, on_rejected, args=[Err()]).start()

        p = Promise(executor)
        with pytest.raises(Err):
            p.result(1)

    def test_get_error_async_rejected_promise(self):
        """Get the exception of a Promise soon to be rejected."""
        class Err(Exception):
            pass

        def executor(on_fulfilled, on_rejected):
            Timer(0.001, on_rejected, args=[Err()]).start()

        p = Promise(executor)
        assert isinstance(p.exception(1), Err)


class TestThenMethod(object):

    def test_then_sync_call(self):
        """Test to chain a callback using then() on an fulfilled Promise."""

        def _callback(arg):
            assert arg == 23
            return arg * 2

        p = Promise(lambda ok, error: ok(23))
        p2 = p.then(_callback)
        assert p2.result(1) == 46
        assert p.result(1) == 23

    def test_then_async_call(self):
        """Chain a callback using then() on an not-yet fulfilled Promise."""

        _fulfill = []

        def _init(ok, error):
            _fulfill.append(ok)

        def _callback(arg):
            assert arg == 23
            return arg * 2

        p = Promise(_init)
        p2 = p.then(_callback)
        _fulfill[0](23)  # fulfill the Promise now.
        assert p2.result(1) == 46
        assert p.result(1) == 23

    def test_then_on_failing_async_promise(self):
        """Chain a callback using then() to a Promise who will be rejected."""
        class Err(Exception):
            pass

        def _callback(__):
            assert not 'This should not be executed.'

        p = Promise()
        p2 = p.then(_callback)
        p.reject(Err())
        with pytest.raises(Err):
            p2.result(1)

    def test_then_with_promise_factory(self):
        """Chain a Promise factory, using then().

        a Promise factory is a function who returns a Promise.
        """

        def factory(value):
            return Promise(lambda ok, error: ok(value * value))

        p = Promise(lambda ok, error: ok(6))
        p2 = p.then(factory)
        assert p2.result(1) == 36

    def test_then_with_error_callback_on_rejected_promise(self):
        """Chain a Promise with both success and error callbacks.

        Only the error callback should be called.
        The resulting Promise will (successfully) resolve with the value
        returned by the error callback.
        """
        class MyException(Exception):
            pass

        def task(ok, error):
            error(MyException())

        def on_success(value):
            raise Exception('This should never be called!')

        def on_error(err):
            assert type(err) is MyException
            return 38

        p = Promise(task)
        p2 = p.then(on_success, on_error)
        assert p2.result(1) == 38

    def test_resolve_value(self):
        """Wrap a value into a Promise using Promise.resolved()."""
        p = Promise.resolved('xyz')
        assert p.result(0.01) == 'xyz'

    def test_resolve_promise(self):
        """Use Promise.resolved() on an object who is already a Promise."""
        p1 = Promise.resolved(33)
        p = Promise.resolved(p1)
        assert p is p1
        assert p.result(0.01) == 33

    def test_long_chain(self):
        p = Promise()
        last = p
        for _ in range(100):
            last = last.then(lambda x: x + 1)
        p.fulfill(0)
        assert last.result(1) == 100


class TestGroupPromiseMethods(object):
    """Test the method which manipulate group of promises."""

    def test_method_all_with_one_rejected_promise(self):
        class MyException(Exception):
            pass

        p1 = Promise.rejected(MyException())
        p = Promise.all([p1])

        with pytest.raises(MyException):
            p.result(1)

    def test_method_all_with_async_promises(self):
        promises = [Promise.resolved(1) for _ in range(0, 5)]

        _resolve_callback = []

        def _init(ok, _error):
            _resolve_callback.append(ok)

        promises.append(Promise(_init))

        p = Promise.all(promises)

        # The ALL promise is not yet resolved.
        with pytest.raises(TimeoutError):
            p.result(0)

        _resolve_callback[0]('OK')

        # Now, all sub-promises are resolved.
        assert len(p.result(1)) == 6

    def test_method_all_must_keep_order(self):
        promises = []
        _resolve_callback = []

        for i in range(0, 25):
            def _promise_init(ok, _error, local_i=i):
                # Will resolve with the increment value.
                _resolve_callback.append(lambda: ok(local_i))

            promises.append(Promise(_promise_init))

        # promises are ordered.
        p = Promise.all(promises)

        # Resolves the promises in a random order
        random.shuffle(_resolve_callback)
        for callback in _resolve_callback:
            callback()

        assert p.result(1) == list(range(0, 25))

    def test_method_race_with_several_promises(self):
        _resolve_callback = []

        def _async_promise(ok, _error):
            _resolve_callback.append(ok)

        # Add non-resolving promises.
        promises = [Promise() for _ in range(0, 5)]

        promises.append(Promise(_async_promise))
        promises.append(Promise(_async_promise))

        promises += [Promise() for _ in range(0, 5)]

        p = Promise.race(promises)

        with pytest.raises(TimeoutError):
            p.result(0)
        _resolve_callback[0]('RESULT')

        # p is resolved after the first Promise resolves.
        assert p.result(1) == 'RESULT'

        # subsequent Promises resolutions should have no effect.
        _resolve_callback[1]('RESULT2')
        assert p.result(1) == 'RESULT'
