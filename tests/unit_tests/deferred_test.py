# -*- coding: utf-8 -*-

import pytest

from pledge import Deferred, Promise, TimeoutError


class TestDeferred(object):

    def test_deferred_resolve_promise(self):
        df = Deferred()
        assert isinstance(df.promise, Promise)

        with pytest.raises(TimeoutError):
            df.promise.result(0.001)
        df.resolve('Value')
        assert df.promise.result(0.001) == 'Value'

    def test_deferred_reject_promise(self):
        class MyException(Exception):
            pass

        df = Deferred()
        with pytest.raises(TimeoutError):
            df.promise.result(0.001)
        df.reject(MyException())

        with pytest.raises(MyException):
            df.promise.result(0.001)

    def test_deferred_fulfill_several_values(self):
        df = Deferred()
        df.fulfill('a', 'b')
        assert df.promise.result(0.001) == ('a', 'b')

    def test_deferred_abort(self, scheduler):
        class Handle(object):
            aborted = False

            def abort(self, reason=None):
                self.aborted = True

        handle = Handle()
        df = Deferred()
        df.attach(handle)
        df.abort('stop')
        assert handle.aborted
        assert df.promise.outcome == 'stop'

    def test_deferred_timeout(self, scheduler):
        df = Deferred()
        df.timeout(1)
        scheduler.advance(1)
        assert isinstance(df.promise.exception(0.001), TimeoutError)
