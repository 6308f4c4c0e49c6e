# -*- coding: utf-8 -*-

from threading import Event

from pledge import AbortError, Promise, ThreadPoolExecutor


class TestThreadPoolExecutor(object):

    def test_small_task(self):
        executor = ThreadPoolExecutor(1)

        def task(arg):
            return 'OK %s' % arg

        f = executor.submit(task, 'ARG')
        assert f.result(1) == 'OK ARG'
        executor.shutdown()

    def test_task_failure(self):
        class MyException(Exception):
            pass

        executor = ThreadPoolExecutor(1)

        def task(arg):
            raise MyException

        f = executor.submit(task, 'ARG')
        assert isinstance(f.exception(1), MyException)
        executor.shutdown()

    def test_chain_task_result(self):
        with ThreadPoolExecutor(2) as executor:
            p = executor.submit(lambda: 20).then(lambda x: x + 1)
            assert p.result(1) == 21

    def test_abort_pending_task(self):
        """Aborting the Promise of a call not yet started cancels it."""
        release = Event()
        calls = []

        with ThreadPoolExecutor(1) as executor:
            p1 = executor.submit(release.wait, 1)
            p2 = executor.submit(calls.append, 'never')
            p2.abort()
            release.set()

            assert p1.result(1) is True
            assert isinstance(p2.exception(1), AbortError)
        assert calls == []
        assert p2.state is Promise.REJECTED
