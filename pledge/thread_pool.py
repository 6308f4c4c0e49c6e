# -*- coding: utf-8 -*-

from concurrent.futures import ThreadPoolExecutor as Executor
import logging

from .deferred import Deferred

_logger = logging.getLogger(__name__)


class _FutureHandle(object):
    """Abortable handle attached to the Promise of a submitted call."""

    def __init__(self, future):
        self._future = future

    def abort(self, reason=None):
        if self._future.cancel():
            _logger.debug('Pending call cancelled: %r', reason)


class ThreadPoolExecutor(object):
    """Execute callables asynchronously on demand, in another threads."""

    def __init__(self, max_workers, scheduler=None):
        """Initialize the thread pool

        Args:
            max_workers: The maximum number of threads that can be used to
                execute the given calls.
            scheduler (Scheduler, optional): scheduler of the promises
                returned by `submit()`.
        """
        self._executor = Executor(max_workers)
        self._scheduler = scheduler

    def submit(self, callback, *args, **kwargs):
        """Schedule the callable to be executed and return a Promise.

        Aborting the Promise cancels the call, if it has not started yet.

        Args:
            callback (callable): callback who will run in another thread.
            *args: argument passed to callback.
            **kwargs: keywords arguments passed to callback.
        Returns:
            Promise: Promise who resolve after the callback has been executed.
                It's fulfilled with the value returned by the callback.
                If the callback raise an exception, the promise is rejected
                with this exception.
        """
        df = Deferred(scheduler=self._scheduler,
                      _name='SUBMIT %s' % getattr(callback, '__name__', '???'))

        f = self._executor.submit(callback, *args, **kwargs)
        handle = _FutureHandle(f)

        def on_future_done(f):
            # The closure keeps the weakly-attached handle alive until the
            # call is done.
            if f.cancelled():
                _logger.debug('Call %r done after cancellation of %r',
                              callback, handle)
                return
            error = f.exception()
            if error is None:
                df.resolve(f.result())
            else:
                df.reject(error)

        df.attach(handle)
        f.add_done_callback(on_future_done)

        return df.promise

    def shutdown(self, wait=True):
        """Free the resources once the pending calls are done."""
        self._executor.shutdown(wait=wait)

    def __enter__(self):
        return self

    def __exit__(self, _type, _value, _tb):
        self.shutdown()
