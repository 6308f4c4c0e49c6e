# -*- coding: utf-8 -*-

"""Run procedures asynchronously, and get their result as a Promise."""

import logging

from .promise import Promise

_logger = logging.getLogger(__name__)


def defer(procedure, *args, **kwargs):
    """Schedule a procedure and returns a Promise of its result.

    The procedure is executed by the scheduler, after the current call has
    returned. It receives the new Promise as first argument, followed by
    `args` and `kwargs`, and can settle it directly.
    If it returns a value other than None, the Promise is resolved with it.
    If it raises an exception, the Promise is rejected.

    If `procedure` is a thenable, the new Promise just adopts it.

    Args:
        procedure (callable|Thenable)
        *args: arguments passed to the procedure.
        **kwargs: keywords arguments passed to the procedure. `scheduler` is
            reserved, and used to create the Promise.
    Returns:
        Promise<*>
    """
    scheduler = kwargs.pop('scheduler', None)
    name = 'DEFER %s' % getattr(procedure, '__name__', '???')
    return Promise(scheduler=scheduler, _name=name).defer(procedure, *args,
                                                         **kwargs)


def defer_callback(procedure, *args, **kwargs):
    """Schedule a callback-style procedure and returns a Promise.

    The procedure is executed by the scheduler with `args`, plus a completion
    callback added as last positional argument. The callback follows the
    convention `callback(error, result=None)`: if `error` is truthy, the
    Promise is rejected with it; otherwise it's fulfilled with `result`.

    The value returned by the procedure is ignored. If it raises an exception,
    the Promise is rejected.

    Example:

        >>> def read(path, callback):
        ...     callback(None, 'content of %s' % path)
        >>> p = defer_callback(read, '/tmp/foo')

    Args:
        procedure (callable)
        *args: arguments passed to the procedure, before the callback.
        **kwargs: keywords arguments passed to the procedure. `scheduler` is
            reserved, and used to create the Promise.
    Returns:
        Promise<*>
    """
    scheduler = kwargs.pop('scheduler', None)
    promise = Promise(scheduler=scheduler,
                      _name='CALLBACK %s' % getattr(procedure, '__name__',
                                                    '???'))

    def callback(error, result=None):
        if error:
            promise.reject(error)
        else:
            promise.fulfill(result)

    def run_procedure():
        try:
            procedure(*(args + (callback,)), **kwargs)
        except Exception as error:
            _logger.debug('Callback-style procedure %r has raised an error',
                          procedure)
            promise.reject(error)

    promise.scheduler.schedule(run_procedure)
    return promise
