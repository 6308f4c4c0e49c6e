# -*- coding: utf-8 -*-

from functools import wraps

from .promise import Promise


def wrap(target, scheduler=None):
    """Make a reusable function returning a Promise from a target.

    - If the target is a Promise, each call fulfills it with the arguments
        (only the first call has an effect), and returns a new Promise who
        follows the target.
    - If the target is a function, each call executes it synchronously with
        the arguments. The returned Promise is resolved with the value
        returned, or rejected with the exception raised.

    Args:
        target (Promise|callable)
        scheduler (Scheduler, optional): scheduler of the returned promises.
    Returns:
        callable: function returning a Promise.
    """
    if isinstance(target, Promise):
        def invoke_promise(*args):
            target.fulfill(*args)
            return Promise(scheduler=scheduler or target.scheduler,
                           _name='WRAP').resolve(target)

        return invoke_promise

    def invoke(*args, **kwargs):
        name = 'WRAP %s' % getattr(target, '__name__', '???')
        promise = Promise(scheduler=scheduler, _name=name)
        try:
            result = target(*args, **kwargs)
        except Exception as error:
            return promise.reject(error)
        return promise.resolve(result)

    return invoke


def wrap_promise(f):
    """Decorator who converts the result in a Promise object.

    If the function decorated returns a thenable, the resulting Promise
    follows it. Else, the Promise is fulfilled with the returned value. If the
    function raises an exception, the Promise is rejected.
    """
    return wraps(f)(wrap(f))
