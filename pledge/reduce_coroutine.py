# -*- coding: utf-8 -*-

from functools import wraps

from .deferred import Deferred
from .errors import RejectionError
from .util import is_thenable


def reduce_coroutine(safeguard=False, scheduler=None):
    """Decorator who converts a coroutine of promises into a single promise.

    The greatest interest is the ability to write a function in an
    synchronous-like style, using many asynchronous Promises.
    Whatever is the number of Promises or async calls used, the result will
    always be an unique Promise wrapping the whole process.

    The generator yields promises: the result of each one is sent back to the
    generator, or the rejection reason is raised inside it. The promise
    returned resolves with:
    - the first non-thenable value yielded (the generator is then closed);
    - or the value returned by the generator;
    - or, if the generator returns None, the result of the last promise.

    Example:

        >>> @reduce_coroutine()
        ... def download_all():
        ...     first = yield download('a')
        ...     second = yield download('b')
        ...     yield first + second

    Args:
        safeguard (boolean): if true, use `Promise.safeguard()` on the
            resulting promise.
        scheduler (Scheduler, optional): scheduler of the resulting promise.
    """

    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            """
            Args:
                *args
                **kwargs
            Returns:
                Promise<*>
            """
            df = Deferred(scheduler=scheduler,
                          _name='COROUTINE %s' % func.__name__)
            if safeguard:
                df.promise.safeguard()

            try:
                # Create generator; Initialization phase
                gen = func(*args, **kwargs)
            except Exception as error:
                df.reject(error)
                return df.promise

            def _call_next_or_set_result(value):
                if is_thenable(value):
                    value.then(iter_next, iter_error)
                else:
                    gen.close()
                    df.resolve(value)

            def iter_next(sent_value):
                try:
                    next_value = gen.send(sent_value)
                except StopIteration as stop:
                    if stop.value is None:
                        return df.resolve(sent_value)
                    return df.resolve(stop.value)
                except Exception as error:
                    return df.reject(error)
                _call_next_or_set_result(next_value)

            def iter_error(reason):
                if not isinstance(reason, BaseException):
                    reason = RejectionError(reason)
                try:
                    next_value = gen.throw(reason)
                except StopIteration as stop:
                    return df.resolve(stop.value)
                except Exception as error:
                    return df.reject(error)
                _call_next_or_set_result(next_value)

            # Start and resolve loop.
            try:
                first_value = next(gen)
            except StopIteration as stop:
                df.resolve(stop.value)
                return df.promise
            except Exception as error:
                df.reject(error)
                return df.promise
            _call_next_or_set_result(first_value)

            return df.promise

        return wrapper
    return decorator
