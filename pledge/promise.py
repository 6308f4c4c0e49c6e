# -*- coding: utf-8 -*-

from collections import deque
from functools import partial
import logging
from threading import Condition
import weakref

from . import config
from .errors import AbortError, RejectionError, TimeoutError
from .scheduler import get_default_scheduler
from .util import Thenable, is_abortable, is_thenable

_logger = logging.getLogger(__name__)


def _identity(value):
    return value


class Promise(Thenable):
    """It represents an operation expected to be completed in the future.

    A Promise contains a value not yet known when the Promise is created. It
    is settled exactly once: either fulfilled with a value, or rejected with a
    reason. Callbacks can be chained with `then()` before or after the
    settlement; they are always executed by the scheduler, never inside the
    call who registered them or who settled the Promise.

    The producer side uses `fulfill()`, `reject()` or `resolve()`. All calls
    after the first settlement are ignored.

    All calls to the methods are thread-safe.
    """

    PENDING = 'pending'
    FULFILLED = 'fulfilled'
    REJECTED = 'rejected'

    def __init__(self, executor=None, scheduler=None, _name=None,
                 _previous=None):
        """Constructor of the Promise.

        If an executor is given, it's fully executed before the constructor
        returns. If the executor raises an exception, it's caught and the
        Promise is rejected with this exception.

        Args:
            executor (callable, optional): Takes 2 callable arguments:
                The first one, `resolve()`, should be called when the
                operation is done, with the result's value as its only
                argument.
                The second, `reject()`, should be called when an error occurs,
                with the reason (usually an exception) as argument.
            scheduler (Scheduler, optional): scheduler executing the
                callbacks. By default, the process-wide scheduler.
            _name (str): if set, name used when converted to text.
        """
        self._state = self.PENDING
        self._value = None
        self._condition = Condition()
        if scheduler is None:
            scheduler = get_default_scheduler()
        self._scheduler = scheduler
        self._name = _name or getattr(executor, '__name__', '???')
        self._previous = _previous

        # Each waiter is a tuple (child Promise, on_fulfilled, on_rejected).
        self._waiters = deque()
        self._attached = None
        self._timer = None

        if executor is not None:
            try:
                executor(self.resolve, self.reject)
            except Exception as error:
                self.reject(error)

    @property
    def state(self):
        """One of PENDING, FULFILLED or REJECTED."""
        with self._condition:
            return self._state

    @property
    def outcome(self):
        """Value if fulfilled, reason if rejected, None if still pending."""
        with self._condition:
            return self._value

    @property
    def scheduler(self):
        return self._scheduler

    def fulfill(self, *values):
        """Fulfill the Promise.

        If the Promise is already settled, nothing happens.

        Args:
            *values: the result. With several arguments, the Promise is
                fulfilled with the tuple of all arguments. Without argument,
                it's fulfilled with None.
        Returns:
            Promise: self
        """
        if len(values) > 1:
            value = values
        elif values:
            value = values[0]
        else:
            value = None
        self._settle(self.FULFILLED, value)
        return self

    def reject(self, reason=None):
        """Reject the Promise.

        If the Promise is already settled, nothing happens.

        Args:
            reason: cause of the failure, usually an instance of Exception.
        Returns:
            Promise: self
        """
        self._settle(self.REJECTED, reason)
        return self

    def resolve(self, value=None):
        """Fulfill the Promise, or make it follow another one.

        If `value` is a thenable, the Promise adopts its state: it will be
        fulfilled or rejected when `value` is, with the same result.
        Otherwise, it's fulfilled with `value`.

        Returns:
            Promise: self
        """
        if value is self:
            return self.reject(TypeError('A Promise cannot adopt itself.'))
        if is_thenable(value):
            self._adopt(value)
        else:
            self._settle(self.FULFILLED, value)
        return self

    def then(self, on_fulfilled=None, on_rejected=None):
        """Create a new promise from callbacks called when this one is settled.

        If the promise is fulfilled, the `on_fulfilled` callback will be
        called. Otherwise (the promise has been rejected), the `on_rejected`
        callback is called.
        In any case, the callback will define the state of the returned
        Promise. If the callback raises an exception, the new Promise is
        rejected. The callback can returns:
        - A value: the new promise will be fulfilled with this value. It's
            also true for `on_rejected`, which acts as an error recovery.
        - Another Promise, or any object with a `then` method: when fulfilled
            or rejected, will transfer its status (state and result/error) to
            the Promise returned by this method.

        If a callback is not defined, the state of the "self promise" is
        transferred at the new promise (the state and the value/error).

        Callbacks are always called by the scheduler, in the order they have
        been registered, even if the Promise is already settled.

        Args:
            on_fulfilled (callable, optional):  This callback will receive the
                result of the original promise as argument.
            on_rejected (callable, optional): This callback will receive the
                reason of the rejection of the original promise as argument.
        Returns:
            Promise<*>: new promise depending of self.
        """
        if not on_rejected:
            name = '%s' % getattr(on_fulfilled, '__name__', '???')
        elif not on_fulfilled:
            name = '<None, %s>' % getattr(on_rejected, '__name__', '???')
        else:
            name = '<%s, %s>' % (getattr(on_fulfilled, '__name__', '???'),
                                 getattr(on_rejected, '__name__', '???'))
        child = Promise(scheduler=self._scheduler, _name=name, _previous=self)

        with self._condition:
            self._waiters.append((child, on_fulfilled, on_rejected))
            settled = self._state != self.PENDING

        if settled:
            self._scheduler.schedule(self._dispatch)
        return child

    def catch(self, on_rejected):
        """Create a new promise with a callback called when an error occurs.

        Alias of `self.then(None, on_rejected)`

        Args:
            on_rejected (callable): Will be called with the rejection reason
                if `self` is rejected.
        returns:
            Promise<*>: new Promise chained to `self`. If `self` is fulfilled,
                the promised value will be the same as `self`. Otherwise, the
                value returned by the `on_rejected()` callback.
        """
        return self.then(None, on_rejected)

    def spread(self, on_fulfilled=None, on_rejected=None):
        """Like `then()`, but the result is spread over the callback arguments.

        If the Promise is fulfilled with a list or a tuple (as done by
        `fulfill(a, b, c)` or by `join()`), each element is passed as a
        positional argument of `on_fulfilled`. Any other value is passed as
        the only argument.
        """
        if not callable(on_fulfilled):
            return self.then(None, on_rejected)

        def spread_fulfilled(value):
            if isinstance(value, (list, tuple)):
                return on_fulfilled(*value)
            return on_fulfilled(value)

        spread_fulfilled.__name__ = getattr(on_fulfilled, '__name__', '???')
        return self.then(spread_fulfilled, on_rejected)

    def defer(self, procedure, *args, **kwargs):
        """Run a procedure asynchronously, bound to this Promise.

        The procedure is called by the scheduler, with the Promise as first
        argument (like `self` for a method), followed by `args` and `kwargs`.
        It can settle the Promise itself, or return the result:
        - a non-None value resolves the Promise (thenables are adopted);
        - None leaves the Promise as the procedure left it, possibly pending;
        - an exception raised rejects the Promise.

        If `procedure` is a thenable instead, the Promise adopts it.

        Returns:
            Promise: self
        """
        if is_thenable(procedure):
            self._adopt(procedure)
            return self

        def run_procedure():
            try:
                result = procedure(self, *args, **kwargs)
            except Exception as error:
                self.reject(error)
                return
            if result is not None and result is not self:
                self.resolve(result)

        self._scheduler.schedule(run_procedure)
        return self

    def attach(self, handle):
        """Associate an external resource, to be aborted with the Promise.

        Only a weak reference is kept: the Promise doesn't own the resource.
        Objects who can't be weakly referenced are kept until the Promise is
        settled. A new call replaces the previous handle.

        Args:
            handle (Abortable): object with an `abort(reason)` method. None
                removes the current association.
        Returns:
            Promise: self
        Raises:
            TypeError: if the handle has no `abort()` method.
        """
        if handle is None:
            ref = None
        elif not is_abortable(handle):
            raise TypeError('Attached handle must have an abort() method: %r'
                            % (handle,))
        else:
            try:
                ref = weakref.ref(handle)
            except TypeError:
                ref = partial(_identity, handle)

        with self._condition:
            if self._state == self.PENDING:
                self._attached = ref
        return self

    def abort(self, reason=None):
        """Abort the operation, and reject the Promise.

        If a handle is attached, its `abort()` method is called first. Errors
        raised by the handle are not caught, but the Promise is rejected in
        any case. Nothing is done if the Promise is already settled.

        Args:
            reason (optional): rejection reason. By default, an AbortError.
        Returns:
            Promise: self
        """
        with self._condition:
            if self._state != self.PENDING:
                return self
            handle = self._attached() if self._attached else None

        if reason is None:
            reason = AbortError('aborted')
        try:
            if handle is not None:
                handle.abort(reason)
        finally:
            self.reject(reason)
        return self

    def timeout(self, delay, on_timeout=None):
        """Arm a timer who aborts the Promise if it's still pending.

        The timer is disarmed as soon as the Promise is settled. Only one
        timer can be armed at a time: while a timer is armed, new calls are
        ignored until it's disarmed with `timeout(None)`.

        Args:
            delay (float): delay in seconds. None disarms the current timer.
            on_timeout (callable, optional): called with the Promise when the
                timer expires. By default, the Promise is aborted with a
                TimeoutError. If the callback raises an exception, the Promise
                is rejected with it.
        Returns:
            Promise: self
        """
        if delay is None:
            with self._condition:
                timer, self._timer = self._timer, None
            if timer is not None:
                timer[1].cancel()
            return self

        with self._condition:
            if self._state != self.PENDING:
                return self
            if self._timer is not None:
                _logger.debug('Promise %s has already a timer armed.',
                              self._name)
                return self
            token = object()
            handle = self._scheduler.call_later(
                delay, partial(self._expire, token, on_timeout))
            self._timer = (token, handle)
        return self

    def safeguard(self):
        """Catch all errors and log them with the most details possible.

        This method is aimed to protect the program from uncaught rejected
        Promise. If no error handler has been set (via then() or catch()), the
        default behavior is to do nothing, and thus, errors are silently
        ignored.
        Calling `safeguard()` after all chains are set will catch these errors,
        and log them as ERROR with the maximum of details possible.

        Returns:
            Promise: self
        """
        def guard(reason):
            if isinstance(reason, BaseException):
                _logger.error('[SAFEGUARD] %s', self,
                              exc_info=(type(reason), reason,
                                        reason.__traceback__))
            else:
                _logger.error('[SAFEGUARD] %s rejected with %r', self, reason)

        self.then(None, guard)
        return self

    def result(self, timeout=None):
        """Wait for the result and returns it as soon as it's available.

        It blocks the current thread: it must not be called by the scheduler
        executing the callbacks.

        Args:
            timeout (float, optional): if set, maximum time to wait the
                promise to be settled. By default, it can wait indefinitely.
        Returns:
            *: value encapsulated, defined by the operation.
        Raises:
            TimeoutError: if the promise is not settled within the delay.
            RejectionError: if the promise is rejected with a non-exception
                value.
            *: If the promise is rejected, the rejection cause is raised.
        """
        with self._condition:
            self._condition.wait_for(self._is_settled, timeout)

            if self._state == self.PENDING:
                raise TimeoutError()
            elif self._state == self.FULFILLED:
                return self._value
            error = self._value

        if isinstance(error, BaseException):
            raise error
        raise RejectionError(error)

    def exception(self, timeout=None):
        """Wait for the promise rejection and returns it's reason.

        Args:
            timeout (float, optional): if set, maximum time to wait the
                promise to be settled. By default, it can wait indefinitely.
        Returns:
            *: the reason of the rejection of the Promise.
            None: if the promise is fulfilled.
        Raises:
            TimeoutError: if the promise is not settled within the delay.
        """
        with self._condition:
            self._condition.wait_for(self._is_settled, timeout)

            if self._state == self.PENDING:
                raise TimeoutError()
            elif self._state == self.REJECTED:
                return self._value
            return None

    def __repr__(self):
        return 'Promise(%s)' % self._inner_print()

    def _inner_print(self):
        with self._condition:
            if self._state == self.REJECTED:
                state = 'R'
            elif self._state == self.FULFILLED:
                state = 'F'
            else:
                state = 'P'

        if self._previous:
            return '%s -> %s %s' % (self._previous._inner_print(), self._name,
                                    state)
        return '%s %s' % (self._name, state)

    @classmethod
    def resolved(cls, value=None, scheduler=None):
        """Create a promise who resolves the selected value.

        Args:
            value: result of the promise. If it's a Promise, it's returned as
                is. Other thenables are adopted.
            scheduler (Scheduler, optional)
        Returns:
            Promise: new Promise fulfilled with the value passed in parameter.
        """
        if isinstance(value, Promise):
            return value
        return cls(scheduler=scheduler, _name='RESOLVE').resolve(value)

    @classmethod
    def rejected(cls, reason, scheduler=None):
        """Create a Promise rejected for the reason specified.

        Args:
            reason: Exception set to the Promise
            scheduler (Scheduler, optional)
        Returns:
            Promise: new Promise already rejected.
        """
        return cls(scheduler=scheduler, _name='REJECT').reject(reason)

    @classmethod
    def all(cls, sources, scheduler=None):
        """Create a Promise who wait a list of promises to be all fulfilled.

        See `pledge.join()`.
        """
        from .aggregate import join
        return join(sources, scheduler=scheduler)

    @classmethod
    def race(cls, sources, scheduler=None):
        """Settle with the first of the promises to be settled.

        See `pledge.race()`.
        """
        from .aggregate import race
        return race(sources, scheduler=scheduler)

    def _is_settled(self):
        return self._state != self.PENDING

    def _settle(self, state, value):
        with self._condition:
            if self._state != self.PENDING:
                ignored = True
            else:
                ignored = False
                self._state = state
                self._value = value
                timer, self._timer = self._timer, None
                self._attached = None
                self._condition.notify_all()
                has_waiters = bool(self._waiters)

        if ignored:
            if config.get('debug_mode'):
                log = _logger.warning
            else:
                log = _logger.debug
            log('Try to settle Promise %r already settled. New %s state will '
                'be ignored: %r', self, state, value)
            return False

        if timer is not None:
            timer[1].cancel()
        if has_waiters:
            self._scheduler.schedule(self._dispatch)
        return True

    def _adopt(self, thenable):
        """Subscribe to the outcome of a thenable.

        Only the first call of one of the two callbacks is taken into
        account, even if the thenable calls them several times.
        """
        called = []

        def once(func):
            def callback(value):
                with self._condition:
                    if called:
                        return
                    called.append(True)
                func(value)
            return callback

        try:
            thenable.then(once(self.resolve), once(self.reject))
        except Exception as error:
            once(self.reject)(error)

    def _dispatch(self):
        """Settle the children of all waiters, in FIFO order.

        Each waiter is popped from the queue before being processed, so it's
        never processed twice.
        """
        while True:
            with self._condition:
                if not self._waiters:
                    return
                child, on_fulfilled, on_rejected = self._waiters.popleft()
                state, value = self._state, self._value

            if state == self.FULFILLED:
                handler = on_fulfilled
            else:
                handler = on_rejected

            # Non-callable handlers are ignored: the outcome passes through.
            if not callable(handler):
                child._settle(state, value)
                continue

            try:
                result = handler(value)
            except Exception as error:
                child.reject(error)
                continue
            child.resolve(result)

    def _expire(self, token, on_timeout):
        with self._condition:
            if self._state != self.PENDING or self._timer is None or \
                    self._timer[0] is not token:
                return
            self._timer = None

        _logger.debug('Promise %s has timed out.', self._name)
        if on_timeout is None:
            self.abort(TimeoutError('timed out'))
            return
        try:
            on_timeout(self)
        except Exception as error:
            self.reject(error)
