# -*- coding: utf-8 -*-

"""Combine several promises (or procedures) into a single Promise."""

from functools import partial
import logging
from threading import Lock

from .errors import AbortError
from .promise import Promise
from .producers import defer
from .util import is_abortable, is_thenable

_logger = logging.getLogger(__name__)


def _as_promise(source, scheduler):
    if isinstance(source, Promise):
        return source
    elif is_thenable(source):
        return Promise(scheduler=scheduler, _name='ADOPT').resolve(source)
    elif callable(source):
        return defer(source, scheduler=scheduler)
    return Promise.resolved(source, scheduler=scheduler)


def join(sources, scheduler=None):
    """Create a Promise who wait a list of promises to be all fulfilled.

    The resulting Promise resolve when all of the sources are fulfilled, and
    returns a list of all the resulting values, keeping the order of the
    source list (not the order of completion).
    If a source is rejected, then the resulting promise is rejected with the
    same reason, and all results from other sources are ignored.

    Sources who are callable are first executed with `defer()`: they receive
    their own Promise as first argument. Other non-thenable values are used
    as results.

    Args:
        sources (iterable): promises, thenables or procedures.
        scheduler (Scheduler, optional): scheduler of the resulting Promise.
    Returns:
        Promise<list>: resulting promise, fulfilled when all sources are
            fulfilled, or rejected when one of them has been rejected.
    """
    sources = list(sources)
    collector = Promise(scheduler=scheduler, _name='JOIN')
    if not sources:
        return collector.fulfill([])

    lock = Lock()
    has_error = [False]
    remaining = [len(sources)]
    results = [None] * len(sources)

    def fulfill_one(index, value):
        with lock:
            if has_error[0]:
                return
            results[index] = value
            remaining[0] -= 1
            if remaining[0]:
                return
        collector.fulfill(results)

    def reject_one(reason):
        with lock:
            if has_error[0]:
                return
            has_error[0] = True
        _logger.debug('One member of %r has been rejected: %r', collector,
                      reason)
        collector.reject(reason)

    for index, source in enumerate(sources):
        member = _as_promise(source, collector.scheduler)
        member.then(partial(fulfill_one, index), reject_one)

    return collector


def when(task, scheduler=None):
    """Defer a task, or join a list of tasks.

    Example:

        >>> when([task1, task2, task3]).spread(
        ...     lambda ret1, ret2, ret3: ret1 + ret2 + ret3)

    Args:
        task: list (or tuple) of sources, joined with `join()`. Any other value
            is a single procedure or thenable, executed with `defer()`.
        scheduler (Scheduler, optional)
    Returns:
        Promise<*>
    """
    if isinstance(task, (list, tuple)):
        return join(task, scheduler=scheduler)
    return defer(task, scheduler=scheduler)


def race(sources, scheduler=None):
    """Settle with the fastest of the sources.

    The resulting Promise will be settled as soon as one of the sources is
    done. Result value or rejection reason of the finished source are
    transmitted. The other sources are aborted, if they can be.

    Args:
        sources (iterable): promises, thenables or procedures.
        scheduler (Scheduler, optional)
    Returns:
        Promise: a promise
    Raises:
        ValueError: If the source list is empty.
    """
    sources = list(sources)
    if not sources:
        raise ValueError('Empty promise list in race()')

    winner = Promise(scheduler=scheduler, _name='RACE')
    members = [_as_promise(source, winner.scheduler) for source in sources]

    lock = Lock()
    is_settled = [False]

    def settle_once(settle, value):
        with lock:
            if is_settled[0]:
                return
            is_settled[0] = True
        settle(value)
        for member in members:
            if is_abortable(member):
                member.abort(AbortError('Another promise has won the race.'))

    for member in members:
        member.then(partial(settle_once, winner.fulfill),
                    partial(settle_once, winner.reject))

    return winner
