# -*- coding: utf-8 -*-

"""Task queues used to run the Promise callbacks.

A Promise never calls its callbacks synchronously: they're always sent to a
scheduler, and executed after the current call stack has returned. The
scheduler is the only link between the promises and the host event loop.

Three implementations are available:

- ``ThreadScheduler``: one dedicated worker thread consuming a FIFO queue. It
  is the default scheduler.
- ``AsyncioScheduler``: uses the ready queue of an asyncio event loop.
- ``ManualScheduler``: tasks are executed only when ``run()`` is called. Time
  is virtual and advanced by ``advance()``. Useful for deterministic tests.

The process-wide default scheduler is created at first use, according to the
'scheduler' config entry, and can be replaced by ``set_default_scheduler()``.
"""

from abc import ABCMeta, abstractmethod
from collections import deque
import heapq
import itertools
import logging
import threading

from . import config

_logger = logging.getLogger(__name__)


class Scheduler(metaclass=ABCMeta):
    """Queue of tasks executed asynchronously, in FIFO order."""

    @abstractmethod
    def schedule(self, task):
        """Enqueue a task, to be executed after the current call returns.

        Args:
            task (callable): function without argument.
        """

    @abstractmethod
    def call_later(self, delay, task):
        """Arm a timer who will schedule the task after the delay.

        Args:
            delay (float): delay in seconds.
            task (callable): function without argument.
        Returns:
            object: a timer handle, with a `cancel()` method.
        """

    @staticmethod
    def _exec_task(task):
        try:
            task()
        except Exception:
            _logger.exception('Scheduled task %r has raised an exception!',
                              task)


class ThreadScheduler(Scheduler):
    """Scheduler executing all tasks in one dedicated thread.

    The worker thread is started at the first scheduled task (or by an
    explicit call to `start()`), and is a daemon thread: it doesn't prevent the
    program from exiting.

    Timers are `threading.Timer` instances. When they expire, their task is
    added to the queue, so all tasks are always executed by the worker thread.
    """

    def __init__(self, name='pledge-scheduler'):
        """
        Args:
            name (str): name of the worker thread.
        """
        self._name = name
        self._condition = threading.Condition()
        self._tasks = deque()
        self._thread = None
        self._stopped_thread = None

    def start(self):
        """Start the worker thread, if it's not already running."""
        with self._condition:
            self._start_thread()

    def stop(self, join=True):
        """Stop the worker thread.

        Tasks already in the queue are executed before the thread stops. If
        the scheduler is restarted in the meantime, the new worker waits for
        the end of the stopped one, so tasks are never executed concurrently.

        Args:
            join (boolean): if True, wait until the worker thread has ended.
        """
        with self._condition:
            thread = self._thread
            self._thread = None
            if thread is not None:
                self._stopped_thread = thread
            self._condition.notify_all()
        _logger.debug('Stop scheduler "%s"', self._name)
        if join and thread is not None and \
                thread is not threading.current_thread():
            thread.join()

    def is_worker_thread(self):
        """Returns True if the caller is executed by the worker thread."""
        with self._condition:
            return self._thread is threading.current_thread()

    def schedule(self, task):
        with self._condition:
            self._tasks.append(task)
            self._condition.notify()
            self._start_thread()

    def call_later(self, delay, task):
        timer = threading.Timer(delay, self.schedule, args=[task])
        timer.name = '%s timer' % self._name
        timer.daemon = True
        timer.start()
        return timer

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, _type, _value, _tb):
        self.stop()

    def _start_thread(self):
        # must be called with self._condition acquired.
        if self._thread is not None:
            return
        previous, self._stopped_thread = self._stopped_thread, None
        self._thread = threading.Thread(target=self._run_worker,
                                        args=(previous,), name=self._name)
        self._thread.daemon = True
        self._thread.start()
        _logger.debug('Start scheduler "%s"', self._name)

    def _run_worker(self, previous):
        me = threading.current_thread()
        if previous is not None and previous is not me:
            # The stopped worker may still be executing a task.
            previous.join()
        while True:
            with self._condition:
                while not self._tasks and self._thread is me:
                    self._condition.wait()
                if self._thread is not me:
                    # Stopped: the queue is drained, unless a new worker has
                    # taken over.
                    if not self._tasks or self._thread is not None:
                        return
                task = self._tasks.popleft()

            # self._condition must be released during task execution.
            self._exec_task(task)


class AsyncioScheduler(Scheduler):
    """Scheduler delegating to an asyncio event loop.

    Tasks are added to the ready queue of the loop, and so are executed
    before any I/O callback registered later. Both methods are thread-safe.
    """

    def __init__(self, loop):
        """
        Args:
            loop (asyncio.AbstractEventLoop): the loop running the tasks.
        """
        self._loop = loop

    def schedule(self, task):
        self._loop.call_soon_threadsafe(self._exec_task, task)

    def call_later(self, delay, task):
        timer = _LoopTimer()

        def arm():
            if not timer.cancelled:
                timer.handle = self._loop.call_later(delay, self._exec_task,
                                                     task)

        self._loop.call_soon_threadsafe(arm)
        return timer


class _LoopTimer(object):
    """Timer handle for AsyncioScheduler, usable from any thread."""

    def __init__(self):
        self.cancelled = False
        self.handle = None

    def cancel(self):
        self.cancelled = True
        if self.handle is not None:
            self.handle.cancel()


class ManualScheduler(Scheduler):
    """Deterministic scheduler, driven by the caller.

    Scheduled tasks are stored until `run()` is called. Timers use a virtual
    clock, moved forward only by `advance()`.

    Example:

        >>> scheduler = ManualScheduler()
        >>> p = Promise(scheduler=scheduler).fulfill(3)
        >>> p2 = p.then(lambda x: x * 2)
        >>> scheduler.run()
        1
        >>> p2.outcome
        6
    """

    def __init__(self):
        self.time = 0.0
        self._tasks = deque()
        self._timers = []
        self._counter = itertools.count()
        self._lock = threading.Lock()

    @property
    def pending(self):
        """Number of tasks waiting to be executed."""
        with self._lock:
            return len(self._tasks)

    def schedule(self, task):
        with self._lock:
            self._tasks.append(task)

    def call_later(self, delay, task):
        timer = _ManualTimer(self.time + delay, task)
        with self._lock:
            heapq.heappush(self._timers,
                           (timer.deadline, next(self._counter), timer))
        return timer

    def run(self):
        """Execute all the tasks in the queue, in FIFO order.

        Tasks scheduled by the executed tasks are also executed, until the
        queue is empty.

        Returns:
            int: number of tasks executed.
        """
        count = 0
        while True:
            with self._lock:
                if not self._tasks:
                    return count
                task = self._tasks.popleft()
            self._exec_task(task)
            count += 1

    def advance(self, seconds):
        """Move the virtual clock forward, then run all tasks.

        Expired timers are scheduled in the order of their deadline.

        Args:
            seconds (float): time to add to the clock.
        Returns:
            int: number of tasks executed.
        """
        with self._lock:
            self.time += seconds
            while self._timers and self._timers[0][0] <= self.time:
                _deadline, _index, timer = heapq.heappop(self._timers)
                if not timer.cancelled:
                    self._tasks.append(timer.task)
        return self.run()


class _ManualTimer(object):

    def __init__(self, deadline, task):
        self.deadline = deadline
        self.task = task
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


_default_scheduler = None
_default_lock = threading.Lock()

_scheduler_kinds = {
    'thread': ThreadScheduler,
    'manual': ManualScheduler,
}


def get_default_scheduler():
    """Returns the process-wide scheduler, creating it if needed.

    The kind of scheduler is chosen from the 'scheduler' config entry.

    Raises:
        ValueError: if the config entry is not a known scheduler kind.
    """
    global _default_scheduler

    with _default_lock:
        if _default_scheduler is None:
            kind = config.get('scheduler')
            try:
                factory = _scheduler_kinds[kind]
            except KeyError:
                raise ValueError('Unknown scheduler kind in config: %r' % kind)
            _default_scheduler = factory()
            _logger.debug('Default scheduler: %r', _default_scheduler)
        return _default_scheduler


def set_default_scheduler(scheduler):
    """Replace the process-wide scheduler.

    Promises already created keep the scheduler they were created with.

    Args:
        scheduler (Scheduler): the new default. If None, a new one will be
            created from the config at the next use.
    Returns:
        Scheduler: the previous default scheduler (can be None).
    """
    global _default_scheduler

    with _default_lock:
        previous = _default_scheduler
        _default_scheduler = scheduler
    return previous
