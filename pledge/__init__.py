# -*- coding: utf-8 -*-

from .__version__ import __version__  # noqa

import logging

from .aggregate import join, race, when
from .decorators import wrap, wrap_promise
from .deferred import Deferred
from .errors import AbortError, RejectionError, TimeoutError
from .producers import defer, defer_callback
from .promise import Promise
from .reduce_coroutine import reduce_coroutine
from .scheduler import (AsyncioScheduler, ManualScheduler, Scheduler,
                        ThreadScheduler, get_default_scheduler,
                        set_default_scheduler)
from .thread_pool import ThreadPoolExecutor
from .util import Abortable, Thenable, is_abortable, is_thenable

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = ['Abortable', 'AbortError', 'AsyncioScheduler', 'Deferred',
           'ManualScheduler', 'Promise', 'RejectionError', 'Scheduler',
           'Thenable', 'ThreadPoolExecutor', 'ThreadScheduler',
           'TimeoutError', 'defer', 'defer_callback', 'get_default_scheduler',
           'is_abortable', 'is_thenable', 'join', 'race', 'reduce_coroutine',
           'set_default_scheduler', 'when', 'wrap', 'wrap_promise']
