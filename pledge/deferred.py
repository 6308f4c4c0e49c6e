# -*- coding: utf-8 -*-

from .promise import Promise


class Deferred(object):
    """Producer side of a Promise.

    A Deferred is the "creator" side of an async task, whereas a Promise
    represents the asynchronous value from the "consumer" side. The producer
    keeps the Deferred and gives only `deferred.promise` to the consumers.

    Attributes:
        promise (Promise): the Promise associated to the Deferred.
    """

    def __init__(self, scheduler=None, _name=None):
        self.promise = Promise(scheduler=scheduler, _name=_name or 'DEFERRED')

    def resolve(self, value=None):
        self.promise.resolve(value)

    def fulfill(self, *values):
        self.promise.fulfill(*values)

    def reject(self, reason=None):
        self.promise.reject(reason)

    def attach(self, handle):
        self.promise.attach(handle)

    def abort(self, reason=None):
        self.promise.abort(reason)

    def timeout(self, delay, on_timeout=None):
        self.promise.timeout(delay, on_timeout)
