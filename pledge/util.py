# -*- coding: utf-8 -*-

from abc import ABCMeta, abstractmethod


def _has_method(cls, name):
    for klass in cls.__mro__:
        if name in klass.__dict__:
            return callable(klass.__dict__[name])
    return False


class Thenable(metaclass=ABCMeta):
    """Object who can be chained, like a Promise.

    Any class exposing a callable ``then(on_fulfilled, on_rejected)`` method
    is considered as a Thenable by ``isinstance()``, without having to inherit
    from this class. It allows to adopt promises from other libraries.
    """

    __slots__ = ()

    @abstractmethod
    def then(self, on_fulfilled=None, on_rejected=None):
        raise NotImplementedError

    @classmethod
    def __subclasshook__(cls, subclass):
        if cls is Thenable:
            return _has_method(subclass, 'then')
        return NotImplemented


class Abortable(metaclass=ABCMeta):
    """Resource who can be stopped before its end, with an ``abort()`` method.

    Any class exposing a callable ``abort(reason)`` method is considered as an
    Abortable by ``isinstance()``.
    """

    __slots__ = ()

    @abstractmethod
    def abort(self, reason=None):
        raise NotImplementedError

    @classmethod
    def __subclasshook__(cls, subclass):
        if cls is Abortable:
            return _has_method(subclass, 'abort')
        return NotImplemented


def is_thenable(value):
    """Check if an object can be chained, like a Promise, or is a "result".

    The promise module uses this function to differentiate "chainable" objects
    and direct return values, when using a callback who can returns both.

    The `then` method can be defined by the class, or set on the instance.

    Returns:
        boolean: True if the value has a callable `then` method. False if not.
    """
    return isinstance(value, Thenable) or \
        callable(getattr(value, 'then', None))


def is_abortable(value):
    """Check if an object can be aborted (has an abort() method).

    Args:
        value: object to test, usually a Promise or an attached handle.
    Returns:
        boolean: True if it can be aborted, False if not.
    """
    return isinstance(value, Abortable) or \
        callable(getattr(value, 'abort', None))
