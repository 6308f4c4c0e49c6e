# -*- coding: utf-8 -*-


class AbortError(Exception):
    """The operation has been aborted before being completed.

    It's the default rejection reason of ``Promise.abort()``.
    """
    pass


class TimeoutError(AbortError):
    """An operation could not be executed within the time allowed."""
    pass


class RejectionError(Exception):
    """A Promise has been rejected with a value who is not an exception.

    ``Promise.result()`` can only raise exceptions: the original value is
    wrapped and kept in the `reason` attribute.

    Attributes:
        reason: the rejection value, as passed to ``reject()``.
    """

    def __init__(self, reason):
        Exception.__init__(self, 'Promise rejected with non-exception value: '
                                 '%r' % (reason,))
        self.reason = reason
