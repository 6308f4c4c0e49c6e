# -*- coding: utf-8 -*-

import pytest

from pledge import ManualScheduler, config, set_default_scheduler


@pytest.fixture
def scheduler(request):
    """Use a ManualScheduler as default scheduler, during the test.

    Callbacks are executed only when the test calls ``scheduler.run()`` or
    ``scheduler.advance()``.

    Returns:
        ManualScheduler: the scheduler instance.
    """
    manual_scheduler = ManualScheduler()
    previous = set_default_scheduler(manual_scheduler)

    def _restore_scheduler():
        set_default_scheduler(previous)
    request.addfinalizer(_restore_scheduler)
    return manual_scheduler


@pytest.fixture
def reset_config(request):
    """Restore the default config values at the end of the test."""
    request.addfinalizer(config.reset)
