import pytest

import zenith_tui as zt

from .helpers import make_task


@pytest.fixture
def app_state(db, clock):
    return zt.ZenithApp(db, show_splash=False, clock=clock)


@pytest.fixture
def seeded_state(db, clock):
    """Three TODO tasks; newest first on the dashboard: Call mom, Write report, Buy milk."""
    db.create_task(make_task('Buy milk', minutes=0))
    db.create_task(make_task('Write report', minutes=1, description='quarterly numbers'))
    db.create_task(make_task('Call mom', minutes=2))
    return zt.ZenithApp(db, show_splash=False, clock=clock)
