import datetime as dt
from types import SimpleNamespace

import zenith_tui as zt


BASE_TIME = dt.datetime(2024, 3, 14, 8, 0, tzinfo=dt.timezone.utc)


def make_task(title='Task One', minutes=0, **overrides) -> zt.Task:
    """Task created ``minutes`` after BASE_TIME so list order is predictable."""
    base = dict(title=title, created_at=BASE_TIME + dt.timedelta(minutes=minutes))
    base.update(overrides)
    return zt.Task(**base)


class RecordingApp:
    def __init__(self):
        self.exit_calls = 0

    def exit(self):
        self.exit_calls += 1


def dummy_event(data='', app=None):
    return SimpleNamespace(data=data, app=app or SimpleNamespace(exit=lambda: None))


def press(state, *keys):
    for key in keys:
        state.handle_key(key)


def type_text(state, text):
    press(state, *text)


def titles(state):
    return [t.title for t in state.snapshot().tasks]


def find_binding(kb, key):
    for binding in kb.bindings:
        if key in binding.keys:
            return binding.handler
    raise AssertionError(f'Binding for {key!r} not found')


__all__ = [
    'BASE_TIME',
    'make_task',
    'RecordingApp',
    'dummy_event',
    'press',
    'type_text',
    'titles',
    'find_binding',
]
