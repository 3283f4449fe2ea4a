import datetime as dt

import pytest

import zenith_tui as zt


def text_of(fragments):
    return ''.join(text for _style, text in fragments)


@pytest.fixture
def state(db, clock):
    return zt.ZenithApp(db, show_splash=False, clock=clock)


def test_empty_dashboard_prompts_for_first_task(state):
    text = text_of(zt.build_dashboard_fragments(state.snapshot()))
    assert "No tasks found.\nPress 'n' to create one." in text


def test_dashboard_rows_show_icon_priority_and_reward(db, clock):
    db.create_task(zt.Task(title='Write tests', priority=zt.TaskPriority.HIGH, xp_reward=15,
                           status=zt.TaskStatus.DOING))
    state = zt.ZenithApp(db, show_splash=False, clock=clock)
    fragments = zt.build_dashboard_fragments(state.snapshot(), width=100)
    text = text_of(fragments)
    assert '◉' in text
    assert 'Write tests' in text
    assert 'HIGH' in text
    assert '15 XP' in text
    assert any('row.selected' in style for style, _ in fragments)


def test_due_style_buckets():
    today = dt.date(2024, 3, 14)

    def due(day):
        return dt.datetime.combine(day, dt.time(23, 59, 59), tzinfo=dt.timezone.utc)

    assert zt.due_style(due(dt.date(2024, 3, 13)), today) == 'class:date.overdue'
    assert zt.due_style(due(today), today) == 'class:date.today'
    assert zt.due_style(due(dt.date(2024, 3, 20)), today) == 'class:date.future'
    assert zt.due_style(None, today) == 'class:dimmed'
    assert zt.due_style(due(dt.date(2024, 3, 13)), today, done=True) == 'class:dimmed'


def test_kanban_headers_count_each_column(db, clock):
    db.create_task(zt.Task(title='a'))
    db.create_task(zt.Task(title='b', status=zt.TaskStatus.DOING))
    state = zt.ZenithApp(db, show_splash=False, clock=clock)
    text = text_of(zt.build_kanban_fragments(state.snapshot(), width=90))
    assert 'TODO (1)' in text
    assert 'DOING (1)' in text
    assert 'DONE (0)' in text
    assert '(empty)' in text


def test_focus_view_draws_big_digits_and_state(state):
    text = text_of(zt.build_focus_fragments(state.snapshot(), width=80))
    assert '█' in text
    assert 'PAUSED' in text
    assert 'session 25:00' in text


def test_analytics_totals_and_day_labels(db, clock):
    stamp = dt.datetime(2024, 3, 14, 8, 0, tzinfo=dt.timezone.utc)
    db.create_task(zt.Task(title='x', status=zt.TaskStatus.DONE, completed_at=stamp))
    db.create_task(zt.Task(title='y', status=zt.TaskStatus.DONE, completed_at=stamp - dt.timedelta(days=1)))
    state = zt.ZenithApp(db, show_splash=False, clock=clock)
    text = text_of(zt.build_analytics_fragments(state.snapshot()))
    assert 'Tasks Completed (Last 7 Days): 2' in text
    assert '03-14' in text
    assert '03-13' in text


def test_analytics_without_history(state):
    text = text_of(zt.build_analytics_fragments(state.snapshot()))
    assert 'Tasks Completed (Last 7 Days): 0' in text


def test_inspector_and_quit_overlays(db, clock):
    db.create_task(zt.Task(title='Inspect me'))
    state = zt.ZenithApp(db, show_splash=False, clock=clock)
    text = text_of(zt.build_inspector_fragments(state.snapshot()))
    assert 'Inspect me' in text
    assert 'Status: TODO | XP Reward: 10 | Created:' in text
    assert 'No description provided.' in text
    quit_text = text_of(zt.build_quit_fragments(state.snapshot()))
    assert 'Are you sure you want to quit?' in quit_text
    assert '(y) Confirm    (n) Cancel' in quit_text


def test_header_shows_level_and_active_tab(state):
    fragments = zt.build_header_fragments(state.snapshot())
    assert 'LVL 1' in text_of(fragments)
    assert ('class:header.tab.active', ' Dashboard ') in fragments


def test_status_bar_shows_search_and_errors(state):
    state.handle_key('/')
    for ch in 'mil':
        state.handle_key(ch)
    text = text_of(zt.build_status_bar_fragments(state.snapshot()))
    assert 'SEARCH' in text
    assert '/mil' in text


def test_help_is_context_aware(state):
    text = text_of(zt.build_help_fragments(state.snapshot()))
    assert 'Toggle status' in text
    state.handle_key('tab')
    text = text_of(zt.build_help_fragments(state.snapshot()))
    assert 'Switch column' in text
    assert 'Toggle status' not in text


def test_form_marks_active_field(state):
    state.handle_key('n')
    fragments = zt.build_form_fragments(state.snapshot())
    text = text_of(fragments)
    assert 'NEW TASK' in text
    assert 'YYYY-MM-DD' in text
    assert any(style == 'class:form.label.active' and 'Title' in t for style, t in fragments)


def test_text_helpers():
    assert zt.fmt_mmss(1500) == '25:00'
    assert zt.fmt_mmss(-4) == '00:00'
    assert zt._truncate('abcdefghij', 5) == 'abcd…'
    assert zt._pad_display('ab', 5, 'right') == '   ab'
    assert len(zt._pad_display('abc', 6, 'center')) == 6


def _long_list_state(db, clock, count=60, **overrides):
    base = dt.datetime(2024, 3, 1, tzinfo=dt.timezone.utc)
    for i in range(count):
        db.create_task(zt.Task(title=f'Task {i:02d}', created_at=base + dt.timedelta(minutes=i), **overrides))
    return zt.ZenithApp(db, show_splash=False, clock=clock)


def test_scroll_offset_moves_only_as_needed():
    assert zt.scroll_offset(5, 10, 20) == 0
    assert zt.scroll_offset(40, 60, 14) == 27
    assert zt.scroll_offset(30, 60, 14, offset=27) == 27
    assert zt.scroll_offset(10, 60, 14, offset=27) == 10
    assert zt.scroll_offset(None, 60, 14, offset=99) == 46


def test_dashboard_keeps_selection_on_screen_in_long_list(db, clock):
    state = _long_list_state(db, clock)
    for _ in range(40):
        state.handle_key('j')
    snap = state.snapshot()
    assert snap.selected_task.title == 'Task 19'
    scroll = {}
    fragments = zt.build_dashboard_fragments(snap, width=100, height=20, scroll=scroll)
    text = text_of(fragments)
    assert text.count('\n') < 20
    assert 'Task 19' in text
    assert 'Task 59' not in text
    assert any('row.selected' in style and 'Task 19' in t for style, t in fragments)
    assert scroll['dashboard'] == 27


def test_dashboard_without_height_draws_every_row(db, clock):
    state = _long_list_state(db, clock, count=30)
    text = text_of(zt.build_dashboard_fragments(state.snapshot()))
    assert 'Task 00' in text
    assert 'Task 29' in text


def test_kanban_scrolls_focused_column(db, clock):
    state = _long_list_state(db, clock, count=40)
    state.handle_key('tab')
    for _ in range(30):
        state.handle_key('j')
    snap = state.snapshot()
    assert snap.kanban_selected[0] == 30
    text = text_of(zt.build_view_fragments(snap, width=90, height=12, scroll={}))
    assert '▸ Task 09' in text
    assert 'Task 39' not in text
    assert text.count('\n') == 11
