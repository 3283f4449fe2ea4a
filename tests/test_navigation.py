import zenith_tui as zt


def test_cursor_advance_wraps_and_starts_at_zero():
    cursor = zt.Cursor()
    cursor.advance(3)
    assert cursor.selected == 0
    cursor.advance(3)
    cursor.advance(3)
    assert cursor.selected == 2
    cursor.advance(3)
    assert cursor.selected == 0


def test_cursor_retreat_wraps_to_end():
    cursor = zt.Cursor(0)
    cursor.retreat(4)
    assert cursor.selected == 3
    cursor.retreat(4)
    assert cursor.selected == 2
    fresh = zt.Cursor()
    fresh.retreat(4)
    assert fresh.selected == 0


def test_cursor_moves_are_noops_on_empty_list():
    cursor = zt.Cursor()
    cursor.advance(0)
    cursor.retreat(0)
    assert cursor.selected is None


def test_cursor_stale_index_recovers():
    cursor = zt.Cursor(9)
    cursor.advance(3)
    assert cursor.selected == 0
    cursor = zt.Cursor(9)
    cursor.retreat(3)
    assert cursor.selected == 2


def test_cursor_clamp():
    cursor = zt.Cursor()
    cursor.clamp(2)
    assert cursor.selected == 0
    cursor.select(5)
    cursor.clamp(2)
    assert cursor.selected == 1
    cursor.clamp(0)
    assert cursor.selected is None


def test_navigation_column_focus_wraps():
    nav = zt.Navigation()
    assert nav.focused_status is zt.TaskStatus.TODO
    nav.focus_previous_column()
    assert nav.focused_status is zt.TaskStatus.DONE
    nav.focus_next_column()
    nav.focus_next_column()
    assert nav.focused_status is zt.TaskStatus.DOING
    assert nav.focused_column == 1


def test_navigation_clamp_per_column(db):
    db.create_task(zt.Task(title='todo a'))
    db.create_task(zt.Task(title='todo b'))
    db.create_task(zt.Task(title='doing', status=zt.TaskStatus.DOING))
    cache = zt.TaskCache(db)
    cache.refresh()
    nav = zt.Navigation()
    nav.columns[zt.TaskStatus.TODO].select(7)
    nav.clamp(cache)
    assert nav.dashboard.selected == 0
    assert nav.columns[zt.TaskStatus.TODO].selected == 1
    assert nav.columns[zt.TaskStatus.DOING].selected == 0
    assert nav.columns[zt.TaskStatus.DONE].selected is None


def test_cache_filter_is_case_insensitive_over_title_and_description(db):
    db.create_task(zt.Task(title='Buy Milk'))
    db.create_task(zt.Task(title='Call mom', description='ask about MILK prices'))
    db.create_task(zt.Task(title='Write report'))
    cache = zt.TaskCache(db)
    cache.query = 'mil'
    cache.refresh()
    assert sorted(t.title for t in cache.tasks) == ['Buy Milk', 'Call mom']
    assert len(cache.all_tasks) == 3
    cache.query = ''
    cache.refresh()
    assert len(cache.tasks) == 3
