import pytest

import zenith_tui as zt


def test_new_timer_is_idle_at_full_duration(clock):
    timer = zt.FocusTimer(25 * 60, clock=clock)
    assert timer.remaining_sec == 1500
    assert not timer.is_running
    assert timer.last_tick is None
    assert not timer.tick()


def test_sub_second_ticks_do_not_count(clock):
    timer = zt.FocusTimer(1500, clock=clock)
    timer.toggle()
    clock.advance(0.9)
    assert not timer.tick()
    assert timer.remaining_sec == 1500
    clock.advance(0.1)
    assert timer.tick()
    assert timer.remaining_sec == 1499


def test_whole_seconds_subtracted_and_anchor_moves(clock):
    timer = zt.FocusTimer(1500, clock=clock)
    timer.toggle()
    clock.advance(3.7)
    assert timer.tick()
    assert timer.remaining_sec == 1497
    assert timer.last_tick == clock.now


def test_pause_freezes_and_resume_reanchors(clock):
    timer = zt.FocusTimer(1500, clock=clock)
    timer.toggle()
    clock.advance(2)
    timer.tick()
    assert timer.toggle() is False
    clock.advance(100)
    assert not timer.tick()
    assert timer.remaining_sec == 1498
    assert timer.toggle() is True
    clock.advance(1)
    timer.tick()
    assert timer.remaining_sec == 1497


@pytest.mark.parametrize('elapsed', [3, 10])
def test_session_stops_at_zero(clock, elapsed):
    timer = zt.FocusTimer(3, clock=clock)
    timer.toggle()
    clock.advance(elapsed)
    assert timer.tick()
    assert timer.remaining_sec == 0
    assert not timer.is_running
    clock.advance(5)
    assert not timer.tick()
    assert timer.remaining_sec == 0


def test_reset_restores_duration(clock):
    timer = zt.FocusTimer(60, clock=clock)
    timer.toggle()
    clock.advance(10)
    timer.tick()
    timer.reset()
    assert timer.remaining_sec == 60
    assert not timer.is_running
    assert timer.progress == 0.0


def test_duration_must_be_positive():
    with pytest.raises(ValueError):
        zt.FocusTimer(0)
