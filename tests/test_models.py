import pytest

import zenith_tui as zt


def test_status_cycle_wraps():
    assert zt.TaskStatus.TODO.next() is zt.TaskStatus.DOING
    assert zt.TaskStatus.DOING.next() is zt.TaskStatus.DONE
    assert zt.TaskStatus.DONE.next() is zt.TaskStatus.TODO


@pytest.mark.parametrize('start,up,down', [
    (zt.TaskPriority.HIGH, zt.TaskPriority.LOW, zt.TaskPriority.MEDIUM),
    (zt.TaskPriority.MEDIUM, zt.TaskPriority.HIGH, zt.TaskPriority.LOW),
    (zt.TaskPriority.LOW, zt.TaskPriority.MEDIUM, zt.TaskPriority.HIGH),
])
def test_priority_rotation(start, up, down):
    assert start.increment() is up
    assert start.decrement() is down
    assert start.increment().decrement() is start


def test_task_defaults():
    task = zt.Task(title='Buy milk')
    assert task.status is zt.TaskStatus.TODO
    assert task.priority is zt.TaskPriority.MEDIUM
    assert task.xp_reward == 10
    assert task.completed_at is None
    assert task.created_at.tzinfo is not None
    assert task.id != zt.Task(title='Buy milk').id


def test_profile_single_level_up_carries_remainder():
    profile = zt.UserProfile(level=1, current_xp=90, next_level_xp=100).with_xp(50)
    assert (profile.level, profile.current_xp, profile.next_level_xp) == (2, 40, 150)


def test_profile_exact_threshold_levels_up():
    profile = zt.UserProfile().with_xp(100)
    assert (profile.level, profile.current_xp, profile.next_level_xp) == (2, 0, 150)


def test_profile_large_award_crosses_several_levels():
    profile = zt.UserProfile().with_xp(100 + 150 + 225 + 7)
    assert (profile.level, profile.current_xp, profile.next_level_xp) == (4, 7, 337)


def test_profile_award_below_threshold_only_adds():
    original = zt.UserProfile()
    profile = original.with_xp(10)
    assert (profile.level, profile.current_xp) == (1, 10)
    assert original.current_xp == 0


def test_profile_rejects_negative_award():
    with pytest.raises(ValueError):
        zt.UserProfile().with_xp(-5)


def test_profile_progress_fraction():
    assert zt.UserProfile(current_xp=25).progress == pytest.approx(0.25)
