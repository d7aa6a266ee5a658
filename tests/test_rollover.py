"""Tests for the daily rollover pass."""

from questline.core.models import (
    GameState, Habit, HistoryEntry, Task, ProgressiveGoal, FrequencyGoal, Exercise,
    GoalParams, UserStats
)
from questline.services.rollover import RolloverScheduler

HOUR_MS = 3600 * 1000


def test_stale_daily_habit_lapses_and_gets_task(clock):
    habit = Habit(id="h1", title="Stretch", streak=3, longest_streak=3,
                  last_completed_date="2024-06-02")
    state = GameState(habits=[habit])

    report = RolloverScheduler(clock).run(state)

    assert report.habits_lapsed == 1
    assert habit.streak == 0
    assert habit.longest_streak == 3
    assert habit.history == [HistoryEntry(date="2024-06-04", value=0)]
    assert report.tasks_generated == 1
    assert state.tasks[0].habit_id == "h1"


def test_rollover_is_idempotent(clock):
    habit = Habit(id="h1", title="Stretch", streak=3, last_completed_date="2024-06-01")
    state = GameState(habits=[habit], stats=UserStats(streak=5, last_active_date="2024-06-01"))
    scheduler = RolloverScheduler(clock)

    first = scheduler.run(state)
    snapshot = state.to_dict()
    second = scheduler.run(state)

    assert first.changed
    assert first.global_streak_reset
    assert not second.changed
    assert state.to_dict() == snapshot


def test_completed_tasks_are_archived_by_completion_date(clock):
    yesterday_ms = clock.start_of_today_ms() - HOUR_MS
    done_yesterday = Task(id="t1", title="Old", completed=True,
                          completed_at=yesterday_ms, created_at=yesterday_ms)
    done_today = Task(id="t2", title="New", completed=True,
                      completed_at=clock.now_ms(), created_at=yesterday_ms)
    state = GameState(tasks=[done_yesterday, done_today])

    report = RolloverScheduler(clock).run(state)

    assert report.tasks_archived == 1
    assert state.stats.task_history == {"2024-06-04": 1}
    assert [t.id for t in state.tasks] == ["t2"]


def test_stale_regenerable_tasks_are_pruned(clock):
    yesterday_ms = clock.start_of_today_ms() - HOUR_MS
    ad_hoc = Task(id="t1", title="Someday", created_at=yesterday_ms)
    daily = Task(id="t2", title="Daily chore", due_date="daily", created_at=yesterday_ms)
    orphan = Task(id="t3", title="Do 10 push-ups", goal_id="gone", created_at=yesterday_ms)
    state = GameState(tasks=[ad_hoc, daily, orphan])

    report = RolloverScheduler(clock).run(state)

    assert report.tasks_pruned == 2
    assert [t.id for t in state.tasks] == ["t1"]


def test_goal_streak_lapse_sets_badge(clock):
    goal = ProgressiveGoal(
        id="g1", title="Push-ups",
        exercises=[Exercise.create("Push-ups", 10, 50)],
        consecutive_days=4,
        history=[HistoryEntry(date="2024-06-03", value=10)],
    )
    state = GameState(goals=[goal])

    report = RolloverScheduler(clock).run(state)

    assert report.goals_lapsed == 1
    assert goal.consecutive_days == 0
    assert goal.previous_streak == 4
    assert goal.streak_broken_date == "2024-06-05"
    assert goal.history[-1] == HistoryEntry(date="2024-06-04", value=0)

    # The zero entry does not count as activity and the lapse is not repeated
    assert RolloverScheduler(clock).run(state).goals_lapsed == 0


def test_goal_with_entry_yesterday_keeps_streak(clock):
    goal = ProgressiveGoal(
        id="g1", title="Push-ups",
        exercises=[Exercise.create("Push-ups", 10, 50)],
        consecutive_days=2,
        history=[HistoryEntry(date="2024-06-04", value=10)],
    )
    state = GameState(goals=[goal])

    RolloverScheduler(clock).run(state)

    assert goal.consecutive_days == 2
    assert goal.streak_broken_date is None
    assert len(state.tasks_for_goal("g1")) == 1


def test_weekly_habit_progress_resets_on_new_week(clock):
    habit = Habit(id="h1", title="Long run", frequency="weekly", weekly_target=2,
                  weekly_progress=2, last_week_reset="2024-05-26")
    state = GameState(habits=[habit])

    report = RolloverScheduler(clock).run(state)

    assert report.habits_week_reset == 1
    assert habit.weekly_progress == 0
    assert habit.last_week_reset == "2024-06-02"
    assert len(state.tasks_for_habit("h1")) == 1


def test_daily_frequency_goal_waits_for_unfinished_exercises(clock):
    push_ups = Exercise.create("Push-ups", 10, 50)
    squats = Exercise.create("Squats", 20, 60)
    goal = FrequencyGoal(
        id="g1", title="Gym", exercises=[push_ups, squats],
        params=GoalParams(daily_target=2),
        history=[HistoryEntry(date="2024-06-05", value=1, exercise_id=push_ups.id)],
    )
    state = GameState(goals=[goal], tasks=[
        Task(id="t1", title="Push-ups", completed=True, completed_at=clock.now_ms(),
             created_at=clock.now_ms(), goal_id="g1", exercise_id=push_ups.id),
        Task(id="t2", title="Squats", created_at=clock.now_ms(), goal_id="g1",
             exercise_id=squats.id),
    ])
    scheduler = RolloverScheduler(clock)

    assert scheduler.goal_tasks_due(state, goal, "2024-06-05") == []

    state.tasks[1].completed = True
    goal.history.append(HistoryEntry(date="2024-06-05", value=1, exercise_id=squats.id))

    due = scheduler.goal_tasks_due(state, goal, "2024-06-05")
    assert {t.exercise_id for t in due} == {push_ups.id, squats.id}
    assert all(t.goal_id == "g1" for t in due)
