"""Tests for the daily rollover job."""

from questline.config import SchedulerConfig
from questline.services.scheduler import RolloverJob
from tests.conftest import next_day


def test_disabled_job_does_not_start(service):
    job = RolloverJob(service, SchedulerConfig(enabled=False))
    job.start()

    assert job.scheduler is None
    assert job.next_run_time is None
    job.shutdown()


def test_run_performs_rollover_and_vice_backfill(service):
    habit = service.add_habit("Stretch")
    vice = service.add_vice("Sugar")
    service.check_in_vice(vice.id, "clean")

    service.clock.advance(3)
    RolloverJob(service).run()

    assert service.get_tasks_for_habit(habit.id)[0].created_at >= service.clock.start_of_today_ms()
    assert vice.history["2024-06-06"] == "relapsed"
    assert vice.current_streak == 0


def test_run_twice_is_harmless(service):
    service.add_habit("Stretch")
    next_day(service)

    job = RolloverJob(service)
    job.run()
    job.run()

    assert len(service.get_habit_tasks()) == 1
