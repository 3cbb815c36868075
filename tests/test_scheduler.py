from junction_alert.scheduler import RunScheduler, SchedulerState


def test_requests_before_ready_are_dropped(clock):
    scheduler = RunScheduler(min_interval_s=2.0, clock=clock)
    assert scheduler.try_start() is False
    assert scheduler.state is SchedulerState.IDLE
    assert scheduler.last_start is None


def test_run_enters_cooling_and_drops_requests(clock):
    scheduler = RunScheduler(min_interval_s=2.0, clock=clock)
    scheduler.mark_ready()
    assert scheduler.state is SchedulerState.IDLE
    assert scheduler.try_start() is True
    assert scheduler.state is SchedulerState.COOLING
    clock.advance(1.0)
    assert scheduler.try_start() is False
    clock.advance(1.0)
    # exactly the interval is still cooling
    assert scheduler.try_start() is False
    clock.advance(0.01)
    assert scheduler.state is SchedulerState.IDLE
    assert scheduler.try_start() is True


def test_dropped_request_does_not_extend_cooldown(clock):
    scheduler = RunScheduler(min_interval_s=2.0, clock=clock)
    scheduler.mark_ready()
    scheduler.try_start()
    start = scheduler.last_start
    clock.advance(1.5)
    scheduler.try_start()
    assert scheduler.last_start == start
