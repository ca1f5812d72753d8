import asyncio
import logging
import os

import pytest

from TileLive.helpers.supervisor import RestartPolicy, StreamSupervisor, is_progress_line
from .conftest import FakeSpawner, wait_until

DELAY = 0.1


@pytest.fixture
async def supervisor(ctx, catalog, spawner):
    sup = StreamSupervisor(ctx, catalog, spawner, RestartPolicy(delay=DELAY))
    await sup.start()
    await wait_until(lambda: len(spawner.spawned) == ctx.n_streams)
    yield sup
    await sup.stop()


async def test_start_spawns_one_worker_per_slot(supervisor, spawner, catalog):
    names = sorted(h.stream_name for h in spawner.spawned)
    assert names == sorted(f"stream{i}" for i in range(1, 7))

    for slot_id, slot in supervisor.slots.items():
        assert os.path.isdir(catalog.output_dir(slot_id))
        assert slot.running
        cmd = spawner.current(slot.name).cmd
        assert cmd[-1] == os.path.join(catalog.output_dir(slot_id), "index.m3u8")
        assert "rtsp://camera.local:8554/live" in cmd


async def test_output_dirs_are_distinct(supervisor):
    dirs = [slot.output_dir for slot in supervisor.slots.values()]
    assert len(set(dirs)) == len(dirs)


async def test_start_twice_does_not_double_spawn(supervisor, spawner):
    await supervisor.start()
    await asyncio.sleep(DELAY)
    assert len(spawner.spawned) == 6


async def test_exited_slot_restarts_once_after_cooldown(supervisor, spawner):
    loop = asyncio.get_running_loop()
    first = spawner.current("stream3")

    killed_at = loop.time()
    first.exit(1)
    await wait_until(lambda: len(spawner.handles("stream3")) == 2)
    elapsed = loop.time() - killed_at

    assert elapsed >= DELAY * 0.9
    assert elapsed < DELAY * 2

    # no duplicate relaunch for the same exit
    await asyncio.sleep(DELAY * 3)
    assert len(spawner.handles("stream3")) == 2

    slot = supervisor.slots[3]
    assert slot.restart_count == 1
    assert slot.last_exit_code == 1
    assert slot.handle is spawner.current("stream3")


async def test_clean_exit_is_restarted_too(supervisor, spawner):
    spawner.current("stream1").exit(0)
    await wait_until(lambda: len(spawner.handles("stream1")) == 2)
    assert supervisor.slots[1].last_exit_code == 0


async def test_crash_does_not_touch_other_slots(supervisor, spawner):
    before = {i: spawner.current(f"stream{i}") for i in (1, 2, 4, 5, 6)}

    spawner.current("stream3").exit(1)
    await wait_until(lambda: len(spawner.handles("stream3")) == 2)

    for i, handle in before.items():
        assert spawner.handles(f"stream{i}") == [handle]
        assert not handle.exited
        assert supervisor.slots[i].restart_count == 0


async def test_spawn_failure_follows_restart_policy(ctx, catalog):
    spawner = FakeSpawner()
    spawner.fail_for.add("stream2")
    sup = StreamSupervisor(ctx, catalog, spawner, RestartPolicy(delay=0.02))
    await sup.start()

    try:
        await asyncio.sleep(0.1)
        assert spawner.handles("stream2") == []
        assert sup.slots[2].restart_count >= 2
        assert not sup.slots[2].running

        spawner.fail_for.clear()
        await wait_until(lambda: len(spawner.handles("stream2")) == 1)
        assert sup.slots[2].running
    finally:
        await sup.stop()


async def test_slot_gives_up_after_max_attempts(ctx, catalog):
    spawner = FakeSpawner(auto_exit={"stream4": 1})
    policy = RestartPolicy(delay=0.01, max_attempts=3)
    sup = StreamSupervisor(ctx, catalog, spawner, policy)
    await sup.start()

    try:
        await wait_until(lambda: sup.slots[4].gave_up)
        # first run plus three relaunches
        assert len(spawner.handles("stream4")) == 4
        assert sup.slots[4].restart_count == 3
        assert not sup.slots[1].gave_up
        assert sup.slots[1].running
    finally:
        await sup.stop()


async def test_progress_lines_are_not_logged(supervisor, spawner, caplog):
    caplog.set_level(logging.INFO)
    handle = spawner.current("stream5")

    handle.emit("Input #0, rtsp, from 'rtsp://camera.local:8554/live':")
    handle.emit("frame=  125 fps= 25 q=21.0 size=N/A time=00:00:05.00")
    handle.emit("Output #0, hls, to 'index.m3u8':")
    handle.exit(1)
    await wait_until(lambda: len(spawner.handles("stream5")) == 2)

    text = caplog.text
    assert "[stream5] Input #0" in text
    assert "[stream5] Output #0" in text
    assert "frame=" not in text
    assert "[stream5] ffmpeg exited with 1" in text


async def test_stop_stops_running_workers(ctx, catalog, spawner):
    sup = StreamSupervisor(ctx, catalog, spawner, RestartPolicy(delay=DELAY))
    await sup.start()
    await wait_until(lambda: len(spawner.spawned) == 6)

    await sup.stop()

    assert all(h.stopped for h in spawner.spawned)
    assert not any(slot.running for slot in sup.slots.values())

    await asyncio.sleep(DELAY * 2)
    assert len(spawner.spawned) == 6


async def test_snapshot_reports_each_slot(supervisor, spawner):
    snapshot = supervisor.snapshot()

    assert [s["id"] for s in snapshot] == [1, 2, 3, 4, 5, 6]
    first = snapshot[0]
    assert first["name"] == "stream1"
    assert first["running"] is True
    assert first["pid"] == spawner.current("stream1").pid
    assert first["restartCount"] == 0
    assert first["gaveUp"] is False


def test_is_progress_line():
    assert is_progress_line("frame=  10 fps=0.0 q=0.0 size=N/A")
    assert not is_progress_line("[hls @ 0x55] Opening 'seg_001.ts' for writing")


async def test_unexpected_spawner_error_still_restarts(ctx, catalog, caplog):
    spawner = FakeSpawner()
    spawner.error_for["stream1"] = RuntimeError("spawner exploded")
    sup = StreamSupervisor(ctx, catalog, spawner, RestartPolicy(delay=0.02))
    await sup.start()

    try:
        await wait_until(lambda: sup.slots[1].restart_count >= 2)
        assert not sup._tasks[1].done()
        assert "[stream1] worker run failed" in caplog.text
        assert "spawner exploded" in caplog.text

        del spawner.error_for["stream1"]
        await wait_until(lambda: len(spawner.handles("stream1")) == 1)
        assert sup.slots[1].running
    finally:
        await sup.stop()


async def test_long_run_resets_attempt_count(ctx, catalog):
    spawner = FakeSpawner(lifetime={"stream2": 0.08})
    policy = RestartPolicy(delay=0.01, max_attempts=1, reset_after=0.05)
    sup = StreamSupervisor(ctx, catalog, spawner, policy)
    await sup.start()

    try:
        # without the reset the second exit would exceed max_attempts
        await wait_until(lambda: len(spawner.handles("stream2")) >= 4)
        assert not sup.slots[2].gave_up
        assert sup.slots[2].restart_count >= 3

        starts = [h.spawned_at for h in spawner.handles("stream2")]
        gaps = [b - a for a, b in zip(starts, starts[1:])]
        # lifetime plus the base delay, never a grown one
        assert all(gap < 0.08 + 0.01 + 0.05 for gap in gaps)
    finally:
        await sup.stop()


async def test_exponential_policy_spaces_out_relaunches(ctx, catalog):
    spawner = FakeSpawner(auto_exit={"stream6": 1})
    policy = RestartPolicy(mode="exponential", delay=0.03, max_delay=1.0)
    sup = StreamSupervisor(ctx, catalog, spawner, policy)
    await sup.start()

    try:
        await wait_until(lambda: len(spawner.handles("stream6")) >= 4)

        starts = [h.spawned_at for h in spawner.handles("stream6")[:4]]
        gaps = [b - a for a, b in zip(starts, starts[1:])]
        assert gaps[0] >= 0.03 * 0.9
        assert gaps[1] > gaps[0] * 1.5
        assert gaps[2] > gaps[1] * 1.5
        assert not sup.slots[6].gave_up
    finally:
        await sup.stop()


async def test_failed_wait_stops_worker_before_relaunch(ctx, catalog, spawner):
    sup = StreamSupervisor(ctx, catalog, spawner, RestartPolicy(delay=0.02))
    await sup.start()

    try:
        await wait_until(lambda: len(spawner.handles("stream4")) == 1)
        broken = spawner.current("stream4")
        broken._exit.set_exception(RuntimeError("wait failed"))

        await wait_until(lambda: len(spawner.handles("stream4")) == 2)
        assert broken.stopped
        assert sup.slots[4].running
    finally:
        await sup.stop()
