from pathlib import Path

import pytest

from slidegen.errors import ValidationError
from slidegen.services.batch import BatchOrchestrator, write_output
from slidegen.services.transformer import process_carousel_data

from conftest import PNG_BYTES, FakeEngine, stack_layout, two_slide_carousel


@pytest.mark.asyncio
async def test_failing_job_does_not_stop_the_batch(settings):
    engine = FakeEngine(fail_on={1})
    orchestrator = BatchOrchestrator(engine, settings)

    outcome = await orchestrator.run_batch([stack_layout("um"), stack_layout("dois"), stack_layout("três")])

    results = outcome["results"]
    assert len(results) == 3
    assert [r["success"] for r in results] == [True, False, True]
    assert results[1]["error"] == "forced failure"
    assert [r["slideNumber"] for r in results] == [1, 2, 3]
    summary = outcome["summary"]
    assert (summary["total"], summary["successful"], summary["failed"]) == (3, 2, 1)
    assert summary["durationMs"] >= 0


@pytest.mark.asyncio
async def test_images_are_written_and_served_under_prefix(settings):
    orchestrator = BatchOrchestrator(FakeEngine(), settings)

    outcome = await orchestrator.run_batch([stack_layout()])

    result = outcome["results"][0]
    assert result["filename"].startswith("batch-") and result["filename"].endswith("-1.png")
    assert result["url"] == f"/images/{result['filename']}"
    assert (Path(settings.output_dir) / result["filename"]).read_bytes() == PNG_BYTES


@pytest.mark.asyncio
async def test_invalid_layouts_fail_individually(settings):
    engine = FakeEngine()
    orchestrator = BatchOrchestrator(engine, settings)

    outcome = await orchestrator.run_batch([{"template": "stack"}, "not a layout", stack_layout()])

    results = outcome["results"]
    assert [r["success"] for r in results] == [False, False, True]
    assert "At least one text field" in results[0]["error"]
    assert len(engine.calls) == 1


@pytest.mark.asyncio
async def test_results_keep_input_order_under_concurrency(settings):
    settings.batch_concurrency = 3
    engine = FakeEngine(delays={0: 0.05, 1: 0.01, 2: 0})
    orchestrator = BatchOrchestrator(engine, settings)

    outcome = await orchestrator.run_batch([stack_layout("a"), stack_layout("b"), stack_layout("c")])

    assert [r["slideNumber"] for r in outcome["results"]] == [1, 2, 3]
    assert [r["filename"].rsplit("-", 1)[1] for r in outcome["results"]] == ["1.png", "2.png", "3.png"]


@pytest.mark.asyncio
async def test_sequential_by_default(settings):
    engine = FakeEngine(delays={0: 0.02})
    orchestrator = BatchOrchestrator(engine, settings)

    await orchestrator.run_batch([stack_layout("a"), stack_layout("b")])

    assert [call["job_index"] for call in engine.calls] == [0, 1]


@pytest.mark.asyncio
async def test_deadline_fails_remaining_jobs_fast(settings):
    engine = FakeEngine(delays={0: 1.0, 1: 1.0})
    orchestrator = BatchOrchestrator(engine, settings)

    outcome = await orchestrator.run_batch([stack_layout("a"), stack_layout("b")], deadline_seconds=0.05)

    assert [r["success"] for r in outcome["results"]] == [False, False]
    assert all("deadline" in r["error"] for r in outcome["results"])
    assert outcome["summary"]["failed"] == 2


@pytest.mark.asyncio
async def test_recorder_receives_metadata(settings):
    recorded = []

    async def recorder(**fields):
        recorded.append(fields)
        return True

    orchestrator = BatchOrchestrator(FakeEngine(), settings, recorder=recorder)
    await orchestrator.run_batch([stack_layout()])

    assert recorded[0]["source"] == "batch"
    assert recorded[0]["template"] == "stack"
    assert recorded[0]["width"] == 1080


@pytest.mark.asyncio
async def test_two_slide_carousel_with_one_forced_failure(settings):
    layouts = process_carousel_data(two_slide_carousel())
    assert len(layouts) == 2

    outcome = await BatchOrchestrator(FakeEngine(fail_on={1}), settings).run_batch(layouts)

    summary = outcome["summary"]
    assert summary["total"] == 2
    assert summary["failed"] == 1
    assert summary["successful"] == 1
    assert outcome["results"][0]["success"] is True


@pytest.mark.asyncio
async def test_write_output_stays_inside_output_dir(settings):
    with pytest.raises(ValidationError):
        await write_output(settings, "../outside.png", PNG_BYTES)
    assert not (Path(settings.output_dir).parent / "outside.png").exists()

    url = await write_output(settings, "inside.png", PNG_BYTES)
    assert url == "/images/inside.png"
