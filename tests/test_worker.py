"""Tests for the job processor lifecycle, deadline and retry policy."""

import asyncio
import time

import pytest

from app.schemas.job import JobStatus, JobType
from app.services.errors import ProviderClientError, ProviderServerError
from app.services.job_store import JobStore
from app.worker import JobProcessor

VIDEO_INPUT = {
    "url": "https://www.youtube.com/watch?v=abc",
    "mode": "style",
    "_metadata": {"itemId": "item-1", "targetTab": "style"},
}


def make_processor(store, llm, **kwargs):
    kwargs.setdefault("retry_base_delay_ms", 1)
    kwargs.setdefault("retry_max_delay_ms", 5)
    return JobProcessor(store, llm_client=llm, **kwargs)


def run_to_completion(processor, job_id):
    async def scenario():
        processor.submit(job_id)
        await processor.drain()

    asyncio.run(scenario())


def test_job_completes(store, fake_llm):
    """A successful run stores the result and completion time."""
    llm = fake_llm("## Style analysis")
    job = store.insert(JobType.ANALYZE_VIDEO, VIDEO_INPUT)

    run_to_completion(make_processor(store, llm), job.id)

    job = store.get_by_id(job.id)
    assert job.status == "COMPLETED"
    assert job.result == {"content": "## Style analysis"}
    assert job.error is None
    assert job.started_at is not None
    assert job.completed_at is not None
    assert job.input == VIDEO_INPUT
    assert len(llm.calls) == 1


def test_retry_ceiling(store, fake_llm):
    """A job that always hits a retryable error is attempted max_retries + 1 times."""
    llm = fake_llm(ProviderServerError("Provider error 503", status_code=503))
    job = store.insert(JobType.ANALYZE_VIDEO, VIDEO_INPUT, max_retries=3)

    run_to_completion(make_processor(store, llm), job.id)

    job = store.get_by_id(job.id)
    assert job.status == "FAILED"
    assert job.retry_count == 3
    assert job.error == "Provider error 503"
    assert len(llm.calls) == 4


def test_transient_error_then_success(store, fake_llm):
    """One 503 followed by success completes after a single retry."""
    llm = fake_llm(ProviderServerError("Provider error 503", status_code=503), "recovered")
    job = store.insert(JobType.ANALYZE_VIDEO, VIDEO_INPUT)
    processor = make_processor(store, llm, retry_base_delay_ms=100, retry_max_delay_ms=1000)

    started = time.monotonic()
    run_to_completion(processor, job.id)
    elapsed = time.monotonic() - started

    job = store.get_by_id(job.id)
    assert job.status == "COMPLETED"
    assert job.retry_count == 1
    assert job.result == {"content": "recovered"}
    assert job.error is None
    assert elapsed >= 0.09


def test_message_markers_are_retryable(store, fake_llm):
    """Plain errors mentioning a connection reset are retried."""
    llm = fake_llm(RuntimeError("read ECONNRESET"), "ok")
    job = store.insert(JobType.ANALYZE_VIDEO, VIDEO_INPUT)

    run_to_completion(make_processor(store, llm), job.id)

    job = store.get_by_id(job.id)
    assert job.status == "COMPLETED"
    assert job.retry_count == 1


def test_client_error_fails_without_retry(store, fake_llm):
    """4xx provider errors are terminal on the first attempt."""
    llm = fake_llm(ProviderClientError("Provider rejected request 400: bad", status_code=400))
    job = store.insert(JobType.ANALYZE_VIDEO, VIDEO_INPUT)

    run_to_completion(make_processor(store, llm), job.id)

    job = store.get_by_id(job.id)
    assert job.status == "FAILED"
    assert job.retry_count == 0
    assert "400" in job.error
    assert len(llm.calls) == 1


def test_invalid_input_fails_before_provider_call(store, fake_llm):
    """Inputs that do not match the job type fail without calling the provider."""
    llm = fake_llm("unused")
    job = store.insert(JobType.ANALYZE_VIDEO, {"mode": "style"})

    run_to_completion(make_processor(store, llm), job.id)

    job = store.get_by_id(job.id)
    assert job.status == "FAILED"
    assert job.retry_count == 0
    assert job.error.startswith("Invalid input for ANALYZE_VIDEO")
    assert llm.calls == []


def test_unknown_job_type_fails(store, fake_llm):
    """Records with an unregistered type fail without retries."""
    llm = fake_llm("unused")
    job = store.insert("TRANSCRIBE_AUDIO", {})

    run_to_completion(make_processor(store, llm), job.id)

    job = store.get_by_id(job.id)
    assert job.status == "FAILED"
    assert job.error == "Unknown job type: TRANSCRIBE_AUDIO"
    assert llm.calls == []


def test_timeout_fails_job(store, fake_llm):
    """A run exceeding the deadline fails with 'Job timeout' and is not retried."""

    async def hang():
        await asyncio.sleep(5)
        return "too late"

    llm = fake_llm(hang)
    job = store.insert(JobType.ANALYZE_VIDEO, VIDEO_INPUT)

    run_to_completion(make_processor(store, llm, job_timeout=0.5), job.id)

    job = store.get_by_id(job.id)
    assert job.status == "FAILED"
    assert job.error == "Job timeout"
    assert job.retry_count == 0
    assert job.result is None


def test_late_result_does_not_overwrite_failed(store, fake_llm):
    """A result arriving after the job was failed is discarded."""
    job = store.insert(JobType.ANALYZE_VIDEO, VIDEO_INPUT)

    async def fail_then_answer():
        store.update(job.id, status=JobStatus.FAILED, error="Job timeout")
        return "late content"

    llm = fake_llm(fail_then_answer)
    asyncio.run(make_processor(store, llm).process(job.id))

    job = store.get_by_id(job.id)
    assert job.status == "FAILED"
    assert job.error == "Job timeout"
    assert job.result is None


def test_late_error_does_not_reopen_failed(store, fake_llm):
    """A retryable error arriving after the job was failed schedules nothing."""
    job = store.insert(JobType.ANALYZE_VIDEO, VIDEO_INPUT)

    async def fail_then_raise():
        store.update(job.id, status=JobStatus.FAILED, error="Job timeout")
        raise ProviderServerError("Provider error 502", status_code=502)

    llm = fake_llm(fail_then_raise)
    processor = make_processor(store, llm)

    async def scenario():
        await processor.process(job.id)
        assert processor.active_tasks == 0

    asyncio.run(scenario())

    job = store.get_by_id(job.id)
    assert job.status == "FAILED"
    assert job.retry_count == 0
    assert job.error == "Job timeout"


def test_duplicate_submissions_run_once(store, fake_llm):
    """Only one of several concurrent runs claims the PENDING job."""
    llm = fake_llm("once")
    job = store.insert(JobType.ANALYZE_VIDEO, VIDEO_INPUT)
    processor = make_processor(store, llm)

    async def scenario():
        processor.submit(job.id)
        processor.submit(job.id)
        await processor.drain()
        # Terminal jobs are not picked up again
        await processor.process(job.id)

    asyncio.run(scenario())

    assert store.get_by_id(job.id).status == "COMPLETED"
    assert len(llm.calls) == 1


def test_missing_job_is_ignored(store, fake_llm):
    """Processing an unknown id does nothing."""
    llm = fake_llm("unused")
    asyncio.run(make_processor(store, llm).process("does-not-exist"))
    assert llm.calls == []


def test_retry_delay_backoff(store, fake_llm):
    """Backoff doubles from one second and is capped at thirty."""
    processor = JobProcessor(store, llm_client=fake_llm("unused"))

    assert processor.retry_delay(0) == 1.0
    assert processor.retry_delay(1) == 2.0
    assert processor.retry_delay(2) == 4.0
    assert processor.retry_delay(10) == 30.0


def test_resume_pending(store, fake_llm):
    """Resuming submits every PENDING job."""
    llm = fake_llm("done")
    first = store.insert(JobType.ANALYZE_VIDEO, VIDEO_INPUT)
    second = store.insert(JobType.ANALYZE_VIDEO, VIDEO_INPUT)
    finished = store.insert(JobType.ANALYZE_VIDEO, VIDEO_INPUT)
    store.update(finished.id, status=JobStatus.COMPLETED, result={"content": "old"})
    processor = make_processor(store, llm)

    async def scenario():
        resumed = await processor.resume_pending()
        await processor.drain()
        return resumed

    assert asyncio.run(scenario()) == 2
    assert store.get_by_id(first.id).status == "COMPLETED"
    assert store.get_by_id(second.id).status == "COMPLETED"
    assert store.get_by_id(finished.id).result == {"content": "old"}


def test_shutdown_cancels_in_flight_runs(store, fake_llm):
    """Shutdown cancels running tasks, leaving the job PROCESSING."""

    started = asyncio.Event()

    async def hang():
        started.set()
        await asyncio.sleep(5)
        return "never"

    llm = fake_llm(hang)
    job = store.insert(JobType.ANALYZE_VIDEO, VIDEO_INPUT)
    processor = make_processor(store, llm)

    async def scenario():
        processor.submit(job.id)
        await started.wait()
        await processor.shutdown()
        assert processor.active_tasks == 0

    asyncio.run(scenario())

    assert store.get_by_id(job.id).status == "PROCESSING"


class RecordingStore(JobStore):
    """Job store that records every status it successfully writes."""

    def __init__(self, session_factory, write_delay=0.0):
        super().__init__(session_factory)
        self.write_delay = write_delay
        self.statuses = []

    def insert(self, job_type, input_payload, max_retries=None):
        job = super().insert(job_type, input_payload, max_retries)
        self.statuses.append(job.status)
        return job

    def update_if_status(self, job_id, expected, **fields):
        time.sleep(self.write_delay)
        updated = super().update_if_status(job_id, expected, **fields)
        if updated:
            self.statuses.append(JobStatus(fields["status"]).value)
        return updated


def test_status_sequence_across_retry(session_factory, fake_llm):
    """A retried job passes through PENDING and PROCESSING again before completing."""
    store = RecordingStore(session_factory)
    llm = fake_llm(ProviderServerError("Provider error 503", status_code=503), "ok")
    job = store.insert(JobType.ANALYZE_VIDEO, VIDEO_INPUT)

    run_to_completion(make_processor(store, llm), job.id)

    assert store.statuses == ["PENDING", "PROCESSING", "PENDING", "PROCESSING", "COMPLETED"]


def test_store_writes_do_not_block_event_loop(session_factory, fake_llm):
    """Slow status writes leave the event loop free for other work."""
    store = RecordingStore(session_factory, write_delay=0.2)
    llm = fake_llm("ok")
    job = store.insert(JobType.ANALYZE_VIDEO, VIDEO_INPUT)
    processor = make_processor(store, llm)
    gaps = []

    async def heartbeat():
        last = time.monotonic()
        while True:
            await asyncio.sleep(0.01)
            now = time.monotonic()
            gaps.append(now - last)
            last = now

    async def scenario():
        beat = asyncio.create_task(heartbeat())
        processor.submit(job.id)
        await processor.drain()
        beat.cancel()

    asyncio.run(scenario())

    assert store.get_by_id(job.id).status == "COMPLETED"
    assert max(gaps) < 0.15


@pytest.mark.parametrize(
    "metadata",
    [
        {"itemId": "item-1"},
        {"targetTab": "style", "extra": [1, 2]},
        "item-1",
        None,
    ],
)
def test_metadata_shape_does_not_affect_execution(store, fake_llm, metadata):
    """Client metadata of any shape is stored as sent and ignored by the agents."""
    llm = fake_llm("analysis")
    payload = {"url": "https://youtu.be/abc", "mode": "source", "_metadata": metadata}
    job = store.insert(JobType.ANALYZE_VIDEO, payload)

    run_to_completion(make_processor(store, llm), job.id)

    job = store.get_by_id(job.id)
    assert job.status == "COMPLETED"
    assert job.input["_metadata"] == metadata
    assert len(llm.calls) == 1
