from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from cliplaunch.errors import CliplaunchError
from cliplaunch.execution import (
    NOTIFY_FAILURE,
    NOTIFY_SUCCESS,
    ExecutionPipeline,
    ExecutionStatus,
    decode_output,
)


def _recording_pipeline():
    statuses: list[ExecutionStatus] = []
    notices: list[tuple[str, str, str]] = []
    pipeline = ExecutionPipeline(
        notifier=lambda kind, title, message: notices.append((kind, title, message)),
        on_status=statuses.append,
    )
    return pipeline, statuses, notices


@pytest.mark.asyncio
async def test_successful_status_run(make_script):
    stub = make_script("clipaste", 'echo "clipboard has text"')
    pipeline, statuses, notices = _recording_pipeline()
    assert pipeline.status is ExecutionStatus.IDLE

    result = await pipeline.execute(str(stub), ["status"])

    assert statuses == [ExecutionStatus.RUNNING, ExecutionStatus.SUCCEEDED]
    assert result.status is ExecutionStatus.SUCCEEDED
    assert result.output.strip() == "clipboard has text"
    assert result.returncode == 0
    assert result.error is None
    assert pipeline.result is result
    assert notices == [(NOTIFY_SUCCESS, "Done", "")]


@pytest.mark.asyncio
async def test_missing_executable_fails(tmp_path: Path):
    pipeline, statuses, notices = _recording_pipeline()
    missing = tmp_path / "no-such-clipaste"

    result = await pipeline.execute(str(missing), ["status"])

    assert statuses == [ExecutionStatus.RUNNING, ExecutionStatus.FAILED]
    assert result.status is ExecutionStatus.FAILED
    assert result.error is not None
    assert "not found" in result.error.message
    assert notices and notices[0][0] == NOTIFY_FAILURE


@pytest.mark.asyncio
async def test_non_executable_file_fails(tmp_path: Path):
    plain = tmp_path / "clipaste"
    plain.write_text("echo hi\n", encoding="utf-8")
    plain.chmod(0o644)
    pipeline, _, _ = _recording_pipeline()

    result = await pipeline.execute(str(plain), ["status"])

    assert result.status is ExecutionStatus.FAILED
    assert result.error is not None and result.error.message


@pytest.mark.asyncio
async def test_non_zero_exit_includes_stderr(make_script):
    stub = make_script("clipaste", 'echo "partial"\necho "nothing to copy" >&2\nexit 3')
    pipeline, _, notices = _recording_pipeline()

    result = await pipeline.execute(str(stub), ["copy"])

    assert result.status is ExecutionStatus.FAILED
    assert result.returncode == 3
    assert result.error.returncode == 3
    assert "nothing to copy" in result.error.stderr
    assert "exited with code 3" in result.error.message
    assert result.output.strip() == "partial"
    assert notices[0][0] == NOTIFY_FAILURE
    assert "nothing to copy" in notices[0][2]


@pytest.mark.asyncio
async def test_arguments_are_not_shell_interpreted(make_script):
    stub = make_script("clipaste", 'printf "%s\\n" "$@"')
    pipeline, _, _ = _recording_pipeline()

    result = await pipeline.execute(str(stub), ["copy", "$HOME; echo pwned", "two words"])

    assert result.output.splitlines() == ["copy", "$HOME; echo pwned", "two words"]


@pytest.mark.asyncio
async def test_binary_output_is_described(make_script):
    stub = make_script("clipaste", "printf '\\377\\376\\375'")
    pipeline, _, _ = _recording_pipeline()

    result = await pipeline.execute(str(stub), ["get"])

    assert result.status is ExecutionStatus.SUCCEEDED
    assert result.raw_output == b"\xff\xfe\xfd"
    assert result.output == "<3 bytes of non-UTF-8 output>"


def test_decode_output():
    assert decode_output(None) == ""
    assert decode_output("already text") == "already text"
    assert decode_output("héllo".encode()) == "héllo"
    assert decode_output(b"\xff") == "<1 bytes of non-UTF-8 output>"


@pytest.mark.asyncio
async def test_later_run_supersedes_slow_run(make_script):
    slow = make_script("slow", "sleep 1\necho first")
    fast = make_script("fast", "echo second")
    pipeline, _, notices = _recording_pipeline()

    first_task = asyncio.create_task(pipeline.execute(str(slow), []))
    await asyncio.sleep(0)
    second = await pipeline.execute(str(fast), [])
    first = await first_task

    assert first.generation == 1
    assert second.generation == 2
    assert pipeline.result is second
    assert pipeline.status is ExecutionStatus.SUCCEEDED
    assert pipeline.result.output.strip() == "second"
    assert len(notices) == 1


@pytest.mark.asyncio
async def test_run_again_repeats_last_command(make_script, tmp_path: Path):
    counter = tmp_path / "count"
    stub = make_script("clipaste", f'echo run >> "{counter}"\necho ok')
    pipeline, statuses, _ = _recording_pipeline()

    with pytest.raises(CliplaunchError):
        await pipeline.run_again()

    await pipeline.execute(str(stub), ["status"])
    again = await pipeline.run_again()

    assert again.status is ExecutionStatus.SUCCEEDED
    assert again.argv == ("status",)
    assert counter.read_text().count("run") == 2
    assert statuses.count(ExecutionStatus.RUNNING) == 2


@pytest.mark.asyncio
async def test_timeout_fails(make_script):
    stub = make_script("clipaste", "exec sleep 5")
    pipeline = ExecutionPipeline(timeout=0.2)

    result = await pipeline.execute(str(stub), [])

    assert result.status is ExecutionStatus.FAILED
    assert "timed out" in result.error.message


@pytest.mark.asyncio
async def test_argument_with_nul_byte_fails_cleanly(make_script):
    stub = make_script("clipaste", 'echo "$@"')
    pipeline, statuses, notices = _recording_pipeline()

    result = await pipeline.execute(str(stub), ["copy", "a\x00b"])

    assert result.status is ExecutionStatus.FAILED
    assert result.error is not None
    assert result.error.message.startswith("Failed to start")
    assert pipeline.status is ExecutionStatus.FAILED
    assert pipeline.result is result
    assert statuses == [ExecutionStatus.RUNNING, ExecutionStatus.FAILED]
    assert notices and notices[0][0] == NOTIFY_FAILURE
