"""Async pipeline: statute XML -> seed file -> provision store.

Each stage runs its CLI in a child interpreter (``python -m lovcite.cli.*``)
and is judged by exit status and the JSON it prints, so a parser crash on one
export only fails that export.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
import json
import logging
from pathlib import Path
import sys


LOGGER = logging.getLogger(__name__)

DEFAULT_PIPELINE_TIMEOUT_SECONDS = 60.0

INGEST_MODULE = "lovcite.cli.ingest_statute"
LOAD_MODULE = "lovcite.cli.load_seeds"


@dataclass(frozen=True, slots=True)
class StatutePipelineResult:
    success: bool
    seed_id: str | None
    seed_path: str | None
    provision_count: int
    stage: str = "unknown"
    error: str | None = None


@dataclass(frozen=True, slots=True)
class CommandOutcome:
    ok: bool
    stdout: str
    error: str


def _module_args(module: str, *options: tuple[str, str]) -> list[str]:
    args = ["-m", module]
    for flag, value in options:
        args.extend([flag, value])
    return args


def _reported_error(stdout_text: str) -> str | None:
    """First entry of the ``errors`` list a lovcite CLI prints, if any."""

    try:
        payload = json.loads(stdout_text)
    except json.JSONDecodeError:
        return None
    errors = payload.get("errors") if isinstance(payload, dict) else None
    if not isinstance(errors, list) or not errors:
        return None
    first = errors[0]
    if isinstance(first, dict) and first.get("error"):
        return str(first["error"])
    return str(first)


async def _run_cli_command(
    *args: str,
    timeout_seconds: float = DEFAULT_PIPELINE_TIMEOUT_SECONDS,
) -> CommandOutcome:
    command = " ".join(args)
    LOGGER.debug("Running %s", command)
    proc = await asyncio.create_subprocess_exec(
        sys.executable,
        *args,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
    )

    try:
        stdout_bytes, stderr_bytes = await asyncio.wait_for(proc.communicate(), timeout=timeout_seconds)
    except asyncio.TimeoutError:
        proc.kill()
        await proc.communicate()
        return CommandOutcome(ok=False, stdout="", error=f"Timed out after {int(timeout_seconds)}s: {command}")

    stdout_text = stdout_bytes.decode("utf-8", errors="replace")
    stderr_text = stderr_bytes.decode("utf-8", errors="replace").strip()
    if proc.returncode == 0:
        return CommandOutcome(ok=True, stdout=stdout_text, error=stderr_text)

    error = _reported_error(stdout_text) or stderr_text or f"Command failed ({proc.returncode}): {command}"
    return CommandOutcome(ok=False, stdout=stdout_text, error=error)


def _failure(stage: str, error: str, *, seed_id: str | None = None, seed_path: str | None = None) -> StatutePipelineResult:
    return StatutePipelineResult(
        success=False,
        seed_id=seed_id,
        seed_path=seed_path,
        provision_count=0,
        stage=stage,
        error=error,
    )


def _parse_ingest_payload(stdout_text: str) -> StatutePipelineResult:
    try:
        payload = json.loads(stdout_text)
    except json.JSONDecodeError:
        return _failure("ingest", "ingest_statute returned malformed JSON")
    if not isinstance(payload, dict):
        return _failure("ingest", "ingest_statute payload is not an object")

    results = payload.get("results")
    if not isinstance(results, list) or not results:
        return _failure("ingest", _reported_error(stdout_text) or "No ingestion result returned for file")

    entry = results[0]
    if not isinstance(entry, dict) or not entry.get("seed_path"):
        return _failure("ingest", "ingest_statute result entry is invalid")

    seed_id = entry.get("seed_id")
    return StatutePipelineResult(
        success=True,
        seed_id=None if seed_id is None else str(seed_id),
        seed_path=str(entry["seed_path"]),
        provision_count=int(entry.get("provision_count") or 0),
        stage="ingest",
    )


async def run_statute_pipeline(
    file_path: Path,
    *,
    output_dir: str,
    db_path: str | None = None,
    legal_basis_refs: tuple[str, ...] = (),
) -> StatutePipelineResult:
    """Ingest one XML export into a seed file and, with *db_path*, load it."""

    ingest_options = [("--path", str(file_path)), ("--output-dir", output_dir)]
    ingest_options.extend(("--legal-basis-ref", ref) for ref in legal_basis_refs)
    ingest = await _run_cli_command(*_module_args(INGEST_MODULE, *ingest_options))
    if not ingest.ok:
        return _failure("ingest", ingest.error)

    ingested = _parse_ingest_payload(ingest.stdout)
    if not ingested.success or db_path is None:
        return ingested

    load = await _run_cli_command(
        *_module_args(LOAD_MODULE, ("--path", str(ingested.seed_path)), ("--db-path", db_path))
    )
    if not load.ok:
        return _failure("load", load.error, seed_id=ingested.seed_id, seed_path=ingested.seed_path)

    return StatutePipelineResult(
        success=True,
        seed_id=ingested.seed_id,
        seed_path=ingested.seed_path,
        provision_count=ingested.provision_count,
        stage="done",
    )
