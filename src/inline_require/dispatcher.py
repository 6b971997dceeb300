"""Fan the transform out across a build's output files.

Each file is independent.  Assets are replaced only after every file has a
result, and only from the calling thread; a failure in any file leaves the
store untouched and fails the run with that file named.
"""

from __future__ import annotations

import logging
import re
from collections import deque
from concurrent.futures import (
    FIRST_COMPLETED,
    Executor,
    Future,
    ProcessPoolExecutor,
    ThreadPoolExecutor,
    wait,
)
from typing import Literal

from pydantic import BaseModel, Field

from inline_require.engine import TransformEngine
from inline_require.errors import ConfigurationError, TransformError
from inline_require.grammar import SCRIPT_OUTPUT
from inline_require.host import AssetStore
from inline_require.models import TransformResult
from inline_require.sources import RawSource, SourceMapSource, merge_source_map, to_text
from inline_require.worker import process_source

log = logging.getLogger(__name__)

ParallelMode = Literal["inline", "threads", "processes"]


class FileOutcome(BaseModel):
    file: str
    status: Literal["rewritten", "unchanged", "skipped"]
    inlined: list[str] = Field(default_factory=list)


class DispatchReport(BaseModel):
    files: list[FileOutcome] = Field(default_factory=list)

    @property
    def rewritten(self) -> list[str]:
        return [f.file for f in self.files if f.status == "rewritten"]

    @property
    def unchanged(self) -> list[str]:
        return [f.file for f in self.files if f.status == "unchanged"]

    @property
    def skipped(self) -> list[str]:
        return [f.file for f in self.files if f.status == "skipped"]


class Dispatcher:
    """Runs the engine over many files with bounded parallelism.

    ``mode`` is fixed at construction: ``inline`` runs on the calling thread,
    ``threads`` uses a thread pool, ``processes`` ships each file to a worker
    process.  Pools are created on first use and kept until ``close()``.
    """

    def __init__(
        self,
        engine: TransformEngine,
        *,
        concurrency: int = 1,
        mode: ParallelMode = "threads",
        test: str = SCRIPT_OUTPUT,
    ) -> None:
        if concurrency < 1:
            raise ConfigurationError(f"concurrency must be >= 1, got {concurrency}")
        if mode not in ("inline", "threads", "processes"):
            raise ConfigurationError(f"Unknown parallel mode {mode!r}")
        self.engine = engine
        self.concurrency = concurrency
        self.in_flight_limit = concurrency * 2
        self.mode = mode
        self._test = re.compile(test)
        self._pool: Executor | None = None

    def __enter__(self) -> Dispatcher:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        if self._pool is not None:
            self._pool.shutdown(wait=True, cancel_futures=True)
            self._pool = None
            log.debug("Worker pool shut down")

    def is_eligible(self, file: str) -> bool:
        return bool(self._test.search(file))

    def run(
        self,
        store: AssetStore,
        files: list[str],
        *,
        source_map: bool = False,
    ) -> DispatchReport:
        report = DispatchReport()
        inputs: dict[str, tuple[str, dict | None]] = {}
        for file in files:
            if self.is_eligible(file) and store.get_asset(file) is not None:
                inputs[file] = _read(store, file, source_map)
            else:
                report.files.append(FileOutcome(file=file, status="skipped"))

        if self.mode == "inline" or len(inputs) <= 1:
            results = {file: self._transform(file, text) for file, (text, _map) in inputs.items()}
        else:
            results = self._run_pooled(inputs)

        # Install in input order once every file has a result
        for file, (text, original_map) in inputs.items():
            report.files.append(_install(store, file, text, original_map, results[file]))

        log.info(
            "Processed %d files: %d rewritten, %d unchanged, %d skipped",
            len(files), len(report.rewritten), len(report.unchanged), len(report.skipped),
        )
        return report

    def _transform(self, file: str, text: str) -> TransformResult:
        try:
            return self.engine.process(file, text)
        except Exception as exc:
            raise TransformError(file, f"transform failed: {exc}") from exc

    # ── Pooled execution ────────────────────────────────────────────────

    def _get_pool(self) -> Executor:
        if self._pool is None:
            if self.mode == "processes":
                self._pool = ProcessPoolExecutor(max_workers=self.concurrency)
            else:
                self._pool = ThreadPoolExecutor(
                    max_workers=self.concurrency, thread_name_prefix="inline-require",
                )
            log.debug("Started %s pool with %d workers", self.mode, self.concurrency)
        return self._pool

    def _run_pooled(self, inputs: dict[str, tuple[str, dict | None]]) -> dict[str, TransformResult]:
        """Transform ``inputs`` on the pool, at most ``in_flight_limit`` at a time."""
        pool = self._get_pool()
        results: dict[str, TransformResult] = {}
        snapshot = self.engine.registry.snapshot() if self.mode == "processes" else None

        queue = deque(inputs.items())
        in_flight: dict[Future, str] = {}
        try:
            while queue or in_flight:
                while queue and len(in_flight) < self.in_flight_limit:
                    file, (text, _map) = queue.popleft()
                    if snapshot is None:
                        in_flight[pool.submit(self._transform, file, text)] = file
                        continue
                    cached = self.engine.cached(file, text)
                    if cached is not None:
                        results[file] = cached
                        continue
                    payload = {"file": file, "original": text, "side_effect_free": snapshot}
                    in_flight[pool.submit(process_source, payload)] = file

                if not in_flight:
                    continue
                done, _pending = wait(in_flight, return_when=FIRST_COMPLETED)
                for future in done:
                    file = in_flight.pop(future)
                    results[file] = self._collect(future, file, inputs[file][0], snapshot)
        except BaseException:
            for future in in_flight:
                future.cancel()
            raise

        return results

    def _collect(self, future: Future, file: str, text: str, snapshot: dict | None) -> TransformResult:
        try:
            value = future.result()
        except TransformError:
            raise
        except Exception as exc:
            raise TransformError(file, f"worker failed: {exc}") from exc

        if snapshot is None:
            return value
        result = TransformResult(text=value["text"], inlined=tuple(value["inlined"]))
        self.engine.remember(text, result)
        return result


def _read(store: AssetStore, file: str, source_map: bool) -> tuple[str, dict | None]:
    asset = store.get_asset(file)
    if asset is None:
        raise TransformError(file, "asset disappeared from the build output")
    try:
        if source_map:
            source, original_map = asset.source_and_map()
        else:
            source, original_map = asset.source(), None
        return to_text(source), original_map
    except UnicodeDecodeError as exc:
        raise TransformError(file, f"output is not valid UTF-8: {exc}") from exc


def _install(
    store: AssetStore,
    file: str,
    original: str,
    original_map: dict | None,
    result: TransformResult,
) -> FileOutcome:
    if not result.changed:
        return FileOutcome(file=file, status="unchanged")

    if original_map is not None:
        new_asset = SourceMapSource(
            result.text, file, merge_source_map(original_map, file), original_text=original,
        )
    else:
        new_asset = RawSource(result.text)
    store.update_asset(file, new_asset)
    return FileOutcome(file=file, status="rewritten", inlined=list(result.inlined))
