from __future__ import annotations

import asyncio
import functools
from concurrent.futures import Executor
from dataclasses import dataclass
from pathlib import Path
from typing import Any, AsyncIterator, Callable, List, Optional, Union

from ..config.models import ScanSettings
from ..core.models import ScanResult
from .scanner import scan_directory

POLL_INTERVAL = 0.05


@dataclass(frozen=True)
class ProgressEvent:
    """One event of a streamed scan.

    kinds: ``file_start`` (name, total=size), ``progress`` (name, percent,
    current=bytes read, total), ``file_complete`` (name, digest) and a final
    ``result`` carrying the list of ScanResults.
    """

    kind: str
    name: Optional[str] = None
    current: int = 0
    total: int = 0
    percent: float = 0.0
    digest: Optional[str] = None
    result: Optional[Any] = None


async def run_blocking(func: Callable[..., Any], *args, executor: Optional[Executor] = None, **kwargs) -> Any:
    return await asyncio.get_running_loop().run_in_executor(
        executor, functools.partial(func, *args, **kwargs)
    )


async def scan_stream(
    root_dir: Union[str, Path],
    settings: Optional[ScanSettings] = None,
    executor: Optional[Executor] = None,
) -> AsyncIterator[ProgressEvent]:
    """Run scan_directory() in an executor and yield its events as they happen.

    A ValidationError for a bad root is raised from the iterator once the scan
    thread has finished.
    """
    loop = asyncio.get_running_loop()
    queue: asyncio.Queue = asyncio.Queue()

    def _put(event: ProgressEvent) -> None:
        loop.call_soon_threadsafe(queue.put_nowait, event)

    def on_file_start(name: str, size: int) -> None:
        _put(ProgressEvent(kind="file_start", name=name, total=int(size)))

    def on_progress(name: str, percent: float, bytes_read: int, total: int) -> None:
        _put(ProgressEvent(kind="progress", name=name, current=int(bytes_read),
                           total=int(total), percent=float(percent)))

    def on_file_complete(name: str, digest: str) -> None:
        _put(ProgressEvent(kind="file_complete", name=name, digest=digest))

    task = asyncio.ensure_future(
        run_blocking(
            scan_directory,
            root_dir,
            settings,
            executor=executor,
            on_file_start=on_file_start,
            on_file_complete=on_file_complete,
            on_progress=on_progress,
        )
    )

    while True:
        if task.done() and queue.empty():
            break
        try:
            event = await asyncio.wait_for(queue.get(), timeout=POLL_INTERVAL)
            yield event
        except asyncio.TimeoutError:
            continue

    result: List[ScanResult] = task.result()
    yield ProgressEvent(kind="result", result=result)
