"""Drive a selection through the transfer executor and collect a BatchReport."""

import os
from concurrent.futures import ThreadPoolExecutor
from typing import Iterable, Optional

from myfilemanager.core.clipboard import unique_paths
from myfilemanager.core.errors import EngineContractError, ErrorKind, TransferError, TransferFailure
from myfilemanager.core.logging import get_logger
from myfilemanager.core.models import BatchReport, CancelToken, OperationKind, TransferItem
from myfilemanager.core.paths import check_source, destination_for, is_within, normalize, resolve_destination
from myfilemanager.core.transfer import TransferExecutor

log = get_logger(__name__)

BATCH_KINDS = (OperationKind.COPY, OperationKind.MOVE, OperationKind.DELETE)


class BatchCoordinator:
    """Applies one operation to every selected path, in selection order.

    One bad path never stops the rest: every path gets exactly one
    TransferItem in the report. Only invalid arguments raise.
    """

    def __init__(self, overwrite: bool = False, max_workers: int = 1):
        self.overwrite = overwrite
        self.max_workers = max(1, int(max_workers))

    def executor(self, cancel: Optional[CancelToken] = None) -> TransferExecutor:
        return TransferExecutor(overwrite=self.overwrite, cancel=cancel)

    def execute(self, paths: Iterable[str], kind: OperationKind, target_dir: Optional[str] = None,
                cancel: Optional[CancelToken] = None) -> BatchReport:
        if kind not in BATCH_KINDS:
            raise EngineContractError(f"unsupported batch operation: {kind!r}")
        if isinstance(paths, (str, bytes)):
            raise EngineContractError("paths must be a sequence of paths, not a single string")
        sources = unique_paths(paths)
        if not sources:
            raise EngineContractError("selection is empty")
        if kind is not OperationKind.DELETE:
            if not target_dir:
                raise EngineContractError("target directory is required for copy and move")
            target_dir = normalize(target_dir)

        executor = self.executor(cancel)
        report = BatchReport(kind=kind, target_dir=target_dir)
        log.info("%s %d items%s", kind.value, len(sources), f" into {target_dir}" if target_dir else "")

        items: list[Optional[TransferItem]] = [None] * len(sources)

        def run_lane(indices: list[int]) -> None:
            for i in indices:
                items[i] = self._run_one(executor, sources[i], kind, target_dir)

        lanes = self._lanes(sources)
        if len(lanes) == 1:
            run_lane(lanes[0])
        else:
            with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
                # list() re-raises anything a lane raised
                list(pool.map(run_lane, lanes))

        report.items = items
        for item in report.failed:
            log.warning("%s failed for %s: %s", kind.value, item.source, item.error)
        log.info(report.summary())
        return report

    def _run_one(self, executor: TransferExecutor, source: str, kind: OperationKind,
                 target_dir: Optional[str]) -> TransferItem:
        item = TransferItem(source=source, kind=kind)
        if kind is not OperationKind.DELETE:
            item.destination = destination_for(source, target_dir)
        if executor.cancelled:
            return item.fail(TransferError(ErrorKind.CANCELLED, source, "Operation cancelled"))

        try:
            if kind is OperationKind.DELETE:
                check_source(source)
            else:
                item.destination = resolve_destination(source, target_dir, kind, self.overwrite)
        except TransferFailure as failure:
            return item.fail(failure.error)
        return executor.run(item)

    def _lanes(self, sources: list[str]) -> list[list[int]]:
        """Group item indices into lanes that may run concurrently."""
        everything = [list(range(len(sources)))]
        if self.max_workers <= 1 or len(sources) < 2:
            return everything
        for a in sources:
            for b in sources:
                if a != b and is_within(a, b):
                    return everything

        lanes: dict[str, list[int]] = {}
        for i, source in enumerate(sources):
            lanes.setdefault(os.path.normcase(os.path.basename(source)), []).append(i)
        return list(lanes.values())
