"""Monitoring service - drives the fetch, hash, diff and persist cycle."""

import time
from typing import Any
from uuid import UUID, uuid4

from idl_sentinel.application.services.concurrency import bounded_map
from idl_sentinel.application.services.content_hash import content_hash
from idl_sentinel.application.services.diff_engine import DiffEngine
from idl_sentinel.domain.entities import (
    ChangeRecord,
    InitialFetchResult,
    InterfaceDefinition,
    MonitoredTarget,
    MonitoringLog,
    RunResult,
    TargetError,
    TargetOutcome,
)
from idl_sentinel.domain.entities.monitoring import LogLevel
from idl_sentinel.domain.errors import FatalSetupError, to_app_error
from idl_sentinel.domain.protocols import DefinitionReader, UnitOfWorkFactory
from idl_sentinel.infrastructure.telemetry import (
    create_span,
    get_logger,
    record_change_detected,
    record_definition_fetch,
    record_monitor_run,
    record_snapshot_created,
    record_exception,
    record_target_checked,
    run_id_var,
    target_id_var,
)

logger = get_logger(__name__)


class MonitoringService:
    """Checks every active target for definition changes.

    Targets are processed concurrently with a fixed cap on in-flight
    fetches. A failing target is recorded on the run result and never
    aborts the run; only failing to enumerate targets does.
    """

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        reader: DefinitionReader,
        diff_engine: DiffEngine | None = None,
        concurrency: int = 10,
    ):
        self._uow_factory = uow_factory
        self._reader = reader
        self._diff_engine = diff_engine or DiffEngine()
        self._concurrency = concurrency

    async def run(self) -> RunResult:
        """Run one monitoring pass over all active targets.

        Raises:
            FatalSetupError: If the active targets cannot be listed
        """
        run_id = str(uuid4())
        started = time.monotonic()
        run_id_var.set(run_id)
        result = RunResult(run_id=run_id)

        logger.info("Starting IDL monitoring run", extra={"run_id": run_id})
        await self._log_event(run_id, "info", "Starting IDL monitoring run")

        try:
            async with self._uow_factory() as uow:
                targets = await uow.targets.list_active()
        except Exception as exc:
            record_exception(exc, {"run_id": run_id})
            logger.exception("Failed to list active targets", extra={"run_id": run_id})
            await self._log_event(run_id, "error", f"Fatal monitoring error: {exc}")
            record_monitor_run("fatal", time.monotonic() - started)
            raise FatalSetupError(
                message="Unable to enumerate monitored targets",
                details={"error": str(exc)},
                run_id=run_id,
            ) from exc

        logger.info(
            "Found active targets to monitor",
            extra={"run_id": run_id, "target_count": len(targets)},
        )

        if not targets:
            await self._log_event(run_id, "info", "No active programs to monitor")
        else:
            outcomes = await bounded_map(
                targets,
                lambda target: self._check_target(run_id, target),
                limit=self._concurrency,
            )
            for outcome in outcomes:
                target = outcome.item
                if outcome.ok and outcome.result is not None:
                    result.record(outcome.result)
                    record_target_checked(outcome.result.status)
                    continue

                error = to_app_error(outcome.error)  # type: ignore[arg-type]
                result.errors.append(
                    TargetError(target_id=str(target.id), address=target.address, error=error)
                )
                record_target_checked("error")
                logger.warning(
                    "Failed to monitor target",
                    extra={
                        "run_id": run_id,
                        "target_id": str(target.id),
                        "address": target.address,
                        "error_code": error.code,
                        "error": error.message,
                    },
                )
                await self._log_event(
                    run_id,
                    "error",
                    f"Failed to monitor program: {error.message}",
                    target_id=target.id,
                    metadata={"error": error.to_dict()},
                )

        elapsed = time.monotonic() - started
        result.duration_ms = int(elapsed * 1000)
        record_monitor_run("completed", elapsed)

        summary = (
            f"Monitoring run completed. Programs: {result.checked}, "
            f"Snapshots: {result.snapshots_created}, Changes: {result.changes_detected}, "
            f"Errors: {len(result.errors)}"
        )
        logger.info(summary, extra=result.to_dict())
        await self._log_event(run_id, "info", summary, metadata={"duration": result.duration_ms})

        return result

    async def fetch_initial(self, target: MonitoredTarget) -> InitialFetchResult:
        """Capture the first snapshot for a newly registered target.

        No change records are written; the next regular run diffs against
        this snapshot.
        """
        run_id = str(uuid4())
        target_id_var.set(str(target.id))

        try:
            definition = await self._fetch(target)
            if definition is None:
                await self._log_event(
                    run_id,
                    "warning",
                    "No IDL found on chain during initial fetch",
                    target_id=target.id,
                )
                return InitialFetchResult(
                    success=True,
                    snapshot_created=False,
                    definition_found=False,
                    error="No IDL found on chain",
                )

            digest = content_hash(definition)
            async with self._uow_factory() as uow:
                if await uow.snapshots.exists(target.id, digest):
                    created = False
                else:
                    await uow.snapshots.create(target.id, digest, definition)
                    created = True

            if created:
                record_snapshot_created()
            await self._log_event(
                run_id,
                "info",
                "Initial IDL snapshot created successfully"
                if created
                else "Initial IDL already captured",
                target_id=target.id,
            )
            return InitialFetchResult(success=True, snapshot_created=created, definition_found=True)

        except Exception as exc:
            error = to_app_error(exc)
            logger.warning(
                "Initial IDL fetch failed",
                extra={"target_id": str(target.id), "error_code": error.code, "error": error.message},
            )
            await self._log_event(
                run_id,
                "error",
                f"Failed to fetch initial IDL: {error.message}",
                target_id=target.id,
            )
            return InitialFetchResult(
                success=False,
                snapshot_created=False,
                definition_found=False,
                error=error.message,
            )

    async def _check_target(self, run_id: str, target: MonitoredTarget) -> TargetOutcome:
        """Fetch, hash and (if new) snapshot and diff one target."""
        target_id_var.set(str(target.id))

        with create_span(
            "monitor.check_target",
            {"target.id": str(target.id), "target.address": target.address, "run.id": run_id},
        ) as span:
            definition = await self._fetch(target)

            if definition is None:
                logger.info(
                    "No IDL published for target",
                    extra={"target_id": str(target.id), "address": target.address},
                )
                await self._log_event(
                    run_id, "warning", "No IDL found on chain", target_id=target.id
                )
                span.set_attribute("monitor.outcome", "not_found")
                return TargetOutcome(target_id=target.id, status="not_found")

            digest = content_hash(definition)
            span.set_attribute("definition.hash", digest)

            async with self._uow_factory() as uow:
                if await uow.snapshots.exists(target.id, digest):
                    logger.debug("IDL unchanged", extra={"target_id": str(target.id)})
                    span.set_attribute("monitor.outcome", "unchanged")
                    return TargetOutcome(target_id=target.id, status="unchanged")

                previous = await uow.snapshots.get_latest(target.id)
                snapshot = await uow.snapshots.create(target.id, digest, definition)

                detected = self._diff_engine.detect_changes(
                    previous.definition if previous else None,
                    definition,
                )
                records = [
                    ChangeRecord.from_detected(
                        id=uuid4(),
                        target_id=target.id,
                        old_snapshot_id=previous.id if previous else None,
                        new_snapshot_id=snapshot.id,
                        change=change,
                    )
                    for change in detected
                ]
                if records:
                    await uow.changes.create_many(records)

            record_snapshot_created()
            for record in records:
                record_change_detected(record.severity)

            logger.info(
                "Created new snapshot",
                extra={
                    "target_id": str(target.id),
                    "version": snapshot.version_number,
                    "changes": len(records),
                },
            )
            await self._log_event(
                run_id,
                "info",
                f"Program monitored successfully. Snapshot created: True, Changes: {len(records)}",
                target_id=target.id,
                metadata={"snapshot_id": str(snapshot.id), "version": snapshot.version_number},
            )
            span.set_attribute("monitor.outcome", "changed")
            return TargetOutcome(
                target_id=target.id,
                status="changed",
                snapshot_created=True,
                changes_detected=len(records),
            )

    async def _fetch(self, target: MonitoredTarget) -> InterfaceDefinition | None:
        started = time.monotonic()
        try:
            definition = await self._reader.fetch(target.address)
        except Exception:
            record_definition_fetch("error", time.monotonic() - started)
            raise
        record_definition_fetch(
            "found" if definition is not None else "not_found", time.monotonic() - started
        )
        return definition

    async def _log_event(
        self,
        run_id: str,
        level: LogLevel,
        message: str,
        target_id: UUID | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        """Persist a monitoring event; failures here never affect the run."""
        try:
            async with self._uow_factory() as uow:
                await uow.logs.add(
                    MonitoringLog(
                        id=uuid4(),
                        run_id=run_id,
                        level=level,
                        message=message,
                        target_id=target_id,
                        metadata=metadata or {},
                    )
                )
        except Exception as exc:
            record_exception(exc, {"run_id": run_id, "log.level": level})
            logger.warning(
                "Failed to persist monitoring event",
                extra={"run_id": run_id, "error": str(exc)},
            )
