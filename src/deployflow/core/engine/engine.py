# src/deployflow/core/engine/engine.py
"""
Engine de um pass do deployflow.

O `DeploymentEngine` conecta o Scheduler a um executor externo:

    - consome `Scheduler.next_ready()` na thread principal
    - submete cada recurso físico a um `ThreadPoolExecutor`; um recurso só
      é retirado do Scheduler (e passa a `running`) quando há worker livre
    - a thread do worker chama o executor e reporta o `Outcome`
    - recursos lógicos (e desabilitados por config) terminam sem executor

Guardrails:
    - Exceções do executor viram `failed` com `DeployErrorPayload`
      serializável; nenhuma exceção de executor escapa de `run()`
    - Retorno fora do contrato (`Outcome`) é falha de contrato do executor
    - `engine.fail_fast` cancela o pass na primeira falha

Rastreabilidade:
    - eventos estruturados em `PassContext.log`
    - Manifest atualizado quando `ctx.manifest` está presente
"""

from __future__ import annotations

import threading
from concurrent.futures import Future, ThreadPoolExecutor
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from deployflow.core.config.settings import EngineSettings, resolve_engine_settings, resource_enabled
from deployflow.core.errors import (
    EXECUTOR_CONTRACT_ERROR,
    DeployErrorPayload,
    executor_error,
)
from deployflow.core.exceptions import DeployException
from deployflow.core.graph.builder import ResourceGraph
from deployflow.core.graph.registry import ResourceRegistry
from deployflow.core.graph.resolver import resolve_order
from deployflow.core.graph.types import Operation, Outcome, PassSummary, ResourceKind, ResourceNode, ResourceState
from deployflow.core.traceability import manifest as mf

from .context import PassContext
from .executor import StepExecutor
from .scheduler import Scheduler


def _now() -> datetime:
    return datetime.now(timezone.utc)


class DeploymentEngine:
    """Engine canônico do deployflow (scheduler + pool de execução)."""

    def __init__(
        self,
        *,
        graph: ResourceGraph,
        executor: StepExecutor,
        ctx: PassContext,
        operation: Optional[Operation] = None,
    ):
        # grafos de `build_graph` ainda não passaram pela detecção de ciclos
        if not graph.order:
            graph = graph.with_order(resolve_order(graph))
        self.graph = graph
        self.executor = executor
        self.ctx = ctx
        self.settings: EngineSettings = resolve_engine_settings(ctx.config)
        self._disabled = frozenset(i for i in graph.identities() if not resource_enabled(ctx.config, i))
        self.operation = Operation(operation if operation is not None else self.settings.operation)
        self.scheduler: Optional[Scheduler] = None
        self._manifest_lock = threading.Lock()

    @classmethod
    def from_registry(
        cls,
        registry: ResourceRegistry,
        *,
        executor: StepExecutor,
        ctx: PassContext,
        operation: Optional[Operation] = None,
    ) -> "DeploymentEngine":
        """Finaliza o registry e prepara o engine; erros estruturais propagam."""
        return cls(graph=registry.finalize(), executor=executor, ctx=ctx, operation=operation)

    # ------------------------------------------------------------------
    # Guardrails: exceção -> DeployErrorPayload
    # ------------------------------------------------------------------
    def _exception_to_error(self, identity: str, exc: Exception) -> DeployErrorPayload:
        if isinstance(exc, DeployException):
            details = dict(exc.details or {})
            details.setdefault("identity", identity)
            return DeployErrorPayload(
                type=exc.__class__.__name__,
                message=str(exc) or "Erro de execução",
                details=details,
                hint=exc.hint,
            )

        return executor_error(
            identity=identity,
            exc_type=exc.__class__.__name__,
            exc_message=str(exc) or None,
        )

    # ------------------------------------------------------------------
    # Manifest (serializado: o Manifest não é thread-safe)
    # ------------------------------------------------------------------
    def _manifest(self, fn, **kwargs: Any) -> None:
        manifest = self.ctx.manifest
        if manifest is None:
            return
        with self._manifest_lock:
            fn(manifest, **kwargs)

    # ------------------------------------------------------------------
    # Execução de um recurso
    # ------------------------------------------------------------------
    def _should_execute(self, node: ResourceNode) -> bool:
        if node.identity in self._disabled:
            self.ctx.add_warning(resource=node.identity, message="operation disabled by config")
            return False
        if node.kind is ResourceKind.LOGICAL and not self.settings.execute_logical:
            return False
        return True

    def _invoke(self, node: ResourceNode) -> Tuple[Outcome, Optional[DeployErrorPayload]]:
        try:
            outcome = self.executor.execute(node, self.operation, self.ctx)
        except Exception as e:
            return Outcome.FAILED, self._exception_to_error(node.identity, e)

        try:
            outcome = Outcome(outcome)
        except ValueError:
            return Outcome.FAILED, DeployErrorPayload(
                type=EXECUTOR_CONTRACT_ERROR,
                message="Executor retornou tipo inválido",
                details={
                    "identity": node.identity,
                    "expected": "Outcome",
                    "received": type(outcome).__name__,
                },
                hint="Ajuste o executor para retornar Outcome.SUCCEEDED ou Outcome.FAILED",
            )

        if outcome is Outcome.FAILED:
            return outcome, executor_error(identity=node.identity, exc_message="executor reported failure")
        return outcome, None

    def _complete(self, scheduler: Scheduler, node: ResourceNode, outcome: Outcome, error: Optional[DeployErrorPayload]) -> None:
        identity = node.identity
        state = scheduler.report(identity, outcome, error=error.to_dict() if error is not None else None)

        if state is ResourceState.SUCCEEDED:
            self.ctx.log(resource=identity, level="INFO", message="resource succeeded", operation=self.operation.value)
            self._manifest(
                mf.resource_finished,
                resource=identity,
                ts=_now(),
                warnings=list(self.ctx.warnings.get(identity, [])),
            )
        elif state is ResourceState.FAILED:
            self.ctx.log(
                resource=identity,
                level="ERROR",
                message="resource failed",
                operation=self.operation.value,
                error=error.to_dict() if error is not None else None,
            )
            self._manifest(mf.resource_failed, resource=identity, ts=_now(), error=error.to_dict() if error else {})
            if self.settings.fail_fast:
                cancelled = scheduler.cancel()
                if cancelled:
                    self.ctx.log(resource="-", level="WARNING", message="pass cancelled (fail_fast)", cancelled=cancelled)

    def _work(self, scheduler: Scheduler, node: ResourceNode, slots: threading.Semaphore) -> None:
        try:
            # cancelado entre a liberação e o início no worker
            if scheduler.state(node.identity) is not ResourceState.RUNNING:
                return
            outcome, error = self._invoke(node)
            self._complete(scheduler, node, outcome, error)
        except BaseException:
            # destrava next_ready; a exceção é relançada por run()
            scheduler.cancel()
            raise
        finally:
            slots.release()

    # ------------------------------------------------------------------
    # Pass
    # ------------------------------------------------------------------
    def run(self) -> PassSummary:
        scheduler = Scheduler(self.graph, self.operation)
        self.scheduler = scheduler

        self.ctx.log(
            resource="-",
            level="INFO",
            message="pass started",
            operation=self.operation.value,
            resources=len(self.graph),
            max_workers=self.settings.max_workers,
        )
        self._manifest(mf.add_event, event_type="pass_started", ts=_now(), payload={"operation": self.operation.value})

        # um recurso só sai do Scheduler (`running`) quando há worker livre
        slots = threading.Semaphore(self.settings.max_workers)
        stream = scheduler.next_ready()
        futures: List[Future] = []
        with ThreadPoolExecutor(max_workers=self.settings.max_workers, thread_name_prefix="deployflow") as pool:
            while True:
                slots.acquire()
                identity = next(stream, None)
                if identity is None:
                    slots.release()
                    break
                node = self.graph.node(identity)
                self.ctx.log(resource=identity, level="INFO", message="resource started", operation=self.operation.value)
                self._manifest(mf.resource_started, resource=identity, kind=node.kind.value, ts=_now())

                if self._should_execute(node):
                    futures.append(pool.submit(self._work, scheduler, node, slots))
                else:
                    try:
                        self._complete(scheduler, node, Outcome.SUCCEEDED, None)
                    finally:
                        slots.release()

        for f in futures:
            f.result()

        summary = scheduler.summary()
        self._log_skipped(summary)

        self.ctx.log(
            resource="-",
            level="INFO" if summary.ok else "WARNING",
            message="pass finished" if summary.ok else "pass partially failed",
            succeeded=summary.succeeded,
            failed=summary.failed,
            skipped=summary.skipped,
        )
        self._manifest(mf.record_summary, ts=_now(), summary=summary.to_dict())
        return summary

    def _log_skipped(self, summary: PassSummary) -> None:
        for identity, state in summary.states.items():
            if state is not ResourceState.SKIPPED:
                continue
            reason: Dict[str, Any] = summary.errors.get(identity, {})
            self.ctx.log(resource=identity, level="WARNING", message="resource skipped", reason=reason.get("type"))
            self._manifest(mf.resource_skipped, resource=identity, ts=_now(), reason=reason)
