# src/deployflow/core/engine/scheduler.py
"""
Scheduler de recursos de um pass.

Este módulo mantém a contabilidade de prontidão de um `ResourceGraph`
validado e libera cada recurso no instante em que todos os seus
predecessores alcançam estado terminal. O Scheduler não contém lógica de
operação: quem executa é o executor externo, que devolve o resultado por
`report`.

Direção:
    - create/update: predecessores = dependências efetivas (deps ∪ parent)
    - delete: predecessores = dependentes (aresta reversa); um parent só
      inicia o delete quando todos os seus children são terminais

Política de falha:
    - `failed` propaga `skipped` para todo o fecho transitivo de sucessores
    - cada `skipped` decrementa os contadores dos seus próprios sucessores
      exatamente como um estado terminal
    - ramos sem relação com o recurso que falhou seguem normalmente

Concorrência:
    - os contadores de predecessores pendentes e o mapa de estados vivem
      em um arena table indexado por slot
    - toda mutação acontece sob um único lock; o par
      (sucessor, predecessor) é decrementado no máximo uma vez
    - `next_ready` bloqueia em uma Condition enquanto há recursos
      executando e nenhum elegível

Invariantes:
    - cada recurso alcança exatamente um estado terminal
    - um recurso só entra em `running` após todos os predecessores serem
      terminais
    - `cancel()` é idempotente e nunca altera recursos já terminais
"""

from __future__ import annotations

import threading
import time
from collections import deque
from typing import Any, Callable, Deque, Dict, Iterator, List, Optional, Set, Tuple

from deployflow.core.errors import dependency_failed, pass_cancelled
from deployflow.core.exceptions import InvalidTransition, UnknownResource
from deployflow.core.graph.builder import ResourceGraph
from deployflow.core.graph.resolver import resolve_order
from deployflow.core.graph.types import Operation, Outcome, PassSummary, ResourceState


class Scheduler:
    """
    Liberação dinâmica de recursos em ordem de dependência.

    Uso com executor que consome o stream:

        scheduler = Scheduler(graph)
        for identity in scheduler.next_ready():
            pool.submit(work, identity)   # work chama scheduler.report(...)

    `next_ready()` marca o recurso como `running` ao entregá-lo. Para
    executores que preferem consultar, `ready()` + `mark_running()` fazem
    o mesmo em dois passos.

    Importante: um consumidor single-thread precisa reportar cada recurso
    antes de pedir o próximo; caso contrário `next_ready` espera por um
    report que nunca chega.

    O grafo é revalidado na construção: um grafo com ciclo levanta
    `CyclicDependency` antes de qualquer recurso ser agendado.
    """

    def __init__(
        self,
        graph: ResourceGraph,
        operation: Operation = Operation.CREATE,
        *,
        clock: Callable[[], float] = time.monotonic,
    ):
        resolve_order(graph)

        self.graph = graph
        self.operation = Operation(operation)
        self._clock = clock

        self._ids: List[str] = graph.identities()
        self._slot: Dict[str, int] = {identity: slot for slot, identity in enumerate(self._ids)}

        if self.operation.is_teardown:
            predecessors_of, successors_of = graph.dependents_of, graph.dependencies_of
        else:
            predecessors_of, successors_of = graph.dependencies_of, graph.dependents_of

        self._successors: List[Tuple[int, ...]] = [
            tuple(self._slot[s] for s in successors_of(identity)) for identity in self._ids
        ]
        self._pending: List[int] = [len(predecessors_of(identity)) for identity in self._ids]
        self._resolved: List[Set[int]] = [set() for _ in self._ids]
        self._state: List[ResourceState] = [ResourceState.REGISTERED for _ in self._ids]
        self._started_at: List[Optional[float]] = [None for _ in self._ids]
        self._finished_at: List[Optional[float]] = [None for _ in self._ids]
        self._errors: Dict[int, Dict[str, Any]] = {}

        self._ready: Deque[int] = deque()
        self._remaining = len(self._ids)
        self._cancelled = False

        self._lock = threading.RLock()
        self._changed = threading.Condition(self._lock)

        for slot, count in enumerate(self._pending):
            if count == 0:
                self._schedule(slot)

    # ------------------------------------------------------------------
    # Bookkeeping interno (chamar sempre com o lock adquirido)
    # ------------------------------------------------------------------
    def _slot_of(self, identity: str) -> int:
        slot = self._slot.get(identity)
        if slot is None:
            raise UnknownResource(
                message=f"Unknown resource: {identity}",
                details={"identity": identity},
            )
        return slot

    def _schedule(self, slot: int) -> None:
        self._state[slot] = ResourceState.SCHEDULED
        self._ready.append(slot)

    def _start(self, slot: int) -> None:
        self._state[slot] = ResourceState.RUNNING
        self._started_at[slot] = self._clock()

    def _terminate(self, slot: int, state: ResourceState, error: Optional[Dict[str, Any]] = None) -> None:
        self._state[slot] = state
        self._finished_at[slot] = self._clock()
        self._remaining -= 1
        if error is not None:
            self._errors[slot] = dict(error)

    def _resolve(self, predecessor: int, successor: int) -> None:
        # um predecessor conta uma única vez para cada sucessor
        if predecessor in self._resolved[successor]:
            return
        self._resolved[successor].add(predecessor)
        self._pending[successor] -= 1
        if self._pending[successor] == 0 and self._state[successor] is ResourceState.REGISTERED:
            self._schedule(successor)

    def _skip_downstream(self, failed: int) -> None:
        failed_id = self._ids[failed]
        queue: Deque[int] = deque([failed])
        while queue:
            current = queue.popleft()
            for successor in self._successors[current]:
                if self._state[successor] is ResourceState.REGISTERED:
                    payload = dependency_failed(identity=self._ids[successor], failed=failed_id)
                    self._terminate(successor, ResourceState.SKIPPED, payload.to_dict())
                    queue.append(successor)
                self._resolve(current, successor)

    # ------------------------------------------------------------------
    # Interface de agendamento
    # ------------------------------------------------------------------
    def next_ready(self, *, timeout: Optional[float] = None) -> Iterator[str]:
        """
        Stream de identidades elegíveis, terminando quando todos os
        recursos estão terminais.

        Cada identidade é entregue uma única vez no pass, mesmo com vários
        geradores consumindo em paralelo. Um novo gerador continua o mesmo
        pass; após o término, não entrega nada.

        Args:
            timeout: espera máxima (segundos) por um recurso elegível; ao
                expirar, o gerador termina sem alterar estados.
        """
        while True:
            with self._changed:
                if not self._ready and self._remaining > 0:
                    self._changed.wait_for(lambda: self._ready or self._remaining == 0, timeout=timeout)
                if not self._ready:
                    return
                slot = self._ready.popleft()
                self._start(slot)
                identity = self._ids[slot]
            yield identity

    def ready(self) -> List[str]:
        """Snapshot não bloqueante dos recursos elegíveis ainda não entregues."""
        with self._lock:
            return [self._ids[slot] for slot in self._ready]

    def mark_running(self, identity: str) -> None:
        """Aceita um recurso elegível para execução (`scheduled` → `running`)."""
        with self._lock:
            slot = self._slot_of(identity)
            if self._state[slot] is not ResourceState.SCHEDULED:
                raise InvalidTransition(
                    message=f"Resource '{identity}' is not scheduled (state: {self._state[slot].value})",
                    details={"identity": identity, "state": self._state[slot].value},
                )
            self._ready.remove(slot)
            self._start(slot)

    def report(
        self,
        identity: str,
        outcome: Outcome,
        *,
        error: Optional[Dict[str, Any]] = None,
    ) -> ResourceState:
        """
        Registra o resultado terminal de um recurso em execução.

        Único caminho de escrita do executor. Em `succeeded` libera os
        sucessores cujo contador chega a zero; em `failed` marca todo o
        fecho transitivo de sucessores como `skipped`.

        Após `cancel()`, reports tardios de recursos que estavam em
        execução são ignorados e o estado terminal existente é retornado.

        Raises:
            UnknownResource: Identidade fora do grafo.
            InvalidTransition: Recurso não está em `running`.
        """
        outcome = Outcome(outcome)
        with self._changed:
            slot = self._slot_of(identity)
            current = self._state[slot]

            if current is not ResourceState.RUNNING:
                if self._cancelled and current.is_terminal:
                    return current
                raise InvalidTransition(
                    message=f"Resource '{identity}' is not running (state: {current.value})",
                    details={"identity": identity, "state": current.value, "outcome": outcome.value},
                )

            state = outcome.to_state()
            self._terminate(slot, state, error if state is ResourceState.FAILED else None)

            if state is ResourceState.SUCCEEDED:
                for successor in self._successors[slot]:
                    self._resolve(slot, successor)
            else:
                self._skip_downstream(slot)

            self._changed.notify_all()
            return state

    def cancel(self) -> List[str]:
        """
        Aborta o pass: todo recurso não terminal passa a `skipped`.

        Idempotente; recursos já terminais não mudam.

        Returns:
            List[str]: Identidades afetadas por esta chamada.
        """
        with self._changed:
            self._cancelled = True
            affected: List[str] = []
            for slot, state in enumerate(self._state):
                if state.is_terminal:
                    continue
                payload = pass_cancelled(identity=self._ids[slot])
                self._terminate(slot, ResourceState.SKIPPED, payload.to_dict())
                affected.append(self._ids[slot])
            self._ready.clear()
            self._changed.notify_all()
            return affected

    # ------------------------------------------------------------------
    # Consultas
    # ------------------------------------------------------------------
    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def state(self, identity: str) -> ResourceState:
        with self._lock:
            return self._state[self._slot_of(identity)]

    def states(self) -> Dict[str, ResourceState]:
        with self._lock:
            return dict(zip(self._ids, self._state))

    def pending(self, identity: str) -> int:
        """Número de predecessores ainda não terminais."""
        with self._lock:
            return self._pending[self._slot_of(identity)]

    def timing(self, identity: str) -> Tuple[Optional[float], Optional[float]]:
        """`(started_at, finished_at)` no relógio do Scheduler."""
        with self._lock:
            slot = self._slot_of(identity)
            return self._started_at[slot], self._finished_at[slot]

    def error(self, identity: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            err = self._errors.get(self._slot_of(identity))
            return dict(err) if err is not None else None

    def is_done(self) -> bool:
        with self._lock:
            return self._remaining == 0

    def summary(self) -> PassSummary:
        with self._lock:
            counts = {state: 0 for state in (ResourceState.SUCCEEDED, ResourceState.FAILED, ResourceState.SKIPPED)}
            for state in self._state:
                if state in counts:
                    counts[state] += 1
            return PassSummary(
                succeeded=counts[ResourceState.SUCCEEDED],
                failed=counts[ResourceState.FAILED],
                skipped=counts[ResourceState.SKIPPED],
                states=dict(zip(self._ids, self._state)),
                errors={self._ids[slot]: dict(err) for slot, err in sorted(self._errors.items())},
            )
