# src/deployflow/core/engine/executor.py
"""
Contrato do executor de operações de recursos.

O executor é um colaborador externo: ele realiza a operação real
(create/update/delete) de um recurso liberado pelo Scheduler e devolve
um `Outcome` terminal. Providers, chamadas de rede e back-pressure são
responsabilidade do executor; o core conhece apenas este protocolo.

Conformidade é verificada por duck typing (`@runtime_checkable`): não
há herança obrigatória.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Protocol, runtime_checkable

from deployflow.core.graph.types import Operation, Outcome, ResourceNode

from .context import PassContext


@runtime_checkable
class StepExecutor(Protocol):
    """
    Contrato canônico de um executor.

    `execute` é chamado no máximo uma vez por recurso em um pass, a partir
    de uma thread do pool do engine. Pode retornar `Outcome.FAILED` ou
    levantar exceção; ambos terminam o recurso como `failed`.

    Para falhas com diagnóstico estruturado, levante
    `deployflow.core.exceptions.ExecutorError(message, details, hint)`:
    o payload do recurso preserva `details` e `hint` e usa o nome da
    classe como `type`. Outras exceções viram `EXECUTOR_ERROR`.
    """

    def execute(self, node: ResourceNode, operation: Operation, ctx: PassContext) -> Outcome:
        ...


@dataclass(frozen=True)
class CallableExecutor:
    """Adapter que transforma uma função `(node, operation, ctx) -> Outcome` em executor."""

    fn: Callable[[ResourceNode, Operation, PassContext], Outcome]

    def execute(self, node: ResourceNode, operation: Operation, ctx: PassContext) -> Outcome:
        return self.fn(node, operation, ctx)
