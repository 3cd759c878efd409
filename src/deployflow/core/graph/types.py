# src/deployflow/core/graph/types.py
"""
Tipos canônicos do grafo de recursos do deployflow.

Este módulo define as estruturas e enums que padronizam a comunicação
entre Registry, Builder, Resolver, Scheduler e executores.

Componentes principais:
    - ResourceKind  → lógico (agrupamento) ou físico (operação de provider)
    - ResourceState → estágio de ciclo de vida dentro de um pass
    - Outcome       → resultado terminal reportado por um executor
    - Operation     → operação do pass (create, update, delete)
    - EdgeKind      → contenção (child → parent) ou dependência
    - ResourceNode  → nó imutável registrado
    - PassSummary   → resumo final do pass

Princípios fundamentais:
    - Tipos são estáveis e serializáveis (enums com valor textual)
    - Contenção é uma referência de identidade, não herança
    - Estado mutável de execução não vive no nó (vive no Scheduler)

Limites explícitos:
    - Não executa operações
    - Não valida integridade referencial (ver `registry` e `builder`)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, Optional


class ResourceKind(str, Enum):
    """
    Classificação de um recurso.

    - LOGICAL: agrupamento sem manifestação física (componente); não possui
      operação de provider e existe para modelar hierarquia
    - PHYSICAL: recurso com operação real de create/update/delete

    O Scheduler não altera a política de ordenação com base no `kind`;
    a distinção é consumida pelo engine ao decidir se chama o executor.
    """
    LOGICAL = "logical"
    PHYSICAL = "physical"


class ResourceState(str, Enum):
    """
    Estágios de ciclo de vida de um recurso dentro de um pass.

    Transições válidas:
        registered → scheduled → running → {succeeded | failed}
        registered | scheduled → skipped

    Estados terminais: SUCCEEDED, FAILED, SKIPPED. Um recurso alcança
    exatamente um estado terminal por pass.
    """
    REGISTERED = "registered"
    SCHEDULED = "scheduled"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    SKIPPED = "skipped"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATES


TERMINAL_STATES: FrozenSet[ResourceState] = frozenset(
    {ResourceState.SUCCEEDED, ResourceState.FAILED, ResourceState.SKIPPED}
)


class Outcome(str, Enum):
    """Resultado terminal que um executor pode reportar (`report`)."""
    SUCCEEDED = "succeeded"
    FAILED = "failed"

    def to_state(self) -> ResourceState:
        return ResourceState(self.value)


class Operation(str, Enum):
    """
    Operação aplicada a todos os recursos de um pass.

    CREATE e UPDATE seguem a direção de criação (dependências primeiro).
    DELETE inverte o grafo: dependentes e children terminam antes.
    """
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"

    @property
    def is_teardown(self) -> bool:
        return self is Operation.DELETE


class EdgeKind(str, Enum):
    CONTAINMENT = "containment"
    DEPENDENCY = "dependency"


@dataclass(frozen=True)
class ResourceNode:
    """
    Nó imutável de recurso registrado em um pass.

    Campos:
        - identity: chave única e imutável do recurso (URN-like)
        - kind: lógico ou físico
        - parent: identidade do parent (contenção), ou None para raízes
        - dependencies: dependências explícitas (semântica de conjunto)
        - type_token: tipo informativo (ex.: ``test:index:MyCustomResource``)
        - index: posição no arena table, atribuída no registro

    `effective_dependencies` é derivado: dependências explícitas ∪ {parent}.
    """
    identity: str
    kind: ResourceKind
    parent: Optional[str] = None
    dependencies: FrozenSet[str] = field(default_factory=frozenset)
    type_token: Optional[str] = None
    index: int = -1

    @property
    def effective_dependencies(self) -> FrozenSet[str]:
        if self.parent is None:
            return self.dependencies
        return self.dependencies | {self.parent}

    @property
    def is_root(self) -> bool:
        return self.parent is None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "identity": self.identity,
            "kind": self.kind.value,
            "parent": self.parent,
            "dependencies": sorted(self.dependencies),
            "type": self.type_token,
        }


@dataclass(frozen=True)
class PassSummary:
    """
    Resumo imutável de um pass concluído.

    Campos:
        - succeeded / failed / skipped: contagens por estado terminal
        - states: estado final de cada recurso
        - errors: payload de erro (dict) por recurso não bem-sucedido

    Um pass com qualquer recurso `failed` ou `skipped` é reportado como
    parcialmente falho; nenhuma operação é descartada silenciosamente.
    """
    succeeded: int
    failed: int
    skipped: int
    states: Dict[str, ResourceState] = field(default_factory=dict)
    errors: Dict[str, Dict[str, Any]] = field(default_factory=dict)

    @property
    def total(self) -> int:
        return self.succeeded + self.failed + self.skipped

    @property
    def partially_failed(self) -> bool:
        return self.failed > 0 or self.skipped > 0

    @property
    def ok(self) -> bool:
        return not self.partially_failed

    def to_dict(self) -> Dict[str, Any]:
        return {
            "succeeded": self.succeeded,
            "failed": self.failed,
            "skipped": self.skipped,
            "states": {k: v.value for k, v in self.states.items()},
            "errors": {k: dict(v) for k, v in self.errors.items()},
        }
