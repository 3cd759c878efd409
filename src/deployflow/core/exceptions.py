"""
deployflow — Canonical Exceptions (v1)

Este módulo define as exceções tipadas internas do deployflow.

Objetivo:
- Distinguir erros estruturais (rejeitam o pass inteiro) de erros de
  agendamento (uso incorreto da API do Scheduler)
- Facilitar o mapeamento determinístico para DeployErrorPayload
- Evitar ValueError/RuntimeError genéricos nos guardrails do grafo

Regras:
- Exceções carregam apenas dados estruturados (serializáveis) em `details`.
- A mensagem é curta e humana; o diagnóstico vive em `details`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass(frozen=True, eq=False)
class DeployException(Exception):
    """Base class para exceções internas do deployflow.

    Importante:
    - Sempre carregar dados estruturados em `details`
    - Não embedar stack trace em payloads de erro
    - Mensagem deve ser curta e humana
    """

    message: str
    details: Dict[str, Any] = field(default_factory=dict)
    hint: Optional[str] = None

    def __str__(self) -> str:  # pragma: no cover
        return self.message


# ---------------------------------------------------------------------------
# Estruturais (build-time): rejeitam o pass inteiro
# ---------------------------------------------------------------------------

@dataclass(frozen=True, eq=False)
class StructuralError(DeployException):
    """Violação estrutural do grafo de recursos; nenhum agendamento parcial ocorre."""


@dataclass(frozen=True, eq=False)
class DuplicateIdentity(StructuralError):
    """Identidade registrada mais de uma vez no mesmo pass."""


@dataclass(frozen=True, eq=False)
class UnknownParent(StructuralError):
    """Recurso referencia um parent que não foi registrado."""


@dataclass(frozen=True, eq=False)
class UnknownDependency(StructuralError):
    """Recurso declara dependência explícita para identidade não registrada."""


@dataclass(frozen=True, eq=False)
class CyclicDependency(StructuralError):
    """
    O grafo combinado (contenção + dependência) contém um ciclo.

    `path` é a lista ordenada de identidades que formam o ciclo, começando
    e terminando no mesmo recurso (ex.: ``["A", "B", "A"]``).
    """

    path: List[str] = field(default_factory=list)


@dataclass(frozen=True, eq=False)
class RegistryFinalizedError(StructuralError):
    """Registro tentado após `finalize()`; o registry é append-only até o congelamento."""


# ---------------------------------------------------------------------------
# Agendamento (runtime): uso inválido da API do Scheduler
# ---------------------------------------------------------------------------

@dataclass(frozen=True, eq=False)
class SchedulingError(DeployException):
    """Erro de uso da API de agendamento."""


@dataclass(frozen=True, eq=False)
class UnknownResource(SchedulingError):
    """Identidade não pertence ao grafo agendado."""


@dataclass(frozen=True, eq=False)
class InvalidTransition(SchedulingError):
    """Transição de estado não permitida (ex.: report de recurso que não está running)."""


# ---------------------------------------------------------------------------
# Execução
# ---------------------------------------------------------------------------

@dataclass(frozen=True, eq=False)
class ExecutorError(DeployException):
    """Falha reportada por um executor com diagnóstico estruturado."""
