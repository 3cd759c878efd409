"""
deployflow — Canonical Error Structures (v1)

Este módulo define o padrão canônico de erros reportados pelo deployflow.
Erros fazem parte do contrato operacional do pass e devem ser:

- explícitos
- serializáveis
- rastreáveis
- acionáveis

Nenhuma operação é descartada silenciosamente: todo recurso que não
termina em `succeeded` carrega um payload de erro no resumo do pass.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Optional


# ---------------------------------------------------------------------------
# Payload canônico
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class DeployErrorPayload:
    """
    Payload canônico de erro do deployflow.

    Campos:
    - type: código estável do erro (não é texto livre)
    - message: mensagem curta, humana e objetiva
    - details: dados estruturados relevantes para diagnóstico
    - hint: ação sugerida ao operador (onde corrigir)
    """

    type: str
    message: str
    details: Dict[str, Any]
    hint: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Retorna representação serializável do erro."""
        return asdict(self)


# ---------------------------------------------------------------------------
# Catálogo canônico de tipos de erro (v1)
# ---------------------------------------------------------------------------

# Estruturais
DUPLICATE_IDENTITY = "DUPLICATE_IDENTITY"
UNKNOWN_PARENT = "UNKNOWN_PARENT"
UNKNOWN_DEPENDENCY = "UNKNOWN_DEPENDENCY"
CYCLIC_DEPENDENCY = "CYCLIC_DEPENDENCY"

# Execução
EXECUTOR_ERROR = "EXECUTOR_ERROR"
EXECUTOR_CONTRACT_ERROR = "EXECUTOR_CONTRACT_ERROR"
DEPENDENCY_FAILED = "DEPENDENCY_FAILED"
PASS_CANCELLED = "PASS_CANCELLED"


# ---------------------------------------------------------------------------
# Helpers de fábrica
# ---------------------------------------------------------------------------

def duplicate_identity(
    *,
    identity: str,
    hint: str = "Use uma identidade única por recurso dentro do pass.",
) -> DeployErrorPayload:
    return DeployErrorPayload(
        type=DUPLICATE_IDENTITY,
        message="Identidade de recurso duplicada",
        details={"identity": identity},
        hint=hint,
    )


def unknown_parent(
    *,
    identity: str,
    parent: str,
    hint: str = "Registre o parent antes de finalizar o registry ou remova a referência.",
) -> DeployErrorPayload:
    return DeployErrorPayload(
        type=UNKNOWN_PARENT,
        message="Parent de recurso não registrado",
        details={"identity": identity, "parent": parent},
        hint=hint,
    )


def unknown_dependency(
    *,
    identity: str,
    dependency: str,
    hint: str = "Registre a dependência antes de finalizar o registry ou remova a declaração.",
) -> DeployErrorPayload:
    return DeployErrorPayload(
        type=UNKNOWN_DEPENDENCY,
        message="Dependência de recurso não registrada",
        details={"identity": identity, "dependency": dependency},
        hint=hint,
    )


def cyclic_dependency(
    *,
    path: List[str],
    hint: str = "Remova uma das arestas do ciclo (parent ou depends_on).",
) -> DeployErrorPayload:
    return DeployErrorPayload(
        type=CYCLIC_DEPENDENCY,
        message="Ciclo detectado no grafo de recursos",
        details={"path": list(path)},
        hint=hint,
    )


def executor_error(
    *,
    identity: str,
    exc_type: Optional[str] = None,
    exc_message: Optional[str] = None,
    hint: str = "Verifique o log do executor para o recurso. Nenhum retry é aplicado automaticamente.",
) -> DeployErrorPayload:
    return DeployErrorPayload(
        type=EXECUTOR_ERROR,
        message="Falha durante a operação do recurso",
        details={
            "identity": identity,
            "exc_type": exc_type,
            "exc_message": exc_message,
        },
        hint=hint,
    )


def dependency_failed(*, identity: str, failed: str) -> DeployErrorPayload:
    return DeployErrorPayload(
        type=DEPENDENCY_FAILED,
        message="Recurso não executado: predecessor falhou",
        details={"identity": identity, "failed": failed},
        hint="Corrija o recurso que falhou e execute um novo pass.",
    )


def pass_cancelled(*, identity: str) -> DeployErrorPayload:
    return DeployErrorPayload(
        type=PASS_CANCELLED,
        message="Recurso não executado: pass cancelado",
        details={"identity": identity},
        hint=None,
    )
