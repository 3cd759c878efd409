# src/deployflow/core/engine/__init__.py
"""
Engine do deployflow.

Este pacote agenda e executa um grafo de recursos já validado.

Componentes principais:
    - scheduler → contabilidade de prontidão e política de falha/cancelamento
    - executor  → protocolo do colaborador externo que executa operações
    - context   → contexto do pass (config, eventos, warnings, Manifest)
    - engine    → pass completo: scheduler + pool de execução

Invariantes:
    - Um recurso só executa após todos os predecessores serem terminais
    - Cada recurso alcança exatamente um estado terminal por pass
    - Recursos sem relação de dependência podem executar em paralelo
"""

from deployflow.core.exceptions import ExecutorError
from deployflow.core.graph.types import Operation, Outcome

from .context import PassContext
from .engine import DeploymentEngine
from .executor import CallableExecutor, StepExecutor
from .scheduler import Scheduler

__all__ = [
    "CallableExecutor",
    "DeploymentEngine",
    "ExecutorError",
    "Operation",
    "Outcome",
    "PassContext",
    "Scheduler",
    "StepExecutor",
]
