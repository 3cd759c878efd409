# src/deployflow/__init__.py
"""
deployflow — motor de grafo de dependências e agendamento de operações
de ciclo de vida (create, update, delete) sobre recursos declarados.

Este pacote raiz define o namespace público do deployflow, responsável
por transformar um grafo declarativo de recursos (físicos ou puramente
lógicos) em uma sequência corretamente ordenada de operações.

Princípios centrais:
    - Recursos formam um DAG explícito (contenção + dependência)
    - Estrutura inválida (duplicidade, referência ausente, ciclo) é fatal
    - Falhas em tempo de execução são locais e propagam `skipped`
    - Concorrência máxima entre subgrafos independentes

Arquitetura em alto nível:
    - core.graph        → registry, builder e resolver (estrutura)
    - core.engine       → scheduler, contrato de executor e engine do pass
    - core.config       → carregamento, merge e hashing de configuração
    - core.traceability → Manifest e Event Log para auditoria do pass

Limites explícitos:
    - Não contém providers nem chamadas de rede
    - Não decide *se* uma operação é necessária (diffing)
    - Não persiste snapshot de estado de deployment
"""
from .core.graph import (
    ResourceGraph,
    ResourceKind,
    ResourceNode,
    ResourceRegistry,
    ResourceState,
)
from .core.engine import DeploymentEngine, Outcome, PassContext, Scheduler

__all__ = [
    "ResourceGraph",
    "ResourceKind",
    "ResourceNode",
    "ResourceRegistry",
    "ResourceState",
    "DeploymentEngine",
    "Outcome",
    "PassContext",
    "Scheduler",
]
