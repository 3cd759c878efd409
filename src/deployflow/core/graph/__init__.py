# src/deployflow/core/graph/__init__.py
"""
# Graph Core (deployflow)

Este pacote transforma registros de recursos em um grafo validado.

## Componentes

- **types**: `ResourceKind`, `ResourceState`, `Outcome`, `Operation`,
  `EdgeKind`, `ResourceNode`, `PassSummary`
- **registry**: `ResourceRegistry` (unicidade, referências, congelamento)
- **builder**: `build_graph` → `ResourceGraph` (contenção + dependência)
- **resolver**: `resolve_order` / `find_cycle` (DFS com caminho do ciclo)
- **urn**: `make_urn` / `parse_urn`

## Fluxo

registro → `finalize()` → build → validação de ciclo → grafo para o Scheduler

Erros estruturais rejeitam o pass inteiro: nenhum grafo parcial é agendado.
"""

from .builder import Edge, ResourceGraph, build_graph, compute_graph_hash
from .registry import ResourceRegistry
from .resolver import find_cycle, resolve_order
from .types import (
    TERMINAL_STATES,
    EdgeKind,
    Operation,
    Outcome,
    PassSummary,
    ResourceKind,
    ResourceNode,
    ResourceState,
)
from .urn import URN, make_urn, parse_urn

__all__ = [
    "Edge",
    "ResourceGraph",
    "build_graph",
    "compute_graph_hash",
    "ResourceRegistry",
    "find_cycle",
    "resolve_order",
    "TERMINAL_STATES",
    "EdgeKind",
    "Operation",
    "Outcome",
    "PassSummary",
    "ResourceKind",
    "ResourceNode",
    "ResourceState",
    "URN",
    "make_urn",
    "parse_urn",
]
