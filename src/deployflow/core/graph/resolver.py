# src/deployflow/core/graph/resolver.py
"""
Detector de ciclos e resolvedor topológico do grafo de recursos.

Este módulo valida que o grafo combinado (contenção ∪ dependência) é um
DAG e produz uma ordem topológica válida, usada apenas para validar a
viabilidade do pass antes do agendamento. O Scheduler recalcula a
prontidão dinamicamente e não reproduz esta ordem estática.

Algoritmo:
    - DFS iterativa com marcação {unvisited, in_progress, done}
    - Encontrar um nó `in_progress` sinaliza ciclo
    - A ordem é o pós-ordem da DFS: dependências antes de dependentes

Decisões arquiteturais:
    - Raízes visitadas na ordem de registro e vizinhos em ordem
      lexicográfica, tornando o ciclo reportado determinístico
    - Iterativa para não depender do limite de recursão em grafos profundos
    - O caminho do ciclo começa e termina no mesmo recurso

Limites explícitos:
    - Não valida integridade referencial (responsabilidade do builder)
    - Não decide ordem de liberação em runtime (responsabilidade do Scheduler)
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Tuple, Union

from deployflow.core.errors import cyclic_dependency
from deployflow.core.exceptions import CyclicDependency

from .builder import ResourceGraph

Adjacency = Mapping[str, Iterable[str]]


class _Mark(Enum):
    UNVISITED = 0
    IN_PROGRESS = 1
    DONE = 2


def _adjacency_of(source: Union[ResourceGraph, Adjacency]) -> Tuple[Dict[str, List[str]], List[str]]:
    if isinstance(source, ResourceGraph):
        adjacency = {i: source.dependencies_of(i) for i in source.identities()}
        return adjacency, source.identities()

    adjacency = {node: sorted(set(targets)) for node, targets in source.items()}
    for node, targets in adjacency.items():
        for target in targets:
            if target not in adjacency:
                raise KeyError(f"Edge {node!r} -> {target!r} references a node outside the graph")
    return adjacency, list(adjacency)


def _walk(adjacency: Dict[str, List[str]], roots: List[str]) -> Tuple[List[str], Optional[List[str]]]:
    """
    Executa a DFS e retorna `(ordem, ciclo)`.

    `ciclo` é None quando o grafo é acíclico; caso contrário, a ordem
    retornada é parcial e não deve ser utilizada.
    """
    mark: Dict[str, _Mark] = {node: _Mark.UNVISITED for node in adjacency}
    order: List[str] = []

    for root in roots:
        if mark[root] is not _Mark.UNVISITED:
            continue

        mark[root] = _Mark.IN_PROGRESS
        path: List[str] = [root]
        stack: List[Tuple[str, Iterator[str]]] = [(root, iter(adjacency[root]))]

        while stack:
            node, neighbours = stack[-1]
            descended = False

            for nxt in neighbours:
                if mark[nxt] is _Mark.IN_PROGRESS:
                    return order, path[path.index(nxt):] + [nxt]
                if mark[nxt] is _Mark.UNVISITED:
                    mark[nxt] = _Mark.IN_PROGRESS
                    path.append(nxt)
                    stack.append((nxt, iter(adjacency[nxt])))
                    descended = True
                    break

            if not descended:
                stack.pop()
                path.pop()
                mark[node] = _Mark.DONE
                order.append(node)

    return order, None


def find_cycle(source: Union[ResourceGraph, Adjacency]) -> Optional[List[str]]:
    """
    Retorna o primeiro ciclo encontrado, ou None se o grafo for acíclico.

    Aceita um `ResourceGraph` ou um mapeamento `nó -> dependências`.
    """
    adjacency, roots = _adjacency_of(source)
    _, cycle = _walk(adjacency, roots)
    return cycle


def resolve_order(source: Union[ResourceGraph, Adjacency]) -> List[str]:
    """
    Valida o grafo e produz uma ordem topológica (dependências primeiro).

    Args:
        source: `ResourceGraph` ou mapeamento `nó -> dependências`.

    Returns:
        List[str]: Todas as identidades, cada uma após todas as suas
        dependências efetivas.

    Raises:
        CyclicDependency: Se o grafo contiver ciclo; `path` traz o ciclo
            completo (ex.: ``["A", "B", "A"]``).
    """
    adjacency, roots = _adjacency_of(source)
    order, cycle = _walk(adjacency, roots)

    if cycle is not None:
        payload = cyclic_dependency(path=cycle)
        raise CyclicDependency(
            message=f"Cycle detected in resource graph: {' -> '.join(cycle)}",
            details=payload.details,
            hint=payload.hint,
            path=cycle,
        )

    return order
