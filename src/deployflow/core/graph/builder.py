# src/deployflow/core/graph/builder.py
"""
Construtor do grafo de recursos.

Este módulo converte o conjunto congelado de `ResourceNode` em um grafo
direcionado com duas classes de aresta:

    - contenção:   child → parent      (derivada de `parent`)
    - dependência: dependente → dependência (derivada de `dependencies`)

A visão de adjacência combinada é usada apenas para ordenação; a
distinção semântica entre as classes permanece disponível via `edges()`.

Invariantes:
    - Toda aresta referencia nós existentes
    - Identidades são únicas
    - `index` de cada nó corresponde à sua posição de registro

Limites explícitos:
    - Não detecta ciclos (ver `resolver`)
    - Não agenda nem executa recursos
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Dict, Iterable, List, Optional, Set, Tuple

from deployflow.core.config.hashing import canonical_sha256
from deployflow.core.errors import duplicate_identity, unknown_dependency, unknown_parent
from deployflow.core.exceptions import DuplicateIdentity, UnknownDependency, UnknownParent

from .types import EdgeKind, ResourceNode


@dataclass(frozen=True)
class Edge:
    source: str
    target: str
    kind: EdgeKind

    def to_dict(self) -> Dict[str, str]:
        return {"source": self.source, "target": self.target, "kind": self.kind.value}


class ResourceGraph:
    """
    Grafo direcionado e imutável de recursos de um pass.

    Arestas apontam do recurso que espera para o recurso esperado
    (child → parent, dependente → dependência). Consultas de dependentes
    usam o índice reverso, montado uma única vez na construção.

    `order` contém a ordem topológica validada pelo resolver quando o
    grafo vem de `ResourceRegistry.finalize()`; grafos montados
    diretamente por `build_graph` possuem `order` vazio até
    `with_order` ser aplicado.
    """

    def __init__(self, nodes: List[ResourceNode], edges: List[Edge], order: Tuple[str, ...] = ()):
        self._nodes: Dict[str, ResourceNode] = {n.identity: n for n in nodes}
        self._edges: Tuple[Edge, ...] = tuple(edges)
        self._order: Tuple[str, ...] = tuple(order)

        self._forward: Dict[str, Set[str]] = {i: set() for i in self._nodes}
        self._reverse: Dict[str, Set[str]] = {i: set() for i in self._nodes}
        self._children: Dict[str, List[str]] = {i: [] for i in self._nodes}
        for e in self._edges:
            self._forward[e.source].add(e.target)
            self._reverse[e.target].add(e.source)
            if e.kind is EdgeKind.CONTAINMENT:
                self._children[e.target].append(e.source)

    # -----------------------------
    # Nós
    # -----------------------------
    @property
    def nodes(self) -> List[ResourceNode]:
        return list(self._nodes.values())

    def identities(self) -> List[str]:
        return list(self._nodes)

    def node(self, identity: str) -> ResourceNode:
        return self._nodes[identity]

    def __contains__(self, identity: object) -> bool:
        return identity in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    @property
    def order(self) -> List[str]:
        return list(self._order)

    def with_order(self, order: Iterable[str]) -> "ResourceGraph":
        return ResourceGraph(self.nodes, list(self._edges), tuple(order))

    # -----------------------------
    # Arestas
    # -----------------------------
    def edges(self, kind: Optional[EdgeKind] = None) -> List[Edge]:
        if kind is None:
            return list(self._edges)
        return [e for e in self._edges if e.kind is kind]

    def dependencies_of(self, identity: str) -> List[str]:
        """Predecessores na direção de criação (dependências efetivas)."""
        return sorted(self._forward[identity])

    def dependents_of(self, identity: str) -> List[str]:
        """Recursos que esperam por `identity` (aresta reversa)."""
        return sorted(self._reverse[identity])

    def parent_of(self, identity: str) -> Optional[str]:
        return self._nodes[identity].parent

    def children_of(self, identity: str) -> List[str]:
        return list(self._children[identity])

    def roots(self) -> List[str]:
        """Recursos sem parent (raízes de contenção)."""
        return [i for i, n in self._nodes.items() if n.parent is None]

    def ancestors(self, identity: str) -> List[str]:
        """Cadeia de parents, do mais próximo à raiz."""
        chain: List[str] = []
        seen = {identity}
        current = self._nodes[identity].parent
        while current is not None and current not in seen:
            chain.append(current)
            seen.add(current)
            current = self._nodes[current].parent
        return chain

    def descendants(self, identity: str) -> List[str]:
        """Todos os children transitivos, em largura."""
        out: List[str] = []
        seen = {identity}
        queue = list(self._children[identity])
        while queue:
            child = queue.pop(0)
            if child in seen:
                continue
            seen.add(child)
            out.append(child)
            queue.extend(self._children[child])
        return out

    def to_dict(self) -> Dict[str, Any]:
        return {
            "nodes": [n.to_dict() for n in self._nodes.values()],
            "edges": [e.to_dict() for e in self._edges],
        }


def build_graph(nodes: Iterable[ResourceNode]) -> ResourceGraph:
    """
    Constrói o grafo direcionado a partir do conjunto congelado de nós.

    Para cada nó: aresta (nó → parent) de contenção quando há parent, e
    uma aresta (nó → dependência) para cada dependência explícita. Uma
    dependência explícita no próprio parent produz as duas classes de
    aresta; a adjacência combinada mantém o alvo uma única vez.

    Os endpoints são revalidados aqui mesmo quando os nós vêm do
    Registry, que já faz a mesma checagem no `finalize`.

    Raises:
        DuplicateIdentity: Se duas entradas compartilharem identidade.
        UnknownParent: Se um parent não estiver no conjunto.
        UnknownDependency: Se uma dependência não estiver no conjunto.
    """
    ordered: List[ResourceNode] = []
    seen: Set[str] = set()
    for position, node in enumerate(nodes):
        if node.identity in seen:
            payload = duplicate_identity(identity=node.identity)
            raise DuplicateIdentity(
                message=f"Duplicate resource identity: {node.identity}",
                details=payload.details,
                hint=payload.hint,
            )
        seen.add(node.identity)
        ordered.append(node if node.index == position else replace(node, index=position))

    edges: List[Edge] = []
    for node in ordered:
        if node.parent is not None:
            if node.parent not in seen:
                payload = unknown_parent(identity=node.identity, parent=node.parent)
                raise UnknownParent(
                    message=f"Resource '{node.identity}' has unknown parent '{node.parent}'",
                    details=payload.details,
                    hint=payload.hint,
                )
            edges.append(Edge(node.identity, node.parent, EdgeKind.CONTAINMENT))

        for dep in sorted(node.dependencies):
            if dep not in seen:
                payload = unknown_dependency(identity=node.identity, dependency=dep)
                raise UnknownDependency(
                    message=f"Resource '{node.identity}' depends on unknown resource '{dep}'",
                    details=payload.details,
                    hint=payload.hint,
                )
            edges.append(Edge(node.identity, dep, EdgeKind.DEPENDENCY))

    return ResourceGraph(ordered, edges)


def compute_graph_hash(graph: ResourceGraph) -> str:
    """SHA-256 canônico da estrutura do grafo (nós + arestas), para o Manifest."""
    return canonical_sha256(graph.to_dict())
