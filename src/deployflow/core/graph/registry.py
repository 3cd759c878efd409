# src/deployflow/core/graph/registry.py
"""
Registro de recursos de um pass.

Este módulo define o `ResourceRegistry`, que acumula os recursos
declarados e seus relacionamentos e, ao ser finalizado, entrega o
conjunto congelado ao builder e ao resolver.

Responsabilidades do módulo:
    - Validar unicidade de identidade no momento do registro
    - Preservar a ordem de registro (sem que ela implique ordem de execução)
    - Validar integridade referencial de parent e dependências
    - Congelar o conjunto de nós em `finalize()`

Decisões arquiteturais:
    - Append-only durante o pass; nenhum registro após `finalize()`
    - Referências adiante (forward) são permitidas por padrão e
      resolvidas em `finalize()`
    - Em modo `strict` (agendamento incremental) parent e dependências
      precisam existir no momento do registro
    - Um registro rejeitado não altera o estado interno

Invariantes:
    - Cada identidade aparece no máximo uma vez
    - `index` de cada nó é sua posição de registro

Limites explícitos:
    - Não executa recursos
    - Não decide ordem de liberação
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from deployflow.core.errors import duplicate_identity, unknown_dependency, unknown_parent
from deployflow.core.exceptions import (
    DuplicateIdentity,
    RegistryFinalizedError,
    UnknownDependency,
    UnknownParent,
)

from .builder import ResourceGraph, build_graph
from .resolver import resolve_order
from .types import ResourceKind, ResourceNode


@dataclass
class ResourceRegistry:
    """
    Registro canônico de recursos para um único pass.

    Uso típico:

        registry = ResourceRegistry()
        registry.register("first", ResourceKind.LOGICAL)
        registry.register("firstChild", ResourceKind.PHYSICAL, parent="first")
        graph = registry.finalize()

    `finalize()` falha com `UnknownParent`, `UnknownDependency` ou
    `CyclicDependency`; nesse caso nenhum grafo parcial é produzido e o
    registry permanece congelado.
    """

    strict: bool = False

    _nodes: Dict[str, ResourceNode] = field(default_factory=dict, init=False, repr=False)
    _order: List[str] = field(default_factory=list, init=False, repr=False)
    _finalized: bool = field(default=False, init=False, repr=False)

    def register(
        self,
        identity: str,
        kind: ResourceKind = ResourceKind.PHYSICAL,
        parent: Optional[str] = None,
        depends_on: Optional[Iterable[str]] = None,
        *,
        type_token: Optional[str] = None,
    ) -> ResourceNode:
        if self._finalized:
            raise RegistryFinalizedError(
                message=f"Registry already finalized; cannot register '{identity}'",
                details={"identity": identity},
            )
        if not isinstance(identity, str) or not identity.strip():
            raise ValueError("identity must be a non-empty string")
        if parent is not None and (not isinstance(parent, str) or not parent.strip()):
            raise ValueError("parent must be a non-empty string when given")
        # uma string isolada seria iterada caractere a caractere
        if isinstance(depends_on, str):
            raise ValueError("depends_on must be an iterable of identities, not a string")
        deps = frozenset(depends_on or ())
        if any(not isinstance(dep, str) or not dep.strip() for dep in deps):
            raise ValueError("depends_on entries must be non-empty strings")

        if identity in self._nodes:
            payload = duplicate_identity(identity=identity)
            raise DuplicateIdentity(
                message=f"Duplicate resource identity: {identity}",
                details=payload.details,
                hint=payload.hint,
            )

        if self.strict:
            self._check_references(identity, parent, deps)

        node = ResourceNode(
            identity=identity,
            kind=ResourceKind(kind),
            parent=parent,
            dependencies=deps,
            type_token=type_token,
            index=len(self._order),
        )
        self._nodes[identity] = node
        self._order.append(identity)
        return node

    def _check_references(self, identity: str, parent: Optional[str], deps: Iterable[str]) -> None:
        if parent is not None and parent not in self._nodes:
            payload = unknown_parent(identity=identity, parent=parent)
            raise UnknownParent(
                message=f"Resource '{identity}' has unknown parent '{parent}'",
                details=payload.details,
                hint=payload.hint,
            )
        for dep in sorted(deps):
            if dep not in self._nodes:
                payload = unknown_dependency(identity=identity, dependency=dep)
                raise UnknownDependency(
                    message=f"Resource '{identity}' depends on unknown resource '{dep}'",
                    details=payload.details,
                    hint=payload.hint,
                )

    def get(self, identity: str) -> ResourceNode:
        return self._nodes[identity]

    def list(self) -> List[ResourceNode]:
        return [self._nodes[i] for i in self._order]

    def __contains__(self, identity: object) -> bool:
        return identity in self._nodes

    def __len__(self) -> int:
        return len(self._order)

    @property
    def finalized(self) -> bool:
        return self._finalized

    def finalize(self) -> ResourceGraph:
        """
        Congela o registry e produz o grafo validado do pass.

        Ordem das validações:
            1. integridade referencial (parents, depois dependências, na
               ordem de registro)
            2. construção do grafo
            3. detecção de ciclos e ordem topológica

        Raises:
            RegistryFinalizedError: Se chamado mais de uma vez.
            UnknownParent / UnknownDependency: Referência não registrada.
            CyclicDependency: Grafo combinado contém ciclo.
        """
        if self._finalized:
            raise RegistryFinalizedError(message="Registry already finalized", details={})
        self._finalized = True

        nodes = self.list()
        for node in nodes:
            self._check_references(node.identity, node.parent, ())
        for node in nodes:
            self._check_references(node.identity, None, node.dependencies)

        graph = build_graph(nodes)
        return graph.with_order(resolve_order(graph))
