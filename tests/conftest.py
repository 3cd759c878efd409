# tests/conftest.py
"""
Fixtures compartilhados para testes do deployflow.

Este módulo define fixtures reutilizáveis que fornecem:
- o cenário canônico de component dependencies
  (`first`, `firstChild`, `second`, `myresource`)
- contexto de pass controlado (PassContext)
- um executor de teste que registra chamadas e simula falhas

Decisões arquiteturais:
    - Fixtures são mantidas simples e explícitas
    - O executor de teste usa duck typing (sem herança do protocolo)
    - Imports do core são realizados de forma lazy para melhorar a
      clareza de erros durante falhas de import

Invariantes:
    - Nenhuma fixture realiza I/O
    - Nenhuma fixture executa chamadas de rede
"""

import threading
import time

import pytest


# =====================================================
# Config fixtures
# =====================================================

@pytest.fixture
def config_defaults_yaml() -> str:
    """YAML típico de `config.defaults.yaml` do deployflow."""
    return """
engine:
  max_workers: 4
  fail_fast: false
  execute_logical: false
  operation: create

resources: {}
""".lstrip()


@pytest.fixture
def config_local_yaml() -> str:
    """Override local: aumenta o pool e desabilita um recurso."""
    return """
engine:
  max_workers: 8

resources:
  myresource:
    enabled: false
""".lstrip()


# =====================================================
# Graph fixtures
# =====================================================

@pytest.fixture
def component_registry():
    """
    Registry do cenário component dependencies.

        first       (logical, raiz)
        firstChild  (physical, parent=first)
        second      (logical, parent=first, depends_on=[first])
        myresource  (physical, parent=second)
    """
    from deployflow.core.graph.registry import ResourceRegistry
    from deployflow.core.graph.types import ResourceKind

    registry = ResourceRegistry()
    registry.register("first", ResourceKind.LOGICAL, type_token="test:index:MyComponentResource")
    registry.register("firstChild", ResourceKind.PHYSICAL, parent="first", type_token="test:index:MyCustomResource")
    registry.register(
        "second",
        ResourceKind.LOGICAL,
        parent="first",
        depends_on=["first"],
        type_token="test:index:MyComponentResource",
    )
    registry.register("myresource", ResourceKind.PHYSICAL, parent="second", type_token="test:index:MyCustomResource")
    return registry


@pytest.fixture
def component_graph(component_registry):
    return component_registry.finalize()


# =====================================================
# Engine fixtures
# =====================================================

@pytest.fixture
def make_ctx():
    """Factory de PassContext com config explícita."""
    from deployflow.core.engine.context import PassContext

    def _make(config=None, **kwargs):
        return PassContext.create(config=config or {}, run_id="run-test", **kwargs)

    return _make


class RecordingExecutor:
    """
    Executor de teste.

    - registra (identity, operation) na ordem de chamada
    - `fail`: identidades que retornam Outcome.FAILED
    - `raise_on`: identidades que levantam RuntimeError
    - `delay`: pausa (s) por chamada, para forçar sobreposição entre workers
    - `max_concurrency`: pico de chamadas simultâneas observado
    """

    def __init__(self, *, fail=(), raise_on=(), delay=0.0):
        self.fail = set(fail)
        self.raise_on = set(raise_on)
        self.delay = delay
        self.calls = []
        self.max_concurrency = 0
        self._active = 0
        self._lock = threading.Lock()

    def execute(self, node, operation, ctx):
        from deployflow.core.graph.types import Outcome

        with self._lock:
            self.calls.append((node.identity, operation.value))
            self._active += 1
            self.max_concurrency = max(self.max_concurrency, self._active)
        try:
            if self.delay:
                time.sleep(self.delay)
            if node.identity in self.raise_on:
                raise RuntimeError(f"boom: {node.identity}")
            if node.identity in self.fail:
                return Outcome.FAILED
            return Outcome.SUCCEEDED
        finally:
            with self._lock:
                self._active -= 1

    @property
    def executed(self):
        return [identity for identity, _ in self.calls]


@pytest.fixture
def recording_executor():
    """Retorna a *classe* RecordingExecutor para instanciação com parâmetros."""
    return RecordingExecutor
