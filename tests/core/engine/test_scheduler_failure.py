# tests/core/engine/test_scheduler_failure.py
"""
Testes da política de falha e de cancelamento do Scheduler.

Os testes asseguram que:
- `failed` propaga `skipped` para todo o fecho transitivo de dependentes
- ramos sem relação com a falha seguem normalmente
- um child que falha não derruba o parent nem os irmãos
- `cancel()` é idempotente e não altera recursos terminais
"""

from deployflow.core.engine.scheduler import Scheduler
from deployflow.core.errors import DEPENDENCY_FAILED, PASS_CANCELLED
from deployflow.core.graph.registry import ResourceRegistry
from deployflow.core.graph.types import Outcome, ResourceKind, ResourceState


def _drain(scheduler, outcomes):
    released = []
    for identity in scheduler.next_ready():
        released.append(identity)
        scheduler.report(identity, outcomes.get(identity, Outcome.SUCCEEDED))
    return released


def test_failed_root_skips_whole_subtree(component_graph):
    scheduler = Scheduler(component_graph)
    released = _drain(scheduler, {"first": Outcome.FAILED})

    assert released == ["first"]
    assert scheduler.states() == {
        "first": ResourceState.FAILED,
        "firstChild": ResourceState.SKIPPED,
        "second": ResourceState.SKIPPED,
        "myresource": ResourceState.SKIPPED,
    }
    assert scheduler.error("myresource")["type"] == DEPENDENCY_FAILED
    assert scheduler.error("myresource")["details"]["failed"] == "first"


def test_failure_does_not_stall_unrelated_branch():
    """
    Cenário do fixture com um recurso independente (`bystander`):
    a falha de `first` reporta 1 failed, 3 skipped e 1 succeeded.
    """
    reg = ResourceRegistry()
    reg.register("first", ResourceKind.LOGICAL)
    reg.register("firstChild", ResourceKind.PHYSICAL, parent="first")
    reg.register("second", ResourceKind.LOGICAL, parent="first", depends_on=["first"])
    reg.register("myresource", ResourceKind.PHYSICAL, parent="second")
    reg.register("bystander", ResourceKind.PHYSICAL)
    scheduler = Scheduler(reg.finalize())

    _drain(scheduler, {"first": Outcome.FAILED})

    summary = scheduler.summary()
    assert (summary.failed, summary.skipped, summary.succeeded) == (1, 3, 1)
    assert summary.partially_failed
    assert summary.states["bystander"] is ResourceState.SUCCEEDED
    assert set(summary.errors) == {"firstChild", "second", "myresource"}


def test_failed_child_does_not_fail_parent_or_sibling(component_graph):
    scheduler = Scheduler(component_graph)
    _drain(scheduler, {"firstChild": Outcome.FAILED})

    states = scheduler.states()
    assert states["first"] is ResourceState.SUCCEEDED
    assert states["firstChild"] is ResourceState.FAILED
    assert states["second"] is ResourceState.SUCCEEDED
    assert states["myresource"] is ResourceState.SUCCEEDED
    assert scheduler.summary().partially_failed


def test_sibling_with_explicit_dependency_is_skipped():
    reg = ResourceRegistry()
    reg.register("group", ResourceKind.LOGICAL)
    reg.register("db", parent="group")
    reg.register("app", parent="group", depends_on=["db"])
    reg.register("cache", parent="group")
    scheduler = Scheduler(reg.finalize())

    _drain(scheduler, {"db": Outcome.FAILED})

    assert scheduler.state("app") is ResourceState.SKIPPED
    assert scheduler.state("cache") is ResourceState.SUCCEEDED


def test_skip_releases_counters_once_for_diamond():
    """
    Em um losango a → {b, c} → d, a falha de `a` pula b, c e d, e cada
    par (d, predecessor) é contabilizado uma única vez.
    """
    reg = ResourceRegistry()
    reg.register("a")
    reg.register("b", depends_on=["a"])
    reg.register("c", depends_on=["a"])
    reg.register("d", depends_on=["b", "c"])
    scheduler = Scheduler(reg.finalize())

    _drain(scheduler, {"a": Outcome.FAILED})

    assert scheduler.pending("d") == 0
    assert scheduler.summary().skipped == 3
    assert scheduler.is_done()


def test_failure_error_payload_kept(component_graph):
    scheduler = Scheduler(component_graph)
    scheduler.mark_running("first")
    scheduler.report("first", Outcome.FAILED, error={"type": "EXECUTOR_ERROR", "message": "x"})

    assert scheduler.summary().errors["first"] == {"type": "EXECUTOR_ERROR", "message": "x"}


def test_cancel_skips_non_terminal_and_is_idempotent(component_graph):
    scheduler = Scheduler(component_graph)
    stream = scheduler.next_ready()
    assert next(stream) == "first"
    scheduler.report("first", Outcome.SUCCEEDED)
    assert next(stream) == "firstChild"

    affected = scheduler.cancel()

    assert sorted(affected) == ["firstChild", "myresource", "second"]
    assert scheduler.state("first") is ResourceState.SUCCEEDED
    assert scheduler.error("second")["type"] == PASS_CANCELLED
    assert scheduler.cancel() == []
    assert scheduler.cancelled
    assert scheduler.is_done()
    assert list(stream) == []


def test_late_report_after_cancel_is_ignored(component_graph):
    scheduler = Scheduler(component_graph)
    scheduler.mark_running("first")
    scheduler.cancel()

    assert scheduler.report("first", Outcome.SUCCEEDED) is ResourceState.SKIPPED
    assert scheduler.state("first") is ResourceState.SKIPPED
