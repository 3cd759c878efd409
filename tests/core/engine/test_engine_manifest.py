# tests/core/engine/test_engine_manifest.py
"""
Testes de integração entre DeploymentEngine e Manifest.

Quando `ctx.manifest` está presente, o engine registra explicitamente
o início do pass, cada transição de recurso e o resumo final.
"""

from datetime import datetime, timezone

import pytest

try:
    from deployflow.core.config.hashing import compute_config_hash
    from deployflow.core.engine.engine import DeploymentEngine
    from deployflow.core.graph.builder import compute_graph_hash
    from deployflow.core.traceability.manifest import create_manifest, load_manifest, save_manifest
except Exception as e:  # noqa: BLE001
    DeploymentEngine = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _manifest_for(graph, config):
    return create_manifest(
        run_id="run-test",
        started_at=datetime(2026, 1, 1, tzinfo=timezone.utc),
        operation="create",
        version="0.1.0",
        config_hash=compute_config_hash(config),
        graph_hash=compute_graph_hash(graph),
    )


def test_manifest_records_every_resource(component_graph, make_ctx, recording_executor):
    if DeploymentEngine is None:
        pytest.fail(f"Missing DeploymentEngine. Import error: {_IMPORT_ERR}")

    config = {"engine": {"execute_logical": True}}
    manifest = _manifest_for(component_graph, config)
    ctx = make_ctx(config, manifest=manifest)

    DeploymentEngine(graph=component_graph, executor=recording_executor(fail={"second"}), ctx=ctx).run()

    statuses = {rid: entry["status"] for rid, entry in manifest.resources.items()}
    assert statuses == {
        "first": "succeeded",
        "firstChild": "succeeded",
        "second": "failed",
        "myresource": "skipped",
    }
    assert manifest.resources["second"]["error"]["type"] == "EXECUTOR_ERROR"
    assert manifest.resources["myresource"]["reason"]["type"] == "DEPENDENCY_FAILED"
    assert manifest.summary["succeeded"] == 2
    assert manifest.summary["failed"] == 1
    assert manifest.summary["skipped"] == 1

    types = [e["type"] for e in manifest.events]
    assert types[0] == "pass_started"
    assert types[-1] == "pass_finished"
    assert types.count("resource_started") == 3
    assert types.count("resource_skipped") == 1


def test_manifest_survives_round_trip(component_graph, make_ctx, recording_executor, tmp_path):
    if DeploymentEngine is None:
        pytest.fail(f"Missing DeploymentEngine. Import error: {_IMPORT_ERR}")

    manifest = _manifest_for(component_graph, {})
    ctx = make_ctx(manifest=manifest)
    DeploymentEngine(graph=component_graph, executor=recording_executor(), ctx=ctx).run()

    path = tmp_path / "out" / "manifest.json"
    save_manifest(manifest, path)
    restored = load_manifest(path)

    assert restored.to_dict() == manifest.to_dict()
    assert restored.inputs["graph_hash"] == compute_graph_hash(component_graph)
