"""Tests for the FastAPI service mode."""

from __future__ import annotations

from pathlib import Path

import pytest

try:
    from fastapi.testclient import TestClient
except ModuleNotFoundError:  # pragma: no cover - optional dependency
    pytest.skip("fastapi not installed", allow_module_level=True)

from mdsh.config import GatherConfig
from mdsh.diagnostics import DiagnosticSink
from mdsh.gatherer import Gatherer
from mdsh.service import create_app
from tests._fixtures.docs_builder import DocsBuilder, code, page


class _RecordingFactory:
    def __init__(self) -> None:
        self.configs: list[GatherConfig] = []

    def __call__(self, config: GatherConfig, diagnostics: DiagnosticSink) -> Gatherer:
        self.configs.append(config)
        return Gatherer.from_config(config, diagnostics=diagnostics)


@pytest.fixture
def factory() -> _RecordingFactory:
    return _RecordingFactory()


@pytest.fixture
def client(factory: _RecordingFactory) -> TestClient:
    return TestClient(create_app(factory))


def test_health_endpoint(client: TestClient) -> None:
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_plan_endpoint_returns_tree_and_warnings(
    client: TestClient, docs_builder: DocsBuilder
) -> None:
    docs_builder.write(
        {
            "_index.md": page("Guide", "Overview.", weight=3),
            "run.md": page("Run", code("$ make test", unknown="x"), weight=10),
        }
    )

    response = client.post("/plan", json={"path": str(docs_builder.path())})

    assert response.status_code == 200
    data = response.json()
    assert data["scripts"] == 1
    assert data["plan"]["title"] == "Guide"
    assert data["plan"]["weight"] == 3
    assert [p["title"] for p in data["plan"]["pages"]] == ["Guide", "Run"]
    assert len(data["warnings"]) == 1
    assert "unknown" in data["warnings"][0]


def test_plan_endpoint_applies_overrides(
    client: TestClient, factory: _RecordingFactory, docs_builder: DocsBuilder
) -> None:
    docs_builder.write({"loose.md": "no frontmatter\n"})

    response = client.post(
        "/plan",
        json={"path": str(docs_builder.path()), "strict_frontmatter": False, "heredoc_verbatim": True},
    )

    assert response.status_code == 200
    assert response.json()["plan"] is None
    (config,) = factory.configs
    assert config.frontmatter.strict is False
    assert config.directives.heredoc_verbatim is True


def test_plan_endpoint_maps_missing_directory_to_404(client: TestClient, tmp_path: Path) -> None:
    response = client.post("/plan", json={"path": str(tmp_path / "missing")})

    assert response.status_code == 404
    assert "not found" in response.json()["detail"]


def test_plan_endpoint_maps_gather_errors_to_400(client: TestClient, docs_builder: DocsBuilder) -> None:
    docs_builder.write({"bad.md": "# nothing\n"})

    response = client.post("/plan", json={"path": str(docs_builder.path())})

    assert response.status_code == 400
    assert "No frontmatter found" in response.json()["detail"]
