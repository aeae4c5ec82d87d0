"""Tests for the LayoutService pipeline."""

import pytest

from layout_sidecar.config.settings import Settings
from layout_sidecar.errors import EngineUnavailableError, GraphValidationError, LayoutTimeoutError
from layout_sidecar.layout.engines import ElkjsLayoutEngine, LayeredLayoutEngine
from layout_sidecar.service import LayoutService, make_engine_factory
from tests.fixtures.stub_engines import NeverEngine, StubEngine


class TestEngineFactory:
    """Engine construction from settings."""

    def test_layered_factory_builds_fresh_engines(self):
        factory = make_engine_factory(Settings(engine="layered"))
        first, second = factory(), factory()
        assert isinstance(first, LayeredLayoutEngine)
        assert first is not second

    def test_elk_factory_passes_node_path(self):
        factory = make_engine_factory(Settings(engine="elk", node_path="/opt/node"))
        engine = factory()
        assert isinstance(engine, ElkjsLayoutEngine)
        assert engine.node_path == "/opt/node"

    def test_elk_factory_resolves_node_once(self, monkeypatch):
        calls = []

        def fake_find_node():
            calls.append(1)
            return "/usr/bin/fake-node"

        monkeypatch.setattr("layout_sidecar.service.find_node", fake_find_node)
        factory = make_engine_factory(Settings(engine="elk"))
        engines = [factory(), factory()]
        assert [engine.node_path for engine in engines] == ["/usr/bin/fake-node"] * 2
        assert len(calls) == 1

    def test_elk_factory_tolerates_missing_node(self, monkeypatch):
        """Startup succeeds; the lookup is retried per request."""
        def no_node():
            raise EngineUnavailableError("Node.js not found.")

        monkeypatch.setattr("layout_sidecar.service.find_node", no_node)
        engine = make_engine_factory(Settings(engine="elk"))()
        assert isinstance(engine, ElkjsLayoutEngine)
        assert engine._node_path is None

    def test_unknown_engine_fails_fast(self):
        with pytest.raises(EngineUnavailableError):
            make_engine_factory(Settings(engine="graphviz"))


class TestLayoutService:
    """Validate -> translate -> invoke -> translate back."""

    @pytest.mark.asyncio
    async def test_engine_receives_translated_graph(self):
        engine = StubEngine({
            "children": [{"id": "n1", "width": 40, "height": 20, "ports": [{"id": "n1.p"}]}],
        })
        service = LayoutService(lambda: engine, timeout_ms=1000)
        result = await service.compute({
            "nodes": [{"id": "n1", "width": 40, "height": 20, "ports": [{"id": "p", "x": 3}]}],
            "edges": [],
        })

        sent = engine.calls[0]
        assert sent["children"][0]["ports"][0] == {
            "id": "n1.p",
            "x": 3,
            "order": 0,
            "layoutOptions": {},
        }
        node = result.nodes[0]
        assert (node.x, node.y) == (0, 0)
        assert (node.ports[0].x, node.ports[0].y) == (0, 0)
        assert result.edges == []

    @pytest.mark.asyncio
    async def test_validation_failure_skips_engine(self):
        engine = StubEngine()
        service = LayoutService(lambda: engine, timeout_ms=1000)
        with pytest.raises(GraphValidationError):
            await service.compute({"nodes": [{"id": "n1", "width": -5, "height": 20}], "edges": []})
        assert engine.calls == []

    @pytest.mark.asyncio
    async def test_timeout(self):
        service = LayoutService(NeverEngine, timeout_ms=50)
        with pytest.raises(LayoutTimeoutError):
            await service.compute({"nodes": [], "edges": []})
