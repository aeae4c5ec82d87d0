"""Tests for the layout engines and the engine registry.

The elkjs tests need Node.js with the elkjs module installed and are
skipped otherwise.
"""

import threading

import pytest

from layout_sidecar.errors import EngineUnavailableError
from layout_sidecar.layout.engines import (
    ENGINES,
    ElkjsLayoutEngine,
    LayeredLayoutEngine,
    LayoutEngine,
    get_engine,
)
from layout_sidecar.layout.request_translator import to_elk_graph
from layout_sidecar.models.graph import parse_graph


def _elk(payload):
    return to_elk_graph(parse_graph(payload)).to_json()


TWO_NODES = {
    "nodes": [
        {"id": "n1", "width": 60, "height": 40},
        {"id": "n2", "width": 60, "height": 40},
    ],
    "edges": [{"id": "e1", "source": "n1", "target": "n2"}],
}


class TestRegistry:
    """Engine lookup by name."""

    def test_known_engines(self):
        assert get_engine("elk") is ElkjsLayoutEngine
        assert get_engine("layered") is LayeredLayoutEngine
        assert set(ENGINES) == {"elk", "layered"}

    def test_unknown_engine(self):
        with pytest.raises(EngineUnavailableError) as exc_info:
            get_engine("dot")
        assert "Available:" in str(exc_info.value)

    def test_engines_implement_interface(self):
        for engine_cls in ENGINES.values():
            assert issubclass(engine_cls, LayoutEngine)


class TestLayeredLayoutEngine:
    """NetworkX fallback engine."""

    @pytest.fixture
    def engine(self):
        return LayeredLayoutEngine()

    def test_engine_properties(self, engine):
        assert engine.name == "layered"

    @pytest.mark.asyncio
    async def test_is_available(self, engine):
        assert await engine.is_available() is True

    @pytest.mark.asyncio
    async def test_down_places_target_below_source(self, engine):
        result = await engine.layout(_elk(TWO_NODES))
        nodes = {c["id"]: c for c in result["children"]}
        assert nodes["n2"]["y"] > nodes["n1"]["y"]
        assert nodes["n2"]["y"] >= nodes["n1"]["y"] + 40 + 48

    @pytest.mark.asyncio
    async def test_right_places_target_right_of_source(self, engine):
        result = await engine.layout(_elk({**TWO_NODES, "direction": "RIGHT"}))
        nodes = {c["id"]: c for c in result["children"]}
        assert nodes["n2"]["x"] > nodes["n1"]["x"]
        assert nodes["n2"]["y"] == nodes["n1"]["y"]

    def test_spacing_option_is_honoured(self, engine):
        result = engine.compute(_elk({**TWO_NODES, "spacing": {"node": 100}}))
        nodes = {c["id"]: c for c in result["children"]}
        assert nodes["n2"]["y"] - nodes["n1"]["y"] == 40 + 100

    def test_edge_section_connects_faces(self, engine):
        result = engine.compute(_elk(TWO_NODES))
        section = result["edges"][0]["sections"][0]
        assert section["startPoint"] == {"x": 30, "y": 40}
        assert section["endPoint"] == {"x": 30, "y": 88}
        assert section["bendPoints"] == []

    def test_orthogonal_bends_between_offset_nodes(self, engine):
        payload = {
            "nodes": [
                {"id": "a", "width": 60, "height": 40},
                {"id": "b", "width": 60, "height": 40},
                {"id": "c", "width": 20, "height": 40},
            ],
            "edges": [
                {"id": "e1", "source": "a", "target": "c"},
                {"id": "e2", "source": "b", "target": "c"},
            ],
        }
        result = engine.compute(_elk(payload))
        for edge in result["edges"]:
            section = edge["sections"][0]
            points = (
                [section["startPoint"]] + section["bendPoints"] + [section["endPoint"]]
            )
            for p, q in zip(points, points[1:]):
                assert p["x"] == q["x"] or p["y"] == q["y"]

    def test_cycle_is_tolerated(self, engine):
        payload = {
            "nodes": [
                {"id": "a", "width": 10, "height": 10},
                {"id": "b", "width": 10, "height": 10},
            ],
            "edges": [
                {"id": "ab", "source": "a", "target": "b"},
                {"id": "ba", "source": "b", "target": "a"},
                {"id": "aa", "source": "a", "target": "a"},
            ],
        }
        result = engine.compute(_elk(payload))
        assert {e["id"] for e in result["edges"]} == {"ab", "ba", "aa"}
        loop = next(e for e in result["edges"] if e["id"] == "aa")
        assert len(loop["sections"][0]["bendPoints"]) == 4

    def test_explicit_port_coordinates_kept(self, engine):
        payload = {
            "nodes": [{
                "id": "n1",
                "width": 40,
                "height": 20,
                "ports": [
                    {"id": "fixed", "x": 5, "y": 20},
                    {"id": "west", "side": "W"},
                    {"id": "free"},
                ],
            }],
            "edges": [],
        }
        result = engine.compute(_elk(payload))
        ports = {p["id"]: p for p in result["children"][0]["ports"]}
        assert ports["n1.fixed"] == {"id": "n1.fixed", "x": 5, "y": 20}
        assert ports["n1.west"]["x"] == 0
        assert ports["n1.free"]["y"] == 20  # bottom face for DOWN

    def test_edge_to_port_resolves_owner(self, engine):
        elk = _elk({
            "nodes": [
                {"id": "n1", "width": 10, "height": 10, "ports": [{"id": "out"}]},
                {"id": "n2", "width": 10, "height": 10},
            ],
            "edges": [],
        })
        elk["edges"] = [{"id": "e1", "sources": ["n1.out"], "targets": ["n2"]}]
        result = engine.compute(elk)
        assert result["edges"][0]["sources"] == ["n1.out"]

    def test_unknown_endpoint_raises(self, engine):
        with pytest.raises(ValueError, match="Referenced shape does not exist: ghost"):
            engine.compute(_elk({
                "nodes": [{"id": "n1", "width": 1, "height": 1}],
                "edges": [{"id": "e1", "source": "n1", "target": "ghost"}],
            }))

    def test_empty_graph(self, engine):
        result = engine.compute(_elk({"nodes": [], "edges": []}))
        assert result["children"] == []
        assert result["edges"] == []


class TestElkjsLayoutEngine:
    """ELK via elkjs (needs Node.js)."""

    @pytest.fixture
    def engine(self):
        return ElkjsLayoutEngine()

    def test_engine_properties(self, engine):
        assert engine.name == "elk"

    @pytest.mark.asyncio
    async def test_availability_is_boolean(self, engine):
        assert isinstance(await engine.is_available(), bool)

    @pytest.mark.asyncio
    async def test_simple_layout(self, engine):
        if not await engine.is_available():
            pytest.skip("ELK not available (Node.js + elkjs required)")

        result = await engine.layout(_elk(TWO_NODES))
        nodes = {c["id"]: c for c in result["children"]}
        assert nodes["n2"]["y"] > nodes["n1"]["y"]
        assert len(result["edges"][0]["sections"]) > 0

    @pytest.mark.asyncio
    async def test_fixed_port_position_honoured(self, engine):
        if not await engine.is_available():
            pytest.skip("ELK not available (Node.js + elkjs required)")

        payload = {
            "nodes": [{
                "id": "n1", "width": 40, "height": 20,
                "ports": [{"id": "out", "side": "S", "x": 10, "y": 20}],
            }],
            "edges": [],
        }
        result = await engine.layout(_elk(payload))
        port = result["children"][0]["ports"][0]
        assert port["id"] == "n1.out"
        assert (port["x"], port["y"]) == (10, 20)

    @pytest.mark.asyncio
    async def test_engine_rejection_is_engine_error(self, engine):
        if not await engine.is_available():
            pytest.skip("ELK not available (Node.js + elkjs required)")

        from layout_sidecar.errors import EngineError

        elk = _elk({"nodes": [{"id": "n1", "width": 1, "height": 1}], "edges": []})
        elk["edges"] = [{"id": "e1", "sources": ["n1"], "targets": ["ghost"]}]
        with pytest.raises(EngineError):
            await engine.layout(elk)

    @pytest.mark.asyncio
    async def test_node_lookup_runs_off_event_loop(self, monkeypatch):
        """A missing node path is resolved in a worker thread."""
        loop_thread = threading.get_ident()
        lookup_threads = []

        def no_node():
            lookup_threads.append(threading.get_ident())
            raise EngineUnavailableError("Node.js not found.")

        monkeypatch.setattr("layout_sidecar.layout.engines.elk.find_node", no_node)
        with pytest.raises(EngineUnavailableError):
            await ElkjsLayoutEngine().layout(_elk(TWO_NODES))
        assert len(lookup_threads) == 1
        assert lookup_threads[0] != loop_thread
