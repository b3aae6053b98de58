"""
Tests for Grafcet network reconstruction and neighbour resolution.
"""

import os
import shutil
import tempfile

import pytest

from plcdiff.errors import CapacityError, InvariantError, StructuralError
from plcdiff.events import CurrentTag
from plcdiff.grafcet import GrafcetCounter, GrafcetNode, GrafcetTracer
from plcdiff.pipeline import process_file


def node_xml(kind, node_id, incoming=(), outgoing=(), name=None):
    parts = [f"<{kind}>", f"<Id>{node_id}</Id>"]
    if name is not None:
        parts.append(f"<Name>{name}</Name>")
    parts.extend(f"<From>{ref}</From>" for ref in incoming)
    parts.extend(f"<To>{ref}</To>" for ref in outgoing)
    parts.append(f"</{kind}>")
    return "".join(parts)


class TestGrafcetNode:
    """Test the node dataclass."""

    def test_uniq_triple(self):
        node = GrafcetNode(id="t1", incoming=["s1"], outgoing=["s2"])

        assert node.uniq_triple() == ("s1", "t1", "s2")
        assert not node.is_ambiguous

    def test_fork_has_no_triple(self):
        node = GrafcetNode(id="f1", incoming=["s1"], outgoing=["t1", "t2"])

        assert node.uniq_triple() is None
        assert node.is_ambiguous
        assert node.has_hub()

    def test_counter_counts_only_grafcet_nodes(self):
        counter = GrafcetCounter()

        assert counter.process_current_tag(CurrentTag.GRAFCET_OR_FORK)
        assert not counter.process_current_tag(CurrentTag.NAME)
        assert counter.process_current_tag(CurrentTag.GRAFCET_TRANSITION)
        assert counter.count == 2


class TestGrafcetTracer:
    """Test building the network from a document."""

    def setup_method(self):
        self.temp_dir = tempfile.mkdtemp()

    def teardown_method(self):
        shutil.rmtree(self.temp_dir)

    def _trace(self, body):
        path = os.path.join(self.temp_dir, "grafcet.xml")
        with open(path, 'w', encoding='utf-8') as f:
            f.write(f"<Project><Grafcet>{body}</Grafcet></Project>")
        tracer = GrafcetTracer()
        process_file(path, [tracer])
        return tracer

    def test_simple_chain(self):
        tracer = self._trace(
            node_xml("GrafcetNodeStep", "s1", outgoing=["t1"])
            + node_xml("GrafcetTransition", "t1", ["s1"], ["s2"])
            + node_xml("GrafcetNodeStep", "s2", incoming=["t1"])
        )

        assert tracer.sequence == ["s1", "t1", "s2"]
        assert tracer.nodes["t1"].incoming == ["s1"]
        assert tracer.nodes["t1"].outgoing == ["s2"]
        assert tracer.nodes["t1"].kind is CurrentTag.GRAFCET_TRANSITION
        assert tracer.depth == 0

    def test_fork_with_three_branches_is_accepted(self):
        tracer = self._trace(node_xml("GrafcetOrFork", "f1", ["s1"], ["t1", "t2", "t3"]))

        assert tracer.nodes["f1"].outgoing == ["t1", "t2", "t3"]

    def test_two_in_two_out_is_fatal(self):
        with pytest.raises(StructuralError) as exc_info:
            self._trace(node_xml("GrafcetOrJunction", "j1", ["t1", "t2"], ["t3", "t4"]))

        assert exc_info.value.context["node"].id == "j1"

    def test_node_without_links_is_fatal(self):
        with pytest.raises(StructuralError):
            self._trace(node_xml("GrafcetNodeStep", "s1"))

    def test_node_without_id_is_fatal(self):
        with pytest.raises(StructuralError):
            self._trace("<GrafcetNodeStep><To>t1</To></GrafcetNodeStep>")

    def test_nested_node_is_fatal(self):
        with pytest.raises(StructuralError):
            self._trace(
                "<GrafcetNodeStep><Id>s1</Id><To>t1</To>"
                + node_xml("GrafcetTransition", "t1", ["s1"], ["s2"])
                + "</GrafcetNodeStep>"
            )

    def test_duplicate_id_is_fatal(self):
        with pytest.raises(StructuralError):
            self._trace(
                node_xml("GrafcetNodeStep", "s1", outgoing=["t1"])
                + node_xml("GrafcetNodeStep", "s1", outgoing=["t1"])
            )

    def test_references_outside_nodes_are_ignored(self):
        tracer = self._trace(
            "<Link><Id>x</Id><From>y</From></Link>"
            + node_xml("GrafcetNodeStep", "s1", outgoing=["t1"])
        )

        assert tracer.sequence == ["s1"]
        assert tracer.nodes["s1"].incoming == []

    def test_guid_too_long(self):
        with pytest.raises(CapacityError):
            self._trace(node_xml("GrafcetNodeStep", "x" * 37, outgoing=["t1"]))

    def test_get_current_node_follows_sequence(self):
        tracer = self._trace(
            node_xml("GrafcetNodeStep", "s1", outgoing=["t1"])
            + node_xml("GrafcetTransition", "t1", ["s1"], ["s2"])
        )
        counter = GrafcetCounter()

        counter.process_current_tag(CurrentTag.GRAFCET_NODE_STEP)
        assert tracer.get_current_node(counter).id == "s1"
        counter.process_current_tag(CurrentTag.GRAFCET_TRANSITION)
        assert tracer.get_current_node(counter).id == "t1"
        counter.process_current_tag(CurrentTag.GRAFCET_NODE_STEP)
        with pytest.raises(InvariantError):
            tracer.get_current_node(counter)


class TestNeighbourResolution:
    """Test resolving names through forks and junctions."""

    def setup_method(self):
        self.tracer = GrafcetTracer()
        for node in [
            GrafcetNode("s2", CurrentTag.GRAFCET_NODE_STEP, ["t1"], ["f1"]),
            GrafcetNode("f1", CurrentTag.GRAFCET_OR_FORK, ["s2"], ["t2", "t3"]),
            GrafcetNode("t2", CurrentTag.GRAFCET_TRANSITION, ["f1"], ["s3"]),
            GrafcetNode("t4", CurrentTag.GRAFCET_TRANSITION, ["s3"], ["j1"]),
            GrafcetNode("t5", CurrentTag.GRAFCET_TRANSITION, ["s4"], ["j1"]),
            GrafcetNode("j1", CurrentTag.GRAFCET_OR_JUNCTION, ["t4", "t5"], ["s5"]),
        ]:
            self.tracer.nodes[node.id] = node
        self.names = {"s2": "Busy", "s3": "Left", "s4": "Right", "s5": "Done",
                      "t2": "T2", "t4": "T4", "t5": "T5"}

    def test_fork_resolves_to_its_input(self):
        assert self.tracer.get_unique_link("f1") == "s2"
        assert self.tracer.display_name("f1", self.names) == "Busy"

    def test_junction_resolves_to_its_output(self):
        assert self.tracer.get_unique_link("j1") == "s5"
        assert self.tracer.display_name("j1", self.names) == "Done"

    def test_named_node_resolves_to_itself(self):
        assert self.tracer.display_name("s3", self.names) == "Left"

    def test_unknown_reference_is_fatal(self):
        with pytest.raises(StructuralError):
            self.tracer.display_name("missing", self.names)

    def test_cycle_is_fatal(self):
        tracer = GrafcetTracer()
        tracer.nodes["f1"] = GrafcetNode("f1", CurrentTag.GRAFCET_OR_FORK, ["f2"], ["a", "b"])
        tracer.nodes["f2"] = GrafcetNode("f2", CurrentTag.GRAFCET_OR_FORK, ["f1"], ["c", "d"])

        with pytest.raises(StructuralError):
            tracer.display_name("f1", {})
