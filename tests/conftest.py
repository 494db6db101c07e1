"""Fixtures communes: nœuds factices et source de nœuds en mémoire."""

import asyncio
import random
from typing import Dict, Iterable, List, Optional

import pytest

from nomad_nodes.core.errors import NodeQueryError
from nomad_nodes.core.models import NodeDetail, NodeSummary


def make_node(node_id: str, consul: bool = False, eligible: bool = True,
              name: Optional[str] = None, address: str = "10.0.0.1") -> NodeDetail:
    attributes = {"unique.network.ip-address": address}
    if consul:
        attributes["consul.version"] = "1.17.0"
    return NodeDetail.model_validate({
        "ID": node_id,
        "Name": name or f"node-{node_id}",
        "Attributes": attributes,
        "SchedulingEligibility": "eligible" if eligible else "ineligible",
    })


class StubNodeSource:
    """Remplace `NomadClient`: liste fixe, détails en mémoire, échecs choisis."""

    def __init__(self, nodes: Iterable[NodeDetail], failing: Iterable[str] = (),
                 jitter: float = 0.0, seed: int = 0) -> None:
        self.details: Dict[str, NodeDetail] = {n.id: n for n in nodes}
        self.order: List[str] = list(self.details)
        self.failing = set(failing)
        self.order.extend(i for i in self.failing if i not in self.details)
        self.jitter = jitter
        self._random = random.Random(seed)
        self.list_calls = 0
        self.info_calls: List[str] = []
        self.list_error: Optional[Exception] = None

    async def list_nodes(self) -> List[NodeSummary]:
        self.list_calls += 1
        if self.list_error is not None:
            raise self.list_error
        return [NodeSummary(id=i) for i in self.order]

    async def node_info(self, node_id: str) -> NodeDetail:
        self.info_calls.append(node_id)
        if self.jitter:
            await asyncio.sleep(self._random.random() * self.jitter)
        else:
            await asyncio.sleep(0)
        if node_id in self.failing:
            raise NodeQueryError(node_id, "connection refused")
        return self.details[node_id]


@pytest.fixture
def abc_source():
    """A: Consul présent, éligible. B: sans Consul, inéligible. C: en échec."""
    return StubNodeSource(
        [
            make_node("A", consul=True, eligible=True, address="10.0.0.1"),
            make_node("B", consul=False, eligible=False, address="10.0.0.2"),
        ],
        failing=["C"],
    )
