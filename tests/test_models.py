"""Tests des modèles et du filtre."""

import pytest
from pydantic import ValidationError

from nomad_nodes.core.errors import NodeQueryError
from nomad_nodes.core.models import (
    FetchResult,
    FilterPredicate,
    NodeDetail,
    NodeSummary,
    SchedulingEligibility,
)

from conftest import make_node


def test_node_detail_from_nomad_payload():
    node = NodeDetail.model_validate({
        "ID": "f7476465-4d6e-c0de-26d0-e383c49be941",
        "Name": "worker-1",
        "Datacenter": "dc1",
        "Attributes": {
            "consul.version": "1.16.2",
            "unique.network.ip-address": "192.168.1.10",
        },
        "SchedulingEligibility": "eligible",
    })
    assert node.id == "f7476465-4d6e-c0de-26d0-e383c49be941"
    assert node.name == "worker-1"
    assert node.network_address == "192.168.1.10"
    assert node.has_consul
    assert node.is_eligible
    assert node.scheduling_eligibility is SchedulingEligibility.ELIGIBLE


def test_null_attributes_mean_no_consul_and_empty_address():
    node = NodeDetail.model_validate({
        "ID": "n1", "Name": "n1", "Attributes": None, "SchedulingEligibility": "ineligible",
    })
    assert node.attributes == {}
    assert node.network_address == ""
    assert not node.has_consul
    assert not node.is_eligible


def test_empty_consul_version_counts_as_absent():
    node = NodeDetail.model_validate({
        "ID": "n1", "Attributes": {"consul.version": ""}, "SchedulingEligibility": "eligible",
    })
    assert not node.has_consul


@pytest.mark.parametrize("value", ["draining", "", None, "ELIGIBLE"])
def test_anything_but_eligible_counts_as_ineligible(value):
    node = NodeDetail.model_validate({"ID": "n1", "SchedulingEligibility": value})
    assert node.scheduling_eligibility is SchedulingEligibility.INELIGIBLE
    assert not node.is_eligible


def test_missing_eligibility_is_rejected():
    with pytest.raises(ValidationError):
        NodeDetail.model_validate({"ID": "n1", "Name": "n1"})


def test_summary_requires_identifier():
    with pytest.raises(ValidationError):
        NodeSummary.model_validate({"ID": "", "Name": "x"})
    assert NodeSummary.model_validate({"ID": "abc", "Status": "ready"}).id == "abc"


def test_fetch_result_variants():
    node = make_node("A")
    ok = FetchResult.success("A", node)
    failed = FetchResult.failure("B", NodeQueryError("B"))
    assert ok.ok and ok.node is node
    assert not failed.ok
    assert failed.node is None
    assert failed.node_id == "B"


@pytest.mark.parametrize(
    "want_consul, want_ineligible, expected",
    [
        # (consul, eligible) des nœuds affichés
        (False, False, {(False, True)}),
        (True, False, {(True, True)}),
        (False, True, {(False, False)}),
        (True, True, {(True, False)}),
    ],
)
def test_filter_truth_table(want_consul, want_ineligible, expected):
    predicate = FilterPredicate(want_consul=want_consul, want_ineligible=want_ineligible)
    matched = set()
    for consul in (False, True):
        for eligible in (False, True):
            if predicate.matches(make_node("x", consul=consul, eligible=eligible)):
                matched.add((consul, eligible))
    assert matched == expected


def test_header_labels():
    assert FilterPredicate().eligibility_label == "Eligible"
    assert FilterPredicate().consul_label == "without"
    predicate = FilterPredicate(want_consul=True, want_ineligible=True)
    assert predicate.eligibility_label == "Ineligible"
    assert predicate.consul_label == "with"
