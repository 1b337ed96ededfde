"""Tests for manifest normalization."""

import pytest
import yaml
from lvm_operator.data.models import NodeSelectorOperator, TaintEffect, Toleration, TolerationOperator
from lvm_operator.data.normalization import (
    ClusterConfigError,
    load_cluster_config,
    normalize_cluster_config,
    normalize_node_selector,
    normalize_pod,
    normalize_toleration,
)


class TestNormalizeToleration:
    def test_full_toleration(self):
        toleration = normalize_toleration({
            "key": "dedicated",
            "operator": "Equal",
            "value": "lvm",
            "effect": "NoExecute",
            "tolerationSeconds": "300",
        })
        assert toleration == Toleration(
            key="dedicated",
            operator=TolerationOperator.EQUAL,
            value="lvm",
            effect=TaintEffect.NO_EXECUTE,
            toleration_seconds=300,
        )

    def test_empty_fields_are_unset(self):
        toleration = normalize_toleration({"operator": "Exists", "key": "", "effect": ""})
        assert toleration.key is None
        assert toleration.effect is None
        assert toleration.operator == TolerationOperator.EXISTS

    def test_invalid_operator(self):
        with pytest.raises(ClusterConfigError, match="toleration operator"):
            normalize_toleration({"key": "a", "operator": "Matches"})

    def test_invalid_effect(self):
        with pytest.raises(ClusterConfigError, match="taint effect"):
            normalize_toleration({"key": "a", "effect": "Evict"})

    def test_invalid_seconds(self):
        with pytest.raises(ClusterConfigError):
            normalize_toleration({"key": "a", "tolerationSeconds": "soon"})

    @pytest.mark.parametrize("seconds", [5.7, True, "5.7"])
    def test_seconds_must_be_whole(self, seconds):
        with pytest.raises(ClusterConfigError, match="tolerationSeconds"):
            normalize_toleration({"key": "a", "tolerationSeconds": seconds})

    def test_integral_float_seconds(self):
        assert normalize_toleration({"key": "a", "tolerationSeconds": 300.0}).toleration_seconds == 300


class TestNormalizeNodeSelector:
    def test_none_stays_none(self):
        assert normalize_node_selector(None) is None

    def test_no_terms_is_empty(self):
        selector = normalize_node_selector({})
        assert selector is not None
        assert selector.is_empty

    def test_terms(self):
        selector = normalize_node_selector({
            "nodeSelectorTerms": [
                {"matchExpressions": [{"key": "zone", "operator": "In", "values": ["a", "b"]}]},
                {"matchFields": [{"key": "metadata.name", "operator": "NotIn", "values": ["n1"]}]},
            ]
        })
        first, second = selector.node_selector_terms
        assert first.match_expressions[0].operator == NodeSelectorOperator.IN
        assert first.match_expressions[0].values == ("a", "b")
        assert second.match_fields[0].key == "metadata.name"

    def test_missing_operator(self):
        with pytest.raises(ClusterConfigError):
            normalize_node_selector({"nodeSelectorTerms": [{"matchExpressions": [{"key": "zone"}]}]})


class TestNormalizeClusterConfig:
    def test_from_yaml(self, sample_lvmcluster_yaml):
        cluster = normalize_cluster_config(yaml.safe_load(sample_lvmcluster_yaml))

        assert cluster.name == "my-lvmcluster"
        assert cluster.namespace == "openshift-storage"
        assert [dc.name for dc in cluster.device_classes] == ["vg1", "vg2"]

        vg1, vg2 = cluster.device_classes
        assert vg1.default is True
        assert vg1.node_selector is None
        assert len(vg1.tolerations) == 1
        assert vg2.node_selector.node_selector_terms[0].match_expressions[0].values == ("worker-0", "worker-1")
        assert vg2.tolerations[1].toleration_seconds == 300

    def test_legacy_device_classes_layout(self):
        cluster = normalize_cluster_config({
            "metadata": {"name": "c"},
            "spec": {"deviceClasses": [{"name": "vg1"}]},
        })
        assert cluster.device_classes[0].name == "vg1"

    def test_no_device_classes(self):
        cluster = normalize_cluster_config({"metadata": {"name": "c"}})
        assert cluster.device_classes == ()

    def test_missing_name(self):
        with pytest.raises(ClusterConfigError, match="metadata.name"):
            normalize_cluster_config({"spec": {}})

    def test_not_a_mapping(self):
        with pytest.raises(ClusterConfigError):
            normalize_cluster_config(["not", "a", "manifest"])

    def test_duplicate_device_classes(self):
        with pytest.raises(ClusterConfigError, match="vg1"):
            normalize_cluster_config({
                "metadata": {"name": "c"},
                "spec": {"storage": {"deviceClasses": [{"name": "vg1"}, {"name": "vg1"}]}},
            })

    def test_device_class_without_name(self):
        with pytest.raises(ClusterConfigError):
            normalize_cluster_config({
                "metadata": {"name": "c"},
                "spec": {"storage": {"deviceClasses": [{}]}},
            })

    def test_load_cluster_config(self, tmp_path, sample_lvmcluster_yaml):
        path = tmp_path / "lvmcluster.yaml"
        path.write_text(sample_lvmcluster_yaml)
        assert load_cluster_config(path).name == "my-lvmcluster"


class TestNormalizePod:
    def test_pod(self, sample_pod_json):
        pod = normalize_pod(sample_pod_json)
        assert pod.name == "op-123"
        assert pod.namespace == "openshift-storage"
        assert [(c.name, c.image) for c in pod.containers] == [
            ("kube-rbac-proxy", "registry/proxy:v1"),
            ("manager", "registry/x:tag"),
        ]

    def test_pod_without_containers(self):
        pod = normalize_pod({"metadata": {"name": "p"}})
        assert pod.containers == ()
