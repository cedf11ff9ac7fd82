"""Tests for pod-netstat schemas and configuration loading."""

import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from pod_netstat.core.config import apply_overrides, load_config
from pod_netstat.core.schemas import ExporterConfig, KubeletConfig, PodInfo


class TestExporterConfig:
    """Tests for ExporterConfig schema."""

    def test_defaults(self):
        """Test defaults match the exporter's documented flags."""
        config = ExporterConfig()
        assert config.log_level == "info"
        assert config.rate_limit == 3.0
        assert config.bind_address == ":9657"
        assert config.host_mount_path == Path("/host")
        assert config.kubelet.api_endpoint == "http://localhost:10250/pods"
        assert config.kubelet.insecure_skip_verify is False

    def test_listen_address(self):
        """Test that an empty host binds every interface."""
        config = ExporterConfig()
        assert config.listen_host == "0.0.0.0"
        assert config.listen_port == 9657

        config = ExporterConfig(bind_address="127.0.0.1:8080")
        assert config.listen_host == "127.0.0.1"
        assert config.listen_port == 8080

    def test_invalid_bind_address(self):
        with pytest.raises(ValidationError):
            ExporterConfig(bind_address="localhost")
        with pytest.raises(ValidationError):
            ExporterConfig(bind_address=":70000")

    def test_log_level_normalized(self):
        assert ExporterConfig(log_level="DEBUG").log_level == "debug"
        assert ExporterConfig(log_level="trace").log_level == "trace"
        with pytest.raises(ValidationError):
            ExporterConfig(log_level="loud")

    def test_rate_limit_positive(self):
        with pytest.raises(ValidationError):
            ExporterConfig(rate_limit=0)

    def test_unknown_keys_rejected(self):
        with pytest.raises(ValidationError):
            ExporterConfig.model_validate({"bind_adress": ":1"})


class TestPodInfo:
    """Tests for PodInfo built from kubelet manifests."""

    def test_from_manifest(self):
        manifest = {
            "metadata": {"name": "web-0", "namespace": "default"},
            "spec": {"containers": [{"name": "web"}]},
            "status": {
                "containerStatuses": [
                    {"name": "web", "containerID": "docker://abc123"},
                    {"name": "sidecar", "containerID": "docker://def456"},
                ]
            },
        }
        pod = PodInfo.from_manifest(manifest)
        assert pod.name == "web-0"
        assert pod.namespace == "default"
        assert pod.container_id == "docker://abc123"
        assert pod.host_network is False

    def test_host_network(self):
        manifest = {
            "metadata": {"name": "kube-proxy-x", "namespace": "kube-system"},
            "spec": {"hostNetwork": True},
            "status": {"containerStatuses": [{"containerID": "docker://1"}]},
        }
        assert PodInfo.from_manifest(manifest).host_network is True

    def test_pending_pod_without_containers(self):
        manifest = {"metadata": {"name": "pending", "namespace": "default"}, "status": {}}
        assert PodInfo.from_manifest(manifest).container_id is None


class TestLoadConfig:
    """Tests for load_config and apply_overrides."""

    def test_yaml(self, tmp_path: Path):
        path = tmp_path / "config.yaml"
        path.write_text(
            "log_level: debug\n"
            "rate_limit: 1.5\n"
            "kubelet:\n"
            "  api_endpoint: https://10.0.0.1:10250/pods\n"
            "  insecure_skip_verify: true\n"
        )
        config = load_config(path)
        assert config.log_level == "debug"
        assert config.rate_limit == 1.5
        assert config.kubelet.insecure_skip_verify is True

    def test_json(self, tmp_path: Path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"host_mount_path": "/rootfs"}))
        assert load_config(path).host_mount_path == Path("/rootfs")

    def test_empty_yaml_uses_defaults(self, tmp_path: Path):
        path = tmp_path / "config.yml"
        path.write_text("")
        assert load_config(path) == ExporterConfig()

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "missing.yaml")

    def test_unsupported_format(self, tmp_path: Path):
        path = tmp_path / "config.toml"
        path.write_text("")
        with pytest.raises(ValueError):
            load_config(path)

    def test_overrides(self):
        base = ExporterConfig(kubelet=KubeletConfig(timeout_seconds=3))
        config = apply_overrides(
            base,
            rate_limit=10.0,
            bind_address=None,
            kubelet_api_endpoint="http://kubelet:10255/pods",
        )
        assert config.rate_limit == 10.0
        assert config.bind_address == ":9657"
        assert config.kubelet.api_endpoint == "http://kubelet:10255/pods"
        assert config.kubelet.timeout_seconds == 3
        assert base.rate_limit == 3.0
