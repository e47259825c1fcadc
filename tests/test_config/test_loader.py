"""Tests for configuration models and loading."""

import pytest
import yaml
from pydantic import ValidationError

from kamailio_exporter.config.loader import ConfigLoader
from kamailio_exporter.config.models import ExporterConfig, KamailioConfig, WebConfig, parse_dispatcher_map

ENV_VARS = [
    "KAMAILIO_RPC_URI",
    "KAMAILIO_TIMEOUT",
    "KAMAILIO_DISPATCHER_MAP",
    "KAMAILIO_DIALOG_PROFILES",
    "KAMAILIO_LISTEN_ADDRESS",
    "KAMAILIO_LISTEN_PORT",
    "KAMAILIO_METRICS_PATH",
    "KAMAILIO_CUSTOM_METRICS_URL",
    "KAMAILIO_RTP_METRICS_PATH",
    "KAMAILIO_RTPENGINE_METRICS_URL",
    "LOG_LEVEL",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        """
kamailio:
  rpc_uri: tcp://10.0.0.1:2049
  timeout_seconds: 3
  dispatcher_map:
    - "1:carriers"
  dialog_profiles: [inbound]
collectors:
  rtpengine.show: false
web:
  listen_port: 9500
  custom_metrics_url: ${CUSTOM_URL}
log_level: debug
"""
    )
    return path


def test_defaults():
    config = ExporterConfig()

    assert config.kamailio.rpc_uri == "unix:///var/run/kamailio/kamailio_ctl"
    assert config.kamailio.timeout_seconds == 5.0
    assert config.kamailio.dispatcher_map == {}
    assert config.web.listen_address == "0.0.0.0"
    assert config.web.listen_port == 9494
    assert config.web.metrics_path == "/metrics"
    assert config.web.custom_metrics_url is None
    assert config.web.rtp_metrics_path is None
    assert config.web.rtpengine_metrics_url == "http://127.0.0.1:9901/metrics"
    assert config.collectors == {}
    assert config.log_level == "INFO"
    assert config.log_format == "json"


def test_load_from_file(config_file, monkeypatch):
    monkeypatch.setenv("CUSTOM_URL", "http://127.0.0.1:8080/custom")

    config = ConfigLoader.load_from_file(str(config_file))

    assert config.kamailio.rpc_uri == "tcp://10.0.0.1:2049"
    assert config.kamailio.timeout_seconds == 3.0
    assert config.kamailio.dispatcher_map == {1: "carriers"}
    assert config.kamailio.dialog_profiles == ["inbound"]
    assert config.collectors == {"rtpengine.show": False}
    assert config.web.listen_port == 9500
    assert config.web.custom_metrics_url == "http://127.0.0.1:8080/custom"
    assert config.log_level == "DEBUG"


def test_unset_placeholder_disables_custom_metrics(config_file):
    config = ConfigLoader.load_from_file(str(config_file))
    assert config.web.custom_metrics_url is None


def test_precedence_file_env_overrides(config_file, monkeypatch):
    monkeypatch.setenv("KAMAILIO_RPC_URI", "tcp://10.0.0.2:2049")
    monkeypatch.setenv("KAMAILIO_LISTEN_PORT", "9600")
    monkeypatch.setenv("KAMAILIO_DIALOG_PROFILES", "inbound, outbound")

    config = ConfigLoader.load(
        str(config_file),
        {"kamailio": {"rpc_uri": "unix:///tmp/kamailio_ctl"}, "collectors": {"sl.stats": False}},
    )

    assert config.kamailio.rpc_uri == "unix:///tmp/kamailio_ctl"
    assert config.kamailio.timeout_seconds == 3.0
    assert config.kamailio.dialog_profiles == ["inbound", "outbound"]
    assert config.web.listen_port == 9600
    assert config.collectors == {"rtpengine.show": False, "sl.stats": False}


def test_load_without_file_uses_env(monkeypatch):
    monkeypatch.setenv("KAMAILIO_DISPATCHER_MAP", "1:carriers,2:media")
    monkeypatch.setenv("LOG_LEVEL", "warning")

    config = ConfigLoader.load()

    assert config.kamailio.dispatcher_map == {1: "carriers", 2: "media"}
    assert config.log_level == "WARNING"


def test_missing_file():
    with pytest.raises(FileNotFoundError):
        ConfigLoader.load("/nonexistent/config.yaml")


def test_invalid_yaml(tmp_path):
    path = tmp_path / "broken.yaml"
    path.write_text("kamailio: [unclosed\n")
    with pytest.raises(yaml.YAMLError):
        ConfigLoader.load(str(path))


def test_parse_dispatcher_map_drops_malformed_entries():
    entries = ["1:carriers", "2", "3:a:b", "x:name", "4:media"]
    assert parse_dispatcher_map(entries) == {1: "carriers", 4: "media"}


@pytest.mark.parametrize("uri", ["udp://127.0.0.1:2049", "tcp://127.0.0.1", "unix://"])
def test_invalid_rpc_uri(uri):
    with pytest.raises(ValidationError):
        KamailioConfig(rpc_uri=uri)


def test_timeout_must_be_positive():
    with pytest.raises(ValidationError):
        KamailioConfig(timeout_seconds=0)


@pytest.mark.parametrize("path", ["/", "metrics"])
def test_invalid_metrics_path(path):
    with pytest.raises(ValidationError):
        WebConfig(metrics_path=path)


def test_invalid_custom_metrics_url():
    with pytest.raises(ValidationError):
        WebConfig(custom_metrics_url="ftp://example.com/metrics")


def test_invalid_log_settings():
    with pytest.raises(ValidationError):
        ExporterConfig(log_level="verbose")
    with pytest.raises(ValidationError):
        ExporterConfig(log_format="xml")


def test_rtp_metrics_from_env(monkeypatch):
    monkeypatch.setenv("KAMAILIO_RTP_METRICS_PATH", "/rtp")
    monkeypatch.setenv("KAMAILIO_RTPENGINE_METRICS_URL", "http://10.0.0.3:9901/metrics")

    config = ConfigLoader.load()

    assert config.web.rtp_metrics_path == "/rtp"
    assert config.web.rtpengine_metrics_url == "http://10.0.0.3:9901/metrics"


def test_empty_rtp_metrics_path_is_disabled():
    assert WebConfig(rtp_metrics_path="").rtp_metrics_path is None


@pytest.mark.parametrize("path", ["/", "rtp", "/metrics"])
def test_invalid_rtp_metrics_path(path):
    with pytest.raises(ValidationError):
        WebConfig(rtp_metrics_path=path)


def test_rtp_metrics_path_must_differ_from_metrics_path():
    with pytest.raises(ValidationError):
        WebConfig(metrics_path="/kamailio", rtp_metrics_path="/kamailio")
    assert WebConfig(metrics_path="/kamailio", rtp_metrics_path="/metrics").rtp_metrics_path == "/metrics"


def test_invalid_rtpengine_metrics_url():
    with pytest.raises(ValidationError):
        WebConfig(rtpengine_metrics_url="127.0.0.1:9901/metrics")
