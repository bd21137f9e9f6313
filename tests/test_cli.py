"""Tests for the CLI entry point."""

import json

import yaml

from prometheus_elb_discovery import cli
from prometheus_elb_discovery.cli import main
from prometheus_elb_discovery.discovery.models import STATE_RUNNING, InstanceHealth, InstanceRecord
from prometheus_elb_discovery.exceptions import LookupFailedError
from prometheus_elb_discovery.runner import Runner


class _LoadBalancer:
    def __init__(self, fail=False):
        self.fail = fail

    def instance_ids(self, load_balancer):
        if self.fail:
            raise LookupFailedError("access denied", operation="DescribeLoadBalancers")
        return ["i-1"]

    def instance_health(self, load_balancer, instance_ids):
        return [InstanceHealth(iid, "InService") for iid in instance_ids]


class _Inventory:
    def describe_instances(self, instance_ids):
        return [InstanceRecord("i-1", STATE_RUNNING, "10.0.0.1", {"Name": "web"})]


def _use_fakes(monkeypatch, lb):
    monkeypatch.setattr(cli, "Runner", lambda config: Runner(config, lb, _Inventory()))


class TestCLI:
    def test_validate_with_flags(self):
        assert main(["--validate", "--elb", "web-elb"]) == 0

    def test_validate_valid_config(self, tmp_path):
        config_path = tmp_path / "config.yaml"
        config_path.write_text(yaml.dump({"targets": {"load_balancer": "web-elb"}}))
        assert main(["--validate", "-c", str(config_path)]) == 0

    def test_missing_elb(self, capsys):
        assert main(["--validate"]) == 1
        assert "load_balancer" in capsys.readouterr().err

    def test_malformed_tags(self, capsys):
        assert main(["--validate", "--elb", "web", "--tags", "a=b=c"]) == 1
        assert "Unrecognized tag filter" in capsys.readouterr().err

    def test_missing_config_file(self):
        assert main(["-c", "/nonexistent/config.yaml", "--validate"]) == 1

    def test_run_writes_destination(self, tmp_path, monkeypatch):
        _use_fakes(monkeypatch, _LoadBalancer())
        dest = tmp_path / "targets.json"
        assert main(["--elb", "web-elb", "--port", "9100", "--dest", str(dest)]) == 0
        assert json.loads(dest.read_text()) == [
            {"targets": ["10.0.0.1:9100"], "labels": {"Name": "web"}},
        ]

    def test_lookup_failure_returns_error(self, tmp_path, monkeypatch):
        _use_fakes(monkeypatch, _LoadBalancer(fail=True))
        dest = tmp_path / "targets.json"
        assert main(["--elb", "web-elb", "--dest", str(dest)]) == 1
        assert not dest.exists()

    def test_flags_only_uses_defaults(self, monkeypatch):
        seen = []

        def capture(config):
            seen.append(config)
            return Runner(config, _LoadBalancer(), _Inventory())

        monkeypatch.setattr(cli, "Runner", capture)
        monkeypatch.setattr(Runner, "run_once", lambda self: 0)
        assert main(["--elb", "web-elb"]) == 0

        config = seen[0]
        assert config.targets.load_balancer == "web-elb"
        assert config.targets.port == 80
        assert config.targets.dest == "-"
        assert config.targets.tags == "Name"
        assert config.aws.region == "us-west-2"
        assert config.aws.credential_profile == ""
        assert config.logging.level == "INFO"

    def test_config_file_without_sections_keeps_defaults(self, tmp_path, monkeypatch):
        _use_fakes(monkeypatch, _LoadBalancer())
        config_path = tmp_path / "config.yaml"
        config_path.write_text(yaml.dump({"targets": {"load_balancer": "web-elb", "dest": str(tmp_path / "t.json")}}))
        assert main(["-c", str(config_path), "--region", "eu-west-1"]) == 0
        assert json.loads((tmp_path / "t.json").read_text())[0]["targets"] == ["10.0.0.1:80"]

    def test_unknown_profile_returns_error(self, tmp_path, monkeypatch, capsys):
        monkeypatch.setenv("AWS_CONFIG_FILE", str(tmp_path / "aws-config"))
        monkeypatch.setenv("AWS_SHARED_CREDENTIALS_FILE", str(tmp_path / "aws-credentials"))
        monkeypatch.delenv("AWS_PROFILE", raising=False)
        dest = tmp_path / "targets.json"
        assert main(["--elb", "web-elb", "--profile", "nope", "--dest", str(dest)]) == 1
        assert not dest.exists()
        assert "Fatal lookup error" in capsys.readouterr().err

    def test_invalid_log_level(self, capsys):
        assert main(["--validate", "--elb", "web", "--log-level", "BASIC_FORMAT"]) == 1
        assert "logging.level" in capsys.readouterr().err
