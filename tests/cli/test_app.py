import logging
import textwrap
from pathlib import Path

import pytest
from typer.testing import CliRunner

import addonctl.cli.app as cli


runner = CliRunner()


class FakeClient:
    instances = []

    def __init__(self, **kwargs):
        self.kwargs = kwargs
        self.applied = []
        FakeClient.instances.append(self)

    def apply(self, manifest, ctx=None):
        if b"explode" in manifest:
            raise RuntimeError("apply rejected")
        self.applied.append(manifest)

    def wait_for_deployment(self, namespace, name, timeout, ctx=None):
        pass

    def wait_for_daemonset(self, namespace, name, timeout, ctx=None):
        pass


@pytest.fixture
def workspace(tmp_path: Path, monkeypatch):
    monkeypatch.delenv("ADDONCTL_SECRETS_FILE", raising=False)
    assets = tmp_path / "assets"
    assets.mkdir()
    (assets / "a.yaml").write_text("kind: ConfigMap\nmetadata:\n  name: a\n")
    (assets / "b.yaml").write_text("kind: ConfigMap\nmetadata:\n  name: b\n")
    (assets / "bad.yaml").write_text("kind: ConfigMap\nmetadata:\n  name: explode\n")

    FakeClient.instances.clear()
    monkeypatch.setattr(cli, "KubectlClient", FakeClient)
    monkeypatch.setattr(
        cli, "init_logging",
        lambda **kw: (logging.getLogger("addonctl.cli-test"), "run-1", tmp_path / "run.log"),
    )
    return tmp_path


def _config(ws: Path, body: str) -> Path:
    p = ws / "addons.yaml"
    p.write_text(f"assets_dir: {ws / 'assets'}\n" + textwrap.dedent(body))
    return p


def test_plan_prints_order(workspace):
    cfg = _config(workspace, """
        addons:
          - {name: b, manifests: [b.yaml], dependencies: [a]}
          - {name: a, manifests: [a.yaml]}
    """)
    result = runner.invoke(cli.app, ["plan", str(cfg)])
    assert result.exit_code == 0, result.output
    lines = result.output.strip().splitlines()
    assert lines[0].strip().startswith("1. a")
    assert lines[1].strip().startswith("2. b  (after: a)")


def test_plan_reports_cycle(workspace):
    cfg = _config(workspace, """
        addons:
          - {name: a, manifests: [a.yaml], dependencies: [b]}
          - {name: b, manifests: [b.yaml], dependencies: [a]}
    """)
    result = runner.invoke(cli.app, ["plan", str(cfg)])
    assert result.exit_code == 1
    assert "circular dependency detected among addons: a, b" in result.output


def test_install_applies_in_order(workspace):
    cfg = _config(workspace, """
        context: lab
        addons:
          - {name: b, manifests: [b.yaml], dependencies: [a], create_namespace: false}
          - {name: a, manifests: [a.yaml], create_namespace: false}
    """)
    result = runner.invoke(cli.app, ["install", str(cfg)])
    assert result.exit_code == 0, result.output
    assert "OK=2 FAILED=0 DRY_RUN=0" in result.output

    client = FakeClient.instances[0]
    assert client.kwargs["context"] == "lab"
    assert [m.split(b"name: ")[1].strip() for m in client.applied] == [b"a", b"b"]


def test_install_dry_run_applies_nothing(workspace):
    cfg = _config(workspace, """
        addons:
          - {name: a, manifests: [a.yaml]}
    """)
    result = runner.invoke(cli.app, ["install", str(cfg), "--dry-run"])
    assert result.exit_code == 0, result.output
    assert "DRY_RUN=1" in result.output
    assert FakeClient.instances[0].applied == []


def test_install_fail_fast_exits_nonzero(workspace):
    cfg = _config(workspace, """
        addons:
          - {name: a, manifests: [bad.yaml], create_namespace: false}
          - {name: b, manifests: [b.yaml], create_namespace: false}
    """)
    result = runner.invoke(cli.app, ["install", str(cfg)])
    assert result.exit_code == 1
    assert FakeClient.instances[0].applied == []


def test_install_continue_on_error_reports_failures(workspace):
    cfg = _config(workspace, """
        addons:
          - {name: a, manifests: [bad.yaml], create_namespace: false}
          - {name: b, manifests: [b.yaml], create_namespace: false}
    """)
    events = workspace / "events.jsonl"
    result = runner.invoke(cli.app, ["install", str(cfg), "--continue-on-error", "--events-file", str(events)])
    assert result.exit_code == 1
    assert "OK=1 FAILED=1 DRY_RUN=0" in result.output
    assert '"type": "AddonFailed"' in events.read_text()
