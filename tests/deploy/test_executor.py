from dataclasses import dataclass, field
from typing import List, Optional

import pytest

from addonctl.addons.base import Addon
from addonctl.deploy.executor import install_all, InstallOptions, AddonInstallError, InstallPhase
from addonctl.deploy.planner import CyclicDependencyError
from addonctl.execution import ExecutionContext, InstallCancelled
from addonctl.observers.events import AddonFailed, AddonSucceeded, InstallSummary, ManifestApplied


# --------- Test doubles ----------

@dataclass
class FakeAddon(Addon):
    manifests: List[bytes] = field(default_factory=list)
    generate_error: Optional[Exception] = None
    verify_error: Optional[Exception] = None
    verified: int = 0

    def generate_manifests(self, ctx):
        if self.generate_error:
            raise self.generate_error
        return list(self.manifests)

    def verify(self, ctx, client):
        self.verified += 1
        if self.verify_error:
            raise self.verify_error


def A(name, *deps, manifests=None, **kw):
    return FakeAddon(
        name=name,
        dependencies=list(deps),
        manifests=manifests if manifests is not None else [f"kind: ConfigMap\nmetadata:\n  name: {name}\n".encode()],
        **kw,
    )


class FakeClient:
    """Records applied manifests; fails any manifest containing a marker."""
    def __init__(self, fail_marker: Optional[bytes] = None):
        self.applied: List[bytes] = []
        self.fail_marker = fail_marker

    def apply(self, manifest, ctx=None):
        if self.fail_marker and self.fail_marker in manifest:
            raise RuntimeError(f"apply rejected: {self.fail_marker.decode()}")
        self.applied.append(manifest)


class Capture:
    def __init__(self): self.events = []
    def notify(self, ev): self.events.append(ev)


def _applied_names(client):
    return [m.decode().split("name: ")[1].split("\n")[0] for m in client.applied]


# --------- Tests ----------

def test_installs_in_dependency_order_and_verifies():
    client = FakeClient()
    cap = Capture()
    addons = [A("c", "b"), A("a"), A("b", "a")]

    report = install_all(addons, client, observers=[cap])

    assert report.order == ["a", "b", "c"]
    assert _applied_names(client) == ["a", "b", "c"]
    assert all(a.verified == 1 for a in addons)
    assert report.summary() == "OK=3 FAILED=0 DRY_RUN=0"
    assert [e.name for e in cap.events if isinstance(e, AddonSucceeded)] == ["a", "b", "c"]
    summary = next(e for e in cap.events if isinstance(e, InstallSummary))
    assert summary.ok == 3


def test_manifests_applied_in_returned_order_and_empty_skipped():
    client = FakeClient()
    cap = Capture()
    addon = A("x", manifests=[b"kind: A\nmetadata:\n  name: one\n", b"", b"  \n", b"kind: B\nmetadata:\n  name: two\n"])

    report = install_all([addon], client, observers=[cap])

    assert _applied_names(client) == ["one", "two"]
    assert report.outcomes[0].manifests_applied == 2
    assert [(e.index, e.total) for e in cap.events if isinstance(e, ManifestApplied)] == [(1, 4), (4, 4)]


def test_no_enabled_addons_is_a_successful_noop():
    client = FakeClient()
    report = install_all([A("a", enabled=False)], client)
    assert client.applied == []
    assert report.outcomes == []


def test_cycle_aborts_before_any_apply():
    client = FakeClient()
    with pytest.raises(CyclicDependencyError):
        install_all([A("a", "c"), A("b", "a"), A("c", "b"), A("free")], client)
    assert client.applied == []


def test_cycle_is_fatal_even_with_continue_on_error():
    client = FakeClient()
    with pytest.raises(CyclicDependencyError):
        install_all([A("a", "a")], client, options=InstallOptions(continue_on_error=True))
    assert client.applied == []


def test_apply_failure_aborts_and_keeps_earlier_addons():
    client = FakeClient(fail_marker=b"name: b")
    addons = [A("a"), A("b", "a"), A("c", "b")]

    with pytest.raises(AddonInstallError) as exc:
        install_all(addons, client)

    err = exc.value
    assert err.addon == "b"
    assert err.phase is InstallPhase.APPLY
    assert "apply rejected" in str(err)
    assert isinstance(err.__cause__, RuntimeError)
    # no rollback, nothing after the failure
    assert _applied_names(client) == ["a"]
    assert addons[1].verified == 0
    assert [o.status for o in err.report.outcomes] == ["OK", "FAILED"]


def test_continue_on_error_skips_rest_of_failed_addon():
    client = FakeClient(fail_marker=b"name: b1")
    cap = Capture()
    b = A("b", manifests=[b"kind: X\nmetadata:\n  name: b1\n", b"kind: X\nmetadata:\n  name: b2\n"])
    addons = [A("a"), b, A("c")]

    report = install_all(addons, client, options=InstallOptions(continue_on_error=True), observers=[cap])

    assert _applied_names(client) == ["a", "c"]
    assert b.verified == 0
    assert report.summary() == "OK=2 FAILED=1 DRY_RUN=0"
    failed = report.failed[0]
    assert (failed.name, failed.phase) == ("b", "apply")
    ev = next(e for e in cap.events if isinstance(e, AddonFailed))
    assert ev.continued is True


def test_dependent_of_failed_addon_still_runs_in_continue_mode():
    client = FakeClient(fail_marker=b"name: a")
    report = install_all([A("a"), A("b", "a")], client, options=InstallOptions(continue_on_error=True))
    assert [o.name for o in report.outcomes] == ["a", "b"]
    assert _applied_names(client) == ["b"]


def test_verify_failure_treated_like_apply_failure():
    client = FakeClient()
    bad = A("b", verify_error=TimeoutError("pods not ready"))

    with pytest.raises(AddonInstallError) as exc:
        install_all([A("a"), bad, A("c")], client)
    assert exc.value.phase is InstallPhase.VERIFY
    assert _applied_names(client) == ["a", "b"]

    client = FakeClient()
    report = install_all([A("a"), A("b", verify_error=TimeoutError("x")), A("c")], client,
                         options=InstallOptions(continue_on_error=True))
    assert report.summary() == "OK=2 FAILED=1 DRY_RUN=0"
    assert report.failed[0].phase == "verify"


def test_verify_skipped_when_disabled():
    addon = A("a", verify_error=RuntimeError("should not run"))
    report = install_all([addon], FakeClient(), options=InstallOptions(verify=False))
    assert addon.verified == 0
    assert report.ok


def test_generate_failure_reports_generate_phase():
    client = FakeClient()
    with pytest.raises(AddonInstallError) as exc:
        install_all([A("a", generate_error=ValueError("render failed"))], client)
    assert exc.value.phase is InstallPhase.GENERATE
    assert "render failed" in str(exc.value)
    assert client.applied == []


def test_dry_run_applies_nothing():
    client = FakeClient()
    addons = [A("a"), A("b", "a")]
    report = install_all(addons, client, options=InstallOptions(dry_run=True))
    assert client.applied == []
    assert all(a.verified == 0 for a in addons)
    assert report.summary() == "OK=0 FAILED=0 DRY_RUN=2"


def test_cancellation_always_aborts():
    client = FakeClient()
    ctx = ExecutionContext()
    ctx.cancel()
    with pytest.raises(InstallCancelled):
        install_all([A("a")], client, options=InstallOptions(continue_on_error=True), ctx=ctx)
    assert client.applied == []


def test_expired_deadline_aborts():
    ctx = ExecutionContext(deadline=0.0)
    with pytest.raises(InstallCancelled, match="deadline"):
        install_all([A("a")], FakeClient(), ctx=ctx)


def test_object_free_streams_are_not_sent_to_the_client():
    client = FakeClient()
    cap = Capture()
    # helm output when every template of a chart is switched off
    disabled_chart = b"---\n# Source: chart/templates/a.yaml\n---\n# Source: chart/templates/b.yaml\n"
    addon = A("x", manifests=[disabled_chart, b"---\n{}\n", b"kind: A\nmetadata:\n  name: real\n"])

    report = install_all([addon], client, observers=[cap])

    assert _applied_names(client) == ["real"]
    assert report.outcomes[0].manifests_applied == 1
    assert [e.index for e in cap.events if isinstance(e, ManifestApplied)] == [3]
