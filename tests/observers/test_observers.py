import json
import logging

from addonctl.observers.console import ConsoleObserver
from addonctl.observers.dispatcher import EventBus
from addonctl.observers.events import AddonFailed, AddonStarted, PlanComputed, new_ctx
from addonctl.observers.jsonfile import JsonFileObserver
from addonctl.observers.logger import LoggerObserver


def _ctx():
    return new_ctx(env="dev", context="kind-lab", run_id="run-1234567890")


def test_new_ctx_generates_run_id():
    ctx = new_ctx(env="prod", context=None)
    assert ctx["env"] == "prod"
    assert ctx["context"] is None
    assert len(ctx["run_id"]) == 36
    assert ctx["ts"].endswith("Z")


def test_json_file_observer_appends_lines(tmp_path):
    path = tmp_path / "events" / "run.jsonl"
    ob = JsonFileObserver(path)
    ob.notify(PlanComputed(order=["a", "b"], **_ctx()))
    ob.notify(AddonFailed(name="b", phase="apply", error="boom", continued=True, **_ctx()))

    lines = [json.loads(x) for x in path.read_text().splitlines()]
    assert [x["type"] for x in lines] == ["PlanComputed", "AddonFailed"]
    assert lines[0]["order"] == ["a", "b"]
    assert lines[1]["run_id"] == "run-1234567890"
    assert lines[1]["continued"] is True


def test_logger_observer_formats_payload(caplog):
    logger = logging.getLogger("addonctl.test-observer")
    with caplog.at_level(logging.INFO, logger="addonctl.test-observer"):
        LoggerObserver(logger).notify(AddonStarted(name="cilium", **_ctx()))
    assert "[EVENT] AddonStarted: name=cilium" in caplog.text
    assert "run-1234567890" not in caplog.text


def test_console_observer_prints(capsys):
    ConsoleObserver().notify(AddonStarted(name="cilium", **_ctx()))
    out = capsys.readouterr().out
    assert "AddonStarted run=run-1234 env=dev name=cilium" in out


def test_event_bus_isolates_failing_observers():
    seen = []

    class Broken:
        def notify(self, ev):
            raise RuntimeError("observer down")

    class Recorder:
        def notify(self, ev):
            seen.append(ev)

    bus = EventBus([Broken(), Recorder()])
    ev = AddonStarted(name="x", **_ctx())
    bus.emit(ev)
    assert seen == [ev]
