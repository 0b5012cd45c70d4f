"""
Tests for telemetry sinks.
"""

import json
import logging

import pytest

from component_pose.registry import ComponentPoseRegistry, ZEROED_POSES_KEY, FINAL_POSES_KEY
from component_pose.telemetry import (
    FanOutTelemetrySink,
    JsonLinesTelemetrySink,
    LoggingTelemetrySink,
    MemoryTelemetrySink,
    TelemetrySink,
    load_telemetry,
)
from component_pose.transforms import Pose, rotation_from_degrees


@pytest.fixture
def poses():
    return [
        Pose(position=[1.0, 0.0, 0.2]),
        Pose(position=[0.0, 1.0, 0.0], orientation=rotation_from_degrees(30.0, 0.0, 0.0)),
    ]


class TestMemorySink:

    def test_latest_and_history(self, poses):
        sink = MemoryTelemetrySink()
        sink.record_output('A', poses)
        sink.record_output('A', poses[:1])

        assert sink.latest['A'] == poses[:1]
        assert len(sink.history) == 2

    def test_clear(self, poses):
        sink = MemoryTelemetrySink()
        sink.record_output('A', poses)
        sink.clear()
        assert sink.latest == {}
        assert sink.history == []


class TestLoggingSink:

    def test_logs_each_pose(self, poses, caplog):
        caplog.set_level(logging.INFO, logger='component_pose.telemetry')
        LoggingTelemetrySink(level=logging.INFO).record_output(FINAL_POSES_KEY, poses)

        messages = [r.getMessage() for r in caplog.records]
        assert len(messages) == 2
        assert messages[1].startswith(f"{FINAL_POSES_KEY}[1]")
        assert "30.00" in messages[1]


class TestJsonLinesSink:

    def test_write_and_load(self, poses, tmp_path):
        path = tmp_path / 'out' / 'telemetry.jsonl'
        with JsonLinesTelemetrySink(str(path)) as sink:
            sink.record_output(ZEROED_POSES_KEY, poses)
            sink.cycle = 1
            sink.record_output(FINAL_POSES_KEY, poses)

        lines = path.read_text().splitlines()
        assert json.loads(lines[0])['cycle'] == 0
        assert json.loads(lines[1])['cycle'] == 1

        records = load_telemetry(str(path))
        assert [r['name'] for r in records] == [ZEROED_POSES_KEY, FINAL_POSES_KEY]
        for loaded, original in zip(records[1]['poses'], poses):
            assert loaded.is_close(original)

    def test_not_open(self, poses, tmp_path):
        sink = JsonLinesTelemetrySink(str(tmp_path / 'telemetry.jsonl'))
        with pytest.raises(RuntimeError):
            sink.record_output('A', poses)

    def test_corrupt_quaternion_rejected(self, poses, tmp_path):
        path = tmp_path / 'telemetry.jsonl'
        with JsonLinesTelemetrySink(str(path)) as sink:
            sink.record_output(FINAL_POSES_KEY, poses)

        record = json.loads(path.read_text())
        record['poses'][1]['quaternion'] = [0.0, 0.0, 0.0, 0.5]
        path.write_text(json.dumps(record) + '\n')

        with pytest.raises(ValueError, match="line 1"):
            load_telemetry(str(path))

    def test_missing_poses_field(self, tmp_path):
        path = tmp_path / 'telemetry.jsonl'
        path.write_text('{"cycle": 0, "name": "A"}\n')
        with pytest.raises(ValueError, match="line 1"):
            load_telemetry(str(path))

    def test_invalid_record(self, tmp_path):
        path = tmp_path / 'bad.jsonl'
        path.write_text('{not json}\n')
        with pytest.raises(ValueError, match="line 1"):
            load_telemetry(str(path))


class TestFanOutSink:

    def test_forwards_to_all(self, poses):
        a, b = MemoryTelemetrySink(), MemoryTelemetrySink()
        FanOutTelemetrySink([a, b]).record_output('A', poses)
        assert a.latest['A'] == poses
        assert b.latest['A'] == poses

    def test_registry_periodic(self):
        registry = ComponentPoseRegistry(2)
        registry.configure(0, 1.0, 0.0, 0.0, pivot=(0.0, 0.0, 0.0))
        registry.rotate_to(0, 90.0, 0.0, 0.0)
        sink = MemoryTelemetrySink()

        registry.periodic(FanOutTelemetrySink([sink]))

        assert sink.latest[ZEROED_POSES_KEY][0].x == pytest.approx(1.0)
        assert sink.latest[FINAL_POSES_KEY][0].y == pytest.approx(1.0)


def test_base_sink_is_abstract(poses):
    with pytest.raises(NotImplementedError):
        TelemetrySink().record_output('A', poses)
