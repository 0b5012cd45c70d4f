"""
Tests for the command-line interface.
"""

import pytest

from component_pose.cli import main
from component_pose.registry import FINAL_POSES_KEY
from component_pose.telemetry import load_telemetry


RIG_YAML = """
components:
  - index: 0
    name: shoulder
    position: [1.0, 0.0, 0.0]
    pivot: [0.0, 0.0, 0.0]
  - index: 1
    name: wrist
    position: [0.0, 0.0, 1.0]
    pivot: [0.0, 0.0, 0.5]
"""


@pytest.fixture
def rig(tmp_path):
    path = tmp_path / 'rig.yaml'
    path.write_text(RIG_YAML)
    return path


@pytest.fixture
def commands(tmp_path):
    path = tmp_path / 'commands.csv'
    path.write_text(
        "cycle,index,yaw,pitch,roll\n"
        "0,0,90,0,0\n"
        "0,1,0,0,0\n"
        "1,0,180,0,0\n"
    )
    return path


class TestMain:

    def test_replay_writes_telemetry(self, rig, commands, tmp_path, capsys):
        output = tmp_path / 'telemetry.jsonl'
        result = main([str(rig), '--commands', str(commands), '--output', str(output)])

        assert result == 0
        records = load_telemetry(str(output))
        assert len(records) == 4
        assert [r['cycle'] for r in records] == [0, 0, 1, 1]

        final = [r for r in records if r['name'] == FINAL_POSES_KEY]
        assert final[0]['poses'][0].y == pytest.approx(1.0)
        assert final[1]['poses'][0].x == pytest.approx(-1.0)

        out = capsys.readouterr().out
        assert "shoulder" in out
        assert "wrist" in out

    def test_without_commands(self, rig, tmp_path):
        output = tmp_path / 'telemetry.jsonl'
        assert main([str(rig), '--output', str(output)]) == 0
        assert len(load_telemetry(str(output))) == 2

    def test_missing_config(self, tmp_path):
        assert main([str(tmp_path / 'missing.yaml')]) == 1

    def test_bad_component_index(self, rig, tmp_path):
        path = tmp_path / 'commands.csv'
        path.write_text("cycle,index,yaw,pitch,roll\n0,5,0,0,0\n")
        assert main([str(rig), '--commands', str(path)]) == 1

    def test_cycle_numbers_from_command_file(self, rig, tmp_path):
        path = tmp_path / 'commands.csv'
        path.write_text(
            "cycle,index,yaw,pitch,roll\n"
            "10,0,90,0,0\n"
            "20,0,180,0,0\n"
        )
        output = tmp_path / 'telemetry.jsonl'
        assert main([str(rig), '--commands', str(path), '--output', str(output)]) == 0

        records = load_telemetry(str(output))
        assert [r['cycle'] for r in records] == [10, 10, 20, 20]

    def test_repeated_cycle(self, rig, tmp_path):
        path = tmp_path / 'commands.csv'
        path.write_text(
            "cycle,index,yaw,pitch,roll\n"
            "0,0,90,0,0\n"
            "1,0,180,0,0\n"
            "0,1,0,0,0\n"
        )
        assert main([str(rig), '--commands', str(path)]) == 1

    @pytest.mark.parametrize("bad_entry", [
        "  - index: null\n    position: [0, 0, 1]\n    pivot: [0, 0, 0]\n",
        "  - index: 0\n    position: [0, 0, 1]\n    pivot: [0, 0, 0]\n    calibration: {yaw: null}\n",
        "  - 5\n",
    ])
    def test_malformed_config_entry(self, tmp_path, bad_entry):
        path = tmp_path / 'rig.yaml'
        path.write_text("components:\n" + bad_entry)
        assert main([str(path)]) == 1
