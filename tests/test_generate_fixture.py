"""
Unit tests for the fixture printing script.
"""
import pytest
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from americano.fixture import generate_fixture
from generate_fixture import format_fixture, load_players, main


class TestLoadPlayers:
    """Tests for loading the roster from YAML."""

    def test_load_list(self, tmp_path):
        yaml_file = tmp_path / "players.yaml"
        yaml_file.write_text("- Ali\n- Veli\n- Ali\n- ' Ayşe '\n", encoding='utf-8')
        assert load_players(str(yaml_file)) == ["Ali", "Veli", "Ayşe"]

    def test_load_mapping(self, tmp_path):
        yaml_file = tmp_path / "players.yaml"
        yaml_file.write_text("players:\n  - A\n  - B\n", encoding='utf-8')
        assert load_players(str(yaml_file)) == ["A", "B"]

    def test_load_empty_file(self, tmp_path):
        yaml_file = tmp_path / "empty.yaml"
        yaml_file.write_text("")
        assert load_players(str(yaml_file)) == []


class TestFormat:
    """Tests for fixture text output."""

    def test_format_single_match(self, single_match_fixture):
        assert format_fixture(single_match_fixture) == (
            "# Round 1, Slot 1\n"
            "Court 1: E & F vs G & H (bench: A & B & C & D)"
        )

    def test_blocks_separated_by_blank_line(self):
        fixture = generate_fixture(["A", "B", "C", "D"], 1, 2, ["X"])
        assert format_fixture(fixture) == (
            "# Round 1, Slot 1\n"
            "X: A & B vs C & D\n"
            "\n"
            "# Round 1, Slot 2\n"
            "X: B & C vs D & A"
        )


class TestMain:
    """Tests for the command line entry point."""

    def test_main_prints_fixture(self, tmp_path, capsys):
        yaml_file = tmp_path / "players.yaml"
        yaml_file.write_text("\n".join(f"- P{i}" for i in range(1, 11)))
        code = main([str(yaml_file), '--rounds', '2', '--slots', '1', '--courts', 'North, South'])
        out = capsys.readouterr().out
        assert code == 0
        assert "# Round 2, Slot 1" in out
        assert out.count("North:") == 2
        assert out.count("South:") == 2

    def test_main_rejects_small_roster(self, tmp_path, capsys):
        yaml_file = tmp_path / "players.yaml"
        yaml_file.write_text("- A\n- B\n")
        assert main([str(yaml_file)]) == 1
        assert "At least 4 players" in capsys.readouterr().err

    def test_main_missing_file(self, tmp_path, capsys):
        assert main([str(tmp_path / "missing.yaml")]) == 1
        assert "not found" in capsys.readouterr().err
