"""Tests for the CLI."""

import json

import pytest
from click.testing import CliRunner

from entropy_assessment.cli import main

FAKE = ["--backend", "fakes:FakeBackend"]


@pytest.fixture
def sample_file(tmp_path, byte_data):
    path = tmp_path / "sample.bin"
    path.write_bytes(byte_data)
    return path


@pytest.fixture
def flat_file(tmp_path):
    path = tmp_path / "flat.bin"
    path.write_bytes(bytes([0x42] * 2048))
    return path


class TestCLI:
    def test_version(self):
        r = CliRunner().invoke(main, ["--version"])
        assert r.exit_code == 0
        assert "1.0.0" in r.output

    def test_help(self):
        r = CliRunner().invoke(main, ["--help"])
        assert r.exit_code == 0
        for cmd in ("assess", "prepare", "backends", "report", "server"):
            assert cmd in r.output


class TestAssessCommand:
    def test_non_iid(self, sample_file):
        r = CliRunner().invoke(main, ["assess", "--non-iid", "--bits", "8", str(sample_file), *FAKE])
        assert r.exit_code == 0, r.output
        assert "Non-IID" in r.output
        assert "H_assessed:      0.750000" in r.output

    def test_iid_verbose_table(self, sample_file):
        r = CliRunner().invoke(main, ["assess", "--iid", "--verbose", "2", str(sample_file), *FAKE])
        assert r.exit_code == 0, r.output
        assert "Permutation Tests" in r.output

    def test_mode_required(self, sample_file):
        r = CliRunner().invoke(main, ["assess", str(sample_file), *FAKE])
        assert r.exit_code == 2
        assert "exactly one" in r.output

    def test_both_modes(self, sample_file):
        r = CliRunner().invoke(main, ["assess", "--iid", "--non-iid", str(sample_file), *FAKE])
        assert r.exit_code == 2

    def test_bad_bits(self, sample_file):
        r = CliRunner().invoke(main, ["assess", "--iid", "--bits", "9", str(sample_file), *FAKE])
        assert r.exit_code == 2

    def test_stdin(self, byte_data):
        r = CliRunner().invoke(main, ["assess", "--non-iid", "--verbose", "0", *FAKE], input=byte_data)
        assert r.exit_code == 0, r.output
        assert r.output == ""

    def test_json_output(self, tmp_path, sample_file):
        out = tmp_path / "result.json"
        r = CliRunner().invoke(
            main, ["assess", "--non-iid", "--conditioned", str(sample_file), "--output", str(out), *FAKE]
        )
        assert r.exit_code == 0, r.output
        data = json.loads(out.read_text())
        assert data["filename"] == str(sample_file)
        assert data["mode"] == "Non-IID"
        assert data["initial_entropy"] is False
        assert data["error_code"] == 0
        assert data["min_entropy"] == pytest.approx(0.7 * 8)
        assert len(data["estimators"]) == 10

    def test_degenerate(self, flat_file):
        r = CliRunner().invoke(main, ["assess", "--non-iid", str(flat_file), *FAKE])
        assert r.exit_code == 1
        assert "1 symbol" in r.output

    def test_degenerate_json(self, tmp_path, flat_file):
        out = tmp_path / "result.json"
        r = CliRunner().invoke(main, ["assess", "--iid", str(flat_file), "--output", str(out), *FAKE])
        assert r.exit_code == 1
        assert json.loads(out.read_text())["error_code"] == 2

    def test_missing_file(self, tmp_path):
        r = CliRunner().invoke(main, ["assess", "--iid", str(tmp_path / "nope.bin"), *FAKE])
        assert r.exit_code == 1

    def test_missing_backend(self, sample_file):
        r = CliRunner().invoke(main, ["assess", "--iid", str(sample_file), "--backend", "nowhere:Nothing"])
        assert r.exit_code == 1
        assert "cannot import" in r.output


class TestOtherCommands:
    def test_prepare(self, tmp_path):
        path = tmp_path / "s.bin"
        path.write_bytes(bytes([0, 5, 10, 5]))
        r = CliRunner().invoke(main, ["prepare", str(path)])
        assert r.exit_code == 0
        assert "Alphabet size:   3" in r.output
        assert "Compacted:       yes" in r.output

    def test_prepare_bad_bits(self, sample_file):
        r = CliRunner().invoke(main, ["prepare", "--bits", "12", str(sample_file)])
        assert r.exit_code == 1

    def test_backends(self, monkeypatch):
        monkeypatch.setattr("entropy_assessment.estimators.entry_points", lambda group: [])
        r = CliRunner().invoke(main, ["backends"])
        assert r.exit_code == 0
        assert "(none installed)" in r.output

    def test_report(self, tmp_path, sample_file, flat_file):
        out = tmp_path / "report.md"
        r = CliRunner().invoke(main, ["report", str(sample_file), str(flat_file), "--output", str(out), *FAKE])
        assert r.exit_code == 0, r.output
        text = out.read_text()
        assert "sample.bin" in text
        assert "**Error 2:**" in text

    def test_server_bad_config(self):
        r = CliRunner().invoke(main, ["server", "--port", "0"])
        assert r.exit_code == 2
        assert "invalid configuration" in r.output
