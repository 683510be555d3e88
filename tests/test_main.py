"""
Tests for the HypoStream command line entry point
"""

import json
import sys
from argparse import Namespace

import pytest

import main
from hypostream.validators.simulator import simulate_validation

DARK_MATTER = "The presence of dark matter affects galaxy rotation curves."


def simulate_args(hypothesis=DARK_MATTER, alpha=0.05, as_json=True, output=None):
    return Namespace(hypothesis=hypothesis, alpha=alpha, json=as_json, output=output)


class TestSimulateCommand:
    """Tests for the offline simulate subcommand"""

    @pytest.mark.parametrize(
        "hypothesis,alpha",
        [("", 0.05), ("   ", 0.05), (DARK_MATTER, 5.0), (DARK_MATTER, 0.0), ("", 5.0)],
    )
    def test_invalid_input_rejected(self, capsys, hypothesis, alpha):
        """Test empty hypotheses and out-of-range alpha exit with status 1"""
        code = main.run_simulate(simulate_args(hypothesis, alpha))

        assert code == 1
        assert capsys.readouterr().out == ""

    def test_json_output(self, capsys):
        """Test stdout carries only the JSON result"""
        code = main.run_simulate(simulate_args(alpha=0.01))

        payload = json.loads(capsys.readouterr().out)
        assert code == 0
        assert payload["is_simulated"] is True
        assert payload["alpha"] == 0.01
        assert payload == simulate_validation(DARK_MATTER, 0.01).to_dict()

    def test_default_alpha_from_env(self, capsys, monkeypatch):
        """Test the configured default alpha is used when --alpha is omitted"""
        monkeypatch.setenv("HYPOSTREAM_DEFAULT_ALPHA", "0.1")

        code = main.run_simulate(simulate_args(alpha=None))

        assert code == 0
        assert json.loads(capsys.readouterr().out)["alpha"] == 0.1

    @pytest.mark.asyncio
    async def test_exit_code_through_main(self, monkeypatch):
        """Test argument parsing routes invalid input to exit status 1"""
        monkeypatch.setattr(sys, "argv", ["main.py", "simulate", "", "--alpha", "5", "--json"])

        assert await main.main() == 1


class TestShowCommand:
    """Tests for saving and re-printing results"""

    def test_saved_result_is_shown(self, capsys, tmp_path):
        """Test a result saved with --output prints again, including significance"""
        path = tmp_path / "result.json"
        assert main.run_simulate(simulate_args(output=str(path))) == 0
        capsys.readouterr()

        code = main.run_show(Namespace(path=str(path), json=False))

        out = capsys.readouterr().out
        assert code == 0
        assert DARK_MATTER in out
        assert "Significant:       yes" in out
        assert "Simulated:         yes" in out

    def test_missing_file(self, tmp_path):
        """Test an unreadable result file exits with status 1"""
        assert main.run_show(Namespace(path=str(tmp_path / "missing.json"), json=False)) == 1

    def test_invalid_result_file(self, tmp_path):
        """Test a file that is not a saved result exits with status 1"""
        path = tmp_path / "result.json"
        path.write_text('{"validation_score": 0.5}')

        assert main.run_show(Namespace(path=str(path), json=False)) == 1
