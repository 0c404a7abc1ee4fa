"""Integration tests for the forecast script."""
import importlib.util
import os
import subprocess
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).parent.parent
FORECAST_SCRIPT = ROOT / "scripts" / "forecast.py"


def load_script():
    spec = importlib.util.spec_from_file_location("forecast_script", FORECAST_SCRIPT)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def test_forecast_script_help():
    """--help exits cleanly and documents the main flags."""
    env = dict(os.environ, PYTHONPATH=os.pathsep.join(filter(None, [str(ROOT), os.environ.get("PYTHONPATH")])))
    result = subprocess.run(
        [sys.executable, str(FORECAST_SCRIPT), "--help"],
        capture_output=True,
        text=True,
        env=env,
    )

    assert result.returncode == 0, f"Forecast script failed: {result.stderr}"
    assert "--symbol" in result.stdout
    assert "--days" in result.stdout
    assert "--epochs" in result.stdout


def test_forecast_script_runs(temp_price_csvs, tmp_path, capsys):
    """Short end-to-end run on a temporary CSV directory."""
    saved = tmp_path / "resolved.yaml"
    script = load_script()
    script.main([
        "--data-path", temp_price_csvs,
        "--symbol", "AAPL",
        "--epochs", "20",
        "--days", "3",
        "--seed", "7",
        "--save-config", str(saved),
    ])

    out = capsys.readouterr().out
    assert "AAPL: 40 bars (2024-01-01" in out
    assert "Training: " in out
    assert "2024-02-10" in out
    assert "2024-02-12" in out
    assert saved.exists()


def test_forecast_script_unknown_symbol(temp_price_csvs):
    script = load_script()
    with pytest.raises(FileNotFoundError):
        script.main(["--data-path", temp_price_csvs, "--symbol", "MSFT", "--epochs", "5"])
