"""
===============================================================================
LOGSUM BENCH - Command Line Test Suite
===============================================================================
Tests for config loading and the main() entry point: overrides, outputs,
exit status on invalid input and on bad arguments.
===============================================================================
"""

import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import logging

import pandas as pd
import pytest
import yaml

from main import DEFAULT_CONFIG, load_config, main


@pytest.fixture
def out_dir(tmp_path):
    return str(tmp_path / "out")


@pytest.fixture(autouse=True)
def restore_logging():
    """main() reconfigures the root logger; undo it after each test."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in list(root.handlers):
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    for handler in handlers:
        if handler not in root.handlers:
            root.addHandler(handler)
    root.setLevel(level)


class TestLoadConfig:

    def test_shipped_config(self):
        config = load_config()
        assert config["benchmark"]["n"] == 50_000
        assert config["benchmark"]["variants"] == ["loop", "map", "replicate", "recycle", "fill"]
        assert config["equivalence"]["rtol"] == pytest.approx(1e-9)

    def test_partial_override_keeps_defaults(self, tmp_path):
        path = tmp_path / "cfg.yaml"
        path.write_text(yaml.safe_dump({"benchmark": {"n": 123}}))
        config = load_config(str(path))
        assert config["benchmark"]["n"] == 123
        assert config["benchmark"]["replications"] == DEFAULT_CONFIG["benchmark"]["replications"]
        assert config["profiler"] == DEFAULT_CONFIG["profiler"]

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_config(str(path)) == DEFAULT_CONFIG

    def test_non_mapping_rejected(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- 1\n- 2\n")
        with pytest.raises(ValueError):
            load_config(str(path))

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(str(tmp_path / "nope.yaml"))


class TestMain:

    def test_comparison_run(self, out_dir, capsys):
        status = main(["--n", "2000", "--replications", "2", "--output-dir", out_dir])
        assert status == 0
        table = pd.read_csv(os.path.join(out_dir, "comparison.csv"))
        assert sorted(table["expression"]) == sorted(["loop", "map", "replicate", "recycle", "fill"])
        assert (table["replications"] == 2).all()
        assert os.path.exists(os.path.join(out_dir, "benchmark.log"))
        assert "Variant comparison" in capsys.readouterr().out

    def test_variant_subset_and_scaling(self, out_dir):
        status = main([
            "--quick", "--variants", "loop,fill", "--scaling", "--output-dir", out_dir,
        ])
        assert status == 0
        scaling = pd.read_csv(os.path.join(out_dir, "scaling.csv"))
        assert set(scaling["expression"]) == {"loop", "fill"}
        assert scaling["n"].max() <= 5000

    def test_report(self, out_dir):
        status = main([
            "--n", "1000", "--replications", "2", "--variants", "recycle,fill",
            "--report", "--output-dir", out_dir,
        ])
        assert status == 0
        assert os.path.exists(os.path.join(out_dir, "report.md"))
        assert os.path.exists(os.path.join(out_dir, "relative_bar.png"))

    def test_profile(self, out_dir, capsys, tmp_path):
        path = tmp_path / "cfg.yaml"
        path.write_text(yaml.safe_dump({"profiler": {"replications": 5}}))
        status = main([
            "--config", str(path), "--n", "20000", "--replications", "1",
            "--variants", "replicate", "--profile", "--output-dir", out_dir,
        ])
        assert status == 0
        assert "Sampling profile: replicate" in capsys.readouterr().out

    def test_zero_length_input_fails(self, out_dir):
        assert main(["--n", "0", "--output-dir", out_dir]) == 1

    def test_unknown_variant_is_usage_error(self, out_dir):
        with pytest.raises(SystemExit) as info:
            main(["--variants", "loop,bogus", "--output-dir", out_dir])
        assert info.value.code == 2

    def test_unknown_profile_variant_is_usage_error(self, out_dir):
        with pytest.raises(SystemExit) as info:
            main(["--profile", "bogus", "--output-dir", out_dir])
        assert info.value.code == 2

    def test_negative_n_is_usage_error(self, out_dir, capsys):
        with pytest.raises(SystemExit) as info:
            main(["--n", "-5", "--output-dir", out_dir])
        assert info.value.code == 2
        assert "ALTERNATING LOG-SUM BENCHMARK" not in capsys.readouterr().out

    def test_negative_n_from_config_is_usage_error(self, out_dir, tmp_path):
        path = tmp_path / "cfg.yaml"
        path.write_text(yaml.safe_dump({"benchmark": {"n": -1}}))
        with pytest.raises(SystemExit) as info:
            main(["--config", str(path), "--output-dir", out_dir])
        assert info.value.code == 2

    def test_bad_replications_is_usage_error(self, out_dir):
        with pytest.raises(SystemExit) as info:
            main(["--replications", "0", "--output-dir", out_dir])
        assert info.value.code == 2
