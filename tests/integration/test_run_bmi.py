"""
Integration tests for the BMI command-line interface.

Runs run_bmi.main end to end with patched standard input and checks the
printed report, exit codes, profile loading, the category table and the plot.
"""

import io
import json

import matplotlib

matplotlib.use("Agg")

import numpy as np
import pytest

from core import build_report, compute_bmi_curve, create_bmi_plot, run_report
from run_bmi import main

EXPECTED_REPORT = """Your height (centimeters): Your weight (kilograms): 
Your Body Mass Index (BMI) is 23.10(*)
You have Ideal weight (normal)
Your ideal weight is between 57.65 and 77.60 kg.

(*) BMI (Oxford 2013) = 1,3 x weight / height ^ 2,5
https://people.maths.ox.ac.uk/trefethen/bmi.html
"""


@pytest.fixture
def stdin(monkeypatch):
    """Replace standard input with the given text"""

    def _set(text):
        monkeypatch.setattr("sys.stdin", io.StringIO(text))

    return _set


@pytest.fixture
def profile_file(tmp_path):
    def _write(content):
        path = tmp_path / "profile.json"
        path.write_text(content if isinstance(content, str) else json.dumps(content))
        return str(path)

    return _write


class TestInteractiveRun:
    """Test the default prompting flow"""

    def test_full_report(self, stdin, capsys):
        stdin("175\n72\n")
        assert main([]) == 0
        assert capsys.readouterr().out == EXPECTED_REPORT

    def test_retry_then_report(self, stdin, capsys):
        stdin("abc\n175\n72kg\n")
        assert main(["--no-clear"]) == 0
        out = capsys.readouterr().out
        assert out.count("Oops, that input is invalid.  Please try again.") == 1
        assert "Your Body Mass Index (BMI) is 23.10(*)" in out

    def test_end_of_input_exits_nonzero(self, stdin, capsys):
        stdin("")
        assert main(["--no-clear"]) == 1
        out = capsys.readouterr().out
        assert "Error: No more input" in out
        assert "Body Mass Index" not in out

    def test_end_of_input_before_weight(self, stdin, capsys):
        stdin("175\n")
        assert main(["--no-clear"]) == 1

    def test_interrupt_exits_nonzero(self, monkeypatch, capsys):
        def interrupted(*args, **kwargs):
            raise KeyboardInterrupt

        monkeypatch.setattr("run_bmi.run_report", interrupted)
        assert main(["--no-clear"]) == 1
        assert "Error: Interrupted by user." in capsys.readouterr().out

    def test_run_report_with_streams(self):
        output = io.StringIO()
        report = run_report(
            clear=False, input_stream=io.StringIO("160\n93\n"), output_stream=output
        )
        assert report.category.value == "Obesity type II"
        assert "Your Body Mass Index (BMI) is 37.34(*)\n" in output.getvalue()
        assert "You have Obesity type II\n" in output.getvalue()


class TestArguments:
    """Test non-interactive flags and the JSON profile"""

    def test_height_and_weight_flags(self, stdin, capsys):
        stdin("")
        assert main(["--height", "175", "--weight", "72"]) == 0
        out = capsys.readouterr().out
        assert "Your height" not in out
        assert "Your Body Mass Index (BMI) is 23.10(*)" in out

    def test_only_height_prompts_for_weight(self, stdin, capsys):
        stdin("72\n")
        assert main(["--height", "175"]) == 0
        out = capsys.readouterr().out
        assert "Your height" not in out
        assert "Your weight (kilograms): " in out

    @pytest.mark.parametrize("value", ["0", "65536", "abc", "-4"])
    def test_invalid_flag_values(self, value):
        with pytest.raises(SystemExit) as exc_info:
            main(["--height", value])
        assert exc_info.value.code == 2

    def test_profile(self, stdin, profile_file, capsys):
        stdin("")
        path = profile_file({"height_cm": 175, "weight_kg": 72})
        assert main(["--config", path]) == 0
        assert "You have Ideal weight (normal)" in capsys.readouterr().out

    def test_flags_override_profile(self, stdin, profile_file, capsys):
        stdin("")
        path = profile_file({"height_cm": 175, "weight_kg": 72})
        assert main(["-c", path, "--weight", "101"]) == 0
        out = capsys.readouterr().out
        assert "Your Body Mass Index (BMI) is 32.41(*)\n" in out
        assert "You have Obesity type I\n" in out

    def test_partial_profile_prompts(self, stdin, profile_file, capsys):
        stdin("72\n")
        path = profile_file({"height_cm": 175})
        assert main(["--config", path]) == 0
        assert "Your weight (kilograms): " in capsys.readouterr().out

    def test_missing_profile(self, tmp_path, capsys):
        assert main(["--config", str(tmp_path / "missing.json")]) == 1
        assert "Error: Profile file not found" in capsys.readouterr().out

    def test_malformed_profile(self, profile_file, capsys):
        assert main(["--config", profile_file("{not json")]) == 1
        assert "not valid JSON" in capsys.readouterr().out

    @pytest.mark.parametrize(
        "content",
        [
            {"height_cm": 0},
            {"height_cm": 175.5},
            {"weight_kg": "72"},
            {"height_cm": 175, "age": 40},
        ],
    )
    def test_profile_schema_violations(self, profile_file, content, capsys):
        assert main(["--config", profile_file(content)]) == 1
        assert "Error: Invalid profile" in capsys.readouterr().out


class TestExtras:
    """Test the category table and the chart"""

    def test_show_categories(self, capsys):
        assert main(["--height", "175", "--weight", "72", "--show-categories"]) == 0
        out = capsys.readouterr().out
        assert "--- Weight Status Categories at 175 cm ---" in out
        assert "Hypermorbid Obesity type IV" in out
        assert "57.65" in out

    def test_plot_saved(self, tmp_path, monkeypatch, capsys):
        monkeypatch.chdir(tmp_path)
        assert main(["--height", "175", "--weight", "72", "--plot"]) == 0
        assert (tmp_path / "bmi_plot.png").exists()
        assert "BMI plot saved as: bmi_plot.png" in capsys.readouterr().out

    def test_plot_figure(self):
        import matplotlib.pyplot as plt

        fig = create_bmi_plot(build_report(175, 72), return_figure=True)
        ax = fig.axes[0]
        assert ax.get_xlabel() == "Weight (kg)"
        assert ax.get_ylim()[1] >= 50.0
        curve = ax.lines[0]
        np.testing.assert_allclose(
            curve.get_ydata(), compute_bmi_curve(175, curve.get_xdata())
        )
        plt.close(fig)
