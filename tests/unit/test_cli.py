"""Tests for the tax-calc CLI (calculate, batch, brackets, settings)."""

import json

import pytest
import yaml
from click.testing import CliRunner

from taxcalc.cli.__main__ import cli


@pytest.fixture
def runner(isolated_config):
    return CliRunner()


class TestCalculate:

    def test_text_output_owed(self, runner, schedule_file):
        result = runner.invoke(cli, [
            "calculate", "--income", "500000", "--brackets", str(schedule_file),
        ])

        assert result.exit_code == 0, result.output
        assert "Taxable income:" in result.output
        assert "150,001-500,000" in result.output
        assert "Tax owed:" in result.output
        assert "35,000.00" in result.output

    def test_json_output_refund(self, runner, schedule_file):
        result = runner.invoke(cli, [
            "calculate", "--income", "100000", "--withholding", "50000",
            "--allowance", "donation=10000",
            "--brackets", str(schedule_file), "--format", "json",
        ])

        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["TaxableIncome"] == 90000.0
        assert data["TotalTax"] == -50000.0

    def test_input_from_stdin(self, runner, schedule_file):
        body = json.dumps({
            "TotalIncome": 750000,
            "WithholdingTax": 50000,
            "Allowances": [{"AllowanceType": "personal", "Amount": 0}],
        })

        result = runner.invoke(
            cli, ["calculate", "--input", "-", "--brackets", str(schedule_file), "--format", "json"],
            input=body,
        )

        assert result.exit_code == 0, result.output
        assert json.loads(result.output)["TotalTax"] == 22500.0

    def test_validation_error(self, runner, schedule_file):
        result = runner.invoke(cli, [
            "calculate", "--income", "1000", "--withholding", "1500",
            "--brackets", str(schedule_file),
        ])

        assert result.exit_code == 1
        assert "withholding tax (1500.00) cannot be greater than total income (1000.00)" in result.output

    def test_invalid_allowance_type(self, runner, schedule_file):
        result = runner.invoke(cli, [
            "calculate", "--income", "1000", "--allowance", "bonus=5",
            "--brackets", str(schedule_file),
        ])

        assert result.exit_code == 1
        assert "invalid allowance type: bonus" in result.output

    def test_income_out_of_range(self, runner, schedule_file):
        result = runner.invoke(cli, [
            "calculate", "--income", "1e30", "--brackets", str(schedule_file),
        ])

        assert result.exit_code == 1
        assert "invalid record: TotalIncome:" in result.output

    def test_bad_allowance_syntax(self, runner):
        result = runner.invoke(cli, ["calculate", "--income", "1000", "--allowance", "donation"])

        assert result.exit_code == 2
        assert "TYPE=AMOUNT" in result.output

    def test_non_numeric_income(self, runner):
        result = runner.invoke(cli, ["calculate", "--income", "lots"])

        assert result.exit_code == 2
        assert "not a number" in result.output

    def test_income_required(self, runner):
        result = runner.invoke(cli, ["calculate"])

        assert result.exit_code == 2
        assert "--income is required" in result.output

    def test_malformed_json_input(self, runner):
        result = runner.invoke(cli, ["calculate", "--input", "-"], input='{"TotalIncome": "x"}')

        assert result.exit_code == 1
        assert "invalid record" in result.output

    def test_empty_input(self, runner):
        result = runner.invoke(cli, ["calculate", "--input", "-"], input="")

        assert result.exit_code == 1
        assert "empty input" in result.output

    def test_default_format_from_settings(self, runner, schedule_file, write_settings):
        write_settings({"default_output_format": "json"})

        result = runner.invoke(cli, ["calculate", "--income", "0", "--brackets", str(schedule_file)])

        assert result.exit_code == 0, result.output
        assert json.loads(result.output)["TotalTax"] == 0.0


class TestBatch:

    def test_json_output(self, runner, schedule_file, tmp_path):
        csv_path = tmp_path / "taxes.csv"
        csv_path.write_text("totalIncome,wht,donation\n500000,0,0\n100000,50000,10000\n")

        result = runner.invoke(cli, [
            "batch", str(csv_path), "--brackets", str(schedule_file), "--format", "json",
        ])

        assert result.exit_code == 0, result.output
        assert json.loads(result.output) == {"Taxes": [
            {"TotalIncome": 500000.0, "Tax": 35000.0},
            {"TotalIncome": 100000.0, "TaxRefund": 50000.0},
        ]}

    def test_csv_output_to_file(self, runner, schedule_file, tmp_path):
        csv_path = tmp_path / "taxes.csv"
        csv_path.write_text("totalIncome,wht,donation\n500000,0,0\n")
        out_path = tmp_path / "out.csv"

        result = runner.invoke(cli, [
            "batch", str(csv_path), "--brackets", str(schedule_file),
            "--format", "csv", "-o", str(out_path),
        ])

        assert result.exit_code == 0, result.output
        assert "Wrote 1 row(s)" in result.output
        assert out_path.read_text().splitlines() == [
            "total_income,tax,tax_refund",
            "500000.00,35000.00,",
        ]

    def test_text_output_header_only(self, runner, schedule_file, tmp_path):
        csv_path = tmp_path / "taxes.csv"
        csv_path.write_text("totalIncome,wht,donation\n")

        result = runner.invoke(cli, ["batch", str(csv_path), "--brackets", str(schedule_file)])

        assert result.exit_code == 0, result.output
        assert "No data rows." in result.output

    def test_bad_row_aborts(self, runner, schedule_file, tmp_path):
        csv_path = tmp_path / "taxes.csv"
        csv_path.write_text("totalIncome,wht,donation\n500000,0,0\nabc,100,50\n")

        result = runner.invoke(cli, ["batch", str(csv_path), "--brackets", str(schedule_file)])

        assert result.exit_code == 1
        assert "row 3: invalid format" in result.output
        assert "35,000.00" not in result.output

    def test_empty_file(self, runner, tmp_path):
        csv_path = tmp_path / "empty.csv"
        csv_path.write_text("")

        result = runner.invoke(cli, ["batch", str(csv_path)])

        assert result.exit_code == 1
        assert "is empty" in result.output

    def test_unreadable_file(self, runner, tmp_path):
        csv_path = tmp_path / "binary.csv"
        csv_path.write_bytes(b"\xff\xfe\x00\x81")

        result = runner.invoke(cli, ["batch", str(csv_path)])

        assert result.exit_code == 1
        assert "not UTF-8" in result.output


class TestBracketsCommands:

    def test_show_default(self, runner):
        result = runner.invoke(cli, ["brackets", "show"])

        assert result.exit_code == 0, result.output
        assert "Schedule: default" in result.output
        assert "over 2,000,000" in result.output

    def test_show_json(self, runner, schedule_file):
        result = runner.invoke(cli, ["brackets", "show", "--brackets", str(schedule_file), "--format", "json"])

        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["name"] == "sample"
        assert len(data["brackets"]) == 5

    def test_validate_ok(self, runner, schedule_file):
        result = runner.invoke(cli, ["brackets", "validate", str(schedule_file)])

        assert result.exit_code == 0
        assert "OK: 'sample' with 5 tier(s)" in result.output

    def test_validate_bad(self, runner, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text(yaml.dump({"brackets": [{"up_to": 10, "rate": 2}]}))

        result = runner.invoke(cli, ["brackets", "validate", str(path)])

        assert result.exit_code == 1
        assert "invalid bracket schedule" in result.output


class TestSettingsCommands:

    def test_set_brackets_then_calculate(self, runner, schedule_file, isolated_config):
        result = runner.invoke(cli, ["settings", "brackets", str(schedule_file)])
        assert result.exit_code == 0, result.output
        assert "Set brackets:" in result.output

        settings = json.loads((isolated_config / "settings.json").read_text())
        assert settings["brackets"] == str(schedule_file.resolve())

        result = runner.invoke(cli, ["brackets", "show"])
        assert "Schedule: sample" in result.output

    def test_clear_brackets(self, runner, write_settings, schedule_file):
        write_settings({"brackets": str(schedule_file)})

        result = runner.invoke(cli, ["settings", "brackets", "--clear"])

        assert result.exit_code == 0
        assert "Cleared brackets setting." in result.output

    def test_reject_invalid_schedule(self, runner, tmp_path, isolated_config):
        path = tmp_path / "bad.yaml"
        path.write_text("brackets: []\n")

        result = runner.invoke(cli, ["settings", "brackets", str(path)])

        assert result.exit_code == 1
        assert not (isolated_config / "settings.json").exists()

    def test_missing_configured_schedule(self, runner, write_settings, tmp_path):
        write_settings({"brackets": str(tmp_path / "gone.yaml")})

        result = runner.invoke(cli, ["calculate", "--income", "1000"])

        assert result.exit_code == 1
        assert "configured path" in result.output

    def test_show(self, runner, write_settings):
        write_settings({"default_output_format": "json"})

        result = runner.invoke(cli, ["settings", "show"])

        assert result.exit_code == 0
        assert "default_output_format: json" in result.output
        assert "brackets: (not set)" in result.output

    def test_show_flags_unknown_keys(self, runner, write_settings):
        write_settings({"bracket": "/tmp/typo.yaml"})

        result = runner.invoke(cli, ["settings", "show"])

        assert result.exit_code == 0
        assert "bracket: /tmp/typo.yaml  # unknown, ignored" in result.output

    def test_output_format(self, runner, isolated_config):
        result = runner.invoke(cli, ["settings", "output-format", "csv"])

        assert result.exit_code == 0
        settings = json.loads((isolated_config / "settings.json").read_text())
        assert settings == {"default_output_format": "csv"}
