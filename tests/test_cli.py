# tests/test_cli.py

import os

import pytest
from click.testing import CliRunner

from config import Config
from run import cli


@pytest.fixture
def runner():
    return CliRunner()


def test_months_lists_submission_periods(runner, quota_workbook):
    result = runner.invoke(cli, ['months', quota_workbook])
    assert result.exit_code == 0
    lines = result.output.splitlines()
    assert lines.index('Jul-25') < lines.index('Aug-25')


def test_validate_defaults_to_latest_period(runner, quota_workbook, roster_workbook):
    result = runner.invoke(cli, ['validate', quota_workbook, roster_workbook, '--region', 'APAC'])

    assert result.exit_code == 0, result.output
    assert 'Results for Aug-25 / APAC:' in result.output
    assert 'duplicate eids' in result.output


def test_validate_exports_reports(runner, quota_workbook, roster_workbook, tmp_path):
    export_dir = str(tmp_path / 'out')
    result = runner.invoke(cli, ['validate', quota_workbook, roster_workbook,
                                 '--period', 'Aug-25', '--export-dir', export_dir])

    assert result.exit_code == 0, result.output
    assert sorted(os.listdir(export_dir)) == [
        'v1_eid_reference_check_all.csv', 'v1_eid_reference_check_fail.csv',
        'v2_duplicate_eids.csv', 'v3_missing_quota_amounts.csv', 'validation_results_all.csv']


def test_overlay_command(runner, quota_workbook, roster_workbook):
    result = runner.invoke(cli, ['overlay', quota_workbook, roster_workbook, '--period', 'Jul-25'])
    assert result.exit_code == 0, result.output
    assert 'Results for Jul-25 / APAC:' in result.output


def test_lms_command(runner, lms_workbook, roster_workbook):
    result = runner.invoke(cli, ['lms', lms_workbook, roster_workbook, '--period', 'Feb-26'])

    assert result.exit_code == 0, result.output
    assert 'on leave with quota' in result.output


def test_invalid_period_exits_with_error(runner, quota_workbook, roster_workbook):
    result = runner.invoke(cli, ['validate', quota_workbook, roster_workbook, '--period', 'Foo'])
    assert result.exit_code == 1
    assert 'Invalid submission month: Foo' in result.output


def test_unknown_region_is_a_usage_error(runner, quota_workbook, roster_workbook):
    result = runner.invoke(cli, ['validate', quota_workbook, roster_workbook, '--region', 'LATAM'])
    assert result.exit_code == 2


def test_roster_without_header_exits_with_error(runner, quota_workbook):
    # The quota workbook's first sheet has no "Employee ID" header.
    result = runner.invoke(cli, ['validate', quota_workbook, quota_workbook])
    assert result.exit_code == 1
    assert 'Employee ID' in result.output


def test_export_flag_uses_configured_folder(runner, quota_workbook, roster_workbook, tmp_path, monkeypatch):
    monkeypatch.setattr(Config, 'EXPORT_FOLDER', str(tmp_path / 'configured'))

    result = runner.invoke(cli, ['overlay', quota_workbook, roster_workbook, '--export'])

    assert result.exit_code == 0, result.output
    assert 'overlay_validation_results_all.csv' in os.listdir(str(tmp_path / 'configured'))


def test_bad_region_tables_exit_with_one_line_error(runner, quota_workbook, tmp_path, monkeypatch):
    path = tmp_path / 'regions.json'
    path.write_text('{"countries": {"Atlantis": "MARS"}}')
    monkeypatch.setattr(Config, 'REGION_TABLES_PATH', str(path))

    result = runner.invoke(cli, ['months', quota_workbook])

    assert result.exit_code == 1
    assert 'Error: Unknown region(s) in lookup table override' in result.output
    assert 'Traceback' not in result.output


def test_missing_region_tables_exit_with_error(runner, quota_workbook, tmp_path, monkeypatch):
    monkeypatch.setattr(Config, 'REGION_TABLES_PATH', str(tmp_path / 'nowhere.json'))

    result = runner.invoke(cli, ['months', quota_workbook])

    assert result.exit_code == 1
    assert 'Cannot read region tables' in result.output
