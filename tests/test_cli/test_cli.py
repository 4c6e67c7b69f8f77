"""
End-to-end tests for the ``site-rotation`` CLI via ``typer.testing.CliRunner``.

Every test gets its own config file pointing at a temporary database,
log file and export directory.
"""

from __future__ import annotations

import json

import pytest
from typer.testing import CliRunner

from site_rotation.cli import app

runner = CliRunner()


def _write_config(tmp_path, timezone: str = "") -> str:
    path = tmp_path / "config.toml"
    path.write_text(
        f"""
[database]
db_path = "{(tmp_path / 'rotation.db').as_posix()}"
wal_mode = false

[rotation]
minimum_rest_days = 18

[calendar]
timezone = "{timezone}"

[logging]
level = "WARNING"
log_file = "{(tmp_path / 'rotation.log').as_posix()}"

[export]
output_dir = "{(tmp_path / 'exports').as_posix()}"
""",
        encoding="utf-8",
    )
    return str(path)


@pytest.fixture
def config_path(tmp_path, monkeypatch):
    for name in ("SITE_ROTATION_DB_PATH", "SITE_ROTATION_MIN_REST_DAYS", "SITE_ROTATION_TIMEZONE"):
        monkeypatch.delenv(name, raising=False)
    return _write_config(tmp_path)


def _run(*args: str):
    return runner.invoke(app, list(args))


def _field(output: str, label: str) -> str:
    """Value after ``label`` on the first output line that contains it."""
    line = next(line for line in output.splitlines() if label in line)
    return line.split(label, 1)[1].strip().split()[0]


class TestSetup:
    def test_init_db(self, config_path):
        result = _run("init-db", "--config", config_path)
        assert result.exit_code == 0, result.output
        assert "[OK] Database ready." in result.output

    def test_validate_config(self, config_path):
        result = _run("validate-config", "--config", config_path, "--full")
        assert result.exit_code == 0, result.output
        assert "Minimum rest days: 18" in result.output

    def test_missing_config(self, tmp_path):
        result = _run("validate-config", "--config", str(tmp_path / "missing.toml"))
        assert result.exit_code == 1
        assert "[ERROR]" in result.output


class TestPlacements:
    def test_log_then_recommend(self, config_path):
        result = _run("log-placement", "left_arm", "--note", "first", "--config", config_path)
        assert result.exit_code == 0, result.output
        assert "Logged Left Arm (Back)" in result.output
        assert "Achievement unlocked: First Steps" in result.output

        rec = _run("recommend", "--config", config_path)
        assert rec.exit_code == 0, rec.output
        assert "Right Arm (Back)" in rec.output
        assert "Never used before" in rec.output

    def test_status_after_logging(self, config_path):
        _run("log-placement", "abdomen_left", "--config", config_path)
        result = _run("status", "--config", config_path)
        assert result.exit_code == 0, result.output
        assert "Used today" in result.output
        assert result.output.count("Available") == 7

    def test_unknown_site(self, config_path):
        result = _run("log-placement", "elbow", "--config", config_path)
        assert result.exit_code == 1
        assert "Unknown site" in result.output

    def test_bad_timestamp(self, config_path):
        result = _run("log-placement", "left_arm", "--at", "yesterday", "--config", config_path)
        assert result.exit_code == 1
        assert "Invalid timestamp" in result.output

    def test_history_edit_delete(self, config_path):
        logged = _run("log-placement", "left_thigh", "--at", "2026-02-01T08:00", "--config", config_path)
        event_id = next(
            line.split(":", 1)[1].strip()
            for line in logged.output.splitlines()
            if line.strip().startswith("Event id:")
        )
        edited = _run("edit-placement", event_id, "--site", "right_thigh", "--config", config_path)
        assert edited.exit_code == 0, edited.output
        assert "builtin:right_thigh" in edited.output

        history = _run("history", "--config", config_path)
        assert "Right Thigh" in history.output

        deleted = _run("delete-placement", event_id, "--config", config_path)
        assert deleted.exit_code == 0, deleted.output
        again = _run("delete-placement", event_id, "--config", config_path)
        assert again.exit_code == 1


class TestSites:
    def test_add_custom_site(self, config_path):
        result = _run("add-site", "Left Hip", "--config", config_path)
        assert result.exit_code == 0, result.output
        assert "custom:" in result.output

        status = _run("status", "--config", config_path)
        assert "Left Hip" in status.output

    def test_disable_and_enable(self, config_path):
        disabled = _run("disable-site", "left_arm", "--config", config_path)
        assert disabled.exit_code == 0, disabled.output
        rec = _run("recommend", "--config", config_path)
        assert "Right Arm (Back)" in rec.output

        enabled = _run("enable-site", "left_arm", "--config", config_path)
        assert enabled.exit_code == 0, enabled.output
        rec = _run("recommend", "--config", config_path)
        assert "Left Arm (Back)" in rec.output

    def test_cannot_disable_last_site(self, config_path):
        sites = ["left_arm", "right_arm", "abdomen_left", "abdomen_right",
                 "lower_abdomen", "left_thigh", "right_thigh"]
        for site in sites:
            assert _run("disable-site", site, "--config", config_path).exit_code == 0
        result = _run("disable-site", "lower_back", "--config", config_path)
        assert result.exit_code == 1
        assert "last enabled site" in result.output

    def test_log_to_disabled_site_rejected(self, config_path):
        _run("disable-site", "lower_back", "--config", config_path)
        result = _run("log-placement", "lower_back", "--config", config_path)
        assert result.exit_code == 1
        assert "disabled" in result.output


class TestAnalytics:
    def test_score_with_no_history(self, config_path):
        result = _run("score", "--config", config_path)
        assert result.exit_code == 0, result.output
        assert "50 / 100" in result.output

    def test_streak(self, config_path):
        _run("log-placement", "left_arm", "--config", config_path)
        result = _run("streak", "--config", config_path)
        assert "Current streak: 1 day(s)" in result.output

    def test_heatmap(self, config_path):
        _run("log-placement", "right_thigh", "--config", config_path)
        result = _run("heatmap", "--days", "7", "--config", config_path)
        assert result.exit_code == 0, result.output
        assert "100.00%" in result.output

    def test_trend_is_dense(self, config_path):
        result = _run("trend", "--days", "7", "--config", config_path)
        assert result.exit_code == 0, result.output
        dated = [line for line in result.output.splitlines() if line.strip()[:2] == "20"]
        assert len(dated) == 7

    def test_trend_bad_grouping(self, config_path):
        result = _run("trend", "--group-by", "month", "--config", config_path)
        assert result.exit_code == 1

    def test_achievements(self, config_path):
        _run("log-placement", "left_arm", "--config", config_path)
        result = _run("achievements", "--config", config_path)
        assert result.exit_code == 0, result.output
        assert "First Steps" in result.output
        assert "Total points: 10" in result.output


class TestExport:
    @pytest.mark.parametrize("fmt", ["csv", "parquet"])
    def test_flat_exports(self, config_path, tmp_path, fmt):
        _run("log-placement", "left_arm", "--config", config_path)
        result = _run("export", "--format", fmt, "--config", config_path)
        assert result.exit_code == 0, result.output
        files = sorted(p.name.split("_")[0] for p in (tmp_path / "exports").iterdir())
        assert files == ["heatmap", "placements", "trend"]

    def test_json_snapshot(self, config_path, tmp_path):
        result = _run("export", "--format", "json", "--config", config_path)
        assert result.exit_code == 0, result.output
        (path,) = list((tmp_path / "exports").iterdir())
        data = json.loads(path.read_text(encoding="utf-8"))
        assert data["score"]["total"] == 50
        assert len(data["trend"]) == 7

    def test_unknown_format(self, config_path):
        result = _run("export", "--format", "xlsx", "--config", config_path)
        assert result.exit_code == 1


class TestEditValidation:
    def _logged(self, config_path) -> str:
        result = _run("log-placement", "left_thigh", "--at", "2026-02-01T08:00", "--config", config_path)
        return _field(result.output, "Event id:")

    def test_edit_to_disabled_site_rejected(self, config_path):
        event_id = self._logged(config_path)
        _run("disable-site", "right_thigh", "--config", config_path)
        result = _run("edit-placement", event_id, "--site", "right_thigh", "--config", config_path)
        assert result.exit_code == 1
        assert "disabled" in result.output
        history = _run("history", "--config", config_path)
        assert "Left Thigh" in history.output

    def test_edit_to_unknown_custom_site_rejected(self, config_path):
        event_id = self._logged(config_path)
        result = _run(
            "edit-placement", event_id,
            "--site", "custom:00000000-0000-0000-0000-000000000001",
            "--config", config_path,
        )
        assert result.exit_code == 1
        assert "not in the catalog" in result.output


class TestCustomSiteLifecycle:
    def test_rename_and_delete(self, config_path):
        added = _run("add-site", "Left Hip", "--config", config_path)
        key = _field(added.output, " as ")

        renamed = _run("rename-site", key, "Right Hip", "--config", config_path)
        assert renamed.exit_code == 0, renamed.output
        assert "Right Hip" in _run("status", "--config", config_path).output

        deleted = _run("delete-site", key, "--config", config_path)
        assert deleted.exit_code == 0, deleted.output
        assert "Right Hip" not in _run("status", "--config", config_path).output

    def test_builtin_sites_cannot_be_renamed_or_deleted(self, config_path):
        assert _run("rename-site", "left_arm", "Arm", "--config", config_path).exit_code == 1
        result = _run("delete-site", "left_arm", "--config", config_path)
        assert result.exit_code == 1
        assert "disable-site" in result.output

    def test_unknown_custom_site(self, config_path):
        result = _run(
            "delete-site", "custom:00000000-0000-0000-0000-000000000001", "--config", config_path
        )
        assert result.exit_code == 1
        assert "not found" in result.output


class TestHistoryWindow:
    def test_since_filters_and_counts(self, config_path):
        _run("log-placement", "left_arm", "--at", "2026-01-10T08:00", "--config", config_path)
        _run("log-placement", "right_arm", "--at", "2026-02-10T08:00", "--config", config_path)
        result = _run("history", "--since", "2026-02-01", "--config", config_path)
        assert result.exit_code == 0, result.output
        assert "Right Arm (Back)" in result.output
        assert "Left Arm (Back)" not in result.output
        assert "Showing 1 of 2 placement(s)." in result.output


class TestTimeZoneChange:
    """History logged before a time zone was configured keeps working after."""

    def test_commands_after_setting_zone(self, tmp_path, config_path):
        assert _run("log-placement", "left_arm", "--config", config_path).exit_code == 0
        assert _run("add-site", "Left Hip", "--config", config_path).exit_code == 0

        zoned = _write_config(tmp_path, timezone="America/New_York")
        for args in (
            ("score", "--days", "30"),
            ("heatmap", "--days", "30"),
            ("status",),
            ("recommend",),
            ("streak",),
            ("trend",),
            ("achievements",),
            ("history",),
            ("add-site", "Right Hip"),
            ("export", "--format", "json"),
        ):
            result = _run(*args, "--config", zoned)
            assert result.exit_code == 0, (args, result.output)

        logged = _run("log-placement", "right_arm", "--config", zoned)
        assert logged.exit_code == 0, logged.output
        history = _run("history", "--config", zoned)
        assert "Showing 2 of 2 placement(s)." in history.output

    def test_score_counts_both_halves_of_history(self, tmp_path, config_path):
        _run("log-placement", "left_arm", "--config", config_path)
        zoned = _write_config(tmp_path, timezone="America/New_York")
        _run("log-placement", "right_arm", "--config", zoned)
        result = _run("heatmap", "--days", "30", "--config", zoned)
        assert result.exit_code == 0, result.output
        assert result.output.count("50.00%") == 2
