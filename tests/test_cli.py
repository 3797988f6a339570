"""Tests for the command-line interface."""

import json
import sys
from datetime import datetime, timezone

import pytest
from click.testing import CliRunner
from loguru import logger

from seo_monitor import cli as cli_module
from seo_monitor.cli import cli
from seo_monitor.exceptions import SiteUnreachableError
from seo_monitor.models import HtmlMetadata, PageSpeedMetrics, PublicAuditResult

SNAPSHOT = {
    "sessions": 1000,
    "mobilePercent": 80,
    "bounceRate": 20,
    "clicks": 10,
    "impressions": 1000,
    "ctr": 1.0,
    "avgPosition": 5,
    "indexedPages": 50,
    "lcp": None,
    "cls": None,
    "fid": None,
    "topQueries": [
        {"query": f"query-{i}", "clicks": 1, "impressions": 10, "ctr": 10, "position": 4}
        for i in range(10)
    ],
}


@pytest.fixture(autouse=True)
def restore_logging():
    yield
    logger.remove()
    logger.add(sys.stderr)


@pytest.fixture
def runner():
    return CliRunner()


def write_json(path, data):
    path.write_text(json.dumps(data), encoding="utf-8")
    return str(path)


class TestSnapshotCommand:
    """Tests for `seo-monitor snapshot`."""

    def test_json_output(self, runner, tmp_path):
        """Test the low-CTR snapshot scores as JSON."""
        path = write_json(tmp_path / "metrics.json", SNAPSHOT)
        result = runner.invoke(cli, ["snapshot", path, "--json"])

        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["scores"]["overall"] == 93
        assert data["scores"]["content"] == 70
        assert [i["ruleId"] for i in data["issues"]] == ["low-ctr"]

    def test_table_output(self, runner, tmp_path):
        """Test the human-readable report."""
        path = write_json(tmp_path / "metrics.json", SNAPSHOT)
        result = runner.invoke(cli, ["snapshot", path])

        assert result.exit_code == 0, result.output
        assert "Category Scores" in result.output
        assert "low-ctr" in result.output
        assert "Improve Click-Through Rate" in result.output

    def test_top(self, runner, tmp_path):
        """Test capping recommendations."""
        path = write_json(tmp_path / "metrics.json", {"sessions": 5, "impressions": 5})
        result = runner.invoke(cli, ["snapshot", path, "--json", "--top", "2"])

        data = json.loads(result.stdout)
        assert [r["priority"] for r in data["recommendations"]] == [1, 2]

    def test_invalid_json(self, runner, tmp_path):
        """Test a broken file is a usage error."""
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")
        result = runner.invoke(cli, ["snapshot", str(path)])
        assert result.exit_code == 2


class TestCompareCommand:
    """Tests for `seo-monitor compare`."""

    def test_json_output(self, runner, tmp_path):
        """Test regressions are reported as JSON."""
        current = write_json(tmp_path / "current.json", {**SNAPSHOT, "sessions": 500})
        previous = write_json(tmp_path / "previous.json", SNAPSHOT)
        result = runner.invoke(cli, ["compare", current, previous, "--json"])

        assert result.exit_code == 0, result.output
        [reg] = json.loads(result.stdout)
        assert reg["metric"] == "sessions"
        assert reg["severity"] == "critical"
        assert reg["changePercent"] == -50.0

    def test_no_changes(self, runner, tmp_path):
        """Test identical snapshots."""
        path = write_json(tmp_path / "same.json", SNAPSHOT)
        result = runner.invoke(cli, ["compare", path, path])
        assert result.exit_code == 0
        assert "No notable changes" in result.output


class TestAuditCommand:
    """Tests for `seo-monitor audit`."""

    def test_json_output(self, runner, monkeypatch):
        """Test the URL is normalized and the result printed."""
        seen = []

        async def fake_audit(url):
            seen.append(url)
            return PublicAuditResult(
                url=url, score=75, performance_score=80, on_page_score=70,
                performance_metrics=PageSpeedMetrics(lcp=2000),
                html_metadata=HtmlMetadata(title="Home", title_length=4, is_https=True),
                audited_at=datetime(2026, 4, 2, tzinfo=timezone.utc),
            )

        monkeypatch.setattr(cli_module, "run_public_audit", fake_audit)
        result = runner.invoke(cli, ["audit", "example.com", "--json"])

        assert result.exit_code == 0, result.output
        assert seen == ["https://example.com"]
        assert json.loads(result.stdout)["score"] == 75

    def test_unreachable(self, runner, monkeypatch):
        """Test an unreachable site exits non-zero."""
        async def fake_audit(url):
            raise SiteUnreachableError(url, "timed out after 10.0s")

        monkeypatch.setattr(cli_module, "run_public_audit", fake_audit)
        result = runner.invoke(cli, ["audit", "https://down.test", "--json"])

        assert result.exit_code == 1
        assert "Could not reach https://down.test" in result.output
