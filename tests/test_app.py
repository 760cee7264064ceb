"""Tests for the application context and entry point."""

import json
import logging
import sys

import httpx
import pytest

import main
from eduflow.app import ReportContext, configure_logging
from eduflow.domain.settings import LoggingSettings, ReportSettings
from eduflow.domain.templates import AssociationTemplate, FinancialReportTemplate, StatementTemplate


class TestReportContext:
    """Tests for ReportContext."""

    @pytest.mark.asyncio
    async def test_wires_service(self, tmp_path):
        settings = ReportSettings(default_theme="executive")
        ctx = ReportContext(settings_path=tmp_path / "settings.json", settings=settings)

        assert ctx.service.settings is settings
        teacher = ctx.service.get_template("default_teacher")
        assert isinstance(teacher, StatementTemplate)
        assert teacher.theme == "executive"
        assert isinstance(ctx.service.get_template("default_association"), AssociationTemplate)
        assert isinstance(ctx.service.get_template("default_financial"), FinancialReportTemplate)

        await ctx.close()
        assert ctx.client.is_closed

    @pytest.mark.asyncio
    async def test_shared_client_not_closed(self, tmp_path):
        client = httpx.AsyncClient()
        ctx = ReportContext(settings_path=tmp_path / "settings.json", client=client)

        await ctx.close()

        assert not client.is_closed
        await client.aclose()

    @pytest.mark.asyncio
    async def test_save_settings(self, tmp_path):
        path = tmp_path / "settings.json"
        ctx = ReportContext(settings_path=path)
        ctx.settings.default_theme = "modern_green"

        ctx.save_settings()
        await ctx.close()

        assert json.loads(path.read_text())["default_theme"] == "modern_green"

    def test_configure_logging(self):
        configure_logging(LoggingSettings(level="DEBUG"))
        assert logging.getLogger("eduflow").level == logging.DEBUG

        configure_logging(LoggingSettings(level="WARNING"))
        assert logging.getLogger("eduflow").level == logging.WARNING


class TestMain:
    """Tests for the command line entry point."""

    @pytest.fixture(autouse=True)
    def _isolated_settings(self, tmp_path, monkeypatch):
        monkeypatch.setattr(main.SettingsStore, "DEFAULT_PATH", tmp_path / "settings.json")

    def test_render_teacher(self, tmp_path, teacher_payload):
        data_file = tmp_path / "statement.json"
        data_file.write_text(json.dumps(teacher_payload))
        output = tmp_path / "out" / "statement.pdf"

        size = main.render("teacher", data_file, output)

        assert output.read_bytes().startswith(b"%PDF")
        assert size == output.stat().st_size

    def test_render_association(self, tmp_path, association_payload):
        data_file = tmp_path / "summary.json"
        data_file.write_text(json.dumps(association_payload))
        output = tmp_path / "summary.pdf"

        main.render("association", data_file, output, "executive")

        assert output.exists()

    def test_render_financial(self, tmp_path, financial_payload):
        del financial_payload["current_date"]
        data_file = tmp_path / "financial.json"
        data_file.write_text(json.dumps(financial_payload))
        output = tmp_path / "financial.pdf"

        main.render("financial", data_file, output)

        assert output.read_bytes().startswith(b"%PDF")

    def test_main_non_object_payload(self, tmp_path, monkeypatch, capsys):
        data_file = tmp_path / "list.json"
        data_file.write_text(json.dumps([1, 2]))
        monkeypatch.setattr(sys, "argv", ["main.py", "financial", str(data_file), str(tmp_path / "x.pdf")])

        assert main.main() == 1
        assert "Expected a JSON object" in capsys.readouterr().out

    def test_main_usage(self, monkeypatch, capsys):
        monkeypatch.setattr(sys, "argv", ["main.py"])

        assert main.main() == 1
        assert "Usage" in capsys.readouterr().out

    def test_main_invalid_data(self, tmp_path, monkeypatch, capsys):
        data_file = tmp_path / "bad.json"
        data_file.write_text(json.dumps({"teacher": {}}))
        monkeypatch.setattr(sys, "argv", ["main.py", "teacher", str(data_file), str(tmp_path / "x.pdf")])

        assert main.main() == 1
        assert "invalid report data" in capsys.readouterr().out

    def test_main_unknown_kind(self, tmp_path, monkeypatch, capsys, teacher_payload):
        data_file = tmp_path / "data.json"
        data_file.write_text(json.dumps(teacher_payload))
        monkeypatch.setattr(sys, "argv", ["main.py", "monthly", str(data_file), str(tmp_path / "x.pdf")])

        assert main.main() == 1
        assert "Unknown report kind" in capsys.readouterr().out
