import json
import logging

from src.api.generate_openapi import generate_openapi
from src.api.logging_setup import setup_logging
from src.api.models import SortOption
from src.api.settings import get_settings


class TestSettings:
    def test_defaults(self, monkeypatch):
        for name in (
            "CORS_ALLOW_ORIGINS",
            "DEFAULT_SORT",
            "DEFAULT_SHOW_COMPLETED",
            "SYNC_ACCOUNT_STATUS",
            "SYNC_CHECK_ON_STARTUP",
            "LOG_LEVEL",
            "LOG_FILE",
        ):
            monkeypatch.delenv(name, raising=False)
        s = get_settings()
        assert s.cors_allow_origins == ["*"]
        assert s.enable_basic_auth is False
        assert s.default_sort is SortOption.DUE_DATE
        assert s.default_show_completed is True
        assert s.sync_account_status == "could_not_determine"
        assert s.sync_check_on_startup is True
        assert s.log_level == "INFO"
        assert s.log_file is None

    def test_overrides_and_fallbacks(self, monkeypatch):
        monkeypatch.setenv("CORS_ALLOW_ORIGINS", "http://a.test, http://b.test ,")
        monkeypatch.setenv("DEFAULT_SORT", "Priority")
        monkeypatch.setenv("DEFAULT_SHOW_COMPLETED", "off")
        monkeypatch.setenv("SYNC_CHECK_ON_STARTUP", "maybe")
        s = get_settings()
        assert s.cors_allow_origins == ["http://a.test", "http://b.test"]
        assert s.default_sort is SortOption.PRIORITY
        assert s.default_show_completed is False
        # unparseable booleans keep their default
        assert s.sync_check_on_startup is True

        monkeypatch.setenv("DEFAULT_SORT", "colour")
        assert get_settings().default_sort is SortOption.DUE_DATE


class TestLoggingSetup:
    def test_console_and_file_handlers(self, tmp_path):
        root = logging.getLogger()
        saved = list(root.handlers)
        saved_level = root.level
        try:
            log_file = tmp_path / "logs" / "tasks.log"
            setup_logging(console_level="INFO", log_file=log_file)
            setup_logging(console_level="INFO", log_file=log_file)
            assert len(root.handlers) == 2

            logging.getLogger("src.api.projector").debug("projected %d sections", 3)
            for h in root.handlers:
                h.flush()
            assert "projected 3 sections" in log_file.read_text(encoding="utf-8")
        finally:
            for h in list(root.handlers):
                root.removeHandler(h)
                h.close()
            for h in saved:
                root.addHandler(h)
            root.setLevel(saved_level)
            logging.captureWarnings(False)


class TestOpenAPI:
    def test_generate_openapi_writes_schema(self, tmp_path):
        out = generate_openapi(str(tmp_path / "interfaces" / "openapi.json"))
        schema = json.loads(open(out, encoding="utf-8").read())
        assert schema["info"]["title"] == "Task Manager Backend"
        assert "/api/v1/sections/" in schema["paths"]
        assert {"categories", "tasks", "sections", "sync"} <= {t["name"] for t in schema["tags"]}
