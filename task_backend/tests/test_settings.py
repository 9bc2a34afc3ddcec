from src.api.settings import get_settings


class TestSettings:
    def test_defaults(self, monkeypatch):
        for name in ["SQLITE_DB_PATH", "SQLITE_TIMEOUT", "QUERY_TIMEOUT", "LOG_LEVEL", "CORS_ALLOW_ORIGINS"]:
            monkeypatch.delenv(name, raising=False)
        s = get_settings()
        assert s.sqlite_db_path == "./data/tasks.db"
        assert s.sqlite_timeout == 5.0
        assert s.query_timeout == 0.0
        assert s.log_level == "INFO"
        assert s.cors_allow_origins == ["*"]

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("SQLITE_DB_PATH", "/tmp/x.db")
        monkeypatch.setenv("QUERY_TIMEOUT", "2.5")
        monkeypatch.setenv("LOG_LEVEL", "debug")
        monkeypatch.setenv("CORS_ALLOW_ORIGINS", "http://a.test, http://b.test")
        s = get_settings()
        assert s.sqlite_db_path == "/tmp/x.db"
        assert s.query_timeout == 2.5
        assert s.log_level == "DEBUG"
        assert s.cors_allow_origins == ["http://a.test", "http://b.test"]

    def test_bad_values_fall_back(self, monkeypatch):
        monkeypatch.setenv("SQLITE_TIMEOUT", "soon")
        monkeypatch.setenv("QUERY_TIMEOUT", "-3")
        monkeypatch.setenv("LOG_LEVEL", "LOUD")
        s = get_settings()
        assert s.sqlite_timeout == 5.0
        assert s.query_timeout == 0.0
        assert s.log_level == "INFO"
