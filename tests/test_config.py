from planetgen.config import _env_int


class TestEnvInt:
    def test_unset_uses_default(self, monkeypatch):
        monkeypatch.delenv("PLANETGEN_SECTORS", raising=False)
        assert _env_int("PLANETGEN_SECTORS", 96) == 96

    def test_blank_uses_default(self, monkeypatch):
        monkeypatch.setenv("PLANETGEN_SEED", "  ")
        assert _env_int("PLANETGEN_SEED", None) is None

    def test_integer_read(self, monkeypatch):
        monkeypatch.setenv("PLANETGEN_STACKS", " 24 ")
        assert _env_int("PLANETGEN_STACKS", 48) == 24

    def test_garbage_falls_back_with_warning(self, monkeypatch, caplog):
        monkeypatch.setenv("PLANETGEN_SECTORS", "lots")
        with caplog.at_level("WARNING"):
            assert _env_int("PLANETGEN_SECTORS", 96) == 96
        assert "PLANETGEN_SECTORS" in caplog.text
