import json

from prpreview.storage.config import AppConfig, ConfigStore


def test_token_host_migration_dedup(tmp_path):
    # Simulate an old config with a confusing host key including scheme
    cfg_path = tmp_path / "config.json"
    cfg_path.write_text(
        json.dumps({"tokens": {"https://GitHub.com/": "tok1", "github.com": "tok2", "": "junk"}}),
        encoding="utf-8",
    )

    cfg = ConfigStore(data_dir=tmp_path).load()
    assert cfg.tokens == {"github.com": "tok2"}

    # migration is persisted
    saved = json.loads(cfg_path.read_text(encoding="utf-8"))
    assert saved["tokens"] == {"github.com": "tok2"}


def test_missing_config_defaults(tmp_path):
    cfg = ConfigStore(data_dir=tmp_path / "nope").load()
    assert cfg.tokens == {}
    assert cfg.timeout_s == 30.0


def test_save_roundtrip(tmp_path):
    store = ConfigStore(data_dir=tmp_path)
    store.save(AppConfig(tokens={"ghe.corp.example": "t"}, timeout_s=5))
    cfg = store.load()
    assert cfg.tokens == {"ghe.corp.example": "t"}
    assert cfg.timeout_s == 5.0


def test_data_dir_env_override(tmp_path, monkeypatch):
    monkeypatch.setenv("PRPREVIEW_HOME", str(tmp_path))
    assert ConfigStore().path == tmp_path / "config.json"


def test_token_lookup_prefers_config(monkeypatch):
    monkeypatch.setenv("GH_TOKEN", "env-token")
    cfg = AppConfig(tokens={"github.com": "stored"})
    assert cfg.token_for("github.com") == "stored"
    assert AppConfig().token_for("github.com") == "env-token"


def test_token_lookup_enterprise_env(monkeypatch):
    for name in ["GH_TOKEN", "GITHUB_TOKEN", "GH_ENTERPRISE_TOKEN", "GITHUB_ENTERPRISE_TOKEN"]:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("GITHUB_TOKEN", "public")
    assert AppConfig().token_for("ghe.corp.example") is None
    monkeypatch.setenv("GH_ENTERPRISE_TOKEN", "ent")
    assert AppConfig().token_for("ghe.corp.example") == "ent"
