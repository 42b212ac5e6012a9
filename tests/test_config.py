import config
from infrastructure.credential_store import YamlCredentialStore, token_fingerprint


def test_user_token_round_trip(tmp_path):
    path = tmp_path / "cfg.yaml"
    config.set_user_token("  tok-1 ", path)
    assert config.get_user_token(path) == "tok-1"
    config.set_user_token("", path)
    assert config.get_user_token(path) == ""
    assert not path.exists()


def test_clearing_token_keeps_other_settings(tmp_path):
    path = tmp_path / "cfg.yaml"
    config.set_api_url("https://tasks.example/api/", path)
    config.set_user_token("tok", path)
    config.set_user_token("", path)
    assert path.exists()
    assert config.get_api_url(path) == "https://tasks.example/api"


def test_env_overrides(tmp_path, monkeypatch):
    path = tmp_path / "cfg.yaml"
    config.set_api_url("https://from-file/api", path)
    monkeypatch.setenv("TASKDECK_API_URL", "https://from-env/api/")
    monkeypatch.setenv("TASKDECK_TIMEOUT", "5")
    assert config.get_api_url(path) == "https://from-env/api"
    assert config.get_request_timeout(path) == 5.0


def test_defaults_and_bad_values(tmp_path, monkeypatch):
    monkeypatch.delenv("TASKDECK_API_URL", raising=False)
    monkeypatch.setenv("TASKDECK_TIMEOUT", "soon")
    path = tmp_path / "missing.yaml"
    assert config.get_api_url(path) == config.DEFAULT_API_URL
    assert config.get_request_timeout(path) == config.DEFAULT_TIMEOUT_SECONDS


def test_config_path_from_env(tmp_path, monkeypatch):
    monkeypatch.setenv("TASKDECK_CONFIG", str(tmp_path / "alt.yaml"))
    assert config.user_config_path() == tmp_path / "alt.yaml"


def test_corrupt_config_reads_as_empty(tmp_path):
    path = tmp_path / "cfg.yaml"
    path.write_text("token: [unclosed", encoding="utf-8")
    assert config.get_user_token(path) == ""


def test_yaml_credential_store(tmp_path):
    store = YamlCredentialStore(tmp_path / "cfg.yaml")
    assert store.load() is None
    store.save("tok-abc")
    assert store.load() == "tok-abc"
    store.clear()
    assert store.load() is None
    assert len(token_fingerprint("tok-abc")) == 12
