import pytest

from imgvariant.config import default_config, load_config, validate_config

ENV_VARS = [
    "IMGVARIANT_S3_BUCKET",
    "IMGVARIANT_S3_ENDPOINT",
    "IMGVARIANT_S3_REGION",
    "IMGVARIANT_S3_ACCESS_KEY",
    "IMGVARIANT_S3_SECRET_KEY",
    "IMGVARIANT_HOST",
    "IMGVARIANT_BASE",
    "IMGVARIANT_PATH_PROPERTY",
    "IMGVARIANT_CATALOG",
    "IMGVARIANT_REFRESH_INTERVAL",
    "IMGVARIANT_MAX_WORKERS",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    monkeypatch.chdir(tmp_path)


def test_defaults():
    config = load_config()
    assert config["image"]["host"] == ""
    assert config["index"]["refresh_interval"] == 60
    assert config["producer"]["max_workers"] == 4


def test_config_file(tmp_path):
    (tmp_path / "config.toml").write_text(
        '[s3]\nbucket = "pics"\n\n'
        '[image]\nhost = "https://cdn.example.com"\npath_property = ["accountId", "userId"]\n\n'
        '[index]\ncatalog = "catalog.toml"\n'
    )
    config = load_config()
    assert config["s3"]["bucket"] == "pics"
    assert config["image"]["host"] == "https://cdn.example.com"
    assert config["image"]["path_property"] == ["accountId", "userId"]
    assert config["index"]["catalog"] == "catalog.toml"
    assert config["index"]["refresh_interval"] == 60


def test_environment_overrides(monkeypatch, tmp_path):
    (tmp_path / "config.toml").write_text('[s3]\nbucket = "pics"\n')
    monkeypatch.setenv("IMGVARIANT_S3_BUCKET", "other")
    monkeypatch.setenv("IMGVARIANT_PATH_PROPERTY", "accountId, userId")
    monkeypatch.setenv("IMGVARIANT_REFRESH_INTERVAL", "30")
    config = load_config()
    assert config["s3"]["bucket"] == "other"
    assert config["image"]["path_property"] == ["accountId", "userId"]
    assert config["index"]["refresh_interval"] == 30


def test_single_path_property(monkeypatch):
    monkeypatch.setenv("IMGVARIANT_PATH_PROPERTY", "accountId")
    assert load_config()["image"]["path_property"] == "accountId"


def test_invalid_file_is_ignored(tmp_path):
    (tmp_path / "config.toml").write_text("not = [valid")
    assert load_config()["s3"]["bucket"] is None


class TestValidateConfig:
    def _valid(self):
        config = default_config()
        config["s3"]["bucket"] = "pics"
        config["index"]["catalog"] = "catalog.toml"
        return config

    def test_valid(self):
        assert validate_config(self._valid()) is None

    def test_bucket_required(self):
        config = self._valid()
        config["s3"]["bucket"] = None
        assert "bucket" in validate_config(config)
        assert validate_config(config, require_storage=False) is None

    def test_catalog_required(self):
        config = self._valid()
        config["index"]["catalog"] = None
        assert "catalog" in validate_config(config)

    def test_bad_max_workers(self):
        config = self._valid()
        config["producer"]["max_workers"] = 0
        assert "max workers" in validate_config(config)
