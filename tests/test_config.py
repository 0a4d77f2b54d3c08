"""Settings loading and startup redaction."""

from payrelay.common.config import PAYEVO_TRANSACTIONS_URL, CommonSettings
from payrelay.common.startup import startup_config


def test_defaults_without_environment(monkeypatch):
    """Missing secret is allowed and defaults point at the Payevo endpoint."""

    monkeypatch.delenv("UPSTREAM_SECRET_KEY", raising=False)
    monkeypatch.delenv("UPSTREAM_URL", raising=False)
    monkeypatch.delenv("PORT", raising=False)

    cfg = CommonSettings(_env_file=None)

    assert cfg.upstream_secret_key.get_secret_value() == ""
    assert cfg.upstream_url == PAYEVO_TRANSACTIONS_URL
    assert cfg.port == 3000


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("UPSTREAM_SECRET_KEY", "sk_live_xyz")
    monkeypatch.setenv("PORT", "8080")
    monkeypatch.setenv("ENVIRONMENT", "production")
    monkeypatch.setenv("CORS_ALLOW_ORIGINS", "https://shop.example, https://admin.example")

    cfg = CommonSettings(_env_file=None)

    assert cfg.upstream_secret_key.get_secret_value() == "sk_live_xyz"
    assert cfg.port == 8080
    assert cfg.environment == "production"
    assert cfg.cors_origins == ["https://shop.example", "https://admin.example"]


def test_secret_not_exposed_in_repr(monkeypatch):
    """The credential stays masked when settings are printed."""

    monkeypatch.setenv("UPSTREAM_SECRET_KEY", "sk_live_xyz")

    cfg = CommonSettings(_env_file=None)

    assert "sk_live_xyz" not in repr(cfg)
    assert "sk_live_xyz" not in str(cfg.model_dump())


def test_startup_config_masks_configured_secret():
    """Secrets passed directly or via `.env` are reported but never shown."""

    cfg = CommonSettings(
        _env_file=None,
        upstream_secret_key="sk_live_xyz",
        upstream_url="https://upstream.test",
    )

    config = startup_config(cfg)

    assert config["upstream_secret_key"] == "<redacted>"
    assert config["upstream_url"] == "https://upstream.test"
    assert config["service"] == "payrelay-gateway"
    assert "sk_live_xyz" not in str(config)


def test_startup_config_flags_missing_secret(monkeypatch):
    monkeypatch.delenv("UPSTREAM_SECRET_KEY", raising=False)

    config = startup_config(CommonSettings(_env_file=None))

    assert config["upstream_secret_key"] == "<unset>"


def test_startup_config_reads_dotenv_file(tmp_path, monkeypatch):
    """Values from `.env` show up, not just process environment."""

    monkeypatch.delenv("PORT", raising=False)
    monkeypatch.delenv("UPSTREAM_SECRET_KEY", raising=False)
    env_file = tmp_path / ".env"
    env_file.write_text("PORT=4100\nUPSTREAM_SECRET_KEY=sk_from_file\n")

    config = startup_config(CommonSettings(_env_file=env_file))

    assert config["port"] == 4100
    assert config["upstream_secret_key"] == "<redacted>"
