import pytest

from okta_provider.config import settings
from okta_provider.config.settings import _get_or_generate


def make_config(**overrides):
    base = dict(
        demo_mode=False,
        org_name="acme",
        base_url="okta.com",
        org_url_override="",
        api_token="",
    )
    base.update(overrides)
    return settings.ProviderConfig(**base)


@pytest.fixture
def empty_run_secrets(monkeypatch, tmp_path):
    """Point /run/secrets at an empty directory."""
    real_path = settings.Path

    def fake_path(target):
        if str(target) == "/run/secrets":
            return tmp_path
        return real_path(target)

    monkeypatch.setattr(settings, "Path", fake_path)
    return tmp_path


def test_org_url_from_name_and_base_url():
    assert make_config(base_url="oktapreview.com").org_url == "https://acme.oktapreview.com"


def test_org_url_override_wins():
    cfg = make_config(org_url_override="https://login.acme.test/")
    assert cfg.org_url == "https://login.acme.test"


def test_api_token_demo_mode():
    assert make_config(demo_mode=True).api_token_resolved == settings.DEMO_API_TOKEN


def test_api_token_prefers_config_value(empty_run_secrets):
    assert make_config(api_token="from-config").api_token_resolved == "from-config"


def test_api_token_reads_from_run_secrets(empty_run_secrets):
    (empty_run_secrets / "okta_api_token").write_text("file-token\n")
    assert make_config().api_token_resolved == "file-token"


def test_api_token_falls_back_to_env(empty_run_secrets, monkeypatch):
    monkeypatch.setenv("OKTA_API_TOKEN", "env-token")
    assert make_config().api_token_resolved == "env-token"


def test_api_token_raises_when_missing(empty_run_secrets, monkeypatch):
    monkeypatch.delenv("OKTA_API_TOKEN", raising=False)
    with pytest.raises(ValueError, match="OKTA_API_TOKEN not found"):
        _ = make_config().api_token_resolved


def test_get_or_generate_uses_demo_default(monkeypatch):
    monkeypatch.delenv("SAMPLE_VAR", raising=False)
    assert _get_or_generate("SAMPLE_VAR", demo_default="demo", demo_mode=True) == "demo"


def test_get_or_generate_optional(monkeypatch):
    monkeypatch.delenv("OPTIONAL_VAR", raising=False)
    assert _get_or_generate("OPTIONAL_VAR", required=False) == ""


def test_get_or_generate_missing_required(monkeypatch):
    monkeypatch.delenv("REQUIRED_VAR", raising=False)
    with pytest.raises(RuntimeError):
        _get_or_generate("REQUIRED_VAR", required=True, demo_mode=False)


def test_load_settings_production_requires_org(monkeypatch):
    monkeypatch.setenv("DEMO_MODE", "false")
    monkeypatch.delenv("OKTA_ORG_NAME", raising=False)
    monkeypatch.delenv("OKTA_ORG_URL", raising=False)
    with pytest.raises(RuntimeError, match="OKTA_ORG_NAME"):
        settings.load_settings()


def test_load_settings_reads_environment(monkeypatch):
    monkeypatch.setattr(settings, "_load_secret_from_file", lambda name, env_var: "secret-token")
    monkeypatch.setenv("DEMO_MODE", "false")
    monkeypatch.setenv("OKTA_ORG_NAME", "acme")
    monkeypatch.setenv("OKTA_BASE_URL", "oktapreview.com")
    monkeypatch.delenv("OKTA_ORG_URL", raising=False)
    monkeypatch.setenv("OKTA_STATUS_POLL_INTERVAL", "0.5")
    monkeypatch.setenv("OKTA_PAGE_LIMIT", "50")

    cfg = settings.load_settings()

    assert cfg.demo_mode is False
    assert cfg.org_url == "https://acme.oktapreview.com"
    assert cfg.api_token == ""
    assert cfg.api_token_resolved == "secret-token"
    assert cfg.status_poll_interval == 0.5
    assert cfg.page_limit == 50


def test_load_settings_cli_overrides(monkeypatch):
    monkeypatch.setattr(settings, "_load_secret_from_file", lambda name, env_var: "secret-token")
    monkeypatch.setenv("DEMO_MODE", "false")
    monkeypatch.delenv("OKTA_ORG_NAME", raising=False)

    cfg = settings.load_settings(org_url="https://dev-1.okta.com", api_token="cli-token")

    assert cfg.org_url == "https://dev-1.okta.com"
    assert cfg.api_token_resolved == "cli-token"


def test_token_secret_is_looked_up_once(monkeypatch):
    lookups = []

    def lookup(name, env_var):
        lookups.append((name, env_var))
        return "secret-token"

    monkeypatch.setattr(settings, "_load_secret_from_file", lookup)
    monkeypatch.setenv("DEMO_MODE", "false")
    monkeypatch.setenv("OKTA_ORG_NAME", "acme")

    cfg = settings.load_settings()

    assert lookups == []
    assert cfg.api_token_resolved == "secret-token"
    assert lookups == [("okta_api_token", "OKTA_API_TOKEN")]


@pytest.mark.parametrize("raw", ["soon", "0", "-1"])
def test_load_settings_rejects_bad_numbers(monkeypatch, raw):
    monkeypatch.setenv("DEMO_MODE", "true")
    monkeypatch.setenv("OKTA_STATUS_POLL_TIMEOUT", raw)
    with pytest.raises(ValueError, match="OKTA_STATUS_POLL_TIMEOUT"):
        settings.load_settings()
