from verbex.config import Settings


def test_gasless_api_key_alias(monkeypatch):
    """Paymaster API key should load from legacy aliases when present."""

    monkeypatch.setenv("ZEROXGASLESS_API_KEY", "")
    monkeypatch.setenv("GASLESS_API_KEY", "alias-from-legacy")
    monkeypatch.delenv("OXGASLESS_API_KEY", raising=False)

    settings = Settings()

    assert settings.zeroxgasless_api_key == "alias-from-legacy"


def test_gasless_api_key_direct_env(monkeypatch):
    """Environment-provided API key remains the primary source."""

    monkeypatch.setenv("ZEROXGASLESS_API_KEY", "primary-key")
    monkeypatch.setenv("GASLESS_API_KEY", "alias-from-legacy")

    settings = Settings()

    assert settings.zeroxgasless_api_key == "primary-key"


def test_paymaster_url_is_derived_from_api_key(monkeypatch):
    monkeypatch.setenv("ZEROXGASLESS_API_KEY", "abc123")
    monkeypatch.delenv("PAYMASTER_URL", raising=False)

    settings = Settings()

    assert settings.paymaster_url_for(8453) == "https://paymaster.0xgasless.com/v1/8453/rpc/abc123"
    assert settings.bundler_url_for(8453).endswith("/8453")


def test_rpc_override_applies_to_every_network(monkeypatch):
    monkeypatch.setenv("RPC_URL", "https://rpc.example")

    settings = Settings()

    assert settings.rpc_url_for("avalanche") == "https://rpc.example"
    assert settings.rpc_url_for("avalanche-fuji") == "https://rpc.example"


def test_per_network_rpc_and_token_overrides(monkeypatch):
    monkeypatch.delenv("RPC_URL", raising=False)
    monkeypatch.setenv("BASE_RPC_URL", "https://base.example")
    monkeypatch.setenv("VERBEX_TOKEN_REGISTRY_OVERRIDES", '{"8453": {"DEGEN": "0x4ed4E862860beD51a9570b96d89aF5E1B0Efefed"}}')

    settings = Settings()

    assert settings.rpc_url_for("base") == "https://base.example"
    assert settings.token_registry_overrides == {8453: {"DEGEN": "0x4ed4E862860beD51a9570b96d89aF5E1B0Efefed"}}
