import os

from pathlib import Path
from typing import Any, Dict

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


BASE_DIR = Path(__file__).resolve().parents[1]

ZEROXGASLESS_PAYMASTER_TEMPLATE = "https://paymaster.0xgasless.com/v1/{chainId}/rpc/{apiKey}"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=BASE_DIR / ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    def model_post_init(self, __context: Any) -> None:
        """Pick up the legacy environment variable names used by the chat server."""

        super().model_post_init(__context)

        if not self.zeroxgasless_api_key:
            fallback = os.getenv("GASLESS_API_KEY") or os.getenv("OXGASLESS_API_KEY")
            if fallback:
                object.__setattr__(self, "zeroxgasless_api_key", fallback)

    log_level: str = Field(default="INFO", description="Logging level")

    # Networks
    default_network: str = Field(default="avalanche", description="Network used when a caller does not pick one")
    rpc_url: str = Field(
        default="",
        description="Global RPC override applied to every network",
    )
    avalanche_rpc_url: str = Field(
        default="https://api.avax.network/ext/bc/C/rpc",
        description="Avalanche C-Chain RPC endpoint",
    )
    avalanche_fuji_rpc_url: str = Field(
        default="https://api.avax-test.network/ext/bc/C/rpc",
        description="Avalanche Fuji testnet RPC endpoint",
    )
    base_rpc_url: str = Field(default="https://mainnet.base.org", description="Base mainnet RPC endpoint")

    # ERC-4337 smart accounts
    bundler_url: str = Field(
        default="https://bundler.0xgasless.com/{chainId}",
        description="Bundler RPC endpoint; {chainId} is substituted per network",
    )
    paymaster_url: str = Field(
        default="",
        description="Paymaster RPC endpoint template ({chainId}, {apiKey}); derived from the API key when empty",
    )
    paymaster_rpc_method: str = Field(default="pm_sponsorUserOperation", description="Paymaster sponsorship RPC method")
    zeroxgasless_api_key: str = Field(
        default="",
        description="0xGasless API key used for paymaster sponsorship",
        validation_alias=AliasChoices("zeroxgasless_api_key", "ZEROXGASLESS_API_KEY"),
    )
    erc4337_entrypoint_address: str = Field(
        default="0x5FF137D4b0FDCD49DcA30c7CF57E578a026d2789",
        description="EntryPoint v0.6 contract address",
    )
    smart_account_execute_signature: str = Field(
        default="execute(address,uint256,bytes)",
        description="Smart account function used for a single call",
    )
    smart_account_execute_batch_signature: str = Field(
        default="executeBatch(address[],uint256[],bytes[])",
        description="Smart account function used for batched calls",
    )
    smart_account_validation_module: str = Field(
        default="0x0000001c5b32F37F5beA87BDD5374eB2aC54eA8e",
        description="Validation module appended to user operation signatures (empty to send raw ECDSA signatures)",
    )

    # Swap aggregator
    dln_base_url: str = Field(
        default="https://dln.debridge.finance/v1.0",
        description="deBridge DLN API base URL",
    )
    swap_default_slippage: str = Field(default="auto", description="Slippage sent to DLN when the caller gives none")
    swap_affiliate_fee_percent: str = Field(default="0", description="Affiliate fee percent sent with DLN quotes")

    # Timeouts
    request_timeout_seconds: int = Field(default=30, description="HTTP request timeout")
    tx_hash_timeout_seconds: float = Field(
        default=60.0,
        ge=1,
        description="How long to wait for a user operation to land in a transaction",
    )
    receipt_timeout_seconds: float = Field(
        default=90.0,
        ge=1,
        description="How long to wait for a transaction receipt before reporting it as pending",
    )
    receipt_poll_interval_seconds: float = Field(default=2.0, gt=0, description="Receipt polling interval")

    token_registry_overrides: Dict[int, Dict[str, str]] = Field(
        default_factory=dict,
        description="Extra token addresses keyed by chain ID then symbol (JSON)",
        validation_alias=AliasChoices("token_registry_overrides", "VERBEX_TOKEN_REGISTRY_OVERRIDES"),
    )

    def rpc_url_for(self, network_name: str) -> str:
        """Return the RPC endpoint for a network, honouring the global override."""
        if self.rpc_url:
            return self.rpc_url
        return getattr(self, f"{network_name.replace('-', '_')}_rpc_url", "")

    def bundler_url_for(self, chain_id: int) -> str:
        return self.bundler_url.replace("{chainId}", str(chain_id))

    def paymaster_url_for(self, chain_id: int) -> str:
        template = self.paymaster_url
        if not template:
            if not self.zeroxgasless_api_key:
                return ""
            template = ZEROXGASLESS_PAYMASTER_TEMPLATE
        return template.replace("{chainId}", str(chain_id)).replace("{apiKey}", self.zeroxgasless_api_key)


# Global settings instance
settings = Settings()
