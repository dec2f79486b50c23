"""External service clients: chain RPC, ERC-4337 bundler/paymaster and the DLN swap API."""
