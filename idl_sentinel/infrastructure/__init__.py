"""Infrastructure layer - database, Solana RPC, notification channels, telemetry."""
