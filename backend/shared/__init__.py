"""Store client and environment configuration."""
