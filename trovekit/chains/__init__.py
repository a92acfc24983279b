"""Chain-specific clients and contract adapters."""
