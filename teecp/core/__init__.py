"""teecp core — connection lifecycle, retry connector and role drivers."""
