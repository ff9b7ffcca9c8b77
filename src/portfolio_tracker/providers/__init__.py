"""External market data and FX rate sources."""
