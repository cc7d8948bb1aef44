"""Data loading, odds handling and walk-forward backtesting for NBA betting models."""

__version__ = "1.0.0"