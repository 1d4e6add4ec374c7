"""Route finding and quoting across Aptos constant-product DEX pools."""

__version__ = "0.1.0"
