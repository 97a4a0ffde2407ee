"""Interface adapters for OpenMarket (command-line interface)."""
