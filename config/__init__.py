"""Configuration snapshots, TOML loading and file watching."""
