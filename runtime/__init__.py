"""Process runtime helpers for the liquidator daemon."""
