"""Configuration: constants and feature flags."""
