"""Configuration and tooling helpers for the CDK application."""
