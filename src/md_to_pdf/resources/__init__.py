"""Packaged stylesheet and configuration template."""
