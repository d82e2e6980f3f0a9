"""Emulator process components: settings, logging, lifecycle, CLI and client."""
