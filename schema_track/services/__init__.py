"""Core services: diffing, classification, summaries, rendering and orchestration."""
