"""Core types shared by every layer: errors, models, validation."""
