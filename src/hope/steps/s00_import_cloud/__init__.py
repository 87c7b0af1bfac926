"""Step 00: import a raw sensor cloud into the base frame."""
