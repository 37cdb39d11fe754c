"""malgroup application package: load, compare and render anime lists."""
