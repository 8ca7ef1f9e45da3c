"""HTTP surface for withhold-check."""
