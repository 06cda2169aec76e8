"""Public site: pages, rich text rendering, animated examples and practice."""
