"""Animated examples and theory animation blocks.

Animation specs are JSON documents authored in the CMS. This package contains
the schema dataclasses, the strict decoder that validates raw JSON into them,
and the server-side HTML/SVG rendering used by the topic pages.
"""
