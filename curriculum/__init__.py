"""Curriculum content: topics, animated examples, resources and pages.

This package is the content layer of the site. Models are edited through the
Django admin and seeded from YAML fixtures; the public views only read them.
"""
