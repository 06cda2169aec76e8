"""Offline caching: route table, caching strategies and the service worker."""
