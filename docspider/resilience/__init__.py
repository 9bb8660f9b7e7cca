"""Failure recording for crawl runs."""
