# tests/fixtures/__init__.py
"""Shared test doubles and factories for wosync tests.

- factories: sample upstream records and mirror seeding
- fakes: in-memory upstream, directory and mirror-sync doubles
"""
