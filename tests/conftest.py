"""Test configuration and fixtures for the Bookshelf API."""

from tests.fixtures import *  # noqa: F401,F403
