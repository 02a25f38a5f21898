# tests/__init__.py
"""
Expose common test utilities so tests can import directly:
    from tests import make_raw_listing, make_section, make_field
"""

from .utils import FakeClock, FakeSession, make_field, make_raw_listing, make_section

__all__ = ["make_raw_listing", "make_section", "make_field", "FakeClock", "FakeSession"]
