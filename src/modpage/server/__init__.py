"""HTTP application serving rendered modules."""

from ._app import create_app
from ._dependencies import BLOCK_FAILURES_HEADER, FRAGMENT_HEADER

__all__ = ["BLOCK_FAILURES_HEADER", "FRAGMENT_HEADER", "create_app"]
