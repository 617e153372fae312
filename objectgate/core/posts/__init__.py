"""
Post register for the direct-upload flow.
"""

from .register import PostRecord, PostRegister

__all__ = ["PostRecord", "PostRegister"]
