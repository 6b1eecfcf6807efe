"""
Pressroom Modules
=================

Collection of reusable Flask blueprint modules for admin functionality.
"""

__all__ = ['email_builder']
