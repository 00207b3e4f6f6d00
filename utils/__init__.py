"""
Shared text helpers used by parsers and matchers.
"""
