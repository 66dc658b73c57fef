"""Dither strategies.

Every module in this package that defines a `dither` object is
registered by ntscj_tool.registry.discover().
"""
