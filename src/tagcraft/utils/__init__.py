"""Markup primitives shared by the compiler and the runtime helpers."""
