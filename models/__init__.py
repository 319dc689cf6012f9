"""
Models package for the typing practice application.

This package contains the data models, the typing engine and the local persistence managers.
"""
