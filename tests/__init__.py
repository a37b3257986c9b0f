# tests/__init__.py

"""
Testing Package for Bagged Classification Trees
"""

# This file makes the `tests` directory a Python package so test modules can
# import the harness and generated datasets.
