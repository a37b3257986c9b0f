# BaggedTree/tests/generated_datasets/__init__.py

"""
Generated Datasets Sub-Package for Bagged Tree Tests
"""

# This file makes the `generated_datasets` directory a Python sub-package.
