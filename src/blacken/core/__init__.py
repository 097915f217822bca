"""
Core -- process runner, configuration, errors, and the editing pipeline.
"""
