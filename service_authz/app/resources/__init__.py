"""
Resource lookup package.
"""
