"""did-envelope command line tools.

Commands read documents and instructions from a file, a literal value,
or stdin ('-'), and write JSON to stdout by default.
"""
