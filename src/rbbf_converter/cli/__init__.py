"""
Command-line layer of the converter: the console abstraction, user-friendly error reporting and the ``rbbf2xml``
entry point.
"""
