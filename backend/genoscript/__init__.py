"""
GenoScript

Turns a description of a genomic file conversion (input source, output
types and their parameters) into a runnable shell script generated by a
large language model.
"""

__version__ = "1.0.0"
