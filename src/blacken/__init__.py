"""
Blacken -- pipe an editable buffer through an external code formatter.

The buffer text is streamed to the formatter over stdin, and on success the
buffer is replaced with the formatted text while the cursor and scroll
position are kept. On failure the buffer is untouched and the formatter's
diagnostics are reported.
"""

__version__ = "1.2.0"
__author__ = "Blacken Team"
