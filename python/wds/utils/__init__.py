"""
Miscellaneous utility functions used across the wds package
"""
import os, re, sys

_pkgdir = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

def caller_location(skipdir: str=None) -> str:
    """
    return a description of the source location of the nearest caller outside of this package,
    in the form "line N of FILE".  This is used to record where configuration entities were
    defined so that errors can point back to them.

    :param str skipdir:  the directory whose source files should be skipped over; defaults to
                         the directory of the wds package.
    """
    if not skipdir:
        skipdir = _pkgdir
    frame = sys._getframe(1)
    while frame:
        fname = os.path.abspath(frame.f_code.co_filename)
        if not fname.startswith(skipdir + os.sep):
            return "line %d of %s" % (frame.f_lineno, frame.f_code.co_filename)
        frame = frame.f_back
    return "(unknown location)"

def glob_to_regex(pattern: str):
    """
    compile a shell-style wildcard pattern into an anchored regular expression, in which ``*``
    matches any sequence of characters and ``?`` matches any single character.  All other
    characters match themselves.  Returns None if the pattern is empty.
    """
    if not pattern:
        return None
    parts = []
    for c in pattern:
        if c == '*':
            parts.append('.*')
        elif c == '?':
            parts.append('.')
        else:
            parts.append(re.escape(c))
    return re.compile('^' + ''.join(parts) + '$', re.DOTALL)

def valid_name(name) -> bool:
    """
    return True if the given value is a valid name for a configuration entity (format,
    vocabulary, set, block, or ruleset)
    """
    return isinstance(name, str) and bool(_name_re.match(name))

_name_re = re.compile(r'^\w[\w.:-]*$')
