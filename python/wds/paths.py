"""
Storage of node paths and their directly-specified (non-inherited) attribute values.

A path is a string such as ``a/b/c``; the root path is ``/``.  Paths never start or end with a
slash (other than the root itself).  The parent of a path is computed purely from its syntax:
the parent of ``a/b`` is ``a``, the parent of ``a`` is ``/``, and ``/`` has no parent.
"""
import re
from functools import lru_cache
from collections import OrderedDict

from .exceptions import InvalidPath, DuplicatePath

ROOT = '/'

_bad_path_re = re.compile(r'^/|/$|//|[?#]')

def normalize_path(path):
    """
    return the canonical form of a path given by a caller, mapping '' to the root path
    """
    if path is None or path == '':
        return ROOT
    return path

def check_path(path, where=None):
    """
    raise an InvalidPath exception if the given path string is malformed
    """
    if not isinstance(path, str) or path == '':
        raise InvalidPath(path, "a node definition must include a non-empty value for 'path'", where)
    if path != ROOT and _bad_path_re.search(path):
        raise InvalidPath(path, where=where)

@lru_cache(maxsize=None)
def parent_of(path: str):
    """
    return the parent path of the given path, or None if path is the root (or empty)
    """
    if path is None or path == ROOT or path == '':
        return None
    i = path.rfind('/')
    if i < 0:
        return ROOT
    if i == 0:
        return None
    return path[:i]

def is_within(path: str, root: str) -> bool:
    """
    return True if path is the given root path or one of its descendants
    """
    if root == ROOT:
        return True
    return path == root or path.startswith(root + '/')

class PathTree(object):
    """
    a registry of defined node paths.  For each path, the tree records the attribute values that
    were given directly in the path's definition, the source location of that definition, and
    which set-valued attributes are to be composed with their inherited values.  The tree knows
    nothing about inheritance; see :py:class:`~wds.resolve.AttributeResolver`.
    """

    def __init__(self):
        self._attrs = OrderedDict()
        self._where = {}
        self._compose = {}

    def add(self, path: str, attrs: dict, where: str=None, compose=None):
        """
        record a newly defined path and its local attributes.

        :param str path:    the path being defined
        :param dict attrs:  the attribute values given directly for the path
        :param str where:   a description of the source location of the definition
        :param compose:     the names of set-valued attributes whose values should be composed
                            with the inherited value
        :raise DuplicatePath:  if the path has already been defined
        """
        if path in self._attrs:
            raise DuplicatePath(path, self._where.get(path), where)
        self._attrs[path] = attrs
        self._where[path] = where
        self._compose[path] = frozenset(compose or ())

    def discard(self, path: str):
        """
        forget a path definition; this is used to back out a definition that failed its checks
        """
        self._attrs.pop(path, None)
        self._where.pop(path, None)
        self._compose.pop(path, None)

    def is_defined(self, path: str) -> bool:
        return path in self._attrs

    def __contains__(self, path):
        return path in self._attrs

    def __len__(self):
        return len(self._attrs)

    def paths(self):
        """
        return the defined paths in the order that they were defined
        """
        return list(self._attrs.keys())

    def subtree(self, root: str=ROOT):
        """
        return the sorted list of defined paths that are equal to or descend from the given root
        """
        return sorted([p for p in self._attrs if is_within(p, root)])

    def local_attrs(self, path: str) -> dict:
        """
        return the dictionary of locally defined attributes for the path (or None if the path is
        not defined).  The returned dictionary is the live record; callers should not modify it.
        """
        return self._attrs.get(path)

    def has_local(self, path: str, key: str) -> bool:
        attrs = self._attrs.get(path)
        return attrs is not None and key in attrs

    def local_value(self, path: str, key: str):
        attrs = self._attrs.get(path)
        if attrs is None:
            return None
        return attrs.get(key)

    def composes(self, path: str, key: str) -> bool:
        """
        return True if the local value of the given set attribute is to be composed with its
        inherited value
        """
        return key in self._compose.get(path, ())

    def defined_at(self, path: str):
        """
        return the source location where the given path was defined
        """
        return self._where.get(path)
