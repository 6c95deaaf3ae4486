"""
Lazy, memoized computation of the effective values of node attributes.

The effective value of an attribute at a path is computed by walking up the path hierarchy and
applying the composition rule of the attribute's kind (see :py:mod:`wds.attrs`).  Values are
computed on demand and cached forever; the configuration is assumed to be complete before the
first value is requested.  After that point, the cache may be read concurrently from multiple
threads, provided that no further definitions are made.
"""
import logging
from collections.abc import Mapping

from . import attrs as kinds
from .attrs import AttributeRegistry, is_empty, compose_set
from .paths import PathTree, parent_of, normalize_path
from .config import blab
from .exceptions import InvalidAttributeValue

log = logging.getLogger("wds.resolve")

def path_of(request) -> str:
    """
    return the node path that a resolution request refers to.  The argument may either be a path
    string or a request object (or dictionary) with a ``node_path`` property; an object without
    one refers to the root path.
    """
    if isinstance(request, str) or request is None:
        return normalize_path(request)
    if isinstance(request, Mapping):
        return request.get('node_path') or '/'
    return getattr(request, 'node_path', None) or '/'

class AttributeResolver(object):
    """
    a class that computes and caches the effective attribute values for the paths in a
    :py:class:`~wds.paths.PathTree`.

    At the root of every inheritance chain, an attribute that has no value falls back to a value
    supplied by the ``config_value`` function (typically looking up the application's
    configuration), and then to the attribute's built-in default in the registry.
    """

    def __init__(self, tree: PathTree, registry: AttributeRegistry, config_value=None, logger=None):
        """
        create the resolver

        :param PathTree tree:  the tree of defined paths and their local attributes
        :param AttributeRegistry registry:  the schema of node attributes
        :param config_value:   a function that takes an attribute name and returns a configured
                               value for it (or None)
        :param Logger logger:  the Logger to use for (very verbose) tracing messages
        """
        self.tree = tree
        self.registry = registry
        self._config_value = config_value
        self._cache = {}
        self.log = logger or log

    @property
    def started(self) -> bool:
        """
        True if at least one value has been computed and cached
        """
        return len(self._cache) > 0

    def cached(self, path, key: str) -> bool:
        """
        return True if a value (possibly undefined) is cached for the given path and key
        """
        return (path_of(path), key) in self._cache

    def resolve(self, path, key: str, cache: bool=True):
        """
        return the effective value of an attribute for a given path, or None if it has no value.
        Unknown attribute names and undefined paths resolve to None.  Set-valued attributes are
        returned as a frozenset, list- and hook-valued attributes as a tuple.

        :param path:       the path to resolve the attribute for; this can also be a request object
                           with a ``node_path`` property
        :param str key:    the name of the attribute
        :param bool cache: if False, do not add any computed values to the cache (cached values
                           will still be used).  This is used to check definitions before the
                           configuration is complete.
        """
        path = path_of(path)
        if not self.tree.is_defined(path):
            return None
        return self._lookup(path, key, cache)

    def _lookup(self, path, key, cache):
        # intermediate paths need not be defined
        ck = (path, key)
        if ck in self._cache:
            return self._cache[ck]

        kind = self.registry.kind_of(key)
        if kind is None or kind == kinds.IGNORE:
            return None

        if kind == kinds.NONHERITABLE:
            value = self.tree.local_value(path, key)
            if is_empty(value):
                value = None
        else:
            value = self._compute(path, key, kind, cache)

        if cache:
            self._cache[ck] = value
            blab(self.log, "%s: %s = %r", path, key, value)
        return value

    def _compute(self, path, key, kind, cache):
        if not self.tree.has_local(path, key):
            return self._inherited(path, key, kind, cache)

        value = self.tree.local_value(path, key)
        if is_empty(value):
            return None

        if kind == kinds.SET:
            if self.tree.composes(path, key):
                return compose_set(self._inherited(path, key, kind, cache), value)
            return compose_set(None, value)

        if kind in (kinds.LIST, kinds.HOOK):
            return tuple(value)

        return value

    def _inherited(self, path, key, kind, cache):
        parent = parent_of(path)
        if parent is not None:
            return self._lookup(parent, key, cache)
        return self._root_value(key, kind)

    def _root_value(self, key, kind):
        # the root falls back on the configured value, then the built-in default
        cfgval = None
        if self._config_value:
            cfgval = self._config_value(key)

        if cfgval is None or (isinstance(cfgval, str) and cfgval == ''):
            val = self.registry.default(key)
            if kind == kinds.SET and val is not None:
                val = frozenset(val)
            elif kind in (kinds.LIST, kinds.HOOK) and val is not None:
                val = tuple(val)
            return val

        if kind not in (kinds.SET, kinds.LIST, kinds.HOOK):
            return cfgval

        try:
            tokens = self.registry.normalize(key, cfgval)
        except InvalidAttributeValue as ex:
            self.log.warning("Ignoring configured value for %s: %s", key, str(ex))
            return self.registry.default(key)
        if kind != kinds.SET:
            return tuple(tokens)
        if AttributeRegistry.composes(tokens):
            return compose_set(self.registry.default(key), tokens)
        return compose_set(None, tokens)
