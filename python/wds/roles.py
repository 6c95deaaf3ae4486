"""
A registry of the handler classes ("roles") that implement a data service's operations.

A node names the role that handles it (via its ``role`` attribute) and the operation method
to call (via ``method``).  Each role is registered up front along with the set of operation
methods it makes available, so that node definitions can be checked against it without
introspecting the class at request time.
"""
import logging
from collections import OrderedDict

log = logging.getLogger("wds.roles")

def operations_of(cls):
    """
    return the names of the operation methods that a handler class makes available.  If the class
    has an ``operations`` attribute, it is taken as the list of names; otherwise, all public
    callable attributes are included.
    """
    ops = getattr(cls, 'operations', None)
    if ops is not None:
        if isinstance(ops, str):
            ops = [o.strip() for o in ops.split(',') if o.strip()]
        return frozenset(ops)
    return frozenset([n for n in dir(cls) if not n.startswith('_') and callable(getattr(cls, n, None))])

class RoleRegistry(object):
    """
    a mapping of role names to handler classes and the operation methods they implement
    """

    def __init__(self):
        self._classes = OrderedDict()
        self._methods = {}

    def define_role(self, name: str, cls, methods=None):
        """
        register a handler class under a role name.

        :param str name:   the name that nodes use to refer to the role
        :param type cls:   the handler class
        :param methods:    the names of the methods the role implements; if not given, these are
                           determined via :py:func:`operations_of`.
        :raise ValueError:  if the role is already defined or a named method is not callable
        """
        if name in self._classes:
            raise ValueError("role already defined: " + name)
        methods = frozenset(methods) if methods is not None else operations_of(cls)
        missing = [m for m in methods if not callable(getattr(cls, m, None))]
        if missing:
            raise ValueError("%s: class does not implement %s" % (name, ", ".join(sorted(missing))))
        self._classes[name] = cls
        self._methods[name] = methods
        log.debug("Defined role %s with operations: %s", name, ", ".join(sorted(methods)))

    def role_defined(self, name: str) -> bool:
        return name in self._classes

    def __contains__(self, name):
        return name in self._classes

    def roles(self):
        return list(self._classes.keys())

    def handler_class(self, name: str):
        return self._classes.get(name)

    def methods_of(self, name: str):
        """
        return the set of method names implemented by the named role (empty if it is not defined)
        """
        return self._methods.get(name, frozenset())

    def implements(self, role: str, method: str) -> bool:
        return method in self._methods.get(role, ())

    def role_method(self, role: str, method: str):
        """
        return the function implementing the given operation method of a role, or None if the
        role is not defined or does not make that method available
        """
        if not self.implements(role, method):
            return None
        return getattr(self._classes[role], method)
