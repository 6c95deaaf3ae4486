"""
The interface for defining a data service's nodes.

A node is bound to a path and describes what should happen when a request arrives for that
path: which role and method handle it (an operation), which files to send (a file path or
directory), or which documentation to show.  Node definitions are made with
:py:meth:`NodeDefiner.define_node`, which takes a mixture of attribute dictionaries and
documentation strings:

.. code-block:: python

    definer.define_node({'path': 'list', 'title': 'List records', 'role': 'Records',
                         'method': 'list', 'allow_format': '+csv'},
                        "Return a list of records matching the given parameters.")

Nodes inherit attributes from their parents; see :py:mod:`wds.resolve`.
"""
import logging
from collections.abc import Mapping

from .attrs import AttributeRegistry, is_empty, SET
from .paths import PathTree, ROOT, check_path, parent_of, normalize_path
from .resolve import AttributeResolver
from .roles import RoleRegistry
from .constants import RunMode
from .utils import caller_location
from .exceptions import (DefinitionError, InvalidPath, UnknownAttribute, StructuralConflict,
                         InvalidAttributeValue)

log = logging.getLogger("wds.node")

class Node(object):
    """
    a handle to a defined node
    """

    def __init__(self, definer, path: str):
        self._definer = definer
        self.path = path

    @property
    def defined_at(self) -> str:
        """
        the source location where this node was defined
        """
        return self._definer.tree.defined_at(self.path)

    @property
    def title(self) -> str:
        return self.attr('title')

    @property
    def doc_string(self) -> str:
        return self._definer.tree.local_value(self.path, 'doc_string')

    @property
    def parent(self):
        """
        the path of this node's parent, or None if this is the root node
        """
        return parent_of(self.path)

    def local_attrs(self) -> Mapping:
        """
        return a copy of the attributes given directly in this node's definition
        """
        return dict(self._definer.tree.local_attrs(self.path) or {})

    def attr(self, key: str):
        """
        return the effective value of one of this node's attributes
        """
        return self._definer.resolver.resolve(self.path, key)

    def add_doc(self, doc: str):
        self._definer.add_node_doc(self.path, doc)

    def __eq__(self, other):
        return isinstance(other, Node) and other.path == self.path and other._definer is self._definer

    def __hash__(self):
        return hash(self.path)

    def __repr__(self):
        return "Node(%r)" % self.path

class NodeDefiner(object):
    """
    a class for defining nodes, checking each definition for syntactic and structural
    consistency as it is made.
    """

    def __init__(self, tree: PathTree, registry: AttributeRegistry, resolver: AttributeResolver,
                 roles: RoleRegistry=None, formats: Mapping=None, vocabs: Mapping=None,
                 mode: RunMode=None, logger=None):
        """
        create the definer

        :param PathTree tree:          the tree to add nodes to
        :param AttributeRegistry registry:  the schema of recognized node attributes
        :param AttributeResolver resolver:  the resolver used to check effective values
        :param RoleRegistry roles:     the registry of handler roles; if None, role and method
                                       names are not checked
        :param Mapping formats:        the defined formats, keyed by name; if None, format names
                                       are not checked
        :param Mapping vocabs:         the defined vocabularies, keyed by name; if None, vocabulary
                                       names are not checked
        :param RunMode mode:           the mode the data service is running in
        :param Logger logger:          the Logger to send messages to
        """
        self.tree = tree
        self.registry = registry
        self.resolver = resolver
        self.roles = roles
        self.formats = formats
        self.vocabs = vocabs
        self.mode = mode or RunMode()
        self.log = logger or log

    def define_node(self, *items) -> Node:
        """
        define one or more nodes.  Each dictionary argument defines a node (and must include a
        ``path`` attribute); each string argument is appended to the documentation of the node
        defined just before it.

        :return:  a handle for the last node defined
        :rtype: Node
        :raise DefinitionError:  if the arguments are not dictionaries and strings, or if no
                                 dictionary is given
        :raise DuplicatePath:    if a path has already been defined
        :raise InvalidPath:      if a path is malformed or its parent has not been defined
        :raise UnknownAttribute: if a dictionary includes an unrecognized attribute
        :raise InvalidAttributeValue:  if a value does not fit the syntax of its attribute
        :raise StructuralConflict:  if a node's attributes are inconsistent
        """
        where = caller_location()
        last = None
        for item in items:
            if isinstance(item, Mapping):
                last = self.create_path_node(item, where)
            elif isinstance(item, str):
                if last is None:
                    raise DefinitionError("define_node: a documentation string must follow a "
                                          "node definition", where=where)
                self.add_node_doc(last, item)
            else:
                raise DefinitionError("define_node: the arguments must be dictionaries and strings",
                                      where=where)

        if last is None:
            raise DefinitionError("define_node: arguments must include at least one dictionary of "
                                  "attributes", where=where)
        return Node(self, last)

    def create_path_node(self, attrs: Mapping, where: str=None) -> str:
        """
        define a single node from a dictionary of attributes and return its path
        """
        path = attrs.get('path')
        check_path(path, where)

        if self.resolver.started:
            self.log.warning("Node '%s' defined after attribute values have been computed; "
                             "previously computed values will not reflect it", path)

        if not self.mode.late_path_check:
            parent = parent_of(path)
            if parent is not None and not self.tree.is_defined(parent):
                raise InvalidPath(path, f"you must define the path '{parent}' before '{path}'", where)

        # disabled applies only to the node on which it is set
        local = {'disabled': 0}
        compose = []
        for key, value in attrs.items():
            if not self.registry.is_known(key):
                raise UnknownAttribute(key, path, where=where)
            try:
                value = self.registry.normalize(key, value, path)
            except InvalidAttributeValue as ex:
                ex.where = where
                raise
            if self.registry.kind_of(key) == SET and not is_empty(value) and \
               AttributeRegistry.composes(value):
                compose.append(key)
            local[key] = value

        self.tree.add(path, local, where, compose)
        try:
            self.check_node(path, where)
        except DefinitionError:
            self.tree.discard(path)
            raise

        self.log.log(logging.INFO if self.mode.debug else logging.DEBUG,
                     "Defined node '%s' at %s", path, where)
        return path

    def check_node(self, path: str, where: str=None):
        """
        check that the effective attributes of a node are consistent with each other and with the
        rest of the data service configuration.  Values computed during the check are not cached.

        :raise StructuralConflict:  if an inconsistency is found
        """
        def attr(key):
            return self.resolver.resolve(path, key, cache=False)

        role = attr('role')
        if role and self.roles is not None and not self.roles.role_defined(role):
            raise StructuralConflict(f"the value of 'role' must be a defined role: '{role}'",
                                     path, 'role', where)

        method = attr('method')
        if method:
            if not role:
                raise StructuralConflict(f"method '{method}' is not valid unless you also specify "
                                         "its role using 'role'", path, 'method', where)
            if self.roles is not None and not self.roles.implements(role, method):
                raise StructuralConflict(f"'{method}' must be a method implemented by '{role}'",
                                         path, 'method', where)

        count = len([k for k in ('method', 'file_dir', 'file_path') if attr(k)])
        if method and count > 1:
            raise StructuralConflict("you may only specify one of 'method', 'file_dir', 'file_path'",
                                     path, 'method', where)
        elif count > 1:
            raise StructuralConflict("you may only specify one of 'file_dir' and 'file_path'",
                                     path, 'file_dir', where)

        if self.formats is not None:
            for fmt in sorted(attr('allow_format') or ()):
                if fmt not in self.formats:
                    raise StructuralConflict(f"invalid value '{fmt}' for format, no such format has "
                                             "been defined for this data service",
                                             path, 'allow_format', where)

        if self.vocabs is not None:
            for voc in sorted(attr('allow_vocab') or ()):
                if voc not in self.vocabs:
                    raise StructuralConflict(f"invalid value '{voc}' for vocab, no such vocabulary "
                                             "has been defined for this data service",
                                             path, 'allow_vocab', where)

        if attr('send_files') and not attr('file_dir'):
            raise StructuralConflict("if you specify 'send_files' then you must also specify "
                                     "'file_dir'", path, 'send_files', where)

    def add_node_doc(self, path: str, doc: str):
        """
        append a documentation string to a node.  If it is the first string added and it starts
        with "!", the node is marked as undocumented (and the "!" is dropped).
        """
        if doc is None or doc == '':
            return
        if not isinstance(doc, str):
            raise DefinitionError(f"only strings may be added to documentation: '{doc}' is not valid",
                                  path)
        local = self.tree.local_attrs(path)
        if local is None:
            raise InvalidPath(path, f"cannot add documentation to undefined path '{path}'")

        if not local.get('doc_string'):
            if doc.startswith('!'):
                doc = doc[1:]
                local['undocumented'] = 1

        if local.get('doc_string'):
            local['doc_string'] += "\n" + doc
        else:
            local['doc_string'] = doc

    def node_defined(self, path) -> bool:
        """
        return True if the given path has been defined and is not disabled
        """
        if path is None:
            return False
        path = normalize_path(path)
        return self.tree.is_defined(path) and not self.tree.local_value(path, 'disabled')

    def node(self, path):
        """
        return a handle for a defined node or None if the path is not defined
        """
        path = normalize_path(path)
        if not self.tree.is_defined(path):
            return None
        return Node(self, path)
