"""
Generation of configuration digests.

A digest is a fully dereferenced, serializable snapshot of a data service's configuration: the
nodes under one or more root paths (with their effective attribute values), together with every
output block, value set, and parameter ruleset they refer to, and the service-wide settings.
Digests are written as YAML so that they can be saved and later compared with
:py:mod:`wds.diag.diff` (e.g. to generate a change log between two versions of a service).

A digest is a dictionary with the following keys:

``node``
    node records keyed by path
``block``, ``set``, ``ruleset``
    the referenced output blocks, value sets, and rulesets, keyed by name
``ds``
    the service-wide settings
``errors``
    lists of problems found (e.g. references to undefined blocks), keyed by context
``_wds_version``
    the version of this package
``_node_query``
    the node pattern used to select nodes, if any
"""
import logging
from collections.abc import Mapping

import yaml

from ..rulesets import reference_name, valid_references, rule_type, INCLUSION_RULES
from ..sets import ValueSet
from ..utils import glob_to_regex
from ..exceptions import DanglingReference
from .. import __version__

log = logging.getLogger("wds.diag.digest")

# effective attribute values recorded for each node
NODE_KEYS = ('disabled', 'undocumented', 'role', 'method', 'arg', 'ruleset', 'output',
             'output_label', 'optional_output', 'summary', 'public_access', 'default_format',
             'default_limit', 'default_header', 'default_datainfo', 'default_count',
             'default_linebreak', 'default_save_filename', 'allow_method', 'allow_format',
             'allow_vocab')

# service attributes recorded in the ds record
DS_KEYS = ('name', 'title', 'version', 'path_prefix', 'path_re', 'ruleset_prefix', 'data_source',
           'data_provider', 'data_license', 'license_url', 'contact_name', 'contact_email')

def snapshot(value):
    """
    return a copy of a configuration value made only of plain dictionaries, lists, and scalars.
    Sets become sorted lists; callables (including set validators) are replaced by their names.
    The copy shares no mutable structure with the original.
    """
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, ValueSet):
        return snapshot(value.to_dict())
    if isinstance(value, Mapping):
        return dict((str(k), snapshot(v)) for k, v in value.items())
    if isinstance(value, (set, frozenset)):
        return sorted([snapshot(v) for v in value], key=str)
    if isinstance(value, (list, tuple)):
        return [snapshot(v) for v in value]
    if callable(value) or getattr(value, 'set_name', None):
        return reference_name(value)
    return str(value)

def _list_value(value):
    if value is None or value == '':
        return []
    if isinstance(value, (list, tuple)):
        return [v for v in value if v is not None and v != '']
    return [value]

def dump_digest(digest: Mapping, stream=None):
    """
    serialize a digest as a YAML document, starting with a document marker so that digests can
    be concatenated into one file.  If a stream is given, the document is written to it;
    otherwise, it is returned as a string.
    """
    return yaml.safe_dump(digest, stream, default_flow_style=False, allow_unicode=True,
                          explicit_start=True)

class DigestBuilder(object):
    """
    a class for building digests of a :py:class:`~wds.service.DataService`'s configuration.
    Building never fails because of a dangling reference; such problems are recorded in the
    digest's ``errors`` record instead.
    """

    def __init__(self, ds, logger=None):
        """
        :param DataService ds:  the data service to take a digest of
        :param Logger logger:   the Logger to send messages to
        """
        self.ds = ds
        self.log = logger or log

    def build(self, roots=None, node_pattern: str=None) -> dict:
        """
        build a digest.

        :param roots:  the paths of the nodes to include; each is included along with all of its
                       defined descendants.  The default is the root path, "/".
        :param str node_pattern:  if given, only nodes whose paths match this pattern are
                       included.  The pattern may contain the wildcards "*" (matching any sequence
                       of characters) and "?" (matching any one character).
        :rtype: dict
        """
        if roots is None:
            roots = ['/']
        elif isinstance(roots, str):
            roots = [roots]

        digest = {}
        self._visited = set()
        self._query = glob_to_regex(node_pattern)
        if node_pattern:
            digest['_node_query'] = node_pattern

        for root in roots:
            root = root or '/'
            paths = self.ds.tree.subtree(root)
            if not paths:
                self.add_error(digest, "roots", str(DanglingReference('node', root)))
            for path in paths:
                self.add_node(digest, path)

        self.add_ds(digest)
        return digest

    def add_error(self, digest, context, message):
        if not message:
            return
        digest.setdefault('errors', {}).setdefault(context or 'unclassified', []).append(message)

    def check(self, digest, category, name, context) -> bool:
        """
        return True if the named entity exists; otherwise record a dangling reference error
        """
        catalogs = {'block': self.ds.block, 'set': self.ds.set, 'ruleset': self.ds.ruleset}
        if category == 'node':
            found = self.ds.tree.is_defined(name)
        else:
            found = name in catalogs[category]
        if not found:
            ex = DanglingReference(category, name, context)
            self.log.debug("%s: %s", context, str(ex))
            self.add_error(digest, context, str(ex))
        return found

    def _first_visit(self, category, name):
        if (category, name) in self._visited:
            return False
        self._visited.add((category, name))
        return True

    def add_node(self, digest, path):
        """
        add a node record to the digest, along with everything it refers to
        """
        if not path or not self.ds.tree.is_defined(path):
            return
        if self._query and not self._query.match(path):
            return
        if not self._first_visit('node', path):
            return

        node = snapshot(self.ds.tree.local_attrs(path))
        node.pop('path', None)
        digest.setdefault('node', {})[path] = node

        for key in NODE_KEYS:
            value = self.ds.resolve(path, key)
            if value is not None and value != '':
                node[key] = snapshot(value)

        rsname = node.get('ruleset') or self.ds.effective_ruleset_name(path)
        if rsname:
            node['ruleset'] = rsname

        show_list = []
        block_list = []
        context = f"node '{path}'"

        for blockname in _list_value(node.get('output')):
            block_list.append(blockname)
            self.add_block(digest, blockname)
            self.check(digest, 'block', blockname, context + ": output")

        for blockname in _list_value(node.get('summary')):
            self.add_block(digest, blockname)
            self.check(digest, 'block', blockname, context + ": summary")

        outmap = node.get('optional_output')
        if outmap:
            if self.check(digest, 'set', outmap, context + ": optional_output"):
                self.add_set(digest, outmap)
                vs = self.ds.set[outmap]
                for v in vs.value_list:
                    show_list.append(v)
                    target = vs.maps_to(v)
                    if target:
                        block_list.append(target)
                        self.add_block(digest, target)
                        self.check(digest, 'block', target, context + ": optional_output")

        node['show_list'] = show_list
        node['block_list'] = block_list

        if rsname:
            self.add_ruleset(digest, rsname)
            self.check(digest, 'ruleset', rsname, context)
        elif node.get('method'):
            self.add_error(digest, context, "no ruleset defined for this node")

    def add_block(self, digest, name):
        if not name or name not in self.ds.block or not self._first_visit('block', name):
            return
        digest.setdefault('block', {})[name] = snapshot(self.ds.block[name])

    def add_set(self, digest, name):
        if not name or name not in self.ds.set or not self._first_visit('set', name):
            return
        digest.setdefault('set', {})[name] = snapshot(self.ds.set[name])

    def add_ruleset(self, digest, name):
        """
        add a ruleset's rules to the digest, along with the sets its rules refer to and the
        rulesets it includes
        """
        if not name or name not in self.ds.ruleset or not self._first_visit('ruleset', name):
            return

        rules = []
        digest.setdefault('ruleset', {})[name] = rules
        for rule in self.ds.ruleset.rules_of(name):
            snap = snapshot(rule)
            if 'valid' in rule:
                valid = rule['valid']
                names = [reference_name(v) for v in (valid if isinstance(valid, (list, tuple))
                                                     else [valid])]
                snap['valid'] = names[0] if len(names) == 1 else names
            rules.append(snap)

            for setname in valid_references(rule):
                self.add_set(digest, setname)
                self.check(digest, 'set', setname, f"ruleset '{name}'")

            rtype = rule_type(rule)
            if rtype in INCLUSION_RULES:
                self.add_ruleset(digest, rule[rtype])
                self.check(digest, 'ruleset', rule[rtype], f"ruleset '{name}'")

    def add_ds(self, digest):
        """
        add the service-wide settings to the digest
        """
        digest['_wds_version'] = __version__

        ds = {}
        ds['feature'] = snapshot(self.ds.feature)
        ds['special'] = snapshot(self.ds.special)
        ds['format'] = snapshot(self.ds.format)
        ds['format_list'] = list(self.ds.format.format_list)
        ds['vocab'] = snapshot(self.ds.vocab)
        ds['vocab_list'] = list(self.ds.vocab.vocab_list)
        for key in DS_KEYS:
            ds[key] = snapshot(getattr(self.ds, key, None))
        digest['ds'] = ds
