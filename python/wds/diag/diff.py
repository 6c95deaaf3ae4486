"""
Comparison of two configuration digests.

The typical use is to compare the digest of a data service's current configuration with one saved
from a previous version, in order to produce a change log.  A digest file may contain several YAML
documents (e.g. one per root node); these are first merged ("condensed") into a single digest.
The two digests are then compared along any of the following axes:

``ds``
    the service-wide attributes (name, title, version, ...)
``specials``
    the special parameters and the names they are accepted under
``vocabs``, ``formats``
    the defined vocabularies and output formats
``nodes``, ``ops``, ``pages``, ``dirs``
    all nodes, or only operation nodes (those with a ``method``), documentation pages (no
    ``method``, ``file_dir``, or ``file_path``), or file nodes (``file_dir`` or ``file_path``)

Within the node sections, the parameters accepted (``params``), the output blocks
(``blocks``), and the output fields (``fields``) of each node can also be compared.
"""
import sys, logging
from collections.abc import Mapping

import yaml

from .align import sdiff, has_changes
from .report import DiffReport, Section, Entry, SubDiff, LEFT, RIGHT
from ..rulesets import PARAM_RULES, INCLUSION_RULES
from ..utils import glob_to_regex
from ..exceptions import NoDigest, IncompatibleDigest

log = logging.getLogger("wds.diag.diff")

CATEGORIES = ('ds', 'node', 'block', 'set', 'ruleset')

DS_ATTRS = ('name', 'title', 'version', 'path_prefix', 'ruleset_prefix', 'data_source',
            'data_provider', 'data_license', 'license_url', 'contact_name', 'contact_email')

VOCAB_ATTRS = ('disabled', 'doc_node', 'title', 'undocumented', 'use_field_names')

FORMAT_ATTRS = ('content_type', 'default_vocab', 'disposition', 'doc_node', 'is_text', 'module',
                'package', 'title', 'uses_header', 'undocumented', 'disabled')

NODE_ATTRS = ('title', 'disabled', 'undocumented', 'role', 'method', 'arg', 'ruleset', 'usage',
              'file_dir', 'file_path', 'output_label', 'optional_output', 'public_access',
              'default_format', 'default_limit', 'default_header', 'default_datainfo',
              'default_count', 'default_linebreak', 'default_save_filename')

TOP_AXES = ('ds', 'specials', 'vocabs', 'formats', 'nodes', 'ops', 'pages', 'dirs')
NODE_AXES = ('nodes', 'ops', 'pages', 'dirs')
SUB_AXES = ('params', 'blocks', 'fields')
DEFAULT_AXES = ('ds', 'specials', 'vocabs', 'formats', 'nodes')

SECTION_TITLES = {
    'ds':       "Data service",
    'specials': "Special parameters",
    'vocabs':   "Vocabularies",
    'formats':  "Formats",
    'nodes':    "Nodes",
    'ops':      "Operations",
    'pages':    "Pages",
    'dirs':     "Directories",
}

SUB_TITLES = {'params': "params", 'blocks': "blocks", 'fields': "fields"}

class DiffOptions(object):
    """
    the selection of comparisons to make.  "all" selects every axis and sub-comparison.  If no
    top-level axis is selected, the default axes (ds, specials, vocabs, formats, nodes) are
    compared without sub-comparisons; if only sub-comparisons are selected, they are reported
    within the "nodes" section.
    """

    def __init__(self, axes=None, node_pattern: str=None):
        """
        :param axes:  the names of the axes and sub-comparisons to include (e.g. "ops",
                      "params"); "all" selects all of them.
        :param str node_pattern:  a wildcard pattern restricting the nodes to compare
        """
        axes = set(axes or [])
        unknown = axes - set(TOP_AXES + SUB_AXES + ('all',))
        if unknown:
            raise ValueError("Unknown diff axes: " + ", ".join(sorted(unknown)))
        if 'all' in axes:
            axes = set(TOP_AXES + SUB_AXES)

        self.subs = [s for s in SUB_AXES if s in axes]
        self.axes = [a for a in TOP_AXES if a in axes]
        if not self.axes:
            self.axes = ['nodes'] if self.subs else list(DEFAULT_AXES)
        self.node_pattern = node_pattern

    @classmethod
    def from_args(cls, args):
        """
        create options from parsed command-line arguments, which have boolean properties named
        after the axes, ``all``, and ``node`` (a pattern)
        """
        axes = [a for a in TOP_AXES + SUB_AXES + ('all',) if getattr(args, a, False)]
        return cls(axes, getattr(args, 'node', None))

def is_scalar(value) -> bool:
    return value is None or isinstance(value, (str, int, float, bool))

def is_digest(digest) -> bool:
    """
    return True if the given object has the minimal structure of a digest: a dictionary with
    a ``ds`` record that names the data service
    """
    return isinstance(digest, Mapping) and isinstance(digest.get('ds'), Mapping) and \
           bool(digest['ds'].get('name'))

def condense(streams, source: str=None, logger=None):
    """
    merge a sequence of digest documents into one digest.  All documents must describe the same
    data service (as given by ``ds.name``); if two documents both give a version, the versions
    must match.  Within each category (ds, node, block, set, ruleset), entries from later
    documents replace those of earlier ones; error lists are accumulated.

    :param streams:     the digest documents to merge
    :param str source:  a name for where the documents came from (for messages)
    :return:  the merged digest, or None if there are no documents
    :raise NoDigest:  if a document is not a dictionary
    :raise IncompatibleDigest:  if the documents describe different services or versions
    """
    if not logger:
        logger = log
    out = None
    name = version = None
    for doc in streams:
        if doc is None:
            continue
        if not isinstance(doc, Mapping):
            raise NoDigest("digest document is not a dictionary", source)

        if out is None:
            out = {}
        else:
            dname = (doc.get('ds') or {}).get('name')
            dversion = (doc.get('ds') or {}).get('version')
            if name and dname and dname != name:
                raise IncompatibleDigest("%sdigests for different data services: %s, %s" %
                                         (source and source+": " or "", name, dname))
            if version is not None and dversion is not None:
                if version != dversion:
                    raise IncompatibleDigest("%sdigests for different versions of %s: %s, %s" %
                                             (source and source+": " or "", name or dname,
                                              version, dversion))
            else:
                logger.warning("%sversion of data service not defined in all digests; assuming "
                               "they are compatible", source and source+": " or "")

        ds = doc.get('ds') or {}
        if ds.get('name'):
            name = name or ds['name']
        if ds.get('version') is not None and version is None:
            version = ds['version']

        for key, val in doc.items():
            if key == 'errors':
                errs = out.setdefault('errors', {})
                for ctx, msgs in (val or {}).items():
                    if not isinstance(msgs, list):
                        msgs = [msgs]
                    errs.setdefault(ctx, []).extend(msgs)
            elif key in CATEGORIES and isinstance(val, Mapping) and isinstance(out.get(key), Mapping):
                out[key].update(val)
            elif key in CATEGORIES and isinstance(val, Mapping):
                out[key] = dict(val)
            else:
                out[key] = val

    return out

def load_digest(source, logger=None):
    """
    read and condense all of the digest documents from a file or stream.

    :param source:  a file name, "-" for standard input, or an open stream
    :return:  the condensed digest, or None if the source contains no documents
    :raise NoDigest:  if the source cannot be read or does not contain valid YAML
    """
    name = source if isinstance(source, str) else getattr(source, 'name', "(stream)")
    if name == '-':
        name = "standard input"
    try:
        if source == '-':
            docs = list(yaml.safe_load_all(sys.stdin))
        elif isinstance(source, str):
            with open(source) as fd:
                docs = list(yaml.safe_load_all(fd))
        else:
            docs = list(yaml.safe_load_all(source))
    except OSError as ex:
        raise NoDigest("unable to read digest from %s: %s" % (name, str(ex)), name)
    except yaml.YAMLError as ex:
        raise NoDigest("malformed digest in %s: %s" % (name, str(ex)), name)

    return condense(docs, name, logger)

def flatten_params(digest, rsname, skip=(), _seen=None):
    """
    return the ordered list of the parameter names defined by a ruleset in a digest, with the
    parameters of included rulesets inlined in place.  Names in ``skip`` are left out.
    """
    if _seen is None:
        _seen = set()
    if not rsname or rsname in _seen:
        return []
    _seen.add(rsname)

    out = []
    for rule in (digest.get('ruleset') or {}).get(rsname) or []:
        if not isinstance(rule, Mapping):
            continue
        for k in PARAM_RULES:
            if k in rule:
                if rule[k] not in skip:
                    out.append(rule[k])
                break
        for k in INCLUSION_RULES:
            if k in rule:
                out.extend(flatten_params(digest, rule[k], skip, _seen))
                break
    return out

def block_fields(digest, blocks):
    """
    return the ordered list of the names of the output fields in the given blocks
    """
    out = []
    for bname in blocks or []:
        block = (digest.get('block') or {}).get(bname) or {}
        for rec in block.get('output_list') or []:
            if isinstance(rec, Mapping) and rec.get('output'):
                out.append(rec.get('name') or rec['output'])
    return out

def _node_kind_matches(axis, node) -> bool:
    if axis == 'ops':
        return bool(node.get('method'))
    if axis == 'dirs':
        return bool(node.get('file_dir') or node.get('file_path'))
    if axis == 'pages':
        return not (node.get('method') or node.get('file_dir') or node.get('file_path'))
    return True

class DigestDiffEngine(object):
    """
    a class that loads and compares digests
    """

    def __init__(self, options: DiffOptions=None, logger=None):
        self.options = options or DiffOptions()
        self.log = logger or log

    def load(self, source):
        return load_digest(source, self.log)

    def condense(self, streams, source=None):
        return condense(streams, source, self.log)

    def diff(self, left, right, options: DiffOptions=None) -> DiffReport:
        """
        compare two digests.

        :param dict left:   the digest to compare against (e.g. from a previous version)
        :param dict right:  the digest to compare (e.g. from the current version)
        :param DiffOptions options:  the comparisons to make; defaults to the options given at
                                     construction
        :raise NoDigest:  if either digest is missing or invalid
        """
        if not options:
            options = self.options
        if not is_digest(left):
            raise NoDigest("left digest is missing or invalid")
        if not is_digest(right):
            raise NoDigest("right digest is missing or invalid")

        report = DiffReport(left['ds'].get('name'), right['ds'].get('name'))
        for axis in options.axes:
            section = Section(axis, SECTION_TITLES[axis])
            if axis == 'ds':
                self.diff_ds(left, right, section)
            elif axis == 'specials':
                self.diff_entities(section, self._specials(left), self._specials(right), ['name'])
            elif axis == 'vocabs':
                self.diff_entities(section, left['ds'].get('vocab') or {},
                                   right['ds'].get('vocab') or {}, VOCAB_ATTRS)
            elif axis == 'formats':
                self.diff_entities(section, left['ds'].get('format') or {},
                                   right['ds'].get('format') or {}, FORMAT_ATTRS)
            else:
                self.diff_nodes(left, right, section, axis, options)
            report.add_section(section)

        return report

    def _specials(self, digest):
        special = digest['ds'].get('special') or {}
        return dict((k, {'name': v}) for k, v in special.items())

    def compare_attrs(self, lrec, rrec, attrs):
        """
        return the (attribute, left value, right value) tuples for the scalar attributes that
        differ between two records.  Attributes with a non-scalar value on either side are not
        compared.
        """
        changes = []
        for attr in attrs:
            lval, rval = lrec.get(attr), rrec.get(attr)
            if not is_scalar(lval) or not is_scalar(rval):
                continue
            if lval != rval:
                changes.append((attr, lval, rval))
        return changes

    def diff_ds(self, left, right, section):
        changes = self.compare_attrs(left['ds'], right['ds'], DS_ATTRS)
        if changes:
            section.add(Entry('ds', changes=changes))

    def diff_entities(self, section, lents, rents, attrs, label='title'):
        """
        compare two collections of records keyed by name, adding entries to the given section
        """
        for key in sorted(set(lents) - set(rents)):
            section.add(Entry(key, LEFT, self._label(lents[key], label)))
        for key in sorted(set(rents) - set(lents)):
            section.add(Entry(key, RIGHT, self._label(rents[key], label)))
        for key in sorted(set(lents) & set(rents)):
            lrec, rrec = lents[key], rents[key]
            if not isinstance(lrec, Mapping) or not isinstance(rrec, Mapping):
                continue
            changes = self.compare_attrs(lrec, rrec, attrs)
            if changes:
                section.add(Entry(key, changes=changes))

    def _label(self, rec, label):
        if isinstance(rec, Mapping) and label and is_scalar(rec.get(label)):
            return rec.get(label)
        return None

    def diff_nodes(self, left, right, section, axis, options):
        """
        compare the nodes of two digests that belong to the given node axis
        """
        query = glob_to_regex(options.node_pattern)

        def select(digest):
            nodes = digest.get('node') or {}
            return dict((p, n) for p, n in nodes.items()
                        if isinstance(n, Mapping) and (not query or query.match(p)))

        lnodes, rnodes = select(left), select(right)
        keys = set([p for p, n in lnodes.items() if _node_kind_matches(axis, n)] +
                   [p for p, n in rnodes.items() if _node_kind_matches(axis, n)])

        for key in sorted(keys - set(rnodes)):
            section.add(Entry(key, LEFT, self._label(lnodes[key], 'title')))
        for key in sorted(keys - set(lnodes)):
            section.add(Entry(key, RIGHT, self._label(rnodes[key], 'title')))

        lskip = set((left['ds'].get('special') or {}).values())
        rskip = set((right['ds'].get('special') or {}).values())
        for key in sorted(keys & set(lnodes) & set(rnodes)):
            lnode, rnode = lnodes[key], rnodes[key]
            changes = self.compare_attrs(lnode, rnode, NODE_ATTRS)

            subdiffs = []
            for sub in options.subs:
                if sub == 'params':
                    lseq = flatten_params(left, lnode.get('ruleset'), lskip)
                    rseq = flatten_params(right, rnode.get('ruleset'), rskip)
                elif sub == 'blocks':
                    lseq = lnode.get('block_list') or []
                    rseq = rnode.get('block_list') or []
                else:
                    lseq = block_fields(left, lnode.get('block_list'))
                    rseq = block_fields(right, rnode.get('block_list'))
                edits = sdiff(lseq, rseq)
                if has_changes(edits):
                    subdiffs.append(SubDiff(SUB_TITLES[sub], edits))

            if changes or subdiffs:
                section.add(Entry(key, changes=changes, subdiffs=subdiffs))
