"""
The DataService class, which brings together all of the parts of a data service's
configuration: its nodes, roles, formats, vocabularies, value sets, output blocks, and parameter
rulesets.

.. code-block:: python

    ds = DataService('data1.0', title="Example data service", version="1.0",
                     config=appconfig, features='standard', special_params='standard')
    ds.define_vocab({'name': 'com', 'title': 'Compact field names'})
    ds.define_format({'name': 'json', 'default_vocab': 'com'}, {'name': 'txt'})
    ds.define_role('Regions', RegionsHandler)
    ds.define_node({'path': '/', 'title': 'Documentation', 'output': 'basic'},
                   {'path': 'regions', 'title': 'Regions'},
                   {'path': 'regions/list', 'title': 'List regions', 'role': 'Regions',
                    'method': 'list'})

    ds.resolve('regions/list', 'allow_format')    # -> frozenset({'json', 'txt'})
"""
import re, logging
from collections import OrderedDict
from collections.abc import Mapping

from .constants import RunMode, FEATURE_ALL, FEATURE_STANDARD, SPECIAL_PARAM, SPECIAL_STANDARD
from .attrs import node_registry, is_empty
from .paths import PathTree, parent_of, normalize_path
from .resolve import AttributeResolver, path_of
from .roles import RoleRegistry
from .node import NodeDefiner
from .formats import FormatCatalog, VocabCatalog
from .sets import SetCatalog
from .blocks import BlockCatalog
from .rulesets import RulesetCatalog, ruleset_name_for
from .web.formats import format_support_for
from .web.utils import order_accepts
from .utils import valid_name
from .exceptions import DefinitionError, StructuralConflict

log = logging.getLogger("wds")

SERVICE_ATTRS = ('title', 'version', 'path_prefix', 'path_re', 'ruleset_prefix', 'data_source',
                 'data_provider', 'data_license', 'license_url', 'contact_name', 'contact_email')

_special_name_re = re.compile(r'^(\w+)=(\w+)$')

def _as_list(value):
    if value is None:
        return []
    if isinstance(value, str):
        return [v for v in re.split(r'\s*,\s*', value.strip()) if v]
    return [v for v in value if v]

def parse_features(value) -> dict:
    """
    interpret a feature specification (a list or comma-separated string) and return a dictionary
    mapping each known feature to 1 (enabled) or 0 (disabled).  "standard" enables the standard
    features (without overriding features given explicitly); "no_<feature>" disables one.
    """
    out = {}
    for f in _as_list(value):
        if f == 'standard':
            for p in FEATURE_STANDARD:
                out.setdefault(p, 1)
            continue
        key, val = f, 1
        if f.startswith('no_'):
            key, val = f[3:], 0
        if key not in FEATURE_ALL:
            raise DefinitionError(f"unknown feature '{f}'")
        out[key] = val
    return out

def parse_special_params(value) -> dict:
    """
    interpret a special-parameter specification (a list or comma-separated string) and return a
    dictionary mapping each enabled special parameter to the name it is accepted under.
    "standard" enables the standard set; "no_<param>" disables one; "<param>=<name>" enables a
    parameter under a different name.
    """
    out = {}
    for s in _as_list(value):
        if s == 'standard':
            for p in SPECIAL_STANDARD:
                out.setdefault(p, SPECIAL_PARAM[p])
            continue
        key, name = s, SPECIAL_PARAM.get(s)
        m = _special_name_re.match(s)
        if s.startswith('no_'):
            key, name = s[3:], ''
        elif m:
            key, name = m.group(1), m.group(2)
        if key not in SPECIAL_PARAM:
            raise DefinitionError(f"unknown special parameter '{key}'")
        out[key] = name
    return OrderedDict((k, out[k]) for k in SPECIAL_PARAM if k in out and out[k])

class DataService(object):
    """
    a configured data service.  Definitions (of nodes, formats, and so on) are expected to be made
    at start-up; once attribute values start to be requested, they are cached for the life of the
    service.
    """

    def __init__(self, name: str, title: str=None, version: str=None, config: Mapping=None,
                 features='standard', special_params='standard', mode: RunMode=None,
                 logger=None, **attrs):
        """
        create the data service

        :param str name:      a name for the service (used, e.g., to find its configuration)
        :param str title:     a human-readable title for the service
        :param str version:   the version of the service's interface
        :param dict config:   the application configuration; a section named after the service
                              takes precedence over top-level values
        :param features:      the features to enable, as a list or comma-separated string
        :param special_params:  the special parameters to enable, as a list or comma-separated
                              string
        :param RunMode mode:  the mode the service runs in
        :param Logger logger: the Logger to use; defaults to one named after the service
        :param attrs:         other service attributes (path_prefix, ruleset_prefix, data_source,
                              data_provider, data_license, license_url, contact_name, contact_email)
        """
        if not valid_name(name):
            raise DefinitionError(f"not a valid data service name: '{name}'")
        unknown = [k for k in attrs if k not in SERVICE_ATTRS]
        if unknown:
            raise DefinitionError("unknown data service attribute(s): " + ", ".join(unknown))

        self.name = name
        self.config = config or {}
        self.mode = mode or RunMode()
        self.log = logger or log.getChild(name)

        attrs['title'] = title
        attrs['version'] = version
        for key in SERVICE_ATTRS:
            val = attrs.get(key)
            if val is None and key != 'path_re':
                val = self.config_value(key)
            setattr(self, key, val)
        if self.path_prefix is None:
            self.path_prefix = ''
        if self.ruleset_prefix is None:
            self.ruleset_prefix = ''
        if not self.path_re and self.path_prefix:
            self.path_re = '^/?' + re.escape(self.path_prefix.strip('/')) + '(?:/(.*)|$)'

        self.feature = parse_features(features)
        self.special = parse_special_params(special_params)
        if self.feature.get('format_suffix') and self.special.get('format'):
            raise StructuralConflict("you may not specify the feature 'format_suffix' together with "
                                     "the special parameter 'format'")
        if not self.feature.get('documentation'):
            self.feature['doc_paths'] = 0

        self.vocab = VocabCatalog(self.log.getChild("vocab"))
        self.format = FormatCatalog(self.vocab, self.log.getChild("format"))
        self.set = SetCatalog(self.log.getChild("set"))
        self.block = BlockCatalog(self.log.getChild("block"))
        self.ruleset = RulesetCatalog(self.log.getChild("ruleset"))
        self.roles = RoleRegistry()

        self.registry = node_registry(self.format.enabled, self.vocab.enabled)
        self.tree = PathTree()
        self.resolver = AttributeResolver(self.tree, self.registry, self.config_value,
                                          self.log.getChild("resolve"))
        self.nodes = NodeDefiner(self.tree, self.registry, self.resolver, self.roles, self.format,
                                 self.vocab, self.mode, self.log.getChild("node"))

    # configuration

    def config_value(self, key: str):
        """
        return the configured value for a parameter, looking first in the section of the
        configuration named after this service, and then at the top level.  None is returned if
        the parameter is not configured.
        """
        if not key:
            raise ValueError("config_value: empty configuration parameter")
        section = self.config.get(self.name)
        if isinstance(section, Mapping) and section.get(key) is not None:
            return section[key]
        return self.config.get(key)

    def has_feature(self, name: str) -> bool:
        if name not in FEATURE_ALL:
            raise ValueError(f"has_feature: unknown feature '{name}'")
        return bool(self.feature.get(name))

    def special_param(self, name: str):
        """
        return the name under which the given special parameter is accepted, or None if it is not
        enabled
        """
        if name not in SPECIAL_PARAM:
            raise ValueError(f"special_param: unknown special parameter '{name}'")
        return self.special.get(name)

    # definitions

    def define_role(self, name: str, cls, methods=None):
        self.roles.define_role(name, cls, methods)

    def role_method(self, role: str, method: str):
        return self.roles.role_method(role, method)

    def define_node(self, *items):
        return self.nodes.define_node(*items)

    def add_node_doc(self, path, doc: str):
        self.nodes.add_node_doc(normalize_path(path), doc)

    def node_defined(self, path) -> bool:
        return self.nodes.node_defined(path)

    def node(self, path):
        return self.nodes.node(path)

    def define_format(self, *items):
        return self.format.define_format(*items)

    def define_vocab(self, *items):
        return self.vocab.define_vocab(*items)

    def define_set(self, name: str, *items):
        return self.set.define_set(name, *items)

    def set_defined(self, name: str) -> bool:
        return self.set.set_defined(name)

    def valid_set(self, name: str):
        return self.set.valid_set(name)

    def define_block(self, name: str, *items):
        return self.block.define_block(name, *items)

    def block_defined(self, name: str) -> bool:
        return self.block.block_defined(name)

    def define_ruleset(self, name: str, *items):
        return self.ruleset.define_ruleset(name, *items)

    def ruleset_defined(self, name: str) -> bool:
        return self.ruleset.ruleset_defined(name)

    # queries

    def resolve(self, path_or_request, key: str):
        """
        return the effective value of a node attribute (or None).  The first argument can be a
        path or a request object with a ``node_path`` property.
        """
        return self.resolver.resolve(path_or_request, key)

    node_attr = resolve

    def paths(self):
        """
        return the defined node paths, sorted
        """
        return sorted(self.tree.paths())

    def _explicitly_empty(self, path: str, key: str) -> bool:
        # True if the nearest definition of key along the path's ancestry sets it empty
        p = path
        while p is not None:
            if self.tree.has_local(p, key):
                return is_empty(self.tree.local_value(p, key))
            p = parent_of(p)
        return False

    def effective_ruleset_name(self, path_or_request):
        """
        return the name of the parameter ruleset that applies to a node, or None if there is none.
        This is the node's ``ruleset`` attribute if set; otherwise, a name derived from the path
        (prefixed by ``ruleset_prefix`` and with "/" replaced by ":") if such a ruleset is defined.
        """
        path = path_of(path_or_request)
        explicit = self.resolve(path, 'ruleset')
        if explicit is None and self._explicitly_empty(path, 'ruleset'):
            explicit = ''
        return ruleset_name_for(path, explicit, self.ruleset_prefix, self.ruleset)

    determine_ruleset = effective_ruleset_name

    def format_support(self, path_or_request):
        """
        return a :py:class:`~wds.web.formats.FormatSupport` instance for the formats a node allows
        """
        return format_support_for(self.format, self.resolve(path_or_request, 'allow_format'),
                                  self.resolve(path_or_request, 'default_format'))

    def select_format(self, path_or_request, formats=None, accepts=None):
        """
        select the output format for a request to a node, given the requested format names (or
        content types) and the client's acceptable content types.  If neither is given, the node's
        default format is returned.

        :param accepts:  the value of the request's Accept header (or a list of such values);
                         content types are tried in the order of their q-values
        :rtype: Format
        :raise UnsupportedFormat:  if none of the requested formats are allowed by the node
        :raise Unacceptable:       if no allowed format matches the acceptable content types
        """
        if isinstance(formats, str):
            formats = [formats]
        if accepts:
            accepts = order_accepts(accepts)
        fs = self.format_support(path_or_request)
        fmt = fs.select_format(formats, accepts)
        if fmt is None:
            fmt = fs.default_format()
        return fmt

    def diagnostic_request(self, request, **kw):
        """
        generate diagnostic output (a digest or a fields report) as requested by the query
        parameters of the given request.  See :py:func:`wds.diag.diagnostic_request`.
        """
        from .diag import diagnostic_request
        return diagnostic_request(self, request, **kw)

    def __repr__(self):
        return "DataService(%r)" % self.name
