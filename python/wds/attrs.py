"""
Attribute schemas for the entities that make up a data service's configuration.

Each attribute of a node has a *kind* that determines both the syntax accepted when it is defined
and how its effective value is composed with the value inherited from the node's parent:

``scalar``
    the local value overrides any inherited value.
``set``
    a comma-separated list of tokens; if any token carries a ``+`` or ``-`` prefix, the tokens
    are applied to the inherited set, otherwise they replace it.
``list``
    a comma-separated list; the local list replaces the inherited one.
``hook``
    one or more callables (or names of callables); the local list replaces the inherited one.
``non-heritable``
    never inherited; the effective value is exactly the local value.
``ignore``
    accepted in definitions but not resolved (e.g. ``path`` itself).

In all heritable kinds, an explicitly empty value ('' or None) means "do not inherit": the
effective value is undefined.
"""
import re
from collections import OrderedDict
from collections.abc import Sequence

from .exceptions import InvalidAttributeValue

SCALAR = "scalar"
SET = "set"
LIST = "list"
HOOK = "hook"
NONHERITABLE = "non-heritable"
IGNORE = "ignore"

KINDS = (SCALAR, SET, LIST, HOOK, NONHERITABLE, IGNORE)

_set_token_re = re.compile(r'^[+-]?[\w.:][\w.:-]*$')
_list_token_re = re.compile(r'^[\w.:-]+$')
_comma_re = re.compile(r'\s*,\s*')

def is_empty(value):
    """
    return True if the given raw attribute value means "explicitly unset"
    """
    return value is None or (isinstance(value, str) and value == '')

def split_tokens(value):
    """
    split a raw set- or list-valued attribute into its tokens.  The value can be given either as
    a comma-separated string or as a sequence of strings (each of which may itself contain commas).
    Empty tokens are dropped.
    """
    if isinstance(value, str):
        value = [value]
    out = []
    for item in value:
        if not isinstance(item, str):
            raise TypeError("token is not a string: " + repr(item))
        out.extend([t for t in _comma_re.split(item.strip()) if t])
    return out

def compose_set(inherited, tokens):
    """
    apply the given set tokens to an inherited set of values and return the resulting frozenset.
    Tokens starting with '-' remove a value; all others add one.
    """
    out = set(inherited or ())
    for tok in tokens:
        if tok.startswith('-'):
            out.discard(tok[1:])
        elif tok.startswith('+'):
            out.add(tok[1:])
        else:
            out.add(tok)
    return frozenset(out)

class AttributeRegistry(object):
    """
    the schema of attributes recognized for one type of entity (e.g. "node").  For each attribute,
    the registry records its kind and, optionally, a built-in default that applies at the root of
    the inheritance chain.  A default may be given as a callable, in which case it is called (with
    no arguments) each time the default is needed; this allows defaults that depend on other parts
    of the configuration (like the set of defined formats).
    """

    def __init__(self, entity: str="node", schema=None, defaults=None):
        """
        create the registry

        :param str entity:   a name for the type of entity these attributes describe
        :param schema:       an initial set of attribute definitions, given as a mapping of
                             attribute names to kinds
        :param defaults:     an initial set of default values, given as a mapping of attribute
                             names to values (or callables returning values)
        """
        self.entity = entity
        self._kinds = OrderedDict()
        self._defaults = {}
        if schema:
            for key, kind in schema.items():
                self.register(key, kind)
        if defaults:
            for key, val in defaults.items():
                self.set_default(key, val)

    def register(self, key: str, kind: str=SCALAR, default=None):
        """
        add an attribute to this schema (or change an existing attribute's kind)
        """
        if kind not in KINDS:
            raise ValueError("Unrecognized attribute kind: " + str(kind))
        self._kinds[key] = kind
        if default is not None:
            self._defaults[key] = default

    def set_default(self, key: str, value):
        if key not in self._kinds:
            raise KeyError(key)
        self._defaults[key] = value

    def kind_of(self, key: str):
        """
        return the kind of the named attribute or None if it is not recognized
        """
        return self._kinds.get(key)

    def is_known(self, key: str) -> bool:
        return key in self._kinds

    def __contains__(self, key):
        return key in self._kinds

    def keys(self):
        return list(self._kinds.keys())

    def keys_of_kind(self, kind: str):
        return [k for k, v in self._kinds.items() if v == kind]

    def has_default(self, key: str) -> bool:
        return key in self._defaults

    def default(self, key: str):
        """
        return the built-in default for the named attribute, or None if there is none
        """
        val = self._defaults.get(key)
        if callable(val):
            val = val()
        return val

    def normalize(self, key: str, value, path: str=None):
        """
        check the syntax of a raw value for the named attribute and return it in the form that
        is stored as the local value.  Empty values are returned as given; set and list values
        are returned as a tuple of tokens; hook values as a tuple of handlers.

        :raise InvalidAttributeValue:  if the value is not legal for the attribute's kind
        """
        kind = self._kinds.get(key)
        if is_empty(value) or kind in (SCALAR, NONHERITABLE, IGNORE, None):
            return value

        if kind == HOOK:
            if isinstance(value, (list, tuple)):
                handlers = tuple(value)
            else:
                handlers = (value,)
            for h in handlers:
                if not (callable(h) or isinstance(h, str)):
                    raise InvalidAttributeValue(key, h, path,
                                                f"({key}) invalid value '{h}', must be a callable or string")
            return handlers

        if not isinstance(value, (str, Sequence)):
            raise InvalidAttributeValue(key, value, path)
        try:
            tokens = split_tokens(value)
        except TypeError:
            raise InvalidAttributeValue(key, value, path)

        if kind == SET:
            for tok in tokens:
                if not _set_token_re.match(tok):
                    raise InvalidAttributeValue(key, value, path)
        else:
            for tok in tokens:
                if not _list_token_re.match(tok):
                    raise InvalidAttributeValue(key, value, path)
            if not tokens:
                raise InvalidAttributeValue(key, value, path)

        return tuple(tokens)

    @staticmethod
    def composes(tokens) -> bool:
        """
        return True if the given (normalized) set tokens should be composed with the inherited
        value rather than replace it
        """
        return any(t[:1] in ('+', '-') for t in tokens)


NODE_SCHEMA = OrderedDict([
    ('path', IGNORE),
    ('disabled', SCALAR),
    ('undocumented', SCALAR),
    ('title', NONHERITABLE),
    ('usage', SCALAR),
    ('collapse_tree', SCALAR),
    ('file_dir', SCALAR),
    ('file_path', SCALAR),
    ('send_files', SCALAR),
    ('role', SCALAR),
    ('method', SCALAR),
    ('arg', SCALAR),
    ('node_tag', SET),
    ('node_data', SCALAR),
    ('ruleset', SCALAR),
    ('output', LIST),
    ('summary', LIST),
    ('output_label', SCALAR),
    ('optional_output', SCALAR),
    ('public_access', SCALAR),
    ('default_format', SCALAR),
    ('default_limit', SCALAR),
    ('default_header', SCALAR),
    ('default_datainfo', SCALAR),
    ('default_count', SCALAR),
    ('default_linebreak', SCALAR),
    ('default_save_filename', SCALAR),
    ('stream_threshold', SCALAR),
    ('init_operation_hook', HOOK),
    ('post_params_hook', HOOK),
    ('post_configure_hook', HOOK),
    ('post_process_hook', HOOK),
    ('output_record_hook', HOOK),
    ('use_cache', SCALAR),
    ('allow_method', SET),
    ('allow_format', SET),
    ('allow_vocab', SET),
    ('doc_string', SCALAR),
    ('doc_template', NONHERITABLE),
    ('doc_default_template', SCALAR),
    ('doc_default_op_template', SCALAR),
    ('doc_defs', SCALAR),
    ('doc_header', SCALAR),
    ('doc_footer', SCALAR),
    ('example', NONHERITABLE),
])

DEFAULT_METHODS = ('GET', 'HEAD')
HTTP_METHODS = ('GET', 'HEAD', 'POST', 'PUT', 'DELETE')

def node_registry(formats=None, vocabs=None) -> AttributeRegistry:
    """
    create an AttributeRegistry describing node attributes.

    :param formats:  a callable returning the names of the formats that nodes may use by default
    :param vocabs:   a callable returning the names of the vocabularies that nodes may use by default
    """
    reg = AttributeRegistry("node", NODE_SCHEMA)
    reg.set_default('default_header', 1)
    reg.set_default('allow_method', frozenset(DEFAULT_METHODS))
    if formats:
        reg.set_default('allow_format', lambda: frozenset(formats()))
    if vocabs:
        reg.set_default('allow_vocab', lambda: frozenset(vocabs()))
    return reg
