"""
Parameter rulesets: named, ordered lists of rules describing the parameters that an operation
accepts.

The rules themselves are interpreted by a separate validation layer; this module only records
them, checks their syntax, and resolves which ruleset applies to a node.  A rule is a dictionary
with exactly one primary key:

* a parameter rule (``param``, ``optional``, ``mandatory``) names a parameter and may carry
  modifiers such as ``valid``, ``alias``, ``default``, ``list``, and ``multiple``;
* an inclusion rule (``allow``, ``require``) names another ruleset whose rules apply as well;
* a constraint rule (``together``, ``at_most_one``, ``require_one``, ``require_any``, ``ignore``)
  relates several parameters.

A string documents the rule just before it (or the ruleset itself, if it comes first).
"""
from collections import OrderedDict

from .catalog import Catalog, add_doc
from .constants import FLAG_VALUE, ANY_VALUE
from .utils import caller_location
from .exceptions import DefinitionError, UnknownAttribute

PARAM_RULES = ('param', 'optional', 'mandatory')
INCLUSION_RULES = ('allow', 'require')
CONSTRAINT_RULES = ('together', 'at_most_one', 'require_one', 'require_any', 'ignore',
                    'content_type')
PRIMARY_KEYS = PARAM_RULES + INCLUSION_RULES + CONSTRAINT_RULES

MODIFIERS = ('valid', 'alias', 'default', 'list', 'multiple', 'split', 'errmsg', 'warn', 'clean',
             'bad_value', 'key', 'undocumented', 'doc_string')

def reference_name(obj) -> str:
    """
    return the name to report for a value that refers to some other entity.  Strings are returned
    as is; objects that carry a ``set_name`` (i.e. set validators) are reported by that name;
    other callables are reported by their qualified name.
    """
    if isinstance(obj, str):
        return obj
    name = getattr(obj, 'set_name', None)
    if name:
        return name
    mod = getattr(obj, '__module__', None)
    qual = getattr(obj, '__qualname__', None) or getattr(obj, '__name__', None)
    if qual is None:
        qual = type(obj).__qualname__
    return "%s.%s" % (mod, qual) if mod else qual

def valid_references(rule):
    """
    return the names of the sets referred to by a rule's ``valid`` modifier.  The special values
    FLAG_VALUE and ANY_VALUE, and callables that are not set validators, are not included.
    """
    valid = rule.get('valid')
    if valid is None:
        return []
    if not isinstance(valid, (list, tuple)):
        valid = [valid]
    out = []
    for v in valid:
        if isinstance(v, str):
            if v and v not in (FLAG_VALUE, ANY_VALUE):
                out.append(v)
        elif getattr(v, 'set_name', None):
            out.append(v.set_name)
    return out

def rule_type(rule) -> str:
    """
    return the primary key of a rule (e.g. "param", "allow"), or None if it has none
    """
    for k in PRIMARY_KEYS:
        if k in rule:
            return k
    return None

class RulesetCatalog(Catalog):
    """
    the collection of parameter rulesets defined for a data service
    """
    entity = "ruleset"

    def define_ruleset(self, name: str, *items) -> dict:
        """
        define a parameter ruleset.

        :return:  the ruleset record, containing ``name``, ``defined_at``, and ``rules``
        :raise DefinitionError:   if the name or a rule is invalid
        :raise UnknownAttribute:  if a rule contains an unrecognized key
        """
        where = caller_location()
        self._check_new_name(name, where)

        rs = OrderedDict([('name', name), ('defined_at', where), ('rules', [])])
        rules = rs['rules']
        for item in items:
            if isinstance(item, str):
                add_doc(rules[-1] if rules else rs, item)
                continue
            if not isinstance(item, dict):
                raise DefinitionError("define_ruleset: arguments must be rules (dictionaries) and "
                                      "documentation strings", name, where=where)

            primary = [k for k in PRIMARY_KEYS if k in item]
            if len(primary) != 1:
                raise DefinitionError("define_ruleset: each rule must include exactly one of " +
                                      ", ".join(PRIMARY_KEYS), name, where=where)
            for key in item:
                if key not in PRIMARY_KEYS and key not in MODIFIERS:
                    raise UnknownAttribute(key, name, "rule", where)

            if primary[0] in INCLUSION_RULES and not isinstance(item[primary[0]], str):
                raise DefinitionError(f"define_ruleset: the value of '{primary[0]}' must be the "
                                      "name of a ruleset", name, primary[0], where)

            rules.append(OrderedDict(item))

        self[name] = rs
        self.log.debug("Defined ruleset '%s' with %d rules", name, len(rules))
        return rs

    def ruleset_defined(self, name: str) -> bool:
        return name in self

    def rules_of(self, name: str):
        rs = self.get(name)
        return rs['rules'] if rs else []

    def inclusions(self, name: str):
        """
        return the names of the rulesets directly included by the named ruleset
        """
        return [r[rule_type(r)] for r in self.rules_of(name) if rule_type(r) in INCLUSION_RULES]

def ruleset_name_for(path: str, explicit, prefix: str, catalog: RulesetCatalog):
    """
    determine the name of the ruleset that applies to a node.

    :param str path:      the node's path
    :param explicit:      the node's effective ``ruleset`` attribute (None if unset, '' if
                          explicitly disabled)
    :param str prefix:    the prefix prepended to a derived ruleset name
    :param RulesetCatalog catalog:  the defined rulesets
    :return:  the explicit ruleset if given; otherwise the name derived from the path (with "/"
              replaced by ":") if a ruleset by that name is defined; otherwise None
    """
    if explicit:
        return explicit
    if explicit == '':
        return None
    if not path or path == '/':
        return None
    derived = (prefix or '') + path.replace('/', ':')
    if catalog is not None and catalog.ruleset_defined(derived):
        return derived
    return None
