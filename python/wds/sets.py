"""
Named sets of values.

A set lists the values that are acceptable for some purpose (e.g. the values of a parameter),
each optionally mapped to another name (e.g. the output block that an optional-output value
selects), and each optionally disabled or left undocumented:

.. code-block:: python

    sets.define_set('1.0:regions:optional_output',
        {'value': 'loc', 'maps_to': '1.0:regions:loc'},
            "Include the location of each region",
        {'value': 'pop', 'maps_to': '1.0:regions:pop', 'undocumented': 1})
"""
from collections import OrderedDict

from .catalog import Catalog, add_doc
from .utils import caller_location
from .exceptions import DefinitionError, DuplicateDefinition

SET_ATTRS = ('value', 'maps_to', 'disabled', 'undocumented')

class ValueSet(object):
    """
    a named, ordered collection of values
    """

    def __init__(self, name: str, defined_at: str=None):
        self.name = name
        self.defined_at = defined_at
        self.value = OrderedDict()
        self.value_list = []
        self.enabled = []
        self.documented = []
        self.doc_string = None

    def add_value(self, record: dict):
        """
        add a value record to this set
        """
        value = record.get('value')
        if value is None or value == '':
            raise DefinitionError("define_set: you must specify a nonempty 'value' key in each record",
                                  self.name, 'value')
        value = str(value)
        if value in self.value:
            raise DuplicateDefinition(f"define_set: value '{value}' cannot be defined twice",
                                      self.name, 'value')
        self.value[value] = dict(record)
        self.value_list.append(value)
        if not record.get('disabled'):
            self.enabled.append(value)
        if not record.get('undocumented'):
            self.documented.append(value)

    def maps_to(self, value: str):
        """
        return the name that the given value maps to, or None if it has no mapping
        """
        rec = self.value.get(value)
        return rec and rec.get('maps_to')

    def __contains__(self, value):
        return value in self.value

    def __iter__(self):
        return iter(self.value_list)

    def __len__(self):
        return len(self.value_list)

    def to_dict(self) -> dict:
        """
        return a snapshot of this set as a dictionary of plain values
        """
        out = OrderedDict([
            ('name', self.name),
            ('defined_at', self.defined_at),
            ('value', OrderedDict((v, dict(r)) for v, r in self.value.items())),
            ('value_list', list(self.value_list)),
            ('enabled', list(self.enabled)),
            ('documented', list(self.documented)),
        ])
        if self.doc_string:
            out['doc_string'] = self.doc_string
        return out

    def __repr__(self):
        return "ValueSet(%r)" % self.name

class SetValidator(object):
    """
    a validator that accepts values (or comma-separated lists of values) that are enabled in a
    particular set.  The validator carries the name of its set so that it can be reported by
    name in diagnostics.
    """

    def __init__(self, set_name: str, values=None):
        self.set_name = set_name
        self.values = tuple(values or ())

    @property
    def name(self) -> str:
        return self.set_name

    def __call__(self, value, context=None):
        """
        check a parameter value, returning a dictionary with either a ``value`` property (a list of
        the accepted values) or an ``error`` property explaining the failure.
        """
        if not self.values:
            return {'error': "No valid values have been defined for {param}."}
        if isinstance(value, str):
            given = [v.strip() for v in value.split(',') if v.strip()]
        else:
            given = list(value)
        bad = [v for v in given if v not in self.values]
        if bad:
            return {'error': "bad value '%s' for {param}: must be one of %s" %
                             (", ".join(bad), ", ".join(self.values))}
        return {'value': given}

    def __eq__(self, other):
        return isinstance(other, SetValidator) and other.set_name == self.set_name and \
               other.values == self.values

    def __hash__(self):
        return hash(self.set_name)

    def __repr__(self):
        return "SetValidator(%r)" % self.set_name

class SetCatalog(Catalog):
    """
    the collection of value sets defined for a data service
    """
    entity = "set"

    def define_set(self, name: str, *items) -> ValueSet:
        """
        define a new set.  Each dictionary argument defines a value (and may contain the keys
        ``value``, ``maps_to``, ``disabled``, and ``undocumented``); each string documents the value
        before it, or the set itself if it precedes all values.

        :raise DefinitionError:  if the name is invalid, or a record is invalid
        :raise DuplicateDefinition:  if the set or one of its values is defined twice
        """
        where = caller_location()
        self._check_new_name(name, where)
        vs = ValueSet(name, where)

        last = None
        for item in items:
            if isinstance(item, str):
                if last is None:
                    vs.doc_string = (vs.doc_string + "\n" + item) if vs.doc_string else item
                else:
                    add_doc(vs.value[last], item)
            elif isinstance(item, dict):
                self._check_keys(item, SET_ATTRS, name, where)
                try:
                    vs.add_value(item)
                except DefinitionError as ex:
                    ex.where = where
                    raise
                last = vs.value_list[-1]
            else:
                raise DefinitionError("define_set: arguments must be records (dictionaries) and "
                                      "documentation strings", name, where=where)

        self[name] = vs
        self.log.debug("Defined set '%s' with %d values", name, len(vs))
        return vs

    def set_defined(self, name: str) -> bool:
        return name in self

    def valid_set(self, name: str) -> SetValidator:
        """
        return a validator that accepts the enabled values of the named set.  If the set is not
        defined, a warning is logged and the returned validator rejects every value.
        """
        vs = self.get(name)
        if vs is None:
            self.log.warning("valid_set: unknown set '%s'", name)
            return SetValidator(name)
        return SetValidator(name, vs.enabled)

    def document_set(self, name: str) -> str:
        """
        return a plain-text listing of the documented values of the named set, one per line, each
        followed by its (indented) documentation.
        """
        vs = self.get(name)
        if vs is None:
            return ""
        lines = []
        for v in vs.documented:
            lines.append(v)
            doc = vs.value[v].get('doc_string')
            if doc:
                lines.extend(["    " + d for d in doc.split("\n")])
        return "\n".join(lines)
