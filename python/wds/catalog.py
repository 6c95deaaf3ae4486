"""
A base class for the named collections of configuration entities (sets, formats, vocabularies,
output blocks, and rulesets) that make up a data service.
"""
import logging
from collections import OrderedDict
from collections.abc import Mapping

from .utils import valid_name
from .exceptions import DefinitionError, DuplicateDefinition, UnknownAttribute

def add_doc(record: dict, doc: str):
    """
    append a documentation string to the ``doc_string`` property of the given record
    """
    if doc is None or doc == '':
        return
    if record.get('doc_string'):
        record['doc_string'] += "\n" + doc
    else:
        record['doc_string'] = doc

class Catalog(OrderedDict):
    """
    an ordered mapping of entity names to entities of one type.  Subclasses provide a
    ``define_*`` method that creates the entities; entities are never removed or replaced.
    """
    entity = "entity"

    def __init__(self, logger=None):
        super(Catalog, self).__init__()
        self.log = logger or logging.getLogger("wds." + self.entity)

    def defined(self, name) -> bool:
        return name in self

    def defined_at(self, name):
        ent = self.get(name)
        if ent is None:
            return None
        if isinstance(ent, Mapping):
            return ent.get('defined_at')
        return getattr(ent, 'defined_at', None)

    def _check_new_name(self, name, where=None):
        if not valid_name(name):
            raise DefinitionError(f"define_{self.entity}: the first argument must be a valid name",
                                  str(name), where=where)
        if name in self:
            raise DuplicateDefinition(f"define_{self.entity}: '{name}' was already defined at "
                                      f"{self.defined_at(name)}", name, where=where)

    def _check_keys(self, record: Mapping, known, name=None, where=None):
        for key in record:
            if key not in known:
                raise UnknownAttribute(key, name, self.entity, where)
