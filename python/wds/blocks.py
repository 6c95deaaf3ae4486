"""
Output blocks: named, ordered lists of the fields that an operation can include in its result
records.

Each record given to :py:meth:`BlockCatalog.define_block` is either an output field (with an
``output`` key naming the underlying data field) or one of the other kinds of output-list entries
(``include``, ``select``, ``filter``, ``set``).  A string documents the record just before it.
"""
from collections import OrderedDict

from .catalog import Catalog, add_doc
from .utils import caller_location
from .exceptions import DefinitionError, UnknownAttribute

RECORD_TYPES = ('output', 'include', 'select', 'filter', 'set')

FIELD_ATTRS = ('output', 'name', 'value', 'if_block', 'not_block', 'if_vocab', 'not_vocab',
               'if_field', 'not_field', 'if_format', 'not_format', 'if_code', 'not_code',
               'data_type', 'sub_record', 'text_join', 'show_as_list', 'dedup', 'undocumented',
               'doc_string')

OTHER_ATTRS = ('include', 'select', 'filter', 'set', 'from', 'from_each', 'join', 'lookup',
               'default', 'split', 'code', 'always', 'if_block', 'not_block', 'if_vocab',
               'not_vocab', 'if_field', 'not_field', 'if_format', 'not_format', 'if_code',
               'not_code', 'undocumented', 'doc_string')

CONDITIONALS = ('if_block', 'not_block', 'if_vocab', 'not_vocab', 'if_field', 'not_field',
                'if_format', 'not_format', 'if_code', 'not_code')

def _vocab_key(key):
    # <vocab>_name and <vocab>_value give vocabulary-specific names and values
    return key.endswith('_name') or key.endswith('_value')

class BlockCatalog(Catalog):
    """
    the collection of output blocks defined for a data service
    """
    entity = "block"

    def define_block(self, name: str, *items) -> dict:
        """
        define an output block.

        :return:  the block record, containing the block's ``name``, ``defined_at`` location and
                  ``output_list``
        :raise DefinitionError:   if the name or a record is invalid
        :raise UnknownAttribute:  if a record contains an unrecognized key
        """
        where = caller_location()
        self._check_new_name(name, where)

        block = OrderedDict([('name', name), ('defined_at', where), ('output_list', [])])
        outlist = block['output_list']
        for item in items:
            if isinstance(item, str):
                if outlist:
                    add_doc(outlist[-1], item)
                else:
                    add_doc(block, item)
                continue
            if not isinstance(item, dict):
                raise DefinitionError("define_block: arguments must be records (dictionaries) and "
                                      "documentation strings", name, where=where)

            rtypes = [t for t in RECORD_TYPES if t in item]
            if len(rtypes) != 1:
                raise DefinitionError("define_block: each record must include exactly one of " +
                                      ", ".join(RECORD_TYPES), name, where=where)

            known = FIELD_ATTRS if rtypes[0] == 'output' else OTHER_ATTRS
            for key in item:
                if key not in known and not (rtypes[0] == 'output' and _vocab_key(key)):
                    raise UnknownAttribute(key, name, "output record", where)

            outlist.append(OrderedDict(item))

        self[name] = block
        self.log.debug("Defined output block '%s' with %d records", name, len(outlist))
        return block

    def block_defined(self, name: str) -> bool:
        return name in self

    def fields_of(self, name: str):
        """
        return the output field records of the named block (an empty list if it is not defined)
        """
        block = self.get(name)
        if not block:
            return []
        return [r for r in block['output_list'] if r.get('output')]
