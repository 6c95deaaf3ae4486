"""
Definitions of the output formats and vocabularies supported by a data service.

A format (e.g. "json", "txt") determines how result records are serialized; a vocabulary
determines the names given to output fields.  Each node selects the formats and vocabularies it
allows via its ``allow_format`` and ``allow_vocab`` attributes; by default, a node allows all
enabled formats and vocabularies.
"""
from collections import OrderedDict

from .catalog import Catalog, add_doc
from .constants import FORMAT_CONTENT_TYPE, DEFAULT_VOCAB
from .utils import caller_location
from .exceptions import DefinitionError, StructuralConflict

FORMAT_ATTRS = ('name', 'content_type', 'default_vocab', 'disposition', 'doc_node', 'doc_string',
                'is_text', 'module', 'package', 'title', 'uses_header', 'undocumented', 'disabled',
                'encode_as_text')

VOCAB_ATTRS = ('name', 'title', 'use_field_names', 'doc_node', 'doc_string', 'undocumented',
               'disabled')

class VocabCatalog(Catalog):
    """
    the collection of vocabularies defined for a data service.  Until a vocabulary is explicitly
    defined, a vocabulary named "default" is available that uses the underlying field names.
    """
    entity = "vocab"

    def __init__(self, logger=None):
        super(VocabCatalog, self).__init__(logger)
        self[DEFAULT_VOCAB] = OrderedDict([('name', DEFAULT_VOCAB), ('use_field_names', 1),
                                           ('_default', 1)])
        self.vocab_list = [DEFAULT_VOCAB]
        self._explicit = False

    def define_vocab(self, *items):
        """
        define one or more vocabularies.  Each dictionary argument defines a vocabulary (and must
        contain a ``name``); each string documents the vocabulary before it.

        :return:  the record for the last vocabulary defined
        """
        where = caller_location()
        last = None
        for item in items:
            if isinstance(item, str):
                if last is None:
                    raise DefinitionError("define_vocab: a documentation string must follow a "
                                          "vocabulary definition", where=where)
                add_doc(last, item)
                continue
            if not isinstance(item, dict):
                raise DefinitionError("define_vocab: arguments must be dictionaries and strings",
                                      where=where)

            name = item.get('name')
            builtin = not self._explicit and DEFAULT_VOCAB in self
            if not (builtin and name == DEFAULT_VOCAB):
                self._check_new_name(name, where)
            self._check_keys(item, VOCAB_ATTRS, name, where)

            # the built-in vocabulary is no longer listed once any vocabulary is defined
            if builtin:
                self.vocab_list = []
                if name == DEFAULT_VOCAB:
                    del self[DEFAULT_VOCAB]

            rec = OrderedDict(item)
            rec['defined_at'] = where
            self[name] = rec
            if not rec.get('disabled'):
                self.vocab_list.append(name)
            last = rec
            self._explicit = True
            self.log.debug("Defined vocabulary '%s'", name)

        if last is None:
            raise DefinitionError("define_vocab: arguments must include at least one dictionary",
                                  where=where)
        return last

    def enabled(self):
        """
        return the names of the vocabularies that nodes allow by default
        """
        return list(self.vocab_list)

class FormatCatalog(Catalog):
    """
    the collection of output formats defined for a data service
    """
    entity = "format"

    def __init__(self, vocabs: VocabCatalog=None, logger=None):
        super(FormatCatalog, self).__init__(logger)
        self.vocabs = vocabs
        self.format_list = []

    def define_format(self, *items):
        """
        define one or more output formats.  Each dictionary argument defines a format (and must
        contain a ``name``); each string documents the format before it.  If a content type is not
        given, it is assumed from the name for the common formats (json, txt, csv, tsv, html, xml).

        :return:  the record for the last format defined
        :raise StructuralConflict:  if a format's ``default_vocab`` is not a defined vocabulary
        """
        where = caller_location()
        last = None
        for item in items:
            if isinstance(item, str):
                if last is None:
                    raise DefinitionError("define_format: a documentation string must follow a "
                                          "format definition", where=where)
                add_doc(last, item)
                continue
            if not isinstance(item, dict):
                raise DefinitionError("define_format: arguments must be dictionaries and strings",
                                      where=where)

            name = item.get('name')
            self._check_new_name(name, where)
            self._check_keys(item, FORMAT_ATTRS, name, where)

            rec = OrderedDict(item)
            rec['defined_at'] = where
            if not rec.get('content_type'):
                if name not in FORMAT_CONTENT_TYPE:
                    raise DefinitionError(f"define_format: you must specify a content type for "
                                          f"format '{name}'", name, 'content_type', where)
                rec['content_type'] = FORMAT_CONTENT_TYPE[name]

            dv = rec.get('default_vocab')
            if dv and self.vocabs is not None and dv not in self.vocabs:
                raise StructuralConflict(f"define_format: unknown vocabulary '{dv}'", name,
                                         'default_vocab', where)

            self[name] = rec
            self.format_list.append(name)
            last = rec
            self.log.debug("Defined format '%s' (%s)", name, rec['content_type'])

        if last is None:
            raise DefinitionError("define_format: arguments must include at least one dictionary",
                                  where=where)
        return last

    def enabled(self):
        """
        return the names of the formats that nodes allow by default
        """
        return [f for f in self.format_list if not self[f].get('disabled')]
