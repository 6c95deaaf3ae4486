"""
The "fields" diagnostic: a report tabulating the output fields of all of a data service's output
blocks, grouped by the name each field is given under each vocabulary.  It is used to check that
field names and values are consistent across all of the operations of a service.
"""
import os, sys, logging
from collections import OrderedDict

from ..blocks import CONDITIONALS
from ..utils import glob_to_regex
from ..exceptions import UnknownDiagnosticParameter

log = logging.getLogger("wds.diag.fields")

RULE = "=" * 79

def _vocab_name(field, vocab, vrec):
    name = field.get(vocab + '_name') or field.get('name')
    if not name and vrec.get('use_field_names'):
        name = field.get('output')
    return name

def _vocab_value(field, vocab):
    return field.get(vocab + '_value') or field.get('value')

def collect_fields(ds, vocab: str=None, name: str=None, data: str=None):
    """
    find the output fields matching the given criteria.

    :param DataService ds:  the data service whose blocks should be examined
    :param str vocab:  report only names given under this vocabulary
    :param str name:   a wildcard pattern that reported field names must match
    :param str data:   a wildcard pattern that the underlying data fields must match
    :return:  an ordered dictionary mapping "<vocab>:<name>" to a list of row records, sorted
              case-insensitively by key.  Each row is a copy of the output record with the
              ``block``, ``vocab``, and ``vvalue`` (vocabulary-specific value) added.
    :raise UnknownDiagnosticParameter:  if the given vocabulary is not defined
    """
    if vocab and vocab not in ds.vocab:
        raise UnknownDiagnosticParameter('vocab', vocab,
                                         "vocabulary '%s' is not defined for this data service"
                                         % vocab)
    name_re = glob_to_regex(name)
    data_re = glob_to_regex(data)
    vocabs = [vocab] if vocab else list(ds.vocab.vocab_list)

    by_name = {}
    for bname, block in ds.block.items():
        for field in block.get('output_list') or []:
            if not isinstance(field, dict) or not field.get('output'):
                continue
            if data_re and not data_re.match(str(field['output'])):
                continue

            for v in vocabs:
                fname = _vocab_name(field, v, ds.vocab.get(v) or {})
                if fname is None or fname == '':
                    continue
                if name_re and not name_re.match(str(fname)):
                    continue
                row = dict(field)
                row.update({'block': bname, 'vocab': v, 'vvalue': _vocab_value(field, v)})
                by_name.setdefault("%s:%s" % (v, fname), []).append(row)

    return OrderedDict((k, by_name[k]) for k in sorted(by_name, key=str.lower))

def _conditionals(row):
    out = []
    for c in CONDITIONALS:
        value = row.get(c)
        if not value:
            continue
        if isinstance(value, (list, tuple)):
            value = ", ".join(str(v) for v in value)
        out.append("%s %s" % (c, value))
    return out

def _location(ds, row):
    loc = (ds.block.get(row['block']) or {}).get('defined_at') or ''
    return loc.replace(os.getcwd() + os.sep, '')

def _output(row):
    out = str(row['output'])
    if row.get('vvalue') is not None and row['vvalue'] != '':
        out += ' "%s"' % row['vvalue']
    return out

def write_fields_report(ds, by_name, out=None, query=None, doc: str=None):
    """
    write the fields report for fields collected by :py:func:`collect_fields`.

    :param by_name:  the collected fields
    :param out:      the stream to write to (default: standard output)
    :param list query:  descriptions of the criteria used, for the report header
    :param str doc:  if "short", include the first line of each field's documentation; if
                     "long", include all of it
    """
    if out is None:
        out = sys.stdout

    widths = [0, 0, 0, 0]
    for rows in by_name.values():
        for row in rows:
            widths[0] = max(widths[0], len(_output(row)))
            widths[1] = max(widths[1], len(row['block']))
            for c in _conditionals(row):
                widths[2] = max(widths[2], len(c))
            widths[3] = max(widths[3], len(_location(ds, row)))

    def line(*cols):
        return ("    " + " ".join("%-*s" % (w, c) for w, c in zip(widths, cols))).rstrip() + "\n"

    out.write("\n")
    out.write(("DIAGNOSTIC: FIELDS       " + ", ".join(query or [])).rstrip() + "\n")
    out.write(RULE + "\n\n")
    out.write(" field name\n\n")

    headings = [h if w else '' for h, w in zip(("field", "block", "conditionals", "definition"),
                                               widths)]
    out.write(line(*headings))
    out.write("\n")

    for key, rows in by_name.items():
        vocab, name = key.split(':', 1)
        out.write(" %s : '%s'\n\n" % (vocab, name))
        for row in rows:
            conds = _conditionals(row) or ['']
            out.write(line(_output(row), row['block'], conds[0], _location(ds, row)))
            for cond in conds[1:]:
                out.write(line('', '>>>', cond, ''))

            docstr = row.get('doc_string')
            if doc and docstr:
                if doc == 'long':
                    docstr = docstr.replace("\n", "\n        ")
                else:
                    docstr = docstr.split("\n", 1)[0]
                out.write('        "%s"\n' % docstr)
        out.write("\n")

    if not by_name:
        out.write("No matching fields were found.\n\n")

def fields_report(ds, params, out=None) -> int:
    """
    generate the fields report for a data service according to the given diagnostic parameters
    (``vocab``, ``name``, ``data``, and ``doc``) and write it to ``out``.

    :return:  the number of distinct field names reported
    """
    doc = params.get('doc')
    if doc and doc not in ('short', 'long'):
        raise UnknownDiagnosticParameter('doc', doc, "doc must be 'short' or 'long'")

    by_name = collect_fields(ds, params.get('vocab'), params.get('name'), params.get('data'))

    query = []
    for key in ('vocab', 'name', 'data'):
        if params.get(key):
            query.append("%s = %s" % (key, params[key]))

    write_fields_report(ds, by_name, out, query, doc)
    log.debug("fields report: %d matching field names", len(by_name))
    return len(by_name)
