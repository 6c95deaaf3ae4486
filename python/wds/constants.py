"""
some constants for web data services
"""
from collections import namedtuple, OrderedDict

# the features a data service may enable
FEATURE_ALL = ('format_suffix', 'documentation', 'doc_paths', 'send_files', 'strict_params',
               'stream_output')
FEATURE_STANDARD = FEATURE_ALL

# the special parameters a data service may accept, mapped to their default parameter names
SPECIAL_PARAM = OrderedDict([
    ('selector', 'v'),
    ('format', 'format'),
    ('path', 'op'),
    ('show', 'show'),
    ('limit', 'limit'),
    ('offset', 'offset'),
    ('count', 'count'),
    ('vocab', 'vocab'),
    ('showsource', 'showsource'),
    ('linebreak', 'lb'),
    ('header', 'header'),
    ('save', 'save'),
])
SPECIAL_STANDARD = ('show', 'limit', 'offset', 'header', 'showsource', 'count', 'vocab',
                    'linebreak', 'save')

# content types assumed for formats with these names when none is given
FORMAT_CONTENT_TYPE = {
    'json': 'application/json',
    'txt':  'text/plain',
    'tsv':  'text/tab-separated-values',
    'csv':  'text/csv',
    'html': 'text/html',
    'xml':  'text/xml',
}

# the vocabulary that is available until one is explicitly defined
DEFAULT_VOCAB = 'default'

# values of a ruleset rule's 'valid' modifier that do not refer to a set
FLAG_VALUE = 'FLAG_VALUE'
ANY_VALUE = 'ANY_VALUE'

RunMode = namedtuple("RunMode", ["debug", "one_request", "diagnostic", "late_path_check"])
RunMode.__new__.__defaults__ = (False, False, False, False)
RunMode.__doc__ = """
the mode that a data service runs in.  This is set once when the service is constructed.

  debug:            log node definitions at the INFO level (rather than DEBUG)
  one_request:      the process will handle a single request (e.g. from the command line)
  diagnostic:       the process will generate diagnostic output rather than handle requests
  late_path_check:  allow nodes to be defined before their parents
"""
