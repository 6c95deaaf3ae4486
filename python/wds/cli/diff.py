"""
CLI command that compares two configuration digests and reports their differences.
"""
import os, sys, logging

from ..utils.cli import CommandFailure, explain
from ..diag.diff import DigestDiffEngine, DiffOptions
from ..diag.report import COMP_MARKERS
from ..exceptions import DigestError

default_name = "diff"
help = "compare two configuration digests and report the differences"
description = """
  Compare two configuration digests (as produced by the diag command with show=digest) and report
  the differences between them, e.g. to produce a change log between two versions of a data
  service.  If two files are given, the first is the older (left) digest and the second the newer
  (right) one; if only one file is given, the left digest is read from standard input.

  By default, the service attributes, special parameters, vocabularies, formats and nodes are
  compared; the options select specific comparisons instead.
"""

def load_into(subparser):
    """
    load this command into a CLI by defining the command's arguments and options
    :param argparser.ArgumentParser subparser:  the argument parser instance to define this command's
                                                interface into it
    :rtype: None
    """
    p = subparser
    p.description = description
    p.add_argument("files", metavar="DIGEST", type=str, nargs="*",
                   help="the digest files to compare; use '-' for standard input")
    p.add_argument("-o", "--output-file", metavar="FILE", type=str, dest="outfile",
                   help="write the report to the named file instead of standard out")
    p.add_argument("--ds", action="store_true", dest="ds",
                   help="compare the data service attributes")
    p.add_argument("--specials", action="store_true", dest="specials",
                   help="compare the special parameters")
    p.add_argument("--vocabs", action="store_true", dest="vocabs",
                   help="compare the vocabularies")
    p.add_argument("--formats", action="store_true", dest="formats",
                   help="compare the output formats")
    p.add_argument("--nodes", action="store_true", dest="nodes",
                   help="compare all nodes")
    p.add_argument("--ops", action="store_true", dest="ops",
                   help="compare the operation nodes (those with a method)")
    p.add_argument("--pages", action="store_true", dest="pages",
                   help="compare the documentation page nodes")
    p.add_argument("--dirs", action="store_true", dest="dirs",
                   help="compare the file and directory nodes")
    p.add_argument("--params", action="store_true", dest="params",
                   help="compare the parameters accepted by each node")
    p.add_argument("--blocks", action="store_true", dest="blocks",
                   help="compare the output blocks of each node")
    p.add_argument("--fields", action="store_true", dest="fields",
                   help="compare the output fields of each node")
    p.add_argument("--all", action="store_true", dest="all",
                   help="make all of the available comparisons")
    p.add_argument("--node", metavar="PATTERN", type=str, dest="node",
                   help="only compare nodes whose paths match PATTERN (which may contain * and ?)")
    p.add_argument("--comp", action="store_true", dest="comp",
                   help="mark left-only and right-only entries with <<< and >>>")

    return None

def _in_workdir(filename, config):
    if filename == '-' or os.path.isabs(filename):
        return filename
    return os.path.join(config.get('working_dir', ''), filename)

def execute(args, config=None, log=None):
    """
    execute this command: compare the digests named in the arguments
    """
    cmd = default_name
    if not log:
        log = logging.getLogger(cmd)
    if not config:
        config = {}

    files = list(args.files or [])
    if len(files) < 1 or len(files) > 2:
        raise CommandFailure(cmd, "Please specify one or two digest files", 2)
    if len(files) == 1:
        files.insert(0, '-')
    files = [_in_workdir(f, config) for f in files]

    engine = DigestDiffEngine(DiffOptions.from_args(args), log)
    try:
        explain(log, "comparing %s with %s", files[0], files[1])
        left = engine.load(files[0])
        right = engine.load(files[1])
        report = engine.diff(left, right)
    except DigestError as ex:
        raise CommandFailure(cmd, str(ex), 3, ex)

    markers = COMP_MARKERS if args.comp else config.get('markers')
    text = report.render(markers, int(config.get('indent', 4)))

    try:
        if args.outfile:
            with open(_in_workdir(args.outfile, config), 'w') as fd:
                fd.write(text)
        else:
            sys.stdout.write(text)
    except OSError as ex:
        raise CommandFailure(cmd, "Failed to write report: "+str(ex), 4, ex)

    return report
