"""
CLI command that generates diagnostic output (a configuration digest or a fields report) for a data
service defined in an importable Python module.
"""
import os, re, sys, logging, importlib

from ..utils.cli import CommandFailure, explain
from ..web.utils import get_request_params
from ..service import DataService
from ..exceptions import DefinitionError

default_name = "diag"
help = "generate a configuration digest or a fields report for a data service"
description = """
  Generate diagnostic output for a data service.  The service is named as MODULE:NAME, where NAME is
  either a DataService instance defined in the importable MODULE or a function that returns one.
  The PATH selects the node to examine, and the QUERY (in URL query syntax) selects the diagnostic,
  e.g. "show=digest&node=list*" or "show=fields&vocab=com&doc=short".
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
    p.add_argument("service", metavar="MODULE:NAME", type=str,
                   help="the data service to examine")
    p.add_argument("path", metavar="PATH", type=str,
                   help="the path of the node to examine")
    p.add_argument("query", metavar="QUERY", type=str,
                   help="the diagnostic parameters, e.g. 'show=digest'")
    p.add_argument("-o", "--output-file", metavar="FILE", type=str, dest="outfile",
                   help="write the output to the named file instead of standard out")

    return None

def load_service(spec: str) -> DataService:
    """
    import and return the data service given as "module:name"
    """
    modname, _, attr = spec.partition(':')
    if not modname or not attr:
        raise ValueError("data service must be given as MODULE:NAME")
    mod = importlib.import_module(modname)
    ds = getattr(mod, attr)
    if callable(ds) and not isinstance(ds, DataService):
        ds = ds()
    if not isinstance(ds, DataService):
        raise ValueError(spec + ": not a DataService")
    return ds

def node_path(ds, path):
    """
    convert a request path into the path of a node of the given service
    """
    if ds.path_re:
        m = re.match(ds.path_re, path)
        if m:
            path = m.group(1) or ''
    path = path.strip('/')
    return path or '/'

def execute(args, config=None, log=None):
    """
    execute this command: generate the requested diagnostic output
    """
    cmd = default_name
    if not log:
        log = logging.getLogger(cmd)
    if not config:
        config = {}

    try:
        ds = load_service(args.service)
    except DefinitionError as ex:
        raise CommandFailure(cmd, "Data service definition failed: "+str(ex), 1, ex)
    except (ImportError, AttributeError, ValueError) as ex:
        raise CommandFailure(cmd, "Unable to load data service: "+str(ex), 2, ex)

    request = {'node_path': node_path(ds, args.path), 'params': get_request_params(args.query)}
    explain(log, "running diagnostic on %s: %s", request['node_path'], args.query)

    out = sys.stdout
    try:
        if args.outfile:
            outfile = args.outfile
            if not os.path.isabs(outfile):
                outfile = os.path.join(config.get('working_dir', ''), outfile)
            out = open(outfile, 'w')
        try:
            result = ds.diagnostic_request(request, out=out, logger=log)
        finally:
            if out is not sys.stdout:
                out.close()
    except OSError as ex:
        raise CommandFailure(cmd, "Failed to write diagnostic output: "+str(ex), 4, ex)

    if result is None:
        raise CommandFailure(cmd, "Diagnostic request failed: "+args.query, 2)
    return result
