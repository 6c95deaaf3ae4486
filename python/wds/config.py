"""
Utilities for loading configuration data and for setting up logging.

Configuration for the command-line tools is read from a YAML or JSON file.  A data service itself
receives its application configuration as an already-parsed dictionary (see
:py:class:`wds.service.DataService`).
"""
import os, logging, json
from copy import deepcopy
from collections.abc import Mapping

import yaml

from .exceptions import ConfigurationException

NORMAL = 15
BLAB = logging.DEBUG - 1
logging.addLevelName(NORMAL, "NORMAL")
logging.addLevelName(BLAB, "BLAB")

LOG_FORMAT = "%(asctime)s %(name)s %(levelname)s: %(message)s"

global_logdir = None
global_logfile = None
_log_handler = None

def blab(log, msg, *args, **kwargs):
    """
    log a verbose message.  This uses a log level, BLAB, that is lower than DEBUG; in other words
    when a log's level is set to DEBUG, this message will not be displayed.  This is intended for
    messages that would appear voluminously if the level were set to BLAB (e.g. per-attribute
    resolution tracing).

    :param Logger log:  the Logger object to record to
    :param str    msg:  the message to write
    :param args:        treat msg as a template and insert these values
    :param kwargs:      other arbitrary keywords to pass to log.log()
    """
    log.log(BLAB, msg, *args, **kwargs)

def load_from_file(configfile: str) -> Mapping:
    """
    read the configuration from the given file and return it as a dictionary.  The file must be
    in either YAML (with a .yml or .yaml extension) or JSON format (with a .json extension).

    :raise ConfigurationException:  if the file cannot be read or does not contain a dictionary
    """
    ext = os.path.splitext(configfile)[1].lower()
    try:
        with open(configfile) as fd:
            if ext in (".yml", ".yaml"):
                data = yaml.safe_load(fd)
            elif ext == ".json":
                data = json.load(fd)
            else:
                raise ConfigurationException("%s: Unrecognized configuration file format (%s)" %
                                             (configfile, ext or "no extension"))
    except (OSError, yaml.YAMLError, ValueError) as ex:
        raise ConfigurationException("%s: Unable to load configuration: %s" % (configfile, str(ex)),
                                     cause=ex)

    if data is None:
        data = {}
    if not isinstance(data, Mapping):
        raise ConfigurationException("%s: configuration data is not a dictionary" % configfile)
    return data

def merge_config(primary: Mapping, defconf: Mapping) -> Mapping:
    """
    do a deep merge of a primary configuration with a default configuration.  Values in the
    primary configuration override those in the default; dictionary values are merged
    recursively.  The default configuration is not altered; a new dictionary is returned.
    """
    out = deepcopy(defconf)
    for key, val in primary.items():
        if isinstance(val, Mapping) and isinstance(out.get(key), Mapping):
            out[key] = merge_config(val, out[key])
        else:
            out[key] = deepcopy(val)
    return out

def configure_log(logfile: str=None, level: int=None, format: str=None, config: Mapping=None):
    """
    configure a log file for messages from all components of the system, replacing any file
    handler installed by a previous call.

    :param str logfile:   the path to the log file to write to; a relative path is interpreted
                          relative to the ``logdir`` config parameter (or the current directory).
                          If not provided, the ``logfile`` config parameter is used.
    :param int level:     the logging threshold; defaults to the ``loglevel`` config parameter or,
                          failing that, NORMAL.
    :param str format:    the format string for log messages
    :param dict config:   configuration data that may provide ``logfile``, ``logdir``, and
                          ``loglevel``
    """
    global global_logdir, global_logfile, _log_handler
    if not config:
        config = {}
    if not logfile:
        logfile = config.get('logfile', 'wds.log')
    if not level:
        level = config.get('loglevel', NORMAL)
    if not format:
        format = config.get('logformat', LOG_FORMAT)

    if not os.path.isabs(logfile):
        global_logdir = config.get('logdir', os.getcwd())
        logfile = os.path.join(global_logdir, logfile)
    else:
        global_logdir = os.path.dirname(logfile)
    global_logfile = logfile

    rootlogger = logging.getLogger()
    if _log_handler:
        rootlogger.removeHandler(_log_handler)
        _log_handler.close()

    _log_handler = logging.FileHandler(logfile)
    _log_handler.setLevel(level)
    _log_handler.setFormatter(logging.Formatter(format))
    rootlogger.addHandler(_log_handler)
    rootlogger.setLevel(min(level, NORMAL))

