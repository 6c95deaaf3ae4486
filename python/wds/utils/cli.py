"""
support for the ``wds`` command-line program: a top-level program whose work is done by one of a
set of subcommands (e.g. ``wds diag``, ``wds diff``).

A subcommand is a module (or object) that provides:

``default_name``
    the name the subcommand is invoked by
``help``
    a one-line summary shown in the program's help
``description``
    (optional) a longer description shown in the subcommand's help
``load_into(subparser)``
    a function that defines the subcommand's arguments into an ``ArgumentParser``
``execute(args, config, log)``
    a function that does the work, raising :py:class:`CommandFailure` on failure
"""
import os, sys, logging
from copy import deepcopy
from argparse import ArgumentParser, HelpFormatter

from ..exceptions import ConfigurationException
from .. import config as cfgmod

EXPLAIN=cfgmod.NORMAL

def explain(log, message, *params):
    """
    log a message at the NORMAL level, quieter than INFO but louder than DEBUG.  Such messages
    go to the log file, but only reach the terminal when --verbose is given.
    """
    log.log(EXPLAIN, message, *params)

class _ParaHelpFormatter(HelpFormatter):
    # keep blank-line paragraph breaks in descriptions
    def _fill_text(self, text, width, indent):
        return "\n\n".join([super(_ParaHelpFormatter, self)._fill_text(p, width, indent)
                            for p in text.split("\n\n")])

def define_prog_opts(progname, description=None, epilog=None, parser=None):
    """
    define the options common to all subcommands of a program

    :param str progname:    the program name to show in usage messages
    :param str description: the summary of the program shown before the options (optional)
    :param str epilog:      text to show after the options (optional)
    :param ArgumentParser parser:  a parser to add the options to; if not provided, a new one is
                            created
    :rtype: ArgumentParser
    """
    if not parser:
        parser = ArgumentParser(progname, None, description, epilog,
                                formatter_class=_ParaHelpFormatter)

    morehelp = "Run '%(prog)s CMD -h' for help specifically on CMD."
    if parser.epilog:
        parser.epilog = morehelp+"\n\n"+parser.epilog
    else:
        parser.epilog = morehelp

    parser.add_argument("-w", "--workdir", type=str, dest='workdir', metavar='DIR', default="",
                        help="resolve relative input and output file names (including the log) "
                             "against DIR; default='.'")
    parser.add_argument("-c", "--config", type=str, dest='conf', metavar='FILE',
                        help="read configuration from FILE")
    parser.add_argument("-l", "--logfile", type=str, dest='logfile', metavar='FILE',
                        help="log messages to FILE, over-riding the configured logfile")
    parser.add_argument("-q", "--quiet", action="store_true", dest='quiet',
                        help="do not print error messages to standard error")
    parser.add_argument("-D", "--debug", action="store_true", dest='debug',
                        help="send DEBUG level messages to the log file")
    parser.add_argument("-v", "--verbose", action="store_true", dest='verbose',
                        help="print INFO and (with -D) DEBUG messages to the terminal")

    return parser

class CommandFailure(Exception):
    """
    a failure of a subcommand; the program should exit with the failure's ``stat``.

    Exit statuses:
      * 1:  a general processing failure (e.g. a data service definition error)
      * 2:  missing or misused command-line arguments
      * 3:  unreadable or incompatible input data (e.g. a digest)
      * 4:  a failure writing output
      * 6:  a configuration error
    """

    def __init__(self, cmdname, message, exstat=1, cause=None):
        """
        :param str cmdname:   the name of the subcommand that failed
        :param str message:   an explanation of what went wrong; if empty, the message of
                              ``cause`` is used
        :param int exstat:    the status to exit with
        :param Exception cause:  the exception that triggered this failure, if any
        """
        if not message:
            message = str(cause) if cause else "Unknown command failure"

        super(CommandFailure, self).__init__(message)
        self.stat = exstat
        self.cmd = cmdname
        self.cause = cause

class CLISuite(object):
    """
    a command-line program made up of subcommands.  The suite parses the arguments, loads the
    configuration, sets up logging, and hands off to the selected subcommand.
    """

    def __init__(self, progname, defconffile=None, parser=None):
        """
        :param str progname:     the name of the program
        :param str defconffile:  the configuration file to read when --config is not given (if
                                 it exists)
        :param ArgumentParser parser:  the parser for the program's options; if not given, one is
                                 created with :py:func:`define_prog_opts`
        """
        self.suitename = progname
        if not parser:
            parser = define_prog_opts(progname)
        self.parser = parser
        self._subparser_src = self.parser.add_subparsers(title="commands", dest="cmd")
        self._cmds = {}
        self._defconffile = defconffile
        self._stderr_handler = None

    def parse_args(self, args):
        """
        parse the given command-line arguments (not including the program name)
        """
        return self.parser.parse_args(args)

    def load_subcommand(self, cmdmod, cmdname=None):
        """
        add a subcommand to this program.

        :param module|object cmdmod: the subcommand implementation (see the module documentation)
        :param str cmdname:     the name to invoke it by; if None, its ``default_name`` is used
        """
        if not hasattr(cmdmod, "load_into"):
            raise ValueError("command module/object has no load_into() function: " + repr(cmdmod))
        if not cmdname:
            cmdname = cmdmod.default_name

        subparser = self._subparser_src.add_parser(cmdname, help=cmdmod.help,
                                                   description=getattr(cmdmod, 'description', None),
                                                   formatter_class=_ParaHelpFormatter)
        cmdmod.load_into(subparser)
        self._cmds[cmdname] = cmdmod

    def extract_config_for_cmd(self, config, cmdname, cmd=None):
        """
        return the configuration for a subcommand.  Properties found under ``cmd.<cmdname>`` in
        the given configuration (or ``cmd.<default_name>`` of the ``cmd`` module) are merged over
        the top-level properties; the ``cmd`` property itself is dropped.
        """
        if 'cmd' not in config:
            return config

        out = deepcopy(config)
        del out['cmd']
        if cmdname not in config['cmd'] and cmd and hasattr(cmd, 'default_name'):
            cmdname = cmd.default_name
        if cmdname in config['cmd']:
            out = cfgmod.merge_config(config['cmd'][cmdname], out)

        return out

    def configure_log(self, args, config):
        """
        set up logging to a file (and, unless --quiet, to standard error) according to the
        command-line arguments and the configuration.  Calling this again replaces the handlers
        installed previously.

        :return:  the program's Logger
        """
        loglevel = (args.debug and logging.DEBUG) or cfgmod.NORMAL

        if not args.logfile and 'logfile' not in config:
            config['logfile'] = self.suitename + ".log"
        if 'logdir' not in config:
            config['logdir'] = config.get('working_dir', os.getcwd())

        if args.logfile:
            # a logfile given on the command line goes into the working directory
            config['logfile'] = os.path.join(config.get('working_dir', os.getcwd()), args.logfile)
        cfgmod.configure_log(level=loglevel, config=config)

        rootlog = logging.getLogger()
        if self._stderr_handler:
            rootlog.removeHandler(self._stderr_handler)
            self._stderr_handler = None
        if not args.quiet:
            level = logging.INFO
            format = self.suitename + " %(levelname)s: %(message)s"
            if args.verbose:
                level = (args.debug and logging.DEBUG) or cfgmod.NORMAL
                format = "%(name)s %(levelname)s: %(message)s"
            handler = logging.StreamHandler(sys.stderr)
            handler.setLevel(level)
            handler.setFormatter(logging.Formatter(format))
            rootlog.addHandler(handler)
            self._stderr_handler = handler

        log = logging.getLogger("cli."+self.suitename)
        log.setLevel(cfgmod.NORMAL)
        if args.verbose:
            log.info("FYI: Writing log messages to %s", cfgmod.global_logfile)

        return log

    def load_config(self, args):
        """
        load the configuration from the file given with --config or, failing that, from the
        default configuration file if it exists.  An empty dictionary is returned if there is
        no file to read.

        :raise ConfigurationException:  if the file cannot be read or parsed
        """
        if args.conf:
            config = cfgmod.load_from_file(args.conf)
        elif self._defconffile and os.path.isfile(self._defconffile):
            config = cfgmod.load_from_file(self._defconffile)
        else:
            config = {}
        return dict(config)

    def execute(self, args, config=None):
        """
        run the subcommand selected by the arguments.

        :param list|Namespace args:  the program arguments (not including the program name),
                                     either as a list of strings or already parsed
        :param dict config:  the configuration to use; if None, it is loaded via
                             :py:meth:`load_config`
        :return:  whatever the subcommand's ``execute()`` returns
        :raise CommandFailure:  if the subcommand fails or the configuration is bad
        """
        origargs = None
        if isinstance(args, list):
            origargs = args
            args = self.parse_args(args)
        cmd = self._cmds.get(args.cmd)
        if cmd is None:
            raise CommandFailure(args.cmd, "Unrecognized command: "+str(args.cmd), 2)

        try:
            if config is None:
                config = self.load_config(args)
            config = self.extract_config_for_cmd(config, args.cmd, cmd)
        except ConfigurationException as ex:
            raise CommandFailure(args.cmd, "Configuration error: "+str(ex), 6, ex)

        if args.workdir:
            args.workdir = os.path.abspath(args.workdir)
            if not os.path.isdir(args.workdir):
                raise CommandFailure(args.cmd, "Working dir is not an existing directory: " +
                                     args.workdir, 2)
            config['working_dir'] = args.workdir
        elif 'working_dir' in config:
            config['working_dir'] = os.path.abspath(config['working_dir'])
        else:
            config['working_dir'] = os.getcwd()

        proglog = self.configure_log(args, config)
        if origargs:
            explain(proglog, "Executing: %s %s", self.suitename, " ".join(origargs))

        try:
            return cmd.execute(args, config, proglog.getChild(args.cmd))
        except CommandFailure as ex:
            ex.cmd = args.cmd
            raise ex
        except ConfigurationException as ex:
            raise CommandFailure(args.cmd, "Configuration error: "+str(ex), 6, ex)
