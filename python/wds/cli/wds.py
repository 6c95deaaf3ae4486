"""
wds command-line program for generating and comparing diagnostic output about data services.
"""
import os, sys, logging

from ..utils import cli
from ..exceptions import ConfigurationException
from . import diag, diff

description = "generate and compare diagnostic output about web data services"
epilog = None
default_prog_name = "wds"
default_conf_file = os.path.join(os.path.expanduser("~"), ".wds-cli-config.yml")

def main(cmdname, args):
    """
    a function that executes the ``wds`` command-line tool.
    """
    if not cmdname:
        cmdname = default_prog_name

    # set up the commands
    argparser = cli.define_prog_opts(cmdname, description, epilog)
    wds = cli.CLISuite(cmdname, default_conf_file, argparser)
    wds.load_subcommand(diag)
    wds.load_subcommand(diff)

    # execute the commands
    wds.execute(args)
    return args

def run(argv=None):
    """
    run the ``wds`` program, exiting with the appropriate status
    """
    if argv is None:
        argv = sys.argv
    prog = os.path.splitext(os.path.basename(argv[0]))[0] if argv else default_prog_name
    try:
        main(prog, argv[1:])
        sys.exit(0)
    except cli.CommandFailure as ex:
        logging.getLogger(f"{prog} {ex.cmd}").critical(str(ex))
        sys.exit(ex.stat)
    except ConfigurationException as ex:
        logging.getLogger(prog).critical("Config error: "+str(ex))
        sys.exit(6)
    except Exception as ex:
        logging.getLogger(prog).exception(ex)
        sys.exit(200)

if __name__ == "__main__":
    run()
