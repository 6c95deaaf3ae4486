import os, sys, logging, argparse, tempfile, pdb
import unittest as test

from wds.utils import cli
from wds.exceptions import ConfigurationException
from wds import config as cfgmod

tmpd = None

def setUpModule():
    global tmpd
    tmpd = tempfile.TemporaryDirectory(prefix="_test_cli_suite.")

def tearDownModule():
    tmpd.cleanup()

class TestModFunctions(test.TestCase):

    def test_define_prog_opts(self):
        p = cli.define_prog_opts("admin", "exert superpowers")
        self.assertEqual(p.prog, "admin")
        self.assertIn("superpowers", p.description)
        self.assertIn("help specifically on CMD", p.epilog)

        args = p.parse_args([])
        self.assertEqual(args.workdir, "")
        self.assertIsNone(args.conf)
        self.assertIsNone(args.logfile)
        self.assertFalse(args.quiet)
        self.assertFalse(args.verbose)
        self.assertFalse(args.debug)

        parser = argparse.ArgumentParser("fred", None, "go to work", "good work")
        p = cli.define_prog_opts("goob", parser=parser)
        self.assertTrue(p is parser)
        self.assertEqual(p.prog, "fred")
        self.assertIn("good work", p.epilog)

    def test_CommandFailure(self):
        ex = cli.CommandFailure("goob", "hey, don't do that!", 3)
        self.assertEqual(ex.cmd, "goob")
        self.assertEqual(ex.stat, 3)
        self.assertIsNone(ex.cause)
        self.assertEqual(str(ex), "hey, don't do that!")

        cause = ValueError("bad value")
        ex = cli.CommandFailure("goob", None, cause=cause)
        self.assertEqual(ex.stat, 1)
        self.assertIs(ex.cause, cause)
        self.assertEqual(str(ex), "bad value")

    def test_explain(self):
        log = logging.getLogger("wds.test.explain")
        with self.assertLogs(log, cfgmod.NORMAL) as cm:
            cli.explain(log, "doing %s", "things")
        self.assertEqual(cm.records[0].getMessage(), "doing things")
        self.assertEqual(cm.records[0].levelno, cfgmod.NORMAL)

class TestCmdMod(object):
    def __init__(self, fail=None):
        self.default_name = "mock"
        self.help = "mighty helpful"
        self.description = "a mock command"
        self.last_exec = None
        self.fail = fail
    def load_into(self, sp):
        sp.add_argument("uid", metavar="ID", type=str, help="the ID to use")
    def execute(self, args, config, log):
        self.last_exec = { 'args': args, 'config': config, 'log': log }
        if self.fail:
            raise self.fail
        return "done"

class TestCLISuite(test.TestCase):

    def resetLogfile(self):
        rootlog = logging.getLogger()
        if cfgmod._log_handler:
            rootlog.removeHandler(cfgmod._log_handler)
            cfgmod._log_handler.close()
            cfgmod._log_handler = None

    def setUp(self):
        self.resetLogfile()

    def tearDown(self):
        self.resetLogfile()

    def test_ctor(self):
        cmd = cli.CLISuite("wds")
        self.assertEqual(cmd.suitename, "wds")
        self.assertIsNotNone(cmd.parser)
        self.assertEqual(cmd.parser.prog, "wds")
        self.assertIsNotNone(cmd._subparser_src)
        self.assertEqual(cmd._cmds, {})

    def test_configure_log(self):
        p = cli.define_prog_opts("wds")
        args = p.parse_args("-q".split())
        cfg = {'working_dir': tmpd.name}

        cmd = cli.CLISuite("wds")
        log = cmd.configure_log(args, cfg)
        self.assertEqual(log.name, "cli.wds")
        self.assertEqual(cfgmod.global_logfile, os.path.join(tmpd.name, "wds.log"))

        args = p.parse_args("-q -l goober.log".split())
        cfg = {'working_dir': tmpd.name}
        log = cmd.configure_log(args, cfg)
        self.assertEqual(cfgmod.global_logfile, os.path.join(tmpd.name, "goober.log"))

        args = p.parse_args("-q".split())
        cfg = {'logdir': tmpd.name, 'logfile': 'gurn.log'}
        log = cmd.configure_log(args, cfg)
        self.assertEqual(cfgmod.global_logfile, os.path.join(tmpd.name, "gurn.log"))

    def test_load_and_execute(self):
        cmd = cli.CLISuite("wds")
        tstmod = TestCmdMod()

        cmd.load_subcommand(tstmod)
        self.assertIn("mock", cmd._cmds)
        self.assertTrue(cmd._cmds["mock"] is tstmod)
        cmd.load_subcommand(tstmod, "gurn")
        self.assertIn("gurn", cmd._cmds)

        out = cmd.execute(["-q", "-w", tmpd.name, "gurn", "cranston"], {})
        self.assertEqual(out, "done")
        self.assertEqual(tstmod.last_exec['args'].cmd, "gurn")
        self.assertEqual(tstmod.last_exec['args'].uid, "cranston")
        self.assertTrue(tstmod.last_exec['args'].quiet)
        self.assertEqual(tstmod.last_exec['config'],
                         {'working_dir': tmpd.name, 'logdir': tmpd.name, 'logfile': "wds.log"})
        self.assertEqual(tstmod.last_exec['log'].name, "cli.wds.gurn")

        with self.assertRaises(ValueError):
            cmd.load_subcommand(object())

    def test_execute_failures(self):
        cmd = cli.CLISuite("wds")
        cmd.load_subcommand(TestCmdMod(cli.CommandFailure(None, "oops", 4)))
        with self.assertRaises(cli.CommandFailure) as cm:
            cmd.execute(["-q", "-w", tmpd.name, "mock", "id"], {})
        self.assertEqual(cm.exception.cmd, "mock")
        self.assertEqual(cm.exception.stat, 4)

        cmd = cli.CLISuite("wds")
        cmd.load_subcommand(TestCmdMod(ConfigurationException("bad config")))
        with self.assertRaises(cli.CommandFailure) as cm:
            cmd.execute(["-q", "-w", tmpd.name, "mock", "id"], {})
        self.assertEqual(cm.exception.stat, 6)

        with self.assertRaises(cli.CommandFailure) as cm:
            cmd.execute(["-q", "-w", os.path.join(tmpd.name, "nonexistent"), "mock", "id"], {})
        self.assertEqual(cm.exception.stat, 2)

        with self.assertRaises(cli.CommandFailure) as cm:
            cmd.execute(["-q", "-c", os.path.join(tmpd.name, "missing.yml"), "mock", "id"])
        self.assertEqual(cm.exception.stat, 6)

    def test_load_config(self):
        cfgfile = os.path.join(tmpd.name, "wds.yml")
        with open(cfgfile, 'w') as fd:
            fd.write("indent: 2\ncmd:\n  mock:\n    indent: 8\n")

        tstmod = TestCmdMod()
        cmd = cli.CLISuite("wds", cfgfile)
        cmd.load_subcommand(tstmod)
        cmd.execute(["-q", "-w", tmpd.name, "mock", "id"])
        self.assertEqual(tstmod.last_exec['config']['indent'], 8)
        self.assertNotIn('cmd', tstmod.last_exec['config'])

    def test_extract_config_for_cmd(self):
        cmd = cli.CLISuite("wds")
        tstmod = TestCmdMod()

        config = {
            "foo": "bar",
            "fred": "felon",
            "cmd": {
                "diff" : {
                    "fred": "cranston",
                    "goober": "cleveland"
                },
                "mock": {
                    "goober": "pittsburgh"
                }
            }
        }

        cfg = cmd.extract_config_for_cmd(config, 'diff', tstmod)
        self.assertEqual(cfg.get('goober'), "cleveland")
        self.assertEqual(cfg.get('fred'), "cranston")
        self.assertEqual(cfg.get('foo'), "bar")
        cfg = cmd.extract_config_for_cmd(config, 'diag', tstmod)
        self.assertEqual(cfg.get('goober'), "pittsburgh")
        cfg = cmd.extract_config_for_cmd(config, 'diag')
        self.assertIsNone(cfg.get('goober'))
        self.assertNotIn('cmd', cfg)

    def test_execute_parsed(self):
        cmd = cli.CLISuite("wds")
        tstmod = TestCmdMod(cli.CommandFailure("inner", "oops", 3))
        cmd.load_subcommand(tstmod)

        args = cmd.parse_args(["-q", "-w", tmpd.name, "mock", "abc"])
        with self.assertRaises(cli.CommandFailure) as cm:
            cmd.execute(args, {})
        self.assertEqual(cm.exception.cmd, "mock")
        self.assertEqual(cm.exception.stat, 3)
        self.assertEqual(tstmod.last_exec['args'].uid, "abc")

        tstmod.fail = None
        args.cmd = "goob"
        with self.assertRaises(cli.CommandFailure) as cm:
            cmd.execute(args, {})
        self.assertEqual(cm.exception.stat, 2)


if __name__ == '__main__':
    test.main()
