import os, sys, pdb
import unittest as test

from wds import utils

class TestUtils(test.TestCase):

    def test_caller_location(self):
        loc = utils.caller_location()
        self.assertTrue(loc.startswith("line "))
        self.assertTrue(loc.endswith("test_wds_utils.py"))

        loc = utils.caller_location(os.path.dirname(os.path.abspath(__file__)))
        self.assertNotIn("test_wds_utils.py", loc)

    def test_glob_to_regex(self):
        self.assertIsNone(utils.glob_to_regex(None))
        self.assertIsNone(utils.glob_to_regex(''))

        rx = utils.glob_to_regex('list*')
        self.assertTrue(rx.match('list'))
        self.assertTrue(rx.match('lists/sub'))
        self.assertFalse(rx.match('regions'))
        self.assertFalse(rx.match('a/list'))

        rx = utils.glob_to_regex('a?c.d')
        self.assertTrue(rx.match('abc.d'))
        self.assertFalse(rx.match('abcxd'))
        self.assertFalse(rx.match('ac.d'))

    def test_valid_name(self):
        self.assertTrue(utils.valid_name('1.0:regions:list'))
        self.assertTrue(utils.valid_name('com'))
        self.assertFalse(utils.valid_name(''))
        self.assertFalse(utils.valid_name('a b'))
        self.assertFalse(utils.valid_name(':a'))
        self.assertFalse(utils.valid_name(None))


if __name__ == '__main__':
    test.main()
