import io
import unittest
from contextlib import redirect_stderr, redirect_stdout

from mircbc.cli import *

VECTOR = '+OK *MDAwMDAwMDDN/2S09F4Jq10qXkgYPpJ8'


class TestMircbcCommands(unittest.TestCase):
    def run_commands(self, argv, environ=None):
        stdout, stderr = io.StringIO(), io.StringIO()
        with redirect_stdout(stdout), redirect_stderr(stderr):
            status = MircbcCommands(environ or {}).main(argv)
        return status, stdout.getvalue(), stderr.getvalue()

    def test_encrypt(self):
        status, out, err = self.run_commands(['--key', '1'*8, 'encrypt', 'some', 'text'])
        self.assertEqual(status, 0)
        self.assertTrue(out.startswith('+OK *'))
        status, out, err = self.run_commands(['--key', '1'*8, 'decrypt', out.strip()])
        self.assertEqual((status, out), (0, 'some text\n'))

    def test_decrypt(self):
        status, out, err = self.run_commands(['decrypt', VECTOR], {'MIRCBC_KEY': '1'*8})
        self.assertEqual((status, out, err), (0, 'some text\n', ''))

    def test_decrypt_split_args(self):
        status, out, err = self.run_commands(['--key', '1'*8, 'decrypt'] + VECTOR.split(' '))
        self.assertEqual(out, 'some text\n')

    def test_decrypt_passthrough(self):
        status, out, err = self.run_commands(['--key', '1'*8, 'decrypt', 'hello', 'world'])
        self.assertEqual((status, out), (0, 'hello world\n'))
        self.assertIn('not encrypted', err)

    def test_errors(self):
        status, out, err = self.run_commands(['decrypt', VECTOR])
        self.assertEqual(status, 1)
        self.assertIn('no key given', err)
        status, out, err = self.run_commands(['--key', 'short', 'encrypt', 'text'])
        self.assertEqual(status, 1)
        self.assertIn('8 <= len(key) <= 56', err)
        status, out, err = self.run_commands(['--key', '1'*8, 'decrypt', '+OK *not-valid-base64!!'])
        self.assertEqual(status, 1)
        self.assertIn('invalid base64', err)
        status, out, err = self.run_commands(['--key', '1'*8, '--strict', 'decrypt', '+OK *MDAwMDAw'])
        self.assertEqual(status, 1)
        self.assertIn('not a multiple of 8', err)

    def test_inspect(self):
        status, out, err = self.run_commands(['inspect', VECTOR])
        self.assertEqual(status, 0)
        self.assertIn("'+OK *'", out)
        self.assertIn('24', out)
        self.assertIn('3030303030303030', out)
        status, out, err = self.run_commands(['inspect', '+OK *MDAwMDAw'])
        self.assertIn('misaligned', out)
        status, out, err = self.run_commands(['inspect', 'hello'])
        self.assertEqual(status, 1)
        self.assertIn('not an encrypted message', err)

    def test_parser(self):
        self.assertEqual(set(MircbcCommands.arg_parser.commands), {'encrypt', 'decrypt', 'inspect'})
        args = MircbcCommands.arg_parser.parse_args(['--key', '1'*8, 'encrypt', 'some', 'text'])
        self.assertEqual((args.mode, args.key, args.unparsed), ('encrypt', '1'*8, ['some', 'text']))

    def test_line_breaks(self):
        status, out, err = self.run_commands(['--key', '1'*8, 'decrypt', VECTOR + '\r\n'])
        self.assertEqual((status, out), (0, 'some text\n'))
        status, out, err = self.run_commands(['inspect', VECTOR + '\r\n'])
        self.assertEqual(status, 0)
        self.assertIn('3030303030303030', out)
        status, out, err = self.run_commands(['inspect', '+OK *\udcff\udcfe'])
        self.assertEqual(status, 1)
        self.assertIn('invalid base64', err)

    def test_decrypt_wrong_key(self):
        status, out, err = self.run_commands(['--key', '2'*8, 'decrypt', VECTOR])
        self.assertEqual(status, 0)
        self.assertNotEqual(out, 'some text\n')
