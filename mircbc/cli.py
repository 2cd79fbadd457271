import argparse
import os
import sys

from mircbc.cbc import MircryptCBC, MircryptError, Passthrough
from mircbc.crypto import blowfish_ecb
from tabulate import tabulate

__all__ = ['__version__', 'MircbcArgumentParser', 'MircbcCommands', 'main']

__version__ = '1.0'
__description__ = 'Mircryption CBC message encryption.'

KEY_ENV = 'MIRCBC_KEY'


class MircbcArgumentParser(argparse.ArgumentParser):
    def __init__(self):
        super().__init__(prog='mircbc', description='mircbc version {}: {}'.format(__version__, __description__))
        self.add_argument('--key', default=None, help='Blowfish key, defaults to ${}.'.format(KEY_ENV))
        self.add_argument('--strict', action='store_true', help='Reject ciphertext which isn\'t block aligned.')
        self.sub_parsers = self.add_subparsers(dest='mode', parser_class=argparse.ArgumentParser)
        self.sub_parsers.required = True
        self.commands = {}

    def register_command(self, sub_desc, arg_descs):
        def decorator(func):
            self.commands[sub_desc[0]] = func
            return func

        sub_parser = self.sub_parsers.add_parser(*sub_desc[:-1], **sub_desc[-1])
        for arg_desc in arg_descs:
            sub_parser.add_argument(*arg_desc[:-1], **arg_desc[-1])
        return decorator


class MircbcCommands:
    '''
    Each invocation uses a fresh codec, so only the first message of a session can be handled.
    '''
    arg_parser = MircbcArgumentParser()

    def __init__(self, environ=None):
        self.environ = os.environ if environ is None else environ

    def get_codec(self, args):
        key = args.key or self.environ.get(KEY_ENV)
        if not key:
            raise ValueError('no key given, use --key or set ${}'.format(KEY_ENV))
        return MircryptCBC(blowfish_ecb(key), strict=args.strict)

    def main(self, argv=None):
        args = self.arg_parser.parse_args(argv)
        args.unparsed = ' '.join(args.unparsed)
        try:
            self.arg_parser.commands[args.mode](self, args)
        except (ValueError, MircryptError) as e:
            print('error: {}'.format(e), file=sys.stderr)
            return 1
        return 0

    @arg_parser.register_command(('encrypt', {'help': 'Prints encrypted text.'}), [
        ('unparsed', {'nargs': '*'})
    ])
    def encrypt(self, args):
        print(self.get_codec(args).encrypt(args.unparsed))

    @arg_parser.register_command(('decrypt', {'help': 'Prints decrypted text.'}), [
        ('unparsed', {'nargs': '*'})
    ])
    def decrypt(self, args):
        res = self.get_codec(args).unpack(args.unparsed)
        if isinstance(res, Passthrough):
            print('not encrypted: {}'.format(res.text), file=sys.stderr)
        # undecodable bytes from a wrong key are shown as replacement characters
        print(res.text.encode('utf-8', 'surrogateescape').decode('utf-8', 'replace'))

    @arg_parser.register_command(('inspect', {'help': 'Shows the blocks of an encrypted message.'}), [
        ('unparsed', {'nargs': '*'})
    ])
    def inspect(self, args):
        msg = args.unparsed
        body = MircryptCBC.trim(msg)
        if body is None:
            raise ValueError('not an encrypted message')
        prefix = msg[:len(msg) - len(body)]
        data = MircryptCBC.b64decode(body)
        size = MircryptCBC.block_size
        print(tabulate([
            ['prefix', repr(prefix)],
            ['length', len(data)],
            ['blocks', '{}{}'.format(len(data) // size, '' if len(data) % size == 0 else ' (misaligned)')],
        ]))
        print()
        table = [(i // size, data[i:i+size].hex()) for i in range(0, len(data), size)]
        print(tabulate(table, headers=['block', 'ciphertext'], disable_numparse=True))


def main(argv=None):
    return MircbcCommands().main(argv)


if __name__ == '__main__':
    sys.exit(main())
