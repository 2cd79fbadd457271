'''
mircryption cbc encoding/decoding

Messages are sent as '+OK *' followed by standard base64 of the ciphertext. The ciphertext is 8 random bytes followed
by the zero padded message, encrypted in cbc mode with a zero iv. The cbc state is kept between messages, one chain for
each direction.

There is no authentication tag, decrypting with the wrong key gives garbage instead of an error.
'''

import base64
import binascii
import logging
import os
from collections import namedtuple

from mircbc.crypto import CBCMode, pad_to, strip_zeros

__all__ = ['MircryptError', 'RandomSourceError', 'DecodeError', 'Decrypted', 'Passthrough', 'MircryptCBC']

log = logging.getLogger(__name__)


class MircryptError(Exception):
    pass


class RandomSourceError(MircryptError):
    pass


class DecodeError(MircryptError, ValueError):
    pass


Decrypted = namedtuple('Decrypted', ['text'])
Passthrough = namedtuple('Passthrough', ['text'])


class MircryptCBC:
    block_size = 8
    send_prefix = '+OK *'
    receive_prefixes = ['+OK *', 'mcps *']

    def __init__(self, cipher, strict=False):
        '''
        args:
            cipher:     keyed cipher with 8 byte blocks, only used in ECB fashion
            strict:     reject ciphertext which isn't block aligned instead of padding it with zeros
        '''
        self.cipher = cipher
        self.strict = strict
        # mircryption uses a zero iv
        self.iv = bytes(self.block_size)
        self.decrypter = CBCMode(cipher.decrypt, self.iv, self.block_size)
        self.encrypter = CBCMode(cipher.encrypt, self.iv, self.block_size)

    @classmethod
    def trim(cls, msg):
        '''
        Returns the message body without it's prefix, or None if the message isn't encrypted.
        '''
        for prefix in cls.receive_prefixes:
            if msg.startswith(prefix):
                return msg[len(prefix):]
        return None

    def random_block(self):
        try:
            return os.urandom(self.block_size)
        except (OSError, NotImplementedError) as e:
            raise RandomSourceError('could not read random bytes') from e

    def encrypt(self, msg):
        '''
        Get the irc string to send.
        '''
        # surrogateescape gives back the raw bytes of lines that weren't valid utf-8
        padded = pad_to(msg.encode('utf-8', 'surrogateescape'), self.block_size)
        # mircryption prepends a block of random data to the message
        padded = self.random_block() + padded
        return '{}{}'.format(self.send_prefix, base64.b64encode(self.encrypter.encrypt(padded)).decode())

    @classmethod
    def b64decode(cls, body):
        '''
        Standard base64 decode, line breaks are skipped.
        '''
        try:
            return base64.b64decode(body.replace('\r', '').replace('\n', '').encode('ascii'), validate=True)
        except (binascii.Error, UnicodeEncodeError) as e:
            raise DecodeError('invalid base64: {}'.format(e)) from e

    def check_length(self, decoded):
        if self.strict and (not decoded or len(decoded) % self.block_size != 0):
            raise DecodeError('ciphertext length {} is not a multiple of {}'.format(len(decoded), self.block_size))

    def unpack(self, msg):
        '''
        Decrypt an incoming line, returning either Decrypted or Passthrough for lines without a mircryption prefix.
        '''
        body = self.trim(msg)
        if body is None:
            log.debug('passing through unencrypted line')
            return Passthrough(msg)
        try:
            decoded = self.b64decode(body)
            self.check_length(decoded)
        except DecodeError as e:
            log.debug('undecodable message: %s', e)
            raise
        # some clients send base64 which decodes to trailing zeros, realign to the block size
        decoded = pad_to(strip_zeros(decoded), self.block_size)
        decrypted = strip_zeros(self.decrypter.decrypt(decoded))
        return Decrypted(decrypted[self.block_size:].decode('utf-8', 'surrogateescape'))

    def decrypt(self, msg):
        return self.unpack(msg).text
