
from Crypto.Cipher import Blowfish
from Crypto.Util.strxor import strxor

__all__ = ['pad_to', 'strip_zeros', 'CBCMode', 'blowfish_ecb']


def pad_to(msg, multiple):
    '''
    Pads msg with 0s until it's length is divisible by `multiple`.
    '''
    return msg + bytes(-len(msg) % multiple)


def strip_zeros(msg):
    return msg.rstrip(b'\x00')


def blowfish_ecb(key):
    '''
    Create a keyed blowfish cipher that works on single 8 byte blocks.
    '''
    if isinstance(key, str):
        key = key.encode()
    if not 8 <= len(key) <= 56:
        raise ValueError('8 <= len(key) <= 56')
    return Blowfish.new(key, Blowfish.MODE_ECB)


class CBCMode:
    '''
    CBC block mode around a function that encrypts or decrypts single blocks in ECB mode.

    The chaining block is kept between calls, so consecutive calls behave as if all the data was passed in one go.
    Use one instance per direction.

    args:
        func:       a function that encrypts (or decrypts) data in ECB mode
        iv:         initial chaining block
        blocksize:  block size of the cipher
    '''

    def __init__(self, func, iv, blocksize=8):
        if len(iv) != blocksize:
            raise ValueError('len(iv) != blocksize')
        self.func = func
        self.iv = bytes(iv)
        self.blocksize = blocksize

    def check_length(self, data):
        if len(data) % self.blocksize != 0:
            raise ValueError('data is not a multiple of the block size')

    def encrypt(self, data):
        self.check_length(data)
        ciphertext = b''
        for i in range(0, len(data), self.blocksize):
            self.iv = self.func(strxor(data[i:i+self.blocksize], self.iv))
            ciphertext += self.iv
        return ciphertext

    def decrypt(self, data):
        self.check_length(data)
        plaintext = b''
        for i in range(0, len(data), self.blocksize):
            block = data[i:i+self.blocksize]
            plaintext += strxor(self.func(block), self.iv)
            self.iv = block
        return plaintext
