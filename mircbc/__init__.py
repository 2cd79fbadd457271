from mircbc.cbc import *
from mircbc.crypto import blowfish_ecb
