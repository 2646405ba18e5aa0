class HuffException(ValueError): # base class for every compression/decompression failure
    pass


class AlphabetError(HuffException): # word outside the byte alphabet, or a word with no code
    pass


class IncompleteTreeHeaderError(HuffException): # input ended inside the serialized tree
    pass


class IncompletePayloadError(HuffException): # input ended before the EOS code was decoded
    pass


class MalformedTreeError(HuffException): # tree shape cannot be used for decoding
    pass


class BadHeaderError(HuffException): # magic number mismatch
    pass
