"""
# mobistruct: MOBI e-books for humans.

A file format is described declaratively: a Chunk is a sequence of Fields,
each one knowing how to read and write its own bytes. Two operations are
defined for the file format and its sub components:

 1. unpack(): the more straightforward, i.e., reading the binary data
    and build a high-level representation of that. The chunk starts from
    the actual position of the stream and each field knows how many bytes
    it needs (possibly depending on the value of another field)

 2. pack(): encode the high-level representation into binary data,
    recalculating the fields depending on others (counts, lengths).

The formats implemented are

 - mobistruct.containers.palmdb: the Palm database, container of records
 - mobistruct.ebooks.mobi: the MOBI headers (PalmDOC, MOBI and EXTH)
 - mobistruct.compression.palmdoc: the LZ77 variant compressing the text

and mobistruct.ebooks.mobi.book.MobiBook puts them together.
"""
