'''
This module contains the constant values used throughout the MOBI format.

All of them are OpenEnum: a value not listed here doesn't stop the unpacking,
it becomes an UNKNOWN member carrying the raw value.
'''
from ...enum import OpenEnum


class CompressionType(OpenEnum):
    NONE         = 0
    UNCOMPRESSED = 1
    PALMDOC      = 2
    HUFFCDIC     = 17480  # 'DH'


class EncryptionType(OpenEnum):
    NONE           = 0
    OLD_MOBIPOCKET = 1
    MOBIPOCKET     = 2


class MobiType(OpenEnum):
    MOBIPOCKET_BOOK   = 2
    PALMDOC_BOOK      = 3
    AUDIO             = 4
    MAYBE_MOBIPOCKET  = 232
    KF8               = 248
    NEWS              = 257
    NEWS_FEED         = 258
    NEWS_MAGAZINE     = 259
    PICS              = 513
    WORD              = 514
    XLS               = 515
    PPT               = 516
    TEXT              = 517
    HTML              = 518


class TextEncoding(OpenEnum):
    LATIN1 = 1252
    UTF8   = 65001

    @property
    def codec(self):
        '''Name of the python codec, None if unknown'''
        return {
            TextEncoding.LATIN1: 'cp1252',
            TextEncoding.UTF8: 'utf-8',
        }.get(self)


class Language(OpenEnum):
    EN    = 0x09
    EN_US = 0x0904
    EN_UK = 0x0908


class ExthType(OpenEnum):
    '''Types of the EXTH records (from the mobileread wiki)'''
    DRM_SERVER_ID             = 1
    DRM_COMMERCE_ID           = 2
    DRM_EBOOKBASE_BOOK_ID     = 3
    AUTHOR                    = 100  # <dc:Creator>
    PUBLISHER                 = 101  # <dc:Publisher>
    IMPRINT                   = 102
    DESCRIPTION               = 103  # <dc:Description>
    ISBN                      = 104  # <dc:Identifier scheme='ISBN'>
    SUBJECT                   = 105  # can appear multiple times
    PUBLISHING_DATE           = 106  # <dc:Date>
    REVIEW                    = 107
    CONTRIBUTOR               = 108  # <dc:Contributor>
    RIGHTS                    = 109  # <dc:Rights>
    SUBJECT_CODE              = 110
    TYPE                      = 111  # <dc:Type>
    SOURCE                    = 112  # <dc:Source>
    ASIN                      = 113
    VERSION_NUMBER            = 114
    IS_SAMPLE                 = 115
    START_READING_AT_OFFSET   = 116
    ADULT_ONLY                = 117
    RETAIL_PRICE              = 118
    RETAIL_PRICE_CURRENCY     = 119
    KF8_BOUNDARY_OFFSET       = 121
    RESOURCE_COUNT            = 125
    KF8_COVER_URI             = 129
    USED_BUT_UNKNOWN          = 131
    DICTIONARY_SHORT_NAME     = 200
    COVER_OFFSET              = 201  # add to the first image record
    THUMBNAIL_OFFSET          = 202  # add to the first image record
    HAS_FAKE_COVER            = 203
    CREATOR_SOFTWARE          = 204
    CREATOR_MAJOR_VERSION     = 205
    CREATOR_MINOR_VERSION     = 206
    CREATOR_BUILD_NUMBER      = 207
    WATERMARK                 = 208
    TAMPER_PROOF_KEYS         = 209
    FONT_SIGNATURE            = 300
    CLIPPING_LIMIT            = 401
    PUBLISHER_LIMIT           = 402
    USED_BUT_UNKNOWN_2        = 403
    TEXT_TO_SPEECH_FLAG       = 404
    MAYBE_RENT_BORROW_FLAG    = 405
    RENT_BORROW_EXPIRATION    = 406
    USED_BUT_UNKNOWN_3        = 407
    USED_BUT_UNKNOWN_4        = 450
    USED_BUT_UNKNOWN_5        = 451
    USED_BUT_UNKNOWN_6        = 452
    USED_BUT_UNKNOWN_7        = 453
    CDE_TYPE                  = 501  # PDOC, EBOK, EBSP
    LAST_UPDATE_TYPE          = 502
    UPDATED_TITLE             = 503
    ASIN_COPY                 = 504
    LANGUAGE                  = 524  # <dc:language>
    ALIGNMENT                 = 525
    CREATOR_BUILD_NUMBER_COPY = 535
    IN_MEMORY                 = 547


class CreatorSoftware(OpenEnum):
    MOBIGEN            = 1
    MOBIPOCKET_CREATOR = 2
    KINDLEGEN_WINDOWS  = 200
    KINDLEGEN_LINUX    = 201
    KINDLEGEN_MAC      = 202
