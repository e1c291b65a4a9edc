# src/text2gds/constants.py

"""
GDSII constants: record tags, fixed preamble/postamble tables and limits.
Everything here is immutable ``bytes``; nothing is computed per run.
"""

# ================================================================
# SYSTEM CONSTANTS & LIMITS
# ================================================================

MAX_USHORT = 0xFFFF
RECORD_HEADER_SIZE = 4
COORD_SIZE = 4

INT32_MIN = -0x80000000
INT32_MAX = 0x7FFFFFFF

# Application-level cap (closing pair included), far below what the
# 16-bit length field of a single XY record would allow.
MAX_VERTEX_PAIRS = 256
MAX_COORDINATES = 2 * MAX_VERTEX_PAIRS

# ================================================================
# RECORD TYPES & DATA TYPES
# ================================================================

HEADER = 0x00
BGNLIB = 0x01
LIBNAME = 0x02
UNITS = 0x03
ENDLIB = 0x04
BGNSTR = 0x05
STRNAME = 0x06
ENDSTR = 0x07
BOUNDARY = 0x08
LAYER = 0x0D
DATATYPE = 0x0E
XY = 0x10
ENDEL = 0x11

NO_DATA = 0x00
INT2 = 0x02
INT4 = 0x03
REAL8 = 0x05
ASCII = 0x06

RECORD_NAMES = {
    HEADER: "HEADER",
    BGNLIB: "BGNLIB",
    LIBNAME: "LIBNAME",
    UNITS: "UNITS",
    ENDLIB: "ENDLIB",
    BGNSTR: "BGNSTR",
    STRNAME: "STRNAME",
    ENDSTR: "ENDSTR",
    BOUNDARY: "BOUNDARY",
    LAYER: "LAYER",
    DATATYPE: "DATATYPE",
    XY: "XY",
    ENDEL: "ENDEL",
}

# ================================================================
# LIBRARY PREAMBLE / POSTAMBLE
# ================================================================

# 102 bytes: HEADER, BGNLIB, LIBNAME, UNITS, BGNSTR, STRNAME.
# Modification/access dates are frozen values, so output is reproducible.
LIBRARY_PREAMBLE = b"".join((
    bytes((0, 6, HEADER, INT2, 0, 7)),
    bytes((0, 28, BGNLIB, INT2,
           230, 43, 0, 1, 0, 1, 0, 0, 0, 0, 0, 0,
           230, 43, 0, 1, 0, 1, 0, 0, 0, 0, 0, 0)),
    bytes((0, 10, LIBNAME, ASCII)) + b"noname",
    bytes((0, 20, UNITS, REAL8,
           0x3D, 0x68, 0xDB, 0x8B, 0xAC, 0x71, 0x0C, 0xB4,    # 1e-4 user units per db unit
           0x38, 0x6D, 0xF3, 0x7F, 0x67, 0x5E, 0xF6, 0xEC)),  # 1e-10 m per db unit
    bytes((0, 28, BGNSTR, INT2,
           0, 114, 0, 4, 0, 17, 0, 13, 0, 22, 0, 56,
           0, 114, 0, 4, 0, 17, 0, 13, 0, 22, 0, 56)),
    bytes((0, 10, STRNAME, ASCII)) + b"noname",
))

# ENDSTR + ENDLIB
LIBRARY_POSTAMBLE = bytes((0, 4, ENDSTR, NO_DATA, 0, 4, ENDLIB, NO_DATA))

# ================================================================
# ELEMENT MARKERS
# ================================================================

BOUNDARY_RECORD = bytes((0, 4, BOUNDARY, NO_DATA))
ENDEL_RECORD = bytes((0, 4, ENDEL, NO_DATA))

# Offset of the layer number inside BOUNDARY + LAYER + DATATYPE.
LAYER_BYTE_OFFSET = 9
BOUNDARY_OPEN_SIZE = 16
