"""
Converter for REALbasic/Xojo binary project files ("RBBF") to an equivalent XML document.

Typical use::

    from rbbf_converter import convert_file

    result = convert_file('Project.rbp', 'Project.xml')

or, to keep the XML in memory::

    lines = []
    result = convert(data, lines)

See `rbbf_converter.converter` for the details and `rbbf_converter.options` for the available options.
"""

__version__ = '1.0.0'

from .converter import ConversionResult, convert, convert_file
from .errors import RBBFConverterError, FatalConversionError, BlockDecodeError
from .options import ConvertOptions, TrailerPolicy
