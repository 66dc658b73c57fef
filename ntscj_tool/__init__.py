"""ntscj-tool — recolour images between the NTSC-J and sRGB gamuts."""

__version__ = '0.1.0'
