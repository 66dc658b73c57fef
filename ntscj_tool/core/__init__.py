"""ntscj_tool.core — Foundation layer.

Contains the gamma curves, gamut matrices, shared types, the pixel pipeline,
image codec, env config, and report builder.
Only pipeline and env reach into ntscj_tool.registry, to look up dither
strategies. Only stdlib, numpy, and PIL are allowed here.
"""
