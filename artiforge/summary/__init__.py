"""Build summary output.

Modules
-------
renderer
    ``BuildInfoRenderer`` turns a ``BuildInfo`` and the deployed items into
    Rich renderables for terminal display.
"""
