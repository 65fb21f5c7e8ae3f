"""Built-in CLI commands for apiops.

* :mod:`~apiops.commands.extract` -- export a live service into an
  artifact tree.
* :mod:`~apiops.commands.check` -- decode every API information file of
  an existing artifact tree.

Each module exports a plain callback function registered directly on the
root app.
"""
