"""Platform layer: subprocess execution and file-system helpers.

Import from the submodules directly (``shipit.platform.process``,
``shipit.platform.files``); ``shipit.core`` depends on this package.
"""
