"""Built-in CLI sub-commands for onecrm.

* :mod:`~onecrm.commands.auth` -- run OAuth2 flows and print tokens.
* :mod:`~onecrm.commands.api` -- call typed endpoints (``me``, ``files``).
* :mod:`~onecrm.commands.config` -- view and modify the settings file.

Shared helpers (base URL and flow resolution, error mapping) live in
:mod:`~onecrm.commands.common`.
"""
