"""onecrm -- Python client for the 1CRM REST API.

The package is a thin, typed layer over HTTP:

* :class:`~onecrm.client.Client` sends one request per call and returns a
  single-use :class:`~onecrm.client.Response`, raising
  :class:`~onecrm.exceptions.APIError` for non-2xx statuses.
* :mod:`onecrm.auth` holds the auth strategies (basic, bearer token,
  API key) and :class:`~onecrm.auth.AuthFlow`, which runs the OAuth2
  grants.

Typical workflow::

    from onecrm.auth import AuthFlow
    from onecrm.client import Client

    flow = AuthFlow.from_env("https://crm.example.com/api.php")
    token = flow.init_client_credentials()
    with Client(flow.url, auth=token) as client:
        print(client.get("me").json())

Modules:
    app: Typer application and the ``onecrm`` console script.
    config: XDG-aware settings file and environment resolution.
    context: Cancellation contexts with deadlines.
    exceptions: Exception hierarchy with exit-code mapping.
    models: Pydantic models for configuration and payloads.
    output: stdout/stderr formatting with Rich support.
"""

__version__ = "0.3.0"
