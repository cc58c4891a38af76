"""Parley — locale-aware routing for ASGI applications.

Prefixes, localized pathnames, domains and locale negotiation driven by
one immutable routing config.

Basic usage::

    from parley import LocaleRoutingApp, define_routing

    routing = define_routing(
        locales=["en", "de"],
        default_locale="en",
        locale_prefix="as-needed",
        pathnames={"/about": {"de": "/ueber-uns"}},
    )
    app = LocaleRoutingApp(inner_app, routing)

Building links::

    from parley import Navigation

    nav = Navigation(routing)
    nav.build_href("/about", "de")  # -> "/de/ueber-uns"
"""

__version__ = "0.1.0"
__all__ = [
    "ConfigurationError",
    "DomainConfig",
    "Href",
    "InvalidHrefError",
    "LocaleContext",
    "LocaleCookie",
    "LocaleMiddleware",
    "LocaleNegotiator",
    "LocaleRoutingApp",
    "MissingParameterError",
    "Navigation",
    "ParleyError",
    "PrefixMode",
    "RoutingConfig",
    "define_routing",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import parley`` fast while providing a clean top-level API.
    """
    if name in ("DomainConfig", "LocaleCookie", "PrefixMode", "RoutingConfig", "define_routing"):
        from parley import config as _config

        return getattr(_config, name)

    if name == "LocaleNegotiator":
        from parley.negotiation import LocaleNegotiator

        return LocaleNegotiator

    if name in ("Href", "Navigation"):
        from parley import navigation as _nav

        return getattr(_nav, name)

    if name == "LocaleContext":
        from parley.context import LocaleContext

        return LocaleContext

    if name == "LocaleMiddleware":
        from parley.middleware.locale import LocaleMiddleware

        return LocaleMiddleware

    if name == "LocaleRoutingApp":
        from parley.asgi import LocaleRoutingApp

        return LocaleRoutingApp

    if name in ("ParleyError", "ConfigurationError", "InvalidHrefError", "MissingParameterError"):
        from parley import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
