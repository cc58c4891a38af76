"""Domain matcher — maps a request host to a configured domain."""

from collections.abc import Mapping

from parley.config import DomainConfig, RoutingConfig


def host_from_headers(headers: Mapping[str, str]) -> str | None:
    """Return the request host, preferring ``X-Forwarded-Host``.

    Proxies may send a comma-separated list; the first entry is the
    host the client asked for.
    """
    raw = headers.get("x-forwarded-host") or headers.get("host")
    if not raw:
        return None
    return raw.split(",", 1)[0].strip() or None


def _split_port(host: str) -> tuple[str, str | None]:
    if host.startswith("["):
        # IPv6 literal: [::1]:8000
        end = host.find("]")
        rest = host[end + 1 :]
        return host[: end + 1], rest[1:] if rest.startswith(":") else None
    name, sep, port = host.rpartition(":")
    if sep and port.isdigit():
        return name, port
    return host, None


class DomainMatcher:
    """Resolve a host string against ``RoutingConfig.domains``.

    Matching is case-insensitive and ignores the request port unless the
    configured host names one explicitly::

        matcher = DomainMatcher(config)
        matcher.match("US.example.com:8443")  # -> DomainConfig(host="us.example.com", ...)
    """

    __slots__ = ("_domains",)

    def __init__(self, config: RoutingConfig) -> None:
        self._domains = config.domains or ()

    @property
    def enabled(self) -> bool:
        return bool(self._domains)

    def match(self, host: str | None) -> DomainConfig | None:
        """Return the first domain whose host equals *host*, else ``None``."""
        if not host or not self._domains:
            return None
        name, port = _split_port(host.strip().lower())
        for domain in self._domains:
            wanted_name, wanted_port = _split_port(domain.host.lower())
            if wanted_name != name:
                continue
            if wanted_port is None or wanted_port == port:
                return domain
        return None

    def domains_for_locale(self, locale: str) -> list[DomainConfig]:
        """Domains that permit *locale*, in declaration order."""
        return [domain for domain in self._domains if locale in domain.locales]
