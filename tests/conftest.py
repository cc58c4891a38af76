import pytest

from parley.config import RoutingConfig, define_routing


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def as_needed() -> RoutingConfig:
    return define_routing(locales=["en", "de"], default_locale="en", locale_prefix="as-needed")


@pytest.fixture
def localized() -> RoutingConfig:
    return define_routing(
        locales=["en", "de"],
        default_locale="en",
        locale_prefix="as-needed",
        pathnames={
            "/": "/",
            "/about": {"en": "/about", "de": "/ueber-uns"},
            "/news/[articleId]": {"en": "/news/[articleId]", "de": "/neuigkeiten/[articleId]"},
            "/docs/[...slug]": {"de": "/dokumente/[...slug]"},
        },
    )
