from typing import Final

import pytest

from domesque import element


FOO_NAMESPACE: Final = "http://foobar.com/foo/bar"
SECURITY_NAMESPACE: Final = "http://security.com/2011/06/"
SOME_NAMESPACE: Final = "urn:some:namespace"


@pytest.fixture
def sample_document():
    return element(
        "foo:document",
        element(
            "foo:header",
            element(
                "security:Security",
                element("Credentials").set_attribute("type", "text").set_text("pw01"),
                namespace_uri=SECURITY_NAMESPACE,
            ),
            namespace_uri=FOO_NAMESPACE,
        ),
        element(
            "foo:body",
            element(
                "request",
                element("id").set_text("15"),
                element("id").set_text("333"),
                element("data")
                .append_cdata("random string <b>with tags</b>")
                .set_attribute("ver", "v1", SOME_NAMESPACE),
            ),
            namespace_uri=FOO_NAMESPACE,
        ),
        namespace_uri=FOO_NAMESPACE,
    )


@pytest.fixture
def namespaced_ids_sample():
    return (
        '<root xmlns:a="urn:a" xmlns:b="urn:b">'
        "<a:id>1</a:id>"
        "<other/>"
        "<b:id>2</b:id>"
        "</root>"
    )
