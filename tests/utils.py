from domesque import XmlNode


def assert_equivalence(*nodes: XmlNode):
    # reflexivity, symmetry, transitivity and consistent hashing
    for a in nodes:
        assert a == a
        for b in nodes:
            assert a == b
            assert b == a
            assert hash(a) == hash(b)


def texts(nodes) -> list[str]:
    return [x.text for x in nodes]
