import pytest

from govanity.models import AnswerRecord, ImportDirective, ResolvedHost


def test_import_directive_meta_content():
    directive = ImportDirective("example.org/foo", "git", "https://github.com/example/foo")
    assert directive.meta_content == "example.org/foo git https://github.com/example/foo"
    assert directive.to_dict() == {
        "prefix": "example.org/foo",
        "vcs": "git",
        "url": "https://github.com/example/foo",
    }


def test_resolved_host_requires_imports():
    with pytest.raises(ValueError):
        ResolvedHost(imports=(), expiry=10.0)


def test_resolved_host_freshness_is_strict():
    host = ResolvedHost(imports=(ImportDirective("a", "git", "u"),), expiry=10.0)
    assert host.is_fresh(9.999)
    assert not host.is_fresh(10.0)
    assert not host.is_fresh(11.0)


def test_answer_record_is_txt():
    assert AnswerRecord("TXT", ("x",)).is_txt
    assert not AnswerRecord("CNAME").is_txt
