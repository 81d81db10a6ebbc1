import pytest

from govanity.models import AnswerRecord, ImportDirective
from govanity.parsers import extract_imports, parse_import


def test_parse_import():
    directive = parse_import("go-import example.org/foo git https://github.com/example/foo")
    assert directive == ImportDirective(
        prefix="example.org/foo", vcs="git", url="https://github.com/example/foo"
    )


def test_parse_import_collapses_whitespace_runs():
    directive = parse_import("go-import   example.org/foo\tgit  https://github.com/example/foo  ")
    assert directive is not None
    assert directive.prefix == "example.org/foo"
    assert directive.vcs == "git"
    assert directive.url == "https://github.com/example/foo"


@pytest.mark.parametrize(
    "record",
    [
        "go-import a b",
        "go-import a b c d",
        "go-import ",
        "go-import",
        "not-go-import a b c",
        "Go-import a b c",
        "go-importa b c",
        " go-import a b c",
        "go-import\ta b c",
        "",
    ],
)
def test_parse_import_rejects_malformed_records(record):
    assert parse_import(record) is None


def test_extract_imports_keeps_answer_and_string_order():
    answers = [
        AnswerRecord("TXT", ("go-import a git urlA", "go-import c svn urlC")),
        AnswerRecord("TXT", ("go-import b hg urlB",)),
    ]
    assert extract_imports(answers) == [
        ImportDirective("a", "git", "urlA"),
        ImportDirective("c", "svn", "urlC"),
        ImportDirective("b", "hg", "urlB"),
    ]


def test_extract_imports_ignores_other_record_types_and_junk():
    answers = [
        AnswerRecord("CNAME"),
        AnswerRecord("TXT", ("v=spf1 -all", "go-import a b")),
        AnswerRecord("A"),
        AnswerRecord("TXT", ("go-import a git urlA",)),
    ]
    assert extract_imports(answers) == [ImportDirective("a", "git", "urlA")]


def test_extract_imports_empty():
    assert extract_imports([]) == []
