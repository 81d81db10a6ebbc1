"""Parsing of ``go-import`` TXT records."""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from .models import AnswerRecord, ImportDirective

logger = logging.getLogger(__name__)

GO_IMPORT_PREFIX = "go-import "


def parse_import(record: str) -> Optional[ImportDirective]:
    """Parse one TXT string of the form ``go-import <prefix> <vcs> <url>``.

    Returns ``None`` for anything else: a different prefix (the match is
    case-sensitive), or a remainder that does not split into exactly three
    whitespace-separated fields.
    """
    if not record.startswith(GO_IMPORT_PREFIX):
        return None

    fields = record[len(GO_IMPORT_PREFIX) :].split()
    if len(fields) != 3:
        return None

    prefix, vcs, url = fields
    return ImportDirective(prefix=prefix, vcs=vcs, url=url)


def extract_imports(answers: Iterable[AnswerRecord]) -> List[ImportDirective]:
    """Collect directives from every TXT answer, keeping answer and string order."""

    imports: List[ImportDirective] = []
    for answer in answers:
        if not answer.is_txt:
            continue
        for text in answer.strings:
            directive = parse_import(text)
            if directive is None:
                logger.debug("Skipping TXT record that is not a go-import directive: %r", text)
                continue
            imports.append(directive)
    return imports
