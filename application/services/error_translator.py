"""
Error translation: internal/processor error codes -> user-safe notices and
log lines.

Template lookup is a pure function returning a tagged result, so an
unknown code or a short argument list selects the generic template up
front instead of failing during formatting.
"""
from __future__ import annotations

from dataclasses import dataclass
from string import Formatter
from typing import Sequence

from application.dtos.payments import ProcessorError
from core.i18n import t
from shared.codes.payment_codes import (
    ERROR_USER_TEMPLATE,
    FIELD_ERROR_MESSAGES,
    LOG_ERRORS,
    MINIMUM_AMOUNT_MESSAGE,
    USER_ERRORS,
)


@dataclass(frozen=True)
class TemplateLookup:
    template: str
    found: bool


def _placeholder_count(template: str) -> int:
    return sum(1 for _, name, _, _ in Formatter().parse(template) if name is not None)


def lookup_user_template(code: str, args: Sequence[object] = ()) -> TemplateLookup:
    key = ERROR_USER_TEMPLATE.get(code)
    template = USER_ERRORS.get(key) if key else None
    if template is None or _placeholder_count(template) > len(args):
        return TemplateLookup(template=USER_ERRORS["generic_user_error"], found=False)
    return TemplateLookup(template=template, found=True)


def lookup_log_template(code: str, args: Sequence[object] = ()) -> TemplateLookup:
    template = LOG_ERRORS.get(code)
    if template is None or _placeholder_count(template) > len(args):
        return TemplateLookup(template=USER_ERRORS["generic_log_error"], found=False)
    return TemplateLookup(template=template, found=True)


class ErrorTranslator:
    """Maps error codes to notices; never raises."""

    def user_message(self, code: str, args: Sequence[object] = ()) -> str:
        lookup = lookup_user_template(code, args)
        text = t(lookup.template)
        if lookup.found:
            text = text.format(*args)
        return f"{text} (Error Code: {code})"

    def log_message(self, code: str, args: Sequence[object] = ()) -> str:
        lookup = lookup_log_template(code, args)
        if lookup.found:
            return lookup.template.format(*args)
        return lookup.template.format(code)

    def processor_error_message(self, error: ProcessorError) -> str:
        """Notice for one processor field error."""
        override = FIELD_ERROR_MESSAGES.get((error.code, error.attribute))
        if override:
            return t(override)
        if error.detail:
            return error.detail
        return t(USER_ERRORS["generic_user_error"])

    def source_error_message(self, error: ProcessorError) -> str:
        """Notice for one create-source error; minimum-amount errors get a fixed text."""
        if error.code == "parameter_below_minimum":
            return t(MINIMUM_AMOUNT_MESSAGE)
        return error.detail or t(USER_ERRORS["generic_user_error"])
