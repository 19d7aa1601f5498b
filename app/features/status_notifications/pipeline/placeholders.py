"""
Placeholder substitution for status emails, modals and button fields.

Templates carry ``{{TOKEN}}`` markers. Each recognised token maps to one
value pulled from the ProjectContext; missing values become an empty string.
Unrecognised tokens stay in the output untouched and are reported with a
warning so broken templates show up in the logs.

Substitution is a single pass: values are never re-scanned, so output
without markers is returned unchanged on a second run. Values are inserted
as-is (no HTML escaping); several templates intentionally carry inline HTML.
"""

import re
from collections.abc import Callable

from app.infrastructure.observability.logging import get_logger

from ..domain.models import ProjectContext, Role

logger = get_logger(__name__)

# {{NAME}} or {{NAME?query}}; whitespace inside the braces is tolerated
TOKEN_PATTERN = re.compile(r"\{\{\s*([A-Za-z0-9_]+)(\?[^}]*)?\s*\}\}")

Resolver = Callable[[ProjectContext, Role], object]


def _hex_color(value: str | None) -> str:
    if not value:
        return ""
    return value if value.startswith("#") else f"#{value}"


def _staff_name(ctx: ProjectContext, _role: Role) -> str:
    staff = ctx.assigned_staff_profile
    return staff.full_name if staff else ""


def _project_link(ctx: ProjectContext, _role: Role) -> str:
    return f"{ctx.base_url.rstrip('/')}/project/{ctx.project.id}"


RESOLVERS: dict[str, Resolver] = {
    "PROJECT_ADDRESS": lambda ctx, _: ctx.project.address,
    "ADDRESS": lambda ctx, _: ctx.project.address,
    "PROJECT_TITLE": lambda ctx, _: ctx.project.title,
    "PROJECT_ID": lambda ctx, _: ctx.project.id,
    "PROJECT_LINK": _project_link,
    "CLIENT_NAME": lambda ctx, _: ctx.author_profile.company_name,
    "CLIENT_FULL_NAME": lambda ctx, _: ctx.author_profile.full_name,
    "CLIENT_FIRST_NAME": lambda ctx, _: ctx.author_profile.first_name,
    "CLIENT_LAST_NAME": lambda ctx, _: ctx.author_profile.last_name,
    "CLIENT_EMAIL": lambda ctx, _: ctx.author_profile.email,
    "STATUS_NAME": lambda ctx, role: ctx.status_entry.status_name_for(role),
    "EST_TIME": lambda ctx, _: ctx.status_entry.est_time,
    "STAFF_NAME": _staff_name,
    "STAFF_EMAIL": lambda ctx, _: (
        ctx.assigned_staff_profile.email if ctx.assigned_staff_profile else None
    ),
    "COMPANY_NAME": lambda ctx, _: ctx.company.name,
    "COMPANY_ADDRESS": lambda ctx, _: ctx.company.address,
    "COMPANY_PHONE": lambda ctx, _: ctx.company.phone,
    "COMPANY_LOGO_URL": lambda ctx, _: ctx.company.logo_url,
    "PRIMARY_COLOR": lambda ctx, _: _hex_color(ctx.company.primary_color),
    "BASE_URL": lambda ctx, _: ctx.base_url.rstrip("/"),
}

# Tokens whose query suffix ({{TOKEN?a=b}}) is appended to the resolved value
_QUERY_TOKENS = {"PROJECT_LINK"}


def find_tokens(template: str | None) -> list[str]:
    """Token names in order of appearance, duplicates kept."""
    if not template:
        return []
    return [match.group(1) for match in TOKEN_PATTERN.finditer(template)]


def _unrecognized_label(name: str, query: str | None) -> str | None:
    """Label for a token left untouched, or None when it resolves."""
    if name not in RESOLVERS:
        return name
    if query and name not in _QUERY_TOKENS:
        return f"{name}{query}"
    return None


def unrecognized_tokens(template: str | None) -> list[str]:
    """Tokens substitute() leaves verbatim: unknown names and unsupported query suffixes."""
    seen: list[str] = []
    if not template:
        return seen
    for match in TOKEN_PATTERN.finditer(template):
        label = _unrecognized_label(match.group(1), match.group(2))
        if label and label not in seen:
            seen.append(label)
    return seen


def resolve_value(name: str, context: ProjectContext, role: Role = Role.CLIENT) -> str:
    """Resolve one token to a string; None and missing sources become ''."""
    value = RESOLVERS[name](context, role)
    return "" if value is None else str(value)


def placeholder_values(context: ProjectContext, role: Role = Role.CLIENT) -> dict[str, str]:
    """Every known token with its resolved value, for previews and debugging."""
    return {name: resolve_value(name, context, role) for name in RESOLVERS}


def substitute(template: str | None, context: ProjectContext, role: Role = Role.CLIENT) -> str:
    """
    Replace every recognised {{TOKEN}} in template.

    Args:
        template: Template text; None is treated as ''
        context: Aggregated project context
        role: Audience whose status name STATUS_NAME resolves to

    Returns:
        Substituted text
    """
    if not template:
        return ""

    unknown: list[str] = []

    def _replace(match: re.Match) -> str:
        name, query = match.group(1), match.group(2)
        label = _unrecognized_label(name, query)
        if label:
            if label not in unknown:
                unknown.append(label)
            return match.group(0)

        value = resolve_value(name, context, role)
        if query:
            value += query
        return value

    result = TOKEN_PATTERN.sub(_replace, template)

    if unknown:
        logger.warning(
            "substitution_unrecognized_tokens",
            tokens=unknown,
            project_id=context.project.id,
            status_code=context.status_entry.status_code,
        )

    return result
