from core.contracts.models import CommitRequest

DEFAULT_BREAKING_TEXT = "Breaking change introduced"


def render_commit_message(request: CommitRequest) -> str:
    """
    Renders a Conventional Commits message: ``type(scope)!: description``,
    an optional body and, for breaking changes, a ``BREAKING CHANGE:`` footer.
    """
    header = request.type
    if request.scope:
        header += f"({request.scope})"
    if request.breaking_change:
        header += "!"
    parts = [f"{header}: {request.description}"]

    if request.body:
        parts.append(request.body)

    if request.breaking_change:
        breaking_text = request.breaking_change_description or request.body or DEFAULT_BREAKING_TEXT
        parts.append(f"BREAKING CHANGE: {breaking_text}")

    return "\n\n".join(parts)
