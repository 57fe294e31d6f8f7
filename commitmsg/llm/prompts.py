"""Prompt text shared by all providers."""

SYSTEM_PROMPT = """You are an expert software engineer writing git commit messages.
Be precise: only describe changes actually shown in the diff."""

USER_PROMPT_TEMPLATE = """Write a git commit message for the following changes.

Rules:
- Start the first line with a verb in the present tense (e.g., "Add", "Fix", "Update", "Refactor").
- Keep the first line under 72 characters.
- Add a short description after a blank line if the change needs it.
- Focus on what changed and why.
- Output ONLY the commit message. No markdown fences. No commentary.
{style_section}{attempt_section}
CHANGES:
{changes}"""


def build_user_prompt(changes: str, style_instruction: str | None = None, attempt: int = 1) -> str:
    """Build the user prompt for a generation request.

    Args:
        changes: The diff text.
        style_instruction: Optional extra instructions from the user.
        attempt: Attempt index; later attempts ask for a different wording.

    Returns:
        The formatted user prompt.
    """
    style_section = ""
    if style_instruction:
        style_section = f"\nAdditional style instructions:\n{style_instruction.strip()}\n"

    attempt_section = ""
    if attempt > 1:
        attempt_section = (
            f"\nThis is attempt {attempt}. Write a different message than previous attempts.\n"
        )

    return USER_PROMPT_TEMPLATE.format(
        style_section=style_section,
        attempt_section=attempt_section,
        changes=changes,
    )
