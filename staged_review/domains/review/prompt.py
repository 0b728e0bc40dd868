from typing import List

from staged_review.shared.types import ChatMessageDict


SYSTEM_INSTRUCTION = """You are a senior Go engineer who writes readable, maintainable and robust Go code.
Act as a code review assistant and perform a strict review of the given git diff, focusing on:

1. Security:
   - Is input validation sufficient?
   - Are there potential injection risks, out-of-bounds access, race conditions and similar issues?
   - Could sensitive information (keys, tokens, passwords) leak?

2. Error handling:
   - Are errors ignored or swallowed?
   - Are error messages clear and helpful for locating the problem?
   - Are error wrapping and logging used appropriately?

3. Performance and resource usage:
   - Are the algorithms and data structures appropriate?
   - Are there obviously redundant allocations or repeated computations?
   - Could I/O, networking or concurrency become a bottleneck?

Write the review in Markdown using this structure:

## Overall assessment
- A short assessment of the overall quality of this change.

## Main risks and issues
- List the main issues by severity, quoting the relevant code or line numbers from the diff where possible.

## Suggested improvements
- Concrete suggestions on security, error handling and performance.

## Strengths
- Point out the parts of this change worth keeping or learning from.

Reply with the review only; do not repeat the full diff."""

USER_INSTRUCTION = (
    "Please review the following git diff (read only, do not produce a patch that "
    "can be applied directly) and return a Markdown review report as described above:"
)

EMPTY_DIFF_PROMPT = "The staged diff is empty; there is nothing to review."


def _format_user_message(diff: str) -> str:
    return f"{USER_INSTRUCTION}\n\n```diff\n{diff}\n```"


def build_review_messages(diff: str) -> List[ChatMessageDict]:
    """Builds the system + user message pair for reviewing one file's diff."""
    diff = diff.strip()
    return [
        {"role": "system", "content": SYSTEM_INSTRUCTION},
        {"role": "user", "content": _format_user_message(diff)},
    ]


def build_review_prompt(diff: str) -> str:
    """Builds the same review request as a single prompt string."""
    diff = diff.strip()
    if not diff:
        return EMPTY_DIFF_PROMPT
    return f"{SYSTEM_INSTRUCTION}\n\n{_format_user_message(diff)}"
